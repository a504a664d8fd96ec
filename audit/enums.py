from django.db import models

class Verb(models.TextChoices):
    CREATE = "CREATE", "Create"
    UPDATE = "UPDATE", "Update"
    LOGIN  = "LOGIN",  "Login"
    ACTION = "ACTION", "Workflow Action"
