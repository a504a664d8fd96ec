from django.db import models

class PatientType(models.TextChoices):
    REGULAR   = "REGULAR","Regular"
    EMERGENCY = "EMERGENCY","Emergency"

class PatientStatus(models.TextChoices):
    ACTIVE   = "ACTIVE","Active"
    INACTIVE = "INACTIVE","Inactive"

class CardStatus(models.TextChoices):
    INACTIVE = "INACTIVE","Inactive"
    ACTIVE   = "ACTIVE","Active"
    EXPIRED  = "EXPIRED","Expired"

class Gender(models.TextChoices):
    MALE   = "MALE","Male"
    FEMALE = "FEMALE","Female"
    OTHER  = "OTHER","Other"
