from django.db import models

class LoanStatus(models.TextChoices):
    PENDING  = "PENDING","Pending"
    APPROVED = "APPROVED","Approved"
    DENIED   = "DENIED","Denied"
    GIVEN    = "GIVEN","Given"

class ReviewAction(models.TextChoices):
    APPROVE = "APPROVE","Approve"
    DENY    = "DENY","Deny"
