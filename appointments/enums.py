from django.db import models

class ApptType(models.TextChoices):
    CONSULTATION = "CONSULTATION", "Consultation"
    FOLLOW_UP    = "FOLLOW_UP", "Follow-up"

class ApptStatus(models.TextChoices):
    SCHEDULED   = "SCHEDULED","Scheduled"
    ARRIVED     = "ARRIVED","Arrived"
    IN_PROGRESS = "IN_PROGRESS","In progress"   # sent to the doctor, visit open
    COMPLETED   = "COMPLETED","Completed"
    CANCELLED   = "CANCELLED","Cancelled"
    NO_SHOW     = "NO_SHOW","No-show"

    @classmethod
    def terminal(cls):
        return (cls.COMPLETED, cls.CANCELLED, cls.NO_SHOW)

    @classmethod
    def sendable(cls):
        return (cls.SCHEDULED, cls.ARRIVED)
