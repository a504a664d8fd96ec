from django.db import models


class AssignmentKind(models.TextChoices):
    DOCTOR        = "DOCTOR", "Doctor"
    NURSE_SERVICE = "NURSE_SERVICE", "Nurse service"


class AssignmentStatus(models.TextChoices):
    PENDING_PAYMENT = "PENDING_PAYMENT", "Pending payment"
    READY           = "READY", "Ready"        # paid, or emergency (billing deferred)
    ACTIVE          = "ACTIVE", "Active"      # consultation running
    COMPLETED       = "COMPLETED", "Completed"
    CANCELLED       = "CANCELLED", "Cancelled"

    @classmethod
    def open(cls):
        return (cls.PENDING_PAYMENT, cls.READY, cls.ACTIVE)
