from django.db import models

class ServiceCategory(models.TextChoices):
    CONSULTATION = "CONSULTATION","Consultation"
    LAB          = "LAB","Laboratory"
    RADIOLOGY    = "RADIOLOGY","Radiology"
    DENTAL       = "DENTAL","Dental"
    NURSE        = "NURSE","Nurse Service"
    CARD         = "CARD","Patient Card"
    OTHER        = "OTHER","Other"

class BillingKind(models.TextChoices):
    CONSULTATION  = "CONSULTATION","Consultation"
    LAB           = "LAB","Laboratory"
    RADIOLOGY     = "RADIOLOGY","Radiology"
    DENTAL        = "DENTAL","Dental"
    NURSE_SERVICE = "NURSE_SERVICE","Nurse Service"
    CARD          = "CARD","Patient Card"
    OTHER         = "OTHER","Other"

class BillingStatus(models.TextChoices):
    PENDING           = "PENDING","Pending"
    PAID              = "PAID","Paid"
    PENDING_INSURANCE = "PENDING_INSURANCE","Pending Insurance"
    EMERGENCY_PENDING = "EMERGENCY_PENDING","Emergency (Pay Later)"
    CANCELLED         = "CANCELLED","Cancelled"

    @classmethod
    def unsettled(cls):
        return (cls.PENDING, cls.EMERGENCY_PENDING)

    @classmethod
    def settled(cls):
        return (cls.PAID, cls.PENDING_INSURANCE)

class PaymentMethod(models.TextChoices):
    CASH      = "CASH","Cash"
    BANK      = "BANK","Bank Transfer"
    INSURANCE = "INSURANCE","Insurance"
    CHARITY   = "CHARITY","Charity"
    ACCOUNT   = "ACCOUNT","Patient Account"
