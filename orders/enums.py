from django.db import models

class OrderType(models.TextChoices):
    LAB       = "LAB","Laboratory"
    RADIOLOGY = "RADIOLOGY","Radiology"
    DENTAL    = "DENTAL","Dental"

class OrderStatus(models.TextChoices):
    UNPAID      = "UNPAID","Unpaid"
    PAID        = "PAID","Paid"
    QUEUED      = "QUEUED","Queued"          # emergency: worked before payment
    IN_PROGRESS = "IN_PROGRESS","In Progress"
    COMPLETED   = "COMPLETED","Completed"
    CANCELLED   = "CANCELLED","Cancelled"

    @classmethod
    def pending(cls):
        return (cls.UNPAID, cls.PAID, cls.QUEUED, cls.IN_PROGRESS)

    @classmethod
    def workable(cls):
        return (cls.PAID, cls.QUEUED, cls.IN_PROGRESS)

    @classmethod
    def cancellable(cls):
        return (cls.UNPAID, cls.PAID, cls.QUEUED)

class FieldType(models.TextChoices):
    NUMBER   = "number","Number"
    TEXT     = "text","Text"
    TEXTAREA = "textarea","Long text"
    SELECT   = "select","Select"
