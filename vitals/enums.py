from django.db import models

class SeverityFlag(models.TextChoices):
    GREEN  = "GREEN",  "Green"   # normal
    YELLOW = "YELLOW", "Yellow"  # borderline / attention
    RED    = "RED",    "Red"     # abnormal / critical

class VitalKind(models.TextChoices):
    TRIAGE     = "TRIAGE", "Triage"          # first set, moves the visit out of triage
    CONTINUOUS = "CONTINUOUS", "Monitoring"  # repeat measurements at any time
