from decimal import Decimal

from django.conf import settings
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models

from . import flags
from .enums import SeverityFlag, VitalKind


def _range(lo, hi):
    return [MinValueValidator(lo), MaxValueValidator(hi)]


class VitalSign(models.Model):
    """
    One set of measurements. TRIAGE sets belong to a visit and are taken
    once; CONTINUOUS sets are monitoring readings at any time.
    """
    patient = models.ForeignKey("patients.Patient", on_delete=models.PROTECT, related_name="vitals")
    visit = models.ForeignKey("visits.Visit", null=True, blank=True, on_delete=models.PROTECT, related_name="vitals")
    kind = models.CharField(max_length=12, choices=VitalKind.choices, default=VitalKind.CONTINUOUS)
    recorded_by = models.ForeignKey(settings.AUTH_USER_MODEL, null=True, on_delete=models.SET_NULL,
                                    related_name="vitals_recorded")
    measured_at = models.DateTimeField()

    systolic = models.PositiveIntegerField(null=True, blank=True, validators=_range(40, 300))
    diastolic = models.PositiveIntegerField(null=True, blank=True, validators=_range(20, 200))
    heart_rate = models.PositiveIntegerField(null=True, blank=True, validators=_range(20, 250))
    temp_c = models.DecimalField(max_digits=4, decimal_places=1, null=True, blank=True)
    resp_rate = models.PositiveIntegerField(null=True, blank=True, validators=_range(5, 80))
    spo2 = models.PositiveIntegerField(null=True, blank=True, validators=_range(50, 100))
    pain_score = models.PositiveSmallIntegerField(null=True, blank=True, validators=[MaxValueValidator(10)])
    blood_sugar = models.DecimalField(max_digits=5, decimal_places=1, null=True, blank=True)  # mg/dL
    weight_kg = models.DecimalField(max_digits=6, decimal_places=2, null=True, blank=True,
                                    validators=[MinValueValidator(Decimal("0.0"))])
    height_cm = models.DecimalField(max_digits=6, decimal_places=2, null=True, blank=True,
                                    validators=[MinValueValidator(Decimal("0.0"))])

    # derived on save
    bmi = models.DecimalField(max_digits=5, decimal_places=2, null=True, blank=True)
    bp_flag = models.CharField(max_length=8, choices=SeverityFlag.choices, null=True, blank=True)
    temp_flag = models.CharField(max_length=8, choices=SeverityFlag.choices, null=True, blank=True)
    spo2_flag = models.CharField(max_length=8, choices=SeverityFlag.choices, null=True, blank=True)
    overall = models.CharField(max_length=8, choices=SeverityFlag.choices, default=SeverityFlag.GREEN)

    chief_complaint = models.CharField(max_length=255, blank=True)
    notes = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        indexes = [
            models.Index(fields=["patient", "measured_at"], name="vitals_patient_measured_idx"),
            models.Index(fields=["visit", "kind"], name="vitals_visit_kind_idx"),
        ]
        ordering = ["-measured_at", "-id"]

    def save(self, *args, **kwargs):
        if self.visit_id and not self.patient_id:
            self.patient_id = self.visit.patient_id
        self.bmi = flags.bmi(self.weight_kg, self.height_cm)
        for field, value in flags.classify(systolic=self.systolic, diastolic=self.diastolic,
                                           temp_c=self.temp_c, spo2=self.spo2).items():
            setattr(self, field, value)
        super().save(*args, **kwargs)

    def __str__(self):
        return f"Vitals({self.patient_id}) @ {self.measured_at:%Y-%m-%d %H:%M}"
