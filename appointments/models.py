from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models

from .enums import ApptStatus, ApptType


class Appointment(models.Model):
    """
    A booked slot with a clinician. Sending it to the doctor opens the
    patient's visit and links it here.
    """
    patient = models.ForeignKey("patients.Patient", on_delete=models.CASCADE, related_name="appointments")
    doctor = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.PROTECT, related_name="appointments")
    created_by = models.ForeignKey(settings.AUTH_USER_MODEL, null=True, blank=True, on_delete=models.SET_NULL, related_name="appointments_created")

    appt_type = models.CharField(max_length=16, choices=ApptType.choices, default=ApptType.CONSULTATION)
    status = models.CharField(max_length=16, choices=ApptStatus.choices, default=ApptStatus.SCHEDULED)

    start_at = models.DateTimeField()
    duration_minutes = models.PositiveIntegerField(default=25, validators=[MinValueValidator(5)])
    reason = models.CharField(max_length=255, blank=True)
    notes = models.TextField(blank=True)

    visit = models.OneToOneField("visits.Visit", null=True, blank=True, on_delete=models.SET_NULL, related_name="appointment")

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        indexes = [
            models.Index(fields=["doctor", "start_at"], name="appt_doctor_start_idx"),
            models.Index(fields=["patient", "start_at"], name="appt_patient_start_idx"),
            models.Index(fields=["status"], name="appt_status_idx"),
        ]
        ordering = ["start_at", "id"]

    def __str__(self):
        return f"Appt#{self.id} P:{self.patient_id} {self.start_at:%Y-%m-%d %H:%M} ({self.appt_type})"
