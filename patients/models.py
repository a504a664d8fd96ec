from django.conf import settings
from django.core.validators import RegexValidator
from django.db import models
from django.utils import timezone

from .enums import CardStatus, Gender, PatientStatus, PatientType

phone_validator = RegexValidator(
    regex=r"^\+?\d{7,15}$",
    message="Phone must be 7-15 digits, optionally starting with +.",
)

class IdentifierSequence(models.Model):
    """
    Named counter for human-readable ids (PAT-2025, PAT-2025-TEMP, VISIT-20250101).
    Always read and bumped under select_for_update.
    """
    key = models.CharField(max_length=64, unique=True)
    last_value = models.PositiveIntegerField(default=0)

    def __str__(self): return f"{self.key}={self.last_value}"

class Patient(models.Model):
    # PAT-<year>-<nn> or PAT-<year>-TEMP<nn> for unidentified emergency arrivals
    id = models.CharField(primary_key=True, max_length=32, editable=False)

    first_name = models.CharField(max_length=120)
    last_name  = models.CharField(max_length=120, blank=True)
    middle_name = models.CharField(max_length=120, blank=True)
    dob = models.DateField(null=True, blank=True)
    gender = models.CharField(max_length=8, choices=Gender.choices, blank=True)

    mobile = models.CharField(max_length=20, validators=[phone_validator], blank=True, db_index=True)
    email = models.EmailField(blank=True)
    address = models.TextField(blank=True)

    emergency_contact_name = models.CharField(max_length=120, blank=True)
    emergency_contact_phone = models.CharField(max_length=20, validators=[phone_validator], blank=True)

    patient_type = models.CharField(max_length=12, choices=PatientType.choices, default=PatientType.REGULAR)
    status = models.CharField(max_length=12, choices=PatientStatus.choices, default=PatientStatus.ACTIVE)

    # clinic card
    card_status = models.CharField(max_length=12, choices=CardStatus.choices, default=CardStatus.INACTIVE)
    card_activated_at = models.DateTimeField(null=True, blank=True)
    card_expires_at = models.DateTimeField(null=True, blank=True)

    registered_by = models.ForeignKey(settings.AUTH_USER_MODEL, null=True, blank=True, on_delete=models.SET_NULL, related_name="patients_registered")
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        indexes = [
            models.Index(fields=["last_name", "first_name"], name="patient_name_idx"),
            models.Index(fields=["created_at"], name="patient_created_idx"),
        ]
        ordering = ["-created_at"]

    @property
    def full_name(self) -> str:
        return " ".join(p for p in (self.first_name, self.middle_name, self.last_name) if p)

    @property
    def effective_card_status(self) -> str:
        if self.card_status == CardStatus.ACTIVE and self.card_expires_at and self.card_expires_at < timezone.now():
            return CardStatus.EXPIRED
        return self.card_status

    def __str__(self):
        return f"{self.id} {self.full_name}"
