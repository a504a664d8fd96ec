from django.conf import settings
from django.db import models

from .enums import VisitStatus


class Visit(models.Model):
    """
    One patient episode, from arrival to completion or cancellation.

    ``status`` is the single source of truth for where the visit is; it is
    only ever written by ``visits.services.lifecycle.transition`` and every
    write leaves a VisitTransition row behind.
    """
    visit_uid = models.CharField(max_length=32, unique=True, editable=False)  # VISIT-YYYYMMDD-NNNN
    patient = models.ForeignKey("patients.Patient", on_delete=models.PROTECT, related_name="visits")
    status = models.CharField(max_length=32, choices=VisitStatus.choices, default=VisitStatus.WAITING_FOR_TRIAGE)
    is_emergency = models.BooleanField(default=False)

    notes = models.TextField(blank=True)
    diagnosis = models.TextField(blank=True)
    completion_notes = models.TextField(blank=True)

    created_by = models.ForeignKey(settings.AUTH_USER_MODEL, null=True, on_delete=models.SET_NULL, related_name="visits_created")
    completed_at = models.DateTimeField(null=True, blank=True)
    completed_by = models.ForeignKey(settings.AUTH_USER_MODEL, null=True, blank=True, on_delete=models.SET_NULL, related_name="visits_completed")
    cancelled_at = models.DateTimeField(null=True, blank=True)
    cancel_reason = models.CharField(max_length=255, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        indexes = [
            models.Index(fields=["status", "created_at"], name="visit_status_created_idx"),
            models.Index(fields=["patient", "status"], name="visit_patient_status_idx"),
        ]
        ordering = ["-created_at", "-id"]

    @property
    def is_terminal(self) -> bool:
        return self.status in VisitStatus.terminal()

    def __str__(self):
        return f"{self.visit_uid} ({self.status})"


class VisitTransition(models.Model):
    visit = models.ForeignKey(Visit, on_delete=models.CASCADE, related_name="transitions")
    from_status = models.CharField(max_length=32, choices=VisitStatus.choices, blank=True)
    to_status = models.CharField(max_length=32, choices=VisitStatus.choices)
    actor = models.ForeignKey(settings.AUTH_USER_MODEL, null=True, blank=True, on_delete=models.SET_NULL, related_name="+")
    reason = models.CharField(max_length=255, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["created_at", "id"]

    def __str__(self):
        return f"{self.visit_id}: {self.from_status or '-'} -> {self.to_status}"
