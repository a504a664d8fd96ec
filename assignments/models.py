from django.conf import settings
from django.db import models

from .enums import AssignmentKind, AssignmentStatus


class Assignment(models.Model):
    """
    Links a visit to the staff member responsible for one piece of care:
    the consulting doctor, or a nurse performing a billed nurse service.
    """
    visit = models.ForeignKey("visits.Visit", on_delete=models.PROTECT, related_name="assignments")
    kind = models.CharField(max_length=16, choices=AssignmentKind.choices)
    staff = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.PROTECT, related_name="assignments")
    service = models.ForeignKey("billing.Service", on_delete=models.PROTECT, related_name="assignments")
    billing = models.ForeignKey("billing.Billing", null=True, blank=True, on_delete=models.PROTECT, related_name="assignments")
    billing_line = models.ForeignKey("billing.BillingLine", null=True, blank=True, on_delete=models.SET_NULL, related_name="assignments")
    status = models.CharField(max_length=16, choices=AssignmentStatus.choices, default=AssignmentStatus.PENDING_PAYMENT)

    notes = models.TextField(blank=True)
    assigned_by = models.ForeignKey(settings.AUTH_USER_MODEL, null=True, on_delete=models.SET_NULL, related_name="assignments_made")
    started_at = models.DateTimeField(null=True, blank=True)
    completed_at = models.DateTimeField(null=True, blank=True)
    completed_by = models.ForeignKey(settings.AUTH_USER_MODEL, null=True, blank=True, on_delete=models.SET_NULL, related_name="+")

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        indexes = [
            models.Index(fields=["staff", "status"], name="assignment_staff_status_idx"),
            models.Index(fields=["visit", "kind"], name="assignment_visit_kind_idx"),
        ]
        ordering = ["-created_at", "-id"]

    def __str__(self):
        return f"{self.kind} {self.staff_id} -> visit {self.visit_id} ({self.status})"
