from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models

from .enums import LoanStatus


class Loan(models.Model):
    """Staff salary advance. PENDING -> APPROVED | DENIED, APPROVED -> GIVEN."""
    staff = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.PROTECT, related_name="loans")
    amount = models.DecimalField(max_digits=12, decimal_places=2, validators=[MinValueValidator(0)])
    reason = models.TextField(blank=True)
    status = models.CharField(max_length=10, choices=LoanStatus.choices, default=LoanStatus.PENDING)

    approved_amount = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    review_notes = models.TextField(blank=True)
    reviewed_by = models.ForeignKey(settings.AUTH_USER_MODEL, null=True, blank=True, on_delete=models.SET_NULL, related_name="+")
    reviewed_at = models.DateTimeField(null=True, blank=True)
    disbursed_by = models.ForeignKey(settings.AUTH_USER_MODEL, null=True, blank=True, on_delete=models.SET_NULL, related_name="+")
    disbursed_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        indexes = [
            models.Index(fields=["status", "created_at"], name="loan_status_created_idx"),
            models.Index(fields=["staff", "created_at"], name="loan_staff_created_idx"),
        ]
        ordering = ["-created_at", "-id"]

    def __str__(self):
        return f"Loan#{self.id} {self.staff_id} {self.amount} ({self.status})"
