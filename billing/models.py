from decimal import Decimal
from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models
from django.db.models import Sum

from .enums import BillingKind, BillingStatus, PaymentMethod, ServiceCategory

class Service(models.Model):
    """
    Billable service catalog (consultation, lab test, imaging study, dental
    procedure, nurse service, card fee). Workflows look services up by 'code'.
    """
    code = models.CharField(max_length=64, unique=True)   # e.g. CONSULT-GEN, LAB-CBC, RAD-CXR, NRS-INJ
    name = models.CharField(max_length=255)
    category = models.CharField(max_length=16, choices=ServiceCategory.choices, default=ServiceCategory.OTHER)
    price = models.DecimalField(max_digits=12, decimal_places=2, validators=[MinValueValidator(0)], default=0)
    is_active = models.BooleanField(default=True)

    class Meta:
        indexes = [models.Index(fields=["category", "is_active"], name="service_cat_active_idx")]
        ordering = ["name"]

    def __str__(self): return f"{self.code} - {self.name}"

class Billing(models.Model):
    """
    One invoice for a visit step (consultation, an order batch, a nurse
    service, a card fee). total_amount always equals the sum of its lines.
    """
    patient = models.ForeignKey("patients.Patient", on_delete=models.PROTECT, related_name="billings")
    visit   = models.ForeignKey("visits.Visit", null=True, blank=True, on_delete=models.PROTECT, related_name="billings")
    kind    = models.CharField(max_length=16, choices=BillingKind.choices)
    status  = models.CharField(max_length=20, choices=BillingStatus.choices, default=BillingStatus.PENDING)
    total_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    notes = models.CharField(max_length=255, blank=True)

    created_by = models.ForeignKey(settings.AUTH_USER_MODEL, null=True, on_delete=models.SET_NULL, related_name="billings_created")
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)
    paid_at    = models.DateTimeField(null=True, blank=True)
    insurance_settled_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        indexes = [
            models.Index(fields=["status", "created_at"], name="billing_status_created_idx"),
            models.Index(fields=["visit", "kind"], name="billing_visit_kind_idx"),
            models.Index(fields=["patient", "created_at"], name="billing_patient_created_idx"),
        ]
        ordering = ["-created_at","-id"]

    def lines_total(self) -> Decimal:
        return self.lines.aggregate(t=Sum("total_price"))["t"] or Decimal("0.00")

    @property
    def is_settled(self) -> bool:
        return self.status in BillingStatus.settled()

    def __str__(self): return f"Billing#{self.id} {self.kind} {self.total_amount} ({self.status})"

class BillingLine(models.Model):
    billing = models.ForeignKey(Billing, on_delete=models.CASCADE, related_name="lines")
    service = models.ForeignKey(Service, on_delete=models.PROTECT, related_name="billing_lines")
    description = models.CharField(max_length=255, blank=True)
    quantity = models.PositiveIntegerField(default=1, validators=[MinValueValidator(1)])
    unit_price = models.DecimalField(max_digits=12, decimal_places=2, validators=[MinValueValidator(0)])
    total_price = models.DecimalField(max_digits=12, decimal_places=2, validators=[MinValueValidator(0)])  # unit_price * quantity
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["id"]

    def __str__(self): return f"Line#{self.id} {self.service.code} x{self.quantity}"

class Payment(models.Model):
    """
    Money received against one billing. A billing is settled by exactly one payment.
    """
    billing = models.ForeignKey(Billing, on_delete=models.PROTECT, related_name="payments")
    patient = models.ForeignKey("patients.Patient", on_delete=models.PROTECT, related_name="payments")
    amount  = models.DecimalField(max_digits=12, decimal_places=2, validators=[MinValueValidator(0)])
    method  = models.CharField(max_length=16, choices=PaymentMethod.choices, default=PaymentMethod.CASH)
    reference = models.CharField(max_length=64, blank=True)  # receipt, bank ref, insurance claim no.
    bank_name = models.CharField(max_length=120, blank=True)
    insurer   = models.CharField(max_length=160, blank=True)
    notes     = models.CharField(max_length=255, blank=True)
    received_by = models.ForeignKey(settings.AUTH_USER_MODEL, null=True, on_delete=models.SET_NULL, related_name="payments_received")
    received_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        constraints = [models.UniqueConstraint(fields=["billing"], name="payment_one_per_billing")]
        ordering = ["-received_at","-id"]

    def __str__(self): return f"Payment#{self.id} {self.method} {self.amount} -> Billing#{self.billing_id}"
