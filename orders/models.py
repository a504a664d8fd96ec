from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models

from .enums import OrderStatus, OrderType
from .templates import template_problems


class ResultTemplate(models.Model):
    """
    Structured result form for one or more catalog services (e.g. a CBC
    panel). ``fields`` is a list of field definitions, see orders.templates.
    """
    code = models.CharField(max_length=40, unique=True)
    name = models.CharField(max_length=160)
    category = models.CharField(max_length=80, blank=True)   # e.g. Hematology, Chest
    order_type = models.CharField(max_length=12, choices=OrderType.choices)
    fields = models.JSONField(default=list)
    services = models.ManyToManyField("billing.Service", blank=True, related_name="result_templates")
    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]

    def clean(self):
        problems = template_problems(self.fields)
        if problems:
            raise ValidationError({"fields": problems})

    def __str__(self):
        return f"{self.code} - {self.name}"


class OrderBatch(models.Model):
    """One ordering action: several services of one type, billed together."""
    visit = models.ForeignKey("visits.Visit", on_delete=models.PROTECT, related_name="order_batches")
    patient = models.ForeignKey("patients.Patient", on_delete=models.PROTECT, related_name="order_batches")
    order_type = models.CharField(max_length=12, choices=OrderType.choices)
    instructions = models.TextField(blank=True)
    billing = models.ForeignKey("billing.Billing", null=True, blank=True, on_delete=models.PROTECT, related_name="order_batches")
    ordered_by = models.ForeignKey(settings.AUTH_USER_MODEL, null=True, on_delete=models.SET_NULL, related_name="order_batches")
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at", "-id"]

    def __str__(self):
        return f"OrderBatch#{self.id} {self.order_type} visit {self.visit_id}"


class Order(models.Model):
    batch = models.ForeignKey(OrderBatch, on_delete=models.PROTECT, related_name="orders")
    visit = models.ForeignKey("visits.Visit", on_delete=models.PROTECT, related_name="orders")
    patient = models.ForeignKey("patients.Patient", on_delete=models.PROTECT, related_name="orders")
    order_type = models.CharField(max_length=12, choices=OrderType.choices)
    service = models.ForeignKey("billing.Service", on_delete=models.PROTECT, related_name="orders")
    template = models.ForeignKey(ResultTemplate, null=True, blank=True, on_delete=models.SET_NULL, related_name="orders")
    billing_line = models.ForeignKey("billing.BillingLine", null=True, blank=True, on_delete=models.SET_NULL, related_name="orders")
    status = models.CharField(max_length=12, choices=OrderStatus.choices, default=OrderStatus.UNPAID)

    result = models.JSONField(default=dict, blank=True)
    warnings = models.JSONField(default=list, blank=True)   # confirmed out-of-range notes
    notes = models.TextField(blank=True)
    cancel_reason = models.CharField(max_length=255, blank=True)

    started_at = models.DateTimeField(null=True, blank=True)
    started_by = models.ForeignKey(settings.AUTH_USER_MODEL, null=True, blank=True, on_delete=models.SET_NULL, related_name="+")
    completed_at = models.DateTimeField(null=True, blank=True)
    completed_by = models.ForeignKey(settings.AUTH_USER_MODEL, null=True, blank=True, on_delete=models.SET_NULL, related_name="orders_completed")

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        indexes = [
            models.Index(fields=["order_type", "status", "created_at"], name="order_type_status_idx"),
            models.Index(fields=["visit", "status"], name="order_visit_status_idx"),
            models.Index(fields=["patient", "created_at"], name="order_patient_created_idx"),
        ]
        ordering = ["-created_at", "-id"]

    def __str__(self):
        return f"Order#{self.id} {self.order_type} {self.service_id} ({self.status})"
