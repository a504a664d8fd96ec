import django.core.validators
import django.db.models.deletion
from decimal import Decimal
from django.conf import settings
from django.db import migrations, models

CATEGORIES = [("CONSULTATION", "Consultation"), ("LAB", "Laboratory"), ("RADIOLOGY", "Radiology"),
              ("DENTAL", "Dental"), ("NURSE", "Nurse Service"), ("CARD", "Patient Card"), ("OTHER", "Other")]
KINDS = [("CONSULTATION", "Consultation"), ("LAB", "Laboratory"), ("RADIOLOGY", "Radiology"),
         ("DENTAL", "Dental"), ("NURSE_SERVICE", "Nurse Service"), ("CARD", "Patient Card"), ("OTHER", "Other")]
STATUSES = [("PENDING", "Pending"), ("PAID", "Paid"), ("PENDING_INSURANCE", "Pending Insurance"),
            ("EMERGENCY_PENDING", "Emergency (Pay Later)"), ("CANCELLED", "Cancelled")]
METHODS = [("CASH", "Cash"), ("BANK", "Bank Transfer"), ("INSURANCE", "Insurance"),
           ("CHARITY", "Charity"), ("ACCOUNT", "Patient Account")]
non_negative = django.core.validators.MinValueValidator(0)


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("patients", "0001_initial"),
        ("visits", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Service",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("code", models.CharField(max_length=64, unique=True)),
                ("name", models.CharField(max_length=255)),
                ("category", models.CharField(choices=CATEGORIES, default="OTHER", max_length=16)),
                ("price", models.DecimalField(decimal_places=2, default=0, max_digits=12, validators=[non_negative])),
                ("is_active", models.BooleanField(default=True)),
            ],
            options={
                "ordering": ["name"],
                "indexes": [models.Index(fields=["category", "is_active"], name="service_cat_active_idx")],
            },
        ),
        migrations.CreateModel(
            name="Billing",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("kind", models.CharField(choices=KINDS, max_length=16)),
                ("status", models.CharField(choices=STATUSES, default="PENDING", max_length=20)),
                ("total_amount", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=12)),
                ("notes", models.CharField(blank=True, max_length=255)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("paid_at", models.DateTimeField(blank=True, null=True)),
                ("insurance_settled_at", models.DateTimeField(blank=True, null=True)),
                ("created_by", models.ForeignKey(null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="billings_created", to=settings.AUTH_USER_MODEL)),
                ("patient", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="billings", to="patients.patient")),
                ("visit", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name="billings", to="visits.visit")),
            ],
            options={
                "ordering": ["-created_at", "-id"],
                "indexes": [
                    models.Index(fields=["status", "created_at"], name="billing_status_created_idx"),
                    models.Index(fields=["visit", "kind"], name="billing_visit_kind_idx"),
                    models.Index(fields=["patient", "created_at"], name="billing_patient_created_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="BillingLine",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("description", models.CharField(blank=True, max_length=255)),
                ("quantity", models.PositiveIntegerField(default=1, validators=[django.core.validators.MinValueValidator(1)])),
                ("unit_price", models.DecimalField(decimal_places=2, max_digits=12, validators=[non_negative])),
                ("total_price", models.DecimalField(decimal_places=2, max_digits=12, validators=[non_negative])),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("billing", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="lines", to="billing.billing")),
                ("service", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="billing_lines", to="billing.service")),
            ],
            options={"ordering": ["id"]},
        ),
        migrations.CreateModel(
            name="Payment",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("amount", models.DecimalField(decimal_places=2, max_digits=12, validators=[non_negative])),
                ("method", models.CharField(choices=METHODS, default="CASH", max_length=16)),
                ("reference", models.CharField(blank=True, max_length=64)),
                ("bank_name", models.CharField(blank=True, max_length=120)),
                ("insurer", models.CharField(blank=True, max_length=160)),
                ("notes", models.CharField(blank=True, max_length=255)),
                ("received_at", models.DateTimeField(auto_now_add=True)),
                ("billing", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="payments", to="billing.billing")),
                ("patient", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="payments", to="patients.patient")),
                ("received_by", models.ForeignKey(null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="payments_received", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "ordering": ["-received_at", "-id"],
                "constraints": [models.UniqueConstraint(fields=["billing"], name="payment_one_per_billing")],
            },
        ),
    ]
