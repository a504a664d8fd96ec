import django.core.validators
import django.db.models.deletion
from decimal import Decimal
from django.conf import settings
from django.db import migrations, models

ACCOUNT_TYPES = [("ADVANCE", "Advance (prepaid)"), ("CREDIT", "Credit")]
METHODS = [("CASH", "Cash"), ("BANK", "Bank Transfer"), ("INSURANCE", "Insurance"),
           ("CHARITY", "Charity"), ("ACCOUNT", "Patient Account")]
ZERO = Decimal("0.00")
non_negative = django.core.validators.MinValueValidator(0)


def money(**kw):
    return models.DecimalField(decimal_places=2, default=ZERO, max_digits=12, **kw)


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("billing", "0001_initial"),
        ("patients", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="PatientAccount",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("account_type", models.CharField(choices=ACCOUNT_TYPES, max_length=8)),
                ("status", models.CharField(choices=[("VERIFIED", "Verified"), ("SUSPENDED", "Suspended")], default="VERIFIED", max_length=10)),
                ("balance", money(validators=[non_negative])),
                ("debt_owed", money(validators=[non_negative])),
                ("total_deposited", money()),
                ("total_used", money()),
                ("total_debt_paid", money()),
                ("verified_at", models.DateTimeField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("patient", models.OneToOneField(on_delete=django.db.models.deletion.PROTECT, related_name="account", to="patients.patient")),
                ("verified_by", models.ForeignKey(null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="+", to=settings.AUTH_USER_MODEL)),
            ],
            options={"ordering": ["-created_at", "-id"]},
        ),
        migrations.CreateModel(
            name="AccountRequest",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("request_type", models.CharField(choices=[("CREATE_ACCOUNT", "Create account"), ("ADD_DEPOSIT", "Add deposit"), ("ADD_CREDIT", "Add credit"), ("RETURN_MONEY", "Debt repayment")], max_length=16)),
                ("account_type", models.CharField(blank=True, choices=ACCOUNT_TYPES, max_length=8)),
                ("amount", money(validators=[non_negative])),
                ("payment_method", models.CharField(blank=True, choices=METHODS, max_length=12)),
                ("reference", models.CharField(blank=True, max_length=64)),
                ("notes", models.TextField(blank=True)),
                ("status", models.CharField(choices=[("PENDING", "Pending"), ("APPROVED", "Approved"), ("REJECTED", "Rejected")], default="PENDING", max_length=10)),
                ("reviewed_at", models.DateTimeField(blank=True, null=True)),
                ("rejection_reason", models.CharField(blank=True, max_length=255)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("account", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name="requests", to="patient_accounts.patientaccount")),
                ("patient", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="account_requests", to="patients.patient")),
                ("requested_by", models.ForeignKey(null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="account_requests", to=settings.AUTH_USER_MODEL)),
                ("reviewed_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="+", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "ordering": ["-created_at", "-id"],
                "indexes": [models.Index(fields=["status", "created_at"], name="acct_request_status_idx")],
            },
        ),
        migrations.CreateModel(
            name="AccountTransaction",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("type", models.CharField(choices=[("OPENING", "Opening balance"), ("DEPOSIT", "Deposit"), ("CREDIT_ADDED", "Credit added"), ("DEDUCTION", "Deduction"), ("DEBT_REPAYMENT", "Debt repayment")], max_length=16)),
                ("amount", money()),
                ("balance_before", money()),
                ("balance_after", money()),
                ("notes", models.CharField(blank=True, max_length=255)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("account", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="transactions", to="patient_accounts.patientaccount")),
                ("billing", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name="account_transactions", to="billing.billing")),
                ("processed_by", models.ForeignKey(null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="+", to=settings.AUTH_USER_MODEL)),
                ("request", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name="transactions", to="patient_accounts.accountrequest")),
            ],
            options={
                "ordering": ["-created_at", "-id"],
                "indexes": [models.Index(fields=["account", "created_at"], name="acct_txn_account_created_idx")],
            },
        ),
    ]
