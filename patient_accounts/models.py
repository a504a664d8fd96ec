from decimal import Decimal

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models

from billing.enums import PaymentMethod
from .enums import AccountStatus, AccountType, RequestStatus, RequestType, TransactionType

ZERO = Decimal("0.00")


def _money(**kw):
    return models.DecimalField(max_digits=12, decimal_places=2, default=ZERO, **kw)


class PatientAccount(models.Model):
    """
    ADVANCE: ``balance`` is prepaid money the patient can spend.
    CREDIT: ``balance`` is remaining credit; spending it grows ``debt_owed``.
    Balances only move through approved requests and account payments,
    each leaving an AccountTransaction.
    """
    patient = models.OneToOneField("patients.Patient", on_delete=models.PROTECT, related_name="account")
    account_type = models.CharField(max_length=8, choices=AccountType.choices)
    status = models.CharField(max_length=10, choices=AccountStatus.choices, default=AccountStatus.VERIFIED)

    balance = _money(validators=[MinValueValidator(0)])
    debt_owed = _money(validators=[MinValueValidator(0)])
    total_deposited = _money()
    total_used = _money()
    total_debt_paid = _money()

    verified_by = models.ForeignKey(settings.AUTH_USER_MODEL, null=True, on_delete=models.SET_NULL, related_name="+")
    verified_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at", "-id"]

    def __str__(self):
        return f"{self.patient_id} {self.account_type} balance={self.balance} debt={self.debt_owed}"


class AccountRequest(models.Model):
    """A requested balance change. Nothing moves until an admin approves it."""
    patient = models.ForeignKey("patients.Patient", on_delete=models.PROTECT, related_name="account_requests")
    account = models.ForeignKey(PatientAccount, null=True, blank=True, on_delete=models.PROTECT, related_name="requests")
    request_type = models.CharField(max_length=16, choices=RequestType.choices)
    account_type = models.CharField(max_length=8, choices=AccountType.choices, blank=True)
    amount = _money(validators=[MinValueValidator(0)])
    payment_method = models.CharField(max_length=12, choices=PaymentMethod.choices, blank=True)
    reference = models.CharField(max_length=64, blank=True)
    notes = models.TextField(blank=True)

    status = models.CharField(max_length=10, choices=RequestStatus.choices, default=RequestStatus.PENDING)
    requested_by = models.ForeignKey(settings.AUTH_USER_MODEL, null=True, on_delete=models.SET_NULL, related_name="account_requests")
    reviewed_by = models.ForeignKey(settings.AUTH_USER_MODEL, null=True, blank=True, on_delete=models.SET_NULL, related_name="+")
    reviewed_at = models.DateTimeField(null=True, blank=True)
    rejection_reason = models.CharField(max_length=255, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        indexes = [models.Index(fields=["status", "created_at"], name="acct_request_status_idx")]
        ordering = ["-created_at", "-id"]

    def __str__(self):
        return f"{self.request_type} {self.amount} for {self.patient_id} ({self.status})"


class AccountTransaction(models.Model):
    account = models.ForeignKey(PatientAccount, on_delete=models.PROTECT, related_name="transactions")
    type = models.CharField(max_length=16, choices=TransactionType.choices)
    amount = _money()
    balance_before = _money()
    balance_after = _money()
    billing = models.ForeignKey("billing.Billing", null=True, blank=True, on_delete=models.PROTECT, related_name="account_transactions")
    request = models.ForeignKey(AccountRequest, null=True, blank=True, on_delete=models.PROTECT, related_name="transactions")
    processed_by = models.ForeignKey(settings.AUTH_USER_MODEL, null=True, on_delete=models.SET_NULL, related_name="+")
    notes = models.CharField(max_length=255, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        indexes = [models.Index(fields=["account", "created_at"], name="acct_txn_account_created_idx")]
        ordering = ["-created_at", "-id"]

    def __str__(self):
        return f"{self.type} {self.amount} on account {self.account_id}"
