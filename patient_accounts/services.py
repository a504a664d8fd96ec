"""
Patient advance/credit accounts.

Staff file requests; an admin approves or rejects them. Approval is a
guarded PENDING -> APPROVED write, after which the change is applied to
the locked account row together with its AccountTransaction, all in one
transaction.
"""
import logging
from decimal import Decimal, InvalidOperation

from django.db import transaction
from django.utils import timezone

from audit.services import log_action
from common.errors import Conflict, NotFound, PreconditionFailed, ValidationFailed
from common.guards import get_or_404, guarded_update
from .enums import AccountStatus, AccountType, RequestStatus, RequestType, TransactionType
from .models import AccountRequest, AccountTransaction, PatientAccount

logger = logging.getLogger(__name__)

ZERO = Decimal("0.00")

# which account type each request type applies to
REQUEST_ACCOUNT_TYPE = {
    RequestType.ADD_DEPOSIT: AccountType.ADVANCE,
    RequestType.ADD_CREDIT: AccountType.CREDIT,
    RequestType.RETURN_MONEY: AccountType.CREDIT,
}


def _amount(value, *, allow_zero=False) -> Decimal:
    try:
        amount = Decimal(str(value)).quantize(Decimal("0.01"))
    except (InvalidOperation, ValueError, TypeError):
        raise ValidationFailed("Amount is not a number.", errors={"amount": str(value)})
    if amount < 0 or (amount == 0 and not allow_zero):
        raise ValidationFailed("Amount must be positive.", errors={"amount": str(amount)})
    return amount


def _check_applies(account: PatientAccount, request_type, amount: Decimal):
    wanted = REQUEST_ACCOUNT_TYPE[request_type]
    if account.account_type != wanted:
        raise ValidationFailed(
            f"{request_type} only applies to {wanted} accounts; this account is {account.account_type}.",
            errors={"account_type": account.account_type},
        )
    if request_type == RequestType.RETURN_MONEY and amount > account.debt_owed:
        raise ValidationFailed(
            "Repayment is larger than the debt owed.",
            errors={"amount": str(amount), "debt_owed": str(account.debt_owed)},
        )


def create_request(*, patient, request_type, amount, actor=None, account_type: str = "",
                   payment_method: str = "", reference: str = "", notes: str = "") -> AccountRequest:
    """File a request. Balances do not change until it is approved."""
    if request_type not in RequestType.values:
        raise ValidationFailed(f"Unknown request type {request_type!r}.")
    account = PatientAccount.objects.filter(patient=patient).first()

    if request_type == RequestType.CREATE_ACCOUNT:
        if account is not None:
            raise Conflict("Patient already has an account.", errors={"account": account.pk})
        if account_type not in AccountType.values:
            raise ValidationFailed("Pick an account type.", errors={"account_type": account_type or "required"})
        amount = _amount(amount, allow_zero=True)
        if AccountRequest.objects.filter(patient=patient, request_type=RequestType.CREATE_ACCOUNT,
                                         status=RequestStatus.PENDING).exists():
            raise Conflict("An account request for this patient is already pending.")
    else:
        if account is None:
            raise PreconditionFailed("Patient has no account yet.")
        amount = _amount(amount)
        _check_applies(account, request_type, amount)
        account_type = account.account_type

    req = AccountRequest.objects.create(
        patient=patient,
        account=account,
        request_type=request_type,
        account_type=account_type,
        amount=amount,
        payment_method=payment_method,
        reference=reference,
        notes=notes,
        requested_by=actor,
    )
    logger.info("account request %s: %s %s for %s", req.pk, request_type, amount, patient.pk)
    return req


def _record(account, *, type, amount, before, actor, request=None, billing=None, notes=""):
    return AccountTransaction.objects.create(
        account=account, type=type, amount=amount,
        balance_before=before, balance_after=account.balance,
        request=request, billing=billing, processed_by=actor, notes=notes[:255],
    )


def _open_account(req: AccountRequest, actor) -> PatientAccount:
    if PatientAccount.objects.filter(patient_id=req.patient_id).exists():
        raise Conflict("Patient already has an account.")
    now = timezone.now()
    account = PatientAccount.objects.create(
        patient_id=req.patient_id,
        account_type=req.account_type,
        status=AccountStatus.VERIFIED,
        balance=req.amount,
        total_deposited=req.amount if req.account_type == AccountType.ADVANCE else ZERO,
        verified_by=actor,
        verified_at=now,
    )
    AccountRequest.objects.filter(pk=req.pk).update(account=account)
    _record(account, type=TransactionType.OPENING, amount=req.amount, before=ZERO, actor=actor, request=req)
    return account


def _apply(req: AccountRequest, actor) -> PatientAccount:
    account = PatientAccount.objects.select_for_update().filter(pk=req.account_id).first()
    if account is None:
        raise NotFound("Account not found.")
    if account.status != AccountStatus.VERIFIED:
        raise PreconditionFailed(f"Account is {account.status}.")
    _check_applies(account, req.request_type, req.amount)

    before = account.balance
    if req.request_type == RequestType.ADD_DEPOSIT:
        account.balance += req.amount
        account.total_deposited += req.amount
        kind = TransactionType.DEPOSIT
    elif req.request_type == RequestType.ADD_CREDIT:
        account.balance += req.amount
        kind = TransactionType.CREDIT_ADDED
    else:
        # repaying debt restores the credit it used up
        account.debt_owed -= req.amount
        account.balance += req.amount
        account.total_debt_paid += req.amount
        kind = TransactionType.DEBT_REPAYMENT
    account.save(update_fields=["balance", "debt_owed", "total_deposited", "total_debt_paid", "updated_at"])
    _record(account, type=kind, amount=req.amount, before=before, actor=actor, request=req,
            notes=req.reference)
    return account


def approve_request(*, request_id, actor=None) -> AccountRequest:
    with transaction.atomic():
        guarded_update(
            AccountRequest, request_id,
            expected=[RequestStatus.PENDING],
            label="Account request",
            status=RequestStatus.APPROVED,
            reviewed_by=actor,
            reviewed_at=timezone.now(),
        )
        req = AccountRequest.objects.get(pk=request_id)
        if req.request_type == RequestType.CREATE_ACCOUNT:
            account = _open_account(req, actor)
        else:
            account = _apply(req, actor)
        log_action(obj=account, title=f"Account request approved: {req.request_type}", actor=actor,
                   extra={"request": req.pk, "amount": str(req.amount), "balance": str(account.balance)})

    logger.info("account request %s approved; account %s balance=%s", request_id, account.pk, account.balance)
    return AccountRequest.objects.get(pk=request_id)


def reject_request(*, request_id, actor=None, reason: str = "") -> AccountRequest:
    reason = (reason or "").strip()
    if not reason:
        raise ValidationFailed("A rejection reason is required.", errors={"reason": "required"})
    with transaction.atomic():
        guarded_update(
            AccountRequest, request_id,
            expected=[RequestStatus.PENDING],
            label="Account request",
            status=RequestStatus.REJECTED,
            reviewed_by=actor,
            reviewed_at=timezone.now(),
            rejection_reason=reason[:255],
        )
        req = AccountRequest.objects.get(pk=request_id)
        log_action(obj=req, title=f"Account request rejected: {req.request_type}", actor=actor,
                   extra={"reason": reason})
    return req


def set_account_status(*, account_id, status, actor=None) -> PatientAccount:
    if status not in AccountStatus.values:
        raise ValidationFailed(f"Unknown account status {status!r}.")
    with transaction.atomic():
        account = get_or_404(PatientAccount.objects.select_for_update(), "Account", pk=account_id)
        if account.status == status:
            return account
        account.status = status
        account.save(update_fields=["status", "updated_at"])
        log_action(obj=account, title=f"Account {status.lower()}", actor=actor)
    return account


def charge_account(*, patient, amount, billing=None, actor=None) -> AccountTransaction:
    """
    Spend from the patient's account; called inside the payment transaction.
    ADVANCE needs enough balance; CREDIT needs enough remaining credit and
    the spend is added to the debt.
    """
    amount = _amount(amount, allow_zero=True)
    account = PatientAccount.objects.select_for_update().filter(patient=patient).first()
    if account is None:
        raise PreconditionFailed("Patient has no account.")
    if account.status != AccountStatus.VERIFIED:
        raise PreconditionFailed(f"Account is {account.status}.")
    if account.balance < amount:
        what = "balance" if account.account_type == AccountType.ADVANCE else "remaining credit"
        raise PreconditionFailed(
            f"Insufficient {what}.",
            errors={"balance": str(account.balance), "amount": str(amount)},
        )

    before = account.balance
    account.balance -= amount
    account.total_used += amount
    if account.account_type == AccountType.CREDIT:
        account.debt_owed += amount
    account.save(update_fields=["balance", "debt_owed", "total_used", "updated_at"])
    txn = _record(account, type=TransactionType.DEDUCTION, amount=amount, before=before, actor=actor,
                  billing=billing, notes=f"Billing #{billing.pk}" if billing else "")
    logger.info("account %s charged %s (billing %s), balance %s -> %s",
                account.pk, amount, getattr(billing, "pk", None), before, account.balance)
    return txn
