import logging
from decimal import Decimal, InvalidOperation

from django.db import transaction
from django.utils import timezone

from audit.services import log_action
from common.errors import ValidationFailed
from common.guards import get_or_404, guarded_update
from .enums import LoanStatus, ReviewAction
from .models import Loan

logger = logging.getLogger(__name__)


def _positive(value, field: str) -> Decimal:
    try:
        amount = Decimal(str(value)).quantize(Decimal("0.01"))
    except (InvalidOperation, ValueError, TypeError):
        raise ValidationFailed(f"{field} is not a number.", errors={field: str(value)})
    if amount <= 0:
        raise ValidationFailed(f"{field} must be greater than zero.", errors={field: str(amount)})
    return amount


def request_loan(*, staff, amount, reason: str = "") -> Loan:
    loan = Loan.objects.create(staff=staff, amount=_positive(amount, "amount"), reason=reason)
    logger.info("loan %s requested by %s: %s", loan.pk, staff.pk, loan.amount)
    return loan


def review_loan(*, loan_id, action: str, actor=None, approved_amount=None, notes: str = "") -> Loan:
    """Approve (optionally for a different amount) or deny a pending loan."""
    if action not in ReviewAction.values:
        raise ValidationFailed(f"Unknown review action {action!r}.", errors={"action": action})

    with transaction.atomic():
        loan = get_or_404(Loan.objects, "Loan", pk=loan_id)
        changes = {"reviewed_by": actor, "reviewed_at": timezone.now(), "review_notes": notes}
        if action == ReviewAction.APPROVE:
            if approved_amount in (None, ""):
                approved_amount = loan.amount
            changes.update(status=LoanStatus.APPROVED, approved_amount=_positive(approved_amount, "approved_amount"))
        else:
            changes.update(status=LoanStatus.DENIED)

        guarded_update(Loan, loan_id, expected=[LoanStatus.PENDING], label="Loan", **changes)
        loan = Loan.objects.get(pk=loan_id)
        log_action(obj=loan, title=f"Loan {loan.status.lower()}", actor=actor,
                   extra={"amount": str(loan.amount), "approved_amount": str(loan.approved_amount or "")})

    logger.info("loan %s %s by %s", loan_id, loan.status, getattr(actor, "id", None))
    return loan


def disburse_loan(*, loan_id, actor=None) -> Loan:
    with transaction.atomic():
        guarded_update(Loan, loan_id, expected=[LoanStatus.APPROVED], label="Loan",
                       status=LoanStatus.GIVEN, disbursed_by=actor, disbursed_at=timezone.now())
        loan = Loan.objects.get(pk=loan_id)
        log_action(obj=loan, title="Loan disbursed", actor=actor, extra={"amount": str(loan.approved_amount)})

    logger.info("loan %s disbursed: %s", loan_id, loan.approved_amount)
    return loan
