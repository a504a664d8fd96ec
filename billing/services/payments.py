import logging
from decimal import Decimal, InvalidOperation

from django.db import transaction
from django.utils import timezone

from audit.services import log_action
from common.errors import Conflict, PreconditionFailed, ValidationFailed
from common.guards import get_or_404, guarded_update

from billing.enums import BillingStatus, PaymentMethod
from billing.models import Billing, Payment
from billing.signals import billing_settled

logger = logging.getLogger(__name__)


def _check_method_fields(method: str, *, reference: str, bank_name: str, insurer: str):
    if method not in PaymentMethod.values:
        raise ValidationFailed(f"Unknown payment method {method!r}.", errors={"method": method})
    errors = {}
    if method == PaymentMethod.BANK:
        if not reference:
            errors["reference"] = "Bank transfers need a transaction reference."
        if not bank_name:
            errors["bank_name"] = "Bank transfers need the bank name."
    if method == PaymentMethod.INSURANCE and not insurer:
        errors["insurer"] = "Insurance payments need the insurer."
    if errors:
        raise ValidationFailed("Missing payment details.", errors=errors)


def pay_billing(*, billing_id, method: str, actor=None, amount=None, reference: str = "",
                bank_name: str = "", insurer: str = "", notes: str = "") -> Payment:
    """
    Settle an unsettled billing in full.

    The status flip is a guarded write conditioned on the billing still being
    unsettled with the same total, so of two concurrent payments exactly one
    wins and the other gets a Conflict. INSURANCE leaves the billing in
    PENDING_INSURANCE until the insurer settles; everything else goes to PAID.
    """
    reference, bank_name, insurer = (reference or "").strip(), (bank_name or "").strip(), (insurer or "").strip()
    _check_method_fields(method, reference=reference, bank_name=bank_name, insurer=insurer)

    with transaction.atomic():
        billing = get_or_404(Billing.objects.select_related("patient", "visit"), "Billing", pk=billing_id)

        if billing.status == BillingStatus.CANCELLED:
            raise PreconditionFailed("Billing was cancelled and cannot be paid.")
        if billing.status in BillingStatus.settled():
            raise Conflict(f"Billing is already settled ({billing.status}).")

        if amount not in (None, ""):
            try:
                amount = Decimal(str(amount))
            except InvalidOperation:
                raise ValidationFailed("Amount is not a number.", errors={"amount": str(amount)})
            if amount != billing.total_amount:
                raise ValidationFailed(
                    "Amount must equal the billing total.",
                    errors={"amount": str(amount), "total_amount": str(billing.total_amount)},
                )

        target = BillingStatus.PENDING_INSURANCE if method == PaymentMethod.INSURANCE else BillingStatus.PAID
        now = timezone.now()
        guarded_update(
            Billing, billing.pk,
            expected=BillingStatus.unsettled(),
            extra_filters={"total_amount": billing.total_amount},
            label="Billing",
            status=target,
            paid_at=now,
        )

        if method == PaymentMethod.ACCOUNT:
            from patient_accounts.services import charge_account
            charge_account(patient=billing.patient, amount=billing.total_amount, billing=billing, actor=actor)

        payment = Payment.objects.create(
            billing=billing,
            patient=billing.patient,
            amount=billing.total_amount,
            method=method,
            reference=reference,
            bank_name=bank_name,
            insurer=insurer,
            notes=notes[:255],
            received_by=actor,
        )

        billing.refresh_from_db()
        billing_settled.send(sender=Billing, billing=billing, payment=payment, actor=actor)
        log_action(obj=billing, title=f"Billing paid via {method}",
                   extra={"payment_id": payment.id, "amount": str(payment.amount), "status": billing.status})

    logger.info("billing %s settled method=%s amount=%s status=%s", billing.pk, method, payment.amount, billing.status)
    return payment


@transaction.atomic
def settle_insurance(*, billing_id, actor=None, reference: str = "") -> Billing:
    guarded_update(
        Billing, billing_id,
        expected=[BillingStatus.PENDING_INSURANCE],
        label="Billing",
        status=BillingStatus.PAID,
        insurance_settled_at=timezone.now(),
    )
    billing = Billing.objects.get(pk=billing_id)
    if reference:
        Payment.objects.filter(billing=billing).update(reference=reference[:64])
    log_action(obj=billing, title="Insurance claim settled", extra={"reference": reference})
    logger.info("billing %s insurance settled", billing_id)
    return billing
