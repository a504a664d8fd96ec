"""
Creating and editing billings.

Every write that touches lines also moves ``Billing.total_amount`` in the
same transaction, so the total always equals the sum of the lines.
"""
import logging
from decimal import Decimal

from django.db import transaction
from django.db.models import F
from django.utils import timezone

from common.errors import ValidationFailed
from common.guards import get_or_404, guarded_update

from billing.enums import BillingKind, BillingStatus
from billing.models import Billing, BillingLine, Service
from .pricing import resolve_price

logger = logging.getLogger(__name__)


def _line_values(item: dict):
    service = item["service"]
    if not isinstance(service, Service):
        raise ValidationFailed("Each billing line needs a catalog service.")
    if not service.is_active:
        raise ValidationFailed(f"Service {service.code} is not active.")
    qty = int(item.get("quantity") or 1)
    if qty < 1:
        raise ValidationFailed("Quantity must be at least 1.", errors={"quantity": qty})
    unit_price = item.get("unit_price")
    if unit_price is None:
        unit_price = resolve_price(service=service, doctor=item.get("doctor"))
    unit_price = Decimal(unit_price)
    if unit_price < 0:
        raise ValidationFailed("Unit price cannot be negative.")
    return {
        "service": service,
        "description": item.get("description") or service.name,
        "quantity": qty,
        "unit_price": unit_price,
        "total_price": unit_price * qty,
    }


@transaction.atomic
def create_billing(*, patient, kind, items: list[dict], actor=None, visit=None, emergency=False, notes=""):
    """
    Create a billing with its lines. ``items`` are dicts with ``service`` and
    optional ``quantity``, ``unit_price``, ``description``, ``doctor``.

    Returns ``(billing, lines)``, lines in the same order as ``items``.
    """
    if not items:
        raise ValidationFailed("A billing needs at least one line.")
    values = [_line_values(i) for i in items]
    total = sum((v["total_price"] for v in values), Decimal("0.00"))

    billing = Billing.objects.create(
        patient=patient,
        visit=visit,
        kind=kind,
        status=BillingStatus.EMERGENCY_PENDING if emergency else BillingStatus.PENDING,
        total_amount=total,
        notes=notes[:255],
        created_by=actor,
    )
    lines = [BillingLine.objects.create(billing=billing, **v) for v in values]
    logger.info("billing %s created kind=%s total=%s lines=%s visit=%s",
                billing.id, kind, total, len(lines), getattr(visit, "pk", None))
    return billing, lines


@transaction.atomic
def add_line(*, billing_id, service: Service, quantity: int = 1, unit_price=None, description="", actor=None):
    v = _line_values({"service": service, "quantity": quantity, "unit_price": unit_price, "description": description})
    guarded_update(
        Billing, billing_id,
        expected=BillingStatus.unsettled(),
        label="Billing",
        total_amount=F("total_amount") + v["total_price"],
    )
    line = BillingLine.objects.create(billing_id=billing_id, **v)
    logger.info("billing %s: added line %s (%s)", billing_id, line.id, v["total_price"])
    return line


@transaction.atomic
def remove_line(*, line_id, actor=None) -> Billing:
    """
    Drop a line from an unsettled billing. A billing left without lines is
    cancelled.
    """
    line = get_or_404(BillingLine.objects, "Billing line", pk=line_id)
    guarded_update(
        Billing, line.billing_id,
        expected=BillingStatus.unsettled(),
        label="Billing",
        total_amount=F("total_amount") - line.total_price,
    )
    billing_id = line.billing_id
    line.delete()
    if not BillingLine.objects.filter(billing_id=billing_id).exists():
        guarded_update(Billing, billing_id, expected=BillingStatus.unsettled(), label="Billing",
                       status=BillingStatus.CANCELLED, total_amount=Decimal("0.00"))
        logger.info("billing %s cancelled: no lines left", billing_id)
    return Billing.objects.get(pk=billing_id)


def cancel_unsettled_for_visit(*, visit, reason: str = "") -> int:
    # the card fee belongs to the patient, not the visit
    n = Billing.objects.filter(visit=visit, status__in=BillingStatus.unsettled()).exclude(
        kind=BillingKind.CARD
    ).update(
        status=BillingStatus.CANCELLED,
        notes=(f"Cancelled: {reason}" if reason else "Cancelled")[:255],
        updated_at=timezone.now(),
    )
    if n:
        logger.info("visit %s: cancelled %s unsettled billing(s)", visit.pk, n)
    return n
