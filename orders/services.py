"""
Lab, radiology and dental orders.

An order batch is billed as one billing; each order inside it moves on
its own: UNPAID -> PAID (billing settled) -> IN_PROGRESS -> COMPLETED.
Emergency visits skip payment and start QUEUED.
"""
import logging

from django.db import transaction
from django.utils import timezone

from audit.services import log_action
from billing.enums import BillingKind, BillingStatus, ServiceCategory
from billing.models import Service
from billing.services.invoices import create_billing, remove_line
from common.errors import Conflict, NotFound, PreconditionFailed, ValidationFailed
from common.guards import guarded_update
from visits.enums import VisitStatus
from visits.services.lifecycle import lock_visit, mark_results_ready
from .enums import OrderStatus, OrderType
from .models import Order, OrderBatch, ResultTemplate
from .templates import check_result

logger = logging.getLogger(__name__)

CATEGORY_FOR = {
    OrderType.LAB: ServiceCategory.LAB,
    OrderType.RADIOLOGY: ServiceCategory.RADIOLOGY,
    OrderType.DENTAL: ServiceCategory.DENTAL,
}
BILLING_KIND_FOR = {
    OrderType.LAB: BillingKind.LAB,
    OrderType.RADIOLOGY: BillingKind.RADIOLOGY,
    OrderType.DENTAL: BillingKind.DENTAL,
}


def _services_for(order_type, service_ids) -> list[Service]:
    if not service_ids:
        raise ValidationFailed("Pick at least one service.", errors={"services": "empty"})
    dupes = sorted({s for s in service_ids if service_ids.count(s) > 1})
    if dupes:
        raise ValidationFailed("The same service was ordered twice.", errors={"duplicates": dupes})

    found = {s.pk: s for s in Service.objects.filter(pk__in=service_ids, is_active=True)}
    missing = [s for s in service_ids if s not in found]
    if missing:
        raise ValidationFailed("Unknown or inactive services.", errors={"missing": missing})
    wrong = [s.code for s in found.values() if s.category != CATEGORY_FOR[order_type]]
    if wrong:
        raise ValidationFailed(f"Not {order_type.lower()} services: {', '.join(wrong)}.", errors={"category": wrong})
    return [found[s] for s in service_ids]


def template_for(service: Service, order_type) -> ResultTemplate | None:
    return service.result_templates.filter(is_active=True, order_type=order_type).order_by("id").first()


def create_order(*, visit_id, order_type, service_ids, actor=None, instructions: str = "") -> OrderBatch:
    """
    Order one or more services of a single type for a visit.

    A doctor ordering on a WAITING_FOR_DOCTOR visit starts the consultation
    first. A visit already AWAITING_RESULTS_REVIEW stays there.
    """
    if order_type not in OrderType.values:
        raise ValidationFailed(f"Unknown order type {order_type!r}.")
    services = _services_for(order_type, list(service_ids))

    with transaction.atomic():
        visit = lock_visit(visit_id)
        if visit.status not in VisitStatus.post_triage():
            raise PreconditionFailed(f"Visit is {visit.status}; orders need a triaged, open visit.",
                                     errors={"current": visit.status})
        if visit.status == VisitStatus.WAITING_FOR_DOCTOR:
            from assignments.services import start_consultation
            visit = start_consultation(visit_id=visit.pk, actor=actor)

        already = list(
            Order.objects.filter(visit=visit, service__in=services, status__in=OrderStatus.pending())
            .values_list("service__code", flat=True)
        )
        if already:
            raise ValidationFailed("Already ordered on this visit: " + ", ".join(already) + ".",
                                   errors={"already_ordered": already})

        billing, lines = create_billing(
            patient=visit.patient, visit=visit, kind=BILLING_KIND_FOR[order_type], actor=actor,
            emergency=visit.is_emergency, items=[{"service": s} for s in services],
        )
        batch = OrderBatch.objects.create(
            visit=visit, patient=visit.patient, order_type=order_type,
            instructions=instructions, billing=billing, ordered_by=actor,
        )
        initial = OrderStatus.QUEUED if visit.is_emergency else OrderStatus.UNPAID
        for service, line in zip(services, lines):
            Order.objects.create(
                batch=batch, visit=visit, patient=visit.patient, order_type=order_type,
                service=service, template=template_for(service, order_type),
                billing_line=line, status=initial,
            )
        log_action(obj=visit, title=f"{order_type} ordered", actor=actor,
                   extra={"batch": batch.id, "billing": billing.id, "services": [s.code for s in services],
                          "amount": str(billing.total_amount)})

    logger.info("visit %s: %s order batch %s (%s services), billing %s",
                visit.visit_uid, order_type, batch.id, len(services), billing.id)
    return batch


def _lock_order(order_id, order_type=None) -> Order:
    """
    Lock the order's visit, then the order. Every order write goes through
    the visit row, so the last two results of a visit cannot both miss the
    move to AWAITING_RESULTS_REVIEW.
    """
    q = Order.objects.filter(pk=order_id)
    if order_type:
        q = q.filter(order_type=order_type)
    visit_id = q.values_list("visit_id", flat=True).first()
    if visit_id is None:
        raise NotFound("Order not found.")
    lock_visit(visit_id)
    return q.select_for_update().get()


def start_order(*, order_id, actor=None, order_type=None) -> Order:
    with transaction.atomic():
        order = _lock_order(order_id, order_type)
        guarded_update(
            Order, order.pk,
            expected=[OrderStatus.PAID, OrderStatus.QUEUED],
            label="Order",
            status=OrderStatus.IN_PROGRESS,
            started_at=timezone.now(),
            started_by=actor,
        )
    logger.info("order %s started by %s", order_id, getattr(actor, "id", None))
    return Order.objects.get(pk=order_id)


def _results_ready_if_done(visit_id, actor):
    if not Order.objects.filter(visit_id=visit_id, status__in=OrderStatus.pending()).exists():
        if Order.objects.filter(visit_id=visit_id, status=OrderStatus.COMPLETED).exists():
            mark_results_ready(visit_id=visit_id, actor=actor)


def submit_result(*, order_id, values, actor=None, notes: str = "", confirm_warnings: bool = False,
                  order_type=None) -> Order:
    """
    Validate ``values`` against the order's template and complete the
    order. Out-of-range numbers need ``confirm_warnings``.
    """
    with transaction.atomic():
        order = _lock_order(order_id, order_type)
        if order.status == OrderStatus.COMPLETED:
            raise Conflict("Result was already submitted.")
        if order.status not in OrderStatus.workable():
            raise PreconditionFailed(f"Order is {order.status}; results need a paid or queued order.",
                                     errors={"current": order.status})

        fields = order.template.fields if order.template_id else None
        cleaned, warnings = check_result(fields, values, confirm_warnings=confirm_warnings)

        now = timezone.now()
        guarded_update(
            Order, order.pk,
            expected=OrderStatus.workable(),
            label="Order",
            status=OrderStatus.COMPLETED,
            result=cleaned,
            warnings=warnings,
            notes=notes,
            completed_at=now,
            completed_by=actor,
            started_at=order.started_at or now,
        )
        _results_ready_if_done(order.visit_id, actor)
        log_action(obj=order, title="Result submitted", actor=actor,
                   extra={"visit": order.visit_id, "warnings": warnings})

    logger.info("order %s completed (%s warnings)", order_id, len(warnings))
    return Order.objects.get(pk=order_id)


def cancel_order(*, order_id, actor=None, reason: str = "", order_type=None) -> Order:
    """
    Cancel an order that has not started. If its billing is still unpaid the
    line comes off the bill in the same transaction.
    """
    reason = (reason or "").strip()
    if not reason:
        raise ValidationFailed("A cancellation reason is required.", errors={"reason": "required"})

    with transaction.atomic():
        order = _lock_order(order_id, order_type)
        guarded_update(
            Order, order.pk,
            expected=OrderStatus.cancellable(),
            label="Order",
            status=OrderStatus.CANCELLED,
            cancel_reason=reason[:255],
        )
        line = order.billing_line
        if line is not None and line.billing.status in BillingStatus.unsettled():
            remove_line(line_id=line.pk, actor=actor)
        _results_ready_if_done(order.visit_id, actor)
        log_action(obj=order, title="Order cancelled", actor=actor, extra={"reason": reason})

    logger.info("order %s cancelled: %s", order_id, reason)
    return Order.objects.get(pk=order_id)
