"""
Visit state machine.

All status writes go through ``transition``: a guarded single-row update
conditioned on the status the caller expects, followed by a VisitTransition
row in the same transaction. Edges are fixed in ``ALLOWED`` and only ever
move forward along ``PATHWAY`` (or out to CANCELLED).
"""
import logging

from django.db import transaction
from django.utils import timezone

from audit.services import log_action
from common.errors import Conflict, Forbidden, NotFound, PreconditionFailed, ValidationFailed
from common.guards import guarded_update
from patients.models import Patient
from patients.services.identifiers import next_visit_uid
from visits.enums import VisitStatus as S
from visits.models import Visit, VisitTransition

logger = logging.getLogger(__name__)

ALLOWED = {
    S.WAITING_FOR_TRIAGE:      {S.TRIAGED, S.CANCELLED},
    S.TRIAGED:                 {S.ASSIGNED, S.CANCELLED},
    S.ASSIGNED:                {S.WAITING_FOR_DOCTOR, S.IN_PROGRESS, S.CANCELLED},
    S.WAITING_FOR_DOCTOR:      {S.IN_PROGRESS, S.COMPLETED, S.CANCELLED},
    S.IN_PROGRESS:             {S.AWAITING_RESULTS_REVIEW, S.COMPLETED, S.CANCELLED},
    S.AWAITING_RESULTS_REVIEW: {S.COMPLETED, S.CANCELLED},
}

COMPLETABLE = (S.WAITING_FOR_DOCTOR, S.IN_PROGRESS, S.AWAITING_RESULTS_REVIEW)


def transition(visit_id, *, to, expected, actor=None, reason: str = "", strict: bool = True, **fields):
    """
    Move a visit from one of ``expected`` to ``to``.

    strict=True raises Conflict when the visit is no longer in an expected
    state; strict=False returns None instead (used by follow-up moves that
    only apply if nothing else has moved the visit yet).
    """
    expected = tuple(expected)
    for src in expected:
        if to not in ALLOWED.get(src, ()):
            raise ValueError(f"visit transition {src} -> {to} is not allowed")

    with transaction.atomic():
        current = Visit.objects.filter(pk=visit_id).values_list("status", flat=True).first()
        if current is None:
            raise NotFound("Visit not found.")
        if current not in expected:
            if not strict:
                return None
            logger.warning("visit %s: %s -> %s rejected, status is %s", visit_id, expected, to, current)
            raise Conflict(
                f"Visit is {current}; this step needs {' or '.join(expected)}.",
                errors={"current": current, "expected": list(expected)},
            )

        if strict:
            guarded_update(Visit, visit_id, expected=[current], label="Visit", status=to, **fields)
        else:
            fields.setdefault("updated_at", timezone.now())
            if not Visit.objects.filter(pk=visit_id, status=current).update(status=to, **fields):
                return None

        VisitTransition.objects.create(
            visit_id=visit_id, from_status=current, to_status=to, actor=actor, reason=reason[:255],
        )

    logger.info("visit %s: %s -> %s (%s)", visit_id, current, to, reason or "-")
    return Visit.objects.get(pk=visit_id)


def open_visit(*, patient: Patient, actor=None, is_emergency: bool = False, notes: str = "") -> Visit:
    """
    Open a visit for a registered patient. A patient has at most one
    non-terminal visit at a time.
    """
    with transaction.atomic():
        # serialize concurrent opens for the same patient
        Patient.objects.select_for_update().filter(pk=patient.pk).first()

        existing = Visit.objects.filter(patient=patient).exclude(status__in=S.terminal()).first()
        if existing:
            raise Conflict(
                f"Patient already has an active visit ({existing.visit_uid}).",
                errors={"active_visit": existing.visit_uid, "status": existing.status},
            )

        visit = Visit.objects.create(
            visit_uid=next_visit_uid(),
            patient=patient,
            status=S.WAITING_FOR_TRIAGE,
            is_emergency=is_emergency,
            notes=notes,
            created_by=actor,
        )
        VisitTransition.objects.create(visit=visit, from_status="", to_status=S.WAITING_FOR_TRIAGE,
                                       actor=actor, reason="emergency arrival" if is_emergency else "opened")

    logger.info("visit %s opened for %s (emergency=%s)", visit.visit_uid, patient.pk, is_emergency)
    return visit


def lock_visit(visit_id) -> Visit:
    visit = Visit.objects.select_for_update().filter(pk=visit_id).select_related("patient").first()
    if visit is None:
        raise NotFound("Visit not found.")
    return visit


def _check_can_close(visit: Visit, actor):
    from assignments.enums import AssignmentKind, AssignmentStatus
    from assignments.models import Assignment

    if actor is None:
        return
    clinician_ids = set(
        Assignment.objects.filter(visit=visit, kind=AssignmentKind.DOCTOR)
        .exclude(status=AssignmentStatus.CANCELLED)
        .values_list("staff_id", flat=True)
    )
    if clinician_ids and actor.id not in clinician_ids:
        raise Forbidden("Only the assigned clinician can complete this visit.")


def complete_visit(*, visit_id, actor=None, diagnosis: str = "", notes: str = "") -> Visit:
    """
    Close the visit. Needs every order and nurse service to be finished
    (completed or cancelled). COMPLETED is terminal.
    """
    from appointments.enums import ApptStatus
    from appointments.services import close_for_visit
    from assignments.enums import AssignmentKind, AssignmentStatus
    from assignments.models import Assignment
    from orders.enums import OrderStatus
    from orders.models import Order

    with transaction.atomic():
        visit = lock_visit(visit_id)
        if visit.status not in COMPLETABLE:
            raise PreconditionFailed(
                f"Visit is {visit.status}; it can be completed from {', '.join(COMPLETABLE)}.",
                errors={"current": visit.status},
            )
        _check_can_close(visit, actor)

        pending_orders = Order.objects.filter(visit=visit, status__in=OrderStatus.pending()).count()
        pending_services = Assignment.objects.filter(
            visit=visit, kind=AssignmentKind.NURSE_SERVICE, status__in=AssignmentStatus.open()
        ).count()
        if pending_orders or pending_services:
            raise PreconditionFailed(
                "Visit still has unfinished orders or nurse services.",
                errors={"pending_orders": pending_orders, "pending_nurse_services": pending_services},
            )

        now = timezone.now()
        visit = transition(
            visit.pk, to=S.COMPLETED, expected=COMPLETABLE, actor=actor, reason="completed",
            completed_at=now, completed_by=actor, diagnosis=diagnosis or visit.diagnosis,
            completion_notes=notes,
        )
        Assignment.objects.filter(visit=visit, kind=AssignmentKind.DOCTOR, status__in=AssignmentStatus.open()).update(
            status=AssignmentStatus.COMPLETED, completed_at=now, updated_at=now,
        )
        close_for_visit(visit=visit, status=ApptStatus.COMPLETED)
        log_action(obj=visit, title="Visit completed", actor=actor, extra={"diagnosis": diagnosis[:200]})
    return visit


def cancel_visit(*, visit_id, actor=None, reason: str = "") -> Visit:
    """
    Cancel instead of delete: the visit, its history and its settled
    billings stay; open billings, orders and assignments are cancelled.
    """
    from appointments.enums import ApptStatus
    from appointments.services import close_for_visit
    from assignments.enums import AssignmentStatus
    from assignments.models import Assignment
    from billing.services.invoices import cancel_unsettled_for_visit
    from orders.enums import OrderStatus
    from orders.models import Order

    reason = (reason or "").strip()
    if not reason:
        raise ValidationFailed("A cancellation reason is required.", errors={"reason": "required"})

    with transaction.atomic():
        now = timezone.now()
        visit = transition(
            visit_id, to=S.CANCELLED, expected=S.active(), actor=actor, reason=reason,
            cancelled_at=now, cancel_reason=reason[:255],
        )
        billings = cancel_unsettled_for_visit(visit=visit, reason=reason)
        orders = Order.objects.filter(visit=visit, status__in=OrderStatus.pending()).update(
            status=OrderStatus.CANCELLED, updated_at=now,
        )
        assignments = Assignment.objects.filter(visit=visit, status__in=AssignmentStatus.open()).update(
            status=AssignmentStatus.CANCELLED, updated_at=now,
        )
        close_for_visit(visit=visit, status=ApptStatus.CANCELLED)
        log_action(obj=visit, title="Visit cancelled", actor=actor,
                   extra={"reason": reason, "billings": billings, "orders": orders, "assignments": assignments})
    return visit


def mark_results_ready(*, visit_id, actor=None):
    """IN_PROGRESS -> AWAITING_RESULTS_REVIEW once nothing is outstanding; no-op otherwise."""
    return transition(visit_id, to=S.AWAITING_RESULTS_REVIEW, expected=[S.IN_PROGRESS],
                      actor=actor, reason="all results in", strict=False)
