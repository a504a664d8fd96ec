import logging

from django.contrib.auth import get_user_model
from django.db import transaction
from django.utils import timezone

from accounts.enums import UserRole
from audit.services import log_action
from billing.enums import BillingKind, ServiceCategory
from billing.models import Service
from billing.services.invoices import create_billing
from billing.services.pricing import consultation_service
from common.errors import Conflict, Forbidden, NotFound, PreconditionFailed, ValidationFailed, WorkflowError
from common.guards import get_or_404, guarded_update
from visits.enums import VisitStatus
from visits.models import Visit
from visits.services.lifecycle import lock_visit, transition
from .enums import AssignmentKind, AssignmentStatus
from .models import Assignment

logger = logging.getLogger(__name__)
User = get_user_model()


def _available_staff(user_id, roles, label: str):
    user = User.objects.filter(pk=user_id, is_active=True).first()
    if user is None:
        raise NotFound(f"{label} not found.")
    if user.role not in roles:
        raise ValidationFailed(f"{user.fullname} is not a {label.lower()}.", errors={"role": user.role})
    if not user.is_available:
        raise PreconditionFailed(f"{user.fullname} is not available.")
    return user


def doctor_assignment(visit) -> Assignment | None:
    return (
        Assignment.objects.filter(visit=visit, kind=AssignmentKind.DOCTOR)
        .exclude(status=AssignmentStatus.CANCELLED)
        .select_related("staff")
        .first()
    )


# visits a doctor can still be handed to, as long as none is assigned yet
DOCTOR_ASSIGNABLE = (VisitStatus.TRIAGED, VisitStatus.ASSIGNED, VisitStatus.IN_PROGRESS)


def assign_doctor(*, visit_id, doctor_id, actor=None, notes: str = "") -> Assignment:
    """
    Hand a triaged visit to a doctor (or dentist).

    Creates the consultation billing, priced at the doctor's own fee when
    set, else the catalog consultation price, and moves the visit to
    ASSIGNED. Emergency visits bill later, so they go straight on to
    WAITING_FOR_DOCTOR.

    A visit that nurse services already moved to ASSIGNED or IN_PROGRESS
    can still get its doctor; the status is then left where it is.
    """
    doctor = _available_staff(doctor_id, UserRole.clinician_roles(), "Doctor")
    service = consultation_service()
    if service is None:
        raise PreconditionFailed("No active consultation service in the catalog.")

    with transaction.atomic():
        visit = lock_visit(visit_id)
        if visit.status not in DOCTOR_ASSIGNABLE:
            raise Conflict(f"Visit is {visit.status}; a doctor can only be assigned after triage.",
                           errors={"current": visit.status})
        current = doctor_assignment(visit)
        if current is not None:
            raise Conflict(f"Visit is already assigned to {current.staff.fullname}.",
                           errors={"assignment": current.id, "doctor": current.staff_id})

        billing, lines = create_billing(
            patient=visit.patient, visit=visit, kind=BillingKind.CONSULTATION, actor=actor,
            emergency=visit.is_emergency,
            items=[{"service": service, "doctor": doctor, "description": f"Consultation - {doctor.fullname}"}],
        )
        assignment = Assignment.objects.create(
            visit=visit,
            kind=AssignmentKind.DOCTOR,
            staff=doctor,
            service=service,
            billing=billing,
            billing_line=lines[0],
            status=AssignmentStatus.READY if visit.is_emergency else AssignmentStatus.PENDING_PAYMENT,
            assigned_by=actor,
            notes=notes,
        )
        if visit.status == VisitStatus.TRIAGED:
            transition(visit.pk, to=VisitStatus.ASSIGNED, expected=[VisitStatus.TRIAGED], actor=actor,
                       reason=f"assigned to {doctor.fullname}")
        if visit.is_emergency and visit.status in (VisitStatus.TRIAGED, VisitStatus.ASSIGNED):
            transition(visit.pk, to=VisitStatus.WAITING_FOR_DOCTOR, expected=[VisitStatus.ASSIGNED],
                       actor=actor, reason="emergency: billing deferred")
        log_action(obj=visit, title="Doctor assigned", actor=actor,
                   extra={"doctor": doctor.id, "billing": billing.id, "amount": str(billing.total_amount)})

    logger.info("visit %s assigned to doctor %s, consultation billing %s", visit.visit_uid, doctor.id, billing.id)
    return assignment


def start_consultation(*, visit_id, actor) -> Visit:
    """
    WAITING_FOR_DOCTOR -> IN_PROGRESS, by the assigned clinician only.

    On a visit the nurse path already put IN_PROGRESS only the assignment
    becomes ACTIVE.
    """
    with transaction.atomic():
        visit = lock_visit(visit_id)
        assignment = doctor_assignment(visit)
        if assignment is None:
            raise PreconditionFailed("Visit has no assigned doctor.")
        if assignment.staff_id != getattr(actor, "id", None):
            raise Forbidden("Only the assigned doctor can start this consultation.")
        if visit.status != VisitStatus.IN_PROGRESS:
            visit = transition(visit.pk, to=VisitStatus.IN_PROGRESS, expected=[VisitStatus.WAITING_FOR_DOCTOR],
                               actor=actor, reason="consultation started")
        guarded_update(Assignment, assignment.pk, expected=[AssignmentStatus.READY], label="Assignment",
                       status=AssignmentStatus.ACTIVE, started_at=timezone.now())
    return visit


def _assign_one_nurse_service(*, visit_id, service_id, nurse, actor) -> Assignment:
    service = Service.objects.filter(pk=service_id, is_active=True).first()
    if service is None:
        raise NotFound(f"Service {service_id} not found.")
    if service.category != ServiceCategory.NURSE:
        raise ValidationFailed(f"{service.code} is not a nurse service.", errors={"category": service.category})

    visit = lock_visit(visit_id)
    if visit.status not in VisitStatus.post_triage():
        raise PreconditionFailed(f"Visit is {visit.status}; nurse services need a triaged, open visit.")
    if Assignment.objects.filter(visit=visit, service=service, status__in=AssignmentStatus.open()).exists():
        raise ValidationFailed(f"{service.name} is already assigned on this visit.")

    billing, lines = create_billing(
        patient=visit.patient, visit=visit, kind=BillingKind.NURSE_SERVICE, actor=actor,
        emergency=visit.is_emergency, items=[{"service": service}],
    )
    assignment = Assignment.objects.create(
        visit=visit,
        kind=AssignmentKind.NURSE_SERVICE,
        staff=nurse,
        service=service,
        billing=billing,
        billing_line=lines[0],
        status=AssignmentStatus.READY if visit.is_emergency else AssignmentStatus.PENDING_PAYMENT,
        assigned_by=actor,
    )
    if visit.status == VisitStatus.TRIAGED:
        transition(visit.pk, to=VisitStatus.ASSIGNED, expected=[VisitStatus.TRIAGED], actor=actor,
                   reason="nurse services assigned")
        if visit.is_emergency:
            transition(visit.pk, to=VisitStatus.IN_PROGRESS, expected=[VisitStatus.ASSIGNED], actor=actor,
                       reason="emergency: billing deferred")
    return assignment


def assign_nurse_services(*, visit_id, service_ids, actor, nurse_id=None) -> list[dict]:
    """
    Best-effort batch. Each service is assigned and billed in its own
    transaction; one failing item does not undo the others. Returns one
    result dict per requested service, in request order.
    """
    if not service_ids:
        raise ValidationFailed("Pick at least one nurse service.", errors={"services": "empty"})
    nurse = _available_staff(nurse_id or getattr(actor, "id", None), {UserRole.NURSE}, "Nurse")
    get_or_404(Visit.objects, "Visit", pk=visit_id)

    results = []
    for sid in service_ids:
        try:
            with transaction.atomic():
                a = _assign_one_nurse_service(visit_id=visit_id, service_id=sid, nurse=nurse, actor=actor)
        except WorkflowError as exc:
            logger.warning("visit %s: nurse service %s not assigned: %s", visit_id, sid, exc.detail)
            results.append({"service": sid, "ok": False, "kind": exc.kind, "error": str(exc.detail)})
            continue
        results.append({"service": sid, "ok": True, "assignment": a.id, "billing": a.billing_id})

    ok = sum(1 for r in results if r["ok"])
    logger.info("visit %s: %s/%s nurse services assigned to %s", visit_id, ok, len(results), nurse.id)
    return results


def complete_nurse_service(*, assignment_id, actor, notes: str = "") -> Assignment:
    now = timezone.now()
    with transaction.atomic():
        guarded_update(
            Assignment, assignment_id,
            expected=[AssignmentStatus.READY, AssignmentStatus.ACTIVE],
            extra_filters={"kind": AssignmentKind.NURSE_SERVICE},
            label="Nurse service",
            status=AssignmentStatus.COMPLETED,
            completed_at=now,
            completed_by=actor,
        )
        assignment = Assignment.objects.select_related("visit", "service").get(pk=assignment_id)
        if notes:
            Assignment.objects.filter(pk=assignment_id).update(notes=notes)
        log_action(obj=assignment.visit, title=f"Nurse service done: {assignment.service.name}", actor=actor,
                   extra={"assignment": assignment.id})
    return Assignment.objects.get(pk=assignment_id)
