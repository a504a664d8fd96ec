"""
Appointment booking.

A clinician's bookings must sit at least ``SLOT_GAP`` apart. Sending an
appointment to the doctor opens a regular visit for the patient, which then
follows the normal triage -> assignment pathway.
"""
import logging
from datetime import timedelta

from django.contrib.auth import get_user_model
from django.db import transaction
from django.utils import timezone

from accounts.enums import UserRole
from audit.services import log_action
from common.errors import Conflict, NotFound, PreconditionFailed, ValidationFailed
from common.guards import get_or_404, guarded_update
from patients.enums import CardStatus
from visits.services.lifecycle import open_visit
from .enums import ApptStatus, ApptType
from .models import Appointment

logger = logging.getLogger(__name__)
User = get_user_model()

SLOT_GAP = timedelta(minutes=25)

# manual status changes; IN_PROGRESS and COMPLETED follow the visit
MANUAL_MOVES = {
    ApptStatus.SCHEDULED: {ApptStatus.ARRIVED, ApptStatus.CANCELLED, ApptStatus.NO_SHOW},
    ApptStatus.ARRIVED:   {ApptStatus.CANCELLED, ApptStatus.NO_SHOW},
}


def _clinician(doctor_id):
    doctor = User.objects.filter(pk=doctor_id, is_active=True).first()
    if doctor is None:
        raise NotFound("Doctor not found.")
    if doctor.role not in UserRole.clinician_roles():
        raise ValidationFailed(f"{doctor.fullname} is not a doctor.", errors={"role": doctor.role})
    return doctor


def _require_active_card(patient):
    card = patient.effective_card_status
    if card != CardStatus.ACTIVE:
        raise PreconditionFailed(f"Patient card is {card}; it must be ACTIVE.", errors={"card_status": card})


def _check_slot(doctor, start_at, *, exclude_id=None):
    q = Appointment.objects.filter(
        doctor=doctor,
        start_at__gt=start_at - SLOT_GAP,
        start_at__lt=start_at + SLOT_GAP,
    ).exclude(status__in=[ApptStatus.CANCELLED, ApptStatus.NO_SHOW])
    if exclude_id:
        q = q.exclude(pk=exclude_id)
    clash = q.order_by("start_at").first()
    if clash:
        raise Conflict(
            f"{doctor.fullname} already has an appointment at {clash.start_at:%Y-%m-%d %H:%M}; "
            f"book at least {int(SLOT_GAP.total_seconds() // 60)} minutes apart.",
            errors={"conflicting_appointment": clash.id},
        )


def book_appointment(*, patient, doctor_id, start_at, actor=None, appt_type=ApptType.CONSULTATION,
                     duration_minutes: int = 25, reason: str = "", notes: str = "") -> Appointment:
    _require_active_card(patient)
    doctor = _clinician(doctor_id)
    with transaction.atomic():
        # serialize bookings per doctor
        User.objects.select_for_update().filter(pk=doctor.pk).first()
        _check_slot(doctor, start_at)
        appt = Appointment.objects.create(
            patient=patient, doctor=doctor, created_by=actor, appt_type=appt_type,
            start_at=start_at, duration_minutes=duration_minutes, reason=reason, notes=notes,
        )
        log_action(obj=appt, title="Appointment booked", actor=actor,
                   extra={"patient": patient.pk, "doctor": doctor.id, "start_at": start_at.isoformat()})
    logger.info("appointment %s booked: patient %s with %s at %s", appt.id, patient.pk, doctor.id, start_at)
    return appt


def update_appointment(*, appointment_id, actor=None, status=None, start_at=None, notes=None) -> Appointment:
    """Reschedule, annotate or move a not-yet-sent appointment along ``MANUAL_MOVES``."""
    with transaction.atomic():
        appt = Appointment.objects.select_for_update().filter(pk=appointment_id).select_related("doctor").first()
        if appt is None:
            raise NotFound("Appointment not found.")
        if appt.status not in MANUAL_MOVES:
            raise Conflict(f"Appointment is {appt.status} and can no longer be changed.",
                           errors={"current": appt.status})

        changes = {}
        if notes is not None:
            changes["notes"] = notes
        if start_at is not None and start_at != appt.start_at:
            User.objects.select_for_update().filter(pk=appt.doctor_id).first()
            _check_slot(appt.doctor, start_at, exclude_id=appt.pk)
            changes["start_at"] = start_at
        if status and status != appt.status:
            if status not in MANUAL_MOVES[appt.status]:
                raise ValidationFailed(f"Cannot move an appointment from {appt.status} to {status}.",
                                       errors={"status": status, "current": appt.status})
            changes["status"] = status

        if changes:
            guarded_update(Appointment, appt.pk, expected=[appt.status], label="Appointment", **changes)
            log_action(obj=appt, title="Appointment updated", actor=actor,
                       extra={k: str(v) for k, v in changes.items()})
    return Appointment.objects.get(pk=appointment_id)


def delete_appointment(*, appointment_id, actor=None):
    appt = get_or_404(Appointment.objects, "Appointment", pk=appointment_id)
    if appt.visit_id:
        raise Conflict("This appointment already has a visit; cancel the visit instead.",
                       errors={"visit": appt.visit_id})
    log_action(obj=appt, title="Appointment deleted", actor=actor, extra={"patient": appt.patient_id})
    appt.delete()


def send_to_doctor(*, appointment_id, actor=None):
    """
    Patient is here: open their visit and mark the appointment IN_PROGRESS.
    The visit still goes through triage; the booked doctor is noted on it.
    Returns ``(appointment, visit)``.
    """
    with transaction.atomic():
        appt = (Appointment.objects.select_for_update().filter(pk=appointment_id)
                .select_related("patient", "doctor").first())
        if appt is None:
            raise NotFound("Appointment not found.")
        if appt.visit_id:
            raise Conflict("Appointment was already sent to the doctor.", errors={"visit": appt.visit_id})
        if appt.status not in ApptStatus.sendable():
            raise Conflict(f"Appointment is {appt.status}.", errors={"current": appt.status})
        _require_active_card(appt.patient)

        visit = open_visit(
            patient=appt.patient, actor=actor,
            notes=f"Appointment #{appt.id} with {appt.doctor.fullname}: {appt.reason or appt.get_appt_type_display()}",
        )
        guarded_update(Appointment, appt.pk, expected=ApptStatus.sendable(), label="Appointment",
                       status=ApptStatus.IN_PROGRESS, visit=visit)
        log_action(obj=appt, title="Appointment sent to doctor", actor=actor, extra={"visit": visit.visit_uid})

    logger.info("appointment %s -> visit %s", appointment_id, visit.visit_uid)
    return Appointment.objects.get(pk=appointment_id), visit


def close_for_visit(*, visit, status) -> int:
    """Follow the linked visit to COMPLETED or CANCELLED."""
    return Appointment.objects.filter(visit=visit, status=ApptStatus.IN_PROGRESS).update(
        status=status, updated_at=timezone.now(),
    )
