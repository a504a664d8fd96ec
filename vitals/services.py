import logging

from django.db import transaction
from django.utils import timezone

from common.errors import Conflict, ValidationFailed
from visits.enums import VisitStatus
from visits.services.lifecycle import lock_visit, transition
from .enums import VitalKind
from .models import VitalSign

logger = logging.getLogger(__name__)

MEASUREMENTS = ("systolic", "diastolic", "heart_rate", "temp_c", "resp_rate", "spo2",
                "pain_score", "blood_sugar", "weight_kg", "height_cm")


def _require_measurement(data: dict):
    if not any(data.get(k) is not None for k in MEASUREMENTS):
        raise ValidationFailed("Record at least one measurement.", errors={"vitals": "empty"})


def record_triage_vitals(*, visit_id, data: dict, actor=None) -> VitalSign:
    """
    Triage: store the first vitals set for the visit and move it from
    WAITING_FOR_TRIAGE to TRIAGED in one transaction.
    """
    _require_measurement(data)
    with transaction.atomic():
        visit = lock_visit(visit_id)
        if visit.status != VisitStatus.WAITING_FOR_TRIAGE:
            raise Conflict(
                f"Visit is {visit.status}; triage vitals are only taken while waiting for triage.",
                errors={"current": visit.status},
            )
        data.setdefault("measured_at", timezone.now())
        vital = VitalSign.objects.create(
            patient_id=visit.patient_id, visit=visit, kind=VitalKind.TRIAGE, recorded_by=actor, **data,
        )
        transition(visit.pk, to=VisitStatus.TRIAGED, expected=[VisitStatus.WAITING_FOR_TRIAGE],
                   actor=actor, reason=f"triage vitals ({vital.overall})")
    logger.info("triage vitals %s recorded for visit %s overall=%s", vital.id, visit.visit_uid, vital.overall)
    return vital


def record_continuous_vitals(*, patient, data: dict, actor=None, visit=None) -> VitalSign:
    """Monitoring measurements; no effect on the visit status."""
    _require_measurement(data)
    if visit is not None and visit.patient_id != patient.pk:
        raise ValidationFailed("Visit belongs to a different patient.", errors={"visit": visit.pk})
    data.setdefault("measured_at", timezone.now())
    vital = VitalSign.objects.create(patient=patient, visit=visit, kind=VitalKind.CONTINUOUS, recorded_by=actor, **data)
    logger.info("monitoring vitals %s recorded for patient %s overall=%s", vital.id, patient.pk, vital.overall)
    return vital
