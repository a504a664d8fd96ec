import logging
from datetime import timedelta

from django.conf import settings
from django.db import transaction
from django.utils import timezone

from audit.services import log_action
from billing.enums import BillingKind, BillingStatus
from billing.models import Billing
from billing.models import Service
from billing.services.invoices import create_billing
from common.errors import Conflict, NotFound, PreconditionFailed, ValidationFailed
from patients.enums import CardStatus, PatientStatus, PatientType
from patients.models import Patient
from visits.services.lifecycle import open_visit
from .identifiers import next_patient_id

logger = logging.getLogger(__name__)


def find_duplicate(*, first_name: str, last_name: str = "", dob=None, mobile: str = "") -> Patient | None:
    active = Patient.objects.filter(status=PatientStatus.ACTIVE)
    if mobile:
        hit = active.filter(mobile=mobile).first()
        if hit:
            return hit
    if dob and first_name:
        return active.filter(first_name__iexact=first_name, last_name__iexact=last_name or "", dob=dob).first()
    return None


def register_patient(*, data: dict, actor=None, emergency: bool = False, with_visit: bool = True):
    """
    Register a patient and (by default) open their first visit.

    Regular registrations are rejected when an active patient with the same
    mobile, or the same name and date of birth, already exists. Emergency
    arrivals skip the duplicate check and get a TEMP id; their visit bills
    later. Returns ``(patient, visit, card_billing)``.
    """
    data = dict(data)
    if not (data.get("first_name") or "").strip():
        raise ValidationFailed("first_name is required.", errors={"first_name": "required"})
    if not emergency and not data.get("dob") and not data.get("mobile"):
        raise ValidationFailed("Provide a date of birth or a mobile number.",
                               errors={"dob": "dob or mobile required", "mobile": "dob or mobile required"})

    with transaction.atomic():
        if not emergency:
            dup = find_duplicate(first_name=data["first_name"], last_name=data.get("last_name", ""),
                                 dob=data.get("dob"), mobile=data.get("mobile", ""))
            if dup:
                raise Conflict(f"Patient already registered as {dup.id}.", errors={"existing_patient": dup.id})

        patient = Patient.objects.create(
            id=next_patient_id(emergency=emergency),
            patient_type=PatientType.EMERGENCY if emergency else PatientType.REGULAR,
            registered_by=actor,
            **data,
        )

        visit = open_visit(patient=patient, actor=actor, is_emergency=emergency) if with_visit else None

        card_billing = None
        card_service = Service.objects.filter(code=settings.CARD_REGISTRATION_SERVICE_CODE, is_active=True).first()
        if card_service and not emergency:
            card_billing, _ = create_billing(
                patient=patient, visit=visit, kind=BillingKind.CARD,
                items=[{"service": card_service}], actor=actor,
            )

        log_action(obj=patient, title="Patient registered", actor=actor,
                   extra={"emergency": emergency, "visit": getattr(visit, "visit_uid", None)})

    logger.info("patient %s registered (emergency=%s) by %s", patient.id, emergency, getattr(actor, "id", None))
    return patient, visit, card_billing


def activate_card(*, patient_id: str) -> int:
    now = timezone.now()
    return Patient.objects.filter(pk=patient_id).update(
        card_status=CardStatus.ACTIVE,
        card_activated_at=now,
        card_expires_at=now + timedelta(days=settings.CARD_VALIDITY_DAYS),
        updated_at=now,
    )


def expire_cards(*, now=None) -> int:
    now = now or timezone.now()
    return Patient.objects.filter(card_status=CardStatus.ACTIVE, card_expires_at__lt=now).update(
        card_status=CardStatus.EXPIRED, updated_at=now,
    )


def request_card_activation(*, patient_id: str, actor=None, notes: str = ""):
    """
    Bill the card activation (renewal) fee for a patient whose card is
    inactive or expired. Paying it activates the card.
    """
    service = Service.objects.filter(code=settings.CARD_ACTIVATION_SERVICE_CODE, is_active=True).first()
    if service is None:
        raise PreconditionFailed("No active card activation service in the catalog.")

    with transaction.atomic():
        patient = Patient.objects.select_for_update().filter(pk=patient_id).first()
        if patient is None:
            raise NotFound("Patient not found.")
        if patient.effective_card_status == CardStatus.ACTIVE:
            raise Conflict("Card is already active.", errors={"card_expires_at": str(patient.card_expires_at)})
        open_bill = Billing.objects.filter(
            patient=patient, kind=BillingKind.CARD, status__in=BillingStatus.unsettled()
        ).first()
        if open_bill:
            raise Conflict("A card billing is already waiting for payment.", errors={"billing": open_bill.id})

        billing, _ = create_billing(
            patient=patient, kind=BillingKind.CARD, items=[{"service": service}], actor=actor,
            notes=notes or "Patient card activation/renewal fee",
        )
        log_action(obj=patient, title="Card activation billed", actor=actor, extra={"billing": billing.id})

    logger.info("patient %s: card activation billing %s", patient_id, billing.id)
    return billing


def deactivate_card(*, patient_id: str, actor=None) -> Patient:
    now = timezone.now()
    with transaction.atomic():
        if not Patient.objects.filter(pk=patient_id).update(
            card_status=CardStatus.INACTIVE, card_expires_at=now, updated_at=now,
        ):
            raise NotFound("Patient not found.")
        patient = Patient.objects.get(pk=patient_id)
        log_action(obj=patient, title="Card deactivated", actor=actor)
    return patient
