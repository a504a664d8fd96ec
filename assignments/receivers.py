import logging

from django.dispatch import receiver
from django.utils import timezone

from billing.enums import BillingKind
from billing.signals import billing_settled
from visits.enums import VisitStatus
from visits.services.lifecycle import transition
from .enums import AssignmentKind, AssignmentStatus
from .models import Assignment

logger = logging.getLogger(__name__)


@receiver(billing_settled, dispatch_uid="assignments.unlock_on_payment")
def unlock_on_payment(sender, billing, actor=None, **kwargs):
    n = Assignment.objects.filter(billing=billing, status=AssignmentStatus.PENDING_PAYMENT).update(
        status=AssignmentStatus.READY, updated_at=timezone.now(),
    )
    if n:
        logger.info("billing %s: %s assignment(s) ready", billing.pk, n)
    if not billing.visit_id:
        return

    if billing.kind == BillingKind.CONSULTATION:
        transition(billing.visit_id, to=VisitStatus.WAITING_FOR_DOCTOR, expected=[VisitStatus.ASSIGNED],
                   actor=actor, reason="consultation paid", strict=False)
    elif billing.kind == BillingKind.NURSE_SERVICE:
        has_doctor = Assignment.objects.filter(visit_id=billing.visit_id, kind=AssignmentKind.DOCTOR).exclude(
            status=AssignmentStatus.CANCELLED).exists()
        if not has_doctor:
            transition(billing.visit_id, to=VisitStatus.IN_PROGRESS, expected=[VisitStatus.ASSIGNED],
                       actor=actor, reason="nurse service paid", strict=False)
