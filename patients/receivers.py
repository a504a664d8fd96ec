import logging

from django.conf import settings
from django.dispatch import receiver

from billing.signals import billing_settled
from .services.registration import activate_card

logger = logging.getLogger(__name__)


@receiver(billing_settled, dispatch_uid="patients.card_activation")
def activate_card_on_payment(sender, billing, **kwargs):
    codes = {settings.CARD_REGISTRATION_SERVICE_CODE, settings.CARD_ACTIVATION_SERVICE_CODE}
    if billing.lines.filter(service__code__in=codes).exists():
        activate_card(patient_id=billing.patient_id)
        logger.info("card activated for patient %s via billing %s", billing.patient_id, billing.pk)
