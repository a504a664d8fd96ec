import logging

from django.dispatch import receiver
from django.utils import timezone

from billing.signals import billing_settled
from .enums import OrderStatus
from .models import Order

logger = logging.getLogger(__name__)


@receiver(billing_settled, dispatch_uid="orders.unlock_on_payment")
def unlock_on_payment(sender, billing, **kwargs):
    n = Order.objects.filter(billing_line__billing=billing, status=OrderStatus.UNPAID).update(
        status=OrderStatus.PAID, updated_at=timezone.now(),
    )
    if n:
        logger.info("billing %s: %s order(s) paid", billing.pk, n)
