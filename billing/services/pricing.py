from decimal import Decimal

from django.conf import settings

from billing.enums import ServiceCategory
from billing.models import Service


def resolve_price(*, service: Service, doctor=None) -> Decimal:
    """Resolve the unit price for a service.

    Priority:
    - the doctor's own consultation fee (consultation services only)
    - service.price
    """
    if doctor is not None and service.category == ServiceCategory.CONSULTATION:
        fee = getattr(doctor, "consultation_fee", None)
        if fee is not None:
            return fee
    return service.price


def consultation_service() -> Service | None:
    return (
        Service.objects.filter(code=settings.CONSULTATION_SERVICE_CODE, is_active=True).first()
        or Service.objects.filter(category=ServiceCategory.CONSULTATION, is_active=True).order_by("id").first()
    )
