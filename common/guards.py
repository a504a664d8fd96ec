import logging

from django.utils import timezone

from .errors import Conflict, NotFound

logger = logging.getLogger(__name__)


def guarded_update(model, pk, *, expected, field: str = "status", extra_filters: dict | None = None,
                   label: str | None = None, **changes) -> int:
    """
    Single-statement conditional write:

        UPDATE <model> SET ... WHERE pk = <pk> AND <field> IN <expected>

    Exactly one row must change. Otherwise the row is gone (NotFound) or some
    other request moved it first (Conflict).
    """
    filters = {"pk": pk, f"{field}__in": list(expected)}
    if extra_filters:
        filters.update(extra_filters)
    if "updated_at" in {f.name for f in model._meta.concrete_fields} and "updated_at" not in changes:
        changes["updated_at"] = timezone.now()

    updated = model.objects.filter(**filters).update(**changes)
    if updated == 1:
        return updated

    name = label or model._meta.verbose_name.capitalize()
    if not model.objects.filter(pk=pk).exists():
        raise NotFound(f"{name} not found.")
    current = model.objects.filter(pk=pk).values_list(field, flat=True).first()
    logger.warning("guarded update on %s#%s rejected: %s=%s, expected %s",
                   model._meta.label, pk, field, current, list(expected))
    raise Conflict(
        f"{name} is {current}; expected one of {', '.join(str(e) for e in expected)}.",
        errors={"current": current, "expected": [str(e) for e in expected]},
    )


def get_or_404(queryset, label: str, **lookup):
    obj = queryset.filter(**lookup).first()
    if obj is None:
        raise NotFound(f"{label} not found.")
    return obj
