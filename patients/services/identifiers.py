from django.db import transaction
from django.utils import timezone

from patients.models import IdentifierSequence


@transaction.atomic
def next_in_sequence(key: str) -> int:
    IdentifierSequence.objects.get_or_create(key=key)
    seq = IdentifierSequence.objects.select_for_update().get(key=key)
    seq.last_value = (seq.last_value or 0) + 1
    seq.save(update_fields=["last_value"])
    return seq.last_value


def next_patient_id(*, emergency: bool = False, year: int | None = None) -> str:
    year = year or timezone.localdate().year
    if emergency:
        n = next_in_sequence(f"PAT-{year}-TEMP")
        return f"PAT-{year}-TEMP{n:02d}"
    n = next_in_sequence(f"PAT-{year}")
    return f"PAT-{year}-{n:02d}"


def next_visit_uid(*, day=None) -> str:
    day = day or timezone.localdate()
    stamp = day.strftime("%Y%m%d")
    n = next_in_sequence(f"VISIT-{stamp}")
    return f"VISIT-{stamp}-{n:04d}"
