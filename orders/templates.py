"""
Result template validation.

A template is a list of field definitions::

    {"name": "hb", "label": "Hemoglobin", "type": "number",
     "min": 12, "max": 17.5, "unit": "g/dL", "normalRange": "12-17.5",
     "required": true}

Submitted values are checked against it. Problems come back in two
grades: *errors* block the submission outright, *warnings* (numbers
outside min/max) only need the caller to confirm.

Nothing here touches the database.
"""
from decimal import Decimal, InvalidOperation

from common.errors import ConfirmationRequired, ValidationFailed
from .enums import FieldType

NO_TEMPLATE_FIELD = "findings"


def _blank(value) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _number(value):
    if isinstance(value, bool):
        return None
    try:
        n = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return None
    return n if n.is_finite() else None


def template_problems(fields) -> list[str]:
    """Structural problems in a template definition; empty list means usable."""
    if not isinstance(fields, list) or not fields:
        return ["Template needs a non-empty list of fields."]
    problems, seen = [], set()
    for i, f in enumerate(fields):
        if not isinstance(f, dict):
            problems.append(f"Field {i} is not an object.")
            continue
        name = f.get("name")
        if not name or not isinstance(name, str):
            problems.append(f"Field {i} has no name.")
            continue
        if name in seen:
            problems.append(f"Field {name!r} appears twice.")
        seen.add(name)
        ftype = f.get("type")
        if ftype not in FieldType.values:
            problems.append(f"Field {name!r} has unknown type {ftype!r}.")
            continue
        if ftype == FieldType.SELECT and not (isinstance(f.get("options"), list) and f["options"]):
            problems.append(f"Select field {name!r} needs options.")
        if ftype == FieldType.NUMBER:
            lo, hi = f.get("min"), f.get("max")
            if (lo is not None and _number(lo) is None) or (hi is not None and _number(hi) is None):
                problems.append(f"Field {name!r} has a non-numeric min/max.")
            elif lo is not None and hi is not None and _number(lo) > _number(hi):
                problems.append(f"Field {name!r} has min above max.")
    return problems


def validate_values(fields, values) -> tuple[dict, dict, list[str]]:
    """
    Check ``values`` against a template. Returns ``(cleaned, errors, warnings)``;
    ``errors`` maps field name to message.
    """
    if not isinstance(values, dict):
        return {}, {"values": "Result values must be an object."}, []

    by_name = {f["name"]: f for f in fields}
    cleaned, errors, warnings = {}, {}, []

    for key in values:
        if key not in by_name:
            errors[key] = "Not a field of this template."

    for name, f in by_name.items():
        label = f.get("label") or name
        value = values.get(name)
        if _blank(value):
            if f.get("required"):
                errors[name] = f"{label} is required."
            continue

        ftype = f["type"]
        if ftype == FieldType.NUMBER:
            n = _number(value)
            if n is None:
                errors[name] = f"{label} must be a number."
                continue
            lo, hi = _number(f.get("min")), _number(f.get("max"))
            unit = f" {f['unit']}" if f.get("unit") else ""
            if lo is not None and n < lo:
                warnings.append(f"{label}: {n}{unit} is below the normal range ({f.get('min')}-{f.get('max')}).")
            elif hi is not None and n > hi:
                warnings.append(f"{label}: {n}{unit} is above the normal range ({f.get('min')}-{f.get('max')}).")
            cleaned[name] = int(n) if n == n.to_integral_value() else float(n)
        elif ftype == FieldType.SELECT:
            if str(value) not in [str(o) for o in f.get("options") or []]:
                errors[name] = f"{label}: {value!r} is not one of the options."
                continue
            cleaned[name] = value
        else:
            if not isinstance(value, str):
                errors[name] = f"{label} must be text."
                continue
            cleaned[name] = value.strip()

    return cleaned, errors, warnings


def validate_free_text(values) -> tuple[dict, dict, list[str]]:
    """Services without a template take free-text results with mandatory findings."""
    if not isinstance(values, dict):
        return {}, {"values": "Result values must be an object."}, []
    errors = {k: "Must be text." for k, v in values.items() if not isinstance(v, str)}
    if _blank(values.get(NO_TEMPLATE_FIELD)):
        errors[NO_TEMPLATE_FIELD] = "Findings are required."
    cleaned = {k: v.strip() for k, v in values.items() if isinstance(v, str) and v.strip()}
    return cleaned, errors, []


def check_result(fields, values, *, confirm_warnings: bool = False) -> tuple[dict, list[str]]:
    """
    Raise on errors, or on unconfirmed warnings; otherwise return the
    cleaned values and the warnings to store alongside them.
    """
    if fields is None:
        cleaned, errors, warnings = validate_free_text(values)
    else:
        problems = template_problems(fields)
        if problems:
            raise ValidationFailed("Result template is invalid.", errors={"template": problems})
        cleaned, errors, warnings = validate_values(fields, values)

    if errors:
        raise ValidationFailed("Result values are invalid.", errors=errors, warnings=warnings)
    if warnings and not confirm_warnings:
        raise ConfirmationRequired(
            "Some values are outside the normal range. Resend with confirm_warnings to save them.",
            warnings=warnings,
        )
    return cleaned, warnings
