import pytest

from common.errors import ConfirmationRequired, ValidationFailed
from orders.templates import check_result, template_problems, validate_values

FIELDS = [
    {"name": "hb", "label": "Hemoglobin", "type": "number", "min": 12, "max": 17.5, "unit": "g/dL", "required": True},
    {"name": "appearance", "label": "Appearance", "type": "select", "options": ["Clear", "Cloudy"]},
    {"name": "remarks", "label": "Remarks", "type": "text"},
]


def test_clean_values_pass():
    cleaned, warnings = check_result(FIELDS, {"hb": "13.2", "appearance": "Clear", "remarks": " ok "})
    assert cleaned == {"hb": 13.2, "appearance": "Clear", "remarks": "ok"}
    assert warnings == []


def test_integral_numbers_stay_integers():
    cleaned, _, _ = validate_values(FIELDS, {"hb": "14"})
    assert cleaned["hb"] == 14 and isinstance(cleaned["hb"], int)


@pytest.mark.parametrize("values, field", [
    ({}, "hb"),
    ({"hb": "  "}, "hb"),
    ({"hb": "high"}, "hb"),
    ({"hb": True}, "hb"),
    ({"hb": 13, "appearance": "Bloody"}, "appearance"),
    ({"hb": 13, "remarks": 5}, "remarks"),
    ({"hb": 13, "glucose": 90}, "glucose"),
])
def test_hard_errors(values, field):
    with pytest.raises(ValidationFailed) as exc:
        check_result(FIELDS, values, confirm_warnings=True)
    assert field in exc.value.errors


def test_out_of_range_needs_confirmation():
    with pytest.raises(ConfirmationRequired) as exc:
        check_result(FIELDS, {"hb": 10})
    assert exc.value.warnings == ["Hemoglobin: 10 g/dL is below the normal range (12-17.5)."]

    cleaned, warnings = check_result(FIELDS, {"hb": 10}, confirm_warnings=True)
    assert cleaned == {"hb": 10}
    assert len(warnings) == 1


def test_errors_win_over_warnings():
    with pytest.raises(ValidationFailed) as exc:
        check_result(FIELDS, {"hb": 19, "appearance": "Bloody"}, confirm_warnings=True)
    assert exc.value.warnings and "appearance" in exc.value.errors


def test_no_template_needs_findings():
    with pytest.raises(ValidationFailed) as exc:
        check_result(None, {"impression": "normal"})
    assert "findings" in exc.value.errors
    cleaned, warnings = check_result(None, {"findings": "No consolidation.", "impression": "Normal chest"})
    assert cleaned["findings"] == "No consolidation." and warnings == []


def test_template_problems():
    assert template_problems(FIELDS) == []
    assert template_problems([]) != []
    problems = template_problems([
        {"name": "a", "type": "number", "min": 5, "max": 1},
        {"name": "a", "type": "date"},
        {"name": "b", "type": "select"},
        {"type": "text"},
    ])
    assert len(problems) == 5
