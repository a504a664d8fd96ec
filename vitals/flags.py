"""
Severity flags for a vitals set.

Each rule maps a measurement to GREEN / YELLOW / RED; ``overall`` is the
worst flag present. Missing measurements produce no flag.
"""
from decimal import Decimal, ROUND_HALF_UP

from .enums import SeverityFlag as F

SEVERITY = {F.GREEN: 0, F.YELLOW: 1, F.RED: 2}

# (red if >=, yellow if >=)
SYSTOLIC = (160, 140)
DIASTOLIC = (100, 90)
FEVER = (Decimal("39.0"), Decimal("37.5"))
HYPOTHERMIA = Decimal("35.0")
# (red if <, yellow if <)
SPO2 = (90, 94)


def bmi(weight_kg, height_cm):
    if not weight_kg or not height_cm:
        return None
    h_m = Decimal(height_cm) / Decimal("100")
    return (Decimal(weight_kg) / (h_m * h_m)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


def _high(value, limits):
    red, yellow = limits
    if value >= red:
        return F.RED
    return F.YELLOW if value >= yellow else F.GREEN


def bp_flag(systolic, diastolic):
    if systolic is None or diastolic is None:
        return None
    return worst(_high(systolic, SYSTOLIC), _high(diastolic, DIASTOLIC))


def temp_flag(temp_c):
    if temp_c is None:
        return None
    temp_c = Decimal(temp_c)
    if temp_c <= HYPOTHERMIA:
        return F.RED
    return _high(temp_c, FEVER)


def spo2_flag(spo2):
    if spo2 is None:
        return None
    red, yellow = SPO2
    if spo2 < red:
        return F.RED
    return F.YELLOW if spo2 < yellow else F.GREEN


def worst(*flags):
    present = [f for f in flags if f]
    return max(present, key=SEVERITY.__getitem__) if present else F.GREEN


def classify(*, systolic=None, diastolic=None, temp_c=None, spo2=None) -> dict:
    flags = {
        "bp_flag": bp_flag(systolic, diastolic),
        "temp_flag": temp_flag(temp_c),
        "spo2_flag": spo2_flag(spo2),
    }
    flags["overall"] = worst(*flags.values())
    return flags
