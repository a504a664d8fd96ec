from decimal import Decimal

from vitals import flags
from vitals.enums import SeverityFlag as F


def test_blood_pressure():
    assert flags.bp_flag(118, 76) == F.GREEN
    assert flags.bp_flag(142, 80) == F.YELLOW
    assert flags.bp_flag(130, 101) == F.RED
    assert flags.bp_flag(None, 80) is None


def test_temperature_both_ends():
    assert flags.temp_flag("36.8") == F.GREEN
    assert flags.temp_flag(Decimal("37.5")) == F.YELLOW
    assert flags.temp_flag(Decimal("39.0")) == F.RED
    assert flags.temp_flag(Decimal("34.9")) == F.RED


def test_spo2():
    assert [flags.spo2_flag(v) for v in (98, 93, 89)] == [F.GREEN, F.YELLOW, F.RED]


def test_overall_is_worst_present():
    assert flags.classify() == {"bp_flag": None, "temp_flag": None, "spo2_flag": None, "overall": F.GREEN}
    assert flags.classify(systolic=145, diastolic=85, spo2=88)["overall"] == F.RED


def test_bmi():
    assert flags.bmi(Decimal("70"), Decimal("175")) == Decimal("22.86")
    assert flags.bmi(None, Decimal("175")) is None
