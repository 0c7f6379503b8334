import pytest

from pointage.schemas import DayEntry
from pointage.services.time_utils import (
    to_minutes, daily_hours, night_hours, format_hours, format_duration, round2,
)


def _e(start, end, brk=0):
    return DayEntry(date="2024-03-04", start=start, end=end, break_minutes=brk)


def test_to_minutes():
    assert to_minutes("09:30") == 570
    assert to_minutes("9:05") == 545
    assert to_minutes("") == 0
    assert to_minutes(None) == 0
    assert to_minutes("n/a") == 0


def test_daily_hours_simple_span():
    assert daily_hours(_e("09:00", "17:00", 60)) == 7.0
    assert daily_hours(_e("08:15", "12:45")) == 4.5


def test_daily_hours_overnight():
    # 22h → 6h : 480 minutes via le passage de minuit
    assert daily_hours(_e("22:00", "06:00")) == 8.0


def test_daily_hours_equal_times_is_full_day():
    assert daily_hours(_e("09:00", "09:00")) == 24.0


def test_daily_hours_break_longer_than_shift():
    assert daily_hours(_e("09:00", "10:00", 120)) == 0


def test_daily_hours_missing_time():
    assert daily_hours(_e("09:00", "")) == 0
    assert daily_hours(_e(None, "17:00")) == 0


def test_daily_hours_accepts_raw_dict():
    assert daily_hours({"start": "09:00", "end": "12:20", "breakMinutes": "20"}) == 3.0
    assert daily_hours({"start": "09:00", "end": "10:00", "breakDuration": "abc"}) == 1.0


def test_daily_hours_rounds_to_two_decimals():
    # 50 minutes = 0.8333… h
    assert daily_hours(_e("09:00", "09:50")) == 0.83


def test_malformed_times_are_treated_as_missing():
    e = _e("25:00", "17:00")
    assert e.start is None
    assert daily_hours(e) == 0


@pytest.mark.parametrize("start,end,expected", [
    ("20:00", "22:00", 1.0),   # seule la tranche 21h-22h compte
    ("22:00", "06:00", 8.0),   # nuit complète
    ("01:00", "05:00", 4.0),   # entièrement dans la fenêtre du matin
    ("08:00", "17:00", 0.0),   # entièrement de jour
    ("04:00", "08:00", 2.0),   # borne du matin
    ("23:00", "01:00", 2.0),   # passage de minuit
    ("22:00", "08:00", 8.0),   # le lendemain s'arrête à 6h
    ("20:00", "20:00", 9.0),   # 24h : une nuit complète
])
def test_night_hours(start, end, expected):
    assert night_hours(_e(start, end)) == expected


def test_night_hours_ignores_break():
    assert night_hours(_e("21:00", "23:00", 30)) == 2.0


def test_night_hours_without_times():
    assert night_hours(_e("", "")) == 0


def test_format_hours():
    assert format_hours(7.5) == "7h30"
    assert format_hours(35) == "35h00"
    assert format_hours(0.83) == "0h50"
    assert format_hours(7.999) == "8h00"


def test_format_duration():
    assert format_duration(450) == "7h30"
    assert format_duration(5) == "0h05"


def test_round2_half_up():
    assert round2(0.125) == 0.13
    assert round2(2.675 + 1e-9) == 2.68
