# pointage/services/holidays.py
from __future__ import annotations

from datetime import date, datetime, timedelta
from functools import lru_cache
from typing import Optional, Tuple, Union

from pointage.schemas import Holiday

# (mois, jour, nom, libellé) : fériés à date fixe
_FIXED = (
    (1, 1, "New Year", "Jour de l'An"),
    (5, 1, "Labour Day", "Fête du Travail"),
    (5, 8, "Victory 1945", "Victoire 1945"),
    (7, 14, "Bastille Day", "Fête Nationale"),
    (8, 15, "Assumption", "Assomption"),
    (11, 1, "All Saints", "Toussaint"),
    (11, 11, "Armistice", "Armistice 1918"),
    (12, 25, "Christmas", "Noël"),
)

# (décalage depuis Pâques, nom, libellé) : fériés mobiles
_EASTER_RELATIVE = (
    (1, "Easter Monday", "Lundi de Pâques"),
    (39, "Ascension", "Ascension"),
    (50, "Whit Monday", "Lundi de Pentecôte"),
)


def easter_date(year: int) -> date:
    """Dimanche de Pâques (calendrier grégorien, algorithme anonyme de Meeus/Jones/Butcher)."""
    a = year % 19
    b, c = divmod(year, 100)
    d, e = divmod(b, 4)
    f = (b + 8) // 25
    g = (b - f + 1) // 3
    h = (19 * a + b - d - g + 15) % 30
    i, k = divmod(c, 4)
    l = (32 + 2 * e + 2 * i - h - k) % 7
    m = (a + 11 * h + 22 * l) // 451
    month, day = divmod(h + l - 7 * m + 114, 31)
    return date(year, month, day + 1)


@lru_cache(maxsize=64)
def public_holidays(year: int) -> Tuple[Holiday, ...]:
    """Les 11 jours fériés français de l'année, triés par date."""
    easter = easter_date(year)
    out = [Holiday(date=date(year, mo, dd), name=name, local_name=label) for mo, dd, name, label in _FIXED]
    out += [
        Holiday(date=easter + timedelta(days=offset), name=name, local_name=label)
        for offset, name, label in _EASTER_RELATIVE
    ]
    return tuple(sorted(out, key=lambda h: h.date))


def is_holiday(d: Union[date, datetime]) -> Optional[Holiday]:
    if isinstance(d, datetime):
        d = d.date()
    return next((h for h in public_holidays(d.year) if h.date == d), None)


def is_sunday(d: date) -> bool:
    return d.weekday() == 6
