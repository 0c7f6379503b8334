# pointage/services/time_utils.py
from __future__ import annotations

from typing import Optional, Tuple, Mapping, Any, Union
import math

from pointage.schemas import DayEntry, normalize_time, normalize_break
from pointage.services.rules_config import RulesConfig, load_rules

MINUTES_PER_DAY = 1440


# -------- arrondis --------

def round_half_up(x: float, digits: int = 2) -> float:
    """Arrondi commercial (0.5 vers le haut), comme Math.round(x * 10^n) / 10^n."""
    factor = 10 ** digits
    return math.floor(x * factor + 0.5) / factor


def round2(x: float) -> float:
    return round_half_up(x, 2)


# -------- conversions --------

def to_minutes(time_str: Optional[str]) -> int:
    """'HH:MM' -> minutes depuis minuit. Vide ou invalide -> 0."""
    norm = normalize_time(time_str)
    if norm is None:
        return 0
    h, m = norm.split(":")
    return int(h) * 60 + int(m)


def minutes_to_hours(minutes: float) -> float:
    return round2(minutes / 60)


def format_hours(hours: float) -> str:
    """7.5 -> '7h30'."""
    h = math.floor(hours)
    m = int(round_half_up((hours - h) * 60, 0))
    if m == 60:
        h, m = h + 1, 0
    return f"{h}h{m:02d}"


def format_duration(minutes: int) -> str:
    """450 -> '7h30'."""
    h, m = divmod(int(minutes), 60)
    return f"{h}h{m:02d}"


# -------- amplitude d'une journée --------

EntryLike = Union[DayEntry, Mapping[str, Any]]


def _fields(entry: EntryLike) -> Tuple[Optional[str], Optional[str], int]:
    """(début, fin, pause) depuis un DayEntry ou un dict brut (clés camelCase tolérées)."""
    if isinstance(entry, DayEntry):
        return entry.start, entry.end, entry.break_minutes
    brk = entry.get("break_minutes", entry.get("breakMinutes", entry.get("breakDuration")))
    return normalize_time(entry.get("start")), normalize_time(entry.get("end")), normalize_break(brk)


def _span(start: Optional[str], end: Optional[str]) -> Optional[Tuple[int, int]]:
    """Intervalle [début, fin) en minutes; fin <= début => passage de minuit (+24h)."""
    if not start or not end:
        return None
    start_min = to_minutes(start)
    end_min = to_minutes(end)
    if end_min <= start_min:
        end_min += MINUTES_PER_DAY
    return start_min, end_min


def daily_hours(entry: EntryLike) -> float:
    """Heures travaillées, pause déduite, jamais négatives (2 décimales)."""
    start, end, break_minutes = _fields(entry)
    span = _span(start, end)
    if span is None:
        return 0.0
    start_min, end_min = span
    worked = end_min - start_min - break_minutes
    return max(0.0, minutes_to_hours(worked))


def _overlap(a_start: int, a_end: int, b_start: int, b_end: int) -> int:
    return max(0, min(a_end, b_end) - max(a_start, b_start))


def night_hours(entry: EntryLike, rules: Optional[RulesConfig] = None) -> float:
    """
    Heures de nuit (par défaut 21h → 6h), pause non déduite.
    Sur l'axe [0, 2880) du jour de début et du lendemain, les plages de nuit sont :
      [0, fin_nuit)  [début_nuit, 1440 + fin_nuit)  [1440 + début_nuit, 2880)
    """
    start, end, _ = _fields(entry)
    span = _span(start, end)
    if span is None:
        return 0.0
    r = rules or load_rules()
    night_start = r.night.start_hour * 60
    night_end = r.night.end_hour * 60
    windows = (
        (0, night_end),
        (night_start, MINUTES_PER_DAY + night_end),
        (MINUTES_PER_DAY + night_start, 2 * MINUTES_PER_DAY),
    )
    start_min, end_min = span
    minutes = sum(_overlap(start_min, end_min, ws, we) for ws, we in windows)
    return minutes_to_hours(minutes)
