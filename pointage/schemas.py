# pointage/schemas.py
from __future__ import annotations

import datetime as dt
from typing import Optional, Dict, Any, List, Literal
import logging
import math
import re

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

logger = logging.getLogger("pointage")

_TIME_RE = re.compile(r"^\s*(\d{1,2}):(\d{2})(?::\d{2})?\s*$")
_LEADING_INT_RE = re.compile(r"^\s*([+-]?\d+)")
_DATETIME_SEP_RE = re.compile(r"[T ]")


class _PointageBase(BaseModel):
    # Résultats immuables, sérialisés en camelCase pour la couche de présentation
    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    def to_json_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


BaseModel = _PointageBase


def to_int(val: Any) -> Optional[int]:
    """Convertit comme parseInt : entier de tête, sinon None."""
    if val is None or isinstance(val, bool):
        return None
    if isinstance(val, int):
        return val
    if isinstance(val, float):
        return int(val) if val == val and abs(val) != float("inf") else None
    m = _LEADING_INT_RE.match(str(val))
    return int(m.group(1)) if m else None


def normalize_time(val: Any) -> Optional[str]:
    """'9:00', '09:00:00', time(9, 0) -> '09:00'. Vide ou invalide -> None."""
    if val is None:
        return None
    if isinstance(val, dt.time):
        return f"{val.hour:02d}:{val.minute:02d}"
    s = str(val)
    if not s.strip():
        return None
    m = _TIME_RE.match(s)
    if not m:
        logger.debug("heure ignorée (format invalide): %r", val)
        return None
    h, mn = int(m.group(1)), int(m.group(2))
    if h > 23 or mn > 59:
        logger.debug("heure ignorée (hors plage): %r", val)
        return None
    return f"{h:02d}:{mn:02d}"


def normalize_break(val: Any) -> int:
    """Durée de pause en minutes : non numérique -> 0, négative -> 0."""
    n = to_int(val)
    if n is None:
        if val not in (None, ""):
            logger.debug("pause ignorée (non numérique): %r", val)
        return 0
    return max(0, n)


def to_float(val: Any) -> Optional[float]:
    """Convertit proprement vers float (supporte les virgules), sinon None."""
    if val is None or isinstance(val, bool):
        return None
    try:
        f = float(str(val).replace(",", ".").strip())
    except ValueError:
        return None
    return f if math.isfinite(f) else None


# ---- Entrées

class DayEntry(BaseModel):
    """Saisie brute d'une journée (début, fin, pause). Début/fin vides = repos."""
    date: dt.date
    start: Optional[str] = None
    end: Optional[str] = None
    break_minutes: int = Field(
        0, validation_alias=AliasChoices("break_minutes", "breakMinutes", "breakDuration")
    )

    @field_validator("date", mode="before")
    @classmethod
    def coerce_date(cls, v):
        if isinstance(v, dt.datetime):
            return v.date()
        if isinstance(v, str):
            # "2024-03-04T09:00" ou "2024-03-04 09:00" -> date seule
            return _DATETIME_SEP_RE.split(v.strip(), 1)[0]
        return v

    @field_validator("start", "end", mode="before")
    @classmethod
    def coerce_time(cls, v):
        return normalize_time(v)

    @field_validator("break_minutes", mode="before")
    @classmethod
    def coerce_break(cls, v):
        return normalize_break(v)


# ---- Jours fériés

class Holiday(BaseModel):
    date: dt.date
    name: str
    local_name: str


# ---- Alertes

class WarningItem(BaseModel):
    type: Literal["error", "warning"]
    message: str


class ContextWarningItem(WarningItem):
    context: str


# ---- Journée

class DailyResult(BaseModel):
    date: dt.date
    day_name: str
    hours_worked: float
    night_hours: float
    is_holiday: bool
    holiday_name: Optional[str] = None
    is_sunday: bool
    warnings: List[WarningItem] = Field(default_factory=list)
    start: Optional[str] = None
    end: Optional[str] = None
    break_minutes: int = 0


# ---- Heures supplémentaires

class OvertimeBracket(BaseModel):
    label: str
    hours: float
    rate: float
    multiplied_hours: float


class OvertimeBreakdown(BaseModel):
    regular_hours: float = 0.0
    structural_hours: float = 0.0
    brackets: List[OvertimeBracket] = Field(default_factory=list)
    total_overtime: float = 0.0
    contract_base: int = 35


# ---- Rémunération

class PayBreakdown(BaseModel):
    regular_pay: float
    structural_pay: float
    overtime_pay: float
    sunday_hours: float
    sunday_premium: float
    holiday_hours: float
    holiday_premium: float
    total_pay: float
    breakdown: OvertimeBreakdown


class PayTotals(BaseModel):
    regular: float = 0.0
    structural: float = 0.0
    overtime: float = 0.0
    sunday_premium: float = 0.0
    holiday_premium: float = 0.0
    total: float = 0.0


# ---- Semaine / période

class WeeklyResult(BaseModel):
    week: str
    total_hours: float
    overtime_breakdown: OvertimeBreakdown
    warnings: List[WarningItem] = Field(default_factory=list)
    pay: Optional[PayBreakdown] = None
    sunday_hours: float = 0.0
    holiday_hours: float = 0.0
    cumulative_overtime: float = 0.0


class PeriodResult(BaseModel):
    daily_results: List[DailyResult] = Field(default_factory=list)
    weekly_results: List[WeeklyResult] = Field(default_factory=list)
    total_hours: float = 0.0
    total_night_hours: float = 0.0
    total_sunday_hours: float = 0.0
    total_holiday_hours: float = 0.0
    total_overtime: float = 0.0
    total_pay: Optional[PayTotals] = None
    contract_base: int = 35


# ---- Vue fusionnée (plusieurs salariés)

class EmployeeSummary(BaseModel):
    name: str
    hourly_rate: float
    total_hours: float
    total_overtime: float
    total_pay: Optional[float] = None
    result: PeriodResult


class MergedSummary(BaseModel):
    employees: List[EmployeeSummary] = Field(default_factory=list)
    grand_total_hours: float = 0.0
    grand_total_pay: float = 0.0
