# pointage/services/period.py
from __future__ import annotations

from datetime import date
from typing import Optional, Dict, Any, List, Iterable, Mapping, Union
import logging

from pydantic import ValidationError

from pointage.schemas import (
    DayEntry, DailyResult, WeeklyResult, PeriodResult, PayTotals,
    WarningItem, ContextWarningItem, EmployeeSummary, MergedSummary,
    to_float,
)
from pointage.services.rules_config import RulesConfig, load_rules, DEFAULT_CONTRACT_BASE
from pointage.services.holidays import is_holiday, is_sunday
from pointage.services.time_utils import daily_hours, night_hours, minutes_to_hours, round2
from pointage.services.overtime import (
    classify_overtime, estimate_pay, normalize_contract_base, hourly_rate as rate_from_salary,
)

logger = logging.getLogger("pointage")

DAY_NAMES_FR = ("lundi", "mardi", "mercredi", "jeudi", "vendredi", "samedi", "dimanche")

_PAY_FIELDS = (
    ("regular", "regular_pay"),
    ("structural", "structural_pay"),
    ("overtime", "overtime_pay"),
    ("sunday_premium", "sunday_premium"),
    ("holiday_premium", "holiday_premium"),
    ("total", "total_pay"),
)


def iso_week_key(d: date) -> str:
    """Clé ISO 8601 année-semaine, ex. '2024-S01' (semaine du premier jeudi)."""
    iso_year, iso_week, _ = d.isocalendar()
    return f"{iso_year}-S{iso_week:02d}"


def _as_entry(entry: Union[DayEntry, Mapping[str, Any]]) -> Optional[DayEntry]:
    """Saisie brute -> DayEntry ; sans date exploitable, la saisie est ignorée."""
    if isinstance(entry, DayEntry):
        return entry
    try:
        return DayEntry.model_validate(entry)
    except ValidationError as exc:
        logger.warning("saisie ignorée: %r (%s)", entry, exc)
        return None


# -------- alertes --------

def daily_warnings(entry: DayEntry, hours_worked: float, rules: Optional[RulesConfig] = None) -> List[WarningItem]:
    r = rules or load_rules()
    lim = r.limits
    warnings: List[WarningItem] = []

    if hours_worked > lim.daily_max_hours:
        warnings.append(WarningItem(
            type="error",
            message=f"Dépassement durée maximale quotidienne ({lim.daily_max_hours:g}h)",
        ))

    # pause obligatoire après 6h de travail effectif
    if hours_worked >= minutes_to_hours(lim.mandatory_break_after_minutes):
        if entry.break_minutes < lim.mandatory_break_minutes:
            warnings.append(WarningItem(
                type="warning",
                message=f"Pause obligatoire de {lim.mandatory_break_minutes} min après 6h de travail",
            ))
    return warnings


def weekly_warnings(weekly_hours: float, rules: Optional[RulesConfig] = None) -> List[WarningItem]:
    r = rules or load_rules()
    lim = r.limits
    if weekly_hours > lim.weekly_max_hours:
        return [WarningItem(
            type="error",
            message=f"Dépassement durée maximale hebdomadaire ({lim.weekly_max_hours:g}h)",
        )]
    if weekly_hours > lim.weekly_avg_max_hours:
        return [WarningItem(
            type="warning",
            message=f"Attention : {lim.weekly_avg_max_hours:g}h max en moyenne sur 12 semaines",
        )]
    return []


# ========================
#  Traitement d'une période
# ========================

def _daily_result(entry: DayEntry, rules: RulesConfig) -> DailyResult:
    hours = daily_hours(entry)
    holiday = is_holiday(entry.date)
    return DailyResult(
        date=entry.date,
        day_name=DAY_NAMES_FR[entry.date.weekday()],
        hours_worked=hours,
        night_hours=night_hours(entry, rules),
        is_holiday=holiday is not None,
        holiday_name=holiday.local_name if holiday else None,
        is_sunday=is_sunday(entry.date),
        warnings=daily_warnings(entry, hours, rules),
        start=entry.start,
        end=entry.end,
        break_minutes=entry.break_minutes,
    )


def process_entries(
    entries: Iterable[Union[DayEntry, Mapping[str, Any]]],
    hourly_rate: Optional[float] = None,
    contract_base: int = DEFAULT_CONTRACT_BASE,
    rules: Optional[RulesConfig] = None,
) -> PeriodResult:
    """
    Calcule les résultats journaliers, hebdomadaires (semaines ISO) et les totaux d'une période.

    Passe 1 : chaque saisie, dans l'ordre fourni.
    Passe 2 : chaque semaine, dans l'ordre chronologique des clés ISO, pour que le
    cumul des heures supplémentaires ne dépende pas de l'ordre des saisies.
    """
    r = rules or load_rules()
    base = normalize_contract_base(contract_base)
    rate = to_float(hourly_rate)

    daily: List[DailyResult] = []
    # clé -> [heures, heures dimanche, heures férié]
    buckets: Dict[str, List[float]] = {}
    total_hours = total_night = total_sunday = total_holiday = 0.0

    for raw in entries:
        entry = _as_entry(raw)
        if entry is None:
            continue
        day = _daily_result(entry, r)
        daily.append(day)

        bucket = buckets.setdefault(iso_week_key(entry.date), [0.0, 0.0, 0.0])
        bucket[0] += day.hours_worked
        if day.hours_worked > 0:
            if day.is_sunday:
                bucket[1] += day.hours_worked
                total_sunday += day.hours_worked
            if day.is_holiday:
                bucket[2] += day.hours_worked
                total_holiday += day.hours_worked
        total_hours += day.hours_worked
        total_night += day.night_hours

    weekly: List[WeeklyResult] = []
    cumulative = 0.0
    pay_sums = {k: 0.0 for k, _ in _PAY_FIELDS}
    # "AAAA-Sss" : l'ordre lexicographique est l'ordre chronologique
    for week in sorted(buckets):
        hours, sunday_h, holiday_h = (round2(x) for x in buckets[week])
        breakdown = classify_overtime(hours, base, r)
        pay = estimate_pay(hours, rate, base, sunday_h, holiday_h, r)
        cumulative += breakdown.total_overtime
        if pay is not None:
            for key, attr in _PAY_FIELDS:
                pay_sums[key] += getattr(pay, attr)

        weekly.append(WeeklyResult(
            week=week,
            total_hours=hours,
            overtime_breakdown=breakdown,
            warnings=weekly_warnings(hours, r),
            pay=pay,
            sunday_hours=sunday_h,
            holiday_hours=holiday_h,
            cumulative_overtime=round2(cumulative),
        ))

    total_pay = None
    if rate and rate > 0:
        total_pay = PayTotals(**{k: round2(v) for k, v in pay_sums.items()})

    logger.debug("période traitée: %d jours, %d semaines", len(daily), len(weekly))
    return PeriodResult(
        daily_results=daily,
        weekly_results=weekly,
        total_hours=round2(total_hours),
        total_night_hours=round2(total_night),
        total_sunday_hours=round2(total_sunday),
        total_holiday_hours=round2(total_holiday),
        total_overtime=round2(cumulative),
        total_pay=total_pay,
        contract_base=base,
    )


# -------- restitution --------

def collect_warnings(result: PeriodResult) -> List[ContextWarningItem]:
    """Alertes réglementaires à plat, avec leur contexte (jour ou semaine)."""
    out: List[ContextWarningItem] = []
    for d in result.daily_results:
        ctx = f"{d.day_name} {d.date.strftime('%d/%m/%Y')}"
        out += [ContextWarningItem(type=w.type, message=w.message, context=ctx) for w in d.warnings]
    for w in result.weekly_results:
        out += [ContextWarningItem(type=x.type, message=x.message, context=w.week) for x in w.warnings]
    return out


def summarize_employees(
    by_employee: Mapping[str, Mapping[str, Any]],
    rules: Optional[RulesConfig] = None,
) -> MergedSummary:
    """
    Vue fusionnée : un calcul par salarié, puis totaux tous salariés.
    by_employee = {nom: {"entries": [...], "salary": brut mensuel, "contractBase": 35}}
    """
    r = rules or load_rules()
    employees: List[EmployeeSummary] = []
    grand_hours = grand_pay = 0.0

    for name, data in by_employee.items():
        base = normalize_contract_base(data.get("contractBase", data.get("contract_base")))
        rate = rate_from_salary(data.get("salary"), base, r)
        res = process_entries(data.get("entries") or [], rate, base, r)
        pay = res.total_pay.total if res.total_pay else None

        grand_hours += res.total_hours
        if pay:
            grand_pay += pay
        employees.append(EmployeeSummary(
            name=name,
            hourly_rate=rate,
            total_hours=res.total_hours,
            total_overtime=res.total_overtime,
            total_pay=pay,
            result=res,
        ))

    return MergedSummary(
        employees=employees,
        grand_total_hours=round2(grand_hours),
        grand_total_pay=round2(grand_pay),
    )
