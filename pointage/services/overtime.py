# pointage/services/overtime.py
from __future__ import annotations

from typing import Optional, List, Any
import logging

from pointage.schemas import OvertimeBracket, OvertimeBreakdown, PayBreakdown, to_int, to_float
from pointage.services.rules_config import RulesConfig, load_rules, DEFAULT_CONTRACT_BASE
from pointage.services.time_utils import round2, round_half_up

logger = logging.getLogger("pointage")

STRUCTURAL_BASE = 39


def normalize_contract_base(contract_base: Any) -> int:
    """24 | 32 | 35 | 39 ; valeur inexploitable -> 35."""
    base = to_int(contract_base)
    if base is None or base <= 0:
        if contract_base is not None:
            logger.debug("base contrat ignorée: %r", contract_base)
        return DEFAULT_CONTRACT_BASE
    return base


# ========================
#  Heures supplémentaires
# ========================

def _fill_brackets(overtime: float, threshold: float, rules: RulesConfig) -> List[OvertimeBracket]:
    """Répartit les heures au-delà du seuil dans les paliers, dans l'ordre croissant."""
    out: List[OvertimeBracket] = []
    remaining = overtime
    lower = threshold
    for b in rules.overtime.brackets:
        if b.upto is not None and b.upto <= lower:
            continue
        width = float("inf") if b.upto is None else b.upto - lower
        in_bracket = min(remaining, width)
        if in_bracket > 0:
            out.append(OvertimeBracket(
                label=b.label,
                hours=round2(in_bracket),
                rate=b.rate,
                multiplied_hours=round2(in_bracket * b.rate),
            ))
            remaining -= in_bracket
        if remaining <= 0:
            break
        lower = b.upto
    return out


def classify_overtime(
    weekly_hours: float,
    contract_base: int = DEFAULT_CONTRACT_BASE,
    rules: Optional[RulesConfig] = None,
) -> OvertimeBreakdown:
    """
    Ventilation hebdomadaire :
      - base 35h : <= 35h normales, au-delà paliers 35→43 (x1.25) puis > 43 (x1.50)
      - base 39h : <= 35h normales, 35→39 structurelles (plafond 4h), au-delà paliers 39→43 puis > 43
    """
    r = rules or load_rules()
    base = normalize_contract_base(contract_base)
    hours = max(0.0, to_float(weekly_hours) or 0.0)
    legal = float(r.limits.weekly_legal_hours)

    regular = min(hours, legal)
    structural = 0.0
    threshold = legal
    if base == STRUCTURAL_BASE:
        # heures 35→39 incluses dans le salaire mensuel 39h
        structural = min(max(hours - legal, 0.0), r.overtime.structural_hours_39)
        threshold = legal + r.overtime.structural_hours_39

    overtime = max(0.0, hours - threshold)
    return OvertimeBreakdown(
        regular_hours=round2(regular),
        structural_hours=round2(structural),
        brackets=_fill_brackets(overtime, threshold, r) if overtime > 0 else [],
        total_overtime=round2(overtime),
        contract_base=base,
    )


# ========================
#  Rémunération estimée
# ========================

def estimate_pay(
    weekly_hours: float,
    hourly_rate: Optional[float],
    contract_base: int = DEFAULT_CONTRACT_BASE,
    sunday_hours: float = 0.0,
    holiday_hours: float = 0.0,
    rules: Optional[RulesConfig] = None,
) -> Optional[PayBreakdown]:
    """
    Brut estimé d'une semaine (pour info). None si le taux horaire est absent ou <= 0.
    Les majorations dimanche/férié s'ajoutent au paiement des heures (elles ne le remplacent pas).
    """
    rate = to_float(hourly_rate)
    if not rate or rate <= 0:
        return None
    r = rules or load_rules()
    breakdown = classify_overtime(weekly_hours, contract_base, r)

    base_pay = breakdown.regular_hours * rate
    structural_pay = 0.0
    if breakdown.contract_base == STRUCTURAL_BASE and breakdown.structural_hours > 0:
        structural_pay = breakdown.structural_hours * rate * r.overtime.structural_rate
        base_pay += structural_pay

    overtime_pay = sum(b.hours * rate * b.rate for b in breakdown.brackets)
    sunday_premium = (sunday_hours or 0.0) * rate * r.premiums.sunday_rate
    holiday_premium = (holiday_hours or 0.0) * rate * r.premiums.holiday_rate

    # arrondi de chaque composante, puis du total
    regular_pay = round2(base_pay)
    overtime_pay = round2(overtime_pay)
    sunday_premium = round2(sunday_premium)
    holiday_premium = round2(holiday_premium)
    total = round2(regular_pay + overtime_pay + sunday_premium + holiday_premium)

    return PayBreakdown(
        regular_pay=regular_pay,
        structural_pay=round2(structural_pay),
        overtime_pay=overtime_pay,
        sunday_hours=round2(sunday_hours or 0.0),
        sunday_premium=sunday_premium,
        holiday_hours=round2(holiday_hours or 0.0),
        holiday_premium=holiday_premium,
        total_pay=total,
        breakdown=breakdown,
    )


def hourly_rate(
    gross_monthly_salary: Optional[float],
    contract_base: int = DEFAULT_CONTRACT_BASE,
    rules: Optional[RulesConfig] = None,
) -> float:
    """Taux horaire = brut mensuel / heures mensuelles de la base (4 décimales). 0 si pas de salaire."""
    salary = to_float(gross_monthly_salary)
    if not salary or salary <= 0:
        return 0.0
    r = rules or load_rules()
    monthly = r.monthly_hours(normalize_contract_base(contract_base))
    return round_half_up(salary / monthly, 4)
