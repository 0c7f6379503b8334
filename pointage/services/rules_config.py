# pointage/services/rules_config.py
from __future__ import annotations

from pathlib import Path
from typing import Optional, Dict, List, Tuple, Any
from functools import lru_cache
import logging
import os

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

logger = logging.getLogger("pointage")

# Dossiers
APP_DIR = Path(__file__).resolve().parents[1]   # .../pointage
RULES_DIR = APP_DIR / "rules"                    # .../pointage/rules

# Constantes CCN
JARDINERIES_IDCC = 1760
DEFAULT_CONTRACT_BASE = 35


class RulesError(ValueError):
    """Fichier de règles absent, illisible ou incohérent."""


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")


class RulesMeta(_Frozen):
    idcc: int = JARDINERIES_IDCC
    label: str = "Jardineries & Graineteries"
    effective_from: Optional[str] = None


class Limits(_Frozen):
    weekly_legal_hours: float = 35
    daily_max_hours: float = 10
    weekly_max_hours: float = 48
    weekly_avg_max_hours: float = 44
    min_daily_rest_hours: float = 11
    min_weekly_rest_hours: float = 35
    mandatory_break_after_minutes: int = 360
    mandatory_break_minutes: int = 20
    annual_overtime_quota: float = 220


class NightWindow(_Frozen):
    start_hour: int = Field(21, ge=0, le=23)
    end_hour: int = Field(6, ge=0, le=23)

    @model_validator(mode="after")
    def check_overnight(self):
        # la fenêtre de nuit doit chevaucher minuit (ex. 21h → 6h)
        if self.end_hour >= self.start_hour:
            raise ValueError("night.end_hour doit être antérieur à night.start_hour")
        return self


class BracketRule(_Frozen):
    upto: Optional[float] = None    # None = sans plafond
    rate: float
    label: str


class OvertimeRules(_Frozen):
    brackets: Tuple[BracketRule, ...] = (
        BracketRule(upto=43, rate=1.25, label="25%"),
        BracketRule(upto=None, rate=1.50, label="50%"),
    )
    structural_hours_39: float = 4
    structural_rate: float = 1.25

    @field_validator("brackets")
    @classmethod
    def check_ascending(cls, v):
        if not v:
            raise ValueError("overtime.brackets ne peut pas être vide")
        bounds = [b.upto for b in v]
        if any(u is None for u in bounds[:-1]):
            raise ValueError("seul le dernier palier peut être sans plafond")
        finite = [u for u in bounds if u is not None]
        if finite != sorted(finite):
            raise ValueError("overtime.brackets doit être trié par plafond croissant")
        rates = [b.rate for b in v]
        if rates != sorted(rates):
            raise ValueError("overtime.brackets doit être trié par taux croissant")
        return v


class Premiums(_Frozen):
    sunday_rate: float = 0.50
    holiday_rate: float = 1.00


class LegalSource(_Frozen):
    key: str
    label: str
    url: Optional[str] = None


class RulesConfig(_Frozen):
    """
    Paramètres immuables du moteur (Code du travail + CCN IDCC 1760).
    Surcharge ponctuelle : rules.model_copy(update={...}).
    """
    meta: RulesMeta = RulesMeta()
    limits: Limits = Limits()
    night: NightWindow = NightWindow()
    overtime: OvertimeRules = OvertimeRules()
    premiums: Premiums = Premiums()
    contract_bases: Dict[int, float] = Field(
        default_factory=lambda: {24: 104.00, 32: 138.67, 35: 151.67, 39: 169.00}
    )
    sources: Tuple[LegalSource, ...] = ()

    @field_validator("contract_bases")
    @classmethod
    def check_default_base(cls, v):
        if DEFAULT_CONTRACT_BASE not in v:
            raise ValueError(f"contract_bases doit définir la base {DEFAULT_CONTRACT_BASE}h")
        for base, hours in v.items():
            if hours <= 0:
                raise ValueError(f"contract_bases.{base} doit être > 0")
        return v

    def monthly_hours(self, contract_base: Optional[int]) -> float:
        """Diviseur mensuel d'une base contrat (repli sur 35h si inconnue)."""
        return self.contract_bases.get(contract_base) or self.contract_bases[DEFAULT_CONTRACT_BASE]


# -------- chargement des YAML --------

def _find_ccn_dir(idcc: int, root: Path) -> Optional[Path]:
    """Trouve le dossier CCN par ID ('1760', '1760-jardineries', '01760-…')."""
    ccn_root = root / "ccn"
    if not ccn_root.exists():
        return None
    for d in sorted(ccn_root.iterdir()):
        if not d.is_dir():
            continue
        prefix = str(d.name).split("-")[0]
        if prefix.lstrip("0") == str(idcc).lstrip("0"):
            return d
    return None


def _rules_root() -> Path:
    env = os.environ.get("POINTAGE_RULES_DIR")
    return Path(env) if env else RULES_DIR


def default_rules_path(idcc: int = JARDINERIES_IDCC) -> Path:
    root = _rules_root()
    d = _find_ccn_dir(idcc, root)
    if d is None:
        raise RulesError(f"Aucun dossier de règles pour l'IDCC {idcc} sous {root}")
    return d / "temps_travail.yml"


def _mtime(p: Path) -> float:
    try:
        return p.stat().st_mtime
    except OSError:
        return 0.0


@lru_cache(maxsize=32)
def _load_rules_cached(path_str: str, mtime: float) -> RulesConfig:
    p = Path(path_str)
    if not p.exists():
        raise RulesError(f"Fichier de règles introuvable: {p}")
    try:
        data = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        raise RulesError(f"YAML invalide: {p}: {exc}") from exc
    if not isinstance(data, dict):
        raise RulesError(f"{p}: le document doit être un objet YAML")
    try:
        rules = RulesConfig.model_validate(data)
    except ValidationError as exc:
        raise RulesError(f"{p}: {exc}") from exc
    logger.info("règles chargées: %s (IDCC %s)", p, rules.meta.idcc)
    return rules


def load_rules(path: Optional[Path] = None) -> RulesConfig:
    """Chargement des règles avec cache (clé: chemin + mtime)."""
    p = Path(path) if path else default_rules_path()
    return _load_rules_cached(str(p), _mtime(p))


def legal_sources(rules: Optional[RulesConfig] = None) -> List[Dict[str, Any]]:
    r = rules or load_rules()
    return [s.model_dump() for s in r.sources]
