"""Calcul des heures travaillées et du brut estimé : Code du travail + CCN Jardineries & Graineteries (IDCC 1760)."""

from pointage.services.holidays import easter_date, public_holidays, is_holiday
from pointage.services.time_utils import to_minutes, daily_hours, night_hours, format_hours, format_duration
from pointage.services.overtime import classify_overtime, estimate_pay, hourly_rate
from pointage.services.period import process_entries, collect_warnings, summarize_employees, iso_week_key
from pointage.services.rules_config import RulesConfig, RulesError, load_rules, legal_sources

__version__ = "0.1"
