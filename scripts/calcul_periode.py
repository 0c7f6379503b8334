#!/usr/bin/env python3
"""
Calcul d'une période depuis un fichier JSON de saisies.

  python scripts/calcul_periode.py --entries saisies.json --salary 1900 --base 35
  python scripts/calcul_periode.py --entries saisies.json --rate 12.5 --json

Le fichier contient une liste de saisies {date, start, end, breakMinutes},
ou un objet {"entries": [...]}.
"""
import sys
import json
import argparse
import logging
from pathlib import Path

from pointage.services.rules_config import load_rules, RulesError
from pointage.services.overtime import hourly_rate
from pointage.services.period import process_entries, collect_warnings
from pointage.services.time_utils import format_hours

logger = logging.getLogger("pointage")


def render_text(result, rate: float, rules) -> str:
    lines = [
        f"Heures travaillées : {format_hours(result.total_hours)}",
        f"Heures sup.        : {format_hours(result.total_overtime)}",
        f"Heures dimanche    : {format_hours(result.total_sunday_hours)}",
        f"Heures fériés      : {format_hours(result.total_holiday_hours)}",
        f"Heures de nuit     : {format_hours(result.total_night_hours)}",
        "",
    ]
    for w in result.weekly_results:
        lines.append(
            f"{w.week}  {format_hours(w.total_hours):>7}  sup. {format_hours(w.overtime_breakdown.total_overtime):>6}"
            f"  cumul {format_hours(w.cumulative_overtime):>6}"
        )
    if result.total_pay is not None:
        tp = result.total_pay
        lines += [
            "",
            f"Estimation rémunération (taux horaire {rate:.2f} €/h, pour info)",
            f"  Heures normales     {tp.regular:>10.2f} €",
        ]
        if tp.overtime > 0:
            lines.append(f"  Heures sup.        +{tp.overtime:>10.2f} €")
        if tp.sunday_premium > 0:
            lines.append(f"  Majoration dimanche+{tp.sunday_premium:>10.2f} €")
        if tp.holiday_premium > 0:
            lines.append(f"  Majoration férié   +{tp.holiday_premium:>10.2f} €")
        lines.append(f"  Total brut estimé   {tp.total:>10.2f} €")

    # repères informatifs : non contrôlés sur la période
    lim = rules.limits
    lines += [
        "",
        "Repères",
        f"  Contingent annuel heures sup. : {format_hours(result.total_overtime)} / {format_hours(lim.annual_overtime_quota)}",
        f"  Repos quotidien minimum       : {format_hours(lim.min_daily_rest_hours)}",
        f"  Repos hebdomadaire minimum    : {format_hours(lim.min_weekly_rest_hours)}",
    ]

    warnings = collect_warnings(result)
    if warnings:
        lines += ["", "Alertes réglementaires"]
        lines += [f"  [{w.type}] {w.context} : {w.message}" for w in warnings]
    return "\n".join(lines)


def main(argv=None) -> int:
    ap = argparse.ArgumentParser(description="Heures, heures sup. et brut estimé d'une période")
    ap.add_argument("--entries", type=Path, required=True, help="Fichier JSON des saisies")
    group = ap.add_mutually_exclusive_group()
    group.add_argument("--rate", type=float, help="Taux horaire brut")
    group.add_argument("--salary", type=float, help="Brut mensuel (taux horaire déduit de la base)")
    ap.add_argument("--base", type=int, default=35, choices=(24, 32, 35, 39), help="Base contrat hebdomadaire")
    ap.add_argument("--rules", type=Path, help="Fichier temps_travail.yml à utiliser")
    ap.add_argument("--json", action="store_true", help="Sortie JSON (camelCase)")
    ap.add_argument("-v", "--verbose", action="store_true")
    args = ap.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO)

    try:
        rules = load_rules(args.rules)
    except RulesError as e:
        logger.error("%s", e)
        return 2

    try:
        payload = json.loads(args.entries.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        logger.error("saisies illisibles: %s: %s", args.entries, e)
        return 2
    entries = payload.get("entries", []) if isinstance(payload, dict) else payload
    if not isinstance(entries, list):
        logger.error("saisies illisibles: %s: liste de saisies attendue", args.entries)
        return 2

    rate = args.rate if args.rate is not None else hourly_rate(args.salary, args.base, rules)
    result = process_entries(entries, rate, args.base, rules)

    if args.json:
        print(json.dumps(result.to_json_dict(), ensure_ascii=False, indent=2))
    else:
        print(render_text(result, rate or 0.0, rules))
    return 0


if __name__ == "__main__":
    sys.exit(main())
