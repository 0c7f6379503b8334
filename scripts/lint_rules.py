#!/usr/bin/env python3
import sys
import argparse
from pathlib import Path
from datetime import date
import yaml

from pydantic import ValidationError

from pointage.services.rules_config import RULES_DIR, RulesConfig

NUM_SECTIONS = ("limits", "premiums", "contract_bases")


def load_yaml(p: Path):
    try:
        return yaml.safe_load(p.read_text(encoding="utf-8"))
    except Exception as e:
        print(f"[ERR] YAML invalide: {p}: {e}")
        return None


def _is_number(x):
    return isinstance(x, (int, float)) and not isinstance(x, bool)


def _is_iso_date(s: str) -> bool:
    try:
        date.fromisoformat(str(s))
        return True
    except ValueError:
        return False


def check_temps_travail(p: Path, data) -> bool:
    ok = True
    if not isinstance(data, dict):
        print(f"[ERR] {p}: le document doit être un objet")
        return False

    meta = data.get("meta") or {}
    eff = meta.get("effective_from")
    if eff is not None and not _is_iso_date(eff):
        print(f"[ERR] {p}: meta.effective_from non‑ISO: {eff}")
        ok = False

    # sections de constantes: feuilles numériques
    for section in NUM_SECTIONS:
        node = data.get(section) or {}
        if not isinstance(node, dict):
            print(f"[ERR] {p}: {section} doit être un objet (dict)")
            ok = False
            continue
        for k, v in node.items():
            if not _is_number(v):
                print(f"[ERR] {p}: {section}.{k} doit être numérique, trouvé {type(v).__name__}")
                ok = False

    # cohérence des plafonds
    lim = data.get("limits") or {}
    legal, avg, wmax = lim.get("weekly_legal_hours"), lim.get("weekly_avg_max_hours"), lim.get("weekly_max_hours")
    if all(_is_number(x) for x in (legal, avg, wmax)) and not (legal < avg <= wmax):
        print(f"[ERR] {p}: attendu weekly_legal_hours < weekly_avg_max_hours <= weekly_max_hours")
        ok = False

    # validation complète (paliers triés, base 35h, fenêtre de nuit)
    try:
        RulesConfig.model_validate(data)
    except ValidationError as e:
        for err in e.errors():
            loc = ".".join(str(x) for x in err.get("loc", ()))
            print(f"[ERR] {p}: {loc}: {err.get('msg')}")
        ok = False
    return ok


def main(argv=None):
    ap = argparse.ArgumentParser(description="Vérifie les fichiers de règles temps de travail")
    ap.add_argument("--rules-dir", type=Path, default=RULES_DIR, help="Dossier racine des règles")
    args = ap.parse_args(argv)

    ok = True
    found = False
    for p in sorted(args.rules_dir.rglob("*.yml")):
        data = load_yaml(p)
        if data is None:
            ok = False
            continue
        if p.name.endswith("temps_travail.yml"):
            found = True
            ok = check_temps_travail(p, data) and ok
    if not found:
        print(f"[ERR] aucun temps_travail.yml sous {args.rules_dir}")
        ok = False
    if ok:
        print("[OK] règles valides")
    return 0 if ok else 1


if __name__ == "__main__":
    sys.exit(main())
