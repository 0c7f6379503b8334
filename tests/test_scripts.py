import json
import sys
from pathlib import Path

import yaml

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT / "scripts"))

import lint_rules  # noqa: E402
import calcul_periode  # noqa: E402

from pointage.services.rules_config import RULES_DIR  # noqa: E402


def test_lint_packaged_rules(capsys):
    assert lint_rules.main(["--rules-dir", str(RULES_DIR)]) == 0
    assert "[OK]" in capsys.readouterr().out


def test_lint_reports_errors(tmp_path, capsys):
    d = tmp_path / "ccn" / "1760-bad"
    d.mkdir(parents=True)
    (d / "temps_travail.yml").write_text(yaml.safe_dump({
        "limits": {"weekly_legal_hours": "35", "weekly_avg_max_hours": 44, "weekly_max_hours": 40},
        "contract_bases": {39: 169.0},
    }), encoding="utf-8")
    assert lint_rules.main(["--rules-dir", str(tmp_path)]) == 1
    out = capsys.readouterr().out
    assert "limits.weekly_legal_hours doit être numérique" in out
    assert "contract_bases" in out


def test_lint_empty_dir(tmp_path):
    assert lint_rules.main(["--rules-dir", str(tmp_path)]) == 1


def _entries_file(tmp_path):
    entries = [
        {"date": f"2024-03-0{4 + i}", "start": "09:00", "end": "17:00", "breakMinutes": 60}
        for i in range(5)
    ] + [{"date": "2024-03-09", "start": "09:00", "end": "15:00", "breakMinutes": 0}]
    p = tmp_path / "saisies.json"
    p.write_text(json.dumps({"entries": entries}), encoding="utf-8")
    return p


def test_calcul_text_report(tmp_path, capsys):
    assert calcul_periode.main(["--entries", str(_entries_file(tmp_path)), "--rate", "15"]) == 0
    out = capsys.readouterr().out
    assert "Heures travaillées : 41h00" in out
    assert "Total brut estimé" in out and "637.50" in out
    assert "Alertes réglementaires" in out
    assert "Contingent annuel heures sup. : 6h00 / 220h00" in out
    assert "Repos quotidien minimum       : 11h00" in out


def test_calcul_json_output(tmp_path, capsys):
    assert calcul_periode.main(["--entries", str(_entries_file(tmp_path)), "--salary", "2275.05", "--json"]) == 0
    data = json.loads(capsys.readouterr().out)
    assert data["totalHours"] == 41.0
    assert data["totalOvertime"] == 6.0
    assert data["totalPay"]["total"] == 637.5


def test_calcul_unreadable_entries(tmp_path):
    p = tmp_path / "x.json"
    p.write_text("{pas du json", encoding="utf-8")
    assert calcul_periode.main(["--entries", str(p)]) == 2


def test_calcul_wrong_shape_entries(tmp_path):
    for payload in ({"entries": None}, 42, {"entries": "2024-03-04"}):
        p = tmp_path / "x.json"
        p.write_text(json.dumps(payload), encoding="utf-8")
        assert calcul_periode.main(["--entries", str(p)]) == 2


def test_calcul_empty_entries_object(tmp_path, capsys):
    p = tmp_path / "x.json"
    p.write_text(json.dumps({}), encoding="utf-8")
    assert calcul_periode.main(["--entries", str(p)]) == 0
    assert "Heures travaillées : 0h00" in capsys.readouterr().out
