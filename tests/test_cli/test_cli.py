"""
End-to-end tests for the medistock-audit CLI via typer's CliRunner.

Each test writes a small history export, a medicines file and a TOML config
pointing at them under ``tmp_path``.
"""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from medistock_audit.cli import app

runner = CliRunner()

HISTORY = [
    {
        "id": "h1",
        "medicineId": "med-1",
        "userId": "user-1",
        "action": "Ajout",
        "details": "Ajout de Doliprane 1000mg - Réception commande",
        "timestamp": "2026-10-02T08:00:00Z",
    },
    {
        "id": "h2",
        "medicineId": "med-1",
        "userId": "user-1",
        "action": "Ajustement stock",
        "details": "15 unités - Livraison matinale (Stock: 50 → 65)",
        "timestamp": "2026-10-10T14:45:00Z",
    },
    {
        "id": "h3",
        "medicineId": "med-2",
        "userId": "user-2",
        "action": "Retrait stock",
        "details": "3 boîtes - Casse, retour fournisseur (Stock: 10 → 7)",
        "timestamp": "2026-10-11T10:00:00Z",
    },
    {
        "id": "h4",
        "medicineId": "med-9",
        "userId": "user-1",
        "action": "Suppression",
        "details": "Médicament supprimé",
        "timestamp": "2026-10-12T17:05:00Z",
    },
]

MEDICINES = [
    {"id": "med-1", "name": "Doliprane 1000mg"},
    {"id": "med-2", "name": "Amoxicilline 500mg"},
]


@pytest.fixture(autouse=True)
def _clear_env(monkeypatch):
    for var in ("MEDISTOCK_AUDIT_LOG_LEVEL", "MEDISTOCK_AUDIT_OUTPUT_DIR", "MEDISTOCK_AUDIT_DEBUG"):
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def workspace(tmp_path: Path) -> dict[str, Path]:
    history = tmp_path / "history.json"
    history.write_text(json.dumps(HISTORY, ensure_ascii=False), encoding="utf-8")
    medicines = tmp_path / "medicines.json"
    medicines.write_text(json.dumps(MEDICINES, ensure_ascii=False), encoding="utf-8")
    out_dir = tmp_path / "artifacts"
    config = tmp_path / "config.toml"
    config.write_text(
        "[data]\n"
        f"history_file = {json.dumps(str(history))}\n"
        f"medicines_file = {json.dumps(str(medicines))}\n"
        "[export]\n"
        f"output_dir = {json.dumps(str(out_dir))}\n"
        "[logging]\n"
        'level = "WARNING"\n',
        encoding="utf-8",
    )
    return {"root": tmp_path, "config": config, "out_dir": out_dir}


def test_validate_config(workspace):
    result = runner.invoke(app, ["validate-config", "--config", str(workspace["config"])])
    assert result.exit_code == 0
    assert "Configuration validated successfully." in result.output
    assert "Top subjects:     5" in result.output


def test_validate_config_missing_file(tmp_path):
    result = runner.invoke(app, ["validate-config", "--config", str(tmp_path / "nope.toml")])
    assert result.exit_code == 1


def test_classify():
    result = runner.invoke(app, ["classify", "Suppression de produit", "Création", "Inventaire"])
    assert result.exit_code == 0
    assert "'Suppression de produit' -> deletion (Suppression)" in result.output
    assert "'Création' -> addition (Ajout)" in result.output
    assert "'Inventaire' -> adjustment (Ajustement)" in result.output


def test_history_lists_all(workspace):
    result = runner.invoke(app, ["history", "--config", str(workspace["config"])])
    assert result.exit_code == 0
    assert "=== Mouvements de stock (4) ===" in result.output
    assert "Médicament supprimé" in result.output


def test_history_filters_kind_and_search(workspace):
    result = runner.invoke(
        app,
        ["history", "--config", str(workspace["config"]), "--kind", "adjustment",
         "--search", "LIVRAISON"],
    )
    assert result.exit_code == 0
    assert "=== Mouvements de stock (1) ===" in result.output
    assert "Livraison matinale" in result.output


def test_history_explicit_range(workspace):
    result = runner.invoke(
        app,
        ["history", "--config", str(workspace["config"]),
         "--start", "2026-10-10T00:00:00Z", "--end", "2026-10-11T23:59:59Z"],
    )
    assert result.exit_code == 0
    assert "=== Mouvements de stock (2) ===" in result.output


def test_history_inverted_range_fails(workspace):
    result = runner.invoke(
        app,
        ["history", "--config", str(workspace["config"]),
         "--start", "2026-10-11T00:00:00Z", "--end", "2026-10-01T00:00:00Z"],
    )
    assert result.exit_code == 1


def test_history_missing_file(workspace):
    result = runner.invoke(
        app,
        ["history", "--config", str(workspace["config"]),
         "--history", str(workspace["root"] / "missing.json")],
    )
    assert result.exit_code == 1


def test_stats(workspace):
    result = runner.invoke(
        app, ["stats", "--config", str(workspace["config"]), "--since", "2026-10-01T00:00:00Z"]
    )
    assert result.exit_code == 0
    assert "=== Statistiques (depuis 01/10/2026) ===" in result.output
    assert "1. Doliprane 1000mg" in result.output
    assert "2. Amoxicilline 500mg" in result.output
    # med-9 has no name and is left out of the ranking
    assert "3." not in result.output


def test_export_csv_to_output(workspace):
    target = workspace["root"] / "exports" / "mouvements.csv"
    result = runner.invoke(
        app,
        ["export-csv", "--config", str(workspace["config"]), "--output", str(target)],
    )
    assert result.exit_code == 0
    assert "[OK] 4 movements exported to" in result.output
    lines = target.read_text(encoding="utf-8").splitlines()
    assert lines[0].startswith("Date,Heure,Type,")
    assert len(lines) == 5
    assert "Casse; retour fournisseur" in lines[3]
    # The temporary artifact is removed once copied.
    assert list(workspace["out_dir"].iterdir()) == []


def test_export_csv_kept_in_output_dir(workspace):
    result = runner.invoke(
        app, ["export-csv", "--config", str(workspace["config"]), "--kind", "deletion"]
    )
    assert result.exit_code == 0
    [artifact] = list(workspace["out_dir"].iterdir())
    assert artifact.name.startswith("mouvements_stock_")
    assert len(artifact.read_text(encoding="utf-8").splitlines()) == 2


def test_export_report(workspace):
    target = workspace["root"] / "rapport.json"
    result = runner.invoke(
        app,
        ["export-report", "--config", str(workspace["config"]), "--email", "pharma@example.org",
         "--kind", "adjustment", "--since", "2026-10-01T00:00:00Z", "--output", str(target)],
    )
    assert result.exit_code == 0
    data = json.loads(target.read_text(encoding="utf-8"))
    assert data["author_name"] == "pharma@example.org"
    assert data["filter_label"] == "Ajustements"
    assert len(data["movements"]) == 2
    assert data["statistics"]["adjustment_count"] == 2
