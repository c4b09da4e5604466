import json
from pathlib import Path
from typer.testing import CliRunner

from esboost.adapters.cli import app
from esboost.adapters.emissions_loader import EXPECTED_HEADERS

runner = CliRunner()

def test_cli_migrate_and_params_show(tmp_path: Path):
    db_path = tmp_path / "esboost_test.sqlite"
    result = runner.invoke(app, ["migrate", "--db", str(db_path)])
    assert result.exit_code == 0, result.output

    # params show (JSON com defaults se nada foi setado)
    result = runner.invoke(app, ["params", "show", "--db", str(db_path)])
    assert result.exit_code == 0, result.output
    data = json.loads(result.stdout)
    assert data["target_buffer_months"] == "12.0"
    assert data["warning_threshold_pct"] == "80.0"
    assert data["avg_consumption_rate_t_per_month"] is None

def test_cli_params_set_and_get(tmp_path: Path):
    db_path = tmp_path / "esboost_test.sqlite"
    result = runner.invoke(
        app,
        [
            "params", "set",
            "--db", str(db_path),
            "--target-buffer-months", "6",
            "--avg-consumption-rate-t-per-month", "32000",
        ],
    )
    assert result.exit_code == 0, result.output

    result = runner.invoke(app, ["params", "get", "target_buffer_months", "--db", str(db_path)])
    assert result.exit_code == 0
    assert result.stdout.strip() == "6.0"

    result = runner.invoke(app, ["params", "set", "--db", str(db_path)])
    assert result.exit_code == 1

def test_cli_status_explicito_json():
    result = runner.invoke(app, ["status", "--permits", "5", "--rate", "32000", "--json"])
    assert result.exit_code == 0, result.output
    data = json.loads(result.stdout)
    assert data["is_valid"] is True
    assert data["data"]["status_light"] == "yellow"
    assert data["data"]["total_capacity_t"] == 500000
    assert len(data["recommendations"]) == 3

def test_cli_status_invalido():
    result = runner.invoke(app, ["status", "--permits", "1", "--rate", "0", "--json"])
    assert result.exit_code == 1
    data = json.loads(result.stdout)
    assert data["is_valid"] is False
    assert data["error"] == "Average consumption must be > 0 tCO₂/month."
    assert data["data"] is None

def test_cli_status_tabela():
    result = runner.invoke(app, ["status", "--permits", "20", "--rate", "10000"])
    assert result.exit_code == 0, result.output
    assert "Green" in result.stdout
    assert "Recommendations" in result.stdout

def test_cli_permits_e_status_por_usuario(tmp_path: Path):
    db_path = tmp_path / "esboost_test.sqlite"
    result = runner.invoke(
        app,
        ["permits", "add", "--user", "acme", "--permits", "5", "--year", "2026", "--db", str(db_path)],
    )
    assert result.exit_code == 0, result.output

    # duplicado no mesmo ano
    result = runner.invoke(
        app,
        ["permits", "add", "--user", "acme", "--permits", "6", "--year", "2026", "--db", str(db_path)],
    )
    assert result.exit_code == 1
    assert "already exists" in result.stdout

    result = runner.invoke(app, ["permits", "list", "--user", "acme", "--json", "--db", str(db_path)])
    assert result.exit_code == 0
    rows = json.loads(result.stdout)
    assert [r["active_permits"] for r in rows] == [5]

    result = runner.invoke(
        app,
        ["status", "--user", "acme", "--year", "2026", "--rate", "32000", "--json", "--db", str(db_path)],
    )
    assert result.exit_code == 0, result.output
    assert json.loads(result.stdout)["data"]["status_light"] == "yellow"

    result = runner.invoke(app, ["permits", "delete", str(rows[0]["id"]), "--db", str(db_path)])
    assert result.exit_code == 0

def test_cli_status_com_planilha(tmp_path: Path):
    csv = tmp_path / "emissions.csv"
    lines = [",".join(EXPECTED_HEADERS)]
    lines.append("2025-01-01,1,Plant A,coal,100,20,250,32000,5,12,50")
    lines.append("2025-02-01,1,Plant A,coal,100,20,250,32000,5,12,50")
    csv.write_text("\n".join(lines) + "\n", encoding="utf-8")

    result = runner.invoke(app, ["emissions", "validate", str(csv)])
    assert result.exit_code == 0, result.output

    result = runner.invoke(app, ["emissions", "summary", str(csv)])
    assert result.exit_code == 0, result.output
    summary = json.loads(result.stdout)
    assert summary["avg_consumption_rate_t_per_month"] == 32000.0

    result = runner.invoke(app, ["status", "--permits", "5", "--emissions-file", str(csv), "--json"])
    assert result.exit_code == 0, result.output
    data = json.loads(result.stdout)
    assert data["data"]["status_light"] == "yellow"
    assert abs(data["data"]["consumed_pct"] - 12.8) < 1e-9

def test_cli_status_planilha_invalida(tmp_path: Path):
    csv = tmp_path / "emissions.csv"
    csv.write_text(",".join(EXPECTED_HEADERS) + "\n2025-01-01,1,Plant A\n", encoding="utf-8")
    result = runner.invoke(app, ["status", "--permits", "5", "--emissions-file", str(csv)])
    assert result.exit_code == 1
    assert result.exception is None or isinstance(result.exception, SystemExit)
    assert "Row 2 has 3 columns" in result.stdout

    result = runner.invoke(app, ["status", "--permits", "5", "--emissions-file", str(tmp_path / "nao_existe.csv")])
    assert result.exit_code == 1
    assert "Failed to parse CSV" in result.stdout

def test_cli_logs(monkeypatch, tmp_path: Path):
    from esboost.infra import logger

    monkeypatch.setattr(logger, "ENABLE_LOGGING", False)
    monkeypatch.setattr(logger, "ENABLE_OUTPUT", False)
    result = runner.invoke(app, ["logs"])
    assert result.exit_code == 0
    assert "Logging desabilitado" in result.stdout

    log_file = tmp_path / "permits.log"
    log_file.write_text("linha 1\nlinha 2\nlinha 3\n", encoding="utf-8")
    monkeypatch.setattr(logger, "ENABLE_LOGGING", True)
    monkeypatch.setitem(logger.LOG_FILES, "permits", log_file)
    result = runner.invoke(app, ["logs", "--type", "permits", "--lines", "2"])
    assert result.exit_code == 0
    assert "linha 1" not in result.stdout
    assert "linha 3" in result.stdout
