# esboost/adapters/cli.py
"""
CLI do ESBoost Permits (Typer).

Comandos principais:
- migrate                      -> aplica migrações
- params set/get/show          -> gerencia parâmetros globais
- permits add/update/delete    -> mantém os registros de permissões
- permits list/show            -> consulta os registros de um usuário
- status                       -> calcula validade, semáforo e recomendações
- emissions validate/summary   -> valida planilhas de emissões e deriva o consumo
"""

from __future__ import annotations

import json
from dataclasses import asdict
from pathlib import Path
from typing import Optional, List, Dict, Any

import typer
from rich.console import Console
from rich.table import Table
from rich.panel import Panel
from rich import box
from rich.markup import escape

from esboost.config import DB_PATH, DEFAULTS
from esboost.domain.models import GREEN, PERMIT_CAPACITY_T, YELLOW, PermitsStatus
from esboost.infra.logger import get_log_summary
from esboost.infra.migrations import apply_migrations
from esboost.infra.repositories import ParamsRepo
from esboost.adapters.formatting import (
    format_file_size,
    format_number,
    format_years,
    get_status_label,
)
from esboost.adapters.emissions_loader import (
    load_emissions,
    summarize_emissions,
    validate_emissions_file,
)
from esboost.usecases.permits_status import calculate_permits_status, run_permits_status
from esboost.usecases.permit_records import (
    PermitRecordError,
    create_permit,
    delete_permit,
    get_current_year_permit,
    get_user_permits,
    update_permit,
    upsert_current_year_permit,
)


app = typer.Typer(help="ESBoost — EU ETS permits CLI")
console = Console()

PARAM_KEYS = ("target_buffer_months", "warning_threshold_pct", "avg_consumption_rate_t_per_month")


# -----------------------
# util
# -----------------------

def _print_json(obj) -> None:
    typer.echo(json.dumps(obj, ensure_ascii=False, indent=2))


def _fail(message: str) -> None:
    console.print(f"[bold red]{escape(message)}[/]")
    raise typer.Exit(code=1)


def _display_permits(rows: List[Dict[str, Any]], title: str) -> None:
    """Exibe registros de permissões em tabela."""
    if not rows:
        console.print(Panel("Nenhum registro encontrado", title=title, border_style="yellow"))
        return
    table = Table(title=title, box=box.ROUNDED)
    table.add_column("id", justify="right")
    table.add_column("year", justify="center")
    table.add_column("active_permits", justify="right")
    table.add_column("capacity_t", justify="right")
    table.add_column("company")
    table.add_column("notes")
    table.add_column("updated_at", justify="center")
    for r in rows:
        table.add_row(
            str(r["id"]),
            str(r["permit_year"]),
            format_number(r["active_permits"]),
            format_number(r["active_permits"] * PERMIT_CAPACITY_T),
            r.get("company_name") or "",
            r.get("notes") or "",
            r.get("updated_at") or "",
        )
    console.print(table)


def _display_status(status: PermitsStatus, active_permits: Optional[float]) -> None:
    """Banner colorido, métricas e recomendações."""
    if not status.is_valid:
        console.print(Panel(status.error or "", title="Permits Status", border_style="red"))
        return

    d = status.data
    color = "green" if d.status_light == GREEN else "yellow" if d.status_light == YELLOW else "red"
    console.print(Panel(
        f"[bold {color}]{get_status_label(d.status_light, d.years_remaining)}[/]",
        title="Permits Status",
        border_style=color,
    ))

    table = Table(box=box.ROUNDED, show_header=False)
    table.add_column("Campo")
    table.add_column("Valor", justify="right")
    table.add_row("Active permits", format_number(active_permits or 0))
    table.add_row("Total capacity (tCO₂)", format_number(d.total_capacity_t))
    table.add_row("Months remaining", f"{d.months_remaining:.1f}")
    table.add_row("Years remaining", format_years(d.years_remaining))
    if d.consumed_pct is not None:
        table.add_row("Consumed", f"{d.consumed_pct:.1f}%")
    table.add_row("Permits needed for buffer", format_number(d.needed_permits_for_buffer))
    console.print(table)

    if status.recommendations:
        console.print("[bold]Recommendations[/]")
        for rec in status.recommendations:
            console.print(f"  • {rec}")


# -----------------------
# comandos de infra
# -----------------------

@app.command("migrate")
def cmd_migrate(db_path: str = typer.Option(DB_PATH, "--db", help="Caminho do SQLite")):
    """Aplica migrações."""
    apply_migrations(db_path)
    typer.echo(f">> Migrações aplicadas em: {db_path}")


params_app = typer.Typer(help="Gerenciar parâmetros globais (colchão, alerta e consumo).")
app.add_typer(params_app, name="params")


@params_app.command("set")
def cmd_params_set(
    target_buffer_months: Optional[float] = typer.Option(None, help="Colchão alvo em meses (ex.: 12)"),
    warning_threshold_pct: Optional[float] = typer.Option(None, help="Alerta de capacidade usada em % (ex.: 80)"),
    avg_consumption_rate_t_per_month: Optional[float] = typer.Option(None, help="Consumo médio em tCO₂/mês"),
    db_path: str = typer.Option(DB_PATH, "--db", help="Caminho do SQLite"),
):
    """Define parâmetros globais (apenas os informados são alterados)."""
    apply_migrations(db_path)
    repo = ParamsRepo(db_path)
    items: List[tuple[str, str]] = []
    if target_buffer_months is not None:
        items.append(("target_buffer_months", str(target_buffer_months)))
    if warning_threshold_pct is not None:
        items.append(("warning_threshold_pct", str(warning_threshold_pct)))
    if avg_consumption_rate_t_per_month is not None:
        items.append(("avg_consumption_rate_t_per_month", str(avg_consumption_rate_t_per_month)))
    if not items:
        typer.echo("Nada a alterar. Informe pelo menos um parâmetro.")
        raise typer.Exit(code=1)
    repo.set_many(items)
    typer.echo(">> Parâmetros atualizados.")


@params_app.command("get")
def cmd_params_get(
    chave: str = typer.Argument(..., help="Ex.: " + " | ".join(PARAM_KEYS)),
    db_path: str = typer.Option(DB_PATH, "--db", help="Caminho do SQLite"),
):
    """Mostra um parâmetro específico."""
    apply_migrations(db_path)
    val = ParamsRepo(db_path).get(chave)
    typer.echo("(None)" if val is None else val)


@params_app.command("show")
def cmd_params_show(
    db_path: str = typer.Option(DB_PATH, "--db", help="Caminho do SQLite"),
):
    """Exibe os parâmetros efetivos (com fallback para defaults) em JSON."""
    apply_migrations(db_path)
    repo = ParamsRepo(db_path)
    defaults = asdict(DEFAULTS)
    out = {k: repo.get(k, None if defaults.get(k) is None else str(defaults[k])) for k in PARAM_KEYS}
    out["_defaults"] = defaults
    out["_db"] = db_path
    _print_json(out)


# -----------------------
# registros de permissões
# -----------------------

permits_app = typer.Typer(help="Registros de permissões EU ETS (um por usuário e ano).")
app.add_typer(permits_app, name="permits")


@permits_app.command("add")
def cmd_permits_add(
    user: str = typer.Option(..., "--user", help="Identificador do usuário"),
    active_permits: int = typer.Option(..., "--permits", help="Permissões ativas"),
    permit_year: int = typer.Option(..., "--year", help="Ano das permissões"),
    company_name: Optional[str] = typer.Option(None, "--company", help="Empresa"),
    notes: Optional[str] = typer.Option(None, help="Observações"),
    upsert: bool = typer.Option(False, "--upsert", help="Atualiza se já houver registro no ano"),
    db_path: str = typer.Option(DB_PATH, "--db", help="Caminho do SQLite"),
):
    """Cria (ou, com --upsert, atualiza) o registro do ano."""
    data = {
        "active_permits": active_permits,
        "permit_year": permit_year,
        "company_name": company_name,
        "notes": notes,
    }
    try:
        if upsert:
            row = upsert_current_year_permit(user, data, db_path=db_path)
        else:
            row = create_permit(user, data, db_path=db_path)
    except PermitRecordError as e:
        _fail(e.message)
    _display_permits([row], title="Registro Salvo")


@permits_app.command("update")
def cmd_permits_update(
    permit_id: int = typer.Argument(..., help="Id do registro"),
    active_permits: Optional[int] = typer.Option(None, "--permits", help="Permissões ativas"),
    permit_year: Optional[int] = typer.Option(None, "--year", help="Ano das permissões"),
    company_name: Optional[str] = typer.Option(None, "--company", help="Empresa"),
    notes: Optional[str] = typer.Option(None, help="Observações"),
    db_path: str = typer.Option(DB_PATH, "--db", help="Caminho do SQLite"),
):
    """Atualiza apenas os campos informados."""
    data = {
        "active_permits": active_permits,
        "permit_year": permit_year,
        "company_name": company_name,
        "notes": notes,
    }
    data = {k: v for k, v in data.items() if v is not None}
    try:
        row = update_permit(permit_id, data, db_path=db_path)
    except PermitRecordError as e:
        _fail(e.message)
    _display_permits([row], title="Registro Atualizado")


@permits_app.command("delete")
def cmd_permits_delete(
    permit_id: int = typer.Argument(..., help="Id do registro"),
    db_path: str = typer.Option(DB_PATH, "--db", help="Caminho do SQLite"),
):
    """Remove um registro."""
    try:
        delete_permit(permit_id, db_path=db_path)
    except PermitRecordError as e:
        _fail(e.message)
    typer.echo(f">> Registro {permit_id} removido.")


@permits_app.command("list")
def cmd_permits_list(
    user: str = typer.Option(..., "--user", help="Identificador do usuário"),
    as_json: bool = typer.Option(False, "--json", help="Saída em JSON"),
    db_path: str = typer.Option(DB_PATH, "--db", help="Caminho do SQLite"),
):
    """Lista os registros do usuário (ano mais recente primeiro)."""
    rows = get_user_permits(user, db_path=db_path)
    if as_json:
        _print_json(rows)
        return
    _display_permits(rows, title=f"Permissões de {user}")


@permits_app.command("show")
def cmd_permits_show(
    user: str = typer.Option(..., "--user", help="Identificador do usuário"),
    permit_year: Optional[int] = typer.Option(None, "--year", help="Ano (padrão: ano corrente)"),
    db_path: str = typer.Option(DB_PATH, "--db", help="Caminho do SQLite"),
):
    """Mostra o registro do ano corrente (ou de --year)."""
    row = get_current_year_permit(user, permit_year, db_path=db_path)
    _display_permits([row] if row else [], title="Registro do Ano")


# -----------------------
# status
# -----------------------

@app.command("status")
def cmd_status(
    user: Optional[str] = typer.Option(None, "--user", help="Lê permissões do registro salvo"),
    permit_year: Optional[int] = typer.Option(None, "--year", help="Ano do registro (com --user)"),
    active_permits: Optional[int] = typer.Option(None, "--permits", help="Permissões ativas"),
    rate: Optional[float] = typer.Option(None, "--rate", help="Consumo médio em tCO₂/mês"),
    cumulative: Optional[float] = typer.Option(None, "--emissions-total", help="Emissões acumuladas (tCO₂)"),
    buffer_months: Optional[float] = typer.Option(None, "--buffer-months", help="Colchão alvo em meses"),
    warning_pct: Optional[float] = typer.Option(None, "--warning-pct", help="Alerta de capacidade usada (%)"),
    emissions_file: Optional[Path] = typer.Option(None, "--emissions-file", help="Planilha de emissões (CSV/XLSX)"),
    as_json: bool = typer.Option(False, "--json", help="Saída em JSON"),
    db_path: str = typer.Option(DB_PATH, "--db", help="Caminho do SQLite"),
):
    """
    Calcula validade das permissões, semáforo e recomendações.
    Sai com código 1 quando os dados são insuficientes ou inválidos.
    """
    if emissions_file is not None:
        ok, errors, _ = validate_emissions_file(str(emissions_file))
        if not ok:
            _fail("; ".join(errors))
        summary =summarize_emissions(load_emissions(str(emissions_file)))
        if rate is None:
            rate = summary.avg_consumption_rate_t_per_month
        if cumulative is None:
            cumulative = summary.cumulative_emissions_t

    if user and active_permits is None:
        res = run_permits_status(
            user,
            avg_consumption_rate_t_per_month=rate,
            cumulative_emissions_t=cumulative,
            permit_year=permit_year,
            target_buffer_months=buffer_months,
            warning_threshold_pct=warning_pct,
            db_path=db_path,
        )
        status = res["status"]
        active_permits = res["input"]["active_permits"]
    else:
        status = calculate_permits_status({
            "active_permits": active_permits,
            "avg_consumption_rate_t_per_month": rate,
            "target_buffer_months": buffer_months,
            "warning_threshold_pct": warning_pct,
            "cumulative_emissions_t": cumulative,
        })

    if as_json:
        _print_json(asdict(status))
    else:
        _display_status(status, active_permits)
    if not status.is_valid:
        raise typer.Exit(code=1)


# -----------------------
# planilhas de emissões
# -----------------------

emissions_app = typer.Typer(help="Planilhas de emissões das usinas.")
app.add_typer(emissions_app, name="emissions")


@emissions_app.command("validate")
def cmd_emissions_validate(
    path: Path = typer.Argument(..., help="Caminho do CSV/XLSX de emissões"),
):
    """Valida cabeçalhos e campos numéricos da planilha."""
    ok, errors, row_count = validate_emissions_file(str(path))
    size = format_file_size(path.stat().st_size) if path.exists() else "?"
    if ok:
        console.print(Panel(f"{row_count} linhas ({size})", title="Arquivo válido", border_style="green"))
        return
    table = Table(title="Erros Encontrados", box=box.ROUNDED)
    table.add_column("Erro")
    for err in errors:
        table.add_row(err)
    console.print(table)
    raise typer.Exit(code=1)


@emissions_app.command("summary")
def cmd_emissions_summary(
    path: Path = typer.Argument(..., help="Caminho do CSV/XLSX de emissões"),
):
    """Deriva consumo médio mensal e emissões acumuladas (JSON)."""
    ok, errors, _ = validate_emissions_file(str(path))
    if not ok:
        _fail("; ".join(errors))
    summary = summarize_emissions(load_emissions(str(path)))
    _print_json(asdict(summary))


# -----------------------
# logs
# -----------------------

@app.command("logs")
def cmd_logs(
    log_type: str = typer.Option("transactions", "--type", help="transactions | permits | calculations | database | system"),
    lines: int = typer.Option(20, help="Linhas mais recentes"),
):
    """Mostra as linhas mais recentes de um log (requer ESBOOST_LOGGING=1)."""
    summary = get_log_summary(log_type, lines=lines)
    if summary is None:
        typer.echo("Logging desabilitado. Defina ESBOOST_LOGGING=1.")
        return
    typer.echo(summary)


# Entry point opcional:
def main():
    app()


if __name__ == "__main__":
    main()
