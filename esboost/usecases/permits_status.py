# esboost/usecases/permits_status.py
"""
Caso de uso: status das permissões EU ETS (validade, semáforo e recomendações).

Fluxo de ``calculate_permits_status`` (puro, sem I/O):
1) Valida os campos obrigatórios e a taxa de consumo.
2) Aplica os padrões (colchão de 12 meses, alerta em 80%).
3) Calcula capacidade, meses/anos restantes e percentual consumido.
4) Classifica o semáforo e dimensiona o colchão.
5) Gera até três recomendações.

``run_permits_status`` é a versão com banco: lê o registro do ano corrente
e os parâmetros salvos, chama o cálculo e registra o resultado no log.
"""

from __future__ import annotations

from dataclasses import asdict, is_dataclass
from datetime import date
from typing import Any, Dict, Mapping, Optional

from esboost.config import DB_PATH, DEFAULTS
from esboost.domain.formulas import (
    total_capacity,
    months_remaining,
    years_remaining,
    consumed_pct,
    needed_permits_for_buffer,
    months_to_buffer,
)
from esboost.domain.models import PermitsCalculationResult, PermitsStatus
from esboost.domain.policies import recommendations_for, status_light
from esboost.infra.logger import log_calculation, log_system_event, log_transaction
from esboost.infra.migrations import apply_migrations
from esboost.infra.repositories import ParamsRepo, PermitRepo


MISSING_DATA_ERROR = (
    "Insufficient data to calculate permit validity. "
    "Please provide active_permits and avg_consumption_rate_t_per_month."
)
NON_POSITIVE_RATE_ERROR = "Average consumption must be > 0 tCO₂/month."


def _as_mapping(data: Any) -> Mapping[str, Any]:
    if data is None:
        return {}
    if is_dataclass(data):
        return asdict(data)
    return data


def _invalid(error: str) -> PermitsStatus:
    return PermitsStatus(is_valid=False, error=error, data=None, recommendations=[])


def calculate_permits_status(data: Any) -> PermitsStatus:
    """Calcula o status do inventário de permissões.

    Aceita um ``PermitInventoryInput`` ou um dicionário com as mesmas
    chaves. Entradas ausentes ou taxa de consumo não positiva resultam em
    ``PermitsStatus(is_valid=False, error=...)``; nada é lançado.
    """
    inp = _as_mapping(data)
    active = inp.get("active_permits")
    rate = inp.get("avg_consumption_rate_t_per_month")

    if active is None or rate is None:
        return _invalid(MISSING_DATA_ERROR)
    if rate <= 0:
        return _invalid(NON_POSITIVE_RATE_ERROR)

    buffer_months = inp.get("target_buffer_months")
    if buffer_months is None:
        buffer_months = DEFAULTS.target_buffer_months
    warning_pct = inp.get("warning_threshold_pct")
    if warning_pct is None:
        warning_pct = DEFAULTS.warning_threshold_pct

    capacity = total_capacity(active)
    months = months_remaining(capacity, rate)
    years = years_remaining(months)
    light = status_light(active, months)

    cumulative = inp.get("cumulative_emissions_t")
    pct = consumed_pct(cumulative, capacity) if cumulative is not None else None

    needed = needed_permits_for_buffer(capacity, rate, months, buffer_months)
    to_buffer = months_to_buffer(months, buffer_months)

    result = PermitsCalculationResult(
        total_capacity_t=capacity,
        months_remaining=months,
        years_remaining=years,
        status_light=light,
        consumed_pct=pct,
        needed_permits_for_buffer=needed,
        months_to_buffer=to_buffer,
    )
    recs = recommendations_for(
        active,
        light,
        needed,
        to_buffer,
        years,
        buffer_months,
        warning_pct,
    )
    return PermitsStatus(is_valid=True, error=None, data=result, recommendations=recs)


def _pick_params(params_repo: ParamsRepo):
    """Carrega parâmetros globais, com fallback para DEFAULTS."""
    buffer_months = params_repo.get_float("target_buffer_months", DEFAULTS.target_buffer_months)
    warning_pct = params_repo.get_float("warning_threshold_pct", DEFAULTS.warning_threshold_pct)
    rate = params_repo.get_float("avg_consumption_rate_t_per_month", None)
    return buffer_months, warning_pct, rate


def run_permits_status(
    user_id: str,
    avg_consumption_rate_t_per_month: Optional[float] = None,
    cumulative_emissions_t: Optional[float] = None,
    permit_year: Optional[int] = None,
    target_buffer_months: Optional[float] = None,
    warning_threshold_pct: Optional[float] = None,
    db_path: str = DB_PATH,
) -> Dict[str, Any]:
    """Calcula o status a partir do registro salvo de ``user_id``.

    Valores informados (taxa, colchão, alerta) têm precedência sobre os
    salvos em ``params``.
    Sem registro para o ano, o cálculo recebe ``active_permits`` ausente e
    devolve o erro de dados insuficientes.

    Returns:
        ``{"permit": <registro ou None>, "input": {...}, "status": PermitsStatus}``
    """
    year = permit_year or date.today().year
    log_system_event("permits_status_start", {"user_id": user_id, "permit_year": year})

    try:
        apply_migrations(db_path)
        buffer_months, warning_pct, stored_rate = _pick_params(ParamsRepo(db_path))
        permit = PermitRepo(db_path).get_by_user_year(user_id, year)

        rate = avg_consumption_rate_t_per_month
        if rate is None:
            rate = stored_rate
        if target_buffer_months is not None:
            buffer_months = target_buffer_months
        if warning_threshold_pct is not None:
            warning_pct = warning_threshold_pct

        inp = {
            "active_permits": permit["active_permits"] if permit else None,
            "avg_consumption_rate_t_per_month": rate,
            "target_buffer_months": buffer_months,
            "warning_threshold_pct": warning_pct,
            "cumulative_emissions_t": cumulative_emissions_t,
            "current_date": date.today().isoformat(),
        }
        status = calculate_permits_status(inp)

        log_calculation(
            status.data.status_light if status.data else None,
            status.is_valid,
            user_id=user_id,
            permit_year=year,
            error=status.error,
        )
        log_transaction("permits_status", {"user_id": user_id, "permit_year": year},
                        result=status.data.status_light if status.data else status.error)
        return {"permit": permit, "input": inp, "status": status}
    except Exception as e:
        error_msg = str(e)
        log_transaction("permits_status", {"user_id": user_id, "permit_year": year}, error=error_msg)
        log_system_event("permits_status_error", {"error": error_msg}, level="error")
        raise
