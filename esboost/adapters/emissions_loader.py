# esboost/adapters/emissions_loader.py
"""
Loader para planilhas de emissões das usinas (CSV ou XLSX).

Essas funções:
- validam o arquivo (extensão, cabeçalhos obrigatórios, campos numéricos);
- leem a planilha usando pandas;
- derivam a taxa média de consumo (tCO₂/mês) e as emissões acumuladas
  a partir da coluna ``CO2_emissions_tonnes``.

Observações:
- Datas são normalizadas para ISO (YYYY-MM-DD) quando possível.
- Apenas as cinco primeiras linhas de dados são checadas na validação.
"""

from __future__ import annotations

import csv
from itertools import islice
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import pandas as pd

from esboost.domain.formulas import avg_monthly_rate
from esboost.domain.models import EmissionsSummary
from esboost.infra.logger import log_file_operation, log_system_event


EXPECTED_HEADERS = (
    "date",
    "plant_id",
    "plant_name",
    "fuel_type",
    "electricity_output_MWh",
    "heat_output_MWh",
    "fuel_consumption_MWh",
    "CO2_emissions_tonnes",
    "CH4_emissions_kg",
    "N2O_emissions_kg",
    "efficiency_percent",
)

NUMERIC_FIELDS = (
    "plant_id",
    "electricity_output_MWh",
    "heat_output_MWh",
    "fuel_consumption_MWh",
    "CO2_emissions_tonnes",
    "CH4_emissions_kg",
    "N2O_emissions_kg",
    "efficiency_percent",
)

SUPPORTED_SUFFIXES = (".csv", ".xlsx", ".xls")
SAMPLE_ROWS = 5


# ---------------------------
# utilitários
# ---------------------------

def _read_raw(path: str) -> pd.DataFrame:
    """Lê a planilha com todas as colunas como string."""
    if Path(path).suffix.lower() in (".xlsx", ".xls"):
        df = pd.read_excel(path, dtype="string")
    else:
        df = pd.read_csv(path, dtype="string", skipinitialspace=True)
    df.columns = [str(c).strip() for c in df.columns]
    return df


def _column_count_errors(path: str) -> List[str]:
    """Compara o número de campos das primeiras linhas de um CSV com o cabeçalho.

    O pandas completa linhas curtas com NA e falha com erro do tokenizador
    em linhas longas, então a contagem é feita direto no texto.
    """
    with open(path, newline="", encoding="utf-8-sig") as fh:
        rows = (r for r in csv.reader(fh) if any(c.strip() for c in r))
        header = next(rows, None)
        if header is None:
            return []
        errors = []
        for i, row in enumerate(islice(rows, SAMPLE_ROWS)):
            if len(row) != len(header):
                errors.append(f"Row {i + 2} has {len(row)} columns, expected {len(header)}")
    return errors


def _safe_get(row, key):
    """Safely gets a value from pandas row, handling NA values."""
    val = row.get(key)
    if val is None or pd.isna(val):
        return None
    return val


def _to_float(val: Any) -> Optional[float]:
    if val is None:
        return None
    s = str(val).strip()
    if not s:
        return None
    try:
        return float(s)
    except ValueError:
        return None


def _to_date_iso(val: Any) -> Optional[str]:
    """Converte valor para data ISO (YYYY-MM-DD) se possível."""
    if val is None:
        return None
    s = str(val).strip()
    if not s:
        return None
    d = pd.to_datetime(s, errors="coerce")
    if pd.isna(d):
        return None
    return d.date().isoformat()


# ---------------------------
# API pública
# ---------------------------

def validate_emissions_file(path: str) -> Tuple[bool, List[str], Optional[int]]:
    """Valida uma planilha de emissões.

    Returns:
        ``(is_valid, errors, row_count)``. ``row_count`` é None quando o
        arquivo nem pôde ser lido.
    """
    errors: List[str] = []
    suffix = Path(path).suffix.lower()
    if suffix not in SUPPORTED_SUFFIXES:
        errors.append("File must be a CSV file")

    column_errors: List[str] = []
    try:
        if suffix == ".csv":
            column_errors = _column_count_errors(path)
        df = _read_raw(path)
    except pd.errors.EmptyDataError:
        errors.append("CSV must contain at least a header row and one data row")
        log_file_operation("validate", path, rows_processed=0, errors=len(errors))
        return False, errors, 0
    except Exception as e:
        # linha longa demais: o erro de contagem é mais claro que o do tokenizador
        errors.extend(column_errors or [f"Failed to parse CSV: {e}"])
        log_file_operation("validate", path, error=str(e))
        return False, errors, None

    if len(df) < 1:
        errors.append("CSV must contain at least a header row and one data row")
        return False, errors, 0

    headers = list(df.columns)
    missing = [h for h in EXPECTED_HEADERS if h not in headers]
    if missing:
        errors.append(f"Missing required headers: {', '.join(missing)}")
    errors.extend(column_errors)

    for i, (_, row) in enumerate(df.head(SAMPLE_ROWS).iterrows()):
        for field in NUMERIC_FIELDS:
            if field not in headers:
                continue
            value = _safe_get(row, field)
            value = str(value).strip() if value is not None else ""
            if value and _to_float(value) is None:
                # linha 1 é o cabeçalho
                errors.append(f'Row {i + 2}: {field} must be a number, got "{value}"')

    log_file_operation("validate", path, rows_processed=len(df), errors=len(errors))
    return len(errors) == 0, errors, len(df)


def load_emissions(path: str) -> List[Dict[str, Any]]:
    """Lê a planilha e devolve uma lista de registros por linha.

    Campos numéricos são convertidos para float (None se vazio/inválido);
    ``plant_id`` vira int quando possível.
    """
    try:
        df = _read_raw(path)
    except Exception as e:
        log_system_event("emissions_load_error", {"file_path": path, "error": str(e)}, level="error")
        raise

    out: List[Dict[str, Any]] = []
    for _, row in df.iterrows():
        rec: Dict[str, Any] = {
            "date": _to_date_iso(_safe_get(row, "date")),
            "plant_name": _safe_get(row, "plant_name"),
            "fuel_type": _safe_get(row, "fuel_type"),
        }
        for field in NUMERIC_FIELDS:
            rec[field] = _to_float(_safe_get(row, field))
        if rec["plant_id"] is not None and rec["plant_id"].is_integer():
            rec["plant_id"] = int(rec["plant_id"])
        out.append(rec)

    log_file_operation("import", path, rows_processed=len(out))
    return out


def summarize_emissions(rows: List[Dict[str, Any]]) -> EmissionsSummary:
    """Consolida o CO₂ por mês e deriva taxa média e total acumulado.

    Linhas sem data contam no total acumulado, mas não no cálculo mensal.
    """
    monthly: Dict[str, float] = {}
    cumulative = 0.0
    for r in rows:
        co2 = r.get("CO2_emissions_tonnes")
        if co2 is None:
            continue
        cumulative += float(co2)
        d = r.get("date")
        if d:
            ym = str(d)[:7]
            monthly[ym] = monthly.get(ym, 0.0) + float(co2)

    return EmissionsSummary(
        rows=len(rows),
        months=len(monthly),
        cumulative_emissions_t=cumulative,
        avg_consumption_rate_t_per_month=avg_monthly_rate(monthly.values()),
    )
