# esboost/domain/models.py
"""
Modelos (dataclasses) do domínio.

Observação importante:
- O cálculo aceita tanto ``PermitInventoryInput`` quanto dicionários;
  os repositórios trabalham com dicionários. As dataclasses servem
  para tipagem/clareza. Use-as quando fizer sentido.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional


# Capacidade de uma permissão (tCO₂). Constante de domínio, não configurável.
PERMIT_CAPACITY_T = 100000

# Semáforo
GREEN = "green"
YELLOW = "yellow"
RED = "red"


@dataclass
class PermitInventoryInput:
    """Inventário de permissões informado pelo chamador."""
    active_permits: Optional[int] = None
    avg_consumption_rate_t_per_month: Optional[float] = None
    target_buffer_months: Optional[float] = None
    warning_threshold_pct: Optional[float] = None
    cumulative_emissions_t: Optional[float] = None
    current_date: Optional[str] = None      # ISO; apenas informativo


@dataclass(frozen=True)
class PermitsCalculationResult:
    """Métricas derivadas (recalculadas a cada chamada)."""
    total_capacity_t: float
    months_remaining: float
    years_remaining: float
    status_light: str                       # 'green' | 'yellow' | 'red'
    consumed_pct: Optional[float]
    needed_permits_for_buffer: int
    months_to_buffer: float


@dataclass(frozen=True)
class PermitsStatus:
    """Resultado do cálculo. Verifique ``is_valid`` antes de ler ``data``."""
    is_valid: bool
    error: Optional[str] = None
    data: Optional[PermitsCalculationResult] = None
    recommendations: List[str] = field(default_factory=list)


@dataclass
class EUPermitInput:
    """Dados editáveis de um registro de permissões (formulário)."""
    active_permits: int
    permit_year: int
    company_name: Optional[str] = None
    notes: Optional[str] = None


@dataclass(frozen=True)
class EmissionsSummary:
    """Consumo derivado de uma planilha de emissões."""
    rows: int
    months: int
    cumulative_emissions_t: float
    avg_consumption_rate_t_per_month: Optional[float]
