# esboost/config.py
"""
Configurações globais e valores padrão do cálculo de permissões.
"""

import os
from dataclasses import dataclass


# Caminho padrão do banco de dados SQLite
DB_PATH = os.environ.get("ESBOOST_DB", os.path.join(os.getcwd(), "esboost.db"))


@dataclass
class DefaultConfig:
    """Valores padrão para parâmetros do sistema."""
    target_buffer_months: float = 12.0  # Colchão alvo em meses
    warning_threshold_pct: float = 80.0  # Alerta de capacidade usada (%)


# Instância global dos valores padrão
DEFAULTS = DefaultConfig()
