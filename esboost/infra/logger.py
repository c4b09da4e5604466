# esboost/infra/logger.py
"""
Sistema de logging para o cálculo e os registros de permissões.

Este módulo configura e fornece loggers para registrar as operações
relevantes do sistema: cálculos de status, alterações nos registros de
permissões, importação de planilhas de emissões e acesso ao banco.
"""

import logging
import os
from pathlib import Path
from typing import Dict, Any, Optional


def _env_flag(name: str) -> bool:
    return os.environ.get(name, "").strip().lower() in {"1", "true", "yes", "on"}


# Flag global para habilitar/desabilitar logging
ENABLE_LOGGING = _env_flag("ESBOOST_LOGGING")
# Flag global para habilitar/desabilitar prints/output
ENABLE_OUTPUT = _env_flag("ESBOOST_OUTPUT")

def print_system(*args, **kwargs):
    """Print controlado pelo ENABLE_OUTPUT."""
    if ENABLE_OUTPUT:
        print(*args, **kwargs)

# Configuração base dos loggers
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

def setup_logger(name: str, log_file: str, level: int = logging.INFO) -> logging.Logger:
    """
    Configura um logger específico com arquivo de saída.

    O arquivo só é aberto na primeira mensagem gravada.

    Args:
        name: Nome do logger
        log_file: Caminho do arquivo de log
        level: Nível de logging (DEBUG, INFO, WARNING, ERROR, CRITICAL)

    Returns:
        Logger configurado
    """
    log_path = Path(log_file)
    log_path.parent.mkdir(parents=True, exist_ok=True)

    logger = logging.getLogger(name)
    logger.setLevel(level)
    logger.propagate = False

    # Remove handlers existentes (reconfiguração)
    while logger.handlers:
        logger.removeHandler(logger.handlers[0])

    file_handler = logging.FileHandler(log_file, encoding='utf-8', delay=True)
    file_handler.setLevel(level)
    file_handler.setFormatter(logging.Formatter(LOG_FORMAT, DATE_FORMAT))
    logger.addHandler(file_handler)

    return logger

# Diretório base para logs (na pasta do módulo, ou ESBOOST_LOGS_DIR)
BASE_DIR = Path(__file__).parent.parent
LOGS_DIR = Path(os.environ.get("ESBOOST_LOGS_DIR") or (BASE_DIR / "logs"))

LOG_FILES = {
    "transactions": LOGS_DIR / "transactions.log",
    "permits": LOGS_DIR / "permits.log",
    "calculations": LOGS_DIR / "calculations.log",
    "database": LOGS_DIR / "database.log",
    "system": LOGS_DIR / "system.log",
}

# Loggers específicos para cada operação
transaction_logger = setup_logger('esboost.transactions', str(LOG_FILES["transactions"]))
permit_logger = setup_logger('esboost.permits', str(LOG_FILES["permits"]))
calculation_logger = setup_logger('esboost.calculations', str(LOG_FILES["calculations"]))
database_logger = setup_logger('esboost.database', str(LOG_FILES["database"]))
system_logger = setup_logger('esboost.system', str(LOG_FILES["system"]))

def log_transaction(operation: str, data: Dict[str, Any], result: Optional[Any] = None, error: Optional[str] = None) -> None:
    """
    Registra uma transação completa no log.

    Args:
        operation: Tipo de operação (create_permit, status, etc.)
        data: Dados da transação
        result: Resultado da operação (opcional)
        error: Mensagem de erro (opcional)
    """
    if not (ENABLE_LOGGING or ENABLE_OUTPUT):
        return
    if error:
        transaction_logger.error(f"TRANSACTION_FAILED: {operation} - {error} - Data: {data}")
    else:
        transaction_logger.info(f"TRANSACTION_SUCCESS: {operation} - Result: {result} - Data: {data}")

def log_permit(action: str, user_id: str, permit_year: Any = None, **kwargs) -> None:
    """
    Log específico para alterações em registros de permissões.

    Args:
        action: Ação realizada (create, update, delete, upsert)
        user_id: Dono do registro
        permit_year: Ano do registro (opcional)
        **kwargs: Dados adicionais
    """
    if not (ENABLE_LOGGING or ENABLE_OUTPUT):
        return
    log_data = {
        "action": action,
        "user_id": user_id,
        "permit_year": permit_year,
        **kwargs
    }
    permit_logger.info(f"PERMIT_{action.upper()}: {log_data}")

def log_calculation(status_light: Optional[str], is_valid: bool, **kwargs) -> None:
    """Log de um cálculo de status (entradas e semáforo resultante)."""
    if not (ENABLE_LOGGING or ENABLE_OUTPUT):
        return
    log_data = {"status_light": status_light, "is_valid": is_valid, **kwargs}
    if is_valid:
        calculation_logger.info(f"CALCULATION: {log_data}")
    else:
        calculation_logger.warning(f"CALCULATION_INVALID: {log_data}")

def log_database_operation(table: str, operation: str, affected_rows: int = 0, **kwargs) -> None:
    """
    Log específico para operações no banco de dados.

    Args:
        table: Nome da tabela
        operation: Operação SQL (INSERT, UPDATE, DELETE, SELECT)
        affected_rows: Número de linhas afetadas
        **kwargs: Dados adicionais
    """
    if not (ENABLE_LOGGING or ENABLE_OUTPUT):
        return
    log_data = {
        "table": table,
        "operation": operation,
        "affected_rows": affected_rows,
        **kwargs
    }
    database_logger.info(f"DB_{operation}: {log_data}")

def log_system_event(event: str, details: Dict[str, Any] = None, level: str = "info") -> None:
    """
    Log para eventos do sistema.

    Args:
        event: Descrição do evento
        details: Detalhes adicionais (opcional)
        level: Nível do log (info, warning, error)
    """
    if not (ENABLE_LOGGING or ENABLE_OUTPUT):
        return
    log_data = {
        "event": event,
        "details": details or {}
    }
    log_method = getattr(system_logger, level.lower(), system_logger.info)
    log_method(f"SYSTEM_EVENT: {event} - {log_data}")

def log_file_operation(operation: str, file_path: str, rows_processed: int = 0, **kwargs) -> None:
    """
    Log para operações de arquivo (validação/importação de emissões).

    Args:
        operation: Tipo de operação (validate, import)
        file_path: Caminho do arquivo
        rows_processed: Número de linhas processadas
        **kwargs: Dados adicionais
    """
    if not (ENABLE_LOGGING or ENABLE_OUTPUT):
        return
    log_data = {
        "operation": operation,
        "file_path": file_path,
        "rows_processed": rows_processed,
        **kwargs
    }
    system_logger.info(f"FILE_{operation.upper()}: {log_data}")

def get_log_summary(log_type: str = "transactions", lines: int = 100) -> Optional[str]:
    """
    Obtém um resumo dos logs recentes.

    Args:
        log_type: Tipo de log (transactions, permits, calculations, database, system)
        lines: Número de linhas a retornar

    Returns:
        Conteúdo do log como string (None com o logging desabilitado)
    """
    if not (ENABLE_LOGGING or ENABLE_OUTPUT):
        return None

    log_file = LOG_FILES.get(log_type)
    if not log_file or not log_file.exists():
        return f"Log {log_type} não encontrado."

    try:
        with open(log_file, 'r', encoding='utf-8') as f:
            all_lines = f.readlines()
            recent_lines = all_lines[-lines:] if len(all_lines) > lines else all_lines
            return ''.join(recent_lines)
    except OSError as e:
        return f"Erro ao ler log {log_type}: {str(e)}"
