# esboost/usecases/permit_records.py
"""
UC: Registros de permissões EU ETS (um por usuário e ano).

- validate_permit_input(): valida os dados do formulário.
- get_user_permits() / get_current_year_permit(): consultas.
- create_permit() / update_permit() / delete_permit() / upsert_current_year_permit().

Obs.:
- Erros do banco viram ``PermitRecordError`` com mensagem amigável.
- Toda operação é registrada nos logs de transação e de permissões.
"""

from __future__ import annotations

import sqlite3
from dataclasses import asdict, is_dataclass
from datetime import date
from typing import Any, Dict, List, Optional, Tuple

from esboost.config import DB_PATH
from esboost.infra.migrations import apply_migrations
from esboost.infra.repositories import PermitRepo
from esboost.infra.logger import (
    log_transaction, log_permit, log_database_operation, log_system_event, print_system
)


MIN_PERMIT_YEAR = 2020
MAX_PERMIT_YEAR = 2030
MAX_COMPANY_NAME = 100
MAX_NOTES = 500


class PermitRecordError(ValueError):
    """Falha ao gravar/consultar um registro de permissões."""

    def __init__(self, message: str, errors: Optional[List[str]] = None):
        super().__init__(message)
        self.message = message
        self.errors = errors or [message]


def _as_dict(data: Any) -> Dict[str, Any]:
    if is_dataclass(data):
        return asdict(data)
    return dict(data)


def _format_error(error: Exception) -> str:
    """Traduz erros do banco para mensagens de usuário."""
    msg = str(error) if error is not None else ""
    if not msg:
        return "An unexpected error occurred"
    if "UNIQUE constraint" in msg or "duplicate key" in msg:
        return "A permit record for this year already exists"
    if "CHECK constraint" in msg or "check constraint" in msg:
        return "Active permits must be a non-negative number"
    return msg


def _is_whole(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return True
    return isinstance(value, float) and value.is_integer()


def validate_permit_input(data: Any) -> Tuple[bool, List[str]]:
    """Valida os dados de um registro.

    Returns:
        ``(is_valid, errors)`` com as mensagens na ordem de verificação.
    """
    d = _as_dict(data)
    errors: List[str] = []

    active = d.get("active_permits")
    if active is not None and active < 0:
        errors.append("Active permits must be a non-negative number")
    if not _is_whole(active):
        errors.append("Active permits must be a whole number")

    year = d.get("permit_year")
    if year is None or year < MIN_PERMIT_YEAR or year > MAX_PERMIT_YEAR:
        errors.append(f"Permit year must be between {MIN_PERMIT_YEAR} and {MAX_PERMIT_YEAR}")

    company = d.get("company_name")
    if company and len(company) > MAX_COMPANY_NAME:
        errors.append(f"Company name must be less than {MAX_COMPANY_NAME} characters")

    notes = d.get("notes")
    if notes and len(notes) > MAX_NOTES:
        errors.append(f"Notes must be less than {MAX_NOTES} characters")

    return len(errors) == 0, errors


def _ensure_valid(data: Dict[str, Any]) -> None:
    ok, errors = validate_permit_input(data)
    if not ok:
        raise PermitRecordError("; ".join(errors), errors)


def _normalize(data: Any) -> Dict[str, Any]:
    d = _as_dict(data)
    rec = {
        "active_permits": d.get("active_permits"),
        "permit_year": d.get("permit_year"),
        "company_name": (d.get("company_name") or "").strip() or None,
        "notes": (d.get("notes") or "").strip() or None,
    }
    if _is_whole(rec["active_permits"]):
        rec["active_permits"] = int(rec["active_permits"])
    return rec


def get_user_permits(user_id: str, db_path: str = DB_PATH) -> List[Dict[str, Any]]:
    """Registros do usuário, do ano mais recente para o mais antigo."""
    apply_migrations(db_path)
    rows = PermitRepo(db_path).list_by_user(user_id)
    log_database_operation("eu_permits", "SELECT", len(rows), user_id=user_id)
    return rows


def get_current_year_permit(
    user_id: str, year: Optional[int] = None, db_path: str = DB_PATH
) -> Optional[Dict[str, Any]]:
    """Registro do ano corrente (ou de ``year``); None se não houver."""
    apply_migrations(db_path)
    year = year or date.today().year
    return PermitRepo(db_path).get_by_user_year(user_id, year)


def create_permit(user_id: str, data: Any, db_path: str = DB_PATH) -> Dict[str, Any]:
    """Cria um registro novo. Falha se já houver um para o mesmo ano."""
    rec = _normalize(data)
    log_system_event("create_permit_start", {"user_id": user_id, "permit_year": rec["permit_year"]})
    try:
        _ensure_valid(rec)
        apply_migrations(db_path)
        try:
            row = PermitRepo(db_path).insert(user_id, rec)
        except sqlite3.Error as e:
            raise PermitRecordError(_format_error(e)) from e
        log_database_operation("eu_permits", "INSERT", 1, user_id=user_id)
        log_permit("create", user_id, rec["permit_year"], active_permits=rec["active_permits"])
        print_system(f">> Registro {rec['permit_year']} criado para {user_id}.")
        log_transaction("create_permit", rec, result={"id": row["id"]})
        return row
    except PermitRecordError as e:
        log_transaction("create_permit", rec, error=e.message)
        log_system_event("create_permit_error", {"error": e.message}, level="error")
        raise


def update_permit(permit_id: int, data: Dict[str, Any], db_path: str = DB_PATH) -> Dict[str, Any]:
    """Atualiza os campos informados de um registro existente."""
    log_system_event("update_permit_start", {"id": permit_id})
    try:
        apply_migrations(db_path)
        repo = PermitRepo(db_path)
        current = repo.get(permit_id)
        if current is None:
            raise PermitRecordError("Permit record not found")
        merged = _normalize({**current, **{k: v for k, v in _as_dict(data).items() if v is not None}})
        _ensure_valid(merged)
        try:
            row = repo.update(permit_id, {k: merged[k] for k in _as_dict(data) if k in merged})
        except sqlite3.Error as e:
            raise PermitRecordError(_format_error(e)) from e
        if row is None:
            raise PermitRecordError("Permit record not found")
        log_database_operation("eu_permits", "UPDATE", 1, id=permit_id)
        log_permit("update", row["user_id"], row["permit_year"], id=permit_id)
        print_system(f">> Registro {permit_id} atualizado.")
        log_transaction("update_permit", {"id": permit_id, **_as_dict(data)}, result="success")
        return row
    except PermitRecordError as e:
        log_transaction("update_permit", {"id": permit_id}, error=e.message)
        log_system_event("update_permit_error", {"error": e.message}, level="error")
        raise


def delete_permit(permit_id: int, db_path: str = DB_PATH) -> None:
    """Remove um registro."""
    log_system_event("delete_permit_start", {"id": permit_id})
    apply_migrations(db_path)
    affected = PermitRepo(db_path).delete(permit_id)
    if affected == 0:
        log_transaction("delete_permit", {"id": permit_id}, error="Permit record not found")
        raise PermitRecordError("Permit record not found")
    log_database_operation("eu_permits", "DELETE", affected, id=permit_id)
    print_system(f">> Registro {permit_id} removido.")
    log_transaction("delete_permit", {"id": permit_id}, result="success")


def upsert_current_year_permit(user_id: str, data: Any, db_path: str = DB_PATH) -> Dict[str, Any]:
    """Cria ou atualiza o registro de (user_id, permit_year)."""
    rec = _normalize(data)
    if rec["permit_year"] is None:
        rec["permit_year"] = date.today().year
    log_system_event("upsert_permit_start", {"user_id": user_id, "permit_year": rec["permit_year"]})
    try:
        _ensure_valid(rec)
        apply_migrations(db_path)
        try:
            row = PermitRepo(db_path).upsert(user_id, rec)
        except sqlite3.Error as e:
            raise PermitRecordError(_format_error(e)) from e
        log_database_operation("eu_permits", "UPSERT", 1, user_id=user_id)
        log_permit("upsert", user_id, rec["permit_year"], active_permits=rec["active_permits"])
        print_system(f">> Registro {rec['permit_year']} salvo para {user_id}.")
        log_transaction("upsert_permit", rec, result={"id": row["id"]})
        return row
    except PermitRecordError as e:
        log_transaction("upsert_permit", rec, error=e.message)
        log_system_event("upsert_permit_error", {"error": e.message}, level="error")
        raise
