# esboost/infra/repositories.py
"""
Repositórios (DAO) para acesso e manipulação de dados no SQLite.

Classes:
- ParamsRepo
- PermitRepo
"""

from __future__ import annotations

from dataclasses import asdict, is_dataclass
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Tuple

from .db import connect


# -------------------------
# Helpers
# -------------------------

PERMIT_COLUMNS = (
    "id", "user_id", "active_permits", "company_name",
    "permit_year", "notes", "created_at", "updated_at",
)

# Campos que o formulário pode alterar
PERMIT_EDITABLE = ("active_permits", "company_name", "permit_year", "notes")


def _as_dict(row: Any) -> Dict[str, Any]:
    if isinstance(row, dict):
        return row
    if is_dataclass(row):
        return asdict(row)
    raise TypeError("row must be dict or dataclass")


def _now_iso() -> str:
    return datetime.now().isoformat(timespec="seconds")


def _fetch_dicts(cur) -> List[Dict[str, Any]]:
    cols = [d[0] for d in cur.description]
    return [dict(zip(cols, row)) for row in cur.fetchall()]


# -------------------------
# Params
# -------------------------

class ParamsRepo:
    def __init__(self, db_path: str):
        self.db_path = db_path

    def set_many(self, items: Iterable[Tuple[str, str]]) -> None:
        with connect(self.db_path) as c:
            c.executemany(
                """
                INSERT INTO params (chave, valor)
                VALUES (?, ?)
                ON CONFLICT(chave) DO UPDATE SET valor=excluded.valor
                """,
                list(items),
            )

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        with connect(self.db_path) as c:
            row = c.execute("SELECT valor FROM params WHERE chave = ?", (key,)).fetchone()
            return row[0] if row else default

    def get_float(self, key: str, default: Optional[float]) -> Optional[float]:
        v = self.get(key, None)
        if v is None:
            return default
        try:
            return float(v)
        except Exception:
            return default


# -------------------------
# Permissões EU ETS
# -------------------------

class PermitRepo:
    def __init__(self, db_path: str):
        self.db_path = db_path

    def insert(self, user_id: str, row: Any) -> Dict[str, Any]:
        """Insere um registro e devolve a linha gravada."""
        r = {k: _as_dict(row).get(k) for k in PERMIT_EDITABLE}
        now = _now_iso()
        payload = {**r, "user_id": user_id, "created_at": now, "updated_at": now}
        with connect(self.db_path) as c:
            cur = c.execute(
                """
                INSERT INTO eu_permits
                    (user_id, active_permits, company_name, permit_year, notes,
                     created_at, updated_at)
                VALUES
                    (:user_id, :active_permits, :company_name, :permit_year, :notes,
                     :created_at, :updated_at)
                """,
                payload,
            )
            new_id = cur.lastrowid
        return self.get(new_id)

    def upsert(self, user_id: str, row: Any) -> Dict[str, Any]:
        """Cria ou atualiza o registro de (user_id, permit_year)."""
        r = {k: _as_dict(row).get(k) for k in PERMIT_EDITABLE}
        now = _now_iso()
        payload = {**r, "user_id": user_id, "created_at": now, "updated_at": now}
        with connect(self.db_path) as c:
            c.execute(
                """
                INSERT INTO eu_permits
                    (user_id, active_permits, company_name, permit_year, notes,
                     created_at, updated_at)
                VALUES
                    (:user_id, :active_permits, :company_name, :permit_year, :notes,
                     :created_at, :updated_at)
                ON CONFLICT(user_id, permit_year) DO UPDATE SET
                    active_permits=excluded.active_permits,
                    company_name=excluded.company_name,
                    notes=excluded.notes,
                    updated_at=excluded.updated_at
                """,
                payload,
            )
        return self.get_by_user_year(user_id, int(r["permit_year"]))

    def update(self, permit_id: int, fields: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """Atualiza apenas os campos informados. Devolve None se o id não existe."""
        changes = {k: v for k, v in fields.items() if k in PERMIT_EDITABLE}
        changes["updated_at"] = _now_iso()
        sets = ", ".join(f"{k} = :{k}" for k in changes)
        with connect(self.db_path) as c:
            cur = c.execute(
                f"UPDATE eu_permits SET {sets} WHERE id = :id",
                {**changes, "id": permit_id},
            )
            if cur.rowcount == 0:
                return None
        return self.get(permit_id)

    def delete(self, permit_id: int) -> int:
        with connect(self.db_path) as c:
            cur = c.execute("DELETE FROM eu_permits WHERE id = ?", (permit_id,))
            return cur.rowcount

    def get(self, permit_id: int) -> Optional[Dict[str, Any]]:
        with connect(self.db_path) as c:
            cur = c.execute(
                f"SELECT {', '.join(PERMIT_COLUMNS)} FROM eu_permits WHERE id = ?",
                (permit_id,),
            )
            rows = _fetch_dicts(cur)
            return rows[0] if rows else None

    def get_by_user_year(self, user_id: str, permit_year: int) -> Optional[Dict[str, Any]]:
        with connect(self.db_path) as c:
            cur = c.execute(
                f"""SELECT {', '.join(PERMIT_COLUMNS)} FROM eu_permits
                    WHERE user_id = ? AND permit_year = ?""",
                (user_id, permit_year),
            )
            rows = _fetch_dicts(cur)
            return rows[0] if rows else None

    def list_by_user(self, user_id: str) -> List[Dict[str, Any]]:
        """Registros do usuário, do ano mais recente para o mais antigo."""
        with connect(self.db_path) as c:
            cur = c.execute(
                f"""SELECT {', '.join(PERMIT_COLUMNS)} FROM eu_permits
                    WHERE user_id = ?
                    ORDER BY permit_year DESC""",
                (user_id,),
            )
            return _fetch_dicts(cur)
