# esboost/infra/migrations.py
"""
Migrações de schema usando PRAGMA user_version.

V1: tabelas base (params, eu_permits)
V2: índice de consulta por usuário/ano
"""

from __future__ import annotations

from typing import List
from .db import connect


SCHEMA_V1: List[str] = [
    # Parâmetros K/V
    """
    CREATE TABLE IF NOT EXISTS params (
        chave TEXT PRIMARY KEY,
        valor TEXT
    );
    """,
    # Registros de permissões EU ETS (um por usuário e ano)
    """
    CREATE TABLE IF NOT EXISTS eu_permits (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        user_id TEXT NOT NULL,
        active_permits INTEGER NOT NULL CHECK (active_permits >= 0),
        company_name TEXT,
        permit_year INTEGER NOT NULL,
        notes TEXT,
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL,
        UNIQUE (user_id, permit_year)
    );
    """,
]

SCHEMA_V2: List[str] = [
    """
    CREATE INDEX IF NOT EXISTS ix_eu_permits_user_year
        ON eu_permits (user_id, permit_year DESC);
    """,
]


def _apply_v1(conn) -> None:
    for sql in SCHEMA_V1:
        conn.executescript(sql)


def _apply_v2(conn) -> None:
    for sql in SCHEMA_V2:
        conn.executescript(sql)


def apply_migrations(db_path: str) -> None:
    """Aplica migrações incrementais de acordo com PRAGMA user_version."""
    with connect(db_path) as conn:
        ver = conn.execute("PRAGMA user_version;").fetchone()[0] or 0

        if ver < 1:
            _apply_v1(conn)
            conn.execute("PRAGMA user_version = 1;")
            ver = 1

        if ver < 2:
            _apply_v2(conn)
            conn.execute("PRAGMA user_version = 2;")
            ver = 2
