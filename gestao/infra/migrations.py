"""
Migrações de schema usando PRAGMA user_version.

V1: tabela única de documentos (coleções por empresa)
V2: coluna atualizado_em e índices por coleção e data de atualização
"""

from __future__ import annotations

from typing import List
from .db import connect


SCHEMA_V1: List[str] = [
    # Documentos: cada registro é um mapeamento plano serializado em JSON,
    # agrupado por empresa (tenant) e coleção.
    """
    CREATE TABLE IF NOT EXISTS documento (
        tenant_id TEXT NOT NULL,
        colecao TEXT NOT NULL,
        id TEXT NOT NULL,
        versao INTEGER NOT NULL DEFAULT 1,
        dados TEXT NOT NULL,
        criado_em TEXT,
        PRIMARY KEY (tenant_id, colecao, id)
    );
    """,
]


def _ensure_column(conn, table: str, column: str, ddl: str) -> None:
    """Adiciona coluna se não existir."""
    cur = conn.execute(f"PRAGMA table_info({table});")
    cols = [r[1] for r in cur.fetchall()]  # r[1] é o nome da coluna
    if column not in cols:
        conn.execute(f"ALTER TABLE {table} ADD COLUMN {ddl};")


def _apply_v1(conn) -> None:
    for sql in SCHEMA_V1:
        conn.executescript(sql)


def _apply_v2(conn) -> None:
    _ensure_column(conn, "documento", "atualizado_em", "atualizado_em TEXT")
    conn.executescript(
        """
        CREATE INDEX IF NOT EXISTS idx_documento_colecao
            ON documento(tenant_id, colecao);
        CREATE INDEX IF NOT EXISTS idx_documento_atualizado
            ON documento(tenant_id, colecao, atualizado_em);
        """
    )


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
