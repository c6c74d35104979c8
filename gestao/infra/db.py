# gestao/infra/db.py
"""
Utilidades de conexão SQLite.
"""

from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from typing import Iterator

from gestao.domain.erros import PermissaoNegada


@contextmanager
def connect(db_path: str, immediate: bool = False) -> Iterator[sqlite3.Connection]:
    """
    Context manager para abrir conexão SQLite com:
    - row_factory = sqlite3.Row
    - busy_timeout para escritas concorrentes
    - BEGIN IMMEDIATE opcional (reserva a escrita desde o início)
    - commit ao sair (rollback em caso de exceção)

    Escrita em banco somente leitura vira ``PermissaoNegada``.
    """
    conn = sqlite3.connect(db_path, timeout=5.0)
    try:
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON;")
        if immediate:
            conn.execute("BEGIN IMMEDIATE;")
        yield conn
        conn.commit()
    except sqlite3.OperationalError as e:
        conn.rollback()
        if "readonly" in str(e):
            raise PermissaoNegada(f"Sem permissão de escrita em {db_path}.") from e
        raise
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()
