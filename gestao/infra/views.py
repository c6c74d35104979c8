"""
Criação de views auxiliares para consultas frequentes.

Views criadas:
- vw_inventario:   extrai nome, categoria e atributos de compatibilidade
                   dos documentos de inventário.

Obs.:
- As views assumem que as migrações V1→V2 já foram aplicadas.
- A quantidade fica como texto em `dados`; o filtro de estoque usa
  `parse_numero`, que entende vírgula decimal ("0,5").
"""

from __future__ import annotations

from .db import connect


def create_views(db_path: str) -> None:
    with connect(db_path) as c:
        c.executescript(
            """
            ---------------------------
            -- Inventário
            ---------------------------
            DROP VIEW IF EXISTS vw_inventario;
            CREATE VIEW vw_inventario AS
            SELECT
                tenant_id,
                id,
                json_extract(dados, '$.component')                       AS component,
                json_extract(dados, '$.category')                        AS category,
                json_extract(dados, '$.socket')                          AS socket,
                json_extract(dados, '$.ramType')                         AS ram_type,
                dados
            FROM documento
            WHERE colecao = 'inventario';
            """
        )
