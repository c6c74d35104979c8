"""
Repositórios para acesso e manipulação de documentos no SQLite.

Cada empresa (tenant) tem as coleções ``clientes``, ``pedidos``,
``ordens_servico``, ``inventario``, ``transacoes`` e ``pcs_montados``.
Os documentos são mapeamentos planos gravados como JSON na tabela
``documento``; a coluna ``versao`` é o controle de concorrência otimista.

Classes:
- DocumentoRepo (e os repositórios por coleção)
- UnidadeAtomica + executar_atomico (leitura-então-escrita condicional)
"""

from __future__ import annotations

import json
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Set, Tuple, TypeVar
from uuid import uuid4

from gestao.config import DEFAULTS
from gestao.domain.erros import Conflito, NaoAutenticado, NaoEncontrado
from gestao.infra.db import connect
from gestao.infra.eventos import barramento
from gestao.infra.logger import log_database_operation, log_system_event


COLECOES = (
    "clientes",
    "pedidos",
    "ordens_servico",
    "inventario",
    "transacoes",
    "pcs_montados",
)

T = TypeVar("T")


# -------------------------
# Helpers
# -------------------------

def agora_iso() -> str:
    return datetime.now().isoformat()


def novo_id() -> str:
    return uuid4().hex


def _validar_escopo(tenant_id: Optional[str], colecao: Optional[str] = None) -> None:
    if not tenant_id:
        raise NaoAutenticado()
    if colecao is not None and colecao not in COLECOES:
        raise ValueError(f"Coleção desconhecida: {colecao!r}")


def _serializar(dados: Dict[str, Any]) -> str:
    payload = {k: v for k, v in dados.items() if k != "id"}
    return json.dumps(payload, ensure_ascii=False, default=str)


def _carregar(row: Any) -> Dict[str, Any]:
    doc = json.loads(row["dados"])
    doc["id"] = row["id"]
    return doc


# -------------------------
# Documento (CRUD por coleção)
# -------------------------

class DocumentoRepo:
    colecao: str = ""

    def __init__(self, db_path: str, tenant_id: str, colecao: Optional[str] = None):
        self.colecao = colecao or self.colecao
        _validar_escopo(tenant_id, self.colecao)
        self.db_path = db_path
        self.tenant_id = tenant_id

    def _publicar(self) -> None:
        barramento.publicar(self.tenant_id, self.colecao)

    def get_com_versao(self, doc_id: str) -> Optional[Tuple[Dict[str, Any], int]]:
        with connect(self.db_path) as c:
            row = c.execute(
                """SELECT id, versao, dados FROM documento
                   WHERE tenant_id = ? AND colecao = ? AND id = ?""",
                (self.tenant_id, self.colecao, doc_id),
            ).fetchone()
        if row is None:
            return None
        return _carregar(row), int(row["versao"])

    def get(self, doc_id: str) -> Optional[Dict[str, Any]]:
        found = self.get_com_versao(doc_id)
        return found[0] if found else None

    def get_all(self, ordenar_por: Optional[str] = None, desc: bool = False) -> List[Dict[str, Any]]:
        with connect(self.db_path) as c:
            rows = c.execute(
                """SELECT id, dados FROM documento
                   WHERE tenant_id = ? AND colecao = ?
                   ORDER BY criado_em, id""",
                (self.tenant_id, self.colecao),
            ).fetchall()
        docs = [_carregar(r) for r in rows]
        if ordenar_por:
            docs.sort(key=lambda d: (d.get(ordenar_por) is None, str(d.get(ordenar_por) or "")),
                      reverse=desc)
        return docs

    def insert(self, dados: Dict[str, Any], doc_id: Optional[str] = None) -> str:
        doc_id = doc_id or dados.get("id") or novo_id()
        ts = agora_iso()
        with connect(self.db_path) as c:
            c.execute(
                """
                INSERT INTO documento (tenant_id, colecao, id, versao, dados, criado_em, atualizado_em)
                VALUES (?, ?, ?, 1, ?, ?, ?)
                """,
                (self.tenant_id, self.colecao, doc_id, _serializar(dados), ts, ts),
            )
        log_database_operation(self.colecao, "INSERT", 1, id=doc_id)
        self._publicar()
        return doc_id

    def update(self, doc_id: str, campos: Dict[str, Any]) -> Dict[str, Any]:
        """Mescla ``campos`` no documento existente e devolve o documento novo."""
        with connect(self.db_path, immediate=True) as c:
            row = c.execute(
                """SELECT id, dados FROM documento
                   WHERE tenant_id = ? AND colecao = ? AND id = ?""",
                (self.tenant_id, self.colecao, doc_id),
            ).fetchone()
            if row is None:
                raise NaoEncontrado(self.colecao, doc_id)
            novo = {**_carregar(row), **campos}
            c.execute(
                """UPDATE documento
                   SET dados = ?, versao = versao + 1, atualizado_em = ?
                   WHERE tenant_id = ? AND colecao = ? AND id = ?""",
                (_serializar(novo), agora_iso(), self.tenant_id, self.colecao, doc_id),
            )
        novo["id"] = doc_id
        log_database_operation(self.colecao, "UPDATE", 1, id=doc_id, campos=list(campos))
        self._publicar()
        return novo

    def delete(self, doc_id: str) -> None:
        with connect(self.db_path) as c:
            cur = c.execute(
                "DELETE FROM documento WHERE tenant_id = ? AND colecao = ? AND id = ?",
                (self.tenant_id, self.colecao, doc_id),
            )
            if cur.rowcount == 0:
                raise NaoEncontrado(self.colecao, doc_id)
        log_database_operation(self.colecao, "DELETE", 1, id=doc_id)
        self._publicar()


class ClienteRepo(DocumentoRepo):
    colecao = "clientes"


class PedidoRepo(DocumentoRepo):
    colecao = "pedidos"


class OrdemServicoRepo(DocumentoRepo):
    colecao = "ordens_servico"


class TransacaoRepo(DocumentoRepo):
    colecao = "transacoes"


class PCMontadoRepo(DocumentoRepo):
    colecao = "pcs_montados"


class InventarioRepo(DocumentoRepo):
    colecao = "inventario"

    def fetch_por_categoria(self, categoria: Optional[str] = None) -> List[Dict[str, Any]]:
        """Itens da empresa via ``vw_inventario``, opcionalmente de uma categoria."""
        sql = """
            SELECT id, dados FROM vw_inventario
            WHERE tenant_id = ?
        """
        params: List[Any] = [self.tenant_id]
        if categoria:
            sql += " AND category = ?"
            params.append(categoria)
        sql += " ORDER BY component"
        with connect(self.db_path) as c:
            rows = c.execute(sql, params).fetchall()
        return [_carregar(r) for r in rows]


# -------------------------
# Unidade atômica (concorrência otimista)
# -------------------------

class UnidadeAtomica:
    """
    Leitura-então-escrita condicional sobre vários documentos.

    - ``get`` lê o documento e memoriza a versão lida.
    - ``update``/``delete``/``insert`` apenas enfileiram a escrita.
    - ``commit`` grava tudo numa transação SQLite; cada escrita só é aplicada
      se a versão ainda for a lida. Qualquer divergência desfaz a unidade
      inteira e levanta ``Conflito``.
    """

    def __init__(self, db_path: str, tenant_id: str):
        _validar_escopo(tenant_id)
        self.db_path = db_path
        self.tenant_id = tenant_id
        self._lidos: Dict[Tuple[str, str], Tuple[Optional[Dict[str, Any]], int]] = {}
        self._escritas: Dict[Tuple[str, str], Dict[str, Any]] = {}
        self._exclusoes: List[Tuple[str, str]] = []
        self._insercoes: List[Tuple[str, str, Dict[str, Any]]] = []
        self.confirmada = False

    def get(self, colecao: str, doc_id: str) -> Optional[Dict[str, Any]]:
        _validar_escopo(self.tenant_id, colecao)
        chave = (colecao, doc_id)
        if chave not in self._lidos:
            found = DocumentoRepo(self.db_path, self.tenant_id, colecao).get_com_versao(doc_id)
            self._lidos[chave] = found if found else (None, 0)
        doc, _ = self._lidos[chave]
        if doc is None:
            return None
        # Leitura reflete as escritas já enfileiradas nesta unidade
        return {**doc, **self._escritas.get(chave, {})}

    def _exigir_lido(self, colecao: str, doc_id: str) -> None:
        doc, _ = self._lidos.get((colecao, doc_id), (None, 0))
        if doc is None:
            raise ValueError(
                f"Documento {colecao}/{doc_id} precisa ser lido na unidade antes da escrita."
            )

    def update(self, colecao: str, doc_id: str, campos: Dict[str, Any]) -> None:
        self._exigir_lido(colecao, doc_id)
        self._escritas.setdefault((colecao, doc_id), {}).update(campos)

    def delete(self, colecao: str, doc_id: str) -> None:
        self._exigir_lido(colecao, doc_id)
        self._escritas.pop((colecao, doc_id), None)
        self._exclusoes.append((colecao, doc_id))

    def insert(self, colecao: str, dados: Dict[str, Any], doc_id: Optional[str] = None) -> str:
        _validar_escopo(self.tenant_id, colecao)
        doc_id = doc_id or dados.get("id") or novo_id()
        self._insercoes.append((colecao, doc_id, dict(dados)))
        return doc_id

    def _colecoes_afetadas(self) -> Set[str]:
        afetadas = {col for col, _ in self._escritas}
        afetadas.update(col for col, _ in self._exclusoes)
        afetadas.update(col for col, _, _ in self._insercoes)
        return afetadas

    def commit(self) -> None:
        if self.confirmada:
            raise RuntimeError("Unidade atômica já confirmada.")
        ts = agora_iso()
        with connect(self.db_path, immediate=True) as c:
            for (colecao, doc_id), campos in self._escritas.items():
                doc, versao = self._lidos[(colecao, doc_id)]
                cur = c.execute(
                    """UPDATE documento
                       SET dados = ?, versao = versao + 1, atualizado_em = ?
                       WHERE tenant_id = ? AND colecao = ? AND id = ? AND versao = ?""",
                    (_serializar({**doc, **campos}), ts, self.tenant_id, colecao, doc_id, versao),
                )
                if cur.rowcount != 1:
                    raise Conflito(colecao, doc_id)
            for colecao, doc_id in self._exclusoes:
                _, versao = self._lidos[(colecao, doc_id)]
                cur = c.execute(
                    """DELETE FROM documento
                       WHERE tenant_id = ? AND colecao = ? AND id = ? AND versao = ?""",
                    (self.tenant_id, colecao, doc_id, versao),
                )
                if cur.rowcount != 1:
                    raise Conflito(colecao, doc_id)
            for colecao, doc_id, dados in self._insercoes:
                c.execute(
                    """
                    INSERT INTO documento (tenant_id, colecao, id, versao, dados, criado_em, atualizado_em)
                    VALUES (?, ?, ?, 1, ?, ?, ?)
                    """,
                    (self.tenant_id, colecao, doc_id, _serializar(dados), ts, ts),
                )
        self.confirmada = True
        total = len(self._escritas) + len(self._exclusoes) + len(self._insercoes)
        log_database_operation("unidade_atomica", "COMMIT", total, tenant_id=self.tenant_id)
        for colecao in sorted(self._colecoes_afetadas()):
            barramento.publicar(self.tenant_id, colecao)


def executar_atomico(
    db_path: str,
    tenant_id: str,
    fn: Callable[[UnidadeAtomica], T],
    tentativas: Optional[int] = None,
) -> T:
    """Executa ``fn`` numa ``UnidadeAtomica`` nova e confirma.

    Em ``Conflito`` a função é reexecutada do zero (nova leitura) até
    ``tentativas`` vezes; esgotado o limite, o último ``Conflito`` é propagado.
    Erros levantados por ``fn`` não são repetidos e nada é gravado.
    """
    limite = max(1, tentativas or DEFAULTS.max_tentativas_conflito)
    tentativa = 1
    while True:
        unidade = UnidadeAtomica(db_path, tenant_id)
        resultado = fn(unidade)
        try:
            unidade.commit()
        except Conflito as e:
            log_system_event(
                "conflito_concorrencia",
                {"tentativa": tentativa, "limite": limite, "erro": e.mensagem},
                level="warning",
            )
            if tentativa >= limite:
                raise
            tentativa += 1
            continue
        return resultado

