"""
Barramento de eventos em processo (assinaturas por coleção).

Cada escrita confirmada nos repositórios publica ``(tenant_id, colecao)``.
Quem precisa reagir (ex.: o resumo financeiro) assina a coleção e recebe
um ``Assinatura`` que deve ser cancelado ao sair de escopo::

    with barramento.assinar("empresa", "transacoes", callback):
        ...
"""

from __future__ import annotations

import threading
from collections import defaultdict
from typing import Callable, Dict, List, Tuple

from gestao.infra.logger import log_system_event

Callback = Callable[[str, str], None]


class Assinatura:
    """Handle de uma assinatura; ``cancelar()`` é idempotente."""

    def __init__(self, barramento: "Barramento", chave: Tuple[str, str], callback: Callback):
        self._barramento = barramento
        self._chave = chave
        self._callback = callback
        self.ativa = True

    def cancelar(self) -> None:
        if not self.ativa:
            return
        self.ativa = False
        self._barramento._remover(self._chave, self)

    def __enter__(self) -> "Assinatura":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.cancelar()


class Barramento:
    def __init__(self):
        self._lock = threading.Lock()
        self._assinaturas: Dict[Tuple[str, str], List[Assinatura]] = defaultdict(list)

    def assinar(self, tenant_id: str, colecao: str, callback: Callback) -> Assinatura:
        chave = (tenant_id, colecao)
        assinatura = Assinatura(self, chave, callback)
        with self._lock:
            self._assinaturas[chave].append(assinatura)
        return assinatura

    def _remover(self, chave: Tuple[str, str], assinatura: Assinatura) -> None:
        with self._lock:
            lista = self._assinaturas.get(chave, [])
            if assinatura in lista:
                lista.remove(assinatura)
            if not lista:
                self._assinaturas.pop(chave, None)

    def total_assinaturas(self, tenant_id: str, colecao: str) -> int:
        with self._lock:
            return len(self._assinaturas.get((tenant_id, colecao), []))

    def publicar(self, tenant_id: str, colecao: str) -> None:
        """Notifica os assinantes; erro de um callback não interrompe os demais."""
        with self._lock:
            alvos = list(self._assinaturas.get((tenant_id, colecao), []))
        for assinatura in alvos:
            if not assinatura.ativa:
                continue
            try:
                assinatura._callback(tenant_id, colecao)
            except Exception as e:
                log_system_event(
                    "callback_error",
                    {"tenant_id": tenant_id, "colecao": colecao, "error": str(e)},
                    level="error",
                )


# Instância global usada pelos repositórios
barramento = Barramento()
