# gestao/config.py
"""
Configurações globais e valores padrão do sistema de gestão.
"""

import os
from dataclasses import dataclass


# Caminho padrão do banco de dados SQLite
DB_PATH = os.environ.get("GESTAO_DB") or os.path.join(os.getcwd(), "gestao.db")

# Empresa (tenant) usada quando nenhuma é informada na CLI
TENANT_PADRAO = os.environ.get("GESTAO_TENANT") or "local"


@dataclass
class DefaultConfig:
    """Valores padrão para parâmetros do sistema."""
    margem_lucro: float = 20.0  # % sobre o preço de venda
    max_tentativas_conflito: int = 3  # retentativas em conflito de versão


# Instância global dos valores padrão
DEFAULTS = DefaultConfig()
