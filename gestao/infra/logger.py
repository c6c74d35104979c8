# gestao/infra/logger.py
"""
Sistema de logging para operações de estoque e finanças.

Este módulo configura e fornece loggers para registrar todas as operações
críticas do sistema: reconciliações de status, ajustes de estoque,
lançamentos financeiros e operações no banco de dados.
"""

import logging
import os
from pathlib import Path
from typing import Dict, Any, Optional


# Flag global para habilitar/desabilitar logging (GESTAO_LOG=1 liga)
ENABLE_LOGGING = os.environ.get("GESTAO_LOG") == "1"
# Flag global para habilitar/desabilitar prints/output
ENABLE_OUTPUT = False

# Configuração base dos loggers
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

def setup_logger(name: str, log_file: str, level: int = logging.INFO) -> logging.Logger:
    """
    Configura um logger específico com arquivo de saída.

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

    # Remove handlers existentes (reimportação do módulo)
    while logger.handlers:
        logger.removeHandler(logger.handlers[0])

    # delay=True: o arquivo só é criado na primeira mensagem
    file_handler = logging.FileHandler(log_file, encoding='utf-8', delay=True)
    file_handler.setLevel(level)
    file_handler.setFormatter(logging.Formatter(LOG_FORMAT, DATE_FORMAT))
    logger.addHandler(file_handler)

    return logger

# Diretório base para logs (na pasta do pacote)
BASE_DIR = Path(__file__).parent.parent
LOGS_DIR = BASE_DIR / "logs"

# Loggers específicos para cada operação
transaction_logger = setup_logger(
    'gestao.transactions',
    str(LOGS_DIR / 'transactions.log')
)

estoque_logger = setup_logger(
    'gestao.estoque',
    str(LOGS_DIR / 'estoque.log')
)

financas_logger = setup_logger(
    'gestao.financas',
    str(LOGS_DIR / 'financas.log')
)

database_logger = setup_logger(
    'gestao.database',
    str(LOGS_DIR / 'database.log')
)

system_logger = setup_logger(
    'gestao.system',
    str(LOGS_DIR / 'system.log')
)

def log_transaction(operation: str, data: Dict[str, Any], result: Optional[Any] = None, error: Optional[str] = None) -> None:
    """
    Registra uma operação completa (reconciliação, exclusão, montagem).

    Args:
        operation: Tipo de operação (reconciliar_pedido, excluir_pedido, ...)
        data: Dados da operação
        result: Resultado da operação (opcional)
        error: Mensagem de erro (opcional)
    """
    if not (ENABLE_LOGGING or ENABLE_OUTPUT):
        return
    if error:
        transaction_logger.error(f"TRANSACTION_FAILED: {operation} - {error} - Data: {data}")
    else:
        transaction_logger.info(f"TRANSACTION_SUCCESS: {operation} - Result: {result} - Data: {data}")

def log_estoque(action: str, item_id: str, delta: float, **kwargs) -> None:
    """
    Log específico para ajustes de estoque.

    Args:
        action: Ação realizada (baixa, estorno, ajuste)
        item_id: ID do item de inventário
        delta: Variação aplicada à quantidade
        **kwargs: Dados adicionais (quantidade anterior/nova, pedido)
    """
    if not (ENABLE_LOGGING or ENABLE_OUTPUT):
        return
    log_data = {
        "action": action,
        "item_id": item_id,
        "delta": delta,
        **kwargs
    }
    estoque_logger.info(f"ESTOQUE_{action.upper()}: {log_data}")

def log_financas(action: str, lancamento_id: Optional[str], valor: Any = None, **kwargs) -> None:
    """
    Log específico para lançamentos financeiros.

    Args:
        action: Ação realizada (insert, update, delete)
        lancamento_id: ID do lançamento (None antes da inserção)
        valor: Valor do lançamento
        **kwargs: Dados adicionais (tipo, pedidoId, os_id)
    """
    if not (ENABLE_LOGGING or ENABLE_OUTPUT):
        return
    log_data = {
        "action": action,
        "lancamento_id": lancamento_id,
        "valor": valor,
        **kwargs
    }
    financas_logger.info(f"FINANCAS_{action.upper()}: {log_data}")

def log_database_operation(table: str, operation: str, affected_rows: int = 0, **kwargs) -> None:
    """
    Log específico para operações no banco de dados.

    Args:
        table: Nome da coleção
        operation: Operação (INSERT, UPDATE, DELETE, SELECT, COMMIT)
        affected_rows: Número de documentos afetados
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

def get_log_summary(log_type: str = "transactions", lines: int = 100) -> Optional[str]:
    """
    Obtém um resumo dos logs recentes.

    Args:
        log_type: Tipo de log (transactions, estoque, financas, database, system)
        lines: Número de linhas a retornar

    Returns:
        Conteúdo do log como string
    """
    if not (ENABLE_LOGGING or ENABLE_OUTPUT):
        return None

    log_files = {
        "transactions": LOGS_DIR / "transactions.log",
        "estoque": LOGS_DIR / "estoque.log",
        "financas": LOGS_DIR / "financas.log",
        "database": LOGS_DIR / "database.log",
        "system": LOGS_DIR / "system.log"
    }

    log_file = log_files.get(log_type)
    if not log_file or not log_file.exists():
        return f"Log {log_type} não encontrado."

    try:
        with open(log_file, 'r', encoding='utf-8') as f:
            all_lines = f.readlines()
            recent_lines = all_lines[-lines:] if len(all_lines) > lines else all_lines
            return ''.join(recent_lines)
    except OSError as e:
        return f"Erro ao ler log {log_type}: {str(e)}"
