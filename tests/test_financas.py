import pytest

from gestao.domain.erros import NaoEncontrado
from gestao.infra.eventos import barramento
from gestao.infra.migrations import apply_migrations
from gestao.infra.repositories import OrdemServicoRepo, PedidoRepo
from gestao.infra.views import create_views
from gestao.usecases.financas import (
    adicionar_lancamento,
    adicionar_lancamento_venda,
    assinar_resumo,
    atualizar_lancamento,
    calcular_resumo,
    excluir_lancamento,
    listar_lancamentos,
    resumo,
)
from gestao.usecases.ordens_servico import abrir_os
from gestao.usecases.pedidos import criar_pedido
from gestao.usecases.reconciliacao import reconciliar_os, reconciliar_pedido

TENANT = "loja-financas"


def _setup_db(tmp_path):
    db_path = str(tmp_path / "gestao_test.sqlite")
    apply_migrations(db_path)
    create_views(db_path)
    return db_path


def _confere_lucro(db):
    r = resumo(TENANT, db_path=db)
    assert r.lucro_liquido == pytest.approx(r.receita_total - r.despesa_total)
    return r


def test_resumo_acompanha_edicoes_e_exclusoes(tmp_path):
    db = _setup_db(tmp_path)
    rec = adicionar_lancamento(TENANT, {"tipo": "Receita", "valor": 1000}, db_path=db)
    desp = adicionar_lancamento(TENANT, {"tipo": "Despesa", "valor": "300,00",
                                         "categoria": "Aluguel"}, db_path=db)
    r = _confere_lucro(db)
    assert (r.receita_total, r.despesa_total, r.lucro_liquido) == (1000, 300, 700)

    atualizar_lancamento(TENANT, desp, {"valor": 500}, db_path=db)
    assert _confere_lucro(db).lucro_liquido == 500

    excluir_lancamento(TENANT, rec, db_path=db)
    r = _confere_lucro(db)
    assert r.receita_total == 0
    assert r.lucro_liquido == -500


def test_validacao_do_lancamento(tmp_path):
    db = _setup_db(tmp_path)
    with pytest.raises(ValueError):
        adicionar_lancamento(TENANT, {"tipo": "Doação", "valor": 10}, db_path=db)
    with pytest.raises(ValueError):
        adicionar_lancamento(TENANT, {"tipo": "Receita", "valor": "muito"}, db_path=db)
    lid = adicionar_lancamento(TENANT, {"tipo": "Receita", "valor": 10}, db_path=db)
    with pytest.raises(ValueError):
        atualizar_lancamento(TENANT, lid, {"tipo": "Outro"}, db_path=db)
    with pytest.raises(NaoEncontrado):
        atualizar_lancamento(TENANT, "nao-existe", {"valor": 1}, db_path=db)


def test_campos_padrao(tmp_path):
    db = _setup_db(tmp_path)
    adicionar_lancamento(TENANT, {"tipo": "Despesa", "valor": 50}, db_path=db)
    (t,) = listar_lancamentos(TENANT, db_path=db)
    assert t["categoria"] == "Geral"
    assert t["descricao"] == ""
    assert t["pedidoId"] is None
    assert t["os_id"] is None
    assert t["data"]


@pytest.mark.parametrize(
    "pedido_id,os_id,categoria",
    [("p1", None, "Venda de Pedido"), (None, "o1", "Serviço de OS"), (None, None, "Venda Geral")],
)
def test_lancamento_venda_categoria(tmp_path, pedido_id, os_id, categoria):
    db = _setup_db(tmp_path)
    adicionar_lancamento_venda(TENANT, {"valor": 99}, pedido_id=pedido_id, os_id=os_id, db_path=db)
    (t,) = listar_lancamentos(TENANT, db_path=db)
    assert t["categoria"] == categoria
    assert t["tipo"] == "Receita"


def test_edicao_propaga_para_pedido(tmp_path):
    db = _setup_db(tmp_path)
    pid = criar_pedido(TENANT, {"clientName": "Ana", "components": [], "total": 1000}, db_path=db)
    res = reconciliar_pedido(TENANT, pid, "Entregues", valor_final=1500, db_path=db)
    atualizar_lancamento(TENANT, res.lancamento_id, {"valor": "1.800,00"}, db_path=db)
    assert PedidoRepo(db, TENANT).get(pid)["total"] == 1800
    assert resumo(TENANT, db_path=db).receita_total == 1800


def test_edicao_propaga_para_os(tmp_path):
    db = _setup_db(tmp_path)
    os_id = abrir_os(TENANT, {"cliente_nome": "Bia", "equipamento": "Desktop"}, db_path=db)
    res = reconciliar_os(TENANT, os_id, "Entregue/Pago", valor_final=300, db_path=db)
    atualizar_lancamento(TENANT, res.lancamento_id, {"valor": 350}, db_path=db)
    assert OrdemServicoRepo(db, TENANT).get(os_id)["valorTotal"] == 350


def test_edicao_com_pedido_removido(tmp_path):
    db = _setup_db(tmp_path)
    lid = adicionar_lancamento_venda(TENANT, {"valor": 10}, pedido_id="sumiu", db_path=db)
    with pytest.raises(NaoEncontrado):
        atualizar_lancamento(TENANT, lid, {"valor": 20}, db_path=db)


def test_filtros_da_listagem(tmp_path):
    db = _setup_db(tmp_path)
    adicionar_lancamento(TENANT, {"tipo": "Receita", "valor": 1, "descricao": "Venda balcão",
                                  "data": "2024-01-10T09:00:00"}, db_path=db)
    adicionar_lancamento(TENANT, {"tipo": "Despesa", "valor": 2, "categoria": "Aluguel",
                                  "data": "2024-01-20T18:30:00"}, db_path=db)
    adicionar_lancamento(TENANT, {"tipo": "Despesa", "valor": 3, "categoria": "Energia",
                                  "data": "2024-02-01T08:00:00"}, db_path=db)

    todos = listar_lancamentos(TENANT, db_path=db)
    assert [t["valor"] for t in todos] == [3, 2, 1]

    assert [t["valor"] for t in listar_lancamentos(TENANT, tipo="Despesa", db_path=db)] == [3, 2]
    assert [t["valor"] for t in listar_lancamentos(TENANT, categoria="Aluguel", db_path=db)] == [2]
    janela = listar_lancamentos(TENANT, inicio="2024-01-10", fim="2024-01-20", db_path=db)
    assert [t["valor"] for t in janela] == [2, 1]
    assert [t["valor"] for t in listar_lancamentos(TENANT, busca="BALCÃO", db_path=db)] == [1]


def test_calcular_resumo_puro():
    r = calcular_resumo([
        {"tipo": "Receita", "valor": "1.000,50"},
        {"tipo": "Despesa", "valor": 0.5},
        {"tipo": "Outro", "valor": 99},
    ])
    assert r.as_dict() == {"receita_total": 1000.5, "despesa_total": 0.5, "lucro_liquido": 1000.0}


def test_assinatura_do_resumo(tmp_path):
    db = _setup_db(tmp_path)
    recebidos = []
    assinatura = assinar_resumo(TENANT, recebidos.append, db_path=db)
    assert len(recebidos) == 1
    assert recebidos[0].receita_total == 0

    adicionar_lancamento(TENANT, {"tipo": "Receita", "valor": 100}, db_path=db)
    assert recebidos[-1].receita_total == 100
    quantidade = len(recebidos)

    assinatura.cancelar()
    assinatura.cancelar()
    assert barramento.total_assinaturas(TENANT, "transacoes") == 0
    adicionar_lancamento(TENANT, {"tipo": "Despesa", "valor": 40}, db_path=db)
    assert len(recebidos) == quantidade


def test_assinatura_como_context_manager(tmp_path):
    db = _setup_db(tmp_path)
    recebidos = []
    with assinar_resumo(TENANT, recebidos.append, db_path=db):
        adicionar_lancamento(TENANT, {"tipo": "Despesa", "valor": 40}, db_path=db)
    adicionar_lancamento(TENANT, {"tipo": "Despesa", "valor": 40}, db_path=db)
    assert [r.despesa_total for r in recebidos] == [0, 40]
