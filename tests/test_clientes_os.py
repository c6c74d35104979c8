import pytest

from gestao.domain.erros import NaoEncontrado
from gestao.infra.migrations import apply_migrations
from gestao.infra.repositories import PedidoRepo
from gestao.infra.views import create_views
from gestao.usecases.clientes import (
    atualizar_cliente,
    buscar_clientes,
    cadastrar_cliente,
    excluir_cliente,
    historico_cliente,
)
from gestao.usecases.ordens_servico import abrir_os, editar_os, excluir_os, listar_os
from gestao.usecases.pedidos import atualizar_pedido, criar_pedido, listar_pedidos
from gestao.usecases.reconciliacao import reconciliar_os

TENANT = "loja-clientes"


def _setup_db(tmp_path):
    db_path = str(tmp_path / "gestao_test.sqlite")
    apply_migrations(db_path)
    create_views(db_path)
    return db_path


def test_cadastro_de_cliente(tmp_path):
    db = _setup_db(tmp_path)
    pf = cadastrar_cliente(TENANT, {"nome": " Ana Souza ", "documento": "123.456.789-09",
                                    "email": "ana@exemplo.com"}, db_path=db)
    pj = cadastrar_cliente(TENANT, {"nome": "Loja XPTO", "documento": "12.345.678/0001-90"}, db_path=db)

    clientes = {c["id"]: c for c in buscar_clientes(TENANT, db_path=db)}
    assert clientes[pf]["nome"] == "Ana Souza"
    assert clientes[pf]["documento"] == "12345678909"
    assert clientes[pf]["tipo"] == "Pessoa Física"
    assert clientes[pj]["tipo"] == "Pessoa Jurídica"

    with pytest.raises(ValueError):
        cadastrar_cliente(TENANT, {"nome": "  "}, db_path=db)


def test_busca_e_atualizacao(tmp_path):
    db = _setup_db(tmp_path)
    cid = cadastrar_cliente(TENANT, {"nome": "Bruno", "email": "bruno@x.com"}, db_path=db)
    cadastrar_cliente(TENANT, {"nome": "Carla", "documento": "11122233344"}, db_path=db)

    assert [c["nome"] for c in buscar_clientes(TENANT, "bru", db_path=db)] == ["Bruno"]
    assert [c["nome"] for c in buscar_clientes(TENANT, "111222", db_path=db)] == ["Carla"]
    assert [c["nome"] for c in buscar_clientes(TENANT, "X.COM", db_path=db)] == ["Bruno"]

    novo = atualizar_cliente(TENANT, cid, {"documento": "12.345.678/0001-90"}, db_path=db)
    assert novo["tipo"] == "Pessoa Jurídica"


def test_historico_e_exclusao_sem_cascata(tmp_path):
    db = _setup_db(tmp_path)
    cid = cadastrar_cliente(TENANT, {"nome": "Davi"}, db_path=db)
    pid = criar_pedido(TENANT, {"clientName": "Davi", "clientId": cid, "components": []}, db_path=db)
    criar_pedido(TENANT, {"clientName": "Outro", "components": []}, db_path=db)
    os_id = abrir_os(TENANT, {"cliente_nome": "Davi", "cliente_id": cid, "equipamento": "PC"}, db_path=db)

    hist = historico_cliente(TENANT, cid, db_path=db)
    assert [p["id"] for p in hist["pedidos"]] == [pid]
    assert [o["id"] for o in hist["ordens_servico"]] == [os_id]

    excluir_cliente(TENANT, cid, db_path=db)
    assert PedidoRepo(db, TENANT).get(pid) is not None
    with pytest.raises(NaoEncontrado):
        excluir_cliente(TENANT, cid, db_path=db)


def test_abrir_e_editar_os(tmp_path):
    db = _setup_db(tmp_path)
    with pytest.raises(ValueError):
        abrir_os(TENANT, {"cliente_nome": "Eva"}, db_path=db)

    os_id = abrir_os(TENANT, {"cliente_nome": "Eva", "equipamento": "Notebook Dell",
                              "valor_estimado": "250,50"}, db_path=db)
    (ordem,) = listar_os(TENANT, db_path=db)
    assert ordem["status"] == "Recebido"
    assert ordem["valor_estimado"] == 250.5
    assert ordem["valor_final"] == 0

    editada = editar_os(TENANT, os_id, {"diagnostico": "Tela", "status": "Entregue/Pago",
                                        "valor_final": 999}, db_path=db)
    assert editada["diagnostico"] == "Tela"
    assert editada["status"] == "Recebido"
    assert editada["valor_final"] == 0


def test_listar_os_filtros(tmp_path):
    db = _setup_db(tmp_path)
    a = abrir_os(TENANT, {"cliente_nome": "Fábio", "equipamento": "Impressora"}, db_path=db)
    abrir_os(TENANT, {"cliente_nome": "Gil", "equipamento": "Notebook"}, db_path=db)
    reconciliar_os(TENANT, a, "Diagnóstico", db_path=db)

    assert [o["id"] for o in listar_os(TENANT, status="Diagnóstico", db_path=db)] == [a]
    assert [o["cliente_nome"] for o in listar_os(TENANT, busca="note", db_path=db)] == ["Gil"]
    assert [o["id"] for o in listar_os(TENANT, busca=a[:6], db_path=db)] == [a]

    excluir_os(TENANT, a, db_path=db)
    with pytest.raises(NaoEncontrado):
        excluir_os(TENANT, a, db_path=db)


def test_pedido_edicao(tmp_path):
    db = _setup_db(tmp_path)
    pid = criar_pedido(TENANT, {"clientName": "Hugo", "components": [{"id": "x", "quantity": "2"}],
                                "total": "1.200,00"}, db_path=db)
    pedido = PedidoRepo(db, TENANT).get(pid)
    assert pedido["total"] == 1200.0
    assert pedido["components"][0]["qty"] == 2.0

    atualizado = atualizar_pedido(TENANT, pid, {"notes": "urgente", "id": "ignorado"}, db_path=db)
    assert atualizado["notes"] == "urgente"
    assert atualizado["id"] == pid
    assert [p["id"] for p in listar_pedidos(TENANT, status="Pendente", db_path=db)] == [pid]
    assert listar_pedidos(TENANT, status="Enviados", db_path=db) == []

    with pytest.raises(NaoEncontrado):
        atualizar_pedido(TENANT, "nao-existe", {"notes": "x"}, db_path=db)
