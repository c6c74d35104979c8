import pytest

from gestao.domain.erros import EstoqueInsuficiente, NaoEncontrado
from gestao.domain.models import ItemInventario
from gestao.infra.migrations import apply_migrations
from gestao.infra.repositories import InventarioRepo
from gestao.infra.views import create_views
from gestao.usecases.inventario import (
    ajustar_estoque,
    cadastrar_item,
    listar_disponiveis,
    listar_inventario,
    remover_item,
)

TENANT = "loja-inventario"


def _setup_db(tmp_path):
    db_path = str(tmp_path / "gestao_test.sqlite")
    apply_migrations(db_path)
    create_views(db_path)
    return db_path


def _seed(db_path):
    itens = [
        {"id": "cpu1", "component": "Ryzen 5 5600", "category": "CPU", "quantity": 5,
         "price": 800, "socket": "AM4"},
        {"id": "cpu2", "component": "Core i5 12400", "category": "CPU", "quantity": 2,
         "price": 900, "socket": "LGA1700"},
        {"id": "mb1", "component": "B550", "category": "Placa-Mãe", "quantity": 1,
         "price": 600, "socket": "AM4", "ramType": "DDR4"},
        {"id": "mb2", "component": "B660", "category": "Placa-Mãe", "quantity": 3,
         "price": 700, "socket": "LGA1700", "ramType": "DDR5"},
        {"id": "ram1", "component": "16GB DDR4", "category": "RAM", "quantity": 4,
         "price": 250, "ramType": "DDR4"},
        {"id": "ram2", "component": "16GB DDR5", "category": "RAM", "quantity": 0,
         "price": 350, "ramType": "DDR5"},
    ]
    for item in itens:
        cadastrar_item(TENANT, item, db_path=db_path)


def _qtd(db_path, item_id):
    return InventarioRepo(db_path, TENANT).get(item_id)["quantity"]


def test_ajuste_em_lote(tmp_path):
    db = _setup_db(tmp_path)
    _seed(db)
    novas = ajustar_estoque(TENANT, [("cpu1", -2), {"id": "ram1", "delta": "1"}], db_path=db)
    assert novas == {"cpu1": 3.0, "ram1": 5.0}
    assert _qtd(db, "cpu1") == "3"
    assert _qtd(db, "ram1") == "5"


def test_ajuste_tudo_ou_nada(tmp_path):
    db = _setup_db(tmp_path)
    _seed(db)
    with pytest.raises(EstoqueInsuficiente) as exc:
        ajustar_estoque(TENANT, [("cpu1", -2), ("mb1", -3)], db_path=db)
    assert exc.value.item_id == "mb1"
    assert exc.value.codigo == "ESTOQUE_INSUFICIENTE"
    assert _qtd(db, "cpu1") == "5"
    assert _qtd(db, "mb1") == "1"


def test_ajuste_item_inexistente(tmp_path):
    db = _setup_db(tmp_path)
    _seed(db)
    with pytest.raises(NaoEncontrado) as exc:
        ajustar_estoque(TENANT, [("cpu1", -1), ("fantasma", -1)], db_path=db)
    assert exc.value.item_id == "fantasma"
    assert _qtd(db, "cpu1") == "5"


def test_ids_repetidos_sao_somados(tmp_path):
    db = _setup_db(tmp_path)
    _seed(db)
    with pytest.raises(EstoqueInsuficiente):
        ajustar_estoque(TENANT, [("cpu1", -3), ("cpu1", -3)], db_path=db)
    ajustar_estoque(TENANT, [("cpu1", -3), ("cpu1", -2)], db_path=db)
    assert _qtd(db, "cpu1") == "0"


def test_quantidade_fracionada_e_texto_invalido(tmp_path):
    db = _setup_db(tmp_path)
    repo = InventarioRepo(db, TENANT)
    repo.insert({"component": "Pasta térmica", "category": "Cooler", "quantity": "2.5"}, doc_id="pt")
    repo.insert({"component": "Cabo", "category": "Gabinete", "quantity": "abc"}, doc_id="cabo")
    ajustar_estoque(TENANT, [("pt", 0.5), ("cabo", 2)], db_path=db)
    assert _qtd(db, "pt") == "3"
    assert _qtd(db, "cabo") == "2"


def test_listar_disponiveis_filtros(tmp_path):
    db = _setup_db(tmp_path)
    _seed(db)

    ids = {i["id"] for i in listar_disponiveis(TENANT, db_path=db)}
    assert "ram2" not in ids  # sem estoque
    assert {"cpu1", "cpu2", "mb1", "mb2", "ram1"} <= ids

    mobos = listar_disponiveis(TENANT, categoria="Placa-Mãe", socket="AM4", db_path=db)
    assert [m["id"] for m in mobos] == ["mb1"]

    # o filtro de soquete não afeta outras categorias
    cpus = listar_disponiveis(TENANT, categoria="CPU", socket="AM4", db_path=db)
    assert {c["id"] for c in cpus} == {"cpu1", "cpu2"}

    rams = listar_disponiveis(TENANT, categoria="RAM", ram_type="DDR5", db_path=db)
    assert rams == []


def test_cadastro_e_remocao(tmp_path):
    db = _setup_db(tmp_path)
    item_id = cadastrar_item(
        TENANT, ItemInventario(id="gpu1", component="RTX 4060", category="GPU", quantity="2", price=2000),
        db_path=db,
    )
    assert item_id == "gpu1"
    itens = listar_inventario(TENANT, db_path=db)
    assert len(itens) == 1
    assert itens[0].quantidade == 2.0

    with pytest.raises(ValueError):
        cadastrar_item(TENANT, {"component": "X", "category": "GPU", "quantity": -1}, db_path=db)

    remover_item(TENANT, "gpu1", db_path=db)
    assert listar_inventario(TENANT, db_path=db) == []
    with pytest.raises(NaoEncontrado):
        remover_item(TENANT, "gpu1", db_path=db)


def test_isolamento_por_empresa(tmp_path):
    db = _setup_db(tmp_path)
    _seed(db)
    assert listar_inventario("outra-loja", db_path=db) == []
    with pytest.raises(NaoEncontrado):
        ajustar_estoque("outra-loja", [("cpu1", -1)], db_path=db)


def test_disponiveis_entende_virgula_decimal(tmp_path):
    db = _setup_db(tmp_path)
    repo = InventarioRepo(db, TENANT)
    repo.insert({"component": "Pasta térmica", "category": "Cooler", "quantity": "0,5"}, doc_id="pt")
    repo.insert({"component": "Fan", "category": "Cooler", "quantity": "0,0"}, doc_id="fan")
    repo.insert({"component": "Cabo", "category": "Cooler", "quantity": "abc"}, doc_id="cabo")
    assert [i["id"] for i in listar_disponiveis(TENANT, categoria="Cooler", db_path=db)] == ["pt"]

    # o que a listagem oferece o ajuste consegue baixar
    ajustar_estoque(TENANT, [("pt", -0.5)], db_path=db)
    assert listar_disponiveis(TENANT, categoria="Cooler", db_path=db) == []
