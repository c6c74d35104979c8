import pytest

from gestao.domain.erros import Conflito, NaoAutenticado, NaoEncontrado, PermissaoNegada
from gestao.infra.db import connect
from gestao.infra.eventos import Barramento, barramento
from gestao.infra.migrations import apply_migrations
from gestao.infra.repositories import (
    DocumentoRepo,
    InventarioRepo,
    UnidadeAtomica,
    executar_atomico,
)
from gestao.infra.views import create_views
from gestao.usecases.inventario import ajustar_estoque

TENANT = "loja-repo"


def _setup_db(tmp_path):
    db_path = str(tmp_path / "gestao_test.sqlite")
    apply_migrations(db_path)
    create_views(db_path)
    InventarioRepo(db_path, TENANT).insert({"component": "SSD", "category": "Armazenamento",
                                           "quantity": "10"}, doc_id="ssd1")
    return db_path


def test_migracoes_idempotentes(tmp_path):
    db = _setup_db(tmp_path)
    apply_migrations(db)
    create_views(db)
    assert InventarioRepo(db, TENANT).get("ssd1")["quantity"] == "10"


def test_escopo_exige_empresa(tmp_path):
    db = _setup_db(tmp_path)
    with pytest.raises(NaoAutenticado):
        DocumentoRepo(db, "", "pedidos")
    with pytest.raises(NaoAutenticado):
        ajustar_estoque(None, [("ssd1", -1)], db_path=db)
    with pytest.raises(ValueError):
        DocumentoRepo(db, TENANT, "produtos")


def test_update_mescla_e_incrementa_versao(tmp_path):
    db = _setup_db(tmp_path)
    repo = InventarioRepo(db, TENANT)
    doc, versao = repo.get_com_versao("ssd1")
    assert versao == 1
    novo = repo.update("ssd1", {"price": 300})
    assert novo["component"] == "SSD"
    assert novo["price"] == 300
    assert repo.get_com_versao("ssd1")[1] == 2
    with pytest.raises(NaoEncontrado):
        repo.update("fantasma", {"price": 1})


def test_unidade_exige_leitura_antes_de_escrever(tmp_path):
    db = _setup_db(tmp_path)
    unidade = UnidadeAtomica(db, TENANT)
    with pytest.raises(ValueError):
        unidade.update("inventario", "ssd1", {"quantity": "9"})
    assert unidade.get("inventario", "fantasma") is None
    with pytest.raises(ValueError):
        unidade.delete("inventario", "fantasma")


def test_unidade_le_escritas_pendentes_e_confirma_uma_vez(tmp_path):
    db = _setup_db(tmp_path)
    unidade = UnidadeAtomica(db, TENANT)
    unidade.get("inventario", "ssd1")
    unidade.update("inventario", "ssd1", {"quantity": "9"})
    assert unidade.get("inventario", "ssd1")["quantity"] == "9"
    assert InventarioRepo(db, TENANT).get("ssd1")["quantity"] == "10"
    unidade.commit()
    assert InventarioRepo(db, TENANT).get("ssd1")["quantity"] == "9"
    with pytest.raises(RuntimeError):
        unidade.commit()


def _decrementa(unidade):
    doc = unidade.get("inventario", "ssd1")
    unidade.update("inventario", "ssd1", {"quantity": str(int(doc["quantity"]) - 1)})
    return doc["quantity"]


def test_conflito_e_repetido_com_nova_leitura(tmp_path):
    db = _setup_db(tmp_path)
    chamadas = []

    def _passo(unidade):
        lido = _decrementa(unidade)
        chamadas.append(lido)
        if len(chamadas) == 1:
            # outro processo grava entre a leitura e a confirmação
            InventarioRepo(db, TENANT).update("ssd1", {"quantity": "7"})
        return lido

    assert executar_atomico(db, TENANT, _passo) == "7"
    assert chamadas == ["10", "7"]
    assert InventarioRepo(db, TENANT).get("ssd1")["quantity"] == "6"


@pytest.mark.parametrize("tentativas,esperado", [(None, 3), (2, 2), (1, 1)])
def test_conflito_esgota_tentativas(tmp_path, tentativas, esperado):
    db = _setup_db(tmp_path)
    chamadas = []

    def _passo(unidade):
        chamadas.append(_decrementa(unidade))
        InventarioRepo(db, TENANT).update("ssd1", {"touch": len(chamadas)})

    with pytest.raises(Conflito) as exc:
        executar_atomico(db, TENANT, _passo, tentativas=tentativas)
    assert exc.value.codigo == "CONFLITO"
    assert len(chamadas) == esperado
    assert InventarioRepo(db, TENANT).get("ssd1")["quantity"] == "10"


def test_escritas_publicam_eventos(tmp_path):
    db = _setup_db(tmp_path)
    vistos = []
    with barramento.assinar(TENANT, "inventario", lambda t, c: vistos.append((t, c))):
        InventarioRepo(db, TENANT).update("ssd1", {"price": 1})
        executar_atomico(db, TENANT, _decrementa)
        InventarioRepo(db, "outra").insert({"component": "X"})
    assert vistos == [(TENANT, "inventario"), (TENANT, "inventario")]


def test_callback_com_erro_nao_interrompe_os_demais():
    hub = Barramento()
    vistos = []

    def _quebra(tenant, colecao):
        raise RuntimeError("falhou")

    a = hub.assinar("t", "transacoes", _quebra)
    b = hub.assinar("t", "transacoes", lambda t, c: vistos.append(c))
    hub.publicar("t", "transacoes")
    hub.publicar("t", "pedidos")
    assert vistos == ["transacoes"]
    assert hub.total_assinaturas("t", "transacoes") == 2
    a.cancelar()
    b.cancelar()
    assert hub.total_assinaturas("t", "transacoes") == 0
    assert not a.ativa


def test_banco_somente_leitura_vira_permissao_negada(tmp_path):
    db = _setup_db(tmp_path)
    with pytest.raises(PermissaoNegada) as exc:
        with connect(db) as c:
            c.execute("PRAGMA query_only = ON;")
            c.execute("DELETE FROM documento")
    assert exc.value.codigo == "PERMISSAO_NEGADA"
    assert InventarioRepo(db, TENANT).get("ssd1") is not None


def test_migracao_v2_adiciona_coluna_em_banco_v1(tmp_path):
    db = str(tmp_path / "legado.sqlite")
    with connect(db) as c:
        c.execute(
            """CREATE TABLE documento (
                   tenant_id TEXT NOT NULL, colecao TEXT NOT NULL, id TEXT NOT NULL,
                   versao INTEGER NOT NULL DEFAULT 1, dados TEXT NOT NULL, criado_em TEXT,
                   PRIMARY KEY (tenant_id, colecao, id))"""
        )
        c.execute("PRAGMA user_version = 1;")
    apply_migrations(db)
    create_views(db)
    with connect(db) as c:
        colunas = [r[1] for r in c.execute("PRAGMA table_info(documento);").fetchall()]
        assert c.execute("PRAGMA user_version;").fetchone()[0] == 2
    assert "atualizado_em" in colunas
    repo = InventarioRepo(db, TENANT)
    repo.insert({"component": "SSD", "quantity": "1"}, doc_id="ssd1")
    assert repo.update("ssd1", {"quantity": "2"})["quantity"] == "2"
