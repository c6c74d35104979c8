"""
CLI do sistema de gestão (Typer).

Comandos principais:
- migrate                          -> aplica migrações e cria views
- logs                             -> últimas linhas de um log
- inventario add/list/disponiveis/ajustar
- pedido criar/status/excluir/list -> status passa pela reconciliação
- os abrir/status/list             -> ordens de serviço
- financas lancar/editar/excluir/resumo/list
- montador cotar/salvar/pedido     -> montador de PC
- cliente add/list/historico
"""

from __future__ import annotations

import json
from typing import Any, Dict, List, Optional

import typer
from rich.console import Console
from rich.table import Table
from rich.panel import Panel
from rich import box
from rich.markup import escape

from gestao.config import DB_PATH, TENANT_PADRAO
from gestao.adapters.parsers import parse_numero
from gestao.domain.erros import ErroGestao, SucessoParcial
from gestao.infra.logger import get_log_summary
from gestao.infra.migrations import apply_migrations
from gestao.infra.views import create_views
from gestao.usecases import clientes as uc_clientes
from gestao.usecases import financas as uc_financas
from gestao.usecases import inventario as uc_inventario
from gestao.usecases import montador as uc_montador
from gestao.usecases import ordens_servico as uc_os
from gestao.usecases import pedidos as uc_pedidos
from gestao.usecases.reconciliacao import excluir_pedido, reconciliar_os, reconciliar_pedido


app = typer.Typer(help="Gestão de Loja - CLI")
console = Console()

DbOpt = typer.Option(DB_PATH, "--db", help="Caminho do SQLite")
TenantOpt = typer.Option(TENANT_PADRAO, "--tenant", help="Empresa (tenant)")


# -----------------------
# util
# -----------------------

def _print_json(obj) -> None:
    typer.echo(json.dumps(obj, ensure_ascii=False, indent=2, default=str))


def _brl(val: float) -> str:
    return f"R$ {val:,.2f}".replace(",", "X").replace(".", ",").replace("X", ".")


def _falhar(e: ErroGestao) -> None:
    """Exibe o erro de forma legível e encerra com código 1."""
    titulo = "Sucesso parcial" if isinstance(e, SucessoParcial) else "Falha"
    console.print(Panel(escape(e.mensagem), title=f"{titulo} ({e.codigo})", border_style="red"))
    raise typer.Exit(code=1)


def _display_table(data: List[Dict[str, Any]], colunas: List[str], title: str = "Resultado") -> None:
    """Exibe uma lista de documentos em tabela Rich."""
    if not data:
        console.print(Panel("Nenhum dado encontrado", title=title, border_style="yellow"))
        return
    table = Table(title=title, box=box.ROUNDED)
    for col in colunas:
        if col in ("quantity", "price", "valor", "total", "valor_final", "valor_estimado"):
            table.add_column(col, justify="right")
        else:
            table.add_column(col)
    for row in data:
        valores = []
        for col in colunas:
            val = row.get(col, "")
            if col in ("price", "valor", "total", "valor_final", "valor_estimado") and \
                    isinstance(val, (int, float)) and not isinstance(val, bool):
                valores.append(_brl(val))
            else:
                valores.append("" if val is None else escape(str(val)))
        table.add_row(*valores)
    console.print(table)


def _parse_itens(itens: List[str]) -> List[Dict[str, Any]]:
    """Converte ``ID:QTD`` (QTD opcional, padrão 1) em linhas de componente."""
    out = []
    for bruto in itens:
        item_id, _, qtd = bruto.partition(":")
        num = parse_numero(qtd) if qtd else 1.0
        if not item_id or num is None:
            raise typer.BadParameter(f"Item inválido: {bruto!r} (use ID ou ID:QTD)")
        out.append({"id": item_id, "qty": num})
    return out


# -----------------------
# comandos de infra
# -----------------------

@app.command("migrate")
def cmd_migrate(db_path: str = DbOpt):
    """Aplica migrações e recria as views auxiliares."""
    apply_migrations(db_path)
    create_views(db_path)
    typer.echo(f">> Migrações aplicadas e views criadas em: {db_path}")


@app.command("logs")
def cmd_logs(
    tipo: str = typer.Argument("transactions", help="transactions | estoque | financas | database | system"),
    linhas: int = typer.Option(50, help="Quantidade de linhas"),
):
    """Mostra as últimas linhas de um log."""
    conteudo = get_log_summary(tipo, lines=linhas)
    if conteudo is None:
        typer.echo("Logging desabilitado (defina GESTAO_LOG=1).")
        return
    console.print(Panel(escape(conteudo.strip()) or "(vazio)", title=f"Log: {tipo}"))


# -----------------------
# inventário
# -----------------------

inv_app = typer.Typer(help="Inventário de componentes.")
app.add_typer(inv_app, name="inventario")


@inv_app.command("add")
def cmd_inv_add(
    nome: str = typer.Option(..., help="Nome do componente"),
    categoria: str = typer.Option(..., help="CPU, Placa-Mãe, RAM, GPU, Armazenamento, Fonte, Gabinete, Cooler"),
    quantidade: float = typer.Option(0, help="Quantidade em estoque"),
    preco: float = typer.Option(0, help="Preço de custo"),
    item_id: Optional[str] = typer.Option(None, "--id", help="ID do item (gerado se omitido)"),
    socket: Optional[str] = typer.Option(None, help="Soquete (CPU/Placa-Mãe)"),
    ram_type: Optional[str] = typer.Option(None, help="Tipo de memória (Placa-Mãe/RAM)"),
    watt: Optional[int] = typer.Option(None, help="Potência da fonte (W)"),
    power: Optional[int] = typer.Option(None, help="Consumo estimado (W)"),
    db_path: str = DbOpt,
    tenant: str = TenantOpt,
):
    """Cadastra um item de inventário."""
    dados = {
        "id": item_id, "component": nome, "category": categoria, "quantity": quantidade,
        "price": preco, "socket": socket, "ramType": ram_type, "watt": watt, "power": power,
    }
    try:
        novo = uc_inventario.cadastrar_item(
            tenant, {k: v for k, v in dados.items() if v is not None}, db_path=db_path
        )
    except ValueError as e:
        raise typer.BadParameter(str(e))
    except ErroGestao as e:
        _falhar(e)
    typer.echo(novo)


@inv_app.command("list")
def cmd_inv_list(db_path: str = DbOpt, tenant: str = TenantOpt):
    """Lista todo o inventário."""
    itens = [i.to_doc() for i in uc_inventario.listar_inventario(tenant, db_path=db_path)]
    _display_table(itens, ["id", "component", "category", "quantity", "price"], title="Inventário")


@inv_app.command("disponiveis")
def cmd_inv_disponiveis(
    categoria: Optional[str] = typer.Option(None, help="Filtra por categoria"),
    socket: Optional[str] = typer.Option(None, help="Soquete exigido (placas-mãe)"),
    ram_type: Optional[str] = typer.Option(None, help="Tipo de memória exigido (RAM)"),
    db_path: str = DbOpt,
    tenant: str = TenantOpt,
):
    """Lista itens com estoque para o montador."""
    itens = uc_inventario.listar_disponiveis(
        tenant, categoria=categoria, socket=socket, ram_type=ram_type, db_path=db_path
    )
    _display_table(itens, ["id", "component", "category", "quantity", "price", "socket", "ramType"],
                   title="Disponíveis")


@inv_app.command("ajustar")
def cmd_inv_ajustar(
    item_id: str = typer.Argument(..., help="ID do item"),
    delta: float = typer.Option(..., help="Variação (negativa para baixa)"),
    db_path: str = DbOpt,
    tenant: str = TenantOpt,
):
    """Ajusta a quantidade de um item (nunca abaixo de zero)."""
    try:
        novas = uc_inventario.ajustar_estoque(tenant, [(item_id, delta)], db_path=db_path)
    except ErroGestao as e:
        _falhar(e)
    typer.echo(f">> {item_id}: {novas[item_id]:g}")


# -----------------------
# pedidos
# -----------------------

ped_app = typer.Typer(help="Pedidos de venda.")
app.add_typer(ped_app, name="pedido")


@ped_app.command("criar")
def cmd_pedido_criar(
    cliente: str = typer.Option(..., help="Nome do cliente"),
    item: List[str] = typer.Option(..., "--item", help="ID:QTD do componente (repetível)"),
    total: float = typer.Option(0, help="Valor estimado de venda"),
    custo: float = typer.Option(0, help="Custo total"),
    cliente_id: Optional[str] = typer.Option(None, help="ID do cliente"),
    db_path: str = DbOpt,
    tenant: str = TenantOpt,
):
    """Cria um pedido Pendente."""
    dados = {
        "clientName": cliente, "clientId": cliente_id, "components": _parse_itens(item),
        "total": total, "costPrice": custo,
    }
    try:
        pedido_id = uc_pedidos.criar_pedido(tenant, dados, db_path=db_path)
    except ErroGestao as e:
        _falhar(e)
    typer.echo(pedido_id)


@ped_app.command("status")
def cmd_pedido_status(
    pedido_id: str = typer.Argument(..., help="ID do pedido"),
    novo_status: str = typer.Argument(..., help="Pendente | Processando | Enviados | Entregues | Cancelado"),
    valor_final: Optional[str] = typer.Option(None, help="Valor final (obrigatório para Entregues)"),
    db_path: str = DbOpt,
    tenant: str = TenantOpt,
):
    """Muda o status do pedido ajustando estoque e finanças."""
    try:
        res = reconciliar_pedido(tenant, pedido_id, novo_status, valor_final, db_path=db_path)
    except ErroGestao as e:
        _falhar(e)
    if res.sem_mudanca:
        typer.echo(">> Status inalterado.")
        return
    msg = f">> Status do pedido atualizado para {res.status_novo}"
    if res.multiplicador:
        msg += " e estoque ajustado"
    if res.postado:
        msg += f"; Receita de {_brl(res.valor_final)} registrada em Finanças"
    typer.echo(msg + ".")


@ped_app.command("excluir")
def cmd_pedido_excluir(
    pedido_id: str = typer.Argument(..., help="ID do pedido"),
    db_path: str = DbOpt,
    tenant: str = TenantOpt,
):
    """Exclui o pedido (estornando o estoque, se já tiver saído)."""
    try:
        excluir_pedido(tenant, pedido_id, db_path=db_path)
    except ErroGestao as e:
        _falhar(e)
    typer.echo(f">> Pedido {pedido_id[:6]}... excluído.")


@ped_app.command("list")
def cmd_pedido_list(
    status: Optional[str] = typer.Option(None, help="Filtra por status"),
    db_path: str = DbOpt,
    tenant: str = TenantOpt,
):
    """Lista os pedidos."""
    try:
        pedidos = uc_pedidos.listar_pedidos(tenant, status=status, db_path=db_path)
    except ErroGestao as e:
        _falhar(e)
    _display_table(pedidos, ["id", "clientName", "status", "total", "valor_final"], title="Pedidos")


# -----------------------
# ordens de serviço
# -----------------------

os_app = typer.Typer(help="Ordens de serviço.")
app.add_typer(os_app, name="os")


@os_app.command("abrir")
def cmd_os_abrir(
    cliente: str = typer.Option(..., help="Nome do cliente"),
    equipamento: str = typer.Option(..., help="Equipamento"),
    problema: str = typer.Option("", help="Problema relatado"),
    valor_estimado: float = typer.Option(0, help="Valor estimado"),
    cliente_id: Optional[str] = typer.Option(None, help="ID do cliente"),
    db_path: str = DbOpt,
    tenant: str = TenantOpt,
):
    """Abre uma OS com status Recebido."""
    try:
        os_id = uc_os.abrir_os(tenant, {
            "cliente_nome": cliente, "equipamento": equipamento, "problema_relatado": problema,
            "valor_estimado": valor_estimado, "cliente_id": cliente_id,
        }, db_path=db_path)
    except ValueError as e:
        raise typer.BadParameter(str(e))
    except ErroGestao as e:
        _falhar(e)
    typer.echo(os_id)


@os_app.command("status")
def cmd_os_status(
    os_id: str = typer.Argument(..., help="ID da OS"),
    novo_status: str = typer.Argument(..., help="Ex.: Diagnóstico | Entregue/Pago | Cancelado"),
    valor_final: Optional[str] = typer.Option(None, help="Valor final (obrigatório para Entregue/Pago)"),
    db_path: str = DbOpt,
    tenant: str = TenantOpt,
):
    """Muda o status da OS; Entregue/Pago registra a Receita."""
    try:
        res = reconciliar_os(tenant, os_id, novo_status, valor_final, db_path=db_path)
    except ErroGestao as e:
        _falhar(e)
    if res.postado:
        typer.echo(f">> OS {os_id[:8]} marcada como {res.status_novo}. "
                   f"Receita de {_brl(res.valor_final)} registrada em Finanças.")
    else:
        typer.echo(f">> OS {os_id[:8]}: {res.status_novo}.")


@os_app.command("list")
def cmd_os_list(
    status: Optional[str] = typer.Option(None, help="Filtra por status"),
    busca: Optional[str] = typer.Option(None, help="Cliente, equipamento ou ID"),
    db_path: str = DbOpt,
    tenant: str = TenantOpt,
):
    """Lista as ordens de serviço."""
    try:
        ordens = uc_os.listar_os(tenant, status=status, busca=busca, db_path=db_path)
    except ErroGestao as e:
        _falhar(e)
    _display_table(ordens, ["id", "cliente_nome", "equipamento", "status", "valor_estimado", "valor_final"],
                   title="Ordens de Serviço")


# -----------------------
# finanças
# -----------------------

fin_app = typer.Typer(help="Lançamentos financeiros.")
app.add_typer(fin_app, name="financas")


@fin_app.command("lancar")
def cmd_fin_lancar(
    tipo: str = typer.Option(..., help="Receita | Despesa"),
    valor: str = typer.Option(..., help="Valor (aceita 1.500,00)"),
    categoria: str = typer.Option("Geral", help="Categoria"),
    descricao: str = typer.Option("", help="Descrição"),
    db_path: str = DbOpt,
    tenant: str = TenantOpt,
):
    """Inclui um lançamento."""
    try:
        lancamento_id = uc_financas.adicionar_lancamento(tenant, {
            "tipo": tipo, "valor": valor, "categoria": categoria, "descricao": descricao,
        }, db_path=db_path)
    except ValueError as e:
        raise typer.BadParameter(str(e))
    except ErroGestao as e:
        _falhar(e)
    typer.echo(lancamento_id)


@fin_app.command("editar")
def cmd_fin_editar(
    lancamento_id: str = typer.Argument(..., help="ID do lançamento"),
    valor: Optional[str] = typer.Option(None, help="Novo valor"),
    descricao: Optional[str] = typer.Option(None, help="Nova descrição"),
    categoria: Optional[str] = typer.Option(None, help="Nova categoria"),
    db_path: str = DbOpt,
    tenant: str = TenantOpt,
):
    """Edita um lançamento (Receita vinculada atualiza o pedido/OS)."""
    campos = {"valor": valor, "descricao": descricao, "categoria": categoria}
    campos = {k: v for k, v in campos.items() if v is not None}
    if not campos:
        typer.echo("Nada a alterar. Informe pelo menos um campo.")
        raise typer.Exit(code=1)
    try:
        uc_financas.atualizar_lancamento(tenant, lancamento_id, campos, db_path=db_path)
    except ValueError as e:
        raise typer.BadParameter(str(e))
    except ErroGestao as e:
        _falhar(e)
    typer.echo(">> Lançamento atualizado.")


@fin_app.command("excluir")
def cmd_fin_excluir(
    lancamento_id: str = typer.Argument(..., help="ID do lançamento"),
    db_path: str = DbOpt,
    tenant: str = TenantOpt,
):
    """Exclui um lançamento."""
    try:
        uc_financas.excluir_lancamento(tenant, lancamento_id, db_path=db_path)
    except ErroGestao as e:
        _falhar(e)
    typer.echo(">> Lançamento excluído.")


@fin_app.command("resumo")
def cmd_fin_resumo(
    as_json: bool = typer.Option(False, "--json", help="Saída em JSON"),
    db_path: str = DbOpt,
    tenant: str = TenantOpt,
):
    """Receita total, despesa total e lucro líquido."""
    try:
        res = uc_financas.resumo(tenant, db_path=db_path)
    except ErroGestao as e:
        _falhar(e)
    if as_json:
        _print_json(res.as_dict())
        return
    table = Table(title="Resumo Financeiro", box=box.ROUNDED)
    table.add_column("Indicador")
    table.add_column("Valor", justify="right")
    table.add_row("Receita total", _brl(res.receita_total))
    table.add_row("Despesa total", _brl(res.despesa_total))
    cor = "green" if res.lucro_liquido >= 0 else "red"
    table.add_row("Lucro líquido", f"[bold {cor}]{_brl(res.lucro_liquido)}[/]")
    console.print(table)


@fin_app.command("list")
def cmd_fin_list(
    tipo: Optional[str] = typer.Option(None, help="Receita | Despesa"),
    categoria: Optional[str] = typer.Option(None, help="Categoria"),
    inicio: Optional[str] = typer.Option(None, help="Data inicial YYYY-MM-DD"),
    fim: Optional[str] = typer.Option(None, help="Data final YYYY-MM-DD"),
    busca: Optional[str] = typer.Option(None, help="Texto na descrição/categoria"),
    db_path: str = DbOpt,
    tenant: str = TenantOpt,
):
    """Lista lançamentos (mais recentes primeiro)."""
    try:
        itens = uc_financas.listar_lancamentos(
            tenant, tipo=tipo, categoria=categoria, inicio=inicio, fim=fim, busca=busca, db_path=db_path
        )
    except ErroGestao as e:
        _falhar(e)
    _display_table(itens, ["id", "data", "tipo", "categoria", "descricao", "valor"], title="Lançamentos")


# -----------------------
# montador
# -----------------------

mont_app = typer.Typer(help="Montador de PC.")
app.add_typer(mont_app, name="montador")


def _ids_selecao(cpu, mobo, ram, gpu, storage, psu, case, cooler) -> Dict[str, Optional[str]]:
    return {"cpu": cpu, "mobo": mobo, "ram": ram, "gpu": gpu, "storage": storage,
            "psu": psu, "case": case, "cooler": cooler}


def _selecao_opts():
    return {
        "cpu": typer.Option(None, help="ID da CPU"),
        "mobo": typer.Option(None, help="ID da placa-mãe"),
        "ram": typer.Option(None, help="ID da memória"),
        "gpu": typer.Option(None, help="ID da placa de vídeo"),
        "storage": typer.Option(None, help="ID do armazenamento"),
        "psu": typer.Option(None, help="ID da fonte"),
        "case": typer.Option(None, help="ID do gabinete"),
        "cooler": typer.Option(None, help="ID do cooler"),
    }


_OPTS = _selecao_opts()


@mont_app.command("cotar")
def cmd_montador_cotar(
    cpu: Optional[str] = _OPTS["cpu"], mobo: Optional[str] = _OPTS["mobo"],
    ram: Optional[str] = _OPTS["ram"], gpu: Optional[str] = _OPTS["gpu"],
    storage: Optional[str] = _OPTS["storage"], psu: Optional[str] = _OPTS["psu"],
    case: Optional[str] = _OPTS["case"], cooler: Optional[str] = _OPTS["cooler"],
    margem: float = typer.Option(20.0, help="Margem de lucro (%)"),
    as_json: bool = typer.Option(False, "--json", help="Saída em JSON"),
    db_path: str = DbOpt,
    tenant: str = TenantOpt,
):
    """Calcula custo, potência, preço sugerido e compatibilidade."""
    try:
        selecao = uc_montador.carregar_selecao(
            tenant, _ids_selecao(cpu, mobo, ram, gpu, storage, psu, case, cooler), db_path=db_path
        )
    except ValueError as e:
        raise typer.BadParameter(str(e))
    except ErroGestao as e:
        _falhar(e)
    cot = uc_montador.cotar(selecao, margem)
    if as_json:
        _print_json(cot.__dict__)
        return
    linhas = [
        f"Custo: {_brl(cot.custo)}",
        f"Potência estimada: {cot.potencia_estimada} W",
        f"Preço sugerido ({cot.margem:g}%): {_brl(cot.preco_sugerido)}",
    ]
    if cot.faltando:
        linhas.append(f"Faltando: {', '.join(cot.faltando)}")
    for slot, msg in cot.incompatibilidades.items():
        linhas.append(f"[red]{slot}: {escape(msg)}[/]")
    console.print(Panel("\n".join(linhas), title="Cotação", border_style="green" if cot.pronto else "yellow"))


@mont_app.command("salvar")
def cmd_montador_salvar(
    nome: str = typer.Argument(..., help="Nome do PC montado"),
    cpu: Optional[str] = _OPTS["cpu"], mobo: Optional[str] = _OPTS["mobo"],
    ram: Optional[str] = _OPTS["ram"], gpu: Optional[str] = _OPTS["gpu"],
    storage: Optional[str] = _OPTS["storage"], psu: Optional[str] = _OPTS["psu"],
    case: Optional[str] = _OPTS["case"], cooler: Optional[str] = _OPTS["cooler"],
    margem: float = typer.Option(20.0, help="Margem de lucro (%)"),
    db_path: str = DbOpt,
    tenant: str = TenantOpt,
):
    """Salva o PC montado, baixando um componente de cada categoria."""
    try:
        selecao = uc_montador.carregar_selecao(
            tenant, _ids_selecao(cpu, mobo, ram, gpu, storage, psu, case, cooler), db_path=db_path
        )
        pc_id = uc_montador.salvar_pc_montado(tenant, nome, selecao, margem, db_path=db_path)
    except ValueError as e:
        raise typer.BadParameter(str(e))
    except ErroGestao as e:
        _falhar(e)
    typer.echo(f">> PC Montado \"{nome}\" salvo ({pc_id}) e componentes deduzidos do estoque.")


@mont_app.command("pedido")
def cmd_montador_pedido(
    cliente: str = typer.Option(..., help="Nome do cliente"),
    cpu: Optional[str] = _OPTS["cpu"], mobo: Optional[str] = _OPTS["mobo"],
    ram: Optional[str] = _OPTS["ram"], gpu: Optional[str] = _OPTS["gpu"],
    storage: Optional[str] = _OPTS["storage"], psu: Optional[str] = _OPTS["psu"],
    case: Optional[str] = _OPTS["case"], cooler: Optional[str] = _OPTS["cooler"],
    margem: float = typer.Option(20.0, help="Margem de lucro (%)"),
    cliente_id: Optional[str] = typer.Option(None, help="ID do cliente"),
    notas: Optional[str] = typer.Option(None, help="Observações do pedido"),
    db_path: str = DbOpt,
    tenant: str = TenantOpt,
):
    """Gera um pedido Pendente com a seleção (o estoque sai só no envio)."""
    try:
        selecao = uc_montador.carregar_selecao(
            tenant, _ids_selecao(cpu, mobo, ram, gpu, storage, psu, case, cooler), db_path=db_path
        )
        pedido_id = uc_montador.gerar_pedido(
            tenant, {"nome": cliente, "id": cliente_id}, selecao, margem, notas, db_path=db_path
        )
    except ValueError as e:
        raise typer.BadParameter(str(e))
    except ErroGestao as e:
        _falhar(e)
    typer.echo(pedido_id)


# -----------------------
# clientes
# -----------------------

cli_app = typer.Typer(help="Cadastro de clientes.")
app.add_typer(cli_app, name="cliente")


@cli_app.command("add")
def cmd_cliente_add(
    nome: str = typer.Option(..., help="Nome"),
    documento: str = typer.Option("", help="CPF ou CNPJ"),
    email: str = typer.Option("", help="Email"),
    telefone: str = typer.Option("", help="Telefone"),
    db_path: str = DbOpt,
    tenant: str = TenantOpt,
):
    """Cadastra um cliente."""
    try:
        cliente_id = uc_clientes.cadastrar_cliente(tenant, {
            "nome": nome, "documento": documento, "email": email, "telefone": telefone,
        }, db_path=db_path)
    except ValueError as e:
        raise typer.BadParameter(str(e))
    except ErroGestao as e:
        _falhar(e)
    typer.echo(cliente_id)


@cli_app.command("list")
def cmd_cliente_list(
    busca: Optional[str] = typer.Option(None, help="Nome, documento ou email"),
    db_path: str = DbOpt,
    tenant: str = TenantOpt,
):
    """Lista clientes."""
    try:
        clientes = uc_clientes.buscar_clientes(tenant, busca, db_path=db_path)
    except ErroGestao as e:
        _falhar(e)
    _display_table(clientes, ["id", "nome", "documento", "tipo", "email"], title="Clientes")


@cli_app.command("historico")
def cmd_cliente_historico(
    cliente_id: str = typer.Argument(..., help="ID do cliente"),
    db_path: str = DbOpt,
    tenant: str = TenantOpt,
):
    """Pedidos e ordens de serviço do cliente."""
    try:
        hist = uc_clientes.historico_cliente(tenant, cliente_id, db_path=db_path)
    except ErroGestao as e:
        _falhar(e)
    _display_table(hist["pedidos"], ["id", "status", "total", "valor_final"], title="Pedidos")
    _display_table(hist["ordens_servico"], ["id", "equipamento", "status", "valor_final"],
                   title="Ordens de Serviço")


# Entry point opcional:
def main():
    app()


if __name__ == "__main__":
    main()
