from __future__ import annotations

from pathlib import Path

import questionary
from rich.console import Console
from rich.table import Table

from streampix.models import format_brl, parse_brl
from streampix.models.pix import KEY_TYPE_LABELS, PixCharge, PixKeyType
from streampix.pix import PixError
from streampix.services.payment_service import PaymentService

console = Console()

_KEY_TYPE_CHOICES = {label: key_type for key_type, label in KEY_TYPE_LABELS.items()}


def _ask_amount(prompt: str):
    while True:
        amount_str = questionary.text(prompt).ask()
        if amount_str is None:
            return None
        parsed = parse_brl(amount_str)
        if parsed is not None and parsed > 0:
            return parsed
        console.print("[red]Valor inválido. Tente novamente.[/red]")


def _ask_key(payment_service: PaymentService) -> tuple[str, PixKeyType | None] | None:
    default_key = payment_service.settings.pix_key
    if default_key:
        console.print(f"\n  [dim]Chave PIX padrão: {default_key}[/dim]")
        override = questionary.confirm("Usar uma chave PIX diferente?", default=False).ask()
        if not override:
            return "", None

    pix_key = questionary.text("Chave PIX:").ask()
    if not pix_key:
        return None
    label = questionary.select("Tipo da chave:", choices=list(_KEY_TYPE_CHOICES)).ask()
    return pix_key, _KEY_TYPE_CHOICES.get(label)


def _print_charge(charge: PixCharge) -> None:
    table = Table(title="Cobrança PIX")
    table.add_column("Campo", style="dim")
    table.add_column("Valor", style="bold")
    table.add_row("Chave", charge.pix_key)
    table.add_row("Recebedor", charge.merchant_name)
    table.add_row("Cidade", charge.merchant_city)
    table.add_row("Valor", format_brl(charge.amount))
    table.add_row("Identificador", charge.txid)

    console.print()
    console.print(table)
    console.print()
    console.print("[bold]Pix Copia e Cola[/bold]")
    console.print(charge.payload, soft_wrap=True)


def generate_pix_menu(payment_service: PaymentService) -> None:
    console.print()
    console.print("[bold]Nova Cobrança PIX[/bold]", style="cyan")

    key = _ask_key(payment_service)
    if key is None:
        console.print("[yellow]Operação cancelada.[/yellow]")
        return
    pix_key, key_type = key

    amount = _ask_amount("Valor (ex: 55,90):")
    if amount is None:
        console.print("[yellow]Operação cancelada.[/yellow]")
        return

    merchant_name = questionary.text("Nome do recebedor (opcional):").ask() or ""
    txid = questionary.text("Identificador da transação (opcional):").ask() or ""

    try:
        charge = payment_service.create_charge(
            amount,
            pix_key=pix_key,
            key_type=key_type,
            merchant_name=merchant_name,
            txid=txid,
        )
    except PixError as e:
        console.print(f"[red]{e}[/red]")
        return

    if charge is None:
        console.print("[red]Dados inválidos para gerar Pix.[/red]")
        return

    _print_charge(charge)

    path = questionary.text("Salvar QR Code em (vazio para pular):").ask()
    if path and charge.qrcode_png:
        Path(path).write_bytes(charge.qrcode_png)
        console.print(f"[green]QR Code salvo em {path}[/green]")


def split_subscription_menu(payment_service: PaymentService) -> None:
    console.print()
    console.print("[bold]Dividir Assinatura[/bold]", style="cyan")

    total = _ask_amount("Valor total da assinatura (ex: 55,90):")
    if total is None:
        console.print("[yellow]Operação cancelada.[/yellow]")
        return

    names = questionary.text("Membros (separados por vírgula):").ask() or ""
    members = [name.strip() for name in names.split(",") if name.strip()]
    if not members:
        console.print("[yellow]Nenhum membro informado.[/yellow]")
        return

    key = _ask_key(payment_service)
    if key is None:
        console.print("[yellow]Operação cancelada.[/yellow]")
        return
    pix_key, key_type = key

    try:
        charges = payment_service.split_charges(total, members, pix_key=pix_key, key_type=key_type)
    except PixError as e:
        console.print(f"[red]{e}[/red]")
        return

    table = Table(title=f"Divisão de {format_brl(total)}")
    table.add_column("Membro", style="bold")
    table.add_column("Valor", justify="right")
    table.add_column("Pix Copia e Cola")

    for member, charge in charges:
        if charge is None:
            table.add_row(member, "-", "[red]Dados inválidos para gerar Pix.[/red]")
        else:
            table.add_row(member, format_brl(charge.amount), charge.payload)

    console.print()
    console.print(table)


def validate_pix_menu(payment_service: PaymentService) -> None:
    payload = questionary.text("Cole o código Pix:").ask()
    if not payload:
        console.print("[yellow]Operação cancelada.[/yellow]")
        return

    try:
        info = payment_service.inspect(payload)
    except PixError as e:
        console.print(f"[red]Código Pix inválido: {e}[/red]")
        return

    table = Table(title="Código Pix válido")
    table.add_column("Campo", style="dim")
    table.add_column("Valor", style="bold")
    table.add_row("Chave", info.pix_key)
    table.add_row("Recebedor", info.merchant_name)
    table.add_row("Cidade", info.merchant_city)
    table.add_row("Valor", format_brl(info.amount) if info.amount is not None else "-")
    table.add_row("Identificador", info.txid)
    table.add_row("CRC16", info.crc)

    console.print()
    console.print(table)
