import questionary
from rich.console import Console

from streampix.cli.pix_menu import generate_pix_menu, split_subscription_menu, validate_pix_menu
from streampix.services.payment_service import PaymentService

console = Console()


def main_menu() -> None:
    payment_service = PaymentService()

    console.print()
    console.print("[bold]Streams Control Pix[/bold]", style="cyan")
    console.print()

    while True:
        choice = questionary.select(
            "Menu Principal",
            choices=[
                "Gerar Pix",
                "Dividir Assinatura",
                "Validar Código Pix",
                "Sair",
            ],
        ).ask()

        if choice is None or choice == "Sair":
            console.print("[bold]Até logo![/bold]")
            break
        elif choice == "Gerar Pix":
            generate_pix_menu(payment_service)
        elif choice == "Dividir Assinatura":
            split_subscription_menu(payment_service)
        elif choice == "Validar Código Pix":
            validate_pix_menu(payment_service)
