"""Console UI utilities for the CLI."""

from typing import List, Optional

import questionary
from rich.console import Console
from rich.table import Table

from .models import VaultSummary
from .validation import ValidationResult

console = Console()

# Clean questionary style - minimal highlighting for prompts
select_style = questionary.Style(
    [
        ("qmark", "fg:#5f87af bold"),
        ("question", "bold"),
        ("pointer", "fg:#5f87af bold"),
        ("highlighted", "fg:#ffffff bg:#5f87af"),
        ("instruction", "fg:#6c6c6c"),
        ("answer", "fg:#5f87af bold"),
    ]
)


def success(message: str) -> None:
    """Display success message."""
    console.print(f"[green]✓[/green] {message}")


def error(message: str) -> None:
    """Display error message."""
    console.print(f"[red]✗[/red] {message}")


def info(message: str) -> None:
    """Display info message."""
    console.print(f"[blue]i[/blue] {message}")


def warning(message: str) -> None:
    """Display warning message."""
    console.print(f"[yellow]![/yellow] {message}")


def confirm(message: str, default: bool = False) -> bool:
    """Ask for confirmation."""
    result = questionary.confirm(message, default=default, style=select_style).ask()
    return result if result is not None else False


def prompt_password(message: str) -> Optional[str]:
    """Prompt for a secret without echo. None when the user cancels."""
    try:
        return questionary.password(message, style=select_style).ask()
    except (KeyboardInterrupt, EOFError):
        return None


def show_vaults_table(vaults: List[VaultSummary]) -> None:
    """Display the vaults found on this device."""
    if not vaults:
        info("No vaults found on this device.")
        return

    table = Table(title="Vaults", show_lines=False, expand=True)
    table.add_column("Name", style="cyan bold", no_wrap=True)
    table.add_column("Path", style="blue dim")

    for vault in vaults:
        table.add_row(vault.name, vault.path)

    console.print(table)


def show_policy_result(result: ValidationResult) -> None:
    """List every unmet master password rule, or confirm the password passes."""
    if result.is_valid:
        success("Password meets the master password policy")
        return
    for message in result.errors:
        error(message)
