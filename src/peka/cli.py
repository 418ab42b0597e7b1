"""CLI using Typer."""

import asyncio
import logging
import os
import sys
from pathlib import Path
from typing import Optional

import typer
from typing_extensions import Annotated

from . import __version__, messages, ui
from .backend import BackendError, LocalBackend
from .config import Config, config
from .log import setup_logging
from .validation import validate_import, validate_master_password

app = typer.Typer(
    name="peka",
    help="Local encrypted credential manager",
    add_completion=True,
    no_args_is_help=False,
    context_settings={"help_option_names": ["-h", "--help"]},
    rich_markup_mode="rich",
)


def version_callback(value: bool):
    """Print version and exit."""
    if value:
        typer.echo(f"peka {__version__}")
        raise typer.Exit()


def get_backend() -> LocalBackend:
    return LocalBackend(config.vault_dir)


def get_device_vault(backend: LocalBackend):
    """Return the single vault on this device or exit with an error."""
    vaults = asyncio.run(backend.list_vaults())
    if not vaults:
        ui.error(messages.INFO_NO_VAULTS)
        raise typer.Exit(1)
    return vaults[0]


@app.callback(invoke_without_command=True)
def main_callback(
    ctx: typer.Context,
    vault_dir: Annotated[
        Optional[str],
        typer.Option(
            "--vault-dir",
            "-d",
            help="Directory holding the vault file (default: ~/.peka/vaults)",
        ),
    ] = None,
    verbose: Annotated[
        bool, typer.Option("--verbose", help="Echo informational logs to stderr")
    ] = False,
    version: Annotated[
        Optional[bool],
        typer.Option(
            "--version",
            "-V",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit",
        ),
    ] = None,
):
    """Launches the terminal UI if no command given."""
    if vault_dir:
        config.vault_dir = os.path.expanduser(vault_dir)

    if ctx.invoked_subcommand is None:
        # The TUI owns the terminal: file logging only
        setup_logging()
        from .tui.app import run

        run(get_backend())
        raise typer.Exit(0)

    setup_logging(
        console=True, console_level=logging.INFO if verbose else logging.WARNING
    )


@app.command("vaults", help="List vaults on this device (ls)", rich_help_panel="Vault")
def list_vaults():
    """Show the vault file found in the vault directory."""
    try:
        vaults = asyncio.run(get_backend().list_vaults())
    except BackendError as e:
        ui.error(e.message)
        raise typer.Exit(1)
    ui.show_vaults_table(vaults)


@app.command("export", help="Export the vault file", rich_help_panel="Vault Backup")
def export_vault(
    output: Annotated[str, typer.Argument(help="Destination file path")],
    force: Annotated[
        bool, typer.Option("--force", "-f", help="Overwrite existing file")
    ] = False,
):
    """Copy the encrypted vault file to a backup location."""
    backend = get_backend()
    vault = get_device_vault(backend)

    destination = str(Path(output).expanduser())
    if not destination.endswith(Config.VAULT_EXTENSION):
        destination += Config.VAULT_EXTENSION

    if Path(destination).exists() and not force:
        ui.error(f"File '{destination}' already exists. Use --force to overwrite.")
        raise typer.Exit(1)

    try:
        asyncio.run(backend.export_vault_file(vault.path, destination))
    except BackendError as e:
        ui.error(f"Export failed: {e.message}")
        raise typer.Exit(1)
    ui.success(f"Vault '{vault.name}' exported to '{destination}'")


@app.command("import", help="Import a vault file", rich_help_panel="Vault Backup")
def import_vault(
    source: Annotated[str, typer.Argument(help="Vault file to import")],
    name: Annotated[str, typer.Option("--name", "-n", help="Name for the vault")],
):
    """Import an encrypted vault file onto this device."""
    password = ui.prompt_password("Master password:")
    if password is None:
        ui.error("Import cancelled")
        raise typer.Exit(1)

    source_path = str(Path(source).expanduser())
    check = validate_import(name, source_path, password)
    if not check.is_valid:
        ui.error(check.message)
        raise typer.Exit(1)

    try:
        path = asyncio.run(get_backend().import_vault(source_path, name.strip(), password))
    except BackendError as e:
        ui.error(f"Import failed: {e.message}")
        raise typer.Exit(1)
    ui.success(messages.SUCCESS_IMPORTED.format(source=source))
    ui.info(f"Stored at {path}")


@app.command("delete", help="Delete the vault permanently", rich_help_panel="Vault")
def delete_vault(
    force: Annotated[
        bool, typer.Option("--force", "-f", help="Skip confirmation prompt")
    ] = False,
):
    """Delete the device's vault file after confirmation."""
    backend = get_backend()
    vault = get_device_vault(backend)

    if not force and not ui.confirm(
        f"Delete '{vault.name}'? All encrypted data will be permanently lost.",
        default=False,
    ):
        ui.info("Cancelled")
        return

    try:
        asyncio.run(backend.delete_vault(vault.path))
    except BackendError as e:
        ui.error(e.message)
        raise typer.Exit(1)
    ui.success(messages.SUCCESS_DELETED_VAULT.format(name=vault.name))


@app.command(
    "check-password",
    help="Check a master password against the policy",
    rich_help_panel="Utilities",
)
def check_password():
    """Run the master password policy on a typed password."""
    password = ui.prompt_password("Master password:")
    if password is None:
        raise typer.Exit(1)
    confirm = ui.prompt_password("Confirm master password:")
    if confirm is None:
        raise typer.Exit(1)

    result = validate_master_password(password, confirm)
    ui.show_policy_result(result)
    if not result.is_valid:
        raise typer.Exit(1)


app.command("ls", help="Alias for 'vaults'", hidden=True)(list_vaults)


def main() -> None:
    """Main entry point."""
    try:
        app()
    except KeyboardInterrupt:
        ui.error("Operation cancelled")
        sys.exit(1)


if __name__ == "__main__":
    main()
