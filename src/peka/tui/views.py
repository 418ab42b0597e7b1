"""@brief Full-screen views, one per controller screen."""

from __future__ import annotations

from typing import List, Optional

from textual import on
from textual.app import ComposeResult
from textual.containers import Container, Horizontal, Vertical
from textual.widgets import Button, Footer, Input, Label, ListItem, ListView, Static

from peka import messages
from peka.dispatcher import MutationKind
from peka.screens import Screen
from peka.session import Surface
from peka.tui.base import PekaView, show_message
from peka.tui.modals import (
    AddCredentialModal,
    ConfirmDeleteVaultModal,
    CreateFolderModal,
    CredentialModal,
    ExportModal,
)


class LoadingView(PekaView):
    """@brief Shown while existing vaults are discovered."""

    def compose(self) -> ComposeResult:
        with Container(classes="centered"):
            with Vertical(classes="card"):
                yield Static("Peka", classes="title")
                yield Static("Checking for vaults on this device...", id="loading")


class WelcomeView(PekaView):
    """@brief First-run landing: create or import a vault."""

    def compose(self) -> ComposeResult:
        with Container(classes="centered"):
            with Vertical(classes="card"):
                yield Static("Welcome to Peka", classes="title")
                yield Static(
                    "Keep your credentials in an encrypted vault on this device.",
                    classes="subtitle",
                )
                yield Static("", id="banner", classes="error", markup=False)
                with Horizontal(classes="buttons"):
                    yield Button("Get started", id="get-started", variant="primary")
                    yield Button("Import vault", id="import")

    async def refresh_view(self) -> None:
        show_message(self.query_one("#banner", Static), self.controller.banner)

    @on(Button.Pressed, "#get-started")
    def handle_get_started(self) -> None:
        self.peka.perform(self.controller.get_started)

    @on(Button.Pressed, "#import")
    def handle_import(self) -> None:
        self.peka.perform(self.controller.start_import)


class WelcomeBackView(PekaView):
    """@brief Unlock the device's vault, or delete it."""

    def compose(self) -> ComposeResult:
        with Container(classes="centered"):
            with Vertical(classes="card"):
                yield Static("Welcome back", classes="title")
                yield Static("", id="vault-name", classes="subtitle", markup=False)
                yield Input(
                    placeholder="Master password", password=True, id="unlock-password"
                )
                yield Static("", id="unlock-error", classes="error", markup=False)
                with Horizontal(classes="buttons"):
                    yield Button("Unlock", id="unlock", variant="primary")
                    yield Button("Delete vault", id="delete-vault", variant="error")

    def on_mount(self) -> None:
        self.query_one("#unlock-password", Input).focus()

    async def refresh_view(self) -> None:
        vault = self.controller.landing_vault
        self.query_one("#vault-name", Static).update(vault.name if vault else "")
        show_message(
            self.query_one("#unlock-error", Static),
            self.controller.error(Surface.UNLOCK)
            or self.controller.error(Surface.DELETE_VAULT),
        )
        busy = vault is not None and self.controller.is_busy(
            MutationKind.OPEN_VAULT, vault.path
        )
        self.query_one("#unlock", Button).disabled = busy

    @on(Button.Pressed, "#unlock")
    @on(Input.Submitted, "#unlock-password")
    def handle_unlock(self) -> None:
        password = self.query_one("#unlock-password", Input).value
        self.peka.perform(lambda: self.controller.unlock(password))

    @on(Button.Pressed, "#delete-vault")
    def handle_delete(self) -> None:
        self.app.push_screen(ConfirmDeleteVaultModal())


class SetupView(PekaView):
    """@brief Name a new vault and choose its master password."""

    BINDINGS = [("escape", "back", "Back")]

    def compose(self) -> ComposeResult:
        with Container(classes="centered"):
            with Vertical(classes="card"):
                yield Static("Create your vault", classes="title")
                yield Input(placeholder="Vault name", id="vault-name")
                yield Input(placeholder="Master password", password=True, id="password")
                yield Input(
                    placeholder="Confirm master password",
                    password=True,
                    id="confirm-password",
                )
                yield Static("", id="policy", classes="policy", markup=False)
                yield Static("", id="setup-error", classes="error", markup=False)
                with Horizontal(classes="buttons"):
                    yield Button("Create vault", id="create", variant="primary")
                    yield Button("Back", id="back")
                yield Static(
                    "The master password cannot be recovered. Store it somewhere safe.",
                    classes="hint",
                )

    def on_mount(self) -> None:
        self.query_one("#vault-name", Input).focus()

    async def refresh_view(self) -> None:
        self._render_policy()
        show_message(
            self.query_one("#setup-error", Static), self.controller.error(Surface.SETUP)
        )

    def _render_policy(self) -> None:
        result = self.controller.setup_validation
        policy = self.query_one("#policy", Static)
        if result.is_valid:
            show_message(policy, "✓ Password meets every requirement")
        else:
            show_message(policy, "\n".join(f"✗ {e}" for e in result.errors))
        busy = self.controller.is_busy(MutationKind.CREATE_VAULT, self._name())
        self.query_one("#create", Button).disabled = busy or not result.is_valid

    def _name(self) -> str:
        return self.query_one("#vault-name", Input).value.strip()

    @on(Input.Changed, "#password")
    @on(Input.Changed, "#confirm-password")
    def handle_password_changed(self) -> None:
        self.controller.check_master_password(
            self.query_one("#password", Input).value,
            self.query_one("#confirm-password", Input).value,
        )
        self._render_policy()

    @on(Button.Pressed, "#create")
    def handle_create(self) -> None:
        name = self.query_one("#vault-name", Input).value
        password = self.query_one("#password", Input).value
        confirm = self.query_one("#confirm-password", Input).value
        self.peka.perform(lambda: self.controller.create_vault(name, password, confirm))

    @on(Button.Pressed, "#back")
    def action_back(self) -> None:
        self.peka.perform(self.controller.back_to_landing)


class ImportView(PekaView):
    """@brief Bring an exported vault file onto this device."""

    BINDINGS = [("escape", "back", "Back")]

    def compose(self) -> ComposeResult:
        with Container(classes="centered"):
            with Vertical(classes="card"):
                yield Static("Import a vault", classes="title")
                yield Input(placeholder="Vault name", id="import-name")
                yield Input(placeholder="Path to .peka file", id="import-path")
                yield Input(
                    placeholder="Master password of the file",
                    password=True,
                    id="import-password",
                )
                yield Static("", id="import-error", classes="error", markup=False)
                with Horizontal(classes="buttons"):
                    yield Button("Import", id="import-vault", variant="primary")
                    yield Button("Back", id="back")

    def on_mount(self) -> None:
        self.query_one("#import-name", Input).focus()

    async def refresh_view(self) -> None:
        show_message(
            self.query_one("#import-error", Static),
            self.controller.error(Surface.IMPORT),
        )
        path = self.query_one("#import-path", Input).value.strip()
        self.query_one("#import-vault", Button).disabled = self.controller.is_busy(
            MutationKind.IMPORT_VAULT, path
        )

    @on(Button.Pressed, "#import-vault")
    @on(Input.Submitted, "#import-password")
    def handle_import(self) -> None:
        name = self.query_one("#import-name", Input).value
        path = self.query_one("#import-path", Input).value.strip() or None
        password = self.query_one("#import-password", Input).value
        self.peka.perform(lambda: self.controller.import_vault(name, path, password))

    @on(Button.Pressed, "#back")
    def action_back(self) -> None:
        self.peka.perform(self.controller.back_to_landing)


class VaultView(PekaView):
    """@brief Folder list of the unlocked vault."""

    BINDINGS = [
        ("n", "new_folder", "New folder"),
        ("d", "delete_folder", "Delete folder"),
        ("e", "export", "Export"),
        ("x", "delete_vault", "Delete vault"),
        ("l", "lock", "Lock"),
    ]

    def __init__(self) -> None:
        super().__init__()
        self._folder_ids: List[str] = []

    def compose(self) -> ComposeResult:
        with Vertical(classes="pane"):
            yield Static("", id="vault-title", classes="title", markup=False)
            yield Static("", id="vault-stats", classes="subtitle")
            yield ListView(id="folder-list")
            yield Static(messages.INFO_NO_FOLDERS, id="folders-empty", classes="hint")
            yield Static("", id="folders-error", classes="error", markup=False)
        yield Footer()

    async def refresh_view(self) -> None:
        snapshot = self.controller.snapshot
        if snapshot is None:
            return
        stats = snapshot.stats()
        self.query_one("#vault-title", Static).update(snapshot.name)
        self.query_one("#vault-stats", Static).update(
            f"{stats['folders']} folders ({stats['secure_folders']} PIN protected), "
            f"{stats['credentials']} credentials"
        )

        list_view = self.query_one("#folder-list", ListView)
        folder_ids = [folder.id for folder in snapshot.folders]
        if folder_ids != self._folder_ids or len(list_view.children) != len(folder_ids):
            index = list_view.index
            await list_view.clear()
            await list_view.extend(
                ListItem(
                    Label(("🔒 " if folder.secure else "") + folder.name, markup=False),
                    classes="secure" if folder.secure else "",
                )
                for folder in snapshot.folders
            )
            self._folder_ids = folder_ids
            if folder_ids:
                list_view.index = min(index or 0, len(folder_ids) - 1)
            list_view.focus()

        self.query_one("#folders-empty", Static).display = not folder_ids
        show_message(
            self.query_one("#folders-error", Static),
            self.controller.error(Surface.FOLDERS),
        )

    def _highlighted_folder(self) -> Optional[str]:
        index = self.query_one("#folder-list", ListView).index
        if index is None or index >= len(self._folder_ids):
            return None
        return self._folder_ids[index]

    @on(ListView.Selected, "#folder-list")
    def handle_folder_selected(self, event: ListView.Selected) -> None:
        index = event.list_view.index
        if index is None or index >= len(self._folder_ids):
            return
        folder_id = self._folder_ids[index]
        self.peka.perform(lambda: self.controller.open_folder(folder_id))

    def action_new_folder(self) -> None:
        self.app.push_screen(CreateFolderModal())

    def action_delete_folder(self) -> None:
        folder_id = self._highlighted_folder()
        if folder_id is not None:
            self.peka.perform(lambda: self.controller.delete_folder(folder_id))

    def action_export(self) -> None:
        self.app.push_screen(ExportModal())

    def action_delete_vault(self) -> None:
        self.app.push_screen(ConfirmDeleteVaultModal())

    def action_lock(self) -> None:
        self.peka.perform(self.controller.back_to_landing)


class FolderView(PekaView):
    """@brief Credentials of the open folder."""

    BINDINGS = [
        ("a", "add_credential", "Add"),
        ("d", "delete_credential", "Delete"),
        ("escape", "close_folder", "Back"),
        ("l", "lock", "Lock"),
    ]

    def __init__(self) -> None:
        super().__init__()
        self._credential_ids: List[str] = []

    def compose(self) -> ComposeResult:
        with Vertical(classes="pane"):
            yield Static("", id="folder-title", classes="title", markup=False)
            yield ListView(id="credential-list")
            yield Static(
                messages.INFO_NO_CREDENTIALS, id="credentials-empty", classes="hint"
            )
            yield Static("", id="credentials-error", classes="error", markup=False)
        yield Footer()

    async def refresh_view(self) -> None:
        folder = self.controller.active_folder
        if folder is None:
            return
        self.query_one("#folder-title", Static).update(folder.name)

        list_view = self.query_one("#credential-list", ListView)
        credential_ids = [c.id for c in folder.credentials]
        if credential_ids != self._credential_ids or len(list_view.children) != len(
            credential_ids
        ):
            index = list_view.index
            await list_view.clear()
            await list_view.extend(
                ListItem(Label(f"{c.title}  ({c.username})", markup=False))
                for c in folder.credentials
            )
            self._credential_ids = credential_ids
            if credential_ids:
                list_view.index = min(index or 0, len(credential_ids) - 1)
            list_view.focus()

        self.query_one("#credentials-empty", Static).display = not credential_ids
        show_message(
            self.query_one("#credentials-error", Static),
            self.controller.error(Surface.CREDENTIALS),
        )

    @on(ListView.Selected, "#credential-list")
    def handle_credential_selected(self, event: ListView.Selected) -> None:
        index = event.list_view.index
        if index is None or index >= len(self._credential_ids):
            return
        if self.controller.select_credential(self._credential_ids[index]) is not None:
            self.app.push_screen(CredentialModal())

    def action_add_credential(self) -> None:
        self.app.push_screen(AddCredentialModal())

    def action_delete_credential(self) -> None:
        index = self.query_one("#credential-list", ListView).index
        if index is None or index >= len(self._credential_ids):
            return
        credential_id = self._credential_ids[index]
        self.peka.perform(lambda: self.controller.delete_credential(credential_id))

    def action_close_folder(self) -> None:
        self.peka.perform(self.controller.close_folder)

    def action_lock(self) -> None:
        self.peka.perform(self.controller.back_to_landing)


VIEWS = {
    Screen.DISCOVERING: LoadingView,
    Screen.WELCOME: WelcomeView,
    Screen.WELCOME_BACK: WelcomeBackView,
    Screen.MASTER_PASSWORD_SETUP: SetupView,
    Screen.IMPORT_VAULT: ImportView,
    Screen.FOLDER_LIST: VaultView,
    Screen.FOLDER_DETAIL: FolderView,
}
