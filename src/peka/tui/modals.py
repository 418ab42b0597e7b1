"""@brief Dialogs layered over the vault views."""

from __future__ import annotations

from textual import on
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.widgets import Button, Checkbox, Input, Static

from peka.clipboard import CLIPBOARD_TIMEOUT_SECONDS, copy_to_clipboard_with_autoclear
from peka.config import Config
from peka.dispatcher import MutationKind
from peka.gate import GateState
from peka.session import Surface
from peka.tui.base import PekaModal, show_message
from peka.validation import sanitize_pin_input

MASK = "•" * 12


class CreateFolderModal(PekaModal):
    """@brief Name a folder and optionally protect it with a PIN."""

    def compose(self) -> ComposeResult:
        with Vertical(classes="modal"):
            yield Static("New folder", classes="title")
            yield Input(placeholder="Folder name", id="folder-name")
            yield Checkbox("Protect with a 4-digit PIN", id="folder-secure")
            yield Input(
                placeholder="PIN",
                password=True,
                max_length=Config.PIN_LENGTH,
                id="folder-pin",
            )
            yield Static("", id="create-folder-error", classes="error", markup=False)
            with Horizontal(classes="buttons"):
                yield Button("Create", id="create-folder", variant="primary")
                yield Button("Cancel", id="cancel")

    def on_mount(self) -> None:
        self.query_one("#folder-pin", Input).display = False
        self.query_one("#folder-name", Input).focus()

    async def refresh_view(self) -> None:
        show_message(
            self.query_one("#create-folder-error", Static),
            self.controller.error(Surface.CREATE_FOLDER),
        )
        self.query_one("#create-folder", Button).disabled = self.controller.is_busy(
            MutationKind.CREATE_FOLDER
        )

    @on(Checkbox.Changed, "#folder-secure")
    def handle_secure_toggled(self, event: Checkbox.Changed) -> None:
        pin_input = self.query_one("#folder-pin", Input)
        pin_input.display = event.value
        if not event.value:
            pin_input.value = ""

    @on(Input.Changed, "#folder-pin")
    def handle_pin_changed(self, event: Input.Changed) -> None:
        digits = sanitize_pin_input(event.value)
        if digits != event.value:
            event.input.value = digits

    @on(Button.Pressed, "#create-folder")
    @on(Input.Submitted)
    def handle_create(self) -> None:
        name = self.query_one("#folder-name", Input).value
        secure = self.query_one("#folder-secure", Checkbox).value
        pin = self.query_one("#folder-pin", Input).value

        async def create() -> None:
            if await self.controller.create_folder(name, secure, pin):
                await self.close_if_current()

        self.peka.perform(create)

    @on(Button.Pressed, "#cancel")
    def handle_cancel(self) -> None:
        self.dismiss()


class AddCredentialModal(PekaModal):
    """@brief Store a new credential in the open folder."""

    def compose(self) -> ComposeResult:
        with Vertical(classes="modal"):
            yield Static("Add credential", classes="title")
            yield Input(placeholder="Title (site or service)", id="credential-title")
            yield Input(placeholder="Username or email", id="credential-username")
            yield Input(placeholder="Password", password=True, id="credential-password")
            yield Static("", id="credential-error", classes="error", markup=False)
            with Horizontal(classes="buttons"):
                yield Button("Save", id="save-credential", variant="primary")
                yield Button("Cancel", id="cancel")

    def on_mount(self) -> None:
        self.query_one("#credential-title", Input).focus()

    async def refresh_view(self) -> None:
        show_message(
            self.query_one("#credential-error", Static),
            self.controller.error(Surface.CREDENTIALS),
        )
        self.query_one("#save-credential", Button).disabled = self.controller.is_busy(
            MutationKind.ADD_CREDENTIAL, self.controller.active_folder_id
        )

    @on(Button.Pressed, "#save-credential")
    @on(Input.Submitted)
    def handle_save(self) -> None:
        title = self.query_one("#credential-title", Input).value
        username = self.query_one("#credential-username", Input).value
        password = self.query_one("#credential-password", Input).value

        async def save() -> None:
            if await self.controller.add_credential(title, username, password):
                await self.close_if_current()

        self.peka.perform(save)

    @on(Button.Pressed, "#cancel")
    def handle_cancel(self) -> None:
        self.dismiss()


class PinModal(PekaModal):
    """@brief Answer the PIN challenge of a secure folder.

    Pushed and removed by the app as the controller's gate opens and closes.
    """

    def compose(self) -> ComposeResult:
        with Vertical(classes="modal"):
            yield Static("Enter folder PIN", classes="title")
            yield Static("", id="pin-folder", classes="subtitle", markup=False)
            yield Input(
                placeholder="4-digit PIN",
                password=True,
                max_length=Config.PIN_LENGTH,
                id="pin",
            )
            yield Static("", id="pin-error", classes="error", markup=False)
            with Horizontal(classes="buttons"):
                yield Button("Unlock", id="unlock-folder", variant="primary")
                yield Button("Cancel", id="cancel")

    def on_mount(self) -> None:
        self.query_one("#pin", Input).focus()

    async def refresh_view(self) -> None:
        gate = self.controller.gate
        snapshot = self.controller.snapshot
        folder = snapshot.find_folder(gate.folder_id) if snapshot and gate.folder_id else None
        self.query_one("#pin-folder", Static).update(folder.name if folder else "")

        pin_input = self.query_one("#pin", Input)
        if pin_input.value != gate.pin:
            pin_input.value = gate.pin
        show_message(self.query_one("#pin-error", Static), self.controller.error(Surface.PIN))

        verifying = gate.state == GateState.VERIFYING
        self.query_one("#unlock-folder", Button).disabled = verifying
        self.query_one("#cancel", Button).disabled = verifying

    @on(Input.Changed, "#pin")
    def handle_pin_changed(self, event: Input.Changed) -> None:
        if event.value == self.controller.gate.pin:
            return
        digits = self.controller.enter_pin(event.value)
        if digits != event.value:
            event.input.value = digits
        show_message(self.query_one("#pin-error", Static), None)

    @on(Button.Pressed, "#unlock-folder")
    @on(Input.Submitted, "#pin")
    def handle_submit(self) -> None:
        self.peka.perform(self.controller.submit_pin)

    @on(Button.Pressed, "#cancel")
    def action_close(self) -> None:
        if self.controller.cancel_pin():
            self.dismiss()


class CredentialModal(PekaModal):
    """@brief Details of the selected credential, with reveal and copy."""

    BINDINGS = [
        ("escape", "close", "Close"),
        ("r", "reveal", "Reveal"),
        ("c", "copy_password", "Copy password"),
        ("u", "copy_username", "Copy username"),
    ]

    def __init__(self) -> None:
        super().__init__()
        self._revealed = False

    def compose(self) -> ComposeResult:
        with Vertical(classes="modal"):
            yield Static("", id="credential-name", classes="title", markup=False)
            yield Static("", id="credential-username", markup=False)
            yield Static("", id="credential-password", markup=False)
            yield Static("", id="credential-updated", classes="hint")
            yield Static(
                "r reveal · c copy password · u copy username · esc close",
                classes="hint",
            )

    def on_mount(self) -> None:
        self._render_credential()

    async def refresh_view(self) -> None:
        if self.controller.selected_credential is None:
            # Deleted or replaced while the dialog was open
            await self.close_if_current()
            return
        self._render_credential()

    def _render_credential(self) -> None:
        credential = self.controller.selected_credential
        if credential is None:
            return
        password = credential.password if self._revealed else MASK
        self.query_one("#credential-name", Static).update(credential.title)
        self.query_one("#credential-username", Static).update(
            f"Username: {credential.username}"
        )
        self.query_one("#credential-password", Static).update(f"Password: {password}")
        self.query_one("#credential-updated", Static).update(
            f"Updated {credential.updated_at:%Y-%m-%d %H:%M}"
        )

    def action_reveal(self) -> None:
        self._revealed = not self._revealed
        self._render_credential()

    def action_copy_password(self) -> None:
        credential = self.controller.selected_credential
        if credential is None:
            return
        if copy_to_clipboard_with_autoclear(credential.password):
            self.notify(
                f"Password copied. Clipboard clears in {CLIPBOARD_TIMEOUT_SECONDS}s."
            )
        else:
            self.notify("Clipboard is not available", severity="error")

    def action_copy_username(self) -> None:
        credential = self.controller.selected_credential
        if credential is None:
            return
        if copy_to_clipboard_with_autoclear(credential.username, timeout=0):
            self.notify("Username copied.")
        else:
            self.notify("Clipboard is not available", severity="error")

    def action_close(self) -> None:
        self.controller.clear_credential_selection()
        self.dismiss()


class ConfirmDeleteVaultModal(PekaModal):
    """@brief Confirm permanent deletion of the device's vault."""

    def compose(self) -> ComposeResult:
        with Vertical(classes="modal"):
            yield Static("Delete vault?", classes="title")
            yield Static(
                "The vault file and every credential in it will be permanently lost.",
                classes="subtitle",
            )
            yield Static("", id="delete-vault-error", classes="error", markup=False)
            with Horizontal(classes="buttons"):
                yield Button("Delete", id="confirm-delete", variant="error")
                yield Button("Cancel", id="cancel")

    async def refresh_view(self) -> None:
        show_message(
            self.query_one("#delete-vault-error", Static),
            self.controller.error(Surface.DELETE_VAULT),
        )
        vault = self.controller.landing_vault
        self.query_one("#confirm-delete", Button).disabled = (
            vault is not None and self.controller.is_busy(MutationKind.DELETE_VAULT, vault.path)
        )

    @on(Button.Pressed, "#confirm-delete")
    def handle_confirm(self) -> None:
        self.peka.perform(self.controller.delete_vault)

    @on(Button.Pressed, "#cancel")
    def handle_cancel(self) -> None:
        self.dismiss()


class ExportModal(PekaModal):
    """@brief Copy the encrypted vault file to a backup location."""

    def compose(self) -> ComposeResult:
        with Vertical(classes="modal"):
            yield Static("Export vault", classes="title")
            yield Static(
                "The exported file stays encrypted with your master password.",
                classes="subtitle",
            )
            yield Input(placeholder="Destination path", id="export-path")
            yield Static("", id="export-error", classes="error", markup=False)
            yield Static("", id="export-notice", classes="notice", markup=False)
            with Horizontal(classes="buttons"):
                yield Button("Export", id="export", variant="primary")
                yield Button("Close", id="cancel")

    def on_mount(self) -> None:
        self.controller.notices.pop(Surface.EXPORT, None)
        self.query_one("#export-path", Input).focus()

    async def refresh_view(self) -> None:
        show_message(
            self.query_one("#export-error", Static), self.controller.error(Surface.EXPORT)
        )
        show_message(
            self.query_one("#export-notice", Static),
            self.controller.notice(Surface.EXPORT),
        )
        self.query_one("#export", Button).disabled = self.controller.is_busy(
            MutationKind.EXPORT_VAULT
        )

    @on(Button.Pressed, "#export")
    @on(Input.Submitted, "#export-path")
    def handle_export(self) -> None:
        destination = self.query_one("#export-path", Input).value
        self.peka.perform(lambda: self.controller.export_vault(destination))

    @on(Button.Pressed, "#cancel")
    def handle_cancel(self) -> None:
        self.dismiss()
