"""Session controller: screen state, the unlocked vault and every user intent.

The controller owns the single live `Session` (vault path, master password,
snapshot, selection). User intents are validated locally, dispatched through
`MutationDispatcher`, and successful snapshots are reconciled against the
current selection before anything is displayed.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional

from . import messages
from .backend import Backend
from .config import Config
from .dispatcher import DispatchResult, DispatchStatus, MutationDispatcher, MutationKind
from .gate import FolderAccessGate, GateOutcome, GateResult
from .models import Credential, Folder, Vault, VaultSummary
from .reconcile import EMPTY_SELECTION, Selection, reconcile
from .screens import Event, EventKind, InvalidTransition, Screen, transition
from .validation import (
    ValidationResult,
    validate_credential,
    validate_folder,
    validate_import,
    validate_master_password,
    validate_unlock,
    validate_vault_name,
)

logger = logging.getLogger(__name__)


class Surface(str, Enum):
    """UI region that owns an error or notice."""

    LANDING = "landing"
    SETUP = "setup"
    UNLOCK = "unlock"
    IMPORT = "import"
    CREATE_FOLDER = "create_folder"
    FOLDERS = "folders"
    CREDENTIALS = "credentials"
    EXPORT = "export"
    DELETE_VAULT = "delete_vault"
    PIN = "pin"


_VAULT_SURFACES = (
    Surface.CREATE_FOLDER,
    Surface.FOLDERS,
    Surface.CREDENTIALS,
    Surface.EXPORT,
    Surface.PIN,
)


@dataclass
class Session:
    """An unlocked vault. Lives until the user lands or deletes the vault."""

    vault_path: str
    master_password: str = field(repr=False)
    snapshot: Vault
    generation: int
    selection: Selection = EMPTY_SELECTION


class SessionController:
    """Drives screens and routes every vault operation through the dispatcher."""

    def __init__(self, backend: Backend) -> None:
        self.backend = backend
        self.screen = Screen.DISCOVERING
        self.vaults: List[VaultSummary] = []
        self.session: Optional[Session] = None
        self.banner: Optional[str] = None
        self.errors: Dict[Surface, str] = {}
        self.notices: Dict[Surface, str] = {}
        self.setup_validation = ValidationResult(is_valid=False)
        self._generation = 0
        self._discovery_pending = False
        self.dispatcher = MutationDispatcher(self._adopt_snapshot, self._current_generation)
        self.gate = FolderAccessGate(self._verify_pin)

    # ------------------------------------------------------------------
    # Derived state
    # ------------------------------------------------------------------

    @property
    def landing_vault(self) -> Optional[VaultSummary]:
        """The device's vault, if any. The device holds at most one."""
        return self.vaults[0] if self.vaults else None

    @property
    def snapshot(self) -> Optional[Vault]:
        return self.session.snapshot if self.session else None

    @property
    def master_password(self) -> Optional[str]:
        return self.session.master_password if self.session else None

    @property
    def selection(self) -> Selection:
        return self.session.selection if self.session else EMPTY_SELECTION

    @property
    def active_folder_id(self) -> Optional[str]:
        return self.selection.folder_id

    @property
    def selected_credential_id(self) -> Optional[str]:
        return self.selection.credential_id

    @property
    def active_folder(self) -> Optional[Folder]:
        if self.session is None:
            return None
        return self.selection.resolve_folder(self.session.snapshot)

    @property
    def selected_credential(self) -> Optional[Credential]:
        return self.selection.credential

    def error(self, surface: Surface) -> Optional[str]:
        return self.errors.get(surface)

    def notice(self, surface: Surface) -> Optional[str]:
        return self.notices.get(surface)

    def is_busy(self, kind: MutationKind, target: Optional[str] = None) -> bool:
        return self.dispatcher.is_in_flight(kind, target)

    # ------------------------------------------------------------------
    # Landing
    # ------------------------------------------------------------------

    async def start(self) -> Screen:
        """Discover existing vaults and move to the matching landing screen."""
        if self.screen != Screen.DISCOVERING or self._discovery_pending:
            return self.screen

        self._discovery_pending = True
        try:
            vaults = list(await self.backend.list_vaults())
        except Exception as e:
            logger.warning("Vault discovery failed: %s", e)
            self.banner = messages.DISCOVERY_FAILED
            self._move(Event(EventKind.DISCOVERY_FAILED))
            return self.screen
        finally:
            self._discovery_pending = False

        if len(vaults) > Config.MAX_VAULTS:
            logger.warning(
                "Found %d vaults, only the first is used on this device", len(vaults)
            )
        self.vaults = vaults
        logger.info("Discovered %d vault(s)", len(vaults))
        self._move(Event(EventKind.DISCOVERED, vault_count=len(vaults)))
        return self.screen

    def get_started(self) -> None:
        self._move(Event(EventKind.GET_STARTED))
        self.setup_validation = ValidationResult(is_valid=False)

    def start_import(self) -> None:
        self._move(Event(EventKind.START_IMPORT))

    def back_to_landing(self) -> None:
        """Leave setup, import or the vault. Any open session ends here."""
        self._end_session()
        self.errors.pop(Surface.SETUP, None)
        self.errors.pop(Surface.IMPORT, None)
        self._move(Event(EventKind.BACK_TO_LANDING, vault_count=len(self.vaults)))

    def close(self) -> None:
        """Discard the session when the application exits."""
        self._end_session()

    # ------------------------------------------------------------------
    # Vault creation, unlock, import
    # ------------------------------------------------------------------

    def check_master_password(self, password: str, confirm: str) -> ValidationResult:
        """Live policy feedback while the setup form is edited."""
        if password or confirm:
            self.setup_validation = validate_master_password(password, confirm)
        else:
            self.setup_validation = ValidationResult(is_valid=False)
        return self.setup_validation

    async def create_vault(self, vault_name: str, password: str, confirm: str) -> bool:
        """Create a vault and open it right away.

        If creation succeeds but opening fails, the new vault is still
        recorded so the welcome-back path can retry the unlock.
        """
        self._require(Screen.MASTER_PASSWORD_SETUP, action="create_vault")
        self.errors.pop(Surface.SETUP, None)

        name_check = validate_vault_name(vault_name)
        if not name_check.is_valid:
            self.errors[Surface.SETUP] = name_check.message
            return False
        self.setup_validation = validate_master_password(password, confirm)
        if not self.setup_validation.is_valid:
            return False

        name = vault_name.strip()
        issued_in = self._generation
        created = await self.dispatcher.dispatch(
            MutationKind.CREATE_VAULT,
            name,
            lambda: self.backend.create_vault(name, password),
        )
        if not self._record_failure(created, Surface.SETUP):
            return False

        path = created.value
        self._record_vault(VaultSummary(path=path, name=name))
        return await self._open_new_session(
            path, password, issued_in, Screen.MASTER_PASSWORD_SETUP, Surface.SETUP
        )

    async def unlock(self, password: str) -> bool:
        """Open the device's vault with ``password``."""
        self._require(Screen.WELCOME_BACK, action="unlock")
        self.errors.pop(Surface.UNLOCK, None)

        vault = self.landing_vault
        check = validate_unlock(password)
        if vault is None or not check.is_valid:
            self.errors[Surface.UNLOCK] = check.message or messages.ERROR_MASTER_PASSWORD_REQUIRED
            return False

        return await self._open_new_session(
            vault.path,
            password,
            self._generation,
            Screen.WELCOME_BACK,
            Surface.UNLOCK,
            fallback_error=messages.FALLBACK_UNLOCK,
        )

    async def import_vault(
        self, vault_name: str, source_path: Optional[str], password: str
    ) -> bool:
        """Copy a vault file into this device and open it."""
        self._require(Screen.IMPORT_VAULT, action="import_vault")
        self.errors.pop(Surface.IMPORT, None)

        check = validate_import(vault_name, source_path, password)
        if not check.is_valid:
            self.errors[Surface.IMPORT] = check.message
            return False

        name = vault_name.strip()
        issued_in = self._generation
        imported = await self.dispatcher.dispatch(
            MutationKind.IMPORT_VAULT,
            source_path,
            lambda: self.backend.import_vault(source_path, name, password),
        )
        if not self._record_failure(imported, Surface.IMPORT):
            return False

        path = imported.value
        self._record_vault(VaultSummary(path=path, name=name))
        return await self._open_new_session(
            path, password, issued_in, Screen.IMPORT_VAULT, Surface.IMPORT
        )

    async def _open_new_session(
        self,
        path: str,
        password: str,
        issued_in: int,
        origin: Screen,
        surface: Surface,
        fallback_error: str = messages.FALLBACK_GENERIC,
    ) -> bool:
        opened = await self.dispatcher.dispatch(
            MutationKind.OPEN_VAULT,
            path,
            lambda: self.backend.open_vault(path, password),
            fallback_error=fallback_error,
        )
        if not self._record_failure(opened, surface):
            return False

        if self._generation != issued_in or self.screen != origin:
            logger.info("Discarding opened vault %s: user left %s", path, origin.value)
            return False

        self._begin_session(path, password, opened.value)
        return True

    # ------------------------------------------------------------------
    # Vault deletion and export
    # ------------------------------------------------------------------

    async def delete_vault(self) -> bool:
        """Delete the device's vault and return to the landing screen."""
        if not (self.screen == Screen.WELCOME_BACK or self.screen.in_vault):
            raise InvalidTransition(self.screen, "delete_vault")
        self.errors.pop(Surface.DELETE_VAULT, None)

        path = self.session.vault_path if self.session else None
        if path is None and self.landing_vault is not None:
            path = self.landing_vault.path
        if path is None:
            return False

        result = await self.dispatcher.dispatch(
            MutationKind.DELETE_VAULT,
            path,
            lambda: self.backend.delete_vault(path),
            fallback_error=messages.FALLBACK_DELETE_VAULT,
        )
        if not self._record_failure(result, Surface.DELETE_VAULT):
            return False

        self.vaults = [v for v in self.vaults if v.path != path]
        if self.session is not None and self.session.vault_path == path:
            self._end_session()
        try:
            self._move(Event(EventKind.VAULT_DELETED, vault_count=len(self.vaults)))
        except InvalidTransition:
            # Landed elsewhere while the deletion was pending; the list is still current
            logger.info("Vault deleted while on %s", self.screen.value)
        return True

    async def export_vault(self, destination_path: str) -> bool:
        """Copy the vault file to ``destination_path``."""
        session = self._require_session("export_vault")
        self.errors.pop(Surface.EXPORT, None)
        self.notices.pop(Surface.EXPORT, None)

        destination = destination_path.strip()
        if not destination:
            self.errors[Surface.EXPORT] = messages.ERROR_DESTINATION_REQUIRED
            return False
        if not destination.endswith(Config.VAULT_EXTENSION):
            destination += Config.VAULT_EXTENSION

        source = session.vault_path
        result = await self.dispatcher.dispatch(
            MutationKind.EXPORT_VAULT,
            None,
            lambda: self.backend.export_vault_file(source, destination),
            fallback_error=messages.FALLBACK_EXPORT,
        )
        if not self._record_failure(result, Surface.EXPORT):
            return False
        self.notices[Surface.EXPORT] = messages.SUCCESS_EXPORTED
        return True

    # ------------------------------------------------------------------
    # Folders
    # ------------------------------------------------------------------

    def open_folder(self, folder_id: str) -> bool:
        """Show a folder. Secure folders open a PIN challenge instead.

        Returns:
            True when the folder view is now showing
        """
        self._require(Screen.FOLDER_LIST, action="open_folder")
        folder = self.session.snapshot.find_folder(folder_id)
        if folder is None:
            return False

        if folder.secure:
            self.errors.pop(Surface.PIN, None)
            self.gate.challenge(folder_id)
            return False

        self._enter_folder(folder_id)
        return True

    def enter_pin(self, value: str) -> str:
        self.errors.pop(Surface.PIN, None)
        return self.gate.enter_pin(value)

    async def submit_pin(self, pin: Optional[str] = None) -> GateResult:
        """Answer the open PIN challenge."""
        issued_in = self._generation
        result = await self.gate.submit(pin)

        if result.error:
            self.errors[Surface.PIN] = result.error
        else:
            self.errors.pop(Surface.PIN, None)

        if result.outcome != GateOutcome.GRANTED:
            return result

        if (
            self._generation != issued_in
            or self.screen != Screen.FOLDER_LIST
            or self.session.snapshot.find_folder(result.folder_id) is None
        ):
            logger.info("Discarding PIN grant for %s: view changed", result.folder_id)
            return GateResult(GateOutcome.IGNORED, result.folder_id)

        self._enter_folder(result.folder_id)
        return result

    def cancel_pin(self) -> bool:
        if self.gate.cancel():
            self.errors.pop(Surface.PIN, None)
            return True
        return False

    def close_folder(self) -> None:
        """Return to the folder list, dropping folder and credential selection."""
        self._require(Screen.FOLDER_DETAIL, action="close_folder")
        self.session.selection = EMPTY_SELECTION
        self.errors.pop(Surface.CREDENTIALS, None)
        self._move(Event(EventKind.FOLDER_CLOSED))

    async def create_folder(self, name: str, secure: bool, pin: Optional[str] = None) -> bool:
        session = self._require_session("create_folder")
        self.errors.pop(Surface.CREATE_FOLDER, None)

        check = validate_folder(name, secure, pin)
        if not check.is_valid:
            self.errors[Surface.CREATE_FOLDER] = check.message
            return False

        folder_name = name.strip()
        folder_pin = pin if secure else None
        result = await self.dispatcher.dispatch(
            MutationKind.CREATE_FOLDER,
            None,
            lambda: self.backend.create_folder(
                session.vault_path, session.master_password, folder_name, secure, folder_pin
            ),
            fallback_error=messages.FALLBACK_CREATE_FOLDER,
        )
        return self._record_failure(result, Surface.CREATE_FOLDER)

    async def delete_folder(self, folder_id: str) -> bool:
        session = self._require_session("delete_folder")
        self.errors.pop(Surface.FOLDERS, None)

        result = await self.dispatcher.dispatch(
            MutationKind.DELETE_FOLDER,
            folder_id,
            lambda: self.backend.delete_folder(
                session.vault_path, session.master_password, folder_id
            ),
            fallback_error=messages.FALLBACK_DELETE_FOLDER,
        )
        return self._record_failure(result, Surface.FOLDERS)

    # ------------------------------------------------------------------
    # Credentials
    # ------------------------------------------------------------------

    def select_credential(self, credential_id: str) -> Optional[Credential]:
        """Open the details view for a credential in the active folder."""
        self._require(Screen.FOLDER_DETAIL, action="select_credential")
        folder = self.active_folder
        credential = folder.find_credential(credential_id) if folder else None
        if credential is None:
            return None
        self.session.selection = Selection(
            folder_id=folder.id, credential_id=credential.id, credential=credential
        )
        return credential

    def clear_credential_selection(self) -> None:
        if self.session is not None and self.session.selection.folder_id is not None:
            self.session.selection = Selection(folder_id=self.session.selection.folder_id)

    async def add_credential(self, identifier: str, username: str, password: str) -> bool:
        session = self._require_session("add_credential")
        folder_id = self.active_folder_id
        if folder_id is None:
            raise InvalidTransition(self.screen, "add_credential")
        self.errors.pop(Surface.CREDENTIALS, None)

        check = validate_credential(identifier, username, password)
        if not check.is_valid:
            self.errors[Surface.CREDENTIALS] = check.message
            return False

        title = identifier.strip()
        user = username.strip()
        result = await self.dispatcher.dispatch(
            MutationKind.ADD_CREDENTIAL,
            folder_id,
            lambda: self.backend.add_credential(
                session.vault_path, session.master_password, folder_id, title, user, password
            ),
            fallback_error=messages.FALLBACK_ADD_CREDENTIAL,
        )
        return self._record_failure(result, Surface.CREDENTIALS)

    async def delete_credential(self, credential_id: str) -> bool:
        session = self._require_session("delete_credential")
        folder_id = self.active_folder_id
        if folder_id is None:
            raise InvalidTransition(self.screen, "delete_credential")
        self.errors.pop(Surface.CREDENTIALS, None)

        result = await self.dispatcher.dispatch(
            MutationKind.DELETE_CREDENTIAL,
            credential_id,
            lambda: self.backend.delete_credential(
                session.vault_path, session.master_password, folder_id, credential_id
            ),
            fallback_error=messages.FALLBACK_DELETE_CREDENTIAL,
        )
        return self._record_failure(result, Surface.CREDENTIALS)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _current_generation(self) -> int:
        return self._generation

    def _move(self, event: Event) -> None:
        previous = self.screen
        self.screen = transition(self.screen, event)
        logger.debug("Screen %s -> %s", previous.value, self.screen.value)

    def _require(self, *screens: Screen, action: str) -> None:
        if self.screen not in screens:
            raise InvalidTransition(self.screen, action)

    def _require_session(self, action: str) -> Session:
        if self.session is None or not self.screen.in_vault:
            raise InvalidTransition(self.screen, action)
        return self.session

    def _record_failure(self, result: DispatchResult, surface: Surface) -> bool:
        """Store a failed dispatch's message on ``surface``. True when the dispatch succeeded."""
        if result.status == DispatchStatus.FAILED:
            self.errors[surface] = result.error
        return result.ok

    def _record_vault(self, summary: VaultSummary) -> None:
        if not any(v.path == summary.path for v in self.vaults):
            self.vaults.append(summary)
        if self.screen.is_landing:
            self._move(Event(EventKind.VAULT_RECORDED, vault_count=len(self.vaults)))

    def _begin_session(self, path: str, password: str, snapshot: Vault) -> None:
        self._generation += 1
        self.session = Session(
            vault_path=path,
            master_password=password,
            snapshot=snapshot,
            generation=self._generation,
        )
        self.banner = None
        logger.info("Session %d started for %s", self._generation, path)
        self._move(Event(EventKind.SESSION_STARTED))

    def _end_session(self) -> None:
        if self.session is not None:
            logger.info("Session %d ended", self.session.generation)
        # Bumping the generation also invalidates pending unlocks and creations
        self._generation += 1
        self.session = None
        self.gate.reset()
        for surface in _VAULT_SURFACES:
            self.errors.pop(surface, None)
            self.notices.pop(surface, None)

    def _adopt_snapshot(self, snapshot: Vault) -> None:
        session = self.session
        if session is None:
            return
        session.snapshot = snapshot
        session.selection = reconcile(snapshot, session.selection)

        if self.gate.folder_id is not None and snapshot.find_folder(self.gate.folder_id) is None:
            self.gate.reset()
            self.errors.pop(Surface.PIN, None)

        if self.screen == Screen.FOLDER_DETAIL and session.selection.folder_id is None:
            logger.info("Active folder no longer exists, returning to folder list")
            self._move(Event(EventKind.FOLDER_CLOSED))

    def _enter_folder(self, folder_id: str) -> None:
        self.session.selection = Selection(folder_id=folder_id)
        self.errors.pop(Surface.CREDENTIALS, None)
        self._move(Event(EventKind.FOLDER_OPENED))

    async def _verify_pin(self, folder_id: str, pin: str) -> bool:
        session = self.session
        if session is None:
            return False
        return await self.backend.verify_folder_pin(
            session.vault_path, session.master_password, folder_id, pin
        )
