"""Shared pytest fixtures for all tests."""

import asyncio
import itertools
from dataclasses import replace
from typing import Dict, List, Optional, Tuple

import pytest

from peka.backend import BackendError, LocalBackend
from peka.config import config
from peka.models import Credential, Folder, Vault, VaultSummary
from peka.session import SessionController

# ============================================================================
# In-memory backend
# ============================================================================


class FakeBackend:
    """In-memory backend that records calls and can hold or fail commands.

    ``hold(command)`` makes every call of ``command`` wait until the returned
    event is set. ``fail(command, message)`` makes it raise ``BackendError``.
    """

    def __init__(self) -> None:
        self.vaults: List[VaultSummary] = []
        self.snapshots: Dict[str, Vault] = {}
        self.passwords: Dict[str, str] = {}
        self.pins: Dict[Tuple[str, str], str] = {}
        self.files: Dict[str, Tuple[str, Vault]] = {}
        self.exports: List[Tuple[str, str]] = []
        self.calls: List[Tuple[str, tuple]] = []
        self._held: Dict[str, asyncio.Event] = {}
        self._failures: Dict[str, Exception] = {}
        self._ids = itertools.count(1)

    # Test controls

    def hold(self, command: str) -> asyncio.Event:
        event = asyncio.Event()
        self._held[command] = event
        return event

    def release(self, command: str) -> None:
        self._held.pop(command).set()

    def fail(self, command: str, message: str = "") -> None:
        self._failures[command] = BackendError(message)

    def raise_unexpected(self, command: str, error: Exception) -> None:
        self._failures[command] = error

    def clear_failure(self, command: str) -> None:
        self._failures.pop(command, None)

    def call_count(self, command: str) -> int:
        return sum(1 for name, _ in self.calls if name == command)

    def seed_vault(
        self, name: str, password: str, folders: Tuple[Folder, ...] = ()
    ) -> str:
        path = f"/vaults/{name}.peka"
        self.vaults.append(VaultSummary(path=path, name=name))
        self.snapshots[path] = Vault(name=name, folders=folders)
        self.passwords[path] = password
        return path

    def seed_file(self, source: str, password: str, vault: Vault) -> None:
        self.files[source] = (password, vault)

    def set_pin(self, path: str, folder_id: str, pin: str) -> None:
        self.pins[(path, folder_id)] = pin

    # Plumbing

    async def _enter(self, command: str, *args) -> None:
        self.calls.append((command, args))
        event = self._held.get(command)
        if event is not None:
            await event.wait()
        failure = self._failures.get(command)
        if failure is not None:
            raise failure

    def _unlocked(self, path: str, master_password: str) -> Vault:
        if path not in self.snapshots:
            raise BackendError("Vault file not found")
        if self.passwords[path] != master_password:
            raise BackendError(
                "Failed to decrypt vault: incorrect password or corrupted data"
            )
        return self.snapshots[path]

    def _folder(self, vault: Vault, folder_id: str) -> Folder:
        folder = vault.find_folder(folder_id)
        if folder is None:
            raise BackendError("Folder not found")
        return folder

    def _store(self, path: str, vault: Vault) -> Vault:
        self.snapshots[path] = vault
        return vault

    def _replace_folder(self, vault: Vault, folder: Folder) -> Vault:
        return replace(
            vault,
            folders=tuple(folder if f.id == folder.id else f for f in vault.folders),
        )

    # Backend commands

    async def list_vaults(self) -> List[VaultSummary]:
        await self._enter("list_vaults")
        return list(self.vaults)

    async def create_vault(self, vault_name: str, master_password: str) -> str:
        await self._enter("create_vault", vault_name)
        if self.vaults:
            raise BackendError("A vault already exists on this device")
        return self.seed_vault(vault_name, master_password)

    async def open_vault(self, path: str, master_password: str) -> Vault:
        await self._enter("open_vault", path)
        return self._unlocked(path, master_password)

    async def delete_vault(self, path: str) -> None:
        await self._enter("delete_vault", path)
        if path not in self.snapshots:
            raise BackendError("Vault file not found")
        del self.snapshots[path]
        self.vaults = [v for v in self.vaults if v.path != path]

    async def import_vault(
        self, source_path: str, vault_name: str, master_password: str
    ) -> str:
        await self._enter("import_vault", source_path, vault_name)
        if source_path not in self.files:
            raise BackendError("Vault file not found")
        password, vault = self.files[source_path]
        if password != master_password:
            raise BackendError(
                "Failed to decrypt vault: incorrect password or corrupted data"
            )
        if self.vaults:
            raise BackendError("A vault already exists on this device")
        return self.seed_vault(vault_name, master_password, vault.folders)

    async def export_vault_file(self, source_path: str, destination_path: str) -> None:
        await self._enter("export_vault_file", source_path, destination_path)
        self.exports.append((source_path, destination_path))

    async def create_folder(
        self,
        path: str,
        master_password: str,
        name: str,
        secure: bool,
        pin: Optional[str] = None,
    ) -> Vault:
        await self._enter("create_folder", name, secure)
        vault = self._unlocked(path, master_password)
        folder = Folder(id=f"folder-{next(self._ids)}", name=name, secure=secure)
        if secure:
            self.set_pin(path, folder.id, pin)
        return self._store(path, replace(vault, folders=vault.folders + (folder,)))

    async def delete_folder(
        self, path: str, master_password: str, folder_id: str
    ) -> Vault:
        await self._enter("delete_folder", folder_id)
        vault = self._unlocked(path, master_password)
        self._folder(vault, folder_id)
        return self._store(
            path,
            replace(vault, folders=tuple(f for f in vault.folders if f.id != folder_id)),
        )

    async def add_credential(
        self,
        path: str,
        master_password: str,
        folder_id: str,
        identifier: str,
        username: str,
        password: str,
    ) -> Vault:
        await self._enter("add_credential", folder_id, identifier)
        vault = self._unlocked(path, master_password)
        folder = self._folder(vault, folder_id)
        credential = Credential(
            id=f"cred-{next(self._ids)}",
            title=identifier,
            username=username,
            password=password,
        )
        folder = replace(folder, credentials=folder.credentials + (credential,))
        return self._store(path, self._replace_folder(vault, folder))

    async def delete_credential(
        self, path: str, master_password: str, folder_id: str, credential_id: str
    ) -> Vault:
        await self._enter("delete_credential", folder_id, credential_id)
        vault = self._unlocked(path, master_password)
        folder = self._folder(vault, folder_id)
        if folder.find_credential(credential_id) is None:
            raise BackendError("Credential not found")
        folder = replace(
            folder,
            credentials=tuple(c for c in folder.credentials if c.id != credential_id),
        )
        return self._store(path, self._replace_folder(vault, folder))

    async def verify_folder_pin(
        self, vault_path: str, master_password: str, folder_id: str, pin: str
    ) -> bool:
        await self._enter("verify_folder_pin", folder_id, pin)
        vault = self._unlocked(vault_path, master_password)
        folder = self._folder(vault, folder_id)
        if not folder.secure:
            return True
        return self.pins.get((vault_path, folder_id)) == pin


# ============================================================================
# Environment Fixtures
# ============================================================================


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Point vault and log locations at a per-test directory."""
    monkeypatch.setattr(config, "vault_dir", str(tmp_path / "vaults"))
    monkeypatch.setattr(config, "log_file", str(tmp_path / "peka.log"))
    return config


@pytest.fixture
def vault_dir(tmp_path) -> str:
    path = tmp_path / "vaults"
    path.mkdir(exist_ok=True)
    return str(path)


# ============================================================================
# Credential Fixtures
# ============================================================================


@pytest.fixture
def master_password() -> str:
    """Master password that satisfies every policy rule."""
    return "Gx7#mPq2!vLw9$Rt"


@pytest.fixture
def pin() -> str:
    return "4821"


# ============================================================================
# Backend Fixtures
# ============================================================================


@pytest.fixture
def fake_backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def local_backend(vault_dir: str) -> LocalBackend:
    return LocalBackend(vault_dir)


@pytest.fixture
def controller(fake_backend: FakeBackend) -> SessionController:
    return SessionController(fake_backend)


@pytest.fixture
def sample_folders() -> Tuple[Folder, ...]:
    """A regular folder with two credentials and an empty secure folder."""
    work = Folder(
        id="work",
        name="Work",
        credentials=(
            Credential(id="mail", title="Mail", username="me@work.test", password="m4il!"),
            Credential(id="vpn", title="VPN", username="me", password="vpn-secret"),
        ),
    )
    bank = Folder(id="bank", name="Bank", secure=True)
    return (work, bank)
