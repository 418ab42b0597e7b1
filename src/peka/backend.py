"""Backend command interface and its local, file-based implementation.

Every command is a coroutine taking flat arguments and returning either a
typed result or raising `BackendError`. The session layer only ever talks to
a `Backend`; `LocalBackend` is the implementation shipped with Peka.

Single-vault constraint: ``list_vaults`` returns at most ``Config.MAX_VAULTS``
(one) summary. Supporting several vaults per device is an interface change,
not an implementation detail.
"""

import asyncio
import logging
import os
import shutil
import uuid
from pathlib import Path
from typing import Callable, List, Optional, Protocol, TypeVar

from .config import Config, config
from .crypto import CryptoError, hash_pin, verify_pin
from .models import Vault, VaultSummary, utc_now
from .storage import (
    StorageError,
    find_folder,
    load_payload,
    read_header,
    sanitize_file_name,
    save_payload,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


class BackendError(Exception):
    """Failure reported by a backend command, carrying a displayable message."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class Backend(Protocol):
    """Commands the session layer may issue."""

    async def create_vault(self, vault_name: str, master_password: str) -> str: ...

    async def open_vault(self, path: str, master_password: str) -> Vault: ...

    async def list_vaults(self) -> List[VaultSummary]: ...

    async def create_folder(
        self,
        path: str,
        master_password: str,
        name: str,
        secure: bool,
        pin: Optional[str] = None,
    ) -> Vault: ...

    async def delete_folder(
        self, path: str, master_password: str, folder_id: str
    ) -> Vault: ...

    async def add_credential(
        self,
        path: str,
        master_password: str,
        folder_id: str,
        identifier: str,
        username: str,
        password: str,
    ) -> Vault: ...

    async def delete_credential(
        self, path: str, master_password: str, folder_id: str, credential_id: str
    ) -> Vault: ...

    async def verify_folder_pin(
        self, vault_path: str, master_password: str, folder_id: str, pin: str
    ) -> bool: ...

    async def delete_vault(self, path: str) -> None: ...

    async def import_vault(
        self, source_path: str, vault_name: str, master_password: str
    ) -> str: ...

    async def export_vault_file(
        self, source_path: str, destination_path: str
    ) -> None: ...


class LocalBackend:
    """Stores each vault as an encrypted ``.peka`` file in one directory."""

    def __init__(self, vault_dir: Optional[str] = None):
        self.vault_dir = Path(vault_dir or config.vault_dir)

    async def _run(self, func: Callable[..., T], *args) -> T:
        """Run blocking crypto and file work off the event loop."""
        try:
            return await asyncio.to_thread(func, *args)
        except BackendError:
            raise
        except (StorageError, CryptoError) as e:
            raise BackendError(str(e)) from e
        except OSError as e:
            raise BackendError(e.strerror or str(e)) from e

    # Vault lifecycle

    async def create_vault(self, vault_name: str, master_password: str) -> str:
        return await self._run(self._create_vault, vault_name, master_password)

    def _create_vault(self, vault_name: str, master_password: str) -> str:
        name = vault_name.strip()
        if not name:
            raise BackendError("Vault name cannot be empty")
        if not master_password.strip():
            raise BackendError("Master password cannot be empty")
        self._ensure_capacity()

        path = self._path_for(name)
        save_payload(str(path), {"vaultName": name, "folders": []}, master_password)
        logger.info("Created vault file %s", path)
        return str(path)

    async def open_vault(self, path: str, master_password: str) -> Vault:
        return await self._run(self._open_vault, path, master_password)

    def _open_vault(self, path: str, master_password: str) -> Vault:
        return Vault.from_dict(load_payload(path, master_password))

    async def list_vaults(self) -> List[VaultSummary]:
        return await self._run(self._list_vaults)

    def _list_vaults(self) -> List[VaultSummary]:
        if not self.vault_dir.exists():
            return []

        summaries = []
        for path in sorted(self.vault_dir.iterdir()):
            if not path.is_file() or path.suffix != Config.VAULT_EXTENSION:
                continue
            if path.name.startswith(".vault_tmp_"):
                continue
            try:
                header = read_header(str(path))
            except StorageError:
                logger.warning("Skipping unreadable vault file %s", path)
                continue
            summaries.append(VaultSummary(path=str(path), name=header.vault_name))
        return summaries

    async def delete_vault(self, path: str) -> None:
        await self._run(self._delete_vault, path)

    def _delete_vault(self, path: str) -> None:
        if not path.strip():
            raise BackendError("Vault path is required")
        target = self._resolve_vault_file(path)
        target.unlink()
        logger.info("Deleted vault file %s", target)

    async def import_vault(
        self, source_path: str, vault_name: str, master_password: str
    ) -> str:
        return await self._run(
            self._import_vault, source_path, vault_name, master_password
        )

    def _import_vault(
        self, source_path: str, vault_name: str, master_password: str
    ) -> str:
        if not source_path.strip():
            raise BackendError("Source path is required")
        name = vault_name.strip()
        if not name:
            raise BackendError("Vault name cannot be empty")
        if not master_password.strip():
            raise BackendError("Master password cannot be empty")
        if not Path(source_path).is_file():
            raise BackendError("Vault file not found")
        self._ensure_capacity()

        # Decrypting proves the password before anything is written
        payload = load_payload(source_path, master_password)
        payload["vaultName"] = name

        path = self._path_for(name)
        save_payload(str(path), payload, master_password)
        logger.info("Imported vault from %s into %s", source_path, path)
        return str(path)

    async def export_vault_file(self, source_path: str, destination_path: str) -> None:
        await self._run(self._export_vault_file, source_path, destination_path)

    def _export_vault_file(self, source_path: str, destination_path: str) -> None:
        if not source_path.strip():
            raise BackendError("Source path is required")
        if not destination_path.strip():
            raise BackendError("Destination path is required")

        source = self._resolve_vault_file(source_path)
        destination = Path(destination_path).expanduser()
        destination.parent.mkdir(parents=True, exist_ok=True)
        shutil.copy2(source, destination)
        logger.info("Exported vault %s to %s", source, destination)

    # Folders

    async def create_folder(
        self,
        path: str,
        master_password: str,
        name: str,
        secure: bool,
        pin: Optional[str] = None,
    ) -> Vault:
        return await self._run(
            self._create_folder, path, master_password, name, secure, pin
        )

    def _create_folder(
        self,
        path: str,
        master_password: str,
        name: str,
        secure: bool,
        pin: Optional[str],
    ) -> Vault:
        folder_name = name.strip()
        if not folder_name:
            raise BackendError("Folder name is required.")
        if secure:
            if pin is None:
                raise BackendError("PIN is required for secure folders.")
            if len(pin) != Config.PIN_LENGTH or not (pin.isascii() and pin.isdigit()):
                raise BackendError("PIN must be exactly 4 digits.")

        payload = load_payload(path, master_password)
        now = utc_now().isoformat()
        payload["folders"].append(
            {
                "id": str(uuid.uuid4()),
                "name": folder_name,
                "secure": secure,
                "pinHash": hash_pin(pin) if secure and pin else None,
                "credentials": [],
                "createdAt": now,
                "updatedAt": now,
            }
        )
        save_payload(path, payload, master_password)
        return Vault.from_dict(payload)

    async def delete_folder(
        self, path: str, master_password: str, folder_id: str
    ) -> Vault:
        return await self._run(self._delete_folder, path, master_password, folder_id)

    def _delete_folder(self, path: str, master_password: str, folder_id: str) -> Vault:
        payload = load_payload(path, master_password)
        folder = find_folder(payload, folder_id)
        if folder is None:
            raise BackendError("Folder not found")

        payload["folders"].remove(folder)
        save_payload(path, payload, master_password)
        return Vault.from_dict(payload)

    async def verify_folder_pin(
        self, vault_path: str, master_password: str, folder_id: str, pin: str
    ) -> bool:
        return await self._run(
            self._verify_folder_pin, vault_path, master_password, folder_id, pin
        )

    def _verify_folder_pin(
        self, vault_path: str, master_password: str, folder_id: str, pin: str
    ) -> bool:
        payload = load_payload(vault_path, master_password)
        folder = find_folder(payload, folder_id)
        if folder is None:
            raise BackendError("Folder not found")
        if not folder.get("secure"):
            return True

        pin_hash = folder.get("pinHash")
        if not pin_hash:
            raise BackendError("Folder PIN hash not found")
        return verify_pin(pin_hash, pin)

    # Credentials

    async def add_credential(
        self,
        path: str,
        master_password: str,
        folder_id: str,
        identifier: str,
        username: str,
        password: str,
    ) -> Vault:
        return await self._run(
            self._add_credential,
            path,
            master_password,
            folder_id,
            identifier,
            username,
            password,
        )

    def _add_credential(
        self,
        path: str,
        master_password: str,
        folder_id: str,
        identifier: str,
        username: str,
        password: str,
    ) -> Vault:
        if not identifier.strip():
            raise BackendError("Username or email is required.")
        if not password:
            raise BackendError("Password is required.")

        payload = load_payload(path, master_password)
        folder = find_folder(payload, folder_id)
        if folder is None:
            raise BackendError("Folder not found")

        now = utc_now().isoformat()
        folder.setdefault("credentials", []).append(
            {
                "id": str(uuid.uuid4()),
                "title": identifier,
                "username": username,
                "password": password,
                "notes": None,
                "createdAt": now,
                "updatedAt": now,
            }
        )
        folder["updatedAt"] = now
        save_payload(path, payload, master_password)
        return Vault.from_dict(payload)

    async def delete_credential(
        self, path: str, master_password: str, folder_id: str, credential_id: str
    ) -> Vault:
        return await self._run(
            self._delete_credential, path, master_password, folder_id, credential_id
        )

    def _delete_credential(
        self, path: str, master_password: str, folder_id: str, credential_id: str
    ) -> Vault:
        payload = load_payload(path, master_password)
        folder = find_folder(payload, folder_id)
        if folder is None:
            raise BackendError("Folder not found")

        credentials = folder.get("credentials", [])
        credential = next((c for c in credentials if c.get("id") == credential_id), None)
        if credential is None:
            raise BackendError("Credential not found")

        credentials.remove(credential)
        folder["updatedAt"] = utc_now().isoformat()
        save_payload(path, payload, master_password)
        return Vault.from_dict(payload)

    # Helpers

    def _path_for(self, vault_name: str) -> Path:
        return self.vault_dir / f"{sanitize_file_name(vault_name)}{Config.VAULT_EXTENSION}"

    def _ensure_capacity(self) -> None:
        if len(self._list_vaults()) >= Config.MAX_VAULTS:
            raise BackendError("A vault already exists on this device")

    def _resolve_vault_file(self, path: str) -> Path:
        """Accept only existing .peka files that live inside the vault directory."""
        target = Path(path)
        if not target.exists():
            raise BackendError("Vault file not found")

        canonical_target = target.resolve()
        canonical_dir = self.vault_dir.resolve()
        if os.path.commonpath([canonical_target, canonical_dir]) != str(canonical_dir):
            raise BackendError("Vault path is invalid")
        if canonical_target.suffix != Config.VAULT_EXTENSION:
            raise BackendError("Invalid vault file")
        return canonical_target
