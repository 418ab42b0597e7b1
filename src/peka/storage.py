"""Encrypted vault file persistence."""

import base64
import json
import os
import re
import stat
import tempfile
from dataclasses import dataclass
from typing import Optional

from .config import Config
from .crypto import CryptoError, DecryptionError, decrypt_data, encrypt_data


class StorageError(Exception):
    """Base exception for vault file errors."""

    pass


class VaultFileNotFoundError(StorageError):
    """Raised when the vault file cannot be read."""

    pass


class VaultCorruptedError(StorageError):
    """Raised when vault file exists but is unreadable."""

    pass


class VaultDecryptionError(StorageError):
    """Raised when the master password does not open the vault."""

    pass


@dataclass
class VaultHeader:
    """Clear-text part of a vault file."""

    version: int
    vault_name: str
    salt: bytes
    ciphertext: bytes


def sanitize_file_name(name: str) -> str:
    """Turn a vault name into a safe file stem."""
    sanitized = re.sub(r"[^A-Za-z0-9_-]", "_", name.strip()).strip("_")
    if not sanitized:
        return "vault"
    return sanitized.replace("__", "_")


def read_header(path: str) -> VaultHeader:
    """Read the clear-text envelope of a vault file without decrypting it."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            raw = f.read()
    except (OSError, UnicodeDecodeError) as e:
        raise VaultFileNotFoundError("Unable to read vault file from disk") from e

    try:
        data = json.loads(raw)
        if not isinstance(data, dict):
            raise VaultCorruptedError("Vault file is corrupted or invalid")
        return VaultHeader(
            version=int(data.get("version", Config.FILE_FORMAT_VERSION)),
            vault_name=data["vaultName"],
            salt=base64.b64decode(data["salt"]),
            ciphertext=base64.b64decode(data["data"]),
        )
    except (json.JSONDecodeError, KeyError, TypeError, ValueError, AttributeError) as e:
        raise VaultCorruptedError("Vault file is corrupted or invalid") from e


def load_payload(path: str, master_password: str) -> dict:
    """Load and decrypt the vault payload."""
    header = read_header(path)
    try:
        plaintext = decrypt_data(header.ciphertext, master_password, header.salt)
    except (DecryptionError, CryptoError) as e:
        raise VaultDecryptionError(
            "Failed to decrypt vault: incorrect password or corrupted data"
        ) from e

    try:
        payload = json.loads(plaintext.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise VaultCorruptedError("Vault data is malformed") from e
    if not isinstance(payload, dict):
        raise VaultCorruptedError("Vault data is malformed")

    payload.setdefault("vaultName", header.vault_name)
    payload.setdefault("folders", [])
    return payload


def save_payload(path: str, payload: dict, master_password: str) -> None:
    """Encrypt and write the payload with an atomic replace."""
    vault_dir = os.path.dirname(os.path.abspath(path))
    os.makedirs(vault_dir, exist_ok=True)

    try:
        ciphertext, salt = encrypt_data(
            json.dumps(payload).encode("utf-8"), master_password
        )
    except CryptoError as e:
        raise StorageError(f"Failed to encrypt vault: {e}") from e

    envelope = {
        "version": Config.FILE_FORMAT_VERSION,
        "vaultName": payload.get("vaultName", ""),
        "salt": base64.b64encode(salt).decode("ascii"),
        "data": base64.b64encode(ciphertext).decode("ascii"),
    }

    # Create temp file in same directory for atomic move
    temp_fd, temp_path = tempfile.mkstemp(
        dir=vault_dir, prefix=".vault_tmp_", suffix=Config.VAULT_EXTENSION
    )
    try:
        with os.fdopen(temp_fd, "w", encoding="utf-8") as f:
            json.dump(envelope, f, indent=2)
        os.chmod(temp_path, stat.S_IRUSR | stat.S_IWUSR)
        os.replace(temp_path, path)
    except OSError as e:
        _cleanup_temp(temp_path)
        raise StorageError(f"Failed to save vault: {e}") from e


def _cleanup_temp(temp_path: str) -> None:
    try:
        if os.path.exists(temp_path):
            os.unlink(temp_path)
    except OSError:
        pass


def find_folder(payload: dict, folder_id: str) -> Optional[dict]:
    return next((f for f in payload["folders"] if f.get("id") == folder_id), None)
