"""Data models for vault snapshots.

Snapshots are immutable: every mutation goes through the backend, which
returns a complete new `Vault`. The wire form uses camelCase keys.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional, Tuple


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _parse_timestamp(value) -> datetime:
    if isinstance(value, datetime):
        return value
    if isinstance(value, str) and value:
        # Older files may carry a trailing "Z" instead of an offset
        if value.endswith("Z"):
            value = value[:-1] + "+00:00"
        return datetime.fromisoformat(value)
    return utc_now()


@dataclass(frozen=True)
class Credential:
    """A stored login inside a folder."""

    id: str
    title: str
    username: str
    password: str = field(repr=False)
    notes: Optional[str] = None
    created_at: datetime = field(default_factory=utc_now)
    updated_at: datetime = field(default_factory=utc_now)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON storage."""
        return {
            "id": self.id,
            "title": self.title,
            "username": self.username,
            "password": self.password,
            "notes": self.notes,
            "createdAt": self.created_at.isoformat(),
            "updatedAt": self.updated_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Credential":
        """Create Credential from dictionary."""
        return cls(
            id=data["id"],
            title=data.get("title", ""),
            username=data.get("username", ""),
            password=data.get("password", ""),
            notes=data.get("notes"),
            created_at=_parse_timestamp(data.get("createdAt")),
            updated_at=_parse_timestamp(data.get("updatedAt")),
        )


@dataclass(frozen=True)
class Folder:
    """A named group of credentials, optionally protected by a PIN."""

    id: str
    name: str
    secure: bool = False
    credentials: Tuple[Credential, ...] = ()
    created_at: datetime = field(default_factory=utc_now)
    updated_at: datetime = field(default_factory=utc_now)

    def find_credential(self, credential_id: str) -> Optional[Credential]:
        return next((c for c in self.credentials if c.id == credential_id), None)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON storage."""
        return {
            "id": self.id,
            "name": self.name,
            "secure": self.secure,
            "credentials": [c.to_dict() for c in self.credentials],
            "createdAt": self.created_at.isoformat(),
            "updatedAt": self.updated_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Folder":
        """Create Folder from dictionary. Storage-only keys such as pinHash are ignored."""
        return cls(
            id=data["id"],
            name=data.get("name", ""),
            secure=bool(data.get("secure", False)),
            credentials=tuple(
                Credential.from_dict(c) for c in data.get("credentials", [])
            ),
            created_at=_parse_timestamp(data.get("createdAt")),
            updated_at=_parse_timestamp(data.get("updatedAt")),
        )


@dataclass(frozen=True)
class Vault:
    """Complete vault snapshot as returned by the backend."""

    name: str
    folders: Tuple[Folder, ...] = ()

    def find_folder(self, folder_id: str) -> Optional[Folder]:
        return next((f for f in self.folders if f.id == folder_id), None)

    def stats(self) -> dict:
        """
        Get snapshot statistics.

        Returns:
            Dictionary with:
            - folders: Total number of folders
            - secure_folders: Number of PIN-protected folders
            - credentials: Total credentials across all folders
        """
        return {
            "folders": len(self.folders),
            "secure_folders": sum(1 for f in self.folders if f.secure),
            "credentials": sum(len(f.credentials) for f in self.folders),
        }

    def to_dict(self) -> dict:
        return {
            "vaultName": self.name,
            "folders": [f.to_dict() for f in self.folders],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Vault":
        return cls(
            name=data.get("vaultName", ""),
            folders=tuple(Folder.from_dict(f) for f in data.get("folders", [])),
        )


@dataclass(frozen=True)
class VaultSummary:
    """Descriptor of a vault on disk, available before unlocking."""

    path: str
    name: str
