"""Peka encrypted credential manager."""

__version__ = "0.1.0"

# ruff: noqa: E402
from .backend import Backend, BackendError, LocalBackend
from .config import config
from .models import Credential, Folder, Vault, VaultSummary
from .screens import Screen
from .session import Session, SessionController, Surface

__all__ = [
    "Backend",
    "BackendError",
    "LocalBackend",
    "config",
    "Credential",
    "Folder",
    "Vault",
    "VaultSummary",
    "Screen",
    "Session",
    "SessionController",
    "Surface",
]
