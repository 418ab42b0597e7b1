"""Configuration management for Peka."""

import os
from pathlib import Path


class Config:
    """Configuration settings for Peka."""

    DEFAULT_VAULT_DIR = "~/.peka/vaults"
    VAULT_DIR_ENV = "PEKA_VAULT_DIR"
    DEFAULT_LOG_FILE = "~/.peka/peka.log"
    LOG_FILE_ENV = "PEKA_LOG_FILE"
    LOG_LEVEL_ENV = "PEKA_LOG_LEVEL"
    DEFAULT_LOG_LEVEL = "INFO"

    VAULT_EXTENSION = ".peka"
    FILE_FORMAT_VERSION = 1

    # The device holds a single vault; list_vaults returns zero or one entry.
    MAX_VAULTS = 1

    # Validation constants
    PIN_LENGTH = 4
    MASTER_PASSWORD_MIN_LENGTH = 12
    MIN_STRENGTH_SCORE = 3
    PASSWORD_SYMBOLS = "!@#$%^&*()_+-=[]{};':\"\\|,.<>/?"

    def __init__(self):
        """Initialize configuration with environment variable support."""
        self.vault_dir = self._get_vault_dir()
        self.log_file = self._get_log_file()
        self.log_level = os.getenv(self.LOG_LEVEL_ENV, self.DEFAULT_LOG_LEVEL).upper()

    def _get_vault_dir(self) -> str:
        """Get vault directory from environment or use default."""
        env_dir = os.getenv(self.VAULT_DIR_ENV)
        if env_dir:
            return os.path.expanduser(env_dir)
        return os.path.expanduser(self.DEFAULT_VAULT_DIR)

    def _get_log_file(self) -> str:
        env_file = os.getenv(self.LOG_FILE_ENV)
        if env_file:
            return os.path.expanduser(env_file)
        return os.path.expanduser(self.DEFAULT_LOG_FILE)

    def ensure_vault_dir(self) -> Path:
        """Ensure the vault directory exists and return it."""
        path = Path(self.vault_dir)
        path.mkdir(parents=True, exist_ok=True)
        return path


config = Config()
