"""Pre-dispatch validation.

Pure functions: nothing here touches the backend or session state, so a
failed check never produces a loading state or a backend call.
"""

import re
from dataclasses import dataclass, field
from typing import Callable, List, Optional

from zxcvbn import zxcvbn

from . import messages
from .config import Config

_PIN_PATTERN = re.compile(r"^[0-9]{%d}$" % Config.PIN_LENGTH)


@dataclass
class ValidationResult:
    """Outcome of a validation check."""

    is_valid: bool
    errors: List[str] = field(default_factory=list)

    @classmethod
    def ok(cls) -> "ValidationResult":
        return cls(is_valid=True)

    @classmethod
    def fail(cls, *errors: str) -> "ValidationResult":
        return cls(is_valid=False, errors=list(errors))

    @property
    def message(self) -> Optional[str]:
        return self.errors[0] if self.errors else None


def strength_score(password: str) -> int:
    """Score password strength from 0 (guessable) to 4 (very strong)."""
    return zxcvbn(password)["score"]


def is_valid_pin(pin: Optional[str]) -> bool:
    """True only for exactly four ASCII digits."""
    return bool(pin) and _PIN_PATTERN.match(pin) is not None


def sanitize_pin_input(value: str) -> str:
    """Strip non-digits and cap at PIN length, as typed into a PIN field."""
    return "".join(ch for ch in value if ch.isascii() and ch.isdigit())[
        : Config.PIN_LENGTH
    ]


def validate_vault_name(name: str) -> ValidationResult:
    if not name.strip():
        return ValidationResult.fail(messages.ERROR_VAULT_NAME_REQUIRED)
    return ValidationResult.ok()


def validate_folder(name: str, secure: bool, pin: Optional[str] = None) -> ValidationResult:
    if not name.strip():
        return ValidationResult.fail(messages.ERROR_FOLDER_NAME_REQUIRED)
    if secure and not is_valid_pin(pin):
        return ValidationResult.fail(messages.ERROR_FOLDER_PIN_SHAPE)
    return ValidationResult.ok()


def validate_credential(identifier: str, username: str, password: str) -> ValidationResult:
    # Passwords are not trimmed: surrounding whitespace may be meaningful
    if not identifier.strip() or not username.strip() or not password:
        return ValidationResult.fail(messages.ERROR_CREDENTIAL_FIELDS)
    return ValidationResult.ok()


def validate_unlock(master_password: str) -> ValidationResult:
    if not master_password.strip():
        return ValidationResult.fail(messages.ERROR_MASTER_PASSWORD_REQUIRED)
    return ValidationResult.ok()


def validate_import(
    vault_name: str, source_path: Optional[str], master_password: str
) -> ValidationResult:
    """Check the import form in field order, stopping at the first problem."""
    name_result = validate_vault_name(vault_name)
    if not name_result.is_valid:
        return name_result
    if not source_path:
        return ValidationResult.fail(messages.ERROR_IMPORT_FILE_REQUIRED)
    if not master_password.strip():
        return ValidationResult.fail(messages.ERROR_IMPORT_PASSWORD_REQUIRED)
    return ValidationResult.ok()


def validate_master_password(
    password: str,
    confirm: str,
    scorer: Callable[[str], int] = strength_score,
) -> ValidationResult:
    """
    Apply the master password policy used when creating a vault.

    Every failing rule contributes its own message so the user sees all unmet
    rules at once. An empty password short-circuits with a single message.

    Args:
        password: Candidate master password
        confirm: Confirmation field value
        scorer: Strength function returning 0-4

    Returns:
        ValidationResult with one message per failing rule
    """
    if not password or not password.strip():
        return ValidationResult.fail(messages.POLICY_EMPTY)

    errors: List[str] = []

    if len(password) < Config.MASTER_PASSWORD_MIN_LENGTH:
        errors.append(
            messages.POLICY_LENGTH.format(length=Config.MASTER_PASSWORD_MIN_LENGTH)
        )

    has_lower = any("a" <= ch <= "z" for ch in password)
    has_upper = any("A" <= ch <= "Z" for ch in password)
    if not (has_lower and has_upper):
        errors.append(messages.POLICY_MIXED_CASE)

    if not any("0" <= ch <= "9" for ch in password):
        errors.append(messages.POLICY_DIGIT)

    if not any(ch in Config.PASSWORD_SYMBOLS for ch in password):
        errors.append(messages.POLICY_SYMBOL)

    if password != confirm:
        errors.append(messages.POLICY_MISMATCH)

    if scorer(password) < Config.MIN_STRENGTH_SCORE:
        errors.append(messages.POLICY_WEAK)

    return ValidationResult(is_valid=not errors, errors=errors)
