"""Cryptographic operations for vault encryption and folder PINs."""

import base64
import secrets
from typing import Optional, Tuple

from argon2 import PasswordHasher
from argon2.exceptions import HashingError, InvalidHashError, VerificationError
from argon2.low_level import Type, hash_secret_raw
from cryptography.fernet import Fernet, InvalidToken

# Argon2id parameters (OWASP recommendations for password storage)
ARGON2_TIME_COST = 2  # Number of iterations
ARGON2_MEMORY_COST = 65536  # 64 MiB
ARGON2_PARALLELISM = 4  # Number of parallel threads
ARGON2_HASH_LENGTH = 32  # 32 bytes for Fernet key
ARGON2_SALT_LENGTH = 16  # 16 bytes salt

SALT_LENGTH = ARGON2_SALT_LENGTH
KEY_LENGTH = ARGON2_HASH_LENGTH

_pin_hasher = PasswordHasher()


class CryptoError(Exception):
    """Base exception for cryptographic operations."""

    pass


class DecryptionError(CryptoError):
    """Raised when decryption fails (wrong password or corrupted data)."""

    pass


class EncryptionError(CryptoError):
    """Raised when encryption fails."""

    pass


def generate_salt() -> bytes:
    """Generate a cryptographically secure random salt."""
    return secrets.token_bytes(SALT_LENGTH)


def derive_key(master_password: str, salt: bytes) -> bytes:
    """Derive encryption key from master password using Argon2id."""
    try:
        return hash_secret_raw(
            secret=master_password.encode("utf-8"),
            salt=salt,
            time_cost=ARGON2_TIME_COST,
            memory_cost=ARGON2_MEMORY_COST,
            parallelism=ARGON2_PARALLELISM,
            hash_len=ARGON2_HASH_LENGTH,
            type=Type.ID,
        )
    except (ValueError, TypeError, HashingError) as e:
        raise CryptoError(f"Key derivation failed: {e}") from e


def create_fernet(key: bytes) -> Fernet:
    """Create Fernet cipher from derived key."""
    try:
        return Fernet(base64.urlsafe_b64encode(key))
    except (ValueError, TypeError) as e:
        raise CryptoError(f"Fernet creation failed: {e}") from e


def encrypt_data(
    data: bytes, master_password: str, salt: Optional[bytes] = None
) -> Tuple[bytes, bytes]:
    """Encrypt data with master password. A fresh salt is generated when none is given."""
    try:
        if salt is None:
            salt = generate_salt()

        cipher = create_fernet(derive_key(master_password, salt))
        return cipher.encrypt(data), salt
    except CryptoError:
        raise
    except (ValueError, TypeError) as e:
        raise EncryptionError(f"Encryption failed: {e}") from e


def decrypt_data(ciphertext: bytes, master_password: str, salt: bytes) -> bytes:
    """Decrypt data with master password."""
    try:
        cipher = create_fernet(derive_key(master_password, salt))
        return cipher.decrypt(ciphertext)
    except InvalidToken:
        raise DecryptionError(
            "Decryption failed - incorrect master password or corrupted vault"
        )
    except CryptoError:
        raise
    except (ValueError, TypeError) as e:
        raise DecryptionError(f"Decryption failed: {e}") from e


def hash_pin(pin: str) -> str:
    """Hash a folder PIN into an encoded Argon2id string."""
    try:
        return _pin_hasher.hash(pin)
    except HashingError as e:
        raise CryptoError(f"PIN hashing failed: {e}") from e


def verify_pin(pin_hash: str, pin: str) -> bool:
    """Check a PIN against its stored hash. A mismatch is False, not an error."""
    try:
        return _pin_hasher.verify(pin_hash, pin)
    except VerificationError:
        return False
    except InvalidHashError as e:
        raise CryptoError(f"Stored PIN hash is invalid: {e}") from e
