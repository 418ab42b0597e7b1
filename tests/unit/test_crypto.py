"""
Unit tests for cryptographic operations.

This module tests the primitives behind vault files and folder PINs:
- Salt generation for key derivation
- Argon2id key derivation from passwords
- Fernet encryption and decryption
- Argon2id PIN hashing and verification
"""

import pytest

from peka.crypto import (
    CryptoError,
    DecryptionError,
    decrypt_data,
    derive_key,
    encrypt_data,
    generate_salt,
    hash_pin,
    verify_pin,
)


@pytest.fixture
def salt() -> bytes:
    return generate_salt()


class TestSaltGeneration:
    """Test cryptographic salt generation for key derivation."""

    def test_generates_correct_length(self):
        """Salt must be exactly 16 bytes for Argon2 compatibility."""
        assert len(generate_salt()) == 16

    def test_generates_unique_salts(self):
        salts = {generate_salt() for _ in range(50)}
        assert len(salts) == 50


class TestKeyDerivation:
    """Test Argon2id key derivation from passwords and salts."""

    def test_derives_fernet_sized_key(self, salt):
        assert len(derive_key("password", salt)) == 32

    def test_is_deterministic(self, salt):
        assert derive_key("password", salt) == derive_key("password", salt)

    def test_different_passwords_produce_different_keys(self, salt):
        assert derive_key("password1", salt) != derive_key("password2", salt)

    def test_handles_unicode_password(self, salt):
        assert len(derive_key("пароль密码🔒", salt)) == 32

    def test_short_salt_is_rejected(self):
        with pytest.raises(CryptoError):
            derive_key("password", b"short")


class TestEncryption:
    """Test data encryption with password-based key derivation."""

    def test_encryption_decryption_roundtrip(self):
        data = b'{"vaultName": "Personal", "folders": []}'
        ciphertext, salt = encrypt_data(data, "secure_password")
        assert decrypt_data(ciphertext, "secure_password", salt) == data

    def test_fresh_salt_each_time(self):
        ciphertext1, salt1 = encrypt_data(b"same", "pw")
        ciphertext2, salt2 = encrypt_data(b"same", "pw")
        assert ciphertext1 != ciphertext2
        assert salt1 != salt2

    def test_reuses_provided_salt(self, salt):
        _, returned_salt = encrypt_data(b"data", "pw", salt=salt)
        assert returned_salt == salt

    def test_ciphertext_does_not_contain_plaintext(self):
        ciphertext, _ = encrypt_data(b"SECRET_PASSWORD_123", "key")
        assert b"SECRET" not in ciphertext


class TestDecryption:
    """Test decryption error handling."""

    def test_wrong_password_raises_error(self):
        ciphertext, salt = encrypt_data(b"Secret data", "correct")
        with pytest.raises(DecryptionError) as exc:
            decrypt_data(ciphertext, "wrong", salt)
        assert "incorrect master password" in str(exc.value).lower()

    def test_corrupted_ciphertext_raises_error(self):
        ciphertext, salt = encrypt_data(b"Secret data", "password")
        with pytest.raises(DecryptionError):
            decrypt_data(ciphertext[:-10] + b"corrupted!", "password", salt)

    def test_wrong_salt_raises_error(self):
        ciphertext, _ = encrypt_data(b"Secret data", "password")
        with pytest.raises(DecryptionError):
            decrypt_data(ciphertext, "password", generate_salt())


class TestPinHashing:
    """Folder PINs are stored as Argon2id hashes."""

    def test_hash_is_not_the_pin(self):
        pin_hash = hash_pin("4821")
        assert "4821" not in pin_hash
        assert pin_hash.startswith("$argon2id$")

    def test_same_pin_hashes_differently(self):
        assert hash_pin("4821") != hash_pin("4821")

    def test_verify_matching_pin(self):
        assert verify_pin(hash_pin("4821"), "4821")

    def test_verify_wrong_pin_is_false(self):
        assert verify_pin(hash_pin("4821"), "0000") is False

    def test_invalid_hash_raises(self):
        with pytest.raises(CryptoError):
            verify_pin("not-a-hash", "4821")
