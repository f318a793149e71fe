"""AES-256-CBC encryption of stored vault passwords.

Stored values use the envelope ``<iv hex>:<ciphertext hex>``. Values without
a colon predate encryption and are returned verbatim on read.
"""

from __future__ import annotations

import binascii
import logging
import os
from typing import TYPE_CHECKING

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

if TYPE_CHECKING:
    from worktracker.config import Settings

logger = logging.getLogger(__name__)

KEY_LENGTH_BYTES = 32  # AES-256
IV_LENGTH_BYTES = 16  # one AES block
ENVELOPE_SEPARATOR = ":"
MASKED_PLACEHOLDER = "••••••••"


class VaultError(Exception):
    """Base class for vault encryption errors."""


class CryptoUnavailable(VaultError):
    """The AES-CBC primitive could not be initialised."""


class DecryptionFailed(VaultError):
    """A stored envelope could not be decrypted."""


class InvalidEncryptionKey(VaultError):
    """A configured encryption key is not usable as an AES-256 key."""


def parse_key(raw: str) -> bytes:
    """Turn a configured key string into 32 bytes of key material.

    Accepts 64 hex digits, or any text that is exactly 32 bytes as UTF-8
    (the text form is used as raw key bytes, which keeps keys from existing
    deployments working).
    """
    if len(raw) == KEY_LENGTH_BYTES * 2:
        try:
            return binascii.unhexlify(raw)
        except ValueError:
            pass
    key = raw.encode("utf-8")
    if len(key) != KEY_LENGTH_BYTES:
        raise InvalidEncryptionKey(
            f"encryption key must be {KEY_LENGTH_BYTES} bytes of text "
            f"or {KEY_LENGTH_BYTES * 2} hex digits, got {len(key)} bytes"
        )
    return key


class VaultCodec:
    """Encrypts and decrypts vault passwords under one fixed key.

    Instances hold no state besides the key, so one codec can be shared by
    every request for the lifetime of the process.
    """

    def __init__(self, key: bytes):
        if len(key) != KEY_LENGTH_BYTES:
            raise CryptoUnavailable(f"AES-256 needs a {KEY_LENGTH_BYTES}-byte key, got {len(key)}")
        self._key = bytes(key)
        # Fail at startup rather than on the first write
        self._cipher(os.urandom(IV_LENGTH_BYTES))

    @classmethod
    def generate(cls) -> VaultCodec:
        """Codec over a random key that lives only as long as this process."""
        logger.warning(
            "No encryption key configured; generated a random key. "
            "Passwords stored now cannot be decrypted after a restart."
        )
        return cls(os.urandom(KEY_LENGTH_BYTES))

    def __repr__(self) -> str:
        return f"{type(self).__name__}(key=<hidden>)"

    def _cipher(self, iv: bytes) -> Cipher:
        try:
            return Cipher(algorithms.AES(self._key), modes.CBC(iv))
        except UnsupportedAlgorithm as exc:
            raise CryptoUnavailable(str(exc)) from exc

    @staticmethod
    def is_envelope(stored: str) -> bool:
        return ENVELOPE_SEPARATOR in stored

    def encrypt(self, plaintext: str) -> str:
        # surrogatepass: any Python str round-trips, lone surrogates included
        iv = os.urandom(IV_LENGTH_BYTES)
        padder = padding.PKCS7(algorithms.AES.block_size).padder()
        padded = padder.update(plaintext.encode("utf-8", "surrogatepass")) + padder.finalize()

        encryptor = self._cipher(iv).encryptor()
        ciphertext = encryptor.update(padded) + encryptor.finalize()
        return f"{iv.hex()}{ENVELOPE_SEPARATOR}{ciphertext.hex()}"

    def decrypt(self, stored: str) -> str:
        """Decrypt an envelope, or return a legacy plaintext value unchanged.

        Raises:
            DecryptionFailed: malformed hex, wrong IV length, or the cipher
                rejected the data (usually a different key).
        """
        if not self.is_envelope(stored):
            return stored

        # Only the first colon separates; hex never contains one
        iv_hex, cipher_hex = stored.split(ENVELOPE_SEPARATOR, 1)
        try:
            iv = binascii.unhexlify(iv_hex)
            ciphertext = binascii.unhexlify(cipher_hex)
        except ValueError as exc:
            raise DecryptionFailed("envelope is not valid hex") from exc

        if len(iv) != IV_LENGTH_BYTES:
            raise DecryptionFailed(f"IV must be {IV_LENGTH_BYTES} bytes, got {len(iv)}")

        try:
            decryptor = self._cipher(iv).decryptor()
            padded = decryptor.update(ciphertext) + decryptor.finalize()
            unpadder = padding.PKCS7(algorithms.AES.block_size).unpadder()
            data = unpadder.update(padded) + unpadder.finalize()
            return data.decode("utf-8", "surrogatepass")
        except ValueError as exc:
            raise DecryptionFailed("ciphertext rejected") from exc

    def reveal(self, stored: str, *, record_id: str | None = None) -> str:
        """Decrypt for display; unreadable values come back masked."""
        try:
            return self.decrypt(stored)
        except DecryptionFailed as exc:
            logger.warning("Could not decrypt stored password (record=%s): %s", record_id, exc)
            return MASKED_PLACEHOLDER


def build_codec(settings: Settings) -> VaultCodec:
    """Build the process-wide codec from configuration."""
    if settings.encryption_key:
        return VaultCodec(parse_key(settings.encryption_key))
    return VaultCodec.generate()
