"""Vault codec tests."""

import logging
import re
from unittest.mock import patch

import pytest
from cryptography.exceptions import UnsupportedAlgorithm

from worktracker.config import Settings
from worktracker.utils.crypto import (
    MASKED_PLACEHOLDER,
    CryptoUnavailable,
    DecryptionFailed,
    InvalidEncryptionKey,
    VaultCodec,
    build_codec,
    parse_key,
)

ENVELOPE = re.compile(r"^[0-9a-f]{32}:[0-9a-f]+$")


@pytest.mark.parametrize(
    "plaintext",
    ["MyP@ss123", "", "pässwörd ✓ 密码", "has:colons:inside", "x" * 1000, "ab\ud800cd"],
)
def test_round_trip(codec: VaultCodec, plaintext: str):
    stored = codec.encrypt(plaintext)
    assert ENVELOPE.match(stored)
    assert codec.decrypt(stored) == plaintext


def test_ciphertext_is_whole_blocks(codec: VaultCodec):
    _, cipher_hex = codec.encrypt("exactly16bytes!!").split(":")
    # 16 bytes of input gain a full block of padding
    assert len(bytes.fromhex(cipher_hex)) == 32


def test_fresh_iv_per_call(codec: VaultCodec):
    first = codec.encrypt("same secret")
    second = codec.encrypt("same secret")
    assert first != second
    assert first.split(":")[0] != second.split(":")[0]
    assert codec.decrypt(first) == codec.decrypt(second) == "same secret"


def test_decrypt_is_repeatable(codec: VaultCodec):
    stored = codec.encrypt("hunter2")
    assert codec.decrypt(stored) == codec.decrypt(stored) == "hunter2"


@pytest.mark.parametrize("legacy", ["plain-old-password", "", "no colon here 123"])
def test_legacy_passthrough(codec: VaultCodec, legacy: str):
    assert not codec.is_envelope(legacy)
    assert codec.decrypt(legacy) == legacy
    assert codec.reveal(legacy) == legacy


def test_legacy_value_with_colon_is_treated_as_envelope(codec: VaultCodec):
    # Known limitation: a colon always means "envelope"
    assert codec.is_envelope("user:pass")
    with pytest.raises(DecryptionFailed):
        codec.decrypt("user:pass")
    assert codec.reveal("user:pass") == MASKED_PLACEHOLDER


def test_flipped_byte_is_masked(codec: VaultCodec):
    iv_hex, cipher_hex = codec.encrypt("MyP@ss123").split(":")
    raw = bytearray(bytes.fromhex(cipher_hex))
    raw[-1] ^= 0x01
    tampered = f"{iv_hex}:{raw.hex()}"

    with pytest.raises(DecryptionFailed):
        codec.decrypt(tampered)
    assert codec.reveal(tampered) == MASKED_PLACEHOLDER


@pytest.mark.parametrize(
    "stored",
    [
        "zz:00",  # not hex
        "00ff:" + "00" * 16,  # IV too short
        "00" * 16 + ":",  # no ciphertext
        "00" * 16 + ":abc",  # odd-length hex
        "00" * 16 + ":" + "00" * 15,  # not a whole block
    ],
)
def test_malformed_envelopes(codec: VaultCodec, stored: str):
    with pytest.raises(DecryptionFailed):
        codec.decrypt(stored)
    assert codec.reveal(stored) == MASKED_PLACEHOLDER


def test_wrong_key_is_masked_and_logged(codec: VaultCodec, caplog):
    stored = VaultCodec(b"k" * 32).encrypt("MyP@ss123")
    with caplog.at_level(logging.WARNING, logger="worktracker.utils.crypto"):
        assert codec.reveal(stored, record_id="abc123") == MASKED_PLACEHOLDER
    assert "abc123" in caplog.text
    assert "MyP@ss123" not in caplog.text


def test_restart_with_generated_key_loses_data(caplog):
    with caplog.at_level(logging.WARNING, logger="worktracker.utils.crypto"):
        before_restart = VaultCodec.generate()
    assert "cannot be decrypted after a restart" in caplog.text

    stored = before_restart.encrypt("MyP@ss123")
    after_restart = VaultCodec.generate()
    assert before_restart.decrypt(stored) == "MyP@ss123"
    assert after_restart.reveal(stored) == MASKED_PLACEHOLDER


def test_key_length_enforced():
    with pytest.raises(CryptoUnavailable):
        VaultCodec(b"short")


def test_missing_cipher_backend_is_reported():
    with patch(
        "worktracker.utils.crypto.Cipher", side_effect=UnsupportedAlgorithm("no AES-CBC")
    ):
        with pytest.raises(CryptoUnavailable, match="no AES-CBC"):
            VaultCodec(bytes(range(32)))


def test_repr_hides_key(codec: VaultCodec):
    assert "hidden" in repr(codec)
    assert bytes(range(32)).hex() not in repr(codec)


def test_parse_key_text_and_hex():
    text_key = "0123456789abcdef0123456789abcdeX"
    assert parse_key(text_key) == text_key.encode()

    hex_key = "ab" * 32
    assert parse_key(hex_key) == bytes.fromhex(hex_key)


@pytest.mark.parametrize("raw", ["too short", "x" * 33, "g" * 64])
def test_parse_key_rejects_bad_keys(raw: str):
    with pytest.raises(InvalidEncryptionKey):
        parse_key(raw)


def test_build_codec_uses_configured_key():
    settings = Settings(encryption_key="ab" * 32)
    stored = build_codec(settings).encrypt("shared")
    # Same configuration after a restart reads the same data
    assert build_codec(settings).decrypt(stored) == "shared"


def test_build_codec_without_key_is_ephemeral():
    settings = Settings(encryption_key=None)
    stored = build_codec(settings).encrypt("gone")
    assert build_codec(settings).reveal(stored) == MASKED_PLACEHOLDER
