"""Symmetric encryption for secrets stored by the persistence API.

Webhook secrets and OAuth refresh tokens are encrypted with AES-256 in CTR mode.
Each call uses a fresh 16-byte IV; ciphertext and IV travel as hex strings.

The configured ``ENCRYPTION_KEY`` is stretched into a 32-byte AES key with
HKDF-SHA256, so any non-empty string works as a key.
"""

from __future__ import annotations

import os
import secrets
from dataclasses import dataclass

from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes
from cryptography.hazmat.primitives.kdf.hkdf import HKDF

_KEY_LENGTH = 32
_IV_LENGTH = 16
_HKDF_INFO = b"linear-github-sync:secrets"


class EncryptionKeyMissing(ValueError):
    """Raised when encryption is attempted without a configured key."""


class DecryptionError(ValueError):
    """Raised when ciphertext or IV cannot be decoded."""


@dataclass(frozen=True, slots=True)
class EncryptedSecret:
    hash: str
    init_vector: str


def derive_key(secret: str) -> bytes:
    if not secret:
        raise EncryptionKeyMissing("ENCRYPTION_KEY is required to encrypt secrets")
    hkdf = HKDF(algorithm=hashes.SHA256(), length=_KEY_LENGTH, salt=None, info=_HKDF_INFO)
    return hkdf.derive(secret.encode("utf-8"))


def _cipher(key: str, iv: bytes) -> Cipher:
    return Cipher(algorithms.AES(derive_key(key)), modes.CTR(iv))


def encrypt(text: str, key: str) -> EncryptedSecret:
    iv = os.urandom(_IV_LENGTH)
    encryptor = _cipher(key, iv).encryptor()
    encrypted = encryptor.update(text.encode("utf-8")) + encryptor.finalize()
    return EncryptedSecret(hash=encrypted.hex(), init_vector=iv.hex())


def decrypt(content: str, init_vector: str, key: str) -> str:
    try:
        iv = bytes.fromhex(init_vector)
        data = bytes.fromhex(content)
    except ValueError as e:
        raise DecryptionError("Encrypted content and IV must be hex strings") from e
    if len(iv) != _IV_LENGTH:
        raise DecryptionError(f"IV must be {_IV_LENGTH} bytes, got {len(iv)}")

    decryptor = _cipher(key, iv).decryptor()
    decrypted = decryptor.update(data) + decryptor.finalize()
    try:
        return decrypted.decode("utf-8")
    except UnicodeDecodeError as e:
        # CTR has no integrity check; a wrong key shows up as undecodable bytes.
        raise DecryptionError("Decrypted content is not valid UTF-8 (wrong key?)") from e


def generate_webhook_secret() -> str:
    return secrets.token_urlsafe(32)
