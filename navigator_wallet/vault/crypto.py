"""
Wallet Codec — Passphrase key derivation, encryption/decryption, serialization.

Implements the two encryption granularities of the wallet:
- Document layer: the whole Vault, orjson-serialized, encrypted as one blob.
- Field layer: each private key string, encrypted on its own and tagged with
  ``FIELD_MARKER`` so its encryption state is always known.

Both layers use the same format:
    base64([salt 16B][nonce 12B][encrypted_payload + tag 16B])
with a fresh PBKDF2-HMAC-SHA256 key for every salt.

Security Note:
    Never log passphrases, plaintext or ciphertext values.
"""
import os
import base64
import binascii
import logging
from typing import Any

import orjson
from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC
from cryptography.hazmat.primitives.ciphers.aead import AESGCM, ChaCha20Poly1305

from ..conf import get_cipher_backend, get_kdf_iterations
from ..exceptions import DecryptionError

logger = logging.getLogger("navigator.wallet")

SALT_SIZE = 16
NONCE_SIZE = 12  # 96-bit nonce
TAG_SIZE = 16
KEY_LENGTH = 32  # AES-256

FIELD_MARKER = "enc:"


def _get_cipher_cls() -> type:
    """Return the AEAD cipher class based on WALLET_CIPHER_BACKEND env var."""
    if get_cipher_backend() == "chacha20":
        return ChaCha20Poly1305
    return AESGCM


# Resolved once at module load so that encrypt and decrypt never disagree
# if the environment changes mid-process.
CIPHER_CLS = _get_cipher_cls()
KDF_ITERATIONS = get_kdf_iterations()


# ---------------------------------------------------------------------------
# Key derivation
# ---------------------------------------------------------------------------

def derive_key(passphrase: str, salt: bytes, iterations: int = None) -> bytes:
    """Derive a 32-byte encryption key from a passphrase using PBKDF2.

    Args:
        passphrase: The session passphrase.
        salt: Random salt stored alongside the ciphertext.
        iterations: PBKDF2 rounds, defaults to ``KDF_ITERATIONS``.

    Returns:
        32-byte derived key.
    """
    kdf = PBKDF2HMAC(
        algorithm=hashes.SHA256(),
        length=KEY_LENGTH,
        salt=salt,
        iterations=iterations or KDF_ITERATIONS,
    )
    return kdf.derive(passphrase.encode("utf-8"))


# ---------------------------------------------------------------------------
# Raw encryption
# ---------------------------------------------------------------------------

def encrypt_bytes(plaintext: bytes, passphrase: str) -> str:
    """Encrypt plaintext under a passphrase.

    Args:
        plaintext: Data to encrypt.
        passphrase: Session passphrase used for key derivation.

    Returns:
        base64 text of [salt][nonce][ciphertext+tag].
    """
    if not passphrase:
        raise ValueError("Cannot encrypt without a passphrase")
    salt = os.urandom(SALT_SIZE)
    nonce = os.urandom(NONCE_SIZE)
    cipher = CIPHER_CLS(derive_key(passphrase, salt))
    ct = cipher.encrypt(nonce, plaintext, None)
    return base64.b64encode(salt + nonce + ct).decode("ascii")


def decrypt_bytes(ciphertext: str, passphrase: str) -> bytes:
    """Decrypt text produced by :func:`encrypt_bytes`.

    Raises:
        DecryptionError: If the passphrase is wrong, the data was tampered
            with, or the text is not a ciphertext at all.
    """
    if not passphrase:
        raise DecryptionError("Cannot decrypt without a passphrase")
    try:
        raw = base64.b64decode(ciphertext, validate=True)
    except (binascii.Error, TypeError, ValueError) as err:
        raise DecryptionError("Ciphertext is not valid base64") from err
    _min = SALT_SIZE + NONCE_SIZE + TAG_SIZE
    if len(raw) < _min:
        raise DecryptionError(
            f"Ciphertext too short: {len(raw)} bytes (minimum {_min})"
        )
    salt = raw[:SALT_SIZE]
    nonce = raw[SALT_SIZE:SALT_SIZE + NONCE_SIZE]
    ct = raw[SALT_SIZE + NONCE_SIZE:]
    cipher = CIPHER_CLS(derive_key(passphrase, salt))
    try:
        return cipher.decrypt(nonce, ct, None)
    except InvalidTag as err:
        raise DecryptionError("Wrong passphrase or corrupted ciphertext") from err


# ---------------------------------------------------------------------------
# Structured payloads
# ---------------------------------------------------------------------------

def encrypt(payload: Any, passphrase: str) -> str:
    """Serialize a JSON-compatible payload with orjson and encrypt it."""
    return encrypt_bytes(orjson.dumps(payload), passphrase)


def decrypt(ciphertext: str, passphrase: str) -> Any:
    """Decrypt and deserialize a payload produced by :func:`encrypt`."""
    plaintext = decrypt_bytes(ciphertext, passphrase)
    try:
        return orjson.loads(plaintext)
    except orjson.JSONDecodeError as err:
        raise DecryptionError("Decrypted payload is not valid JSON") from err


# ---------------------------------------------------------------------------
# Field-level encryption
# ---------------------------------------------------------------------------

def is_encrypted_field(value: Any) -> bool:
    """Whether a field value carries the encrypted marker."""
    return isinstance(value, str) and value.startswith(FIELD_MARKER)


def encrypt_field(value: str, passphrase: str) -> str:
    """Encrypt a single string field.

    Already encrypted values are returned untouched, so repeated update
    cycles never wrap a private key twice.
    """
    if not value or is_encrypted_field(value):
        return value
    return FIELD_MARKER + encrypt_bytes(value.encode("utf-8"), passphrase)


def decrypt_field(value: str, passphrase: str) -> str:
    """Decrypt a single string field; cleartext values are returned as-is."""
    if not is_encrypted_field(value):
        return value
    plaintext = decrypt_bytes(value[len(FIELD_MARKER):], passphrase)
    return plaintext.decode("utf-8")
