"""Wallet Vault — Session-gated encrypted storage of the wallet keychain.

Security Note (Threat Model):
    The session passphrase and opened vault documents live in process memory
    while the session is unlocked. Private keys stay field-encrypted even in
    an opened document and are only decrypted for a single disclosure or
    signature. A memory dump of an unlocked process can still expose the
    passphrase; mitigation requires hardware-backed keys, which are out of
    scope.

The update cycle, the storage adapters and key rotation depend on the data
model and are imported from their own modules.
"""

from .crypto import (
    encrypt,
    decrypt,
    encrypt_field,
    decrypt_field,
    is_encrypted_field,
)
from .session import SessionLock

__all__ = [
    "encrypt",
    "decrypt",
    "encrypt_field",
    "decrypt_field",
    "is_encrypted_field",
    "SessionLock",
]
