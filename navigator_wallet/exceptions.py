"""Wallet errors.

Errors are raised as exceptions inside the package. The dispatcher is the
only place where they become tagged error responses for callers.
"""
from enum import Enum


class ErrorKind(str, Enum):
    """Error kinds reported to callers."""
    LOCKED = "locked"
    IDENTITY_REJECTED = "identity_rejected"
    IDENTITY_MISSING = "identity_missing"
    MALICIOUS_EVENT = "malicious_event"
    NETWORK_REJECTED = "network_rejected"
    SIGNATURE_REJECTED = "signature_rejected"
    INVALID_REQUEST = "invalid_request"


class WalletError(Exception):
    """Base class for errors that are reported back to the caller."""

    kind: ErrorKind = ErrorKind.INVALID_REQUEST
    default_message: str = "Invalid request"

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class Locked(WalletError):
    kind = ErrorKind.LOCKED
    default_message = "The wallet is locked"


class IdentityRejected(WalletError):
    kind = ErrorKind.IDENTITY_REJECTED
    default_message = "User rejected the provision of an Identity"


class IdentityMissing(WalletError):
    kind = ErrorKind.IDENTITY_MISSING
    default_message = "Identity no longer exists on the user's keychain"


class MaliciousEvent(WalletError):
    kind = ErrorKind.MALICIOUS_EVENT
    default_message = "Malicious event discarded, private key failed validation"


class NetworkRejected(WalletError):
    kind = ErrorKind.NETWORK_REJECTED
    default_message = "User rejected the addition of a network"


class SignatureRejected(WalletError):
    kind = ErrorKind.SIGNATURE_REJECTED
    default_message = "User rejected the signature request"


class InvalidRequest(WalletError):
    kind = ErrorKind.INVALID_REQUEST


class DecryptionError(Exception):
    """Ciphertext could not be opened with the given passphrase.

    Never reported to callers as such; a failed decrypt locks the session.
    """
