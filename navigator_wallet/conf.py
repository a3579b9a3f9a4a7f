"""
Wallet Configuration — Environment loading and validated settings.

Reads settings from environment variables:
    WALLET_KDF_ITERATIONS = <int, PBKDF2 rounds per encryption>
    WALLET_CIPHER_BACKEND = aesgcm | chacha20
    WALLET_AUTO_LOCK_MINUTES = <int, default inactivity lock, 0 disables>
    WALLET_STORE_PATH = <path to the sealed vault file>
    WALLET_ROUTE = <URL path of the wallet endpoint>

Security Note:
    Never log passphrases or key material. Only log settings names and values
    that are not secret.
"""
import os
import logging
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, field_validator

logger = logging.getLogger("navigator.wallet")

DEFAULT_KDF_ITERATIONS = 100_000
DEFAULT_CIPHER_BACKEND = "aesgcm"
DEFAULT_AUTO_LOCK_MINUTES = 0
DEFAULT_ROUTE = "/wallet"

CIPHER_BACKENDS = ("aesgcm", "chacha20")


def get_kdf_iterations() -> int:
    """Read the PBKDF2 iteration count from WALLET_KDF_ITERATIONS.

    Returns:
        Iteration count as integer.

    Raises:
        ValueError: If the value is not a positive integer.
    """
    raw = os.environ.get("WALLET_KDF_ITERATIONS")
    if raw is None:
        return DEFAULT_KDF_ITERATIONS
    iterations = int(raw)
    if iterations < 1:
        raise ValueError(
            f"WALLET_KDF_ITERATIONS must be positive, got {iterations}"
        )
    return iterations


def get_cipher_backend() -> str:
    """Read the AEAD backend name from WALLET_CIPHER_BACKEND.

    Raises:
        ValueError: If the backend is not supported.
    """
    backend = os.environ.get("WALLET_CIPHER_BACKEND", DEFAULT_CIPHER_BACKEND).lower()
    if backend not in CIPHER_BACKENDS:
        raise ValueError(f"Unsupported cipher backend: {backend}")
    return backend


class WalletConfig(BaseModel):
    """Validated wallet configuration.

    Codec settings (KDF iterations, cipher backend) are read once by the codec
    at import time and are not part of this model.
    """

    auto_lock_minutes: int = Field(default=DEFAULT_AUTO_LOCK_MINUTES, ge=0)
    store_path: Optional[Path] = None
    route: str = Field(default=DEFAULT_ROUTE)

    @field_validator("route")
    @classmethod
    def validate_route(cls, v: str) -> str:
        """Routes are absolute URL paths."""
        if not v.startswith("/"):
            raise ValueError(f"Wallet route must start with '/': {v}")
        return v

    @classmethod
    def from_env(cls) -> "WalletConfig":
        """Create WalletConfig by loading values from environment.

        Returns:
            Populated WalletConfig instance.
        """
        store_path = os.environ.get("WALLET_STORE_PATH")
        config = cls(
            auto_lock_minutes=int(
                os.environ.get("WALLET_AUTO_LOCK_MINUTES", DEFAULT_AUTO_LOCK_MINUTES)
            ),
            store_path=Path(store_path) if store_path else None,
            route=os.environ.get("WALLET_ROUTE", DEFAULT_ROUTE),
        )
        logger.debug(
            "Wallet config loaded: auto_lock=%dmin route=%s",
            config.auto_lock_minutes, config.route,
        )
        return config
