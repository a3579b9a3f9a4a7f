"""
Vault Storage — persistence adapters for the sealed Vault document.

A store keeps exactly one SealedVault per installation. Stores never see a
cleartext Vault: the update cycle seals before saving and opens after loading.
"""
import asyncio
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Optional, Union

import orjson

from ..models import SealedVault

logger = logging.getLogger("navigator.wallet")


class VaultStore(ABC):
    """Get/save one serialized Vault document."""

    @abstractmethod
    async def get(self) -> Optional[SealedVault]:
        """Return the stored document, or None when nothing was saved yet."""

    @abstractmethod
    async def save(self, sealed: SealedVault) -> None:
        """Replace the stored document atomically."""

    @abstractmethod
    async def clear(self) -> None:
        """Remove the stored document."""


class MemoryVaultStore(VaultStore):
    """Keeps the serialized document in process memory."""

    def __init__(self):
        self._data: Optional[bytes] = None

    async def get(self) -> Optional[SealedVault]:
        if self._data is None:
            return None
        return SealedVault.model_validate_json(self._data)

    async def save(self, sealed: SealedVault) -> None:
        self._data = orjson.dumps(sealed.to_json())

    async def clear(self) -> None:
        self._data = None


class FileVaultStore(VaultStore):
    """Stores the document as a JSON file.

    Writes go to a temporary sibling first and are renamed over the target,
    so a crash mid-write never leaves a truncated vault behind.
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def _read(self) -> Optional[bytes]:
        if not self.path.exists():
            return None
        return self.path.read_bytes()

    def _write(self, data: bytes) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp.write_bytes(data)
        tmp.replace(self.path)

    def _unlink(self) -> None:
        self.path.unlink(missing_ok=True)

    async def get(self) -> Optional[SealedVault]:
        data = await asyncio.to_thread(self._read)
        if data is None:
            return None
        return SealedVault.model_validate_json(data)

    async def save(self, sealed: SealedVault) -> None:
        await asyncio.to_thread(self._write, orjson.dumps(sealed.to_json()))
        logger.debug("Vault saved to %s", self.path)

    async def clear(self) -> None:
        await asyncio.to_thread(self._unlink)
        logger.debug("Vault removed from %s", self.path)


class RedisVaultStore(VaultStore):
    """Stores the document under a single Redis key.

    Works with any redis.asyncio-compatible client (get/set/delete).
    """

    def __init__(self, redis: Any, key: str = "wallet:vault"):
        self._redis = redis
        self._key = key

    async def get(self) -> Optional[SealedVault]:
        data = await self._redis.get(self._key)
        if data is None:
            return None
        return SealedVault.model_validate_json(data)

    async def save(self, sealed: SealedVault) -> None:
        await self._redis.set(self._key, orjson.dumps(sealed.to_json()))

    async def clear(self) -> None:
        await self._redis.delete(self._key)
