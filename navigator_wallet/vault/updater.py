"""
Update Cycle — load, mutate, encrypt, persist and reopen the Vault.

Every write to storage goes through here:
1. field-encrypt each private key still in cleartext,
2. seal the whole document under the session passphrase,
3. save it,
4. reopen what was saved and hand that back as the authoritative view.

Writers are serialized through one asyncio.Lock, and ``transaction()`` holds
that lock across the whole load-mutate-save sequence.
"""
import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from ..exceptions import DecryptionError, Locked
from ..models import SealedVault, Vault
from .key_rotation import reencrypt_vault
from .session import SessionLock
from .storage import VaultStore

logger = logging.getLogger("navigator.wallet")


class UpdateCycle:
    """Single writer of the persisted Vault document."""

    def __init__(self, store: VaultStore, session: SessionLock):
        self._store = store
        self._session = session
        self._lock = asyncio.Lock()

    @property
    def store(self) -> VaultStore:
        return self._store

    def _open(self, sealed: SealedVault) -> Vault:
        """Open a sealed document with the session passphrase.

        A document that does not open locks the session: a wrong passphrase
        is treated as never having been unlocked.
        """
        passphrase = self._session.passphrase
        try:
            return sealed.open(passphrase)
        except DecryptionError:
            logger.warning("Vault failed to decrypt, locking session")
            self._session.lock()
            raise Locked() from None

    async def load(self) -> Optional[Vault]:
        """Read and open the stored Vault, None if nothing is stored.

        Raises:
            Locked: no passphrase is held, or it does not open the vault.
        """
        sealed = await self._store.get()
        if sealed is None:
            return None
        return self._open(sealed)

    async def _commit(self, vault: Vault) -> Vault:
        passphrase = self._session.passphrase
        vault = vault.model_copy(deep=True)
        vault.keychain.encrypt_keys(passphrase)
        sealed = vault.seal(passphrase)
        await self._store.save(sealed)
        logger.debug(
            "Vault saved: %d keypair(s), %d identit(ies), %d permission(s)",
            len(vault.keychain.keypairs),
            len(vault.keychain.identities),
            len(vault.keychain.permissions),
        )
        return self._open(sealed)

    async def update(self, vault: Vault) -> Vault:
        """Encrypt and persist a caller-supplied Vault, return the saved view.

        The stored document must open with the session passphrase first, a
        wrong passphrase never overwrites it.
        """
        async with self._lock:
            await self.load()
            return await self._commit(vault)

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[Vault]:
        """Load the Vault, let the caller mutate it, then commit it.

        Nothing is saved if the block raises.
        """
        async with self._lock:
            vault = await self.load()
            if vault is None:
                vault = Vault()
            yield vault
            await self._commit(vault)

    async def bootstrap(self, passphrase: str, vault: Optional[Vault] = None) -> bool:
        """Persist a new Vault under ``passphrase`` if storage is empty."""
        async with self._lock:
            if await self._store.get() is not None:
                return False
            if vault is None:
                vault = Vault()
            vault.keychain.encrypt_keys(passphrase)
            await self._store.save(vault.seal(passphrase))
            logger.info("New vault created")
            return True

    async def rekey(self, new_passphrase: str) -> dict:
        """Re-encrypt the whole Vault under a new passphrase.

        On success the session is unlocked with the new passphrase.
        """
        if not new_passphrase:
            raise ValueError("Passphrase cannot be empty")
        async with self._lock:
            old_passphrase = self._session.passphrase
            vault = await self.load()
            if vault is None:
                vault = Vault()
            try:
                stats = reencrypt_vault(vault, old_passphrase, new_passphrase)
            except DecryptionError:
                logger.warning("Private key failed to decrypt during rekey, locking session")
                self._session.lock()
                raise Locked() from None
            await self._store.save(vault.seal(new_passphrase))
            self._session.unlock(new_passphrase)
            return stats
