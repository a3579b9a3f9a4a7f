"""
Authorization Gateway — every caller-visible wallet operation.

The gateway is LOCKED or UNLOCKED, derived on each call from the session lock.
Privileged operations are rejected with ``Locked`` while locked, and the user
gets a passive notice about it. While unlocked, the vault is loaded and
opened first; a vault that does not open with the held passphrase locks the
session and the operation fails as if it had started locked.

Security Note:
    Private keys are decrypted on a copy of their holder, used for a single
    disclosure or signature, and never written back or logged.
"""
import logging
import functools
from typing import Optional, Union

from .exceptions import (
    DecryptionError,
    IdentityMissing,
    IdentityRejected,
    Locked,
    MaliciousEvent,
    NetworkRejected,
    SignatureRejected
)
from .history import HistoryLog
from .models import (
    HistoricEvent,
    HistoricEventType,
    Identity,
    IdentityView,
    Keychain,
    Keypair,
    Network,
    Permission,
    Settings,
    SignatureResult,
    Vault
)
from .permissions import (
    PermissionGrantor,
    find_permission,
    permissions_by_key,
    resolve_identity
)
from .prompts import NoticeBoard, Prompt, PromptService, PromptType
from .signing import is_valid_private, sign
from .vault.session import SessionLock
from .vault.storage import VaultStore
from .vault.updater import UpdateCycle
from .version import __version__

logger = logging.getLogger("navigator.wallet")


class AppMetadata:
    """Application metadata reported to callers."""

    def __init__(self, version: str = __version__):
        self.version = version


def privileged(func):
    """Reject the call while locked, and notify the user when it happens."""
    @functools.wraps(func)
    async def _wrap(self: "AuthorizationGateway", *args, **kwargs):
        if not self.session.is_unlocked:
            self.notify_locked()
            raise Locked()
        try:
            return await func(self, *args, **kwargs)
        except Locked:
            self.notify_locked()
            raise
    return _wrap


class AuthorizationGateway:
    """Mediates every operation a caller can request from the wallet."""

    def __init__(
        self,
        session: SessionLock,
        store: VaultStore,
        prompts: PromptService,
        metadata: Optional[AppMetadata] = None
    ):
        self.session = session
        self.cycle = UpdateCycle(store, session)
        self.history = HistoryLog(self.cycle)
        self.grantor = PermissionGrantor(self.cycle)
        self.notices = NoticeBoard(prompts)
        self.metadata = metadata or AppMetadata()
        self._prompts = prompts

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def notify_locked(self) -> None:
        self.notices.notify(Prompt.wallet_is_locked())

    def _sync_auto_lock(self, vault: Vault) -> None:
        seconds = vault.settings.inactivity_interval * 60
        if self.session.duration != seconds:
            self.session.duration = seconds
            self.session.touch()

    async def _load(self) -> Vault:
        vault = await self.cycle.load()
        if vault is None:
            vault = Vault()
        self._sync_auto_lock(vault)
        return vault

    def _reveal(self, holder: Union[Keypair, Identity]) -> str:
        """Field-decrypt a private key without touching its holder."""
        clear = holder.model_copy()
        try:
            clear.decrypt(self.session.passphrase)
        except DecryptionError:
            logger.warning(
                "Private key for %s failed to decrypt", holder.public_key
            )
            raise MaliciousEvent() from None
        return clear.private_key

    @staticmethod
    def _find_holder(
        keychain: Keychain,
        public_key: str
    ) -> Optional[Union[Keypair, Identity]]:
        keypair = keychain.find_keypair(public_key)
        if keypair is not None:
            return keypair
        return keychain.find_identity(public_key)

    # ------------------------------------------------------------------
    # Session
    # ------------------------------------------------------------------

    async def set_passphrase(self, passphrase: str) -> bool:
        """Hold the passphrase; creates the vault on first use.

        The passphrase is not validated here, only a later decrypt proves it.
        """
        self.session.unlock(passphrase)
        minutes = int(self.session.duration // 60)
        await self.cycle.bootstrap(
            passphrase,
            Vault(settings=Settings(inactivity_interval=minutes)),
        )
        return True

    @privileged
    async def set_auto_lock_duration(self, minutes: int) -> bool:
        async with self.cycle.transaction() as vault:
            vault.settings.inactivity_interval = minutes
        self.session.duration = minutes * 60
        self.session.touch()
        logger.info("Auto-lock duration set to %d minute(s)", minutes)
        return True

    async def check_unlocked(self) -> bool:
        """Whether the wallet is unlocked with a passphrase that opens it."""
        if not self.session.is_unlocked:
            return False
        try:
            await self.cycle.load()
        except Locked:
            return False
        return True

    @privileged
    async def change_passphrase(self, passphrase: str) -> bool:
        stats = await self.cycle.rekey(passphrase)
        logger.info("Passphrase changed, %d private key(s) re-encrypted", stats["total"])
        return True

    # ------------------------------------------------------------------
    # Vault
    # ------------------------------------------------------------------

    @privileged
    async def load_vault(self) -> Vault:
        """The opened vault; private keys remain field-encrypted."""
        return await self._load()

    @privileged
    async def update_vault(self, vault: Vault) -> Vault:
        saved = await self.cycle.update(vault)
        self._sync_auto_lock(saved)
        return saved

    @privileged
    async def public_to_private(self, public_key: str) -> Optional[str]:
        vault = await self._load()
        keypair = vault.keychain.find_keypair(public_key)
        if keypair is None:
            return None
        logger.info("Private key revealed for %s", public_key)
        return self._reveal(keypair)

    @privileged
    async def destroy_vault(self) -> bool:
        await self._load()
        await self.cycle.store.clear()
        self.session.lock()
        logger.warning("Vault destroyed")
        return True

    # ------------------------------------------------------------------
    # Web application requests
    # ------------------------------------------------------------------

    async def identity_from_permissions(
        self,
        domain: str,
        network: Network
    ) -> Optional[IdentityView]:
        """Identity a domain was already granted, None while locked."""
        if not self.session.is_unlocked:
            return None
        try:
            vault = await self._load()
        except Locked:
            return None
        permission = find_permission(domain, network, vault.keychain.permissions)
        if permission is None:
            return None
        return resolve_identity(permission, vault.keychain)

    @privileged
    async def get_or_request_identity(
        self,
        domain: str,
        network: Network,
        fields: list[str]
    ) -> IdentityView:
        vault = await self._load()
        permission = find_permission(domain, network, vault.keychain.permissions)
        if permission is not None:
            view = resolve_identity(permission, vault.keychain)
            if view is not None:
                return view

        decision = await self._prompts.open(Prompt(
            type=PromptType.REQUEST_IDENTITY,
            domain=domain,
            network=network,
            data={"fields": fields},
        ))
        if not decision.approved or not decision.public_key:
            raise IdentityRejected()
        identity = vault.keychain.find_identity(decision.public_key)
        if identity is None:
            raise IdentityMissing()

        await self.history.append(HistoricEventType.PROVIDED_IDENTITY, {
            "domain": domain,
            "network": network.to_json(),
            "provided": True,
            "identityName": identity.name,
            "publicKey": identity.public_key,
        })
        if decision.remember:
            await self.grantor.add_permissions([Permission(
                domain=domain,
                network=network,
                public_key=identity.public_key,
                fields=fields,
            )])
        return identity.as_only_required_fields(fields, network)

    @privileged
    async def request_signature(
        self,
        domain: str,
        network: Network,
        data: str,
        public_keys: list[str],
        fields: list[str]
    ) -> SignatureResult:
        vault = await self._load()
        keychain = vault.keychain
        holders = []
        for public_key in public_keys:
            holder = self._find_holder(keychain, public_key)
            if holder is None:
                raise IdentityMissing(f"No key on the keychain for {public_key}")
            holders.append(holder)
        identity = next(
            (h for h in holders if isinstance(h, Identity)), None
        )

        # every requested key needs its own grant to skip the prompt
        granted = permissions_by_key(domain, network, keychain.permissions)
        decision = None
        if not all(key in granted for key in public_keys):
            decision = await self._prompts.open(Prompt(
                type=PromptType.REQUEST_SIGNATURE,
                domain=domain,
                network=network,
                data={"data": data, "publicKeys": public_keys, "fields": fields},
            ))
            if not decision.approved:
                raise SignatureRejected()

        signatures = []
        for holder in holders:
            private_key = self._reveal(holder)
            if not is_valid_private(private_key):
                raise MaliciousEvent()
            signatures.append(sign(data, private_key))

        if decision is not None:
            await self.history.append(HistoricEventType.SIGNED_TRANSACTION, {
                "domain": domain,
                "network": network.to_json(),
                "publicKeys": public_keys,
            })
            if decision.remember and identity is not None:
                await self.grantor.add_permissions([Permission(
                    domain=domain,
                    network=network,
                    public_key=identity.public_key,
                    fields=fields,
                )])
        logger.info(
            "Signed for domain=%s with %d key(s)", domain, len(signatures)
        )
        returned = None
        if identity is not None:
            if decision is None:
                # without a prompt only granted fields are disclosed
                allowed = granted[identity.public_key].fields
                fields = [f for f in fields if f in allowed]
            returned = identity.as_only_required_fields(fields, network)
        return SignatureResult(signatures=signatures, returned_fields=returned)

    @privileged
    async def request_add_network(self, domain: str, network: Network) -> bool:
        vault = await self._load()
        if vault.settings.has_network(network):
            return True

        decision = await self._prompts.open(Prompt(
            type=PromptType.REQUEST_ADD_NETWORK,
            domain=domain,
            network=network,
        ))
        if not decision.approved:
            raise NetworkRejected()
        async with self.cycle.transaction() as stored:
            if stored.settings.add_network(network):
                stored.add_history(HistoricEvent(
                    type=HistoricEventType.ADDED_NETWORK,
                    data={"domain": domain, "network": network.to_json()},
                ))
        logger.info("Network %s added for domain=%s", network.unique_key, domain)
        return True

    @privileged
    async def authenticate(self, public_key: str, domain: str) -> str:
        """Sign ``domain`` with the identity's private key."""
        vault = await self._load()
        identity = vault.keychain.find_identity(public_key)
        if identity is None:
            raise IdentityMissing()
        private_key = self._reveal(identity)
        if not is_valid_private(private_key):
            logger.warning("Identity %s holds an invalid private key", public_key)
            raise MaliciousEvent()
        return sign(domain, private_key)

    # ------------------------------------------------------------------
    # Application metadata
    # ------------------------------------------------------------------

    async def request_get_version(self) -> str:
        return self.metadata.version

    async def request_version_update(self, domain: str) -> bool:
        """Tell the user a domain needs a newer wallet, without waiting."""
        self.notices.notify(Prompt(type=PromptType.UPDATE_VERSION, domain=domain))
        return True

    def __repr__(self) -> str:
        state = "unlocked" if self.session.is_unlocked else "locked"
        return f"<AuthorizationGateway [{state}] version={self.metadata.version}>"
