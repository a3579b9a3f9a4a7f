"""
Dispatcher — routes typed requests to the authorization gateway.

This is the boundary where wallet exceptions become tagged ``Failure``
responses; everything behind it raises, everything in front of it receives a
value.
"""
import logging
from typing import Any, Awaitable, Callable, Optional, Union

from pydantic import ValidationError

from .conf import WalletConfig
from .exceptions import InvalidRequest, WalletError
from .gateway import AppMetadata, AuthorizationGateway
from .messages import Failure, MessageType, Request, Response, Success
from .prompts import PromptService
from .vault.session import SessionLock
from .vault.storage import FileVaultStore, MemoryVaultStore, VaultStore

logger = logging.getLogger("navigator.wallet")

Handler = Callable[[Any], Awaitable[Any]]


class Dispatcher:
    """One response per request, in the order the caller awaits them."""

    def __init__(self, gateway: AuthorizationGateway):
        self.gateway = gateway
        g = gateway
        self._handlers: dict[MessageType, Handler] = {
            MessageType.SET_PASSPHRASE: lambda p: g.set_passphrase(p.passphrase),
            MessageType.SET_AUTO_LOCK_DURATION: lambda p: g.set_auto_lock_duration(p.minutes),
            MessageType.CHECK_UNLOCKED: lambda p: g.check_unlocked(),
            MessageType.LOAD_VAULT: lambda p: g.load_vault(),
            MessageType.UPDATE_VAULT: lambda p: g.update_vault(p.vault),
            MessageType.REVEAL_PRIVATE_KEY: lambda p: g.public_to_private(p.public_key),
            MessageType.DESTROY_VAULT: lambda p: g.destroy_vault(),
            MessageType.RESOLVE_IDENTITY: lambda p: g.identity_from_permissions(
                p.domain, p.network
            ),
            MessageType.GET_OR_REQUEST_IDENTITY: lambda p: g.get_or_request_identity(
                p.domain, p.network, p.fields
            ),
            MessageType.REQUEST_SIGNATURE: lambda p: g.request_signature(
                p.domain, p.network, p.data, p.public_keys, p.fields
            ),
            MessageType.REQUEST_ADD_NETWORK: lambda p: g.request_add_network(
                p.domain, p.network
            ),
            MessageType.GET_APP_VERSION: lambda p: g.request_get_version(),
            MessageType.REQUEST_VERSION_UPDATE: lambda p: g.request_version_update(p.domain),
            MessageType.AUTHENTICATE: lambda p: g.authenticate(p.public_key, p.domain),
            MessageType.CHANGE_PASSPHRASE: lambda p: g.change_passphrase(p.passphrase),
        }

    @classmethod
    def from_config(
        cls,
        prompts: PromptService,
        config: Optional[WalletConfig] = None,
        store: Optional[VaultStore] = None,
        metadata: Optional[AppMetadata] = None
    ) -> "Dispatcher":
        """Build the whole wallet stack from configuration."""
        config = config or WalletConfig.from_env()
        if store is None:
            if config.store_path is not None:
                store = FileVaultStore(config.store_path)
            else:
                store = MemoryVaultStore()
        session = SessionLock(duration=config.auto_lock_minutes * 60)
        gateway = AuthorizationGateway(session, store, prompts, metadata)
        return cls(gateway)

    async def dispatch(self, message: Union[Request, dict]) -> Response:
        """Run a single request and return its response."""
        # idle time resets on every request, locked or not
        self.gateway.session.touch()
        try:
            request = message if isinstance(message, Request) else Request.model_validate(message)
            payload = request.typed_payload()
        except ValidationError as err:
            logger.warning("Invalid wallet request: %d error(s)", err.error_count())
            return Failure.from_error(
                InvalidRequest(f"Invalid request: {err.errors()[0]['msg']}")
            )
        try:
            result = await self._handlers[request.type](payload)
        except WalletError as err:
            logger.info(
                "Request %s failed: %s", request.type.value, err.kind.value
            )
            return Failure.from_error(err)
        except Exception:
            logger.exception("Request %s failed unexpectedly", request.type.value)
            raise
        return Success(result=result)
