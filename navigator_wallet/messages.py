"""
Messages — the request/response contract with callers.

Requests are ``{"type": <MessageType>, "payload": ...}``, each type has its
own payload model. Responses are either the plain success value or an error
object ``{"isError": true, "type": <ErrorKind>, "message": "..."}``.
"""
from enum import Enum
from typing import Any, Literal, Union

from pydantic import Field

from .exceptions import ErrorKind, WalletError
from .models import Network, Vault, WalletModel


class MessageType(str, Enum):
    SET_PASSPHRASE = "set-passphrase"
    SET_AUTO_LOCK_DURATION = "set-auto-lock-duration"
    CHECK_UNLOCKED = "check-unlocked"
    LOAD_VAULT = "load-vault"
    UPDATE_VAULT = "update-vault"
    REVEAL_PRIVATE_KEY = "reveal-private-key-for-public-key"
    DESTROY_VAULT = "destroy-vault"
    RESOLVE_IDENTITY = "resolve-identity-from-permission"
    GET_OR_REQUEST_IDENTITY = "get-or-request-identity"
    REQUEST_SIGNATURE = "request-signature"
    REQUEST_ADD_NETWORK = "request-add-network"
    GET_APP_VERSION = "get-app-version"
    REQUEST_VERSION_UPDATE = "request-version-update"
    AUTHENTICATE = "authenticate"
    CHANGE_PASSPHRASE = "change-passphrase"


# ---------------------------------------------------------------------------
# Payloads
# ---------------------------------------------------------------------------

class NoPayload(WalletModel):
    pass


class PassphrasePayload(WalletModel):
    passphrase: str = Field(min_length=1)


class AutoLockPayload(WalletModel):
    minutes: int = Field(ge=0)


class UpdateVaultPayload(WalletModel):
    vault: Vault


class PublicKeyPayload(WalletModel):
    public_key: str


class DomainPayload(WalletModel):
    domain: str


class NetworkPayload(WalletModel):
    domain: str
    network: Network


class IdentityRequestPayload(WalletModel):
    domain: str
    network: Network
    fields: list[str] = Field(default_factory=list)


class SignatureRequestPayload(WalletModel):
    domain: str
    network: Network
    data: str
    public_keys: list[str] = Field(min_length=1)
    fields: list[str] = Field(default_factory=list)


class AuthenticatePayload(WalletModel):
    public_key: str
    domain: str


PAYLOADS: dict[MessageType, type[WalletModel]] = {
    MessageType.SET_PASSPHRASE: PassphrasePayload,
    MessageType.SET_AUTO_LOCK_DURATION: AutoLockPayload,
    MessageType.CHECK_UNLOCKED: NoPayload,
    MessageType.LOAD_VAULT: NoPayload,
    MessageType.UPDATE_VAULT: UpdateVaultPayload,
    MessageType.REVEAL_PRIVATE_KEY: PublicKeyPayload,
    MessageType.DESTROY_VAULT: NoPayload,
    MessageType.RESOLVE_IDENTITY: NetworkPayload,
    MessageType.GET_OR_REQUEST_IDENTITY: IdentityRequestPayload,
    MessageType.REQUEST_SIGNATURE: SignatureRequestPayload,
    MessageType.REQUEST_ADD_NETWORK: NetworkPayload,
    MessageType.GET_APP_VERSION: NoPayload,
    MessageType.REQUEST_VERSION_UPDATE: DomainPayload,
    MessageType.AUTHENTICATE: AuthenticatePayload,
    MessageType.CHANGE_PASSPHRASE: PassphrasePayload,
}


class Request(WalletModel):
    type: MessageType
    payload: Any = None

    def typed_payload(self) -> WalletModel:
        """Validate the raw payload against the model of this message type."""
        return PAYLOADS[self.type].model_validate(self.payload or {})


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------

class Success(WalletModel):
    result: Any = None

    def to_wire(self) -> Any:
        if isinstance(self.result, WalletModel):
            return self.result.to_json()
        return self.result


class Failure(WalletModel):
    is_error: Literal[True] = True
    type: ErrorKind
    message: str

    @classmethod
    def from_error(cls, err: WalletError) -> "Failure":
        return cls(type=err.kind, message=err.message)

    def to_wire(self) -> dict:
        return self.to_json()


Response = Union[Success, Failure]
