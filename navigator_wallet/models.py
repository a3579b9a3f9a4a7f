"""Wallet data model.

The Vault is the single persisted aggregate. Everything below it is owned by
the Vault and persisted with it. Private keys on Keypair and Identity are
field-encrypted and stay encrypted after the document itself is opened.
"""
import time
import hashlib
from enum import Enum
from typing import Any, Optional

from pydantic import (
    BaseModel,
    Field,
    ValidationError,
    computed_field,
    field_validator
)
from pydantic.alias_generators import to_camel

from .exceptions import DecryptionError
from .vault.crypto import (
    encrypt,
    decrypt,
    encrypt_field,
    decrypt_field,
    is_encrypted_field
)


def now_ms() -> int:
    return int(time.time() * 1000)


class WalletModel(BaseModel):
    """Base model: snake_case attributes, camelCase on the wire."""

    model_config = {
        "alias_generator": to_camel,
        "populate_by_name": True,
    }

    def to_json(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)

    @classmethod
    def from_json(cls, data: Any):
        return cls.model_validate(data)


class Network(WalletModel):
    host: str = ""
    port: int = 0

    @property
    def unique_key(self) -> str:
        return f"{self.host}:{self.port}"


class Keypair(WalletModel):
    name: str = ""
    public_key: str
    private_key: str = ""

    @property
    def is_encrypted(self) -> bool:
        return is_encrypted_field(self.private_key)

    def encrypt(self, passphrase: str) -> None:
        self.private_key = encrypt_field(self.private_key, passphrase)

    def decrypt(self, passphrase: str) -> None:
        self.private_key = decrypt_field(self.private_key, passphrase)


class IdentityView(WalletModel):
    """What a domain gets to see of an Identity."""
    name: str
    public_key: str
    fields: dict[str, Any] = Field(default_factory=dict)
    account: Optional[Any] = None


class Identity(WalletModel):
    name: str = ""
    public_key: str
    private_key: str = ""
    fields: dict[str, Any] = Field(default_factory=dict)
    # network unique key -> account on that network
    accounts: dict[str, Any] = Field(default_factory=dict)

    @property
    def is_encrypted(self) -> bool:
        return is_encrypted_field(self.private_key)

    def encrypt(self, passphrase: str) -> None:
        self.private_key = encrypt_field(self.private_key, passphrase)

    def decrypt(self, passphrase: str) -> None:
        self.private_key = decrypt_field(self.private_key, passphrase)

    def as_only_required_fields(
        self,
        fields: list[str],
        network: Optional[Network] = None
    ) -> IdentityView:
        """Reduce the identity to the requested fields.

        The private key is never part of the view, neither are profile fields
        outside of ``fields``. The account is the one bound to ``network``.
        """
        account = None
        if network is not None:
            account = self.accounts.get(network.unique_key)
        return IdentityView(
            name=self.name,
            public_key=self.public_key,
            fields={k: self.fields[k] for k in fields if k in self.fields},
            account=account,
        )


class Permission(WalletModel):
    domain: str
    network: Network = Field(default_factory=Network)
    public_key: str
    fields: list[str] = Field(default_factory=list)
    timestamp: int = Field(default_factory=now_ms)

    @computed_field
    @property
    def checksum(self) -> str:
        material = "|".join([
            self.domain,
            self.network.unique_key,
            self.public_key,
            ",".join(sorted(set(self.fields))),
        ])
        return hashlib.sha256(material.encode("utf-8")).hexdigest()

    def matches(self, domain: str, network: Network) -> bool:
        return (
            self.domain == domain
            and self.network.unique_key == network.unique_key
        )


class HistoricEventType(str, Enum):
    PROVIDED_IDENTITY = "provided_identity"
    SIGNED_TRANSACTION = "signed_transaction"
    ADDED_NETWORK = "added_network"


class HistoricEvent(WalletModel):
    type: HistoricEventType
    data: dict[str, Any] = Field(default_factory=dict)
    timestamp: int = Field(default_factory=now_ms)


class Settings(WalletModel):
    # minutes of inactivity before locking, 0 disables auto-lock
    inactivity_interval: int = Field(default=0, ge=0)
    networks: list[Network] = Field(default_factory=list)

    @field_validator("networks")
    @classmethod
    def unique_networks(cls, v: list[Network]) -> list[Network]:
        seen = set()
        networks = []
        for network in v:
            if network.unique_key not in seen:
                seen.add(network.unique_key)
                networks.append(network)
        return networks

    def has_network(self, network: Network) -> bool:
        return any(n.unique_key == network.unique_key for n in self.networks)

    def add_network(self, network: Network) -> bool:
        if self.has_network(network):
            return False
        self.networks.insert(0, network)
        return True


class Keychain(WalletModel):
    keypairs: list[Keypair] = Field(default_factory=list)
    identities: list[Identity] = Field(default_factory=list)
    permissions: list[Permission] = Field(default_factory=list)

    @field_validator("permissions")
    @classmethod
    def unique_permissions(cls, v: list[Permission]) -> list[Permission]:
        seen = set()
        permissions = []
        for permission in v:
            if permission.checksum not in seen:
                seen.add(permission.checksum)
                permissions.append(permission)
        return permissions

    def find_keypair(self, public_key: str) -> Optional[Keypair]:
        return next(
            (k for k in self.keypairs if k.public_key == public_key), None
        )

    def find_identity(self, public_key: str) -> Optional[Identity]:
        return next(
            (i for i in self.identities if i.public_key == public_key), None
        )

    def has_permission(self, checksum: str) -> bool:
        return any(p.checksum == checksum for p in self.permissions)

    def encrypt_keys(self, passphrase: str) -> None:
        """Field-encrypt every private key not yet encrypted."""
        for keypair in self.keypairs:
            keypair.encrypt(passphrase)
        for identity in self.identities:
            identity.encrypt(passphrase)


class SealedVault(WalletModel):
    """The persisted form of a Vault: one opaque ciphertext."""
    version: int = 1
    ciphertext: str

    def open(self, passphrase: str) -> "Vault":
        """Decrypt the document back into a Vault.

        Raises:
            DecryptionError: wrong passphrase, or contents that are not a Vault.
        """
        payload = decrypt(self.ciphertext, passphrase)
        try:
            return Vault.from_json(payload)
        except ValidationError as err:
            raise DecryptionError("Decrypted document is not a vault") from err


class Vault(WalletModel):
    settings: Settings = Field(default_factory=Settings)
    keychain: Keychain = Field(default_factory=Keychain)
    histories: list[HistoricEvent] = Field(default_factory=list)

    def seal(self, passphrase: str) -> SealedVault:
        return SealedVault(ciphertext=encrypt(self.to_json(), passphrase))

    def add_history(self, event: HistoricEvent) -> None:
        self.histories.insert(0, event)


class SignatureResult(WalletModel):
    signatures: list[str] = Field(default_factory=list)
    returned_fields: Optional[IdentityView] = None
