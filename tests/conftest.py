"""Shared fixtures for the wallet tests."""
import os

# resolved once by the codec at import time, keep key derivation fast
os.environ.setdefault("WALLET_KDF_ITERATIONS", "1000")

import pytest  # noqa: E402

from navigator_wallet.dispatcher import Dispatcher  # noqa: E402
from navigator_wallet.gateway import AuthorizationGateway  # noqa: E402
from navigator_wallet.models import Identity, Keypair, Network  # noqa: E402
from navigator_wallet.prompts import Decision, PromptType  # noqa: E402
from navigator_wallet.signing import generate_private_key, public_key_of  # noqa: E402
from navigator_wallet.vault.session import SessionLock  # noqa: E402
from navigator_wallet.vault.storage import MemoryVaultStore  # noqa: E402
from navigator_wallet.vault.updater import UpdateCycle  # noqa: E402

PASSPHRASE = "correct-seed"

PASSIVE_PROMPTS = (PromptType.LOCKED, PromptType.UPDATE_VERSION)


class FakeClock:
    """Monotonic clock driven by the test."""

    def __init__(self):
        self.now = 0.0

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakePrompts:
    """Prompt service answering with queued decisions.

    Passive notices are recorded but never consume a queued decision.
    """

    def __init__(self):
        self.opened = []
        self.decisions = []

    def answer(self, decision: Decision) -> None:
        self.decisions.append(decision)

    async def open(self, prompt):
        self.opened.append(prompt)
        if prompt.type in PASSIVE_PROMPTS or not self.decisions:
            return Decision.rejected()
        return self.decisions.pop(0)

    def of_type(self, prompt_type: PromptType) -> list:
        return [p for p in self.opened if p.type == prompt_type]


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store():
    return MemoryVaultStore()


@pytest.fixture
def session():
    return SessionLock()


@pytest.fixture
def cycle(store, session):
    return UpdateCycle(store, session)


@pytest.fixture
def prompts():
    return FakePrompts()


@pytest.fixture
def gateway(session, store, prompts):
    return AuthorizationGateway(session, store, prompts)


@pytest.fixture
def dispatcher(gateway):
    return Dispatcher(gateway)


@pytest.fixture
def network():
    return Network(host="nodes.example.com", port=8888)


@pytest.fixture
def identity_private_key():
    return generate_private_key()


@pytest.fixture
def identity(identity_private_key, network):
    return Identity(
        name="alice",
        public_key=public_key_of(identity_private_key),
        private_key=identity_private_key,
        fields={"email": "alice@example.com", "country": "CL", "phone": "555-0100"},
        accounts={network.unique_key: {"name": "alice", "authority": "active"}},
    )


@pytest.fixture
def keypair_private_key():
    return generate_private_key()


@pytest.fixture
def keypair(keypair_private_key):
    return Keypair(
        name="savings",
        public_key=public_key_of(keypair_private_key),
        private_key=keypair_private_key,
    )


@pytest.fixture
async def wallet(gateway, identity, keypair):
    """Unlocked gateway whose vault holds one identity and one keypair."""
    await gateway.set_passphrase(PASSPHRASE)
    vault = await gateway.load_vault()
    vault.keychain.identities.append(identity)
    vault.keychain.keypairs.append(keypair)
    await gateway.update_vault(vault)
    return gateway
