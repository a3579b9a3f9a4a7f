"""Navigator Wallet.

Session-gated encrypted vault of keys and identities, and the authorization
layer mediating what external domains may see or sign with them.
"""
from .version import (
    __title__,
    __description__,
    __version__,
    __author__,
    __author_email__,
    __license__
)
from .conf import WalletConfig
from .exceptions import ErrorKind, WalletError
from .models import (
    Vault,
    Keychain,
    Keypair,
    Identity,
    IdentityView,
    Permission,
    Network,
    HistoricEvent,
    HistoricEventType,
    SealedVault
)
from .prompts import Prompt, PromptType, Decision, PromptService
from .messages import MessageType, Request, Success, Failure
from .gateway import AuthorizationGateway, AppMetadata
from .dispatcher import Dispatcher
from .handler import WalletHandler

__all__ = (
    "__version__",
    "WalletConfig",
    "ErrorKind",
    "WalletError",
    "Vault",
    "Keychain",
    "Keypair",
    "Identity",
    "IdentityView",
    "Permission",
    "Network",
    "HistoricEvent",
    "HistoricEventType",
    "SealedVault",
    "Prompt",
    "PromptType",
    "Decision",
    "PromptService",
    "MessageType",
    "Request",
    "Success",
    "Failure",
    "AuthorizationGateway",
    "AppMetadata",
    "Dispatcher",
    "WalletHandler",
)
