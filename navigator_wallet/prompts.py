"""
Prompts — contract with the user-interaction layer.

The wallet never renders anything. It hands a Prompt to a PromptService and
awaits the user's Decision. Passive notices (locked wallet, version update)
are fired without waiting for the answer.
"""
import asyncio
import logging
from enum import Enum
from typing import Any, Optional, Protocol

from pydantic import Field

from .models import Network, WalletModel

logger = logging.getLogger("navigator.wallet")


class PromptType(str, Enum):
    LOCKED = "locked"
    REQUEST_IDENTITY = "request-identity"
    REQUEST_SIGNATURE = "request-signature"
    REQUEST_ADD_NETWORK = "request-add-network"
    UPDATE_VERSION = "update-version"


class Prompt(WalletModel):
    type: PromptType
    domain: str = ""
    network: Network = Field(default_factory=Network)
    data: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def wallet_is_locked(cls) -> "Prompt":
        return cls(type=PromptType.LOCKED)


class Decision(WalletModel):
    approved: bool = False
    # public key of the identity the user picked, for identity requests
    public_key: Optional[str] = None
    # keep a permission so the same request is not prompted again
    remember: bool = True

    @classmethod
    def rejected(cls) -> "Decision":
        return cls(approved=False)


class PromptService(Protocol):
    async def open(self, prompt: Prompt) -> Decision:
        ...


class NoticeBoard:
    """Fires passive prompts in the background.

    Keeps a reference to each pending task until it finishes, failures are
    logged and never reach the request that triggered the notice.
    """

    def __init__(self, prompts: PromptService):
        self._prompts = prompts
        self._tasks: set[asyncio.Task] = set()

    def notify(self, prompt: Prompt) -> asyncio.Task:
        task = asyncio.create_task(self._prompts.open(prompt))
        self._tasks.add(task)
        task.add_done_callback(self._done)
        return task

    def _done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.error(
                "Notification prompt failed: %s", task.exception()
            )

    async def drain(self) -> None:
        """Wait until every pending notice has been delivered."""
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)
