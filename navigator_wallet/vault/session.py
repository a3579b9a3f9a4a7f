"""
Session Lock — holds the unlock passphrase in memory and owns auto-lock.

The passphrase is set on unlock and cleared on lock, on destroy, when the
inactivity timer fires, and whenever a vault read fails to decrypt with it.
``is_unlocked`` is a possession check only; correctness of the passphrase is
proven by a successful decrypt elsewhere.

Security Note:
    Never log the passphrase. It is handed out only for a single
    encrypt/decrypt call through the ``passphrase`` property.
"""
import time
import asyncio
import logging
import threading
from typing import Callable, Optional

from ..exceptions import Locked

logger = logging.getLogger("navigator.wallet")


class SessionLock:
    """In-memory session passphrase with an inactivity timer.

    Args:
        duration: seconds of inactivity before locking, 0 disables auto-lock.
        clock: monotonic clock, injectable for tests.
    """

    def __init__(
        self,
        duration: float = 0,
        clock: Callable[[], float] = time.monotonic
    ):
        self._passphrase: Optional[str] = None
        self._duration = duration
        self._deadline: Optional[float] = None
        self._timer: Optional[asyncio.TimerHandle] = None
        self._clock = clock
        self._mutex = threading.Lock()

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def is_unlocked(self) -> bool:
        with self._mutex:
            self._expire_if_due()
            return self._passphrase is not None

    @property
    def passphrase(self) -> str:
        """The session passphrase. Raises Locked if none is held."""
        with self._mutex:
            self._expire_if_due()
            if self._passphrase is None:
                raise Locked()
            return self._passphrase

    @property
    def duration(self) -> float:
        return self._duration

    @duration.setter
    def duration(self, seconds: float) -> None:
        if seconds < 0:
            raise ValueError(f"Auto-lock duration cannot be negative: {seconds}")
        with self._mutex:
            self._duration = seconds
            if seconds == 0:
                self._cancel_timer()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def unlock(self, passphrase: str) -> None:
        """Hold the passphrase in memory and start the inactivity timer."""
        if not passphrase:
            raise ValueError("Passphrase cannot be empty")
        with self._mutex:
            self._passphrase = passphrase
        self.touch()
        logger.info("Wallet session unlocked")

    def lock(self) -> None:
        """Clear the passphrase immediately."""
        with self._mutex:
            was_unlocked = self._passphrase is not None
            self._clear()
        if was_unlocked:
            logger.info("Wallet session locked")

    def destroy(self) -> None:
        """Session teardown: clear everything and disable the timer."""
        with self._mutex:
            self._clear()
            self._duration = 0

    def touch(self) -> None:
        """Reset the inactivity timer.

        Called on every dispatched request, locked or not.
        """
        with self._mutex:
            self._expire_if_due()
            self._cancel_timer()
            if self._duration == 0 or self._passphrase is None:
                return
            self._deadline = self._clock() + self._duration
            try:
                loop = asyncio.get_running_loop()
            except RuntimeError:
                # no loop: the deadline is enforced lazily on access
                return
            self._timer = loop.call_later(self._duration, self._on_timeout)

    # ------------------------------------------------------------------
    # Internals, called with the mutex held
    # ------------------------------------------------------------------

    def _on_timeout(self) -> None:
        logger.info("Wallet session locked after %s seconds of inactivity", self._duration)
        with self._mutex:
            self._timer = None
            self._clear()

    def _expire_if_due(self) -> None:
        if self._deadline is not None and self._clock() >= self._deadline:
            logger.info("Wallet session expired after inactivity")
            self._clear()

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        self._deadline = None

    def _clear(self) -> None:
        self._cancel_timer()
        self._passphrase = None
