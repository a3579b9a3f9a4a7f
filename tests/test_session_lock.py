"""
Tests for the session lock.

Tests cover:
- Possession semantics of unlock/lock
- Inactivity auto-lock driven by an injected clock
- Timer rescheduling on touch and the asyncio timer handle
"""
import asyncio

import pytest

from navigator_wallet.exceptions import Locked
from navigator_wallet.vault.session import SessionLock

MINUTE = 60


class TestUnlockLock:
    """Tests for the passphrase lifecycle."""

    def test_starts_locked(self):
        session = SessionLock()
        assert session.is_unlocked is False
        with pytest.raises(Locked):
            _ = session.passphrase

    def test_unlock_holds_passphrase(self):
        session = SessionLock()
        session.unlock("correct-seed")
        assert session.is_unlocked is True
        assert session.passphrase == "correct-seed"

    def test_unlock_does_not_validate(self):
        """Any passphrase is accepted, correctness is proven by a decrypt."""
        session = SessionLock()
        session.unlock("anything at all")
        assert session.is_unlocked is True

    def test_empty_passphrase_refused(self):
        session = SessionLock()
        with pytest.raises(ValueError):
            session.unlock("")

    def test_lock_clears_passphrase(self):
        session = SessionLock()
        session.unlock("correct-seed")
        session.lock()
        assert session.is_unlocked is False

    def test_destroy_clears_everything(self):
        session = SessionLock(duration=5 * MINUTE)
        session.unlock("correct-seed")
        session.destroy()
        assert session.is_unlocked is False
        assert session.duration == 0

    def test_negative_duration_refused(self):
        session = SessionLock()
        with pytest.raises(ValueError):
            session.duration = -1


class TestAutoLock:
    """Tests for inactivity auto-lock."""

    def test_zero_duration_never_locks(self, clock):
        """Duration 0 disables auto-lock whatever the idle time."""
        session = SessionLock(duration=0, clock=clock)
        session.unlock("correct-seed")
        session.touch()
        clock.advance(365 * 24 * 60 * MINUTE)
        assert session.is_unlocked is True

    def test_locks_after_duration(self, clock):
        session = SessionLock(duration=5 * MINUTE, clock=clock)
        session.unlock("correct-seed")
        clock.advance(5 * MINUTE)
        assert session.is_unlocked is False
        with pytest.raises(Locked):
            _ = session.passphrase

    def test_touch_resets_timer(self, clock):
        """Passphrase at t=0, request at 4min, still open at 8, locked at 10."""
        session = SessionLock(duration=5 * MINUTE, clock=clock)
        session.unlock("correct-seed")

        clock.advance(4 * MINUTE)
        session.touch()

        clock.advance(4 * MINUTE)
        assert session.is_unlocked is True

        clock.advance(2 * MINUTE)
        assert session.is_unlocked is False

    def test_touch_while_locked_is_harmless(self, clock):
        session = SessionLock(duration=5 * MINUTE, clock=clock)
        session.touch()
        assert session.is_unlocked is False

    def test_setting_zero_duration_cancels_pending_lock(self, clock):
        session = SessionLock(duration=5 * MINUTE, clock=clock)
        session.unlock("correct-seed")
        session.duration = 0
        clock.advance(10 * MINUTE)
        assert session.is_unlocked is True

    def test_touch_after_expiry_does_not_revive(self, clock):
        session = SessionLock(duration=MINUTE, clock=clock)
        session.unlock("correct-seed")
        clock.advance(2 * MINUTE)
        session.touch()
        assert session.is_unlocked is False

    async def test_timer_fires_on_event_loop(self):
        """With a running loop the passphrase is wiped by the timer itself."""
        session = SessionLock(duration=0.05)
        session.unlock("correct-seed")
        assert session._timer is not None
        await asyncio.sleep(0.2)
        assert session._passphrase is None
        assert session.is_unlocked is False

    async def test_touch_cancels_previous_timer(self):
        session = SessionLock(duration=60)
        session.unlock("correct-seed")
        first = session._timer
        session.touch()
        assert first.cancelled()
        assert session._timer is not first
        session.lock()
        assert session._timer is None
