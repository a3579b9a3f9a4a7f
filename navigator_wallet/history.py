"""Append-only audit trail kept inside the vault."""
import logging
from typing import Any, Optional

from .models import HistoricEvent, HistoricEventType
from .vault.updater import UpdateCycle

logger = logging.getLogger("navigator.wallet")


class HistoryLog:

    def __init__(self, cycle: UpdateCycle):
        self._cycle = cycle

    async def append(
        self,
        event_type: HistoricEventType,
        data: Optional[dict[str, Any]] = None
    ) -> HistoricEvent:
        """Record an event as the most recent entry.

        Existing entries are never touched.
        """
        event = HistoricEvent(type=event_type, data=data or {})
        async with self._cycle.transaction() as vault:
            vault.add_history(event)
        logger.debug("History event recorded: %s", event_type.value)
        return event
