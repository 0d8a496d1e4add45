"""
Active system (tenant) context.

Holds the currently selected system and notifies listeners when the
selection changes. Listeners are coroutine functions awaited in
registration order.
"""

import logging
from typing import Awaitable, Callable, List, Optional

from poam_alerts.core.models import System

logger = logging.getLogger(__name__)

SystemListener = Callable[[Optional[System]], Awaitable[None]]


class SystemContext:
    """
    Tracks the active system and fans out change notifications.
    """

    def __init__(self, system: Optional[System] = None):
        self._current: Optional[System] = system
        self._listeners: List[SystemListener] = []

    @property
    def current_system(self) -> Optional[System]:
        return self._current

    @property
    def current_system_id(self) -> Optional[str]:
        return self._current.id if self._current else None

    def subscribe(self, listener: SystemListener) -> None:
        """
        Register a listener for system changes.

        Args:
            listener: Coroutine function receiving the new system
        """
        self._listeners.append(listener)

    async def switch(self, system: Optional[System]) -> bool:
        """
        Select a new active system.

        Args:
            system: System to activate, or None to clear the selection

        Returns:
            True if the selection changed, False if it was already active
        """
        previous_id = self.current_system_id
        new_id = system.id if system else None

        self._current = system
        if previous_id == new_id:
            logger.debug(f"System {new_id} already active")
            return False

        logger.info(f"Active system changed: {previous_id} -> {new_id}")
        for listener in self._listeners:
            try:
                await listener(system)
            except Exception as e:
                logger.error(f"System change listener failed: {e}", exc_info=True)
        return True
