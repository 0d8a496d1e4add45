"""
Scan scheduler - decides when comprehensive checks run.

Checks run once whenever the active system changes (including the first
selection) and on manual request. There is no periodic background scan;
conditions that cross a threshold between checks surface at the next
check or task event.
"""

import asyncio
import logging
from datetime import datetime
from typing import Callable, Dict, List, Optional

from poam_alerts.core.models import System
from poam_alerts.core.systems import SystemContext
from poam_alerts.notifications.models import Notification
from poam_alerts.scanner.service import ConditionScanner

logger = logging.getLogger(__name__)


class ScanScheduler:
    """
    Runs comprehensive checks for the active system.

    A check requested while another check for the same system is still
    running joins that check instead of starting a second one.
    """

    def __init__(
        self,
        scanner: ConditionScanner,
        systems: SystemContext,
        clock: Callable[[], datetime] = datetime.now,
    ):
        """
        Initialize scan scheduler.

        Args:
            scanner: Condition scanner
            systems: Active system context
            clock: Source of the last-check timestamp
        """
        self.scanner = scanner
        self.systems = systems
        self.clock = clock
        self.last_check_time: Optional[datetime] = None
        self._in_flight: Dict[str, asyncio.Task] = {}
        self._started = False

    async def start(self) -> None:
        """
        Subscribe to system changes and check the current system, if any.

        Calling start more than once has no further effect.
        """
        if self._started:
            return
        self._started = True

        self.systems.subscribe(self.on_system_changed)
        logger.info("Scan scheduler started (checks on system change and on demand)")

        if self.systems.current_system is not None:
            await self.perform_comprehensive_check()

    async def on_system_changed(self, system: Optional[System]) -> None:
        """Run one comprehensive check for a newly selected system."""
        if system is None:
            return
        logger.info(f"System changed to {system.display_name()}, running comprehensive check")
        await self.perform_comprehensive_check()

    async def perform_comprehensive_check(self) -> List[Notification]:
        """
        Scan all tasks and milestones of the active system.

        Records the invocation time as the last check time. Never raises.

        Returns:
            Notifications stored by the check (shared with joined callers)
        """
        system_id = self.systems.current_system_id
        if not system_id:
            logger.debug("No active system, skipping comprehensive check")
            return []

        self.last_check_time = self.clock()

        running = self._in_flight.get(system_id)
        if running is not None and not running.done():
            logger.info(f"Comprehensive check already running for system {system_id}, joining it")
            return await asyncio.shield(running)

        logger.info(f"Performing comprehensive notification check for system: {system_id}")
        task = asyncio.ensure_future(self._run_check(system_id))
        self._in_flight[system_id] = task
        task.add_done_callback(lambda t: self._clear_in_flight(system_id, t))

        return await asyncio.shield(task)

    def is_checking(self, system_id: Optional[str] = None) -> bool:
        """Whether a comprehensive check is running for a system (default: active)."""
        system_id = system_id or self.systems.current_system_id
        running = self._in_flight.get(system_id) if system_id else None
        return running is not None and not running.done()

    async def _run_check(self, system_id: str) -> List[Notification]:
        try:
            stored = await self.scanner.scan_snapshot(system_id)
        except Exception as e:
            logger.error(f"Comprehensive check failed for system {system_id}: {e}", exc_info=True)
            return []

        logger.info(f"Comprehensive notification check completed: {len(stored)} notifications")
        return stored

    def _clear_in_flight(self, system_id: str, task: asyncio.Task) -> None:
        if self._in_flight.get(system_id) is task:
            del self._in_flight[system_id]
