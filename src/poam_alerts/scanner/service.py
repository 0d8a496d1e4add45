"""
Condition scanner - fetches task snapshots and turns rule matches into notifications.
"""

import logging
from datetime import datetime
from typing import Callable, List, Optional

from poam_alerts.core.models import Milestone, Task, flatten_milestones
from poam_alerts.core.systems import SystemContext
from poam_alerts.notifications.center import NotificationCenter
from poam_alerts.notifications.models import Notification, NotificationDraft
from poam_alerts.scanner.rules import DeadlineRules
from poam_alerts.sources.base import TaskSource, TaskSourceError

logger = logging.getLogger(__name__)


class ConditionScanner:
    """
    Scans tasks and milestones for deadline conditions.

    Each check either works on records supplied by the caller (scoped
    scan) or fetches the active system's snapshot (full scan). The only
    suspension point is the fetch; evaluation and storage run to
    completion afterwards. A failed fetch produces no notifications.
    """

    def __init__(
        self,
        center: NotificationCenter,
        source: TaskSource,
        systems: SystemContext,
        rules: Optional[DeadlineRules] = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        """
        Initialize condition scanner.

        Args:
            center: Notification center receiving matches
            source: Task snapshot source
            systems: Active system context
            rules: Deadline rules (default windows: 7 and 3 days)
            clock: Source of the evaluation time
        """
        self.center = center
        self.source = source
        self.systems = systems
        self.rules = rules or DeadlineRules()
        self.clock = clock

    async def fetch_snapshot(self, system_id: Optional[str] = None) -> Optional[List[Task]]:
        """
        Fetch a system's tasks.

        Args:
            system_id: System to fetch (default: the active system)

        Returns:
            Task list, or None when no system is active or the fetch failed
        """
        system_id = system_id or self.systems.current_system_id
        if not system_id:
            logger.debug("No active system, skipping snapshot fetch")
            return None

        try:
            tasks = await self.source.fetch_tasks(system_id)
        except TaskSourceError as e:
            logger.error(f"Failed to fetch tasks for system {system_id}: {e}")
            return None
        except Exception as e:
            logger.error(
                f"Unexpected error fetching tasks for system {system_id}: {e}",
                exc_info=True
            )
            return None

        logger.debug(f"Fetched {len(tasks)} tasks for system {system_id}")
        return tasks

    async def check_deadline_alerts(
        self,
        tasks: Optional[List[Task]] = None
    ) -> List[Notification]:
        """
        Check tasks for approaching and missed deadlines.

        Args:
            tasks: Tasks to check (default: fetch the active system's snapshot)

        Returns:
            Notifications stored by this check
        """
        if tasks is None:
            tasks = await self.fetch_snapshot()
            if tasks is None:
                return []

        return self._store(self.rules.evaluate_tasks(tasks, self.clock()))

    async def check_milestone_updates(
        self,
        milestones: Optional[List[Milestone]] = None
    ) -> List[Notification]:
        """
        Check milestones for approaching and missed due dates.

        Args:
            milestones: Flattened milestones (default: fetch the active system's snapshot)

        Returns:
            Notifications stored by this check
        """
        if milestones is None:
            tasks = await self.fetch_snapshot()
            if tasks is None:
                return []
            milestones = flatten_milestones(tasks)

        return self._store(self.rules.evaluate_milestones(milestones, self.clock()))

    async def scan_snapshot(self, system_id: Optional[str] = None) -> List[Notification]:
        """
        Run task and milestone rules over one fetched snapshot.

        Args:
            system_id: System to scan (default: the active system)

        Returns:
            Notifications stored by this scan
        """
        system_id = system_id or self.systems.current_system_id
        tasks = await self.fetch_snapshot(system_id)
        if tasks is None:
            return []

        now = self.clock()
        drafts = self.rules.evaluate_tasks(tasks, now)
        drafts.extend(self.rules.evaluate_milestones(flatten_milestones(tasks), now))
        stored = self._store(drafts)

        logger.info(
            f"Scanned {len(tasks)} tasks for system {system_id}: "
            f"{len(drafts)} conditions, {len(stored)} notifications stored"
        )
        return stored

    async def scan_task(self, task: Task) -> List[Notification]:
        """
        Scoped scan of one task and its milestones.

        Args:
            task: Task to check

        Returns:
            Notifications stored by this scan
        """
        now = self.clock()
        drafts = self.rules.evaluate_task(task, now)
        drafts.extend(self.rules.evaluate_milestones(task.flattened_milestones(), now))
        return self._store(drafts)

    def _store(self, drafts: List[NotificationDraft]) -> List[Notification]:
        stored = []
        for draft in drafts:
            notification = self.center.add(draft)
            if notification is not None:
                stored.append(notification)
        return stored
