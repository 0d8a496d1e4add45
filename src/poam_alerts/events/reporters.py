"""
Event reporters - turn task and application events into notifications.

Task mutation call sites report create/update/complete events here.
Task events also trigger a scoped deadline scan of the affected task.
"""

import logging
from typing import Dict, Optional, Tuple

from poam_alerts.core.models import COMPLETED_STATUS, Milestone, Task
from poam_alerts.events.models import SystemEvent, SystemEventType
from poam_alerts.notifications.center import NotificationCenter
from poam_alerts.notifications.models import (
    Notification,
    NotificationDraft,
    NotificationMetadata,
    NotificationSeverity,
    NotificationType,
)
from poam_alerts.scanner.service import ConditionScanner

logger = logging.getLogger(__name__)

# Event type -> (title on success, title on failure)
SYSTEM_EVENT_TITLES: Dict[SystemEventType, Tuple[str, str]] = {
    SystemEventType.IMPORT: ("Import Completed", "Import Failed"),
    SystemEventType.EXPORT: ("Export Completed", "Export Failed"),
    SystemEventType.BACKUP: ("Backup Completed", "Backup Failed"),
    SystemEventType.SYNC: ("Data Synchronized", "Sync Failed"),
    SystemEventType.ERROR: ("System Error", "System Error"),
}

IMPORT_EXPORT_EVENTS = (SystemEventType.IMPORT, SystemEventType.EXPORT)


class EventReporter:
    """
    Reports domain events as notifications.

    Usage:
        reporter = EventReporter(center, scanner)
        await reporter.notify_task_created(task)
        await reporter.notify_task_updated(task, previous_status="In Progress")
    """

    def __init__(self, center: NotificationCenter, scanner: ConditionScanner):
        """
        Initialize event reporter.

        Args:
            center: Notification center
            scanner: Scanner used for scoped re-scans
        """
        self.center = center
        self.scanner = scanner

    async def notify_task_created(self, task: Task) -> Optional[Notification]:
        """
        Report a newly created task, then scan it for deadline conditions.

        Args:
            task: Created task

        Returns:
            The creation notification, or None if system updates are disabled
        """
        notification = self.center.add(NotificationDraft(
            type=NotificationType.SYSTEM_STATUS,
            title="POAM Created",
            message=(
                f'New POAM "{task.title}" has been created with '
                f"{len(task.milestones)} milestones."
            ),
            severity=NotificationSeverity.SUCCESS,
            metadata=NotificationMetadata(poam_id=task.id, related_entity=task.title),
        ))

        await self._scan_task(task)
        return notification

    async def notify_task_updated(
        self,
        task: Task,
        previous_status: Optional[str] = None
    ) -> Optional[Notification]:
        """
        Report an updated task, then re-scan it for deadline conditions.

        Args:
            task: Task after the update
            previous_status: Status before the update, if known

        Returns:
            The update notification, or None if system updates are disabled
        """
        message = f'POAM "{task.title}" has been updated.'
        severity = NotificationSeverity.INFO

        if previous_status and previous_status != task.status:
            if task.status == COMPLETED_STATUS:
                message = f'POAM "{task.title}" has been marked as completed!'
                severity = NotificationSeverity.SUCCESS
            else:
                message = (
                    f'POAM "{task.title}" status changed from '
                    f"{previous_status} to {task.status}."
                )

        notification = self.center.add(NotificationDraft(
            type=NotificationType.SYSTEM_STATUS,
            title="POAM Updated",
            message=message,
            severity=severity,
            metadata=NotificationMetadata(poam_id=task.id, related_entity=task.title),
        ))

        await self._scan_task(task)
        return notification

    def notify_milestone_completed(self, milestone: Milestone) -> Optional[Notification]:
        """
        Report a milestone completion.

        The caller detects the completion transition; this only reports it.

        Args:
            milestone: Completed milestone (task back-references optional)

        Returns:
            The notification, or None if milestone notifications are disabled
        """
        parent = f' for POAM "{milestone.task_title}"' if milestone.task_title else ""
        return self.center.add(NotificationDraft(
            type=NotificationType.MILESTONE_COMPLETED,
            title="Milestone Completed",
            message=f'Milestone "{milestone.title}" has been marked as completed{parent}.',
            severity=NotificationSeverity.SUCCESS,
            metadata=NotificationMetadata(
                poam_id=milestone.task_id,
                milestone_id=milestone.id,
                related_entity=milestone.title,
            ),
        ))

    def notify_system_event(self, event: SystemEvent) -> Optional[Notification]:
        """
        Report an import/export/backup/sync outcome or a system error.

        Args:
            event: Application event

        Returns:
            The notification, or None if its type is disabled
        """
        success_title, failure_title = SYSTEM_EVENT_TITLES[event.type]

        if event.type == SystemEventType.ERROR or not event.success:
            title = failure_title
            severity = NotificationSeverity.ERROR
        else:
            title = success_title
            severity = NotificationSeverity.SUCCESS

        if event.type in IMPORT_EXPORT_EVENTS:
            notification_type = NotificationType.IMPORT_EXPORT
        else:
            notification_type = NotificationType.SYSTEM_STATUS

        message = event.message
        if event.details:
            message = f"{message} {event.details}"

        return self.center.add(NotificationDraft(
            type=notification_type,
            title=title,
            message=message,
            severity=severity,
            metadata=NotificationMetadata(related_entity=event.type.value),
        ))

    async def _scan_task(self, task: Task) -> None:
        # The reported task change has already happened; a failed scan must not undo it
        try:
            await self.scanner.scan_task(task)
        except Exception as e:
            logger.error(f"Scoped scan failed for POAM {task.id}: {e}", exc_info=True)
