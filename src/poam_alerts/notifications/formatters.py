"""
Notification formatters - human-readable rendering and sample data.
"""

import logging
from datetime import datetime
from typing import List, Optional

from poam_alerts.notifications.models import (
    Notification,
    NotificationDraft,
    NotificationMetadata,
    NotificationSeverity,
    NotificationType,
)

logger = logging.getLogger(__name__)

SEVERITY_MARKERS = {
    NotificationSeverity.INFO: "i",
    NotificationSeverity.WARNING: "!",
    NotificationSeverity.ERROR: "x",
    NotificationSeverity.SUCCESS: "+",
}


def format_relative_time(timestamp: Optional[datetime], now: Optional[datetime] = None) -> str:
    """
    Format a timestamp relative to now.

    Args:
        timestamp: Instant to describe (None renders as "never")
        now: Reference instant (default: current time)

    Returns:
        "just now", "<n>m ago", "<n>h ago" or "<n>d ago"
    """
    if timestamp is None:
        return "never"
    if now is None:
        now = datetime.now()

    elapsed = int((now - timestamp).total_seconds())
    minutes = elapsed // 60
    hours = minutes // 60
    days = hours // 24

    if days > 0:
        return f"{days}d ago"
    if hours > 0:
        return f"{hours}h ago"
    if minutes > 0:
        return f"{minutes}m ago"
    return "just now"


def format_notification_line(notification: Notification, now: Optional[datetime] = None) -> str:
    """
    Render a notification as a single line for terminal output.

    Args:
        notification: Notification to render
        now: Reference instant for the relative time

    Returns:
        e.g. "* [x] POAM Overdue - "Patch servers" is 5 day(s) overdue. (2h ago)"
    """
    unread = "*" if not notification.is_read else " "
    marker = SEVERITY_MARKERS.get(notification.severity, "?")
    when = format_relative_time(notification.timestamp, now)
    return f"{unread} [{marker}] {notification.title} - {notification.message} ({when})"


def sample_drafts() -> List[NotificationDraft]:
    """
    Build one sample notification of each type.

    Returns:
        Drafts suitable for seeding a demo store
    """
    return [
        NotificationDraft(
            type=NotificationType.DEADLINE_ALERT,
            title="POAM Deadline Approaching",
            message="Security Assessment POAM is due in 3 days. Current status: In Progress",
            severity=NotificationSeverity.WARNING,
            metadata=NotificationMetadata(poam_id=1, related_entity="Security Assessment"),
        ),
        NotificationDraft(
            type=NotificationType.MILESTONE_COMPLETED,
            title="Milestone Completed",
            message="Initial Risk Assessment milestone has been completed for Network Security POAM.",
            severity=NotificationSeverity.SUCCESS,
            metadata=NotificationMetadata(
                poam_id=2,
                milestone_id="milestone-1",
                related_entity="Initial Risk Assessment",
            ),
        ),
        NotificationDraft(
            type=NotificationType.OVERDUE_WARNING,
            title="POAM Overdue",
            message="Compliance Review POAM is 5 days overdue. Please update status or extend deadline.",
            severity=NotificationSeverity.ERROR,
            metadata=NotificationMetadata(poam_id=3, related_entity="Compliance Review"),
        ),
        NotificationDraft(
            type=NotificationType.SYSTEM_STATUS,
            title="Backup Completed",
            message="Weekly data backup completed successfully. 127 POAMs and 45 milestones backed up.",
            severity=NotificationSeverity.SUCCESS,
            metadata=NotificationMetadata(related_entity="backup"),
        ),
        NotificationDraft(
            type=NotificationType.IMPORT_EXPORT,
            title="Import Completed",
            message='Successfully imported 15 POAMs from Excel file "Q4_Security_Assessment.xlsx".',
            severity=NotificationSeverity.SUCCESS,
            metadata=NotificationMetadata(related_entity="Q4_Security_Assessment.xlsx"),
        ),
    ]


def create_sample_notifications(center) -> int:
    """
    Seed a notification center with one sample of each type.

    Args:
        center: NotificationCenter to seed

    Returns:
        Number of samples stored (disabled types are dropped)
    """
    stored = 0
    for draft in sample_drafts():
        if center.add(draft) is not None:
            stored += 1
    logger.info(f"Seeded {stored} sample notifications")
    return stored
