"""
Deadline rules for tasks and milestones.

Pure evaluation: given a snapshot and the current time, decide which
deadline conditions hold and build the notification drafts for them.
"""

import math
from datetime import datetime, timedelta
from typing import List

from poam_alerts.core.models import Milestone, Task
from poam_alerts.notifications.models import (
    NotificationDraft,
    NotificationMetadata,
    NotificationSeverity,
    NotificationType,
)

DAY_SECONDS = 24 * 60 * 60

# Task priority -> severity of its deadline alert
PRIORITY_SEVERITY = {
    "High": NotificationSeverity.ERROR,
    "Medium": NotificationSeverity.WARNING,
}


def days_until(deadline: datetime, now: datetime) -> int:
    """Whole days remaining before a deadline, rounded up."""
    return math.ceil((deadline - now).total_seconds() / DAY_SECONDS)


def days_overdue(deadline: datetime, now: datetime) -> int:
    """Whole days elapsed since a deadline, rounded down."""
    return math.floor((now - deadline).total_seconds() / DAY_SECONDS)


def is_due_soon(deadline: datetime, now: datetime, window_days: int) -> bool:
    """True when ``now < deadline <= now + window``."""
    return now < deadline <= now + timedelta(days=window_days)


def is_overdue(deadline: datetime, now: datetime) -> bool:
    return deadline < now


class DeadlineRules:
    """
    Evaluates deadline and overdue conditions.

    Completed tasks and milestones never match. A record can match the
    due-soon rule or the overdue rule, never both.
    """

    def __init__(self, task_window_days: int = 7, milestone_window_days: int = 3):
        """
        Initialize deadline rules.

        Args:
            task_window_days: Lookahead for task deadline alerts
            milestone_window_days: Lookahead for milestone deadline alerts
        """
        self.task_window_days = task_window_days
        self.milestone_window_days = milestone_window_days

    def evaluate_task(self, task: Task, now: datetime) -> List[NotificationDraft]:
        """
        Evaluate one task.

        Args:
            task: Task to check
            now: Current time

        Returns:
            Zero or one draft
        """
        if task.is_completed:
            return []

        metadata = NotificationMetadata(poam_id=task.id, related_entity=task.title)

        if is_due_soon(task.end_date, now, self.task_window_days):
            return [NotificationDraft(
                type=NotificationType.DEADLINE_ALERT,
                title="POAM Deadline Approaching",
                message=(
                    f'"{task.title}" is due in {days_until(task.end_date, now)} day(s). '
                    f"Current status: {task.status}"
                ),
                severity=PRIORITY_SEVERITY.get(task.priority, NotificationSeverity.INFO),
                metadata=metadata,
            )]

        if is_overdue(task.end_date, now):
            return [NotificationDraft(
                type=NotificationType.OVERDUE_WARNING,
                title="POAM Overdue",
                message=(
                    f'"{task.title}" is {days_overdue(task.end_date, now)} day(s) overdue. '
                    f"Please update status or extend deadline."
                ),
                severity=NotificationSeverity.ERROR,
                metadata=metadata,
            )]

        return []

    def evaluate_milestone(self, milestone: Milestone, now: datetime) -> List[NotificationDraft]:
        """
        Evaluate one milestone.

        Args:
            milestone: Milestone to check (task back-references optional)
            now: Current time

        Returns:
            Zero or one draft
        """
        if milestone.is_completed:
            return []

        metadata = NotificationMetadata(
            poam_id=milestone.task_id,
            milestone_id=milestone.id,
            related_entity=milestone.title,
        )

        if is_due_soon(milestone.due_date, now, self.milestone_window_days):
            return [NotificationDraft(
                type=NotificationType.DEADLINE_ALERT,
                title="Milestone Due Soon",
                message=(
                    f'Milestone "{milestone.title}" is due in '
                    f"{days_until(milestone.due_date, now)} day(s). "
                    f"Current status: {milestone.status}"
                ),
                severity=NotificationSeverity.WARNING,
                metadata=metadata,
            )]

        if is_overdue(milestone.due_date, now):
            parent = f' (POAM: "{milestone.task_title}")' if milestone.task_title else ""
            return [NotificationDraft(
                type=NotificationType.OVERDUE_WARNING,
                title="Milestone Overdue",
                message=(
                    f'Milestone "{milestone.title}" is '
                    f"{days_overdue(milestone.due_date, now)} day(s) overdue{parent}."
                ),
                severity=NotificationSeverity.ERROR,
                metadata=metadata,
            )]

        return []

    def evaluate_tasks(self, tasks: List[Task], now: datetime) -> List[NotificationDraft]:
        """Evaluate every task in a snapshot, in snapshot order."""
        drafts: List[NotificationDraft] = []
        for task in tasks:
            drafts.extend(self.evaluate_task(task, now))
        return drafts

    def evaluate_milestones(
        self,
        milestones: List[Milestone],
        now: datetime
    ) -> List[NotificationDraft]:
        """Evaluate every milestone in a flattened list, in list order."""
        drafts: List[NotificationDraft] = []
        for milestone in milestones:
            drafts.extend(self.evaluate_milestone(milestone, now))
        return drafts
