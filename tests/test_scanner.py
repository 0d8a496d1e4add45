"""
Tests for the condition scanner and event reporters.
"""

import asyncio
from datetime import timedelta

from poam_alerts.core.models import Milestone, Task
from poam_alerts.core.systems import SystemContext
from poam_alerts.events.models import SystemEvent, SystemEventType
from poam_alerts.events.reporters import EventReporter
from poam_alerts.notifications.models import NotificationSeverity, NotificationType
from poam_alerts.scanner.service import ConditionScanner
from poam_alerts.sources.base import TaskSource, TaskSourceError


class BrokenTaskSource(TaskSource):
    def __init__(self, error):
        self.error = error

    async def fetch_tasks(self, system_id):
        raise self.error


def make_task(now, task_id=1, days=3, status="In Progress", milestones=None):
    return Task(
        id=task_id,
        title=f"Task {task_id}",
        status=status,
        priority="High",
        end_date=now + timedelta(days=days),
        milestones=milestones or [],
    )


def make_milestone(now, days, status="Not Started"):
    return Milestone(
        id="m-1",
        title="Stage patches",
        status=status,
        due_date=now + timedelta(days=days),
    )


class TestConditionScanner:
    """Test scans against a task source."""

    def test_scan_snapshot(self, now, source, scanner, center):
        source.set_tasks("sys-1", [
            make_task(now, 1, days=3, milestones=[make_milestone(now, -2)]),
            make_task(now, 2, days=-5),
            make_task(now, 3, days=30),
        ])

        stored = asyncio.run(scanner.scan_snapshot())

        assert [n.type for n in stored] == [
            NotificationType.DEADLINE_ALERT,
            NotificationType.OVERDUE_WARNING,
            NotificationType.OVERDUE_WARNING,
        ]
        assert '(POAM: "Task 1")' in stored[2].message
        assert center.stats.total == 3
        assert source.fetch_count == 1

    def test_fetch_failure_produces_nothing(self, center, systems, now):
        scanner = ConditionScanner(
            center, BrokenTaskSource(TaskSourceError("unreachable")), systems, clock=lambda: now
        )

        assert asyncio.run(scanner.scan_snapshot()) == []
        assert asyncio.run(scanner.check_deadline_alerts()) == []
        assert asyncio.run(scanner.check_milestone_updates()) == []
        assert center.stats.total == 0

    def test_unexpected_fetch_error_is_contained(self, center, systems, now):
        scanner = ConditionScanner(
            center, BrokenTaskSource(RuntimeError("boom")), systems, clock=lambda: now
        )
        assert asyncio.run(scanner.scan_snapshot()) == []

    def test_no_active_system_is_noop(self, center, source, now):
        scanner = ConditionScanner(center, source, SystemContext(), clock=lambda: now)

        assert asyncio.run(scanner.check_deadline_alerts()) == []
        assert asyncio.run(scanner.check_milestone_updates()) == []
        assert source.fetch_count == 0

    def test_scoped_scan_without_active_system(self, center, source, now):
        scanner = ConditionScanner(center, source, SystemContext(), clock=lambda: now)

        stored = asyncio.run(scanner.check_deadline_alerts([make_task(now, days=-1)]))

        assert len(stored) == 1
        assert source.fetch_count == 0

    def test_check_milestone_updates_fetches_snapshot(self, now, source, scanner):
        source.set_tasks("sys-1", [
            make_task(now, 1, days=20, milestones=[make_milestone(now, 1)]),
        ])

        stored = asyncio.run(scanner.check_milestone_updates())

        assert len(stored) == 1
        assert stored[0].title == "Milestone Due Soon"
        assert stored[0].metadata.poam_id == 1

    def test_disabled_types_are_not_counted(self, now, store, source, scanner):
        store.update_preferences({"overdue_warnings": False})
        source.set_tasks("sys-1", [make_task(now, 1, days=-3), make_task(now, 2, days=2)])

        stored = asyncio.run(scanner.scan_snapshot())

        assert [n.type for n in stored] == [NotificationType.DEADLINE_ALERT]

    def test_repeated_scans_duplicate(self, now, source, scanner, center):
        source.set_tasks("sys-1", [make_task(now, days=-5)])

        asyncio.run(scanner.scan_snapshot())
        asyncio.run(scanner.scan_snapshot())

        assert center.stats.total == 2


class TestEventReporter:
    """Test task and system event reporting."""

    def test_task_created(self, now, center, scanner):
        reporter = EventReporter(center, scanner)
        task = make_task(now, 4, days=2, milestones=[make_milestone(now, 10)])

        notification = asyncio.run(reporter.notify_task_created(task))

        assert notification.title == "POAM Created"
        assert notification.severity == NotificationSeverity.SUCCESS
        assert notification.message == 'New POAM "Task 4" has been created with 1 milestones.'
        # Creation notice plus the scoped deadline alert
        assert center.stats.total == 2
        assert center.stats.by_type["deadline_alert"] == 1

    def test_task_completed(self, now, center, scanner):
        reporter = EventReporter(center, scanner)
        task = make_task(now, 4, days=-3, status="Completed")

        notification = asyncio.run(reporter.notify_task_updated(task, previous_status="In Progress"))

        assert notification.title == "POAM Updated"
        assert notification.message == 'POAM "Task 4" has been marked as completed!'
        assert notification.severity == NotificationSeverity.SUCCESS
        assert center.stats.total == 1

    def test_task_status_changed(self, now, center, scanner):
        reporter = EventReporter(center, scanner)
        task = make_task(now, 4, days=30, status="In Progress")

        notification = asyncio.run(reporter.notify_task_updated(task, previous_status="Not Started"))

        assert notification.message == (
            'POAM "Task 4" status changed from Not Started to In Progress.'
        )
        assert notification.severity == NotificationSeverity.INFO

    def test_task_updated_without_status_change(self, now, center, scanner):
        reporter = EventReporter(center, scanner)
        notification = asyncio.run(reporter.notify_task_updated(make_task(now, 4, days=30)))
        assert notification.message == 'POAM "Task 4" has been updated.'

    def test_scan_failure_keeps_report(self, now, center, scanner):
        async def explode(task):
            raise RuntimeError("scan failed")

        scanner.scan_task = explode
        reporter = EventReporter(center, scanner)

        notification = asyncio.run(reporter.notify_task_created(make_task(now)))

        assert notification is not None
        assert center.stats.total == 1

    def test_disabled_system_updates(self, now, store, center, scanner):
        store.update_preferences({"system_updates": False})
        reporter = EventReporter(center, scanner)

        notification = asyncio.run(reporter.notify_task_created(make_task(now, days=-2)))

        assert notification is None
        # The scoped scan still runs
        assert center.stats.by_type == {"overdue_warning": 1}

    def test_milestone_completed(self, now, center, scanner):
        reporter = EventReporter(center, scanner)
        milestone = make_milestone(now, 1, status="Completed").model_copy(
            update={"task_title": "Task 9", "task_id": 9}
        )

        notification = reporter.notify_milestone_completed(milestone)

        assert notification.type == NotificationType.MILESTONE_COMPLETED
        assert notification.title == "Milestone Completed"
        assert 'for POAM "Task 9"' in notification.message
        assert notification.metadata.milestone_id == "m-1"

    def test_system_events(self, center, scanner):
        reporter = EventReporter(center, scanner)

        imported = reporter.notify_system_event(SystemEvent(
            type=SystemEventType.IMPORT, message="Imported 15 POAMs.", success=True
        ))
        failed = reporter.notify_system_event(SystemEvent(
            type=SystemEventType.BACKUP, message="Backup failed.", details="Disk full."
        ))
        error = reporter.notify_system_event(SystemEvent(
            type=SystemEventType.ERROR, message="Database locked.", success=True
        ))

        assert imported.type == NotificationType.IMPORT_EXPORT
        assert imported.title == "Import Completed"
        assert imported.severity == NotificationSeverity.SUCCESS

        assert failed.type == NotificationType.SYSTEM_STATUS
        assert failed.title == "Backup Failed"
        assert failed.message == "Backup failed. Disk full."
        assert failed.severity == NotificationSeverity.ERROR

        assert error.title == "System Error"
        assert error.severity == NotificationSeverity.ERROR
