"""
Task snapshot sources.

A source returns the current task list (with nested milestones) for one
system. Any failure surfaces as TaskSourceError.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, List, Union

from pydantic import ValidationError

from poam_alerts.core.models import Task

logger = logging.getLogger(__name__)


class TaskSourceError(Exception):
    """Raised when a task snapshot cannot be fetched or parsed."""
    pass


class TaskSource(ABC):
    """Base class for task snapshot sources."""

    @abstractmethod
    async def fetch_tasks(self, system_id: str) -> List[Task]:
        """
        Fetch the task snapshot for a system.

        Args:
            system_id: System identifier

        Returns:
            Tasks with nested milestones

        Raises:
            TaskSourceError: If the snapshot cannot be fetched
        """
        pass

    async def close(self) -> None:
        """Release any held resources."""
        pass


def parse_tasks(records: Iterable[Dict[str, Any]], origin: str) -> List[Task]:
    """
    Validate raw task records.

    Args:
        records: Wire-format task dictionaries
        origin: Description of where the records came from (for errors)

    Returns:
        Parsed tasks

    Raises:
        TaskSourceError: If any record is invalid
    """
    try:
        return [Task.model_validate(record) for record in records]
    except (ValidationError, TypeError) as e:
        raise TaskSourceError(f"Invalid task data from {origin}: {e}") from e


class StaticTaskSource(TaskSource):
    """
    In-memory source, keyed by system ID.

    Usage:
        source = StaticTaskSource({"sys-1": [task_a, task_b]})
        tasks = await source.fetch_tasks("sys-1")
    """

    def __init__(self, tasks_by_system: Dict[str, List[Union[Task, Dict[str, Any]]]] = None):
        self.tasks_by_system: Dict[str, List[Task]] = {}
        for system_id, tasks in (tasks_by_system or {}).items():
            self.set_tasks(system_id, tasks)

    def set_tasks(self, system_id: str, tasks: List[Union[Task, Dict[str, Any]]]) -> None:
        """Replace the snapshot for a system."""
        self.tasks_by_system[system_id] = [
            t if isinstance(t, Task) else Task.model_validate(t) for t in tasks
        ]

    async def fetch_tasks(self, system_id: str) -> List[Task]:
        return list(self.tasks_by_system.get(system_id, []))
