"""
Core data models for the POAM alerting engine.

Task and milestone snapshots arrive from the task data collaborator
in its wire format (camelCase keys, date strings). These models accept
that format and normalize every date to a naive local datetime so
rule arithmetic uses a single clock.
"""

from datetime import date, datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


COMPLETED_STATUS = "Completed"


def parse_datetime(value: Any) -> datetime:
    """
    Parse a date value from the task store.

    Accepts datetime, date, ``YYYY-MM-DD`` and ISO-8601 strings (a
    trailing ``Z`` is treated as UTC). Date-only values resolve to local
    midnight. Offset-aware values are converted to naive local time.

    Args:
        value: Raw date value

    Returns:
        Naive local datetime

    Raises:
        ValueError: If the value cannot be parsed
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            raise ValueError("Empty date string")
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        parsed = datetime.fromisoformat(text)
    else:
        raise ValueError(f"Unsupported date value: {value!r}")

    if parsed.tzinfo is not None:
        parsed = parsed.astimezone().replace(tzinfo=None)
    return parsed


class Milestone(BaseModel):
    """
    A sub-step of a task with its own status and due date.

    ``task_title`` and ``task_id`` are denormalized back-references,
    filled in when milestones are flattened for scanning.
    """

    model_config = ConfigDict(populate_by_name=True)

    id: str
    title: str
    status: str
    due_date: datetime = Field(alias="dueDate")
    description: str = ""
    task_title: Optional[str] = Field(default=None, alias="poamTitle")
    task_id: Optional[int] = Field(default=None, alias="poamId")

    @field_validator("due_date", mode="before")
    @classmethod
    def validate_due_date(cls, v: Any) -> datetime:
        return parse_datetime(v)

    @property
    def is_completed(self) -> bool:
        return self.status == COMPLETED_STATUS


class Task(BaseModel):
    """
    A trackable remediation item (POAM).

    Attributes:
        id: Task identifier in the task store
        title: Task title
        status: Workflow status (e.g. "Not Started", "In Progress", "Completed")
        priority: Priority ("High", "Medium", "Low")
        end_date: Scheduled completion date
        milestones: Milestones belonging to this task
    """

    model_config = ConfigDict(populate_by_name=True)

    id: int
    title: str
    status: str
    priority: str = "Low"
    end_date: datetime = Field(alias="endDate")
    start_date: Optional[datetime] = Field(default=None, alias="startDate")
    description: str = ""
    risk_level: Optional[str] = Field(default=None, alias="riskLevel")
    milestones: List[Milestone] = Field(default_factory=list)

    @field_validator("end_date", mode="before")
    @classmethod
    def validate_end_date(cls, v: Any) -> datetime:
        return parse_datetime(v)

    @field_validator("start_date", mode="before")
    @classmethod
    def validate_start_date(cls, v: Any) -> Optional[datetime]:
        if v is None or v == "":
            return None
        return parse_datetime(v)

    @property
    def is_completed(self) -> bool:
        return self.status == COMPLETED_STATUS

    def flattened_milestones(self) -> List[Milestone]:
        """Return this task's milestones with task back-references filled in."""
        return [
            m.model_copy(update={"task_title": self.title, "task_id": self.id})
            for m in self.milestones
        ]

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Task':
        """Create Task from a wire-format dictionary."""
        return cls.model_validate(data)


def flatten_milestones(tasks: List[Task]) -> List[Milestone]:
    """
    Flatten milestones of all tasks into one list.

    Args:
        tasks: Task snapshot

    Returns:
        Milestones carrying ``task_title``/``task_id``
    """
    milestones: List[Milestone] = []
    for task in tasks:
        milestones.extend(task.flattened_milestones())
    return milestones


class System(BaseModel):
    """An isolated data partition (tenant) whose tasks are scanned."""

    id: str
    name: str = ""

    def display_name(self) -> str:
        return self.name or self.id
