"""
Notification data models.
"""

from dataclasses import asdict, dataclass, field, fields
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from poam_alerts.core.models import parse_datetime


class NotificationType(str, Enum):
    """Kinds of notifications produced by the engine."""
    DEADLINE_ALERT = "deadline_alert"
    MILESTONE_COMPLETED = "milestone_completed"
    OVERDUE_WARNING = "overdue_warning"
    SYSTEM_STATUS = "system_status"
    IMPORT_EXPORT = "import_export"


class NotificationSeverity(str, Enum):
    """Severity levels for notifications."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    SUCCESS = "success"


# View filters: "all", "unread", or one of the notification types
FILTER_ALL = "all"
FILTER_UNREAD = "unread"
NOTIFICATION_FILTERS = (FILTER_ALL, FILTER_UNREAD) + tuple(t.value for t in NotificationType)


@dataclass(frozen=True)
class NotificationMetadata:
    """
    Back-references to the record that triggered a notification.

    Purely informational; the engine never dereferences these.
    """
    poam_id: Optional[int] = None
    milestone_id: Optional[str] = None
    related_entity: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary, omitting unset references."""
        return {k: v for k, v in asdict(self).items() if v is not None}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'NotificationMetadata':
        """Create metadata from snake_case or camelCase keys."""
        return cls(
            poam_id=data.get("poam_id", data.get("poamId")),
            milestone_id=data.get("milestone_id", data.get("milestoneId")),
            related_entity=data.get("related_entity", data.get("relatedEntity")),
        )


@dataclass(frozen=True)
class NotificationDraft:
    """
    A notification before the store assigns id, timestamp and read state.

    Attributes:
        type: Notification type (selects the preference gate)
        title: Short title
        message: Notification body
        severity: Severity level
        action_url: Optional navigation hint
        metadata: Optional back-references
    """
    type: NotificationType
    title: str
    message: str
    severity: NotificationSeverity = NotificationSeverity.INFO
    action_url: Optional[str] = None
    metadata: Optional[NotificationMetadata] = None


@dataclass(frozen=True)
class Notification:
    """
    A stored notification.

    Records are immutable; marking one read produces a copy with
    ``is_read`` set.
    """
    id: str
    type: NotificationType
    title: str
    message: str
    timestamp: datetime
    severity: NotificationSeverity
    is_read: bool = False
    action_url: Optional[str] = None
    metadata: Optional[NotificationMetadata] = None

    @classmethod
    def from_draft(
        cls,
        draft: NotificationDraft,
        notification_id: str,
        timestamp: datetime
    ) -> 'Notification':
        """Materialize a draft with its assigned identity."""
        return cls(
            id=notification_id,
            type=draft.type,
            title=draft.title,
            message=draft.message,
            timestamp=timestamp,
            severity=draft.severity,
            is_read=False,
            action_url=draft.action_url,
            metadata=draft.metadata,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        data: Dict[str, Any] = {
            "id": self.id,
            "type": self.type.value,
            "title": self.title,
            "message": self.message,
            "timestamp": self.timestamp.isoformat(),
            "is_read": self.is_read,
            "severity": self.severity.value,
        }
        if self.action_url is not None:
            data["action_url"] = self.action_url
        if self.metadata is not None:
            data["metadata"] = self.metadata.to_dict()
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Notification':
        """Create Notification from dictionary."""
        metadata = data.get("metadata")
        return cls(
            id=data["id"],
            type=NotificationType(data["type"]),
            title=data["title"],
            message=data["message"],
            timestamp=parse_datetime(data["timestamp"]),
            severity=NotificationSeverity(data["severity"]),
            is_read=bool(data.get("is_read", data.get("isRead", False))),
            action_url=data.get("action_url", data.get("actionUrl")),
            metadata=NotificationMetadata.from_dict(metadata) if metadata else None,
        )


# Serialized (camelCase) name for each preference flag
_PREFERENCE_KEYS = {
    "deadline_alerts": "deadlineAlerts",
    "milestone_notifications": "milestoneNotifications",
    "overdue_warnings": "overdueWarnings",
    "system_updates": "systemUpdates",
    "import_export_status": "importExportStatus",
    "desktop_notifications": "desktopNotifications",
}

# Preference flag gating each notification type
TYPE_PREFERENCE = {
    NotificationType.DEADLINE_ALERT: "deadline_alerts",
    NotificationType.MILESTONE_COMPLETED: "milestone_notifications",
    NotificationType.OVERDUE_WARNING: "overdue_warnings",
    NotificationType.SYSTEM_STATUS: "system_updates",
    NotificationType.IMPORT_EXPORT: "import_export_status",
}


@dataclass(frozen=True)
class NotificationPreferences:
    """
    Per-type and per-channel enable flags. All default to enabled.
    """
    deadline_alerts: bool = True
    milestone_notifications: bool = True
    overdue_warnings: bool = True
    system_updates: bool = True
    import_export_status: bool = True
    desktop_notifications: bool = True

    def allows(self, notification_type: NotificationType) -> bool:
        """Check whether notifications of this type should be stored."""
        return getattr(self, TYPE_PREFERENCE[NotificationType(notification_type)])

    def merged(self, updates: Dict[str, Any]) -> 'NotificationPreferences':
        """
        Shallow-merge a partial update.

        Args:
            updates: Flag values keyed by snake_case or camelCase name

        Returns:
            New preferences instance

        Raises:
            ValueError: If a key is not a known preference flag
        """
        values = asdict(self)
        for key, value in updates.items():
            name = self._normalize_key(key)
            if name is None:
                raise ValueError(f"Unknown notification preference: {key}")
            values[name] = bool(value)
        return NotificationPreferences(**values)

    def to_dict(self) -> Dict[str, bool]:
        """Convert to the persisted (camelCase) form."""
        return {_PREFERENCE_KEYS[f.name]: getattr(self, f.name) for f in fields(self)}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'NotificationPreferences':
        """
        Load preferences, filling missing flags with defaults.

        Unknown keys are ignored so older or newer stored documents still load.
        """
        values = {}
        for key, value in data.items():
            name = cls._normalize_key(key)
            if name is not None:
                values[name] = bool(value)
        return cls(**values)

    @staticmethod
    def _normalize_key(key: str) -> Optional[str]:
        if key in _PREFERENCE_KEYS:
            return key
        for name, camel in _PREFERENCE_KEYS.items():
            if key == camel:
                return name
        return None


@dataclass
class NotificationStats:
    """Derived counts over the notification collection."""
    total: int = 0
    unread: int = 0
    by_type: Dict[str, int] = field(default_factory=dict)

    @classmethod
    def compute(cls, notifications: List[Notification]) -> 'NotificationStats':
        stats = cls(total=len(notifications))
        for notification in notifications:
            if not notification.is_read:
                stats.unread += 1
            key = notification.type.value
            stats.by_type[key] = stats.by_type.get(key, 0) + 1
        return stats

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "total": self.total,
            "unread": self.unread,
            "by_type": dict(self.by_type),
        }


@dataclass(frozen=True)
class DesktopAlert:
    """
    Post-commit effect requesting an out-of-band desktop notification.
    """
    notification_id: str
    title: str
    message: str
    severity: NotificationSeverity

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "notification_id": self.notification_id,
            "title": self.title,
            "message": self.message,
            "severity": self.severity.value,
        }


@dataclass
class MutationResult:
    """
    Outcome of a store mutation.

    Attributes:
        changed: Whether stored state changed
        notification: The notification added or affected, if any
        effects: Side effects the caller should run after the commit
    """
    changed: bool = False
    notification: Optional[Notification] = None
    effects: List[DesktopAlert] = field(default_factory=list)
