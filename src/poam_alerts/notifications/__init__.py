"""
Notifications module.

Notification records, delivery preferences, the persisted store and
out-of-band delivery surfaces.
"""

from poam_alerts.notifications.models import (
    DesktopAlert,
    MutationResult,
    Notification,
    NotificationDraft,
    NotificationMetadata,
    NotificationPreferences,
    NotificationSeverity,
    NotificationStats,
    NotificationType,
    NOTIFICATION_FILTERS,
)
from poam_alerts.notifications.kvstore import (
    KeyValueStore,
    MemoryKeyValueStore,
    SQLiteKeyValueStore,
    StorageError,
)
from poam_alerts.notifications.store import NotificationStore
from poam_alerts.notifications.providers import (
    NotificationSurface,
    NotifySendSurface,
    NullSurface,
    SurfacePermission,
    WebhookSurface,
)
from poam_alerts.notifications.dispatcher import AlertDispatcher
from poam_alerts.notifications.center import NotificationCenter
from poam_alerts.notifications.formatters import (
    create_sample_notifications,
    format_relative_time,
)

__all__ = [
    "DesktopAlert",
    "MutationResult",
    "Notification",
    "NotificationDraft",
    "NotificationMetadata",
    "NotificationPreferences",
    "NotificationSeverity",
    "NotificationStats",
    "NotificationType",
    "NOTIFICATION_FILTERS",
    "KeyValueStore",
    "MemoryKeyValueStore",
    "SQLiteKeyValueStore",
    "StorageError",
    "NotificationStore",
    "NotificationSurface",
    "NotifySendSurface",
    "NullSurface",
    "SurfacePermission",
    "WebhookSurface",
    "AlertDispatcher",
    "NotificationCenter",
    "create_sample_notifications",
    "format_relative_time",
]
