"""
Notification center - the store as seen by scanners, reporters and views.

Wraps a NotificationStore and runs the effects each mutation returns
(desktop alerts) after the mutation has been committed.
"""

import logging
from typing import Any, Dict, List, Optional

from poam_alerts.notifications.dispatcher import AlertDispatcher
from poam_alerts.notifications.models import (
    MutationResult,
    Notification,
    NotificationDraft,
    NotificationPreferences,
    NotificationStats,
)
from poam_alerts.notifications.store import NotificationStore

logger = logging.getLogger(__name__)


class NotificationCenter:
    """
    Presentation-facing notification API.

    Exposes the store's state and mutations. ``add`` additionally
    dispatches desktop alerts; dispatch failures never affect the
    stored record.
    """

    def __init__(
        self,
        store: NotificationStore,
        dispatcher: Optional[AlertDispatcher] = None
    ):
        """
        Initialize notification center.

        Args:
            store: Notification store
            dispatcher: Alert dispatcher (default: no surfaces)
        """
        self.store = store
        self.dispatcher = dispatcher or AlertDispatcher()

        if self.store.preferences.desktop_notifications:
            self.dispatcher.request_permissions()

    # State

    @property
    def notifications(self) -> List[Notification]:
        return self.store.notifications

    @property
    def unread_count(self) -> int:
        return self.store.unread_count

    @property
    def preferences(self) -> NotificationPreferences:
        return self.store.preferences

    @property
    def filter(self) -> str:
        return self.store.filter

    @property
    def stats(self) -> NotificationStats:
        return self.store.stats

    @property
    def filtered_notifications(self) -> List[Notification]:
        return self.store.filtered_notifications

    # Mutations

    def add(self, draft: NotificationDraft) -> Optional[Notification]:
        """
        Store a notification and show its desktop alert.

        Args:
            draft: Notification content

        Returns:
            The stored notification, or None if its type is disabled
        """
        result = self.store.add(draft)
        self._run_effects(result)
        return result.notification

    def mark_as_read(self, notification_id: str) -> bool:
        """Returns True if the notification exists."""
        return self.store.mark_as_read(notification_id).notification is not None

    def mark_all_as_read(self) -> None:
        self.store.mark_all_as_read()

    def remove(self, notification_id: str) -> bool:
        """Returns True if the notification existed."""
        return self.store.remove(notification_id).changed

    def clear_all(self) -> None:
        self.store.clear_all()

    def set_filter(self, view_filter: str) -> None:
        self.store.set_filter(view_filter)

    def update_preferences(self, updates: Dict[str, Any]) -> NotificationPreferences:
        """Merge preference flags; enabling desktop alerts asks surfaces for permission."""
        preferences = self.store.update_preferences(updates)
        if preferences.desktop_notifications:
            self.dispatcher.request_permissions()
        return preferences

    def close(self) -> None:
        self.store.close()

    def _run_effects(self, result: MutationResult) -> None:
        if not result.effects:
            return
        try:
            self.dispatcher.dispatch(result.effects)
        except Exception as e:
            logger.error(f"Failed to dispatch desktop alerts: {e}", exc_info=True)
