"""
Notification store - the persisted notification collection.

Owns the notification list, the delivery preferences and the current
view filter. Every mutation rewrites the affected document in the
key-value store. Side effects that reach outside the process (desktop
alerts) are returned to the caller as effects instead of being run here.
"""

import json
import logging
import random
import string
import time
from dataclasses import replace
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

from poam_alerts.notifications.kvstore import KeyValueStore
from poam_alerts.notifications.models import (
    FILTER_ALL,
    FILTER_UNREAD,
    NOTIFICATION_FILTERS,
    DesktopAlert,
    MutationResult,
    Notification,
    NotificationDraft,
    NotificationPreferences,
    NotificationStats,
    NotificationType,
)

logger = logging.getLogger(__name__)

NOTIFICATIONS_KEY = "poam-notifications"
PREFERENCES_KEY = "poam-notification-preferences"

_ID_ALPHABET = string.ascii_lowercase + string.digits


def generate_notification_id() -> str:
    """
    Generate a unique notification ID.

    Returns:
        ID of the form ``notification-<epoch ms>-<9 random chars>``
    """
    suffix = "".join(random.choices(_ID_ALPHABET, k=9))
    return f"notification-{int(time.time() * 1000)}-{suffix}"


class NotificationStore:
    """
    Persisted notification collection with derived view state.

    Usage:
        store = NotificationStore(SQLiteKeyValueStore("/tmp/poam.db"))
        result = store.add(draft)
        store.mark_as_read(result.notification.id)
        store.close()
    """

    def __init__(
        self,
        kv_store: KeyValueStore,
        notifications_key: str = NOTIFICATIONS_KEY,
        preferences_key: str = PREFERENCES_KEY,
        clock: Callable[[], datetime] = datetime.now,
        id_factory: Callable[[], str] = generate_notification_id,
    ):
        """
        Initialize the store and load persisted state.

        Args:
            kv_store: Backing key-value store
            notifications_key: Key holding the notification list
            preferences_key: Key holding the preferences document
            clock: Source of creation timestamps
            id_factory: Source of notification IDs
        """
        self.kv_store = kv_store
        self.notifications_key = notifications_key
        self.preferences_key = preferences_key
        self.clock = clock
        self.id_factory = id_factory

        self._notifications: List[Notification] = []
        self._preferences = NotificationPreferences()
        self._filter = FILTER_ALL
        self._used_ids = set()

        self.load()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def load(self) -> None:
        """
        Load notifications and preferences from the key-value store.

        Corrupt documents are logged and replaced by empty/default state.
        """
        self._notifications = self._load_notifications()
        self._preferences = self._load_preferences()
        self._used_ids = {n.id for n in self._notifications}

        logger.info(
            f"Loaded {len(self._notifications)} notifications "
            f"({self.unread_count} unread)"
        )

    def close(self) -> None:
        """Flush state and release the backing store."""
        self._persist_notifications()
        self._persist_preferences()
        self.kv_store.close()

    def _load_notifications(self) -> List[Notification]:
        try:
            raw = self.kv_store.get(self.notifications_key)
        except Exception as e:
            logger.error(f"Failed to read notifications: {e}")
            return []

        if not raw:
            return []

        try:
            records = json.loads(raw)
        except ValueError as e:
            logger.error(f"Failed to load notifications: {e}")
            return []

        if not isinstance(records, list):
            logger.error("Failed to load notifications: document is not a list")
            return []

        notifications = []
        for index, record in enumerate(records):
            try:
                notifications.append(Notification.from_dict(record))
            except (ValueError, KeyError, TypeError, AttributeError) as e:
                logger.warning(f"Skipping invalid stored notification #{index}: {e}")
        return notifications

    def _load_preferences(self) -> NotificationPreferences:
        try:
            raw = self.kv_store.get(self.preferences_key)
        except Exception as e:
            logger.error(f"Failed to read notification preferences: {e}")
            return NotificationPreferences()

        if not raw:
            return NotificationPreferences()

        try:
            data = json.loads(raw)
            if not isinstance(data, dict):
                raise ValueError("Preferences document is not an object")
            return NotificationPreferences.from_dict(data)
        except ValueError as e:
            logger.error(f"Failed to load notification preferences: {e}")
            return NotificationPreferences()

    def _persist_notifications(self) -> None:
        payload = json.dumps([n.to_dict() for n in self._notifications])
        try:
            self.kv_store.set(self.notifications_key, payload)
        except Exception as e:
            # In-memory state stays authoritative for this session
            logger.error(f"Failed to save notifications: {e}")

    def _persist_preferences(self) -> None:
        payload = json.dumps(self._preferences.to_dict())
        try:
            self.kv_store.set(self.preferences_key, payload)
        except Exception as e:
            logger.error(f"Failed to save notification preferences: {e}")

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def notifications(self) -> List[Notification]:
        """Notifications, newest first."""
        return list(self._notifications)

    @property
    def preferences(self) -> NotificationPreferences:
        return self._preferences

    @property
    def filter(self) -> str:
        return self._filter

    @property
    def unread_count(self) -> int:
        return sum(1 for n in self._notifications if not n.is_read)

    @property
    def filtered_notifications(self) -> List[Notification]:
        """Notifications passing the current view filter."""
        if self._filter == FILTER_ALL:
            return list(self._notifications)
        if self._filter == FILTER_UNREAD:
            return [n for n in self._notifications if not n.is_read]
        return [n for n in self._notifications if n.type.value == self._filter]

    @property
    def stats(self) -> NotificationStats:
        return NotificationStats.compute(self._notifications)

    def get(self, notification_id: str) -> Optional[Notification]:
        for notification in self._notifications:
            if notification.id == notification_id:
                return notification
        return None

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def add(self, draft: NotificationDraft) -> MutationResult:
        """
        Store a new notification if its type is enabled.

        Args:
            draft: Notification content

        Returns:
            MutationResult with the stored notification and any desktop
            alert effect; ``changed`` is False when the type is disabled
        """
        if not self._preferences.allows(draft.type):
            logger.debug(f"Dropped {draft.type.value} notification (disabled): {draft.title}")
            return MutationResult()

        notification = Notification.from_draft(
            draft,
            notification_id=self._new_id(),
            timestamp=self.clock(),
        )
        self._notifications.insert(0, notification)
        self._persist_notifications()

        logger.info(
            f"Added notification: {notification.type.value} - {notification.title} "
            f"(severity={notification.severity.value})"
        )

        effects = []
        if self._preferences.desktop_notifications:
            effects.append(DesktopAlert(
                notification_id=notification.id,
                title=notification.title,
                message=notification.message,
                severity=notification.severity,
            ))

        return MutationResult(changed=True, notification=notification, effects=effects)

    def mark_as_read(self, notification_id: str) -> MutationResult:
        """
        Mark one notification as read.

        No-op if the ID is unknown or already read.
        """
        for index, notification in enumerate(self._notifications):
            if notification.id != notification_id:
                continue
            if notification.is_read:
                return MutationResult(notification=notification)

            updated = replace(notification, is_read=True)
            self._notifications[index] = updated
            self._persist_notifications()
            return MutationResult(changed=True, notification=updated)

        return MutationResult()

    def mark_all_as_read(self) -> MutationResult:
        """Mark every notification as read."""
        changed = any(not n.is_read for n in self._notifications)
        self._notifications = [
            n if n.is_read else replace(n, is_read=True)
            for n in self._notifications
        ]
        self._persist_notifications()
        return MutationResult(changed=changed)

    def remove(self, notification_id: str) -> MutationResult:
        """Delete one notification."""
        notification = self.get(notification_id)
        if notification is None:
            return MutationResult()

        self._notifications = [n for n in self._notifications if n.id != notification_id]
        self._persist_notifications()
        logger.info(f"Removed notification: {notification_id}")
        return MutationResult(changed=True, notification=notification)

    def clear_all(self) -> MutationResult:
        """Delete every notification."""
        count = len(self._notifications)
        self._notifications = []
        self._persist_notifications()
        logger.info(f"Cleared {count} notifications")
        return MutationResult(changed=count > 0)

    def set_filter(self, view_filter: str) -> None:
        """
        Change the view filter. Not persisted.

        Raises:
            ValueError: If the filter is not recognized
        """
        if isinstance(view_filter, NotificationType):
            view_filter = view_filter.value
        if view_filter not in NOTIFICATION_FILTERS:
            raise ValueError(
                f"Unknown notification filter: {view_filter} "
                f"(expected one of {', '.join(NOTIFICATION_FILTERS)})"
            )
        self._filter = view_filter

    def update_preferences(self, updates: Dict[str, Any]) -> NotificationPreferences:
        """
        Shallow-merge preference flags and persist them.

        Raises:
            ValueError: If a key is not a known preference flag
        """
        self._preferences = self._preferences.merged(updates)
        self._persist_preferences()
        logger.info(f"Updated notification preferences: {updates}")
        return self._preferences

    def _new_id(self) -> str:
        notification_id = self.id_factory()
        while notification_id in self._used_ids:
            notification_id = self.id_factory()
        self._used_ids.add(notification_id)
        return notification_id
