"""
Alerting engine assembly.

Builds the notification store, delivery surfaces, scanner, reporters and
scheduler from configuration, and owns their startup/shutdown.
"""

import logging
from datetime import datetime
from typing import Callable, List, Optional

from poam_alerts.core.config import AppConfig, get_config
from poam_alerts.core.models import System
from poam_alerts.core.systems import SystemContext
from poam_alerts.events.reporters import EventReporter
from poam_alerts.notifications.center import NotificationCenter
from poam_alerts.notifications.dispatcher import AlertDispatcher
from poam_alerts.notifications.kvstore import KeyValueStore, SQLiteKeyValueStore
from poam_alerts.notifications.providers import (
    NotificationSurface,
    NotifySendSurface,
    WebhookSurface,
)
from poam_alerts.notifications.store import NotificationStore
from poam_alerts.scanner.rules import DeadlineRules
from poam_alerts.scanner.service import ConditionScanner
from poam_alerts.scheduler import ScanScheduler
from poam_alerts.sources import TaskSource, create_task_source

logger = logging.getLogger(__name__)


def build_surfaces(config: AppConfig) -> List[NotificationSurface]:
    """
    Build the desktop notification surfaces enabled in configuration.

    Args:
        config: Application configuration

    Returns:
        Surfaces (possibly empty)
    """
    surfaces: List[NotificationSurface] = []
    if config.desktop.use_notify_send:
        surfaces.append(NotifySendSurface(app_name=config.desktop.app_name))
    if config.desktop.webhook_url:
        surfaces.append(WebhookSurface(
            webhook_url=config.desktop.webhook_url,
            webhook_token=config.desktop.webhook_token,
        ))
    return surfaces


class AlertingEngine:
    """
    The assembled notification engine.

    Usage:
        engine = AlertingEngine()
        await engine.start()
        await engine.switch_system(System(id="default", name="Default"))
        ...
        await engine.close()
    """

    def __init__(
        self,
        config: Optional[AppConfig] = None,
        kv_store: Optional[KeyValueStore] = None,
        source: Optional[TaskSource] = None,
        surfaces: Optional[List[NotificationSurface]] = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        """
        Initialize the engine.

        Args:
            config: Application configuration (default: global config)
            kv_store: Key-value store (default: SQLite at the configured path)
            source: Task snapshot source (default: from configuration)
            surfaces: Desktop notification surfaces (default: from configuration)
            clock: Source of the current time
        """
        self.config = config or get_config()

        if kv_store is None:
            kv_store = SQLiteKeyValueStore(self.config.storage.db_path)
        if source is None:
            source = create_task_source(self.config.source)
        if surfaces is None:
            surfaces = build_surfaces(self.config)

        self.store = NotificationStore(
            kv_store,
            notifications_key=self.config.storage.notifications_key,
            preferences_key=self.config.storage.preferences_key,
            clock=clock,
        )
        self.center = NotificationCenter(self.store, AlertDispatcher(surfaces))
        self.source = source
        self.systems = SystemContext()
        self.scanner = ConditionScanner(
            self.center,
            source,
            self.systems,
            rules=DeadlineRules(
                task_window_days=self.config.scan.task_window_days,
                milestone_window_days=self.config.scan.milestone_window_days,
            ),
            clock=clock,
        )
        self.reporter = EventReporter(self.center, self.scanner)
        self.scheduler = ScanScheduler(self.scanner, self.systems, clock=clock)

    async def start(self) -> None:
        """Start the scheduler and select the configured default system."""
        await self.scheduler.start()
        if self.config.default_system and self.systems.current_system is None:
            await self.switch_system(System(id=self.config.default_system))

    async def switch_system(self, system: Optional[System]) -> bool:
        """
        Change the active system; a change triggers one comprehensive check.

        Returns:
            True if the active system changed
        """
        return await self.systems.switch(system)

    async def close(self) -> None:
        """Flush notification state and release resources."""
        try:
            await self.source.close()
        except Exception as e:
            logger.warning(f"Failed to close task source: {e}")
        self.center.close()
        logger.info("Alerting engine closed")
