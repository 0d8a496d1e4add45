"""
Notification surfaces for showing alerts outside the application.

A surface is only used once its permission is "granted". Surfaces
never raise from ``show``; they log and report failure instead.
"""

import logging
import shutil
import subprocess
from abc import ABC, abstractmethod
from enum import Enum

import requests

from poam_alerts.notifications.models import DesktopAlert, NotificationSeverity

logger = logging.getLogger(__name__)


class SurfacePermission(str, Enum):
    """Permission state of a notification surface."""
    DEFAULT = "default"
    GRANTED = "granted"
    DENIED = "denied"


class NotificationSurface(ABC):
    """Base class for out-of-band notification surfaces."""

    permission: SurfacePermission = SurfacePermission.DEFAULT

    def request_permission(self) -> SurfacePermission:
        """
        Ask for permission to show alerts.

        Returns:
            Resulting permission state
        """
        return self.permission

    @property
    def is_granted(self) -> bool:
        return self.permission == SurfacePermission.GRANTED

    @abstractmethod
    def show(self, alert: DesktopAlert) -> bool:
        """
        Show an alert.

        Args:
            alert: Alert to show

        Returns:
            True if successful, False otherwise
        """
        pass


class NullSurface(NotificationSurface):
    """Surface that accepts and discards alerts."""

    permission = SurfacePermission.GRANTED

    def show(self, alert: DesktopAlert) -> bool:
        logger.debug(f"Discarding desktop alert: {alert.title}")
        return True


class NotifySendSurface(NotificationSurface):
    """
    Linux desktop notifications through ``notify-send``.

    Permission is granted when the ``notify-send`` binary is available.
    """

    URGENCY = {
        NotificationSeverity.INFO: "low",
        NotificationSeverity.SUCCESS: "normal",
        NotificationSeverity.WARNING: "normal",
        NotificationSeverity.ERROR: "critical",
    }

    def __init__(self, app_name: str = "POAM Tracker", timeout: float = 5.0):
        """
        Initialize notify-send surface.

        Args:
            app_name: Application name shown with the alert
            timeout: Subprocess timeout in seconds
        """
        self.app_name = app_name
        self.timeout = timeout
        self.permission = SurfacePermission.DEFAULT

    def request_permission(self) -> SurfacePermission:
        if self.permission == SurfacePermission.DEFAULT:
            if shutil.which("notify-send"):
                self.permission = SurfacePermission.GRANTED
            else:
                self.permission = SurfacePermission.DENIED
            logger.info(f"notify-send permission: {self.permission.value}")
        return self.permission

    def show(self, alert: DesktopAlert) -> bool:
        if not self.is_granted:
            return False

        try:
            subprocess.run(
                [
                    "notify-send",
                    "--app-name", self.app_name,
                    "--urgency", self.URGENCY.get(alert.severity, "normal"),
                    alert.title,
                    alert.message,
                ],
                check=True,
                timeout=self.timeout,
                capture_output=True,
            )
            logger.debug(f"Showed desktop alert: {alert.title}")
            return True

        except (OSError, subprocess.SubprocessError) as e:
            logger.warning(f"Failed to show desktop alert: {e}")
            return False


class WebhookSurface(NotificationSurface):
    """
    Webhook surface.

    Sends JSON POST requests to a configured webhook URL. Permission is
    granted when a URL is configured.
    """

    def __init__(self, webhook_url: str = "", webhook_token: str = "", timeout: float = 10.0):
        """
        Initialize webhook surface.

        Args:
            webhook_url: Webhook endpoint URL
            webhook_token: Optional authentication token (Bearer)
            timeout: Request timeout in seconds
        """
        self.webhook_url = webhook_url
        self.webhook_token = webhook_token
        self.timeout = timeout
        self.permission = (
            SurfacePermission.GRANTED if webhook_url else SurfacePermission.DENIED
        )

        if self.is_granted:
            logger.info(f"WebhookSurface configured: {self.webhook_url}")

    def show(self, alert: DesktopAlert) -> bool:
        if not self.is_granted:
            return False

        try:
            headers = {
                "Content-Type": "application/json",
                "User-Agent": "POAM-Alerts/0.3"
            }

            if self.webhook_token:
                headers["Authorization"] = f"Bearer {self.webhook_token}"

            response = requests.post(
                self.webhook_url,
                json=alert.to_dict(),
                headers=headers,
                timeout=self.timeout
            )
            response.raise_for_status()

            logger.info(f"Sent webhook alert: {alert.title}")
            return True

        except requests.RequestException as e:
            logger.error(f"Failed to send webhook alert: {e}")
            return False
