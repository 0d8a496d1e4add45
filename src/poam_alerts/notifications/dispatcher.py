"""
Alert dispatcher - runs post-commit desktop alert effects on all granted surfaces.
"""

import logging
from typing import List, Optional

from poam_alerts.notifications.models import DesktopAlert
from poam_alerts.notifications.providers import (
    NotificationSurface,
    SurfacePermission,
)

logger = logging.getLogger(__name__)


class AlertDispatcher:
    """
    Dispatches desktop alerts to every granted surface.

    Failures are logged and never propagate: a stored notification is
    already committed by the time its alert is dispatched.
    """

    def __init__(self, surfaces: Optional[List[NotificationSurface]] = None):
        """
        Initialize alert dispatcher.

        Args:
            surfaces: Notification surfaces (default: none)
        """
        self.surfaces: List[NotificationSurface] = list(surfaces or [])

        logger.info(
            f"AlertDispatcher initialized with surfaces: "
            f"{[s.__class__.__name__ for s in self.surfaces]}"
        )

    def request_permissions(self) -> List[str]:
        """
        Ask surfaces that have not decided yet for permission.

        Returns:
            Names of the surfaces granted afterwards
        """
        for surface in self.surfaces:
            if surface.permission != SurfacePermission.DEFAULT:
                continue
            try:
                surface.request_permission()
            except Exception as e:
                logger.warning(
                    f"Permission request failed for {surface.__class__.__name__}: {e}"
                )

        granted = self.get_granted_surfaces()
        logger.info(f"Desktop alert surfaces granted: {granted}")
        return granted

    def dispatch(self, alerts: List[DesktopAlert]) -> int:
        """
        Show alerts on all granted surfaces.

        Args:
            alerts: Alerts to show

        Returns:
            Number of successful deliveries
        """
        delivered = 0
        for alert in alerts:
            for surface in self.surfaces:
                if not surface.is_granted:
                    continue
                try:
                    if surface.show(alert):
                        delivered += 1
                except Exception as e:
                    logger.error(
                        f"Surface {surface.__class__.__name__} failed: {e}",
                        exc_info=True
                    )
        return delivered

    def get_granted_surfaces(self) -> List[str]:
        """
        Get list of granted surface names.

        Returns:
            List of granted surface class names
        """
        return [s.__class__.__name__ for s in self.surfaces if s.is_granted]
