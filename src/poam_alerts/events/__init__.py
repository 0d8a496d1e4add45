"""
Event reporting for task mutations and application events.
"""

from poam_alerts.events.models import SystemEvent, SystemEventType
from poam_alerts.events.reporters import EventReporter

__all__ = [
    "SystemEvent",
    "SystemEventType",
    "EventReporter",
]
