"""
Core module for the POAM alerting engine.

Contains shared task models, configuration and the active-system context.
"""

from poam_alerts.core.models import (
    COMPLETED_STATUS,
    Milestone,
    System,
    Task,
    flatten_milestones,
    parse_datetime,
)
from poam_alerts.core.systems import SystemContext
from poam_alerts.core.config import AppConfig, get_config, reload_config

__all__ = [
    "COMPLETED_STATUS",
    "Milestone",
    "System",
    "Task",
    "flatten_milestones",
    "parse_datetime",
    "SystemContext",
    "AppConfig",
    "get_config",
    "reload_config",
]
