"""
POAM Alerts - Deadline & Notification Alerting Engine

This package watches POAM (plan of action and milestones) records for
deadline and status conditions and manages the resulting notifications.

Main modules:
- core: shared task models, configuration and active-system context
- notifications: notification records, preferences, store and delivery
- scanner: deadline/overdue rules and the async condition scanner
- events: reporters for task create/update and system events
- scheduler: comprehensive check scheduling
- sources: task snapshot providers (HTTP, file, in-memory)
- ui: HTTP API for the presentation layer
- cli: poamctl operational CLI
"""

__version__ = "0.3.0"
__author__ = "POAM Tracker Team"

__all__ = ["__version__", "__author__"]
