"""
HTTP API for the notification center.
"""

from poam_alerts.ui.http_server import create_app, run_server

__all__ = ["create_app", "run_server"]
