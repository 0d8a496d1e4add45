"""
Task snapshot sources (HTTP API, snapshot file, in-memory).
"""

from poam_alerts.core.config import SourceConfig
from poam_alerts.sources.base import (
    StaticTaskSource,
    TaskSource,
    TaskSourceError,
    parse_tasks,
)
from poam_alerts.sources.file_source import FileTaskSource
from poam_alerts.sources.http_source import HttpTaskSource


def create_task_source(config: SourceConfig) -> TaskSource:
    """
    Build the task source selected by configuration.

    Args:
        config: Source configuration

    Returns:
        TaskSource instance
    """
    if config.kind == "http":
        return HttpTaskSource(
            base_url=config.url,
            api_token=config.api_token,
            timeout=config.timeout,
        )
    return FileTaskSource(config.path)


__all__ = [
    "StaticTaskSource",
    "TaskSource",
    "TaskSourceError",
    "parse_tasks",
    "FileTaskSource",
    "HttpTaskSource",
    "create_task_source",
]
