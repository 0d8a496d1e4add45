"""
File task source - reads POAM snapshots from a YAML or JSON file.

File layout:

    systems:
      default:
        - id: 1
          title: Patch web servers
          status: In Progress
          priority: High
          endDate: "2026-10-20"
          milestones:
            - id: m-1
              title: Stage patches
              status: Not Started
              dueDate: "2026-10-18"
"""

import logging
from pathlib import Path
from typing import List

import yaml

from poam_alerts.core.models import Task
from poam_alerts.sources.base import TaskSource, TaskSourceError, parse_tasks

logger = logging.getLogger(__name__)


class FileTaskSource(TaskSource):
    """
    Task source backed by a snapshot file.

    The file is re-read on every fetch so edits are picked up by the
    next check. JSON is valid YAML, so both formats load the same way.
    """

    def __init__(self, path: str):
        """
        Initialize file task source.

        Args:
            path: Path to the YAML/JSON snapshot file
        """
        self.path = Path(path).expanduser()

    async def fetch_tasks(self, system_id: str) -> List[Task]:
        if not self.path.exists():
            raise TaskSourceError(f"Snapshot file not found: {self.path}")

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            raise TaskSourceError(f"Failed to read snapshot file {self.path}: {e}") from e

        if not data or "systems" not in data:
            logger.warning(f"No systems found in snapshot file {self.path}")
            return []

        systems = {str(key): value for key, value in (data["systems"] or {}).items()}
        records = systems.get(str(system_id)) or []
        if not isinstance(records, list):
            raise TaskSourceError(
                f"Snapshot for system {system_id} in {self.path} is not a list"
            )

        return parse_tasks(records, str(self.path))
