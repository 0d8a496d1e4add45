"""
Tests for task snapshot sources and wire-format parsing.
"""

import asyncio
from datetime import datetime, timezone

import httpx
import pytest

from poam_alerts.core.config import SourceConfig
from poam_alerts.core.models import Task, parse_datetime
from poam_alerts.sources import create_task_source
from poam_alerts.sources.base import StaticTaskSource, TaskSourceError
from poam_alerts.sources.file_source import FileTaskSource
from poam_alerts.sources.http_source import HttpTaskSource

SNAPSHOT = """
systems:
  default:
    - id: 1
      title: Patch web servers
      status: In Progress
      priority: High
      endDate: "2026-10-20"
      riskLevel: Moderate
      milestones:
        - id: m-1
          title: Stage patches
          status: Not Started
          dueDate: "2026-10-18"
  42:
    - id: 2
      title: Rotate keys
      status: Completed
      endDate: "2026-09-01T09:30:00"
"""

RECORDS = [
    {
        "id": 5,
        "title": "Harden SSH",
        "status": "Not Started",
        "priority": "Medium",
        "endDate": "2026-10-25",
        "milestones": [
            {"id": "m-9", "title": "Disable root login", "status": "Completed",
             "dueDate": "2026-10-19"},
        ],
    },
]


def mock_client(handler):
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


class TestWireFormat:
    """Test parsing of task records."""

    def test_date_only_is_local_midnight(self):
        assert parse_datetime("2026-10-20") == datetime(2026, 10, 20, 0, 0)

    def test_aware_timestamps_become_naive_local(self):
        parsed = parse_datetime("2026-10-20T12:00:00Z")
        expected = datetime(2026, 10, 20, 12, tzinfo=timezone.utc).astimezone().replace(tzinfo=None)

        assert parsed.tzinfo is None
        assert parsed == expected

    def test_invalid_date(self):
        with pytest.raises(ValueError):
            parse_datetime("next tuesday")

    def test_camel_case_records(self):
        task = Task.from_dict(RECORDS[0])

        assert task.end_date == datetime(2026, 10, 25)
        assert task.milestones[0].due_date == datetime(2026, 10, 19)
        assert task.milestones[0].is_completed

        flattened = task.flattened_milestones()
        assert flattened[0].task_title == "Harden SSH"
        assert flattened[0].task_id == 5
        assert task.milestones[0].task_title is None


class TestFileTaskSource:
    """Test YAML snapshot files."""

    def test_reads_system_snapshot(self, tmp_path):
        path = tmp_path / "poams.yml"
        path.write_text(SNAPSHOT)
        source = FileTaskSource(str(path))

        tasks = asyncio.run(source.fetch_tasks("default"))

        assert len(tasks) == 1
        assert tasks[0].title == "Patch web servers"
        assert tasks[0].risk_level == "Moderate"
        assert tasks[0].milestones[0].id == "m-1"

    def test_numeric_system_keys(self, tmp_path):
        path = tmp_path / "poams.yml"
        path.write_text(SNAPSHOT)

        tasks = asyncio.run(FileTaskSource(str(path)).fetch_tasks("42"))

        assert [t.id for t in tasks] == [2]
        assert tasks[0].priority == "Low"

    def test_unknown_system_is_empty(self, tmp_path):
        path = tmp_path / "poams.yml"
        path.write_text(SNAPSHOT)
        assert asyncio.run(FileTaskSource(str(path)).fetch_tasks("other")) == []

    def test_missing_file(self, tmp_path):
        source = FileTaskSource(str(tmp_path / "missing.yml"))
        with pytest.raises(TaskSourceError):
            asyncio.run(source.fetch_tasks("default"))

    def test_invalid_records(self, tmp_path):
        path = tmp_path / "poams.yml"
        path.write_text("systems:\n  default:\n    - id: 1\n      title: No dates\n")

        with pytest.raises(TaskSourceError):
            asyncio.run(FileTaskSource(str(path)).fetch_tasks("default"))

    def test_malformed_yaml(self, tmp_path):
        path = tmp_path / "poams.yml"
        path.write_text("systems: [unclosed\n")

        with pytest.raises(TaskSourceError):
            asyncio.run(FileTaskSource(str(path)).fetch_tasks("default"))


class TestHttpTaskSource:
    """Test the HTTP task source against a mock transport."""

    def test_fetch_tasks(self):
        requests = []

        def handler(request):
            requests.append(request)
            return httpx.Response(200, json=RECORDS)

        source = HttpTaskSource(base_url="http://tasks.local/api/", client=mock_client(handler))

        async def run():
            try:
                return await source.fetch_tasks("sys-1")
            finally:
                await source.close()

        tasks = asyncio.run(run())

        assert requests[0].url.path == "/api/systems/sys-1/poams"
        assert tasks[0].title == "Harden SSH"

    def test_server_error_is_not_retried(self):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(500, json={"detail": "database unavailable"})

        source = HttpTaskSource(base_url="http://tasks.local", client=mock_client(handler))

        with pytest.raises(TaskSourceError, match="500"):
            asyncio.run(source.fetch_tasks("sys-1"))
        assert len(calls) == 1

    def test_transport_error_retried(self):
        calls = []

        def handler(request):
            calls.append(request)
            if len(calls) == 1:
                raise httpx.ConnectError("connection refused", request=request)
            return httpx.Response(200, json=RECORDS)

        source = HttpTaskSource(
            base_url="http://tasks.local", max_retries=2, client=mock_client(handler)
        )

        tasks = asyncio.run(source.fetch_tasks("sys-1"))

        assert len(calls) == 2
        assert len(tasks) == 1

    def test_transport_error_exhausts_retries(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        source = HttpTaskSource(
            base_url="http://tasks.local", max_retries=1, client=mock_client(handler)
        )

        with pytest.raises(TaskSourceError):
            asyncio.run(source.fetch_tasks("sys-1"))

    def test_non_list_body(self):
        source = HttpTaskSource(
            base_url="http://tasks.local",
            client=mock_client(lambda request: httpx.Response(200, json={"poams": []})),
        )

        with pytest.raises(TaskSourceError):
            asyncio.run(source.fetch_tasks("sys-1"))


class TestSourceFactory:
    """Test source selection from configuration."""

    def test_file_source(self):
        source = create_task_source(SourceConfig(kind="file", path="snapshot.yml"))
        assert isinstance(source, FileTaskSource)

    def test_http_source(self):
        source = create_task_source(SourceConfig(kind="http", url="http://tasks.local"))
        assert isinstance(source, HttpTaskSource)
        assert source.base_url == "http://tasks.local"
        asyncio.run(source.close())

    def test_static_source_accepts_records(self):
        source = StaticTaskSource({"sys-1": RECORDS})
        tasks = asyncio.run(source.fetch_tasks("sys-1"))

        assert tasks[0].id == 5
