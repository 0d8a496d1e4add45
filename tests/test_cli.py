"""
Tests for poamctl and the notification formatters.
"""

from datetime import datetime, timedelta

import pytest

from poam_alerts import __version__
from poam_alerts.cli.poamctl import main, parse_flag_assignments
from poam_alerts.core import config as config_module
from poam_alerts.notifications.formatters import (
    create_sample_notifications,
    format_notification_line,
    format_relative_time,
    sample_drafts,
)
from poam_alerts.notifications.models import NotificationType

NOW = datetime(2026, 10, 17, 12, 0, 0)


@pytest.fixture
def cli_env(tmp_path, monkeypatch):
    """Point the global config at a temporary database without desktop surfaces."""
    monkeypatch.setenv("POAM_STORAGE_DB_PATH", str(tmp_path / "notifications.db"))
    monkeypatch.setenv("POAM_DESKTOP_USE_NOTIFY_SEND", "false")
    monkeypatch.setenv("POAM_DESKTOP_WEBHOOK_URL", "")
    monkeypatch.setenv("POAM_DEFAULT_SYSTEM", "")
    monkeypatch.setattr(config_module, "_config", None)
    return tmp_path


class TestFormatters:
    """Test human-readable rendering."""

    def test_relative_time(self):
        assert format_relative_time(None, NOW) == "never"
        assert format_relative_time(NOW - timedelta(seconds=30), NOW) == "just now"
        assert format_relative_time(NOW - timedelta(minutes=5), NOW) == "5m ago"
        assert format_relative_time(NOW - timedelta(hours=3, minutes=59), NOW) == "3h ago"
        assert format_relative_time(NOW - timedelta(days=2, hours=1), NOW) == "2d ago"

    def test_notification_line(self, store):
        notification = store.add(sample_drafts()[2]).notification

        line = format_notification_line(notification, NOW + timedelta(hours=2))

        assert line.startswith("* [x] POAM Overdue - ")
        assert line.endswith("(2h ago)")

    def test_samples_cover_every_type(self, center):
        assert {d.type for d in sample_drafts()} == set(NotificationType)
        assert create_sample_notifications(center) == 5
        assert center.unread_count == 5

    def test_samples_respect_preferences(self, center):
        center.update_preferences({"importExportStatus": False})
        assert create_sample_notifications(center) == 4


class TestFlagAssignments:
    """Test preference assignment parsing."""

    def test_parse(self):
        assert parse_flag_assignments(["deadlineAlerts=off", "desktop_notifications=Yes"]) == {
            "deadlineAlerts": False,
            "desktop_notifications": True,
        }

    def test_missing_value(self):
        with pytest.raises(ValueError):
            parse_flag_assignments(["deadlineAlerts"])

    def test_invalid_boolean(self):
        with pytest.raises(ValueError):
            parse_flag_assignments(["deadlineAlerts=maybe"])


class TestCommands:
    """Test poamctl commands end to end against a temporary database."""

    def test_version(self, cli_env, capsys):
        assert main(["version"]) == 0
        assert __version__ in capsys.readouterr().out

    def test_no_command(self, capsys):
        assert main([]) == 2

    def test_samples_then_stats(self, cli_env, capsys):
        assert main(["samples"]) == 0
        assert "Seeded 5 sample notifications." in capsys.readouterr().out

        assert main(["stats"]) == 0
        out = capsys.readouterr().out
        assert "Total:  5" in out
        assert "Unread: 5" in out

    def test_read_all_then_list_unread(self, cli_env, capsys):
        main(["samples"])
        assert main(["read", "--all"]) == 0
        capsys.readouterr()

        assert main(["list", "--filter", "unread"]) == 0
        assert "No notifications." in capsys.readouterr().out

    def test_unknown_notification(self, cli_env):
        assert main(["read", "notification-0-missing"]) == 1
        assert main(["remove", "notification-0-missing"]) == 1

    def test_prefs(self, cli_env, capsys):
        assert main(["prefs", "--set", "overdueWarnings=off"]) == 0
        out = capsys.readouterr().out
        assert "overdueWarnings" in out

        assert main(["prefs", "--set", "smsAlerts=on"]) == 2

    def test_check_with_snapshot(self, cli_env, capsys):
        due = (datetime.now() - timedelta(days=4)).strftime("%Y-%m-%d")
        snapshot = cli_env / "poams.yml"
        snapshot.write_text(
            "systems:\n"
            "  enclave:\n"
            "    - id: 1\n"
            "      title: Patch web servers\n"
            "      status: In Progress\n"
            f"      endDate: \"{due}\"\n"
        )

        assert main(["check", "--system", "enclave", "--snapshot", str(snapshot)]) == 0

        out = capsys.readouterr().out
        assert "POAM Overdue" in out
        assert "Stored 1 notifications" in out

    def test_check_reports_only_requested_system(self, cli_env, capsys, monkeypatch):
        due = (datetime.now() - timedelta(days=4)).strftime("%Y-%m-%d")
        snapshot = cli_env / "poams.yml"
        snapshot.write_text(
            "systems:\n"
            "  enclave:\n"
            "    - id: 1\n"
            "      title: Patch web servers\n"
            "      status: In Progress\n"
            f"      endDate: \"{due}\"\n"
            "  datacenter:\n"
            "    - id: 2\n"
            "      title: Replace legacy firewall\n"
            "      status: In Progress\n"
            f"      endDate: \"{due}\"\n"
        )

        monkeypatch.setenv("POAM_DEFAULT_SYSTEM", "datacenter")
        assert main(["check", "--system", "enclave", "--snapshot", str(snapshot)]) == 0
        out = capsys.readouterr().out
        assert "Patch web servers" in out
        assert "Replace legacy firewall" not in out
        assert "Stored 1 notifications" in out

        monkeypatch.setattr(config_module, "_config", None)
        monkeypatch.setenv("POAM_DEFAULT_SYSTEM", "enclave")
        assert main(["check", "--system", "enclave", "--snapshot", str(snapshot)]) == 0
        assert "Stored 1 notifications" in capsys.readouterr().out

    def test_clear(self, cli_env, capsys):
        main(["samples"])
        capsys.readouterr()

        assert main(["clear"]) == 0
        assert "Cleared 5 notifications." in capsys.readouterr().out
