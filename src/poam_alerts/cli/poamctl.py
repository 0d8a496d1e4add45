#!/usr/bin/env python3
"""
poamctl - POAM notification operational CLI

A lightweight CLI for day-2 operations:
- Run a comprehensive deadline check (poamctl check)
- Inspect and manage notifications (poamctl list/stats/read/remove/clear)
- Manage notification preferences (poamctl prefs)
- Seed sample notifications (poamctl samples)
- Serve the HTTP API (poamctl serve)
"""

import argparse
import asyncio
import logging
import sys
from typing import Dict, List, Optional

from poam_alerts import __version__
from poam_alerts.core.config import get_config
from poam_alerts.core.models import System
from poam_alerts.engine import AlertingEngine
from poam_alerts.notifications.formatters import (
    create_sample_notifications,
    format_notification_line,
)
from poam_alerts.notifications.models import NOTIFICATION_FILTERS
from poam_alerts.sources import FileTaskSource

logger = logging.getLogger(__name__)


class Colors:
    """ANSI color codes for terminal output."""

    GREEN = "\033[92m"
    YELLOW = "\033[93m"
    RED = "\033[91m"
    BLUE = "\033[94m"
    RESET = "\033[0m"
    BOLD = "\033[1m"


SEVERITY_COLORS = {
    "info": Colors.BLUE,
    "warning": Colors.YELLOW,
    "error": Colors.RED,
    "success": Colors.GREEN,
}


def colorize(text: str, color: str) -> str:
    """Colorize text if stdout is a TTY."""
    if sys.stdout.isatty():
        return f"{color}{text}{Colors.RESET}"
    return text


def setup_logging(log_level: str) -> None:
    """
    Setup logging configuration.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
    """
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )


def parse_flag_assignments(assignments: List[str]) -> Dict[str, bool]:
    """
    Parse ``name=value`` preference assignments.

    Raises:
        ValueError: If an assignment is malformed
    """
    updates = {}
    for item in assignments:
        name, sep, value = item.partition("=")
        if not sep:
            raise ValueError(f"Expected name=value, got: {item}")
        value = value.strip().lower()
        if value in ("1", "true", "yes", "on"):
            updates[name.strip()] = True
        elif value in ("0", "false", "no", "off"):
            updates[name.strip()] = False
        else:
            raise ValueError(f"Invalid boolean for {name}: {value}")
    return updates


def build_engine(args) -> AlertingEngine:
    source = FileTaskSource(args.snapshot) if getattr(args, "snapshot", None) else None
    return AlertingEngine(source=source)


def print_notifications(notifications) -> None:
    if not notifications:
        print("No notifications.")
        return
    for notification in notifications:
        line = format_notification_line(notification)
        print(colorize(line, SEVERITY_COLORS.get(notification.severity.value, Colors.RESET)))
        print(f"    id: {notification.id}")


async def cmd_check(args) -> int:
    """Run a comprehensive check for a system and print what it stored."""
    engine = build_engine(args)
    try:
        await engine.start()
        existing = {n.id for n in engine.center.notifications}

        # Selecting a new system runs the comprehensive check
        if not await engine.switch_system(System(id=args.system, name=args.system)):
            await engine.scheduler.perform_comprehensive_check()
        stored = [n for n in engine.center.notifications if n.id not in existing]

        print(colorize(f"\nComprehensive check for system {args.system}", Colors.BOLD))
        print(colorize("=" * 60, Colors.BOLD))
        print_notifications(stored)
        print()
        print(f"Stored {len(stored)} notifications, {engine.center.unread_count} unread in total")
        return 0
    finally:
        await engine.close()


async def cmd_list(args) -> int:
    engine = build_engine(args)
    try:
        engine.center.set_filter(args.filter)
        print_notifications(engine.center.filtered_notifications)
        return 0
    finally:
        await engine.close()


async def cmd_stats(args) -> int:
    engine = build_engine(args)
    try:
        stats = engine.center.stats
        print(colorize("\nNotification statistics", Colors.BOLD))
        print(colorize("=" * 60, Colors.BOLD))
        print(f"Total:  {stats.total}")
        print(f"Unread: {stats.unread}")
        for notification_type, count in sorted(stats.by_type.items()):
            print(f"  {notification_type}: {count}")
        return 0
    finally:
        await engine.close()


async def cmd_read(args) -> int:
    engine = build_engine(args)
    try:
        if args.all:
            engine.center.mark_all_as_read()
            print("Marked all notifications as read.")
            return 0
        if not args.id:
            print(colorize("Specify a notification id or --all", Colors.RED), file=sys.stderr)
            return 2
        if not engine.center.mark_as_read(args.id):
            print(colorize(f"Notification not found: {args.id}", Colors.RED), file=sys.stderr)
            return 1
        print(f"Marked {args.id} as read.")
        return 0
    finally:
        await engine.close()


async def cmd_remove(args) -> int:
    engine = build_engine(args)
    try:
        if not engine.center.remove(args.id):
            print(colorize(f"Notification not found: {args.id}", Colors.RED), file=sys.stderr)
            return 1
        print(f"Removed {args.id}.")
        return 0
    finally:
        await engine.close()


async def cmd_clear(args) -> int:
    engine = build_engine(args)
    try:
        count = engine.center.stats.total
        engine.center.clear_all()
        print(f"Cleared {count} notifications.")
        return 0
    finally:
        await engine.close()


async def cmd_prefs(args) -> int:
    engine = build_engine(args)
    try:
        if args.set:
            try:
                engine.center.update_preferences(parse_flag_assignments(args.set))
            except ValueError as e:
                print(colorize(str(e), Colors.RED), file=sys.stderr)
                return 2

        for name, enabled in engine.center.preferences.to_dict().items():
            state = colorize("on", Colors.GREEN) if enabled else colorize("off", Colors.RED)
            print(f"{name:24} {state}")
        return 0
    finally:
        await engine.close()


async def cmd_samples(args) -> int:
    engine = build_engine(args)
    try:
        stored = create_sample_notifications(engine.center)
        print(f"Seeded {stored} sample notifications.")
        return 0
    finally:
        await engine.close()


def cmd_serve(args) -> int:
    from poam_alerts.ui.http_server import run_server

    run_server(host=args.host, port=args.port)
    return 0


def cmd_version(args) -> int:
    print(f"poamctl {__version__}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="poamctl",
        description="POAM notification engine - operational CLI"
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        help="Log level (default: from config)"
    )

    subparsers = parser.add_subparsers(dest="command")

    check = subparsers.add_parser("check", help="Run a comprehensive deadline check")
    check.add_argument("--system", required=True, help="System ID to check")
    check.add_argument("--snapshot", help="YAML/JSON snapshot file (overrides configured source)")

    list_cmd = subparsers.add_parser("list", help="List notifications")
    list_cmd.add_argument(
        "--filter",
        choices=NOTIFICATION_FILTERS,
        default="all",
        help="View filter (default: all)"
    )

    subparsers.add_parser("stats", help="Show notification statistics")

    read = subparsers.add_parser("read", help="Mark notifications as read")
    read.add_argument("id", nargs="?", help="Notification ID")
    read.add_argument("--all", action="store_true", help="Mark all notifications as read")

    remove = subparsers.add_parser("remove", help="Delete a notification")
    remove.add_argument("id", help="Notification ID")

    subparsers.add_parser("clear", help="Delete all notifications")

    prefs = subparsers.add_parser("prefs", help="Show or change notification preferences")
    prefs.add_argument(
        "--set",
        nargs="+",
        metavar="NAME=VALUE",
        help="Preference assignments, e.g. deadlineAlerts=off"
    )

    subparsers.add_parser("samples", help="Seed one sample notification of each type")

    serve = subparsers.add_parser("serve", help="Serve the HTTP API")
    serve.add_argument("--host", default=None, help="Bind address")
    serve.add_argument("--port", type=int, default=None, help="Port")

    subparsers.add_parser("version", help="Show version")

    return parser


ASYNC_COMMANDS = {
    "check": cmd_check,
    "list": cmd_list,
    "stats": cmd_stats,
    "read": cmd_read,
    "remove": cmd_remove,
    "clear": cmd_clear,
    "prefs": cmd_prefs,
    "samples": cmd_samples,
}

SYNC_COMMANDS = {
    "serve": cmd_serve,
    "version": cmd_version,
}


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 2

    config = get_config()
    setup_logging(args.log_level or config.log_level)

    try:
        if args.command in SYNC_COMMANDS:
            return SYNC_COMMANDS[args.command](args)
        return asyncio.run(ASYNC_COMMANDS[args.command](args))

    except KeyboardInterrupt:
        logger.info("Received interrupt signal, shutting down...")
        return 130

    except Exception as e:
        logger.error(f"Fatal error: {e}", exc_info=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())
