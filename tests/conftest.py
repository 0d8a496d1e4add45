"""
Shared fixtures for the notification engine tests.

Run with: pytest tests/
"""

from datetime import datetime

import pytest

from poam_alerts.core.models import System
from poam_alerts.core.systems import SystemContext
from poam_alerts.notifications.center import NotificationCenter
from poam_alerts.notifications.kvstore import MemoryKeyValueStore
from poam_alerts.notifications.store import NotificationStore
from poam_alerts.scanner.service import ConditionScanner

from fakes import CountingTaskSource

NOW = datetime(2026, 10, 17, 12, 0, 0)


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def kv_store():
    return MemoryKeyValueStore()


@pytest.fixture
def store(kv_store):
    return NotificationStore(kv_store, clock=lambda: NOW)


@pytest.fixture
def center(store):
    return NotificationCenter(store)


@pytest.fixture
def source():
    return CountingTaskSource()


@pytest.fixture
def systems():
    return SystemContext(System(id="sys-1", name="Enterprise Network"))


@pytest.fixture
def scanner(center, source, systems):
    return ConditionScanner(center, source, systems, clock=lambda: NOW)
