"""
Pytest configuration and shared fixtures for the control-plane test suite.

Provides an in-memory store and a recording message bus implementing the
adapter contracts, data factories for clients, events and stashes, and a
FastAPI test client wired to an injected dependency bundle.
"""

import json
import time
from typing import Any, Optional

import pytest
from fastapi.testclient import TestClient

from controlplane.bus.base import MessageBus
from controlplane.checks import CheckRegistry
from controlplane.config import Settings
from controlplane.context import AppContext
from controlplane.storage import keys
from controlplane.storage.base import StoreBackend


# ---------------------------------------------------------------------------
# Data factories
# ---------------------------------------------------------------------------

SAMPLE_CHECKS = {
    "cpu": {"command": "check-cpu.rb", "subscribers": ["linux"], "interval": 60},
    "mem": {"command": "check-mem.rb", "subscribers": ["linux"], "interval": 60},
    "disk": {"command": "check-disk.rb -w 80 -c 90", "subscribers": ["linux", "db"], "interval": 300},
}


def make_client_record(name: str = "web-01", **overrides) -> dict:
    """Factory for a client record as registered by an executor."""
    defaults = dict(
        name=name,
        address="10.0.0.12",
        subscriptions=["linux", "web"],
        timestamp=int(time.time()),
    )
    defaults.update(overrides)
    return defaults


def make_event_record(status: int = 2, output: str = "CRITICAL", **overrides) -> dict:
    """Factory for the event fragment stored under ``events:<client>``."""
    defaults = dict(
        output=output,
        status=status,
        issued=int(time.time()),
        flapping=False,
        occurrences=1,
    )
    defaults.update(overrides)
    return defaults


# ---------------------------------------------------------------------------
# Mock dependencies
# ---------------------------------------------------------------------------

class MockStore(StoreBackend):
    """
    In-memory StoreBackend for tests.

    Keeps one namespace per data type, like Redis does, and records every
    command issued through the async interface in ``calls``.
    """

    def __init__(self):
        self.values: dict[str, str] = {}
        self.sets: dict[str, set[str]] = {}
        self.hashes: dict[str, dict[str, str]] = {}
        self.lists: dict[str, list[str]] = {}
        self.calls: list[tuple[str, str]] = []
        self.is_connected = True
        self.closed = False

    @property
    def connected(self) -> bool:
        return self.is_connected

    # --- Store contract ---
    async def get(self, key):
        self.calls.append(("get", key))
        return self.values.get(key)

    async def set(self, key, value):
        self.calls.append(("set", key))
        self.values[key] = value

    async def delete(self, key):
        self.calls.append(("delete", key))
        removed = 0
        for namespace in (self.values, self.sets, self.hashes, self.lists):
            if key in namespace:
                del namespace[key]
                removed = 1
        return removed

    async def exists(self, key):
        self.calls.append(("exists", key))
        return self.has_key(key)

    async def smembers(self, key):
        self.calls.append(("smembers", key))
        return sorted(self.sets.get(key, set()))

    async def sadd(self, key, member):
        self.calls.append(("sadd", key))
        members = self.sets.setdefault(key, set())
        if member in members:
            return 0
        members.add(member)
        return 1

    async def srem(self, key, member):
        self.calls.append(("srem", key))
        members = self.sets.get(key, set())
        if member not in members:
            return 0
        members.discard(member)
        if not members:
            self.sets.pop(key, None)
        return 1

    async def hgetall(self, key):
        self.calls.append(("hgetall", key))
        return dict(self.hashes.get(key, {}))

    async def hget(self, key, field):
        self.calls.append(("hget", key))
        return self.hashes.get(key, {}).get(field)

    async def connect(self):
        self.is_connected = True

    async def close(self):
        self.closed = True

    # --- Test helpers ---
    def has_key(self, key: str) -> bool:
        return any(key in ns for ns in (self.values, self.sets, self.hashes, self.lists))

    def keys_matching(self, prefix: str) -> list[str]:
        found = set()
        for namespace in (self.values, self.sets, self.hashes, self.lists):
            found.update(k for k in namespace if k.startswith(prefix))
        return sorted(found)

    def add_client(
        self,
        name: str,
        events: Optional[dict[str, dict]] = None,
        history: Optional[list[str]] = None,
        **record: Any,
    ) -> dict:
        """Register a client the way an executor would, with events and history."""
        client = make_client_record(name, **record)
        self.values[keys.client_key(name)] = json.dumps(client)
        self.sets.setdefault(keys.CLIENTS, set()).add(name)
        if events:
            self.hashes[keys.events_key(name)] = {
                check: json.dumps(event) for check, event in events.items()
            }
        for check in history or []:
            self.sets.setdefault(keys.history_key(name), set()).add(check)
            self.lists[keys.check_history_key(name, check)] = ["0", "2", "0"]
        return client

    def add_stash(self, path: str, content: Any) -> None:
        self.values[keys.stash_key(path)] = json.dumps(content)
        self.sets.setdefault(keys.STASHES, set()).add(path)


class MockBus(MessageBus):
    """Recording MessageBus: keeps every published payload in order."""

    def __init__(self):
        self.queue_messages: list[tuple[str, dict]] = []
        self.fanout_messages: list[tuple[str, dict]] = []
        self.is_connected = True
        self.closed = False

    @property
    def connected(self) -> bool:
        return self.is_connected

    async def publish_to_queue(self, queue, payload):
        self.queue_messages.append((queue, payload))

    async def publish_fanout(self, exchange, payload):
        self.fanout_messages.append((exchange, payload))

    async def connect(self, on_disconnect):
        self.is_connected = True

    async def close(self):
        self.closed = True
        self.is_connected = False

    def resolutions(self) -> list[dict]:
        return [payload for queue, payload in self.queue_messages if queue == "results"]


# ---------------------------------------------------------------------------
# Pytest fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def test_settings():
    """Settings isolated from the environment, with a short grace period."""
    return Settings(
        _env_file=None,
        client_grace_period_seconds=0.05,
        api_user=None,
        api_password=None,
        checks_file="/nonexistent/checks.json",
    )


@pytest.fixture
def mock_store():
    """Fresh MockStore instance for each test."""
    return MockStore()


@pytest.fixture
def mock_bus():
    """Fresh MockBus instance for each test."""
    return MockBus()


@pytest.fixture
def context(test_settings, mock_store, mock_bus):
    return AppContext(
        settings=test_settings,
        store=mock_store,
        bus=mock_bus,
        checks=CheckRegistry(SAMPLE_CHECKS),
    )


@pytest.fixture
def fatal_calls():
    """Records calls to the fatal-exit hook instead of exiting."""
    return []


@pytest.fixture
def client(context, fatal_calls):
    """FastAPI test client bound to the mock store and bus."""
    from controlplane.main import create_app

    app = create_app(context=context, on_fatal=lambda: fatal_calls.append(True))
    with TestClient(app) as c:
        yield c


@pytest.fixture
def populated_store(mock_store):
    """MockStore with two clients, open events, history and stashes."""
    mock_store.add_client(
        "web-01",
        events={"cpu": make_event_record(), "mem": make_event_record(status=1, output="WARNING")},
        history=["cpu", "mem", "disk"],
    )
    mock_store.add_client("db-01", events={"disk": make_event_record()}, history=["disk"])
    mock_store.add_client("cache-01")
    mock_store.add_stash("silence/web-01", {"reason": "maintenance"})
    mock_store.add_stash("silence/db-01/disk", {"expire": 3600})
    return mock_store
