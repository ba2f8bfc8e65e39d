"""
Golden Path (End-to-End) Tests for the monitoring control-plane API.

Each scenario drives the full HTTP stack against the in-memory store and
recording bus with a fixed dataset, and checks both the response and the
resulting store/bus state.
"""

from fastapi.testclient import TestClient

from controlplane.context import AppContext
from controlplane.models.messages import RESOLVE_OUTPUT
from tests.conftest import MockBus, MockStore, make_event_record


# ============================================================================
# Scenario 1: Client Deletion → Resolutions → Deferred Cleanup
# ============================================================================


def test_golden_client_deletion(
    client: TestClient, context: AppContext, mock_store: MockStore, mock_bus: MockBus
):
    """
    Golden path: deleting a client with two open events.

    Verifies:
    - 202 with an empty body
    - Exactly one resolution per open event, each forcing status 0
    - Client record, events hash and history are gone after the grace period
    """
    mock_store.add_client(
        "foo",
        events={"cpu": make_event_record(), "mem": make_event_record(status=1)},
        history=["cpu", "mem"],
    )

    response = client.delete("/clients/foo")

    assert response.status_code == 202
    assert response.content == b""

    resolutions = mock_bus.resolutions()
    assert len(resolutions) == 2
    assert sorted(r["check"]["name"] for r in resolutions) == ["cpu", "mem"]
    for resolution in resolutions:
        assert resolution["client"] == "foo"
        assert resolution["check"]["status"] == 0
        assert resolution["check"]["output"] == RESOLVE_OUTPUT
        assert resolution["check"]["force_resolve"] is True

    client.portal.call(context.deletions.drain)

    assert not mock_store.has_key("client:foo")
    assert not mock_store.has_key("events:foo")
    assert mock_store.keys_matching("history:foo") == []
    assert "foo" not in mock_store.sets.get("clients", set())
    assert client.get("/clients").json() == []


# ============================================================================
# Scenario 2: Stash Create → Read → List
# ============================================================================


def test_golden_stash_lifecycle(client: TestClient, mock_store: MockStore):
    """
    Golden path: a stash written at a nested path is readable and listed.
    """
    response = client.post("/stashes/a/b", json={"x": 1})
    assert response.status_code == 201

    read = client.get("/stashes/a/b")
    assert read.status_code == 200
    assert read.json() == {"x": 1}

    listing = client.get("/stashes")
    assert listing.status_code == 200
    assert "a/b" in listing.json()

    deleted = client.delete("/stashes/a/b")
    assert deleted.status_code == 204
    assert client.get("/stashes").json() == []
    assert not mock_store.has_key("stash:a/b")


# ============================================================================
# Scenario 3: Check Request with Duplicate Subscribers
# ============================================================================


def test_golden_check_request_deduplicates_subscribers(client: TestClient, mock_bus: MockBus):
    """
    Golden path: duplicate subscribers get a single publish each.
    """
    response = client.post("/request", json={"check": "c", "subscribers": ["s1", "s1", "s2"]})

    assert response.status_code == 201
    assert [exchange for exchange, _ in mock_bus.fanout_messages] == ["s1", "s2"]
    assert all(payload["name"] == "c" for _, payload in mock_bus.fanout_messages)
    assert mock_bus.queue_messages == []


# ============================================================================
# Scenarios 4-6: Empty and Missing Resources
# ============================================================================


def test_golden_events_for_unknown_client(client: TestClient):
    response = client.get("/events/unknown_client")

    assert response.status_code == 200
    assert response.json() == []


def test_golden_delete_missing_stash(client: TestClient):
    response = client.delete("/stash/missing")

    assert response.status_code == 404
    assert response.content == b""


def test_golden_empty_batch_stash_lookup(client: TestClient, mock_store: MockStore):
    response = client.post("/stashes", json=[])

    assert response.status_code == 400
    assert mock_store.calls == []


# ============================================================================
# Empty indices
# ============================================================================


def test_golden_empty_indices_read_only_the_index(client: TestClient, mock_store: MockStore):
    """
    Golden path: listing empty collections costs one index read each.
    """
    for path in ("/clients", "/events", "/stashes"):
        response = client.get(path)
        assert response.status_code == 200
        assert response.json() == []

    assert mock_store.calls == [
        ("smembers", "clients"),
        ("smembers", "clients"),
        ("smembers", "stashes"),
    ]
