"""
Property-based tests using Hypothesis for the control-plane API.

These tests verify invariants that must hold for any input: index and key
consistency for stashes, subscriber de-duplication, fan-in completeness,
and the resolution count of a client deletion.
"""

import asyncio

import hypothesis.strategies as st
from fastapi.testclient import TestClient
from hypothesis import HealthCheck, given, settings

from controlplane.checks import CheckRegistry
from controlplane.config import Settings
from controlplane.context import AppContext
from controlplane.engine.deletion import ClientDeletionWorkflow
from controlplane.engine.fanin import fan_in
from controlplane.main import create_app
from tests.conftest import MockBus, MockStore, make_event_record

segment = st.from_regex(r"[a-z0-9_-]{1,6}", fullmatch=True)
stash_paths = st.lists(segment, min_size=1, max_size=3).map("/".join)
check_names = st.from_regex(r"[a-z][a-z0-9_.-]{0,10}", fullmatch=True)


def _app_client(store: MockStore, bus: MockBus) -> TestClient:
    ctx = AppContext(
        settings=Settings(_env_file=None, api_user=None, api_password=None),
        store=store,
        bus=bus,
        checks=CheckRegistry(),
    )
    return TestClient(create_app(context=ctx, on_fatal=lambda: None))


# =============================================================================
# Stash Property Tests
# =============================================================================


@given(
    pool=st.lists(stash_paths, min_size=1, max_size=4, unique=True),
    operations=st.lists(
        st.tuples(st.sampled_from(["create", "delete"]), st.integers(min_value=0, max_value=3)),
        max_size=12,
    ),
)
@settings(max_examples=25, deadline=None, suppress_health_check=[HealthCheck.too_slow])
def test_prop_stash_index_matches_keys(pool: list[str], operations: list[tuple[str, int]]):
    """
    Invariant: after every create or delete completes, a path is in the
    ``stashes`` set exactly when ``stash:<path>`` exists.
    """
    store = MockStore()
    with _app_client(store, MockBus()) as client:
        for op, index in operations:
            path = pool[index % len(pool)]
            if op == "create":
                assert client.post(f"/stash/{path}", json={"op": index}).status_code == 201
            else:
                assert client.delete(f"/stash/{path}").status_code in (204, 404)

            indexed = store.sets.get("stashes", set())
            for candidate in pool:
                assert (candidate in indexed) == store.has_key(f"stash:{candidate}")

        listed = client.get("/stashes").json()
        assert sorted(listed) == sorted(store.sets.get("stashes", set()))


# =============================================================================
# Check Request Property Tests
# =============================================================================


@given(subscribers=st.lists(st.sampled_from(["s1", "s2", "linux", "web", "db"]), max_size=15))
@settings(max_examples=25, deadline=None, suppress_health_check=[HealthCheck.too_slow])
def test_prop_check_request_publishes_unique_subscribers(subscribers: list[str]):
    """
    Invariant: one publish per distinct subscriber, in first-seen order.
    """
    bus = MockBus()
    with _app_client(MockStore(), bus) as client:
        response = client.post("/request", json={"check": "cpu", "subscribers": subscribers})

    assert response.status_code == 201
    published = [exchange for exchange, _ in bus.fanout_messages]
    assert published == list(dict.fromkeys(subscribers))
    assert len(published) == len(set(subscribers))


# =============================================================================
# Fan-in Property Tests
# =============================================================================


@given(delays=st.lists(st.integers(min_value=0, max_value=5), max_size=20))
@settings(max_examples=50, deadline=None)
def test_prop_fanin_returns_every_result_once(delays: list[int]):
    """
    Invariant: the aggregated result holds exactly one entry per operation,
    whatever order they finish in.
    """

    async def op(index: int, delay: int):
        await asyncio.sleep(delay / 1000)
        return index

    results = asyncio.run(fan_in(op(i, d) for i, d in enumerate(delays)))

    assert sorted(results) == list(range(len(delays)))


# =============================================================================
# Deletion Property Tests
# =============================================================================


@given(checks=st.sets(check_names, max_size=8))
@settings(max_examples=30, deadline=None)
def test_prop_client_deletion_resolves_each_open_event(checks: set[str]):
    """
    Invariant: a client with k open events yields exactly k resolutions and
    leaves no client, events or history keys once cleanup has run.
    """
    store = MockStore()
    bus = MockBus()
    store.add_client(
        "web-01",
        events={check: make_event_record() for check in checks},
        history=sorted(checks),
    )
    workflow = ClientDeletionWorkflow(store, bus, grace_period=0)

    async def run():
        await workflow.delete_client("web-01")
        await workflow.drain()

    asyncio.run(run())

    resolved = [payload["check"]["name"] for payload in bus.resolutions()]
    assert sorted(resolved) == sorted(checks)
    assert store.keys_matching("client:web-01") == []
    assert store.keys_matching("events:web-01") == []
    assert store.keys_matching("history:web-01") == []
