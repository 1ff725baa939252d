"""Tests for session snapshot subscriptions."""

import asyncio

import pytest

from restaurant_matchmaker.adapters.memory_session_store import InMemorySessionStore
from restaurant_matchmaker.domain.errors import PersistenceError
from restaurant_matchmaker.domain.restaurants import SessionFilters
from restaurant_matchmaker.domain.sessions import SessionStatus
from restaurant_matchmaker.services.events import SessionEventHub
from restaurant_matchmaker.services.sessions import SessionCoordinator
from tests.conftest import make_coordinator


class BrokenReadStore(InMemorySessionStore):
    async def get_session(self, session_id: str):
        raise ConnectionError("store offline")


def test_hub_delivers_until_unsubscribed() -> None:
    hub = SessionEventHub()
    received: list[object] = []

    subscription = hub.add(("session", "s1"), received.append)
    hub.publish(("session", "s1"), "first")
    hub.publish(("session", "other"), "ignored")
    subscription.unsubscribe()
    subscription.unsubscribe()
    hub.publish(("session", "s1"), "second")

    assert received == ["first"]
    assert hub.listener_count() == 0
    assert not hub.has_listeners(("session", "s1"))


def test_hub_isolates_failing_listeners() -> None:
    hub = SessionEventHub()
    received: list[object] = []

    def explode(_snapshot: object) -> None:
        raise RuntimeError("listener bug")

    hub.add(("swipes", "s1"), explode)
    hub.add(("swipes", "s1"), received.append)
    hub.publish(("swipes", "s1"), ["entry"])

    assert received == [["entry"]]


def test_session_subscription_sends_initial_and_updates(
    coordinator: SessionCoordinator,
) -> None:
    statuses: list[SessionStatus | None] = []

    async def scenario() -> None:
        session_id = await coordinator.create_session(
            "creator", SessionFilters(), ["A", "B"]
        )
        subscription = await coordinator.subscribe_to_session(
            session_id,
            lambda session: statuses.append(session.status if session else None),
        )
        await coordinator.join_session(session_id, "partner")
        subscription.unsubscribe()
        await coordinator.end_session(session_id)

    asyncio.run(scenario())

    assert statuses == [SessionStatus.WAITING, SessionStatus.ACTIVE]
    assert coordinator.events.listener_count() == 0


def test_subscription_to_missing_session_gets_none(
    coordinator: SessionCoordinator,
) -> None:
    received: list[object] = []

    asyncio.run(coordinator.subscribe_to_session("missing1", received.append))

    assert received == [None]


def test_swipe_subscription_sends_full_ledger(
    coordinator: SessionCoordinator,
) -> None:
    snapshots: list[list[tuple[str, bool]]] = []

    async def scenario() -> None:
        session_id = await coordinator.create_session(
            "creator", SessionFilters(), ["A", "B"]
        )
        await coordinator.join_session(session_id, "partner")
        await coordinator.subscribe_to_swipes(
            session_id,
            lambda swipes: snapshots.append(
                sorted((entry.candidate_id, entry.is_match) for entry in swipes)
            ),
        )
        await coordinator.record_swipe(session_id, "A", "creator", True, "right")
        await coordinator.record_swipe(session_id, "A", "partner", False, "right")
        await coordinator.record_swipe(session_id, "B", "creator", True, "left")

    asyncio.run(scenario())

    assert snapshots == [
        [],
        [("A", False)],
        [("A", True)],
        [("A", True), ("B", False)],
    ]


def test_failing_listener_does_not_fail_the_swipe(
    coordinator: SessionCoordinator,
) -> None:
    def explode(_snapshot: object) -> None:
        raise RuntimeError("listener bug")

    async def scenario() -> bool:
        session_id = await coordinator.create_session(
            "creator", SessionFilters(), ["A"]
        )
        await coordinator.join_session(session_id, "partner")
        await coordinator.subscribe_to_session(session_id, explode)
        await coordinator.subscribe_to_swipes(session_id, explode)
        await coordinator.record_swipe(session_id, "A", "creator", True, "right")
        return await coordinator.record_swipe(
            session_id, "A", "partner", False, "right"
        )

    assert asyncio.run(scenario()) is True


def test_concurrent_updates_never_deliver_older_snapshots(
    coordinator: SessionCoordinator,
) -> None:
    versions: list[int] = []

    async def scenario() -> None:
        session_id = await coordinator.create_session(
            "creator", SessionFilters(), ["A", "B", "C"]
        )
        await coordinator.join_session(session_id, "partner")
        await coordinator.subscribe_to_session(
            session_id, lambda session: versions.append(session.version)
        )
        await asyncio.gather(
            coordinator.record_swipe(session_id, "A", "creator", True, "right"),
            coordinator.record_swipe(session_id, "B", "partner", False, "right"),
            coordinator.record_swipe(session_id, "C", "creator", True, "left"),
        )

    asyncio.run(scenario())

    assert versions == sorted(versions)
    assert versions[-1] == 4


def test_subscribe_failure_raises_and_unregisters() -> None:
    coordinator = make_coordinator(BrokenReadStore())

    with pytest.raises(PersistenceError):
        asyncio.run(coordinator.subscribe_to_session("abc12345", print))

    assert coordinator.events.listener_count() == 0


def test_hub_forgets_versions_when_last_listener_leaves() -> None:
    hub = SessionEventHub()
    topic = ("session", "s1")

    assert hub.advance(topic, 3) is False
    first = hub.add(topic, lambda _snapshot: None)
    second = hub.add(topic, lambda _snapshot: None)
    assert hub.advance(topic, 3) is True
    assert hub.advance(topic, 2) is False

    first.unsubscribe()
    assert hub.last_version(topic) == 3
    second.unsubscribe()

    assert hub.last_version(topic) == -1
    assert hub.tracked_topics() == 0


def test_finished_observers_leave_no_bookkeeping(
    coordinator: SessionCoordinator,
) -> None:
    async def scenario() -> None:
        for index in range(50):
            session_id = await coordinator.create_session(
                f"creator-{index}", SessionFilters(), ["A", "B"]
            )
            on_session = await coordinator.subscribe_to_session(
                session_id, lambda _session: None
            )
            on_swipes = await coordinator.subscribe_to_swipes(
                session_id, lambda _swipes: None
            )
            await coordinator.join_session(session_id, f"partner-{index}")
            await coordinator.record_swipe(
                session_id, "A", f"creator-{index}", True, "right"
            )
            on_session.unsubscribe()
            on_swipes.unsubscribe()

    asyncio.run(scenario())

    assert coordinator.events.listener_count() == 0
    assert coordinator.events.tracked_topics() == 0
