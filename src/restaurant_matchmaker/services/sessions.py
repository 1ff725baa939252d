"""Transactional coordination of two-party swipe sessions."""

import asyncio
import logging
from collections.abc import Awaitable, Callable, Iterator, Sequence
from contextlib import contextmanager
from dataclasses import dataclass, field, replace
from typing import Generic, Protocol, TypeVar
from uuid import uuid4

from restaurant_matchmaker.domain.errors import (
    BudgetExceededError,
    ConflictError,
    DomainError,
    InvalidOperationError,
    NotFoundError,
    PersistenceError,
)
from restaurant_matchmaker.domain.restaurants import Restaurant, SessionFilters
from restaurant_matchmaker.domain.sessions import (
    MAX_SWIPES,
    Role,
    SessionRecord,
    SessionStatus,
    SwipeDirection,
    SwipeEntry,
)
from restaurant_matchmaker.services.candidates import get_restaurant
from restaurant_matchmaker.services.events import SessionEventHub, Subscription

_logger = logging.getLogger(__name__)

_ID_ATTEMPTS = 5

T = TypeVar("T")


class SessionStore(Protocol):
    """Persistence interface for sessions and their swipe ledger."""

    async def insert_session(
        self, session: SessionRecord, candidates: Sequence[Restaurant] = ()
    ) -> None:
        """Persist a brand new session record with its candidate records."""

    async def list_candidates(self, session_id: str) -> list[Restaurant]:
        """Return the candidate records stored with a session."""

    async def get_session(self, session_id: str) -> SessionRecord | None:
        """Return a session by id, if present."""

    async def get_swipe(self, session_id: str, candidate_id: str) -> SwipeEntry | None:
        """Return the ledger entry for a candidate, if any vote exists."""

    async def list_swipes(self, session_id: str) -> list[SwipeEntry]:
        """Return every ledger entry for a session."""

    async def commit(
        self,
        session: SessionRecord,
        expected_version: int,
        swipe: SwipeEntry | None = None,
    ) -> bool:
        """Atomically write the session and optional entry.

        Returns False without writing when the stored session version no
        longer equals ``expected_version``.
        """


def generate_session_id() -> str:
    """Short shareable token: the first block of a random UUID."""
    return uuid4().hex[:8]


@dataclass(frozen=True)
class _Outcome(Generic[T]):
    result: T
    session: SessionRecord | None = None
    swipe: SwipeEntry | None = None


@contextmanager
def _store_errors(action: str) -> Iterator[None]:
    """Translate raw store failures into PersistenceError."""
    try:
        yield
    except DomainError:
        raise
    except Exception as exc:
        _logger.exception("Session store failed to %s", action)
        raise PersistenceError(f"Failed to {action}") from exc


@dataclass
class SessionCoordinator:
    """Create, join, swipe and end sessions with optimistic transactions."""

    store: SessionStore
    events: SessionEventHub = field(default_factory=SessionEventHub)
    max_swipes: int = MAX_SWIPES
    retry_attempts: int = 5
    retry_delay_seconds: float = 0.01
    id_factory: Callable[[], str] = generate_session_id

    async def create_session(
        self,
        creator_id: str,
        filters: SessionFilters,
        candidate_ids: Sequence[str],
        candidates: Sequence[Restaurant] = (),
    ) -> str:
        """Create a waiting session bound to a fixed candidate order.

        ``candidates`` are the full records behind ``candidate_ids``; they are
        stored so the partner replays exactly what the creator was shown.
        """
        if not candidate_ids:
            raise InvalidOperationError("A session needs at least one candidate")
        with _store_errors("create session"):
            for _ in range(_ID_ATTEMPTS):
                session_id = self.id_factory()
                if await self.store.get_session(session_id) is None:
                    break
            else:
                raise PersistenceError("Could not allocate a unique session id")
            session = SessionRecord(
                id=session_id,
                created_by=creator_id,
                partner_id=None,
                status=SessionStatus.WAITING,
                filters=filters,
                candidate_ids=tuple(candidate_ids),
            )
            await self.store.insert_session(session, tuple(candidates))
        _logger.info(
            "Session created: id=%s candidates=%s", session_id, len(candidate_ids)
        )
        await self._publish(session_id, swipes_changed=False)
        return session_id

    async def get_session(self, session_id: str) -> SessionRecord:
        """Return the current session record."""
        with _store_errors("load session"):
            session = await self.store.get_session(session_id)
        if session is None:
            raise NotFoundError()
        return session

    async def list_swipes(self, session_id: str) -> list[SwipeEntry]:
        """Return the current ledger entries for a session."""
        with _store_errors("load swipes"):
            return await self.store.list_swipes(session_id)

    async def get_candidates(self, session_id: str) -> list[Restaurant]:
        """Return the stored candidate records in the session's fixed order."""
        session = await self.get_session(session_id)
        with _store_errors("load candidates"):
            records = await self.store.list_candidates(session_id)
        ordered = (get_restaurant(records, cid) for cid in session.candidate_ids)
        return [restaurant for restaurant in ordered if restaurant is not None]

    async def join_session(self, session_id: str, partner_id: str) -> bool:
        """Join as the second party; repeat joins by the same device succeed."""

        async def mutate(session: SessionRecord) -> _Outcome[bool]:
            if partner_id == session.created_by:
                raise InvalidOperationError("Cannot join your own session")
            if session.partner_id == partner_id:
                return _Outcome(True)
            if session.partner_id is not None:
                raise ConflictError()
            if session.status is SessionStatus.COMPLETED:
                raise InvalidOperationError("Session already ended")
            joined = replace(
                session,
                partner_id=partner_id,
                status=SessionStatus.ACTIVE,
                version=session.version + 1,
            )
            return _Outcome(True, joined)

        return await self._transact(session_id, mutate, action="join session")

    async def record_swipe(  # noqa: PLR0913
        self,
        session_id: str,
        candidate_id: str,
        device_id: str,
        is_creator: bool,
        direction: SwipeDirection | str,
    ) -> bool:
        """Record one vote and return whether the candidate is now a match."""
        try:
            vote = SwipeDirection(direction)
        except ValueError as exc:
            message = f"Unknown swipe direction: {direction}"
            raise InvalidOperationError(message) from exc
        role = Role.CREATOR if is_creator else Role.PARTNER

        async def mutate(session: SessionRecord) -> _Outcome[bool]:
            owner = session.created_by if is_creator else session.partner_id
            if owner is None or device_id != owner:
                raise InvalidOperationError(
                    f"Device is not the {role.value} of this session"
                )
            if candidate_id not in session.candidate_ids:
                raise NotFoundError("Candidate is not part of this session")
            current_count = session.swipe_count(role)
            if current_count >= self.max_swipes:
                raise BudgetExceededError(self.max_swipes)
            if session.status is SessionStatus.COMPLETED:
                raise InvalidOperationError("Session already ended")

            with _store_errors("load swipe"):
                existing = await self.store.get_swipe(session_id, candidate_id)
            entry = existing or SwipeEntry(
                session_id=session_id, candidate_id=candidate_id
            )
            entry = entry.with_vote(role, vote)

            new_count = current_count + 1
            reached = new_count >= self.max_swipes
            if role is Role.CREATOR:
                updated = replace(
                    session,
                    creator_swipe_count=new_count,
                    creator_completed=session.creator_completed or reached,
                )
            else:
                updated = replace(
                    session,
                    partner_swipe_count=new_count,
                    partner_completed=session.partner_completed or reached,
                )
            if updated.both_completed:
                updated = replace(updated, status=SessionStatus.COMPLETED)
            updated = replace(updated, version=session.version + 1)
            return _Outcome(entry.is_match, updated, entry)

        return await self._transact(session_id, mutate, action="record swipe")

    async def end_session(self, session_id: str) -> None:
        """Force the session to completed; ending twice is a no-op."""

        async def mutate(session: SessionRecord) -> _Outcome[None]:
            if session.status is SessionStatus.COMPLETED:
                return _Outcome(None)
            ended = replace(
                session, status=SessionStatus.COMPLETED, version=session.version + 1
            )
            return _Outcome(None, ended)

        await self._transact(session_id, mutate, action="end session")

    async def subscribe_to_session(
        self, session_id: str, callback: Callable[[SessionRecord | None], None]
    ) -> Subscription:
        """Observe the session record; the current snapshot is sent at once."""
        topic = ("session", session_id)
        subscription = self.events.add(topic, callback)
        try:
            with _store_errors("load session"):
                snapshot = await self.store.get_session(session_id)
        except PersistenceError:
            subscription.unsubscribe()
            raise
        version = snapshot.version if snapshot else -1
        if subscription.active and version >= self.events.last_version(topic):
            _deliver(callback, snapshot)
        return subscription

    async def subscribe_to_swipes(
        self, session_id: str, callback: Callable[[list[SwipeEntry]], None]
    ) -> Subscription:
        """Observe the full ledger; the current entries are sent at once."""
        topic = ("swipes", session_id)
        subscription = self.events.add(topic, callback)
        try:
            with _store_errors("load swipes"):
                session = await self.store.get_session(session_id)
                swipes = await self.store.list_swipes(session_id)
        except PersistenceError:
            subscription.unsubscribe()
            raise
        version = session.version if session else -1
        if subscription.active and version >= self.events.last_version(topic):
            _deliver(callback, swipes)
        return subscription

    async def _transact(
        self,
        session_id: str,
        mutate: Callable[[SessionRecord], Awaitable[_Outcome[T]]],
        *,
        action: str,
    ) -> T:
        """Run a read-modify-write against a fresh read until it commits."""
        for attempt in range(1, self.retry_attempts + 1):
            with _store_errors(action):
                current = await self.store.get_session(session_id)
            if current is None:
                raise NotFoundError()
            outcome = await mutate(current)
            if outcome.session is None:
                return outcome.result
            with _store_errors(action):
                committed = await self.store.commit(
                    outcome.session, current.version, outcome.swipe
                )
            if committed:
                await self._publish(
                    session_id, swipes_changed=outcome.swipe is not None
                )
                return outcome.result
            _logger.debug(
                "Version conflict on session %s during %s (attempt %s/%s)",
                session_id,
                action,
                attempt,
                self.retry_attempts,
            )
            if self.retry_delay_seconds:
                await asyncio.sleep(self.retry_delay_seconds * attempt)
        _logger.warning(
            "Gave up on %s for session %s after %s attempts",
            action,
            session_id,
            self.retry_attempts,
        )
        raise PersistenceError(f"Failed to {action}: too many concurrent updates")

    async def _publish(self, session_id: str, *, swipes_changed: bool) -> None:
        """Push fresh snapshots to observers, dropping ones already superseded."""
        session_topic = ("session", session_id)
        swipes_topic = ("swipes", session_id)
        watch_session = self.events.has_listeners(session_topic)
        watch_swipes = swipes_changed and self.events.has_listeners(swipes_topic)
        if not (watch_session or watch_swipes):
            return
        try:
            session = await self.store.get_session(session_id)
            swipes = await self.store.list_swipes(session_id) if watch_swipes else []
        except Exception:
            _logger.exception("Failed to load snapshot for session %s", session_id)
            return
        version = session.version if session else -1
        if watch_session and self.events.advance(session_topic, version):
            self.events.publish(session_topic, session)
        if watch_swipes and self.events.advance(swipes_topic, version):
            self.events.publish(swipes_topic, swipes)


def _deliver(callback: Callable[[T], None], snapshot: T) -> None:
    try:
        callback(snapshot)
    except Exception:
        _logger.exception("Session listener failed on initial snapshot")
