"""Process-local session store for development and tests."""

import asyncio
import threading
from collections.abc import Sequence
from dataclasses import dataclass, field

from restaurant_matchmaker.domain.restaurants import Restaurant
from restaurant_matchmaker.domain.sessions import SessionRecord, SwipeEntry
from restaurant_matchmaker.services.sessions import SessionStore


@dataclass
class InMemorySessionStore(SessionStore):
    """Versioned in-memory implementation of the session store.

    Reads yield to the event loop before returning so that concurrent
    coroutines interleave the way remote calls would. Writes hold a plain
    lock and never await, so each commit is a single compare-and-set. The lock
    is a thread lock because clients on other event loops share one store.
    """

    sessions: dict[str, SessionRecord] = field(default_factory=dict)
    swipes: dict[tuple[str, str], SwipeEntry] = field(default_factory=dict)
    candidates: dict[str, tuple[Restaurant, ...]] = field(default_factory=dict)
    commits: int = 0
    conflicts: int = 0
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    async def insert_session(
        self, session: SessionRecord, candidates: Sequence[Restaurant] = ()
    ) -> None:
        with self._lock:
            if session.id in self.sessions:
                raise KeyError(f"Session {session.id} already exists")
            self.sessions[session.id] = session
            self.candidates[session.id] = tuple(candidates)

    async def list_candidates(self, session_id: str) -> list[Restaurant]:
        await asyncio.sleep(0)
        return list(self.candidates.get(session_id, ()))

    async def get_session(self, session_id: str) -> SessionRecord | None:
        await asyncio.sleep(0)
        return self.sessions.get(session_id)

    async def get_swipe(self, session_id: str, candidate_id: str) -> SwipeEntry | None:
        await asyncio.sleep(0)
        return self.swipes.get((session_id, candidate_id))

    async def list_swipes(self, session_id: str) -> list[SwipeEntry]:
        await asyncio.sleep(0)
        with self._lock:
            items = list(self.swipes.items())
        return [entry for (owner, _), entry in items if owner == session_id]

    async def commit(
        self,
        session: SessionRecord,
        expected_version: int,
        swipe: SwipeEntry | None = None,
    ) -> bool:
        with self._lock:
            current = self.sessions.get(session.id)
            if current is None or current.version != expected_version:
                self.conflicts += 1
                return False
            self.sessions[session.id] = session
            if swipe is not None:
                self.swipes[(swipe.session_id, swipe.candidate_id)] = swipe
            self.commits += 1
            return True
