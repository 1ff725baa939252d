"""Supabase-backed session store."""

import asyncio
from collections.abc import Sequence
from dataclasses import asdict, dataclass
from datetime import UTC, datetime

from supabase import Client

from restaurant_matchmaker.domain.restaurants import (
    Category,
    LocationData,
    Restaurant,
    SessionFilters,
    TransactionType,
)
from restaurant_matchmaker.domain.sessions import (
    SessionRecord,
    SessionStatus,
    SwipeDirection,
    SwipeEntry,
)
from restaurant_matchmaker.services.sessions import SessionStore

_SESSION_COLUMNS = (
    "id, created_by, partner_id, status, filters, candidate_ids, "
    "creator_swipe_count, partner_swipe_count, creator_completed, "
    "partner_completed, created_at, version"
)
_SWIPE_COLUMNS = "session_id, candidate_id, creator_swipe, partner_swipe, updated_at"


@dataclass
class SupabaseSessionStore(SessionStore):
    """Supabase implementation of sessions and the swipe ledger.

    Commits go through the ``commit_session_state`` database function so the
    versioned session update and the ledger upsert share one transaction.
    """

    client: Client

    async def insert_session(
        self, session: SessionRecord, candidates: Sequence[Restaurant] = ()
    ) -> None:
        """Insert a session row together with its candidate records."""
        row = _session_to_row(session)
        row["candidates"] = [asdict(restaurant) for restaurant in candidates]
        response = await asyncio.to_thread(
            lambda: self.client.table("sessions").insert(row).execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create session")

    async def list_candidates(self, session_id: str) -> list[Restaurant]:
        """Return the candidate records written at creation."""
        response = await asyncio.to_thread(
            lambda: self.client.table("sessions")
            .select("candidates")
            .eq("id", session_id)
            .limit(1)
            .execute()
        )
        if not response.data:
            return []
        items = response.data[0].get("candidates") or []
        return [_restaurant_from_json(item) for item in items]

    async def get_session(self, session_id: str) -> SessionRecord | None:
        """Return a session by id, if present."""
        response = await asyncio.to_thread(
            lambda: self.client.table("sessions")
            .select(_SESSION_COLUMNS)
            .eq("id", session_id)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _session_from_row(response.data[0])

    async def get_swipe(self, session_id: str, candidate_id: str) -> SwipeEntry | None:
        """Return the ledger entry for one candidate."""
        response = await asyncio.to_thread(
            lambda: self.client.table("session_swipes")
            .select(_SWIPE_COLUMNS)
            .eq("session_id", session_id)
            .eq("candidate_id", candidate_id)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _swipe_from_row(response.data[0])

    async def list_swipes(self, session_id: str) -> list[SwipeEntry]:
        """Return every ledger entry for a session."""
        response = await asyncio.to_thread(
            lambda: self.client.table("session_swipes")
            .select(_SWIPE_COLUMNS)
            .eq("session_id", session_id)
            .execute()
        )
        return [_swipe_from_row(row) for row in response.data or []]

    async def commit(
        self,
        session: SessionRecord,
        expected_version: int,
        swipe: SwipeEntry | None = None,
    ) -> bool:
        """Compare-and-set the session row and upsert the ledger entry."""
        params = {
            "p_session": _session_to_row(session),
            "p_expected_version": expected_version,
            "p_swipe": _swipe_to_row(swipe) if swipe is not None else None,
        }
        response = await asyncio.to_thread(
            lambda: self.client.rpc("commit_session_state", params).execute()
        )
        data = response.data
        if isinstance(data, list):
            return bool(data and data[0])
        return bool(data)


def _session_to_row(session: SessionRecord) -> dict[str, object]:
    return {
        "id": session.id,
        "created_by": session.created_by,
        "partner_id": session.partner_id,
        "status": session.status.value,
        "filters": _filters_to_json(session.filters),
        "candidate_ids": list(session.candidate_ids),
        "creator_swipe_count": session.creator_swipe_count,
        "partner_swipe_count": session.partner_swipe_count,
        "creator_completed": session.creator_completed,
        "partner_completed": session.partner_completed,
        "created_at": session.created_at.isoformat(),
        "version": session.version,
    }


def _session_from_row(row: dict) -> SessionRecord:
    return SessionRecord(
        id=row["id"],
        created_by=row["created_by"],
        partner_id=row.get("partner_id"),
        status=SessionStatus(row["status"]),
        filters=_filters_from_json(row.get("filters") or {}),
        candidate_ids=tuple(row.get("candidate_ids") or ()),
        creator_swipe_count=int(row.get("creator_swipe_count") or 0),
        partner_swipe_count=int(row.get("partner_swipe_count") or 0),
        creator_completed=bool(row.get("creator_completed")),
        partner_completed=bool(row.get("partner_completed")),
        created_at=_parse_timestamp(row.get("created_at")),
        version=int(row.get("version") or 0),
    )


def _swipe_to_row(entry: SwipeEntry) -> dict[str, object]:
    return {
        "session_id": entry.session_id,
        "candidate_id": entry.candidate_id,
        "creator_swipe": entry.creator_swipe.value if entry.creator_swipe else None,
        "partner_swipe": entry.partner_swipe.value if entry.partner_swipe else None,
        "is_match": entry.is_match,
        "updated_at": entry.updated_at.isoformat(),
    }


def _swipe_from_row(row: dict) -> SwipeEntry:
    creator_swipe = row.get("creator_swipe")
    partner_swipe = row.get("partner_swipe")
    return SwipeEntry(
        session_id=row["session_id"],
        candidate_id=row["candidate_id"],
        creator_swipe=SwipeDirection(creator_swipe) if creator_swipe else None,
        partner_swipe=SwipeDirection(partner_swipe) if partner_swipe else None,
        updated_at=_parse_timestamp(row.get("updated_at")),
    )


def _restaurant_from_json(payload: dict) -> Restaurant:
    return Restaurant(
        **{
            **payload,
            "categories": tuple(
                Category(alias=c["alias"], title=c["title"])
                for c in payload.get("categories") or []
            ),
            "transactions": tuple(payload.get("transactions") or ()),
        }
    )


def _filters_to_json(filters: SessionFilters) -> dict[str, object]:
    payload: dict[str, object] = {
        "cuisines": list(filters.cuisines),
        "price_range": list(filters.price_range),
        "transaction_type": filters.transaction_type.value,
    }
    if filters.location is not None:
        payload["location"] = {
            "latitude": filters.location.latitude,
            "longitude": filters.location.longitude,
            "source": filters.location.source,
        }
    return payload


def _filters_from_json(payload: dict) -> SessionFilters:
    location = payload.get("location")
    return SessionFilters(
        cuisines=tuple(payload.get("cuisines") or ()),
        price_range=tuple(payload.get("price_range") or ()),
        transaction_type=TransactionType(payload.get("transaction_type") or "any"),
        location=(
            LocationData(
                latitude=float(location["latitude"]),
                longitude=float(location["longitude"]),
                source=str(location.get("source", "gps")),
            )
            if location
            else None
        ),
    )


def _parse_timestamp(value: object) -> datetime:
    if isinstance(value, str):
        return datetime.fromisoformat(value)
    return datetime.now(tz=UTC)
