"""Per-party view derived from the latest session and ledger snapshots."""

from dataclasses import dataclass

from restaurant_matchmaker.domain.sessions import (
    MAX_SWIPES,
    Role,
    SessionRecord,
    SwipeEntry,
)


@dataclass(frozen=True)
class SessionView:
    """What one party sees; recomputed from snapshots, never mutated."""

    role: Role | None
    swipe_count: int
    max_swipes: int
    can_swipe: bool
    is_user_complete: bool
    is_partner_complete: bool
    both_complete: bool
    matches: tuple[str, ...]

    @property
    def remaining_swipes(self) -> int:
        return max(self.max_swipes - self.swipe_count, 0)


def role_for(session: SessionRecord, device_id: str) -> Role | None:
    """Return the device's role in the session, if it is a member."""
    if device_id == session.created_by:
        return Role.CREATOR
    if session.partner_id is not None and device_id == session.partner_id:
        return Role.PARTNER
    return None


def match_ids(session: SessionRecord, swipes: list[SwipeEntry]) -> tuple[str, ...]:
    """Matched candidate ids in candidate-set order."""
    matched = {entry.candidate_id for entry in swipes if entry.is_match}
    return tuple(cid for cid in session.candidate_ids if cid in matched)


def project_session(
    session: SessionRecord,
    swipes: list[SwipeEntry],
    device_id: str,
    max_swipes: int = MAX_SWIPES,
) -> SessionView:
    """Derive a party's view of the session.

    Non-members see the partner's side of the counters, matching how a client
    that is not the creator reads the session before it has joined.
    """
    role = role_for(session, device_id)
    own = Role.CREATOR if role is Role.CREATOR else Role.PARTNER
    other = Role.PARTNER if own is Role.CREATOR else Role.CREATOR
    swipe_count = session.swipe_count(own)
    return SessionView(
        role=role,
        swipe_count=swipe_count,
        max_swipes=max_swipes,
        can_swipe=swipe_count < max_swipes,
        is_user_complete=session.completed(own),
        is_partner_complete=session.completed(other),
        both_complete=session.both_completed,
        matches=match_ids(session, swipes),
    )
