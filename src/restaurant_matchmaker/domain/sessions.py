"""Domain models for swipe sessions and the swipe ledger."""

from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from enum import Enum

from restaurant_matchmaker.domain.restaurants import SessionFilters

MAX_SWIPES = 10


class SessionStatus(str, Enum):
    """Lifecycle states of a session."""

    WAITING = "waiting"
    ACTIVE = "active"
    COMPLETED = "completed"


class SwipeDirection(str, Enum):
    """A single vote on a candidate."""

    LEFT = "left"
    RIGHT = "right"


class Role(str, Enum):
    """A party's role within a session."""

    CREATOR = "creator"
    PARTNER = "partner"


@dataclass(frozen=True)
class SessionRecord:
    """Represents a persisted two-party swipe session."""

    id: str
    created_by: str
    partner_id: str | None
    status: SessionStatus
    filters: SessionFilters
    candidate_ids: tuple[str, ...]
    creator_swipe_count: int = 0
    partner_swipe_count: int = 0
    creator_completed: bool = False
    partner_completed: bool = False
    created_at: datetime = field(default_factory=lambda: datetime.now(tz=UTC))
    version: int = 0

    def swipe_count(self, role: Role) -> int:
        """Return the counter for a role."""
        if role is Role.CREATOR:
            return self.creator_swipe_count
        return self.partner_swipe_count

    def completed(self, role: Role) -> bool:
        """Return the completion flag for a role."""
        if role is Role.CREATOR:
            return self.creator_completed
        return self.partner_completed

    @property
    def both_completed(self) -> bool:
        return self.creator_completed and self.partner_completed


@dataclass(frozen=True)
class SwipeEntry:
    """Both parties' votes on one candidate within a session."""

    session_id: str
    candidate_id: str
    creator_swipe: SwipeDirection | None = None
    partner_swipe: SwipeDirection | None = None
    updated_at: datetime = field(default_factory=lambda: datetime.now(tz=UTC))

    @property
    def is_match(self) -> bool:
        return derive_match(self.creator_swipe, self.partner_swipe)

    def with_vote(self, role: Role, direction: SwipeDirection) -> "SwipeEntry":
        """Return a copy with the role's vote replaced."""
        now = datetime.now(tz=UTC)
        if role is Role.CREATOR:
            return replace(self, creator_swipe=direction, updated_at=now)
        return replace(self, partner_swipe=direction, updated_at=now)


def derive_match(
    creator_swipe: SwipeDirection | None, partner_swipe: SwipeDirection | None
) -> bool:
    """A candidate matches only when both parties swiped right."""
    return (
        creator_swipe is SwipeDirection.RIGHT
        and partner_swipe is SwipeDirection.RIGHT
    )
