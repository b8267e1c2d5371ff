"""Shared protocols and enums for stat derivation."""

from __future__ import annotations

from enum import Enum
from typing import Protocol, runtime_checkable


class TeamAssignment(str, Enum):
    """How a player row was placed on team 1 or team 2."""

    MATCHED = "matched"
    BALANCED_FALLBACK = "balanced-fallback"


class TeamNumbering(str, Enum):
    """How raw backend team ids were mapped onto team numbers 1/2."""

    MATCH_IDS = "match-ids"
    ASCENDING_ROSTER_IDS = "ascending-roster-ids"
    UNRESOLVED = "unresolved"


class CompetitionStatus(str, Enum):
    """Lifecycle state of a season/competition."""

    UPCOMING = "Upcoming"
    ACTIVE = "Active"
    ENDED = "Ended"


class FormResult(str, Enum):
    """One entry of a player's recent-form strip."""

    WIN = "W"
    LOSS = "L"
    DRAW = "D"
    CANCELLED = "C"


@runtime_checkable
class RateLimitStore(Protocol):
    """Backing store for fixed-window request counters."""

    def get(self, key: str) -> tuple[int, float] | None: ...

    def increment(self, key: str, *, window_end: float) -> tuple[int, float]: ...

    def reset(self, key: str) -> None: ...


__all__ = [
    "CompetitionStatus",
    "FormResult",
    "RateLimitStore",
    "TeamAssignment",
    "TeamNumbering",
]
