"""Shared value types produced by the normalizers and derivation engines."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any

from domain.protocol import TeamAssignment


@dataclass(frozen=True)
class PlayerStat:
    """Canonical per-player stat line (leaderboard, per-match or pooled)."""

    steam_id: str
    name: str = "Unknown"
    kills: int = 0
    deaths: int = 0
    assists: int = 0
    roundsplayed: int = 0
    k1: int = 0
    k2: int = 0
    k3: int = 0
    k4: int = 0
    k5: int = 0
    v1: int = 0
    v2: int = 0
    v3: int = 0
    v4: int = 0
    v5: int = 0
    hsk: int = 0
    hsp: float = 0.0
    average_rating: float = 0.0
    wins: int = 0
    total_maps: int = 0
    points: int = 1000

    def as_record(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class Match:
    """Canonical match (series) record."""

    id: int
    team1_id: int = 0
    team2_id: int = 0
    winner: int | None = None
    team1_score: int = 0
    team2_score: int = 0
    team1_mapscore: int | None = None
    team2_mapscore: int | None = None
    team1_string: str = "Team 1"
    team2_string: str = "Team 2"
    cancelled: bool = False
    forfeit: bool = False
    start_time: str = ""
    end_time: str | None = None
    title: str = ""
    max_maps: int = 1
    season_id: int | None = None
    is_pug: bool = True

    @property
    def is_decided(self) -> bool:
        """True for matches that count towards standings."""
        return self.winner is not None and not self.cancelled and not self.forfeit

    @property
    def is_live(self) -> bool:
        return (
            self.winner is None
            and self.end_time is None
            and not self.cancelled
            and not self.forfeit
        )

    def as_record(self) -> dict[str, Any]:
        record = asdict(self)
        # Emit the winner as the backend team id it was resolved from.
        distinct_ids = self.team1_id > 0 and self.team2_id > 0 and self.team1_id != self.team2_id
        if self.winner is not None and distinct_ids:
            record["winner"] = self.team1_id if self.winner == 1 else self.team2_id
        return record


@dataclass(frozen=True)
class MapStat:
    """One completed (or in-progress) map of a match series."""

    id: int
    match_id: int = 0
    winner: int | None = None
    map_number: int = 0
    map_name: str = ""
    team1_score: int = 0
    team2_score: int = 0
    start_time: str = ""
    end_time: str | None = None

    def as_record(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class Server:
    id: int
    ip_string: str = ""
    port: int = 0
    gotv_port: int = 0
    display_name: str = ""
    flag: str = ""
    public_server: bool = False
    in_use: bool = False

    def as_record(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class Season:
    id: int
    name: str
    start_date: str = ""
    end_date: str | None = None

    def as_record(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class TeamStanding:
    """One row of a derived standings table."""

    rank: int
    team_name: str
    wins: int
    losses: int
    total_matches: int
    win_pct: float


@dataclass(frozen=True)
class CompetitionWinner:
    team_name: str
    match_wins: int
    match_losses: int
    total_matches: int


@dataclass(frozen=True)
class MatchRoster:
    """Per-match player totals split by side."""

    team1: tuple[PlayerStat, ...] = ()
    team2: tuple[PlayerStat, ...] = ()
    assignments: dict[str, TeamAssignment] = field(default_factory=dict)

    @property
    def players(self) -> tuple[PlayerStat, ...]:
        return self.team1 + self.team2


@dataclass(frozen=True)
class HeadToHeadRecord:
    player1_wins: int = 0
    player2_wins: int = 0
    encounters: int = 0


__all__ = [
    "CompetitionWinner",
    "HeadToHeadRecord",
    "MapStat",
    "Match",
    "MatchRoster",
    "PlayerStat",
    "Season",
    "Server",
    "TeamStanding",
]
