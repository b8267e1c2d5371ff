"""Weekly and season leaders pooled across many matches."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from datetime import UTC, datetime, timedelta
from typing import Any

from domain.aggregation import (
    SUMMED_COUNTERS,
    pooled_player,
    row_steam_id,
    row_team_id,
    sum_counters,
)
from domain.common import Match, MatchRoster, PlayerStat
from domain.head_to_head import resolve_team_numbering
from domain.normalizers import coerce_str, parse_datetime
from domain.unwrap import records

DEFAULT_MIN_MAPS = 2
WEEKLY_WINDOW_DAYS = 7

_STAT_FIELDS = {"headshot_kills": "hsk"}


def player_counters(player: PlayerStat) -> dict[str, int]:
    return {key: getattr(player, _STAT_FIELDS.get(key, key)) for key, _ in SUMMED_COUNTERS}


class PlayerTotalsAccumulator:
    """Stateful fold of per-match player lines into pooled per-player totals.

    Raw counters are summed and the rating is recomputed on the pooled totals,
    never averaged across matches.
    """

    def __init__(self) -> None:
        self._names: dict[str, str] = {}
        self._counters: dict[str, dict[str, int]] = {}
        self._maps: dict[str, int] = {}
        self._wins: dict[str, int] = {}

    def __len__(self) -> int:
        return len(self._counters)

    def _entry(self, steam_id: str, name: str) -> dict[str, int]:
        counters = self._counters.get(steam_id)
        if counters is None:
            counters = {key: 0 for key, _ in SUMMED_COUNTERS}
            self._counters[steam_id] = counters
            self._names[steam_id] = name
            self._maps[steam_id] = 0
            self._wins[steam_id] = 0
        elif name != "Unknown":
            # Latest known name wins.
            self._names[steam_id] = name
        return counters

    def add_player(self, player: PlayerStat) -> None:
        if not player.steam_id:
            return
        counters = self._entry(player.steam_id, player.name)
        for key, value in player_counters(player).items():
            counters[key] += value
        self._maps[player.steam_id] += player.total_maps
        self._wins[player.steam_id] += player.wins

    def add_roster(self, roster: MatchRoster, *, side: int | None = None) -> None:
        """Add one aggregated match; ``side`` restricts it to team 1 or 2."""
        if side is None:
            players = roster.players
        elif side == 1:
            players = roster.team1
        elif side == 2:
            players = roster.team2
        else:
            raise ValueError(f"side must be 1 or 2, got {side}")
        for player in players:
            self.add_player(player)

    def add_rows(
        self,
        rows: Iterable[Mapping[str, Any]],
        *,
        team_numbers: Mapping[int, int] | None = None,
        winner: int | None = None,
    ) -> None:
        """Add the raw per-map rows of one match.

        Each row counts as one map. Players whose numbered team equals
        ``winner`` are credited one win for the match, however many map rows
        they have.
        """
        winners: set[str] = set()
        for row in records(rows):
            steam_id = row_steam_id(row)
            if not steam_id:
                continue
            counters = self._entry(steam_id, coerce_str(row.get("name"), "Unknown"))
            for key, value in sum_counters([row]).items():
                counters[key] += value
            self._maps[steam_id] += 1
            if winner is not None and team_numbers and team_numbers.get(row_team_id(row)) == winner:
                winners.add(steam_id)

        for steam_id in winners:
            self._wins[steam_id] += 1

    def players(self) -> list[PlayerStat]:
        """Pooled players sorted by recomputed rating, best first."""
        pooled = [
            pooled_player(
                steam_id,
                self._names[steam_id],
                counters,
                total_maps=self._maps[steam_id],
                wins=self._wins[steam_id],
            )
            for steam_id, counters in self._counters.items()
        ]
        return sorted(pooled, key=lambda player: player.average_rating, reverse=True)


def select_top_rated(
    players: Iterable[PlayerStat],
    min_maps: int = DEFAULT_MIN_MAPS,
) -> PlayerStat | None:
    """Best-rated player with at least ``min_maps`` maps and some rounds played."""
    eligible = [
        player
        for player in players
        if player.total_maps >= min_maps and player.roundsplayed > 0
    ]
    return max(eligible, key=lambda player: player.average_rating, default=None)


def weekly_window_matches(
    matches: Iterable[Match],
    now: datetime,
    days: int = WEEKLY_WINDOW_DAYS,
) -> list[Match]:
    """Decided matches that started within the last ``days`` days."""
    if now.tzinfo is None:
        now = now.replace(tzinfo=UTC)
    window_start = now - timedelta(days=days)
    selected: list[Match] = []
    for match in matches:
        if not match.is_decided:
            continue
        started = parse_datetime(match.start_time)
        if started is not None and window_start <= started <= now:
            selected.append(match)
    return selected


def find_weekly_leader(
    matches: Iterable[Match],
    rosters: Mapping[int, MatchRoster],
    now: datetime,
    days: int = WEEKLY_WINDOW_DAYS,
    min_maps: int = DEFAULT_MIN_MAPS,
) -> PlayerStat | None:
    accumulator = PlayerTotalsAccumulator()
    for match in weekly_window_matches(matches, now, days):
        roster = rosters.get(match.id)
        if roster is not None:
            accumulator.add_roster(roster)
    return select_top_rated(accumulator.players(), min_maps)


def aggregate_season_rows(
    match_rows: Iterable[tuple[Match, Iterable[Mapping[str, Any]]]],
) -> list[PlayerStat]:
    """Pool a season's raw per-map rows into per-player season totals.

    Match wins are credited through the same team numbering used for
    head-to-head records, so ad-hoc matches with synthetic team ids still
    credit only the winning side.
    """
    accumulator = PlayerTotalsAccumulator()
    for match, rows in match_rows:
        rows = list(rows)
        team_numbers, _ = resolve_team_numbering(rows, match.team1_id, match.team2_id)
        winner = match.winner if match.is_decided else None
        accumulator.add_rows(rows, team_numbers=team_numbers, winner=winner)
    return accumulator.players()


def build_champion_roster(
    matches: Iterable[Match],
    rosters: Mapping[int, MatchRoster],
    team_name: str,
) -> list[PlayerStat]:
    """Players who played for ``team_name`` in decided matches, best first.

    The first entry is the competition MVP.
    """
    accumulator = PlayerTotalsAccumulator()
    for match in matches:
        if not match.is_decided:
            continue
        if match.team1_string == team_name:
            side = 1
        elif match.team2_string == team_name:
            side = 2
        else:
            continue
        roster = rosters.get(match.id)
        if roster is not None:
            accumulator.add_roster(roster, side=side)
    return accumulator.players()


__all__ = [
    "DEFAULT_MIN_MAPS",
    "PlayerTotalsAccumulator",
    "WEEKLY_WINDOW_DAYS",
    "aggregate_season_rows",
    "build_champion_roster",
    "find_weekly_leader",
    "player_counters",
    "select_top_rated",
    "weekly_window_matches",
]
