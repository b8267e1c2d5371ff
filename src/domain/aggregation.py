"""Fold per-map player rows into per-match player totals."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any

from domain.common import MatchRoster, PlayerStat
from domain.normalizers import coerce_int, coerce_str, first_present, normalize_player
from domain.protocol import TeamAssignment
from domain.unwrap import records

logger = logging.getLogger(__name__)

# (canonical key, raw aliases) for every counter summed across rows.
SUMMED_COUNTERS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("kills", ("kills",)),
    ("deaths", ("deaths",)),
    ("assists", ("assists",)),
    ("roundsplayed", ("roundsplayed", "rounds_played")),
    ("k1", ("k1",)),
    ("k2", ("k2",)),
    ("k3", ("k3",)),
    ("k4", ("k4",)),
    ("k5", ("k5",)),
    ("v1", ("v1",)),
    ("v2", ("v2",)),
    ("v3", ("v3",)),
    ("v4", ("v4",)),
    ("v5", ("v5",)),
    ("headshot_kills", ("headshot_kills", "hsk")),
)


def row_steam_id(row: Mapping[str, Any]) -> str:
    return coerce_str(first_present(row, "steam_id", "steamId"))


def row_team_id(row: Mapping[str, Any]) -> int:
    return coerce_int(row.get("team_id"))


def sum_counters(rows: Iterable[Mapping[str, Any]]) -> dict[str, int]:
    """Sum every counter field across ``rows``."""
    totals = {key: 0 for key, _ in SUMMED_COUNTERS}
    for row in records(rows):
        for key, aliases in SUMMED_COUNTERS:
            totals[key] += coerce_int(first_present(row, *aliases))
    return totals


def pooled_player(
    steam_id: str,
    name: str,
    counters: Mapping[str, int],
    *,
    total_maps: int,
    wins: int = 0,
) -> PlayerStat:
    """Normalize pooled counters, forcing hsp and rating to be recomputed."""
    return normalize_player(
        {
            **counters,
            "steam_id": steam_id,
            "name": name,
            "hsp": 0,
            "average_rating": 0,
            "wins": wins,
            "total_maps": total_maps,
            "points": 0,
        }
    )


def _group_rows(
    raw_rows: Iterable[Mapping[str, Any]],
) -> dict[str, tuple[int, list[Mapping[str, Any]]]]:
    groups: dict[str, tuple[int, list[Mapping[str, Any]]]] = {}
    for row in records(raw_rows):
        steam_id = row_steam_id(row)
        if not steam_id:
            continue
        if steam_id in groups:
            groups[steam_id][1].append(row)
        else:
            groups[steam_id] = (row_team_id(row), [row])
    return groups


def aggregate_match_player_stats(
    raw_rows: Iterable[Mapping[str, Any]],
    team1_id: int,
    team2_id: int,
) -> MatchRoster:
    """Aggregate raw per-map rows of one match into a two-sided roster.

    Rows are grouped by steam id and every counter is summed; ``total_maps``
    is the number of rows (maps played). The rating is recomputed from the
    pooled counters rather than averaged across maps.

    A player whose team id matches neither side (ad-hoc matches with
    synthetic team ids) is put on the side with fewer players, team 1 on a
    tie. The path taken is recorded in ``MatchRoster.assignments``.
    """
    team1: list[PlayerStat] = []
    team2: list[PlayerStat] = []
    assignments: dict[str, TeamAssignment] = {}

    for steam_id, (team_id, rows) in _group_rows(raw_rows).items():
        player = pooled_player(
            steam_id,
            coerce_str(rows[0].get("name"), "Unknown"),
            sum_counters(rows),
            total_maps=len(rows),
        )

        if team1_id and team_id == team1_id:
            team1.append(player)
            assignments[steam_id] = TeamAssignment.MATCHED
        elif team2_id and team_id == team2_id:
            team2.append(player)
            assignments[steam_id] = TeamAssignment.MATCHED
        else:
            logger.warning(
                "Could not match team_id=%s to team1=%s or team2=%s for player %s; "
                "using balanced fallback",
                team_id,
                team1_id,
                team2_id,
                steam_id,
            )
            if len(team1) <= len(team2):
                team1.append(player)
            else:
                team2.append(player)
            assignments[steam_id] = TeamAssignment.BALANCED_FALLBACK

    return MatchRoster(
        team1=tuple(sorted(team1, key=lambda player: player.kills, reverse=True)),
        team2=tuple(sorted(team2, key=lambda player: player.kills, reverse=True)),
        assignments=assignments,
    )


__all__ = [
    "SUMMED_COUNTERS",
    "aggregate_match_player_stats",
    "pooled_player",
    "row_steam_id",
    "row_team_id",
    "sum_counters",
]
