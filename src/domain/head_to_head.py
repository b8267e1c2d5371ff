"""Head-to-head records between two players across shared matches."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from domain.aggregation import row_steam_id, row_team_id
from domain.common import HeadToHeadRecord, Match
from domain.protocol import TeamNumbering
from domain.unwrap import records

WINNER_KEY = "__winner"

MatchParticipants = dict[str, int]


def resolve_team_numbering(
    rows: Iterable[Mapping[str, Any]],
    team1_id: int,
    team2_id: int,
) -> tuple[dict[int, int], TeamNumbering]:
    """Map raw team ids of one match onto team numbers 1 and 2.

    The match record's own ids win when both are set. Ad-hoc matches only
    expose match-specific raw ids on the player rows; when exactly two
    distinct positive ids appear, the lower one becomes team 1.
    """
    if team1_id > 0 and team2_id > 0:
        return {team1_id: 1, team2_id: 2}, TeamNumbering.MATCH_IDS

    roster_ids = sorted({team_id for team_id in map(row_team_id, records(rows)) if team_id > 0})
    if len(roster_ids) == 2:
        return {roster_ids[0]: 1, roster_ids[1]: 2}, TeamNumbering.ASCENDING_ROSTER_IDS
    return {}, TeamNumbering.UNRESOLVED


def build_match_participants(
    rows: Iterable[Mapping[str, Any]],
    match: Match,
    raw_winner: int | None = None,
) -> MatchParticipants:
    """Map each player of ``match`` to the team number they played on.

    The winning team number is stored under ``WINNER_KEY``. A ``raw_winner``
    team id from the backend is translated through the same numbering; when
    it is absent the match's normalized winner is used. Players whose team
    cannot be numbered are left out.
    """
    rows = records(rows)
    numbering, policy = resolve_team_numbering(rows, match.team1_id, match.team2_id)
    participants: MatchParticipants = {}
    if policy is TeamNumbering.UNRESOLVED:
        return participants

    for row in rows:
        steam_id = row_steam_id(row)
        if not steam_id or steam_id in participants:
            continue
        team_number = numbering.get(row_team_id(row))
        if team_number is not None:
            participants[steam_id] = team_number

    winner = numbering.get(raw_winner) if raw_winner is not None else None
    if winner is None:
        winner = match.winner
    if winner is not None:
        participants[WINNER_KEY] = winner
    return participants


def compute_head_to_head(
    matches: Iterable[Match],
    participants: Mapping[int, Mapping[str, int]],
    player1: str,
    player2: str,
) -> HeadToHeadRecord:
    """Count encounters where the two players were on opposing teams.

    Cancelled matches, matches without participant data, matches missing
    either player, same-team matches and matches with no winner are skipped.
    """
    player1_wins = 0
    player2_wins = 0
    encounters = 0
    for match in matches:
        if match.cancelled:
            continue
        teams = participants.get(match.id)
        if not teams:
            continue
        team1 = teams.get(player1)
        team2 = teams.get(player2)
        winner = teams.get(WINNER_KEY)
        if not team1 or not team2 or team1 == team2 or not winner:
            continue

        encounters += 1
        if winner == team1:
            player1_wins += 1
        elif winner == team2:
            player2_wins += 1

    return HeadToHeadRecord(
        player1_wins=player1_wins,
        player2_wins=player2_wins,
        encounters=encounters,
    )


__all__ = [
    "MatchParticipants",
    "WINNER_KEY",
    "build_match_participants",
    "compute_head_to_head",
    "resolve_team_numbering",
]
