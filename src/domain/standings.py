"""Team standings and competition champions derived from match results."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import UTC, datetime

from domain.common import CompetitionWinner, Match, Season, TeamStanding
from domain.normalizers import parse_datetime
from domain.protocol import CompetitionStatus
from domain.rating import win_percentage


def get_team_standings(matches: Iterable[Match]) -> list[TeamStanding]:
    """Build the ranked standings table for a set of matches.

    Only decided, non-cancelled, non-forfeit matches count. Teams are keyed by
    display name, so distinct team ids sharing a name are merged. Sorted by
    wins desc, then win-loss differential desc, then name asc; ranks are
    sequential and never shared.
    """
    records: dict[str, list[int]] = {}
    for match in matches:
        if not match.is_decided:
            continue
        if match.winner == 1:
            winner_name, loser_name = match.team1_string, match.team2_string
        else:
            winner_name, loser_name = match.team2_string, match.team1_string
        records.setdefault(winner_name, [0, 0])[0] += 1
        records.setdefault(loser_name, [0, 0])[1] += 1

    ordered = sorted(
        records.items(),
        key=lambda item: (-item[1][0], -(item[1][0] - item[1][1]), item[0]),
    )
    return [
        TeamStanding(
            rank=rank,
            team_name=name,
            wins=wins,
            losses=losses,
            total_matches=wins + losses,
            win_pct=win_percentage(wins, wins + losses),
        )
        for rank, (name, (wins, losses)) in enumerate(ordered, start=1)
    ]


def derive_competition_winner(matches: Iterable[Match]) -> CompetitionWinner | None:
    """Return the top-ranked team, or None when nothing was decided."""
    standings = get_team_standings(matches)
    if not standings:
        return None
    top = standings[0]
    return CompetitionWinner(
        team_name=top.team_name,
        match_wins=top.wins,
        match_losses=top.losses,
        total_matches=top.total_matches,
    )


def get_competition_status(season: Season, now: datetime | None = None) -> CompetitionStatus:
    current = now or datetime.now(UTC)
    if current.tzinfo is None:
        current = current.replace(tzinfo=UTC)
    start = parse_datetime(season.start_date)
    if start is not None and start > current:
        return CompetitionStatus.UPCOMING
    end = parse_datetime(season.end_date)
    if end is None or end >= current:
        return CompetitionStatus.ACTIVE
    return CompetitionStatus.ENDED


def group_matches_by_season(matches: Iterable[Match]) -> dict[int | None, list[Match]]:
    grouped: dict[int | None, list[Match]] = {}
    for match in matches:
        grouped.setdefault(match.season_id, []).append(match)
    return grouped


__all__ = [
    "derive_competition_winner",
    "get_competition_status",
    "get_team_standings",
    "group_matches_by_season",
]
