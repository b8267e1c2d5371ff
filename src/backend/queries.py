"""Backend endpoint helpers returning normalized domain values."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import UTC, datetime

import httpx

from backend.batch import gather_in_batches, iter_batches
from backend.client import BackendClient, BackendError
from domain.aggregation import aggregate_match_player_stats, row_steam_id
from domain.common import MapStat, Match, MatchRoster, PlayerStat, Season, Server
from domain.head_to_head import MatchParticipants, build_match_participants
from domain.leaders import (
    aggregate_season_rows,
    build_champion_roster,
    find_weekly_leader,
    weekly_window_matches,
)
from domain.normalizers import (
    coerce_int,
    coerce_str,
    first_present,
    normalize_map_stat,
    normalize_match,
    normalize_player,
    normalize_season,
    normalize_server,
)
from domain.unwrap import Record, unwrap_array, unwrap_object

logger = logging.getLogger(__name__)

RECENT_MATCH_LIMIT = 5
RECENT_MATCH_CANDIDATES = 10
BULK_MAP_STATS_LIMIT = 50
PLAYER_SEARCH_MIN_LENGTH = 2
PLAYER_SEARCH_LIMIT = 8


async def fetch_leaderboard(client: BackendClient) -> list[PlayerStat]:
    data = await client.get_json("/api/leaderboard/players/pug")
    return [normalize_player(raw) for raw in unwrap_array(data, "leaderboard")]


async def fetch_player_stats(client: BackendClient, steam_id: str) -> PlayerStat | None:
    data = await client.get_json(f"/api/playerstats/{steam_id}/pug")
    if not data:
        return None
    raw = unwrap_object(data, "playerstats", "playerStats")
    return None if raw is None else normalize_player(raw)


async def fetch_matches(client: BackendClient) -> list[Match]:
    data = await client.get_json("/api/matches")
    return [normalize_match(raw) for raw in unwrap_array(data, "matches")]


async def fetch_match(client: BackendClient, match_id: int | str) -> Match | None:
    data = await client.get_json(f"/api/matches/{match_id}")
    if not data:
        return None
    raw = unwrap_object(data, "match")
    return None if raw is None else normalize_match(raw)


async def fetch_map_stats(
    client: BackendClient,
    match_id: int | str,
    match: Match | None = None,
) -> list[MapStat]:
    data = await client.get_json(f"/api/mapstats/{match_id}")
    return [normalize_map_stat(raw, match) for raw in unwrap_array(data, "mapstats")]


async def fetch_match_player_rows(client: BackendClient, match_id: int | str) -> list[Record]:
    """Raw per-map player rows of one match."""
    data = await client.get_json(f"/api/playerstats/match/{match_id}")
    return unwrap_array(data, "playerstats", "playerStats")


async def fetch_match_player_stats(
    client: BackendClient,
    match_id: int | str,
    match: Match | None = None,
) -> MatchRoster:
    rows = await fetch_match_player_rows(client, match_id)
    if not rows:
        return MatchRoster()
    team1_id = match.team1_id if match is not None else 0
    team2_id = match.team2_id if match is not None else 0
    return aggregate_match_player_stats(rows, team1_id, team2_id)


async def fetch_match_rosters(
    client: BackendClient,
    matches: Iterable[Match],
) -> dict[int, MatchRoster]:
    """Aggregated rosters keyed by match id; failed lookups are left out."""
    matches = list(matches)

    async def fetch(match: Match) -> MatchRoster:
        return await fetch_match_player_stats(client, match.id, match)

    rosters = await gather_in_batches(matches, fetch, client.config.batch_size)
    return {
        match.id: roster
        for match, roster in zip(matches, rosters)
        if roster is not None
    }


async def fetch_season_player_stats(
    client: BackendClient,
    matches: Iterable[Match],
) -> list[PlayerStat]:
    """Per-player season totals, best rating first."""
    matches = list(matches)

    async def fetch(match: Match) -> list[Record]:
        return await fetch_match_player_rows(client, match.id)

    rows = await gather_in_batches(matches, fetch, client.config.batch_size)
    return aggregate_season_rows(
        (match, match_rows)
        for match, match_rows in zip(matches, rows)
        if match_rows is not None
    )


async def fetch_player_recent_matches(
    client: BackendClient,
    steam_id: str,
    limit: int = RECENT_MATCH_LIMIT,
) -> list[Match]:
    """Most recent matches the player took part in, newest first.

    The user endpoint is tried first; it only knows players with an account.
    Otherwise every non-cancelled match is scanned, newest first, until
    ``limit`` matches containing the player have been found.
    """
    try:
        recent = await _fetch_recent_from_user_endpoint(client, steam_id, limit)
    except (BackendError, httpx.HTTPError) as exc:
        logger.info("Recent-match endpoint unavailable for %s: %s", steam_id, exc)
        recent = []
    if recent:
        return recent

    candidates = sorted(
        (match for match in await fetch_matches(client) if not match.cancelled),
        key=lambda match: match.id,
        reverse=True,
    )

    async def participated(match: Match) -> bool:
        rows = await fetch_match_player_rows(client, match.id)
        return any(row_steam_id(row) == steam_id for row in rows)

    found: list[Match] = []
    async for batch in iter_batches(candidates, participated, client.config.batch_size):
        for match, played in batch:
            if played and len(found) < limit:
                found.append(match)
        if len(found) >= limit:
            break
    return found


async def _fetch_recent_from_user_endpoint(
    client: BackendClient,
    steam_id: str,
    limit: int,
) -> list[Match]:
    data = await client.get_json(f"/api/users/{steam_id}/recent")
    # Rows may be per-map, so one match id can repeat.
    match_ids: list[int] = []
    for raw in unwrap_array(data, "matches"):
        match_id = coerce_int(first_present(raw, "id", "match_id"))
        if match_id and match_id not in match_ids:
            match_ids.append(match_id)

    async def fetch(match_id: int) -> Match | None:
        return await fetch_match(client, match_id)

    matches = await gather_in_batches(
        match_ids[:RECENT_MATCH_CANDIDATES], fetch, client.config.batch_size
    )
    unique: dict[int, Match] = {}
    for match in matches:
        if match is not None and match.id not in unique:
            unique[match.id] = match
    return list(unique.values())[:limit]


async def fetch_match_participants(
    client: BackendClient,
    matches: Iterable[Match],
) -> dict[int, MatchParticipants]:
    """Team number per player (plus the winner) for each match."""
    matches = list(matches)

    async def fetch(match: Match) -> list[Record]:
        return await fetch_match_player_rows(client, match.id)

    rows = await gather_in_batches(matches, fetch, client.config.batch_size)
    return {
        match.id: build_match_participants(match_rows, match)
        for match, match_rows in zip(matches, rows)
        if match_rows is not None
    }


async def fetch_player_team_in_matches(
    client: BackendClient,
    steam_id: str,
    matches: Iterable[Match],
) -> dict[int, int | None]:
    """Team number the player was on in each match, ``None`` when unknown."""
    matches = list(matches)
    participants = await fetch_match_participants(client, matches)
    return {match.id: participants.get(match.id, {}).get(steam_id) for match in matches}


async def fetch_bulk_map_stats(
    client: BackendClient,
    matches: Iterable[Match],
    limit: int = BULK_MAP_STATS_LIMIT,
) -> list[MapStat]:
    """Map stats of the first ``limit`` matches, flattened."""
    selected = list(matches)[:limit]

    async def fetch(match: Match) -> list[MapStat]:
        return await fetch_map_stats(client, match.id, match)

    results = await gather_in_batches(selected, fetch, client.config.bulk_batch_size)
    return [stat for stats in results if stats for stat in stats]


async def fetch_seasons(client: BackendClient) -> list[Season]:
    data = await client.get_json("/api/seasons")
    return [normalize_season(raw) for raw in unwrap_array(data, "seasons")]


async def fetch_servers(client: BackendClient) -> list[Server]:
    data = await client.get_json("/api/servers/myservers")
    return [normalize_server(raw) for raw in unwrap_array(data, "servers")]


async def fetch_weekly_leader(
    client: BackendClient,
    matches: Iterable[Match],
    now: datetime | None = None,
) -> PlayerStat | None:
    """Best pooled rating over the last week's decided matches."""
    now = now or datetime.now(UTC)
    recent = weekly_window_matches(matches, now)
    rosters = await fetch_match_rosters(client, recent)
    return find_weekly_leader(recent, rosters, now)


async def fetch_champion_roster(
    client: BackendClient,
    matches: Iterable[Match],
    team_name: str,
) -> list[PlayerStat]:
    """Champion roster of a season, MVP first."""
    team_matches = [
        match
        for match in matches
        if match.is_decided and team_name in (match.team1_string, match.team2_string)
    ]
    rosters = await fetch_match_rosters(client, team_matches)
    return build_champion_roster(team_matches, rosters, team_name)


async def search_players(
    client: BackendClient,
    query: str,
    limit: int = PLAYER_SEARCH_LIMIT,
) -> list[PlayerStat]:
    """Leaderboard players whose name contains ``query``, case-insensitive."""
    needle = coerce_str(query).strip().lower()
    if len(needle) < PLAYER_SEARCH_MIN_LENGTH:
        return []
    matches = [player for player in await fetch_leaderboard(client) if needle in player.name.lower()]
    return matches[:limit]


__all__ = [
    "BULK_MAP_STATS_LIMIT",
    "RECENT_MATCH_LIMIT",
    "fetch_bulk_map_stats",
    "fetch_champion_roster",
    "fetch_leaderboard",
    "fetch_map_stats",
    "fetch_match",
    "fetch_match_participants",
    "fetch_match_player_rows",
    "fetch_match_player_stats",
    "fetch_match_rosters",
    "fetch_matches",
    "fetch_player_recent_matches",
    "fetch_player_stats",
    "fetch_player_team_in_matches",
    "fetch_season_player_stats",
    "fetch_seasons",
    "fetch_servers",
    "fetch_weekly_leader",
    "search_players",
]
