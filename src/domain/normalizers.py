"""Map raw backend records onto the canonical value types.

Every normalizer is total: missing or malformed fields degrade to documented
defaults instead of raising.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from datetime import UTC, datetime
from typing import Any

from domain.common import MapStat, Match, PlayerStat, Season, Server
from domain.rating import compute_rating
from domain.winner import resolve_winner

ZERO_DATETIME = "0000-00-00 00:00:00"
DEFAULT_POINTS = 1000

_FALSE_STRINGS = frozenset({"", "0", "false", "no", "off"})


def as_mapping(raw: Any) -> Mapping[str, Any]:
    """Non-mapping input normalizes like an empty record."""
    return raw if isinstance(raw, Mapping) else {}


def first_present(raw: Mapping[str, Any], *keys: str) -> Any:
    """Return the first non-None value among ``keys``."""
    raw = as_mapping(raw)
    for key in keys:
        value = raw.get(key)
        if value is not None:
            return value
    return None


def coerce_float(value: Any, default: float = 0.0) -> float:
    if value is None:
        return default
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return 0.0
    try:
        result = float(value)
    except (TypeError, ValueError):
        return default
    return result if math.isfinite(result) else default


def coerce_int(value: Any, default: int = 0) -> int:
    if value is None:
        return default
    if isinstance(value, int):
        return int(value)
    result = coerce_float(value, math.nan)
    return int(result) if math.isfinite(result) else default


def coerce_optional_int(value: Any) -> int | None:
    if value is None:
        return None
    result = coerce_float(value, math.nan)
    return int(result) if math.isfinite(result) else None


def coerce_bool(value: Any, default: bool = False) -> bool:
    if value is None:
        return default
    if isinstance(value, str):
        return value.strip().lower() not in _FALSE_STRINGS
    if isinstance(value, (int, float)):
        return value != 0
    return bool(value)


def coerce_str(value: Any, default: str = "") -> str:
    return default if value is None else str(value)


def normalize_timestamp(value: Any) -> str | None:
    """Empty values and the backend's zero-date sentinel mean "unset"."""
    if not value:
        return None
    text = str(value)
    return None if text == ZERO_DATETIME else text


def parse_datetime(value: str | None) -> datetime | None:
    """Parse a backend timestamp into an aware UTC datetime, or None."""
    if not value:
        return None
    text = value.strip().replace("Z", "+00:00")
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=UTC)
    return parsed.astimezone(UTC)


def normalize_player(raw: Mapping[str, Any]) -> PlayerStat:
    raw = as_mapping(raw)
    kills = coerce_int(raw.get("kills"))
    deaths = coerce_int(raw.get("deaths"))
    roundsplayed = coerce_int(first_present(raw, "roundsplayed", "rounds_played"))
    hsk = coerce_int(first_present(raw, "headshot_kills", "hsk"))
    k1, k2, k3, k4, k5 = (coerce_int(raw.get(f"k{n}")) for n in range(1, 6))

    # Leaderboard rows carry hsp precomputed; per-match rows do not.
    hsp = coerce_float(raw.get("hsp"))
    if hsp == 0 and kills > 0 and hsk > 0:
        hsp = (hsk / kills) * 100

    average_rating = coerce_float(first_present(raw, "average_rating", "rating"))
    if average_rating == 0 and roundsplayed > 0:
        average_rating = float(compute_rating(kills, roundsplayed, deaths, k1, k2, k3, k4, k5))

    return PlayerStat(
        steam_id=coerce_str(first_present(raw, "steam_id", "steamId")),
        name=coerce_str(raw.get("name"), "Unknown"),
        kills=kills,
        deaths=deaths,
        assists=coerce_int(raw.get("assists")),
        roundsplayed=roundsplayed,
        k1=k1,
        k2=k2,
        k3=k3,
        k4=k4,
        k5=k5,
        v1=coerce_int(raw.get("v1")),
        v2=coerce_int(raw.get("v2")),
        v3=coerce_int(raw.get("v3")),
        v4=coerce_int(raw.get("v4")),
        v5=coerce_int(raw.get("v5")),
        hsk=hsk,
        hsp=hsp,
        average_rating=average_rating,
        wins=coerce_int(raw.get("wins")),
        total_maps=coerce_int(first_present(raw, "total_maps", "totalMaps")),
        points=coerce_int(raw.get("points"), DEFAULT_POINTS),
    )


def normalize_match(raw: Mapping[str, Any]) -> Match:
    raw = as_mapping(raw)
    team1_id = coerce_int(raw.get("team1_id"))
    team2_id = coerce_int(raw.get("team2_id"))
    cancelled = coerce_bool(raw.get("cancelled"))
    forfeit = coerce_bool(raw.get("forfeit"))
    team1_score = coerce_int(raw.get("team1_score"))
    team2_score = coerce_int(raw.get("team2_score"))

    # The list endpoint joins map_stats and exposes round scores. For a BO1 the
    # series score is only 0/1, so round scores are preferred when present.
    team1_mapscore = coerce_optional_int(raw.get("team1_mapscore"))
    team2_mapscore = coerce_optional_int(raw.get("team2_mapscore"))
    score1 = team1_mapscore if team1_mapscore is not None else team1_score
    score2 = team2_mapscore if team2_mapscore is not None else team2_score
    if cancelled or forfeit:
        score1 = score2 = 0

    return Match(
        id=coerce_int(raw.get("id")),
        team1_id=team1_id,
        team2_id=team2_id,
        winner=resolve_winner(
            coerce_optional_int(raw.get("winner")), team1_id, team2_id, score1, score2
        ),
        team1_score=team1_score,
        team2_score=team2_score,
        team1_mapscore=team1_mapscore,
        team2_mapscore=team2_mapscore,
        team1_string=coerce_str(first_present(raw, "team1_string", "team1_name"), "Team 1"),
        team2_string=coerce_str(first_present(raw, "team2_string", "team2_name"), "Team 2"),
        cancelled=cancelled,
        forfeit=forfeit,
        start_time=coerce_str(raw.get("start_time")),
        end_time=normalize_timestamp(raw.get("end_time")),
        title=coerce_str(raw.get("title")),
        max_maps=coerce_int(raw.get("max_maps"), 1),
        season_id=coerce_optional_int(raw.get("season_id")),
        is_pug=coerce_bool(raw.get("is_pug"), True),
    )


def normalize_map_stat(raw: Mapping[str, Any], match: Match | None = None) -> MapStat:
    raw = as_mapping(raw)
    team1_id = match.team1_id if match is not None else 0
    team2_id = match.team2_id if match is not None else 0
    team1_score = coerce_int(raw.get("team1_score"))
    team2_score = coerce_int(raw.get("team2_score"))
    score1, score2 = team1_score, team2_score
    if match is not None and (match.cancelled or match.forfeit):
        score1 = score2 = 0

    return MapStat(
        id=coerce_int(raw.get("id")),
        match_id=coerce_int(raw.get("match_id")),
        winner=resolve_winner(
            coerce_optional_int(raw.get("winner")), team1_id, team2_id, score1, score2
        ),
        map_number=coerce_int(raw.get("map_number")),
        map_name=coerce_str(raw.get("map_name")),
        team1_score=team1_score,
        team2_score=team2_score,
        start_time=coerce_str(raw.get("start_time")),
        end_time=normalize_timestamp(raw.get("end_time")),
    )


def normalize_server(raw: Mapping[str, Any]) -> Server:
    raw = as_mapping(raw)
    return Server(
        id=coerce_int(raw.get("id")),
        ip_string=coerce_str(raw.get("ip_string")),
        port=coerce_int(raw.get("port")),
        gotv_port=coerce_int(raw.get("gotv_port")),
        display_name=coerce_str(raw.get("display_name")),
        flag=coerce_str(raw.get("flag")),
        public_server=coerce_bool(raw.get("public_server")),
        in_use=coerce_bool(raw.get("in_use")),
    )


def normalize_season(raw: Mapping[str, Any]) -> Season:
    raw = as_mapping(raw)
    season_id = coerce_int(raw.get("id"))
    return Season(
        id=season_id,
        name=coerce_str(raw.get("name"), f"Season {season_id}"),
        start_date=coerce_str(raw.get("start_date")),
        end_date=normalize_timestamp(raw.get("end_date")),
    )


__all__ = [
    "DEFAULT_POINTS",
    "ZERO_DATETIME",
    "as_mapping",
    "coerce_bool",
    "coerce_float",
    "coerce_int",
    "coerce_optional_int",
    "coerce_str",
    "first_present",
    "normalize_map_stat",
    "normalize_match",
    "normalize_player",
    "normalize_season",
    "normalize_server",
    "normalize_timestamp",
    "parse_datetime",
]
