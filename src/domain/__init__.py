"""Stat normalization and competition-derivation domain modules."""

from domain.common import Match, MapStat, PlayerStat, Season, Server
from domain.protocol import CompetitionStatus, FormResult, TeamAssignment, TeamNumbering

__all__ = [
    "CompetitionStatus",
    "FormResult",
    "MapStat",
    "Match",
    "PlayerStat",
    "Season",
    "Server",
    "TeamAssignment",
    "TeamNumbering",
]
