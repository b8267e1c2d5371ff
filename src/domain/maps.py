"""Map display names and map popularity counts."""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable

from domain.common import MapStat

MAP_DISPLAY: dict[str, str] = {
    "de_inferno": "Inferno",
    "de_mirage": "Mirage",
    "de_anubis": "Anubis",
    "de_dust2": "Dust II",
    "de_nuke": "Nuke",
    "de_overpass": "Overpass",
    "de_vertigo": "Vertigo",
    "de_ancient": "Ancient",
    "de_train": "Train",
    "de_cache": "Cache",
    "de_cobblestone": "Cobblestone",
    "de_tuscan": "Tuscan",
    "de_mills": "Mills",
}

DEFUSE_PREFIX = "de_"


def get_map_display_name(map_name: str | None) -> str | None:
    """Human-readable map name; unknown defuse maps are title-cased."""
    if not map_name:
        return None
    known = MAP_DISPLAY.get(map_name)
    if known is not None:
        return known
    if map_name.startswith(DEFUSE_PREFIX):
        stem = map_name.removeprefix(DEFUSE_PREFIX)
        return stem[:1].upper() + stem[1:]
    return None


def count_maps_played(map_stats: Iterable[MapStat], top: int | None = None) -> list[tuple[str, int]]:
    """Count maps by name, most played first; ties keep first-seen order."""
    counts = Counter(stat.map_name for stat in map_stats if stat.map_name)
    return counts.most_common(top)


__all__ = ["MAP_DISPLAY", "count_maps_played", "get_map_display_name"]
