"""Recent-form strip (W/L/D/C) for a single player."""

from __future__ import annotations

from collections.abc import Iterable, Mapping

from domain.common import Match
from domain.protocol import FormResult

DEFAULT_FORM_LENGTH = 5


def compute_recent_form(
    matches: Iterable[Match],
    player_teams: Mapping[int, int | None],
    count: int = DEFAULT_FORM_LENGTH,
) -> list[FormResult]:
    """Return up to ``count`` results, newest first.

    ``matches`` must already be sorted newest first and ``player_teams`` maps
    match id to the team number the player was on. Cancelled matches always
    show as ``C``. Matches where the player's team is unknown or that are
    still in progress are skipped. A finished match without a winner is a
    draw.
    """
    results: list[FormResult] = []
    for match in matches:
        if len(results) >= count:
            break
        if match.cancelled:
            results.append(FormResult.CANCELLED)
            continue

        team = player_teams.get(match.id)
        if team is None:
            continue
        if match.winner is None:
            if match.end_time is not None and not match.forfeit:
                results.append(FormResult.DRAW)
            continue

        results.append(FormResult.WIN if match.winner == team else FormResult.LOSS)
    return results


__all__ = ["DEFAULT_FORM_LENGTH", "compute_recent_form"]
