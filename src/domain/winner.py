"""Winner resolution for matches and maps."""

from __future__ import annotations


def winner_from_scores(score1: float, score2: float) -> int | None:
    """Higher score wins; a tie is genuinely undetermined."""
    if score1 > score2:
        return 1
    if score2 > score1:
        return 2
    return None


def resolve_winner(
    raw_winner: int | None,
    team1_id: int,
    team2_id: int,
    score1: float,
    score2: float,
) -> int | None:
    """Normalize a backend winner value to team number 1, 2 or None.

    The backend stores the winner as a team id (e.g. 47/48) rather than 1/2.
    Resolution order:

    1. ``None``/``0`` means "not declared" and falls through to the scores.
    2. A raw value equal to ``team1_id``/``team2_id`` maps to 1/2.
    3. A raw value that is already 1 or 2 is returned unchanged.
    4. Anything else falls back to comparing the scores.

    Cancelled and forfeited matches must not be decided by score; callers are
    responsible for gating that (the normalizers pass zeroed scores).
    """
    if raw_winner is None or raw_winner == 0:
        return winner_from_scores(score1, score2)
    if raw_winner == team1_id:
        return 1
    if raw_winner == team2_id:
        return 2
    if raw_winner in (1, 2):
        return raw_winner
    return winner_from_scores(score1, score2)


__all__ = ["resolve_winner", "winner_from_scores"]
