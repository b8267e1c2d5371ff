"""HLTV 1.0 style rating and simple ratio helpers."""

from __future__ import annotations

AVERAGE_KILLS_PER_ROUND = 0.679
AVERAGE_SURVIVED_ROUNDS_PER_ROUND = 0.317
AVERAGE_MULTI_KILL_SCORE_PER_ROUND = 1.277
SURVIVAL_WEIGHT = 0.7
RATING_DIVISOR = 2.7


def compute_rating(
    kills: float,
    rounds_played: float,
    deaths: float,
    k1: float,
    k2: float,
    k3: float,
    k4: float,
    k5: float,
) -> float:
    """Compute the weighted-composite rating from raw per-round counters.

    Returns 0.0 when no rounds were played. The result is not clamped.
    """
    if rounds_played == 0:
        return 0.0
    kill_rating = kills / rounds_played / AVERAGE_KILLS_PER_ROUND
    survival_rating = (rounds_played - deaths) / rounds_played / AVERAGE_SURVIVED_ROUNDS_PER_ROUND
    multi_kill_bonus = (
        (k1 + 4 * k2 + 9 * k3 + 16 * k4 + 25 * k5)
        / rounds_played
        / AVERAGE_MULTI_KILL_SCORE_PER_ROUND
    )
    return (kill_rating + SURVIVAL_WEIGHT * survival_rating + multi_kill_bonus) / RATING_DIVISOR


def kd_ratio(kills: float, deaths: float) -> float:
    return kills / deaths if deaths > 0 else 0.0


def format_kd(kills: float, deaths: float) -> str:
    return f"{kd_ratio(kills, deaths):.2f}"


def win_percentage(wins: float, total: float) -> float:
    return (wins / total) * 100 if total > 0 else 0.0


__all__ = ["compute_rating", "format_kd", "kd_ratio", "win_percentage"]
