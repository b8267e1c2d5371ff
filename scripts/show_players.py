#!/usr/bin/env python3
"""Player views: leaderboard, profile with recent form, head-to-head and map popularity."""

from __future__ import annotations

import asyncio
import logging
import sys
from collections.abc import Coroutine
from pathlib import Path
from typing import Annotated, TypeVar

import typer

ROOT_DIR = Path(__file__).resolve().parents[1]
SRC_DIR = ROOT_DIR / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from backend.client import BackendClient, BackendError, map_backend_error
from backend.config import DEFAULT_CONFIG_PATH, load_backend_config
from backend.queries import (
    fetch_bulk_map_stats,
    fetch_leaderboard,
    fetch_match_participants,
    fetch_matches,
    fetch_player_recent_matches,
    fetch_player_stats,
    fetch_player_team_in_matches,
    fetch_weekly_leader,
)
from domain.head_to_head import compute_head_to_head
from domain.maps import count_maps_played, get_map_display_name
from domain.rating import format_kd, win_percentage
from domain.recent_form import compute_recent_form

T = TypeVar("T")

app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    help="Player statistics from the match-tracking backend.",
)

ConfigOption = Annotated[
    Path,
    typer.Option("--config", help="Backend TOML config file."),
]


def _run(coro: Coroutine[object, object, T]) -> T:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    try:
        return asyncio.run(coro)
    except BackendError as exc:
        message, status = map_backend_error(exc)
        typer.echo(f"Backend request failed ({status}): {message}", err=True)
        raise typer.Exit(code=1) from exc


async def _leaderboard(config_path: Path, top_n: int) -> None:
    async with BackendClient(load_backend_config(config_path)) as client:
        players, matches = await asyncio.gather(fetch_leaderboard(client), fetch_matches(client))
        ranked = sorted(players, key=lambda player: player.points, reverse=True)[:top_n]
        for index, player in enumerate(ranked, start=1):
            typer.echo(
                f"{index:2d}. {player.name:<20} points={player.points:5d} "
                f"rating={player.average_rating:5.2f} kd={format_kd(player.kills, player.deaths)} "
                f"maps={player.total_maps:4d}"
            )
        leader = await fetch_weekly_leader(client, matches)
        if leader is None:
            typer.echo("Player of the week: not enough maps played this week.")
        else:
            typer.echo(
                f"Player of the week: {leader.name} rating={leader.average_rating:5.2f} "
                f"maps={leader.total_maps}"
            )


@app.command()
def leaderboard(
    top_n: Annotated[int, typer.Option("--top-n", help="Number of players to show.")] = 20,
    config_path: ConfigOption = DEFAULT_CONFIG_PATH,
) -> None:
    """Print the PUG leaderboard by points and the player of the week."""
    if top_n <= 0:
        raise typer.BadParameter("--top-n must be greater than 0")
    _run(_leaderboard(config_path, top_n))


async def _profile(config_path: Path, steam_id: str) -> None:
    async with BackendClient(load_backend_config(config_path)) as client:
        player = await fetch_player_stats(client, steam_id)
        if player is None:
            typer.echo(f"No stats found for {steam_id}.")
            return
        recent = await fetch_player_recent_matches(client, steam_id)
        teams = await fetch_player_team_in_matches(client, steam_id, recent)

    typer.echo(f"{player.name} ({player.steam_id})")
    typer.echo(
        f"  rating={player.average_rating:5.2f} kd={format_kd(player.kills, player.deaths)} "
        f"hsp={player.hsp:5.1f} rounds={player.roundsplayed}"
    )
    typer.echo(
        f"  wins={player.wins} maps={player.total_maps} "
        f"win_pct={win_percentage(player.wins, player.total_maps):6.2f} points={player.points}"
    )
    typer.echo(f"  clutches 1v1..1v5: {player.v1} {player.v2} {player.v3} {player.v4} {player.v5}")
    form = compute_recent_form(recent, teams)
    typer.echo(f"  recent form: {' '.join(result.value for result in form) or '-'}")


@app.command()
def profile(
    steam_id: Annotated[str, typer.Argument(help="Steam64 id of the player.")],
    config_path: ConfigOption = DEFAULT_CONFIG_PATH,
) -> None:
    """Print one player's totals and recent form."""
    _run(_profile(config_path, steam_id))


async def _compare(config_path: Path, player1: str, player2: str) -> None:
    async with BackendClient(load_backend_config(config_path)) as client:
        matches = [match for match in await fetch_matches(client) if not match.cancelled]
        participants = await fetch_match_participants(client, matches)
    record = compute_head_to_head(matches, participants, player1, player2)
    if record.encounters == 0:
        typer.echo("These players have never met on opposing teams.")
        return
    typer.echo(
        f"{record.encounters} match(es) on opposing teams: "
        f"{player1} won {record.player1_wins}, {player2} won {record.player2_wins}"
    )


@app.command()
def compare(
    player1: Annotated[str, typer.Argument(help="Steam64 id of the first player.")],
    player2: Annotated[str, typer.Argument(help="Steam64 id of the second player.")],
    config_path: ConfigOption = DEFAULT_CONFIG_PATH,
) -> None:
    """Print the head-to-head record of two players."""
    if player1 == player2:
        raise typer.BadParameter("players must be different")
    _run(_compare(config_path, player1, player2))


async def _maps(config_path: Path, top_n: int) -> None:
    async with BackendClient(load_backend_config(config_path)) as client:
        matches = sorted(await fetch_matches(client), key=lambda match: match.id, reverse=True)
        map_stats = await fetch_bulk_map_stats(client, matches)
    for map_name, count in count_maps_played(map_stats, top_n):
        typer.echo(f"{get_map_display_name(map_name) or map_name:<14} {count:4d}")


@app.command()
def maps(
    top_n: Annotated[int, typer.Option("--top-n", help="Number of maps to show.")] = 8,
    config_path: ConfigOption = DEFAULT_CONFIG_PATH,
) -> None:
    """Print the most played maps across recent matches."""
    if top_n <= 0:
        raise typer.BadParameter("--top-n must be greater than 0")
    _run(_maps(config_path, top_n))


if __name__ == "__main__":
    app()
