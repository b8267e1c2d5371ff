#!/usr/bin/env python3
"""Show competition standings, champions and MVPs from the backend."""

from __future__ import annotations

import asyncio
import logging
import sys
from pathlib import Path
from typing import Annotated

import typer

ROOT_DIR = Path(__file__).resolve().parents[1]
SRC_DIR = ROOT_DIR / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from backend.client import BackendClient, BackendError, map_backend_error
from backend.config import DEFAULT_CONFIG_PATH, load_backend_config
from backend.queries import fetch_champion_roster, fetch_matches, fetch_seasons
from domain.common import Match, Season
from domain.protocol import CompetitionStatus
from domain.rating import format_kd
from domain.standings import (
    derive_competition_winner,
    get_competition_status,
    get_team_standings,
    group_matches_by_season,
)

app = typer.Typer(
    add_completion=False,
    no_args_is_help=False,
    help="Print standings for every competition (season) on the backend.",
)


def _echo_season(season: Season, matches: list[Match], status: CompetitionStatus) -> None:
    standings = get_team_standings(matches)
    typer.echo(f"\n{season.name} (id={season.id}) status={status.value} matches={len(matches)}")
    if not standings:
        typer.echo("  No decided matches.")
        return
    for row in standings:
        typer.echo(
            f"  {row.rank:2d}. {row.team_name:<24} "
            f"W={row.wins:3d} L={row.losses:3d} win_pct={row.win_pct:6.2f}"
        )


async def _show_standings(
    *,
    config_path: Path,
    season_id: int | None,
    with_roster: bool,
) -> None:
    config = load_backend_config(config_path)
    async with BackendClient(config) as client:
        seasons, matches = await asyncio.gather(fetch_seasons(client), fetch_matches(client))
        if season_id is not None:
            seasons = [season for season in seasons if season.id == season_id]
            if not seasons:
                raise typer.BadParameter(f"No season with id {season_id}", param_hint="--season-id")

        by_season = group_matches_by_season(matches)
        for season in seasons:
            season_matches = by_season.get(season.id, [])
            status = get_competition_status(season)
            _echo_season(season, season_matches, status)

            winner = derive_competition_winner(season_matches)
            if winner is None or status is not CompetitionStatus.ENDED:
                continue
            typer.echo(
                f"  Champion: {winner.team_name} "
                f"({winner.match_wins}-{winner.match_losses} in {winner.total_matches})"
            )
            if not with_roster:
                continue
            roster = await fetch_champion_roster(client, season_matches, winner.team_name)
            for index, player in enumerate(roster):
                label = "MVP" if index == 0 else "   "
                typer.echo(
                    f"    {label} {player.name:<20} rating={player.average_rating:5.2f} "
                    f"kd={format_kd(player.kills, player.deaths)} hsp={player.hsp:5.1f}"
                )


@app.command()
def show_standings(
    season_id: Annotated[
        int | None,
        typer.Option("--season-id", help="Only show this season."),
    ] = None,
    with_roster: Annotated[
        bool,
        typer.Option(
            "--with-roster/--no-roster",
            help="Fetch per-match stats to print the champion roster and MVP of ended seasons.",
        ),
    ] = False,
    config_path: Annotated[
        Path,
        typer.Option("--config", help="Backend TOML config file."),
    ] = DEFAULT_CONFIG_PATH,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Enable debug logging."),
    ] = False,
) -> None:
    """Print ranked standings per season, plus champions of ended seasons."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        asyncio.run(
            _show_standings(config_path=config_path, season_id=season_id, with_roster=with_roster)
        )
    except BackendError as exc:
        message, status = map_backend_error(exc)
        typer.echo(f"Backend request failed ({status}): {message}", err=True)
        raise typer.Exit(code=1) from exc


if __name__ == "__main__":
    app()
