"""Unit tests for response unwrapping and record normalization."""

from __future__ import annotations

from datetime import UTC, datetime

import pytest

from domain.common import Match, PlayerStat
from domain.normalizers import (
    coerce_bool,
    coerce_float,
    coerce_int,
    normalize_map_stat,
    normalize_match,
    normalize_player,
    normalize_season,
    normalize_server,
    parse_datetime,
)
from domain.rating import compute_rating
from domain.unwrap import unwrap_array, unwrap_object


def test_unwrap_array_accepts_bare_and_enveloped_lists() -> None:
    rows = [{"id": 1}]
    assert unwrap_array(rows, "matches") == rows
    assert unwrap_array({"matches": rows}, "matches") == rows
    assert unwrap_array({"playerStats": rows}, "playerstats", "playerStats") == rows


def test_unwrap_array_is_total() -> None:
    assert unwrap_array(None, "matches") == []
    assert unwrap_array("oops", "matches") == []
    assert unwrap_array({"matches": {"id": 1}}, "matches") == []
    assert unwrap_array({"other": []}, "matches") == []


def test_unwrap_object_prefers_first_matching_key() -> None:
    assert unwrap_object({"match": {"id": 4}}, "match") == {"id": 4}
    assert unwrap_object({"playerStats": {"kills": 2}}, "playerstats", "playerStats") == {"kills": 2}


def test_unwrap_object_falls_back_to_the_mapping_itself() -> None:
    assert unwrap_object({"id": 4, "title": "x"}, "match") == {"id": 4, "title": "x"}
    assert unwrap_object({}, "match") == {}


def test_unwrap_object_list_and_invalid_inputs() -> None:
    assert unwrap_object([{"id": 1}, {"id": 2}], "match") == {"id": 1}
    assert unwrap_object([], "match") is None
    assert unwrap_object(None, "match") is None
    assert unwrap_object(42, "match") is None


def test_unwrap_drops_null_and_scalar_elements() -> None:
    assert unwrap_array({"matches": [{"id": 1}, None, "junk", 7]}, "matches") == [{"id": 1}]
    assert unwrap_array([None, {"id": 2}], "matches") == [{"id": 2}]
    assert unwrap_object(["oops"], "playerstats") is None
    assert unwrap_object([None, {"id": 1}], "match") is None


def test_normalizers_treat_non_records_as_empty() -> None:
    assert normalize_match(None) == Match(id=0)
    assert normalize_player("junk") == PlayerStat(steam_id="")
    raw = {"matches": [{"id": 1}, None, "junk"]}
    assert [normalize_match(row).id for row in unwrap_array(raw, "matches")] == [1]


def test_coercion_helpers_never_raise() -> None:
    assert coerce_int("12") == 12
    assert coerce_int("12.7") == 12
    assert coerce_int("abc") == 0
    assert coerce_int(None, 5) == 5
    assert coerce_float("nan") == 0.0
    assert coerce_float("") == 0.0
    assert coerce_float(" 1.5 ") == pytest.approx(1.5)
    assert coerce_bool("0") is False
    assert coerce_bool("false") is False
    assert coerce_bool("1") is True
    assert coerce_bool(1) is True
    assert coerce_bool(None, True) is True


def test_normalize_player_defaults_from_empty_record() -> None:
    player = normalize_player({})
    assert player == PlayerStat(steam_id="")
    assert player.name == "Unknown"
    assert player.points == 1000
    assert player.average_rating == 0.0
    assert player.hsp == 0.0


def test_normalize_player_keeps_source_derived_values() -> None:
    player = normalize_player(
        {
            "steamId": "765",
            "name": "ace",
            "kills": "20",
            "deaths": 10,
            "roundsplayed": 20,
            "hsk": 10,
            "hsp": 42.5,
            "rating": 1.31,
            "points": 1234,
            "totalMaps": 3,
        }
    )
    assert player.steam_id == "765"
    assert player.kills == 20
    assert player.hsp == pytest.approx(42.5)
    assert player.average_rating == pytest.approx(1.31)
    assert player.points == 1234
    assert player.total_maps == 3


def test_normalize_player_computes_missing_derived_values() -> None:
    raw = {
        "steam_id": "765",
        "kills": 20,
        "deaths": 14,
        "rounds_played": 20,
        "headshot_kills": 8,
        "k1": 10,
        "k2": 5,
    }
    player = normalize_player(raw)
    assert player.hsk == 8
    assert player.hsp == pytest.approx(40.0)
    assert player.average_rating == pytest.approx(compute_rating(20, 20, 14, 10, 5, 0, 0, 0))


def test_normalize_player_leaves_rating_zero_without_rounds() -> None:
    player = normalize_player({"steam_id": "1", "kills": 3, "deaths": 1})
    assert player.average_rating == 0.0


def test_normalize_player_round_trips() -> None:
    player = normalize_player(
        {"steam_id": "765", "kills": 20, "deaths": 14, "roundsplayed": 20, "hsk": 8, "k1": 10}
    )
    assert normalize_player(player.as_record()) == player


def test_normalize_match_maps_raw_team_id_winner() -> None:
    match = normalize_match(
        {
            "id": 9,
            "team1_id": 47,
            "team2_id": 48,
            "winner": 48,
            "team1_score": 0,
            "team2_score": 1,
            "team1_name": "Alpha",
            "team2_name": "Bravo",
            "season_id": 2,
            "end_time": "2026-01-02T20:00:00Z",
        }
    )
    assert match.winner == 2
    assert match.team1_string == "Alpha"
    assert match.team2_string == "Bravo"
    assert match.season_id == 2
    assert match.is_decided


def test_normalize_match_prefers_round_scores() -> None:
    match = normalize_match(
        {
            "id": 1,
            "team1_score": 0,
            "team2_score": 1,
            "team1_mapscore": 13,
            "team2_mapscore": 7,
        }
    )
    # A BO1 series score says team 2; the round scores say team 1.
    assert match.winner == 1


def test_normalize_match_defaults() -> None:
    match = normalize_match({"id": "3"})
    assert match == Match(id=3)
    assert match.team1_string == "Team 1"
    assert match.season_id is None
    assert match.is_pug is True
    assert match.winner is None
    assert match.is_live


def test_normalize_match_zero_date_end_time_is_none() -> None:
    match = normalize_match({"id": 3, "end_time": "0000-00-00 00:00:00"})
    assert match.end_time is None


def test_cancelled_and_forfeit_matches_are_not_decided_by_score() -> None:
    cancelled = normalize_match(
        {"id": 1, "cancelled": 1, "team1_score": 16, "team2_score": 2}
    )
    forfeit = normalize_match({"id": 2, "forfeit": "1", "team1_mapscore": 13, "team2_mapscore": 0})
    assert cancelled.winner is None
    assert forfeit.winner is None
    assert not cancelled.is_decided


def test_forfeit_with_declared_winner_keeps_it() -> None:
    match = normalize_match({"id": 2, "team1_id": 5, "team2_id": 6, "winner": 6, "forfeit": True})
    assert match.winner == 2
    assert not match.is_decided


def test_normalize_match_round_trips() -> None:
    match = normalize_match(
        {
            "id": 7,
            "team1_id": 47,
            "team2_id": 48,
            "winner": 47,
            "team1_mapscore": 13,
            "team2_mapscore": 11,
            "team1_string": "Alpha",
            "team2_string": "Bravo",
            "start_time": "2026-01-02T19:00:00Z",
            "max_maps": 3,
            "is_pug": 0,
        }
    )
    assert normalize_match(match.as_record()) == match


def test_normalize_match_round_trips_with_team_ids_one_and_two() -> None:
    match = normalize_match({"id": 8, "team1_id": 2, "team2_id": 1, "winner": 1})
    assert match.winner == 2
    assert match.as_record()["winner"] == 1
    assert normalize_match(match.as_record()) == match


def test_normalize_map_stat_uses_match_team_ids() -> None:
    match = normalize_match({"id": 5, "team1_id": 47, "team2_id": 48})
    stat = normalize_map_stat(
        {"id": 1, "match_id": 5, "winner": 47, "map_name": "de_nuke", "team1_score": 13},
        match,
    )
    assert stat.winner == 1
    assert stat.map_name == "de_nuke"

    orphan = normalize_map_stat({"id": 2, "team1_score": 5, "team2_score": 13})
    assert orphan.winner == 2


def test_normalize_server_and_season() -> None:
    server = normalize_server(
        {"id": "3", "ip_string": "10.0.0.1", "port": "27015", "in_use": 1, "public_server": "0"}
    )
    assert server.port == 27015
    assert server.in_use is True
    assert server.public_server is False

    season = normalize_season({"id": 4, "start_date": "2026-01-01T00:00:00Z", "end_date": ""})
    assert season.name == "Season 4"
    assert season.end_date is None


def test_parse_datetime_handles_zulu_and_naive_values() -> None:
    assert parse_datetime("2026-01-02T03:04:05Z") == datetime(2026, 1, 2, 3, 4, 5, tzinfo=UTC)
    assert parse_datetime("2026-01-02 03:04:05") == datetime(2026, 1, 2, 3, 4, 5, tzinfo=UTC)
    assert parse_datetime("0000-00-00 00:00:00") is None
    assert parse_datetime("") is None


def test_explicit_zero_hsp_without_kills_stays_zero() -> None:
    player = normalize_player({"steam_id": "1", "hsp": 0, "hsk": 4})
    assert player.hsp == 0.0


def test_normalize_map_stat_round_trips() -> None:
    match = normalize_match({"id": 5, "team1_id": 47, "team2_id": 48})
    stat = normalize_map_stat(
        {
            "id": 3,
            "match_id": 5,
            "winner": 48,
            "map_number": 1,
            "map_name": "de_inferno",
            "team1_score": 9,
            "team2_score": 13,
            "start_time": "2026-01-02T19:00:00Z",
            "end_time": "2026-01-02T19:45:00Z",
        },
        match,
    )
    assert stat.winner == 2
    assert normalize_map_stat(stat.as_record(), match) == stat


def test_normalize_server_round_trips() -> None:
    server = normalize_server(
        {
            "id": 2,
            "ip_string": "10.0.0.2",
            "port": 27016,
            "gotv_port": 27021,
            "display_name": "PUG #2",
            "flag": "DK",
            "public_server": 1,
            "in_use": "0",
        }
    )
    assert normalize_server(server.as_record()) == server
