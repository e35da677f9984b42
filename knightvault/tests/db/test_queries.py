# ==============================================================================
# test_queries.py  –  Game / player filters, pagination and stats
#   Imports a small fixed PGN once per test, then queries through the api.
#
#   id  white  black  ratings     result   speed
#   1   Alice  Bob    1500/1600   1-0      blitz
#   2   Bob    Alice  1700/1550   0-1      bullet
#   3   Alice  Carol  1520/1400   1/2      rapid
#   4   Carol  Bob    1450/1650   1-0      blitz
# ==============================================================================

import pytest

from knightvault import api
from knightvault.db.models import GameQuery, Outcome, PlayerQuery, Sides, Speed

ALICE, BOB, CAROL = 1, 2, 3


# ------------------------------------------------------------------------------
# Fixtures
# ------------------------------------------------------------------------------
@pytest.fixture
def db(make_game, write_pgn, db_path):
    pgn = write_pgn(
        make_game("Alice", "Bob", "1500", "1600", "1-0", "180+0"),
        make_game("Bob", "Alice", "1700", "1550", "0-1", "60+0"),
        make_game("Alice", "Carol", "1520", "1400", "1/2-1/2", "600+0"),
        make_game("Carol", "Bob", "1450", "1650", "1-0", "300+0"),
    )
    api.import_pgn(pgn, db_path)
    return db_path


def _ids(response):
    return [game["id"] for game in response.data]


# ------------------------------------------------------------------------------
# Games
# ------------------------------------------------------------------------------
def test_all_games_newest_first(db):
    response = api.list_games(db, GameQuery())
    assert _ids(response) == [4, 3, 2, 1]
    assert response.count == 4


@pytest.mark.parametrize(
    "sides,expected",
    [
        (Sides.WHITE_BLACK, [1]),
        (Sides.BLACK_WHITE, [2]),
        (Sides.ANY, [2, 1]),
    ],
)
def test_player_pair_sides(db, sides, expected):
    response = api.list_games(db, GameQuery(player1="Alice", player2="Bob", sides=sides))
    assert _ids(response) == expected
    assert response.count == len(expected)


def test_any_side_is_union_without_duplicates(db):
    both = _ids(api.list_games(db, GameQuery(player1="Alice", player2="Bob")))
    white_black = _ids(
        api.list_games(db, GameQuery(player1="Alice", player2="Bob", sides=Sides.WHITE_BLACK))
    )
    black_white = _ids(
        api.list_games(db, GameQuery(player1="Alice", player2="Bob", sides=Sides.BLACK_WHITE))
    )
    assert sorted(both) == sorted(set(white_black) | set(black_white))
    assert len(both) == len(set(both))


def test_rating_range_follows_the_player(db):
    # Alice rated 1500-1520: game 1 (white 1500) yes, game 2 (black 1550) no.
    response = api.list_games(
        db, GameQuery(player1="Alice", player2="Bob", range1=(1500, 1520))
    )
    assert _ids(response) == [1]


def test_open_ended_range(db):
    response = api.list_games(db, GameQuery(player1="Alice", range1=(1540, None)))
    assert _ids(response) == [2]


def test_single_player_either_colour(db):
    response = api.list_games(db, GameQuery(player1="Alice"))
    assert _ids(response) == [3, 2, 1]


def test_speed_and_outcome_filters(db):
    assert _ids(api.list_games(db, GameQuery(speed=Speed.BLITZ))) == [4, 1]
    assert _ids(api.list_games(db, GameQuery(outcome=Outcome.DRAW))) == [3]
    assert _ids(
        api.list_games(db, GameQuery(speed=Speed.BLITZ, outcome=Outcome.WHITE_WIN))
    ) == [4, 1]


def test_pagination_and_count_match_filter(db):
    query = GameQuery(limit=2, offset=1)
    response = api.list_games(db, query)

    assert _ids(response) == [3, 2]
    assert response.count == len(api.list_games(db, GameQuery()).data)


def test_offset_without_limit(db):
    assert _ids(api.list_games(db, GameQuery(offset=3))) == [1]


def test_repeated_queries_are_stable(db):
    query = GameQuery(player1="Bob", limit=2)
    assert api.list_games(db, query) == api.list_games(db, query)


def test_skip_count(db):
    assert api.list_games(db, GameQuery(skip_count=True)).count is None


def test_unknown_player_matches_nothing(db):
    response = api.list_games(db, GameQuery(player1="Nobody"))
    assert response.data == []
    assert response.count == 0


def test_game_row_shape(db):
    game = api.list_games(db, GameQuery(limit=1)).data[0]
    assert game == {
        "id": 4,
        "white": CAROL,
        "black": BOB,
        "white_rating": 1450,
        "black_rating": 1650,
        "date": "2013.01.01",
        "speed": int(Speed.BLITZ),
        "site": "abcd1234",
        "fen": None,
        "outcome": int(Outcome.WHITE_WIN),
        "moves": "e4 e5 Nf3 Nc6",
    }


# ------------------------------------------------------------------------------
# Players
# ------------------------------------------------------------------------------
def test_players_by_id_with_counts(db):
    response = api.list_players(db, PlayerQuery())
    assert [(p["id"], p["name"], p["game_count"]) for p in response.data] == [
        (ALICE, "Alice", 3),
        (BOB, "Bob", 3),
        (CAROL, "Carol", 2),
    ]
    assert response.count == 3


def test_player_name_substring(db):
    response = api.list_players(db, PlayerQuery(name="o"))
    assert [p["name"] for p in response.data] == ["Bob", "Carol"]
    assert response.count == 2


def test_player_name_wildcards_are_literal(db):
    response = api.list_players(db, PlayerQuery(name="%"))
    assert response.data == []
    assert response.count == 0


def test_player_pagination(db):
    response = api.list_players(db, PlayerQuery(limit=1, offset=1, skip_count=True))
    assert [p["name"] for p in response.data] == ["Bob"]
    assert response.count is None


# ------------------------------------------------------------------------------
# Stats
# ------------------------------------------------------------------------------
@pytest.mark.parametrize(
    "player_id,won,lost,draw",
    [
        (ALICE, 2, 0, 1),
        (BOB, 0, 3, 0),
        (CAROL, 1, 0, 1),
        (99, 0, 0, 0),
    ],
)
def test_player_stats(db, player_id, won, lost, draw):
    stats = api.player_stats(db, player_id)
    assert (stats.won, stats.lost, stats.draw) == (won, lost, draw)
