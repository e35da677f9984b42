# ==============================================================================
# queries.py  –  Read-side queries over a game database
# ------------------------------------------------------------------------------
# Filters are composed as SQLAlchemy expressions:
#   • speed / outcome          → equality, AND-ed
#   • player pair + ranges     → WhiteBlack clause, BlackWhite clause, or both OR-ed
# The count (when requested) runs over exactly the same WHERE as the page fetch.
# ==============================================================================

from __future__ import annotations

from typing import Any, Dict, List, Optional

from sqlalchemy import and_, func, or_, select, update
from sqlalchemy.engine import Connection
from sqlalchemy.sql.elements import ColumnElement

from knightvault.db.models import (
    GameQuery,
    Outcome,
    PlayerQuery,
    PlayerStats,
    QueryResponse,
    RatingRange,
    Sides,
)
from knightvault.db.schema import GAMES_TBL, METADATA_TBL, PLAYERS_TBL, DEFAULT_TITLE

# ------------------------------------------------------------------------------
# Predicate helpers
# ------------------------------------------------------------------------------


def _rating_in(column, rating_range: Optional[RatingRange]) -> List[ColumnElement]:
    """Inclusive range; a missing range or bound leaves that side open."""
    if rating_range is None:
        return []
    low, high = rating_range
    parts: List[ColumnElement] = []
    if low is not None:
        parts.append(column >= low)
    if high is not None:
        parts.append(column <= high)
    return parts


def _side_clause(
    white_id: Optional[int],
    black_id: Optional[int],
    white_range: Optional[RatingRange],
    black_range: Optional[RatingRange],
) -> Optional[ColumnElement]:
    parts: List[ColumnElement] = []
    if white_id is not None:
        parts.append(GAMES_TBL.c.white == white_id)
    if black_id is not None:
        parts.append(GAMES_TBL.c.black == black_id)
    parts += _rating_in(GAMES_TBL.c.white_rating, white_range)
    parts += _rating_in(GAMES_TBL.c.black_rating, black_range)
    return and_(*parts) if parts else None


def _player_id(conn: Connection, name: str) -> Optional[int]:
    return conn.execute(
        select(PLAYERS_TBL.c.id).where(PLAYERS_TBL.c.name == name)
    ).scalar_one_or_none()


def build_game_filters(conn: Connection, query: GameQuery) -> Optional[List[ColumnElement]]:
    """
    Return the WHERE conditions for *query*, or ``None`` when a named player
    does not exist (nothing can match).
    """
    conditions: List[ColumnElement] = []

    if query.speed is not None:
        conditions.append(GAMES_TBL.c.speed == int(query.speed))
    if query.outcome is not None:
        conditions.append(GAMES_TBL.c.outcome == int(query.outcome))

    p1 = p2 = None
    if query.player1 is not None:
        p1 = _player_id(conn, query.player1)
        if p1 is None:
            return None
    if query.player2 is not None:
        p2 = _player_id(conn, query.player2)
        if p2 is None:
            return None

    white_black = _side_clause(p1, p2, query.range1, query.range2)
    black_white = _side_clause(p2, p1, query.range2, query.range1)

    if white_black is not None:
        if query.sides is Sides.WHITE_BLACK:
            conditions.append(white_black)
        elif query.sides is Sides.BLACK_WHITE:
            conditions.append(black_white)
        else:
            conditions.append(or_(white_black, black_white))

    return conditions


# ------------------------------------------------------------------------------
# Games / players
# ------------------------------------------------------------------------------


def list_games(conn: Connection, query: GameQuery) -> QueryResponse[Dict[str, Any]]:
    """Filtered page of games, newest import first."""
    conditions = build_game_filters(conn, query)
    if conditions is None:
        return QueryResponse(data=[], count=None if query.skip_count else 0)

    count = None
    if not query.skip_count:
        count = conn.execute(
            select(func.count()).select_from(GAMES_TBL).where(*conditions)
        ).scalar_one()

    stmt = (
        select(GAMES_TBL)
        .where(*conditions)
        .order_by(GAMES_TBL.c.id.desc())
        .limit(query.limit)
        .offset(query.offset)
    )
    data = [dict(row._mapping) for row in conn.execute(stmt)]
    return QueryResponse(data=data, count=count)


def list_players(conn: Connection, query: PlayerQuery) -> QueryResponse[Dict[str, Any]]:
    """Filtered page of players by ascending id; `name` matches anywhere."""
    conditions: List[ColumnElement] = []
    if query.name is not None:
        conditions.append(PLAYERS_TBL.c.name.contains(query.name, autoescape=True))

    count = None
    if not query.skip_count:
        count = conn.execute(
            select(func.count()).select_from(PLAYERS_TBL).where(*conditions)
        ).scalar_one()

    stmt = (
        select(PLAYERS_TBL)
        .where(*conditions)
        .order_by(PLAYERS_TBL.c.id)
        .limit(query.limit)
        .offset(query.offset)
    )
    data = [dict(row._mapping) for row in conn.execute(stmt)]
    return QueryResponse(data=data, count=count)


def player_stats(conn: Connection, player_id: int) -> PlayerStats:
    """Win / loss / draw tally from the player's own point of view."""
    stats = PlayerStats()
    rows = conn.execute(
        select(GAMES_TBL.c.white, GAMES_TBL.c.black, GAMES_TBL.c.outcome).where(
            or_(GAMES_TBL.c.white == player_id, GAMES_TBL.c.black == player_id)
        )
    )
    for white, black, outcome in rows:
        if outcome == Outcome.DRAW:
            stats.draw += 1
        elif (outcome == Outcome.WHITE_WIN and white == player_id) or (
            outcome == Outcome.BLACK_WIN and black == player_id
        ):
            stats.won += 1
        else:
            stats.lost += 1
    return stats


# ------------------------------------------------------------------------------
# Metadata / counts
# ------------------------------------------------------------------------------


def count_rows(conn: Connection, table) -> int:
    return conn.execute(select(func.count()).select_from(table)).scalar_one()


def get_title(conn: Connection) -> str:
    # Files written by older builders can hold several title rows.
    title = conn.execute(
        select(METADATA_TBL.c.value).where(METADATA_TBL.c.key == "title").limit(1)
    ).scalar()
    return title if title is not None else DEFAULT_TITLE


def set_title(conn: Connection, title: str) -> None:
    updated = conn.execute(
        update(METADATA_TBL).where(METADATA_TBL.c.key == "title").values(value=title)
    ).rowcount
    if not updated:
        conn.execute(METADATA_TBL.insert().values(key="title", value=title))
