# ==============================================================================
# schema.py  –  SQLAlchemy Core tables for a game database
# ------------------------------------------------------------------------------
# Tables:
#   • players   – one row per distinct player name, with a running game count
#   • games     – one row per admitted game (speed / outcome as stable ints)
#   • metadata  – key/value pairs; seeded with title = "Untitled"
# ==============================================================================

from __future__ import annotations

from sqlalchemy import Column, ForeignKey, Integer, MetaData, Table, Text, select
from sqlalchemy.engine import Connection

DEFAULT_TITLE = "Untitled"

META = MetaData()

PLAYERS_TBL = Table(
    "players",
    META,
    Column("id", Integer, primary_key=True),
    Column("name", Text, nullable=False, unique=True),
    Column("game_count", Integer, server_default="0"),
)

GAMES_TBL = Table(
    "games",
    META,
    Column("id", Integer, primary_key=True),
    Column("white", Integer, ForeignKey("players.id"), nullable=False),
    Column("black", Integer, ForeignKey("players.id"), nullable=False),
    Column("white_rating", Integer),
    Column("black_rating", Integer),
    Column("date", Text, nullable=False),
    Column("speed", Integer, nullable=False),
    Column("site", Text),
    Column("fen", Text),
    Column("outcome", Integer, nullable=False),
    Column("moves", Text, nullable=False),
)

METADATA_TBL = Table(
    "metadata",
    META,
    Column("key", Text, nullable=False),
    Column("value", Text, nullable=False),
)


def init_schema(conn: Connection) -> None:
    """Create missing tables and seed the default title. Safe to call repeatedly."""
    META.create_all(conn)
    has_title = conn.execute(
        select(METADATA_TBL.c.key).where(METADATA_TBL.c.key == "title").limit(1)
    ).first()
    if has_title is None:
        conn.execute(METADATA_TBL.insert().values(key="title", value=DEFAULT_TITLE))
