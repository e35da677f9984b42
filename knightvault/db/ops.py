# ==============================================================================
# ops.py  –  Row primitives used by the import path
# ------------------------------------------------------------------------------
# Responsibilities:
#   • get-or-create a player by exact (case-sensitive) name
#   • insert a normalised game row and bump each named side's game_count
# ==============================================================================

from __future__ import annotations

from typing import Any, Dict

from sqlalchemy import select, update
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.engine import Connection

from knightvault.db.models import NO_PLAYER_ID
from knightvault.db.schema import GAMES_TBL, PLAYERS_TBL
from knightvault.utils.logging_utils import setup_logger

LOGGER = setup_logger("ops")


def get_or_create_player(conn: Connection, name: str) -> int:
    """
    Return the id of the player called *name*, inserting it with
    ``game_count = 0`` when absent.

    Uniqueness is enforced by the ``players.name`` constraint, so repeated
    calls with the same name never create a second row.
    """
    conn.execute(
        sqlite_insert(PLAYERS_TBL)
        .values(name=name, game_count=0)
        .on_conflict_do_nothing(index_elements=["name"])
    )
    return conn.execute(
        select(PLAYERS_TBL.c.id).where(PLAYERS_TBL.c.name == name)
    ).scalar_one()


def create_game(conn: Connection, game: Dict[str, Any]) -> int:
    """
    Insert one game row and return its id.

    Each side that references a real player gets ``game_count + 1``; a player
    on both sides of the same game is counted twice.
    """
    game_id = conn.execute(GAMES_TBL.insert().values(game)).inserted_primary_key[0]

    for side in ("white", "black"):
        player_id = game[side]
        if player_id == NO_PLAYER_ID:
            continue
        conn.execute(
            update(PLAYERS_TBL)
            .where(PLAYERS_TBL.c.id == player_id)
            .values(game_count=PLAYERS_TBL.c.game_count + 1)
        )

    LOGGER.debug("Inserted game %s", game_id)
    return game_id
