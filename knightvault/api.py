# ==============================================================================
# api.py  –  Public operations on a game database
# ------------------------------------------------------------------------------
# Every call opens its own connection and releases it before returning,
# whether or not the call succeeds:
#   • import_pgn     PGN (plain / .bz2 / .zst) → database
#   • get_db_info    title, file name, row counts, file size
#   • rename_db      set the title
#   • list_games / list_players / player_stats / count_games
# ==============================================================================

from __future__ import annotations

from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, Iterator, Optional, Union

from sqlalchemy.engine import Connection
from sqlalchemy.exc import SQLAlchemyError

from knightvault.db import queries
from knightvault.db.models import (
    DatabaseInfo,
    GameQuery,
    ImportSummary,
    PlayerQuery,
    PlayerStats,
    QueryResponse,
)
from knightvault.db.schema import GAMES_TBL, PLAYERS_TBL
from knightvault.pipeline.run_ingestion import run_import
from knightvault.utils.db_utils import create_read_engine
from knightvault.utils.errors import StoreError
from knightvault.utils.logging_utils import setup_logger

LOGGER = setup_logger("api")

PathLike = Union[str, Path]


@contextmanager
def _connect(db_path: PathLike, write: bool = False) -> Iterator[Connection]:
    """Per-call connection; SQLAlchemy errors surface as StoreError."""
    engine = create_read_engine(db_path)
    try:
        with (engine.begin() if write else engine.connect()) as conn:
            yield conn
    except SQLAlchemyError as exc:
        LOGGER.error("Query on %s failed – %s", db_path, exc)
        raise StoreError(f"Database error on {db_path}: {exc}") from exc
    finally:
        engine.dispose()


# ------------------------------------------------------------------------------
# Import / metadata
# ------------------------------------------------------------------------------


def import_pgn(
    pgn_path: PathLike, db_path: PathLike, batch_size: Optional[int] = None
) -> ImportSummary:
    return run_import(pgn_path, db_path, batch_size=batch_size)


def get_db_info(db_path: PathLike) -> DatabaseInfo:
    path = Path(db_path)
    with _connect(path) as conn:
        title = queries.get_title(conn)
        player_count = queries.count_rows(conn, PLAYERS_TBL)
        game_count = queries.count_rows(conn, GAMES_TBL)

    return DatabaseInfo(
        title=title,
        description=path.name,
        player_count=player_count,
        game_count=game_count,
        storage_size=path.stat().st_size,
    )


def rename_db(db_path: PathLike, title: str) -> None:
    with _connect(db_path, write=True) as conn:
        queries.set_title(conn, title)
    LOGGER.info("Renamed %s to %r", db_path, title)


def count_games(db_path: PathLike) -> int:
    with _connect(db_path) as conn:
        return queries.count_rows(conn, GAMES_TBL)


# ------------------------------------------------------------------------------
# Queries
# ------------------------------------------------------------------------------


def list_games(db_path: PathLike, query: GameQuery) -> QueryResponse[Dict[str, Any]]:
    with _connect(db_path) as conn:
        return queries.list_games(conn, query)


def list_players(db_path: PathLike, query: PlayerQuery) -> QueryResponse[Dict[str, Any]]:
    with _connect(db_path) as conn:
        return queries.list_players(conn, query)


def player_stats(db_path: PathLike, player_id: int) -> PlayerStats:
    with _connect(db_path) as conn:
        return queries.player_stats(conn, player_id)
