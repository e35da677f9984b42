# ==============================================================================
# db_utils.py  –  Tiny helper for settings and SQLite engines
#
# Centralizes:
#   • .env loading and import settings (batch size, pragma toggle)
#   • SQLite connection URLs
#   • Per-call engines (no pooling across public operations)
# ==============================================================================

from __future__ import annotations

import os
from pathlib import Path
from typing import Final, Tuple, Union

from dotenv import load_dotenv
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.pool import NullPool

from knightvault.utils.errors import DatabaseNotFoundError

ROOT_ENV = Path(__file__).resolve().parents[2] / ".env"
load_dotenv(dotenv_path=ROOT_ENV, override=False)  # env values override file

DEFAULT_BATCH_SIZE: Final[int] = 50

# Applied to the import connection only; readers keep SQLite defaults.
IMPORT_PRAGMAS: Final[Tuple[str, ...]] = (
    "PRAGMA journal_mode = MEMORY",
    "PRAGMA synchronous = OFF",
    "PRAGMA locking_mode = EXCLUSIVE",
    "PRAGMA temp_store = MEMORY",
)

PathLike = Union[str, Path]


# ------------------------------------------------------------------------------
# Internal helpers
# ------------------------------------------------------------------------------


def _bool_env(var_name: str, default: str = "false") -> bool:
    """Convert TRUE / true / 1 style env vars to bool."""
    return os.getenv(var_name, default).strip().lower() in {"1", "true", "yes"}


def _apply_import_pragmas(dbapi_conn, _conn_record) -> None:
    cursor = dbapi_conn.cursor()
    try:
        for pragma in IMPORT_PRAGMAS:
            cursor.execute(pragma)
    finally:
        cursor.close()


# ------------------------------------------------------------------------------
# Public API
# ------------------------------------------------------------------------------


def get_batch_size() -> int:
    """Return the flush threshold from ``KNIGHTVAULT_BATCH_SIZE`` (default 50)."""
    raw = os.getenv("KNIGHTVAULT_BATCH_SIZE", str(DEFAULT_BATCH_SIZE))
    try:
        size = int(raw)
    except ValueError as exc:
        raise ValueError(f"KNIGHTVAULT_BATCH_SIZE must be an integer, got {raw!r}") from exc
    if size < 1:
        raise ValueError(f"KNIGHTVAULT_BATCH_SIZE must be positive, got {size}")
    return size


def get_database_url(db_path: PathLike) -> str:
    """
    Build a SQLAlchemy SQLite URL from a file path.

    Example
    -------
    sqlite:////home/me/.local/share/knightvault/db/lichess_2013.sqlite
    """
    return f"sqlite:///{Path(db_path).as_posix()}"


def create_import_engine(db_path: PathLike) -> Engine:
    """
    Engine for the import path: creates the file if needed and, unless
    ``KNIGHTVAULT_SQLITE_PRAGMAS=false``, takes an exclusive lock with
    throughput-oriented pragmas.
    """
    engine = create_engine(get_database_url(db_path), poolclass=NullPool)
    if _bool_env("KNIGHTVAULT_SQLITE_PRAGMAS", "true"):
        event.listen(engine, "connect", _apply_import_pragmas)
    return engine


def create_read_engine(db_path: PathLike) -> Engine:
    """Engine for queries against an existing database file."""
    if not Path(db_path).is_file():
        raise DatabaseNotFoundError(f"No database at {db_path}")
    return create_engine(get_database_url(db_path), poolclass=NullPool)
