#!/usr/bin/env python3
# ==============================================================================
# run_ingestion.py  –  Import a PGN file into a SQLite game database
# ------------------------------------------------------------------------------
# Execution flow:
#   1. Open an exclusive import connection and make sure the schema exists
#   2. Pick a decoder from the file extension (.bz2 / .zst / plain)
#   3. Feed every game through GameBuilder (chess.pgn.read_game)
#   4. Admitted games collect in BatchWriter; a full batch is flushed before
#      the next game is read, and the remainder is flushed at end of input
#
# Any read or store failure aborts the whole import.
# ==============================================================================

from __future__ import annotations

import sys
from pathlib import Path
from typing import Optional, Union

import chess.pgn
import zstandard as zstd
from sqlalchemy.exc import SQLAlchemyError

from knightvault.db.models import ImportSummary
from knightvault.db.schema import init_schema
from knightvault.ingestion.batch_writer import BatchWriter
from knightvault.ingestion.codecs import open_pgn_stream
from knightvault.ingestion.game_builder import GameBuilder
from knightvault.utils.db_utils import create_import_engine, get_batch_size
from knightvault.utils.errors import PgnReadError, StoreError
from knightvault.utils.logging_utils import setup_logger

LOGGER = setup_logger("run_ingestion")

# Failures of the input stream itself (not of a single game).
_READ_ERRORS = (OSError, EOFError, UnicodeDecodeError, zstd.ZstdError)


def run_import(
    pgn_path: Union[str, Path],
    db_path: Union[str, Path],
    batch_size: Optional[int] = None,
) -> ImportSummary:
    """
    Import every admissible game from *pgn_path* into the database at *db_path*.

    Returns
    -------
    ImportSummary
        Admitted / excluded counts and the number of flushes.

    Raises
    ------
    PgnReadError
        The file could not be opened, decompressed or decoded.
    StoreError
        The database rejected a write.
    """
    batch_size = batch_size if batch_size is not None else get_batch_size()
    LOGGER.info("Importing %s → %s (batch size %d)", pgn_path, db_path, batch_size)

    engine = create_import_engine(db_path)
    try:
        with engine.connect() as conn:
            with conn.begin():
                init_schema(conn)

            writer = BatchWriter(conn, batch_size)
            builder = GameBuilder(writer.add)

            with open_pgn_stream(pgn_path) as stream:
                while chess.pgn.read_game(stream, Visitor=lambda: builder) is not None:
                    pass

            writer.flush()

    except _READ_ERRORS as exc:
        LOGGER.error("Import of %s failed – %s", pgn_path, exc)
        raise PgnReadError(f"Cannot read {pgn_path}: {exc}") from exc
    except SQLAlchemyError as exc:
        LOGGER.error("Import into %s failed – %s", db_path, exc)
        raise StoreError(f"Cannot write to {db_path}: {exc}") from exc
    finally:
        engine.dispose()

    summary = ImportSummary(
        admitted=builder.admitted,
        excluded=builder.excluded,
        exclusion_reasons=dict(builder.exclusion_reasons),
        flushes=writer.flushes,
    )
    LOGGER.info(
        "Import done – %d admitted, %d excluded %s, %d flush(es)",
        summary.admitted,
        summary.excluded,
        summary.exclusion_reasons,
        summary.flushes,
    )
    return summary


if __name__ == "__main__":
    if len(sys.argv) != 3:
        sys.exit("usage: run_ingestion.py <games.pgn[.bz2|.zst]> <database.sqlite>")
    run_import(sys.argv[1], sys.argv[2])
