# ==============================================================================
# batch_writer.py  –  Buffer admitted games and write them in batches
# ------------------------------------------------------------------------------
# Responsibilities:
#   • Hold up to `batch_size` pending games, flushing when the batch is full
#   • Resolve player names → ids (get-or-create, nameless side → NO_PLAYER_ID)
#   • Normalise a pending game → games row (stable ints, space-joined moves)
#   • Write each flush inside a single transaction
# ==============================================================================

from __future__ import annotations

from typing import Any, Dict, List, Optional

from sqlalchemy.engine import Connection

from knightvault.db.models import NO_PLAYER_ID
from knightvault.db.ops import create_game, get_or_create_player
from knightvault.ingestion.game_builder import PendingGame
from knightvault.utils.logging_utils import setup_logger

LOGGER = setup_logger("batch_writer")

UNKNOWN_DATE = "????.??.??"


def build_game_row(game: PendingGame, white_id: int, black_id: int) -> Dict[str, Any]:
    """Normalise an admitted pending game into a games row."""
    return {
        "white": white_id,
        "black": black_id,
        "white_rating": game.white.rating,
        "black_rating": game.black.rating,
        "date": game.date if game.date is not None else UNKNOWN_DATE,
        "speed": int(game.speed),
        "site": game.site,
        "fen": game.fen,
        "outcome": int(game.outcome),
        "moves": " ".join(game.moves),
    }


class BatchWriter:
    """Accumulates pending games and writes them through one connection."""

    def __init__(self, conn: Connection, batch_size: int) -> None:
        if batch_size < 1:
            raise ValueError(f"batch_size must be positive, got {batch_size}")
        self._conn = conn
        self.batch_size = batch_size
        self._batch: List[PendingGame] = []
        self.flushes = 0
        self.written = 0

    def __len__(self) -> int:
        return len(self._batch)

    def add(self, game: PendingGame) -> None:
        """Queue *game*; flush first thing once the batch is full."""
        self._batch.append(game)
        if len(self._batch) >= self.batch_size:
            self.flush()

    def flush(self) -> int:
        """Write every queued game in one transaction. Returns games written."""
        if not self._batch:
            return 0

        # The batch stays queued if the transaction rolls back.
        batch = self._batch
        with self._conn.begin():
            for game in batch:
                white_id = self._resolve(game.white.name)
                black_id = self._resolve(game.black.name)
                create_game(self._conn, build_game_row(game, white_id, black_id))
        self._batch = []

        self.flushes += 1
        self.written += len(batch)
        LOGGER.debug(
            "Flush #%d – %d game(s), %d total", self.flushes, len(batch), self.written
        )
        return len(batch)

    def _resolve(self, name: Optional[str]) -> int:
        if name is None:
            return NO_PLAYER_ID
        return get_or_create_player(self._conn, name)
