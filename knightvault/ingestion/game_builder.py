# ==============================================================================
# game_builder.py  –  PGN visitor that turns parser events into pending games
# ------------------------------------------------------------------------------
# Driven by chess.pgn.read_game, one game per call:
#
#   begin_game  → OPEN    fresh record + fresh exclusion reasons
#   visit_header          header → record field (later duplicates overwrite)
#   end_headers → BODY    fold reasons into admit / SKIP
#   visit_move            append SAN token (mainline only, variations skipped)
#   end_game    → CLOSED  hand the admitted record to the sink
# ==============================================================================

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Callable, List, Optional

import chess
import chess.pgn

from knightvault.db.models import Outcome, Speed
from knightvault.ingestion.speed import from_time_control
from knightvault.utils.logging_utils import setup_logger

LOGGER = setup_logger("game_builder")

UNKNOWN_RATING = "?"
BOT_TITLE = "BOT"


class BuilderState(Enum):
    IDLE = "idle"
    OPEN = "open"
    BODY = "body"
    CLOSED = "closed"


@dataclass
class PendingPlayer:
    name: Optional[str] = None
    rating: Optional[int] = None


@dataclass
class PendingGame:
    """A game read from PGN but not yet written."""

    white: PendingPlayer = field(default_factory=PendingPlayer)
    black: PendingPlayer = field(default_factory=PendingPlayer)
    speed: Optional[Speed] = None
    date: Optional[str] = None
    site: Optional[str] = None
    fen: Optional[str] = None
    outcome: Optional[Outcome] = None
    moves: List[str] = field(default_factory=list)


@dataclass
class ExclusionReasons:
    """Why the current game will not be written. Any flag set → excluded."""

    missing_rating: bool = False
    bad_rating: bool = False
    bot_player: bool = False
    bad_result: bool = False
    missing_time_control: bool = False
    bad_time_control: bool = False
    bad_movetext: bool = False

    def active(self) -> List[str]:
        return [f.name for f in fields(self) if getattr(self, f.name)]

    @property
    def excluded(self) -> bool:
        return bool(self.active())


class GameBuilder(chess.pgn.BaseVisitor[bool]):
    """
    Stateful visitor reused across every game of one import.

    ``result()`` reports whether the most recent game was admitted; it is
    never ``None`` so ``read_game`` only returns ``None`` at end of input.
    """

    def __init__(self, sink: Callable[[PendingGame], None]) -> None:
        self._sink = sink
        self.state = BuilderState.IDLE
        self._record = PendingGame()
        self._reasons = ExclusionReasons()
        self._last_admitted = False

        self.admitted = 0
        self.excluded = 0
        self.exclusion_reasons: Counter = Counter()

    # --------------------------------------------------------------------------
    # Game lifecycle
    # --------------------------------------------------------------------------

    def begin_game(self) -> None:
        self.state = BuilderState.OPEN
        self._record = PendingGame()
        self._reasons = ExclusionReasons()
        self._last_admitted = False

    def visit_header(self, tagname: str, tagvalue: str) -> None:
        record = self._record

        if tagname == "White":
            record.white.name = tagvalue
        elif tagname == "Black":
            record.black.name = tagvalue
        elif tagname == "WhiteElo":
            record.white.rating = self._parse_rating(tagvalue)
        elif tagname == "BlackElo":
            record.black.rating = self._parse_rating(tagvalue)
        elif tagname == "TimeControl":
            try:
                record.speed = from_time_control(tagvalue)
            except ValueError:
                LOGGER.debug("Bad TimeControl %r", tagvalue)
                self._reasons.bad_time_control = True
        elif tagname in ("Date", "UTCDate"):
            record.date = tagvalue
        elif tagname in ("WhiteTitle", "BlackTitle"):
            if tagvalue == BOT_TITLE:
                self._reasons.bot_player = True
        elif tagname == "Site":
            record.site = tagvalue.rsplit("/", 1)[-1]
        elif tagname == "Result":
            outcome = Outcome.from_result(tagvalue)
            if outcome is None:
                self._reasons.bad_result = True
            else:
                record.outcome = outcome
        elif tagname == "FEN":
            record.fen = None if tagvalue == chess.STARTING_FEN else tagvalue

    def end_headers(self) -> Optional[chess.pgn.SkipType]:
        record = self._record
        if record.white.rating is None or record.black.rating is None:
            self._reasons.missing_rating = True
        if record.speed is None and not self._reasons.bad_time_control:
            self._reasons.missing_time_control = True
        if record.outcome is None:
            self._reasons.bad_result = True

        self.state = BuilderState.BODY
        return chess.pgn.SKIP if self._reasons.excluded else None

    def begin_variation(self) -> chess.pgn.SkipType:
        return chess.pgn.SKIP

    def visit_move(self, board: chess.Board, move: chess.Move) -> None:
        self._record.moves.append(board.san(move))

    def handle_error(self, error: Exception) -> None:
        # Illegal SAN, bad FEN or unknown variant: drop this game only.
        LOGGER.debug("Excluding game after parse error: %s", error)
        self._reasons.bad_movetext = True

    def end_game(self) -> None:
        self.state = BuilderState.CLOSED

        if self._reasons.excluded:
            self.excluded += 1
            self.exclusion_reasons.update(self._reasons.active())
            return

        record, self._record = self._record, PendingGame()
        self.admitted += 1
        self._last_admitted = True
        self._sink(record)

    def result(self) -> bool:
        return self._last_admitted

    # --------------------------------------------------------------------------
    # Helpers
    # --------------------------------------------------------------------------

    def _parse_rating(self, value: str) -> Optional[int]:
        if value == UNKNOWN_RATING:
            return None
        try:
            return int(value)
        except ValueError:
            LOGGER.debug("Bad rating %r", value)
            self._reasons.bad_rating = True
            return None
