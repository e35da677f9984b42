# ==============================================================================
# models.py  –  Enums and value objects shared by import and query code
#
# Persisted integers for Speed / Outcome are fixed; never renumber them.
# ==============================================================================

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Any, Dict, Generic, List, Optional, Tuple, TypeVar

T = TypeVar("T")

RatingRange = Tuple[Optional[int], Optional[int]]

# Player id stored for a side with no name; never a real players row.
NO_PLAYER_ID = 0


class Speed(IntEnum):
    ULTRA_BULLET = 0
    BULLET = 1
    BLITZ = 2
    RAPID = 3
    CLASSICAL = 4
    CORRESPONDENCE = 5


class Outcome(IntEnum):
    WHITE_WIN = 1
    BLACK_WIN = 2
    DRAW = 3

    @classmethod
    def from_result(cls, result: str) -> Optional["Outcome"]:
        """Map a PGN Result tag ("1-0", "0-1", "1/2-1/2") to an Outcome, else None."""
        return _RESULTS.get(result.strip())


_RESULTS: Dict[str, Outcome] = {
    "1-0": Outcome.WHITE_WIN,
    "0-1": Outcome.BLACK_WIN,
    "1/2-1/2": Outcome.DRAW,
}


class Sides(Enum):
    WHITE_BLACK = "WhiteBlack"
    BLACK_WHITE = "BlackWhite"
    ANY = "Any"


@dataclass
class GameQuery:
    """Filters and pagination for ``list_games``."""

    skip_count: bool = False
    player1: Optional[str] = None
    player2: Optional[str] = None
    range1: Optional[RatingRange] = None
    range2: Optional[RatingRange] = None
    sides: Sides = Sides.ANY
    speed: Optional[Speed] = None
    outcome: Optional[Outcome] = None
    limit: Optional[int] = None
    offset: Optional[int] = None


@dataclass
class PlayerQuery:
    """Filters and pagination for ``list_players``."""

    skip_count: bool = False
    name: Optional[str] = None
    limit: Optional[int] = None
    offset: Optional[int] = None


@dataclass
class QueryResponse(Generic[T]):
    data: List[T]
    count: Optional[int] = None


@dataclass
class PlayerStats:
    won: int = 0
    lost: int = 0
    draw: int = 0


@dataclass
class DatabaseInfo:
    title: str
    description: str
    player_count: int
    game_count: int
    storage_size: int


@dataclass
class ImportSummary:
    """
    What an import did.

    ``exclusion_reasons`` counts games per reason; one game can carry
    several reasons, so its values may add up to more than ``excluded``.
    """

    admitted: int = 0
    excluded: int = 0
    exclusion_reasons: Dict[str, int] = field(default_factory=dict)
    flushes: int = 0

    def as_dict(self) -> Dict[str, Any]:
        return {
            "admitted": self.admitted,
            "excluded": self.excluded,
            "exclusion_reasons": dict(self.exclusion_reasons),
            "flushes": self.flushes,
        }
