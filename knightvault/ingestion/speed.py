# ==============================================================================
# speed.py  –  TimeControl → Speed bucket
#
# total = base seconds + 40 × increment, bucketed by upper-exclusive limits.
# A TimeControl of "-" (no clock) is always correspondence.
# ==============================================================================

from __future__ import annotations

from typing import Final, Sequence, Tuple

from knightvault.db.models import Speed

NO_TIME_LIMIT: Final[str] = "-"

_LIMITS: Final[Sequence[Tuple[int, Speed]]] = (
    (30, Speed.ULTRA_BULLET),
    (180, Speed.BULLET),
    (480, Speed.BLITZ),
    (1_500, Speed.RAPID),
    (21_600, Speed.CLASSICAL),
)


def classify(seconds: int, increment: int) -> Speed:
    """Bucket a clock of *seconds* base time plus *increment* per move."""
    total = seconds + 40 * increment
    for limit, speed in _LIMITS:
        if total < limit:
            return speed
    return Speed.CORRESPONDENCE


def from_time_control(value: str) -> Speed:
    """
    Parse a PGN TimeControl tag such as ``"180+2"`` or ``"-"``.

    Raises
    ------
    ValueError
        If the value is not ``-`` or ``<seconds>+<increment>`` with
        non-negative integers.
    """
    value = value.strip()
    if value == NO_TIME_LIMIT:
        return Speed.CORRESPONDENCE

    seconds, sep, increment = value.partition("+")
    if not sep or not seconds.isdigit() or not increment.isdigit():
        raise ValueError(f"Unparseable time control {value!r}")
    return classify(int(seconds), int(increment))
