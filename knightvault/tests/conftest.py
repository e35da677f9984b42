# ==============================================================================
# conftest.py  –  Shared fixtures: PGN text builders and temp databases
# ==============================================================================

import os
import sys
import tempfile
from pathlib import Path

import pytest

# ------------------------------------------------------------------------------
# Path setup (ensure project root on sys.path) + keep test logs out of the repo
# ------------------------------------------------------------------------------
PROJECT_ROOT = Path(__file__).resolve().parents[2]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

os.environ.setdefault(
    "KNIGHTVAULT_LOGS_DIR", str(Path(tempfile.gettempdir()) / "knightvault-test-logs")
)


def pgn_game(
    white="Alice",
    black="Bob",
    white_elo="1500",
    black_elo="1600",
    result="1-0",
    time_control="180+0",
    moves="1. e4 e5 2. Nf3 Nc6",
    **extra,
):
    """Render one PGN game; a header passed as None is left out."""
    headers = {
        "Event": "Rated Blitz game",
        "Site": "https://lichess.org/abcd1234",
        "Date": "2013.01.01",
        "White": white,
        "Black": black,
        "Result": result,
        "WhiteElo": white_elo,
        "BlackElo": black_elo,
        "TimeControl": time_control,
    }
    headers.update(extra)
    tags = "\n".join(f'[{k} "{v}"]' for k, v in headers.items() if v is not None)
    return f"{tags}\n\n{moves} {result}\n\n"


# ------------------------------------------------------------------------------
# Fixtures
# ------------------------------------------------------------------------------
@pytest.fixture
def make_game():
    return pgn_game


@pytest.fixture
def write_pgn(tmp_path):
    """Write games to ``<tmp>/<name>`` and return the path."""

    def _write(*games, name="games.pgn"):
        path = tmp_path / name
        path.write_text("".join(games), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def db_path(tmp_path):
    return tmp_path / "games.sqlite"
