#!/usr/bin/env python3
# ==============================================================================
#  KnightVault - main.py
#  Purpose: command-line runner for the public database operations
#           (import → info / rename → games / players / stats)
# ==============================================================================

from __future__ import annotations

import argparse
import json
import sys
from dataclasses import asdict
from typing import Any, Callable, Optional, Sequence

from knightvault import api
from knightvault.db.models import GameQuery, Outcome, PlayerQuery, Sides, Speed
from knightvault.utils.logging_utils import setup_logger

logger = setup_logger("main")

# ------------------------------------------------------------------------------
# Stage Wrapper
# ------------------------------------------------------------------------------


def _stage(title: str, fn: Callable[[], Any]) -> Any:
    """
    Run one operation with start → finish logging and full stacktrace on error.
    """
    logger.info("%s – started", title)
    try:
        result = fn()
        logger.info("%s – finished", title)
        return result
    except Exception:  # pragma: no cover
        logger.exception("%s – failed", title)
        raise


# ------------------------------------------------------------------------------
# Argument parsing
# ------------------------------------------------------------------------------


def _range(value: str):
    """Parse ``LOW-HIGH`` (either side may be empty) into a rating range."""
    low, sep, high = value.partition("-")
    if not sep:
        raise argparse.ArgumentTypeError(f"expected LOW-HIGH, got {value!r}")
    try:
        return (int(low) if low else None, int(high) if high else None)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"bad rating range {value!r}") from exc


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="knightvault")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("import", help="import a .pgn / .pgn.bz2 / .pgn.zst file")
    p.add_argument("pgn")
    p.add_argument("db")
    p.add_argument("--batch-size", type=int, default=None)

    p = sub.add_parser("info", help="show title and sizes")
    p.add_argument("db")

    p = sub.add_parser("rename", help="set the database title")
    p.add_argument("db")
    p.add_argument("title")

    p = sub.add_parser("games", help="list games")
    p.add_argument("db")
    p.add_argument("--player1")
    p.add_argument("--player2")
    p.add_argument("--range1", type=_range)
    p.add_argument("--range2", type=_range)
    p.add_argument("--sides", choices=[s.value for s in Sides], default=Sides.ANY.value)
    p.add_argument("--speed", choices=[s.name.lower() for s in Speed])
    p.add_argument("--outcome", choices=[o.name.lower() for o in Outcome])
    p.add_argument("--limit", type=int)
    p.add_argument("--offset", type=int)
    p.add_argument("--skip-count", action="store_true")

    p = sub.add_parser("players", help="list players")
    p.add_argument("db")
    p.add_argument("--name")
    p.add_argument("--limit", type=int)
    p.add_argument("--offset", type=int)
    p.add_argument("--skip-count", action="store_true")

    p = sub.add_parser("stats", help="win / loss / draw tally for a player id")
    p.add_argument("db")
    p.add_argument("player_id", type=int)

    return parser


def _dispatch(args: argparse.Namespace) -> Any:
    if args.command == "import":
        summary = _stage(
            "PGN Import", lambda: api.import_pgn(args.pgn, args.db, args.batch_size)
        )
        return summary.as_dict()
    if args.command == "info":
        return asdict(_stage("Database Info", lambda: api.get_db_info(args.db)))
    if args.command == "rename":
        _stage("Rename Database", lambda: api.rename_db(args.db, args.title))
        return {"title": args.title}
    if args.command == "games":
        query = GameQuery(
            skip_count=args.skip_count,
            player1=args.player1,
            player2=args.player2,
            range1=args.range1,
            range2=args.range2,
            sides=Sides(args.sides),
            speed=Speed[args.speed.upper()] if args.speed else None,
            outcome=Outcome[args.outcome.upper()] if args.outcome else None,
            limit=args.limit,
            offset=args.offset,
        )
        return asdict(_stage("List Games", lambda: api.list_games(args.db, query)))
    if args.command == "players":
        query = PlayerQuery(
            skip_count=args.skip_count,
            name=args.name,
            limit=args.limit,
            offset=args.offset,
        )
        return asdict(_stage("List Players", lambda: api.list_players(args.db, query)))
    return asdict(_stage("Player Stats", lambda: api.player_stats(args.db, args.player_id)))


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = _build_parser().parse_args(argv)
    json.dump(_dispatch(args), sys.stdout, indent=2)
    sys.stdout.write("\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
