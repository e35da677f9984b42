# ==============================================================================
# logging_utils.py  –  Logging for library code and the CLI
#
# Features:
#   ✔ Console output on stderr (stdout carries the CLI's JSON result)
#   ✔ Timestamped file per logger under KNIGHTVAULT_LOGS_DIR or <repo>/logs
#   ✔ Level from KNIGHTVAULT_LOG_LEVEL (INFO by default)
#   ✔ Idempotent: clears handlers before re-adding
# ==============================================================================

from __future__ import annotations

import logging
import os
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional, Union

# ------------------------------------------------------------------------------
# Constants
# ------------------------------------------------------------------------------

_FMT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
_LOGS_DIR_ENV = "KNIGHTVAULT_LOGS_DIR"
_LEVEL_ENV = "KNIGHTVAULT_LOG_LEVEL"


# ------------------------------------------------------------------------------
# Internal helpers
# ------------------------------------------------------------------------------


def _default_level() -> int:
    """Resolve KNIGHTVAULT_LOG_LEVEL ("DEBUG", "warning", …); unknown → INFO."""
    name = os.getenv(_LEVEL_ENV, "INFO").strip().upper()
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else logging.INFO


def _logs_dir() -> Path:
    override = os.getenv(_LOGS_DIR_ENV)
    if override:
        return Path(override)
    return Path(__file__).resolve().parents[2] / "logs"


def _file_handler(
    logs_dir: Path, logger_name: str, fmt: logging.Formatter
) -> Optional[logging.Handler]:
    """Timestamped FileHandler, or None when *logs_dir* cannot be created."""
    try:
        logs_dir.mkdir(parents=True, exist_ok=True)
    except OSError:
        logging.getLogger().warning("Cannot write logs to %s", logs_dir)
        return None

    stamp = datetime.now().strftime("%Y-%m-%d_%H-%M-%S")
    handler = logging.FileHandler(
        logs_dir / f"{logger_name}_{stamp}.log", encoding="utf-8", delay=True
    )
    handler.setFormatter(fmt)
    return handler


# ------------------------------------------------------------------------------
# Public factory
# ------------------------------------------------------------------------------


def setup_logger(
    name: str,
    level: Optional[int] = None,
    logs_dir: Union[str, Path, None] = None,
) -> logging.Logger:
    """
    Return a configured `logging.Logger`.

    Parameters
    ----------
    name : str
        Logger name (also the log file prefix).
    level : int | None
        Logging level; defaults to $KNIGHTVAULT_LOG_LEVEL or INFO.
    logs_dir : str | Path | None
        Override log directory (default: $KNIGHTVAULT_LOGS_DIR or <repo>/logs).
    """
    logger = logging.getLogger(name)
    logger.setLevel(level if level is not None else _default_level())
    logger.handlers.clear()

    formatter = logging.Formatter(_FMT)

    console = logging.StreamHandler(sys.stderr)
    console.setFormatter(formatter)
    logger.addHandler(console)

    file_handler = _file_handler(Path(logs_dir) if logs_dir else _logs_dir(), name, formatter)
    if file_handler:
        logger.addHandler(file_handler)

    return logger
