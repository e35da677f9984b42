# ==============================================================================
# codecs.py  –  Open a PGN file as a text stream, by extension
#
#   .bz2  → bz2 (concatenated multi-stream archives read transparently)
#   .zst  → zstandard stream reader
#   other → plain UTF-8 text
# ==============================================================================

from __future__ import annotations

import bz2
import io
from contextlib import contextmanager
from pathlib import Path
from typing import IO, Iterator, Union

import zstandard as zstd

from knightvault.utils.logging_utils import setup_logger

LOGGER = setup_logger("codecs")

ENCODING = "utf-8"


@contextmanager
def open_pgn_stream(path: Union[str, Path]) -> Iterator[IO[str]]:
    """
    Yield a text stream over the (possibly compressed) PGN at *path*.

    The stream is read incrementally; nothing is buffered wholesale.
    Opening errors surface as ``OSError``; corrupt archives surface as
    ``OSError`` / ``EOFError`` (bz2) or ``zstandard.ZstdError`` while reading.
    """
    path = Path(path)
    suffix = path.suffix.lower()

    if suffix == ".bz2":
        LOGGER.debug("Opening %s as bzip2", path)
        with bz2.open(path, "rt", encoding=ENCODING) as stream:
            yield stream
    elif suffix == ".zst":
        LOGGER.debug("Opening %s as zstandard", path)
        with open(path, "rb") as compressed:
            reader = zstd.ZstdDecompressor().stream_reader(compressed)
            with io.TextIOWrapper(reader, encoding=ENCODING) as stream:
                yield stream
    else:
        LOGGER.debug("Opening %s as plain text", path)
        with open(path, "r", encoding=ENCODING) as stream:
            yield stream
