# ==============================================================================
# errors.py  –  Failure types surfaced by the public operations
#
#   KnightVaultError
#     ├─ PgnReadError           input could not be opened / decompressed / decoded
#     ├─ StoreError             the SQLite store rejected a read or write
#     └─ DatabaseNotFoundError  read against a database file that does not exist
# ==============================================================================

from __future__ import annotations


class KnightVaultError(RuntimeError):
    """Base class for every fatal error raised by knightvault."""


class PgnReadError(KnightVaultError):
    """The PGN source could not be read."""


class StoreError(KnightVaultError):
    """The database refused an operation."""


class DatabaseNotFoundError(KnightVaultError):
    """No database exists at the requested path."""
