"""Centralized constants for database schema, media tooling, and other shared values."""

from __future__ import annotations


class SQLPragmas:
    """SQLite PRAGMA statements for database configuration.

    These pragmas are applied to each connection to ensure consistent behavior.
    """

    JOURNAL_MODE_WAL = "PRAGMA journal_mode=WAL"
    FOREIGN_KEYS_ON = "PRAGMA foreign_keys=ON"
    BUSY_TIMEOUT = "PRAGMA busy_timeout={timeout}"


class DatabaseURLSchemes:
    """Valid database URL schemes for validation."""

    SQLITE = "sqlite://"
    SQLITE_PATH_PREFIX = "sqlite:///"

    # For in-memory testing
    MEMORY = ":memory:"
    MEMORY_SHARED_URI = "file:summary-player?mode=memory&cache=shared"


class MediaConstants:
    """ffprobe/ffplay invocation constants."""

    FFPROBE_DURATION_ARGS = (
        "-v",
        "error",
        "-show_entries",
        "format=duration",
        "-of",
        "default=noprint_wrappers=1:nokey=1",
    )
    FFPLAY_ARGS = ("-nodisp", "-autoexit", "-loglevel", "error")

    # Seconds to wait for a terminated player before killing it
    PROCESS_STOP_GRACE_S = 2.0


class CatalogEndpoints:
    """Paths of the remote book catalog."""

    GET_BOOK = "/getBook"
    GET_BOOKS = "/getBooks"
