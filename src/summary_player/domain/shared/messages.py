"""Centralized message constants for error messages, validation, and user feedback."""

from __future__ import annotations


class ErrorMessages:
    """Error messages for exceptions and validation failures."""

    # Media Validation Errors
    EMPTY_RESOURCE_ID = "Resource ID cannot be empty"
    EMPTY_SOURCE_URI = "Source URI cannot be empty"
    RESOLVED_WITHOUT_SECONDS = "A resolved duration entry needs a positive duration"
    UNRESOLVED_WITH_SECONDS = "Only resolved duration entries may carry a duration"
    TERMINAL_ENTRY_DOWNGRADE = "Duration entry for '{resource_id}' is already {status}"

    # Library Validation Errors
    INVALID_COLLECTION_PATH = "Collection path must have an odd number of segments: {path}"

    # Time/Date Validation Errors
    TIMEZONE_REQUIRED_UTC_DATETIME = "UtcDateTime requires a timezone-aware datetime"

    # Settings Validation Errors
    INVALID_DATABASE_URL = "Database URL must start with sqlite://"
    INVALID_LOG_LEVEL = "Invalid log level: {level}. Must be one of {valid_levels}"

    # Catalog Errors
    CATALOG_BAD_RESPONSE = "Catalog returned an unexpected payload for {what}"
    CATALOG_UNREACHABLE = "Catalog request for {what} failed: {error}"

    # Container
    DURATION_CACHE_NOT_CONFIGURED = "Duration cache not created yet; pass a resolver first"


class UserMessages:
    """Short notices surfaced to the user-visible layer."""

    SAVE_FAILED = "Could not add this title to your library. Please try again."
    UNSAVE_FAILED = "Could not remove this title from your library. Please try again."
    LOGIN_REQUIRED = "Log in to save titles to your library."
    DURATION_UNKNOWN = "N/A"


class LogTemplates:
    """Log message templates for structured logging.

    Use these with logger.info(), logger.error(), etc. and pass values as parameters
    for proper log formatting and structured logging support.
    """

    # Database Lifecycle
    DATABASE_INITIALIZED = "Database initialized at %s"
    DATABASE_CLOSED = "Database manager closed"

    # Duration Cache
    CACHE_HIT = "Duration cache hit for '%s' (%s)"
    CACHE_JOIN_INFLIGHT = "Joining in-flight duration resolution for '%s'"
    DURATION_RESOLVING = "Resolving duration for '%s'"
    DURATION_RESOLVED = "Resolved duration for '%s': %.3fs"
    DURATION_FAILED = "Duration resolution failed for '%s'"
    DURATION_RESOLVER_CRASHED = "Duration resolver raised for '%s'"
    DURATION_UNUSABLE = "Duration resolver returned an unusable value for '%s': %r"
    BATCH_STARTED = "Loading durations for %d resources (%d new)"
    BATCH_FINISHED = "Duration batch settled: %d resolved, %d unknown"
    SUBSCRIBER_FAILED = "Duration subscriber raised"
    BATCH_ITEM_FAILED = "Duration for '%s' could not be settled"

    # Probe
    PROBE_FAILED = "ffprobe failed for '%s' (exit %s): %s"
    PROBE_TIMEOUT = "ffprobe timed out after %.1fs for '%s'"
    PROBE_NOT_FOUND = "ffprobe binary not found at '%s'"
    PROBE_UNPARSABLE = "ffprobe output for '%s' is not a positive duration: %r"

    # Playback
    PLAYBACK_LOADING = "Loading resource '%s' (generation %d)"
    PLAYBACK_READY = "Resource '%s' ready, duration %.3fs"
    PLAYBACK_STARTED = "Playing '%s' from %.3fs"
    PLAYBACK_PAUSED = "Paused '%s' at %.3fs"
    PLAYBACK_SEEK = "Seek on '%s' to %.3fs (requested %.3fs)"
    PLAYBACK_ENDED = "Resource '%s' reached end of media"
    PLAYBACK_REPLAY = "Replaying '%s' from the start"
    PLAYBACK_STALE_EVENT = "Ignoring %s for stale resource '%s' (current '%s')"
    PLAYBACK_IGNORED_EVENT = "Ignoring %s for '%s' in phase %s"
    PLAYBACK_COMMAND_IGNORED = "Ignoring %s for '%s' in phase %s"
    PLAYBACK_STALLED = "Resource '%s' still loading after %.1fs"
    PLAYBACK_CLOSED = "Playback controller closed"
    PLAYBACK_DENIED = "Refusing to load '%s': %s"
    COMPLETION_LISTENER_FAILED = "Completion listener raised for '%s'"

    # Engine
    ENGINE_OPENED = "Engine opened '%s'"
    ENGINE_PROCESS_EXITED = "Player process for '%s' exited with %s"
    ENGINE_METADATA_FAILED = "Engine could not read metadata for '%s'"
    ENGINE_HANDLER_FAILED = "Engine event handler raised for %s"

    # Completion
    COMPLETION_SKIPPED_ANONYMOUS = "Skipping completion record for '%s': no user"
    COMPLETION_RECORDED = "Recorded completion of '%s' for user %s"
    COMPLETION_FAILED = "Failed to record completion of '%s' for user %s"
    COMPLETION_BOOK_UNKNOWN = "No book known for completed resource '%s'"

    # Library
    TOGGLE_AUTH_REQUIRED = "Library toggle for '%s' requires authentication"
    TOGGLE_OPTIMISTIC = "Optimistic %s of '%s' for user %s (intent %d)"
    TOGGLE_SUPERSEDED = "Skipping superseded write for '%s' (intent %d < %d)"
    TOGGLE_WRITTEN = "Persisted %s of '%s' for user %s (intent %d)"
    TOGGLE_FAILED = "Failed to persist %s of '%s' for user %s (intent %d)"
    TOGGLE_ROLLED_BACK = "Rolled back '%s' to saved=%s"
    TOGGLE_STALE_FAILURE = "Not rolling back '%s': intent %d superseded by %d"
    TOGGLE_CALLBACK_FAILED = "Library toggle callback raised"
    LIBRARY_READ_FAILED = "Failed to read %s for user %s"
    LIBRARY_SKIPPED_RECORD = "Skipping malformed library record '%s': %s"

    # Catalog
    CATALOG_REQUEST = "Catalog GET %s %s"

    # Gateway
    GATEWAY_WRITE = "Wrote document %s/%s (merge=%s)"
    GATEWAY_DELETE = "Deleted document %s/%s"
    GATEWAY_FAILED = "Document %s failed for %s/%s"

    # Bootstrap
    APP_STARTING = "Starting summary player (%s)"
    APP_FATAL_ERROR = "Fatal error: %s"
    CONTAINER_SHUTDOWN = "Container shut down"
