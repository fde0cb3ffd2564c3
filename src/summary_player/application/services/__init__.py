"""Application services orchestrating media and library operations."""

from summary_player.application.services.batch_duration_loader import BatchDurationLoader
from summary_player.application.services.completion_recorder import CompletionRecorder
from summary_player.application.services.duration_cache import (
    DurationCache,
    get_duration_cache,
    reset_duration_cache,
)
from summary_player.application.services.library_service import LibraryService, LibraryView
from summary_player.application.services.library_toggle import (
    LibraryToggle,
    ToggleResult,
    ToggleStatus,
)
from summary_player.application.services.playback_controller import PlaybackController

__all__ = [
    "BatchDurationLoader",
    "CompletionRecorder",
    "DurationCache",
    "get_duration_cache",
    "reset_duration_cache",
    "LibraryService",
    "LibraryView",
    "LibraryToggle",
    "ToggleResult",
    "ToggleStatus",
    "PlaybackController",
]
