"""Pure playback arithmetic shared by the controller and the display layer."""

from __future__ import annotations

import math

from summary_player.domain.shared.messages import UserMessages


def clamp_position(target: float, duration: float | None) -> float:
    """Clamp a position to ``[0, duration]``; only the lower bound applies while unknown."""
    if math.isnan(target):
        return 0.0
    position = max(0.0, float(target))
    if duration is not None:
        position = min(position, float(duration))
    return position


def progress_fraction(position: float, duration: float | None) -> float:
    """Return ``position / duration`` in [0, 1], or 0 when the duration is unknown or zero."""
    if not duration or duration <= 0:
        return 0.0
    return min(1.0, max(0.0, position / duration))


def fraction_to_seconds(fraction: float, duration: float | None) -> float:
    """Map a click on a progress track (fraction of its width) to seconds."""
    if not duration or math.isnan(fraction):
        return 0.0
    return min(1.0, max(0.0, fraction)) * duration


def format_duration(seconds: float | None) -> str:
    """Format seconds as M:SS or H:MM:SS, truncating fractional seconds.

    Unknown or non-finite durations render as ``N/A``.
    """
    if seconds is None or not math.isfinite(seconds) or seconds < 0:
        return UserMessages.DURATION_UNKNOWN

    total = int(seconds)
    hours, remainder = divmod(total, 3600)
    minutes, secs = divmod(remainder, 60)

    if hours > 0:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes}:{secs:02d}"
