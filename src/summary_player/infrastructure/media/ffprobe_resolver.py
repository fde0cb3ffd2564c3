"""Duration resolution via the ffprobe command-line tool."""

from __future__ import annotations

import asyncio
import logging
import math
from typing import TYPE_CHECKING

from summary_player.application.interfaces.duration_resolver import DurationResolver
from summary_player.domain.shared.constants import MediaConstants
from summary_player.domain.shared.messages import LogTemplates

if TYPE_CHECKING:
    from ...config.settings import MediaSettings
    from ...domain.media.value_objects import MediaResource

logger = logging.getLogger(__name__)

STDERR_LOG_LIMIT = 200


def parse_duration(output: str) -> float | None:
    """Parse ffprobe's bare ``format=duration`` output into positive seconds."""
    text = output.strip()
    if not text:
        return None
    try:
        seconds = float(text.splitlines()[0])
    except ValueError:
        return None
    if not math.isfinite(seconds) or seconds <= 0:
        return None
    return seconds


class FfprobeDurationResolver(DurationResolver):
    """Reads ``format.duration`` for a local path or URL with one ffprobe run."""

    def __init__(self, settings: MediaSettings | None = None) -> None:
        self._ffprobe = settings.ffprobe_path if settings else "ffprobe"
        self._timeout = settings.probe_timeout_s if settings else 15.0

    async def resolve(self, resource: MediaResource) -> float | None:
        uri = resource.source_uri
        try:
            proc = await asyncio.create_subprocess_exec(
                self._ffprobe,
                *MediaConstants.FFPROBE_DURATION_ARGS,
                "-i",
                uri,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except FileNotFoundError:
            logger.error(LogTemplates.PROBE_NOT_FOUND, self._ffprobe)
            return None
        except OSError as e:
            logger.warning(LogTemplates.PROBE_FAILED, uri, None, e)
            return None

        try:
            stdout, stderr = await asyncio.wait_for(proc.communicate(), timeout=self._timeout)
        except asyncio.TimeoutError:
            logger.warning(LogTemplates.PROBE_TIMEOUT, self._timeout, uri)
            await self._kill(proc)
            return None

        if proc.returncode != 0:
            message = stderr.decode("utf-8", errors="replace").strip()[:STDERR_LOG_LIMIT]
            logger.warning(LogTemplates.PROBE_FAILED, uri, proc.returncode, message)
            return None

        output = stdout.decode("utf-8", errors="replace")
        seconds = parse_duration(output)
        if seconds is None:
            logger.warning(LogTemplates.PROBE_UNPARSABLE, uri, output.strip())
        return seconds

    @staticmethod
    async def _kill(proc: asyncio.subprocess.Process) -> None:
        if proc.returncode is not None:
            return
        try:
            proc.kill()
        except ProcessLookupError:
            return
        await proc.wait()
