"""Typed events posted by a media engine into the playback controller.

Every event carries the resource id it was produced for, so the controller
can drop events that belong to a resource it has already moved away from.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel

from summary_player.domain.shared.types import NonEmptyStr, Seconds


class EngineEvent(BaseModel):
    """Base class for all media engine events."""

    model_config = {"frozen": True}

    resource_id: NonEmptyStr


class MetadataLoaded(EngineEvent):
    event_type: Literal["MetadataLoaded"] = "MetadataLoaded"
    duration: Seconds


class PositionTick(EngineEvent):
    event_type: Literal["PositionTick"] = "PositionTick"
    position: float


class MediaEnded(EngineEvent):
    event_type: Literal["MediaEnded"] = "MediaEnded"

