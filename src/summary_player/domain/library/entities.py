"""Catalog book and the per-user records kept about it."""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from summary_player.domain.media.value_objects import MediaResource
from summary_player.domain.shared.datetime_utils import UtcDateTime, utcnow
from summary_player.domain.shared.types import (
    NonEmptyStr,
    NonNegativeInt,
    RatingFloat,
    UtcDatetimeField,
)


class BookStatus(Enum):
    """Catalog listings a book can be fetched from."""

    SELECTED = "selected"
    RECOMMENDED = "recommended"
    SUGGESTED = "suggested"


class Book(BaseModel):
    """A summarized book as served by the catalog service.

    Field names are snake_case in Python and camelCase on the wire; fields
    the catalog adds later are ignored.
    """

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        alias_generator=to_camel,
        populate_by_name=True,
    )

    id: NonEmptyStr
    title: str = ""
    author: str = ""
    sub_title: str = ""
    image_link: str | None = None
    audio_link: str | None = None
    summary: str = ""
    book_description: str = ""
    author_description: str = ""
    average_rating: RatingFloat | None = None
    total_rating: NonNegativeInt = 0
    key_ideas: NonNegativeInt = 0
    subscription_required: bool = False
    status: BookStatus | None = None
    tags: list[str] = Field(default_factory=list)

    @field_validator("audio_link", "image_link", mode="before")
    @classmethod
    def _blank_to_none(cls, v: Any) -> str | None:
        if not isinstance(v, str) or not v.strip():
            return None
        return v.strip()

    @field_validator("status", mode="before")
    @classmethod
    def _unknown_status_to_none(cls, v: Any) -> Any:
        if isinstance(v, str) and v not in {s.value for s in BookStatus}:
            return None
        return v

    @property
    def has_audio(self) -> bool:
        return self.audio_link is not None

    @property
    def media_resource(self) -> MediaResource | None:
        if self.audio_link is None:
            return None
        return MediaResource(id=self.id, source_uri=self.audio_link)

    def to_document(self) -> dict[str, Any]:
        """Serialize with wire (camelCase) names for persistence."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class LibraryMembership(BaseModel):
    """Whether a user keeps a book in their saved library."""

    model_config = ConfigDict(strict=True)

    user_id: NonEmptyStr
    book_id: NonEmptyStr
    saved: bool = False
    saved_at: UtcDatetimeField | None = None

    @property
    def key(self) -> tuple[str, str]:
        return (self.user_id, self.book_id)

    def to_fields(self, book: Book) -> dict[str, Any]:
        fields = book.to_document()
        fields["savedAt"] = UtcDateTime(self.saved_at or utcnow()).iso_z
        return fields


class CompletionRecord(BaseModel):
    """The fact that a user listened to a book until the end."""

    model_config = ConfigDict(frozen=True, strict=True)

    user_id: NonEmptyStr
    book_id: NonEmptyStr
    finished_at: UtcDatetimeField = Field(default_factory=utcnow)

    def to_fields(self, book: Book | None = None) -> dict[str, Any]:
        fields: dict[str, Any] = book.to_document() if book is not None else {"id": self.book_id}
        fields["finishedAt"] = UtcDateTime(self.finished_at).iso_z
        return fields
