"""Schemas for note endpoints."""

from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import Field, StrictBool, field_validator

from notekeeper.schemas.common import CamelModel, PageInfo

SortField = Literal["createdAt", "updatedAt", "title"]
SortOrder = Literal["asc", "desc"]

MAX_TITLE_LENGTH = 200
MAX_CONTENT_LENGTH = 10000


def _strip(v):
    return v.strip() if isinstance(v, str) else v


class NoteCreate(CamelModel):
    """Schema for creating a note."""

    title: str = Field(min_length=1, max_length=MAX_TITLE_LENGTH)
    content: str = Field(min_length=1, max_length=MAX_CONTENT_LENGTH)
    tags: list[str] = Field(default_factory=list)
    is_pinned: StrictBool = False

    @field_validator("title", "content", mode="before")
    @classmethod
    def strip_text(cls, v):
        return _strip(v)


class NoteUpdate(CamelModel):
    """Schema for a partial note update. Omitted fields are left unchanged."""

    title: str | None = Field(None, min_length=1, max_length=MAX_TITLE_LENGTH)
    content: str | None = Field(None, min_length=1, max_length=MAX_CONTENT_LENGTH)
    tags: list[str] | None = None
    is_pinned: StrictBool | None = None

    @field_validator("title", "content", mode="before")
    @classmethod
    def strip_text(cls, v):
        return _strip(v)


class NoteResponse(CamelModel):
    """Schema for a note in responses."""

    id: str
    user_id: str
    title: str
    content: str
    tags: list[str]
    is_pinned: bool
    created_at: datetime
    updated_at: datetime


class NoteList(CamelModel):
    notes: list[NoteResponse]
    pagination: PageInfo


class NoteSearchResults(NoteList):
    search_query: str | None = None


class BulkDeleteRequest(CamelModel):
    """Schema for deleting several notes at once."""

    note_ids: list[UUID] = Field(min_length=1, max_length=100)


class BulkDeleteResult(CamelModel):
    deleted_count: int
