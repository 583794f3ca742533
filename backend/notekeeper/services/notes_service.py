"""Owner-scoped note operations.

Every read and write takes the caller's user id; a note belonging to someone
else is reported exactly like a missing one.
"""

import logging
from datetime import UTC, datetime
from uuid import UUID

from sqlalchemy.orm import Session

from notekeeper.errors import NotFound, ValidationFailed
from notekeeper.models import Note
from notekeeper.schemas.common import PageInfo
from notekeeper.schemas.note import (
    MAX_CONTENT_LENGTH,
    MAX_TITLE_LENGTH,
    NoteCreate,
    NoteUpdate,
)
from notekeeper.services.note_content import normalize_tags, sanitize_content, strip_markup
from notekeeper.services.repositories import NoteRepository

logger = logging.getLogger(__name__)

MAX_QUERY_LENGTH = 100


class NotesService:
    """List, search and edit notes for one owner at a time."""

    def __init__(self, db: Session) -> None:
        self._db = db
        self._notes = NoteRepository(db)

    def _get_owned(self, note_id: str, user_id: str) -> Note:
        note = self._notes.find_owned(note_id, user_id)
        if note is None:
            raise NotFound("Note not found")
        return note

    def list_notes(
        self,
        user_id: str,
        page: int = 1,
        limit: int = 10,
        sort_by: str = "createdAt",
        sort_order: str = "desc",
        is_pinned: bool | None = None,
    ) -> tuple[list[Note], PageInfo]:
        """One page of the owner's notes, pinned first."""
        notes, total = self._notes.page(
            user_id,
            offset=(page - 1) * limit,
            limit=limit,
            sort_by=sort_by,
            descending=sort_order == "desc",
            is_pinned=is_pinned,
        )
        return notes, PageInfo.build(page, limit, total)

    def search_notes(
        self,
        user_id: str,
        query: str | None = None,
        tags: list[str] | None = None,
        page: int = 1,
        limit: int = 10,
        sort_by: str = "createdAt",
        sort_order: str = "desc",
        is_pinned: bool | None = None,
    ) -> tuple[list[Note], PageInfo, str | None]:
        """Case-insensitive substring search over title, content and tags.

        ``tags`` narrows the result to notes carrying any of the given tags.
        Returns the page, its pagination info and the trimmed query.
        """
        if query is not None:
            query = query.strip()
            if not query or len(query) > MAX_QUERY_LENGTH:
                raise ValidationFailed(
                    "Validation failed",
                    details=[
                        {
                            "field": "q",
                            "message": "Search query must be between 1 and 100 characters",
                        }
                    ],
                )

        tag_filter = normalize_tags(tags) if tags else None

        notes, total = self._notes.page(
            user_id,
            offset=(page - 1) * limit,
            limit=limit,
            sort_by=sort_by,
            descending=sort_order == "desc",
            is_pinned=is_pinned,
            text=query,
            tags=tag_filter,
        )
        return notes, PageInfo.build(page, limit, total), query

    def get_note(self, note_id: str, user_id: str) -> Note:
        return self._get_owned(note_id, user_id)

    def create_note(self, user_id: str, data: NoteCreate) -> Note:
        """Create a note with sanitized text and normalized tags."""
        title = strip_markup(data.title).strip()
        content = sanitize_content(data.content).strip()
        _check_text(title, content)

        note = Note(
            user_id=user_id,
            title=title,
            content=content,
            is_pinned=data.is_pinned,
        )
        note.set_tags(normalize_tags(data.tags))
        self._notes.add(note)
        self._db.commit()
        self._db.refresh(note)

        logger.info(f"Note {note.id} created for user {user_id}")
        return note

    def update_note(self, note_id: str, user_id: str, data: NoteUpdate) -> Note:
        """Apply only the fields present in ``data``."""
        note = self._get_owned(note_id, user_id)
        changes = data.model_dump(exclude_unset=True, exclude_none=True)

        if "title" in changes:
            note.title = strip_markup(changes["title"]).strip()
        if "content" in changes:
            note.content = sanitize_content(changes["content"]).strip()
        _check_text(note.title, note.content)

        if "tags" in changes:
            note.set_tags(normalize_tags(changes["tags"]))
        if "is_pinned" in changes:
            note.is_pinned = changes["is_pinned"]

        # Tag-only edits do not touch the notes row, so bump explicitly
        note.updated_at = datetime.now(UTC)
        self._db.commit()
        self._db.refresh(note)
        return note

    def delete_note(self, note_id: str, user_id: str) -> None:
        note = self._get_owned(note_id, user_id)
        self._notes.delete(note)
        self._db.commit()
        logger.info(f"Note {note_id} deleted for user {user_id}")

    def toggle_pin(self, note_id: str, user_id: str) -> Note:
        """Flip the pinned flag and return the updated note."""
        note = self._get_owned(note_id, user_id)
        note.is_pinned = not note.is_pinned
        note.updated_at = datetime.now(UTC)
        self._db.commit()
        self._db.refresh(note)
        return note

    def bulk_delete(self, note_ids: list[UUID], user_id: str) -> int:
        """Delete those of ``note_ids`` the caller owns; others are ignored."""
        ids = list(dict.fromkeys(str(note_id) for note_id in note_ids))
        deleted = self._notes.delete_owned(ids, user_id)
        self._db.commit()
        logger.info(f"Bulk deleted {deleted} notes for user {user_id}")
        return deleted


def _check_text(title: str, content: str) -> None:
    # Markup-only input can sanitize down to nothing, and escaped content can grow
    errors = []
    if not title:
        errors.append({"field": "title", "message": "Title is required"})
    elif len(title) > MAX_TITLE_LENGTH:
        errors.append(
            {"field": "title", "message": f"Title must be at most {MAX_TITLE_LENGTH} characters"}
        )
    if not content:
        errors.append({"field": "content", "message": "Content is required"})
    elif len(content) > MAX_CONTENT_LENGTH:
        errors.append(
            {
                "field": "content",
                "message": f"Content must be at most {MAX_CONTENT_LENGTH} characters",
            }
        )
    if errors:
        raise ValidationFailed("Validation failed", details=errors)
