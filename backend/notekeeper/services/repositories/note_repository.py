"""Note data access layer."""

import logging

from sqlalchemy import or_
from sqlalchemy.orm import Query, Session

from notekeeper.models import Note, NoteTag

logger = logging.getLogger(__name__)

# API sort keys -> columns
SORT_COLUMNS = {
    "createdAt": Note.created_at,
    "updatedAt": Note.updated_at,
    "title": Note.title,
}


def _like_pattern(text: str) -> str:
    """Literal substring pattern for LIKE, with wildcards escaped."""
    escaped = text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


class NoteRepository:
    """Note queries. Every read and write is scoped to an owning user id."""

    def __init__(self, db: Session) -> None:
        self._db = db

    def find_owned(self, note_id: str, user_id: str) -> Note | None:
        """Find a note only if it belongs to ``user_id``."""
        return (
            self._db.query(Note)
            .filter(Note.id == note_id, Note.user_id == user_id)
            .first()
        )

    def _filtered(
        self,
        user_id: str,
        is_pinned: bool | None,
        text: str | None,
        tags: list[str] | None,
    ) -> Query:
        query = self._db.query(Note).filter(Note.user_id == user_id)

        if is_pinned is not None:
            query = query.filter(Note.is_pinned == is_pinned)

        if text:
            pattern = _like_pattern(text)
            query = query.filter(
                or_(
                    Note.title.ilike(pattern, escape="\\"),
                    Note.content.ilike(pattern, escape="\\"),
                    Note.tag_links.any(NoteTag.name.ilike(pattern, escape="\\")),
                )
            )

        if tags:
            query = query.filter(Note.tag_links.any(NoteTag.name.in_(tags)))

        return query

    def page(
        self,
        user_id: str,
        *,
        offset: int,
        limit: int,
        sort_by: str = "createdAt",
        descending: bool = True,
        is_pinned: bool | None = None,
        text: str | None = None,
        tags: list[str] | None = None,
    ) -> tuple[list[Note], int]:
        """Return one page of matching notes and the total match count.

        Pinned notes always come first; ``sort_by`` orders within each group.
        """
        query = self._filtered(user_id, is_pinned, text, tags)
        total = query.count()

        column = SORT_COLUMNS[sort_by]
        order = column.desc() if descending else column.asc()
        notes = (
            query.order_by(Note.is_pinned.desc(), order, Note.id)
            .offset(offset)
            .limit(limit)
            .all()
        )
        return notes, total

    def add(self, note: Note) -> Note:
        self._db.add(note)
        self._db.flush()
        return note

    def delete(self, note: Note) -> None:
        self._db.delete(note)
        self._db.flush()

    def delete_owned(self, note_ids: list[str], user_id: str) -> int:
        """Delete the listed notes that belong to ``user_id``; return how many went."""
        owned_ids = [
            row[0]
            for row in self._db.query(Note.id)
            .filter(Note.id.in_(note_ids), Note.user_id == user_id)
            .all()
        ]
        if not owned_ids:
            return 0

        # Bulk deletes skip ORM cascades, so tags go first
        self._db.query(NoteTag).filter(NoteTag.note_id.in_(owned_ids)).delete(
            synchronize_session=False
        )
        deleted = (
            self._db.query(Note)
            .filter(Note.id.in_(owned_ids))
            .delete(synchronize_session=False)
        )
        logger.debug(f"Bulk deleted {deleted} notes for user {user_id}")
        return deleted
