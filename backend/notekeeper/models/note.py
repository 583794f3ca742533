"""Note and tag models."""

from datetime import UTC, datetime
from typing import TYPE_CHECKING
from uuid import uuid4

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from notekeeper.database import Base

if TYPE_CHECKING:
    from notekeeper.models.user import User


def _utcnow() -> datetime:
    return datetime.now(UTC)


class Note(Base):
    """A user-owned note. Every note has exactly one owner."""

    __tablename__ = "notes"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid4())
    )
    user_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="CASCADE"), index=True
    )
    title: Mapped[str] = mapped_column(String(200))
    content: Mapped[str] = mapped_column(Text)
    is_pinned: Mapped[bool] = mapped_column(Boolean, default=False, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, onupdate=_utcnow
    )

    user: Mapped["User"] = relationship(back_populates="notes")
    tag_links: Mapped[list["NoteTag"]] = relationship(
        back_populates="note",
        cascade="all, delete-orphan",
        order_by="NoteTag.position",
        lazy="selectin",
    )

    __table_args__ = (
        Index("ix_notes_user_pinned_created", "user_id", "is_pinned", "created_at"),
    )

    @property
    def tags(self) -> list[str]:
        """Tag names in the order they were given."""
        return [link.name for link in self.tag_links]

    def set_tags(self, names: list[str]) -> None:
        """Replace the tag list. Callers pass already-normalized names."""
        self.tag_links = [NoteTag(name=name, position=i) for i, name in enumerate(names)]

    def __repr__(self) -> str:
        return f"<Note(id={self.id}, user_id={self.user_id}, title='{self.title[:20]}')>"


class NoteTag(Base):
    """One tag on a note."""

    __tablename__ = "note_tags"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    note_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("notes.id", ondelete="CASCADE"), index=True
    )
    name: Mapped[str] = mapped_column(String(30), index=True)
    position: Mapped[int] = mapped_column(Integer, default=0)

    note: Mapped["Note"] = relationship(back_populates="tag_links")

    def __repr__(self) -> str:
        return f"<NoteTag(note_id={self.note_id}, name='{self.name}')>"
