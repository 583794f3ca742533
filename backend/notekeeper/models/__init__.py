"""SQLAlchemy ORM models."""

from notekeeper.models.note import Note, NoteTag
from notekeeper.models.otp_code import OtpCode, OtpPurpose
from notekeeper.models.user import User

__all__ = [
    "Note",
    "NoteTag",
    "OtpCode",
    "OtpPurpose",
    "User",
]
