"""Repository layer - data access abstraction.

Repositories handle all database queries, providing a clean interface
for services. Services should use repositories for data access rather
than directly querying SQLAlchemy models.

Dependency direction: Services -> Repositories -> Models
"""

from .exceptions import DuplicateError, RepositoryError
from .note_repository import NoteRepository
from .otp_repository import OtpRepository
from .user_repository import UserRepository

__all__ = [
    "DuplicateError",
    "NoteRepository",
    "OtpRepository",
    "RepositoryError",
    "UserRepository",
]
