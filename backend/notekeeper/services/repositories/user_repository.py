"""User data access layer."""

import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from notekeeper.models import User

from .exceptions import DuplicateError

logger = logging.getLogger(__name__)


class UserRepository:
    """Centralized user data access.

    Emails are stored lowercased, so lookups lowercase their argument and
    compare for equality.

    Naming conventions:
    - find_* : Query that may return None
    """

    def __init__(self, db: Session) -> None:
        self._db = db

    def find_by_id(self, user_id: str) -> User | None:
        """Find user by primary key."""
        return self._db.query(User).filter(User.id == user_id).first()

    def find_by_email(self, email: str) -> User | None:
        """Find user by email, verified or not."""
        return self._db.query(User).filter(User.email == email.lower()).first()

    def find_verified_by_email(self, email: str) -> User | None:
        """Find user by email only if the address has been verified."""
        return (
            self._db.query(User)
            .filter(User.email == email.lower(), User.is_email_verified.is_(True))
            .first()
        )

    def add(self, user: User) -> User:
        """Stage a new user and flush so the unique email constraint is checked now."""
        self._db.add(user)
        try:
            self._db.flush()
        except IntegrityError as e:
            self._db.rollback()
            raise DuplicateError("User", "email", user.email) from e
        return user

    def delete(self, user: User) -> None:
        self._db.delete(user)
        self._db.flush()
