"""One-time code data access layer."""

from datetime import datetime

from sqlalchemy import or_
from sqlalchemy.orm import Session

from notekeeper.models import OtpCode, OtpPurpose


class OtpRepository:
    """Queries over ``otp_codes``, always scoped by (email, purpose)."""

    def __init__(self, db: Session) -> None:
        self._db = db

    def find_latest(self, email: str, purpose: OtpPurpose) -> OtpCode | None:
        """Most recently issued code, whatever its state."""
        return (
            self._db.query(OtpCode)
            .filter(OtpCode.email == email, OtpCode.purpose == purpose)
            .order_by(OtpCode.created_at.desc())
            .first()
        )

    def find_active(self, email: str, purpose: OtpPurpose, now: datetime) -> OtpCode | None:
        """Most recent unverified, unexpired code."""
        return (
            self._db.query(OtpCode)
            .filter(
                OtpCode.email == email,
                OtpCode.purpose == purpose,
                OtpCode.verified.is_(False),
                OtpCode.expires_at > now,
            )
            .order_by(OtpCode.created_at.desc())
            .first()
        )

    def add(self, code: OtpCode) -> OtpCode:
        self._db.add(code)
        self._db.flush()
        return code

    def delete(self, code: OtpCode) -> None:
        self._db.delete(code)
        self._db.flush()

    def delete_for_email(self, email: str, purpose: OtpPurpose | None = None) -> int:
        """Delete every code for an address, optionally only one purpose."""
        query = self._db.query(OtpCode).filter(OtpCode.email == email)
        if purpose is not None:
            query = query.filter(OtpCode.purpose == purpose)
        return query.delete(synchronize_session=False)

    def purge_expired(self, now: datetime, include_verified: bool = False) -> int:
        """Delete expired codes, and optionally codes that were already used."""
        condition = OtpCode.expires_at <= now
        if include_verified:
            condition = or_(condition, OtpCode.verified.is_(True))
        return self._db.query(OtpCode).filter(condition).delete(synchronize_session=False)
