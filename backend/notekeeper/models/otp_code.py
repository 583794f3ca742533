"""One-time code model for email verification and passwordless login."""

import enum
from datetime import UTC, datetime
from uuid import uuid4

from sqlalchemy import Boolean, DateTime, Enum, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from notekeeper.database import Base


class OtpPurpose(str, enum.Enum):
    """What a code was issued for. Codes only verify against their own purpose."""

    EMAIL_VERIFICATION = "email_verification"
    LOGIN = "login"


class OtpCode(Base):
    """A 6-digit code mailed to an address.

    Not tied to a user row by foreign key: a code for signup exists while the
    user is still unverified and may outlive a re-registration.
    """

    __tablename__ = "otp_codes"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid4())
    )
    email: Mapped[str] = mapped_column(String(255))
    code_hash: Mapped[str] = mapped_column(String(64))  # SHA-256 hex
    purpose: Mapped[OtpPurpose] = mapped_column(
        Enum(OtpPurpose, name="otp_purpose", values_callable=lambda e: [m.value for m in e])
    )
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), index=True)
    attempts: Mapped[int] = mapped_column(Integer, default=0)
    verified: Mapped[bool] = mapped_column(Boolean, default=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(UTC)
    )

    __table_args__ = (Index("ix_otp_codes_email_purpose", "email", "purpose"),)

    def __repr__(self) -> str:
        return f"<OtpCode(id={self.id}, email='{self.email}', purpose={self.purpose.value})>"
