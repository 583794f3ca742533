"""One-time code issue and verification.

Per (email, purpose) a code moves None -> Pending -> Verified, or ends
Expired/Exhausted. Issuing replaces any earlier code, and each issued code
accepts a bounded number of guesses.
"""

import enum
import hashlib
import hmac
import logging
import math
import secrets
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

from sqlalchemy.orm import Session

from notekeeper.models import OtpCode, OtpPurpose
from notekeeper.services.email_service import EmailService
from notekeeper.services.repositories import OtpRepository

logger = logging.getLogger(__name__)

CODE_LENGTH = 6


class OtpStatus(str, enum.Enum):
    SENT = "sent"
    THROTTLED = "throttled"
    DELIVERY_FAILED = "delivery_failed"
    VERIFIED = "verified"
    NOT_FOUND = "not_found"
    INVALID = "invalid"
    EXHAUSTED = "exhausted"


@dataclass(frozen=True)
class OtpOutcome:
    """Result of a request or verify call. Callers branch on ``status``."""

    status: OtpStatus
    message: str
    wait_seconds: int | None = None
    attempts_remaining: int | None = None

    @property
    def success(self) -> bool:
        return self.status in (OtpStatus.SENT, OtpStatus.VERIFIED)


@dataclass(frozen=True)
class OtpPolicy:
    """Expiry, guess cap and resend cooldown for issued codes."""

    expires_minutes: int = 10
    max_attempts: int = 3
    resend_cooldown_seconds: int = 10


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


def hash_code(code: str) -> str:
    """SHA-256 of a code; only the hash is stored."""
    return hashlib.sha256(code.encode("utf-8")).hexdigest()


class OtpService:
    """Issues, throttles, delivers and verifies one-time codes."""

    def __init__(self, db: Session, email_service: EmailService, policy: OtpPolicy) -> None:
        self._db = db
        self._codes = OtpRepository(db)
        self._email = email_service
        self.policy = policy

    @staticmethod
    def generate_code() -> str:
        """Generate a 6-digit numeric code from a CSPRNG."""
        return f"{secrets.randbelow(10**CODE_LENGTH):0{CODE_LENGTH}d}"

    def cooldown_remaining(self, email: str, purpose: OtpPurpose) -> int:
        """Seconds until another code may be issued, 0 if allowed now."""
        latest = self._codes.find_latest(email, purpose)
        if latest is None:
            return 0

        elapsed = (datetime.now(UTC) - _as_utc(latest.created_at)).total_seconds()
        remaining = self.policy.resend_cooldown_seconds - elapsed
        return math.ceil(remaining) if remaining > 0 else 0

    def request_code(self, email: str, purpose: OtpPurpose) -> OtpOutcome:
        """Issue a fresh code for (email, purpose) and mail it."""
        email = email.lower()

        wait = self.cooldown_remaining(email, purpose)
        if wait:
            logger.warning(f"OTP request throttled for {email} ({purpose.value}), wait {wait}s")
            return OtpOutcome(
                OtpStatus.THROTTLED,
                f"Please wait {wait} seconds before requesting another OTP",
                wait_seconds=wait,
            )

        now = datetime.now(UTC)
        self._codes.delete_for_email(email, purpose)
        self._codes.purge_expired(now)

        code = self.generate_code()
        record = self._codes.add(
            OtpCode(
                email=email,
                code_hash=hash_code(code),
                purpose=purpose,
                expires_at=now + timedelta(minutes=self.policy.expires_minutes),
                attempts=0,
                verified=False,
                created_at=now,
            )
        )
        self._db.commit()

        try:
            delivered = self._email.send_otp_email(email, code, self.policy.expires_minutes)
        except Exception:
            logger.exception(f"OTP delivery raised for {email}")
            delivered = False

        if not delivered:
            self._codes.delete(record)
            self._db.commit()
            logger.warning(f"OTP delivery failed for {email}; code discarded")
            return OtpOutcome(OtpStatus.DELIVERY_FAILED, "Failed to send OTP email")

        logger.info(f"OTP sent to {email} ({purpose.value})")
        return OtpOutcome(OtpStatus.SENT, "OTP sent successfully")

    def verify_code(self, email: str, purpose: OtpPurpose, code: str) -> OtpOutcome:
        """Check a submitted code against the active code for (email, purpose).

        Every lookup that finds a code spends one attempt. A verified code is
        kept (marked verified) so it still counts towards the resend cooldown;
        it can never verify again.
        """
        email = email.lower()
        record = self._codes.find_active(email, purpose, datetime.now(UTC))
        if record is None:
            return OtpOutcome(OtpStatus.NOT_FOUND, "Invalid or expired OTP")

        max_attempts = self.policy.max_attempts
        record.attempts += 1

        if record.attempts > max_attempts:
            self._codes.delete(record)
            self._db.commit()
            return OtpOutcome(
                OtpStatus.EXHAUSTED,
                "Maximum OTP attempts exceeded. Please request a new OTP.",
                attempts_remaining=0,
            )

        if not hmac.compare_digest(record.code_hash, hash_code(code)):
            remaining = max_attempts - record.attempts
            if remaining <= 0:
                self._codes.delete(record)
                self._db.commit()
                logger.warning(f"OTP attempts exhausted for {email} ({purpose.value})")
                return OtpOutcome(
                    OtpStatus.EXHAUSTED,
                    "Invalid OTP. Maximum OTP attempts exceeded. Please request a new OTP.",
                    attempts_remaining=0,
                )
            self._db.commit()
            return OtpOutcome(
                OtpStatus.INVALID,
                f"Invalid OTP. {remaining} attempts remaining.",
                attempts_remaining=remaining,
            )

        record.verified = True
        self._db.commit()
        logger.info(f"OTP verified for {email} ({purpose.value})")
        return OtpOutcome(OtpStatus.VERIFIED, "OTP verified successfully")

    def discard_codes(self, email: str) -> int:
        """Drop every code for an address (all purposes). Caller commits."""
        return self._codes.delete_for_email(email.lower())
