"""Schemas for authentication endpoints."""

from datetime import date, datetime
from typing import Annotated

from pydantic import BeforeValidator, EmailStr, Field, field_validator

from notekeeper.models import OtpPurpose
from notekeeper.schemas.common import CamelModel

MIN_AGE = 13
MAX_AGE = 120


def _normalize_email(v):
    """Shared email clean-up; addresses are stored lowercased."""
    if isinstance(v, str):
        return v.strip().lower()
    return v


NormalizedEmail = Annotated[EmailStr, BeforeValidator(_normalize_email)]


class SignupRequest(CamelModel):
    """Schema for signup."""

    email: NormalizedEmail
    name: str = Field(min_length=2, max_length=50)
    date_of_birth: date

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("date_of_birth")
    @classmethod
    def validate_age(cls, v: date) -> date:
        # Whole calendar years, birthdays not considered
        age = date.today().year - v.year
        if age < MIN_AGE or age > MAX_AGE:
            raise ValueError(f"Age must be between {MIN_AGE} and {MAX_AGE} years")
        return v


class VerifyOtpRequest(CamelModel):
    """Schema for submitting a signup or login code."""

    email: NormalizedEmail
    otp: str = Field(pattern=r"^\d{6}$")


class LoginRequest(CamelModel):
    """Schema for requesting a login code."""

    email: NormalizedEmail


class ResendOtpRequest(CamelModel):
    """Schema for reissuing a code."""

    email: NormalizedEmail
    purpose: OtpPurpose


class GoogleCredentialRequest(CamelModel):
    """Schema for signing in with a Google ID token from the browser."""

    credential: str = Field(min_length=1)


class UserInfo(CamelModel):
    """Schema for user info in auth responses."""

    id: str
    email: str
    name: str
    date_of_birth: date
    is_email_verified: bool
    last_login: datetime | None = None


class AuthSession(CamelModel):
    """Signed-in user plus the bearer token to send on later requests."""

    user: UserInfo
    token: str


class OtpSent(CamelModel):
    """Acknowledgement that a code was mailed."""

    email: str
    otp_sent: bool = True
    name: str | None = None
    purpose: OtpPurpose | None = None


class ProfileData(CamelModel):
    user: UserInfo


class GoogleAuthUrl(CamelModel):
    auth_url: str = Field(alias="authURL")
