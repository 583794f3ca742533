"""Signup, login and Google sign-in orchestration.

Email sign-in is two steps: request a one-time code, then submit it to get
a bearer token. Google sign-in skips the code; Google's own verification of
the address is trusted instead.
"""

import logging
from dataclasses import dataclass
from datetime import UTC, date, datetime

from sqlalchemy.orm import Session

from notekeeper.errors import (
    Conflict,
    Forbidden,
    InternalError,
    NotFound,
    TooManyRequests,
    ValidationFailed,
)
from notekeeper.models import OtpPurpose, User
from notekeeper.services.google_oauth_service import (
    GoogleAuthError,
    GoogleOAuthService,
    GoogleProfile,
)
from notekeeper.services.otp_service import OtpOutcome, OtpService, OtpStatus
from notekeeper.services.repositories import DuplicateError, UserRepository
from notekeeper.services.token_service import TokenService

logger = logging.getLogger(__name__)

# Google does not share a birth date
GOOGLE_PLACEHOLDER_DOB = date(1990, 1, 1)
GOOGLE_DEFAULT_NAME = "Google User"
MAX_NAME_LENGTH = 50


@dataclass(frozen=True)
class SignedIn:
    user: User
    token: str


def _raise_for_request(outcome: OtpOutcome) -> None:
    """Turn a failed code request into the matching API error."""
    if outcome.status == OtpStatus.THROTTLED:
        raise TooManyRequests(outcome.message, retry_after=outcome.wait_seconds or 1)
    if outcome.status == OtpStatus.DELIVERY_FAILED:
        raise InternalError(outcome.message)


class AuthFlowService:
    """Runs each sign-in flow against the user store, OTP and token services."""

    def __init__(
        self,
        db: Session,
        otp_service: OtpService,
        token_service: TokenService,
        google: GoogleOAuthService | None = None,
    ) -> None:
        self._db = db
        self._users = UserRepository(db)
        self._otp = otp_service
        self._tokens = token_service
        self._google = google

    def _sign_in(self, user: User) -> SignedIn:
        user.last_login = datetime.now(UTC)
        self._db.commit()
        self._db.refresh(user)
        return SignedIn(user=user, token=self._tokens.issue(user.id, user.email))

    # --- Email + code ---

    def signup(self, email: str, name: str, date_of_birth: date) -> User:
        """Create an unverified user and mail an email-verification code.

        An unverified account with the same address is replaced, so an
        abandoned signup never locks the address. If the code cannot be
        sent the new account is removed again.
        """
        existing = self._users.find_by_email(email)
        if existing is not None:
            if existing.is_email_verified:
                raise Conflict("User with this email already exists")
            logger.info(f"Replacing unverified signup for {email}")
            self._otp.discard_codes(email)
            self._users.delete(existing)

        try:
            user = self._users.add(
                User(email=email, name=name, date_of_birth=date_of_birth, is_email_verified=False)
            )
        except DuplicateError as e:
            raise Conflict("User with this email already exists") from e
        self._db.commit()

        outcome = self._otp.request_code(email, OtpPurpose.EMAIL_VERIFICATION)
        if not outcome.success:
            self._users.delete(user)
            self._db.commit()
            logger.warning(f"Signup rolled back for {email}: {outcome.status.value}")
            _raise_for_request(outcome)

        logger.info(f"User {user.id} signed up, verification code sent")
        return user

    def verify_signup(self, email: str, code: str) -> SignedIn:
        """Check the email-verification code, mark the user verified, issue a token."""
        outcome = self._otp.verify_code(email, OtpPurpose.EMAIL_VERIFICATION, code)
        if not outcome.success:
            raise ValidationFailed(outcome.message)

        user = self._users.find_by_email(email)
        if user is None:
            raise NotFound("User not found")

        user.is_email_verified = True
        logger.info(f"Email verified for user {user.id}")
        return self._sign_in(user)

    def login(self, email: str) -> User:
        """Mail a login code to an existing, verified user."""
        user = self._users.find_by_email(email)
        if user is None:
            raise NotFound("User not found. Please sign up first.")
        if not user.is_email_verified:
            raise Forbidden("Email not verified. Please verify your email first.")

        _raise_for_request(self._otp.request_code(email, OtpPurpose.LOGIN))
        return user

    def verify_login(self, email: str, code: str) -> SignedIn:
        """Check the login code and issue a token."""
        outcome = self._otp.verify_code(email, OtpPurpose.LOGIN, code)
        if not outcome.success:
            raise ValidationFailed(outcome.message)

        user = self._users.find_verified_by_email(email)
        if user is None:
            raise NotFound("User not found or not verified")

        logger.info(f"User {user.id} logged in")
        return self._sign_in(user)

    def resend(self, email: str, purpose: OtpPurpose) -> User:
        """Issue a fresh code for ``purpose``, under the same cooldown as the first."""
        user = self._users.find_by_email(email)
        if user is None:
            raise NotFound("User not found")
        if purpose == OtpPurpose.LOGIN and not user.is_email_verified:
            raise Forbidden("Email not verified. Please verify your email first.")

        _raise_for_request(self._otp.request_code(email, purpose))
        return user

    # --- Google ---

    def google_authorization_url(self) -> str:
        return self._require_google().authorization_url()

    def google_sign_in_with_code(self, code: str) -> SignedIn:
        """Redirect flow: exchange the callback code, then sign the user in."""
        google = self._require_google()
        try:
            profile = google.exchange_code(code)
        except GoogleAuthError as e:
            raise ValidationFailed("Google authentication failed") from e
        return self._sign_in(self._find_or_create(profile))

    def google_sign_in_with_credential(self, credential: str) -> SignedIn:
        """Browser flow: validate the ID token, then sign the user in."""
        google = self._require_google()
        try:
            profile = google.verify_id_token(credential)
        except GoogleAuthError as e:
            raise ValidationFailed("Google authentication failed") from e
        return self._sign_in(self._find_or_create(profile))

    def _require_google(self) -> GoogleOAuthService:
        if self._google is None or not self._google.client_id:
            raise InternalError("Google sign-in is not configured")
        return self._google

    def _find_or_create(self, profile: GoogleProfile) -> User:
        user = self._users.find_by_email(profile.email)
        if user is not None:
            # Google has verified the address, which also completes a pending signup
            user.is_email_verified = True
            return user

        name = (profile.name or GOOGLE_DEFAULT_NAME).strip()[:MAX_NAME_LENGTH]
        try:
            user = self._users.add(
                User(
                    email=profile.email,
                    name=name or GOOGLE_DEFAULT_NAME,
                    date_of_birth=GOOGLE_PLACEHOLDER_DOB,
                    is_email_verified=True,
                )
            )
        except DuplicateError as e:
            raise Conflict("User with this email already exists") from e
        logger.info(f"Created user {user.id} from Google sign-in")
        return user

    # --- Profile ---

    def get_profile(self, user_id: str) -> User:
        user = self._users.find_by_id(user_id)
        if user is None:
            raise NotFound("User not found")
        return user
