"""Bearer token issue and verification (JWT)."""

import logging
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

import jwt

from notekeeper.errors import ConfigurationError

logger = logging.getLogger(__name__)


class TokenError(Exception):
    """Token could not be accepted."""


class TokenExpiredError(TokenError):
    """Signature is valid but the token is past its expiry."""


class InvalidTokenError(TokenError):
    """Bad signature, malformed token, or missing claims."""


@dataclass(frozen=True)
class TokenClaims:
    """Identity carried by a session token."""

    user_id: str
    email: str


class TokenService:
    """Issues and verifies stateless session tokens.

    There is no server-side session store: a token stays valid until it
    expires, and logging out is the client discarding it.
    """

    def __init__(self, secret: str, algorithm: str = "HS256", expires_days: int = 7) -> None:
        if not secret:
            raise ConfigurationError("JWT secret key is not configured")
        self._secret = secret
        self._algorithm = algorithm
        self.expires_delta = timedelta(days=expires_days)

    def issue(self, user_id: str, email: str, expires_delta: timedelta | None = None) -> str:
        """Create a signed token for a user."""
        if expires_delta is None:
            expires_delta = self.expires_delta

        now = datetime.now(UTC)
        payload = {
            "sub": user_id,
            "email": email,
            "iat": now,
            "exp": now + expires_delta,
        }
        return jwt.encode(payload, self._secret, algorithm=self._algorithm)

    def verify(self, token: str) -> TokenClaims:
        """Validate signature and expiry and return the embedded identity."""
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                options={"require": ["sub", "exp"]},
            )
        except jwt.ExpiredSignatureError as e:
            logger.debug("Token expired")
            raise TokenExpiredError("Token expired") from e
        except jwt.InvalidTokenError as e:
            logger.debug(f"Invalid token: {e}")
            raise InvalidTokenError("Invalid token") from e

        email = payload.get("email")
        if not email:
            raise InvalidTokenError("Invalid token")
        return TokenClaims(user_id=payload["sub"], email=email)
