"""Google OAuth2 client.

Two ways in: the redirect flow (consent URL, then ``/callback`` with an
authorization code) and the browser flow, where Google Identity Services
hands the client an ID token directly.
"""

import logging
from dataclasses import dataclass
from urllib.parse import urlencode

from notekeeper.services.shared import HTTPClient, HTTPClientError

logger = logging.getLogger(__name__)

AUTH_URL = "https://accounts.google.com/o/oauth2/v2/auth"
TOKEN_URL = "https://oauth2.googleapis.com/token"
USERINFO_URL = "https://www.googleapis.com/oauth2/v2/userinfo"
TOKENINFO_URL = "https://oauth2.googleapis.com/tokeninfo"

ISSUERS = {"accounts.google.com", "https://accounts.google.com"}


class GoogleAuthError(Exception):
    """Google rejected the credential or could not be reached."""


@dataclass(frozen=True)
class GoogleProfile:
    """The identity fields we take from Google."""

    email: str
    name: str | None = None


class GoogleOAuthService(HTTPClient):
    """Talks to Google's OAuth2 endpoints. No retries; failures raise GoogleAuthError."""

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        redirect_uri: str,
        timeout: float = 10.0,
        **kwargs,
    ):
        super().__init__(timeout=timeout, **kwargs)
        self.client_id = client_id
        self.client_secret = client_secret
        self.redirect_uri = redirect_uri

    def authorization_url(self) -> str:
        """Consent screen URL for the redirect flow."""
        params = {
            "client_id": self.client_id,
            "redirect_uri": self.redirect_uri,
            "response_type": "code",
            "scope": "openid email profile",
            "access_type": "offline",
            "prompt": "consent",
        }
        return f"{AUTH_URL}?{urlencode(params)}"

    def exchange_code(self, code: str) -> GoogleProfile:
        """Trade an authorization code for an access token and load the profile."""
        try:
            tokens = self.post_form_json(
                TOKEN_URL,
                data={
                    "client_id": self.client_id,
                    "client_secret": self.client_secret,
                    "code": code,
                    "grant_type": "authorization_code",
                    "redirect_uri": self.redirect_uri,
                },
            )
            access_token = tokens.get("access_token")
            if not access_token:
                raise GoogleAuthError("Failed to get access token")

            profile = self.get_json(
                USERINFO_URL, headers={"Authorization": f"Bearer {access_token}"}
            )
        except (HTTPClientError, ValueError) as e:
            logger.warning(f"Google code exchange failed: {e}")
            raise GoogleAuthError("OAuth authentication failed") from e

        return _profile_from(profile)

    def verify_id_token(self, credential: str) -> GoogleProfile:
        """Validate an ID token with Google and check it was issued for us."""
        try:
            claims = self.get_json(TOKENINFO_URL, params={"id_token": credential})
        except (HTTPClientError, ValueError) as e:
            logger.warning(f"Google ID token rejected: {e}")
            raise GoogleAuthError("Invalid Google credential") from e

        if claims.get("aud") != self.client_id:
            logger.warning("Google ID token audience mismatch")
            raise GoogleAuthError("Invalid Google credential")
        if claims.get("iss") not in ISSUERS:
            raise GoogleAuthError("Invalid Google credential")
        # tokeninfo returns booleans as strings
        if str(claims.get("email_verified", "false")).lower() != "true":
            raise GoogleAuthError("Google email is not verified")

        return _profile_from(claims)


def _profile_from(data: dict) -> GoogleProfile:
    email = data.get("email")
    if not email:
        raise GoogleAuthError("Google profile has no email")
    return GoogleProfile(email=email.strip().lower(), name=data.get("name") or None)
