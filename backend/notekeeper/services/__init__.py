"""Services layer - business logic and external integrations.

- auth_flow: signup, login and Google sign-in orchestration
- otp_service / token_service: one-time codes and bearer tokens
- notes_service: owner-scoped note operations
- email_service / google_oauth_service: external collaborators
- repositories/: Data access layer
- shared/: Shared utilities
"""

from notekeeper.services.auth_flow import AuthFlowService, SignedIn
from notekeeper.services.email_service import EmailService
from notekeeper.services.google_oauth_service import (
    GoogleAuthError,
    GoogleOAuthService,
    GoogleProfile,
)
from notekeeper.services.notes_service import NotesService
from notekeeper.services.otp_service import OtpOutcome, OtpPolicy, OtpService, OtpStatus
from notekeeper.services.token_service import (
    InvalidTokenError,
    TokenClaims,
    TokenError,
    TokenExpiredError,
    TokenService,
)

__all__ = [
    "AuthFlowService",
    "EmailService",
    "GoogleAuthError",
    "GoogleOAuthService",
    "GoogleProfile",
    "InvalidTokenError",
    "NotesService",
    "OtpOutcome",
    "OtpPolicy",
    "OtpService",
    "OtpStatus",
    "SignedIn",
    "TokenClaims",
    "TokenError",
    "TokenExpiredError",
    "TokenService",
]
