"""Service dependencies.

Long-lived collaborators (token signer, mailer, Google client, OTP policy)
are built once at startup and kept on ``app.state``. Services that need a
database session are built per request around it.
"""

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from notekeeper.database import get_db
from notekeeper.services import (
    AuthFlowService,
    EmailService,
    GoogleOAuthService,
    NotesService,
    OtpPolicy,
    OtpService,
    TokenService,
)


def get_token_service(request: Request) -> TokenService:
    return request.app.state.token_service


def get_email_service(request: Request) -> EmailService:
    return request.app.state.email_service


def get_google_service(request: Request) -> GoogleOAuthService:
    return request.app.state.google_service


def get_otp_policy(request: Request) -> OtpPolicy:
    return request.app.state.otp_policy


def get_otp_service(
    db: Session = Depends(get_db),
    email_service: EmailService = Depends(get_email_service),
    policy: OtpPolicy = Depends(get_otp_policy),
) -> OtpService:
    return OtpService(db, email_service, policy)


def get_auth_flow(
    db: Session = Depends(get_db),
    otp_service: OtpService = Depends(get_otp_service),
    token_service: TokenService = Depends(get_token_service),
    google: GoogleOAuthService = Depends(get_google_service),
) -> AuthFlowService:
    return AuthFlowService(db, otp_service, token_service, google)


def get_notes_service(db: Session = Depends(get_db)) -> NotesService:
    return NotesService(db)
