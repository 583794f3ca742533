"""Authentication router."""

import logging

from fastapi import APIRouter, Depends, Query, Request, status

from notekeeper.config import settings
from notekeeper.dependencies.auth import AuthContext, get_auth_context
from notekeeper.dependencies.services import get_auth_flow
from notekeeper.rate_limiter import limiter
from notekeeper.schemas import (
    ApiResponse,
    AuthSession,
    GoogleAuthUrl,
    GoogleCredentialRequest,
    LoginRequest,
    OtpSent,
    ProfileData,
    ResendOtpRequest,
    SignupRequest,
    UserInfo,
    VerifyOtpRequest,
)
from notekeeper.services import AuthFlowService, SignedIn

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["authentication"])

AUTH_LIMIT_MESSAGE = "Too many authentication attempts, please try again later"


def _session(signed_in: SignedIn, message: str) -> ApiResponse[AuthSession]:
    return ApiResponse[AuthSession](
        message=message,
        data=AuthSession(user=UserInfo.model_validate(signed_in.user), token=signed_in.token),
    )


@router.post(
    "/signup",
    response_model=ApiResponse[OtpSent],
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED,
)
@limiter.limit(settings.auth_rate_limit, error_message=AUTH_LIMIT_MESSAGE)
def signup(
    request: Request,
    data: SignupRequest,
    flow: AuthFlowService = Depends(get_auth_flow),
) -> ApiResponse[OtpSent]:
    """Create an unverified account and email a verification code."""
    user = flow.signup(data.email, data.name, data.date_of_birth)
    return ApiResponse[OtpSent](
        message="User created successfully. OTP sent to your email.",
        data=OtpSent(email=user.email, name=user.name),
    )


@router.post("/verify-otp", response_model=ApiResponse[AuthSession], response_model_exclude_none=True)
@limiter.limit(settings.auth_rate_limit, error_message=AUTH_LIMIT_MESSAGE)
def verify_otp(
    request: Request,
    data: VerifyOtpRequest,
    flow: AuthFlowService = Depends(get_auth_flow),
) -> ApiResponse[AuthSession]:
    """Verify the signup code and sign the new user in."""
    return _session(flow.verify_signup(data.email, data.otp), "Email verified successfully")


@router.post("/login", response_model=ApiResponse[OtpSent], response_model_exclude_none=True)
@limiter.limit(settings.auth_rate_limit, error_message=AUTH_LIMIT_MESSAGE)
def login(
    request: Request,
    data: LoginRequest,
    flow: AuthFlowService = Depends(get_auth_flow),
) -> ApiResponse[OtpSent]:
    """Email a login code to a verified user."""
    user = flow.login(data.email)
    return ApiResponse[OtpSent](
        message="OTP sent to your email for login verification.",
        data=OtpSent(email=user.email),
    )


@router.post(
    "/verify-login-otp",
    response_model=ApiResponse[AuthSession],
    response_model_exclude_none=True,
)
@limiter.limit(settings.auth_rate_limit, error_message=AUTH_LIMIT_MESSAGE)
def verify_login_otp(
    request: Request,
    data: VerifyOtpRequest,
    flow: AuthFlowService = Depends(get_auth_flow),
) -> ApiResponse[AuthSession]:
    """Verify the login code and issue a token."""
    return _session(flow.verify_login(data.email, data.otp), "Login successful")


@router.post("/resend-otp", response_model=ApiResponse[OtpSent], response_model_exclude_none=True)
@limiter.limit(settings.auth_rate_limit, error_message=AUTH_LIMIT_MESSAGE)
def resend_otp(
    request: Request,
    data: ResendOtpRequest,
    flow: AuthFlowService = Depends(get_auth_flow),
) -> ApiResponse[OtpSent]:
    """Send a fresh code, subject to the resend cooldown."""
    user = flow.resend(data.email, data.purpose)
    return ApiResponse[OtpSent](
        message="OTP resent successfully",
        data=OtpSent(email=user.email, purpose=data.purpose),
    )


@router.get("/google", response_model=ApiResponse[GoogleAuthUrl], response_model_exclude_none=True)
def google_auth_url(flow: AuthFlowService = Depends(get_auth_flow)) -> ApiResponse[GoogleAuthUrl]:
    """Consent URL for the redirect flow."""
    return ApiResponse[GoogleAuthUrl](
        message="Google OAuth URL generated",
        data=GoogleAuthUrl(auth_url=flow.google_authorization_url()),
    )


@router.post("/google", response_model=ApiResponse[AuthSession], response_model_exclude_none=True)
@limiter.limit(settings.auth_rate_limit, error_message=AUTH_LIMIT_MESSAGE)
def google_credential(
    request: Request,
    data: GoogleCredentialRequest,
    flow: AuthFlowService = Depends(get_auth_flow),
) -> ApiResponse[AuthSession]:
    """Sign in with a Google ID token obtained in the browser."""
    return _session(
        flow.google_sign_in_with_credential(data.credential),
        "Google authentication successful",
    )


@router.get(
    "/google/callback",
    response_model=ApiResponse[AuthSession],
    response_model_exclude_none=True,
)
@limiter.limit(settings.auth_rate_limit, error_message=AUTH_LIMIT_MESSAGE)
def google_callback(
    request: Request,
    code: str = Query(..., min_length=1),
    flow: AuthFlowService = Depends(get_auth_flow),
) -> ApiResponse[AuthSession]:
    """Redirect target: exchange the authorization code and sign in."""
    return _session(flow.google_sign_in_with_code(code), "Google OAuth authentication successful")


@router.get("/me", response_model=ApiResponse[ProfileData], response_model_exclude_none=True)
def get_me(
    auth: AuthContext = Depends(get_auth_context),
    flow: AuthFlowService = Depends(get_auth_flow),
) -> ApiResponse[ProfileData]:
    """Get the caller's profile."""
    user = flow.get_profile(auth.user_id)
    return ApiResponse[ProfileData](data=ProfileData(user=UserInfo.model_validate(user)))


@router.post("/logout", response_model=ApiResponse[None], response_model_exclude_none=True)
def logout(auth: AuthContext = Depends(get_auth_context)) -> ApiResponse[None]:
    """Acknowledge logout. Tokens are stateless; the client discards its copy."""
    logger.info(f"User {auth.user_id} logged out")
    return ApiResponse[None](message="Logout successful")
