"""Authentication dependencies for protected routes."""

from dataclasses import dataclass

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from notekeeper.dependencies.services import get_token_service
from notekeeper.errors import Unauthorized
from notekeeper.services.token_service import TokenError, TokenExpiredError, TokenService

# auto_error=False so a missing header gets our own envelope, not FastAPI's 403
security = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class AuthContext:
    """Identity of the caller, taken from a verified bearer token."""

    user_id: str
    email: str


def get_auth_context(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    tokens: TokenService = Depends(get_token_service),
) -> AuthContext:
    """
    Verify the bearer token and return the caller's identity.

    Tokens are stateless, so there is no user lookup here. The context is
    also stored on ``request.state`` for the per-user rate limit key.

    Usage:
        @router.get("/protected")
        def protected_route(auth: AuthContext = Depends(get_auth_context)):
            return {"user_id": auth.user_id}
    """
    if credentials is None or not credentials.credentials:
        raise Unauthorized("Bearer token is required")

    try:
        claims = tokens.verify(credentials.credentials)
    except TokenExpiredError:
        raise Unauthorized("Token expired")
    except TokenError:
        raise Unauthorized("Invalid token")

    context = AuthContext(user_id=claims.user_id, email=claims.email)
    request.state.auth_context = context
    return context
