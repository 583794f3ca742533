"""Main FastAPI application."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

from notekeeper import __version__
from notekeeper.config import Settings, settings
from notekeeper.errors import ApiError
from notekeeper.rate_limiter import limiter, rate_limit_exceeded_handler
from notekeeper.routers import auth, notes
from notekeeper.schemas import ErrorDetail, error_body
from notekeeper.services import EmailService, GoogleOAuthService, OtpPolicy, TokenService

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper()),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

logger = logging.getLogger(__name__)


def build_services(app_settings: Settings) -> dict:
    """Construct the long-lived collaborators from settings.

    Raises ConfigurationError when the JWT secret is missing, so the server
    refuses to start rather than issue unverifiable tokens.
    """
    return {
        "token_service": TokenService(
            app_settings.jwt_secret_key,
            algorithm=app_settings.jwt_algorithm,
            expires_days=app_settings.token_expire_days,
        ),
        "email_service": EmailService(
            app_settings.sendgrid_api_key,
            app_settings.email_from_address,
            app_settings.email_from_name,
        ),
        "google_service": GoogleOAuthService(
            app_settings.google_client_id,
            app_settings.google_client_secret,
            app_settings.google_redirect_uri,
        ),
        "otp_policy": OtpPolicy(
            expires_minutes=app_settings.otp_expires_minutes,
            max_attempts=app_settings.otp_max_attempts,
            resend_cooldown_seconds=app_settings.otp_resend_cooldown_seconds,
        ),
    }


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    # Release the pooled connections to Google on shutdown
    app.state.google_service.close()
    logger.info("Notekeeper API shut down")


def _field_name(loc: tuple) -> str | None:
    # Drop the "body"/"query"/"path" prefix FastAPI puts first
    parts = [str(part) for part in loc[1:]] if len(loc) > 1 else [str(part) for part in loc]
    return ".".join(parts) or None


def _error_message(error: dict) -> str:
    return error["msg"].removeprefix("Value error, ")


async def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(exc.message, exc.details),
        headers=exc.headers,
    )


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    details = [
        ErrorDetail(field=_field_name(err["loc"]), message=_error_message(err)).model_dump()
        for err in exc.errors()
    ]
    return JSONResponse(status_code=400, content=error_body("Validation failed", details))


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    message = exc.detail if isinstance(exc.detail, str) else "Request failed"
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(message),
        headers=getattr(exc, "headers", None),
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    details = {"exception": str(exc)} if settings.debug else None
    return JSONResponse(status_code=500, content=error_body("Internal server error", details))


def create_app(app_settings: Settings = settings) -> FastAPI:
    """Build the application and its services."""
    app = FastAPI(
        title="Notekeeper API",
        description="Notes with email one-time-code and Google sign-in",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    for name, service in build_services(app_settings).items():
        setattr(app.state, name, service)

    # Add rate limiter to app state and exception handlers
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
    app.add_exception_handler(ApiError, api_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def add_security_headers(request: Request, call_next):
        response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        return response

    @app.get("/")
    async def root():
        """Root endpoint."""
        return {"success": True, "message": "Notekeeper API", "version": __version__}

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {"success": True, "status": "healthy"}

    app.include_router(auth.router, prefix="/api")
    app.include_router(notes.router, prefix="/api")

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
