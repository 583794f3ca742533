"""Pydantic schemas for API validation."""

from notekeeper.schemas.auth import (
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
from notekeeper.schemas.common import ApiResponse, CamelModel, ErrorDetail, PageInfo, error_body
from notekeeper.schemas.note import (
    BulkDeleteRequest,
    BulkDeleteResult,
    NoteCreate,
    NoteList,
    NoteResponse,
    NoteSearchResults,
    NoteUpdate,
    SortField,
    SortOrder,
)

__all__ = [
    "ApiResponse",
    "AuthSession",
    "BulkDeleteRequest",
    "BulkDeleteResult",
    "CamelModel",
    "ErrorDetail",
    "GoogleAuthUrl",
    "GoogleCredentialRequest",
    "LoginRequest",
    "NoteCreate",
    "NoteList",
    "NoteResponse",
    "NoteSearchResults",
    "NoteUpdate",
    "OtpSent",
    "PageInfo",
    "ProfileData",
    "ResendOtpRequest",
    "SignupRequest",
    "SortField",
    "SortOrder",
    "UserInfo",
    "VerifyOtpRequest",
    "error_body",
]
