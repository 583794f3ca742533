"""Notes router. Every route requires a bearer token and only sees the caller's notes."""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request, status

from notekeeper.config import settings
from notekeeper.dependencies.auth import AuthContext, get_auth_context
from notekeeper.dependencies.services import get_notes_service
from notekeeper.rate_limiter import limiter, user_rate_limit_key
from notekeeper.schemas import (
    ApiResponse,
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
from notekeeper.services import NotesService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/notes", tags=["notes"])


def _note(note) -> NoteResponse:
    return NoteResponse.model_validate(note)


@router.get("", response_model=ApiResponse[NoteList], response_model_exclude_none=True)
@limiter.limit(
    settings.notes_rate_limit,
    key_func=user_rate_limit_key,
    error_message="Too many note operations, please slow down",
)
def list_notes(
    request: Request,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    sort_by: SortField = Query("createdAt", alias="sortBy"),
    sort_order: SortOrder = Query("desc", alias="sortOrder"),
    is_pinned: bool | None = Query(None, alias="isPinned"),
    auth: AuthContext = Depends(get_auth_context),
    notes: NotesService = Depends(get_notes_service),
) -> ApiResponse[NoteList]:
    """List the caller's notes, pinned first."""
    items, page_info = notes.list_notes(
        auth.user_id,
        page=page,
        limit=limit,
        sort_by=sort_by,
        sort_order=sort_order,
        is_pinned=is_pinned,
    )
    return ApiResponse[NoteList](
        data=NoteList(notes=[_note(n) for n in items], pagination=page_info)
    )


@router.post(
    "",
    response_model=ApiResponse[NoteResponse],
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED,
)
@limiter.limit(
    settings.create_note_rate_limit,
    key_func=user_rate_limit_key,
    error_message="Too many notes created, please wait before creating more",
)
def create_note(
    request: Request,
    data: NoteCreate,
    auth: AuthContext = Depends(get_auth_context),
    notes: NotesService = Depends(get_notes_service),
) -> ApiResponse[NoteResponse]:
    """Create a note."""
    note = notes.create_note(auth.user_id, data)
    return ApiResponse[NoteResponse](message="Note created successfully", data=_note(note))


@router.get(
    "/search",
    response_model=ApiResponse[NoteSearchResults],
    response_model_exclude_none=True,
)
@limiter.limit(
    settings.search_rate_limit,
    key_func=user_rate_limit_key,
    error_message="Too many search requests, please slow down",
)
def search_notes(
    request: Request,
    q: str | None = Query(None),
    tags: list[str] | None = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    sort_by: SortField = Query("createdAt", alias="sortBy"),
    sort_order: SortOrder = Query("desc", alias="sortOrder"),
    is_pinned: bool | None = Query(None, alias="isPinned"),
    auth: AuthContext = Depends(get_auth_context),
    notes: NotesService = Depends(get_notes_service),
) -> ApiResponse[NoteSearchResults]:
    """Search the caller's notes by text and/or tags."""
    items, page_info, query = notes.search_notes(
        auth.user_id,
        query=q,
        tags=tags,
        page=page,
        limit=limit,
        sort_by=sort_by,
        sort_order=sort_order,
        is_pinned=is_pinned,
    )
    return ApiResponse[NoteSearchResults](
        data=NoteSearchResults(
            notes=[_note(n) for n in items],
            search_query=query,
            pagination=page_info,
        )
    )


# Registered before /{note_id} so "bulk" is not parsed as an id
@router.delete(
    "/bulk",
    response_model=ApiResponse[BulkDeleteResult],
    response_model_exclude_none=True,
)
@limiter.limit(
    settings.bulk_rate_limit,
    key_func=user_rate_limit_key,
    error_message="Too many bulk operations, please wait before trying again",
)
def bulk_delete_notes(
    request: Request,
    data: BulkDeleteRequest,
    auth: AuthContext = Depends(get_auth_context),
    notes: NotesService = Depends(get_notes_service),
) -> ApiResponse[BulkDeleteResult]:
    """Delete several of the caller's notes; ids owned by others are skipped."""
    deleted = notes.bulk_delete(data.note_ids, auth.user_id)
    return ApiResponse[BulkDeleteResult](
        message=f"{deleted} notes deleted successfully",
        data=BulkDeleteResult(deleted_count=deleted),
    )


@router.get("/{note_id}", response_model=ApiResponse[NoteResponse], response_model_exclude_none=True)
@limiter.limit(settings.single_note_rate_limit, key_func=user_rate_limit_key)
def get_note(
    request: Request,
    note_id: UUID,
    auth: AuthContext = Depends(get_auth_context),
    notes: NotesService = Depends(get_notes_service),
) -> ApiResponse[NoteResponse]:
    return ApiResponse[NoteResponse](data=_note(notes.get_note(str(note_id), auth.user_id)))


@router.put("/{note_id}", response_model=ApiResponse[NoteResponse], response_model_exclude_none=True)
@limiter.limit(settings.single_note_rate_limit, key_func=user_rate_limit_key)
def update_note(
    request: Request,
    note_id: UUID,
    data: NoteUpdate,
    auth: AuthContext = Depends(get_auth_context),
    notes: NotesService = Depends(get_notes_service),
) -> ApiResponse[NoteResponse]:
    """Partially update a note."""
    note = notes.update_note(str(note_id), auth.user_id, data)
    return ApiResponse[NoteResponse](message="Note updated successfully", data=_note(note))


@router.delete("/{note_id}", response_model=ApiResponse[None], response_model_exclude_none=True)
@limiter.limit(settings.single_note_rate_limit, key_func=user_rate_limit_key)
def delete_note(
    request: Request,
    note_id: UUID,
    auth: AuthContext = Depends(get_auth_context),
    notes: NotesService = Depends(get_notes_service),
) -> ApiResponse[None]:
    notes.delete_note(str(note_id), auth.user_id)
    return ApiResponse[None](message="Note deleted successfully")


@router.patch(
    "/{note_id}/pin",
    response_model=ApiResponse[NoteResponse],
    response_model_exclude_none=True,
)
@limiter.limit(settings.single_note_rate_limit, key_func=user_rate_limit_key)
def toggle_pin(
    request: Request,
    note_id: UUID,
    auth: AuthContext = Depends(get_auth_context),
    notes: NotesService = Depends(get_notes_service),
) -> ApiResponse[NoteResponse]:
    """Pin an unpinned note or unpin a pinned one."""
    note = notes.toggle_pin(str(note_id), auth.user_id)
    state = "pinned" if note.is_pinned else "unpinned"
    return ApiResponse[NoteResponse](message=f"Note {state} successfully", data=_note(note))
