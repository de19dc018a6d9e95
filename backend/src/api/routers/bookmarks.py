"""Bookmark CRUD endpoints."""
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import get_async_session, get_current_user
from models.user import User
from schemas.bookmark import (
    BookmarkCreate,
    BookmarkListResponse,
    BookmarkResponse,
    BookmarkUpdate,
)
from services.bookmark_service import DEFAULT_PAGE_LIMIT, MAX_PAGE_LIMIT, bookmark_service

router = APIRouter(prefix="/bookmarks", tags=["bookmarks"])

# Same message for "does not exist" and "belongs to someone else"
NOT_FOUND_DETAIL = "Bookmark not found"


@router.get("/", response_model=BookmarkListResponse)
async def list_bookmarks(
    page: int = Query(default=1, ge=1, description="Page number (1-indexed)"),
    limit: int = Query(
        default=DEFAULT_PAGE_LIMIT,
        ge=1,
        le=MAX_PAGE_LIMIT,
        description=f"Number of items per page (max {MAX_PAGE_LIMIT})",
    ),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
) -> BookmarkListResponse:
    """
    List the current user's bookmarks, most recent first.

    - **page**: 1-indexed page number
    - **limit**: page size, 1-100

    `total` counts all of the user's bookmarks. It is read separately from the
    page itself, so a bookmark created or deleted concurrently may be reflected
    in one and not the other.
    """
    result = await bookmark_service.list(db, current_user.id, page, limit)
    return BookmarkListResponse(
        bookmarks=[BookmarkResponse.model_validate(b) for b in result.bookmarks],
        total=result.total,
        page=result.page,
        limit=result.limit,
    )


@router.post("/", response_model=BookmarkResponse, status_code=201)
async def create_bookmark(
    data: BookmarkCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
) -> BookmarkResponse:
    """Create a new bookmark. The title defaults to the URL when omitted or empty."""
    bookmark = await bookmark_service.create(db, current_user.id, data)
    return BookmarkResponse.model_validate(bookmark)


@router.get("/{bookmark_id}", response_model=BookmarkResponse)
async def get_bookmark(
    bookmark_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
) -> BookmarkResponse:
    """Get a single bookmark by ID."""
    bookmark = await bookmark_service.get(db, bookmark_id, current_user.id)
    if bookmark is None:
        raise HTTPException(status_code=404, detail=NOT_FOUND_DETAIL)
    return BookmarkResponse.model_validate(bookmark)


@router.patch("/{bookmark_id}", response_model=BookmarkResponse)
async def update_bookmark(
    bookmark_id: UUID,
    data: BookmarkUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
) -> BookmarkResponse:
    """Update a bookmark. Only the fields present in the body are changed."""
    bookmark = await bookmark_service.update(db, bookmark_id, current_user.id, data)
    if bookmark is None:
        raise HTTPException(status_code=404, detail=NOT_FOUND_DETAIL)
    return BookmarkResponse.model_validate(bookmark)


@router.delete("/{bookmark_id}", response_model=BookmarkResponse)
async def delete_bookmark(
    bookmark_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
) -> BookmarkResponse:
    """Delete a bookmark and return the deleted record."""
    bookmark = await bookmark_service.delete(db, bookmark_id, current_user.id)
    if bookmark is None:
        raise HTTPException(status_code=404, detail=NOT_FOUND_DETAIL)
    return BookmarkResponse.model_validate(bookmark)
