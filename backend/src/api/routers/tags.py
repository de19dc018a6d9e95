"""Tag endpoints, scoped to the caller's own tags."""
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import get_async_session, get_current_user
from models.user import User
from schemas.tag import TagListResponse
from services.tag_service import TagNotFoundError, delete_tag, get_user_tags_with_counts

router = APIRouter(prefix="/tags", tags=["tags"])


@router.get("/", response_model=TagListResponse)
async def list_tags(
    include_inactive: bool = Query(
        default=False,
        description="Also return tags not attached to any bookmark (count 0)",
    ),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
) -> TagListResponse:
    """List the caller's tags, most used first, ties by name."""
    return TagListResponse(
        tags=await get_user_tags_with_counts(
            db, current_user.id, include_zero_count=include_inactive,
        ),
    )


@router.delete("/{tag_name}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_tag_endpoint(
    tag_name: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
) -> None:
    """
    Delete one of the caller's tags and detach it from their bookmarks.

    A name the caller doesn't have is 404, whether or not another user has it.
    """
    try:
        await delete_tag(db, current_user.id, tag_name)
    except TagNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
