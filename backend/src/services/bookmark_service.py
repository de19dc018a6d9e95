"""
Service layer for bookmark operations.

This is the only layer that decides whether a bookmark is visible to, or
mutable by, a given user. Routes pass the authenticated user's id in; the
repository below performs plain data access.

Consistency notes:
- list() reads the window and the total with two separate statements. Under
  PostgreSQL's default READ COMMITTED isolation each statement sees its own
  snapshot, so a concurrent insert/delete can make `total` disagree with the
  rows returned by a page. This is accepted; no locks are taken.
- update() and delete() check ownership first and then pass the owner into a
  single conditional UPDATE/DELETE (WHERE id = ? AND user_id = ?). A
  concurrent delete or ownership change between the check and the write
  results in None rather than a write to someone else's row.
"""
import logging
from dataclasses import dataclass
from typing import Literal
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from models.bookmark import Bookmark
from schemas.bookmark import BookmarkCreate, BookmarkUpdate
from services.bookmark_repository import BookmarkRepository, bookmark_repository

logger = logging.getLogger(__name__)

DEFAULT_PAGE_LIMIT = 20
MAX_PAGE_LIMIT = 100
# Largest OFFSET PostgreSQL accepts (bigint)
MAX_OFFSET = 2**63 - 1

Operation = Literal["get", "update", "delete"]


@dataclass
class BookmarkPage:
    """One page of a user's bookmarks plus the user's total bookmark count."""

    bookmarks: list[Bookmark]
    total: int
    page: int
    limit: int

    @property
    def offset(self) -> int:
        """Number of bookmarks skipped before this page."""
        return page_offset(self.page, self.limit)


def normalize_pagination(page: int, limit: int) -> tuple[int, int]:
    """
    Clamp page and limit into their valid ranges.

    Routes validate these already (page >= 1, 1 <= limit <= 100); the service
    still refuses to build a negative offset or an unbounded window if called
    directly with out-of-range values.
    """
    page = max(page, 1)
    limit = min(max(limit, 1), MAX_PAGE_LIMIT)
    return page, limit


def page_offset(page: int, limit: int) -> int:
    """
    Offset of the first row of a 1-indexed page.

    Capped at MAX_OFFSET so a huge page number reads an empty window instead
    of overflowing PostgreSQL's bigint OFFSET.
    """
    return min((page - 1) * limit, MAX_OFFSET)


class BookmarkService:
    """Bookmark operations scoped to the calling user."""

    def __init__(self, repository: BookmarkRepository | None = None) -> None:
        self.repository = repository or bookmark_repository

    async def _authorize_or_none(
        self,
        db: AsyncSession,
        bookmark_id: UUID,
        user_id: UUID,
        operation: Operation,
    ) -> Bookmark | None:
        """
        Fetch a bookmark only if it belongs to the caller.

        Returns None both when the bookmark doesn't exist and when it belongs to
        another user, so callers cannot tell the two apart.
        """
        bookmark = await self.repository.find_by_id(db, bookmark_id)
        if bookmark is None:
            return None
        if bookmark.user_id != user_id:
            logger.debug(
                "Denied %s of bookmark %s for user %s (not owner)",
                operation,
                bookmark_id,
                user_id,
            )
            return None
        return bookmark

    async def list(
        self,
        db: AsyncSession,
        user_id: UUID,
        page: int = 1,
        limit: int = DEFAULT_PAGE_LIMIT,
    ) -> BookmarkPage:
        """
        Get one page of the user's bookmarks, most recent first.

        Args:
            db: Database session.
            user_id: Owner whose bookmarks are listed.
            page: 1-indexed page number.
            limit: Page size.

        Returns:
            BookmarkPage with at most `limit` bookmarks and the user's total count.
        """
        page, limit = normalize_pagination(page, limit)
        bookmarks = await self.repository.find_many_by_user_id(
            db, user_id, limit, page_offset(page, limit),
        )
        total = await self.repository.count_by_user_id(db, user_id)
        return BookmarkPage(bookmarks=bookmarks, total=total, page=page, limit=limit)

    async def get(
        self,
        db: AsyncSession,
        bookmark_id: UUID,
        user_id: UUID,
    ) -> Bookmark | None:
        """Get a bookmark by ID. Returns None if not found or owned by another user."""
        return await self._authorize_or_none(db, bookmark_id, user_id, "get")

    async def create(
        self,
        db: AsyncSession,
        user_id: UUID,
        data: BookmarkCreate,
    ) -> Bookmark:
        """
        Create a bookmark owned by the calling user.

        An absent or empty title falls back to the URL.

        Note: Does not commit. Caller (session generator) handles commit at request end.
        """
        bookmark = await self.repository.create(
            db,
            {
                "user_id": user_id,
                "url": data.url,
                "title": data.title or data.url,
            },
        )
        if data.tags:
            await self.repository.set_tags(db, bookmark, data.tags)
        logger.info("Created bookmark %s for user %s", bookmark.id, user_id)
        return bookmark

    async def update(
        self,
        db: AsyncSession,
        bookmark_id: UUID,
        user_id: UUID,
        data: BookmarkUpdate,
    ) -> Bookmark | None:
        """
        Apply a partial update to the caller's bookmark.

        Fields not present in `data` are left unchanged; updated_at is always
        refreshed. Returns None if not found or owned by another user.

        Note: Does not commit. Caller (session generator) handles commit at request end.
        """
        if await self._authorize_or_none(db, bookmark_id, user_id, "update") is None:
            return None

        update_data = data.model_dump(exclude_unset=True)
        tags = update_data.pop("tags", None)

        bookmark = await self.repository.update(
            db, bookmark_id, update_data, owner_id=user_id,
        )
        if bookmark is None:
            # Deleted or reassigned between the ownership check and the write
            return None
        if tags is not None:
            await self.repository.set_tags(db, bookmark, tags)
        return bookmark

    async def delete(
        self,
        db: AsyncSession,
        bookmark_id: UUID,
        user_id: UUID,
    ) -> Bookmark | None:
        """
        Delete the caller's bookmark and return it.

        Returns None if not found or owned by another user.

        Note: Does not commit. Caller (session generator) handles commit at request end.
        """
        if await self._authorize_or_none(db, bookmark_id, user_id, "delete") is None:
            return None

        bookmark = await self.repository.delete(db, bookmark_id, owner_id=user_id)
        if bookmark is not None:
            logger.info("Deleted bookmark %s for user %s", bookmark_id, user_id)
        return bookmark


bookmark_service = BookmarkService()
