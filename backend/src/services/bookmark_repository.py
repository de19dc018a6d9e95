"""
Data access for bookmarks.

The repository translates between table rows and the calls the bookmark
service makes. It never decides whether a caller may see or change a
bookmark; `owner_id` arguments are plain filters supplied by the service so
that the ownership predicate can travel inside the mutating statement.
"""
from typing import Any
from uuid import UUID

from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from models.bookmark import Bookmark, BookmarkStatus
from services.tag_service import get_or_create_tags

# Columns a caller may change after creation. id, user_id and created_at are immutable.
MUTABLE_FIELDS = frozenset({
    "url",
    "title",
    "content",
    "summary",
    "og_image",
    "og_description",
    "status",
})


class BookmarkRepository:
    """Repository for the bookmarks table and its tag associations."""

    async def find_many_by_user_id(
        self,
        db: AsyncSession,
        user_id: UUID,
        limit: int,
        offset: int,
    ) -> list[Bookmark]:
        """
        Get one window of a user's bookmarks, most recent first.

        Rows with equal created_at are ordered by id; ids are UUIDv7, so this
        follows insertion order and keeps windows stable across pages.
        """
        result = await db.execute(
            select(Bookmark)
            .options(selectinload(Bookmark.tag_objects))
            .where(Bookmark.user_id == user_id)
            .order_by(Bookmark.created_at.desc(), Bookmark.id.desc())
            .offset(offset)
            .limit(limit),
        )
        return list(result.scalars().all())

    async def count_by_user_id(self, db: AsyncSession, user_id: UUID) -> int:
        """Count all of a user's bookmarks, independent of any window."""
        result = await db.execute(
            select(func.count()).select_from(Bookmark).where(Bookmark.user_id == user_id),
        )
        return result.scalar() or 0

    async def find_by_id(self, db: AsyncSession, bookmark_id: UUID) -> Bookmark | None:
        """Get a bookmark by ID regardless of owner. Returns None if not found."""
        result = await db.execute(
            select(Bookmark)
            .options(selectinload(Bookmark.tag_objects))
            .where(Bookmark.id == bookmark_id),
        )
        return result.scalar_one_or_none()

    async def create(self, db: AsyncSession, data: dict[str, Any]) -> Bookmark:
        """
        Insert a bookmark.

        id, created_at and updated_at are assigned here; status falls back to
        PROCESSING when the data doesn't carry one.

        Note: Does not commit. Caller (session generator) handles commit at request end.
        """
        # Every column is given a value so nothing is left unloaded after the INSERT
        values = {field: data.get(field) for field in MUTABLE_FIELDS}
        if values["status"] is None:
            values["status"] = BookmarkStatus.PROCESSING

        bookmark = Bookmark(user_id=data["user_id"], **values)
        bookmark.tag_objects = []
        db.add(bookmark)
        # Single INSERT ... RETURNING; the timestamps come back via eager_defaults
        await db.flush()
        return bookmark

    async def update(
        self,
        db: AsyncSession,
        bookmark_id: UUID,
        data: dict[str, Any],
        owner_id: UUID | None = None,
    ) -> Bookmark | None:
        """
        Merge the given fields into a bookmark and refresh updated_at.

        Unknown and immutable keys (id, user_id, created_at) are ignored.
        updated_at is refreshed even when no other field changes.

        Args:
            db: Database session.
            bookmark_id: ID of the bookmark to update.
            data: Fields to set.
            owner_id: If given, the row is only updated when it still belongs to
                this user (single conditional UPDATE).

        Returns:
            The updated bookmark, or None if no row matched.
        """
        values = {key: value for key, value in data.items() if key in MUTABLE_FIELDS}
        stmt = update(Bookmark).where(Bookmark.id == bookmark_id)
        if owner_id is not None:
            stmt = stmt.where(Bookmark.user_id == owner_id)
        stmt = (
            stmt.values(**values, updated_at=func.clock_timestamp())
            .returning(Bookmark)
            .execution_options(populate_existing=True)
        )

        result = await db.execute(stmt)
        bookmark = result.scalar_one_or_none()
        if bookmark is None:
            return None
        await db.refresh(bookmark, attribute_names=["tag_objects"])
        return bookmark

    async def delete(
        self,
        db: AsyncSession,
        bookmark_id: UUID,
        owner_id: UUID | None = None,
    ) -> Bookmark | None:
        """
        Delete a bookmark and return the removed row.

        bookmark_tags rows go with it through ON DELETE CASCADE.

        Args:
            db: Database session.
            bookmark_id: ID of the bookmark to delete.
            owner_id: If given, the row is only deleted when it belongs to this
                user (single conditional DELETE).

        Returns:
            The deleted bookmark, or None if no row matched.
        """
        stmt = delete(Bookmark).where(Bookmark.id == bookmark_id)
        if owner_id is not None:
            stmt = stmt.where(Bookmark.user_id == owner_id)
        stmt = stmt.returning(Bookmark).execution_options(populate_existing=True)

        result = await db.execute(stmt)
        return result.scalar_one_or_none()

    async def set_tags(
        self,
        db: AsyncSession,
        bookmark: Bookmark,
        tag_names: list[str],
    ) -> Bookmark:
        """
        Replace a bookmark's tags using the junction table.

        Tags are created on demand in the bookmark owner's namespace.
        """
        tag_objects = await get_or_create_tags(db, bookmark.user_id, tag_names)
        await db.refresh(bookmark, attribute_names=["tag_objects"])
        bookmark.tag_objects = tag_objects
        await db.flush()
        return bookmark


bookmark_repository = BookmarkRepository()
