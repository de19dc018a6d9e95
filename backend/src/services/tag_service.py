"""
Per-user tags.

Tags live in their owner's namespace: two users may both have a 'python' tag,
and every lookup here is filtered by user_id.
"""
import logging
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from models.tag import Tag, bookmark_tags
from schemas.tag import TagCount
from schemas.validators import validate_and_normalize_tags

logger = logging.getLogger(__name__)


class TagNotFoundError(Exception):
    """The user has no tag with this name."""

    def __init__(self, tag_name: str) -> None:
        self.tag_name = tag_name
        super().__init__(f"Tag '{tag_name}' not found")


async def get_or_create_tags(
    db: AsyncSession,
    user_id: UUID,
    tag_names: list[str],
) -> list[Tag]:
    """
    Resolve names to the user's Tag rows, inserting the ones that are missing.

    Names are normalized first; the result follows the order of the
    normalized, deduplicated names.
    """
    names = validate_and_normalize_tags(tag_names)
    if not names:
        return []

    result = await db.execute(
        select(Tag).where(Tag.user_id == user_id, Tag.name.in_(names)),
    )
    by_name = {tag.name: tag for tag in result.scalars()}

    missing = [Tag(user_id=user_id, name=name) for name in names if name not in by_name]
    if missing:
        db.add_all(missing)
        await db.flush()
        by_name.update((tag.name, tag) for tag in missing)

    return [by_name[name] for name in names]


async def get_user_tags_with_counts(
    db: AsyncSession,
    user_id: UUID,
    include_zero_count: bool = True,
) -> list[TagCount]:
    """
    List the user's tags with how many of their bookmarks carry each one.

    Sorted by count (highest first), then name. Tags attached to no bookmark
    are included with count 0 unless include_zero_count is False.
    """
    usage = (
        select(bookmark_tags.c.tag_id, func.count().label("n"))
        .group_by(bookmark_tags.c.tag_id)
        .subquery()
    )
    count = func.coalesce(usage.c.n, 0)
    stmt = (
        select(Tag.name, count.label("count"))
        .outerjoin(usage, usage.c.tag_id == Tag.id)
        .where(Tag.user_id == user_id)
        .order_by(count.desc(), Tag.name)
    )
    if not include_zero_count:
        stmt = stmt.where(usage.c.n.is_not(None))

    result = await db.execute(stmt)
    return [TagCount(name=name, count=n) for name, n in result.all()]


async def get_tag_by_name(
    db: AsyncSession,
    user_id: UUID,
    tag_name: str,
) -> Tag | None:
    """Find one of the user's tags; the name is normalized before lookup."""
    result = await db.execute(
        select(Tag).where(Tag.user_id == user_id, Tag.name == tag_name.strip().lower()),
    )
    return result.scalar_one_or_none()


async def delete_tag(
    db: AsyncSession,
    user_id: UUID,
    tag_name: str,
) -> None:
    """
    Delete one of the user's tags.

    Its bookmark_tags rows go with it (ON DELETE CASCADE); the bookmarks stay.

    Raises:
        TagNotFoundError: If the user has no such tag.
    """
    tag = await get_tag_by_name(db, user_id, tag_name)
    if tag is None:
        raise TagNotFoundError(tag_name.strip().lower())

    await db.delete(tag)
    await db.flush()
    logger.info("Deleted tag %s for user %s", tag.name, user_id)
