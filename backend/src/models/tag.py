"""Tags and the bookmark/tag association table."""
from datetime import datetime
from typing import TYPE_CHECKING
from uuid import UUID

from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Index,
    String,
    Table,
    UniqueConstraint,
    func,
)
from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from models.base import Base, UUIDv7Mixin

if TYPE_CHECKING:
    from models.bookmark import Bookmark
    from models.user import User


def _cascading_fk(name: str, target: str) -> Column:
    return Column(
        name,
        PG_UUID(as_uuid=True),
        ForeignKey(target, ondelete="CASCADE"),
        primary_key=True,
    )


# One row per (bookmark, tag) pair; removing either side removes the pair
bookmark_tags = Table(
    "bookmark_tags",
    Base.metadata,
    _cascading_fk("bookmark_id", "bookmarks.id"),
    _cascading_fk("tag_id", "tags.id"),
    # The composite PK leads with bookmark_id; this serves tag-side lookups
    Index("ix_bookmark_tags_tag_id", "tag_id"),
)


class Tag(Base, UUIDv7Mixin):
    """A label in one user's namespace. Names repeat across users, never within one."""

    __tablename__ = "tags"
    __table_args__ = (
        UniqueConstraint("user_id", "name", name="uq_tags_user_id_name"),
        CheckConstraint(
            "name ~ '^[a-z0-9]+(-[a-z0-9]+)*$'",
            name="ck_tags_name_format",
        ),
    )

    user_id: Mapped[UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        index=True,
    )
    name: Mapped[str] = mapped_column(String(100))
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.clock_timestamp(),
    )

    user: Mapped["User"] = relationship(back_populates="tags")
    bookmarks: Mapped[list["Bookmark"]] = relationship(
        secondary=bookmark_tags,
        back_populates="tag_objects",
        passive_deletes=True,
    )
