"""Bookmark model for storing user bookmarks."""
from enum import StrEnum
from typing import TYPE_CHECKING
from uuid import UUID

from sqlalchemy import Enum, ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from models.base import Base, TimestampMixin, UUIDv7Mixin
from models.tag import bookmark_tags

if TYPE_CHECKING:
    from models.tag import Tag
    from models.user import User


class BookmarkStatus(StrEnum):
    """
    Processing state of a bookmark.

    Bookmarks start as PROCESSING and are moved to COMPLETED or FAILED by the
    ingestion pipeline (summaries, Open-Graph metadata). The API only persists
    whatever value an update supplies.
    """

    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


class Bookmark(Base, UUIDv7Mixin, TimestampMixin):
    """Bookmark model - stores URLs with metadata, enrichment results and tags."""

    __tablename__ = "bookmarks"
    __table_args__ = (
        # Serves the paginated "my bookmarks, newest first" query
        Index("ix_bookmarks_user_id_created_at", "user_id", "created_at"),
    )
    __mapper_args__ = {"eager_defaults": True}

    # id provided by UUIDv7Mixin
    user_id: Mapped[UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        index=True,
    )
    url: Mapped[str] = mapped_column(String(2048), nullable=False)
    # Client titles are capped at MAX_TITLE_LENGTH; a defaulted title is the URL
    title: Mapped[str] = mapped_column(String(2048), nullable=False)
    content: Mapped[str | None] = mapped_column(Text, nullable=True)
    summary: Mapped[str | None] = mapped_column(Text, nullable=True)  # AI-generated
    og_image: Mapped[str | None] = mapped_column(Text, nullable=True)
    og_description: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[BookmarkStatus] = mapped_column(
        Enum(
            BookmarkStatus,
            name="bookmark_status",
            values_callable=lambda enum_cls: [member.value for member in enum_cls],
        ),
        nullable=False,
        default=BookmarkStatus.PROCESSING,
        server_default=BookmarkStatus.PROCESSING.value,
        index=True,
    )

    user: Mapped["User"] = relationship(back_populates="bookmarks")
    tag_objects: Mapped[list["Tag"]] = relationship(
        secondary=bookmark_tags,
        back_populates="bookmarks",
        passive_deletes=True,
    )
