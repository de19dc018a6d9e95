"""Pydantic schemas for bookmark endpoints."""
from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from models.bookmark import BookmarkStatus
from schemas.validators import (
    validate_and_normalize_tags,
    validate_content_length,
    validate_summary_length,
    validate_title_length,
    validate_url,
)


class BookmarkCreate(BaseModel):
    """
    Schema for creating a new bookmark.

    `title` may be omitted or empty; the service then uses the URL as the title.
    The owner is never part of the payload - it comes from the authenticated user.
    """

    model_config = ConfigDict(extra="forbid")

    url: str
    title: str | None = None
    tags: list[str] = []

    @field_validator("url")
    @classmethod
    def check_url(cls, v: str) -> str:
        """Validate URL format and length."""
        return validate_url(v)

    @field_validator("title")
    @classmethod
    def check_title_length(cls, v: str | None) -> str | None:
        """Validate title length."""
        return validate_title_length(v)

    @field_validator("tags", mode="before")
    @classmethod
    def normalize_tags(cls, v: list[str] | None) -> list[str]:
        """Normalize and validate tags."""
        if v is None:
            return []
        return validate_and_normalize_tags(v)


class BookmarkUpdate(BaseModel):
    """
    Schema for partially updating a bookmark.

    Only fields present in the request body are applied (`exclude_unset`).
    `url`, `title` and `status` are required columns, so an explicit null is
    rejected for them; the optional text fields accept null to clear a value.
    """

    model_config = ConfigDict(extra="forbid")

    url: str | None = None
    title: str | None = Field(default=None, min_length=1)
    content: str | None = None
    summary: str | None = None
    og_image: str | None = None
    og_description: str | None = None
    status: BookmarkStatus | None = None
    tags: list[str] | None = None

    @model_validator(mode="before")
    @classmethod
    def reject_null_required_fields(cls, data: Any) -> Any:
        """Reject explicit nulls for columns that cannot be null."""
        if isinstance(data, dict):
            for field in ("url", "title", "status"):
                if field in data and data[field] is None:
                    raise ValueError(f"{field} cannot be null")
        return data

    @field_validator("url")
    @classmethod
    def check_url(cls, v: str | None) -> str | None:
        """Validate URL format and length."""
        if v is None:
            return v
        return validate_url(v)

    @field_validator("og_image")
    @classmethod
    def check_og_image(cls, v: str | None) -> str | None:
        """Validate Open-Graph image URL."""
        if v is None:
            return v
        return validate_url(v, field_name="og_image")

    @field_validator("title")
    @classmethod
    def check_title_length(cls, v: str | None) -> str | None:
        """Validate title length."""
        return validate_title_length(v)

    @field_validator("content")
    @classmethod
    def check_content_length(cls, v: str | None) -> str | None:
        """Validate content length."""
        return validate_content_length(v)

    @field_validator("summary")
    @classmethod
    def check_summary_length(cls, v: str | None) -> str | None:
        """Validate summary length."""
        return validate_summary_length(v)

    @field_validator("tags", mode="before")
    @classmethod
    def normalize_tags(cls, v: list[str] | None) -> list[str] | None:
        """Normalize and validate tags if provided."""
        if v is None:
            return None
        return validate_and_normalize_tags(v)


class BookmarkResponse(BaseModel):
    """Schema for bookmark responses."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    user_id: UUID
    url: str
    title: str
    content: str | None
    summary: str | None
    og_image: str | None
    og_description: str | None
    status: BookmarkStatus
    tags: list[str] = []
    created_at: datetime
    updated_at: datetime

    @model_validator(mode="before")
    @classmethod
    def extract_tag_names(cls, data: Any) -> Any:
        """
        Extract tag names from tag_objects relationship.

        Only accesses tag_objects if it's already loaded (not lazy) to avoid
        triggering database queries outside async context.
        """
        if hasattr(data, "__dict__") and not isinstance(data, dict):
            data_dict = {}
            for key in [
                "id", "user_id", "url", "title", "content", "summary",
                "og_image", "og_description", "status", "created_at", "updated_at",
            ]:
                if hasattr(data, key):
                    data_dict[key] = getattr(data, key)

            # SQLAlchemy sets the __dict__ entry when the relationship is loaded
            if "tag_objects" in data.__dict__ and data.__dict__["tag_objects"] is not None:
                data_dict["tags"] = sorted(tag.name for tag in data.__dict__["tag_objects"])
            else:
                data_dict["tags"] = []

            return data_dict
        return data


class BookmarkListResponse(BaseModel):
    """Schema for a page of bookmarks."""

    bookmarks: list[BookmarkResponse]
    total: int
    page: int
    limit: int
