"""Pydantic schemas for user endpoints."""
from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict


class UserResponse(BaseModel):
    """The authenticated caller as stored locally."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    auth0_id: str
    email: str | None
    created_at: datetime
