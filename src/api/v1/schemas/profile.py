"""Pydantic schemas for Profile API."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from domain.entities.profile import Profile


class ProfileResponse(BaseModel):
    """Schema for the caller's profile."""

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "id": "123e4567-e89b-12d3-a456-426614174000",
                "username": "Taro Yamada",
                "avatar_url": None,
                "email": "taro@example.com",
                "created_at": "2026-01-28T10:00:00",
            }
        },
    )

    id: UUID
    username: str
    avatar_url: str | None = None
    email: str | None = None
    created_at: datetime

    @classmethod
    def from_entity(cls, profile: Profile, email: str | None = None) -> "ProfileResponse":
        return cls(
            id=profile.id,
            username=profile.username,
            avatar_url=profile.avatar_url,
            email=email or None,
            created_at=profile.created_at,
        )


class ProfileDetailResponse(BaseModel):
    data: ProfileResponse


class UsernameUpdate(BaseModel):
    """Schema for changing the username. Surrounding whitespace is trimmed."""

    username: str = Field(..., max_length=100)
