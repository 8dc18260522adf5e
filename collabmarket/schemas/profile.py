"""Profile and creator directory schemas."""

from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

USERNAME_PATTERN = r"^[A-Za-z0-9_]+$"
PHONE_PATTERN = r"^\+?[0-9]{8,15}$"


class ProfileCreate(BaseModel):
    """Onboarding submission for the authenticated user."""

    user_type: Literal["content_creator", "business_owner"]
    username: str = Field(..., min_length=3, max_length=64, pattern=USERNAME_PATTERN)
    first_name: str = Field(..., min_length=1, max_length=255)
    last_name: str = Field(..., min_length=1, max_length=255)
    phone_number: str | None = Field(None, pattern=PHONE_PATTERN)
    profile_photo: str | None = Field(None, max_length=1024)
    city: str = Field("", max_length=255)
    country: str = Field("", max_length=255)
    instagram_url: str | None = Field(None, max_length=1024)
    youtube_url: str | None = Field(None, max_length=1024)
    tiktok_url: str | None = Field(None, max_length=1024)
    is_public: bool = True
    open_to_collaborate: bool = False

    @field_validator("phone_number", mode="before")
    @classmethod
    def blank_phone_is_none(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value


class ProfileResponse(BaseModel):
    """Schema for a full profile."""

    id: UUID
    user_id: str
    user_type: str
    username: str
    first_name: str
    last_name: str
    phone_number: str | None
    profile_photo: str | None
    city: str
    country: str
    instagram_url: str | None
    youtube_url: str | None
    tiktok_url: str | None
    is_public: bool
    open_to_collaborate: bool
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class CreatorResponse(BaseModel):
    """Public directory card for a content creator."""

    id: UUID
    username: str
    first_name: str
    last_name: str
    profile_photo: str | None
    city: str
    country: str
    instagram_url: str | None
    youtube_url: str | None
    tiktok_url: str | None
    open_to_collaborate: bool

    class Config:
        from_attributes = True


class AvailabilityResponse(BaseModel):
    """Uniqueness check results for onboarding fields."""

    username: bool | None = None
    phone_number: bool | None = None
