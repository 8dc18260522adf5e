"""Profile model for marketplace accounts.

A profile is created once per identity-provider user during onboarding and
carries the account kind that gates which job-board actions are available.
"""

from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy import Boolean, String
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, TimestampMixin

CONTENT_CREATOR = "content_creator"
BUSINESS_OWNER = "business_owner"
USER_TYPES = (CONTENT_CREATOR, BUSINESS_OWNER)


class Profile(Base, TimestampMixin):
    """Content creator or business owner profile."""

    __tablename__ = "profiles"

    # Primary Key - UUID
    id: Mapped[UUID] = mapped_column(
        primary_key=True,
        default=uuid4,
        nullable=False,
    )

    # Identity-provider user id
    user_id: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        unique=True,
        index=True,
    )
    user_type: Mapped[str] = mapped_column(String(32), nullable=False)

    # Public identity
    username: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
        unique=True,
        index=True,
    )
    first_name: Mapped[str] = mapped_column(String(255), nullable=False)
    last_name: Mapped[str] = mapped_column(String(255), nullable=False)
    phone_number: Mapped[Optional[str]] = mapped_column(
        String(32),
        nullable=True,
        unique=True,
    )
    profile_photo: Mapped[Optional[str]] = mapped_column(String(1024), nullable=True)

    # Location
    city: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    country: Mapped[str] = mapped_column(String(255), nullable=False, default="")

    # Content creator channels
    instagram_url: Mapped[Optional[str]] = mapped_column(String(1024), nullable=True)
    youtube_url: Mapped[Optional[str]] = mapped_column(String(1024), nullable=True)
    tiktok_url: Mapped[Optional[str]] = mapped_column(String(1024), nullable=True)

    # Directory visibility
    is_public: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    open_to_collaborate: Mapped[bool] = mapped_column(
        Boolean,
        default=False,
        nullable=False,
    )

    @property
    def is_content_creator(self) -> bool:
        return self.user_type == CONTENT_CREATOR

    @property
    def is_business_owner(self) -> bool:
        return self.user_type == BUSINESS_OWNER

    def __repr__(self) -> str:
        return f"<Profile(username='{self.username}', user_type='{self.user_type}')>"
