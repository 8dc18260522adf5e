"""JobPosting model for collaboration opportunities."""

from datetime import date, time
from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy import Boolean, Date, ForeignKey, String, Text, Time
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, TimestampMixin
from .profile import Profile


class JobPosting(Base, TimestampMixin):
    """Collaboration opportunity posted by a business owner.

    Ownership (profile_id) and slug are fixed at creation; only the title,
    description and deadline fields are editable afterwards.
    """

    __tablename__ = "job_postings"

    # Primary Key - UUID
    id: Mapped[UUID] = mapped_column(
        primary_key=True,
        default=uuid4,
        nullable=False,
    )

    # Owning profile
    profile_id: Mapped[UUID] = mapped_column(
        ForeignKey("profiles.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    # Content
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)

    # Deadline (time is optional, absent means end of day)
    has_deadline: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    deadline_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    deadline_time: Mapped[Optional[time]] = mapped_column(Time, nullable=True)

    # URL identifier
    slug: Mapped[str] = mapped_column(
        String(320),
        nullable=False,
        unique=True,
        index=True,
    )

    # Poster profile, always fetched with the posting
    profile: Mapped[Profile] = relationship(lazy="joined", innerjoin=True)

    def __repr__(self) -> str:
        return f"<JobPosting(slug='{self.slug}', title='{self.title}')>"
