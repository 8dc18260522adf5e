"""SavedJob model: a viewer's bookmark on a job posting."""

from uuid import UUID, uuid4

from sqlalchemy import ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, TimestampMixin


class SavedJob(Base, TimestampMixin):
    """Presence-only join row between a content creator and a posting."""

    __tablename__ = "saved_jobs"

    id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    profile_id: Mapped[UUID] = mapped_column(
        ForeignKey("profiles.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    job_posting_id: Mapped[UUID] = mapped_column(
        ForeignKey("job_postings.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    __table_args__ = (
        UniqueConstraint("profile_id", "job_posting_id", name="uq_saved_jobs_pair"),
    )

    def __repr__(self) -> str:
        return f"<SavedJob(profile_id={self.profile_id}, job_posting_id={self.job_posting_id})>"
