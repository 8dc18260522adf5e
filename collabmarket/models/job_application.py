"""JobApplication model.

Applications cannot be withdrawn: a row's existence means the profile
applied. The (profile, posting) pair is unique so a repeated apply is
rejected by the database rather than recorded twice.
"""

from uuid import UUID, uuid4

from sqlalchemy import ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, TimestampMixin
from .profile import Profile


class JobApplication(Base, TimestampMixin):
    """Application of a content creator to a job posting."""

    __tablename__ = "job_applications"

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

    # Applicant profile, used by the owner's applicant list
    profile: Mapped[Profile] = relationship(lazy="joined")

    __table_args__ = (
        UniqueConstraint(
            "profile_id", "job_posting_id", name="uq_job_applications_pair"
        ),
    )

    def __repr__(self) -> str:
        return (
            f"<JobApplication(profile_id={self.profile_id}, "
            f"job_posting_id={self.job_posting_id})>"
        )
