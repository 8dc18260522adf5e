"""Job posting Pydantic schemas.

This module defines the posting form used for create and edit, the flat
listing record every fetch path produces, and the response envelopes for
the job board endpoints.
"""

from datetime import date, datetime, time
from uuid import UUID

from pydantic import BaseModel, Field, field_validator, model_validator


class JobPostingForm(BaseModel):
    """Editable fields of a posting, shared by create and update."""

    title: str = Field(..., min_length=1, max_length=255)
    description: str = Field(..., min_length=1)
    has_deadline: bool = False
    deadline_date: date | None = None
    deadline_time: time | None = None

    @field_validator("title", "description")
    @classmethod
    def not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be blank")
        return value

    @model_validator(mode="after")
    def check_deadline(self) -> "JobPostingForm":
        """Require a date when the deadline is on, drop both when it is off."""
        if not self.has_deadline:
            self.deadline_date = None
            self.deadline_time = None
        elif self.deadline_date is None:
            raise ValueError("deadline_date is required when has_deadline is set")
        return self


class JobListing(BaseModel):
    """Display-ready posting with the poster's profile flattened in.

    is_saved is relative to the viewer the listing was loaded for and is
    not part of the stored record.
    """

    id: UUID
    title: str
    description: str
    has_deadline: bool
    deadline_date: date | None = None
    deadline_time: time | None = None
    created_at: datetime
    profile_id: UUID
    slug: str

    # Poster
    user_id: str
    username: str
    first_name: str
    last_name: str
    profile_photo: str | None = None
    city: str
    country: str
    user_type: str

    is_saved: bool = False

    @property
    def poster_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


class JobListingView(JobListing):
    """Listing with the per-viewer presentation flags."""

    is_owner: bool = False
    is_expired: bool = False


class JobListingDetail(JobListingView):
    """Single posting as shown on its slug page."""

    is_applied: bool = False


class JobListResponse(BaseModel):
    """Filtered job board with the filter bar counters."""

    total: int = Field(description="Postings before filtering")
    filtered: int = Field(description="Postings after filtering")
    mine: int = Field(description="Postings owned by the viewer")
    jobs: list[JobListingView]


class SaveStateResponse(BaseModel):
    """Saved state of a posting after a save or unsave."""

    job_id: UUID
    is_saved: bool
