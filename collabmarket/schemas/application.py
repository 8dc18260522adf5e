"""Job application schemas."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel


class ApplicationResponse(BaseModel):
    """Schema for a recorded application."""

    id: UUID
    profile_id: UUID
    job_posting_id: UUID
    created_at: datetime

    class Config:
        from_attributes = True


class Applicant(BaseModel):
    """Applicant profile as listed to the posting's owner."""

    id: UUID
    username: str
    first_name: str
    last_name: str
    profile_photo: str | None = None
    city: str
    country: str
    created_at: datetime
