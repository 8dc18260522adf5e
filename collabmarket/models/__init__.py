"""Database models for Collab Market."""

from .base import Base
from .job_application import JobApplication
from .job_posting import JobPosting
from .profile import BUSINESS_OWNER, CONTENT_CREATOR, USER_TYPES, Profile
from .saved_job import SavedJob

__all__ = [
    "Base",
    "Profile",
    "JobPosting",
    "SavedJob",
    "JobApplication",
    "CONTENT_CREATOR",
    "BUSINESS_OWNER",
    "USER_TYPES",
]
