"""Job board interactions: save, apply, create/update and delete.

Each operation checks the viewer's account kind and ownership before any
write is issued, performs its mutation, and commits. Failures roll the
session back and surface as MutationError; nothing is retried.

These guards are conveniences for well-behaved clients. Row-level access
rules on the database are still required for a hostile one.
"""

import logging
from datetime import datetime
from uuid import UUID

from sqlalchemy import delete
from sqlalchemy.sql.expression import Executable
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from collabmarket.config import settings
from collabmarket.exceptions import (
    AuthorizationError,
    DuplicateError,
    MutationError,
    NotFoundError,
)
from collabmarket.models import JobApplication, JobPosting, Profile, SavedJob
from collabmarket.schemas.job_posting import JobListing, JobPostingForm
from collabmarket.services.listings import flatten_listing, get_posting
from collabmarket.session import Viewer, require_viewer
from collabmarket.utils.deadlines import is_expired
from collabmarket.utils.slugs import generate_slug

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ("title", "description", "has_deadline", "deadline_date", "deadline_time")


def check_can_interact(viewer: Viewer | None, owner_profile_id: UUID) -> Viewer:
    """Save and apply are for content creators on postings they don't own.

    Raises:
        AuthorizationError: If the viewer is anonymous, a business owner, or
            the posting's owner
    """
    viewer = require_viewer(viewer)
    if not viewer.is_content_creator:
        raise AuthorizationError("Only content creators can save or apply to postings")
    if viewer.profile_id == owner_profile_id:
        raise AuthorizationError("You cannot save or apply to your own posting")
    return viewer


def check_owner(viewer: Viewer | None, owner_profile_id: UUID) -> Viewer:
    """Raise AuthorizationError unless the viewer owns the posting."""
    viewer = require_viewer(viewer)
    if viewer.profile_id != owner_profile_id:
        raise AuthorizationError("Only the poster can change this posting")
    return viewer


async def _mutate(
    db: AsyncSession,
    action: str,
    *statements: Executable,
    conflict: str | None = None,
) -> None:
    """Run the pending writes and commit, rolling back on any failure.

    Args:
        db: Database session holding any added objects
        action: Description used in logs and error messages
        statements: Extra statements to execute before committing
        conflict: Message for a unique-constraint violation
    """
    try:
        for statement in statements:
            await db.execute(statement)
        await db.commit()
    except IntegrityError as e:
        await db.rollback()
        logger.error(f"Failed to {action}: {e}")
        raise DuplicateError(conflict or f"Failed to {action}: conflicting record") from e
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(f"Failed to {action}: {e}")
        raise MutationError(f"Failed to {action}") from e


async def toggle_save(
    db: AsyncSession,
    viewer: Viewer | None,
    job_id: UUID,
    currently_saved: bool,
) -> bool:
    """Bookmark or un-bookmark a posting for the viewer.

    Args:
        db: Database session
        viewer: Current viewer
        job_id: Posting to toggle
        currently_saved: The saved state the viewer is toggling from

    Returns:
        The new saved state

    Raises:
        AuthorizationError: If the viewer may not save this posting
        NotFoundError: If the posting does not exist
        MutationError: If the write fails
    """
    viewer = require_viewer(viewer)
    if not viewer.is_content_creator:
        raise AuthorizationError("Only content creators can save postings")

    posting = await get_posting(db, job_id)
    check_can_interact(viewer, posting.profile_id)

    if currently_saved:
        await _mutate(
            db,
            "unsave job posting",
            delete(SavedJob).where(
                SavedJob.profile_id == viewer.profile_id,
                SavedJob.job_posting_id == job_id,
            ),
        )
        logger.info(f"Profile {viewer.profile_id} unsaved job {job_id}")
        return False

    db.add(SavedJob(profile_id=viewer.profile_id, job_posting_id=job_id))
    await _mutate(db, "save job posting", conflict="Job posting is already saved")
    logger.info(f"Profile {viewer.profile_id} saved job {job_id}")
    return True


async def apply_to_job(
    db: AsyncSession,
    viewer: Viewer | None,
    job_id: UUID,
    now: datetime | None = None,
) -> JobApplication:
    """Record the viewer's application to a posting.

    Raises:
        AuthorizationError: If the viewer may not apply, or the deadline passed
        NotFoundError: If the posting does not exist
        DuplicateError: If the viewer already applied
        MutationError: If the write fails
    """
    viewer = require_viewer(viewer)
    if not viewer.is_content_creator:
        raise AuthorizationError("Only content creators can apply to postings")

    posting = await get_posting(db, job_id)
    check_can_interact(viewer, posting.profile_id)

    if is_expired(posting.has_deadline, posting.deadline_date, posting.deadline_time, now):
        logger.warning(f"Profile {viewer.profile_id} tried to apply to expired job {job_id}")
        raise AuthorizationError("The deadline for this posting has passed")

    application = JobApplication(profile_id=viewer.profile_id, job_posting_id=job_id)
    db.add(application)
    await _mutate(
        db,
        "apply to job posting",
        conflict="You have already applied to this posting",
    )

    logger.info(f"Profile {viewer.profile_id} applied to job {job_id}")
    return application


async def create_or_update(
    db: AsyncSession,
    viewer: Viewer | None,
    form: JobPostingForm,
    edit_target_id: UUID | None = None,
) -> JobListing:
    """Create a posting, or edit one when an edit target is given.

    On create the slug is generated from the title with a random suffix and
    the posting is owned by the viewer's profile. On edit only the title,
    description and deadline fields change.

    Raises:
        AuthorizationError: If the viewer is not a business owner (create)
            or not the owner (edit)
        NotFoundError: If the edit target or the viewer's profile is missing
        MutationError: If the write fails
    """
    viewer = require_viewer(viewer)

    if edit_target_id is not None:
        posting = await get_posting(db, edit_target_id)
        check_owner(viewer, posting.profile_id)

        for field in EDITABLE_FIELDS:
            setattr(posting, field, getattr(form, field))
        await _mutate(db, "update job posting")

        logger.info(f"Updated job {posting.id}: {posting.title}")
        return flatten_listing(posting)

    if not viewer.is_business_owner:
        raise AuthorizationError("Only business owners can create postings")

    profile = await db.get(Profile, viewer.profile_id)
    if profile is None:
        raise NotFoundError(f"Profile {viewer.profile_id} not found")

    posting = JobPosting(
        profile=profile,
        slug=generate_slug(form.title, settings.slug_suffix_length),
        **form.model_dump(include=set(EDITABLE_FIELDS)),
    )
    db.add(posting)
    await _mutate(db, "create job posting")

    logger.info(f"Created job {posting.id}: {posting.title} ({posting.slug})")
    return flatten_listing(posting)


async def delete_job(db: AsyncSession, viewer: Viewer | None, job_id: UUID) -> None:
    """Hard-delete a posting with its bookmarks and applications.

    Callers confirm with the user first; deletion cannot be undone.

    Raises:
        AuthorizationError: If the viewer does not own the posting
        NotFoundError: If the posting does not exist
        MutationError: If the write fails
    """
    viewer = require_viewer(viewer)
    posting = await get_posting(db, job_id)
    check_owner(viewer, posting.profile_id)

    await _mutate(
        db,
        "delete job posting",
        delete(SavedJob).where(SavedJob.job_posting_id == job_id),
        delete(JobApplication).where(JobApplication.job_posting_id == job_id),
        delete(JobPosting).where(JobPosting.id == job_id),
    )

    logger.info(f"Deleted job {job_id}")
