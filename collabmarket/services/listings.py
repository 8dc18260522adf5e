"""Job listing materializer.

Fetches job postings together with their poster's profile, flattens every
row into one canonical JobListing shape, and annotates per-viewer flags.
Every read path of the job board (list, slug page, applicants) goes
through this module.
"""

import logging
from datetime import datetime
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from collabmarket.exceptions import AuthorizationError, FetchError, NotFoundError
from collabmarket.models import JobApplication, JobPosting, SavedJob
from collabmarket.schemas.application import Applicant
from collabmarket.schemas.job_posting import (
    JobListing,
    JobListingDetail,
    JobListingView,
)
from collabmarket.session import Viewer
from collabmarket.utils.deadlines import is_expired

logger = logging.getLogger(__name__)


def flatten_listing(posting: JobPosting, is_saved: bool = False) -> JobListing:
    """Map a posting row with its joined profile to a JobListing.

    Args:
        posting: JobPosting with its profile relationship loaded
        is_saved: Whether the viewer has bookmarked the posting

    Returns:
        Flat listing record
    """
    poster = posting.profile
    return JobListing(
        id=posting.id,
        title=posting.title,
        description=posting.description,
        has_deadline=posting.has_deadline,
        deadline_date=posting.deadline_date,
        deadline_time=posting.deadline_time,
        created_at=posting.created_at,
        profile_id=posting.profile_id,
        slug=posting.slug,
        user_id=poster.user_id,
        username=poster.username,
        first_name=poster.first_name,
        last_name=poster.last_name,
        profile_photo=poster.profile_photo,
        city=poster.city,
        country=poster.country,
        user_type=poster.user_type,
        is_saved=is_saved,
    )


def is_owner(listing: JobListing, viewer: Viewer | None) -> bool:
    return viewer is not None and listing.user_id == viewer.user_id


def listing_expired(listing: JobListing, now: datetime | None = None) -> bool:
    return is_expired(
        listing.has_deadline,
        listing.deadline_date,
        listing.deadline_time,
        now,
    )


def annotate(
    listing: JobListing,
    viewer: Viewer | None,
    now: datetime | None = None,
) -> JobListingView:
    """Add the owner and expiry flags the presentation layer needs."""
    return JobListingView(
        **listing.model_dump(),
        is_owner=is_owner(listing, viewer),
        is_expired=listing_expired(listing, now),
    )


async def saved_job_ids(db: AsyncSession, viewer: Viewer) -> set[UUID]:
    """Ids of the postings the viewer has bookmarked."""
    result = await db.execute(
        select(SavedJob.job_posting_id).where(SavedJob.profile_id == viewer.profile_id)
    )
    return set(result.scalars().all())


async def applied_job_ids(db: AsyncSession, viewer: Viewer) -> set[UUID]:
    """Ids of the postings the viewer has applied to."""
    result = await db.execute(
        select(JobApplication.job_posting_id).where(
            JobApplication.profile_id == viewer.profile_id
        )
    )
    return set(result.scalars().all())


async def load_listings(db: AsyncSession, viewer: Viewer | None = None) -> list[JobListing]:
    """Load every posting, newest first, flagged with the viewer's bookmarks.

    Saved flags are only looked up for content creators; everyone else gets
    is_saved=False on every listing.

    Args:
        db: Database session
        viewer: Current viewer, if signed in

    Returns:
        Listings ordered by creation time descending

    Raises:
        FetchError: If either query fails
    """
    try:
        result = await db.execute(
            select(JobPosting).order_by(JobPosting.created_at.desc(), JobPosting.id)
        )
        postings = result.scalars().all()

        saved_ids: set[UUID] = set()
        if viewer is not None and viewer.is_content_creator:
            saved_ids = await saved_job_ids(db, viewer)

    except SQLAlchemyError as e:
        logger.error(f"Failed to load job postings: {e}")
        raise FetchError("Failed to load job postings") from e

    listings = [flatten_listing(p, is_saved=p.id in saved_ids) for p in postings]
    logger.info(f"Loaded {len(listings)} job postings ({len(saved_ids)} saved by viewer)")
    return listings


async def get_posting(db: AsyncSession, job_id: UUID) -> JobPosting:
    """Fetch a posting row with its poster profile.

    Raises:
        NotFoundError: If no posting has this id
        FetchError: If the query fails
    """
    try:
        result = await db.execute(select(JobPosting).where(JobPosting.id == job_id))
        posting = result.scalar_one_or_none()
    except SQLAlchemyError as e:
        logger.error(f"Failed to fetch job posting {job_id}: {e}")
        raise FetchError("Failed to load job posting") from e

    if posting is None:
        raise NotFoundError(f"Job posting {job_id} not found")
    return posting


async def get_listing_by_slug(
    db: AsyncSession,
    slug: str,
    viewer: Viewer | None = None,
    now: datetime | None = None,
) -> JobListingDetail:
    """Load the posting behind a slug with the viewer's saved/applied state.

    Raises:
        NotFoundError: If the slug is unknown (e.g. a stale link)
        FetchError: If a query fails
    """
    try:
        result = await db.execute(select(JobPosting).where(JobPosting.slug == slug))
        posting = result.scalar_one_or_none()
        if posting is None:
            raise NotFoundError(f"Job posting '{slug}' not found")

        is_saved = is_applied = False
        if viewer is not None and viewer.is_content_creator:
            is_saved = posting.id in await saved_job_ids(db, viewer)
            is_applied = posting.id in await applied_job_ids(db, viewer)

    except SQLAlchemyError as e:
        logger.error(f"Failed to fetch job posting '{slug}': {e}")
        raise FetchError("Failed to load job posting") from e

    listing = flatten_listing(posting, is_saved=is_saved)
    return JobListingDetail(
        **annotate(listing, viewer, now).model_dump(),
        is_applied=is_applied,
    )


async def list_applicants(
    db: AsyncSession,
    viewer: Viewer | None,
    job_id: UUID,
) -> list[Applicant]:
    """List the applicants of a posting, newest application first.

    Only the posting's owner may see its applicants.

    Raises:
        AuthorizationError: If the viewer does not own the posting
        NotFoundError: If the posting does not exist
        FetchError: If a query fails
    """
    if viewer is None:
        raise AuthorizationError("Sign in to view applicants")

    posting = await get_posting(db, job_id)
    if posting.profile_id != viewer.profile_id:
        logger.warning(f"Profile {viewer.profile_id} denied applicants of {job_id}")
        raise AuthorizationError("Only the poster can view applicants")

    try:
        result = await db.execute(
            select(JobApplication)
            .where(JobApplication.job_posting_id == job_id)
            .order_by(JobApplication.created_at.desc())
        )
        applications = result.scalars().all()
    except SQLAlchemyError as e:
        logger.error(f"Failed to fetch applicants for {job_id}: {e}")
        raise FetchError("Failed to load applicants") from e

    applicants = []
    for application in applications:
        profile = application.profile
        if profile is None:
            logger.error(f"Missing profile for application {application.id}")
            continue
        applicants.append(
            Applicant(
                id=profile.id,
                username=profile.username,
                first_name=profile.first_name,
                last_name=profile.last_name,
                profile_photo=profile.profile_photo,
                city=profile.city,
                country=profile.country,
                created_at=application.created_at,
            )
        )
    return applicants
