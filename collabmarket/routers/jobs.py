"""Jobs API router.

This module provides REST endpoints for the job board: listing with
filters, slug pages, posting management for business owners, and
save/apply actions for content creators.
"""

import logging
from datetime import datetime
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from collabmarket.database import get_db
from collabmarket.exceptions import CollabMarketError
from collabmarket.routers.errors import http_error
from collabmarket.schemas.application import Applicant, ApplicationResponse
from collabmarket.schemas.job_posting import (
    JobListingDetail,
    JobListingView,
    JobListResponse,
    JobPostingForm,
    SaveStateResponse,
)
from collabmarket.services import interactions
from collabmarket.services.filters import FilterState, apply_filters, count_mine
from collabmarket.services.listings import (
    annotate,
    get_listing_by_slug,
    list_applicants,
    load_listings,
)
from collabmarket.session import Viewer, get_viewer

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/jobs", tags=["jobs"])


@router.get(
    "",
    response_model=JobListResponse,
    summary="List job postings"
)
async def list_jobs(
    q: str = Query("", description="Search title, description, city and poster name"),
    country: str = Query("", description="Exact country name"),
    saved_only: bool = Query(False, description="Only postings the viewer saved"),
    mine_only: bool = Query(False, description="Only postings the viewer created"),
    db: AsyncSession = Depends(get_db),
    viewer: Viewer | None = Depends(get_viewer),
) -> JobListResponse:
    """List all postings, newest first, narrowed by the filter bar.

    Args:
        q: Free-text query (case-insensitive substring)
        country: Country to restrict to
        saved_only: Restrict to the viewer's saved postings
        mine_only: Restrict to the viewer's own postings
        db: Database session
        viewer: Current viewer, if any

    Returns:
        Filtered postings with total/filtered/mine counters

    Raises:
        HTTPException 422: saved_only and mine_only both set
        HTTPException 500: Database error
    """
    if saved_only and mine_only:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="saved_only and mine_only cannot be combined"
        )

    state = FilterState(
        search_query=q,
        country=country,
        saved_only=saved_only,
        mine_only=mine_only,
    )
    viewer_user_id = viewer.user_id if viewer else None

    try:
        listings = await load_listings(db, viewer)
    except CollabMarketError as e:
        raise http_error(e)

    filtered = apply_filters(listings, state, viewer_user_id)
    now = datetime.now()

    return JobListResponse(
        total=len(listings),
        filtered=len(filtered),
        mine=count_mine(listings, viewer_user_id),
        jobs=[annotate(job, viewer, now) for job in filtered],
    )


@router.post(
    "",
    response_model=JobListingView,
    status_code=status.HTTP_201_CREATED,
    summary="Create a job posting"
)
async def create_job(
    form: JobPostingForm,
    db: AsyncSession = Depends(get_db),
    viewer: Viewer | None = Depends(get_viewer),
) -> JobListingView:
    """Create a posting owned by the viewer (business owners only).

    Raises:
        HTTPException 403: Viewer is not a business owner
        HTTPException 422: Validation error
        HTTPException 500: Database error
    """
    try:
        listing = await interactions.create_or_update(db, viewer, form)
    except CollabMarketError as e:
        raise http_error(e)
    return annotate(listing, viewer)


@router.get(
    "/{slug}",
    response_model=JobListingDetail,
    summary="Get a job posting by slug"
)
async def get_job(
    slug: str,
    db: AsyncSession = Depends(get_db),
    viewer: Viewer | None = Depends(get_viewer),
) -> JobListingDetail:
    """Get a single posting with the viewer's saved/applied state.

    Raises:
        HTTPException 404: Unknown slug
        HTTPException 500: Database error
    """
    try:
        return await get_listing_by_slug(db, slug, viewer)
    except CollabMarketError as e:
        raise http_error(e)


@router.patch(
    "/{job_id}",
    response_model=JobListingView,
    summary="Edit a job posting"
)
async def update_job(
    job_id: UUID,
    form: JobPostingForm,
    db: AsyncSession = Depends(get_db),
    viewer: Viewer | None = Depends(get_viewer),
) -> JobListingView:
    """Replace a posting's title, description and deadline.

    Raises:
        HTTPException 403: Viewer does not own the posting
        HTTPException 404: Job not found
        HTTPException 500: Database error
    """
    try:
        listing = await interactions.create_or_update(db, viewer, form, job_id)
    except CollabMarketError as e:
        raise http_error(e)
    return annotate(listing, viewer)


@router.delete(
    "/{job_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a job posting"
)
async def delete_job(
    job_id: UUID,
    db: AsyncSession = Depends(get_db),
    viewer: Viewer | None = Depends(get_viewer),
) -> None:
    """Delete a posting and its saves and applications.

    Raises:
        HTTPException 403: Viewer does not own the posting
        HTTPException 404: Job not found
        HTTPException 500: Database error
    """
    try:
        await interactions.delete_job(db, viewer, job_id)
    except CollabMarketError as e:
        raise http_error(e)


@router.post(
    "/{job_id}/save",
    response_model=SaveStateResponse,
    summary="Save a job posting"
)
async def save_job(
    job_id: UUID,
    db: AsyncSession = Depends(get_db),
    viewer: Viewer | None = Depends(get_viewer),
) -> SaveStateResponse:
    """Bookmark a posting for the viewer.

    Raises:
        HTTPException 403: Viewer is not a content creator, or owns the posting
        HTTPException 404: Job not found
        HTTPException 409: Already saved
    """
    try:
        is_saved = await interactions.toggle_save(db, viewer, job_id, currently_saved=False)
    except CollabMarketError as e:
        raise http_error(e)
    return SaveStateResponse(job_id=job_id, is_saved=is_saved)


@router.delete(
    "/{job_id}/save",
    response_model=SaveStateResponse,
    summary="Unsave a job posting"
)
async def unsave_job(
    job_id: UUID,
    db: AsyncSession = Depends(get_db),
    viewer: Viewer | None = Depends(get_viewer),
) -> SaveStateResponse:
    """Remove the viewer's bookmark from a posting."""
    try:
        is_saved = await interactions.toggle_save(db, viewer, job_id, currently_saved=True)
    except CollabMarketError as e:
        raise http_error(e)
    return SaveStateResponse(job_id=job_id, is_saved=is_saved)


@router.post(
    "/{job_id}/apply",
    response_model=ApplicationResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Apply to a job posting"
)
async def apply_to_job(
    job_id: UUID,
    db: AsyncSession = Depends(get_db),
    viewer: Viewer | None = Depends(get_viewer),
) -> ApplicationResponse:
    """Apply to a posting whose deadline has not passed.

    Raises:
        HTTPException 403: Not allowed to apply, or deadline passed
        HTTPException 404: Job not found
        HTTPException 409: Already applied
    """
    try:
        application = await interactions.apply_to_job(db, viewer, job_id)
    except CollabMarketError as e:
        raise http_error(e)
    return ApplicationResponse.model_validate(application)


@router.get(
    "/{job_id}/applicants",
    response_model=list[Applicant],
    summary="List applicants of a job posting"
)
async def get_applicants(
    job_id: UUID,
    db: AsyncSession = Depends(get_db),
    viewer: Viewer | None = Depends(get_viewer),
) -> list[Applicant]:
    """List applicants, newest first (posting owner only).

    Raises:
        HTTPException 403: Viewer does not own the posting
        HTTPException 404: Job not found
    """
    try:
        return await list_applicants(db, viewer, job_id)
    except CollabMarketError as e:
        raise http_error(e)
