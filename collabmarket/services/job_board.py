"""In-memory job board controller.

JobBoard owns the full listing set for one viewer, the filter state and
the visible subset. Presentation code reads snapshots (visible, counters)
and calls the action methods; it never mutates listings itself.

Remote writes happen before any local change, so a failed action leaves
the board exactly as it was. Each posting has a busy flag while an action
on it is in flight; a second action on the same posting is rejected
instead of being sent twice.
"""

import logging
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from datetime import datetime
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from collabmarket.exceptions import (
    AuthorizationError,
    BusyError,
    CollabMarketError,
    FetchError,
    NotFoundError,
)
from collabmarket.schemas.job_posting import JobListing, JobListingView, JobPostingForm
from collabmarket.services import interactions
from collabmarket.services.filters import FilterState, apply_filters, count_mine
from collabmarket.services.listings import (
    annotate,
    applied_job_ids,
    listing_expired,
    load_listings,
)
from collabmarket.session import SessionContext, Viewer

logger = logging.getLogger(__name__)


class JobBoard:
    """Listing, filtering and interaction state for the current session.

    Args:
        session_factory: Opens a database session per action
        session: Shared session context; the board follows its viewer
        clock: Returns the current time, used for deadline checks
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        session: SessionContext,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self._session_factory = session_factory
        self._session = session
        self._clock = clock

        self.filters = FilterState()
        self.applied_ids: set[UUID] = set()
        self.loading = False
        self.error: str | None = None
        self.stale = True

        self._listings: list[JobListing] = []
        self._visible: list[JobListing] = []
        self._busy: set[UUID] = set()

        self._unsubscribe = session.subscribe(self._on_session_change)

    # ------------------------------------------------------------------
    # Snapshots
    # ------------------------------------------------------------------

    @property
    def viewer(self) -> Viewer | None:
        return self._session.viewer

    @property
    def listings(self) -> list[JobListing]:
        return list(self._listings)

    @property
    def visible(self) -> list[JobListing]:
        return list(self._visible)

    @property
    def total_count(self) -> int:
        return len(self._listings)

    @property
    def filtered_count(self) -> int:
        return len(self._visible)

    @property
    def my_postings_count(self) -> int:
        return count_mine(self._listings, self._viewer_user_id())

    def is_busy(self, job_id: UUID) -> bool:
        return job_id in self._busy

    def view(self) -> list[JobListingView]:
        """Visible listings with owner and expiry flags."""
        now = self._clock()
        return [annotate(job, self.viewer, now) for job in self._visible]

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    async def load(self) -> list[JobListing]:
        """Fetch all listings for the current viewer.

        On failure the board is left empty with error set, and the
        FetchError is re-raised so the caller can offer a retry.
        """
        viewer = self.viewer
        self.loading = True
        self.error = None
        try:
            async with self._session_factory() as db:
                listings = await load_listings(db, viewer)
                applied: set[UUID] = set()
                if viewer is not None and viewer.is_content_creator:
                    applied = await applied_job_ids(db, viewer)
        except CollabMarketError as e:
            logger.error(f"Job board load failed: {e}")
            self.error = str(e)
            self._listings = []
            self._visible = []
            raise
        except Exception as e:
            logger.error(f"Job board load failed: {e}")
            self.error = "Failed to load job postings"
            self._listings = []
            self._visible = []
            raise FetchError(self.error) from e
        finally:
            self.loading = False

        self._listings = listings
        self.applied_ids = applied
        self.stale = False
        self._refilter()
        return self.visible

    # ------------------------------------------------------------------
    # Filters
    # ------------------------------------------------------------------

    def set_search(self, query: str) -> None:
        self.filters.search_query = query
        self._refilter()

    def set_country(self, country: str) -> None:
        self.filters.country = country
        self._refilter()

    def toggle_saved_only(self) -> None:
        self.filters.toggle_saved_only()
        self._refilter()

    def toggle_mine_only(self) -> None:
        self.filters.toggle_mine_only()
        self._refilter()

    def clear_filters(self) -> None:
        self.filters.clear()
        self._refilter()

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------

    async def toggle_save(self, job_id: UUID) -> bool:
        """Save or unsave a listing.

        Unsaving while the saved-only filter is on removes the listing from
        the visible set straight away.

        Returns:
            The listing's new saved state
        """
        listing = self._find(job_id)
        viewer = self._check_can_interact(listing)

        with self._claim(job_id):
            async with self._session_factory() as db:
                is_saved = await interactions.toggle_save(
                    db, viewer, job_id, listing.is_saved
                )

        if self._viewer_changed(viewer):
            return is_saved

        updated = self._replace(job_id, is_saved=is_saved)
        if updated is not None:
            if not is_saved and self.filters.saved_only:
                self._visible = [job for job in self._visible if job.id != job_id]
            else:
                self._visible = [
                    updated if job.id == job_id else job for job in self._visible
                ]
        return is_saved

    async def apply(self, job_id: UUID) -> None:
        """Apply to a listing that is still open."""
        listing = self._find(job_id)
        viewer = self._check_can_interact(listing)
        if job_id in self.applied_ids:
            logger.warning(f"Profile {viewer.profile_id} already applied to job {job_id}")
            raise AuthorizationError("You have already applied to this posting")
        now = self._clock()
        if listing_expired(listing, now):
            logger.warning(f"Job {job_id} is past its deadline")
            raise AuthorizationError("The deadline for this posting has passed")

        with self._claim(job_id):
            async with self._session_factory() as db:
                await interactions.apply_to_job(db, viewer, job_id, now)

        if not self._viewer_changed(viewer):
            self.applied_ids.add(job_id)

    async def submit(
        self,
        form: JobPostingForm,
        edit_target_id: UUID | None = None,
    ) -> JobListing:
        """Create a listing, or edit the one given by edit_target_id."""
        viewer = self.viewer
        if edit_target_id is None:
            if viewer is None or not viewer.is_business_owner:
                logger.warning("Posting rejected: viewer is not a business owner")
                raise AuthorizationError("Only business owners can create postings")
            async with self._session_factory() as db:
                created = await interactions.create_or_update(db, viewer, form)
            self._listings = [created, *self._listings]
            self._refilter()
            return created

        listing = self._find(edit_target_id)
        self._check_owner(listing)
        with self._claim(edit_target_id):
            async with self._session_factory() as db:
                edited = await interactions.create_or_update(
                    db, viewer, form, edit_target_id
                )

        updated = self._replace(
            edit_target_id,
            **{field: getattr(edited, field) for field in interactions.EDITABLE_FIELDS},
        )
        self._refilter()
        return updated or edited

    async def delete(self, job_id: UUID) -> None:
        """Delete an owned listing. The caller must have confirmed first."""
        listing = self._find(job_id)
        self._check_owner(listing)

        with self._claim(job_id):
            async with self._session_factory() as db:
                await interactions.delete_job(db, self.viewer, job_id)

        self._listings = [job for job in self._listings if job.id != job_id]
        self._visible = [job for job in self._visible if job.id != job_id]

    def close(self) -> None:
        """Stop following the session context."""
        self._unsubscribe()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _viewer_user_id(self) -> str | None:
        viewer = self.viewer
        return viewer.user_id if viewer is not None else None

    def _viewer_changed(self, viewer: Viewer) -> bool:
        """True when the session moved on while an action was in flight."""
        if self.viewer == viewer:
            return False
        logger.info(f"Viewer changed during action by profile {viewer.profile_id}; result not applied")
        return True

    def _check_can_interact(self, listing: JobListing) -> Viewer:
        try:
            return interactions.check_can_interact(self.viewer, listing.profile_id)
        except AuthorizationError as e:
            logger.warning(f"Action on job {listing.id} rejected: {e}")
            raise

    def _check_owner(self, listing: JobListing) -> Viewer:
        try:
            return interactions.check_owner(self.viewer, listing.profile_id)
        except AuthorizationError as e:
            logger.warning(f"Change to job {listing.id} rejected: {e}")
            raise

    def _refilter(self) -> None:
        self._visible = apply_filters(self._listings, self.filters, self._viewer_user_id())

    def _find(self, job_id: UUID) -> JobListing:
        for job in self._listings:
            if job.id == job_id:
                return job
        logger.warning(f"Job {job_id} is not on the board")
        raise NotFoundError(f"Job posting {job_id} is not on the board")

    def _replace(self, job_id: UUID, **changes) -> JobListing | None:
        """Swap in an updated copy of a listing; None if it is gone."""
        for index, job in enumerate(self._listings):
            if job.id == job_id:
                updated = job.model_copy(update=changes)
                self._listings[index] = updated
                return updated
        return None

    @contextmanager
    def _claim(self, job_id: UUID) -> Iterator[None]:
        """Mark a posting busy for the duration of the block."""
        if job_id in self._busy:
            logger.warning(f"Action on job {job_id} already in flight")
            raise BusyError(f"An action on job posting {job_id} is already in progress")
        self._busy.add(job_id)
        try:
            yield
        finally:
            self._busy.discard(job_id)

    def _on_session_change(self, viewer: Viewer | None) -> None:
        logger.info("Viewer changed; job board marked stale")
        self.stale = True
        self.applied_ids = set()
        self._listings = [
            job.model_copy(update={"is_saved": False}) if job.is_saved else job
            for job in self._listings
        ]
        self._refilter()

