"""Tests for save, apply, create/update and delete."""

from datetime import date, datetime
from uuid import uuid4

import pytest
from sqlalchemy import func, select

from collabmarket.exceptions import AuthorizationError, DuplicateError, NotFoundError
from collabmarket.models import JobApplication, JobPosting, SavedJob
from collabmarket.schemas.job_posting import JobPostingForm
from collabmarket.services import interactions
from collabmarket.services.listings import saved_job_ids
from conftest import OWNER_USER_ID


async def count_rows(db, model, **where) -> int:
    query = select(func.count()).select_from(model)
    for column, value in where.items():
        query = query.where(getattr(model, column) == value)
    return (await db.execute(query)).scalar_one()


class TestGuards:
    """Tests for the account-kind and ownership guards."""

    def test_anonymous_cannot_interact(self):
        with pytest.raises(AuthorizationError):
            interactions.check_can_interact(None, uuid4())

    @pytest.mark.asyncio
    async def test_business_owner_cannot_interact(self, other_owner_viewer, owner):
        with pytest.raises(AuthorizationError):
            interactions.check_can_interact(other_owner_viewer, owner.id)

    @pytest.mark.asyncio
    async def test_creator_cannot_interact_with_own_posting(self, creator_viewer):
        with pytest.raises(AuthorizationError):
            interactions.check_can_interact(creator_viewer, creator_viewer.profile_id)

    @pytest.mark.asyncio
    async def test_check_owner(self, owner_viewer, creator_viewer):
        assert interactions.check_owner(owner_viewer, owner_viewer.profile_id) is owner_viewer
        with pytest.raises(AuthorizationError):
            interactions.check_owner(creator_viewer, owner_viewer.profile_id)


class TestToggleSave:
    """Tests for toggle_save."""

    @pytest.mark.asyncio
    async def test_save_then_unsave(self, db, posting, creator_viewer):
        job_id = posting.id

        assert await interactions.toggle_save(db, creator_viewer, job_id, False) is True
        assert await saved_job_ids(db, creator_viewer) == {job_id}

        assert await interactions.toggle_save(db, creator_viewer, job_id, True) is False
        assert await saved_job_ids(db, creator_viewer) == set()

    @pytest.mark.asyncio
    async def test_save_twice_is_duplicate(self, db, posting, creator_viewer):
        job_id = posting.id
        await interactions.toggle_save(db, creator_viewer, job_id, False)

        with pytest.raises(DuplicateError):
            await interactions.toggle_save(db, creator_viewer, job_id, False)
        assert await count_rows(db, SavedJob, job_posting_id=job_id) == 1

    @pytest.mark.asyncio
    async def test_business_owner_rejected(self, db, posting, other_owner_viewer):
        job_id = posting.id
        with pytest.raises(AuthorizationError):
            await interactions.toggle_save(db, other_owner_viewer, job_id, False)
        assert await count_rows(db, SavedJob) == 0

    @pytest.mark.asyncio
    async def test_unknown_posting(self, db, creator_viewer):
        with pytest.raises(NotFoundError):
            await interactions.toggle_save(db, creator_viewer, uuid4(), False)


class TestApplyToJob:
    """Tests for apply_to_job."""

    @pytest.mark.asyncio
    async def test_apply(self, db, posting, creator_viewer):
        application = await interactions.apply_to_job(db, creator_viewer, posting.id)

        assert application.profile_id == creator_viewer.profile_id
        assert application.job_posting_id == posting.id
        assert application.created_at is not None

    @pytest.mark.asyncio
    async def test_apply_twice_is_duplicate(self, db, posting, creator_viewer):
        job_id = posting.id
        await interactions.apply_to_job(db, creator_viewer, job_id)

        with pytest.raises(DuplicateError, match="already applied"):
            await interactions.apply_to_job(db, creator_viewer, job_id)
        assert await count_rows(db, JobApplication, job_posting_id=job_id) == 1

    @pytest.mark.asyncio
    async def test_expired_posting_rejected(self, db, expired_posting, creator_viewer):
        job_id = expired_posting.id
        with pytest.raises(AuthorizationError, match="deadline"):
            await interactions.apply_to_job(db, creator_viewer, job_id)
        assert await count_rows(db, JobApplication) == 0

    @pytest.mark.asyncio
    async def test_before_deadline_with_explicit_now(self, db, expired_posting, creator_viewer):
        application = await interactions.apply_to_job(
            db, creator_viewer, expired_posting.id, now=datetime(2020, 1, 1, 17, 59)
        )
        assert application.job_posting_id == expired_posting.id

    @pytest.mark.asyncio
    async def test_owner_cannot_apply(self, db, posting, owner_viewer):
        with pytest.raises(AuthorizationError):
            await interactions.apply_to_job(db, owner_viewer, posting.id)


class TestCreateOrUpdate:
    """Tests for create_or_update."""

    @pytest.mark.asyncio
    async def test_create(self, db, owner_viewer):
        form = JobPostingForm(title="Need a Logo!!", description="Coffee shop branding")

        listing = await interactions.create_or_update(db, owner_viewer, form)

        assert listing.slug.startswith("need-a-logo-")
        assert len(listing.slug) >= len("need-a-logo-") + 6
        assert listing.profile_id == owner_viewer.profile_id
        assert listing.user_id == OWNER_USER_ID
        assert listing.is_saved is False
        assert await count_rows(db, JobPosting) == 1

    @pytest.mark.asyncio
    async def test_create_with_deadline(self, db, owner_viewer):
        form = JobPostingForm(
            title="Launch",
            description="Launch day stories",
            has_deadline=True,
            deadline_date=date(2030, 6, 1),
        )
        listing = await interactions.create_or_update(db, owner_viewer, form)
        assert listing.has_deadline is True
        assert listing.deadline_date == date(2030, 6, 1)
        assert listing.deadline_time is None

    @pytest.mark.asyncio
    async def test_creator_cannot_create(self, db, creator_viewer):
        form = JobPostingForm(title="Title", description="Body")
        with pytest.raises(AuthorizationError):
            await interactions.create_or_update(db, creator_viewer, form)
        assert await count_rows(db, JobPosting) == 0

    @pytest.mark.asyncio
    async def test_update_keeps_slug_and_owner(self, db, posting, owner_viewer):
        job_id, slug, profile_id = posting.id, posting.slug, posting.profile_id
        form = JobPostingForm(title="Need a Bigger Logo", description="Now with a mascot")

        listing = await interactions.create_or_update(db, owner_viewer, form, job_id)

        assert listing.id == job_id
        assert listing.title == "Need a Bigger Logo"
        assert listing.description == "Now with a mascot"
        assert listing.slug == slug
        assert listing.profile_id == profile_id

    @pytest.mark.asyncio
    async def test_update_by_other_owner_rejected(self, db, posting, other_owner_viewer):
        job_id = posting.id
        form = JobPostingForm(title="Hijacked", description="Nope")
        with pytest.raises(AuthorizationError):
            await interactions.create_or_update(db, other_owner_viewer, form, job_id)

    @pytest.mark.asyncio
    async def test_update_unknown_posting(self, db, owner_viewer):
        form = JobPostingForm(title="Title", description="Body")
        with pytest.raises(NotFoundError):
            await interactions.create_or_update(db, owner_viewer, form, uuid4())


class TestDeleteJob:
    """Tests for delete_job."""

    @pytest.mark.asyncio
    async def test_delete_removes_saves_and_applications(
        self, db, posting, creator, owner_viewer
    ):
        job_id = posting.id
        db.add(SavedJob(profile_id=creator.id, job_posting_id=job_id))
        db.add(JobApplication(profile_id=creator.id, job_posting_id=job_id))
        await db.commit()

        await interactions.delete_job(db, owner_viewer, job_id)

        assert await count_rows(db, JobPosting) == 0
        assert await count_rows(db, SavedJob) == 0
        assert await count_rows(db, JobApplication) == 0

    @pytest.mark.asyncio
    async def test_non_owner_cannot_delete(self, db, posting, creator_viewer):
        job_id = posting.id
        with pytest.raises(AuthorizationError):
            await interactions.delete_job(db, creator_viewer, job_id)
        assert await count_rows(db, JobPosting) == 1


class TestJobPostingForm:
    """Tests for JobPostingForm validation."""

    def test_deadline_required_when_flag_set(self):
        with pytest.raises(ValueError):
            JobPostingForm(title="T", description="D", has_deadline=True)

    def test_deadline_cleared_when_flag_off(self):
        form = JobPostingForm(
            title="T", description="D", has_deadline=False, deadline_date=date(2030, 1, 1)
        )
        assert form.deadline_date is None

    def test_blank_title_rejected(self):
        with pytest.raises(ValueError):
            JobPostingForm(title="   ", description="D")
