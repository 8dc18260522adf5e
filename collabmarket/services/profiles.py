"""Profile onboarding and the public creator directory."""

import logging

from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from collabmarket.exceptions import ConflictError, FetchError, MutationError, NotFoundError
from collabmarket.models import CONTENT_CREATOR, Profile
from collabmarket.schemas.profile import ProfileCreate

logger = logging.getLogger(__name__)


async def get_profile_by_user_id(db: AsyncSession, user_id: str) -> Profile:
    """Fetch the profile of an identity-provider user.

    Raises:
        NotFoundError: If the user has not completed onboarding
    """
    result = await db.execute(select(Profile).where(Profile.user_id == user_id))
    profile = result.scalar_one_or_none()
    if profile is None:
        raise NotFoundError(f"No profile for user {user_id}")
    return profile


async def is_username_available(db: AsyncSession, username: str) -> bool:
    result = await db.execute(select(Profile.id).where(Profile.username == username))
    return result.first() is None


async def is_phone_available(db: AsyncSession, phone_number: str) -> bool:
    result = await db.execute(select(Profile.id).where(Profile.phone_number == phone_number))
    return result.first() is None


async def create_profile(db: AsyncSession, user_id: str, data: ProfileCreate) -> Profile:
    """Create the profile that completes a user's onboarding.

    Args:
        db: Database session
        user_id: Identity-provider id of the authenticated user
        data: Onboarding form

    Returns:
        The stored profile

    Raises:
        ConflictError: If the user already has a profile, or the username or
            phone number is taken
        MutationError: If the write fails
    """
    existing = await db.execute(select(Profile.id).where(Profile.user_id == user_id))
    if existing.first() is not None:
        raise ConflictError("Profile already exists for this user")

    if not await is_username_available(db, data.username):
        raise ConflictError(f"Username '{data.username}' is already taken")

    if data.phone_number and not await is_phone_available(db, data.phone_number):
        raise ConflictError("Phone number is already registered")

    profile = Profile(user_id=user_id, **data.model_dump())
    db.add(profile)
    try:
        await db.commit()
    except IntegrityError as e:
        await db.rollback()
        logger.error(f"Profile for user {user_id} conflicts with an existing one: {e}")
        raise ConflictError("Username or phone number is already taken") from e
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(f"Failed to create profile for user {user_id}: {e}")
        raise MutationError("Failed to create profile") from e

    logger.info(f"Created {profile.user_type} profile {profile.id} ({profile.username})")
    return profile


async def list_creators(
    db: AsyncSession,
    search_query: str = "",
    country: str = "",
) -> list[Profile]:
    """List public content creators ordered by username.

    Args:
        db: Database session
        search_query: Case-insensitive substring of username, name or city
        country: Exact country name

    Raises:
        FetchError: If the query fails
    """
    query = (
        select(Profile)
        .where(Profile.user_type == CONTENT_CREATOR, Profile.is_public.is_(True))
        .order_by(Profile.username)
    )

    if country:
        query = query.where(Profile.country == country)

    if search_query:
        needle = search_query.lower()
        full_name = Profile.first_name + " " + Profile.last_name
        query = query.where(
            or_(
                func.lower(Profile.username).contains(needle, autoescape=True),
                func.lower(full_name).contains(needle, autoescape=True),
                func.lower(Profile.city).contains(needle, autoescape=True),
            )
        )

    try:
        result = await db.execute(query)
    except SQLAlchemyError as e:
        logger.error(f"Failed to list creators: {e}")
        raise FetchError("Failed to load creators") from e
    return list(result.scalars().all())
