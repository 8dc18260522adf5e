"""Profile onboarding endpoints."""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from collabmarket.config import settings
from collabmarket.database import get_db
from collabmarket.exceptions import CollabMarketError
from collabmarket.routers.errors import http_error
from collabmarket.schemas.profile import (
    AvailabilityResponse,
    ProfileCreate,
    ProfileResponse,
)
from collabmarket.services.profiles import (
    create_profile,
    get_profile_by_user_id,
    is_phone_available,
    is_username_available,
)

router = APIRouter(prefix="/api/v1/profiles", tags=["profiles"])
logger = logging.getLogger(__name__)


def authenticated_user_id(request: Request) -> str:
    """User id forwarded by the auth proxy; 401 when missing."""
    user_id = request.headers.get(settings.viewer_header)
    if not user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required"
        )
    return user_id


@router.post("", response_model=ProfileResponse, status_code=201)
async def submit_profile(
    profile_data: ProfileCreate,
    user_id: str = Depends(authenticated_user_id),
    db: AsyncSession = Depends(get_db),
):
    """Complete onboarding by creating the caller's profile."""
    try:
        return await create_profile(db, user_id, profile_data)
    except CollabMarketError as e:
        raise http_error(e)


@router.get("/me", response_model=ProfileResponse)
async def get_my_profile(
    user_id: str = Depends(authenticated_user_id),
    db: AsyncSession = Depends(get_db),
):
    """Get the caller's profile; 404 until onboarding is complete."""
    try:
        return await get_profile_by_user_id(db, user_id)
    except CollabMarketError as e:
        raise http_error(e)


@router.get("/availability", response_model=AvailabilityResponse)
async def check_availability(
    username: str | None = Query(None, description="Username to check"),
    phone: str | None = Query(None, description="Phone number to check"),
    db: AsyncSession = Depends(get_db),
):
    """Check whether a username and/or phone number is still free."""
    if username is None and phone is None:
        raise HTTPException(status_code=422, detail="Provide username or phone")

    response = AvailabilityResponse()
    if username is not None:
        response.username = await is_username_available(db, username)
    if phone is not None:
        response.phone_number = await is_phone_available(db, phone)
    return response
