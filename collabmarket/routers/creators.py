"""Public creator directory endpoint."""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from collabmarket.database import get_db
from collabmarket.exceptions import CollabMarketError
from collabmarket.routers.errors import http_error
from collabmarket.schemas.profile import CreatorResponse
from collabmarket.services.profiles import list_creators

router = APIRouter(prefix="/api/v1/creators", tags=["creators"])


@router.get("", response_model=list[CreatorResponse])
async def get_creators(
    q: str = Query("", description="Search username, name and city"),
    country: str = Query("", description="Exact country name"),
    db: AsyncSession = Depends(get_db),
):
    """List public content creators, alphabetically by username."""
    try:
        creators = await list_creators(db, search_query=q, country=country)
    except CollabMarketError as e:
        raise http_error(e)
    return creators
