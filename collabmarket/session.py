"""Viewer identity and the session context shared by job board consumers.

The identity provider is external: an upstream proxy authenticates the
request and forwards the user id in a header. This module resolves that id
to the viewer's profile and provides the in-process session object that
controllers subscribe to.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from uuid import UUID

from fastapi import Depends, Request
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from .config import settings
from .database import get_db
from .exceptions import AuthorizationError
from .models import BUSINESS_OWNER, CONTENT_CREATOR, Profile

logger = logging.getLogger(__name__)

Listener = Callable[["Viewer | None"], None]


@dataclass(frozen=True)
class Viewer:
    """The signed-in account looking at the board."""

    profile_id: UUID
    user_id: str
    user_type: str

    @property
    def is_content_creator(self) -> bool:
        return self.user_type == CONTENT_CREATOR

    @property
    def is_business_owner(self) -> bool:
        return self.user_type == BUSINESS_OWNER

    @classmethod
    def from_profile(cls, profile: Profile) -> "Viewer":
        return cls(
            profile_id=profile.id,
            user_id=profile.user_id,
            user_type=profile.user_type,
        )


class SessionContext:
    """Holds the current viewer and notifies subscribers when it changes.

    A single instance is created by the caller and passed to every consumer.
    close() drops all subscribers; the context cannot be reused afterwards.
    """

    def __init__(self, viewer: Viewer | None = None):
        self._viewer = viewer
        self._listeners: list[Listener] = []
        self._closed = False

    @property
    def viewer(self) -> Viewer | None:
        return self._viewer

    @property
    def is_authenticated(self) -> bool:
        return self._viewer is not None

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a callback for viewer changes.

        Returns:
            A callable that removes the listener again.
        """
        if self._closed:
            raise RuntimeError("SessionContext is closed")
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def sign_in(self, viewer: Viewer) -> None:
        logger.info(f"Session signed in as profile {viewer.profile_id}")
        self._set(viewer)

    def sign_out(self) -> None:
        logger.info("Session signed out")
        self._set(None)

    def close(self) -> None:
        self._listeners.clear()
        self._closed = True

    def _set(self, viewer: Viewer | None) -> None:
        if self._closed:
            raise RuntimeError("SessionContext is closed")
        if viewer == self._viewer:
            return
        self._viewer = viewer
        for listener in list(self._listeners):
            try:
                listener(viewer)
            except Exception as e:
                logger.error(f"Session listener {listener!r} failed: {e}")


async def get_viewer(
    request: Request,
    db: AsyncSession = Depends(get_db),
) -> Viewer | None:
    """FastAPI dependency resolving the forwarded user id to a Viewer.

    Returns None for anonymous requests and for users who have not finished
    onboarding; guarded services reject both.
    """
    user_id = request.headers.get(settings.viewer_header)
    if not user_id:
        return None

    result = await db.execute(select(Profile).where(Profile.user_id == user_id))
    profile = result.scalar_one_or_none()
    if profile is None:
        logger.info(f"User {user_id} has no profile yet")
        return None
    return Viewer.from_profile(profile)


def require_viewer(viewer: Viewer | None) -> Viewer:
    """Return the viewer or raise when the request is anonymous."""
    if viewer is None:
        raise AuthorizationError("Sign in and complete your profile first")
    return viewer
