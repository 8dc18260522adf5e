"""Translation of service errors to HTTP responses."""

import logging

from fastapi import HTTPException, status

from collabmarket.exceptions import (
    AuthorizationError,
    BusyError,
    CollabMarketError,
    ConflictError,
    DuplicateError,
    FetchError,
    MutationError,
    NotFoundError,
)

logger = logging.getLogger(__name__)

_STATUS_CODES: list[tuple[type[CollabMarketError], int]] = [
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (BusyError, status.HTTP_409_CONFLICT),
    (AuthorizationError, status.HTTP_403_FORBIDDEN),
    (ConflictError, status.HTTP_409_CONFLICT),
    (DuplicateError, status.HTTP_409_CONFLICT),
    (FetchError, status.HTTP_500_INTERNAL_SERVER_ERROR),
    (MutationError, status.HTTP_500_INTERNAL_SERVER_ERROR),
]


def http_error(error: CollabMarketError) -> HTTPException:
    """Build the HTTPException matching a service error."""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    for error_type, code in _STATUS_CODES:
        if isinstance(error, error_type):
            status_code = code
            break

    if status_code >= 500:
        logger.error(f"{type(error).__name__}: {error}")
    else:
        logger.warning(f"{type(error).__name__}: {error}")
    return HTTPException(status_code=status_code, detail=str(error))
