"""Error taxonomy for job board operations.

Services raise these; routers translate them to HTTP responses.
"""


class CollabMarketError(Exception):
    """Base class for all job board errors."""


class FetchError(CollabMarketError):
    """Raised when listings or profiles cannot be loaded."""


class MutationError(CollabMarketError):
    """Raised when a create, update, delete, save or apply fails."""


class NotFoundError(CollabMarketError):
    """Raised when a referenced posting or profile does not exist."""


class AuthorizationError(CollabMarketError):
    """Raised when the viewer lacks the account kind or ownership an action needs.

    No query is issued once this is raised.
    """


class BusyError(AuthorizationError):
    """Raised when an action for the same posting is already in flight."""


class ConflictError(CollabMarketError):
    """Raised when a unique field (username, phone, profile) is already taken."""


class DuplicateError(MutationError):
    """Raised when a write would duplicate a unique record (save, apply)."""
