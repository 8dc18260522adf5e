"""Filter engine for the job board.

Reduces the full in-memory listing set to the subset matching the active
filter state. Filters combine with AND, so the order they are applied in
does not change the result; input order is always preserved.
"""

from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from collabmarket.schemas.job_posting import JobListing


@dataclass
class FilterState:
    """Client-held filter bar state.

    saved_only and mine_only are mutually exclusive: switching one on
    switches the other off.
    """

    search_query: str = ""
    country: str = ""
    saved_only: bool = False
    mine_only: bool = False

    def __post_init__(self) -> None:
        if self.saved_only and self.mine_only:
            raise ValueError("saved_only and mine_only cannot both be active")

    @property
    def is_active(self) -> bool:
        return bool(self.search_query or self.country or self.saved_only or self.mine_only)

    def toggle_saved_only(self) -> None:
        self.saved_only = not self.saved_only
        if self.saved_only:
            self.mine_only = False

    def toggle_mine_only(self) -> None:
        self.mine_only = not self.mine_only
        if self.mine_only:
            self.saved_only = False

    def clear(self) -> None:
        self.search_query = ""
        self.country = ""
        self.saved_only = False
        self.mine_only = False


def matches_query(listing: JobListing, query: str) -> bool:
    """Case-insensitive substring match over title, description, city and name."""
    query = query.lower()
    return any(
        query in field.lower()
        for field in (
            listing.title,
            listing.description,
            listing.city,
            listing.poster_name,
        )
    )


def apply_filters(
    listings: Iterable[JobListing],
    state: FilterState,
    viewer_user_id: str | None = None,
) -> list[JobListing]:
    """Return the listings that pass every active filter.

    Args:
        listings: Full listing set, newest first
        state: Active filter state
        viewer_user_id: Identity-provider id of the viewer; mine_only keeps
            nothing without one

    Returns:
        New list holding the matching listings in their input order
    """
    filtered = list(listings)

    if state.saved_only:
        filtered = [job for job in filtered if job.is_saved]

    if state.mine_only:
        filtered = [
            job for job in filtered
            if viewer_user_id is not None and job.user_id == viewer_user_id
        ]

    if state.country:
        filtered = [job for job in filtered if job.country == state.country]

    if state.search_query:
        filtered = [job for job in filtered if matches_query(job, state.search_query)]

    return filtered


def count_mine(listings: Sequence[JobListing], viewer_user_id: str | None) -> int:
    """Number of listings posted by the viewer."""
    if viewer_user_id is None:
        return 0
    return sum(1 for job in listings if job.user_id == viewer_user_id)
