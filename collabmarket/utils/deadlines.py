"""Deadline evaluation for job postings.

A posting with a deadline stops accepting applications once its cutoff
instant has passed. The cutoff is the deadline date at the deadline time,
or at 23:59:59 when no time was given. Cutoffs are wall-clock values in
the poster's local time, so an aware "now" is compared by its wall clock.
"""

from datetime import date, datetime, time

from dateutil import parser

END_OF_DAY = time(23, 59, 59)

DateLike = date | str | None
TimeLike = time | str | None


def parse_deadline_date(value: DateLike) -> date | None:
    """Parse a deadline date given as a date, an ISO string, or None.

    Raises:
        ValueError: If the string is not a recognizable date
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    value = value.strip()
    if not value:
        return None
    return parser.isoparse(value).date()


def parse_deadline_time(value: TimeLike) -> time | None:
    """Parse a deadline time such as "18:00" or "18:00:00".

    Only hours and minutes are significant.

    Raises:
        ValueError: If the string is not a recognizable time
    """
    if value is None:
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
        value = parser.parse(value).time()
    return value.replace(second=0, microsecond=0)


def deadline_cutoff(deadline_date: DateLike, deadline_time: TimeLike = None) -> datetime | None:
    """Return the naive cutoff instant, or None when there is no date."""
    cutoff_date = parse_deadline_date(deadline_date)
    if cutoff_date is None:
        return None
    cutoff_time = parse_deadline_time(deadline_time) or END_OF_DAY
    return datetime.combine(cutoff_date, cutoff_time)


def is_expired(
    has_deadline: bool,
    deadline_date: DateLike,
    deadline_time: TimeLike = None,
    now: datetime | str | None = None,
) -> bool:
    """Check whether a posting's deadline has passed.

    Args:
        has_deadline: Whether the posting has a deadline at all
        deadline_date: Deadline date (date or ISO string)
        deadline_time: Optional deadline time; end of day when absent
        now: Moment to evaluate at; defaults to the current local time

    Returns:
        True iff now is strictly after the cutoff

    Examples:
        >>> is_expired(True, "2024-01-01", None, "2024-01-02T00:00:01")
        True
        >>> is_expired(True, "2024-01-01", "18:00", "2024-01-01T17:59:59")
        False
    """
    if not has_deadline:
        return False

    cutoff = deadline_cutoff(deadline_date, deadline_time)
    if cutoff is None:
        return False

    if now is None:
        now = datetime.now()
    elif isinstance(now, str):
        now = parser.isoparse(now)

    return now.replace(tzinfo=None) > cutoff


def format_deadline(deadline_date: DateLike, deadline_time: TimeLike = None) -> str:
    """Human-readable deadline, e.g. "Jan 1, 2024 at 18:00"."""
    cutoff_date = parse_deadline_date(deadline_date)
    if cutoff_date is None:
        return "No deadline"

    text = f"{cutoff_date:%b} {cutoff_date.day}, {cutoff_date.year}"
    cutoff_time = parse_deadline_time(deadline_time)
    if cutoff_time is not None:
        text += f" at {cutoff_time:%H:%M}"
    return text
