"""Slug generation for job posting URLs."""

import re
import secrets
import string

SUFFIX_ALPHABET = string.digits + string.ascii_lowercase
MIN_SUFFIX_LENGTH = 6

_WHITESPACE = re.compile(r"\s+")
_NON_WORD = re.compile(r"[^\w-]+", re.ASCII)


def slugify(title: str) -> str:
    """Lower-case the title, hyphenate whitespace and strip other symbols.

    >>> slugify("Need a Logo!!")
    'need-a-logo'
    """
    return _NON_WORD.sub("", _WHITESPACE.sub("-", title.lower()))


def random_suffix(length: int = MIN_SUFFIX_LENGTH) -> str:
    """Random lower-case base-36 token."""
    return "".join(secrets.choice(SUFFIX_ALPHABET) for _ in range(length))


def generate_slug(title: str, suffix_length: int = MIN_SUFFIX_LENGTH) -> str:
    """Build a unique-enough slug without checking the database first.

    Args:
        title: Posting title
        suffix_length: Length of the random token, at least 6

    Returns:
        "<slugified-title>-<token>", or just the token when the title has
        no word characters
    """
    if suffix_length < MIN_SUFFIX_LENGTH:
        raise ValueError(f"suffix_length must be at least {MIN_SUFFIX_LENGTH}")

    base = slugify(title)
    suffix = random_suffix(suffix_length)
    return f"{base}-{suffix}" if base else suffix
