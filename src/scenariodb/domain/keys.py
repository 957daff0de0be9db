"""Key codec — surrogate ids to canonical decimal strings and back.

Profile maps are keyed by strings (profile slots, link ids, vehicle types)
while the store holds integers. Every key crossing that boundary goes through
:func:`to_key` / :func:`from_key` so that ``to_key(from_key(s)) == s`` for
every well-formed key.

INVARIANT: canonical form is the plain decimal rendering, no leading zeros,
no ``+`` sign, no grouping characters, no surrounding whitespace.
"""

from __future__ import annotations

import re

from scenariodb.domain.errors import FormatError

KEY_PATTERN: re.Pattern[str] = re.compile(r"^(?:0|-?[1-9][0-9]*)$")


def to_key(value: int) -> str:
    """Render an integer id as its canonical key string."""
    if isinstance(value, bool) or not isinstance(value, int):
        msg = f"Key id must be an int, got {type(value).__name__}: {value!r}"
        raise FormatError(msg)
    return str(value)


def from_key(key: str) -> int:
    """Parse a canonical key string back into an integer id.

    Raises:
        FormatError: If *key* is not a canonical decimal integer.
    """
    if not isinstance(key, str) or KEY_PATTERN.match(key) is None:
        msg = f"Malformed key: {key!r}. Expected a canonical decimal integer."
        raise FormatError(msg)
    return int(key)


def is_key(key: object) -> bool:
    """Check whether *key* is a canonical key string."""
    return isinstance(key, str) and KEY_PATTERN.match(key) is not None


def normalize_key(value: int | str) -> str:
    """Return the canonical key for an int id or an already-canonical string."""
    if isinstance(value, str):
        from_key(value)
        return value
    return to_key(value)


def key_tuple(*parts: int | str) -> tuple[str, ...]:
    """Validate and normalize each component of a composite key."""
    return tuple(normalize_key(part) for part in parts)


def optional_key(value: int | None) -> str | None:
    """:func:`to_key` that passes None through."""
    return None if value is None else to_key(value)


def optional_id(value: int | str | None) -> int | None:
    """Accept an int id, a canonical key, or None."""
    if value is None:
        return None
    if isinstance(value, str):
        return from_key(value)
    return value
