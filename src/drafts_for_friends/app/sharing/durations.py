"""Share-duration arithmetic.

Converts the (value, unit) pairs submitted on the admin page into seconds,
and renders the remaining lifetime of a grant for the admin listing.

Units:
  - Canonical names: ``second``, ``minute``, ``hour``, ``day``.
  - Form codes ``s``, ``m``, ``h``, ``d`` are accepted as aliases.
  - Anything else is rejected; a unit is never silently defaulted.
"""

from __future__ import annotations

import re
from typing import Any

from .errors import GrantError, GrantErrorCode

# ── Constants ─────────────────────────────────────────────────────────

UNIT_SECONDS: dict[str, int] = {
    'second': 1,
    'minute': 60,
    'hour': 60 * 60,
    'day': 24 * 60 * 60,
}

UNIT_ALIASES: dict[str, str] = {
    's': 'second',
    'm': 'minute',
    'h': 'hour',
    'd': 'day',
}

# (unit name, how many of this unit make the next one up)
_REMAINING_CASCADE: tuple[tuple[str, int], ...] = (
    ('second', 60),
    ('minute', 60),
    ('hour', 24),
    ('day', 0),
)

_INTEGER_PATTERN = re.compile(r'[+-]?\d+')

# Longest single create or extend step.
MAX_DURATION_SECONDS = 10 * 365 * UNIT_SECONDS['day']


# ── Parsing ──────────────────────────────────────────────────────────


def normalize_unit(unit: Any) -> str:
    """Return the canonical unit name for ``unit``.

    Raises:
        GrantError: ``invalid_unit`` when the unit is not recognised.
    """
    if not isinstance(unit, str):
        raise GrantError(GrantErrorCode.INVALID_UNIT, f'{unit!r} is not a valid unit')
    key = unit.strip().lower()
    key = UNIT_ALIASES.get(key, key)
    if key not in UNIT_SECONDS:
        raise GrantError(GrantErrorCode.INVALID_UNIT, f'{unit!r} is not a valid unit')
    return key


def parse_duration_value(raw: Any) -> int:
    """Parse a positive integer duration from a form value.

    Accepts ints and decimal-integer strings. Booleans, floats, blank
    strings, zero, negative numbers and values above
    ``MAX_DURATION_SECONDS`` are all rejected.

    Raises:
        GrantError: ``invalid_duration``.
    """
    if isinstance(raw, bool):
        raise GrantError(GrantErrorCode.INVALID_DURATION, 'duration must be an integer')
    if isinstance(raw, int):
        value = raw
    elif isinstance(raw, str) and _INTEGER_PATTERN.fullmatch(raw.strip()):
        try:
            value = int(raw.strip())
        except ValueError:
            # More digits than int() will convert.
            raise GrantError(GrantErrorCode.INVALID_DURATION, 'duration is too long') from None
    else:
        raise GrantError(GrantErrorCode.INVALID_DURATION, 'duration must be an integer')
    if value <= 0:
        raise GrantError(GrantErrorCode.INVALID_DURATION, 'duration must be positive')
    if value > MAX_DURATION_SECONDS:
        raise GrantError(GrantErrorCode.INVALID_DURATION, 'duration is too long')
    return value


def duration_to_seconds(value: int, unit: str) -> int:
    """Convert ``value`` units into seconds, e.g. ``(2, 'hour') -> 7200``."""
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise GrantError(GrantErrorCode.INVALID_DURATION, 'duration must be positive')
    seconds = value * UNIT_SECONDS[normalize_unit(unit)]
    if seconds > MAX_DURATION_SECONDS:
        raise GrantError(GrantErrorCode.INVALID_DURATION, 'duration is too long')
    return seconds


# ── Display ──────────────────────────────────────────────────────────


def describe_remaining(expires_at: float, now: float) -> str:
    """Human-readable time left before ``expires_at``.

    The value is floored into the largest unit it fills, so 7199 seconds
    reads ``1 hour remaining`` and 90000 seconds ``1 day remaining``.
    """
    if now >= expires_at:
        return 'Expired'

    value = int(expires_at - now)
    unit = 'second'
    for name, limit in _REMAINING_CASCADE:
        unit = name
        if not limit or value < limit:
            break
        value //= limit

    suffix = '' if value == 1 else 's'
    return f'{value} {unit}{suffix} remaining'
