"""
Time-based token policy: expiration and renewal.

Every function here is pure. The current time is always passed in as
``now``, either an aware :class:`datetime` or UTC epoch seconds, so that the
policy never depends on the local timezone or on a global clock.
"""

from typing import Any, Dict, Mapping, Union
from datetime import datetime

from pytz import UTC

Instant = Union[datetime, int, float]

MINUTE = 60


def _seconds(t: Instant) -> float:
    if isinstance(t, datetime):
        if t.tzinfo is None:
            raise ValueError('Naive datetimes are ambiguous; use UTC')
        return t.astimezone(UTC).timestamp()
    return t


def epoch(t: Instant) -> int:
    """Convert an instant to whole UTC epoch seconds."""
    return int(_seconds(t))


def from_epoch(t: int) -> datetime:
    """Get an aware UTC :class:`datetime` from UTC epoch seconds."""
    return datetime.fromtimestamp(t, tz=UTC)


def time_claims(now: Instant, ttl: int, refresh_limit: int) -> Dict[str, int]:
    """
    Derive the time-based reserved claims for a new token.

    Parameters
    ----------
    now : datetime or int
        The instant of issuance.
    ttl : int
        Token lifetime, in minutes.
    refresh_limit : int
        Grace period after expiration during which the token may still be
        renewed, in minutes.

    Returns
    -------
    dict
        ``iat``, ``nbf``, ``exp`` and ``rli``, in UTC epoch seconds.

    """
    issued_at = epoch(now)
    return {
        'iat': issued_at,
        'nbf': issued_at,
        'exp': issued_at + ttl * MINUTE,
        'rli': issued_at + (ttl + refresh_limit) * MINUTE,
    }


def _timestamp(claims: Mapping[str, Any], name: str) \
        -> Union[int, float, None]:
    value = claims.get(name)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return value


def is_expired(claims: Mapping[str, Any], now: Instant) -> bool:
    """
    Whether ``now`` is past the ``exp`` claim.

    A token without a usable ``exp`` claim is treated as expired.
    """
    expires = _timestamp(claims, 'exp')
    if expires is None:
        return True
    return _seconds(now) > expires


def can_be_renewed(claims: Mapping[str, Any], now: Instant) -> bool:
    """
    Whether a token may be exchanged for a fresh one at ``now``.

    A live token can always be renewed. An expired one only until its
    renewal limit (``rli``); without that claim it cannot be renewed at all.
    """
    if not is_expired(claims, now):
        return True
    limit = _timestamp(claims, 'rli')
    if limit is None:
        return False
    return _seconds(now) <= limit


def remaining_lifetime(claims: Mapping[str, Any], now: Instant) -> int:
    """Seconds until the token expires, never negative."""
    expires = _timestamp(claims, 'exp')
    if expires is None:
        return 0
    return max(int(expires - _seconds(now)), 0)
