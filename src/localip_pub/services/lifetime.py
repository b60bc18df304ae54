"""Record lifetime policy.

Lifetimes are requested in seconds and stored as absolute expiry timestamps in
milliseconds. ``-1`` requests an unlimited lifetime and is stored as
:data:`~localip_pub.models.address.NEVER`. Expiry is enforced lazily: whoever
observes an expired record purges it (see :mod:`localip_pub.services.auth`).
"""
from __future__ import annotations

from localip_pub.core.settings import settings
from localip_pub.models.address import NEVER

UNLIMITED = -1
MS_PER_SECOND = 1000

__all__ = [
    "InvalidLifetimeError",
    "UNLIMITED",
    "carry_forward_expiry",
    "compute_expiry",
    "is_expired",
    "remaining_lifetime",
]


class InvalidLifetimeError(ValueError):
    """Raised when a requested lifetime lies outside the accepted range."""


def compute_expiry(now: int, lifetime_seconds: int, max_seconds: int | None = None) -> int:
    """Return the expiry for a record created at ``now`` (ms).

    Raises:
        InvalidLifetimeError: If ``lifetime_seconds`` is outside ``[-1, max_seconds]``.
    """
    upper = settings.max_lifetime_seconds if max_seconds is None else max_seconds
    # bool is an int subclass; True/False are not lifetimes
    if isinstance(lifetime_seconds, bool) or not isinstance(lifetime_seconds, int):
        raise InvalidLifetimeError(f"lifetime must be an integer, got {lifetime_seconds!r}")
    if lifetime_seconds < UNLIMITED or lifetime_seconds > upper:
        raise InvalidLifetimeError(f"lifetime {lifetime_seconds} outside [-1, {upper}]")
    if lifetime_seconds == UNLIMITED:
        return NEVER
    if lifetime_seconds == 0:
        # already expired, even for an access within the creating millisecond
        return now - 1
    return now + lifetime_seconds * MS_PER_SECOND


def is_expired(now: int, expiry: int) -> bool:
    """Return True if a record with ``expiry`` is expired at ``now``."""
    if expiry == NEVER:
        return False
    return now > expiry


def carry_forward_expiry(expiry: int, reference: int, now: int) -> int:
    """Return the expiry after an update at ``now``.

    The lifetime budget measured from ``reference`` (the previous update, or the
    creation time before the first update) is reduced by the time elapsed since
    then and restarted from ``now``; it is never reset to its original length.
    """
    if expiry == NEVER:
        return NEVER
    budget = expiry - reference
    elapsed = now - reference
    return now + max(budget - elapsed, 0)


def remaining_lifetime(expiry: int, now: int) -> int:
    """Return the remaining lifetime in whole seconds, ``-1`` when unlimited."""
    if expiry == NEVER:
        return UNLIMITED
    return max(expiry - now, 0) // MS_PER_SECOND
