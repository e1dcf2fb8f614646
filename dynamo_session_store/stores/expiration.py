"""
Expiration policy shared by set, touch and get.

Expiration is stored as integer unix seconds and treated as an exclusive
upper bound: a record is invalid at or after that instant.
"""

import time
from typing import Any, Mapping, Optional

# Used when the session carries no cookie.maxAge (5 minutes)
DEFAULT_MAX_AGE_MS = 5 * 60 * 1000


def now_ms() -> int:
    return int(time.time() * 1000)


def now_seconds() -> int:
    return int(time.time())


def get_max_age_ms(session: Any) -> Optional[int]:
    """
    Return the session's cookie.maxAge hint in milliseconds.

    None is returned for a missing cookie, a missing or falsy maxAge, or a
    value that is not a number.
    """
    if not isinstance(session, Mapping):
        return None
    cookie = session.get("cookie")
    if not isinstance(cookie, Mapping):
        return None
    max_age = cookie.get("maxAge")
    # bool is an int subclass; True is not a duration
    if isinstance(max_age, bool) or not isinstance(max_age, (int, float)):
        return None
    if not max_age:
        return None
    return int(max_age)


def compute_expiration(session: Any, now: Optional[int] = None) -> int:
    """
    Compute the expiration timestamp for a session.

    Args:
        session: Session payload; its cookie.maxAge (ms) sets the lifetime
        now: Current time in milliseconds, defaults to the wall clock

    Returns:
        Unix seconds at which the session expires
    """
    if now is None:
        now = now_ms()
    max_age = get_max_age_ms(session) or DEFAULT_MAX_AGE_MS
    return (now + max_age) // 1000


def is_expired(expires_at: int, now: Optional[int] = None) -> bool:
    """True when `now` (unix seconds) is at or past `expires_at`"""
    if now is None:
        now = now_seconds()
    return now >= expires_at
