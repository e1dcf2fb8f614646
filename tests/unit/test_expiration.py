"""
Unit tests for the expiration policy
"""

import time

import pytest

from dynamo_session_store.stores.expiration import (
    DEFAULT_MAX_AGE_MS,
    compute_expiration,
    get_max_age_ms,
    is_expired,
)

pytestmark = pytest.mark.unit

NOW_MS = 1_700_000_000_000


class TestMaxAge:
    """Test reading the cookie.maxAge hint"""

    @pytest.mark.parametrize(
        "session",
        [
            {},
            {"cookie": None},
            {"cookie": {}},
            {"cookie": {"maxAge": None}},
            {"cookie": {"maxAge": 0}},
            {"cookie": {"maxAge": "60000"}},
            {"cookie": {"maxAge": True}},
            {"cookie": "maxAge=60000"},
            None,
            ["cookie"],
        ],
    )
    def test_missing_or_unusable_hint(self, session):
        assert get_max_age_ms(session) is None

    def test_integer_hint(self):
        assert get_max_age_ms({"cookie": {"maxAge": 60000}}) == 60000

    def test_float_hint_truncated(self):
        assert get_max_age_ms({"cookie": {"maxAge": 1500.7}}) == 1500


class TestComputeExpiration:
    """Test expiration timestamps derived from sessions"""

    def test_default_is_five_minutes(self):
        assert DEFAULT_MAX_AGE_MS == 300_000
        assert compute_expiration({}, now=NOW_MS) == NOW_MS // 1000 + 300

    def test_falsy_max_age_uses_default(self):
        session = {"cookie": {"maxAge": 0}}

        assert compute_expiration(session, now=NOW_MS) == NOW_MS // 1000 + 300

    def test_max_age_honored(self):
        session = {"cookie": {"maxAge": 3_600_000}}

        assert compute_expiration(session, now=NOW_MS) == NOW_MS // 1000 + 3600

    def test_result_is_floored_to_seconds(self):
        session = {"cookie": {"maxAge": 1999}}

        assert compute_expiration(session, now=NOW_MS + 500) == NOW_MS // 1000 + 2

    def test_uses_wall_clock_by_default(self):
        expires_at = compute_expiration({})

        assert abs(expires_at - (time.time() + 300)) <= 1


class TestIsExpired:
    """Test the exclusive expiration bound"""

    def test_before_expiration(self):
        assert not is_expired(1000, now=999)

    def test_at_expiration(self):
        assert is_expired(1000, now=1000)

    def test_after_expiration(self):
        assert is_expired(1000, now=1001)

    def test_uses_wall_clock_by_default(self):
        assert is_expired(int(time.time()) - 1)
        assert not is_expired(int(time.time()) + 60)
