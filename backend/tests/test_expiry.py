"""Tests for the expiry policy — duration tiers, custom bounds, liveness."""

from datetime import datetime, timedelta, timezone

import pytest

from tempforms.services.exceptions import FormValidationError, InvalidDurationError
from tempforms.services.expiry import (
    compute_expiry,
    is_about_to_expire,
    is_live,
    resolve_duration,
    time_remaining,
    validate_custom_minutes,
)

CREATED = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


class TestComputeExpiry:
    @pytest.mark.parametrize(
        "choice,minutes",
        [("15min", 15), ("30min", 30), ("1hour", 60), ("24hours", 1440)],
    )
    def test_fixed_tiers(self, choice, minutes):
        assert compute_expiry(choice, CREATED) == CREATED + timedelta(minutes=minutes)

    def test_custom_minutes(self):
        assert compute_expiry("custom", CREATED, 90) == CREATED + timedelta(minutes=90)

    def test_custom_at_ceiling(self):
        assert compute_expiry("custom", CREATED, 1440) == CREATED + timedelta(days=1)

    def test_unknown_choice_falls_back_to_one_hour(self, caplog):
        assert compute_expiry("fortnight", CREATED) == CREATED + timedelta(hours=1)
        assert "falling back" in caplog.text

    def test_expiry_strictly_after_creation(self):
        for choice in ("15min", "30min", "1hour", "24hours"):
            assert compute_expiry(choice, CREATED) > CREATED


class TestCustomBounds:
    @pytest.mark.parametrize("value", [None, 0, -5, 1441, 10_000])
    def test_rejected(self, value):
        with pytest.raises(InvalidDurationError):
            resolve_duration("custom", value)

    def test_rejects_non_integers(self):
        with pytest.raises(InvalidDurationError):
            validate_custom_minutes(12.5)
        with pytest.raises(InvalidDurationError):
            validate_custom_minutes(True)

    def test_is_a_validation_error(self):
        with pytest.raises(FormValidationError):
            validate_custom_minutes(0)

    def test_explicit_ceiling(self):
        assert validate_custom_minutes(30, max_minutes=30) == 30
        with pytest.raises(InvalidDurationError):
            validate_custom_minutes(31, max_minutes=30)

    def test_minimum_is_one_minute(self):
        assert resolve_duration("custom", 1) == timedelta(minutes=1)


class TestLiveness:
    def test_live_before_expiry(self):
        expires = CREATED + timedelta(minutes=15)
        assert is_live(expires, CREATED)
        assert is_live(expires, expires - timedelta(seconds=1))

    def test_dead_at_exact_expiry(self):
        expires = CREATED + timedelta(minutes=15)
        assert not is_live(expires, expires)
        assert not is_live(expires, expires + timedelta(seconds=1))

    def test_about_to_expire_window(self):
        expires = CREATED + timedelta(minutes=15)
        assert not is_about_to_expire(expires, CREATED)
        assert is_about_to_expire(expires, expires - timedelta(minutes=2))
        assert is_about_to_expire(expires, expires - timedelta(seconds=30))
        assert not is_about_to_expire(expires, expires)


class TestTimeRemaining:
    def test_hours_and_minutes(self):
        assert time_remaining(CREATED + timedelta(hours=2, minutes=5), CREATED) == "2h 5m"

    def test_minutes_only(self):
        assert time_remaining(CREATED + timedelta(minutes=14, seconds=59), CREATED) == "14m"

    def test_expired(self):
        assert time_remaining(CREATED, CREATED) == "Expired"
        assert time_remaining(CREATED - timedelta(minutes=1), CREATED) == "Expired"
