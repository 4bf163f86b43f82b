"""Tests for the response access guard."""

from datetime import datetime, timedelta, timezone

import pytest

from tempforms.services.access import can_view_responses
from tempforms.services.auth import hash_password, submitter_key, verify_password
from tempforms.services.exceptions import DenialReason
from tempforms.services.stores import FieldDefinition, FormRecord

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


def _form(secret=None, expires_in=timedelta(minutes=30)) -> FormRecord:
    return FormRecord(
        id="f" * 32,
        title="Survey",
        fill_link="abcdefghijkl",
        response_link="0" * 32,
        response_secret=secret,
        fields=[FieldDefinition(id="q1", type="text", label="Question")],
        expiration_time="30min",
        created_at=NOW - timedelta(minutes=1),
        expires_at=NOW + expires_in,
    )


@pytest.fixture(scope="module")
def hashed():
    return hash_password("hunter22")


class TestCanViewResponses:
    def test_open_form_allowed(self):
        decision = can_view_responses(_form(), NOW)
        assert decision.allowed
        assert decision.reason is None

    def test_open_form_ignores_supplied_secret(self):
        assert can_view_responses(_form(), NOW, "anything").allowed

    def test_password_required(self, hashed):
        decision = can_view_responses(_form(secret=hashed), NOW)
        assert not decision.allowed
        assert decision.reason is DenialReason.PASSWORD_REQUIRED

    def test_invalid_password(self, hashed):
        decision = can_view_responses(_form(secret=hashed), NOW, "wrong")
        assert decision.reason is DenialReason.INVALID_PASSWORD

    def test_correct_password(self, hashed):
        assert can_view_responses(_form(secret=hashed), NOW, "hunter22").allowed

    def test_expired_checked_before_secret(self, hashed):
        """Even the right password cannot open an expired form."""
        form = _form(secret=hashed, expires_in=timedelta(0))
        decision = can_view_responses(form, NOW, "hunter22")
        assert decision.reason is DenialReason.EXPIRED

    def test_expired_does_not_consult_verifier(self, hashed):
        calls = []

        def _verify(plain, stored):
            calls.append(plain)
            return True

        form = _form(secret=hashed, expires_in=timedelta(seconds=-1))
        can_view_responses(form, NOW, "hunter22", verify=_verify)
        assert calls == []


class TestPasswords:
    def test_round_trip(self, hashed):
        assert verify_password("hunter22", hashed)
        assert not verify_password("hunter23", hashed)

    def test_hash_is_salted(self):
        assert hash_password("same-pass") != hash_password("same-pass")

    def test_empty_and_malformed(self, hashed):
        assert not verify_password("", hashed)
        assert not verify_password("hunter22", "not-a-bcrypt-hash")


class TestSubmitterKey:
    def test_hashes_address(self):
        key = submitter_key("203.0.113.7")
        assert len(key) == 64
        assert "203.0.113.7" not in key
        assert key == submitter_key("203.0.113.7")

    def test_missing_address(self):
        assert submitter_key(None) is None
        assert submitter_key("") is None
