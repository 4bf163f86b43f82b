"""Tests for answer validation against field definitions."""

from datetime import datetime, timedelta, timezone

import pytest

from tempforms.services.answers import validate_answers
from tempforms.services.exceptions import AnswerValidationError
from tempforms.services.stores import FieldDefinition, FieldOption, FormRecord, FormSettings

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


def _form(require_all=False) -> FormRecord:
    return FormRecord(
        id="a" * 32,
        title="Feedback",
        fill_link="abcdefghijkl",
        response_link="1" * 32,
        fields=[
            FieldDefinition(id="name", type="text", label="Name", required=True, order=0),
            FieldDefinition(id="notes", type="textarea", label="Notes", order=1),
            FieldDefinition(
                id="colour",
                type="multiple-choice",
                label="Colour",
                options=[
                    FieldOption(id="opt_0", label="Red", value="red"),
                    FieldOption(id="opt_1", label="Blue", value="blue"),
                ],
                order=2,
            ),
            FieldDefinition(id="again", type="yes-no", label="Again?", order=3),
            FieldDefinition(id="stars", type="rating", label="Stars", min_rating=1, max_rating=5, order=4),
        ],
        expiration_time="1hour",
        created_at=NOW,
        expires_at=NOW + timedelta(hours=1),
        settings=FormSettings(require_all_fields=require_all),
    )


class TestValidateAnswers:
    def test_valid_answers_kept_in_field_order(self):
        cleaned = validate_answers(
            _form(),
            {"stars": 4, "again": True, "colour": ["red", "blue"], "name": "Sita"},
        )
        assert list(cleaned) == ["name", "colour", "again", "stars"]

    def test_blank_optional_answers_dropped(self):
        cleaned = validate_answers(_form(), {"name": "Sita", "notes": "", "colour": [], "again": None})
        assert cleaned == {"name": "Sita"}

    def test_missing_required(self):
        with pytest.raises(AnswerValidationError) as exc_info:
            validate_answers(_form(), {"notes": "hi"})
        assert exc_info.value.errors == ['Field "Name" is required']

    def test_require_all_fields(self):
        with pytest.raises(AnswerValidationError) as exc_info:
            validate_answers(_form(require_all=True), {"name": "Sita"})
        assert len(exc_info.value.errors) == 4

    def test_reports_every_problem(self):
        with pytest.raises(AnswerValidationError) as exc_info:
            validate_answers(
                _form(),
                {"name": "x" * 1001, "colour": "green", "again": "maybe", "stars": 9, "extra": "?"},
            )
        errors = exc_info.value.errors
        assert len(errors) == 5
        assert "Unknown field: extra" in errors
        assert 'Invalid option for "Colour": green' in errors

    def test_textarea_limit(self):
        validate_answers(_form(), {"name": "a", "notes": "n" * 5000})
        with pytest.raises(AnswerValidationError):
            validate_answers(_form(), {"name": "a", "notes": "n" * 5001})

    @pytest.mark.parametrize("value", ["yes", "No", "true", "FALSE", True, False])
    def test_yes_no_spellings(self, value):
        assert validate_answers(_form(), {"name": "a", "again": value})["again"] == value

    @pytest.mark.parametrize("value", [1, 5, 3.5, "4"])
    def test_rating_in_range(self, value):
        validate_answers(_form(), {"name": "a", "stars": value})

    @pytest.mark.parametrize("value", [0, 6, "loads", True])
    def test_rating_out_of_range(self, value):
        with pytest.raises(AnswerValidationError):
            validate_answers(_form(), {"name": "a", "stars": value})

    def test_text_must_be_string(self):
        with pytest.raises(AnswerValidationError):
            validate_answers(_form(), {"name": ["list"]})

    @pytest.mark.parametrize("value", ["nan", "NaN", "inf", "-Infinity", float("nan"), float("inf")])
    def test_rating_must_be_finite(self, value):
        with pytest.raises(AnswerValidationError) as exc_info:
            validate_answers(_form(), {"name": "a", "stars": value})
        assert exc_info.value.errors == ['Field "Stars" must be between 1 and 5']
