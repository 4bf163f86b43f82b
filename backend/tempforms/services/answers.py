"""Answer validation against a form's field definitions."""

import math

from tempforms.services.exceptions import AnswerValidationError
from tempforms.services.stores.models import AnswerValue, FieldDefinition, FormRecord

MAX_TEXT_LENGTH = 1000
MAX_TEXTAREA_LENGTH = 5000

YES_NO_VALUES = ("yes", "no", "true", "false")


def _is_blank(value) -> bool:
    return value is None or value == "" or value == []


def _validate_field(field: FieldDefinition, value: AnswerValue) -> list[str]:
    errors: list[str] = []
    label = field.label

    if field.type in ("text", "textarea"):
        limit = MAX_TEXT_LENGTH if field.type == "text" else MAX_TEXTAREA_LENGTH
        if not isinstance(value, str):
            errors.append(f'Field "{label}" must be text')
        elif len(value) > limit:
            errors.append(f'Field "{label}" is too long (max {limit} characters)')

    elif field.type == "multiple-choice":
        valid = {opt.value for opt in field.options}
        selected = value if isinstance(value, list) else [value]
        invalid = [str(v) for v in selected if not isinstance(v, str) or v not in valid]
        if invalid:
            errors.append(f'Invalid option for "{label}": {", ".join(invalid)}')

    elif field.type == "yes-no":
        if not isinstance(value, bool) and not (isinstance(value, str) and value.lower() in YES_NO_VALUES):
            errors.append(f'Field "{label}" must be yes or no')

    elif field.type == "rating":
        rating = None
        if isinstance(value, (int, float, str)) and not isinstance(value, bool):
            try:
                rating = float(value)
            except ValueError:
                pass
        if rating is None or not math.isfinite(rating) or not field.min_rating <= rating <= field.max_rating:
            errors.append(f'Field "{label}" must be between {field.min_rating} and {field.max_rating}')

    return errors


def validate_answers(form: FormRecord, answers: dict[str, AnswerValue]) -> dict[str, AnswerValue]:
    """Check submitted answers and return the ones worth storing.

    Blank optional answers are dropped. Fields are returned in form order.

    Raises:
        AnswerValidationError: With every problem found, not just the first.
    """
    errors: list[str] = []
    cleaned: dict[str, AnswerValue] = {}
    require_all = form.settings.require_all_fields

    for field in sorted(form.fields, key=lambda f: f.order):
        value = answers.get(field.id)
        if _is_blank(value):
            if field.required or require_all:
                errors.append(f'Field "{field.label}" is required')
            continue

        field_errors = _validate_field(field, value)
        if field_errors:
            errors.extend(field_errors)
        else:
            cleaned[field.id] = value

    known = {f.id for f in form.fields}
    for field_id in answers:
        if field_id not in known:
            errors.append(f"Unknown field: {field_id}")

    if errors:
        raise AnswerValidationError(errors)
    return cleaned
