"""Form service — creation, filling, response viewing and deletion.

Every entry point takes the store and the current time explicitly; the HTTP
layer supplies both through dependencies.
"""

import logging
import secrets
import uuid
from datetime import datetime

from tempforms.core.config import settings
from tempforms.schemas.forms import FieldIn, FormCreate
from tempforms.services.access import can_view_responses
from tempforms.services.answers import validate_answers
from tempforms.services.auth import hash_password, verify_password
from tempforms.services.exceptions import (
    DenialReason,
    DuplicateLinkError,
    DuplicateResponseError,
    FormExpiredError,
    FormNotFoundError,
    FormValidationError,
    LinkGenerationExhaustedError,
    ResponseAccessDenied,
)
from tempforms.services.expiry import compute_expiry
from tempforms.services.links import (
    LinkKind,
    generate_field_id,
    generate_link_pair,
    validate_link_format,
)
from tempforms.services.stores import (
    FieldDefinition,
    FieldOption,
    FormRecord,
    FormSettings,
    LifecycleStore,
    ResponseRecord,
)

logger = logging.getLogger(__name__)


def _new_id() -> str:
    return uuid.uuid4().hex


# ---------------------------------------------------------------------------
# Creation
# ---------------------------------------------------------------------------


def _build_fields(fields: list[FieldIn]) -> list[FieldDefinition]:
    built: list[FieldDefinition] = []
    seen: set[str] = set()
    for index, field in enumerate(fields):
        field_id = field.id or generate_field_id()
        if field_id in seen:
            raise FormValidationError(f"Duplicate field id: {field_id}")
        seen.add(field_id)

        options = []
        if field.type == "multiple-choice":
            options = [
                FieldOption(
                    id=opt.id or f"opt_{i}",
                    label=opt.label,
                    value=opt.value or opt.label,
                )
                for i, opt in enumerate(field.options or [])
            ]

        built.append(
            FieldDefinition(
                id=field_id,
                type=field.type,
                label=field.label,
                placeholder=field.placeholder,
                required=field.required,
                options=options,
                min_rating=field.min_rating,
                max_rating=field.max_rating,
                order=index,
            )
        )
    return built


def create_form(store: LifecycleStore, payload: FormCreate, now: datetime) -> FormRecord:
    """Create a form and persist it under a fresh pair of links.

    Raises:
        InvalidDurationError: For a bad custom duration.
        FormValidationError: For duplicate field ids.
        LinkGenerationExhaustedError: If every minted link pair collided.
    """
    expires_at = compute_expiry(payload.expiration_time, now, payload.custom_expiration_minutes)
    fields = _build_fields(payload.fields)
    secret = hash_password(payload.response_password) if payload.response_password else None

    attempts = settings.LINK_GENERATION_MAX_ATTEMPTS
    for attempt in range(1, attempts + 1):
        links = generate_link_pair()
        form = FormRecord(
            id=_new_id(),
            title=payload.title,
            description=payload.description or "",
            fill_link=links.fill_link,
            response_link=links.response_link,
            response_secret=secret,
            fields=fields,
            expiration_time=payload.expiration_time,
            custom_expiration_minutes=payload.custom_expiration_minutes,
            created_at=now,
            expires_at=expires_at,
            settings=FormSettings(**payload.settings.model_dump()),
        )
        try:
            store.create_form(form)
        except DuplicateLinkError:
            logger.warning("Link collision on attempt %d/%d, retrying", attempt, attempts)
            continue

        logger.info("Form created: %s (%s) expires %s", form.id, form.fill_link, expires_at.isoformat())
        return form

    raise LinkGenerationExhaustedError(attempts)


# ---------------------------------------------------------------------------
# Lookup
# ---------------------------------------------------------------------------


def _lookup(store: LifecycleStore, link: str, kind: LinkKind, now: datetime) -> FormRecord:
    if not validate_link_format(link, kind):
        raise FormNotFoundError(link)

    if kind == "fill":
        form = store.get_form_by_fill_link(link, now)
    else:
        form = store.get_form_by_response_link(link, now)

    if form is None:
        raise FormNotFoundError(link)
    return form


def get_live_form(store: LifecycleStore, fill_link: str, now: datetime) -> FormRecord:
    """Return the live form behind a fill link.

    Raises:
        FormNotFoundError: Unknown or malformed link.
        FormExpiredError: The form is past its expiry.
    """
    return _lookup(store, fill_link, "fill", now)


def visible_response_count(store: LifecycleStore, form: FormRecord, now: datetime) -> int | None:
    if not form.settings.show_response_count:
        return None
    return store.count_responses(form.id, now)


# ---------------------------------------------------------------------------
# Submission
# ---------------------------------------------------------------------------


def submit_response(
    store: LifecycleStore,
    fill_link: str,
    answers: dict,
    submitter_key: str | None,
    now: datetime,
) -> ResponseRecord:
    """Validate and store a response; it expires together with its form.

    The single-response check is a read followed by a write, so two racing
    submissions from the same submitter can both get through.

    Raises:
        FormNotFoundError, FormExpiredError: Liveness failures.
        AnswerValidationError: Answers do not fit the form.
        DuplicateResponseError: Submitter already answered a single-response form.
    """
    form = get_live_form(store, fill_link, now)
    cleaned = validate_answers(form, answers)

    if not form.settings.allow_multiple_responses and submitter_key is not None:
        if store.has_response_from(form.id, submitter_key, now):
            raise DuplicateResponseError(form.id)

    response = ResponseRecord(
        id=_new_id(),
        form_id=form.id,
        answers=cleaned,
        submitted_at=now,
        expires_at=form.expires_at,
        submitter_key=submitter_key,
    )
    store.create_response(response)
    store.increment_response_count(form.id)

    logger.info("Response %s submitted to form %s", response.id, form.id)
    return response


# ---------------------------------------------------------------------------
# Response viewing
# ---------------------------------------------------------------------------


def get_form_for_responses(
    store: LifecycleStore,
    response_link: str,
    password: str | None,
    now: datetime,
) -> FormRecord:
    """Resolve a response link and run it through the access guard.

    Raises:
        FormNotFoundError, FormExpiredError: Liveness failures.
        ResponseAccessDenied: Missing or wrong response password.
    """
    form = _lookup(store, response_link, "response", now)
    decision = can_view_responses(form, now, password)
    if not decision.allowed:
        if decision.reason is DenialReason.EXPIRED:
            raise FormExpiredError(form.expires_at)
        raise ResponseAccessDenied(decision.reason)
    return form


def load_responses(
    store: LifecycleStore,
    response_link: str,
    password: str | None,
    now: datetime,
) -> tuple[FormRecord, list[ResponseRecord]]:
    form = get_form_for_responses(store, response_link, password, now)
    return form, store.list_responses(form.id, now)


def verify_response_password(store: LifecycleStore, response_link: str, password: str, now: datetime) -> bool:
    """Check a response password without returning any data.

    Raises:
        FormValidationError: The form has no response password.
    """
    form = _lookup(store, response_link, "response", now)
    if form.response_secret is None:
        raise FormValidationError("This form does not require a password")
    return verify_password(password, form.response_secret)


def response_stats(responses: list[ResponseRecord]) -> dict:
    submitted = [r.submitted_at for r in responses]
    return {
        "total_responses": len(responses),
        "first_response": min(submitted) if submitted else None,
        "last_response": max(submitted) if submitted else None,
    }


def format_answer(field: FieldDefinition, value) -> str:
    if isinstance(value, bool):
        return "Yes" if value else "No"
    if isinstance(value, list):
        values = value
    else:
        values = [value]

    if field.type == "multiple-choice":
        labels = {opt.value: opt.label for opt in field.options}
        values = [labels.get(v, v) for v in values]
    elif field.type == "yes-no" and isinstance(value, str):
        return "Yes" if value.lower() in ("yes", "true") else "No"
    return ", ".join(str(v) for v in values)


def formatted_answers(form: FormRecord, response: ResponseRecord) -> dict[str, str]:
    """Answers keyed by field label, in field order."""
    out: dict[str, str] = {}
    for field in sorted(form.fields, key=lambda f: f.order):
        if field.id in response.answers:
            out[field.label] = format_answer(field, response.answers[field.id])
    return out


# ---------------------------------------------------------------------------
# Deletion
# ---------------------------------------------------------------------------


def delete_responses(
    store: LifecycleStore,
    response_link: str,
    password: str | None,
    response_ids: list[str],
    now: datetime,
) -> int:
    form = get_form_for_responses(store, response_link, password, now)
    deleted = store.delete_responses(form.id, response_ids)
    logger.info("Deleted %d response(s) from form %s", deleted, form.id)
    return deleted


def delete_form(store: LifecycleStore, fill_link: str, response_link: str, now: datetime) -> None:
    """Delete a form and all its responses.

    Holding the response link is the creator's proof of ownership.

    Raises:
        FormNotFoundError: Unknown fill link, or the response link does not
            belong to it.
    """
    form = get_live_form(store, fill_link, now)
    if not secrets.compare_digest(form.response_link, response_link):
        raise FormNotFoundError(fill_link)

    if not store.delete_form(form.id):
        raise FormNotFoundError(fill_link)
    logger.info("Form deleted: %s (%s)", form.id, fill_link)
