"""Form API — creation, public fill view, response submission and deletion."""

from fastapi import APIRouter, Depends, HTTPException, Request

from tempforms.api.deps import Clock, get_clock, get_store, get_submitter_key
from tempforms.api.errors import to_http_exception
from tempforms.api.limiter import api_limit, create_form_limit, submit_response_limit
from tempforms.schemas.forms import (
    FieldOut,
    FormCreate,
    FormCreated,
    FormDelete,
    FormInfo,
    FormSettingsSchema,
    MessageResponse,
    PublicForm,
    ResponseSubmission,
    ResponseSubmitted,
)
from tempforms.services import forms as form_service
from tempforms.services.exceptions import TempFormsError
from tempforms.services.expiry import is_about_to_expire, time_remaining
from tempforms.services.stores import FormRecord, LifecycleStore

router = APIRouter()


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def field_views(form: FormRecord) -> list[FieldOut]:
    return [FieldOut.model_validate(f.model_dump()) for f in sorted(form.fields, key=lambda f: f.order)]


def _settings_view(form: FormRecord) -> FormSettingsSchema:
    return FormSettingsSchema.model_validate(form.settings.model_dump())


# ---------------------------------------------------------------------------
# Form lifecycle
# ---------------------------------------------------------------------------


@router.post("/", response_model=FormCreated, status_code=201)
@api_limit
@create_form_limit
def create_form(
    request: Request,
    payload: FormCreate,
    store: LifecycleStore = Depends(get_store),
    clock: Clock = Depends(get_clock),
):
    try:
        form = form_service.create_form(store, payload, clock())
    except TempFormsError as exc:
        raise to_http_exception(exc) from exc

    return FormCreated(
        id=form.id,
        title=form.title,
        description=form.description,
        fill_link=form.fill_link,
        response_link=form.response_link,
        expiration_time=form.expiration_time,
        created_at=form.created_at,
        expires_at=form.expires_at,
        fields=field_views(form),
        settings=_settings_view(form),
        has_response_password=form.has_response_secret,
    )


@router.get("/{fill_link}", response_model=PublicForm)
@api_limit
def get_form(
    request: Request,
    fill_link: str,
    store: LifecycleStore = Depends(get_store),
    clock: Clock = Depends(get_clock),
):
    now = clock()
    try:
        form = form_service.get_live_form(store, fill_link, now)
        response_count = form_service.visible_response_count(store, form, now)
    except TempFormsError as exc:
        raise to_http_exception(exc) from exc

    return PublicForm(
        id=form.id,
        title=form.title,
        description=form.description,
        fields=field_views(form),
        settings=_settings_view(form),
        created_at=form.created_at,
        expires_at=form.expires_at,
        time_remaining=time_remaining(form.expires_at, now),
        is_about_to_expire=is_about_to_expire(form.expires_at, now),
        response_count=response_count,
    )


@router.get("/{fill_link}/info", response_model=FormInfo)
@api_limit
def get_form_info(
    request: Request,
    fill_link: str,
    store: LifecycleStore = Depends(get_store),
    clock: Clock = Depends(get_clock),
):
    """Summary without field definitions."""
    now = clock()
    try:
        form = form_service.get_live_form(store, fill_link, now)
        response_count = form_service.visible_response_count(store, form, now)
    except TempFormsError as exc:
        raise to_http_exception(exc) from exc

    return FormInfo(
        title=form.title,
        description=form.description,
        time_remaining=time_remaining(form.expires_at, now),
        response_count=response_count,
        allows_multiple_responses=form.settings.allow_multiple_responses,
        created_at=form.created_at,
        expires_at=form.expires_at,
    )


@router.delete("/{fill_link}", response_model=MessageResponse)
@api_limit
def delete_form(
    request: Request,
    fill_link: str,
    payload: FormDelete | None = None,
    store: LifecycleStore = Depends(get_store),
    clock: Clock = Depends(get_clock),
):
    response_link = payload.response_link if payload else None
    if not response_link:
        raise HTTPException(status_code=400, detail="Response link is required to delete this form")

    try:
        form_service.delete_form(store, fill_link, response_link, clock())
    except TempFormsError as exc:
        raise to_http_exception(exc) from exc

    return MessageResponse(message="Form and all responses have been deleted")


# ---------------------------------------------------------------------------
# Response submission
# ---------------------------------------------------------------------------


@router.post("/{fill_link}/responses", response_model=ResponseSubmitted, status_code=201)
@api_limit
@submit_response_limit
def submit_response(
    request: Request,
    fill_link: str,
    payload: ResponseSubmission,
    store: LifecycleStore = Depends(get_store),
    clock: Clock = Depends(get_clock),
    submitter: str | None = Depends(get_submitter_key),
):
    try:
        response = form_service.submit_response(store, fill_link, payload.answers, submitter, clock())
    except TempFormsError as exc:
        raise to_http_exception(exc) from exc

    return ResponseSubmitted(
        id=response.id,
        submitted_at=response.submitted_at,
        answers=response.answers,
    )
