"""Response API — password-gated viewing, export and deletion."""

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import Response

from tempforms.api.deps import Clock, get_clock, get_store
from tempforms.api.errors import to_http_exception
from tempforms.api.limiter import api_limit, view_responses_limit
from tempforms.api.v1.endpoints.forms import field_views
from tempforms.schemas.forms import (
    ExportFormat,
    PasswordCheck,
    PasswordCheckResult,
    ResponseFormView,
    ResponseOut,
    ResponsesDelete,
    ResponsesDeleted,
    ResponseStatistics,
    ResponsesView,
)
from tempforms.services import forms as form_service
from tempforms.services.exceptions import TempFormsError
from tempforms.services.export import export_csv, export_json, safe_filename
from tempforms.services.expiry import time_remaining
from tempforms.services.stores import LifecycleStore

router = APIRouter()


@router.get("/{response_link}", response_model=ResponsesView)
@api_limit
@view_responses_limit
def list_responses(
    request: Request,
    response_link: str,
    password: str | None = Query(None),
    store: LifecycleStore = Depends(get_store),
    clock: Clock = Depends(get_clock),
):
    now = clock()
    try:
        form, responses = form_service.load_responses(store, response_link, password, now)
    except TempFormsError as exc:
        raise to_http_exception(exc) from exc

    return ResponsesView(
        form=ResponseFormView(
            id=form.id,
            title=form.title,
            description=form.description,
            fill_link=form.fill_link,
            fields=field_views(form),
            created_at=form.created_at,
            expires_at=form.expires_at,
            time_remaining=time_remaining(form.expires_at, now),
            response_count=len(responses),
        ),
        responses=[
            ResponseOut(
                id=r.id,
                submitted_at=r.submitted_at,
                answers=r.answers,
                formatted_answers=form_service.formatted_answers(form, r),
            )
            for r in responses
        ],
        statistics=ResponseStatistics(**form_service.response_stats(responses)),
    )


@router.post("/{response_link}/verify-password", response_model=PasswordCheckResult)
@api_limit
@view_responses_limit
def verify_password(
    request: Request,
    response_link: str,
    payload: PasswordCheck,
    store: LifecycleStore = Depends(get_store),
    clock: Clock = Depends(get_clock),
):
    try:
        valid = form_service.verify_response_password(store, response_link, payload.password, clock())
    except TempFormsError as exc:
        raise to_http_exception(exc) from exc
    return PasswordCheckResult(password_valid=valid)


@router.get("/{response_link}/export")
@api_limit
@view_responses_limit
def export_responses(
    request: Request,
    response_link: str,
    format: ExportFormat = Query("csv"),
    password: str | None = Query(None),
    store: LifecycleStore = Depends(get_store),
    clock: Clock = Depends(get_clock),
):
    """Full dump of every live response as a file download."""
    now = clock()
    try:
        form, responses = form_service.load_responses(store, response_link, password, now)
    except TempFormsError as exc:
        raise to_http_exception(exc) from exc

    filename = safe_filename(form.title)
    if format == "csv":
        content, media_type = export_csv(form, responses), "text/csv"
    else:
        content, media_type = export_json(form, responses, now), "application/json"

    return Response(
        content=content,
        media_type=media_type,
        headers={"Content-Disposition": f'attachment; filename="{filename}.{format}"'},
    )


@router.delete("/{response_link}", response_model=ResponsesDeleted)
@api_limit
@view_responses_limit
def delete_responses(
    request: Request,
    response_link: str,
    payload: ResponsesDelete,
    store: LifecycleStore = Depends(get_store),
    clock: Clock = Depends(get_clock),
):
    try:
        deleted = form_service.delete_responses(
            store, response_link, payload.password, payload.response_ids, clock()
        )
    except TempFormsError as exc:
        raise to_http_exception(exc) from exc
    return ResponsesDeleted(deleted=deleted)
