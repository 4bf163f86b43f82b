"""SQLAlchemy lifecycle store — no native expiry, reclaimed by bulk deletes."""

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime

from sqlalchemy import Engine, delete, exists, func, or_, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

import tempforms.models  # noqa: F401  (registers models with Base.metadata)
from tempforms.core.database import Base, build_session_factory
from tempforms.models.form import Form
from tempforms.models.form_response import FormResponse
from tempforms.services.exceptions import DuplicateLinkError, FormNotFoundError, StorageError
from tempforms.services.stores.base import LifecycleStore, ensure_live
from tempforms.services.stores.models import FormRecord, ResponseRecord

logger = logging.getLogger(__name__)

# SQLite names the column in the message, PostgreSQL names the index
_LINK_CONSTRAINT_MARKERS = ("ix_forms_fill_link", "ix_forms_response_link", "forms.fill_link", "forms.response_link")


def _is_link_collision(exc: IntegrityError) -> bool:
    message = str(exc.orig)
    return any(marker in message for marker in _LINK_CONSTRAINT_MARKERS)


class SqlLifecycleStore(LifecycleStore):
    """Relational store; every read filters on ``expires_at`` and the
    reclamation sweep deletes what has expired."""

    native_expiry = False

    def __init__(self, engine: Engine) -> None:
        self._engine = engine
        self._session_factory = build_session_factory(engine)

    @property
    def name(self) -> str:
        return "sql"

    def init(self) -> None:
        Base.metadata.create_all(bind=self._engine)
        logger.info("SQL store ready (%s)", self._engine.url.render_as_string(hide_password=True))

    def close(self) -> None:
        self._engine.dispose()

    @contextmanager
    def _session(self) -> Iterator[Session]:
        db = self._session_factory()
        try:
            yield db
        except SQLAlchemyError as exc:
            db.rollback()
            raise StorageError(self.name, str(exc)) from exc
        finally:
            db.close()

    # ---------------------------------------------------------------------------
    # Forms
    # ---------------------------------------------------------------------------

    def create_form(self, form: FormRecord) -> str:
        with self._session() as db:
            db.add(Form(**form.model_dump()))
            try:
                db.commit()
            except IntegrityError as exc:
                db.rollback()
                if _is_link_collision(exc):
                    raise DuplicateLinkError(str(exc.orig)) from exc
                raise StorageError(self.name, str(exc.orig)) from exc
        return form.id

    def _get_form_where(self, condition, now: datetime) -> FormRecord | None:
        with self._session() as db:
            row = db.execute(select(Form).where(condition)).scalar_one_or_none()
            record = FormRecord.model_validate(row, from_attributes=True) if row is not None else None
        return ensure_live(record, now)

    def get_form_by_fill_link(self, link: str, now: datetime) -> FormRecord | None:
        return self._get_form_where(Form.fill_link == link, now)

    def get_form_by_response_link(self, link: str, now: datetime) -> FormRecord | None:
        return self._get_form_where(Form.response_link == link, now)

    def increment_response_count(self, form_id: str) -> None:
        with self._session() as db:
            result = db.execute(
                update(Form).where(Form.id == form_id).values(response_count=Form.response_count + 1)
            )
            db.commit()
        if result.rowcount == 0:
            raise FormNotFoundError(form_id)

    def delete_form(self, form_id: str) -> bool:
        with self._session() as db:
            db.execute(delete(FormResponse).where(FormResponse.form_id == form_id))
            result = db.execute(delete(Form).where(Form.id == form_id))
            db.commit()
        return result.rowcount > 0

    # ---------------------------------------------------------------------------
    # Responses
    # ---------------------------------------------------------------------------

    def create_response(self, response: ResponseRecord) -> str:
        with self._session() as db:
            db.add(FormResponse(**response.model_dump()))
            try:
                db.commit()
            except IntegrityError as exc:
                # The parent form was deleted between lookup and insert
                db.rollback()
                raise FormNotFoundError(response.form_id) from exc
        return response.id

    def count_responses(self, form_id: str, now: datetime) -> int:
        with self._session() as db:
            return db.execute(
                select(func.count())
                .select_from(FormResponse)
                .where(FormResponse.form_id == form_id, FormResponse.expires_at > now)
            ).scalar_one()

    def list_responses(self, form_id: str, now: datetime) -> list[ResponseRecord]:
        with self._session() as db:
            rows = (
                db.execute(
                    select(FormResponse)
                    .where(FormResponse.form_id == form_id, FormResponse.expires_at > now)
                    .order_by(FormResponse.submitted_at.desc())
                )
                .scalars()
                .all()
            )
            return [ResponseRecord.model_validate(row, from_attributes=True) for row in rows]

    def has_response_from(self, form_id: str, submitter_key: str, now: datetime) -> bool:
        with self._session() as db:
            return db.execute(
                select(
                    exists().where(
                        FormResponse.form_id == form_id,
                        FormResponse.submitter_key == submitter_key,
                        FormResponse.expires_at > now,
                    )
                )
            ).scalar_one()

    def delete_responses(self, form_id: str, response_ids: list[str]) -> int:
        if not response_ids:
            return 0
        with self._session() as db:
            result = db.execute(
                delete(FormResponse).where(
                    FormResponse.form_id == form_id,
                    FormResponse.id.in_(response_ids),
                )
                .execution_options(synchronize_session=False)
            )
            db.commit()
        return result.rowcount

    # ---------------------------------------------------------------------------
    # Reclamation
    # ---------------------------------------------------------------------------

    def reclaim_expired(self, now: datetime) -> int:
        expired_form_ids = select(Form.id).where(Form.expires_at <= now)
        with self._session() as db:
            responses = db.execute(
                delete(FormResponse).where(
                    or_(
                        FormResponse.expires_at <= now,
                        FormResponse.form_id.in_(expired_form_ids),
                    )
                )
                .execution_options(synchronize_session=False)
            )
            forms = db.execute(
                delete(Form).where(Form.expires_at <= now).execution_options(synchronize_session=False)
            )
            db.commit()

        removed_forms, removed_responses = forms.rowcount, responses.rowcount
        if removed_forms or removed_responses:
            logger.info(
                "Reclaimed %d expired form(s) and %d response(s)",
                removed_forms,
                removed_responses,
            )
        return removed_forms + removed_responses
