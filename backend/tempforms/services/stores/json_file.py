"""JSON file lifecycle store — two collections on disk, swept explicitly."""

import json
import logging
import os
import tempfile
from datetime import datetime
from pathlib import Path

from filelock import FileLock
from pydantic import TypeAdapter

from tempforms.services.exceptions import DuplicateLinkError, FormNotFoundError, StorageError
from tempforms.services.stores.base import LifecycleStore, ensure_live
from tempforms.services.stores.models import FormRecord, ResponseRecord

logger = logging.getLogger(__name__)

_forms_adapter = TypeAdapter(list[FormRecord])
_responses_adapter = TypeAdapter(list[ResponseRecord])


class JsonFileLifecycleStore(LifecycleStore):
    """Stores ``forms.json`` and ``responses.json`` under ``data_dir``.

    Every operation holds one ``FileLock`` for its whole read-modify-write,
    and each collection is replaced atomically, so a crash mid-write leaves
    the previous version intact.
    """

    native_expiry = False

    def __init__(self, data_dir: str | Path) -> None:
        self._data_dir = Path(data_dir)
        self._forms_path = self._data_dir / "forms.json"
        self._responses_path = self._data_dir / "responses.json"
        self._lock = FileLock(str(self._data_dir / ".tempforms.lock"))

    @property
    def name(self) -> str:
        return "json"

    def init(self) -> None:
        try:
            self._data_dir.mkdir(parents=True, exist_ok=True)
            with self._lock:
                for path in (self._forms_path, self._responses_path):
                    if not path.exists():
                        self._write(path, [])
        except OSError as exc:
            raise StorageError(self.name, f"cannot initialise {self._data_dir}: {exc}") from exc
        logger.info("JSON store ready (%s)", self._data_dir)

    # ---------------------------------------------------------------------------
    # File helpers (callers hold the lock)
    # ---------------------------------------------------------------------------

    def _read(self, path: Path) -> list:
        try:
            with path.open("r", encoding="utf-8") as f:
                return json.load(f)
        except FileNotFoundError:
            return []
        except (OSError, json.JSONDecodeError) as exc:
            raise StorageError(self.name, f"cannot read {path.name}: {exc}") from exc

    def _write(self, path: Path, items: list) -> None:
        fd, tmp_path = tempfile.mkstemp(dir=self._data_dir, prefix=f".{path.stem}-", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(items, f, indent=2)
            os.replace(tmp_path, path)
        except OSError as exc:
            Path(tmp_path).unlink(missing_ok=True)
            raise StorageError(self.name, f"cannot write {path.name}: {exc}") from exc

    def _load_forms(self) -> list[FormRecord]:
        return _forms_adapter.validate_python(self._read(self._forms_path))

    def _save_forms(self, forms: list[FormRecord]) -> None:
        self._write(self._forms_path, _forms_adapter.dump_python(forms, mode="json"))

    def _load_responses(self) -> list[ResponseRecord]:
        return _responses_adapter.validate_python(self._read(self._responses_path))

    def _save_responses(self, responses: list[ResponseRecord]) -> None:
        self._write(self._responses_path, _responses_adapter.dump_python(responses, mode="json"))

    # ---------------------------------------------------------------------------
    # Forms
    # ---------------------------------------------------------------------------

    def create_form(self, form: FormRecord) -> str:
        with self._lock:
            forms = self._load_forms()
            for existing in forms:
                if existing.fill_link == form.fill_link or existing.response_link == form.response_link:
                    raise DuplicateLinkError(form.fill_link)
            forms.append(form)
            self._save_forms(forms)
        return form.id

    def get_form_by_fill_link(self, link: str, now: datetime) -> FormRecord | None:
        with self._lock:
            found = next((f for f in self._load_forms() if f.fill_link == link), None)
        return ensure_live(found, now)

    def get_form_by_response_link(self, link: str, now: datetime) -> FormRecord | None:
        with self._lock:
            found = next((f for f in self._load_forms() if f.response_link == link), None)
        return ensure_live(found, now)

    def increment_response_count(self, form_id: str) -> None:
        with self._lock:
            forms = self._load_forms()
            for form in forms:
                if form.id == form_id:
                    form.response_count += 1
                    break
            else:
                raise FormNotFoundError(form_id)
            self._save_forms(forms)

    def delete_form(self, form_id: str) -> bool:
        with self._lock:
            forms = self._load_forms()
            kept = [f for f in forms if f.id != form_id]
            if len(kept) == len(forms):
                return False
            self._save_responses([r for r in self._load_responses() if r.form_id != form_id])
            self._save_forms(kept)
        return True

    # ---------------------------------------------------------------------------
    # Responses
    # ---------------------------------------------------------------------------

    def create_response(self, response: ResponseRecord) -> str:
        with self._lock:
            if not any(f.id == response.form_id for f in self._load_forms()):
                raise FormNotFoundError(response.form_id)
            responses = self._load_responses()
            responses.append(response)
            self._save_responses(responses)
        return response.id

    def _live_responses(self, form_id: str, now: datetime) -> list[ResponseRecord]:
        with self._lock:
            responses = self._load_responses()
        return [r for r in responses if r.form_id == form_id and r.expires_at > now]

    def count_responses(self, form_id: str, now: datetime) -> int:
        return len(self._live_responses(form_id, now))

    def list_responses(self, form_id: str, now: datetime) -> list[ResponseRecord]:
        return sorted(self._live_responses(form_id, now), key=lambda r: r.submitted_at, reverse=True)

    def has_response_from(self, form_id: str, submitter_key: str, now: datetime) -> bool:
        return any(r.submitter_key == submitter_key for r in self._live_responses(form_id, now))

    def delete_responses(self, form_id: str, response_ids: list[str]) -> int:
        targets = set(response_ids)
        with self._lock:
            responses = self._load_responses()
            kept = [r for r in responses if not (r.form_id == form_id and r.id in targets)]
            removed = len(responses) - len(kept)
            if removed:
                self._save_responses(kept)
        return removed

    # ---------------------------------------------------------------------------
    # Reclamation
    # ---------------------------------------------------------------------------

    def reclaim_expired(self, now: datetime) -> int:
        with self._lock:
            forms = self._load_forms()
            live_forms = [f for f in forms if f.expires_at > now]
            live_ids = {f.id for f in live_forms}

            responses = self._load_responses()
            live_responses = [r for r in responses if r.expires_at > now and r.form_id in live_ids]

            removed_forms = len(forms) - len(live_forms)
            removed_responses = len(responses) - len(live_responses)
            if removed_responses:
                self._save_responses(live_responses)
            if removed_forms:
                self._save_forms(live_forms)

        if removed_forms or removed_responses:
            logger.info(
                "Reclaimed %d expired form(s) and %d response(s)",
                removed_forms,
                removed_responses,
            )
        return removed_forms + removed_responses
