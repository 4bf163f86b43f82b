"""Redis lifecycle store — every key carries the form's expiry, so Redis
reclaims storage by itself."""

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime

import redis

from tempforms.services.exceptions import DuplicateLinkError, FormNotFoundError, StorageError
from tempforms.services.stores.base import LifecycleStore, ensure_live
from tempforms.services.stores.models import FormRecord, ResponseRecord

logger = logging.getLogger(__name__)


def _pxat(expires_at: datetime) -> int:
    return int(expires_at.timestamp() * 1000)


class RedisLifecycleStore(LifecycleStore):
    """Key layout (``p`` = key prefix):

    - ``p:form:<id>``            form record JSON (without the counter)
    - ``p:count:<id>``           response counter
    - ``p:fill:<fill_link>``     form id
    - ``p:rlink:<response_link>`` form id
    - ``p:responses:<id>``       hash of response id -> response JSON

    Redis expiry is lazy/sampled, so reads still apply the liveness filter.
    """

    native_expiry = True

    def __init__(self, client: redis.Redis, prefix: str = "tempforms") -> None:
        self._redis = client
        self._prefix = prefix

    @classmethod
    def from_url(cls, url: str, prefix: str = "tempforms") -> "RedisLifecycleStore":
        return cls(redis.Redis.from_url(url, decode_responses=True), prefix=prefix)

    @property
    def name(self) -> str:
        return "redis"

    def init(self) -> None:
        with self._errors():
            self._redis.ping()
        logger.info("Redis store ready (prefix=%s)", self._prefix)

    def close(self) -> None:
        self._redis.close()

    @contextmanager
    def _errors(self) -> Iterator[None]:
        try:
            yield
        except redis.RedisError as exc:
            raise StorageError(self.name, str(exc)) from exc

    def _key(self, kind: str, ident: str) -> str:
        return f"{self._prefix}:{kind}:{ident}"

    # ---------------------------------------------------------------------------
    # Forms
    # ---------------------------------------------------------------------------

    def create_form(self, form: FormRecord) -> str:
        pxat = _pxat(form.expires_at)
        fill_key = self._key("fill", form.fill_link)
        rlink_key = self._key("rlink", form.response_link)

        with self._errors():
            # SET NX claims each link; a lost race on either one is a collision
            if not self._redis.set(fill_key, form.id, nx=True, pxat=pxat):
                raise DuplicateLinkError(form.fill_link)
            if not self._redis.set(rlink_key, form.id, nx=True, pxat=pxat):
                self._redis.delete(fill_key)
                raise DuplicateLinkError(form.response_link)

            pipe = self._redis.pipeline(transaction=True)
            pipe.set(self._key("form", form.id), form.model_dump_json(exclude={"response_count"}), pxat=pxat)
            pipe.set(self._key("count", form.id), form.response_count, pxat=pxat)
            pipe.execute()
        return form.id

    def _load_form(self, form_id: str) -> FormRecord | None:
        pipe = self._redis.pipeline(transaction=False)
        pipe.get(self._key("form", form_id))
        pipe.get(self._key("count", form_id))
        raw, count = pipe.execute()
        if raw is None:
            return None
        form = FormRecord.model_validate_json(raw)
        form.response_count = int(count or 0)
        return form

    def _get_form_via(self, kind: str, link: str, now: datetime) -> FormRecord | None:
        with self._errors():
            form_id = self._redis.get(self._key(kind, link))
            form = self._load_form(form_id) if form_id is not None else None
        return ensure_live(form, now)

    def get_form_by_fill_link(self, link: str, now: datetime) -> FormRecord | None:
        return self._get_form_via("fill", link, now)

    def get_form_by_response_link(self, link: str, now: datetime) -> FormRecord | None:
        return self._get_form_via("rlink", link, now)

    def increment_response_count(self, form_id: str) -> None:
        with self._errors():
            form = self._load_form(form_id)
            if form is None:
                raise FormNotFoundError(form_id)
            count_key = self._key("count", form_id)
            pipe = self._redis.pipeline(transaction=True)
            pipe.incr(count_key)
            # INCR on a vanished key would recreate it without a TTL
            pipe.pexpireat(count_key, _pxat(form.expires_at))
            pipe.execute()

    def delete_form(self, form_id: str) -> bool:
        with self._errors():
            form = self._load_form(form_id)
            if form is None:
                return False
            self._redis.delete(
                self._key("form", form_id),
                self._key("count", form_id),
                self._key("responses", form_id),
                self._key("fill", form.fill_link),
                self._key("rlink", form.response_link),
            )
        return True

    # ---------------------------------------------------------------------------
    # Responses
    # ---------------------------------------------------------------------------

    def create_response(self, response: ResponseRecord) -> str:
        responses_key = self._key("responses", response.form_id)
        with self._errors():
            if not self._redis.exists(self._key("form", response.form_id)):
                raise FormNotFoundError(response.form_id)
            pipe = self._redis.pipeline(transaction=True)
            pipe.hset(responses_key, response.id, response.model_dump_json())
            pipe.pexpireat(responses_key, _pxat(response.expires_at))
            pipe.execute()
        return response.id

    def _live_responses(self, form_id: str, now: datetime) -> list[ResponseRecord]:
        with self._errors():
            raw_values = self._redis.hvals(self._key("responses", form_id))
        responses = [ResponseRecord.model_validate_json(raw) for raw in raw_values]
        return [r for r in responses if r.expires_at > now]

    def count_responses(self, form_id: str, now: datetime) -> int:
        return len(self._live_responses(form_id, now))

    def list_responses(self, form_id: str, now: datetime) -> list[ResponseRecord]:
        return sorted(self._live_responses(form_id, now), key=lambda r: r.submitted_at, reverse=True)

    def has_response_from(self, form_id: str, submitter_key: str, now: datetime) -> bool:
        return any(r.submitter_key == submitter_key for r in self._live_responses(form_id, now))

    def delete_responses(self, form_id: str, response_ids: list[str]) -> int:
        if not response_ids:
            return 0
        with self._errors():
            return self._redis.hdel(self._key("responses", form_id), *response_ids)

    # ---------------------------------------------------------------------------
    # Reclamation
    # ---------------------------------------------------------------------------

    def reclaim_expired(self, now: datetime) -> int:
        """Redis drops expired keys itself; nothing to sweep."""
        return 0
