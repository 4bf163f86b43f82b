import uuid
from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import StaticPool

import tempforms.models  # noqa: F401  (registers models with Base.metadata)
from tempforms.api.deps import get_clock, get_store
from tempforms.api.limiter import limiter
from tempforms.core.config import settings
from tempforms.core.database import build_engine
from tempforms.main import app as fastapi_app
from tempforms.services.links import generate_link_pair
from tempforms.services.stores import FieldDefinition, FormRecord, ResponseRecord, SqlLifecycleStore

# Rate limits are exercised explicitly in test_rate_limit.py
limiter.enabled = False
# Cheapest bcrypt cost; hashing speed is irrelevant here
settings.BCRYPT_ROUNDS = 4


class FrozenClock:
    """Callable clock the tests move forward by hand."""

    def __init__(self, start: datetime) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now += timedelta(**kwargs)
        return self.now


@pytest.fixture
def clock() -> FrozenClock:
    # Anchored to real time so stores with wall-clock TTLs keep the records
    return FrozenClock(datetime.now(timezone.utc).replace(microsecond=0))


@pytest.fixture
def store():
    """SQL store on in-memory SQLite — no external database needed."""
    sql_store = SqlLifecycleStore(build_engine("sqlite://", poolclass=StaticPool))
    sql_store.init()
    yield sql_store
    sql_store.close()


@pytest.fixture
def client(store, clock):
    """TestClient with the store and clock dependencies overridden."""
    fastapi_app.dependency_overrides[get_store] = lambda: store
    fastapi_app.dependency_overrides[get_clock] = lambda: clock
    fastapi_app.state.store = store
    yield TestClient(fastapi_app)
    fastapi_app.dependency_overrides.clear()
    del fastapi_app.state.store


# ---------------------------------------------------------------------------
# Payload helpers
# ---------------------------------------------------------------------------


def form_payload(**overrides) -> dict:
    payload = {
        "title": "Team Lunch Poll",
        "description": "Where should we eat on Friday?",
        "expirationTime": "1hour",
        "fields": [
            {"id": "name", "type": "text", "label": "Your name", "required": True},
            {
                "id": "place",
                "type": "multiple-choice",
                "label": "Where?",
                "required": True,
                "options": [
                    {"label": "Pizza", "value": "pizza"},
                    {"label": "Sushi", "value": "sushi"},
                    {"label": "Tacos", "value": "tacos"},
                ],
            },
            {"id": "vegan", "type": "yes-no", "label": "Vegan?"},
            {"id": "hunger", "type": "rating", "label": "Hunger", "minRating": 1, "maxRating": 5},
        ],
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def create_form(client):
    """POST a form and return the creation body."""

    def _create(**overrides) -> dict:
        response = client.post("/api/v1/forms/", json=form_payload(**overrides))
        assert response.status_code == 201, response.text
        return response.json()

    return _create


# ---------------------------------------------------------------------------
# Record helpers
# ---------------------------------------------------------------------------


def make_form(now: datetime, ttl: timedelta = timedelta(minutes=15), **overrides) -> FormRecord:
    links = generate_link_pair()
    data = dict(
        id=uuid.uuid4().hex,
        title="Quick poll",
        fill_link=links.fill_link,
        response_link=links.response_link,
        fields=[FieldDefinition(id="q1", type="text", label="Anything?")],
        expiration_time="15min",
        created_at=now,
        expires_at=now + ttl,
    )
    data.update(overrides)
    return FormRecord(**data)


def make_response(form: FormRecord, now: datetime, submitter: str | None = None, **overrides) -> ResponseRecord:
    data = dict(
        id=uuid.uuid4().hex,
        form_id=form.id,
        answers={"q1": "hello"},
        submitted_at=now,
        expires_at=form.expires_at,
        submitter_key=submitter,
    )
    data.update(overrides)
    return ResponseRecord(**data)
