from collections.abc import Callable
from datetime import datetime, timezone

from fastapi import Request

from tempforms.services.auth import submitter_key
from tempforms.services.stores import LifecycleStore

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def get_store(request: Request) -> LifecycleStore:
    """The store built at startup; see ``tempforms.main.lifespan``."""
    return request.app.state.store


def get_clock() -> Clock:
    return utc_now


def client_address(request: Request) -> str:
    return request.client.host if request.client else "unknown"


def get_submitter_key(request: Request) -> str | None:
    """Best-effort submitter identity (hashed client address).

    Shared NATs and proxies collapse many people onto one address and anyone
    can rotate theirs, so this only backs the single-response heuristic.
    """
    return submitter_key(client_address(request))

