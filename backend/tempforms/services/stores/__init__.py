"""Lifecycle stores — interchangeable persistence backends for forms and responses."""

import logging

from tempforms.core.config import Settings
from tempforms.core.database import build_engine
from tempforms.services.stores.base import LifecycleStore
from tempforms.services.stores.json_file import JsonFileLifecycleStore
from tempforms.services.stores.models import (
    AnswerValue,
    FieldDefinition,
    FieldOption,
    FieldType,
    FormRecord,
    FormSettings,
    ResponseRecord,
)
from tempforms.services.stores.redis_store import RedisLifecycleStore
from tempforms.services.stores.sql import SqlLifecycleStore

logger = logging.getLogger(__name__)

__all__ = [
    "AnswerValue",
    "FieldDefinition",
    "FieldOption",
    "FieldType",
    "FormRecord",
    "FormSettings",
    "JsonFileLifecycleStore",
    "LifecycleStore",
    "RedisLifecycleStore",
    "ResponseRecord",
    "SqlLifecycleStore",
    "build_store",
]


def build_store(settings: Settings) -> LifecycleStore:
    """Construct the store selected by ``STORAGE_BACKEND`` (not yet initialised)."""
    backend = settings.STORAGE_BACKEND
    if backend == "sql":
        store: LifecycleStore = SqlLifecycleStore(build_engine(settings.DATABASE_URL))
    elif backend == "json":
        store = JsonFileLifecycleStore(settings.JSON_DATA_DIR)
    elif backend == "redis":
        store = RedisLifecycleStore.from_url(settings.REDIS_URL, prefix=settings.REDIS_KEY_PREFIX)
    else:
        raise ValueError(f"Unknown storage backend: {backend}")

    logger.info("Storage backend selected: %s (native expiry: %s)", store.name, store.native_expiry)
    return store
