"""Reclamation scheduler — periodically sweeps expired forms and responses."""

import asyncio
import logging
from datetime import datetime, timezone
from functools import partial

from tempforms.core.config import settings
from tempforms.services.stores import LifecycleStore

logger = logging.getLogger(__name__)


def reclaim_expired_records(store: LifecycleStore, now: datetime | None = None) -> int:
    """Run one sweep over the store.

    Returns the number of records removed.
    """
    if now is None:
        now = datetime.now(timezone.utc)

    removed = store.reclaim_expired(now)
    if removed > 0:
        logger.info("Reclamation removed %d expired record(s) from %s store", removed, store.name)
    return removed


async def reclamation_loop(
    store: LifecycleStore,
    interval: float | None = None,
    initial_delay: float | None = None,
) -> None:
    """Background loop: a short initial delay, then a sweep every interval.

    A failing sweep is logged and retried on the next tick; it never ends
    the loop.
    """
    if interval is None:
        interval = settings.RECLAMATION_INTERVAL_SECONDS
    if initial_delay is None:
        initial_delay = settings.RECLAMATION_INITIAL_DELAY_SECONDS

    logger.info("Reclamation scheduler started (interval: %ss, store: %s)", interval, store.name)
    await asyncio.sleep(initial_delay)

    loop = asyncio.get_running_loop()
    while True:
        try:
            await loop.run_in_executor(None, partial(reclaim_expired_records, store))
        except Exception:
            logger.exception("Error in reclamation loop")

        await asyncio.sleep(interval)


def start_reclamation(store: LifecycleStore) -> asyncio.Task | None:
    """Start the sweep task, or nothing when the store expires records itself."""
    if store.native_expiry:
        logger.info("%s store has native expiry; reclamation scheduler not started", store.name)
        return None
    return asyncio.create_task(reclamation_loop(store))
