"""Expiry policy — maps a duration choice to an absolute expiry timestamp."""

import logging
from datetime import datetime, timedelta

from tempforms.core.config import settings
from tempforms.services.exceptions import InvalidDurationError

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Duration tiers (minutes)
# ---------------------------------------------------------------------------

CUSTOM_CHOICE = "custom"
DEFAULT_CHOICE = "1hour"

DURATION_MINUTES: dict[str, int] = {
    "15min": 15,
    "30min": 30,
    "1hour": 60,
    "24hours": 24 * 60,
}

ABOUT_TO_EXPIRE_WINDOW = timedelta(minutes=2)


def validate_custom_minutes(custom_minutes, max_minutes: int | None = None) -> int:
    """Return ``custom_minutes`` if it is an integer within 1..max_minutes."""
    if max_minutes is None:
        max_minutes = settings.MAX_CUSTOM_EXPIRATION_MINUTES

    if custom_minutes is None:
        raise InvalidDurationError("Custom expiration requires customExpirationMinutes")
    if isinstance(custom_minutes, bool) or not isinstance(custom_minutes, int):
        raise InvalidDurationError("Custom expiration minutes must be a whole number")
    if custom_minutes <= 0:
        raise InvalidDurationError("Custom expiration must be at least 1 minute")
    if custom_minutes > max_minutes:
        raise InvalidDurationError(f"Custom expiration must be at most {max_minutes} minutes")
    return custom_minutes


def resolve_duration(choice: str, custom_minutes: int | None = None) -> timedelta:
    """Return the time-to-live for a duration choice.

    Unrecognised choices fall back to the one-hour tier instead of failing.
    """
    if choice == CUSTOM_CHOICE:
        return timedelta(minutes=validate_custom_minutes(custom_minutes))

    minutes = DURATION_MINUTES.get(choice)
    if minutes is None:
        logger.warning("Unknown expiration choice %r, falling back to %s", choice, DEFAULT_CHOICE)
        minutes = DURATION_MINUTES[DEFAULT_CHOICE]
    return timedelta(minutes=minutes)


def compute_expiry(choice: str, created_at: datetime, custom_minutes: int | None = None) -> datetime:
    """Compute the absolute expiry for a form created at ``created_at``.

    Args:
        choice: One of ``DURATION_MINUTES`` keys or ``"custom"``.
        created_at: Creation timestamp (timezone-aware).
        custom_minutes: Required when ``choice`` is ``"custom"``.

    Returns:
        ``created_at`` plus the chosen duration; always strictly later.

    Raises:
        InvalidDurationError: If ``custom`` is chosen with a missing or
            out-of-range ``custom_minutes``.
    """
    return created_at + resolve_duration(choice, custom_minutes)


# ---------------------------------------------------------------------------
# Liveness
# ---------------------------------------------------------------------------


def is_live(expires_at: datetime, now: datetime) -> bool:
    return now < expires_at


def is_about_to_expire(expires_at: datetime, now: datetime) -> bool:
    remaining = expires_at - now
    return timedelta(0) < remaining <= ABOUT_TO_EXPIRE_WINDOW


def time_remaining(expires_at: datetime, now: datetime) -> str:
    """Human-readable remaining lifetime: ``"Expired"``, ``"2h 5m"`` or ``"14m"``."""
    seconds = int((expires_at - now).total_seconds())
    if seconds <= 0:
        return "Expired"

    hours, rest = divmod(seconds, 3600)
    minutes = rest // 60
    if hours > 0:
        return f"{hours}h {minutes}m"
    return f"{minutes}m"
