"""Response access guard — liveness first, then the optional response password."""

from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime

from tempforms.services.auth import verify_password
from tempforms.services.exceptions import DenialReason
from tempforms.services.expiry import is_live
from tempforms.services.stores.models import FormRecord


@dataclass(frozen=True)
class AccessDecision:
    allowed: bool
    reason: DenialReason | None = None

    @classmethod
    def allow(cls) -> "AccessDecision":
        return cls(allowed=True)

    @classmethod
    def deny(cls, reason: DenialReason) -> "AccessDecision":
        return cls(allowed=False, reason=reason)


def can_view_responses(
    form: FormRecord,
    now: datetime,
    supplied_secret: str | None = None,
    verify: Callable[[str, str], bool] = verify_password,
) -> AccessDecision:
    """Decide whether responses of ``form`` may be viewed, exported or deleted.

    An expired form is denied before the secret is even looked at. Forms
    without a response secret are open to anyone holding the response link.
    """
    if not is_live(form.expires_at, now):
        return AccessDecision.deny(DenialReason.EXPIRED)

    if form.response_secret is None:
        return AccessDecision.allow()

    if not supplied_secret:
        return AccessDecision.deny(DenialReason.PASSWORD_REQUIRED)
    if not verify(supplied_secret, form.response_secret):
        return AccessDecision.deny(DenialReason.INVALID_PASSWORD)
    return AccessDecision.allow()
