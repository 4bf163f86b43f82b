"""Form lifecycle exceptions."""

from datetime import datetime
from enum import Enum


class TempFormsError(Exception):
    """Base exception for form lifecycle operations."""


class FormValidationError(TempFormsError):
    """Raised when caller-supplied input is malformed or incomplete."""


class InvalidDurationError(FormValidationError):
    """Raised when a custom expiration duration is missing or out of bounds."""


class AnswerValidationError(FormValidationError):
    """Raised when submitted answers do not match the form's fields."""

    def __init__(self, errors: list[str]) -> None:
        self.errors = errors
        super().__init__("; ".join(errors))


class FormNotFoundError(TempFormsError):
    """Raised when no stored form matches a link or id."""


class FormExpiredError(TempFormsError):
    """Raised when a form is still stored but its expiry has passed."""

    def __init__(self, expires_at: datetime) -> None:
        self.expires_at = expires_at
        super().__init__(f"Form expired at {expires_at.isoformat()}")


class DenialReason(str, Enum):
    EXPIRED = "expired"
    PASSWORD_REQUIRED = "password_required"
    INVALID_PASSWORD = "invalid_password"


class ResponseAccessDenied(TempFormsError):
    """Raised when the response secret is missing or incorrect."""

    def __init__(self, reason: DenialReason) -> None:
        self.reason = reason
        super().__init__(reason.value)


class DuplicateResponseError(TempFormsError):
    """Raised when a submitter already answered a single-response form."""


class DuplicateLinkError(TempFormsError):
    """Raised by a store when a freshly minted link collides with a stored one."""


class LinkGenerationExhaustedError(TempFormsError):
    """Raised when every link-minting attempt collided."""

    def __init__(self, attempts: int) -> None:
        self.attempts = attempts
        super().__init__(f"Could not mint unique form links after {attempts} attempts")


class StorageError(TempFormsError):
    """Raised when the storage backend fails."""

    def __init__(self, backend: str, message: str) -> None:
        self.backend = backend
        super().__init__(f"[{backend}] {message}")
