"""Abstract lifecycle store interface."""

from abc import ABC, abstractmethod
from datetime import datetime

from tempforms.services.exceptions import FormExpiredError
from tempforms.services.expiry import is_live
from tempforms.services.stores.models import FormRecord, ResponseRecord


class LifecycleStore(ABC):
    """Persistence for forms and their responses, governed by ``expires_at``.

    Lookups never hand back a logically-expired form: a record that is still
    stored but past its expiry raises ``FormExpiredError``, a missing record
    yields ``None``. Physical deletion happens in ``reclaim_expired`` (or in
    the storage engine itself when ``native_expiry`` is set) and is never
    relied upon for access control.
    """

    #: True when the storage engine deletes expired records on its own.
    native_expiry: bool = False

    @property
    @abstractmethod
    def name(self) -> str:
        """Backend identifier string."""

    def init(self) -> None:
        """Prepare the backend (create tables, directories, check connectivity)."""

    def close(self) -> None:
        """Release connections and file handles."""

    # -- forms --------------------------------------------------------------

    @abstractmethod
    def create_form(self, form: FormRecord) -> str:
        """Persist a new form and return its id.

        Raises:
            DuplicateLinkError: If either link is already taken.
        """

    @abstractmethod
    def get_form_by_fill_link(self, link: str, now: datetime) -> FormRecord | None:
        """Look up a live form by its fill link."""

    @abstractmethod
    def get_form_by_response_link(self, link: str, now: datetime) -> FormRecord | None:
        """Look up a live form by its response link."""

    @abstractmethod
    def increment_response_count(self, form_id: str) -> None:
        """Add one to the form's response counter.

        Raises:
            FormNotFoundError: If the form was deleted in the meantime.
        """

    @abstractmethod
    def delete_form(self, form_id: str) -> bool:
        """Delete a form together with all of its responses."""

    # -- responses ----------------------------------------------------------

    @abstractmethod
    def create_response(self, response: ResponseRecord) -> str:
        """Persist a response and return its id.

        Raises:
            FormNotFoundError: If the parent form no longer exists.
        """

    @abstractmethod
    def count_responses(self, form_id: str, now: datetime) -> int:
        """Number of live responses for a form."""

    @abstractmethod
    def list_responses(self, form_id: str, now: datetime) -> list[ResponseRecord]:
        """Live responses for a form, newest first."""

    @abstractmethod
    def has_response_from(self, form_id: str, submitter_key: str, now: datetime) -> bool:
        """Whether a live response from ``submitter_key`` exists."""

    @abstractmethod
    def delete_responses(self, form_id: str, response_ids: list[str]) -> int:
        """Delete the given responses of a form; returns how many were removed."""

    # -- reclamation --------------------------------------------------------

    @abstractmethod
    def reclaim_expired(self, now: datetime) -> int:
        """Delete every form and response with ``expires_at <= now``.

        Responses of deleted forms go with them. Safe to call repeatedly and
        concurrently with reads and writes.

        Returns:
            Number of records removed.
        """


def ensure_live(form: FormRecord | None, now: datetime) -> FormRecord | None:
    """Apply the liveness filter to a raw lookup result."""
    if form is None:
        return None
    if not is_live(form.expires_at, now):
        raise FormExpiredError(form.expires_at)
    return form
