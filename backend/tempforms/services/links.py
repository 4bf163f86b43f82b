"""Link identity — the two unguessable credentials that locate a form."""

import re
import secrets
import string
from typing import Literal, NamedTuple

LinkKind = Literal["fill", "response"]

FILL_LINK_ALPHABET = string.ascii_letters + string.digits
FILL_LINK_LENGTH = 12  # 62^12 ≈ 71 bits
RESPONSE_LINK_BYTES = 16  # 32 hex chars, 128 bits
FIELD_ID_LENGTH = 8

_LINK_PATTERNS: dict[str, re.Pattern] = {
    "fill": re.compile(rf"^[A-Za-z0-9]{{{FILL_LINK_LENGTH}}}$"),
    "response": re.compile(rf"^[a-f0-9]{{{RESPONSE_LINK_BYTES * 2}}}$"),
}


class LinkPair(NamedTuple):
    fill_link: str
    response_link: str


def _random_alphanumeric(length: int) -> str:
    return "".join(secrets.choice(FILL_LINK_ALPHABET) for _ in range(length))


def generate_fill_link() -> str:
    """Short shareable link for filling a form."""
    return _random_alphanumeric(FILL_LINK_LENGTH)


def generate_response_link() -> str:
    """Longer hex link for viewing responses."""
    return secrets.token_hex(RESPONSE_LINK_BYTES)


def generate_link_pair() -> LinkPair:
    """Mint a fill link and an independent response link.

    The two are drawn separately from a CSPRNG and differ in length, so one
    can never equal or reveal the other. Uniqueness against stored forms is
    the store's job.
    """
    return LinkPair(fill_link=generate_fill_link(), response_link=generate_response_link())


def validate_link_format(link: object, kind: LinkKind = "fill") -> bool:
    """Cheap shape check before any storage lookup."""
    if not isinstance(link, str) or not link:
        return False
    pattern = _LINK_PATTERNS.get(kind)
    if pattern is None:
        return False
    return pattern.fullmatch(link) is not None


def generate_field_id() -> str:
    return f"field_{_random_alphanumeric(FIELD_ID_LENGTH)}"
