import hashlib

import bcrypt

from tempforms.core.config import settings

# ---------------------------------------------------------------------------
# Response password utilities
# ---------------------------------------------------------------------------


def hash_password(password: str) -> str:
    salt = bcrypt.gensalt(rounds=settings.BCRYPT_ROUNDS)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    if not plain_password or not hashed_password:
        return False
    try:
        return bcrypt.checkpw(plain_password.encode("utf-8"), hashed_password.encode("utf-8"))
    except ValueError:
        # Malformed stored hash
        return False


# ---------------------------------------------------------------------------
# Submitter identity
# ---------------------------------------------------------------------------


def submitter_key(client_address: str | None) -> str | None:
    """Hash a client address so raw IPs never reach storage."""
    if not client_address:
        return None
    return hashlib.sha256(client_address.encode()).hexdigest()
