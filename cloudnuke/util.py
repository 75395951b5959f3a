"""Small helpers shared across the package."""

import random
import string

_BASE_62_CHARS = string.digits + string.ascii_uppercase + string.ascii_lowercase
_UNIQUE_ID_LENGTH = 6


def unique_id() -> str:
    """Return a short base-62 id, unlikely to collide between parallel runs."""
    return "".join(random.choices(_BASE_62_CHARS, k=_UNIQUE_ID_LENGTH))