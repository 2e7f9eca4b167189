from __future__ import annotations

import secrets
import string

from .datetime_utils import now_ms

_ALPHABET = string.ascii_lowercase + string.digits


def fresh_id() -> str:
    """Millisecond timestamp plus a 9-char random suffix.

    Collisions are not detected; two ids minted in the same millisecond collide
    only if the 36**9 suffixes also match.
    """
    suffix = "".join(secrets.choice(_ALPHABET) for _ in range(9))
    return f"{now_ms()}{suffix}"
