from __future__ import annotations

from typing import Optional

from ..core.exceptions import ValidationError


def clean_name(value: Optional[str]) -> Optional[str]:
    """Trimmed name, or None when blank (callers treat None as a no-op)."""
    if not value or not value.strip():
        return None
    return value.strip()


def require_min_length(value: str, field_name: str, min_len: int) -> str:
    if value is None or len(value) < min_len:
        raise ValidationError(f"{field_name} must be at least {min_len} characters")
    return value
