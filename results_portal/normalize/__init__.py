from __future__ import annotations

from .columns import COLUMN_ALIASES, normalize_key, normalize_row
from .schema import CANONICAL_FIELDS, StudentRecord
from .values import format_birth_date, format_phone

__all__ = [
    "CANONICAL_FIELDS",
    "COLUMN_ALIASES",
    "StudentRecord",
    "format_birth_date",
    "format_phone",
    "normalize_key",
    "normalize_row",
]
