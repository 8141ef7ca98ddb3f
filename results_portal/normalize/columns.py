from __future__ import annotations

from typing import Any, Mapping

from results_portal.normalize.values import format_birth_date, format_phone, is_missing

_BYTE_ORDER_MARK = "\ufeff"

# Header spelling -> canonical field. Canonical names map to themselves so an
# already-normalized row passes through unchanged.
COLUMN_ALIASES: dict[str, str] = {
    "name": "name",
    "الاسم": "name",
    "category": "category",
    "className": "category",
    "المرحلة": "category",
    "المرحله": "category",
    "birthDate": "birthDate",
    "br-date": "birthDate",
    "تاريخ الميلاد": "birthDate",
    "phone": "phone",
    "mobile1": "phone",
    "رقم الموبايل": "phone",
    "score1": "score1",
    "Score 1": "score1",
    "الدرجة 1": "score1",
    "score2": "score2",
    "Score 2": "score2",
    "الدرجة 2": "score2",
}


def clean_key(raw_key: Any) -> str:
    return str(raw_key).replace(_BYTE_ORDER_MARK, "").strip()


def normalize_key(raw_key: Any) -> str:
    """Map a raw header to its canonical field name, or its cleaned spelling."""
    cleaned = clean_key(raw_key)
    return COLUMN_ALIASES.get(cleaned, cleaned)


def normalize_row(row: Mapping[Any, Any]) -> dict[str, Any]:
    normalized: dict[str, Any] = {}
    for raw_key, value in row.items():
        key = normalize_key(raw_key)
        if key == "birthDate":
            normalized[key] = format_birth_date(value)
        elif key == "phone":
            normalized[key] = format_phone(value)
        elif is_missing(value):
            # Empty spreadsheet cell.
            continue
        else:
            normalized[key] = value
    return normalized
