from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Sequence

from results_portal.lookup.catalog import records_in_category
from results_portal.lookup.errors import ValidationError, ValidationErrorKind
from results_portal.normalize.schema import StudentRecord

MIN_PHONE_FRAGMENT_LENGTH = 6
_WHITESPACE_PATTERN = re.compile(r"\s+")


def _strip_whitespace(value: str) -> str:
    return _WHITESPACE_PATTERN.sub("", value)


def is_birth_date_match(stored: str, entered: str) -> bool:
    return stored == entered


def is_phone_match(stored: str, entered: str) -> bool:
    """True when `entered` is a long enough contiguous piece of `stored`."""
    cleaned_entered = _strip_whitespace(entered)
    cleaned_stored = _strip_whitespace(str(stored))
    if len(cleaned_entered) < MIN_PHONE_FRAGMENT_LENGTH:
        return False
    return cleaned_entered in cleaned_stored


def match_record(
    records: Sequence[StudentRecord],
    category: str,
    student_name: str,
    birth_date_input: str,
    phone_input: str,
) -> StudentRecord:
    candidates = records_in_category(records, category)
    target = next((record for record in candidates if record.name == student_name), None)
    if target is None:
        raise ValidationError(
            "Selected student was not found in the selected category.",
            kind=ValidationErrorKind.RECORD_NOT_FOUND,
        )

    date_ok = is_birth_date_match(target.birth_date, birth_date_input)
    phone_ok = is_phone_match(target.phone, phone_input)
    if not (date_ok and phone_ok):
        raise ValidationError(
            "Identity factors do not match the selected record.",
            kind=ValidationErrorKind.CREDENTIAL_MISMATCH,
        )
    return target


@dataclass(frozen=True, slots=True)
class SearchRequest:
    """One submitted search attempt."""

    category: str
    student_name: str
    birth_date: str
    phone: str

    def match(self, records: Sequence[StudentRecord]) -> StudentRecord:
        return match_record(
            records,
            self.category,
            self.student_name,
            self.birth_date,
            self.phone,
        )
