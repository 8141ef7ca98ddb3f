"""Category browsing and identity-checked record lookup."""

from results_portal.lookup.catalog import list_categories, records_in_category
from results_portal.lookup.errors import ValidationError, ValidationErrorKind
from results_portal.lookup.matcher import (
    MIN_PHONE_FRAGMENT_LENGTH,
    SearchRequest,
    is_birth_date_match,
    is_phone_match,
    match_record,
)

__all__ = [
    "MIN_PHONE_FRAGMENT_LENGTH",
    "SearchRequest",
    "ValidationError",
    "ValidationErrorKind",
    "is_birth_date_match",
    "is_phone_match",
    "list_categories",
    "match_record",
    "records_in_category",
]
