from __future__ import annotations

from enum import Enum


class ValidationErrorKind(str, Enum):
    RECORD_NOT_FOUND = "record_not_found"
    CREDENTIAL_MISMATCH = "credential_mismatch"


class ValidationError(Exception):
    """A search attempt did not unlock a record.

    `CREDENTIAL_MISMATCH` never says which identity factor was wrong.
    """

    def __init__(self, message: str, *, kind: ValidationErrorKind) -> None:
        super().__init__(message)
        self.kind = kind
