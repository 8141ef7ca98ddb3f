from __future__ import annotations

from enum import Enum


class LoadErrorKind(str, Enum):
    UNREACHABLE = "unreachable"
    MALFORMED = "malformed"


class LoadError(Exception):
    """The results dataset could not be fetched or parsed.

    Both kinds end the session the same way; `kind` only matters for diagnostics.
    """

    def __init__(self, message: str, *, kind: LoadErrorKind) -> None:
        super().__init__(message)
        self.kind = kind

    def __str__(self) -> str:
        return f"[{self.kind.value}] {super().__str__()}"
