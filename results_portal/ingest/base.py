from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime


@dataclass(slots=True)
class RawResponse:
    content: bytes
    location: str
    fetched_at: datetime

    @staticmethod
    def utcnow() -> datetime:
        return datetime.now(tz=UTC)
