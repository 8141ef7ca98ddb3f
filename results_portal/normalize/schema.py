from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping

from results_portal.normalize.values import cell_text

CANONICAL_FIELDS = ("name", "category", "birthDate", "phone", "score1", "score2")


@dataclass(frozen=True, slots=True)
class StudentRecord:
    """Canonical student result record.

    Columns outside the canonical set are kept in `extras` under their trimmed
    header spelling, in source column order.
    """

    name: str
    category: str
    birth_date: str
    phone: str
    score1: Any = None
    score2: Any = None
    extras: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))

    @classmethod
    def from_mapping(cls, row: Mapping[str, Any]) -> StudentRecord:
        extras = {key: value for key, value in row.items() if key not in CANONICAL_FIELDS}
        return cls(
            name=cell_text(row.get("name")),
            category=cell_text(row.get("category")),
            birth_date=cell_text(row.get("birthDate")),
            phone=cell_text(row.get("phone")),
            score1=row.get("score1"),
            score2=row.get("score2"),
            extras=MappingProxyType(extras),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "category": self.category,
            "birthDate": self.birth_date,
            "phone": self.phone,
            "score1": self.score1,
            "score2": self.score2,
            **self.extras,
        }
