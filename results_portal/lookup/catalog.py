from __future__ import annotations

from typing import Iterable

from results_portal.normalize.schema import StudentRecord


def list_categories(records: Iterable[StudentRecord]) -> list[str]:
    return sorted({record.category for record in records if record.category})


def records_in_category(records: Iterable[StudentRecord], category: str) -> list[StudentRecord]:
    if not category:
        return []
    return [record for record in records if record.category == category]
