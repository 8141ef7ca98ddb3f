from __future__ import annotations

import math
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping
from urllib.parse import urljoin

DEFAULT_RESOURCE_PATH = "result.csv"
_URL_SCHEMES = ("http://", "https://")


def is_url(location: str) -> bool:
    return location.strip().lower().startswith(_URL_SCHEMES)


@dataclass(frozen=True, slots=True)
class PortalSettings:
    """Where the results dataset lives and how it is fetched."""

    serving_root: str = "."
    resource_path: str = DEFAULT_RESOURCE_PATH
    delimiter: str = ","
    request_timeout_seconds: float = 20.0
    max_retries: int = 0

    def __post_init__(self) -> None:
        if not str(self.resource_path).strip():
            raise ValueError("Setting 'resource_path' must not be empty.")
        if len(self.delimiter) != 1:
            raise ValueError("Setting 'delimiter' must be a single character.")
        timeout = float(self.request_timeout_seconds)
        if not math.isfinite(timeout) or timeout <= 0.0:
            raise ValueError("Setting 'request_timeout_seconds' must be a finite number greater than 0.")
        if self.max_retries < 0:
            raise ValueError("Setting 'max_retries' must be non-negative.")

    @classmethod
    def baseline(cls) -> PortalSettings:
        return cls()

    @classmethod
    def from_mapping(cls, payload: Mapping[str, Any] | None) -> PortalSettings:
        values = payload or {}
        baseline = cls.baseline()
        return cls(
            serving_root=str(values.get("serving_root", baseline.serving_root)),
            resource_path=str(values.get("resource_path", baseline.resource_path)),
            delimiter=str(values.get("delimiter", baseline.delimiter)),
            request_timeout_seconds=float(
                values.get("request_timeout_seconds", baseline.request_timeout_seconds)
            ),
            max_retries=int(values.get("max_retries", baseline.max_retries)),
        )

    @property
    def resource_location(self) -> str:
        if is_url(self.resource_path):
            return self.resource_path
        if is_url(self.serving_root):
            root = self.serving_root if self.serving_root.endswith("/") else f"{self.serving_root}/"
            return urljoin(root, self.resource_path.lstrip("/"))
        return str(Path(self.serving_root) / self.resource_path.lstrip("/"))

    def to_dict(self) -> dict[str, Any]:
        return {
            "serving_root": self.serving_root,
            "resource_path": self.resource_path,
            "delimiter": self.delimiter,
            "request_timeout_seconds": self.request_timeout_seconds,
            "max_retries": self.max_retries,
        }
