from __future__ import annotations

from .base import RawResponse
from .errors import LoadError, LoadErrorKind
from .http import PoliteHttpClient
from .loader import fetch_resource, load_dataset, parse_table

__all__ = [
    "LoadError",
    "LoadErrorKind",
    "PoliteHttpClient",
    "RawResponse",
    "fetch_resource",
    "load_dataset",
    "parse_table",
]
