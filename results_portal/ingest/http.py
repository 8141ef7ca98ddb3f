from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Any

import requests
from requests import Response
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from results_portal.settings import PortalSettings

DEFAULT_USER_AGENT = "ResultsPortal/0.1"
logger = logging.getLogger(__name__)
_SLOW_REQUEST_SECONDS = 5.0


@dataclass(slots=True)
class PoliteHttpClient:
    """Single-shot GET client for the results dataset.

    `max_retries` only covers failed connection attempts; error statuses are
    never retried.
    """

    timeout_seconds: float = 20.0
    user_agent: str = DEFAULT_USER_AGENT
    max_retries: int = 0
    backoff_factor: float = 0.5
    _session: requests.Session = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._session = requests.Session()
        self._session.headers.update({"User-Agent": self.user_agent})

        retry = Retry(
            total=self.max_retries,
            connect=self.max_retries,
            read=0,
            status=0,
            other=0,
            backoff_factor=self.backoff_factor,
            allowed_methods=frozenset({"GET"}),
            raise_on_status=False,
        )
        adapter = HTTPAdapter(max_retries=retry)
        self._session.mount("http://", adapter)
        self._session.mount("https://", adapter)

    @classmethod
    def from_settings(cls, settings: PortalSettings) -> PoliteHttpClient:
        return cls(
            timeout_seconds=settings.request_timeout_seconds,
            max_retries=settings.max_retries,
        )

    def close(self) -> None:
        self._session.close()

    def get_bytes(self, url: str, *, params: dict[str, Any] | None = None) -> bytes:
        return self._request("GET", url, params=params).content

    @property
    def timeout_tuple(self) -> tuple[float, float]:
        connect_timeout = max(1.0, min(self.timeout_seconds, 5.0))
        read_timeout = max(connect_timeout, self.timeout_seconds)
        return connect_timeout, read_timeout

    @property
    def retry_policy(self) -> Retry:
        return self._session.get_adapter("https://").max_retries

    def _request(
        self,
        method: str,
        url: str,
        *,
        params: dict[str, Any] | None = None,
    ) -> Response:
        started_at = time.monotonic()
        response = self._session.request(
            method=method,
            url=url,
            params=params,
            timeout=self.timeout_tuple,
        )
        elapsed = time.monotonic() - started_at
        if elapsed > _SLOW_REQUEST_SECONDS:
            logger.warning("Slow HTTP %s %.3fs %s", method, elapsed, url)
        response.raise_for_status()
        return response
