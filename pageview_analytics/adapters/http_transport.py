"""
HTTP transport adapter for the page-view tracker.
"""

from __future__ import annotations

from typing import Any

import httpx

from pageview_analytics.core.errors import ConfigurationMissing, TransportError


class HttpxTransport:
    """Posts event payloads as JSON to the ingestion endpoint."""

    def __init__(
        self,
        endpoint: str,
        timeout: float = 5.0,
        client: httpx.Client | None = None,
    ) -> None:
        if not endpoint:
            raise ConfigurationMissing("tracking endpoint")
        self.endpoint = endpoint
        self.timeout = timeout
        self._client = client

    def send(self, payload: dict[str, Any]) -> None:
        try:
            if self._client is not None:
                response = self._client.post(self.endpoint, json=payload, timeout=self.timeout)
            else:
                response = httpx.post(self.endpoint, json=payload, timeout=self.timeout)
        except httpx.HTTPError as e:
            raise TransportError(f"POST {self.endpoint} failed: {e}") from e

        if not response.is_success:
            raise TransportError(f"POST {self.endpoint} returned {response.status_code}")
