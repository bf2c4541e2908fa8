"""
Tests for the httpx tracker transport.
"""

from __future__ import annotations

import json

import httpx
import pytest

from pageview_analytics.adapters.http_transport import HttpxTransport
from pageview_analytics.core.errors import ConfigurationMissing, TransportError

ENDPOINT = "https://analytics.example.com/api/analytics/track"


def make_client(handler) -> httpx.Client:
    return httpx.Client(transport=httpx.MockTransport(handler))


class TestHttpxTransport:
    def test_posts_json(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"data": {"success": True}})

        transport = HttpxTransport(ENDPOINT, client=make_client(handler))
        transport.send({"page_url": "https://example.com/"})

        assert seen[0].method == "POST"
        assert str(seen[0].url) == ENDPOINT
        assert json.loads(seen[0].content) == {"page_url": "https://example.com/"}

    def test_error_status_raises(self) -> None:
        transport = HttpxTransport(
            ENDPOINT,
            client=make_client(lambda request: httpx.Response(400, json={})),
        )

        with pytest.raises(TransportError, match="400"):
            transport.send({})

    def test_network_error_raises(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        transport = HttpxTransport(ENDPOINT, client=make_client(handler))

        with pytest.raises(TransportError):
            transport.send({})

    def test_endpoint_required(self) -> None:
        with pytest.raises(ConfigurationMissing):
            HttpxTransport("")
