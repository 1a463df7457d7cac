"""Tests for ScoringClient against a fake chat-completions endpoint."""

import json
from unittest.mock import AsyncMock, patch

import httpx
import pytest

from spatial_voice.scoring.client import SYSTEM_PROMPT, ScoringClient
from spatial_voice.scoring.errors import (
    ConfigurationError,
    ProtocolError,
    ServiceError,
    TransportError,
)


class TestScoringClientInit:
    def test_defaults(self):
        client = ScoringClient(api_key="test-key")
        assert client.base_url == "https://api.deepseek.com"
        assert client.model == "deepseek-chat"
        assert client.max_tokens == 800
        assert client.temperature == 0.4
        assert client.transport_retries == 0

    def test_negative_retries_clamped(self):
        assert ScoringClient(api_key="k", transport_retries=-3).transport_retries == 0


class TestRequest:
    async def test_returns_message_content(self, make_client, ok_handler, report_json):
        client = make_client(ok_handler)
        assert await client.complete("Score this") == report_json

    async def test_request_shape(self, make_client, ok_handler, requests):
        client = make_client(ok_handler)
        await client.complete("Score this")

        assert len(requests) == 1
        request = requests[0]
        assert request.method == "POST"
        assert str(request.url) == "https://api.deepseek.com/chat/completions"
        assert request.headers["authorization"] == "Bearer test-key"
        assert request.headers["content-type"].startswith("application/json")

        body = json.loads(request.content)
        assert body["model"] == "deepseek-chat"
        assert body["max_tokens"] == 800
        assert body["temperature"] == 0.4
        assert body["response_format"] == {"type": "json_object"}
        assert body["messages"] == [
            {"role": "system", "content": SYSTEM_PROMPT},
            {"role": "user", "content": "Score this"},
        ]
        assert "public speaking coach" in SYSTEM_PROMPT

    async def test_custom_base_url(self, make_client, ok_handler, requests):
        client = make_client(ok_handler, base_url="http://localhost:9000/v1")
        await client.complete("x")
        assert str(requests[0].url) == "http://localhost:9000/v1/chat/completions"


class TestConfigurationErrors:
    @pytest.mark.parametrize("api_key", [None, "", "   "])
    async def test_missing_key_makes_no_request(self, make_client, ok_handler, requests, api_key):
        client = make_client(ok_handler, api_key=api_key)
        with pytest.raises(ConfigurationError):
            await client.complete("x")
        assert requests == []

    @pytest.mark.parametrize("base_url", ["", "api.deepseek.com", "ftp://api.deepseek.com", "https://"])
    async def test_bad_endpoint(self, make_client, ok_handler, requests, base_url):
        client = make_client(ok_handler, base_url=base_url)
        with pytest.raises(ConfigurationError):
            await client.complete("x")
        assert requests == []


class TestServiceErrors:
    async def test_rate_limited(self, make_client, requests):
        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(
                429,
                content=b'{"error":"rate limited"}',
                headers={"content-type": "application/json"},
            )

        client = make_client(handler)
        with pytest.raises(ServiceError) as exc_info:
            await client.complete("x")
        assert exc_info.value.status_code == 429
        assert "rate limited" in exc_info.value.body
        assert exc_info.value.kind == "service"
        # No retry of service errors
        assert len(requests) == 1

    async def test_server_error(self, make_client):
        client = make_client(lambda request: httpx.Response(500, text="boom"))
        with pytest.raises(ServiceError) as exc_info:
            await client.complete("x")
        assert exc_info.value.status_code == 500


class TestProtocolErrors:
    async def test_null_content(self, make_client, completion_body):
        client = make_client(lambda request: httpx.Response(200, json=completion_body(None)))
        with pytest.raises(ProtocolError):
            await client.complete("x")

    async def test_empty_content(self, make_client, completion_body):
        client = make_client(lambda request: httpx.Response(200, json=completion_body("")))
        with pytest.raises(ProtocolError):
            await client.complete("x")

    async def test_no_choices(self, make_client, completion_body):
        body = completion_body("{}")
        body["choices"] = []
        client = make_client(lambda request: httpx.Response(200, json=body))
        with pytest.raises(ProtocolError):
            await client.complete("x")


class TestTransportErrors:
    async def test_connection_failure(self, make_client, requests):
        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            raise httpx.ConnectError("connection reset")

        client = make_client(handler)
        with pytest.raises(TransportError) as exc_info:
            await client.complete("x")
        assert exc_info.value.kind == "transport"
        assert len(requests) == 1

    async def test_timeout(self, make_client):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out")

        client = make_client(handler)
        with pytest.raises(TransportError):
            await client.complete("x")

    async def test_bounded_retry_then_success(
        self, make_client, requests, report_json, completion_body
    ):
        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            if len(requests) < 3:
                raise httpx.ConnectError("connection reset")
            return httpx.Response(200, json=completion_body(report_json))

        client = make_client(handler, transport_retries=2, retry_backoff_seconds=0.5)
        with patch("spatial_voice.scoring.client.asyncio.sleep", new=AsyncMock()) as sleep:
            assert await client.complete("x") == report_json

        assert len(requests) == 3
        assert [c.args[0] for c in sleep.await_args_list] == [0.5, 1.0]

    async def test_retries_exhausted(self, make_client, requests):
        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            raise httpx.ConnectError("down")

        client = make_client(handler, transport_retries=1, retry_backoff_seconds=0.0)
        with pytest.raises(TransportError):
            await client.complete("x")
        assert len(requests) == 2
