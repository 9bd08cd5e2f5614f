"""Testes unitários para infra/http.py.

Valida timeout, retry restrito a falhas de conexão e mapeamento de erros.
"""

from __future__ import annotations

from unittest.mock import AsyncMock, patch

import httpx
import pytest

from ivr_navigator.config.settings import Settings
from ivr_navigator.infra.http import (
    HttpClient,
    HttpClientConfig,
    HttpError,
    _calculate_backoff,
    create_http_client,
)


def _client_with(handler, **config) -> HttpClient:
    client = HttpClient(HttpClientConfig(**config))
    client._client = httpx.AsyncClient(transport=httpx.MockTransport(handler))  # noqa: SLF001
    return client


class TestHttpClientConfig:
    def test_default_values(self) -> None:
        config = HttpClientConfig()
        assert config.timeout_seconds == 30.0
        assert config.connect_retries == 2
        assert config.verify_ssl is True


class TestBackoff:
    def test_exponential(self) -> None:
        assert _calculate_backoff(0, 1.0, 10.0) == 1.0
        assert _calculate_backoff(2, 1.0, 10.0) == 4.0

    def test_capped(self) -> None:
        assert _calculate_backoff(10, 1.0, 10.0) == 10.0


class TestHttpClientRequests:
    """Requisições e política de retry."""

    @pytest.mark.asyncio
    async def test_post_params_success(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, text="<Response/>")

        client = _client_with(handler)
        response = await client.post_params("http://ivr.test/voice", params={"Digits": "4"})

        assert response.text == "<Response/>"
        assert seen[0].url.params["Digits"] == "4"
        assert seen[0].content == b""
        assert seen[0].headers["content-type"] == "application/x-www-form-urlencoded"
        await client.close()

    @pytest.mark.asyncio
    async def test_connect_error_is_retried(self) -> None:
        attempts = {"count": 0}

        def handler(request: httpx.Request) -> httpx.Response:
            attempts["count"] += 1
            if attempts["count"] < 3:
                raise httpx.ConnectError("refused", request=request)
            return httpx.Response(200, text="ok")

        client = _client_with(handler, connect_retries=2)
        with patch("asyncio.sleep", new_callable=AsyncMock) as mock_sleep:
            response = await client.post_params("http://ivr.test/voice")

        assert response.text == "ok"
        assert attempts["count"] == 3
        assert mock_sleep.await_count == 2

    @pytest.mark.asyncio
    async def test_connect_error_exhausted(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        client = _client_with(handler, connect_retries=1)
        with patch("asyncio.sleep", new_callable=AsyncMock):
            with pytest.raises(HttpError) as exc_info:
                await client.post_params("http://ivr.test/voice")

        assert exc_info.value.is_retryable is True

    @pytest.mark.asyncio
    async def test_timeout_is_not_retried(self) -> None:
        attempts = {"count": 0}

        def handler(request: httpx.Request) -> httpx.Response:
            attempts["count"] += 1
            raise httpx.ReadTimeout("slow", request=request)

        client = _client_with(handler, connect_retries=3)
        with pytest.raises(HttpError, match="Timeout"):
            await client.post_params("http://ivr.test/voice", params={"Digits": "4"})

        assert attempts["count"] == 1

    @pytest.mark.asyncio
    async def test_server_error_is_not_retried(self) -> None:
        attempts = {"count": 0}

        def handler(request: httpx.Request) -> httpx.Response:
            attempts["count"] += 1
            return httpx.Response(503)

        client = _client_with(handler, connect_retries=3)
        with pytest.raises(HttpError) as exc_info:
            await client.post_params("http://ivr.test/voice")

        assert attempts["count"] == 1
        assert exc_info.value.status_code == 503
        assert exc_info.value.is_retryable is True

    @pytest.mark.asyncio
    async def test_client_error(self) -> None:
        client = _client_with(lambda request: httpx.Response(404))
        with pytest.raises(HttpError) as exc_info:
            await client.delete("http://advisor.test/api/sessions/x")

        assert exc_info.value.status_code == 404
        assert exc_info.value.is_retryable is False

    @pytest.mark.asyncio
    async def test_context_manager_closes(self) -> None:
        client = _client_with(lambda request: httpx.Response(200, json={"ok": True}))
        async with client as active:
            response = await active.post("http://advisor.test/api", json={"a": 1})
            assert response.json() == {"ok": True}

        assert client._client is None  # noqa: SLF001


class TestFactory:
    def test_create_from_settings(self) -> None:
        settings = Settings(ivr_request_timeout_seconds=12.0, ivr_connect_retries=4)
        client = create_http_client(settings)

        assert client.config.timeout_seconds == 12.0
        assert client.config.connect_retries == 4
        assert client.config.default_headers["User-Agent"].startswith("ivr_navigator/")

    def test_timeout_override(self) -> None:
        client = create_http_client(Settings(), timeout_seconds=60.0)
        assert client.config.timeout_seconds == 60.0
