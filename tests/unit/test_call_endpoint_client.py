"""Testes do cliente IVR (webhook de voz)."""

from __future__ import annotations

from unittest.mock import AsyncMock

import httpx
import pytest

from ivr_navigator.adapters.ivr.client import TwilioWebhookClient, create_call_endpoint_client
from ivr_navigator.config.settings import Settings
from ivr_navigator.domain.errors import CallEndpointError
from ivr_navigator.infra.http import HttpClient, HttpError

VOICE_URL = "http://ivr.test/twilio/v1/voice"
STATUS_URL = "http://ivr.test/twilio/v1/voice/status"


def _twiml(text: str) -> httpx.Response:
    return httpx.Response(200, text=f"<Response><Gather><Say>{text}</Say></Gather></Response>")


@pytest.fixture
def http_client() -> AsyncMock:
    mock = AsyncMock(spec=HttpClient)
    mock.post_params.return_value = _twiml("Welcome")
    return mock


@pytest.fixture
def client(http_client: AsyncMock) -> TwilioWebhookClient:
    return TwilioWebhookClient(
        http_client=http_client,
        voice_url=VOICE_URL,
        status_url=STATUS_URL,
        from_number="7249143802",
        to_number="9193736940",
    )


class TestLegs:
    """Cada método é exatamente um POST com os campos na query string."""

    @pytest.mark.asyncio
    async def test_start_call(self, client, http_client) -> None:
        prompt = await client.start_call("IvrNav_1")

        assert prompt == "Welcome"
        assert client.is_active("IvrNav_1")
        http_client.post_params.assert_awaited_once_with(
            VOICE_URL,
            params={
                "CallSid": "IvrNav_1",
                "CallStatus": "in-progress",
                "From": "7249143802",
                "To": "9193736940",
            },
        )

    @pytest.mark.asyncio
    async def test_send_input_includes_digits(self, client, http_client) -> None:
        await client.start_call("IvrNav_1")
        http_client.post_params.return_value = _twiml("Hours")

        prompt = await client.send_input("IvrNav_1", "234")

        assert prompt == "Hours"
        params = http_client.post_params.await_args.kwargs["params"]
        assert params["Digits"] == "234"

    @pytest.mark.asyncio
    async def test_continue_has_no_digits(self, client, http_client) -> None:
        await client.start_call("IvrNav_1")
        await client.continue_call("IvrNav_1")

        params = http_client.post_params.await_args.kwargs["params"]
        assert "Digits" not in params

    @pytest.mark.asyncio
    async def test_end_call_posts_completed_status(self, client, http_client) -> None:
        await client.start_call("IvrNav_1")
        http_client.post_params.return_value = httpx.Response(200, text="")

        await client.end_call("IvrNav_1")

        url = http_client.post_params.await_args.args[0]
        params = http_client.post_params.await_args.kwargs["params"]
        assert url == STATUS_URL
        assert params["CallStatus"] == "completed"
        assert not client.is_active("IvrNav_1")


class TestErrors:
    @pytest.mark.asyncio
    async def test_input_without_active_call(self, client, http_client) -> None:
        with pytest.raises(CallEndpointError):
            await client.send_input("IvrNav_x", "1")
        http_client.post_params.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_http_error_is_wrapped(self, client, http_client) -> None:
        http_client.post_params.side_effect = HttpError("HTTP 503", status_code=503)

        with pytest.raises(CallEndpointError) as exc_info:
            await client.start_call("IvrNav_1")

        assert exc_info.value.status_code == 503
        assert not client.is_active("IvrNav_1")

    @pytest.mark.asyncio
    async def test_end_call_failure_still_deactivates(self, client, http_client) -> None:
        await client.start_call("IvrNav_1")
        http_client.post_params.side_effect = HttpError("Timeout")

        with pytest.raises(CallEndpointError):
            await client.end_call("IvrNav_1")

        assert not client.is_active("IvrNav_1")


class TestFactory:
    def test_urls_from_settings(self) -> None:
        settings = Settings(ivr_base_url="https://ivr.example.com/")
        client = create_call_endpoint_client(settings, http_client=AsyncMock(spec=HttpClient))

        assert client._voice_url == "https://ivr.example.com/twilio/v1/voice"  # noqa: SLF001
        assert client._status_url == "https://ivr.example.com/twilio/v1/voice/status"  # noqa: SLF001


class TestWireFormat:
    """Campos viajam na query string com corpo vazio."""

    @pytest.mark.asyncio
    async def test_fields_sent_as_query_params(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return _twiml("Hours")

        http = HttpClient()
        http._client = httpx.AsyncClient(transport=httpx.MockTransport(handler))  # noqa: SLF001
        client = TwilioWebhookClient(
            http_client=http,
            voice_url=VOICE_URL,
            status_url=STATUS_URL,
            from_number="7249143802",
            to_number="9193736940",
        )

        await client.start_call("C1")
        await client.send_input("C1", "4")
        await http.close()

        request = seen[-1]
        assert request.method == "POST"
        assert request.content == b""
        assert dict(request.url.params) == {
            "CallSid": "C1",
            "CallStatus": "in-progress",
            "From": "7249143802",
            "To": "9193736940",
            "Digits": "4",
        }
