"""Cliente do endpoint IVR via webhook de voz (TwiML).

Cada método é exatamente uma perna: um POST cujos campos CallSid, CallStatus,
From, To e, quando houver, Digits vão na query string. O cliente não divide
entradas.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ivr_navigator.adapters.ivr.twiml import extract_prompt
from ivr_navigator.domain.errors import CallEndpointError
from ivr_navigator.domain.protocols.call_endpoint import CallEndpointProtocol
from ivr_navigator.infra.http import HttpClient, HttpError, create_http_client
from ivr_navigator.observability.logging import get_logger, preview

if TYPE_CHECKING:
    from ivr_navigator.config.settings import Settings

logger: logging.Logger = get_logger(__name__)


class TwilioWebhookClient(CallEndpointProtocol):
    """Implementa CallEndpointProtocol sobre o webhook de voz."""

    def __init__(
        self,
        http_client: HttpClient,
        voice_url: str,
        status_url: str,
        from_number: str,
        to_number: str,
    ) -> None:
        self._http = http_client
        self._voice_url = voice_url
        self._status_url = status_url
        self._from = from_number
        self._to = to_number
        self._active: set[str] = set()

    def is_active(self, call_id: str) -> bool:
        return call_id in self._active

    def _params(self, call_id: str, status: str, digits: str = "") -> dict[str, str]:
        params = {
            "CallSid": call_id,
            "CallStatus": status,
            "From": self._from,
            "To": self._to,
        }
        if digits:
            params["Digits"] = digits
        return params

    async def _post(self, url: str, params: dict[str, str], leg: str) -> str:
        try:
            response = await self._http.post_params(url, params=params)
        except HttpError as exc:
            logger.error(
                "ivr_leg_failed",
                extra={
                    "call_id": params["CallSid"],
                    "leg": leg,
                    "status_code": exc.status_code,
                    "error": str(exc),
                },
            )
            raise CallEndpointError(f"{leg} falhou: {exc}", status_code=exc.status_code) from exc

        prompt = extract_prompt(response.text)
        logger.info(
            "ivr_leg_completed",
            extra={"call_id": params["CallSid"], "leg": leg, "prompt": preview(prompt)},
        )
        return prompt

    def _require_active(self, call_id: str, leg: str) -> None:
        if call_id not in self._active:
            logger.error("ivr_call_not_active", extra={"call_id": call_id, "leg": leg})
            raise CallEndpointError(f"Nenhuma chamada ativa para {call_id}")

    async def start_call(self, call_id: str) -> str:
        logger.info("ivr_call_starting", extra={"call_id": call_id})
        prompt = await self._post(self._voice_url, self._params(call_id, "in-progress"), "start")
        self._active.add(call_id)
        return prompt

    async def send_input(self, call_id: str, digits: str) -> str:
        self._require_active(call_id, "input")
        return await self._post(
            self._voice_url, self._params(call_id, "in-progress", digits), "input"
        )

    async def continue_call(self, call_id: str) -> str:
        self._require_active(call_id, "continue")
        return await self._post(self._voice_url, self._params(call_id, "in-progress"), "continue")

    async def end_call(self, call_id: str) -> None:
        try:
            await self._post(self._status_url, self._params(call_id, "completed"), "end")
        finally:
            self._active.discard(call_id)


def create_call_endpoint_client(
    settings: Settings, http_client: HttpClient | None = None
) -> TwilioWebhookClient:
    """Factory do cliente IVR a partir de Settings."""
    return TwilioWebhookClient(
        http_client=http_client or create_http_client(settings),
        voice_url=settings.ivr_voice_url,
        status_url=settings.ivr_status_url,
        from_number=settings.ivr_from_number,
        to_number=settings.ivr_to_number,
    )
