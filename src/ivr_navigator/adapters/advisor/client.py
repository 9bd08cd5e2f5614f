"""Cliente da API de sessões do advisor externo (modo assisted).

Contrato HTTP:
- POST   /api/sessions                 {"profile": ...}  → {"sessionId": ...}
- POST   /api/sessions/{id}/messages   {"message": ...}  → {"response": ...}
- DELETE /api/sessions/{id}
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ivr_navigator.domain.errors import AdvisorError
from ivr_navigator.domain.protocols.advisor import AdvisorProtocol
from ivr_navigator.infra.http import HttpClient, HttpError, create_http_client
from ivr_navigator.observability.logging import get_logger, preview

if TYPE_CHECKING:
    from ivr_navigator.config.settings import Settings

logger: logging.Logger = get_logger(__name__)


class SessionApiAdvisor(AdvisorProtocol):
    """Advisor com uma sessão de conversa por chamada (lazy).

    Com `owns_http_client=True` o HttpClient é fechado em `close()`.
    """

    def __init__(
        self,
        http_client: HttpClient,
        base_url: str,
        profile: str,
        *,
        owns_http_client: bool = False,
    ) -> None:
        self._http = http_client
        self._owns_http_client = owns_http_client
        self._base_url = base_url.rstrip("/")
        self._profile = profile
        self._session_id: str | None = None

    @property
    def session_id(self) -> str | None:
        return self._session_id

    async def _open(self) -> str:
        try:
            response = await self._http.post(
                f"{self._base_url}/api/sessions", json={"profile": self._profile}
            )
            session_id = response.json()["sessionId"]
        except (HttpError, KeyError, ValueError) as exc:
            logger.error("advisor_session_open_failed", extra={"error": str(exc)})
            raise AdvisorError(f"Falha ao criar sessão do advisor: {exc}") from exc
        logger.info("advisor_session_opened", extra={"advisor_session_id": session_id})
        self._session_id = session_id
        return session_id

    async def ask(self, prompt: str) -> str:
        """Envia o prompt IVR e devolve a resposta textual do advisor."""
        session_id = self._session_id or await self._open()
        logger.info(
            "advisor_prompt_sent",
            extra={"advisor_session_id": session_id, "prompt": preview(prompt)},
        )
        try:
            response = await self._http.post(
                f"{self._base_url}/api/sessions/{session_id}/messages",
                json={"message": prompt},
            )
            answer = response.json()["response"]
        except (HttpError, KeyError, ValueError) as exc:
            logger.error(
                "advisor_ask_failed",
                extra={"advisor_session_id": session_id, "error": str(exc)},
            )
            raise AdvisorError(f"Falha ao consultar advisor: {exc}") from exc
        logger.info(
            "advisor_answer_received",
            extra={"advisor_session_id": session_id, "answer": preview(answer)},
        )
        return answer or ""

    async def close(self) -> None:
        """Encerra a sessão remota, se houver, e o HttpClient próprio."""
        try:
            await self._end_session()
        finally:
            if self._owns_http_client:
                await self._http.close()

    async def _end_session(self) -> None:
        if not self._session_id:
            return
        session_id, self._session_id = self._session_id, None
        try:
            await self._http.delete(f"{self._base_url}/api/sessions/{session_id}")
        except HttpError as exc:
            logger.warning(
                "advisor_session_close_failed",
                extra={"advisor_session_id": session_id, "error": str(exc)},
            )
            return
        logger.info("advisor_session_closed", extra={"advisor_session_id": session_id})


def create_advisor(settings: Settings, http_client: HttpClient | None = None) -> SessionApiAdvisor:
    """Factory do advisor a partir de Settings.

    Sem `http_client`, cria um próprio (timeout do advisor) e o fecha no close().
    """
    owns_http_client = http_client is None
    if http_client is None:
        http_client = create_http_client(
            settings, timeout_seconds=settings.advisor_request_timeout_seconds
        )
    return SessionApiAdvisor(
        http_client=http_client,
        base_url=settings.advisor_base_url,
        profile=settings.advisor_profile,
        owns_http_client=owns_http_client,
    )
