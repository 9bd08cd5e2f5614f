"""Cliente HTTP assíncrono com timeout, logging e retry restrito.

Cada perna de chamada carrega dígitos DTMF: reenviar uma requisição que
chegou ao endpoint pode pressionar a tecla duas vezes. Por isso só há retry
quando a conexão nem foi estabelecida (httpx.ConnectError). Timeouts, erros
de leitura e status não-2xx são levantados imediatamente.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

import httpx

from ivr_navigator.observability.logging import get_logger

if TYPE_CHECKING:
    from ivr_navigator.config.settings import Settings

logger: logging.Logger = get_logger(__name__)


@dataclass
class HttpClientConfig:
    """Configuração do cliente HTTP.

    Valores padrão são seguros e conservadores.
    """

    timeout_seconds: float = 30.0
    connect_retries: int = 2
    backoff_base_seconds: float = 1.0
    backoff_max_seconds: float = 10.0
    default_headers: dict[str, str] = field(default_factory=dict)
    verify_ssl: bool = True


class HttpError(Exception):
    """Erro de requisição HTTP."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        is_retryable: bool = False,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.is_retryable = is_retryable


def _calculate_backoff(
    attempt: int,
    base_seconds: float,
    max_seconds: float,
) -> float:
    """Calcula tempo de espera com backoff exponencial."""
    backoff = (2**attempt) * base_seconds
    return min(backoff, max_seconds)


def _log_request_start(method: str, url: str, attempt: int) -> None:
    logger.debug(
        "http_request_start",
        extra={"method": method, "url": url, "attempt": attempt + 1},
    )


def _log_connect_error(method: str, url: str, attempt: int, error: str) -> None:
    logger.warning(
        "http_connect_error",
        extra={"method": method, "url": url, "attempt": attempt + 1, "error": error},
    )


def _to_http_error(exc: Exception, method: str, url: str) -> HttpError:
    """Converte exceções httpx (exceto ConnectError) em HttpError não retentável."""
    if isinstance(exc, httpx.TimeoutException):
        logger.warning(
            "http_timeout",
            extra={"method": method, "url": url, "error": str(exc)},
        )
        return HttpError("Timeout")
    logger.error(
        "http_unexpected_error",
        extra={"method": method, "url": url, "error_type": type(exc).__name__},
    )
    return HttpError(f"Erro inesperado: {type(exc).__name__}")


class HttpClient:
    """Cliente HTTP assíncrono.

    Uso típico:
        async with HttpClient(config) as client:
            response = await client.post_params(url, params={"CallSid": sid})
    """

    def __init__(self, config: HttpClientConfig | None = None) -> None:
        self._config = config or HttpClientConfig()
        self._client: httpx.AsyncClient | None = None

    @property
    def config(self) -> HttpClientConfig:
        return self._config

    async def _get_client(self) -> httpx.AsyncClient:
        """Retorna cliente httpx (lazy loading)."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self._config.timeout_seconds),
                headers=self._config.default_headers,
                verify=self._config.verify_ssl,
            )
        return self._client

    async def close(self) -> None:
        """Fecha o cliente e libera recursos."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> HttpClient:
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    async def _request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        """Executa requisição; retry apenas em falha de conexão.

        Raises:
            HttpError: status não-2xx, timeout, erro inesperado ou conexão
                recusada após todas as tentativas.
        """
        client = await self._get_client()
        cfg = self._config

        for attempt in range(cfg.connect_retries + 1):
            _log_request_start(method, url, attempt)
            try:
                response = await client.request(method, url, **kwargs)
            except httpx.ConnectError as exc:
                _log_connect_error(method, url, attempt, str(exc))
                if attempt < cfg.connect_retries:
                    backoff = _calculate_backoff(
                        attempt, cfg.backoff_base_seconds, cfg.backoff_max_seconds
                    )
                    await asyncio.sleep(backoff)
                    continue
                raise HttpError("Erro de conexão", is_retryable=True) from exc
            except httpx.HTTPError as exc:
                raise _to_http_error(exc, method, url) from exc

            if not response.is_success:
                logger.warning(
                    "http_request_failed",
                    extra={"method": method, "url": url, "status_code": response.status_code},
                )
                raise HttpError(
                    f"HTTP {response.status_code}",
                    status_code=response.status_code,
                    is_retryable=response.status_code == 429 or response.status_code >= 500,
                )

            logger.debug(
                "http_request_ok",
                extra={"method": method, "url": url, "status_code": response.status_code},
            )
            return response

        raise HttpError("Falha após todas as tentativas de conexão", is_retryable=True)

    # Métodos de conveniência

    async def post_params(
        self, url: str, params: dict[str, str] | None = None, **kwargs: Any
    ) -> httpx.Response:
        """POST sem corpo; os campos vão na query string (estilo webhook Twilio)."""
        headers = {"Content-Type": "application/x-www-form-urlencoded", **kwargs.pop("headers", {})}
        return await self._request("POST", url, params=params, headers=headers, **kwargs)

    async def post(
        self, url: str, json: dict[str, Any] | None = None, **kwargs: Any
    ) -> httpx.Response:
        """POST com corpo JSON."""
        return await self._request("POST", url, json=json, **kwargs)

    async def delete(self, url: str, **kwargs: Any) -> httpx.Response:
        """DELETE."""
        return await self._request("DELETE", url, **kwargs)


def create_http_client(
    settings: Settings | None = None, timeout_seconds: float | None = None
) -> HttpClient:
    """Factory para criar cliente HTTP configurado.

    Args:
        settings: Configurações da aplicação. Se None, usa get_settings()
        timeout_seconds: sobrescreve o timeout do endpoint IVR (ex.: advisor)
    """
    if settings is None:
        from ivr_navigator.config.settings import get_settings

        settings = get_settings()

    config = HttpClientConfig(
        timeout_seconds=timeout_seconds or settings.ivr_request_timeout_seconds,
        connect_retries=settings.ivr_connect_retries,
        backoff_base_seconds=settings.ivr_retry_backoff_seconds,
        default_headers={"User-Agent": f"{settings.service_name}/{settings.version}"},
    )

    logger.info(
        "http_client_created",
        extra={
            "timeout_seconds": config.timeout_seconds,
            "connect_retries": config.connect_retries,
        },
    )
    return HttpClient(config)
