"""Configuração de logging estruturado (JSON)."""

from __future__ import annotations

import logging

from pythonjsonlogger.json import JsonFormatter

from ivr_navigator.observability.middleware import get_call_id, get_correlation_id

PROMPT_LOG_LIMIT = 100


class ContextFilter(logging.Filter):
    """Insere service, correlation_id e call_id no record de log."""

    def __init__(self, service_name: str) -> None:
        super().__init__()
        self._service_name = service_name

    def filter(self, record: logging.LogRecord) -> bool:  # noqa: A003
        # Valores passados explicitamente via `extra` têm precedência.
        existing = getattr(record, "correlation_id", None)
        record.correlation_id = existing if existing else get_correlation_id()
        existing_call = getattr(record, "call_id", None)
        record.call_id = existing_call if existing_call else get_call_id()
        record.service = self._service_name
        return True


def configure_logging(level: str, service_name: str) -> None:
    """Configura logging JSON com campos padrão do serviço."""

    formatter = JsonFormatter(
        "%(asctime)s %(levelname)s %(name)s %(message)s %(correlation_id)s %(call_id)s %(service)s",
        rename_fields={"levelname": "level", "name": "logger"},
    )

    handler = logging.StreamHandler()
    handler.setLevel(level)
    handler.setFormatter(formatter)
    handler.addFilter(ContextFilter(service_name))

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers = [handler]


def get_logger(name: str) -> logging.Logger:
    """Retorna logger simples; o filtro injeta service/correlation_id/call_id."""

    return logging.getLogger(name)


def preview(text: str | None, limit: int = PROMPT_LOG_LIMIT) -> str:
    """Trunca prompts longos para log."""
    if not text:
        return ""
    return text[:limit] + ("..." if len(text) > limit else "")
