"""Fábrica da aplicação FastAPI."""

from __future__ import annotations

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from ivr_navigator.adapters.ivr import create_call_endpoint_client
from ivr_navigator.api.routes import router
from ivr_navigator.config.settings import Settings, get_settings
from ivr_navigator.infra.http import create_http_client
from ivr_navigator.observability.logging import configure_logging, get_logger
from ivr_navigator.observability.middleware import CorrelationIdMiddleware

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Fecha o cliente HTTP compartilhado no shutdown."""
    logger.info("app_starting", extra={"service": app.state.settings.service_name})
    try:
        yield
    finally:
        await app.state.http_client.close()
        logger.info("app_stopped", extra={"service": app.state.settings.service_name})


def create_app(settings: Settings | None = None) -> FastAPI:
    """Cria a aplicação FastAPI."""
    settings = settings or get_settings()
    configure_logging(settings.log_level, settings.service_name)

    validation_errors: list[str] = []
    validation_errors.extend(settings.validate_traversal_config())
    validation_errors.extend(settings.validate_advisor_config())
    validation_errors.extend(settings.validate_endpoint_config())

    if validation_errors:
        error_msg = "; ".join(validation_errors)
        raise ValueError(f"Configuração inválida: {error_msg}")

    app = FastAPI(title=settings.service_name, version=settings.version, lifespan=lifespan)
    app.add_middleware(CorrelationIdMiddleware)
    app.include_router(router)

    app.state.settings = settings
    app.state.http_client = create_http_client(settings)
    app.state.call_endpoint_factory = create_call_endpoint_client

    return app


app = create_app()
