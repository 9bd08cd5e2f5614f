"""Rotas HTTP: saúde, taxonomia e execução de navegações."""

from __future__ import annotations

from typing import Any

import anyio.to_thread
from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field

from ivr_navigator.adapters.advisor import create_advisor
from ivr_navigator.api.dependencies import (
    CallEndpointFactory,
    get_call_endpoint_factory,
    get_http_client,
    get_settings,
)
from ivr_navigator.application.driver import SessionResult
from ivr_navigator.application.navigation import NavigationConfig, build_driver
from ivr_navigator.application.reporting import save_report
from ivr_navigator.config.settings import Settings
from ivr_navigator.domain.actions import TraversalMode
from ivr_navigator.domain.diagram import to_dot
from ivr_navigator.domain.taxonomy import TAXONOMY, candidates_for, legal_successors
from ivr_navigator.infra.http import HttpClient
from ivr_navigator.observability.logging import get_logger
from ivr_navigator.observability.middleware import get_correlation_id

logger = get_logger(__name__)

router = APIRouter()


class NavigationRequest(BaseModel):
    mode: TraversalMode | None = None
    max_steps: int | None = Field(default=None, ge=1, le=200)
    label: str | None = Field(default=None, max_length=32, pattern=r"^[A-Za-z0-9_-]+$")
    save_report: bool = False


class NavigationResponse(BaseModel):
    result: SessionResult
    diagram: str
    report_path: str | None = None


@router.get("/health")
def health(settings: Settings = Depends(get_settings)) -> dict[str, str]:
    """Healthcheck simples."""
    return {"status": "ok", "service": settings.service_name, "version": settings.version}


@router.get("/v1/taxonomy")
def taxonomy() -> dict[str, Any]:
    """Estados conhecidos com sucessores legais e candidatos DTMF."""
    return {
        "states": [
            {
                "state": state.value,
                "successors": sorted(s.value for s in legal_successors(state)),
                "candidates": list(candidates_for(state)),
            }
            for state in TAXONOMY
        ]
    }


@router.post("/v1/navigations")
async def create_navigation(
    body: NavigationRequest,
    settings: Settings = Depends(get_settings),
    http_client: HttpClient = Depends(get_http_client),
    endpoint_factory: CallEndpointFactory = Depends(get_call_endpoint_factory),
) -> NavigationResponse:
    """Executa uma chamada completa contra o endpoint configurado."""
    config = NavigationConfig.from_settings(settings, mode=body.mode, max_steps=body.max_steps)

    advisor = None
    if config.mode == TraversalMode.ASSISTED:
        if not settings.advisor_enabled:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="advisor_disabled",
            )
        advisor = create_advisor(settings)

    client = endpoint_factory(settings, http_client)
    driver = build_driver(config, client, advisor=advisor, label=body.label)
    logger.info(
        "navigation_requested",
        extra={
            "call_id": driver.session.call_id,
            "mode": config.mode.value,
            "max_steps": config.max_steps,
            "request_correlation_id": get_correlation_id(),
        },
    )

    result = await driver.navigate(config.max_steps)
    diagram = to_dot(driver.session)

    report_path = None
    if body.save_report:
        files = await anyio.to_thread.run_sync(
            save_report, result, settings.report_output_dir, diagram
        )
        report_path = str(files.report_path)

    return NavigationResponse(result=result, diagram=diagram, report_path=report_path)
