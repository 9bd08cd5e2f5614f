"""Montagem de sessões de navegação a partir de Settings.

Cada sessão tem seu próprio CallSession e driver; só o cliente HTTP pode ser
compartilhado, então N chamadas concorrentes não trocam estado entre si.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass

from ivr_navigator.adapters.advisor import create_advisor
from ivr_navigator.adapters.ivr import create_call_endpoint_client
from ivr_navigator.application.dispatch import DispatchProtocol, Sleep
from ivr_navigator.application.driver import SessionDriver, SessionResult
from ivr_navigator.config.settings import Settings
from ivr_navigator.domain.actions import TraversalMode
from ivr_navigator.domain.protocols.advisor import AdvisorProtocol
from ivr_navigator.domain.protocols.call_endpoint import CallEndpointProtocol
from ivr_navigator.domain.session import CallSession
from ivr_navigator.infra.http import HttpClient
from ivr_navigator.observability.logging import get_logger
from ivr_navigator.utils.ids import new_call_id

logger = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class NavigationConfig:
    mode: TraversalMode
    max_steps: int
    inter_leg_delay: float
    recovery_delay: float
    step_delay: float
    call_id_prefix: str = "IvrNav"

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        mode: TraversalMode | str | None = None,
        max_steps: int | None = None,
    ) -> NavigationConfig:
        return cls(
            mode=TraversalMode(mode or settings.traversal_mode.lower()),
            max_steps=max_steps or settings.max_steps,
            inter_leg_delay=settings.inter_leg_delay_seconds,
            recovery_delay=settings.blank_recovery_delay_seconds,
            step_delay=settings.step_delay_seconds,
            call_id_prefix=settings.call_id_prefix,
        )


def build_driver(
    config: NavigationConfig,
    client: CallEndpointProtocol,
    *,
    advisor: AdvisorProtocol | None = None,
    label: str | None = None,
    sleep: Sleep | None = None,
) -> SessionDriver:
    """Cria driver com sessão nova; `label` entra no prefixo do call_id."""
    prefix = f"{config.call_id_prefix}_{label}" if label else config.call_id_prefix
    session = CallSession(call_id=new_call_id(prefix))
    dispatcher = DispatchProtocol(
        client,
        inter_leg_delay=config.inter_leg_delay,
        recovery_delay=config.recovery_delay,
        sleep=sleep,
    )
    return SessionDriver(
        dispatcher,
        session,
        mode=config.mode,
        advisor=advisor,
        step_delay=config.step_delay,
        sleep=sleep,
    )


def create_driver(
    settings: Settings,
    http_client: HttpClient | None = None,
    *,
    mode: TraversalMode | str | None = None,
    label: str | None = None,
    sleep: Sleep | None = None,
) -> SessionDriver:
    """Factory completa: Settings → cliente IVR (+ advisor) → driver."""
    config = NavigationConfig.from_settings(settings, mode=mode)
    advisor = None
    if config.mode == TraversalMode.ASSISTED:
        if not settings.advisor_enabled:
            raise ValueError("Modo assisted requer ADVISOR_ENABLED=true")
        advisor = create_advisor(settings)

    client = create_call_endpoint_client(settings, http_client=http_client)
    return build_driver(config, client, advisor=advisor, label=label, sleep=sleep)


async def run_navigation(
    settings: Settings,
    http_client: HttpClient | None = None,
    *,
    mode: TraversalMode | str | None = None,
    max_steps: int | None = None,
    label: str | None = None,
) -> tuple[SessionResult, CallSession]:
    """Executa uma chamada completa e devolve resultado e sessão final."""
    driver = create_driver(settings, http_client, mode=mode, label=label)
    result = await driver.navigate(max_steps or settings.max_steps)
    return result, driver.session


async def run_concurrently(
    drivers: list[SessionDriver],
    max_steps: int,
) -> list[SessionResult]:
    """Roda N sessões independentes em paralelo, preservando a ordem."""
    logger.info("concurrent_navigation_started", extra={"sessions": len(drivers)})
    results = await asyncio.gather(*(driver.navigate(max_steps) for driver in drivers))
    logger.info(
        "concurrent_navigation_finished",
        extra={
            "sessions": len(results),
            "completed": sum(1 for result in results if result.completed),
        },
    )
    return list(results)
