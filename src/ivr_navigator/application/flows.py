"""Fluxos nomeados de regressão (refill, status, horários).

Cada fluxo é uma sequência fixa de entradas a partir do menu principal,
entregue pelo mesmo DispatchProtocol/SessionDriver das navegações livres.
Um passo condicional só é enviado quando o prompt corrente pede
confirmação. Esgotada a sequência, o fluxo encerra com HANG_UP.
"""

from __future__ import annotations

import logging
from collections import deque
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from pydantic import BaseModel

from ivr_navigator.application.dispatch import DispatchProtocol, Sleep
from ivr_navigator.application.driver import SessionDriver, SessionResult
from ivr_navigator.application.navigation import NavigationConfig
from ivr_navigator.domain.actions import HANG_UP_ACTION, Action, TraversalMode
from ivr_navigator.domain.protocols.call_endpoint import CallEndpointProtocol
from ivr_navigator.domain.session import CallSession
from ivr_navigator.domain.states import CallFlowState
from ivr_navigator.domain.taxonomy import DEFAULT_RX_NUMBER
from ivr_navigator.observability.logging import get_logger, preview
from ivr_navigator.utils.ids import new_call_id

logger: logging.Logger = get_logger(__name__)

CONFIRM_KEYWORDS = ("confirm", "is this correct")


@dataclass(frozen=True, slots=True)
class FlowStep:
    action: Action
    only_if_any: tuple[str, ...] = ()

    def applies_to(self, prompt: str) -> bool:
        if not self.only_if_any:
            return True
        text = (prompt or "").lower()
        return any(keyword in text for keyword in self.only_if_any)


@dataclass(frozen=True, slots=True)
class FlowScenario:
    name: str
    call_label: str
    steps: tuple[FlowStep, ...]
    rx_number: str | None = None

    @property
    def max_steps(self) -> int:
        """Passos da sequência mais o HANG_UP final."""
        return len(self.steps) + 1


class FlowResult(BaseModel):
    """Desfecho de um fluxo nomeado."""

    flow: str
    success: bool
    final_state: CallFlowState
    rx_number: str | None = None
    error: str | None = None
    session: SessionResult


_CONTINUE = FlowStep(Action("continue", "", "Continuando após a saudação"))
_FINISH = FlowStep(Action("continue", "", "Aguardando passos finais"))
_CONFIRM = FlowStep(Action("confirm", "1", "Confirmando a receita"), CONFIRM_KEYWORDS)


def refill_prescription_flow(rx_number: str = DEFAULT_RX_NUMBER) -> FlowScenario:
    return FlowScenario(
        name="refill_prescription",
        call_label=f"RefillRx_{rx_number}",
        rx_number=rx_number,
        steps=(
            _CONTINUE,
            FlowStep(Action("refill", "1", "Selecionando refill de receita")),
            FlowStep(Action("rx_number", rx_number, "Informando número da receita")),
            _CONFIRM,
            _FINISH,
        ),
    )


def check_status_flow(rx_number: str = DEFAULT_RX_NUMBER) -> FlowScenario:
    return FlowScenario(
        name="check_status",
        call_label=f"CheckStatus_{rx_number}",
        rx_number=rx_number,
        steps=(
            _CONTINUE,
            FlowStep(Action("status", "2", "Selecionando status da receita")),
            FlowStep(Action("rx_number", rx_number, "Informando número da receita")),
            _CONFIRM,
            _FINISH,
        ),
    )


def pharmacy_hours_flow() -> FlowScenario:
    return FlowScenario(
        name="pharmacy_hours",
        call_label="PharmacyHours",
        steps=(
            _CONTINUE,
            FlowStep(Action("hours", "4", "Selecionando horários da farmácia")),
            FlowStep(Action("weekly", "1", "Selecionando horários semanais")),
            _FINISH,
        ),
    )


def default_flow_suite(rx_number: str = DEFAULT_RX_NUMBER) -> tuple[FlowScenario, ...]:
    """Refill, status e horários, nessa ordem."""
    return (
        refill_prescription_flow(rx_number),
        check_status_flow(rx_number),
        pharmacy_hours_flow(),
    )


class FlowDriver(SessionDriver):
    """SessionDriver cujas decisões vêm de uma sequência fixa de passos."""

    def __init__(
        self,
        dispatcher: DispatchProtocol,
        session: CallSession | None = None,
        *,
        steps: Sequence[FlowStep],
        step_delay: float = 0.0,
        sleep: Sleep | None = None,
    ) -> None:
        super().__init__(
            dispatcher,
            session,
            mode=TraversalMode.SCRIPTED,
            step_delay=step_delay,
            sleep=sleep,
        )
        self._pending: deque[FlowStep] = deque(steps)

    async def _decide(self, prompt: str) -> tuple[Action, str | None]:
        while self._pending:
            step = self._pending.popleft()
            if step.applies_to(prompt):
                return step.action, None
            logger.info(
                "flow_step_skipped",
                extra={
                    "call_id": self.session.call_id,
                    "action": step.action.name,
                    "prompt": preview(prompt),
                },
            )
        return HANG_UP_ACTION, None


async def run_flow(
    scenario: FlowScenario,
    client: CallEndpointProtocol,
    config: NavigationConfig,
    *,
    sleep: Sleep | None = None,
) -> FlowResult:
    """Executa um fluxo numa chamada nova e devolve o desfecho."""
    session = CallSession(call_id=new_call_id(f"{config.call_id_prefix}_{scenario.call_label}"))
    dispatcher = DispatchProtocol(
        client,
        inter_leg_delay=config.inter_leg_delay,
        recovery_delay=config.recovery_delay,
        sleep=sleep,
    )
    driver = FlowDriver(
        dispatcher,
        session,
        steps=scenario.steps,
        step_delay=config.step_delay,
        sleep=sleep,
    )
    logger.info("flow_started", extra={"flow": scenario.name, "call_id": session.call_id})

    result = await driver.navigate(scenario.max_steps)
    outcome = FlowResult(
        flow=scenario.name,
        success=result.completed and result.error is None,
        final_state=result.final_state,
        rx_number=scenario.rx_number,
        error=result.error,
        session=result,
    )
    logger.info(
        "flow_finished",
        extra={
            "flow": scenario.name,
            "call_id": session.call_id,
            "success": outcome.success,
            "final_state": outcome.final_state.value,
        },
    )
    return outcome


async def run_flow_suite(
    scenarios: Iterable[FlowScenario],
    client: CallEndpointProtocol,
    config: NavigationConfig,
    *,
    sleep: Sleep | None = None,
) -> list[FlowResult]:
    """Roda os fluxos em sequência, um por chamada."""
    results = [await run_flow(scenario, client, config, sleep=sleep) for scenario in scenarios]
    logger.info(
        "flow_suite_finished",
        extra={
            "flows": len(results),
            "passed": sum(1 for result in results if result.success),
        },
    )
    return results
