"""Driver de sessão: classifica, decide, despacha e repete.

Encerra com sucesso quando a política devolve HANG_UP; para sem erro
(completed=False) quando o orçamento de passos acaba; falhas de perna ou do
advisor encerram a sessão preservando o histórico parcial.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import UTC, datetime

from pydantic import BaseModel, Field

from ivr_navigator.application.dispatch import DispatchProtocol, Sleep, is_blank
from ivr_navigator.domain.actions import (
    HANG_UP,
    HANG_UP_ACTION,
    Action,
    TraversalMode,
    next_action,
    scripted_action,
)
from ivr_navigator.domain.answer_parser import extract_action
from ivr_navigator.domain.errors import AdvisorError, DispatchError
from ivr_navigator.domain.protocols.advisor import AdvisorProtocol
from ivr_navigator.domain.session import CallSession
from ivr_navigator.domain.states import CallFlowState
from ivr_navigator.observability.logging import get_logger, preview
from ivr_navigator.observability.middleware import call_context
from ivr_navigator.observability.timing import timed
from ivr_navigator.utils.ids import new_call_id

logger: logging.Logger = get_logger(__name__)


class StepRecord(BaseModel):
    """Um passo completo do driver, para relatório."""

    step: int
    state_before: CallFlowState
    state_after: CallFlowState
    prompt_in: str
    action: str
    input: str
    rationale: str = ""
    prompt_out: str = ""
    legs: int = 0
    advisor_answer: str | None = None
    timestamp: datetime = Field(default_factory=lambda: datetime.now(tz=UTC))


class SessionResult(BaseModel):
    """Resultado de uma travessia."""

    call_id: str
    mode: TraversalMode
    completed: bool
    aborted: bool = False
    steps: int
    history: list[StepRecord] = Field(default_factory=list)
    final_state: CallFlowState
    error: str | None = None
    state_history: list[CallFlowState] = Field(default_factory=list)
    discovered_states: list[CallFlowState] = Field(default_factory=list)
    transitions: dict[str, dict[str, int]] = Field(default_factory=dict)
    illegal_transitions: list[tuple[CallFlowState, CallFlowState]] = Field(default_factory=list)


class SessionDriver:
    """Conduz uma chamada do primeiro prompt até HANG_UP ou fim do orçamento."""

    def __init__(
        self,
        dispatcher: DispatchProtocol,
        session: CallSession | None = None,
        *,
        mode: TraversalMode | str = TraversalMode.SCRIPTED,
        advisor: AdvisorProtocol | None = None,
        step_delay: float = 0.0,
        sleep: Sleep | None = None,
    ) -> None:
        self._dispatcher = dispatcher
        self._session = session or CallSession(call_id=new_call_id())
        self._mode = TraversalMode(mode)
        self._advisor = advisor
        self._step_delay = step_delay
        self._sleep = sleep
        self._exploration_depth = 0
        self._abort_requested = False

        if self._mode == TraversalMode.ASSISTED and advisor is None:
            raise ValueError("Modo assisted requer um advisor")

    @property
    def session(self) -> CallSession:
        return self._session

    @property
    def mode(self) -> TraversalMode:
        return self._mode

    @property
    def exploration_depth(self) -> int:
        return self._exploration_depth

    def abort(self) -> None:
        """Pede encerramento; respeitado entre passos, nunca no meio de uma perna."""
        self._abort_requested = True
        logger.info("session_abort_requested", extra={"call_id": self._session.call_id})

    async def _wait(self, seconds: float) -> None:
        if seconds > 0:
            await (self._sleep or asyncio.sleep)(seconds)

    async def _decide(self, prompt: str) -> tuple[Action, str | None]:
        """Próxima ação conforme o modo; no assisted consulta o advisor."""
        session = self._session
        if self._mode != TraversalMode.ASSISTED or self._advisor is None:
            return next_action(session, self._mode, self._exploration_depth), None

        answer = await self._advisor.ask(prompt)
        token = extract_action(answer)
        if token == HANG_UP:
            return HANG_UP_ACTION, answer
        if token:
            return Action("advisor", token, "Ação recomendada pelo advisor"), answer

        logger.warning(
            "advisor_answer_without_action",
            extra={"call_id": session.call_id, "answer": preview(answer)},
        )
        return scripted_action(session.current), answer

    def _build_result(
        self,
        history: list[StepRecord],
        *,
        completed: bool,
        aborted: bool = False,
        error: str | None = None,
    ) -> SessionResult:
        session = self._session
        return SessionResult(
            call_id=session.call_id,
            mode=self._mode,
            completed=completed,
            aborted=aborted,
            steps=len(history),
            history=history,
            final_state=session.current,
            error=error,
            state_history=list(session.history),
            discovered_states=sorted(session.discovered_states, key=lambda s: s.value),
            transitions=session.transition_counts(),
            illegal_transitions=list(session.illegal_transitions),
        )

    async def run(self, initial_prompt: str, max_steps: int) -> SessionResult:
        """Executa o laço classificar → decidir → despachar.

        O prompt inicial é classificado aqui; os seguintes já chegam
        classificados pelo protocolo de despacho.
        """
        session = self._session
        dispatcher = self._dispatcher
        history: list[StepRecord] = []
        completed = False
        aborted = False
        error: str | None = None

        with call_context(session.call_id):
            dispatcher.advance(session, initial_prompt)
            prompt = initial_prompt
            logger.info(
                "navigation_started",
                extra={
                    "mode": self._mode.value,
                    "max_steps": max_steps,
                    "state": session.current.value,
                },
            )

            for step in range(1, max_steps + 1):
                if self._abort_requested:
                    aborted = True
                    break

                state_before = session.current
                legs_before = len(session.legs)
                with timed("navigation_step", step=step, state=state_before.value):
                    try:
                        action, answer = await self._decide(prompt)
                        self._exploration_depth += 1

                        if action.is_hang_up:
                            history.append(
                                StepRecord(
                                    step=step,
                                    state_before=state_before,
                                    state_after=session.current,
                                    prompt_in=prompt,
                                    action=action.name,
                                    input=action.input,
                                    rationale=action.rationale,
                                    advisor_answer=answer,
                                )
                            )
                            completed = True
                            break

                        prompt_out = await dispatcher.dispatch(session, action)
                        if is_blank(prompt_out) and action.is_multi_digit:
                            logger.info(
                                "blank_after_multi_digit_continue",
                                extra={"step": step, "digits": action.input},
                            )
                            prompt_out = await dispatcher.continue_leg(session)
                    except (DispatchError, AdvisorError) as exc:
                        error = str(exc)
                        logger.error(
                            "navigation_step_failed",
                            extra={
                                "step": step,
                                "error_type": type(exc).__name__,
                                "error": error,
                            },
                        )
                        break

                    history.append(
                        StepRecord(
                            step=step,
                            state_before=state_before,
                            state_after=session.current,
                            prompt_in=prompt,
                            action=action.name,
                            input=action.input,
                            rationale=action.rationale,
                            prompt_out=prompt_out,
                            legs=len(session.legs) - legs_before,
                            advisor_answer=answer,
                        )
                    )
                    prompt = prompt_out

                await self._wait(self._step_delay)

            result = self._build_result(
                history, completed=completed, aborted=aborted, error=error
            )
            logger.info(
                "navigation_finished",
                extra={
                    "completed": result.completed,
                    "aborted": result.aborted,
                    "steps": result.steps,
                    "final_state": result.final_state.value,
                    "failed": error is not None,
                },
            )
            return result

    async def navigate(self, max_steps: int) -> SessionResult:
        """Inicia a chamada, executa `run` e sempre encerra a chamada."""
        session = self._session
        with call_context(session.call_id):
            try:
                initial_prompt = await self._dispatcher.start(session)
            except DispatchError as exc:
                logger.error("call_start_failed", extra={"error": str(exc)})
                await self._close_advisor()
                return self._build_result([], completed=False, error=str(exc))

            try:
                return await self.run(initial_prompt, max_steps)
            finally:
                await self._release()

    async def _release(self) -> None:
        """Encerra chamada e advisor; falhas aqui são logadas, não propagadas."""
        call_id = self._session.call_id
        try:
            await self._dispatcher.client.end_call(call_id)
        except Exception as exc:  # noqa: BLE001 - não mascara o resultado da sessão
            logger.error(
                "call_end_failed",
                extra={"call_id": call_id, "error_type": type(exc).__name__, "error": str(exc)},
            )
        await self._close_advisor()

    async def _close_advisor(self) -> None:
        if self._advisor is not None:
            await self._advisor.close()
