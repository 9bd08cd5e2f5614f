"""Protocolo de despacho multi-dígito.

O endpoint só avança de forma confiável quando uma entrada com 2+ caracteres
chega em duas pernas: o primeiro caractere sozinho e, após um intervalo, o
restante. Se a segunda perna vier em branco, faz-se no máximo uma perna
"continue" de recuperação. O prompt final é classificado e registrado na
sessão.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable

from ivr_navigator.domain.actions import Action
from ivr_navigator.domain.classifier import classify
from ivr_navigator.domain.errors import DispatchError
from ivr_navigator.domain.protocols.call_endpoint import CallEndpointProtocol
from ivr_navigator.domain.session import CallSession, LegKind, LegRecord
from ivr_navigator.domain.states import CallFlowState
from ivr_navigator.domain.transitions import TransitionTracker
from ivr_navigator.observability.logging import get_logger, preview

logger: logging.Logger = get_logger(__name__)

Sleep = Callable[[float], Awaitable[None]]


def is_blank(prompt: str | None) -> bool:
    """Prompt vazio após strip (resposta em branco)."""
    return not prompt or not prompt.strip()


class DispatchProtocol:
    """Entrega uma Action ao endpoint respeitando a convenção de duas pernas."""

    def __init__(
        self,
        client: CallEndpointProtocol,
        *,
        inter_leg_delay: float = 1.0,
        recovery_delay: float = 1.0,
        tracker: TransitionTracker | None = None,
        sleep: Sleep | None = None,
    ) -> None:
        self._client = client
        self._inter_leg_delay = inter_leg_delay
        self._recovery_delay = recovery_delay
        self._tracker = tracker or TransitionTracker()
        self._sleep = sleep

    @property
    def client(self) -> CallEndpointProtocol:
        return self._client

    @property
    def tracker(self) -> TransitionTracker:
        return self._tracker

    async def _wait(self, seconds: float) -> None:
        if seconds > 0:
            await (self._sleep or asyncio.sleep)(seconds)

    def advance(self, session: CallSession, prompt: str) -> CallFlowState:
        """Classifica o prompt no contexto do estado corrente e registra a transição."""
        state = classify(prompt, session.current, session.patterns_snapshot())
        return self._tracker.record(session, state)

    async def _call(self, session: CallSession, digits: str, kind: LegKind) -> str:
        if kind == "start":
            return await self._client.start_call(session.call_id)
        if digits:
            return await self._client.send_input(session.call_id, digits)
        return await self._client.continue_call(session.call_id)

    async def _leg(
        self,
        session: CallSession,
        digits: str,
        kind: LegKind,
        completed: list[LegRecord],
    ) -> str:
        try:
            prompt = await self._call(session, digits, kind)
        except Exception as exc:
            logger.error(
                "dispatch_leg_failed",
                extra={
                    "call_id": session.call_id,
                    "leg": kind,
                    "digits": digits,
                    "completed_legs": len(completed),
                    "error_type": type(exc).__name__,
                },
            )
            raise DispatchError(f"Perna '{kind}' falhou: {exc}", legs=completed) from exc

        record = LegRecord(kind=kind, input=digits, prompt=prompt or "")
        completed.append(record)
        session.legs.append(record)
        return record.prompt

    async def _shielded(self, session: CallSession, delivery: Awaitable[str], digits: str) -> str:
        """Executa uma entrega inteira; cancelamento só propaga depois que ela termina."""
        task = asyncio.ensure_future(delivery)
        try:
            return await asyncio.shield(task)
        except asyncio.CancelledError:
            if not task.done():
                logger.warning(
                    "dispatch_cancel_deferred",
                    extra={"call_id": session.call_id, "digits": digits},
                )
                await asyncio.wait({task})
            if not task.cancelled() and task.exception() is not None:
                logger.warning(
                    "dispatch_failed_during_cancel",
                    extra={"call_id": session.call_id, "error": str(task.exception())},
                )
            raise

    async def start(self, session: CallSession) -> str:
        """Perna inicial da chamada; o prompt é classificado pelo driver."""
        return await self._shielded(session, self._leg(session, "", "start", []), "")

    async def continue_leg(self, session: CallSession, kind: LegKind = "continue") -> str:
        """Uma perna sem entrada, seguida de classificação/registro."""
        prompt = await self._shielded(session, self._leg(session, "", kind, []), "")
        self.advance(session, prompt)
        return prompt

    async def _deliver(self, session: CallSession, digits: str, completed: list[LegRecord]) -> str:
        if len(digits) <= 1:
            return await self._leg(session, digits, "input" if digits else "continue", completed)

        first, rest = digits[0], digits[1:]
        logger.info(
            "multi_digit_split",
            extra={"call_id": session.call_id, "first": first, "rest": rest},
        )
        await self._leg(session, first, "input", completed)
        await self._wait(self._inter_leg_delay)
        prompt = await self._leg(session, rest, "input", completed)

        if is_blank(prompt):
            logger.info(
                "blank_response_recovery",
                extra={"call_id": session.call_id, "digits": digits},
            )
            await self._wait(self._recovery_delay)
            prompt = await self._leg(session, "", "recovery", completed)
            if is_blank(prompt):
                logger.warning(
                    "blank_response_persisted",
                    extra={"call_id": session.call_id, "digits": digits},
                )
        return prompt

    async def dispatch(self, session: CallSession, action: Action) -> str:
        """Entrega `action.input` e devolve o prompt resultante.

        - len <= 1: exatamente uma perna (vazio = continue)
        - len >= 2: 1º caractere, espera, restante; se em branco, espera e
          uma única perna continue de recuperação

        Cancelar a task durante o despacho deixa a sequência inteira de pernas
        terminar; o prompt final não é classificado e CancelledError propaga.

        Raises:
            DispatchError: qualquer perna falhou (pernas posteriores não rodam)
        """
        digits = action.input
        completed: list[LegRecord] = []
        prompt = await self._shielded(session, self._deliver(session, digits, completed), digits)

        state = self.advance(session, prompt)
        logger.info(
            "action_dispatched",
            extra={
                "call_id": session.call_id,
                "action": action.name,
                "digits": digits,
                "legs": len(completed),
                "state": state.value,
                "prompt": preview(prompt),
            },
        )
        return prompt
