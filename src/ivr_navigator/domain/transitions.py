"""Rastreador de transições de estado.

Transição ilegal é sinal, não exceção: o estado avança do mesmo jeito,
porque o texto do endpoint não é contratualmente estável.
"""

from __future__ import annotations

from ivr_navigator.domain.session import CallSession
from ivr_navigator.domain.states import CallFlowState
from ivr_navigator.domain.taxonomy import legal_successors
from ivr_navigator.observability.logging import get_logger

logger = get_logger(__name__)


def is_legal_transition(source: CallFlowState, target: CallFlowState) -> bool:
    """True se `target` é sucessor legal de `source` (UNKNOWN aceita todos)."""
    return source == CallFlowState.UNKNOWN or target in legal_successors(source)


class TransitionTracker:
    """Registra transições reais na sessão e sinaliza as ilegais."""

    def record(self, session: CallSession, new_state: CallFlowState) -> CallFlowState:
        """Avança a sessão para `new_state` e retorna o estado corrente.

        Self loop só marca o estado como observado.
        """
        current = session.current
        session.discovered_states.add(new_state)
        if new_state == current:
            return current

        if current != CallFlowState.UNKNOWN:
            session.transitions[(current, new_state)] += 1

        if is_legal_transition(current, new_state):
            logger.info(
                "state_transition",
                extra={"from": current.value, "to": new_state.value},
            )
        else:
            session.illegal_transitions.append((current, new_state))
            logger.warning(
                "illegal_state_transition",
                extra={"from": current.value, "to": new_state.value},
            )

        session.previous = current
        session.current = new_state
        session.history.append(new_state)
        return new_state
