"""Sessão de navegação: uma travessia do menu IVR por chamada.

A sessão é de posse exclusiva do SessionDriver; classificador, rastreador e
protocolo de despacho a recebem por referência. Nada aqui é compartilhado
entre sessões concorrentes.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import Literal

from ivr_navigator.domain.states import CallFlowState
from ivr_navigator.observability.logging import get_logger

logger = get_logger(__name__)

LegKind = Literal["start", "input", "continue", "recovery"]


@dataclass(frozen=True, slots=True)
class LegRecord:
    """Uma perna (request/response) concluída contra o endpoint."""

    kind: LegKind
    input: str
    prompt: str


@dataclass
class CallSession:
    """Estado mutável de uma chamada.

    Registro de padrões descobertos é append-only durante a vida da sessão.
    """

    call_id: str
    current: CallFlowState = CallFlowState.UNKNOWN
    previous: CallFlowState | None = None
    history: list[CallFlowState] = field(default_factory=list)
    discovered_states: set[CallFlowState] = field(default_factory=set)
    transitions: Counter[tuple[CallFlowState, CallFlowState]] = field(default_factory=Counter)
    illegal_transitions: list[tuple[CallFlowState, CallFlowState]] = field(default_factory=list)
    discovered_patterns: dict[CallFlowState, list[str]] = field(default_factory=dict)
    legs: list[LegRecord] = field(default_factory=list)

    def add_pattern(self, state: CallFlowState, pattern: str) -> bool:
        """Registra padrão descoberto em runtime para o estado.

        Returns:
            True se o padrão é novo; False se vazio ou já registrado.
        """
        if not pattern or not pattern.strip():
            return False
        patterns = self.discovered_patterns.setdefault(state, [])
        if pattern in patterns:
            return False
        patterns.append(pattern)
        logger.info(
            "state_pattern_added",
            extra={"call_id": self.call_id, "state": state.value, "pattern": pattern},
        )
        return True

    def patterns_snapshot(self) -> dict[CallFlowState, tuple[str, ...]]:
        """Cópia imutável do registro, usada pelo classificador."""
        return {state: tuple(patterns) for state, patterns in self.discovered_patterns.items()}

    def transition_counts(self) -> dict[str, dict[str, int]]:
        """Contagem de transições aninhada por estado de origem (para export)."""
        nested: dict[str, dict[str, int]] = {}
        for (source, target), count in self.transitions.items():
            nested.setdefault(source.value, {})[target.value] = count
        return nested

    def reset(self, call_id: str) -> None:
        """Prepara a sessão para uma nova chamada.

        Mantém padrões descobertos, estados observados e contagens de
        transição (dados de cobertura); zera posição, histórico e pernas.
        """
        self.call_id = call_id
        self.current = CallFlowState.UNKNOWN
        self.previous = None
        self.history = []
        self.illegal_transitions = []
        self.legs = []
