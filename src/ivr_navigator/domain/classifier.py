"""Classificador de prompts IVR → CallFlowState.

Função pura: sem side effects, determinística dado (prompt, estado anterior,
snapshot do registro de padrões descobertos). Ambiguidade nunca é erro:
o que não casa vira UNKNOWN.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence

from ivr_navigator.domain.states import CallFlowState
from ivr_navigator.domain.taxonomy import TAXONOMY

RX_NUMBER_PHRASE = "please enter the prescription number"

DisambiguationRule = Callable[[str, CallFlowState | None], CallFlowState | None]


def _rx_number_rule(text: str, previous: CallFlowState | None) -> CallFlowState | None:
    """Frase genérica de número de receita: refill, status ou entrada avulsa."""
    if RX_NUMBER_PHRASE not in text:
        return None
    if "refill" in text or previous == CallFlowState.REFILL_PRESCRIPTION:
        return CallFlowState.REFILL_PRESCRIPTION
    if "status" in text or "check" in text or previous == CallFlowState.CHECK_STATUS:
        return CallFlowState.CHECK_STATUS
    return CallFlowState.ENTER_RX_NUMBER


def _phrase_rule(phrase: str, state: CallFlowState) -> DisambiguationRule:
    def rule(text: str, previous: CallFlowState | None) -> CallFlowState | None:
        return state if phrase in text else None

    return rule


# Ordem importa: regras rodam antes da varredura genérica e têm precedência.
DISAMBIGUATION_RULES: tuple[DisambiguationRule, ...] = (
    _rx_number_rule,
    _phrase_rule("for new prescriptions or to authorize refills", CallFlowState.PRESCRIBER_MENU),
    _phrase_rule("leave your message after the tone", CallFlowState.LEAVE_MESSAGE),
    _phrase_rule("invalid selection", CallFlowState.INVALID_SELECTION),
)


def _scan(
    text: str, table: Mapping[CallFlowState, Sequence[str]]
) -> CallFlowState | None:
    for state, patterns in table.items():
        for pattern in patterns:
            if pattern and pattern.lower() in text:
                return state
    return None


def classify(
    prompt: str | None,
    previous_state: CallFlowState | None = None,
    discovered_patterns: Mapping[CallFlowState, Sequence[str]] | None = None,
) -> CallFlowState:
    """Mapeia o texto de um prompt para um estado da taxonomia.

    Args:
        prompt: texto extraído da perna (pode ser vazio/None)
        previous_state: estado em que a sessão estava quando o prompt chegou;
            usado apenas pelas regras de desambiguação
        discovered_patterns: registro de padrões descobertos em runtime

    Ordem:
        1. vazio/None → UNKNOWN
        2. regras de desambiguação
        3. padrões estáticos, na ordem de declaração da taxonomia
        4. padrões descobertos em runtime, mesma mecânica
        5. UNKNOWN
    """
    if not prompt:
        return CallFlowState.UNKNOWN

    text = prompt.lower()

    for rule in DISAMBIGUATION_RULES:
        resolved = rule(text, previous_state)
        if resolved is not None:
            return resolved

    static_table = {state: profile.patterns for state, profile in TAXONOMY.items()}
    matched = _scan(text, static_table)
    if matched is not None:
        return matched

    if discovered_patterns:
        matched = _scan(text, discovered_patterns)
        if matched is not None:
            return matched

    return CallFlowState.UNKNOWN
