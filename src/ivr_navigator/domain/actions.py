"""Política de ações: qual entrada enviar a partir do estado corrente.

- scripted: tabela fixa por estado (um caminho completo e determinístico)
- exploratory: round-robin sobre os candidatos DTMF do estado
- assisted: decidido pelo driver via advisor; aqui cai para a tabela scripted
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from types import MappingProxyType

from ivr_navigator.domain.session import CallSession
from ivr_navigator.domain.states import CallFlowState as S
from ivr_navigator.domain.taxonomy import candidates_for, input_for

HANG_UP = "hang_up"
"""Nome simbólico que encerra a chamada com sucesso."""


class TraversalMode(StrEnum):
    """Estratégias de travessia do menu."""

    SCRIPTED = "scripted"
    EXPLORATORY = "exploratory"
    ASSISTED = "assisted"


@dataclass(frozen=True, slots=True)
class Action:
    """Próxima entrada a enviar ao endpoint.

    input vazio significa "aguardar": uma perna continue, sem dígitos.
    """

    name: str
    input: str = ""
    rationale: str = ""

    @property
    def is_hang_up(self) -> bool:
        return self.name == HANG_UP

    @property
    def is_multi_digit(self) -> bool:
        return len(self.input) > 1


WAIT = Action("wait", "", "Aguardando sem entrada")
HANG_UP_ACTION = Action(HANG_UP, "", "Encerrando a chamada")


def _scripted(state: S, name: str, rationale: str) -> Action:
    return Action(name, input_for(state, name), rationale)


# Caminho de referência: saudação → menu → horários → horários semanais → menu.
SCRIPTED_ACTIONS: MappingProxyType[S, Action] = MappingProxyType({
    S.GREETING: _scripted(S.GREETING, "continue", "Continuando após a saudação"),
    S.MAIN_MENU: _scripted(S.MAIN_MENU, "hours", "Selecionando horários da farmácia"),
    S.PHARMACY_HOURS: _scripted(S.PHARMACY_HOURS, "weekly", "Selecionando horários semanais"),
    S.WEEKLY_HOURS: _scripted(S.WEEKLY_HOURS, "back", "Voltando ao menu principal"),
    S.REFILL_PRESCRIPTION: _scripted(
        S.REFILL_PRESCRIPTION, "default", "Informando número da receita"
    ),
    S.ENTER_RX_NUMBER: _scripted(S.ENTER_RX_NUMBER, "default", "Informando número da receita"),
    S.CHECK_STATUS: _scripted(
        S.CHECK_STATUS, "default", "Informando número da receita para status"
    ),
    S.CONFIRM_RX: _scripted(S.CONFIRM_RX, "confirm", "Confirmando a receita"),
    S.PRESCRIBER_MENU: _scripted(S.PRESCRIBER_MENU, "transfer", "Transferindo para a farmácia"),
    S.LEAVE_MESSAGE: _scripted(S.LEAVE_MESSAGE, "finish", "Finalizando a mensagem"),
    S.HOME_DELIVERY: _scripted(S.HOME_DELIVERY, "back", "Voltando ao menu principal"),
    S.REPEAT_OPTIONS: Action(
        "hours", input_for(S.MAIN_MENU, "hours"), "Selecionando horários após repetição"
    ),
    S.TRANSFER_TO_PHARMACY: Action("wait", "", "Aguardando durante a transferência"),
    S.INVALID_SELECTION: _scripted(
        S.INVALID_SELECTION, "default", "Voltando ao menu após seleção inválida"
    ),
    S.UNKNOWN: Action("wait", "", "Estado desconhecido; aguardando próximo prompt"),
})


def scripted_action(state: S) -> Action:
    """Ação da tabela fixa; estados sem entrada falham fechado em WAIT."""
    return SCRIPTED_ACTIONS.get(state, WAIT)


def exploratory_action(state: S, exploration_depth: int) -> Action:
    """Candidato `depth mod len(candidatos)` do estado."""
    candidates = candidates_for(state)
    choice = candidates[exploration_depth % len(candidates)]
    return Action(
        "explore",
        choice,
        f"Explorando opção {choice} no estado {state.value}",
    )


def next_action(
    session: CallSession,
    mode: TraversalMode | str = TraversalMode.SCRIPTED,
    exploration_depth: int = 0,
) -> Action:
    """Decide a próxima ação para o estado corrente da sessão."""
    if TraversalMode(mode) == TraversalMode.EXPLORATORY:
        return exploratory_action(session.current, exploration_depth)
    return scripted_action(session.current)
