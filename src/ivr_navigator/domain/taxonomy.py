"""Taxonomia do menu IVR: padrões, transições legais, entradas e candidatos DTMF.

Tabelas estáticas e imutáveis, compartilháveis entre sessões concorrentes.
A ordem de declaração de TAXONOMY é a prioridade do classificador.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType

from ivr_navigator.domain.states import CallFlowState as S

UNIVERSAL_CANDIDATES: tuple[str, ...] = (
    "1", "2", "3", "4", "5", "6", "7", "8", "9", "0", "*", "#",
)
"""Candidatos de exploração para estados sem opções declaradas."""

DEFAULT_RX_NUMBER = "0001234"


@dataclass(frozen=True, slots=True)
class StateProfile:
    """Metadados de um estado da taxonomia."""

    patterns: tuple[str, ...] = ()
    successors: frozenset[S] = frozenset()
    inputs: MappingProxyType[str, str] = field(
        default_factory=lambda: MappingProxyType({"default": ""})
    )
    candidates: tuple[str, ...] = ()


def _profile(
    patterns: tuple[str, ...],
    successors: set[S],
    inputs: dict[str, str],
    candidates: tuple[str, ...] = (),
) -> StateProfile:
    return StateProfile(
        patterns=patterns,
        successors=frozenset(successors),
        inputs=MappingProxyType(inputs),
        candidates=candidates,
    )


_MAIN_MENU_OPTIONS = ("1", "2", "3", "4", "5", "7", "8", "9")

TAXONOMY: MappingProxyType[S, StateProfile] = MappingProxyType({
    S.GREETING: _profile(
        ("global greeting", "welcome to", "thank you for calling"),
        {S.MAIN_MENU},
        {"continue": "", "default": ""},
    ),
    S.MAIN_MENU: _profile(
        (
            "to refill a prescription, press 1",
            "to check the status of a prescription, press 2",
            "if you are a prescriber, press 3",
            "to hear pharmacy hours and information, press 4",
            "to leave a message, press 5",
            "for our home delivery service, press 7",
            "to repeat these options, press 8",
            "to speak to the pharmacy, press 9",
            "press 1 to refill",
            "press 2 to check status",
        ),
        {
            S.REFILL_PRESCRIPTION,
            S.CHECK_STATUS,
            S.PRESCRIBER_MENU,
            S.PHARMACY_HOURS,
            S.LEAVE_MESSAGE,
            S.HOME_DELIVERY,
            S.REPEAT_OPTIONS,
            S.TRANSFER_TO_PHARMACY,
            S.INVALID_SELECTION,
            S.MAIN_MENU,
        },
        {
            "refill": "1",
            "status": "2",
            "prescriber": "3",
            "hours": "4",
            "message": "5",
            "delivery": "7",
            "repeat": "8",
            "pharmacy": "9",
            "default": "9",
        },
        _MAIN_MENU_OPTIONS,
    ),
    S.REFILL_PRESCRIPTION: _profile(
        (
            "enter the prescription number you would like to refill",
            "prescription number you would like to refill",
        ),
        {S.ENTER_RX_NUMBER, S.MAIN_MENU},
        {"default": DEFAULT_RX_NUMBER},
    ),
    S.CHECK_STATUS: _profile(
        (
            "please enter the prescription number you would like to check",
            "enter the prescription number to check status",
        ),
        {S.ENTER_RX_NUMBER, S.MAIN_MENU},
        {"default": DEFAULT_RX_NUMBER},
    ),
    S.PRESCRIBER_MENU: _profile(
        (
            "for new prescriptions or to authorize refills, press 1",
            "to transfer to the pharmacy, press 2",
            "if you are a prescriber",
        ),
        {S.TRANSFER_TO_PHARMACY, S.MAIN_MENU},
        {"new_rx": "1", "transfer": "2", "default": "2"},
        ("1", "2"),
    ),
    S.PHARMACY_HOURS: _profile(
        (
            "today we're open until",
            "press 1 for our weekly hours",
            "pharmacy hours and information",
        ),
        {S.WEEKLY_HOURS, S.MAIN_MENU},
        {"weekly": "1", "back": "2", "default": "1"},
        ("1", "2", "9"),
    ),
    S.WEEKLY_HOURS: _profile(
        ("our normal business hours", "monday from", "tuesday from"),
        {S.MAIN_MENU},
        {"back": "9", "default": "9"},
        ("9",),
    ),
    S.LEAVE_MESSAGE: _profile(
        (
            "leave your message after the tone",
            "leave a message",
            "after you're finished with your message",
        ),
        {S.MAIN_MENU},
        {"finish": "#", "default": "#"},
        ("#",),
    ),
    S.HOME_DELIVERY: _profile(
        ("home delivery service", "mail order", "delivery service"),
        {S.MAIN_MENU},
        {"back": "9", "default": "9"},
        ("9",),
    ),
    S.REPEAT_OPTIONS: _profile(
        ("repeat these options", "repeat the menu", "hear the options again"),
        {S.MAIN_MENU},
        {"default": ""},
        _MAIN_MENU_OPTIONS,
    ),
    S.TRANSFER_TO_PHARMACY: _profile(
        ("transferring you", "connect you", "speak to the pharmacy"),
        set(),
        {"default": ""},
    ),
    S.ENTER_RX_NUMBER: _profile(
        (
            "enter the prescription number",
            "please enter the prescription",
            "enter your prescription",
        ),
        {S.CONFIRM_RX, S.MAIN_MENU},
        {"default": DEFAULT_RX_NUMBER},
    ),
    S.CONFIRM_RX: _profile(
        ("confirm", "is this correct", "press 1 to confirm"),
        {S.MAIN_MENU, S.TRANSFER_TO_PHARMACY},
        {"confirm": "1", "cancel": "2", "default": "1"},
        ("1", "2"),
    ),
    S.INVALID_SELECTION: _profile(
        ("you entered an invalid selection", "invalid option", "not a valid selection"),
        {S.MAIN_MENU},
        {"default": "9"},
    ),
    S.UNKNOWN: _profile(
        (),
        set(S),
        {"default": ""},
        UNIVERSAL_CANDIDATES,
    ),
})


def profile_for(state: S) -> StateProfile:
    """Retorna o perfil do estado (UNKNOWN para estados fora da tabela)."""
    return TAXONOMY.get(state, TAXONOMY[S.UNKNOWN])


def legal_successors(state: S) -> frozenset[S]:
    """Sucessores legais do estado; UNKNOWN aceita todos."""
    return profile_for(state).successors


def input_for(state: S, action: str, fallback: str = "") -> str:
    """Entrada DTMF para a ação nomeada; cai para `default` e depois `fallback`."""
    inputs = profile_for(state).inputs
    return inputs.get(action) or inputs.get("default") or fallback


def candidates_for(state: S) -> tuple[str, ...]:
    """Candidatos de exploração; estados sem opções usam UNIVERSAL_CANDIDATES."""
    return profile_for(state).candidates or UNIVERSAL_CANDIDATES
