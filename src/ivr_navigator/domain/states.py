"""Estados canônicos do fluxo de chamada (menu IVR da farmácia).

- Enumeração fechada: tabelas da taxonomia são indexadas por membro, nunca por string livre
- UNKNOWN é o sentinela absorvente/universal
"""

from __future__ import annotations

from enum import StrEnum


class CallFlowState(StrEnum):
    """Estados reconhecíveis do menu IVR."""

    # === Entrada ===
    GREETING = "greeting"
    """Saudação inicial ("Thank you for calling...")."""

    MAIN_MENU = "main_menu"
    """Menu principal com opções 1-9."""

    # === Receitas ===
    REFILL_PRESCRIPTION = "refill_prescription"
    CHECK_STATUS = "check_status"
    ENTER_RX_NUMBER = "enter_rx_number"
    CONFIRM_RX = "confirm_rx"

    # === Informação ===
    PRESCRIBER_MENU = "prescriber_menu"
    PHARMACY_HOURS = "pharmacy_hours"
    WEEKLY_HOURS = "weekly_hours"
    LEAVE_MESSAGE = "leave_message"
    HOME_DELIVERY = "home_delivery"
    REPEAT_OPTIONS = "repeat_options"

    # === Absorvente ===
    TRANSFER_TO_PHARMACY = "transfer_to_pharmacy"
    """Chamada sendo transferida; nenhuma entrada deve ser enviada."""

    # === Exceções ===
    INVALID_SELECTION = "invalid_selection"
    UNKNOWN = "unknown"
    """Prompt vazio ou não reconhecido."""
