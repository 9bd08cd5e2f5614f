"""Hierarquia de erros do navegador.

Só falhas de transporte/endpoint são erros duros. Anomalias de classificação
e de transição são registradas como dados na sessão.
"""

from __future__ import annotations

from collections.abc import Sequence

from ivr_navigator.domain.session import LegRecord


class NavigatorError(Exception):
    """Raiz dos erros do ivr_navigator."""


class CallEndpointError(NavigatorError):
    """Falha do endpoint IVR (transporte, status HTTP, chamada inativa)."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class AdvisorError(NavigatorError):
    """Falha do advisor externo (modo assisted)."""


class DispatchError(NavigatorError):
    """Falha de uma perna durante o despacho.

    Carrega as pernas concluídas antes da falha; nenhuma perna posterior
    é tentada.
    """

    def __init__(self, message: str, legs: Sequence[LegRecord] = ()) -> None:
        super().__init__(message)
        self.legs: tuple[LegRecord, ...] = tuple(legs)
