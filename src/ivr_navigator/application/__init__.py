"""Camada de aplicação: despacho, driver de sessão e relatórios."""

from ivr_navigator.application.dispatch import DispatchProtocol, is_blank
from ivr_navigator.application.driver import SessionDriver, SessionResult, StepRecord

__all__ = [
    "DispatchProtocol",
    "SessionDriver",
    "SessionResult",
    "StepRecord",
    "is_blank",
]
