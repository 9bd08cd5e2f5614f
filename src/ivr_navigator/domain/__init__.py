"""Núcleo de domínio: taxonomia, classificação, transições e política.

Exporta:
- CallFlowState: estados do menu IVR
- classify: classificador puro
- TransitionTracker: rastreador de transições
- next_action: política scripted/exploratory
"""

from ivr_navigator.domain.actions import Action, TraversalMode, next_action
from ivr_navigator.domain.classifier import classify
from ivr_navigator.domain.session import CallSession, LegRecord
from ivr_navigator.domain.states import CallFlowState
from ivr_navigator.domain.transitions import TransitionTracker, is_legal_transition

__all__ = [
    "Action",
    "CallFlowState",
    "CallSession",
    "LegRecord",
    "TransitionTracker",
    "TraversalMode",
    "classify",
    "is_legal_transition",
    "next_action",
]
