"""Re-exports dos Protocolos de domínio para uso por Application."""

from __future__ import annotations

from ivr_navigator.domain.protocols.advisor import AdvisorProtocol
from ivr_navigator.domain.protocols.call_endpoint import CallEndpointProtocol

__all__ = [
    "AdvisorProtocol",
    "CallEndpointProtocol",
]
