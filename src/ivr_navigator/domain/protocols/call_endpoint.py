"""Protocolo do cliente de endpoint IVR (colaborador externo do núcleo)."""

from __future__ import annotations

from abc import ABC, abstractmethod


class CallEndpointProtocol(ABC):
    """Contrato mínimo assíncrono: cada método é uma perna e devolve o Prompt.

    O cliente nunca divide entradas multi-dígito; isso é papel do protocolo
    de despacho.
    """

    @abstractmethod
    async def start_call(self, call_id: str) -> str: ...

    @abstractmethod
    async def send_input(self, call_id: str, digits: str) -> str: ...

    @abstractmethod
    async def continue_call(self, call_id: str) -> str: ...

    @abstractmethod
    async def end_call(self, call_id: str) -> None: ...
