"""Protocolo do advisor externo usado no modo assisted."""

from __future__ import annotations

from abc import ABC, abstractmethod


class AdvisorProtocol(ABC):
    """Recebe o prompt IVR e responde em texto livre o que fazer."""

    @abstractmethod
    async def ask(self, prompt: str) -> str: ...

    @abstractmethod
    async def close(self) -> None: ...
