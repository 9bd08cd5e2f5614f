"""Extração de ação a partir da resposta textual de um advisor externo."""

from __future__ import annotations

import re

from ivr_navigator.domain.actions import HANG_UP

_PRESS_DIGITS = re.compile(r"press\s+(\d+)", re.IGNORECASE)
_STANDALONE_DIGITS = re.compile(r"^\s*([0-9*#]+)\s*$")


def last_meaningful_line(answer: str) -> str:
    """Última linha não vazia da resposta (o advisor conclui com a ação)."""
    lines = [line.strip() for line in answer.splitlines() if line.strip()]
    return lines[-1] if lines else ""


def _match(text: str) -> str | None:
    standalone = _STANDALONE_DIGITS.match(text)
    if standalone:
        return standalone.group(1)
    press = _PRESS_DIGITS.search(text)
    if press:
        return press.group(1)
    lowered = text.lower()
    if "press asterisk" in lowered or "press star" in lowered:
        return "*"
    if "press pound" in lowered or "press hash" in lowered:
        return "#"
    if "hang up" in lowered:
        return HANG_UP
    return None


def extract_action(answer: str | None) -> str | None:
    """Converte a resposta do advisor em token DTMF ou no sentinela HANG_UP.

    A última linha não vazia tem precedência sobre o restante do texto.

    Returns:
        Dígitos/`*`/`#`, HANG_UP, ou None quando não há ação reconhecível.
    """
    if not answer:
        return None
    return _match(last_meaningful_line(answer)) or _match(answer)
