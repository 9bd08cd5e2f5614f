"""Geradores de identificadores."""

from __future__ import annotations

import uuid

DEFAULT_CALL_PREFIX = "IvrNav"


def new_call_id(prefix: str = DEFAULT_CALL_PREFIX) -> str:
    """Gera um CallSid único por chamada.

    Formato: `{prefix}_{8 hex}` (ex.: `PharmacyHours_1a2b3c4d`).
    """

    return f"{prefix or DEFAULT_CALL_PREFIX}_{uuid.uuid4().hex[:8]}"
