"""Configurações centralizadas do ivr_navigator.

Uso típico:
    from ivr_navigator.config import get_settings
"""

from ivr_navigator.config.settings import (
    IVR_STATUS_PATH,
    IVR_VOICE_PATH,
    Settings,
    get_settings,
)

__all__ = [
    "Settings",
    "get_settings",
    "IVR_VOICE_PATH",
    "IVR_STATUS_PATH",
]
