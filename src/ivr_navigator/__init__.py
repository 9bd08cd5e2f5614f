"""ivr_navigator: navegação automatizada de menus IVR por DTMF."""

__version__ = "0.1.0"
