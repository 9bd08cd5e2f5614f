"""Adapter do advisor externo."""

from ivr_navigator.adapters.advisor.client import SessionApiAdvisor, create_advisor

__all__ = ["SessionApiAdvisor", "create_advisor"]
