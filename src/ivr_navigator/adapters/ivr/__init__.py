"""Adapter do endpoint IVR (webhook de voz + TwiML)."""

from ivr_navigator.adapters.ivr.client import TwilioWebhookClient, create_call_endpoint_client
from ivr_navigator.adapters.ivr.twiml import extract_prompt

__all__ = [
    "TwilioWebhookClient",
    "create_call_endpoint_client",
    "extract_prompt",
]
