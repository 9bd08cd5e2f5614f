"""Extração do texto falado de respostas TwiML.

Considera `Response/Say` e `Response/Gather/Say`, nessa ordem. XML inválido
ou sem `<Response>` resulta em prompt vazio (condição de resposta em branco),
nunca em exceção.
"""

from __future__ import annotations

import xml.etree.ElementTree as ET

from ivr_navigator.observability.logging import get_logger

logger = get_logger(__name__)


def _say_texts(parent: ET.Element) -> list[str]:
    return [(say.text or "").strip() for say in parent.findall("Say")]


def extract_prompt(xml_body: str | bytes | None) -> str:
    """Retorna o texto concatenado dos elementos Say do TwiML."""
    if not xml_body:
        return ""
    try:
        root = ET.fromstring(xml_body)
    except ET.ParseError as exc:
        logger.warning("twiml_parse_error", extra={"error": str(exc)})
        return ""

    if root.tag != "Response":
        logger.warning("twiml_unexpected_root", extra={"root": root.tag})
        return ""

    parts = _say_texts(root)
    for gather in root.findall("Gather"):
        parts.extend(_say_texts(gather))
    return " ".join(part for part in parts if part)
