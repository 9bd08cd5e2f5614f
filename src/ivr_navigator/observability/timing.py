"""Instrumentação de latência por componente."""

from __future__ import annotations

import contextlib
import time
from collections.abc import Generator
from typing import Any

from ivr_navigator.observability.logging import get_logger

logger = get_logger(__name__)


@contextlib.contextmanager
def timed(component: str, **fields: Any) -> Generator[None, None, None]:
    """Mede e loga o tempo decorrido de um bloco.

    Uso:
        with timed("navigation_step", step=3):
            await driver.step()

    Campos extras (ex.: step, state) são anexados ao log `component_latency`.
    """
    start = time.perf_counter()
    try:
        yield
    finally:
        elapsed_ms = (time.perf_counter() - start) * 1000
        logger.info(
            "component_latency",
            extra={
                **fields,
                "component": component,
                "elapsed_ms": round(elapsed_ms, 2),
            },
        )
