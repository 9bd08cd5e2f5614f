#!/usr/bin/env python
"""Executa uma ou mais navegações contra o endpoint IVR configurado.

Lê Settings do ambiente (.env), roda N chamadas concorrentes e grava
relatório Markdown, histórico JSON e diagrama DOT de cada uma. Com --suite,
roda os fluxos nomeados (refill, status, horários) e grava o resumo da suíte.

Uso:
    python scripts/run_navigation.py --mode exploratory --calls 3 --max-steps 15
    python scripts/run_navigation.py --suite
"""

from __future__ import annotations

import argparse
import asyncio

from ivr_navigator.adapters.ivr import create_call_endpoint_client
from ivr_navigator.application.flows import default_flow_suite, run_flow_suite
from ivr_navigator.application.navigation import NavigationConfig, build_driver, run_concurrently
from ivr_navigator.application.reporting import save_report, save_suite_report
from ivr_navigator.config.settings import Settings, get_settings
from ivr_navigator.domain.actions import TraversalMode
from ivr_navigator.domain.diagram import to_dot
from ivr_navigator.infra.http import create_http_client
from ivr_navigator.observability.logging import configure_logging


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Navegação automática de IVR")
    parser.add_argument("--mode", choices=[m.value for m in TraversalMode if m != TraversalMode.ASSISTED])
    parser.add_argument("--calls", type=int, default=1)
    parser.add_argument("--max-steps", type=int)
    parser.add_argument("--suite", action="store_true", help="Roda os fluxos nomeados")
    return parser.parse_args()


async def _run_suite(settings: Settings, config: NavigationConfig) -> int:
    async with create_http_client(settings) as http_client:
        client = create_call_endpoint_client(settings, http_client=http_client)
        results = await run_flow_suite(default_flow_suite(settings.flow_rx_number), client, config)

    files = save_suite_report(results, settings.report_output_dir)
    for result in results:
        status = "success" if result.success else f"failed ({result.error or 'incomplete'})"
        print(f"{result.flow}: {status}, final state {result.final_state.value}")
    print(f"Suite report -> {files.report_path}")
    return 0 if all(result.success for result in results) else 1


async def _run_calls(settings: Settings, config: NavigationConfig, calls: int) -> int:
    async with create_http_client(settings) as http_client:
        drivers = [
            build_driver(
                config,
                create_call_endpoint_client(settings, http_client=http_client),
                label=f"c{index}",
            )
            for index in range(1, calls + 1)
        ]
        results = await run_concurrently(drivers, config.max_steps)

    for driver, result in zip(drivers, results, strict=True):
        files = save_report(result, settings.report_output_dir, diagram=to_dot(driver.session))
        status = "completed" if result.completed else (result.error or "incomplete")
        print(f"{result.call_id}: {status} after {result.steps} steps -> {files.report_path}")

    return 0 if all(result.error is None for result in results) else 1


async def main() -> int:
    args = _parse_args()
    settings = get_settings()
    configure_logging(settings.log_level, settings.service_name)

    config = NavigationConfig.from_settings(settings, mode=args.mode, max_steps=args.max_steps)
    if args.suite:
        return await _run_suite(settings, config)
    return await _run_calls(settings, config, args.calls)


if __name__ == "__main__":
    raise SystemExit(asyncio.run(main()))
