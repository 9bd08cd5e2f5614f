"""Relatórios de sessão: Markdown legível e histórico JSON.

Responsabilidades:
- Renderizar cabeçalho e passos de um SessionResult
- Renderizar resumo de transições (inclusive ilegais)
- Persistir relatório, histórico e diagrama no diretório de saída
- Resumo da suíte de fluxos nomeados (tabela Flow/Status/Final State)
"""

from __future__ import annotations

import json
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path

from ivr_navigator.application.driver import SessionResult, StepRecord
from ivr_navigator.application.flows import FlowResult
from ivr_navigator.observability.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class ReportFiles:
    history_path: Path
    report_path: Path
    diagram_path: Path | None = None


def _fence(text: str) -> list[str]:
    return ["```", text.strip() or "(blank)", "```", ""]


def render_header(result: SessionResult, generated_at: datetime) -> list[str]:
    """Cabeçalho com identificação e desfecho da chamada."""
    if result.error:
        outcome = f"failed: {result.error}"
    elif result.completed:
        outcome = "completed"
    elif result.aborted:
        outcome = "aborted"
    else:
        outcome = "step budget exhausted"
    return [
        "# IVR Navigation Report",
        "",
        f"Generated: {generated_at.isoformat()}",
        f"Call: {result.call_id}",
        f"Mode: {result.mode.value}",
        f"Outcome: {outcome}",
        f"Total Steps: {result.steps}",
        f"Final State: {result.final_state.value}",
        "",
    ]


def render_steps(steps: Iterable[StepRecord]) -> list[str]:
    """Um bloco por passo: prompt, ação tomada e resposta do IVR."""
    lines: list[str] = []
    for record in steps:
        lines.append(f"## Step {record.step}")
        lines.append("")
        lines.append(f"State: {record.state_before.value} -> {record.state_after.value}")
        lines.append("")
        lines.append("### IVR Prompt")
        lines.append("")
        lines.extend(_fence(record.prompt_in))
        if record.advisor_answer is not None:
            lines.append("### Advisor Answer")
            lines.append("")
            lines.extend(_fence(record.advisor_answer))
        shown = record.input or "(none)"
        lines.append(f"Action Taken: {record.action} [{shown}]")
        lines.append("")
        if record.prompt_out:
            lines.append("### IVR Response")
            lines.append("")
            lines.extend(_fence(record.prompt_out))
        lines.append(f"Timestamp: {record.timestamp.isoformat()}")
        lines.append("")
        lines.append("---")
        lines.append("")
    return lines


def render_transitions(result: SessionResult) -> list[str]:
    lines = ["## Transitions", ""]
    if not result.transitions:
        return [*lines, "No transitions observed.", ""]
    for source in sorted(result.transitions):
        for target, count in sorted(result.transitions[source].items()):
            lines.append(f"- {source} -> {target}: {count}")
    lines.append("")
    if result.illegal_transitions:
        lines.append("### Illegal Transitions")
        lines.append("")
        for source, target in result.illegal_transitions:
            lines.append(f"- {source.value} -> {target.value}")
        lines.append("")
    return lines


def render_report(result: SessionResult, generated_at: datetime | None = None) -> str:
    """Relatório Markdown completo de uma sessão."""
    generated_at = generated_at or datetime.now(tz=UTC)
    lines = [
        *render_header(result, generated_at),
        *render_steps(result.history),
        *render_transitions(result),
    ]
    return "\n".join(lines)


def save_report(
    result: SessionResult,
    output_dir: str | Path,
    diagram: str | None = None,
    generated_at: datetime | None = None,
) -> ReportFiles:
    """Grava histórico JSON, relatório Markdown e (opcional) diagrama DOT."""
    generated_at = generated_at or datetime.now(tz=UTC)
    directory = Path(output_dir)
    directory.mkdir(parents=True, exist_ok=True)
    stamp = generated_at.strftime("%Y%m%dT%H%M%S")
    base = f"ivr-session-{result.call_id}-{stamp}"

    history_path = directory / f"{base}.json"
    history_path.write_text(result.model_dump_json(indent=2), encoding="utf-8")

    report_path = directory / f"{base}.md"
    report_path.write_text(render_report(result, generated_at), encoding="utf-8")

    diagram_path = None
    if diagram is not None:
        diagram_path = directory / f"{base}.dot"
        diagram_path.write_text(diagram, encoding="utf-8")

    logger.info(
        "session_report_saved",
        extra={"call_id": result.call_id, "report_path": str(report_path)},
    )
    return ReportFiles(history_path, report_path, diagram_path)


@dataclass(frozen=True, slots=True)
class SuiteReportFiles:
    results_path: Path
    report_path: Path


def _status(success: bool) -> str:
    return "Success" if success else "Failed"


def render_suite_report(results: Iterable[FlowResult], generated_at: datetime | None = None) -> str:
    """Relatório da suíte: tabela de resumo e detalhes por fluxo."""
    generated_at = generated_at or datetime.now(tz=UTC)
    results = list(results)
    lines = [
        "# IVR Flow Test Report",
        "",
        f"Generated: {generated_at.isoformat()}",
        "",
        "## Test Summary",
        "",
        "| Flow | Status | Final State |",
        "|------|--------|-------------|",
    ]
    lines.extend(
        f"| {result.flow} | {_status(result.success)} | {result.final_state.value} |"
        for result in results
    )
    lines.extend(["", "## Test Details", ""])

    for result in results:
        lines.append(f"### {result.flow}")
        lines.append("")
        lines.append(f"Status: {_status(result.success)}")
        lines.append(f"Final State: {result.final_state.value}")
        lines.append(f"Call: {result.session.call_id}")
        if result.rx_number:
            lines.append(f"RX Number: {result.rx_number}")
        if result.error:
            lines.append(f"Error: {result.error}")
        lines.extend(["", "#### Steps", ""])
        if not result.session.history:
            lines.append("No steps recorded.")
        for record in result.session.history:
            shown = record.input or "(none)"
            lines.append(f"{record.step}. [{record.state_before.value}] {record.action} [{shown}]")
        lines.append("")
    return "\n".join(lines)


def save_suite_report(
    results: Iterable[FlowResult],
    output_dir: str | Path,
    generated_at: datetime | None = None,
) -> SuiteReportFiles:
    """Grava resultados JSON (fluxo → desfecho) e o relatório Markdown da suíte."""
    generated_at = generated_at or datetime.now(tz=UTC)
    results = list(results)
    directory = Path(output_dir)
    directory.mkdir(parents=True, exist_ok=True)
    stamp = generated_at.strftime("%Y%m%dT%H%M%S")

    results_path = directory / f"flow-results-{stamp}.json"
    payload = {result.flow: result.model_dump(mode="json") for result in results}
    results_path.write_text(json.dumps(payload, indent=2), encoding="utf-8")

    report_path = directory / f"flow-report-{stamp}.md"
    report_path.write_text(render_suite_report(results, generated_at), encoding="utf-8")

    logger.info(
        "flow_suite_report_saved",
        extra={
            "flows": len(results),
            "passed": sum(1 for result in results if result.success),
            "report_path": str(report_path),
        },
    )
    return SuiteReportFiles(results_path, report_path)
