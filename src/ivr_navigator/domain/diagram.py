"""Export do diagrama de transições observadas (formato DOT/Graphviz)."""

from __future__ import annotations

from ivr_navigator.domain.session import CallSession


def to_dot(session: CallSession, graph_name: str = "IVR_States") -> str:
    """Gera digraph DOT com estados descobertos e contagens de transição.

    Derivado puro dos dados da sessão; nós e arestas em ordem estável.
    """
    lines = [
        f"digraph {graph_name} {{",
        "  rankdir=LR;",
        "  node [shape=box, style=filled, fillcolor=lightblue];",
    ]
    for state in sorted(session.discovered_states, key=lambda s: s.value):
        lines.append(f'  "{state.value}";')

    edges = sorted(session.transitions.items(), key=lambda item: (item[0][0], item[0][1]))
    for (source, target), count in edges:
        if count > 0:
            lines.append(f'  "{source.value}" -> "{target.value}" [label="{count}"];')

    lines.append("}")
    return "\n".join(lines) + "\n"
