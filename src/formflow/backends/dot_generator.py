"""
Graphviz DOT diagram generator for form flows.

Converts a Flow into Graphviz DOT format showing pages and the navigation
edges between them.

Supports two modes:
    - SIMPLE: Page flow only (no condition labels)
    - DETAILED: Condition labels on edges, field counts and actions on pages
"""

from enum import Enum
from pathlib import Path
from typing import List, Union

from formflow.model import Flow
from formflow.navigation import step_transitions


class DotMode(Enum):
    """Visualization modes for DOT output."""
    SIMPLE = "simple"
    DETAILED = "detailed"


def _escape_dot_string(s: str) -> str:
    """Escape special characters for DOT labels."""
    if not s:
        return '""'
    s = s.replace('\\', '\\\\')
    s = s.replace('"', '\\"')
    s = s.replace('\n', '\\n')
    return f'"{s}"'


def _node_id(index: int) -> str:
    return f"step_{index}"


def generate_dot(flow: Flow, mode: DotMode = DotMode.SIMPLE) -> str:
    """
    Generate Graphviz DOT format for a flow.

    Args:
        flow: Flow object to visualize
        mode: Visualization mode (SIMPLE, DETAILED)

    Returns:
        String containing DOT graph definition
    """
    lines: List[str] = []

    lines.append("digraph flow {")
    lines.append("  rankdir=LR;")
    lines.append("  node [shape=box, style=filled, fillcolor=lightblue];")

    # =========================================================================
    # NODES
    # =========================================================================

    lines.append('  START [shape=ellipse, fillcolor=lightgreen, label="START"];')
    lines.append('  END [shape=ellipse, fillcolor=lightgrey, label="END"];')

    for index, step in enumerate(flow.steps):
        label = step.name or step.id
        if mode == DotMode.DETAILED:
            info = [f"{len(step.fields)} fields"]
            if step.action_name:
                info.append(f"Action: {step.action_name}")
            label = label + "\n(" + "\n".join(info) + ")"
        lines.append(f"  {_node_id(index)} [label={_escape_dot_string(label)}];")

    missing = sorted({t.target for t in step_transitions(flow) if t.is_missing_target})
    for n, target in enumerate(missing):
        lines.append(
            f"  missing_{n} [shape=octagon, fillcolor=salmon, "
            f"label={_escape_dot_string('Missing: ' + target)}];"
        )

    # =========================================================================
    # EDGES
    # =========================================================================

    if flow.steps:
        lines.append(f"  START -> {_node_id(0)};")

    for t in step_transitions(flow):
        from_id = _node_id(t.from_index)
        if t.to_index is not None:
            to_id = _node_id(t.to_index)
        elif t.is_missing_target:
            to_id = f"missing_{missing.index(t.target)}"
        else:
            to_id = "END"

        attrs = []
        if mode == DotMode.DETAILED and t.label:
            label = t.label if len(t.label) <= 40 else t.label[:37] + "..."
            attrs.append(f"label={_escape_dot_string(label)}")
        if t.is_missing_target:
            attrs.append("style=dashed, color=red")
        edge_attr = f" [{', '.join(attrs)}]" if attrs else ""

        lines.append(f"  {from_id} -> {to_id}{edge_attr};")

    lines.append("}")

    return "\n".join(lines)


def save_dot_file(flow: Flow, filename: Union[str, Path], mode: DotMode = DotMode.SIMPLE) -> None:
    """
    Generate DOT and save to file.

    Args:
        flow: Flow to visualize
        filename: Output file path (.dot extension recommended)
        mode: Visualization mode
    """
    dot = generate_dot(flow, mode=mode)
    with open(filename, 'w') as f:
        f.write(dot)


__all__ = ["DotMode", "generate_dot", "save_dot_file"]
