"""
Flow Analyzer — authoring-time diagnostics for form flows.

This module provides lightweight analysis of Flow objects:
    - Per-step structural lint (titles, options, file limits)
    - Flow-wide checks (names, empty pages, duplicate ids)
    - Navigation graph checks (missing targets, reachability, cycles)
    - Dangling field dependencies

IMPORTANT: It does NOT modify the flow and never blocks compilation.
It only produces read-only reports for the author.
"""

from __future__ import annotations

from collections import Counter, defaultdict
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set, Tuple

from formflow.config import DEFAULT_SETTINGS, CompilerSettings
from formflow.model import ChoiceField, FileField, Flow, Step
from formflow.navigation import resolve_driver, step_transitions


def lint_step(step: Step, settings: CompilerSettings = DEFAULT_SETTINGS) -> List[str]:
    """
    Structural authoring errors for one step.

    Checks for:
    - fields without a title
    - choice fields without options
    - file size limits above the configured ceiling
    """
    errors: List[str] = []
    for f in step.fields:
        if not f.title or not f.title.strip():
            errors.append(f'Field "{f.id}" needs a title')

        if isinstance(f, ChoiceField) and not f.options:
            errors.append(f'"{f.title}" needs options')

        if (
            isinstance(f, FileField)
            and f.max_file_size
            and f.max_file_size > settings.max_file_size_ceiling_mb
        ):
            errors.append(f'"{f.title}" file size limit too high')
    return errors


def _find_cycles_dfs(graph: Dict[int, List[int]], start: int, visited: Set[int],
                     rec_stack: Set[int], path: List[int]) -> Optional[List[int]]:
    """DFS to find a cycle starting from a node."""
    visited.add(start)
    rec_stack.add(start)
    path.append(start)

    for neighbor in graph.get(start, []):
        if neighbor not in visited:
            cycle = _find_cycles_dfs(graph, neighbor, visited, rec_stack, path[:])
            if cycle:
                return cycle
        elif neighbor in rec_stack:
            cycle_start_idx = path.index(neighbor)
            return path[cycle_start_idx:] + [neighbor]

    rec_stack.remove(start)
    return None


@dataclass
class FlowReport:
    """Authoring report for a flow."""

    flow_name: str
    total_steps: int = 0
    total_fields: int = 0
    field_types: List[str] = field(default_factory=list)

    # Per-step lint, keyed by step name
    step_errors: Dict[str, List[str]] = field(default_factory=dict)

    # Flow structure
    unnamed_steps: List[int] = field(default_factory=list)
    empty_steps: List[str] = field(default_factory=list)
    duplicate_step_names: Set[str] = field(default_factory=set)
    duplicate_field_ids: Dict[str, List[str]] = field(default_factory=dict)
    dangling_dependencies: List[Tuple[str, str, str]] = field(default_factory=list)  # (step, field, depends_on)

    # Navigation
    inert_rules: List[str] = field(default_factory=list)  # steps whose rule driver is missing
    missing_targets: List[Tuple[str, str]] = field(default_factory=list)  # (step, target)
    unreachable_steps: Set[str] = field(default_factory=set)
    has_cycles: bool = False
    cycle_example: Optional[List[str]] = None

    warnings: List[str] = field(default_factory=list)

    def add_warning(self, msg: str) -> None:
        """Add a warning to the report."""
        if msg not in self.warnings:
            self.warnings.append(msg)

    @property
    def ok(self) -> bool:
        return not self.warnings


def analyze_flow(flow: Flow, settings: CompilerSettings = DEFAULT_SETTINGS) -> FlowReport:
    """
    Perform authoring analysis of a Flow.

    Returns a FlowReport with findings and human-readable warnings.
    """
    report = FlowReport(flow_name=flow.name)
    report.total_steps = len(flow.steps)
    report.total_fields = sum(len(s.fields) for s in flow.steps)
    report.field_types = sorted({f.kind.value for s in flow.steps for f in s.fields})

    # =========================================================================
    # 1. STEP STRUCTURE
    # =========================================================================

    if not flow.steps:
        report.add_warning("Flow must have at least one page")
        return report

    name_counts = Counter(s.name for s in flow.steps)
    report.duplicate_step_names = {name for name, n in name_counts.items() if name and n > 1}

    for index, step in enumerate(flow.steps):
        label = step.name or f"Page {index + 1}"

        if not step.name or not step.name.strip():
            report.unnamed_steps.append(index)

        if not step.fields:
            report.empty_steps.append(label)

        id_counts = Counter(f.id for f in step.fields)
        duplicates = sorted(fid for fid, n in id_counts.items() if n > 1)
        if duplicates:
            report.duplicate_field_ids[label] = duplicates

        for f in step.fields:
            if f.depends_on and step.get_field(f.depends_on) is None:
                report.dangling_dependencies.append((label, f.id, f.depends_on))

        errors = lint_step(step, settings)
        if errors:
            report.step_errors[label] = errors

        rule = step.navigation_rule
        if rule is not None and rule.conditions and resolve_driver(rule, step.fields) is None:
            report.inert_rules.append(label)

    # =========================================================================
    # 2. NAVIGATION GRAPH
    # =========================================================================

    outgoing: Dict[int, List[int]] = defaultdict(list)
    for t in step_transitions(flow):
        if t.is_missing_target:
            entry = (flow.steps[t.from_index].name, t.target)
            if entry not in report.missing_targets:
                report.missing_targets.append(entry)
        elif t.to_index is not None and t.to_index not in outgoing[t.from_index]:
            outgoing[t.from_index].append(t.to_index)

    reachable: Set[int] = set()
    stack = [0]
    while stack:
        node = stack.pop()
        if node in reachable:
            continue
        reachable.add(node)
        for neighbor in outgoing.get(node, []):
            if neighbor not in reachable:
                stack.append(neighbor)

    for index, step in enumerate(flow.steps):
        if index not in reachable:
            report.unreachable_steps.add(step.name or f"Page {index + 1}")

    visited: Set[int] = set()
    for index in list(outgoing.keys()):
        if index not in visited:
            cycle = _find_cycles_dfs(outgoing, index, visited, set(), [])
            if cycle:
                report.has_cycles = True
                report.cycle_example = [flow.steps[i].name for i in cycle]
                break

    # =========================================================================
    # 3. WARNING FLAGS
    # =========================================================================

    for index in report.unnamed_steps:
        report.add_warning(f"Page {index + 1} needs a name")

    for label in report.empty_steps:
        report.add_warning(f'"{label}" has no fields')

    if report.duplicate_step_names:
        report.add_warning(
            f"Duplicate page names: {', '.join(sorted(report.duplicate_step_names))}"
        )

    for label in report.duplicate_field_ids:
        report.add_warning(f'"{label}" has duplicate field IDs')

    for label, errors in report.step_errors.items():
        for error in errors:
            report.add_warning(f"{label}: {error}")

    for label, field_id, depends_on in report.dangling_dependencies:
        report.add_warning(f'{label}: "{field_id}" depends on missing field "{depends_on}"')

    for label in report.inert_rules:
        report.add_warning(f"{label}: navigation field not found, rule ignored")

    for label, target in report.missing_targets:
        report.add_warning(f'{label}: navigation target "{target}" not found')

    if report.unreachable_steps:
        report.add_warning(
            f"Unreachable pages: {', '.join(sorted(report.unreachable_steps))}"
        )

    if report.has_cycles:
        report.add_warning(
            f"Navigation cycle detected: {' -> '.join(report.cycle_example)}"
        )

    return report
