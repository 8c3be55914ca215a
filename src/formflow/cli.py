"""Command line entry point: compile, export, lint and diagram saved flows."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import List, Optional

from formflow.analyzer import analyze_flow
from formflow.backends.dot_generator import DotMode, generate_dot
from formflow.compiler import compile_step, export_flow
from formflow.config import load_settings
from formflow.errors import FormflowError
from formflow.model import Flow, Step
from formflow.serialization import load_flow

logger = logging.getLogger(__name__)


def _select_step(flow: Flow, selector: Optional[str]) -> Step:
    if selector is None:
        if not flow.steps:
            raise FormflowError("Flow has no steps")
        return flow.steps[0]
    step = flow.get_step_by_name(selector)
    if step is not None:
        return step
    if selector.isdigit() and int(selector) < len(flow.steps):
        return flow.steps[int(selector)]
    raise FormflowError(f"No step named or numbered {selector!r}")


def _write(text: str, output: Optional[str]) -> None:
    if output:
        with open(output, "w") as fh:
            fh.write(text + "\n")
        logger.info("Wrote %s", output)
    else:
        print(text)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="formflow", description="Form schema compiler")
    parser.add_argument("--config", help="Settings YAML (defaults to $FORMFLOW_CONFIG)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("compile", help="Print the compiled schemas of one step")
    p.add_argument("flow", help="Saved flow (.json, .yaml)")
    p.add_argument("--step", help="Step name or zero-based index (default: first)")

    p = sub.add_parser("export", help="Export the whole flow as JSON")
    p.add_argument("flow")
    p.add_argument("-o", "--output")

    p = sub.add_parser("lint", help="Report authoring problems")
    p.add_argument("flow")

    p = sub.add_parser("dot", help="Graphviz diagram of the page navigation")
    p.add_argument("flow")
    p.add_argument("--mode", choices=[m.value for m in DotMode], default=DotMode.SIMPLE.value)
    p.add_argument("-o", "--output")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        settings = load_settings(args.config)
        flow = load_flow(args.flow)

        if args.command == "compile":
            step = _select_step(flow, args.step)
            _write(json.dumps(compile_step(step, settings).to_output(), indent=2), None)
            return 0

        if args.command == "export":
            _write(json.dumps(export_flow(flow, settings=settings), indent=2), args.output)
            return 0

        if args.command == "lint":
            report = analyze_flow(flow, settings)
            for warning in report.warnings:
                print(f"- {warning}")
            if report.ok:
                print(f"{flow.name}: no problems found")
                return 0
            return 1

        if args.command == "dot":
            _write(generate_dot(flow, mode=DotMode(args.mode)), args.output)
            return 0
    except (FormflowError, OSError) as e:
        logger.error("%s", e)
        return 2

    return 0


if __name__ == "__main__":
    sys.exit(main())
