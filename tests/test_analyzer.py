"""
Tests for the flow analyzer (authoring diagnostics).

These tests verify:
    - Per-step lint messages
    - Flow structure checks
    - Navigation graph checks (missing targets, reachability, cycles)
"""

from formflow.analyzer import analyze_flow, lint_step
from formflow.config import CompilerSettings
from formflow.examples import build_example_flow
from formflow.model import (
    CheckboxField,
    Condition,
    FileField,
    Flow,
    NavigationRule,
    RadioField,
    Step,
    TextField,
)


def _page(name, *fields, rule=None):
    return Step(id=name.lower().replace(" ", ""), name=name, fields=fields, navigation_rule=rule)


class TestLintStep:
    """Test per-step structural lint."""

    def test_clean_step(self):
        step = _page("Page 1", TextField(id="a", title="A"))
        assert lint_step(step) == []

    def test_missing_title(self):
        step = _page("Page 1", TextField(id="a", title="  "))
        assert lint_step(step) == ['Field "a" needs a title']

    def test_choice_without_options(self):
        step = _page("Page 1", CheckboxField(id="c", title="Pick"))
        assert lint_step(step) == ['"Pick" needs options']

    def test_file_limit_ceiling(self):
        step = _page("Page 1", FileField(id="f", title="Upload", max_file_size=500))
        assert lint_step(step) == ['"Upload" file size limit too high']
        assert lint_step(step, CompilerSettings(max_file_size_ceiling_mb=1000)) == []


class TestAnalyzeStructure:
    """Test flow-wide structure checks."""

    def test_example_flow_is_clean(self):
        report = analyze_flow(build_example_flow())
        assert report.ok, report.warnings
        assert report.total_steps == 5
        assert report.field_types == [
            "checkbox",
            "file",
            "radio",
            "readonly",
            "select",
            "text",
            "textarea",
            "title",
        ]

    def test_empty_flow(self):
        report = analyze_flow(Flow(name="Empty"))
        assert report.warnings == ["Flow must have at least one page"]

    def test_unnamed_and_empty_pages(self):
        flow = Flow(steps=[_page("Page 1", TextField(id="a", title="A")), Step(id="s2", name="")])
        report = analyze_flow(flow)
        assert report.unnamed_steps == [1]
        assert "Page 2 needs a name" in report.warnings
        assert '"Page 2" has no fields' in report.warnings

    def test_duplicate_names_and_ids(self):
        flow = Flow(
            steps=[
                _page("Same", TextField(id="a", title="A"), TextField(id="a", title="A again")),
                _page("Same", TextField(id="b", title="B")),
            ]
        )
        report = analyze_flow(flow)
        assert report.duplicate_step_names == {"Same"}
        assert report.duplicate_field_ids == {"Same": ["a"]}
        assert "Duplicate page names: Same" in report.warnings
        assert '"Same" has duplicate field IDs' in report.warnings

    def test_dangling_dependency(self):
        flow = Flow(steps=[_page("Page 1", TextField(id="a", title="A", depends_on="gone", show_when="x"))])
        report = analyze_flow(flow)
        assert report.dangling_dependencies == [("Page 1", "a", "gone")]
        assert 'Page 1: "a" depends on missing field "gone"' in report.warnings

    def test_lint_errors_prefixed(self):
        flow = Flow(steps=[_page("Page 1", RadioField(id="r", title="R"))])
        report = analyze_flow(flow)
        assert report.step_errors == {"Page 1": ['"R" needs options']}
        assert 'Page 1: "R" needs options' in report.warnings


class TestAnalyzeNavigation:
    """Test navigation graph checks."""

    COLOR = RadioField(id="color", title="Color", options=["Red", "Blue"])

    def test_missing_target(self):
        rule = NavigationRule(field_id="color", conditions=[Condition("Red", "Nowhere")])
        flow = Flow(steps=[_page("Page 1", self.COLOR, rule=rule), _page("Page 2", TextField(id="a", title="A"))])
        report = analyze_flow(flow)
        assert report.missing_targets == [("Page 1", "Nowhere")]
        assert 'Page 1: navigation target "Nowhere" not found' in report.warnings

    def test_inert_rule(self):
        rule = NavigationRule(field_id="gone", conditions=[Condition("x", "Page 2")])
        flow = Flow(steps=[_page("Page 1", self.COLOR, rule=rule), _page("Page 2", TextField(id="a", title="A"))])
        report = analyze_flow(flow)
        assert report.inert_rules == ["Page 1"]
        assert "Page 1: navigation field not found, rule ignored" in report.warnings

    def test_unreachable_page(self):
        """A page skipped by every rule is unreachable."""
        rule = NavigationRule(field_id="color", conditions=[Condition("Red", "Page 3")], default_step_name="Page 3")
        flow = Flow(
            steps=[
                _page("Page 1", self.COLOR, rule=rule),
                _page("Page 2", TextField(id="a", title="A")),
                _page("Page 3", TextField(id="b", title="B")),
            ]
        )
        report = analyze_flow(flow)
        assert report.unreachable_steps == {"Page 2"}
        assert "Unreachable pages: Page 2" in report.warnings

    def test_cycle_detected(self):
        back = NavigationRule(field_id="color", conditions=[Condition("Red", "Page 1")])
        flow = Flow(
            steps=[
                _page("Page 1", TextField(id="a", title="A")),
                _page("Page 2", self.COLOR, rule=back),
            ]
        )
        report = analyze_flow(flow)
        assert report.has_cycles
        assert report.cycle_example == ["Page 1", "Page 2", "Page 1"]
        assert "Navigation cycle detected: Page 1 -> Page 2 -> Page 1" in report.warnings

    def test_end_and_skip_are_not_missing(self):
        rule = NavigationRule(field_id="color", conditions=[Condition("Red", "end")], default_step_name="skip")
        flow = Flow(steps=[_page("Page 1", self.COLOR, rule=rule), _page("Page 2", TextField(id="a", title="A"))])
        report = analyze_flow(flow)
        assert report.missing_targets == []
        assert report.ok
