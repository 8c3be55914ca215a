"""
Tests for navigation rule compilation.

The exported expression string and the in-process decision are two views
of the same decision expression. These tests check the string form, the
interpreted form, and that parsing the string back agrees with both.
"""

import pytest

from formflow.backends.expression_renderer import quote_literal, render_expression
from formflow.errors import ExpressionParseError
from formflow.expression_parser import parse_expression
from formflow.expressions import (
    AnswerReference,
    Comparison,
    ComparisonOperator,
    Conditional,
    Literal,
)
from formflow.interpreter import evaluate
from formflow.model import (
    CONTINUE,
    CheckboxField,
    Condition,
    Flow,
    NavigationRule,
    RadioField,
    Step,
    TextField,
)
from formflow.navigation import (
    build_expression,
    decision_expression,
    rule_targets,
    select_target,
    step_transitions,
)

COLOR = RadioField(id="color", title="Color", options=["Red", "Blue"])
TAGS = CheckboxField(id="tags", title="Tags", options=["a", "b"])


class TestBuildExpression:
    """Test portable expression strings."""

    def test_no_rule(self):
        assert build_expression(None, [COLOR]) == "'continue'"

    def test_rule_without_conditions(self):
        rule = NavigationRule(field_id="color", default_step_name="Page 3")
        assert build_expression(rule, [COLOR]) == "'continue'"

    def test_single_equality(self):
        """A radio driver compiles to a strict equality test."""
        rule = NavigationRule(field_id="color", conditions=[Condition("Red", "Page 2")])
        assert build_expression(rule, [COLOR]) == "formData.color === 'Red' ? 'Page 2' : 'continue'"

    def test_checkbox_membership_chain(self):
        """Checkbox drivers test membership, conditions in listed order."""
        rule = NavigationRule(
            field_id="tags",
            conditions=[Condition("a", "X"), Condition("b", "Y")],
            default_step_name="Z",
        )
        assert build_expression(rule, [TAGS]) == (
            "formData.tags.includes('a') ? 'X' : formData.tags.includes('b') ? 'Y' : 'Z'"
        )

    def test_driver_missing_from_step(self):
        rule = NavigationRule(field_id="gone", conditions=[Condition("x", "Page 2")])
        assert build_expression(rule, [COLOR]) == "'continue'"

    def test_quotes_escaped(self):
        rule = NavigationRule(field_id="color", conditions=[Condition("O'Brien", "Page 2")])
        assert build_expression(rule, [COLOR]) == (
            "formData.color === 'O\\'Brien' ? 'Page 2' : 'continue'"
        )

    def test_non_identifier_field_id(self):
        f = RadioField(id="my-field", title="F", options=["x"])
        rule = NavigationRule(field_id="my-field", conditions=[Condition("x", "Page 2")])
        assert build_expression(rule, [f]) == "formData['my-field'] === 'x' ? 'Page 2' : 'continue'"

    def test_trailing_newline_id_uses_brackets(self):
        """An id that is an identifier plus a newline is not an identifier."""
        f = RadioField(id="color\n", title="F", options=["Red"])
        rule = NavigationRule(field_id="color\n", conditions=[Condition("Red", "P2")])
        text = build_expression(rule, [f])
        assert text == "formData['color\n'] === 'Red' ? 'P2' : 'continue'"
        assert parse_expression(text).test.answer == AnswerReference("color\n")


class TestQuoteLiteral:
    """Test literal quoting."""

    def test_plain(self):
        assert quote_literal("Page 2") == "'Page 2'"

    def test_backslash_before_quote(self):
        assert quote_literal("a\\'b") == "'a\\\\\\'b'"


class TestSelectTarget:
    """Test the interpreted decision."""

    def test_matching_condition(self):
        rule = NavigationRule(field_id="color", conditions=[Condition("Red", "Page 2")])
        assert select_target(rule, [COLOR], {"color": "Red"}) == "Page 2"

    def test_falls_through_to_default(self):
        rule = NavigationRule(field_id="color", conditions=[Condition("Red", "Page 2")], default_step_name="Page 3")
        assert select_target(rule, [COLOR], {"color": "Blue"}) == "Page 3"

    def test_first_match_wins(self):
        rule = NavigationRule(field_id="tags", conditions=[Condition("a", "X"), Condition("b", "Y")])
        assert select_target(rule, [TAGS], {"tags": ["b", "a"]}) == "X"

    def test_membership_on_empty_list(self):
        rule = NavigationRule(field_id="tags", conditions=[Condition("a", "X")])
        assert select_target(rule, [TAGS], {"tags": []}) == CONTINUE

    def test_equality_is_strict(self):
        """A list answer never equals a scalar condition."""
        rule = NavigationRule(field_id="color", conditions=[Condition("Red", "X")])
        assert select_target(rule, [COLOR], {"color": ["Red"]}) == CONTINUE


class TestDecisionExpression:
    """Test the AST built from a rule."""

    def test_chain_shape(self):
        rule = NavigationRule(field_id="color", conditions=[Condition("Red", "X")], default_step_name="Y")
        expr = decision_expression(rule, [COLOR])
        assert expr == Conditional(
            test=Comparison(ComparisonOperator.EQUALS, AnswerReference("color"), Literal("Red")),
            then=Literal("X"),
            otherwise=Literal("Y"),
        )

    def test_rule_targets(self):
        rule = NavigationRule(field_id="tags", conditions=[Condition("a", "X"), Condition("b", "Y")])
        assert rule_targets(rule, [TAGS]) == ["X", "Y", CONTINUE]
        assert rule_targets(None, [TAGS]) == [CONTINUE]


class TestParseExpression:
    """Test reading expression strings back."""

    def test_literal(self):
        assert parse_expression("'continue'") == Literal("continue")

    def test_includes(self):
        expr = parse_expression("formData.tags.includes('a') ? 'X' : 'Y'")
        assert expr.test.operator == ComparisonOperator.INCLUDES
        assert expr.test.answer == AnswerReference("tags")

    def test_bracket_reference_and_escapes(self):
        expr = parse_expression("formData['my-field'] === 'O\\'Brien' ? 'a' : 'b'")
        assert expr.test.answer == AnswerReference("my-field")
        assert expr.test.value == Literal("O'Brien")

    @pytest.mark.parametrize(
        "text",
        [
            "",
            "formData.color ===",
            "formData.color === 'Red' ? 'X'",
            "'a' 'b'",
            "formData.color == 'Red' ? 'X' : 'Y'",
            "window.color === 'Red' ? 'X' : 'Y'",
        ],
    )
    def test_malformed(self, text):
        with pytest.raises(ExpressionParseError):
            parse_expression(text)


class TestRenderedAndInterpretedAgree:
    """The exported string and the native decision pick the same target."""

    RULES = [
        ([COLOR], NavigationRule(field_id="color", conditions=[Condition("Red", "Page 2")])),
        (
            [TAGS],
            NavigationRule(
                field_id="tags",
                conditions=[Condition("a", "X"), Condition("b", "Y")],
                default_step_name="Z",
            ),
        ),
        ([COLOR], NavigationRule(field_id="color", conditions=[Condition("it's", "Page \\ 2")], default_step_name="end")),
    ]

    ANSWERS = [
        {"color": "Red", "tags": ["a"]},
        {"color": "Blue", "tags": ["b"]},
        {"color": "it's", "tags": ["b", "a"]},
        {"color": "", "tags": []},
    ]

    @pytest.mark.parametrize("fields,rule", RULES)
    def test_agreement(self, fields, rule):
        parsed = parse_expression(build_expression(rule, fields))
        assert render_expression(parsed) == build_expression(rule, fields)
        for answers in self.ANSWERS:
            assert evaluate(parsed, answers) == select_target(rule, fields, answers)


class TestStepTransitions:
    """Test the navigation edge enumeration."""

    def test_transitions(self):
        flow = Flow(
            steps=[
                Step(
                    id="s1",
                    name="Page 1",
                    fields=[COLOR],
                    navigation_rule=NavigationRule(
                        field_id="color",
                        conditions=[Condition("Red", "Page 3"), Condition("Blue", "Nowhere")],
                        default_step_name="end",
                    ),
                ),
                Step(id="s2", name="Page 2", fields=[TextField(id="a", title="A")]),
                Step(id="s3", name="Page 3"),
            ]
        )
        transitions = step_transitions(flow)
        summary = [(t.from_index, t.to_index, t.target) for t in transitions]
        assert summary == [
            (0, 2, "Page 3"),
            (0, None, "Nowhere"),
            (0, None, "end"),
            (1, 2, "continue"),
            (2, None, "continue"),
        ]
        assert transitions[0].label == "color === Red"
        assert transitions[1].is_missing_target
        assert not transitions[2].is_missing_target
