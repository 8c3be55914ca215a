"""
Parser for portable navigation expressions (string -> AST).

Reads back the strings produced by formflow.backends.expression_renderer,
e.g. from an exported flow, so they can be inspected or executed with
formflow.interpreter.

Grammar:
    expression  := comparison '?' expression ':' expression
                 | STRING
    comparison  := reference '===' STRING
                 | reference '.' 'includes' '(' STRING ')'
    reference   := 'formData' '.' IDENT
                 | 'formData' '[' STRING ']'
"""

import re
from typing import List, Tuple

from formflow.backends.expression_renderer import ANSWERS_NAME
from formflow.errors import ExpressionParseError
from formflow.expressions import (
    AnswerReference,
    Comparison,
    ComparisonOperator,
    Conditional,
    Expression,
    Literal,
)

_TOKEN_RE = re.compile(
    r"""
    (?P<space>\s+)
  | (?P<string>'(?:[^'\\]|\\.)*')
  | (?P<op>===|[?:().\[\]])
  | (?P<ident>[A-Za-z_$][A-Za-z0-9_$]*)
  | (?P<error>.)
    """,
    re.VERBOSE | re.DOTALL,
)

_ESCAPE_RE = re.compile(r"\\(.)", re.DOTALL)

Token = Tuple[str, str]


def _tokenize(text: str) -> List[Token]:
    """Tokenize expression string into (kind, text) pairs."""
    tokens: List[Token] = []
    for m in _TOKEN_RE.finditer(text):
        kind = m.lastgroup
        if kind == "space":
            continue
        if kind == "error":
            raise ExpressionParseError(f"Unexpected character {m.group()!r} at offset {m.start()}")
        tokens.append((kind, m.group()))
    if not tokens:
        raise ExpressionParseError("Empty expression")
    return tokens


def _unquote(token: str) -> str:
    return _ESCAPE_RE.sub(lambda m: m.group(1), token[1:-1])


def _expect(tokens: List[Token], pos: int, text: str) -> int:
    if pos >= len(tokens) or tokens[pos][1] != text:
        found = tokens[pos][1] if pos < len(tokens) else "end of expression"
        raise ExpressionParseError(f"Expected {text!r}, got {found!r}")
    return pos + 1


def _parse_string(tokens: List[Token], pos: int) -> Tuple[str, int]:
    if pos >= len(tokens) or tokens[pos][0] != "string":
        found = tokens[pos][1] if pos < len(tokens) else "end of expression"
        raise ExpressionParseError(f"Expected string literal, got {found!r}")
    return _unquote(tokens[pos][1]), pos + 1


def _parse_reference(tokens: List[Token], pos: int) -> Tuple[AnswerReference, int]:
    """Parse formData.<id> or formData[<string>]."""
    pos = _expect(tokens, pos, ANSWERS_NAME)

    if pos < len(tokens) and tokens[pos][1] == "[":
        field_id, pos = _parse_string(tokens, pos + 1)
        pos = _expect(tokens, pos, "]")
        return AnswerReference(field_id), pos

    pos = _expect(tokens, pos, ".")
    if pos >= len(tokens) or tokens[pos][0] != "ident":
        raise ExpressionParseError("Expected field identifier after 'formData.'")
    return AnswerReference(tokens[pos][1]), pos + 1


def _parse_comparison(tokens: List[Token], pos: int) -> Tuple[Comparison, int]:
    ref, pos = _parse_reference(tokens, pos)

    if pos < len(tokens) and tokens[pos][1] == "===":
        value, pos = _parse_string(tokens, pos + 1)
        return Comparison(ComparisonOperator.EQUALS, ref, Literal(value)), pos

    pos = _expect(tokens, pos, ".")
    pos = _expect(tokens, pos, "includes")
    pos = _expect(tokens, pos, "(")
    value, pos = _parse_string(tokens, pos)
    pos = _expect(tokens, pos, ")")
    return Comparison(ComparisonOperator.INCLUDES, ref, Literal(value)), pos


def _parse_expression(tokens: List[Token], pos: int) -> Tuple[Expression, int]:
    if pos < len(tokens) and tokens[pos][0] == "string":
        value, pos = _parse_string(tokens, pos)
        return Literal(value), pos

    test, pos = _parse_comparison(tokens, pos)
    pos = _expect(tokens, pos, "?")
    then, pos = _parse_expression(tokens, pos)
    pos = _expect(tokens, pos, ":")
    otherwise, pos = _parse_expression(tokens, pos)
    return Conditional(test=test, then=then, otherwise=otherwise), pos


def parse_expression(text: str) -> Expression:
    """
    Parse a navigation expression string into its AST.

    Raises:
        ExpressionParseError: if the string is not a well-formed expression
    """
    tokens = _tokenize(text)
    expr, pos = _parse_expression(tokens, 0)
    if pos < len(tokens):
        raise ExpressionParseError(f"Unexpected tokens after expression: {[t for _, t in tokens[pos:]]}")
    return expr
