# A small recursive-descent evaluator for arithmetic expressions.
# Author: Shibo Li
# Date: 2025-07-03
# Version: 0.1.0

"""
Grammar::

    expr   := term (('+' | '-') term)*
    term   := factor (('*' | '/' | '%') factor)*
    factor := ('+' | '-') factor | power
    power  := atom ('^' factor)?
    atom   := NUMBER | '(' expr ')'

Only numbers, the operators above and parentheses are accepted; anything
else raises ``ExpressionError``. ``**`` is accepted as an alias of ``^``.
"""

import math
import re
from typing import List, Union

Number = Union[int, float]

_TOKEN_RE = re.compile(r"\s*(?:(\d+\.\d*|\.\d+|\d+)|(\*\*|[-+*/%^()]))")
MAX_EXPONENT = 1000
# Results are limited in size so they stay cheap to compute and to print.
MAX_RESULT_DIGITS = 1000


class ExpressionError(ValueError):
    """Raised when an expression cannot be parsed or evaluated."""


def _check_size(value: Number) -> Number:
    if isinstance(value, float) and not math.isfinite(value):
        raise ExpressionError("Result too large")
    if isinstance(value, int) and value.bit_length() * math.log10(2) > MAX_RESULT_DIGITS + 1:
        raise ExpressionError("Result too large")
    return value


def _tokenize(expression: str) -> List[str]:
    tokens: List[str] = []
    position = 0
    expression = expression.rstrip()
    while position < len(expression):
        match = _TOKEN_RE.match(expression, position)
        if not match:
            raise ExpressionError(f"Unexpected character {expression[position]!r} at position {position}")
        number, operator = match.groups()
        tokens.append(number if number is not None else ("^" if operator == "**" else operator))
        position = match.end()
    return tokens


class _Parser:
    def __init__(self, tokens: List[str]):
        self.tokens = tokens
        self.pos = 0

    def peek(self):
        return self.tokens[self.pos] if self.pos < len(self.tokens) else None

    def take(self) -> str:
        token = self.peek()
        if token is None:
            raise ExpressionError("Unexpected end of expression")
        self.pos += 1
        return token

    def parse(self) -> Number:
        if not self.tokens:
            raise ExpressionError("Empty expression")
        value = self.expr()
        if self.peek() is not None:
            raise ExpressionError(f"Unexpected token {self.peek()!r}")
        return value

    def expr(self) -> Number:
        value = self.term()
        while self.peek() in ("+", "-"):
            if self.take() == "+":
                value = value + self.term()
            else:
                value = value - self.term()
        return value

    def term(self) -> Number:
        value = self.factor()
        while self.peek() in ("*", "/", "%"):
            operator = self.take()
            right = self.factor()
            if operator == "*":
                value = _check_size(value * right)
            elif right == 0:
                raise ExpressionError("Division by zero")
            elif operator == "/":
                value = value / right
            else:
                value = value % right
        return value

    def factor(self) -> Number:
        if self.peek() == "-":
            self.take()
            return -self.factor()
        if self.peek() == "+":
            self.take()
            return self.factor()
        return self.power()

    def power(self) -> Number:
        base = self.atom()
        if self.peek() == "^":
            self.take()
            exponent = self.factor()
            if abs(exponent) > MAX_EXPONENT:
                raise ExpressionError("Exponent too large")
            if base == 0:
                if exponent < 0:
                    raise ExpressionError("Division by zero")
                return 0 if exponent > 0 else 1
            if exponent * math.log10(abs(base)) > MAX_RESULT_DIGITS:
                raise ExpressionError("Result too large")
            result = base ** exponent
            if isinstance(result, complex):
                raise ExpressionError("Result is not a real number")
            return result
        return base

    def atom(self) -> Number:
        token = self.take()
        if token == "(":
            value = self.expr()
            if self.take() != ")":
                raise ExpressionError("Missing closing parenthesis")
            return value
        if token[0].isdigit() or token[0] == ".":
            if len(token) > MAX_RESULT_DIGITS:
                raise ExpressionError("Number too long")
            return float(token) if "." in token else int(token)
        raise ExpressionError(f"Unexpected token {token!r}")


def evaluate(expression: str) -> Number:
    """
    Evaluates an arithmetic expression without touching ``eval``.
    Integral float results are returned as ``int`` (``"10 / 2"`` -> ``5``).
    """
    try:
        value = _Parser(_tokenize(expression)).parse()
    except OverflowError as e:
        raise ExpressionError("Result too large") from e
    _check_size(value)
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value
