"""Arithmetic evaluator for the Broken Calculator puzzle.

Grammar (recursive descent, no generic code evaluation)::

    expr   := term (('+' | '-') term)*
    term   := factor (('*' | '/') factor)*
    factor := ('+' | '-')* (NUMBER | '(' expr ')')

Division is true division; a whole-valued result is returned as ``int``.
Input longer than ``MAX_EXPRESSION_LENGTH`` is rejected before parsing.
"""

from fractions import Fraction
from typing import List, Union

from riddlescape.errors import ValidationError

Number = Union[int, float]

MAX_EXPRESSION_LENGTH = 64


class ExpressionError(ValidationError):
    default_message = 'Invalid expression! Check your syntax.'


def _tokenize(text: str) -> List[str]:
    tokens: List[str] = []
    i = 0
    while i < len(text):
        ch = text[i]
        if ch.isspace():
            i += 1
        elif ch.isdigit():
            j = i
            while j < len(text) and text[j].isdigit():
                j += 1
            tokens.append(text[i:j])
            i = j
        elif ch in '+-*/()':
            tokens.append(ch)
            i += 1
        else:
            raise ExpressionError()
    return tokens


class _Parser:
    def __init__(self, tokens: List[str]):
        self.tokens = tokens
        self.pos = 0

    def peek(self):
        return self.tokens[self.pos] if self.pos < len(self.tokens) else None

    def take(self):
        tok = self.peek()
        if tok is None:
            raise ExpressionError()
        self.pos += 1
        return tok

    def expr(self) -> Fraction:
        value = self.term()
        while self.peek() in ('+', '-'):
            if self.take() == '+':
                value += self.term()
            else:
                value -= self.term()
        return value

    def term(self) -> Fraction:
        value = self.factor()
        while self.peek() in ('*', '/'):
            op = self.take()
            rhs = self.factor()
            if op == '*':
                value *= rhs
            elif rhs == 0:
                raise ExpressionError('Cannot divide by zero.')
            else:
                value /= rhs
        return value

    def factor(self) -> Fraction:
        # A run of signs folds into one
        negative = False
        tok = self.take()
        while tok in ('+', '-'):
            if tok == '-':
                negative = not negative
            tok = self.take()
        if tok == '(':
            value = self.expr()
            if self.take() != ')':
                raise ExpressionError()
        elif tok.isdigit():
            value = Fraction(int(tok))
        else:
            raise ExpressionError()
        return -value if negative else value


def evaluate(text: str) -> Number:
    if not isinstance(text, str) or not text.strip():
        raise ExpressionError('Expression cannot be empty.')
    if len(text) > MAX_EXPRESSION_LENGTH:
        raise ExpressionError('Expression is too long.')
    parser = _Parser(_tokenize(text))
    try:
        value = parser.expr()
    except (RecursionError, OverflowError, ValueError):
        raise ExpressionError()
    if parser.peek() is not None:
        raise ExpressionError()
    if value.denominator == 1:
        return int(value)
    return float(value)
