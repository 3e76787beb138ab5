"""Plural-form expressions.

The ``plural=`` value of a ``Plural-Forms`` header is a C expression over a
single integer ``n``, for example::

    n%10==1 && n%100!=11 ? 0 : n%10>=2 && n%10<=4 && (n%100<10 || n%100>=20) ? 1 : 2

This module turns such text into a small AST and evaluates it by walking the
tree. Nothing is ever handed to ``eval``; input outside the grammar below is
rejected with :class:`~catalogkit.exceptions.ExpressionError`.

Grammar (C precedence, lowest first)::

    conditional := or ( "?" conditional ":" conditional )?
    or          := and ( "||" and )*
    and         := equality ( "&&" equality )*
    equality    := relational ( ("==" | "!=") relational )*
    relational  := additive ( ("<" | ">" | "<=" | ">=") additive )*
    additive    := term ( ("+" | "-") term )*
    term        := unary ( ("*" | "/" | "%") unary )*
    unary       := "!" unary | primary
    primary     := INTEGER | "n" | "(" conditional ")"

Usage:
    >>> expr = compile_plural("n != 1")
    >>> expr.evaluate(1), expr.evaluate(5)
    (0, 1)
"""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Iterator

from catalogkit.exceptions import ExpressionError

DEFAULT_PLURAL_COUNT = 2

# Deeper nesting than this is not a plural rule anyone writes
MAX_NESTING = 64
MAX_LITERAL_DIGITS = 20

_TOKEN_RE = re.compile(
    r"\s*(?:(?P<number>[0-9]+)|(?P<name>[A-Za-z_]\w*)|(?P<op>==|!=|<=|>=|&&|\|\||[-+*/%<>!?:()]))"
)

_BINARY_PRECEDENCE: dict[str, int] = {
    "||": 1,
    "&&": 2,
    "==": 3,
    "!=": 3,
    "<": 4,
    ">": 4,
    "<=": 4,
    ">=": 4,
    "+": 5,
    "-": 5,
    "*": 6,
    "/": 6,
    "%": 6,
}


# =============================================================================
# Ternary Rewrite
# =============================================================================


def convert_ternary_operator(expr: str) -> str:
    """Parenthesize every ternary branch of a C expression.

    Each ``?`` opens a group (``" ? ("``), each ``:`` closes and reopens it
    (``") : ("``) and the end of the expression closes every group still
    open. A ``)`` from the input closes the groups opened inside that
    parenthesis first, and a ``:`` reaching a group already in its else
    branch closes that group before switching the enclosing one.

    Example:
        >>> convert_ternary_operator("n==1 ? 0 : n==2 ? 1 : 2")
        'n==1  ? ( 0 ) : ( n==2  ? ( 1 ) : ( 2))'

    Raises:
        ExpressionError: On a ``:`` with no matching ``?`` or an unbalanced ``)``.
    """
    result: list[str] = []
    # [paren depth, in else branch] per open group
    groups: list[list] = []
    depth = 0

    for c in expr:
        if c == "?":
            result.append(" ? (")
            groups.append([depth, False])
        elif c == ":":
            while groups and groups[-1][0] == depth and groups[-1][1]:
                groups.pop()
                result.append(")")
            if not groups or groups[-1][0] != depth:
                raise ExpressionError("':' without matching '?'", expr)
            groups[-1][1] = True
            result.append(") : (")
        elif c == "(":
            depth += 1
            result.append(c)
        elif c == ")":
            while groups and groups[-1][0] == depth:
                groups.pop()
                result.append(")")
            depth -= 1
            if depth < 0:
                raise ExpressionError("unbalanced ')'", expr)
            result.append(c)
        else:
            result.append(c)

    result.append(")" * len(groups))
    return "".join(result)


# =============================================================================
# AST
# =============================================================================


def _c_div(a: int, b: int) -> int:
    if b == 0:
        raise ExpressionError("division by zero")
    q = abs(a) // abs(b)
    return q if (a >= 0) == (b >= 0) else -q


def _c_mod(a: int, b: int) -> int:
    if b == 0:
        raise ExpressionError("modulo by zero")
    return a - b * _c_div(a, b)


class Node(ABC):
    """Base class for expression tree nodes."""

    @abstractmethod
    def evaluate(self, n: int) -> int:
        """Evaluate this node with the given value of ``n``."""


@dataclass(frozen=True)
class Literal(Node):
    value: int

    def evaluate(self, n: int) -> int:
        return self.value


@dataclass(frozen=True)
class Variable(Node):
    def evaluate(self, n: int) -> int:
        return n


@dataclass(frozen=True)
class Not(Node):
    operand: Node

    def evaluate(self, n: int) -> int:
        return 0 if self.operand.evaluate(n) else 1


@dataclass(frozen=True)
class BinaryOp(Node):
    op: str
    left: Node
    right: Node

    def evaluate(self, n: int) -> int:
        # Short-circuit
        if self.op == "&&":
            return 1 if self.left.evaluate(n) and self.right.evaluate(n) else 0
        if self.op == "||":
            return 1 if self.left.evaluate(n) or self.right.evaluate(n) else 0

        a = self.left.evaluate(n)
        b = self.right.evaluate(n)
        if self.op == "+":
            return a + b
        if self.op == "-":
            return a - b
        if self.op == "*":
            return a * b
        if self.op == "/":
            return _c_div(a, b)
        if self.op == "%":
            return _c_mod(a, b)
        if self.op == "==":
            return int(a == b)
        if self.op == "!=":
            return int(a != b)
        if self.op == "<":
            return int(a < b)
        if self.op == ">":
            return int(a > b)
        if self.op == "<=":
            return int(a <= b)
        if self.op == ">=":
            return int(a >= b)
        raise ExpressionError(f"unknown operator {self.op!r}")


@dataclass(frozen=True)
class Conditional(Node):
    test: Node
    if_true: Node
    if_false: Node

    def evaluate(self, n: int) -> int:
        if self.test.evaluate(n):
            return self.if_true.evaluate(n)
        return self.if_false.evaluate(n)


# =============================================================================
# Parser
# =============================================================================


def tokenize(expr: str) -> Iterator[str]:
    """Split an expression into tokens.

    Raises:
        ExpressionError: On any character or identifier outside the grammar.
    """
    pos = 0
    end = len(expr.rstrip())
    while pos < end:
        match = _TOKEN_RE.match(expr, pos)
        if match is None:
            raise ExpressionError(
                f"unexpected character {expr[pos:].lstrip()[:1]!r}", expr
            )
        name = match.group("name")
        if name is not None and name != "n":
            raise ExpressionError(f"unknown identifier {name!r}", expr)
        yield match.group(match.lastgroup)
        pos = match.end()


class _Parser:
    """Recursive-descent parser over a token list."""

    def __init__(self, source: str) -> None:
        self._source = source
        self._tokens = list(tokenize(source))
        self._pos = 0
        self._depth = 0

    def parse(self) -> Node:
        if not self._tokens:
            raise ExpressionError("empty expression", self._source)
        node = self._conditional()
        if self._pos < len(self._tokens):
            self._fail(f"unexpected token {self._tokens[self._pos]!r}")
        return node

    def _fail(self, message: str) -> None:
        raise ExpressionError(message, self._source)

    def _peek(self) -> str | None:
        if self._pos < len(self._tokens):
            return self._tokens[self._pos]
        return None

    def _next(self) -> str:
        token = self._peek()
        if token is None:
            self._fail("unexpected end of expression")
        self._pos += 1
        return token

    def _expect(self, token: str) -> None:
        actual = self._next()
        if actual != token:
            self._fail(f"expected {token!r}, got {actual!r}")

    def _conditional(self) -> Node:
        self._depth += 1
        if self._depth > MAX_NESTING:
            self._fail("expression nested too deeply")
        test = self._binary(1)
        if self._peek() == "?":
            self._next()
            if_true = self._conditional()
            self._expect(":")
            if_false = self._conditional()
            test = Conditional(test, if_true, if_false)
        self._depth -= 1
        return test

    def _binary(self, min_precedence: int) -> Node:
        left = self._unary()
        while True:
            op = self._peek()
            precedence = _BINARY_PRECEDENCE.get(op) if op is not None else None
            if precedence is None or precedence < min_precedence:
                return left
            self._next()
            right = self._binary(precedence + 1)
            left = BinaryOp(op, left, right)

    def _unary(self) -> Node:
        if self._peek() == "!":
            self._next()
            self._depth += 1
            if self._depth > MAX_NESTING:
                self._fail("expression nested too deeply")
            operand = self._unary()
            self._depth -= 1
            return Not(operand)
        return self._primary()

    def _primary(self) -> Node:
        token = self._next()
        if token.isdigit():
            if len(token) > MAX_LITERAL_DIGITS:
                self._fail(f"number literal longer than {MAX_LITERAL_DIGITS} digits")
            return Literal(int(token))
        if token == "n":
            return Variable()
        if token == "(":
            node = self._conditional()
            self._expect(")")
            return node
        self._fail(f"unexpected token {token!r}")


# =============================================================================
# Public API
# =============================================================================


@dataclass(frozen=True)
class PluralExpression:
    """A compiled plural-form expression.

    Attributes:
        source: The C expression as written in the header.
        converted: The expression after the ternary rewrite.
        tree: The parsed expression tree.
    """

    source: str
    converted: str
    tree: Node

    def evaluate(self, n: int) -> int:
        """Return the plural-form index for ``n``.

        Raises:
            ExpressionError: On division or modulo by zero.
        """
        return int(self.tree.evaluate(int(n)))

    def __call__(self, n: int) -> int:
        return self.evaluate(n)


def compile_plural(expr: str) -> PluralExpression:
    """Compile the right-hand side of ``plural=`` into a PluralExpression.

    Raises:
        ExpressionError: If the text is outside the supported grammar.
    """
    source = expr.strip()
    converted = convert_ternary_operator(source)
    tree = _Parser(converted).parse()
    return PluralExpression(source=source, converted=converted, tree=tree)


def select_plural(expr: PluralExpression | None, count: int) -> int:
    """Select the plural-form index for ``count``.

    Without an expression the two-form rule applies: 0 for one, 1 otherwise.
    """
    if expr is None:
        return 0 if count == 1 else 1
    return expr.evaluate(count)
