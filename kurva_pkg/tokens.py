"""Token model shared by the tokenizer, parser and evaluator.

The token set is closed: every kind the pipeline can produce is a member of
``TokenKind``. Operator precedence lives in ``OPERATORS``, a read-only table
that is safe to share between threads.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType


class TokenKind(Enum):
    NUMBER = "number"

    # Binary operators
    PLUS = "+"
    MINUS = "-"
    STAR = "*"
    SLASH = "/"
    CARET = "^"
    PERCENT = "%"
    MODULO = "%%"

    LPAREN = "("
    RPAREN = ")"
    COMMA = ","

    # Unary functions
    SIN = "sin"
    COS = "cos"
    TAN = "tan"
    ASIN = "asin"
    ACOS = "acos"
    ATAN = "atan"
    ABS = "abs"
    SQRT = "sqrt"
    LN = "ln"

    # log(base, value), also written log_N(value)
    LOG = "log"

    # Variadic aggregates
    MIN = "min"
    MAX = "max"
    AVG = "avg"
    MED = "med"
    MODE = "mode"
    CH = "ch"

    X = "x"
    E = "e"
    PI = "π"

    END = "end"
    # Synthetic end-of-arguments marker, value holds the argument count
    ARGS_END = "args_end"


@dataclass(frozen=True)
class Token:
    """A single lexical unit.

    ``value`` holds the literal for numbers, the signed constant for ``e``/``π``,
    the sign coefficient for ``x`` and the argument count for ``ARGS_END``.
    ``position`` is a byte offset into the UTF-8 encoded expression.
    """

    kind: TokenKind
    value: float | None = None
    position: int = 0

    def __repr__(self) -> str:
        if self.value is None:
            return f"Token({self.kind.name}@{self.position})"
        return f"Token({self.kind.name}={self.value!r}@{self.position})"


class Associativity(Enum):
    LEFT = "left"
    RIGHT = "right"


@dataclass(frozen=True)
class OperatorInfo:
    precedence: int
    associativity: Associativity


OPERATORS = MappingProxyType(
    {
        TokenKind.PLUS: OperatorInfo(2, Associativity.LEFT),
        TokenKind.MINUS: OperatorInfo(2, Associativity.LEFT),
        TokenKind.STAR: OperatorInfo(3, Associativity.LEFT),
        TokenKind.SLASH: OperatorInfo(3, Associativity.LEFT),
        TokenKind.PERCENT: OperatorInfo(3, Associativity.LEFT),
        TokenKind.MODULO: OperatorInfo(3, Associativity.LEFT),
        TokenKind.CARET: OperatorInfo(4, Associativity.RIGHT),
    }
)

BINARY_OPERATORS = frozenset(OPERATORS)

UNARY_FUNCTIONS = frozenset(
    {
        TokenKind.SIN,
        TokenKind.COS,
        TokenKind.TAN,
        TokenKind.ASIN,
        TokenKind.ACOS,
        TokenKind.ATAN,
        TokenKind.ABS,
        TokenKind.SQRT,
        TokenKind.LN,
    }
)

VARIADIC_FUNCTIONS = frozenset(
    {
        TokenKind.MIN,
        TokenKind.MAX,
        TokenKind.AVG,
        TokenKind.MED,
        TokenKind.MODE,
        TokenKind.CH,
    }
)

FUNCTIONS = UNARY_FUNCTIONS | VARIADIC_FUNCTIONS | {TokenKind.LOG}

CONSTANTS = frozenset({TokenKind.E, TokenKind.PI})

OPERANDS = CONSTANTS | {TokenKind.NUMBER, TokenKind.X}

# Tokens that can open a parenthesised group on the parser's operator stack
PAREN_OPENERS = FUNCTIONS | {TokenKind.LPAREN}

# Implicit multiplication is inserted between a closing and an opening token
CLOSING_KINDS = OPERANDS | {TokenKind.RPAREN}
OPENING_KINDS = FUNCTIONS | CONSTANTS | {TokenKind.X, TokenKind.LPAREN}

CONSTANT_VALUES = MappingProxyType({TokenKind.E: math.e, TokenKind.PI: math.pi})

# Identifier table, matched longest-first against runs of ASCII letters
NAMES = MappingProxyType(
    {
        "sin": TokenKind.SIN,
        "cos": TokenKind.COS,
        "tan": TokenKind.TAN,
        "asin": TokenKind.ASIN,
        "acos": TokenKind.ACOS,
        "atan": TokenKind.ATAN,
        "abs": TokenKind.ABS,
        "sqrt": TokenKind.SQRT,
        "ln": TokenKind.LN,
        "log": TokenKind.LOG,
        "min": TokenKind.MIN,
        "max": TokenKind.MAX,
        "avg": TokenKind.AVG,
        "med": TokenKind.MED,
        "mode": TokenKind.MODE,
        "ch": TokenKind.CH,
        "x": TokenKind.X,
        "e": TokenKind.E,
        "pi": TokenKind.PI,
    }
)

MAX_NAME_LENGTH = max(len(name) for name in NAMES)


def describe(kind: TokenKind) -> str:
    """Human readable name of a token kind for error messages."""
    if kind is TokenKind.NUMBER:
        return "number"
    if kind is TokenKind.END:
        return "end of input"
    if kind in FUNCTIONS:
        return f"'{kind.value}('"
    return f"'{kind.value}'"
