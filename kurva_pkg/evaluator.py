"""Stack machine that runs an RPN program for one value of x."""

from __future__ import annotations

import math
from collections.abc import Iterable

import numpy as np

from . import stats
from .param_collector import ParamCollector
from .tokens import (
    BINARY_OPERATORS,
    CONSTANTS,
    UNARY_FUNCTIONS,
    VARIADIC_FUNCTIONS,
    Token,
    TokenKind,
)
from .types import DomainError, MalformedProgramError, UnboundVariableError


def evaluate(
    program: Iterable[Token],
    x: float | None = None,
    rng: np.random.Generator | None = None,
) -> float:
    """Evaluate an RPN program.

    Args:
        program: RPN tokens, either a compiled tuple or a live ``Parser``
        x: Value bound to the variable, or None when the expression has none
        rng: Random source for ``ch``; a fresh generator is created on demand
            when omitted

    Returns:
        The single value left on the stack

    Raises:
        DomainError: An operation has no finite real result
        UnboundVariableError: ``x`` is used but no value was given
        MalformedProgramError: The program does not reduce to one value
    """
    stack: list[float] = []
    collector = ParamCollector()

    for token in program:
        kind = token.kind
        if kind is TokenKind.NUMBER or kind in CONSTANTS:
            stack.append(token.value)
        elif kind is TokenKind.X:
            if x is None:
                raise UnboundVariableError(
                    f"Variable 'x' at byte {token.position} has no value",
                    position=token.position,
                )
            stack.append(token.value * x)
        elif kind in BINARY_OPERATORS:
            rhs = _pop(stack, token)
            lhs = _pop(stack, token)
            stack.append(_finite(_binary(kind, lhs, rhs, token), token))
        elif kind in UNARY_FUNCTIONS:
            operand = _pop(stack, token)
            stack.append(_finite(_unary(kind, operand, token), token))
        elif kind is TokenKind.LOG:
            value = _pop(stack, token)
            base = _pop(stack, token)
            stack.append(_finite(_log(base, value, token), token))
        elif kind in VARIADIC_FUNCTIONS:
            collector.start(token)
        elif kind is TokenKind.ARGS_END:
            arguments = collector.collect(stack, token)
            function = collector.function
            if function.kind is TokenKind.CH and rng is None:
                rng = np.random.default_rng()
            stack.append(_finite(_aggregate(function.kind, arguments, rng), function))
            collector.reset()
        else:
            raise MalformedProgramError(
                f"Token {kind.name} at byte {token.position} cannot appear in a program"
            )

    if len(stack) != 1:
        raise MalformedProgramError(
            f"Invalid evaluation: expected 1 result, found {len(stack)} items in stack"
        )
    return stack[0]


def _pop(stack: list[float], token: Token) -> float:
    if not stack:
        raise MalformedProgramError(
            f"Insufficient operands for {token.kind.value!r} at byte {token.position}"
        )
    return stack.pop()


def _finite(value: float, token: Token) -> float:
    if not math.isfinite(value):
        raise DomainError(
            f"'{token.kind.value}' at byte {token.position} has no finite real result",
            code="NON_FINITE",
            position=token.position,
        )
    return value


def _domain(message: str, token: Token, code: str = "DOMAIN_ERROR") -> DomainError:
    return DomainError(
        f"{message} (byte {token.position})", code=code, position=token.position
    )


def _binary(kind: TokenKind, lhs: float, rhs: float, token: Token) -> float:
    if kind is TokenKind.PLUS:
        return lhs + rhs
    if kind is TokenKind.MINUS:
        return lhs - rhs
    if kind is TokenKind.STAR:
        return lhs * rhs
    if kind is TokenKind.SLASH:
        if rhs == 0:
            raise _domain("Division by zero", token, "DIVISION_BY_ZERO")
        return lhs / rhs
    if kind is TokenKind.PERCENT:
        return lhs * (rhs / 100)
    if kind is TokenKind.MODULO:
        if rhs == 0:
            raise _domain("Remainder by zero", token, "DIVISION_BY_ZERO")
        return math.fmod(lhs, rhs)
    if kind is TokenKind.CARET:
        try:
            return math.pow(lhs, rhs)
        except (ValueError, ZeroDivisionError):
            raise _domain(f"{lhs!r} ^ {rhs!r} is not a real number", token) from None
        except OverflowError:
            raise _domain(f"{lhs!r} ^ {rhs!r} overflows", token, "NON_FINITE") from None
    raise MalformedProgramError(f"Unknown binary operator {kind.name}")


def _unary(kind: TokenKind, value: float, token: Token) -> float:
    if kind is TokenKind.SIN:
        return math.sin(value)
    if kind is TokenKind.COS:
        return math.cos(value)
    if kind is TokenKind.TAN:
        return math.tan(value)
    if kind is TokenKind.ASIN:
        if not -1 <= value <= 1:
            raise _domain(f"asin is undefined for {value!r}", token)
        return math.asin(value)
    if kind is TokenKind.ACOS:
        if not -1 <= value <= 1:
            raise _domain(f"acos is undefined for {value!r}", token)
        return math.acos(value)
    if kind is TokenKind.ATAN:
        return math.atan(value)
    if kind is TokenKind.ABS:
        return abs(value)
    if kind is TokenKind.SQRT:
        if value < 0:
            raise _domain(f"sqrt is undefined for negative {value!r}", token)
        return math.sqrt(value)
    if kind is TokenKind.LN:
        if value <= 0:
            raise _domain(f"ln is undefined for non-positive {value!r}", token)
        return math.log(value)
    raise MalformedProgramError(f"Unknown function {kind.name}")


def _log(base: float, value: float, token: Token) -> float:
    if value <= 0:
        raise _domain(f"log is undefined for non-positive {value!r}", token)
    if base <= 0 or base == 1:
        raise _domain(f"{base!r} is not a valid logarithm base", token)
    return math.log(value, base)


def _aggregate(
    kind: TokenKind, arguments: list[float], rng: np.random.Generator | None
) -> float:
    if kind is TokenKind.MIN:
        return stats.minimum(arguments)
    if kind is TokenKind.MAX:
        return stats.maximum(arguments)
    if kind is TokenKind.AVG:
        return stats.mean(arguments)
    if kind is TokenKind.MED:
        return stats.median(arguments)
    if kind is TokenKind.MODE:
        return stats.mode(arguments)
    if kind is TokenKind.CH:
        return stats.choice(arguments, rng)
    raise MalformedProgramError(f"Unknown aggregate {kind.name}")
