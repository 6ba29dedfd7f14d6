"""Equation analysis: sampled points plus the real zeros of simple polynomials.

Zeros are only reported for expressions that reduce to a linear or quadratic
polynomial in x. The RPN program is rebuilt as a SymPy expression, expanded,
and its coefficients are fed to the closed-form solutions. Expressions whose
degree could exceed ``config.MAX_EXPAND_DEGREE`` are never expanded.
"""

from __future__ import annotations

import math
from collections.abc import Iterable
from dataclasses import dataclass, field

import numpy as np
import sympy as sp
from sympy.polys.polyerrors import BasePolynomialError

from . import config, stats
from .calculator import compile_expression, plot_program, x_values
from .logging_config import get_logger
from .tokens import CONSTANTS, Token, TokenKind
from .types import Point

logger = get_logger("analysis")

X = sp.Symbol("x", real=True)

_SYMPY_FUNCTIONS = {
    TokenKind.SIN: sp.sin,
    TokenKind.COS: sp.cos,
    TokenKind.TAN: sp.tan,
    TokenKind.ASIN: sp.asin,
    TokenKind.ACOS: sp.acos,
    TokenKind.ATAN: sp.atan,
    TokenKind.ABS: sp.Abs,
    TokenKind.SQRT: sp.sqrt,
    TokenKind.LN: sp.log,
}

_SYMPY_CONSTANTS = {TokenKind.E: sp.E, TokenKind.PI: sp.pi}


@dataclass
class EquationData:
    """Expression text, sampled points and real zeros."""

    literal: str
    points: list[Point] = field(default_factory=list)
    zeros: list[float] = field(default_factory=list)


def _number(value: float) -> sp.Expr:
    # Integral literals stay exact so x^2 expands to a polynomial
    if float(value).is_integer():
        return sp.Integer(int(value))
    return sp.Float(value)


def to_sympy(program: Iterable[Token]) -> sp.Expr:
    """Rebuild an RPN program as a SymPy expression in ``x``.

    Raises:
        ValueError: The program uses an operation without a symbolic form
            (``ch``, ``%%`` or ``med``/``mode`` over non-numeric arguments)
    """
    stack: list[sp.Expr] = []
    aggregate: Token | None = None

    for token in program:
        kind = token.kind
        if kind is TokenKind.NUMBER:
            stack.append(_number(token.value))
        elif kind is TokenKind.X:
            stack.append(_number(token.value) * X)
        elif kind in CONSTANTS:
            sign = -1 if token.value < 0 else 1
            stack.append(sign * _SYMPY_CONSTANTS[kind])
        elif kind in _SYMPY_FUNCTIONS:
            stack.append(_SYMPY_FUNCTIONS[kind](stack.pop()))
        elif kind is TokenKind.LOG:
            value = stack.pop()
            base = stack.pop()
            stack.append(sp.log(value, base))
        elif kind is TokenKind.ARGS_END:
            count = int(token.value)
            arguments = stack[-count:]
            del stack[-count:]
            stack.append(_aggregate(aggregate.kind, arguments))
            aggregate = None
        elif kind in (
            TokenKind.MIN,
            TokenKind.MAX,
            TokenKind.AVG,
            TokenKind.MED,
            TokenKind.MODE,
            TokenKind.CH,
        ):
            aggregate = token
        else:
            rhs = stack.pop()
            lhs = stack.pop()
            stack.append(_binary(kind, lhs, rhs))

    if len(stack) != 1:
        raise ValueError(f"Program leaves {len(stack)} values on the stack")
    return stack[0]


def _binary(kind: TokenKind, lhs: sp.Expr, rhs: sp.Expr) -> sp.Expr:
    if kind is TokenKind.PLUS:
        return lhs + rhs
    if kind is TokenKind.MINUS:
        return lhs - rhs
    if kind is TokenKind.STAR:
        return lhs * rhs
    if kind is TokenKind.SLASH:
        return lhs / rhs
    if kind is TokenKind.PERCENT:
        return lhs * rhs / 100
    if kind is TokenKind.CARET:
        return lhs**rhs
    if kind is TokenKind.MODULO and lhs.is_number and rhs.is_number:
        return sp.Float(math.fmod(float(lhs), float(rhs)))
    raise ValueError(f"'{kind.value}' has no symbolic form")


def _aggregate(kind: TokenKind, arguments: list[sp.Expr]) -> sp.Expr:
    if kind is TokenKind.MIN:
        return sp.Min(*arguments)
    if kind is TokenKind.MAX:
        return sp.Max(*arguments)
    if kind is TokenKind.AVG:
        return sp.Add(*arguments) / len(arguments)
    if kind in (TokenKind.MED, TokenKind.MODE) and all(a.is_number for a in arguments):
        values = [float(a) for a in arguments]
        if kind is TokenKind.MED:
            return sp.Float(stats.median(values))
        return sp.Float(stats.mode(values))
    raise ValueError(f"'{kind.value}(' has no symbolic form")


def _degree_bound(expr: sp.Expr) -> int:
    """Upper bound on the degree in ``x`` that expanding ``expr`` can produce."""
    if expr.is_Atom:
        return 1 if expr == X else 0
    if expr.is_Pow and expr.exp.is_Integer:
        return _degree_bound(expr.base) * abs(int(expr.exp))
    bounds = [_degree_bound(arg) for arg in expr.args]
    if expr.is_Mul:
        return sum(bounds)
    return max(bounds, default=0)


def find_zeros(program: Iterable[Token]) -> list[float]:
    """Real zeros of a linear or quadratic program, ascending; [] otherwise."""
    try:
        expr = to_sympy(program)
        bound = _degree_bound(expr)
        if bound > config.MAX_EXPAND_DEGREE:
            logger.debug(f"Skipping zero analysis, degree may reach {bound}")
            return []
        poly = sp.Poly(sp.expand(expr), X)
        coefficients = [float(c) for c in poly.all_coeffs()]
    except (ValueError, TypeError, BasePolynomialError) as exc:
        logger.debug(f"No polynomial form for zero analysis: {exc}")
        return []

    degree = poly.degree()
    if degree == 1:
        b, c = coefficients
        return [-c / b]
    if degree == 2:
        return _quadratic_zeros(*coefficients)
    return []


def _quadratic_zeros(a: float, b: float, c: float) -> list[float]:
    discriminant = b * b - 4 * a * c
    if discriminant < 0:
        return []
    if discriminant == 0:
        return [-b / (2 * a)]
    root = math.sqrt(discriminant)
    return sorted([(-b - root) / (2 * a), (-b + root) / (2 * a)])


def analyze(
    expression: str | bytes,
    x_min: float,
    x_max: float,
    step: float,
    *,
    workers: int | None = None,
    rng: np.random.Generator | None = None,
) -> EquationData:
    """Sample ``expression`` like ``plot`` and report its real zeros."""
    xs = x_values(x_min, x_max, step)
    program = compile_expression(expression)
    points = plot_program(program, xs, workers=workers, rng=rng)
    zeros = find_zeros(program)
    logger.debug(f"Found {len(zeros)} zeros")
    literal = expression.decode("utf-8") if isinstance(expression, bytes) else expression
    return EquationData(literal=literal, points=points, zeros=zeros)
