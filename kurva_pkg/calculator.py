"""Orchestration: compile an expression once, evaluate it once or over a grid."""

from __future__ import annotations

import math
from collections.abc import Sequence
from concurrent.futures import Future, ThreadPoolExecutor

import numpy as np

from . import config
from .evaluator import evaluate
from .logging_config import get_logger
from .parser import Parser
from .tokenizer import Tokenizer
from .tokens import Token, TokenKind
from .types import EquationError, InvalidRangeError, Point

logger = get_logger("calculator")


def compile_expression(expression: str | bytes) -> tuple[Token, ...]:
    """Tokenize and parse ``expression`` into an RPN program.

    Raises:
        LexError: The text cannot be tokenized
        ExpressionSyntaxError: The tokens do not form an expression
    """
    program = tuple(Parser(Tokenizer(expression)))
    logger.debug(f"Compiled expression into {len(program)} RPN tokens")
    return program


def calculate(
    expression: str | bytes, rng: np.random.Generator | None = None
) -> float:
    """Evaluate an expression that does not use ``x``.

    Example:
        >>> calculate("2 + 3 * 4")
        14.0
    """
    return evaluate(compile_expression(expression), x=None, rng=rng)


def x_values(x_min: float, x_max: float, step: float) -> list[float]:
    """Sample grid ``x_min + i * step`` up to ``x_max`` (half-step tolerance)."""
    if not (math.isfinite(x_min) and math.isfinite(x_max) and math.isfinite(step)):
        raise InvalidRangeError(
            f"Range bounds and step must be finite (x_min={x_min}, x_max={x_max}, step={step})",
            code="NON_FINITE_BOUND",
        )
    if step <= 0:
        raise InvalidRangeError(
            f"Step must be positive, got {step}", code="NON_POSITIVE_STEP"
        )
    if x_min > x_max:
        raise InvalidRangeError(
            f"x_min ({x_min}) is greater than x_max ({x_max})", code="INVERTED_RANGE"
        )

    # Span and ratio can overflow to inf even when every input is finite
    ratio = (x_max - x_min) / step
    if not math.isfinite(ratio) or ratio + 1 > config.MAX_PLOT_POINTS:
        raise InvalidRangeError(
            f"Range from {x_min} to {x_max} with step {step} exceeds "
            f"{config.MAX_PLOT_POINTS} points",
            code="TOO_MANY_POINTS",
        )
    intervals = math.floor(ratio + 0.5)
    if intervals + 1 > config.MAX_PLOT_POINTS:
        raise InvalidRangeError(
            f"Range would produce {intervals + 1} points, limit is {config.MAX_PLOT_POINTS}",
            code="TOO_MANY_POINTS",
        )
    grid = x_min + step * np.arange(intervals + 1, dtype=float)
    return grid.tolist()


def plot(
    expression: str | bytes,
    x_min: float,
    x_max: float,
    step: float,
    *,
    workers: int | None = None,
    rng: np.random.Generator | None = None,
) -> list[Point]:
    """Evaluate ``expression`` at every grid value between ``x_min`` and ``x_max``.

    The expression is compiled once and the program shared by every point.
    Any failing point fails the whole call.

    Example:
        >>> plot("x^2", -1, 1, 1)
        [Point(x=-1.0, y=1.0), Point(x=0.0, y=0.0), Point(x=1.0, y=1.0)]
    """
    xs = x_values(x_min, x_max, step)
    program = compile_expression(expression)
    return plot_program(program, xs, workers=workers, rng=rng)


def plot_program(
    program: Sequence[Token],
    xs: Sequence[float],
    *,
    workers: int | None = None,
    rng: np.random.Generator | None = None,
) -> list[Point]:
    """Evaluate a compiled program at each value of ``xs``, in order."""
    pool_size = workers if workers is not None else config.WORKER_POOL_SIZE
    pool_size = max(1, pool_size)

    rngs: list[np.random.Generator | None] = [None] * len(xs)
    if any(token.kind is TokenKind.CH for token in program):
        if rng is None:
            rng = np.random.default_rng()
        # One child generator per point; no generator is shared across threads
        rngs = rng.spawn(len(xs))

    if pool_size == 1 or len(xs) < config.PARALLEL_THRESHOLD:
        logger.debug(f"Evaluating {len(xs)} points inline")
        return _evaluate_chunk(program, xs, rngs)

    chunk_size = math.ceil(len(xs) / pool_size)
    bounds = [(i, min(i + chunk_size, len(xs))) for i in range(0, len(xs), chunk_size)]
    logger.debug(
        f"Evaluating {len(xs)} points in {len(bounds)} chunks on {pool_size} workers"
    )

    points: list[Point] = []
    with ThreadPoolExecutor(max_workers=pool_size) as executor:
        futures: list[Future[list[Point]]] = [
            executor.submit(_evaluate_chunk, program, xs[lo:hi], rngs[lo:hi])
            for lo, hi in bounds
        ]
        for index, future in enumerate(futures):
            try:
                points.extend(future.result())
            except EquationError as exc:
                for pending in futures[index + 1 :]:
                    pending.cancel()
                logger.warning(f"Plot aborted: {exc} ({exc.code})")
                raise
    return points


def _evaluate_chunk(
    program: Sequence[Token],
    xs: Sequence[float],
    rngs: Sequence[np.random.Generator | None],
) -> list[Point]:
    return [
        Point(float(x), evaluate(program, x=float(x), rng=point_rng))
        for x, point_rng in zip(xs, rngs)
    ]
