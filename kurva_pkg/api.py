"""Public API for Kurva - returns structured objects without side effects."""

from __future__ import annotations

import numpy as np

from . import analysis, calculator
from .logging_config import get_logger
from .types import AnalysisResult, EquationError, EvalResult, PlotResult

logger = get_logger("api")


def evaluate(
    expression: str | bytes, rng: np.random.Generator | None = None
) -> EvalResult:
    """Evaluate an expression that does not use x.

    Args:
        expression: Mathematical expression string (e.g., "2+2", "sin(π/2)")
        rng: Optional random source for ``ch``

    Returns:
        EvalResult with the value, or the error message and code

    Example:
        >>> from kurva_pkg.api import evaluate
        >>> evaluate("2 + 3 * 4").result
        14.0
        >>> evaluate("1/0").error_code
        'DIVISION_BY_ZERO'
    """
    try:
        value = calculator.calculate(expression, rng=rng)
    except EquationError as e:
        logger.debug(f"Evaluation failed: {e} ({e.code})")
        return EvalResult(ok=False, error=str(e), error_code=e.code)
    return EvalResult(ok=True, result=value)


def plot(
    expression: str | bytes,
    x_min: float = -10,
    x_max: float = 10,
    step: float = 1,
    workers: int | None = None,
    rng: np.random.Generator | None = None,
) -> PlotResult:
    """Sample a single-variable function over a range.

    Args:
        expression: Function expression (e.g., "x^2", "y = 2x + 1")
        x_min: First x value
        x_max: Last x value (within half a step)
        step: Distance between x values
        workers: Worker thread count, defaults to ``WORKER_POOL_SIZE``
        rng: Optional random source for ``ch``

    Returns:
        PlotResult with the points in ascending x order

    Example:
        >>> from kurva_pkg.api import plot
        >>> [tuple(p) for p in plot("x^2", -2, 2, 1).points]
        [(-2.0, 4.0), (-1.0, 1.0), (0.0, 0.0), (1.0, 1.0), (2.0, 4.0)]
    """
    try:
        points = calculator.plot(
            expression, x_min, x_max, step, workers=workers, rng=rng
        )
    except EquationError as e:
        return PlotResult(ok=False, error=str(e), error_code=e.code)
    return PlotResult(ok=True, points=points)


def analyze(
    expression: str | bytes,
    x_min: float = -10,
    x_max: float = 10,
    step: float = 1,
    workers: int | None = None,
) -> AnalysisResult:
    """Sample a function and find its real zeros.

    Zeros are reported for linear and quadratic expressions only.

    Example:
        >>> from kurva_pkg.api import analyze
        >>> analyze("x^2 - 4", -3, 3, 1).zeros
        [-2.0, 2.0]
    """
    try:
        data = analysis.analyze(expression, x_min, x_max, step, workers=workers)
    except EquationError as e:
        return AnalysisResult(ok=False, error=str(e), error_code=e.code)
    return AnalysisResult(
        ok=True, literal=data.literal, points=data.points, zeros=data.zeros
    )


def validate_expression(expression: str | bytes) -> tuple[bool, str | None]:
    """Validate an expression without evaluating it.

    Args:
        expression: Expression string to validate

    Returns:
        Tuple of (is_valid, error_message)

    Example:
        >>> from kurva_pkg.api import validate_expression
        >>> validate_expression("2 + 2")
        (True, None)
        >>> validate_expression("(2+3")
        (False, "Unclosed '(' opened at byte 0")
    """
    try:
        calculator.compile_expression(expression)
    except EquationError as e:
        return False, str(e)
    return True, None
