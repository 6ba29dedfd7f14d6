"""Type definitions, error taxonomy and result dataclasses for consistent API responses."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, NamedTuple


class Point(NamedTuple):
    """One sampled (x, y) pair of a plot."""

    x: float
    y: float


class EquationError(Exception):
    """Base class for every error caused by the expression or its inputs."""

    default_code = "EQUATION_ERROR"

    def __init__(
        self, message: str, code: str | None = None, position: int | None = None
    ):
        self.message = message
        self.code = code or self.default_code
        self.position = position
        super().__init__(self.message)

    def __str__(self) -> str:
        return self.message


class LexError(EquationError):
    """Raised when the expression text cannot be split into tokens."""

    default_code = "LEX_ERROR"


class ExpressionSyntaxError(EquationError):
    """Raised when the token stream does not form a valid expression."""

    default_code = "SYNTAX_ERROR"


class DomainError(EquationError):
    """Raised when an operation has no finite real result."""

    default_code = "DOMAIN_ERROR"


class UnboundVariableError(EquationError):
    """Raised when x is evaluated without a value."""

    default_code = "UNBOUND_VARIABLE"


class InvalidRangeError(EquationError):
    """Raised when a plot range or step is unusable."""

    default_code = "INVALID_RANGE"


class MalformedProgramError(RuntimeError):
    """Raised when an RPN program does not reduce to exactly one value.

    This is never caused by user input: the parser only emits well formed
    programs, so hitting it means parser and evaluator disagree.
    """


@dataclass
class EvalResult:
    """Result of evaluating a mathematical expression."""

    ok: bool
    result: float | None = None
    error: str | None = None
    error_code: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result_dict: dict[str, Any] = {"ok": self.ok, "type": "value"}
        if self.result is not None:
            result_dict["result"] = self.result
        if self.error is not None:
            result_dict["error"] = self.error
        if self.error_code is not None:
            result_dict["error_code"] = self.error_code
        return result_dict

    def __repr__(self) -> str:
        """Return string representation of the result."""
        if not self.ok:
            return f"EvalResult(ok=False, error={self.error!r}, error_code={self.error_code!r})"
        return f"EvalResult(ok=True, result={self.result!r})"


@dataclass
class PlotResult:
    """Result of sampling an expression over a range of x values."""

    ok: bool
    points: list[Point] = field(default_factory=list)
    error: str | None = None
    error_code: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result_dict: dict[str, Any] = {"ok": self.ok, "type": "plot"}
        if self.ok:
            result_dict["points"] = [[p.x, p.y] for p in self.points]
        if self.error is not None:
            result_dict["error"] = self.error
        if self.error_code is not None:
            result_dict["error_code"] = self.error_code
        return result_dict

    def __repr__(self) -> str:
        """Return string representation of the result."""
        if not self.ok:
            return f"PlotResult(ok=False, error={self.error!r}, error_code={self.error_code!r})"
        return f"PlotResult(ok=True, points=<{len(self.points)} points>)"


@dataclass
class AnalysisResult:
    """Result of analysing an expression: samples plus real zeros."""

    ok: bool
    literal: str | None = None
    points: list[Point] = field(default_factory=list)
    zeros: list[float] = field(default_factory=list)
    error: str | None = None
    error_code: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result_dict: dict[str, Any] = {"ok": self.ok, "type": "analysis"}
        if self.ok:
            result_dict["literal"] = self.literal
            result_dict["points"] = [[p.x, p.y] for p in self.points]
            result_dict["zeros"] = list(self.zeros)
        if self.error is not None:
            result_dict["error"] = self.error
        if self.error_code is not None:
            result_dict["error_code"] = self.error_code
        return result_dict

    def __repr__(self) -> str:
        """Return string representation of the result."""
        if not self.ok:
            return f"AnalysisResult(ok=False, error={self.error!r}, error_code={self.error_code!r})"
        return (
            f"AnalysisResult(ok=True, literal={self.literal!r}, "
            f"points=<{len(self.points)} points>, zeros={self.zeros!r})"
        )
