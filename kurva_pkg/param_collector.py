"""Argument collection for the variadic aggregate functions.

``min``, ``max``, ``avg``, ``med``, ``mode`` and ``ch`` take any positive
number of arguments. The parser uses a collector to count arguments while the
call is open and to emit the ``ARGS_END`` marker carrying that count; the
evaluator uses one to pop exactly that many values back off its stack.

Only one call can be collected at a time, so an aggregate call inside the
arguments of another one (``avg(1, min(2, 3))``) is rejected.
"""

from __future__ import annotations

from enum import Enum

from .tokens import Token, TokenKind
from .types import ExpressionSyntaxError, MalformedProgramError


class CollectorState(Enum):
    IDLE = "idle"
    COLLECTING = "collecting"
    DONE = "done"


class ParamCollector:
    """Idle -> Collecting(count) -> Done state machine for one aggregate call."""

    def __init__(self) -> None:
        self.state = CollectorState.IDLE
        self.function: Token | None = None
        self.count = 0

    @property
    def is_collecting(self) -> bool:
        return self.state is CollectorState.COLLECTING

    def start(self, token: Token) -> None:
        """Open the argument list of ``token``."""
        if self.is_collecting:
            outer = self.function.kind.value
            raise ExpressionSyntaxError(
                f"Nested aggregate functions are not supported: "
                f"'{token.kind.value}(' inside '{outer}(' at byte {token.position}",
                code="NESTED_AGGREGATE",
                position=token.position,
            )
        self.state = CollectorState.COLLECTING
        self.function = token
        self.count = 0

    def separator(self, token: Token, has_operand: bool) -> None:
        """Account for a comma; the argument before it must not be empty."""
        self._require_collecting(token)
        if not has_operand:
            raise ExpressionSyntaxError(
                f"Missing argument before ',' at byte {token.position}",
                code="MISSING_OPERAND",
                position=token.position,
            )
        self.count += 1

    def finish(self, token: Token, has_operand: bool) -> Token:
        """Close the argument list and return the ARGS_END marker for the program."""
        self._require_collecting(token)
        if not has_operand:
            name = self.function.kind.value
            if self.count == 0:
                raise ExpressionSyntaxError(
                    f"'{name}(' needs at least one argument (byte {self.function.position})",
                    code="EMPTY_AGGREGATE",
                    position=self.function.position,
                )
            raise ExpressionSyntaxError(
                f"Trailing ',' in '{name}(' at byte {token.position}",
                code="MISSING_OPERAND",
                position=token.position,
            )
        self.count += 1
        self.state = CollectorState.DONE
        return Token(TokenKind.ARGS_END, float(self.count), token.position)

    def collect(self, stack: list[float], marker: Token) -> list[float]:
        """Pop the arguments announced by ``marker``, oldest first."""
        if not self.is_collecting:
            raise MalformedProgramError(
                f"Argument marker at byte {marker.position} without an aggregate function"
            )
        count = int(marker.value or 0)
        if count < 1 or count > len(stack):
            raise MalformedProgramError(
                f"Aggregate '{self.function.kind.value}' expects {count} arguments, "
                f"stack holds {len(stack)}"
            )
        arguments = stack[-count:]
        del stack[-count:]
        self.count = count
        self.state = CollectorState.DONE
        return arguments

    def reset(self) -> None:
        self.state = CollectorState.IDLE
        self.function = None
        self.count = 0

    def _require_collecting(self, token: Token) -> None:
        if not self.is_collecting:
            raise ExpressionSyntaxError(
                f"Unexpected {token.kind.value!r} at byte {token.position}",
                code="MISPLACED_COMMA",
                position=token.position,
            )
