"""Shunting-Yard parser: infix token stream in, RPN token stream out.

The parser is lazy in the same way as the tokenizer. It pulls one token at a
time from upstream, keeps only the operator stack, and hands out RPN tokens
as soon as their position in the output is settled. It also checks that
operands and operators alternate properly, so every program it emits reduces
to exactly one value.
"""

from __future__ import annotations

from collections import deque
from collections.abc import Iterable, Iterator

from .logging_config import get_logger
from .param_collector import ParamCollector
from .tokens import (
    BINARY_OPERATORS,
    FUNCTIONS,
    OPERANDS,
    OPERATORS,
    PAREN_OPENERS,
    UNARY_FUNCTIONS,
    VARIADIC_FUNCTIONS,
    Associativity,
    Token,
    TokenKind,
    describe,
)
from .types import EquationError, ExpressionSyntaxError

logger = get_logger("parser")


class Parser:
    """Lazy infix -> RPN converter over an iterable of tokens.

    The input must end with an END token. The first error (raised upstream or
    here) is raised once; after that the parser reports no more tokens.
    """

    def __init__(self, tokens: Iterable[Token]) -> None:
        self._tokens: Iterator[Token] = iter(tokens)
        self._operators: list[Token] = []
        self._log_commas: list[int] = []
        self._output: deque[Token] = deque()
        self._collector = ParamCollector()
        self._expect_operand = True
        self._previous: TokenKind | None = None
        self._finished = False

    def __iter__(self) -> Parser:
        return self

    def __next__(self) -> Token:
        while not self._output:
            if self._finished:
                raise StopIteration
            try:
                self._process(self._pull())
            except EquationError as exc:
                self._finished = True
                self._output.clear()
                logger.debug(f"Parser stopped: {exc} ({exc.code})")
                raise
        return self._output.popleft()

    def _pull(self) -> Token:
        try:
            return next(self._tokens)
        except StopIteration:
            raise ExpressionSyntaxError(
                "Token stream ended without an end marker", code="MISSING_END"
            ) from None

    def _process(self, token: Token) -> None:
        kind = token.kind
        if kind in OPERANDS:
            self._operand(token)
        elif kind in BINARY_OPERATORS:
            self._binary(token)
        elif kind is TokenKind.LPAREN or kind in FUNCTIONS:
            self._open(token)
        elif kind is TokenKind.COMMA:
            self._comma(token)
        elif kind is TokenKind.RPAREN:
            self._close(token)
        elif kind is TokenKind.END:
            self._end(token)
        else:
            raise ExpressionSyntaxError(
                f"Unexpected {describe(kind)} at byte {token.position}",
                code="UNEXPECTED_TOKEN",
                position=token.position,
            )
        self._previous = kind

    def _operand(self, token: Token) -> None:
        if not self._expect_operand:
            raise ExpressionSyntaxError(
                f"Missing operator before {describe(token.kind)} at byte {token.position}",
                code="MISSING_OPERATOR",
                position=token.position,
            )
        self._output.append(token)
        self._expect_operand = False

    def _binary(self, token: Token) -> None:
        if self._expect_operand:
            raise ExpressionSyntaxError(
                f"Operator {describe(token.kind)} at byte {token.position} is missing its left operand",
                code="MISSING_OPERAND",
                position=token.position,
            )
        info = OPERATORS[token.kind]
        while self._operators:
            top = self._operators[-1]
            if top.kind in PAREN_OPENERS:
                break
            top_info = OPERATORS[top.kind]
            if top_info.precedence > info.precedence or (
                top_info.precedence == info.precedence
                and info.associativity is Associativity.LEFT
            ):
                self._output.append(self._operators.pop())
            else:
                break
        self._operators.append(token)
        self._expect_operand = True

    def _open(self, token: Token) -> None:
        if not self._expect_operand:
            raise ExpressionSyntaxError(
                f"Missing operator before {describe(token.kind)} at byte {token.position}",
                code="MISSING_OPERATOR",
                position=token.position,
            )
        if token.kind in VARIADIC_FUNCTIONS:
            self._collector.start(token)
        elif token.kind is TokenKind.LOG:
            self._log_commas.append(0)
        self._operators.append(token)
        self._expect_operand = True

    def _unwind(self) -> Token | None:
        """Move operators to the output up to the innermost opener, which is returned."""
        while self._operators:
            top = self._operators[-1]
            if top.kind in PAREN_OPENERS:
                return top
            self._output.append(self._operators.pop())
        return None

    def _comma(self, token: Token) -> None:
        has_operand = not self._expect_operand
        opener = self._unwind()
        if opener is None or opener.kind is TokenKind.LPAREN:
            raise ExpressionSyntaxError(
                f"Comma outside of a function argument list at byte {token.position}",
                code="MISPLACED_COMMA",
                position=token.position,
            )
        if opener.kind in UNARY_FUNCTIONS:
            raise ExpressionSyntaxError(
                f"{describe(opener.kind)} takes exactly one argument (byte {token.position})",
                code="ARITY",
                position=token.position,
            )
        if opener.kind is TokenKind.LOG:
            if not has_operand:
                raise ExpressionSyntaxError(
                    f"Missing argument before ',' at byte {token.position}",
                    code="MISSING_OPERAND",
                    position=token.position,
                )
            self._log_commas[-1] += 1
            if self._log_commas[-1] > 1:
                raise ExpressionSyntaxError(
                    f"'log(' takes exactly two arguments (byte {token.position})",
                    code="ARITY",
                    position=token.position,
                )
        else:
            self._collector.separator(token, has_operand)
        self._expect_operand = True

    def _close(self, token: Token) -> None:
        if self._expect_operand:
            self._reject_empty_close(token)

        opener = self._unwind()
        if opener is None:
            raise ExpressionSyntaxError(
                f"Unmatched ')' at byte {token.position}",
                code="UNMATCHED_PAREN",
                position=token.position,
            )
        self._operators.pop()

        if opener.kind in VARIADIC_FUNCTIONS:
            marker = self._collector.finish(token, True)
            self._output.append(opener)
            self._output.append(marker)
            self._collector.reset()
        elif opener.kind is TokenKind.LOG:
            if self._log_commas.pop() != 1:
                raise ExpressionSyntaxError(
                    f"'log(' at byte {opener.position} takes exactly two arguments: "
                    f"log(base, value) or log_N(value)",
                    code="ARITY",
                    position=opener.position,
                )
            self._output.append(opener)
        elif opener.kind in UNARY_FUNCTIONS:
            self._output.append(opener)
        self._expect_operand = False

    def _reject_empty_close(self, token: Token) -> None:
        if self._previous in PAREN_OPENERS:
            opener = self._operators[-1]
            if opener.kind in VARIADIC_FUNCTIONS:
                # Raises EMPTY_AGGREGATE
                self._collector.finish(token, False)
            if opener.kind is TokenKind.LPAREN:
                raise ExpressionSyntaxError(
                    f"Empty parentheses at byte {opener.position}",
                    code="MISSING_OPERAND",
                    position=opener.position,
                )
            raise ExpressionSyntaxError(
                f"{describe(opener.kind)} at byte {opener.position} is missing its argument",
                code="ARITY",
                position=opener.position,
            )
        raise ExpressionSyntaxError(
            f"Missing operand before ')' at byte {token.position}",
            code="MISSING_OPERAND",
            position=token.position,
        )

    def _end(self, token: Token) -> None:
        if self._expect_operand:
            if self._previous is None:
                raise ExpressionSyntaxError(
                    "Empty expression", code="EMPTY_EXPRESSION", position=token.position
                )
            raise ExpressionSyntaxError(
                f"Unexpected end of expression at byte {token.position}",
                code="MISSING_OPERAND",
                position=token.position,
            )
        while self._operators:
            operator = self._operators.pop()
            if operator.kind in PAREN_OPENERS:
                raise ExpressionSyntaxError(
                    f"Unclosed {describe(operator.kind)} opened at byte {operator.position}",
                    code="UNMATCHED_PAREN",
                    position=operator.position,
                )
            self._output.append(operator)
        self._finished = True


def parse(tokens: Iterable[Token]) -> tuple[Token, ...]:
    """Convert an infix token stream into a complete RPN program."""
    return tuple(Parser(tokens))
