"""Lazy tokenizer for single-variable expressions.

The tokenizer is a plain iterator: each ``next()`` scans just enough input to
produce one token. A few constructs expand to more than one token (implicit
multiplication, negated groups, ``log_N``); the extra tokens wait in a small
pending queue. The stream ends with exactly one END token, and the first
``LexError`` ends it for good.
"""

from __future__ import annotations

import math
import re
import string
from collections import deque

from .config import MAX_INPUT_LENGTH
from .logging_config import get_logger
from .tokens import (
    BINARY_OPERATORS,
    CLOSING_KINDS,
    CONSTANT_VALUES,
    CONSTANTS,
    MAX_NAME_LENGTH,
    NAMES,
    OPENING_KINDS,
    PAREN_OPENERS,
    Token,
    TokenKind,
)
from .types import LexError

logger = get_logger("tokenizer")

NUMBER_REGEX = re.compile(r"\d(?:_?\d)*(?:\.\d(?:_?\d)*)?")
NAME_REGEX = re.compile(r"[A-Za-z]+")
EQUATION_PREFIX_REGEX = re.compile(r"\s*y\s*=")

DIGITS = frozenset(string.digits)
LETTERS = frozenset(string.ascii_letters)
WHITESPACE = frozenset(" \t\r\n")

SINGLE_CHAR_TOKENS = {
    "+": TokenKind.PLUS,
    "*": TokenKind.STAR,
    "/": TokenKind.SLASH,
    "^": TokenKind.CARET,
    ",": TokenKind.COMMA,
    "(": TokenKind.LPAREN,
}

# After these a '-' is a sign, not a subtraction
SIGN_CONTEXT = BINARY_OPERATORS | PAREN_OPENERS | {TokenKind.COMMA}


class Tokenizer:
    """Pull-based tokenizer over one expression.

    Not restartable: build a new one for every expression. ``bytes`` input is
    decoded as UTF-8 on the first pull. Token positions are byte offsets.
    """

    def __init__(self, expression: str | bytes) -> None:
        self._source = expression
        self._text = ""
        self._index = 0
        self._offset = 0
        self._depth = 0
        self._negated_groups: list[int] = []
        self._pending: deque[Token] = deque()
        self._previous: TokenKind | None = None
        self._started = False
        self._finished = False

    def __iter__(self) -> Tokenizer:
        return self

    def __next__(self) -> Token:
        if self._finished:
            raise StopIteration
        try:
            token = self._next_token()
        except LexError as exc:
            self._finished = True
            self._pending.clear()
            logger.debug(f"Tokenizer stopped: {exc} ({exc.code})")
            raise
        self._previous = token.kind
        if token.kind is TokenKind.END:
            self._finished = True
        return token

    @property
    def exhausted(self) -> bool:
        """True once END was produced or an error ended the stream."""
        return self._finished

    def _start(self) -> None:
        if isinstance(self._source, bytes):
            try:
                text = self._source.decode("utf-8")
            except UnicodeDecodeError as exc:
                raise LexError(
                    f"Invalid or unterminated multi-byte character at byte {exc.start}",
                    code="UNTERMINATED_CHARACTER",
                    position=exc.start,
                ) from exc
        else:
            text = self._source
        if len(text) > MAX_INPUT_LENGTH:
            raise LexError(
                f"Input too long ({len(text)} characters, limit is {MAX_INPUT_LENGTH})",
                code="TOO_LONG",
                position=0,
            )
        self._text = text
        prefix = EQUATION_PREFIX_REGEX.match(text)
        if prefix:
            self._advance(prefix.end())

    def _next_token(self) -> Token:
        if self._pending:
            return self._pending.popleft()
        if not self._started:
            self._started = True
            self._start()

        produced = self._scan()
        first = produced[0]
        if self._previous in CLOSING_KINDS and first.kind in OPENING_KINDS:
            produced.insert(0, Token(TokenKind.STAR, None, first.position))
        self._pending.extend(produced[1:])
        return produced[0]

    def _peek(self, distance: int = 0) -> str:
        index = self._index + distance
        if index >= len(self._text):
            return ""
        return self._text[index]

    def _advance(self, count: int) -> None:
        consumed = self._text[self._index : self._index + count]
        self._index += len(consumed)
        self._offset += len(consumed.encode("utf-8"))

    def _skip_whitespace(self) -> None:
        while self._peek() in WHITESPACE:
            self._advance(1)

    def _expects_operand(self) -> bool:
        return self._previous is None or self._previous in SIGN_CONTEXT

    def _scan(self) -> list[Token]:
        self._skip_whitespace()
        start = self._offset
        char = self._peek()

        if not char:
            return [Token(TokenKind.END, None, start)]
        if char == "-" and self._expects_operand():
            return self._scan_signed()
        if char in DIGITS:
            return [self._scan_number(1.0)]
        if char in LETTERS:
            return self._scan_name(1.0)
        if char == "π":
            self._advance(1)
            return [Token(TokenKind.PI, math.pi, start)]
        if char == "-":
            self._advance(1)
            return [Token(TokenKind.MINUS, None, start)]
        if char == "%":
            if self._peek(1) == "%":
                self._advance(2)
                return [Token(TokenKind.MODULO, None, start)]
            self._advance(1)
            return [Token(TokenKind.PERCENT, None, start)]
        if char == ")":
            return self._close_paren()
        if char == ".":
            raise LexError(
                f"Malformed numeric literal at byte {start}",
                code="MALFORMED_NUMBER",
                position=start,
            )

        kind = SINGLE_CHAR_TOKENS.get(char)
        if kind is None:
            raise LexError(
                f"Unrecognized character {char!r} at byte {start}",
                code="UNRECOGNIZED_CHARACTER",
                position=start,
            )
        self._advance(1)
        if kind is TokenKind.LPAREN:
            self._depth += 1
        return [Token(kind, None, start)]

    def _scan_signed(self) -> list[Token]:
        start = self._offset
        negative = False
        while self._peek() == "-":
            negative = not negative
            self._advance(1)
            self._skip_whitespace()
        sign = -1.0 if negative else 1.0

        char = self._peek()
        if char in DIGITS:
            return [self._scan_number(sign)]
        if char in LETTERS:
            return self._scan_name(sign)
        if char == "π":
            position = self._offset
            self._advance(1)
            return [Token(TokenKind.PI, sign * math.pi, position)]
        if char == "(":
            position = self._offset
            self._advance(1)
            self._depth += 1
            return self._negate_group([Token(TokenKind.LPAREN, None, position)], sign, start)
        raise LexError(
            f"Dangling minus sign at byte {start}", code="DANGLING_SIGN", position=start
        )

    def _negate_group(self, opener: list[Token], sign: float, start: int) -> list[Token]:
        """Wrap a group as ( -1 * group ); the closing paren is owed to _close_paren."""
        if sign > 0:
            return opener
        self._negated_groups.append(self._depth)
        return [
            Token(TokenKind.LPAREN, None, start),
            Token(TokenKind.NUMBER, -1.0, start),
            Token(TokenKind.STAR, None, start),
            *opener,
        ]

    def _close_paren(self) -> list[Token]:
        start = self._offset
        self._advance(1)
        tokens = [Token(TokenKind.RPAREN, None, start)]
        if self._negated_groups and self._negated_groups[-1] == self._depth:
            self._negated_groups.pop()
            tokens.append(Token(TokenKind.RPAREN, None, start))
        self._depth -= 1
        return tokens

    def _read_number(self) -> float:
        start = self._offset
        literal = NUMBER_REGEX.match(self._text, self._index).group()
        self._advance(len(literal))
        trailing = self._peek()
        if trailing in (".", "_"):
            raise LexError(
                f"Malformed numeric literal {literal + trailing!r} at byte {start}",
                code="MALFORMED_NUMBER",
                position=start,
            )
        value = float(literal)
        if not math.isfinite(value):
            raise LexError(
                f"Numeric literal at byte {start} is out of range",
                code="MALFORMED_NUMBER",
                position=start,
            )
        return value

    def _scan_number(self, sign: float) -> Token:
        start = self._offset
        return Token(TokenKind.NUMBER, sign * self._read_number(), start)

    def _scan_name(self, sign: float) -> list[Token]:
        start = self._offset
        run = NAME_REGEX.match(self._text, self._index).group()
        name = next(
            (
                run[:length]
                for length in range(min(len(run), MAX_NAME_LENGTH), 0, -1)
                if run[:length] in NAMES
            ),
            None,
        )
        if name is None:
            raise LexError(
                f"Unknown identifier {run!r} at byte {start}",
                code="UNKNOWN_IDENTIFIER",
                position=start,
            )
        kind = NAMES[name]
        self._advance(len(name))

        if kind is TokenKind.X:
            return [Token(TokenKind.X, sign, start)]
        if kind in CONSTANTS:
            return [Token(kind, sign * CONSTANT_VALUES[kind], start)]

        tokens = [Token(kind, None, start)]
        if kind is TokenKind.LOG and self._peek() == "_":
            self._advance(1)
            base_position = self._offset
            if self._peek() not in DIGITS:
                raise LexError(
                    f"Expected a numeric base after 'log_' at byte {base_position}",
                    code="MALFORMED_LOG_BASE",
                    position=base_position,
                )
            base = self._read_number()
            tokens.append(Token(TokenKind.NUMBER, base, base_position))
            tokens.append(Token(TokenKind.COMMA, None, base_position))

        if self._peek() != "(":
            raise LexError(
                f"Expected '(' after {name!r} at byte {self._offset}",
                code="MISSING_PAREN",
                position=self._offset,
            )
        self._advance(1)
        self._depth += 1
        return self._negate_group(tokens, sign, start)


def tokenize(expression: str | bytes) -> Tokenizer:
    """Return a fresh lazy token stream for ``expression``."""
    return Tokenizer(expression)
