"""Tests for the lazy tokenizer."""

import math
import unittest

import pytest

from kurva_pkg.tokenizer import MAX_INPUT_LENGTH, Tokenizer, tokenize
from kurva_pkg.tokens import TokenKind as K
from kurva_pkg.types import LexError


def kinds(expression):
    return [token.kind for token in tokenize(expression)]


def values(expression):
    return [token.value for token in tokenize(expression)]


class TestBasicTokens(unittest.TestCase):
    """Plain operators, numbers and names."""

    def test_arithmetic(self):
        self.assertEqual(kinds("2 + 3"), [K.NUMBER, K.PLUS, K.NUMBER, K.END])
        self.assertEqual(
            kinds("1-2*3/4^5"),
            [K.NUMBER, K.MINUS, K.NUMBER, K.STAR, K.NUMBER, K.SLASH, K.NUMBER,
             K.CARET, K.NUMBER, K.END],
        )

    def test_percent_and_modulo(self):
        self.assertEqual(kinds("50 % 10"), [K.NUMBER, K.PERCENT, K.NUMBER, K.END])
        self.assertEqual(kinds("7 %% 3"), [K.NUMBER, K.MODULO, K.NUMBER, K.END])

    def test_numbers(self):
        self.assertEqual(values("12.5")[0], 12.5)
        self.assertEqual(values("1_000")[0], 1000.0)

    def test_functions_consume_their_paren(self):
        self.assertEqual(kinds("sin(x)"), [K.SIN, K.X, K.RPAREN, K.END])
        self.assertEqual(
            kinds("avg(1, 2)"), [K.AVG, K.NUMBER, K.COMMA, K.NUMBER, K.RPAREN, K.END]
        )

    def test_longest_name_wins(self):
        self.assertEqual(kinds("asin(1)")[0], K.ASIN)
        self.assertEqual(kinds("mode(1)")[0], K.MODE)

    def test_constants(self):
        tokens = list(tokenize("e + π + pi"))
        self.assertEqual(tokens[0].value, math.e)
        self.assertEqual(tokens[2].kind, K.PI)
        self.assertEqual(tokens[2].value, math.pi)
        self.assertEqual(tokens[4].kind, K.PI)

    def test_stream_ends_with_single_end(self):
        self.assertEqual(kinds(""), [K.END])
        self.assertEqual(kinds("   "), [K.END])

    def test_equation_prefix_is_skipped(self):
        self.assertEqual(kinds("y = 2x"), kinds("2x"))
        self.assertEqual(kinds("y=x"), [K.X, K.END])


class TestUnaryMinus:
    """A leading minus binds to the following atom."""

    def test_negative_literal(self):
        assert kinds("-3") == [K.NUMBER, K.END]
        assert values("-3")[0] == -3.0

    def test_minus_after_operator_is_sign(self):
        assert kinds("3 - -2") == [K.NUMBER, K.MINUS, K.NUMBER, K.END]
        assert values("3 - -2")[2] == -2.0

    def test_double_minus_cancels(self):
        assert values("- -3")[0] == 3.0

    def test_negative_variable_and_constant(self):
        assert values("-x")[0] == -1.0
        assert values("-π")[0] == -math.pi

    def test_negative_group_is_wrapped(self):
        assert kinds("-(1+2)") == [
            K.LPAREN, K.NUMBER, K.STAR, K.LPAREN, K.NUMBER, K.PLUS, K.NUMBER,
            K.RPAREN, K.RPAREN, K.END,
        ]
        assert values("-(1+2)")[1] == -1.0

    def test_negative_function_is_wrapped(self):
        assert kinds("-sin(x)") == [
            K.LPAREN, K.NUMBER, K.STAR, K.SIN, K.X, K.RPAREN, K.RPAREN, K.END,
        ]

    def test_sign_inside_call(self):
        assert values("abs(-3)")[1] == -3.0


class TestImplicitMultiplication:
    def test_number_before_variable(self):
        assert kinds("2x") == [K.NUMBER, K.STAR, K.X, K.END]

    def test_number_before_group(self):
        assert kinds("2(3)") == [K.NUMBER, K.STAR, K.LPAREN, K.NUMBER, K.RPAREN, K.END]

    def test_group_before_group(self):
        assert K.STAR in kinds("(1)(2)")

    def test_variable_before_function(self):
        assert kinds("x sin(x)") == [K.X, K.STAR, K.SIN, K.X, K.RPAREN, K.END]

    def test_number_before_constant(self):
        assert kinds("2π") == [K.NUMBER, K.STAR, K.PI, K.END]

    def test_inserted_star_position(self):
        tokens = list(tokenize("2x"))
        assert tokens[1].position == 1


class TestLogBase:
    def test_log_underscore_base(self):
        tokens = list(tokenize("log_2(8)"))
        assert [t.kind for t in tokens] == [
            K.LOG, K.NUMBER, K.COMMA, K.NUMBER, K.RPAREN, K.END,
        ]
        assert tokens[1].value == 2.0

    def test_log_two_argument_form(self):
        assert kinds("log(2, 8)") == [
            K.LOG, K.NUMBER, K.COMMA, K.NUMBER, K.RPAREN, K.END,
        ]


class TestPositions:
    def test_byte_offsets(self):
        tokens = list(tokenize("1 + 22"))
        assert [t.position for t in tokens] == [0, 2, 4, 6]

    def test_multibyte_characters_count_as_bytes(self):
        tokens = list(tokenize("π+1"))
        assert tokens[1].kind is K.PLUS
        assert tokens[1].position == 2
        assert tokens[2].position == 3

    def test_bytes_input(self):
        assert kinds(b"2+3") == [K.NUMBER, K.PLUS, K.NUMBER, K.END]
        assert kinds("2π".encode("utf-8"))[-2] is K.PI


class TestLexErrors:
    @pytest.mark.parametrize(
        "expression, code, position",
        [
            ("2 $ 3", "UNRECOGNIZED_CHARACTER", 2),
            ("1.2.3", "MALFORMED_NUMBER", 0),
            (".5", "MALFORMED_NUMBER", 0),
            ("1_", "MALFORMED_NUMBER", 0),
            ("foo(1)", "UNKNOWN_IDENTIFIER", 0),
            ("sin 1", "MISSING_PAREN", 3),
            ("log_x(2)", "MALFORMED_LOG_BASE", 4),
            ("1 + -", "DANGLING_SIGN", 4),
            ("-", "DANGLING_SIGN", 0),
        ],
    )
    def test_error_codes(self, expression, code, position):
        with pytest.raises(LexError) as exc_info:
            list(tokenize(expression))
        assert exc_info.value.code == code
        assert exc_info.value.position == position

    def test_too_long(self):
        with pytest.raises(LexError) as exc_info:
            list(tokenize("1" * (MAX_INPUT_LENGTH + 1)))
        assert exc_info.value.code == "TOO_LONG"

    def test_invalid_utf8(self):
        with pytest.raises(LexError) as exc_info:
            list(tokenize(b"1 + \xcf"))
        assert exc_info.value.code == "UNTERMINATED_CHARACTER"
        assert exc_info.value.position == 4


class TestLaziness:
    def test_tokens_before_error_are_produced(self):
        tokenizer = Tokenizer("1 + $")
        assert next(tokenizer).kind is K.NUMBER
        assert next(tokenizer).kind is K.PLUS
        with pytest.raises(LexError):
            next(tokenizer)

    def test_fused_after_error(self):
        tokenizer = Tokenizer("$")
        with pytest.raises(LexError):
            next(tokenizer)
        assert tokenizer.exhausted
        with pytest.raises(StopIteration):
            next(tokenizer)

    def test_fused_after_end(self):
        tokenizer = Tokenizer("1")
        assert [t.kind for t in tokenizer] == [K.NUMBER, K.END]
        assert list(tokenizer) == []
