"""Kurva package: tokenizer, parser, evaluator, plotting and CLI for single-variable expressions.

The non-raising entry points are re-exported here::

    >>> import kurva_pkg
    >>> kurva_pkg.evaluate("2 + 3 * 4").result
    14.0
"""

from .api import analyze, evaluate, plot, validate_expression

__all__ = [
    "analyze",
    "evaluate",
    "plot",
    "validate_expression",
]
