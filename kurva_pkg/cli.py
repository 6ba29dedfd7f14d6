"""Command line interface: one-shot evaluation, plotting and an interactive REPL."""

from __future__ import annotations

import argparse
import json
import sys
from typing import Any

from . import api, config
from .config import VERSION
from .logging_config import get_logger, setup_logging
from .plotting import render_ascii

logger = get_logger("cli")

PROMPT = ">>> "


def format_number(val: Any, precision: int | None = None) -> str:
    """Format a numeric value with the given number of significant digits.

    Args:
        val: Numeric value to format
        precision: Significant digits, defaults to ``config.OUTPUT_PRECISION``

    Returns:
        Formatted string representation of the number
    """
    if precision is None:
        precision = config.OUTPUT_PRECISION
    try:
        fmt = "{:." + str(int(precision)) + "g}"
        return fmt.format(float(val))
    except (ValueError, TypeError, OverflowError):
        return str(val)


def print_result_pretty(res: dict[str, Any], output_format: str = "human") -> None:
    """Print result in specified format.

    Args:
        res: Result dictionary, as produced by the ``to_dict`` of an api result
        output_format: "json" for JSON output, "human" for human-readable
    """
    if output_format == "json":
        print(json.dumps(res, indent=2, ensure_ascii=False))
        return
    if not res.get("ok"):
        print("Error:", res.get("error"))
        return

    typ = res.get("type", "value")
    if typ == "value":
        print(format_number(res.get("result")))
        return

    if res.get("ascii"):
        print(res["ascii"])
    else:
        for x, y in res.get("points", []):
            print(f"{format_number(x)}\t{format_number(y)}")
    if typ == "analysis":
        zeros = res.get("zeros", [])
        if zeros:
            print("Zeros:", ", ".join(format_number(z) for z in zeros))
        else:
            print("Zeros: none found")


def print_help_text() -> None:
    """Print help text for REPL commands."""
    print(
        f"""Kurva version {VERSION}

Type an expression to evaluate it, e.g. 2 + 3 * 4 or avg(1, 2, 3).

Commands:
  plot EXPR            Plot EXPR from -10 to 10 with step 1 as text
  zeros EXPR           Show the real zeros of a linear or quadratic EXPR
  help                 Show this help message
  quit, exit           Leave the REPL

Operators: + - * / ^ % (percent) %% (remainder)
Functions: sin cos tan asin acos atan abs sqrt ln log(base, v) log_N(v)
Aggregates: min max avg med mode ch
Constants: e, π (or pi); variable: x"""
    )


def _handle_line(raw: str, output_format: str) -> None:
    command, _, rest = raw.partition(" ")
    command = command.lower()
    rest = rest.strip()
    if command == "plot" and rest:
        result = api.plot(rest)
        res = result.to_dict()
        if result.ok and output_format == "human":
            res["ascii"] = render_ascii(result.points)
        print_result_pretty(res, output_format)
    elif command == "zeros" and rest:
        res = api.analyze(rest).to_dict()
        # Only the zeros are of interest here
        res.pop("points", None)
        print_result_pretty(res, output_format)
    else:
        print_result_pretty(api.evaluate(raw).to_dict(), output_format)


def repl_loop(output_format: str = "human") -> None:
    """Interactive REPL loop with graceful interrupt handling."""
    try:
        import readline  # noqa: F401
    except (ImportError, ModuleNotFoundError):
        # readline not available on Windows - that's fine
        pass

    print("Kurva - type 'help' for commands, 'quit' to exit.")
    while True:
        try:
            raw = input(PROMPT).strip()
        except (EOFError, KeyboardInterrupt):
            print("\nGoodbye.")
            break
        if not raw:
            continue
        if raw.lower() in ("quit", "exit"):
            print("Goodbye.")
            break
        if raw.lower() in ("help", "?"):
            print_help_text()
            continue
        _handle_line(raw, output_format)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="kurva", description="Evaluate and plot single-variable expressions"
    )
    parser.add_argument(
        "-e",
        "--eval",
        type=str,
        help="Evaluate one expression and exit (non-interactive)",
        dest="eval_expr",
    )
    parser.add_argument(
        "--plot", type=str, help="Sample an expression in x and exit", dest="plot_expr"
    )
    parser.add_argument("--x-min", type=float, default=-10.0, help="First x value (default: -10)")
    parser.add_argument("--x-max", type=float, default=10.0, help="Last x value (default: 10)")
    parser.add_argument("--step", type=float, default=1.0, help="Distance between x values (default: 1)")
    parser.add_argument(
        "--ascii", action="store_true", help="Render the plot as a text chart"
    )
    parser.add_argument(
        "--zeros",
        action="store_true",
        help="Also report real zeros of linear and quadratic expressions",
    )
    parser.add_argument(
        "--format",
        type=str,
        choices=["json", "human"],
        default="human",
        help="Output format: json (machine-readable) or human (human-readable)",
    )
    parser.add_argument(
        "-p", "--precision", type=int, help="Set output precision (significant digits)"
    )
    parser.add_argument(
        "--workers", type=int, help="Worker threads used for plotting"
    )
    parser.add_argument(
        "-v", "--version", action="store_true", help="Show program version"
    )
    parser.add_argument(
        "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="INFO",
        help="Set logging level",
    )
    return parser


def main_entry(argv: list[str] | None = None) -> int:
    """
    Main entry point for Kurva CLI.

    Args:
        argv: Optional command-line arguments (defaults to sys.argv)

    Returns:
        Exit code (0 for success, 1 for an expression error)
    """
    parser = _build_parser()
    args = parser.parse_args(argv)
    output_format = args.format

    setup_logging(level=args.log_level)

    # Apply CLI configuration overrides
    if args.precision and args.precision > 0:
        config.OUTPUT_PRECISION = int(args.precision)
    if args.workers and args.workers > 0:
        config.WORKER_POOL_SIZE = int(args.workers)
    logger.debug(
        f"Precision {config.OUTPUT_PRECISION}, {config.WORKER_POOL_SIZE} plot workers"
    )

    if args.version:
        print(VERSION)
        return 0

    if args.zeros and not args.plot_expr:
        parser.error("--zeros requires --plot")

    if args.plot_expr:
        if args.zeros:
            result = api.analyze(args.plot_expr, args.x_min, args.x_max, args.step)
        else:
            result = api.plot(args.plot_expr, args.x_min, args.x_max, args.step)
        res = result.to_dict()
        if result.ok and args.ascii:
            res["ascii"] = render_ascii(result.points)
        print_result_pretty(res, output_format=output_format)
        return 0 if result.ok else 1

    if args.eval_expr is not None:
        expr = args.eval_expr.strip()
        # Remove ">>>" prompt if present
        if expr.startswith(">>>"):
            expr = expr[3:].strip()
        result = api.evaluate(expr)
        print_result_pretty(result.to_dict(), output_format=output_format)
        return 0 if result.ok else 1

    repl_loop(output_format=output_format)
    return 0


if __name__ == "__main__":
    """Allow running the CLI module directly with python -m kurva_pkg.cli"""
    sys.exit(main_entry())
