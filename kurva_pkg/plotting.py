"""Text rendering of sampled points."""

from __future__ import annotations

from collections.abc import Sequence

from .config import ASCII_PLOT_COLS, ASCII_PLOT_ROWS
from .types import Point


def render_ascii(
    points: Sequence[Point],
    rows: int = ASCII_PLOT_ROWS,
    cols: int = ASCII_PLOT_COLS,
) -> str:
    """Render points as a character grid of ``*`` marks.

    The x axis (``-``) and y axis (``|``) are drawn when zero lies inside the
    sampled range; they cross at ``+``. Points are scaled to fill the grid.

    Args:
        points: Sampled (x, y) pairs, as returned by ``plot``
        rows: Height of the plot in characters
        cols: Width of the plot in characters

    Returns:
        The plot as ``rows`` newline separated lines

    Raises:
        ValueError: No points were given or the grid is too small

    Example:
        >>> print(render_ascii(plot("x", -1, 1, 1), rows=3, cols=3))
          *
        -+-
        * |
    """
    if not points:
        raise ValueError("Cannot plot: no points")
    if rows < 2 or cols < 2:
        raise ValueError("Cannot plot: grid must be at least 2x2 characters")

    xs = [p.x for p in points]
    ys = [p.y for p in points]
    x_min, x_max = min(xs), max(xs)
    y_min, y_max = min(ys), max(ys)
    x_range = x_max - x_min if x_max != x_min else 1
    y_range = y_max - y_min if y_max != y_min else 1

    # Row 0 is the bottom of the plot until the final flip
    plot_chars = [[" " for _ in range(cols)] for _ in range(rows)]
    for x, y in points:
        col = int((x - x_min) / x_range * (cols - 1))
        row = int((y - y_min) / y_range * (rows - 1))
        col = max(0, min(cols - 1, col))
        row = max(0, min(rows - 1, row))
        plot_chars[row][col] = "*"

    x_axis_row = int((0 - y_min) / y_range * (rows - 1)) if y_min <= 0 <= y_max else -1
    y_axis_col = int((0 - x_min) / x_range * (cols - 1)) if x_min <= 0 <= x_max else -1

    lines = []
    for r in range(rows - 1, -1, -1):
        line = []
        for c in range(cols):
            if plot_chars[r][c] == "*":
                line.append("*")
            elif r == x_axis_row and c == y_axis_col:
                line.append("+")
            elif r == x_axis_row:
                line.append("-")
            elif c == y_axis_col:
                line.append("|")
            else:
                line.append(" ")
        lines.append("".join(line))
    return "\n".join(lines)
