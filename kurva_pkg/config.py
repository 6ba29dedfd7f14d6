"""Centralized configuration for Kurva.

This module defines:
- Input validation limits (expression length)
- Plot sampling limits and the parallel evaluation pool size
- Output formatting precision
- Degree limit for symbolic zero analysis
- ASCII plot dimensions

Configuration can be overridden via:
- CLI flags (see cli.py)
- Environment variables (prefixed with KURVA_)
"""

import importlib.metadata
import os

# Version is defined in pyproject.toml [project] section
try:
    VERSION = importlib.metadata.version("kurva")
except importlib.metadata.PackageNotFoundError:
    # Fallback if package not installed
    VERSION = "1.0.0"

# Input validation limits
MAX_INPUT_LENGTH = int(os.getenv("KURVA_MAX_INPUT_LENGTH", "10000"))  # characters

# Plot evaluation (can be overridden via environment variables)
WORKER_POOL_SIZE = int(
    os.getenv("KURVA_WORKER_POOL_SIZE", str(os.cpu_count() or 1))
)  # Number of worker threads used by plot()
PARALLEL_THRESHOLD = int(
    os.getenv("KURVA_PARALLEL_THRESHOLD", "512")
)  # Grids smaller than this are evaluated inline
MAX_PLOT_POINTS = int(
    os.getenv("KURVA_MAX_PLOT_POINTS", "1000000")
)  # Upper bound on the number of sampled x values

# Output formatting
OUTPUT_PRECISION = int(os.getenv("KURVA_OUTPUT_PRECISION", "6"))

# ASCII plot dimensions (characters)
ASCII_PLOT_ROWS = int(os.getenv("KURVA_ASCII_PLOT_ROWS", "20"))
ASCII_PLOT_COLS = int(os.getenv("KURVA_ASCII_PLOT_COLS", "60"))

# Zero analysis: expressions whose degree could exceed this are not expanded
MAX_EXPAND_DEGREE = int(os.getenv("KURVA_MAX_EXPAND_DEGREE", "64"))
