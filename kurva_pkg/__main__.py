"""Main entry point for running kurva_pkg as a module.

This allows running Kurva with:
    python -m kurva_pkg
    python -m kurva_pkg -e "2+2"
    python -m kurva_pkg --plot "x^2" --ascii

This is equivalent to running:
    python -m kurva_pkg.cli
    python kurva.py
"""

from __future__ import annotations

import sys

from .cli import main_entry

if __name__ == "__main__":
    sys.exit(main_entry())
