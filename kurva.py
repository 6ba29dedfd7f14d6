#!/usr/bin/env python3
"""Run Kurva from a source checkout without installing it.

    python kurva.py                          # interactive REPL
    python kurva.py -e "avg(1, 2, 3)"        # evaluate once
    python kurva.py --plot "x^2" --ascii     # text plot
"""

import sys

# Conventional exit status for a process stopped by SIGINT
EXIT_INTERRUPTED = 130


def main() -> int:
    try:
        from kurva_pkg.cli import main_entry
    except ImportError as e:
        print(f"kurva: cannot import kurva_pkg ({e}); run 'pip install -e .'", file=sys.stderr)
        return 1

    try:
        return main_entry(sys.argv[1:])
    except KeyboardInterrupt:
        print("\nInterrupted.", file=sys.stderr)
        return EXIT_INTERRUPTED


if __name__ == "__main__":
    sys.exit(main())
