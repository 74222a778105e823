#!/usr/bin/env python3
# /atpoint/main.py
"""
atpoint Main Entry Point
========================

Runs the atpoint command-line inspector from a source checkout:
1) Path Setup: ensures the atpoint package under src/ is importable.
2) Core Import: imports the CLI.
3) Run: hands control to `atpoint.cli.main` and exits with its status.

Installed copies use the ``atpoint`` console script instead.
"""

from __future__ import annotations

import os
import sys

# --- Step 1: Set up the Python Path ---
project_root = os.path.dirname(os.path.abspath(__file__))
src_dir = os.path.join(project_root, "src")
if src_dir not in sys.path:
    sys.path.insert(0, src_dir)

# --- Step 2: Import the CLI ---
try:
    from atpoint.cli import main
except ImportError as e:
    print(f"FATAL: Could not import atpoint: {e}", file=sys.stderr)
    sys.exit(1)


if __name__ == "__main__":
    sys.exit(main())
