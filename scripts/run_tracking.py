#!/usr/bin/env python3
"""Tracking runner.

Usage:
    python scripts/run_tracking.py data/frames --config scripts/user_config.py
    python scripts/run_tracking.py data/frames -o out --link-range 2
    python scripts/run_tracking.py --config scripts/user_config.py -v

Note: User config in scripts/user_config.py, expert defaults in
src/tissuegraph/schemas/param.py
"""

import sys
from pathlib import Path

# Add src to path
project_root = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(project_root / "src"))

from tissuegraph.cli.run_tracking import main


if __name__ == "__main__":
    sys.exit(main())
