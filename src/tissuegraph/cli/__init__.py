"""Command-line interface modules for tracking runs.

This package contains the core execution logic, making scripts/ optional.
"""

from tissuegraph.cli.run_tracking import run_tracking, main

__all__ = ['run_tracking', 'main']
