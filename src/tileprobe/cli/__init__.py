"""Command-line interface.

- run_probe: argument parsing, config resolution and report output
"""

from tileprobe.cli.run_probe import main

__all__ = ["main"]
