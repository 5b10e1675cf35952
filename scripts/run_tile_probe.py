#!/usr/bin/env python3
"""Tile probe runner.

Usage:
    python scripts/run_tile_probe.py --url "https://tiles.example.com/{z}/{x}/{y}.pbf"
    python scripts/run_tile_probe.py --config scripts/user_config.py --zoom 10
    python scripts/run_tile_probe.py --config scripts/user_config.py --format json --no-gzip

Note: User config in scripts/user_config.py, expert defaults in tileprobe.schemas.param
"""

import sys
from pathlib import Path

# Add src to path
project_root = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(project_root / "src"))

from tileprobe.cli.run_probe import main


if __name__ == "__main__":
    sys.exit(main())
