"""Tile probe user configuration.

This is the user-facing configuration file. Modify settings here to probe a
different service or area. Expert defaults are in tileprobe/schemas/param.py

Usage:
    python scripts/run_tile_probe.py --config scripts/user_config.py
    python scripts/run_tile_probe.py --config scripts/user_config.py --zoom 8
    tileprobe --config scripts/user_config.py --on-error skip_tile
"""

CONFIG = {
    # ========================================================================
    # TILE SERVICE
    # ========================================================================
    "URL": "https://tiles.example.com/data/v3/{z}/{x}/{y}.pbf",
    "GZIP": True,             # Ask for gzip; sizes are then compressed sizes

    # ========================================================================
    # AREA
    # ========================================================================
    "LON": 120.0,             # Center longitude in degrees
    "LAT": 31.0,              # Center latitude in degrees
    "ZOOM": 6,                # Base zoom; the tile containing the center
    "OFFSET": 2,              # Probe 4**OFFSET tiles at ZOOM + OFFSET

    # ========================================================================
    # RUN
    # ========================================================================
    "MAX_CONCURRENCY": None,  # None = one request per tile at once
    "ON_ERROR": "fail_fast",  # "fail_fast" or "skip_tile"
    "TIMEOUT_SEC": 30,
    "FORMAT": "table",        # "table" or "json"
    "LOG_LEVEL": "INFO",
}
