"""`tileprobe` - size and feature statistics for tiled vector-map services.

Subpackages:
- tiles: Tile enumeration, fetching and decoding
- pipeline: Fan-out scheduler, stream reducer, orchestrator
- reporting: Tabular and JSON report rendering
- schemas: Pydantic configuration
- contracts: Stage contract checks and failure policy
- cli: `tileprobe` command
"""

__version__ = "0.1.0"
