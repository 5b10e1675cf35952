"""Tile modules.

- enumerator: Point/zoom to tile range
- fetcher: HTTP download with gzip negotiation
- decoder: Vector tile layer counting
- models: Per-tile records
- errors: Fetch error taxonomy
"""

from tileprobe.tiles.models import (
    TileCoordinate,
    TileRange,
    LayerSample,
    TileResult,
    TileFailure,
)
from tileprobe.tiles.errors import (
    FetchError,
    TransportError,
    DecompressionError,
    DecodeError,
    FetchCancelled,
)
from tileprobe.tiles.enumerator import enumerate_tiles
from tileprobe.tiles.fetcher import TileFetcher, build_session, build_tile_url

__all__ = [
    "TileCoordinate",
    "TileRange",
    "LayerSample",
    "TileResult",
    "TileFailure",
    "FetchError",
    "TransportError",
    "DecompressionError",
    "DecodeError",
    "FetchCancelled",
    "enumerate_tiles",
    "TileFetcher",
    "build_session",
    "build_tile_url",
]
