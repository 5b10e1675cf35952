"""Tile enumeration: point + zoom -> the grid of tiles to probe.

Pure functions. The slippy-map projection comes from ``mercantile``; the
descendant range is plain quadtree arithmetic so that very large offsets do
not materialise every child tile.
"""

import logging

import mercantile

from tileprobe.tiles.models import TileCoordinate, TileRange

__all__ = ['derive_target_zoom', 'project_to_tile', 'covering_range', 'enumerate_tiles']

logger = logging.getLogger(__name__)

# web-mercator latitude limit
MAX_LATITUDE = 85.0511287798066


def derive_target_zoom(base_zoom: int, offset: int) -> int:
    """Zoom level of the probed tiles: ``base_zoom + offset``.

    No upper bound is enforced; a large offset simply yields a large grid
    (``4 ** offset`` tiles).
    """
    if base_zoom < 0 or offset < 0:
        raise ValueError(f"zoom and offset must be >= 0, got zoom={base_zoom} offset={offset}")
    return base_zoom + offset


def project_to_tile(longitude: float, latitude: float, zoom: int) -> TileCoordinate:
    """Web-mercator tile containing the point at ``zoom``.

    Latitudes beyond the mercator limit map to the top or bottom tile row.
    """
    latitude = max(-MAX_LATITUDE, min(MAX_LATITUDE, latitude))
    tile = mercantile.tile(longitude, latitude, zoom)
    return TileCoordinate(tile.x, tile.y)


def covering_range(tile: TileCoordinate, base_zoom: int, target_zoom: int) -> TileRange:
    """Inclusive range of descendants of ``tile`` at ``target_zoom``.

    Parameters
    ----------
    tile : TileCoordinate
        Tile at ``base_zoom``.
    base_zoom : int
        Zoom level of ``tile``.
    target_zoom : int
        Zoom level of the descendants, ``>= base_zoom``.

    Returns
    -------
    TileRange
        ``2**(target_zoom-base_zoom)`` tiles on each axis.
    """
    if target_zoom < base_zoom:
        raise ValueError(f"target zoom {target_zoom} is above base zoom {base_zoom}")
    shift = target_zoom - base_zoom
    return TileRange(
        zoom=target_zoom,
        min_x=tile.x << shift,
        min_y=tile.y << shift,
        max_x=((tile.x + 1) << shift) - 1,
        max_y=((tile.y + 1) << shift) - 1,
    )


def enumerate_tiles(longitude: float, latitude: float, base_zoom: int, offset: int) -> TileRange:
    """Grid of tiles under the point's tile, ``offset`` levels down."""
    target_zoom = derive_target_zoom(base_zoom, offset)
    parent = project_to_tile(longitude, latitude, base_zoom)
    tile_range = covering_range(parent, base_zoom, target_zoom)
    logger.debug(
        "Point (%.6f, %.6f) -> tile %s@z%d -> %d tiles at z%d",
        longitude, latitude, parent, base_zoom, tile_range.count, target_zoom,
    )
    return tile_range
