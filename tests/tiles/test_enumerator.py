import mercantile
import pytest

from tileprobe.tiles.enumerator import (
    covering_range,
    derive_target_zoom,
    enumerate_tiles,
    project_to_tile,
)
from tileprobe.tiles.models import TileCoordinate, TileRange

pytestmark = pytest.mark.unit


def test_target_zoom_is_base_plus_offset():
    assert derive_target_zoom(6, 2) == 8
    assert derive_target_zoom(0, 0) == 0


@pytest.mark.parametrize("zoom, offset", [(-1, 2), (6, -1)])
def test_target_zoom_rejects_negative_inputs(zoom, offset):
    with pytest.raises(ValueError, match=">= 0"):
        derive_target_zoom(zoom, offset)


def test_project_default_center():
    """lon 120, lat 31 at z6 lands on tile (53, 26)."""
    assert project_to_tile(120.0, 31.0, 6) == TileCoordinate(53, 26)


def test_project_origin_at_zoom_one():
    assert project_to_tile(0.0, 0.0, 1) == TileCoordinate(1, 1)


def test_project_zoom_zero_is_single_tile():
    assert project_to_tile(-75.3, 40.1, 0) == TileCoordinate(0, 0)


def test_covering_range_bounds():
    r = covering_range(TileCoordinate(3, 5), 2, 4)

    assert r == TileRange(zoom=4, min_x=12, min_y=20, max_x=15, max_y=23)
    assert r.width == 4
    assert r.height == 4
    assert r.count == 16


def test_covering_range_zero_offset_is_the_tile_itself():
    r = covering_range(TileCoordinate(7, 9), 5, 5)
    assert list(r) == [TileCoordinate(7, 9)]


def test_covering_range_rejects_target_above_base():
    with pytest.raises(ValueError, match="above base zoom"):
        covering_range(TileCoordinate(1, 1), 4, 3)


def test_default_run_enumerates_sixteen_tiles():
    r = enumerate_tiles(120.0, 31.0, 6, 2)

    assert r.zoom == 8
    assert (r.min_x, r.max_x) == (212, 215)
    assert (r.min_y, r.max_y) == (104, 107)
    assert r.count == 16
    assert len(list(r)) == 16


@pytest.mark.parametrize("offset", [0, 1, 2, 3])
def test_tile_count_is_four_to_the_offset(offset):
    r = enumerate_tiles(-122.4, 37.8, 5, offset)
    assert r.count == 4 ** offset
    assert len(set(r)) == 4 ** offset


def test_every_enumerated_tile_descends_from_the_center_tile():
    base = project_to_tile(13.4, 52.5, 7)
    r = enumerate_tiles(13.4, 52.5, 7, 3)

    for coord in r:
        parent = mercantile.parent(mercantile.Tile(coord.x, coord.y, r.zoom), zoom=7)
        assert (parent.x, parent.y) == (base.x, base.y)


def test_iteration_order_is_x_outer_y_inner():
    r = TileRange(zoom=1, min_x=0, min_y=0, max_x=1, max_y=1)
    assert list(r) == [
        TileCoordinate(0, 0),
        TileCoordinate(0, 1),
        TileCoordinate(1, 0),
        TileCoordinate(1, 1),
    ]


def test_range_membership():
    r = TileRange(zoom=3, min_x=2, min_y=2, max_x=3, max_y=3)
    assert TileCoordinate(2, 3) in r
    assert TileCoordinate(4, 3) not in r
    assert (2, 3) not in r


@pytest.mark.parametrize("lat, row", [(90.0, 0), (-90.0, 7)])
def test_polar_latitudes_map_to_edge_rows(lat, row):
    assert project_to_tile(0.0, lat, 3).y == row
