import json

import pytest

from tileprobe.pipeline.reducer import StreamReducer
from tileprobe.reporting import render_json, render_table
from tests.helpers.fake_results import make_failure, make_result

pytestmark = pytest.mark.unit


@pytest.fixture
def summary():
    reducer = StreamReducer(None, expected=3, zoom=8)
    for r in (
        make_result(0, 0, 100, roads=5),
        make_result(1, 0, 300, roads=2),
        make_result(0, 1, 200, roads=7, water=3),
    ):
        reducer.consume(r)
    return reducer.finalize()


@pytest.fixture
def skipped_summary():
    reducer = StreamReducer(None, expected=2, zoom=8, failure_policy="skip_tile")
    reducer.consume(make_result(0, 0, 100, roads=5))
    reducer.consume(make_failure(1, 0))
    return reducer.finalize()


def test_table_sections(summary):
    lines = render_table(summary).splitlines()

    assert lines[0] == "Tile(zoom=8, count=3):"
    assert "Layers(count=2):" in lines
    assert not any(line.startswith("Failed") for line in lines)


def test_table_tile_rows(summary):
    lines = render_table(summary).splitlines()

    size_header, size_row = lines[1].split(), lines[2].split()
    assert size_header == ["MinSize", "MinSizeAt", "MaxSize", "MaxSizeAt", "AvgSize"]
    assert size_row == ["100", "(0,0)", "300", "(1,0)", "200.00"]

    feat_header, feat_row = lines[3].split(), lines[4].split()
    assert feat_header == ["MinFeatures", "MinFeaturesAt", "MaxFeatures", "MaxFeaturesAt", "AvgFeatures"]
    assert feat_row == ["2", "(1,0)", "10", "(0,1)", "5.67"]


def test_table_layer_rows(summary):
    lines = render_table(summary).splitlines()
    start = lines.index("Layers(count=2):")

    assert lines[start + 1].split() == [
        "Layer", "Cover", "MinCount", "MinCountAt", "MaxCount", "MaxCountAt", "AvgCount"
    ]
    assert lines[start + 2].split() == ["roads", "3", "2", "(1,0)", "7", "(0,1)", "4.67"]
    assert lines[start + 3].split() == ["water", "1", "3", "(0,1)", "3", "(0,1)", "3.00"]


def test_table_rows_are_indented(summary):
    for line in render_table(summary).splitlines():
        if not line.endswith(":"):
            assert line.startswith("  ")


def test_table_lists_failures(skipped_summary):
    text = render_table(skipped_summary)
    lines = text.splitlines()

    assert lines[0] == "Tile(zoom=8, count=1):"
    assert "Failed(count=1):" in lines
    assert "(1,0) https://tiles.test/1/1/0.pbf TransportError: HTTP 500" in text


def test_table_without_any_tiles():
    reducer = StreamReducer(None, expected=1, zoom=3, failure_policy="skip_tile")
    reducer.consume(make_failure(0, 0))
    lines = render_table(reducer.finalize()).splitlines()

    assert lines[:3] == ["Tile(zoom=3, count=0):", "  (no tiles)", "Layers(count=0):"]
    assert lines[3] == "Failed(count=1):"


def test_json_report(summary):
    doc = json.loads(render_json(summary))

    assert doc["zoom"] == 8
    assert doc["expected_tiles"] == 3
    assert doc["tiles"]["tile_count"] == 3
    assert doc["tiles"]["size"]["min"] == {"value": 100, "x": 0, "y": 0}
    assert doc["tiles"]["size"]["total"] == 600
    assert doc["tiles"]["features"]["max"] == {"value": 10, "x": 0, "y": 1}
    assert [layer["name"] for layer in doc["layers"]] == ["roads", "water"]
    assert doc["layers"][0]["cover"] == 3
    assert doc["failures"] == []


def test_json_report_failures(skipped_summary):
    doc = json.loads(render_json(skipped_summary))
    assert doc["failures"] == [{
        "x": 1,
        "y": 0,
        "url": "https://tiles.test/1/1/0.pbf",
        "error": "TransportError: HTTP 500 Server Error [tile (1,0) https://tiles.test/1/1/0.pbf]",
    }]


def test_frames(summary):
    tiles_df, layers_df = summary.to_frames()

    assert list(tiles_df["quantity"]) == ["size", "features"]
    assert list(layers_df["layer"]) == ["roads", "water"]
    assert layers_df.loc[0, "min_at"] == "(1,0)"
    assert tiles_df.loc[0, "avg"] == pytest.approx(200.0)
