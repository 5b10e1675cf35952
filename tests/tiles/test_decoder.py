import pytest

from tileprobe.tiles.decoder import decode_layers
from tileprobe.tiles.models import LayerSample

pytestmark = pytest.mark.unit


def test_decode_counts_features_per_layer(mvt_payload):
    layers = decode_layers(mvt_payload(roads=7, water=3))
    assert layers == [LayerSample("roads", 7), LayerSample("water", 3)]


def test_decode_keeps_payload_layer_order(mvt_payload):
    layers = decode_layers(mvt_payload(water=1, buildings=2, roads=3))
    assert [layer.name for layer in layers] == ["water", "buildings", "roads"]


def test_decode_empty_payload_has_no_layers():
    assert decode_layers(b"") == []


def test_decode_raises_on_garbage():
    with pytest.raises(Exception):
        decode_layers(b"\x1a\x05abc")
