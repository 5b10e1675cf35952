"""Vector tile payload decoding.

Only layer names and feature counts are consumed; geometries and
properties are decoded by ``mapbox_vector_tile`` and discarded.
"""

from typing import List

import mapbox_vector_tile

from tileprobe.tiles.models import LayerSample

__all__ = ['decode_layers']


def decode_layers(data: bytes) -> List[LayerSample]:
    """Decode an MVT payload into one ``LayerSample`` per layer, in payload order.

    Raises whatever the underlying protobuf decoder raises on malformed input;
    the fetcher wraps it into ``DecodeError``.
    """
    decoded = mapbox_vector_tile.decode(data)
    return [
        LayerSample(name=name, feature_count=len(layer.get("features", ())))
        for name, layer in decoded.items()
    ]
