"""Tile stage contract.

Enforces the guarantee that every fetched tile result is internally
consistent before it is handed to the reducer.
"""

from tileprobe.contracts.base import require


def assert_tile_result(result) -> None:
    """Enforce tile result contract.

    Called by the fetcher right after decoding.

    Parameters
    ----------
    result : TileResult
        Freshly built per-tile record.

    Raises
    ------
    ContractViolation
        If sizes or counts are negative, or the total does not match the layers.
    """
    at = f"({result.coordinate.x},{result.coordinate.y})"
    require(
        result.byte_size >= 0,
        f"Tile contract violated at {at}: byte_size is {result.byte_size}"
    )

    layer_sum = 0
    for layer in result.layers:
        require(
            layer.feature_count >= 0,
            f"Tile contract violated at {at}: layer '{layer.name}' has negative count"
        )
        layer_sum += layer.feature_count

    require(
        result.total_features == layer_sum,
        f"Tile contract violated at {at}: total_features={result.total_features} "
        f"but layers sum to {layer_sum}"
    )
