"""Aggregate stage contract.

Enforces the guarantee that the finalized summary accounts for every tile
in the enumerated range and that per-layer state is consistent with the
global state.
"""

from tileprobe.contracts.base import require


def assert_finalized(summary) -> None:
    """Enforce finalized-aggregate contract.

    Called by the orchestrator after the reducer has finished and before
    the summary reaches the report renderer.

    Parameters
    ----------
    summary : ProbeSummary
        Finalized reducer output.

    Raises
    ------
    ContractViolation
        If tiles are missing, a layer covers more tiles than were reduced,
        or an extremum pair is inverted.
    """
    g = summary.global_
    accounted = g.tile_count + len(summary.failures)
    require(
        accounted == summary.expected_tiles,
        f"Aggregate contract violated: {g.tile_count} reduced + "
        f"{len(summary.failures)} failed != {summary.expected_tiles} expected"
    )

    if g.tile_count > 0:
        require(
            g.min_size.value <= g.max_size.value,
            "Aggregate contract violated: min_size > max_size"
        )
        require(
            g.min_features.value <= g.max_features.value,
            "Aggregate contract violated: min_features > max_features"
        )

    for layer in summary.layers:
        require(
            layer.covered_tile_count <= g.tile_count,
            f"Aggregate contract violated: layer '{layer.name}' covers "
            f"{layer.covered_tile_count} tiles, only {g.tile_count} reduced"
        )
        require(
            layer.min.value <= layer.max.value,
            f"Aggregate contract violated: layer '{layer.name}' min > max"
        )

    names = [layer.name for layer in summary.layers]
    require(
        names == sorted(names),
        "Aggregate contract violated: layers are not sorted by name"
    )
