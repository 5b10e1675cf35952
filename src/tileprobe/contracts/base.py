"""``require``: the one check used by every tileprobe contract."""

from tileprobe.contracts.failure import ContractViolation


def require(condition: bool, message: str) -> None:
    """Raise ``ContractViolation`` with ``message`` unless ``condition`` holds.

    Checked twice per run: by the fetcher on every ``TileResult`` it
    builds, and by the orchestrator on the finalized ``ProbeSummary``. A
    violation means tileprobe itself is wrong, not the tile server.

    Parameters
    ----------
    condition : bool
        Invariant being checked.
    message : str
        Names the tile or aggregate and the offending value.

    Examples
    --------
    >>> require(result.byte_size >= 0,
    ...         f"tile {result.coordinate}: byte_size is {result.byte_size}")
    >>> require(layer.covered_tile_count <= summary.global_.tile_count,
    ...         f"layer '{layer.name}' covers {layer.covered_tile_count} tiles")
    """
    if not condition:
        raise ContractViolation(message)
