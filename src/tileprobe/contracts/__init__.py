"""Pipeline contracts: fail-fast enforcement of stage invariants.

Contracts fail immediately and loudly when pipeline stages don't produce
their promised invariants.

Key principle:
- Pydantic validates config correctness
- Contracts validate pipeline correctness
- FetchError covers network and payload failures of single tiles
"""

from tileprobe.contracts.failure import ContractViolation, FailurePolicy
from tileprobe.contracts.base import require
from tileprobe.contracts.tile import assert_tile_result
from tileprobe.contracts.aggregate import assert_finalized

__all__ = [
    "ContractViolation",
    "FailurePolicy",
    "require",
    "assert_tile_result",
    "assert_finalized",
]
