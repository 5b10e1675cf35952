"""Centralized failure policy for fetch failures and contract violations.

Contracts fail fast, loud, and once. All violations raise the same
exception type, allowing caller to handle pipeline bugs uniformly.
"""

from enum import Enum


class FailurePolicy(str, Enum):
    """What the pipeline does when a tile fetch fails.

    FAIL_FAST (default): Abort the run on the first failed fetch; no report
    SKIP_TILE: Record the failure, keep reducing, list failures in the report
    """
    FAIL_FAST = "fail_fast"
    SKIP_TILE = "skip_tile"


class ContractViolation(RuntimeError):
    """Raised when a pipeline contract is violated.

    This indicates a bug in pipeline logic, not bad user input or a failed
    fetch. It means a pipeline stage did not produce the invariants it
    promised.

    Key distinction:
    - ValueError: User/config error (handled by Pydantic)
    - FetchError: Network or payload failure for one tile
    - ContractViolation: Pipeline bug (programmer error)
    """
    pass
