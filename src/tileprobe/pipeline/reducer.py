"""Stream reduction of per-tile results into run statistics.

A single consumer thread reads ``TileResult`` / ``TileFailure`` items from the
hand-off queue and folds them into the aggregate state. It is the only code
that ever touches that state, so no locks are involved.
"""

import copy
import logging
import queue
import threading
from typing import Dict, List, Optional

from tileprobe.contracts import ContractViolation, FailurePolicy
from tileprobe.pipeline.aggregate import GlobalAggregate, LayerAggregate, ProbeSummary
from tileprobe.tiles.errors import FetchCancelled
from tileprobe.tiles.models import TileFailure, TileResult

__all__ = ['StreamReducer']

logger = logging.getLogger(__name__)


class StreamReducer(threading.Thread):
    """Folds the unordered stream of tile outcomes into aggregate statistics.

    This worker thread consumes exactly ``expected`` items from the input
    queue, one per coordinate of the enumerated range, then stops. The count
    is known up front from the enumerator; the reducer never waits for the
    queue to be closed.

    **Per result:**

    - size and feature-count minimum/maximum with strict comparisons (the
      first observed value keeps its coordinate on ties), totals, tile count;
    - per layer: created on first sight, seeded with that tile's count as
      both minimum and maximum, then updated the same way as the globals
      plus a coverage count.

    **Per failure:**

    - ``fail_fast``: the first real failure is kept as ``error`` and further
      results are no longer folded. Draining continues so the count of
      consumed items still reaches ``expected``.
    - ``skip_tile``: the failure is recorded and listed in the summary.

    Cancelled fetches (``FetchCancelled``) are the echo of an earlier
    failure and never become the reported error.

    The fold is also usable synchronously, without starting the thread::

        reducer = StreamReducer(None, expected=3, zoom=8)
        for result in results:
            reducer.apply(result)
        summary = reducer.finalize()

    Example usage (typically called by orchestrator)::

        reducer = StreamReducer(result_queue, expected=tile_range.count, zoom=tile_range.zoom)
        reducer.start()
        ...
        reducer.join()
        summary = reducer.summary
    """

    def __init__(self, input_queue: Optional[queue.Queue], expected: int, zoom: int,
                 failure_policy: str = FailurePolicy.FAIL_FAST.value,
                 poll_interval: float = 1.0,
                 name: str = "StreamReducer"):
        """Initialize reducer.

        Parameters
        ----------
        input_queue : queue.Queue
            Single hand-off channel fed by every fetch worker.
        expected : int
            Number of items to consume (the enumerated tile count).
        zoom : int
            Zoom level of the tiles, carried into the summary.
        failure_policy : str, optional
            "fail_fast" (default) or "skip_tile".
        poll_interval : float, optional
            Seconds to block on the queue before re-checking the stop flag.
        name : str, optional
            Thread name for logging.
        """
        super().__init__(daemon=True, name=name)

        self.input_queue = input_queue
        self.expected = expected
        self.zoom = zoom
        self.failure_policy = FailurePolicy(failure_policy)
        self.poll_interval = poll_interval
        self._stop_event = threading.Event()

        self.global_ = GlobalAggregate()
        self.layers: Dict[str, LayerAggregate] = {}
        self.failures: List[TileFailure] = []
        self.consumed = 0
        self.error: Optional[Exception] = None
        self.summary: Optional[ProbeSummary] = None

    # ========================================================================
    # Thread control
    # ========================================================================

    def stop(self):
        """Signal reducer to stop consuming."""
        self._stop_event.set()

    def stopped(self) -> bool:
        """Check if reducer should stop."""
        return self._stop_event.is_set()

    @property
    def complete(self) -> bool:
        return self.consumed >= self.expected

    def run(self):
        """Main reducer loop (runs in thread).

        Notes
        -----
        Called automatically by thread.start(). Do not call directly.
        """
        logger.info("Reducer started, expecting %d tiles", self.expected)

        while not self.complete and not self.stopped():
            try:
                item = self.input_queue.get(timeout=self.poll_interval)
            except queue.Empty:
                continue

            try:
                self.consume(item)
            finally:
                self.input_queue.task_done()

        if self.complete and self.error is None:
            self.finalize()
            logger.info("Reducer finished: %d tiles, %d failures",
                        self.global_.tile_count, len(self.failures))
        else:
            logger.info("Reducer stopped after %d/%d items", self.consumed, self.expected)

    # ========================================================================
    # Reduction
    # ========================================================================

    def consume(self, item) -> None:
        """Count one queue item and dispatch it."""
        self.consumed += 1
        if isinstance(item, TileResult):
            if self.error is None:
                self.apply(item)
        elif isinstance(item, TileFailure):
            self.record_failure(item)
        else:
            raise ContractViolation(f"Reducer received unexpected item {type(item).__name__}")

        if self.consumed % 100 == 0:
            logger.debug("Reduced %d/%d", self.consumed, self.expected)

    def apply(self, result: TileResult) -> None:
        """Fold one tile result into the aggregate state."""
        if self.summary is not None:
            raise ContractViolation("Reducer already finalized; refusing further results")

        at = result.coordinate
        self.global_.observe(result.byte_size, result.total_features, at)

        for sample in result.layers:
            agg = self.layers.get(sample.name)
            if agg is None:
                self.layers[sample.name] = LayerAggregate.seed(sample.name, sample.feature_count, at)
            else:
                agg.observe(sample.feature_count, at)

    def record_failure(self, failure: TileFailure) -> None:
        if self.failure_policy is FailurePolicy.SKIP_TILE:
            logger.warning("Skipping tile %s: %s", failure.coordinate, failure.reason)
            self.failures.append(failure)
            return

        cancelled = isinstance(failure.error, FetchCancelled)
        if self.error is None or (isinstance(self.error, FetchCancelled) and not cancelled):
            if not cancelled:
                logger.error("Tile %s failed, aborting run: %s", failure.coordinate, failure.reason)
            self.error = failure.error

    def finalize(self) -> ProbeSummary:
        """Freeze the aggregate state into a ``ProbeSummary`` (once)."""
        if self.summary is None:
            self.summary = ProbeSummary.build(
                zoom=self.zoom,
                expected_tiles=self.expected,
                global_=copy.deepcopy(self.global_),
                layers=copy.deepcopy(self.layers),
                failures=list(self.failures),
            )
        return self.summary
