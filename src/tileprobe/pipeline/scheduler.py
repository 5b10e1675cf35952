"""Fan-out of tile fetches: one worker thread per coordinate.

Every coordinate resolves to exactly one item on the shared result queue:
its ``TileResult`` or a ``TileFailure``. Workers never touch aggregate state.
"""

import logging
import queue
import threading
from typing import Optional

from tileprobe.tiles.errors import FetchCancelled, FetchError
from tileprobe.tiles.fetcher import TileFetcher
from tileprobe.tiles.models import TileCoordinate, TileFailure, TileRange

__all__ = ['FanOutScheduler', 'TileFetchWorker']

logger = logging.getLogger(__name__)


class TileFetchWorker(threading.Thread):
    """Fetches a single tile and hands the outcome to the result queue.

    Checks the cancellation event before issuing its request: once another
    fetch has failed under fail-fast, the worker reports ``FetchCancelled``
    instead of touching the network.

    A worker still in flight when the run is cancelled can be abandoned:
    its coordinate is then resolved as ``FetchCancelled`` right away and
    whatever the request eventually returns is dropped.
    """

    def __init__(self, fetcher: TileFetcher, coordinate: TileCoordinate,
                 result_queue: queue.Queue, scheduler: "FanOutScheduler"):
        super().__init__(daemon=True, name=f"Fetch-{coordinate.x}-{coordinate.y}")
        self.fetcher = fetcher
        self.coordinate = coordinate
        self.url = fetcher.url_for(coordinate)
        self.result_queue = result_queue
        self.scheduler = scheduler
        self._resolve_lock = threading.Lock()
        self._resolved = False

    def resolve(self, item) -> bool:
        """Put ``item`` on the queue unless this coordinate already has an outcome."""
        with self._resolve_lock:
            if self._resolved:
                return False
            self._resolved = True
        self.result_queue.put(item)
        return True

    def abandon(self) -> bool:
        """Resolve as cancelled without waiting for the request to return."""
        return self.resolve(self.scheduler.cancelled_failure(self.coordinate, self.url))

    def run(self):
        try:
            if self.scheduler.cancelled():
                self.abandon()
                return
            result = self.fetcher.fetch(self.coordinate)
        except Exception as e:
            failure = TileFailure(self.coordinate, self.url, e)
            # the failure goes on the queue before cancellation is signalled
            if self.resolve(failure):
                if not isinstance(e, FetchCancelled):
                    logger.debug("Fetch failed for %s", self.coordinate, exc_info=True)
                self.scheduler.report_failure(failure)
        else:
            if not self.resolve(result):
                logger.debug("Dropping late result for abandoned tile %s", self.coordinate)
        finally:
            self.scheduler.release_slot()


class FanOutScheduler:
    """Launches one fetch per coordinate and waits for all of them.

    **Concurrency:** with ``max_concurrency=None`` every worker is started at
    once (unbounded fan-out, one thread per tile). With an integer, launches
    are gated by a bounded semaphore so at most that many fetches are in
    flight.

    **Cancellation:** ``cancel_event`` is the run's cancellation token. With
    ``cancel_on_failure`` the first failure sets it. Once it is set:

    - coordinates not yet launched, and workers that have not issued their
      request, resolve as ``FetchCancelled`` without network traffic;
    - workers still waiting on the server are abandoned, so ``run`` returns
      within ``poll_interval`` instead of waiting out the HTTP timeout. The
      abandoned daemon threads finish in the background and their outcome
      is discarded.

    **Thread exhaustion:** if the interpreter cannot start another thread,
    that coordinate fails with a ``FetchError``, the run is cancelled and
    the remaining coordinates resolve as ``FetchCancelled``.

    **Accounting:** every coordinate yields exactly one queue item, so the
    reducer always receives ``tile_range.count`` items.

    Example usage (typically called by orchestrator)::

        scheduler = FanOutScheduler(fetcher, result_queue, max_concurrency=32)
        launched = scheduler.run(tile_range)  # blocks until every tile is resolved
    """

    def __init__(self, fetcher: TileFetcher, result_queue: queue.Queue,
                 max_concurrency: Optional[int] = None,
                 cancel_event: Optional[threading.Event] = None,
                 cancel_on_failure: bool = True,
                 poll_interval: float = 0.1):
        """Initialize scheduler.

        Parameters
        ----------
        fetcher : TileFetcher
            Shared, stateless fetcher used by every worker.
        result_queue : queue.Queue
            Hand-off channel consumed by the reducer.
        max_concurrency : int, optional
            Cap on concurrent fetches. None means one thread per tile at once.
        cancel_event : threading.Event, optional
            Cancellation token; created if not given.
        cancel_on_failure : bool, optional
            Set the cancellation token on the first failure (fail-fast).
        poll_interval : float, optional
            Seconds between cancellation checks while waiting on workers
            or for a free slot.
        """
        if max_concurrency is not None and max_concurrency < 1:
            raise ValueError(f"max_concurrency must be >= 1, got {max_concurrency}")

        self.fetcher = fetcher
        self.result_queue = result_queue
        self.max_concurrency = max_concurrency
        self.cancel_event = cancel_event or threading.Event()
        self.cancel_on_failure = cancel_on_failure
        self.poll_interval = poll_interval

        self._slots = threading.BoundedSemaphore(max_concurrency) if max_concurrency else None
        self._failure_lock = threading.Lock()
        self.first_failure: Optional[TileFailure] = None
        self.failure_count = 0
        self.abandoned_count = 0
        self.workers = []

    # ========================================================================
    # Cancellation
    # ========================================================================

    def cancel(self):
        """Ask every pending fetch to stand down."""
        self.cancel_event.set()

    def cancelled(self) -> bool:
        return self.cancel_event.is_set()

    def cancelled_failure(self, coordinate: TileCoordinate, url: Optional[str] = None) -> TileFailure:
        url = url or self.fetcher.url_for(coordinate)
        return TileFailure(coordinate, url, FetchCancelled("run cancelled", coordinate, url))

    def report_failure(self, failure: TileFailure) -> None:
        """Record a failure already on the queue; cancel the run if fail-fast."""
        with self._failure_lock:
            self.failure_count += 1
            if self.first_failure is None and not isinstance(failure.error, FetchCancelled):
                self.first_failure = failure
        if self.cancel_on_failure and not isinstance(failure.error, FetchCancelled):
            self.cancel()

    def release_slot(self) -> None:
        if self._slots is not None:
            self._slots.release()

    def _acquire_slot(self) -> bool:
        """Wait for a free slot; False if the run is cancelled meanwhile."""
        if self.cancelled():
            return False
        if self._slots is None:
            return True
        while not self._slots.acquire(timeout=self.poll_interval):
            if self.cancelled():
                return False
        if self.cancelled():
            self._slots.release()
            return False
        return True

    # ========================================================================
    # Fan-out
    # ========================================================================

    def run(self, tile_range: TileRange) -> int:
        """Launch one worker per coordinate and wait until every tile is resolved.

        Returns
        -------
        int
            Number of worker threads started (coordinates resolved as cancelled
            before launch are not counted).
        """
        logger.info(
            "Fetching %d tiles at z%d (%s)",
            tile_range.count, tile_range.zoom,
            f"max {self.max_concurrency} concurrent" if self.max_concurrency else "unbounded",
        )

        self.workers = []
        for coordinate in tile_range:
            if not self._acquire_slot():
                self.result_queue.put(self.cancelled_failure(coordinate))
                continue

            worker = TileFetchWorker(self.fetcher, coordinate, self.result_queue, self)
            try:
                worker.start()
            except RuntimeError as e:
                self.release_slot()
                self._thread_start_failed(worker, e)
                continue
            self.workers.append(worker)

        self._wait_for_workers()

        logger.info("All fetches finished: %d launched, %d failed, %d abandoned",
                    len(self.workers), self.failure_count, self.abandoned_count)
        return len(self.workers)

    def _thread_start_failed(self, worker: TileFetchWorker, error: RuntimeError):
        logger.error("Cannot start fetch thread for %s after %d threads: %s",
                     worker.coordinate, len(self.workers), error)
        failure = TileFailure(
            worker.coordinate, worker.url,
            FetchError(f"could not start fetch thread: {error}", worker.coordinate, worker.url),
        )
        worker.resolve(failure)
        with self._failure_lock:
            self.failure_count += 1
            if self.first_failure is None:
                self.first_failure = failure
        # no more threads can be had; stop launching regardless of policy
        self.cancel()

    def _wait_for_workers(self):
        pending = list(self.workers)
        while pending:
            pending[0].join(timeout=self.poll_interval)
            pending = [w for w in pending if w.is_alive()]
            if pending and self.cancelled():
                for worker in pending:
                    if worker.abandon():
                        self.abandoned_count += 1
                logger.info("Run cancelled; abandoned %d in-flight fetches", self.abandoned_count)
                return
