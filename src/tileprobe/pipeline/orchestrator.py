"""Probe run orchestration.

Wires enumerator, fan-out scheduler and stream reducer together around a
single hand-off queue, and turns the outcome into a ``ProbeSummary`` or the
run's first fetch error.
"""

import logging
import queue
import threading
import time
from typing import Optional

import requests

from tileprobe.contracts import ContractViolation, FailurePolicy, assert_finalized
from tileprobe.pipeline.aggregate import ProbeSummary
from tileprobe.pipeline.reducer import StreamReducer
from tileprobe.pipeline.scheduler import FanOutScheduler
from tileprobe.schemas import InternalConfig
from tileprobe.tiles.enumerator import enumerate_tiles
from tileprobe.tiles.fetcher import TileFetcher, build_session

__all__ = ['ProbeOrchestrator']

logger = logging.getLogger(__name__)


class ProbeOrchestrator:
    """Runs one probe: enumerate, fetch everything, reduce, summarize.

    This is the main entry point for running ``tileprobe``. A run is a
    single pass over a finite tile range; there is no monitoring loop and
    nothing persists between runs.

    **Threads:**

    1. **Reducer thread** (started first): consumes exactly one item per
       enumerated coordinate from the hand-off queue and owns all aggregate
       state.

    2. **Fetch workers**: one per coordinate, launched by
       ``FanOutScheduler``; optionally capped by
       ``config.scheduler.max_concurrency``.

    **Failure policy:**

    - ``fail_fast`` (default): the first failed fetch cancels the fetches
      that have not started yet, and ``run()`` raises that ``FetchError``.
      No summary is produced.
    - ``skip_tile``: failed coordinates are listed in the summary and the
      statistics cover the remaining tiles.

    **Logging:** the root logger gets one console handler on stderr, at
    ``config.logging.level``.

    Example usage::

        from tileprobe.schemas import ParamConfig, resolve_config
        from tileprobe.pipeline.orchestrator import ProbeOrchestrator

        config = resolve_config(ParamConfig(), user_config, cli_config)
        summary = ProbeOrchestrator(config).run()
    """

    def __init__(self, config: InternalConfig, session: Optional[requests.Session] = None):
        """Initialize orchestrator.

        Parameters
        ----------
        config : InternalConfig
            Fully resolved runtime configuration.
        session : requests.Session, optional
            HTTP session shared by all fetches. Built from
            ``config.http`` when not given; injectable for testing.
        """
        if not isinstance(config, InternalConfig):
            raise TypeError(
                f"config must be InternalConfig, got {type(config).__name__}. "
                "Use resolve_config() to build it."
            )
        self.config = config
        self.session = session

        self.result_queue = queue.Queue()
        self.cancel_event = threading.Event()

        # created in run()
        self.tile_range = None
        self.reducer = None
        self.scheduler = None

    def _setup_logging(self):
        """Configure the root logger with a console handler."""
        log_level = getattr(logging, self.config.logging.level.upper(), logging.INFO)

        formatter = logging.Formatter(
            fmt='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )

        root = logging.getLogger()
        root.setLevel(log_level)
        for handler in root.handlers[:]:
            root.removeHandler(handler)

        ch = logging.StreamHandler()
        ch.setLevel(log_level)
        ch.setFormatter(formatter)
        root.addHandler(ch)

        logger.debug("Logging: level=%s", logging.getLevelName(log_level))

    def run(self) -> ProbeSummary:
        """Probe every tile of the configured range and return the statistics.

        Blocks until every fetch worker and the reducer have finished.

        Returns
        -------
        ProbeSummary
            Finalized run statistics.

        Raises
        ------
        FetchError
            Under ``fail_fast``, the first tile that failed.
        ContractViolation
            The reducer did not account for every enumerated tile.
        """
        self._setup_logging()

        probe = self.config.probe
        policy = FailurePolicy(self.config.scheduler.failure_policy)
        max_concurrency = self.config.scheduler.max_concurrency

        self.tile_range = enumerate_tiles(
            probe.longitude, probe.latitude, probe.zoom, probe.offset
        )
        logger.info(
            "Probing %s around (%.4f, %.4f): zoom %d, %d tiles",
            probe.url_template, probe.longitude, probe.latitude,
            self.tile_range.zoom, self.tile_range.count,
        )

        session = self.session
        if session is None:
            session = build_session(
                pool_size=max_concurrency or self.tile_range.count,
                user_agent=self.config.http.user_agent,
            )
        fetcher = TileFetcher.from_config(self.config, session=session)

        self.reducer = StreamReducer(
            self.result_queue,
            expected=self.tile_range.count,
            zoom=self.tile_range.zoom,
            failure_policy=policy.value,
        )
        self.scheduler = FanOutScheduler(
            fetcher,
            self.result_queue,
            max_concurrency=max_concurrency,
            cancel_event=self.cancel_event,
            cancel_on_failure=policy is FailurePolicy.FAIL_FAST,
        )

        start = time.time()
        self.reducer.start()
        try:
            self.scheduler.run(self.tile_range)
        except BaseException:
            # stop the reducer; it would otherwise wait for items never coming
            self.cancel_event.set()
            self.reducer.stop()
            raise
        finally:
            self.reducer.join()
            if self.session is None:
                session.close()

        logger.info("Run finished in %.2fs", time.time() - start)

        if self.reducer.error is not None:
            raise self.reducer.error

        summary = self.reducer.summary
        if summary is None:
            raise ContractViolation(
                f"Reducer ended after {self.reducer.consumed}/{self.tile_range.count} items "
                "without a summary"
            )

        assert_finalized(summary)
        return summary
