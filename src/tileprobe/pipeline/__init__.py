"""Pipeline modules.

- orchestrator: Main run controller
- scheduler: Fan-out of fetch worker threads
- reducer: Single-consumer stream reduction thread
- aggregate: Running statistics and the finalized summary
"""

from tileprobe.pipeline.orchestrator import ProbeOrchestrator
from tileprobe.pipeline.scheduler import FanOutScheduler, TileFetchWorker
from tileprobe.pipeline.reducer import StreamReducer
from tileprobe.pipeline.aggregate import ProbeSummary

__all__ = [
    "ProbeOrchestrator",
    "FanOutScheduler",
    "TileFetchWorker",
    "StreamReducer",
    "ProbeSummary",
]
