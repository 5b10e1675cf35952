import queue

import pytest

from tests.helpers.fake_results import make_result


@pytest.fixture
def round_trip_results():
    """Three tiles with known extrema."""
    return [
        make_result(0, 0, 100, roads=5),
        make_result(1, 0, 300, roads=2),
        make_result(0, 1, 200, roads=7, water=3),
    ]


@pytest.fixture
def result_queue():
    return queue.Queue()
