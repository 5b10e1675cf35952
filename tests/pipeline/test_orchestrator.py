import logging
import re

import pytest

from tileprobe.pipeline.aggregate import ProbeSummary
from tileprobe.pipeline.orchestrator import ProbeOrchestrator
from tileprobe.tiles.errors import TransportError
from tileprobe.tiles.models import TileCoordinate
from tests.helpers.fake_http import FakeResponse, FakeSession, tile_response

pytestmark = [pytest.mark.unit, pytest.mark.pipeline]

# lon 120 / lat 31 at z1 is tile (1, 0); one level down that is x 2..3, y 0..1
SMALL_GRID = dict(LON=120.0, LAT=31.0, ZOOM=1, OFFSET=1)
URL_RE = re.compile(r"/v1/(\d+)/(\d+)/(\d+)\.pbf$")


def grid_session(gzipped=True):
    """Every tile carries ``x`` roads and ``y`` water features (layers with 0 are left out)."""
    def respond(url):
        z, x, y = (int(v) for v in URL_RE.search(url).groups())
        layers = {name: n for name, n in (("roads", x), ("water", y)) if n}
        return tile_response(layers, gzipped=gzipped)
    return FakeSession(default=respond)


@pytest.fixture
def small_config(make_config):
    return make_config(**SMALL_GRID)


def test_orchestrator_requires_internal_config():
    with pytest.raises(TypeError, match="InternalConfig"):
        ProbeOrchestrator({"probe": {}})


def test_full_run_reduces_every_tile(small_config):
    session = grid_session()
    summary = ProbeOrchestrator(small_config, session=session).run()

    assert isinstance(summary, ProbeSummary)
    assert summary.zoom == 2
    assert summary.expected_tiles == 4
    assert summary.global_.tile_count == 4
    assert summary.failures == ()
    assert len(session.calls) == 4
    assert all(c["headers"]["Accept-Encoding"] == "gzip" for c in session.calls)

    # roads = x on every tile (2 or 3), water = y only where y == 1
    roads = summary.layer("roads")
    assert roads.covered_tile_count == 4
    assert roads.total == 2 + 2 + 3 + 3
    assert (roads.min.value, roads.max.value) == (2, 3)

    water = summary.layer("water")
    assert water.covered_tile_count == 2
    assert water.covered_tile_count <= summary.global_.tile_count
    assert summary.global_.total_features == roads.total + water.total


def test_injected_session_is_left_open(small_config):
    session = grid_session()
    ProbeOrchestrator(small_config, session=session).run()
    assert session.closed is False


def test_run_without_compression(make_config):
    config = make_config(GZIP=False, **SMALL_GRID)
    session = grid_session(gzipped=False)

    summary = ProbeOrchestrator(config, session=session).run()

    assert summary.global_.tile_count == 4
    assert all(c["headers"]["Accept-Encoding"] == "identity" for c in session.calls)


def test_bounded_run(make_config):
    config = make_config(MAX_CONCURRENCY=1, **SMALL_GRID)
    summary = ProbeOrchestrator(config, session=grid_session()).run()
    assert summary.global_.tile_count == 4


def test_single_failure_aborts_run_under_fail_fast(small_config):
    session = grid_session()
    bad_url = "https://tiles.test/v1/2/3/1.pbf"
    session.routes[bad_url] = FakeResponse(status_code=500, reason="Internal Server Error")

    with pytest.raises(TransportError, match="HTTP 500") as exc:
        ProbeOrchestrator(small_config, session=session).run()

    assert exc.value.coordinate == TileCoordinate(3, 1)
    assert exc.value.url == bad_url


def test_skip_tile_lists_failure(make_config):
    config = make_config(ON_ERROR="skip_tile", **SMALL_GRID)
    session = grid_session()
    bad_url = "https://tiles.test/v1/2/2/0.pbf"
    session.routes[bad_url] = FakeResponse(status_code=404, reason="Not Found")

    summary = ProbeOrchestrator(config, session=session).run()

    assert summary.global_.tile_count == 3
    assert len(summary.failures) == 1
    failure = summary.failures[0]
    assert failure.coordinate == TileCoordinate(2, 0)
    assert failure.url == bad_url
    assert isinstance(failure.error, TransportError)
    assert len(session.calls) == 4


def test_logging_configured_from_config(make_config):
    config = make_config(LOG_LEVEL="debug", **SMALL_GRID)
    ProbeOrchestrator(config, session=grid_session()).run()

    root = logging.getLogger()
    assert root.level == logging.DEBUG
    assert len(root.handlers) == 1
    assert isinstance(root.handlers[0], logging.StreamHandler)
