"""Root-level pytest fixtures for the tileprobe test suite.

Provides shared configuration fixtures following the Pydantic-based
architecture, plus fake HTTP plumbing so no test touches the network.
"""

import logging

import pytest

from tileprobe.schemas import ParamConfig, UserConfig, resolve_config
from tests.helpers.fake_http import FakeSession, encode_tile

TEMPLATE = "https://tiles.test/v1/{z}/{x}/{y}.pbf"


# =============================================================================
# Configuration Fixtures (Pydantic-based)
# =============================================================================

@pytest.fixture
def param_config():
    """Expert configuration with all defaults.

    The URL template has no default, so configs built from this alone do
    not resolve; use ``internal_config`` or ``make_config``.
    """
    return ParamConfig()


@pytest.fixture
def internal_config(param_config):
    """Fully validated runtime configuration pointing at the test template.

    Examples
    --------
    >>> def test_fetcher_zoom(internal_config):
    ...     fetcher = TileFetcher.from_config(internal_config)
    ...     assert fetcher.zoom == 8
    """
    return resolve_config(param_config, {"URL": TEMPLATE}, None)


@pytest.fixture
def make_config(param_config):
    """Factory fixture for creating custom test configs.

    Returns a callable that accepts UserConfig-compatible kwargs
    (upper-case aliases or field names). The test template is used
    unless ``URL`` is given.

    Examples
    --------
    >>> def test_small_grid(make_config):
    ...     config = make_config(ZOOM=3, OFFSET=1)
    ...     assert config.probe.target_zoom == 4
    """
    def _make(**user_overrides):
        user_overrides.setdefault("URL", TEMPLATE)
        user = UserConfig(**user_overrides)
        return resolve_config(param_config, user, None)

    return _make


# =============================================================================
# Payload / HTTP Fixtures
# =============================================================================

@pytest.fixture
def mvt_payload():
    """Factory: ``mvt_payload(roads=5, water=3)`` -> encoded MVT bytes."""
    def _make(**layers):
        return encode_tile(layers)
    return _make


@pytest.fixture
def fake_session():
    """Empty FakeSession; add entries to ``.routes`` or set ``.default``."""
    return FakeSession()


@pytest.fixture(autouse=True)
def restore_root_logging():
    """Drop the console handler the orchestrator installs on the root logger."""
    root = logging.getLogger()
    level = root.level
    yield
    for handler in root.handlers[:]:
        if type(handler) is logging.StreamHandler:
            root.removeHandler(handler)
    root.setLevel(level)
