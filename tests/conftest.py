"""Root-level pytest fixtures for the tissuegraph test suite.

Provides shared configuration fixtures following the Pydantic-based
architecture, plus small synthetic tilings.
"""

import logging

import pytest

from tissuegraph.graphs import build_spatio_temporal_graph
from tissuegraph.schemas import ParamConfig, UserConfig, resolve_config

from tests.helpers.tiling import grid_polygons, t1_series


# =============================================================================
# Configuration Fixtures (Pydantic-based)
# =============================================================================

@pytest.fixture
def param_config():
    """Expert configuration with all defaults."""
    return ParamConfig()


@pytest.fixture
def internal_config(param_config):
    """Fully validated runtime configuration (no overrides)."""
    return resolve_config(param_config, None, None)


@pytest.fixture
def make_config(param_config):
    """Factory fixture for creating custom test configs.

    Returns a callable that accepts UserConfig-compatible kwargs.

    Examples
    --------
    >>> def test_custom_link_range(make_config):
    ...     config = make_config(LINK_RANGE=2)
    ...     assert config.tracking.link_range == 2
    """
    def _make(**user_overrides):
        if user_overrides:
            return resolve_config(param_config, UserConfig(**user_overrides), None)
        return resolve_config(param_config, None, None)

    return _make


# =============================================================================
# Graph Fixtures
# =============================================================================

@pytest.fixture
def static_grid_graph():
    """Three identical frames of a 3x3 grid."""
    return build_spatio_temporal_graph([grid_polygons(3, 3) for _ in range(3)])


@pytest.fixture
def t1_graph():
    """Four frames with one neighbour exchange between frames 1 and 2."""
    return build_spatio_temporal_graph(t1_series())


# =============================================================================
# Logging
# =============================================================================

@pytest.fixture
def restore_logging():
    """Restore root logger handlers changed by setup_logging."""
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield
    for handler in root.handlers[:]:
        if handler not in handlers:
            root.removeHandler(handler)
            handler.close()
    for handler in handlers:
        if handler not in root.handlers:
            root.addHandler(handler)
    root.setLevel(level)
