"""Root-level pytest fixtures for the imgparams test suite.

Provides shared configuration fixtures following the Pydantic-based
architecture. Tests use these fixtures instead of building raw dict configs.
"""

import pytest

from imgparams.schemas import (
    ParamConfig,
    UserConfig,
    ProcessingContext,
    resolve_config,
)
from imgparams.pipeline import ParameterHandler, ParameterProcessor


# =============================================================================
# Configuration Fixtures (Pydantic-based)
# =============================================================================

@pytest.fixture
def param_config():
    """Expert configuration with all defaults."""
    return ParamConfig()


@pytest.fixture
def internal_config(param_config):
    """Fully validated runtime configuration (no overrides).

    Examples
    --------
    >>> def test_priorities(internal_config):
    ...     assert internal_config.priorities.path == 60
    """
    return resolve_config(param_config, None, None)


@pytest.fixture
def make_config(param_config):
    """Factory fixture for creating custom test configs.

    Returns a callable that accepts UserConfig-compatible kwargs.

    Examples
    --------
    >>> def test_offset(make_config):
    ...     config = make_config(OVERLAY_OFFSET=10)
    ...     assert config.legacy.default_overlay_offset == 10
    """
    def _make(**user_overrides):
        """Create InternalConfig with user overrides."""
        if user_overrides:
            user = UserConfig(**user_overrides)
            return resolve_config(param_config, user, None)
        return resolve_config(param_config, None, None)

    return _make


# =============================================================================
# Pipeline Fixtures
# =============================================================================

@pytest.fixture
def handler(internal_config):
    """ParameterHandler with default configuration."""
    return ParameterHandler(internal_config)


@pytest.fixture
def processor(internal_config):
    """ParameterProcessor with default configuration."""
    return ParameterProcessor(internal_config)


@pytest.fixture
def context():
    """Context with advanced features disabled and no dimensions."""
    return ProcessingContext()


@pytest.fixture
def advanced_context():
    """Context with advanced features enabled and no dimensions."""
    return ProcessingContext(advanced_features=True)


@pytest.fixture
def resolve(handler):
    """Resolve a URL and return only the canonical options.

    Keyword arguments are passed to ProcessingContext.

    Examples
    --------
    >>> def test_width(resolve):
    ...     assert resolve("/a.jpg?width=800")["width"] == 800
    """
    def _resolve(url, **context_kwargs):
        return handler.resolve(url, ProcessingContext(**context_kwargs)).options

    return _resolve
