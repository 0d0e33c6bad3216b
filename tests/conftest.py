"""Test configuration for pytest.

This module imports fixtures that should be available to all tests.
"""

# Import fixtures
from tests.fixtures.common import (  # noqa
    activity_engine,
    analyzer,
    basic_quotes,
    clock,
    engine,
    evaluation_cache,
    monitor,
    signal_provider,
    swap_guard,
    thresholds,
    ultra_quotes,
)
