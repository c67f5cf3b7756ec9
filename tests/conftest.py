"""
Global pytest configuration for tokcore tests.

This module provides:
- Custom marker registration
- Fault handling for hung or crashed worker threads

Shared fixtures live in tests/fixtures.py and are registered from the root
conftest.py so every test directory can use them.

=============================================================================
Skip vs Xfail Policy
=============================================================================

pytest.skip(): Environmental issues, not tokcore bugs (e.g. a filesystem
that ignores permission bits).

pytest.xfail(): Known tokcore limitations we want to track. XPASS means the
limitation is gone and the test should become a normal assertion.
"""

import faulthandler

# Enable faulthandler so a deadlocked concurrency test dumps its stacks
faulthandler.enable()


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line("markers", "concurrency: marks multi-threaded tests")
