"""
Pytest plugin for gitpromote testing fixtures.

This module re-exports all fixtures from fixtures.py so they can be
automatically discovered by pytest when this package is installed.

To use these fixtures in your tests, add this to your conftest.py:

    pytest_plugins = ["gitpromote.testing.conftest"]

Or import the fixtures directly:

    from gitpromote.testing.fixtures import mock_provider, promotion_context
"""

# Re-export all fixtures for pytest auto-discovery
from gitpromote.testing.fixtures import (
    fake_clock,
    fake_gitter,
    mock_provider,
    mock_provider_with_repo,
    mock_username,
    promotion_context,
    promotion_settings,
    sample_pull_request,
    sample_pull_request_info,
    sample_repository,
    sample_request,
)

__all__ = [
    "mock_provider",
    "mock_username",
    "mock_provider_with_repo",
    "fake_gitter",
    "fake_clock",
    "promotion_settings",
    "promotion_context",
    "sample_repository",
    "sample_request",
    "sample_pull_request",
    "sample_pull_request_info",
]
