"""gitpromote testing utilities.

Provides a mock git provider, a fake git driver, a fake clock and fixtures
for testing code that runs promotions.
"""

from gitpromote.testing.mock import (
    FakeClock,
    FakeGitter,
    MockCall,
    MockGitProvider,
    MockResponse,
    create_mock_pull_request,
    create_mock_repository,
)

__all__ = [
    # Mock provider
    "MockGitProvider",
    "MockCall",
    "MockResponse",
    # Fakes
    "FakeGitter",
    "FakeClock",
    # Helper functions
    "create_mock_repository",
    "create_mock_pull_request",
]
