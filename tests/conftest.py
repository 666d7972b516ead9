"""Shared fixtures for the gitpromote test suite."""

from gitpromote.testing.conftest import (  # noqa: F401
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
