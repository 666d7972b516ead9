"""
Pytest fixtures for gitpromote testing.

Provides common fixtures for testing code that runs promotions.
"""

from collections.abc import Generator

import pytest

from gitpromote.config import PromotionSettings
from gitpromote.context import PromotionContext
from gitpromote.logging import get_logger
from gitpromote.testing.mock import (
    FakeClock,
    FakeGitter,
    MockGitProvider,
    create_mock_pull_request,
    create_mock_repository,
)
from gitpromote.types.pulls import (
    PullRequest,
    PullRequestArguments,
    PullRequestInfo,
    PullRequestRequest,
)
from gitpromote.types.repos import GitRepositoryInfo, Repository

# ============================================================================
# Mock Provider Fixtures
# ============================================================================


@pytest.fixture
def mock_username() -> str:
    """Provide the login of the acting user."""
    return "test-user"


@pytest.fixture
def mock_provider(mock_username: str) -> Generator[MockGitProvider, None, None]:
    """
    Provide a MockGitProvider for testing.

    Example:
        ```python
        def test_my_feature(mock_provider):
            mock_provider.statuses.configure_last_commit_status("success")
            result = my_function(mock_provider)
            assert mock_provider.was_called("pulls.merge_pull_request")
        ```
    """
    provider = MockGitProvider(username=mock_username)
    yield provider
    provider.reset()


@pytest.fixture
def fake_gitter() -> FakeGitter:
    """Provide a FakeGitter that reports changes after every edit."""
    return FakeGitter()


@pytest.fixture
def fake_clock() -> FakeClock:
    """Provide a FakeClock starting at zero."""
    return FakeClock()


# ============================================================================
# Context Fixtures
# ============================================================================


@pytest.fixture
def promotion_settings() -> PromotionSettings:
    """Provide settings with a short timeout and poll interval."""
    return PromotionSettings(timeout=60.0, poll_interval=10.0)


@pytest.fixture
def promotion_context(
    mock_provider: MockGitProvider,
    fake_gitter: FakeGitter,
    fake_clock: FakeClock,
    promotion_settings: PromotionSettings,
) -> PromotionContext:
    """
    Provide a PromotionContext wired to the mock provider, fake git and clock.

    Example:
        ```python
        def test_promotion(promotion_context, sample_request):
            info = create_pull_request(promotion_context, sample_request, lambda dir: None)
            assert info.created
        ```
    """
    return PromotionContext(
        provider=mock_provider,
        gitter=fake_gitter,
        settings=promotion_settings,
        clock=fake_clock,
        logger=get_logger(),
    )


# ============================================================================
# Sample Data Fixtures
# ============================================================================


@pytest.fixture
def sample_repository() -> Repository:
    """Provide a sample environment repository owned by an organisation."""
    return create_mock_repository(owner="acme", name="environment-staging")


@pytest.fixture
def sample_request(tmp_path) -> PullRequestRequest:
    """Provide a request against the sample repository."""
    return PullRequestRequest(
        dir=str(tmp_path / "environment-staging"),
        git_url="https://github.com/acme/environment-staging.git",
        branch_name="delete-myapp",
        title="Delete myapp",
        body="Remove myapp from staging",
    )


@pytest.fixture
def sample_pull_request() -> PullRequest:
    """Provide a sample open pull request."""
    return create_mock_pull_request(
        number=42,
        owner="acme",
        repo="environment-staging",
        author="test-user",
        title="Delete myapp",
        head_ref="test-user:delete-myapp",
    )


@pytest.fixture
def sample_pull_request_info(sample_pull_request: PullRequest) -> PullRequestInfo:
    """Provide a PullRequestInfo wrapping the sample pull request."""
    return PullRequestInfo(
        pull_request=sample_pull_request,
        arguments=PullRequestArguments(
            repository=GitRepositoryInfo(
                host="github.com",
                organisation="acme",
                name="environment-staging",
                url="https://github.com/acme/environment-staging.git",
            ),
            title=sample_pull_request.title,
            body="",
            head=sample_pull_request.head_ref,
            base="master",
        ),
    )


@pytest.fixture
def mock_provider_with_repo(
    mock_provider: MockGitProvider, sample_repository: Repository
) -> MockGitProvider:
    """Provide a MockGitProvider that knows the sample repository."""
    mock_provider.repos.add_repository(sample_repository)
    return mock_provider
