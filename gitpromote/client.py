"""
GitHub provider.

Provides the concrete git provider used by the promotion engine: one
authenticated HTTP transport shared by per-capability resource clients.
"""

import os
from typing import Any

from gitpromote.clients import PullsClient, ReposClient, StatusesClient
from gitpromote.exceptions import ConfigurationError
from gitpromote.providers import GitProvider
from gitpromote.transport import HTTPTransport, RetryConfig


class GitHubProvider(GitProvider):
    """
    Git provider backed by the GitHub REST API.

    Example:
        ```python
        from gitpromote.client import GitHubProvider

        provider = GitHubProvider(token="ghp_...")

        # Or create from environment variables
        provider = GitHubProvider.from_env()

        repo = provider.repos.get_repository("acme", "environment-staging")
        prs = provider.pulls.list_open_pull_requests("acme", "environment-staging")
        ```
    """

    DEFAULT_BASE_URL = "https://api.github.com"
    DEFAULT_TIMEOUT = 30.0

    def __init__(
        self,
        token: str,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT,
        retry_config: RetryConfig | None = None,
        username: str | None = None,
    ) -> None:
        """
        Initialize the GitHub provider.

        Args:
            token: Personal access token or app token
            base_url: Base URL for API requests (default: https://api.github.com)
            timeout: Request timeout in seconds (default: 30.0)
            retry_config: Configuration for retry behavior (optional)
            username: Login of the token's user; looked up on first use if omitted
        """
        if not token:
            raise ConfigurationError("a GitHub token is required")

        self.base_url = base_url
        self.timeout = timeout
        self._token = token
        self._username = username

        self._transport = HTTPTransport(
            base_url=base_url,
            token=token,
            timeout=timeout,
            retry_config=retry_config,
        )

        self.repos = ReposClient(self._transport)
        self.pulls = PullsClient(self._transport)
        self.statuses = StatusesClient(self._transport)

    @classmethod
    def from_env(
        cls,
        timeout: float = DEFAULT_TIMEOUT,
        retry_config: RetryConfig | None = None,
    ) -> "GitHubProvider":
        """
        Create a provider from environment variables.

        Environment variables:
            GITHUB_TOKEN: API token (required)
            GITHUB_API_URL: Base URL for the API (optional, default: https://api.github.com)
            GITHUB_USER: Login of the token's user (optional)

        Raises:
            ConfigurationError: If GITHUB_TOKEN is not set
        """
        token = os.environ.get("GITHUB_TOKEN")
        if not token:
            raise ConfigurationError("GITHUB_TOKEN environment variable not set")

        return cls(
            token=token,
            base_url=os.environ.get("GITHUB_API_URL", cls.DEFAULT_BASE_URL),
            timeout=timeout,
            retry_config=retry_config,
            username=os.environ.get("GITHUB_USER") or None,
        )

    def current_username(self) -> str:
        """Login of the authenticated user."""
        if self._username is None:
            response = self._transport.request("GET", "/user")
            self._username = (response or {}).get("login", "")
        return self._username

    @property
    def token(self) -> str | None:
        return self._token

    @property
    def transport(self) -> HTTPTransport:
        """Get the underlying HTTP transport (for advanced use cases)."""
        return self._transport

    def close(self) -> None:
        """Close the provider and release resources."""
        self._transport.close()

    def __enter__(self) -> "GitHubProvider":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()
