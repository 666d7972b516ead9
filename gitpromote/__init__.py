"""gitpromote - record changes to GitOps environment repositories as pull requests."""

from gitpromote.client import GitHubProvider
from gitpromote.clock import Clock, SystemClock
from gitpromote.config import PromotionSettings, parse_duration
from gitpromote.context import PromotionContext
from gitpromote.coordinator import PullRequestCoordinator
from gitpromote.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ConfigurationError,
    ConflictError,
    ErrorKind,
    GitCommandError,
    GitProviderError,
    NotFoundError,
    PromotionError,
    RateLimitedError,
    ServerError,
    ValidationError,
)
from gitpromote.git import GitCLI, Gitter
from gitpromote.logging import configure_logging, get_logger
from gitpromote.promote import create_pull_request, promote
from gitpromote.providers import GitProvider
from gitpromote.transport import HTTPTransport, RetryConfig
from gitpromote.types import PullRequestInfo, PullRequestRequest
from gitpromote.watcher import MergeWatcher, WatchState

__version__ = "0.1.0"

__all__ = [
    "__version__",
    # Entry points
    "create_pull_request",
    "promote",
    "PromotionContext",
    "PromotionSettings",
    "PullRequestRequest",
    "PullRequestInfo",
    "PullRequestCoordinator",
    "MergeWatcher",
    "WatchState",
    "parse_duration",
    # Providers
    "GitProvider",
    "GitHubProvider",
    # Local git
    "Gitter",
    "GitCLI",
    # Time
    "Clock",
    "SystemClock",
    # Exceptions
    "PromotionError",
    "ErrorKind",
    "GitCommandError",
    "GitProviderError",
    "AuthenticationError",
    "AuthorizationError",
    "NotFoundError",
    "ConflictError",
    "RateLimitedError",
    "ValidationError",
    "ServerError",
    "ConfigurationError",
    # Transport
    "HTTPTransport",
    "RetryConfig",
    # Logging
    "configure_logging",
    "get_logger",
]
