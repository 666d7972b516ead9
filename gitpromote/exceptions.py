"""gitpromote exception classes."""

from enum import Enum
from typing import Any


class GitProviderError(Exception):
    """Base exception for all git provider API errors."""

    def __init__(
        self, code: str, message: str, request_id: str | None = None
    ) -> None:
        self.code = code
        self.message = message
        self.request_id = request_id
        super().__init__(f"[{code}] {message}")


class ConfigurationError(GitProviderError):
    """Raised when configuration is invalid or missing."""

    def __init__(self, message: str) -> None:
        super().__init__("CONFIGURATION_ERROR", message)


class AuthenticationError(GitProviderError):
    """Raised when the provider rejects the credentials."""

    pass


class AuthorizationError(GitProviderError):
    """Raised when access is denied."""

    pass


class NotFoundError(GitProviderError):
    """Raised when a resource is not found."""

    pass


class ConflictError(GitProviderError):
    """Raised on conflicts (branch already exists, merge conflicts, etc.)."""

    pass


class RateLimitedError(GitProviderError):
    """Raised when rate limited."""

    def __init__(
        self,
        code: str,
        message: str,
        retry_after: int,
        request_id: str | None = None,
    ) -> None:
        super().__init__(code, message, request_id)
        self.retry_after = retry_after


class ValidationError(GitProviderError):
    """Raised on validation errors (e.g. a PR that is not mergeable)."""

    pass


class ServerError(GitProviderError):
    """Raised on server errors (5xx)."""

    pass


class GitCommandError(Exception):
    """Raised when a local git command exits with a non-zero status."""

    def __init__(self, args: list[str], returncode: int, stderr: str) -> None:
        self.command = args
        self.returncode = returncode
        self.stderr = stderr.strip()
        super().__init__(
            f"git {' '.join(args)} failed with exit status {returncode}: {self.stderr}"
        )


class ErrorKind(str, Enum):
    """What part of a promotion failed."""

    SETUP = "setup"
    CHANGE = "change"
    PUSH = "push"
    PULL_REQUEST = "pull_request"
    MERGE_STATUS = "merge_status"
    MERGE_CLOSED = "merge_closed"
    MERGE_FAILED_STATUS = "merge_failed_status"
    MERGE_TIMEOUT = "merge_timeout"


class PromotionError(Exception):
    """
    Raised when a promotion cannot complete.

    Callers branch on ``kind`` rather than matching message text. Anything
    useful for fixing the problem by hand (URLs, repository, branch, commit
    SHA) is kept in ``context``; the underlying error is chained as
    ``__cause__``.
    """

    def __init__(self, kind: ErrorKind, message: str, **context: Any) -> None:
        self.kind = kind
        self.message = message
        self.context = context
        super().__init__(message)

    def __repr__(self) -> str:
        return f"PromotionError(kind={self.kind.value!r}, message={self.message!r})"
