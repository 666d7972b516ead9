"""gitpromote type definitions.

This module exports all data model types used by the library.
"""

from gitpromote.types.pulls import (
    CommitStatus,
    PullRequest,
    PullRequestArguments,
    PullRequestInfo,
    PullRequestRequest,
)
from gitpromote.types.repos import GitRepositoryInfo, Repository

__all__ = [
    # Repository types
    "GitRepositoryInfo",
    "Repository",
    # Pull request types
    "PullRequestRequest",
    "PullRequestArguments",
    "PullRequest",
    "PullRequestInfo",
    "CommitStatus",
]
