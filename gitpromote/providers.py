"""
Git provider capability interfaces.

A provider is split by feature so that each implementation states exactly
what it supports. ``GitProvider.statuses`` is ``None`` for a provider with
no commit status API; code that needs statuses checks for that.
"""

from abc import ABC, abstractmethod

from gitpromote.types.pulls import CommitStatus, PullRequest, PullRequestArguments
from gitpromote.types.repos import Repository


class RepositoryService(ABC):
    """Repository lookup and forking."""

    @abstractmethod
    def get_repository(self, owner: str, name: str) -> Repository:
        """
        Get a repository.

        Raises:
            NotFoundError: If owner has no repository called name
        """

    @abstractmethod
    def fork_repository(
        self, original_org: str, name: str, destination_org: str = ""
    ) -> Repository:
        """Fork original_org/name; a blank destination_org forks to the current user."""


class PullRequestService(ABC):
    """Pull request lifecycle."""

    @abstractmethod
    def list_open_pull_requests(self, owner: str, repo: str) -> list[PullRequest]: ...

    @abstractmethod
    def create_pull_request(self, args: PullRequestArguments) -> PullRequest: ...

    @abstractmethod
    def update_pull_request(
        self, args: PullRequestArguments, number: int
    ) -> PullRequest: ...

    @abstractmethod
    def add_pr_comment(self, pr: PullRequest, body: str) -> None: ...

    @abstractmethod
    def update_pull_request_status(self, pr: PullRequest) -> PullRequest:
        """Return a fresh copy of pr with its merged/closed state and head SHA."""

    @abstractmethod
    def merge_pull_request(self, pr: PullRequest, message: str) -> None: ...


class CommitStatusService(ABC):
    """Commit statuses reported by CI and merge bots."""

    @abstractmethod
    def pull_request_last_commit_status(self, pr: PullRequest) -> str:
        """Combined status of the PR head: success, pending, error or failure."""

    @abstractmethod
    def list_commit_status(
        self, owner: str, repo: str, sha: str
    ) -> list[CommitStatus]: ...


class GitProvider(ABC):
    """A hosted git provider, exposed as one object per capability."""

    repos: RepositoryService
    pulls: PullRequestService
    statuses: CommitStatusService | None

    @abstractmethod
    def current_username(self) -> str:
        """Login of the user the provider is authenticated as."""

    @property
    def token(self) -> str | None:
        """Token used to push over https, if the provider has one."""
        return None
