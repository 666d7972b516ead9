"""Pull request-related data models."""

from dataclasses import dataclass

from gitpromote.types.repos import GitRepositoryInfo


@dataclass
class PullRequestRequest:
    """
    What the caller wants recorded in an environment repository.

    The title doubles as the identity of the logical change: a later request
    with the same title (from the same user) updates the PR opened by an
    earlier one instead of opening a second PR.
    """

    dir: str
    git_url: str
    branch_name: str
    title: str
    body: str = ""
    base: str = "master"
    commit_message: str | None = None

    @property
    def message(self) -> str:
        return self.commit_message or self.title


@dataclass
class PullRequestArguments:
    """Arguments used to create or update a pull request."""

    repository: GitRepositoryInfo
    title: str
    body: str
    head: str
    base: str

    def __str__(self) -> str:
        return (
            f"{self.repository.full_name} head={self.head} base={self.base} "
            f"title={self.title!r}"
        )


@dataclass
class PullRequest:
    """Pull request information."""

    number: int
    url: str
    owner: str
    repo: str
    author: str
    title: str
    body: str = ""
    head_ref: str = ""
    head_owner: str = ""
    last_commit_sha: str = ""
    state: str = "open"  # "open" or "closed"
    merged: bool = False
    mergeable: bool | None = None

    def is_closed(self) -> bool:
        return self.state == "closed"


@dataclass
class CommitStatus:
    """A single status reported against a commit."""

    state: str  # "success", "pending", "error", "failure"
    context: str = ""
    target_url: str | None = None
    description: str | None = None


@dataclass
class PullRequestInfo:
    """The pull request a promotion produced, and how it got there."""

    pull_request: PullRequest
    arguments: PullRequestArguments
    created: bool = True
