"""Commit statuses resource client."""

from typing import TYPE_CHECKING

from gitpromote.providers import CommitStatusService
from gitpromote.types.pulls import CommitStatus, PullRequest

if TYPE_CHECKING:
    from gitpromote.transport import HTTPTransport


class StatusesClient(CommitStatusService):
    """Client for commit status operations."""

    def __init__(self, transport: "HTTPTransport") -> None:
        """
        Initialize the statuses client.

        Args:
            transport: HTTP transport for making requests
        """
        self.transport = transport

    def pull_request_last_commit_status(self, pr: PullRequest) -> str:
        """
        Get the combined status of the last commit on a pull request.

        Args:
            pr: The pull request; its head SHA is looked up if not known

        Returns:
            "success", "pending", "error" or "failure"
        """
        sha = pr.last_commit_sha
        if not sha:
            data = self.transport.request(
                "GET", f"/repos/{pr.owner}/{pr.repo}/pulls/{pr.number}"
            )
            sha = (data.get("head") or {}).get("sha", "")
        response = self.transport.request(
            "GET", f"/repos/{pr.owner}/{pr.repo}/commits/{sha}/status"
        )
        return response.get("state", "pending")

    def list_commit_status(
        self, owner: str, repo: str, sha: str
    ) -> list[CommitStatus]:
        """
        List every status reported against a commit.

        Args:
            owner: Repository owner
            repo: Repository name
            sha: Commit SHA

        Returns:
            List of CommitStatus objects, newest first
        """
        response = self.transport.request(
            "GET", f"/repos/{owner}/{repo}/commits/{sha}/statuses"
        )
        return [
            CommitStatus(
                state=item.get("state", ""),
                context=item.get("context", ""),
                target_url=item.get("target_url"),
                description=item.get("description"),
            )
            for item in response or []
        ]
