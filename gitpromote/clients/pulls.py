"""Pull requests resource client."""

from typing import TYPE_CHECKING, Any

from gitpromote.providers import PullRequestService
from gitpromote.types.pulls import PullRequest, PullRequestArguments

if TYPE_CHECKING:
    from gitpromote.transport import HTTPTransport


class PullsClient(PullRequestService):
    """Client for pull request operations."""

    PAGE_SIZE = 100

    def __init__(self, transport: "HTTPTransport") -> None:
        """
        Initialize the pulls client.

        Args:
            transport: HTTP transport for making requests
        """
        self.transport = transport

    def list_open_pull_requests(self, owner: str, repo: str) -> list[PullRequest]:
        """
        List the open pull requests of a repository.

        Args:
            owner: Repository owner
            repo: Repository name

        Returns:
            List of PullRequest objects
        """
        pulls: list[PullRequest] = []
        page = 1
        while True:
            response = self.transport.request(
                "GET",
                f"/repos/{owner}/{repo}/pulls",
                params={"state": "open", "per_page": self.PAGE_SIZE, "page": page},
            )
            items = response or []
            pulls.extend(self._parse_pull_request(pr, owner, repo) for pr in items)
            if len(items) < self.PAGE_SIZE:
                return pulls
            page += 1

    def create_pull_request(self, args: PullRequestArguments) -> PullRequest:
        """
        Create a pull request.

        Args:
            args: Repository, title, body, head and base of the pull request

        Returns:
            The created PullRequest

        Raises:
            ValidationError: If the head branch does not exist or a PR already
                exists for it
            NotFoundError: If the repository is not found
        """
        owner = args.repository.organisation
        repo = args.repository.name
        response = self.transport.request(
            "POST",
            f"/repos/{owner}/{repo}/pulls",
            body={
                "title": args.title,
                "body": args.body,
                "head": args.head,
                "base": args.base,
            },
        )
        return self._parse_pull_request(response, owner, repo)

    def update_pull_request(
        self, args: PullRequestArguments, number: int
    ) -> PullRequest:
        """
        Update the title, body and base of an existing pull request.

        Args:
            args: New title, body and base
            number: The pull request number

        Returns:
            The updated PullRequest
        """
        owner = args.repository.organisation
        repo = args.repository.name
        response = self.transport.request(
            "PATCH",
            f"/repos/{owner}/{repo}/pulls/{number}",
            body={"title": args.title, "body": args.body, "base": args.base},
        )
        return self._parse_pull_request(response, owner, repo)

    def add_pr_comment(self, pr: PullRequest, body: str) -> None:
        """Post a comment on the conversation of a pull request."""
        self.transport.request(
            "POST",
            f"/repos/{pr.owner}/{pr.repo}/issues/{pr.number}/comments",
            body={"body": body},
        )

    def update_pull_request_status(self, pr: PullRequest) -> PullRequest:
        """
        Fetch the current state of a pull request.

        Args:
            pr: The pull request to refresh

        Returns:
            A new PullRequest with the latest merged/closed state and head SHA
        """
        response = self.transport.request(
            "GET", f"/repos/{pr.owner}/{pr.repo}/pulls/{pr.number}"
        )
        return self._parse_pull_request(response, pr.owner, pr.repo)

    def merge_pull_request(self, pr: PullRequest, message: str) -> None:
        """
        Merge a pull request.

        Args:
            pr: The pull request to merge
            message: Commit message for the merge commit

        Raises:
            ConflictError: If the pull request is not mergeable
            AuthorizationError: If branch protection refuses the merge
        """
        body: dict[str, Any] = {"commit_message": message}
        if pr.last_commit_sha:
            body["sha"] = pr.last_commit_sha
        self.transport.request(
            "PUT", f"/repos/{pr.owner}/{pr.repo}/pulls/{pr.number}/merge", body=body
        )

    def _parse_pull_request(
        self, data: dict[str, Any], owner: str, repo: str
    ) -> PullRequest:
        """Parse pull request data from an API response."""
        head = data.get("head") or {}
        head_user = head.get("user") or {}
        user = data.get("user") or {}
        merged = data.get("merged")
        if merged is None:
            merged = data.get("merged_at") is not None

        return PullRequest(
            number=data["number"],
            url=data.get("html_url", ""),
            owner=owner,
            repo=repo,
            author=user.get("login", ""),
            title=data.get("title", ""),
            body=data.get("body") or "",
            head_ref=head.get("label") or head.get("ref", ""),
            head_owner=head_user.get("login", ""),
            last_commit_sha=head.get("sha", ""),
            state=data.get("state", "open"),
            merged=bool(merged),
            mergeable=data.get("mergeable"),
        )
