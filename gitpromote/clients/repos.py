"""Repositories resource client."""

import time
from typing import TYPE_CHECKING, Any

from gitpromote.exceptions import NotFoundError
from gitpromote.logging import get_logger
from gitpromote.providers import RepositoryService
from gitpromote.types.repos import Repository

if TYPE_CHECKING:
    from gitpromote.transport import HTTPTransport

logger = get_logger()


def _parse_repository(data: dict[str, Any]) -> Repository:
    """Parse repository data from an API response."""
    owner = data.get("owner") or {}
    return Repository(
        organisation=owner.get("login", ""),
        name=data["name"],
        clone_url=data.get("clone_url", ""),
        html_url=data.get("html_url", ""),
        fork=bool(data.get("fork", False)),
        default_branch=data.get("default_branch") or "master",
    )


class ReposClient(RepositoryService):
    """Client for repository-related operations."""

    def __init__(
        self,
        transport: "HTTPTransport",
        fork_poll_attempts: int = 10,
        fork_poll_interval: float = 2.0,
    ) -> None:
        """
        Initialize the repos client.

        Args:
            transport: HTTP transport for making requests
            fork_poll_attempts: How many times to look for a new fork before giving up
            fork_poll_interval: Seconds between those lookups
        """
        self.transport = transport
        self.fork_poll_attempts = fork_poll_attempts
        self.fork_poll_interval = fork_poll_interval

    def get_repository(self, owner: str, name: str) -> Repository:
        """
        Get repository information.

        Args:
            owner: User or organisation owning the repository
            name: Repository name

        Returns:
            Repository object

        Raises:
            NotFoundError: If repository not found
        """
        response = self.transport.request("GET", f"/repos/{owner}/{name}")
        return _parse_repository(response)

    def fork_repository(
        self, original_org: str, name: str, destination_org: str = ""
    ) -> Repository:
        """
        Fork a repository and wait for the fork to become available.

        Forks are created asynchronously, so the new repository is looked up
        until it exists.

        Args:
            original_org: Owner of the repository to fork
            name: Repository name
            destination_org: Organisation to fork into; blank forks to the
                authenticated user

        Returns:
            The forked Repository

        Raises:
            NotFoundError: If the original repository does not exist or the
                fork never appears
        """
        body: dict[str, Any] = {}
        if destination_org:
            body["organization"] = destination_org

        response = self.transport.request(
            "POST", f"/repos/{original_org}/{name}/forks", body=body
        )
        fork = _parse_repository(response)

        for attempt in range(self.fork_poll_attempts):
            try:
                return self.get_repository(fork.organisation, fork.name)
            except NotFoundError:
                logger.debug(
                    "Fork %s not available yet (attempt %d)", fork.full_name, attempt + 1
                )
                time.sleep(self.fork_poll_interval)

        raise NotFoundError(
            "FORK_NOT_READY",
            f"fork {fork.full_name} of {original_org}/{name} did not become available",
        )
