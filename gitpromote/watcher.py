"""
Merge watcher.

Polls a promotion pull request until it merges, is closed, fails its checks
or the timeout passes. When the combined commit status is ``success`` the
watcher merges the pull request itself, unless auto-merge is disabled or a
tide merge bot has already claimed it.

Each poll is one call to ``MergeWatcher.step()``; ``wait()`` drives the
steps with the context's clock.
"""

from enum import Enum
from typing import Any

from gitpromote.config import format_duration
from gitpromote.context import PromotionContext
from gitpromote.exceptions import ErrorKind, GitProviderError, PromotionError
from gitpromote.types.pulls import PullRequest, PullRequestInfo

TIDE = "tide"


class WatchState(str, Enum):
    """Where a watched pull request is in its life."""

    NO_PR = "no_pr"
    OPEN_PENDING = "open_pending"
    OPEN_STATUS_KNOWN = "open_status_known"
    MERGED = "merged"
    CLOSED_UNMERGED = "closed_unmerged"
    FAILED_STATUS = "failed_status"
    TIMED_OUT = "timed_out"

    @property
    def is_terminal(self) -> bool:
        return self in _TERMINAL_STATES

    @property
    def is_success(self) -> bool:
        return self in (WatchState.NO_PR, WatchState.MERGED)


_TERMINAL_STATES = frozenset(
    {
        WatchState.NO_PR,
        WatchState.MERGED,
        WatchState.CLOSED_UNMERGED,
        WatchState.FAILED_STATUS,
        WatchState.TIMED_OUT,
    }
)


class MergeWatcher:
    """
    Waits for a promotion pull request to merge.

    Refreshing the pull request itself must succeed on every poll: a
    provider error there is raised straight away. Looking up the commit
    status may fail without ending the watch; that is only logged.

    Example:
        ```python
        from gitpromote.watcher import MergeWatcher

        watcher = MergeWatcher(context, info)
        watcher.wait()  # raises PromotionError unless the PR merges
        ```
    """

    def __init__(
        self,
        context: PromotionContext,
        pr_info: PullRequestInfo | None,
        timeout: float | None = None,
        poll_interval: float | None = None,
        no_merge: bool | None = None,
    ) -> None:
        """
        Initialize the watcher.

        Args:
            context: Provider, clock, settings and logger to use
            pr_info: The pull request to watch; None means nothing to wait for
            timeout: Seconds to wait before giving up (default: settings.timeout)
            poll_interval: Seconds between polls (default: settings.poll_interval)
            no_merge: Never merge the pull request ourselves (default: settings.no_merge)
        """
        settings = context.settings
        self.context = context
        self.provider = context.provider
        self.clock = context.clock
        self.logger = context.logger
        self.timeout = settings.timeout if timeout is None else timeout
        self.poll_interval = (
            settings.poll_interval if poll_interval is None else poll_interval
        )
        self.no_merge = settings.no_merge if no_merge is None else no_merge
        self.merge_message = settings.merge_message

        self.pull_request: PullRequest | None = (
            pr_info.pull_request if pr_info is not None else None
        )
        self.state = (
            WatchState.NO_PR if self.pull_request is None else WatchState.OPEN_PENDING
        )
        self.last_status: str | None = None
        self.error: PromotionError | None = None
        self.deadline = self.clock.now() + self.timeout
        self._merge_failure_logged = False

    def step(self) -> WatchState:
        """
        Poll the pull request once.

        Returns:
            The state after this poll

        Raises:
            PromotionError: With kind MERGE_STATUS if the pull request cannot
                be refreshed
        """
        if self.state.is_terminal:
            return self.state

        pr = self._refresh()
        if pr.merged:
            self.logger.info("Pull request %s is merged", pr.url)
            self.state = WatchState.MERGED
        elif pr.is_closed():
            self._fail(
                WatchState.CLOSED_UNMERGED,
                ErrorKind.MERGE_CLOSED,
                f"Promotion failed as pull request {pr.url} is closed without merging",
                url=pr.url,
            )
        else:
            self._check_status(pr)

        if not self.state.is_terminal and self.clock.now() > self.deadline:
            self._fail(
                WatchState.TIMED_OUT,
                ErrorKind.MERGE_TIMEOUT,
                f"Timed out waiting for pull request {pr.url} to merge. "
                f"Waited {format_duration(self.timeout)}",
                url=pr.url,
                duration=self.timeout,
            )
        return self.state

    def wait(self) -> PullRequest | None:
        """
        Poll until the pull request reaches a terminal state.

        Returns:
            The merged pull request, or None if there was none to watch

        Raises:
            PromotionError: If the pull request is closed, its checks fail,
                the timeout passes or it cannot be refreshed
        """
        while not self.step().is_terminal:
            self.clock.sleep(self.poll_interval)
        if self.error is not None:
            raise self.error
        return self.pull_request

    def _refresh(self) -> PullRequest:
        assert self.pull_request is not None
        url = self.pull_request.url
        try:
            self.pull_request = self.provider.pulls.update_pull_request_status(
                self.pull_request
            )
        except GitProviderError as e:
            raise PromotionError(
                ErrorKind.MERGE_STATUS,
                f"Failed to query the pull request status for {url}: {e}",
                url=url,
            ) from e
        return self.pull_request

    def _check_status(self, pr: PullRequest) -> None:
        statuses = self.provider.statuses
        if statuses is None:
            self.logger.debug("Provider has no commit statuses; waiting for %s", pr.url)
            self.state = WatchState.OPEN_PENDING
            return

        try:
            status = statuses.pull_request_last_commit_status(pr)
        except GitProviderError as e:
            self.logger.warning(
                "Failed to query the last commit status of pull request %s ref %s: %s",
                pr.url,
                pr.last_commit_sha,
                e,
            )
            self.state = WatchState.OPEN_PENDING
            return

        self.last_status = status
        self.state = WatchState.OPEN_STATUS_KNOWN
        if status == "success":
            if not self.no_merge:
                self._merge_unless_tide(pr)
        elif status in ("error", "failure"):
            self._fail(
                WatchState.FAILED_STATUS,
                ErrorKind.MERGE_FAILED_STATUS,
                f"Pull request {pr.url} last commit has status {status} "
                f"for ref {pr.last_commit_sha}",
                url=pr.url,
                status=status,
                sha=pr.last_commit_sha,
            )
        else:
            self.logger.debug(
                "Pull request %s last commit has status %s", pr.url, status
            )

    def _merge_unless_tide(self, pr: PullRequest) -> None:
        statuses = self.provider.statuses
        assert statuses is not None
        try:
            entries = statuses.list_commit_status(pr.owner, pr.repo, pr.last_commit_sha)
        except GitProviderError as e:
            self.logger.warning(
                "Failed to list commit statuses of pull request %s ref %s: %s",
                pr.url,
                pr.last_commit_sha,
                e,
            )
            return

        if any(TIDE in (s.state, s.context) for s in entries):
            self.logger.debug("Tide will merge pull request %s", pr.url)
            return

        try:
            self.provider.pulls.merge_pull_request(pr, self.merge_message)
        except GitProviderError as e:
            if not self._merge_failure_logged:
                self._merge_failure_logged = True
                self.logger.warning(
                    "Failed to merge pull request %s, maybe the user lacks "
                    "permission or a review is required: %s",
                    pr.url,
                    e,
                )
            return
        self.logger.info("Merging pull request %s", pr.url)

    def _fail(
        self, state: WatchState, kind: ErrorKind, message: str, **context: Any
    ) -> None:
        self.state = state
        self.error = PromotionError(kind, message, **context)
        self.logger.error(message)
