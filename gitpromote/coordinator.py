"""
Pull request coordinator.

Turns a caller's change to an environment repository into exactly one open
pull request: the repository is forked if needed, cloned, changed on a new
branch and pushed. A pull request that already carries the same title from
the same user is updated in place instead of being duplicated.
"""

import uuid
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import Any

from gitpromote.context import PromotionContext
from gitpromote.exceptions import (
    ConfigurationError,
    ErrorKind,
    GitCommandError,
    GitProviderError,
    NotFoundError,
    PromotionError,
)
from gitpromote.giturl import parse_git_url
from gitpromote.types.pulls import (
    PullRequest,
    PullRequestArguments,
    PullRequestInfo,
    PullRequestRequest,
)
from gitpromote.types.repos import GitRepositoryInfo, Repository

ChangeFn = Callable[[str], None]

REMOTE_BRANCH_PREFIX = "remotes/origin/"
UPSTREAM_REMOTE = "upstream"


@contextmanager
def _failing_as(kind: ErrorKind, message: str, **context: Any) -> Iterator[None]:
    try:
        yield
    except (GitProviderError, GitCommandError) as e:
        raise PromotionError(kind, f"{message}: {e}", **context) from e


class PullRequestCoordinator:
    """
    Creates or updates the pull request for one change to an environment.

    Example:
        ```python
        from gitpromote.charts import remove_application_fn
        from gitpromote.coordinator import PullRequestCoordinator
        from gitpromote.types import PullRequestRequest

        coordinator = PullRequestCoordinator(context)
        info = coordinator.create_pull_request(
            PullRequestRequest(
                dir="/tmp/environment-staging",
                git_url="https://github.com/acme/environment-staging.git",
                branch_name="delete-myapp",
                title="Delete myapp",
            ),
            remove_application_fn("myapp"),
        )
        if info is None:
            print("nothing to change")
        ```
    """

    def __init__(self, context: PromotionContext) -> None:
        self.context = context
        self.provider = context.provider
        self.gitter = context.gitter
        self.logger = context.logger

    def create_pull_request(
        self, request: PullRequestRequest, change_fn: ChangeFn
    ) -> PullRequestInfo | None:
        """
        Apply change_fn to a fresh clone and publish it as a pull request.

        Args:
            request: Target repository, branch seed, title and body
            change_fn: Called with the working directory; edits files in place

        Returns:
            The created or updated pull request, or None when change_fn left
            nothing to commit (or in dry-run mode)

        Raises:
            PromotionError: If any step fails; ``kind`` says which
        """
        dir = str(request.dir)
        username = self._current_username()

        try:
            git_info = parse_git_url(request.git_url)
        except ConfigurationError as e:
            raise PromotionError(
                ErrorKind.SETUP, str(e.message), url=request.git_url
            ) from e

        repo = self._resolve_repository(username, git_info)
        forked = repo.organisation != git_info.organisation
        self._clone(dir, request, git_info, repo, username, forked)

        branch_name = self._unique_branch_name(dir, request.branch_name)
        with _failing_as(
            ErrorKind.SETUP, f"failed to create branch {branch_name}", branch=branch_name
        ):
            self.gitter.create_branch(dir, branch_name)
            self.gitter.checkout(dir, branch_name)

        try:
            change_fn(dir)
        except PromotionError:
            raise
        except Exception as e:
            raise PromotionError(
                ErrorKind.CHANGE,
                f"failed to apply changes in {dir}: {e}",
                dir=dir,
                branch=branch_name,
            ) from e

        with _failing_as(ErrorKind.SETUP, f"failed to commit changes in {dir}", dir=dir):
            self.gitter.add(dir, "-A")
            if not self.gitter.has_changes(dir):
                self.logger.warning(
                    "No changes made to %s; it must already be up to date", git_info.url
                )
                return None
            self.gitter.commit_dir(dir, request.message)

        if self.context.settings.dry_run:
            self.logger.info(
                "Dry run: committed %r on branch %s in %s, not pushing",
                request.title,
                branch_name,
                dir,
            )
            return None

        existing = self._find_existing(git_info, username, request.title)
        if existing is not None:
            if existing.head_ref:
                return self._update_existing(
                    dir, request, git_info, branch_name, existing
                )
            self.logger.warning(
                "Pull request %s has no head ref so cannot be updated; "
                "creating a new pull request",
                existing.url,
            )

        with _failing_as(
            ErrorKind.PUSH,
            f"failed to push branch {branch_name} to {repo.clone_url}",
            branch=branch_name,
            repository=repo.full_name,
        ):
            self.gitter.push(dir)

        head = f"{username}:{branch_name}" if forked else branch_name
        args = PullRequestArguments(
            repository=git_info,
            title=request.title,
            body=request.body,
            head=head,
            base=request.base,
        )
        with _failing_as(
            ErrorKind.PULL_REQUEST,
            f"failed to create pull request {args}",
            repository=git_info.full_name,
            branch=branch_name,
        ):
            pr = self.provider.pulls.create_pull_request(args)
        self.logger.info("Created pull request %s", pr.url)
        return PullRequestInfo(pull_request=pr, arguments=args, created=True)

    def _current_username(self) -> str:
        with _failing_as(ErrorKind.SETUP, "failed to look up the current git user"):
            username = self.provider.current_username()
        if not username:
            raise PromotionError(
                ErrorKind.SETUP, "no git provider username; is the provider authenticated?"
            )
        return username

    def _resolve_repository(
        self, username: str, git_info: GitRepositoryInfo
    ) -> Repository:
        """Find the user's copy of the repository, forking it if there is none."""
        repos = self.provider.repos
        owner, name = git_info.organisation, git_info.name
        try:
            return repos.get_repository(username, name)
        except NotFoundError:
            pass
        except GitProviderError as e:
            raise PromotionError(
                ErrorKind.SETUP,
                f"failed to look up repository {username}/{name}: {e}",
                repository=f"{username}/{name}",
            ) from e

        if username == owner:
            raise PromotionError(
                ErrorKind.SETUP,
                f"repository {git_info.full_name} does not exist",
                repository=git_info.full_name,
            )

        self.logger.info("Forking %s for user %s", git_info.full_name, username)
        with _failing_as(
            ErrorKind.SETUP,
            f"failed to fork repository {git_info.full_name} for user {username}",
            repository=git_info.full_name,
        ):
            return repos.fork_repository(owner, name, "")

    def _clone(
        self,
        dir: str,
        request: PullRequestRequest,
        git_info: GitRepositoryInfo,
        repo: Repository,
        username: str,
        forked: bool,
    ) -> None:
        clone_url = self.gitter.create_push_url(
            repo.clone_url, username, self.provider.token
        )
        with _failing_as(
            ErrorKind.SETUP,
            f"failed to clone {repo.clone_url} into {dir}",
            url=repo.clone_url,
            dir=dir,
        ):
            self.gitter.clone(clone_url, dir)
            if request.base != "master":
                self.gitter.checkout(dir, request.base)

        if not forked:
            return

        with _failing_as(
            ErrorKind.SETUP,
            f"failed to look up upstream repository {git_info.full_name}",
            repository=git_info.full_name,
        ):
            upstream = self.provider.repos.get_repository(
                git_info.organisation, git_info.name
            )
        upstream_url = self.gitter.create_push_url(
            upstream.clone_url, username, self.provider.token
        )
        with _failing_as(
            ErrorKind.SETUP,
            f"failed to add remote {UPSTREAM_REMOTE} {upstream.clone_url}",
            url=upstream.clone_url,
            dir=dir,
        ):
            self.gitter.set_remote_url(dir, UPSTREAM_REMOTE, upstream_url)

        try:
            self.gitter.pull_upstream(dir, request.base)
        except GitCommandError as e:
            # fork has diverged from upstream
            self.logger.warning(
                "Could not rebase %s onto %s/%s, resetting: %s",
                repo.full_name,
                UPSTREAM_REMOTE,
                request.base,
                e.stderr,
            )
            with _failing_as(
                ErrorKind.SETUP,
                f"failed to reset {dir} to {UPSTREAM_REMOTE}/{request.base}",
                dir=dir,
                branch=request.base,
            ):
                self.gitter.reset_to_upstream(dir, request.base)

    def _unique_branch_name(self, dir: str, seed: str) -> str:
        branch_name = self.gitter.convert_to_valid_branch_name(seed)
        with _failing_as(
            ErrorKind.SETUP, "failed to load remote branch names", dir=dir
        ):
            names = self.gitter.remote_branch_names(dir, REMOTE_BRANCH_PREFIX)
        if branch_name in names:
            branch_name = f"{branch_name}-{uuid.uuid4()}"
        return branch_name

    def _find_existing(
        self, git_info: GitRepositoryInfo, username: str, title: str
    ) -> PullRequest | None:
        with _failing_as(
            ErrorKind.PULL_REQUEST,
            f"failed to list open pull requests on {git_info.full_name}",
            repository=git_info.full_name,
        ):
            prs = self.provider.pulls.list_open_pull_requests(
                git_info.organisation, git_info.name
            )
        matches = [pr for pr in prs if pr.title == title and pr.author == username]
        if not matches:
            return None
        return max(matches, key=lambda pr: pr.number)

    def _update_existing(
        self,
        dir: str,
        request: PullRequestRequest,
        git_info: GitRepositoryInfo,
        branch_name: str,
        existing: PullRequest,
    ) -> PullRequestInfo:
        remote_branch = existing.head_ref.split(":")[-1]
        with _failing_as(
            ErrorKind.PUSH,
            f"failed to force push {branch_name} to {remote_branch}",
            branch=remote_branch,
            url=existing.url,
        ):
            self.gitter.force_push_branch(dir, branch_name, remote_branch)

        args = PullRequestArguments(
            repository=git_info,
            title=request.title,
            body=f"{request.body}\n<hr />\n\n{existing.body}",
            head=existing.head_ref,
            base=request.base,
        )
        with _failing_as(
            ErrorKind.PULL_REQUEST,
            f"failed to update pull request {existing.url}",
            url=existing.url,
        ):
            pr = self.provider.pulls.update_pull_request(args, existing.number)
            self.provider.pulls.add_pr_comment(
                pr,
                f"Updated this pull request with a new commit from branch {branch_name}",
            )
        self.logger.info("Updated existing pull request %s", pr.url)
        return PullRequestInfo(pull_request=pr, arguments=args, created=False)
