"""
Promotion entry points.

``create_pull_request`` records a change in an environment repository as a
pull request; ``promote`` additionally waits for that pull request to merge.
"""

from gitpromote.context import PromotionContext
from gitpromote.coordinator import ChangeFn, PullRequestCoordinator
from gitpromote.types.pulls import PullRequestInfo, PullRequestRequest
from gitpromote.watcher import MergeWatcher


def create_pull_request(
    context: PromotionContext, request: PullRequestRequest, change_fn: ChangeFn
) -> PullRequestInfo | None:
    """
    Create or update the pull request for a change.

    Args:
        context: Provider, git driver, settings and logger to use
        request: Target repository, branch seed, title and body
        change_fn: Edits files in the working directory it is given

    Returns:
        The pull request, or None if there was nothing to change

    Raises:
        PromotionError: If the pull request could not be produced
    """
    return PullRequestCoordinator(context).create_pull_request(request, change_fn)


def promote(
    context: PromotionContext,
    request: PullRequestRequest,
    change_fn: ChangeFn,
    wait: bool = True,
) -> PullRequestInfo | None:
    """
    Create or update the pull request for a change and wait for it to merge.

    Callers must not run two promotions against the same environment
    repository at once.

    Example:
        ```python
        from gitpromote import PromotionContext, PullRequestRequest, promote
        from gitpromote.charts import set_app_version_fn
        from gitpromote.client import GitHubProvider

        context = PromotionContext(provider=GitHubProvider.from_env())
        promote(
            context,
            PullRequestRequest(
                dir="/tmp/environment-staging",
                git_url="https://github.com/acme/environment-staging.git",
                branch_name="promote-myapp-1.2.3",
                title="chore: promote myapp to version 1.2.3",
            ),
            set_app_version_fn("myapp", "1.2.3", "https://charts.acme.com"),
        )
        ```

    Args:
        context: Provider, git driver, settings and logger to use
        request: Target repository, branch seed, title and body
        change_fn: Edits files in the working directory it is given
        wait: Wait for the pull request to merge (default: True)

    Returns:
        The pull request, or None if there was nothing to change

    Raises:
        PromotionError: If the pull request could not be produced, or did
            not merge within the context's timeout
    """
    info = create_pull_request(context, request, change_fn)
    if wait and info is not None:
        context.logger.info(
            "Waiting for pull request %s to merge", info.pull_request.url
        )
        MergeWatcher(context, info).wait()
    return info
