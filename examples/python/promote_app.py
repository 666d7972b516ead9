#!/usr/bin/env python3
"""
gitpromote - Promote an application into an environment

This example promotes one version of a chart into an environment repository:
1. Connect to GitHub with GITHUB_TOKEN
2. Open (or update) a pull request pinning the new version
3. Wait for the pull request to merge

Usage:
    python examples/python/promote_app.py <environment-git-url> <app> <version>
"""

import logging
import os
import sys

from gitpromote import (
    GitHubProvider,
    PromotionContext,
    PromotionError,
    PromotionSettings,
    PullRequestRequest,
    configure_logging,
    promote,
)
from gitpromote.charts import set_app_version_fn
from gitpromote.exceptions import ConfigurationError
from gitpromote.giturl import parse_git_url


def main() -> None:
    """Run a single promotion."""
    if len(sys.argv) != 4:
        print(__doc__)
        sys.exit(2)
    git_url, app, version = sys.argv[1:]
    chart_repository = os.environ.get("CHART_REPOSITORY", "https://charts.example.com")

    configure_logging(level=logging.INFO)
    print(f"=== Promoting {app} {version} into {git_url} ===\n")

    try:
        git_info = parse_git_url(git_url)
    except ConfigurationError as e:
        print(f"Invalid environment URL: {e.message}")
        sys.exit(2)

    settings = PromotionSettings.from_env()
    with GitHubProvider.from_env() as provider:
        context = PromotionContext(provider=provider, settings=settings)
        dir = settings.working_dir(git_info.name)
        request = PullRequestRequest(
            dir=str(dir),
            git_url=git_url,
            branch_name=f"promote-{app}-{version}",
            title=f"chore: promote {app} to version {version}",
            body=f"chore: Promote {app} to version {version}",
        )

        try:
            info = promote(
                context, request, set_app_version_fn(app, version, chart_repository)
            )
        except PromotionError as e:
            print(f"\nPromotion failed ({e.kind.value}): {e.message}")
            sys.exit(1)

    if info is None:
        print(f"\n{app} {version} is already in the environment")
    else:
        print(f"\nPromoted via {info.pull_request.url}")


if __name__ == "__main__":
    main()
