"""
Git URL parsing.

Turns the URL of an environment repository into host, organisation and
repository name. Accepts the forms git hosting providers hand out:

    https://github.com/org/repo.git
    git@github.com:org/repo.git
    ssh://git@github.com/org/repo
"""

import re
from urllib.parse import urlparse

from gitpromote.exceptions import ConfigurationError
from gitpromote.types.repos import GitRepositoryInfo

_SCP_LIKE = re.compile(r"^(?:[\w.-]+@)?(?P<host>[\w.-]+):(?P<path>[^/].*)$")


def parse_git_url(url: str) -> GitRepositoryInfo:
    """
    Parse a git URL into a GitRepositoryInfo.

    Args:
        url: The clone or HTML URL of a repository

    Returns:
        GitRepositoryInfo for the URL

    Raises:
        ConfigurationError: If the URL is empty or has no organisation/name
    """
    text = url.strip()
    if not text:
        raise ConfigurationError("no git URL given")

    if "://" in text:
        parsed = urlparse(text)
        host = parsed.hostname or ""
        path = parsed.path
    else:
        match = _SCP_LIKE.match(text)
        if not match:
            raise ConfigurationError(f"could not parse git URL {url}")
        host = match.group("host")
        path = match.group("path")

    parts = [p for p in path.strip("/").split("/") if p]
    if not host or len(parts) < 2:
        raise ConfigurationError(f"could not parse git URL {url}")

    name = parts[-1]
    if name.endswith(".git"):
        name = name[: -len(".git")]
    # GitLab style sub-groups keep everything before the name as organisation
    organisation = "/".join(parts[:-1])

    return GitRepositoryInfo(host=host, organisation=organisation, name=name, url=url)
