"""
Local git working copy operations.

Provides the git primitives the promotion engine needs against a local
working directory: clone, branch, commit, push and friends.
"""

import subprocess
from abc import ABC, abstractmethod
from pathlib import Path
from urllib.parse import quote, urlsplit, urlunsplit

from gitpromote.exceptions import GitCommandError
from gitpromote.logging import log_git_command, mask_sensitive_data

REPLACE_INVALID_BRANCH_CHAR = "_"

_INVALID_BRANCH_CHARS = frozenset("~^: \n\r\t")


def convert_to_valid_branch_name(name: str) -> str:
    """
    Convert text into a valid git branch name.

    Strips a trailing ``/`` and ``.lock``, replaces control characters,
    whitespace and ``~ ^ :`` with ``_`` and collapses runs of ``_``.

    Args:
        name: Free text, e.g. "delete-my app"

    Returns:
        A branch name such as "delete-my_app"
    """
    name = name.removesuffix("/")
    name = name.removesuffix(".lock")

    chars: list[str] = []
    last = " "
    for ch in name:
        if ord(ch) <= 32 or ch in _INVALID_BRANCH_CHARS:
            ch = REPLACE_INVALID_BRANCH_CHAR
        if ch != REPLACE_INVALID_BRANCH_CHAR or last != REPLACE_INVALID_BRANCH_CHAR:
            chars.append(ch)
        last = ch
    return "".join(chars)


class Gitter(ABC):
    """The git operations used against a local working copy."""

    @abstractmethod
    def clone(self, url: str, dir: str | Path) -> None: ...

    @abstractmethod
    def set_remote_url(self, dir: str | Path, name: str, url: str) -> None: ...

    @abstractmethod
    def pull_upstream(self, dir: str | Path, base: str = "master") -> None: ...

    @abstractmethod
    def reset_to_upstream(self, dir: str | Path, base: str) -> None: ...

    @abstractmethod
    def remote_branch_names(self, dir: str | Path, prefix: str) -> list[str]: ...

    @abstractmethod
    def create_branch(self, dir: str | Path, name: str) -> None: ...

    @abstractmethod
    def checkout(self, dir: str | Path, name: str) -> None: ...

    @abstractmethod
    def add(self, dir: str | Path, *patterns: str) -> None: ...

    @abstractmethod
    def has_changes(self, dir: str | Path) -> bool: ...

    @abstractmethod
    def commit_dir(self, dir: str | Path, message: str) -> None: ...

    @abstractmethod
    def push(self, dir: str | Path) -> None: ...

    @abstractmethod
    def force_push_branch(
        self, dir: str | Path, local_branch: str, remote_branch: str
    ) -> None: ...

    def convert_to_valid_branch_name(self, name: str) -> str:
        return convert_to_valid_branch_name(name)

    def create_push_url(self, url: str, username: str, token: str | None) -> str:
        """
        Inject credentials into an https clone URL.

        URLs that are not http(s), or when no token is available, are
        returned unchanged.
        """
        if not token:
            return url
        parts = urlsplit(url)
        if parts.scheme not in ("http", "https") or not parts.hostname:
            return url
        host = parts.hostname
        if parts.port:
            host = f"{host}:{parts.port}"
        netloc = f"{quote(username, safe='')}:{quote(token, safe='')}@{host}"
        return urlunsplit((parts.scheme, netloc, parts.path, parts.query, parts.fragment))


class GitCLI(Gitter):
    """
    Gitter implementation that shells out to the ``git`` binary.

    Example:
        ```python
        from gitpromote.git import GitCLI

        git = GitCLI()
        git.clone("https://github.com/acme/environment-staging.git", "./staging")
        git.create_branch("./staging", "promote-myapp-1.2.3")
        git.checkout("./staging", "promote-myapp-1.2.3")
        ```
    """

    def __init__(self, env: dict[str, str] | None = None) -> None:
        """
        Initialize the git driver.

        Args:
            env: Optional environment for git processes (default: inherit)
        """
        self.env = env

    def clone(self, url: str, dir: str | Path) -> None:
        """Clone the repository at url into dir."""
        dir = Path(dir)
        dir.parent.mkdir(parents=True, exist_ok=True)
        self._run(dir.parent, "clone", url, str(dir))

    def set_remote_url(self, dir: str | Path, name: str, url: str) -> None:
        """Add the named remote, or repoint it if it already exists."""
        try:
            self._run(dir, "remote", "add", name, url)
        except GitCommandError:
            self._run(dir, "remote", "set-url", name, url)

    def pull_upstream(self, dir: str | Path, base: str = "master") -> None:
        self._run(dir, "pull", "-r", "upstream", base)

    def reset_to_upstream(self, dir: str | Path, base: str) -> None:
        self._run(dir, "fetch", "upstream")
        self._run(dir, "reset", "--hard", f"upstream/{base}")

    def remote_branch_names(self, dir: str | Path, prefix: str) -> list[str]:
        """
        List branch names from ``git branch -a``.

        Args:
            dir: Working copy
            prefix: Only names starting with this prefix are returned, with
                the prefix stripped (e.g. "remotes/origin/")

        Returns:
            List of branch names
        """
        text = self._run(dir, "branch", "-a")
        names = []
        for line in text.splitlines():
            line = line.removeprefix("* ").strip()
            if not line:
                continue
            if prefix:
                if line.startswith(prefix):
                    names.append(line[len(prefix):])
            else:
                names.append(line)
        return names

    def create_branch(self, dir: str | Path, name: str) -> None:
        self._run(dir, "branch", name)

    def checkout(self, dir: str | Path, name: str) -> None:
        self._run(dir, "checkout", name)

    def add(self, dir: str | Path, *patterns: str) -> None:
        self._run(dir, "add", *patterns)

    def has_changes(self, dir: str | Path) -> bool:
        return bool(self._run(dir, "status", "-s").strip())

    def commit_dir(self, dir: str | Path, message: str) -> None:
        self._run(dir, "commit", "-m", message)

    def push(self, dir: str | Path) -> None:
        """Push the current branch to origin, setting its upstream."""
        self._run(dir, "push", "--set-upstream", "origin", "HEAD")

    def force_push_branch(
        self, dir: str | Path, local_branch: str, remote_branch: str
    ) -> None:
        """Force push local_branch over remote_branch on origin."""
        self._run(dir, "push", "origin", "--force", f"{local_branch}:{remote_branch}")

    def _run(self, dir: str | Path, *args: str) -> str:
        """
        Run git in dir and return its stdout.

        Raises:
            GitCommandError: If git exits with a non-zero status
        """
        log_git_command(str(dir), list(args))
        try:
            result = subprocess.run(
                ["git", *args],
                cwd=dir,
                check=True,
                capture_output=True,
                text=True,
                env=self.env,
            )
        except subprocess.CalledProcessError as e:
            # e.cmd holds unmasked credentials, so it is not chained
            raise GitCommandError(
                [mask_sensitive_data(a) for a in args],
                e.returncode,
                mask_sensitive_data(e.stderr or ""),
            ) from None
        return result.stdout
