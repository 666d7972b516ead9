"""
Promotion settings.

Durations are written the way the rest of the platform writes them
("1h", "20s", "1h30m", "500ms").
"""

import os
import re
import tempfile
from dataclasses import dataclass, field
from pathlib import Path

from gitpromote.exceptions import ConfigurationError

DEFAULT_TIMEOUT = "1h"
DEFAULT_POLL_INTERVAL = "20s"
DEFAULT_MERGE_MESSAGE = "automatically merged promotion PR"

_DURATION_PART = re.compile(r"(\d+(?:\.\d+)?)(ms|h|m|s)")
_UNIT_SECONDS = {"h": 3600.0, "m": 60.0, "s": 1.0, "ms": 0.001}
_TRUE_VALUES = {"1", "true", "yes", "on"}


def parse_duration(text: str) -> float:
    """
    Parse a duration such as "1h30m" into seconds.

    Args:
        text: Duration made of number+unit parts (units: h, m, s, ms)

    Returns:
        Number of seconds

    Raises:
        ConfigurationError: If text is not a valid duration
    """
    value = text.strip()
    if not value:
        raise ConfigurationError("empty duration")
    if value == "0":
        return 0.0

    total = 0.0
    pos = 0
    for match in _DURATION_PART.finditer(value):
        if match.start() != pos:
            break
        total += float(match.group(1)) * _UNIT_SECONDS[match.group(2)]
        pos = match.end()
    if pos != len(value):
        raise ConfigurationError(f"invalid duration {text!r}")
    return total


def format_duration(seconds: float) -> str:
    """Render seconds the way parse_duration reads them, e.g. 3600 -> "1h0m0s"."""
    if seconds < 1:
        return f"{round(seconds * 1000)}ms"
    hours, rest = divmod(seconds, 3600)
    minutes, secs = divmod(rest, 60)
    if hours:
        return f"{int(hours)}h{int(minutes)}m{secs:g}s"
    if minutes:
        return f"{int(minutes)}m{secs:g}s"
    return f"{secs:g}s"


def _default_environments_dir() -> Path:
    return Path.home() / ".gitpromote" / "environments"


@dataclass
class PromotionSettings:
    """Tunables for creating and waiting on promotion pull requests."""

    timeout: float = field(default_factory=lambda: parse_duration(DEFAULT_TIMEOUT))
    poll_interval: float = field(
        default_factory=lambda: parse_duration(DEFAULT_POLL_INTERVAL)
    )
    no_merge: bool = False
    dry_run: bool = False
    merge_message: str = DEFAULT_MERGE_MESSAGE
    environments_dir: Path = field(default_factory=_default_environments_dir)

    @classmethod
    def from_env(cls) -> "PromotionSettings":
        """
        Create settings from environment variables.

        Environment variables:
            GITPROMOTE_TIMEOUT: How long to wait for a PR to merge (default: 1h)
            GITPROMOTE_POLL_INTERVAL: Time between PR status checks (default: 20s)
            GITPROMOTE_NO_MERGE: Never merge the PR ourselves (default: false)
            GITPROMOTE_DRY_RUN: Commit locally but do not push or open PRs (default: false)
            GITPROMOTE_ENVIRONMENTS_DIR: Where environment repositories are cloned

        Raises:
            ConfigurationError: If a duration variable is invalid
        """
        settings = cls()
        settings.timeout = _env_duration("GITPROMOTE_TIMEOUT", DEFAULT_TIMEOUT)
        settings.poll_interval = _env_duration(
            "GITPROMOTE_POLL_INTERVAL", DEFAULT_POLL_INTERVAL
        )
        settings.no_merge = _env_flag("GITPROMOTE_NO_MERGE")
        settings.dry_run = _env_flag("GITPROMOTE_DRY_RUN")
        environments_dir = os.environ.get("GITPROMOTE_ENVIRONMENTS_DIR")
        if environments_dir:
            settings.environments_dir = Path(environments_dir).expanduser()
        return settings

    def working_dir(self, name: str) -> Path:
        """A new empty directory under environments_dir to clone name into."""
        self.environments_dir.mkdir(parents=True, exist_ok=True)
        return Path(tempfile.mkdtemp(prefix=f"{name}-", dir=self.environments_dir))


def _env_duration(name: str, default: str) -> float:
    text = os.environ.get(name, default)
    try:
        return parse_duration(text)
    except ConfigurationError as e:
        raise ConfigurationError(f"invalid {name}: {e.message}") from e


def _env_flag(name: str) -> bool:
    return os.environ.get(name, "").strip().lower() in _TRUE_VALUES
