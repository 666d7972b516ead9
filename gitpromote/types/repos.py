"""Repository-related data models."""

from dataclasses import dataclass


@dataclass
class GitRepositoryInfo:
    """A repository location parsed from a git URL."""

    host: str
    organisation: str
    name: str
    url: str

    @property
    def full_name(self) -> str:
        return f"{self.organisation}/{self.name}"


@dataclass
class Repository:
    """Repository information as reported by the git provider."""

    organisation: str
    name: str
    clone_url: str
    html_url: str
    fork: bool = False
    default_branch: str = "master"

    @property
    def full_name(self) -> str:
        return f"{self.organisation}/{self.name}"
