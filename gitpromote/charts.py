"""
Helm chart change appliers.

An environment repository describes what runs in the environment as the
dependencies of a Helm chart (``env/requirements.yaml``). The functions here
edit that list and can be handed straight to the coordinator as change
functions.
"""

import copy
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

REQUIREMENTS_FILE_NAME = "requirements.yaml"
ENVIRONMENT_CHART_DIR = "env"

_NUMBER_TAGS = {"tag:yaml.org,2002:int", "tag:yaml.org,2002:float"}

ChangeFn = Callable[[str], None]


class _LiteralLoader(yaml.SafeLoader):
    """SafeLoader that keeps numbers as written, so version 1.10 stays "1.10"."""


_LiteralLoader.yaml_implicit_resolvers = {
    first: [(tag, regexp) for tag, regexp in resolvers if tag not in _NUMBER_TAGS]
    for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}


@dataclass
class Dependency:
    """One chart the environment chart depends on."""

    name: str
    version: str = ""
    repository: str = ""
    condition: str = ""
    tags: list[str] = field(default_factory=list)
    enabled: bool = False
    import_values: list[Any] = field(default_factory=list)
    alias: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Dependency":
        return cls(
            name=data.get("name", ""),
            version=str(data.get("version") or ""),
            repository=data.get("repository") or "",
            condition=data.get("condition") or "",
            tags=list(data.get("tags") or []),
            enabled=bool(data.get("enabled", False)),
            import_values=list(data.get("import-values") or []),
            alias=data.get("alias") or "",
        )

    def to_dict(self) -> dict[str, Any]:
        # name and repository are always written, the rest only when set
        data: dict[str, Any] = {"name": self.name}
        if self.version:
            data["version"] = self.version
        data["repository"] = self.repository
        if self.condition:
            data["condition"] = self.condition
        if self.tags:
            data["tags"] = list(self.tags)
        if self.enabled:
            data["enabled"] = True
        if self.import_values:
            data["import-values"] = list(self.import_values)
        if self.alias:
            data["alias"] = self.alias
        return data


@dataclass
class Requirements:
    """The dependencies of a chart, kept sorted by name."""

    dependencies: list[Dependency] = field(default_factory=list)

    @classmethod
    def load(cls, path: str | Path) -> "Requirements":
        """
        Load requirements from a YAML file.

        A missing or empty file gives empty requirements.

        Raises:
            ValueError: If the file does not hold a YAML mapping
            yaml.YAMLError: If the file is not valid YAML
        """
        path = Path(path)
        if not path.exists():
            return cls()
        data = yaml.load(path.read_text(), Loader=_LiteralLoader) or {}
        if not isinstance(data, dict):
            raise ValueError(f"{path} does not contain a YAML mapping")
        return cls(
            dependencies=[
                Dependency.from_dict(d) for d in data.get("dependencies") or [] if d
            ]
        )

    def save(self, path: str | Path) -> None:
        data = {"dependencies": [d.to_dict() for d in self.dependencies]}
        text = yaml.safe_dump(data, default_flow_style=False, sort_keys=False)
        Path(path).write_text(text)

    def set_app_version(
        self, app: str, version: str, repository: str, alias: str = ""
    ) -> None:
        """Point app at version, adding it if it is not already a dependency."""
        for dep in self.dependencies:
            if dep.name == app:
                dep.version = version
                dep.repository = repository
                dep.alias = alias
                return
        self.dependencies.append(
            Dependency(name=app, version=version, repository=repository, alias=alias)
        )
        self.dependencies.sort(key=lambda d: d.name)

    def remove_application(self, app: str) -> bool:
        """Remove app; returns True if it was a dependency."""
        for i, dep in enumerate(self.dependencies):
            if dep.name == app:
                del self.dependencies[i]
                self.dependencies.sort(key=lambda d: d.name)
                return True
        return False


def find_requirements_file(dir: str | Path) -> Path:
    """
    Find the requirements file of the chart in an environment repository.

    Looks in ``env/``, the repository root, then any top-level directory. If
    none exists yet, the file goes in ``env/`` when that directory exists and
    in the root otherwise.

    Args:
        dir: Working copy of the environment repository

    Returns:
        Path to the (possibly not yet existing) requirements file
    """
    dir = Path(dir)
    env_dir = dir / ENVIRONMENT_CHART_DIR
    for candidate in (env_dir / REQUIREMENTS_FILE_NAME, dir / REQUIREMENTS_FILE_NAME):
        if candidate.is_file():
            return candidate
    for child in sorted(dir.iterdir()):
        candidate = child / REQUIREMENTS_FILE_NAME
        if child.is_dir() and candidate.is_file():
            return candidate
    if env_dir.is_dir():
        return env_dir / REQUIREMENTS_FILE_NAME
    return dir / REQUIREMENTS_FILE_NAME


def modify_requirements(fn: Callable[[Requirements], None]) -> ChangeFn:
    """
    Turn an edit of the requirements into a change function.

    Example:
        ```python
        from gitpromote.charts import modify_requirements

        def pin_nginx(requirements):
            requirements.set_app_version("nginx", "1.2.3", "https://charts.example.com")

        change_fn = modify_requirements(pin_nginx)
        ```
    """

    def change(dir: str) -> None:
        path = find_requirements_file(dir)
        requirements = Requirements.load(path)
        before = copy.deepcopy(requirements)
        fn(requirements)
        if requirements != before:
            requirements.save(path)

    return change


def remove_application_fn(app: str) -> ChangeFn:
    """Change function deleting app from the environment."""

    def remove(requirements: Requirements) -> None:
        requirements.remove_application(app)

    return modify_requirements(remove)


def set_app_version_fn(
    app: str, version: str, repository: str, alias: str = ""
) -> ChangeFn:
    """Change function promoting app at version into the environment."""
    return modify_requirements(
        lambda r: r.set_app_version(app, version, repository, alias)
    )
