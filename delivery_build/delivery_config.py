"""
Project-level Delivery configuration files.

- ``.delivery/config.json``: build cookbook, skipped phases, dependencies
- ``.delivery/project.toml``: commands for running phases locally
- ``.delivery/cli.toml``: CLI connection settings, found by searching up the tree
"""

from __future__ import annotations

import json
import logging
import tomllib
from dataclasses import asdict, dataclass, field, fields
from enum import Enum
from pathlib import Path
from typing import Any

import requests

from delivery_build.exceptions import (
    InvalidConfigError,
    LocalPhasesNotFoundError,
    MissingProjectConfigError,
    ProjectConfigParseError,
    RemoteProjectConfigError,
)
from delivery_build.util.files import write_text

logger = logging.getLogger(__name__)

DOT_DELIVERY = ".delivery"
DELIVERY_TRUCK_GIT = "https://github.com/opscode-cookbooks/delivery-truck.git"
REMOTE_TOML_TIMEOUT = 30


class Phase(str, Enum):
    UNIT = "unit"
    LINT = "lint"
    SYNTAX = "syntax"
    PROVISION = "provision"
    DEPLOY = "deploy"
    SMOKE = "smoke"
    FUNCTIONAL = "functional"
    CLEANUP = "cleanup"


class Stage(str, Enum):
    VERIFY = "verify"
    ACCEPTANCE = "acceptance"
    ALL = "all"

    def phases(self) -> list[Phase]:
        """Phases run locally for this stage, in order."""
        verify = [Phase.LINT, Phase.SYNTAX, Phase.UNIT]
        acceptance = [Phase.PROVISION, Phase.DEPLOY, Phase.SMOKE, Phase.FUNCTIONAL, Phase.CLEANUP]
        if self is Stage.VERIFY:
            return verify
        if self is Stage.ACCEPTANCE:
            return acceptance
        return verify + acceptance


@dataclass
class DeliveryConfig:
    """The ``.delivery/config.json`` document."""

    version: str = "2"
    build_cookbook: dict[str, str] = field(
        default_factory=lambda: {
            "name": "<your build cookbook name>",
            "path": "<relative path from project root>",
        }
    )
    skip_phases: list[str] = field(default_factory=list)
    job_dispatch: dict[str, str] | None = None
    dependencies: list[str] = field(default_factory=list)
    extra: dict[str, Any] = field(default_factory=dict)

    @staticmethod
    def path(project_dir: Path) -> Path:
        return Path(project_dir) / DOT_DELIVERY / "config.json"

    @classmethod
    def default(cls) -> "DeliveryConfig":
        return cls()

    @classmethod
    def for_cookbook(cls) -> "DeliveryConfig":
        """Config for a cookbook project, built by delivery-truck."""
        return cls(
            build_cookbook={"name": "delivery-truck", "git": DELIVERY_TRUCK_GIT, "branch": "master"},
            skip_phases=["smoke", "security", "quality"],
        )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "DeliveryConfig":
        known = {f.name for f in fields(cls)} - {"extra"}
        kwargs = {k: v for k, v in data.items() if k in known}
        kwargs["extra"] = {k: v for k, v in data.items() if k not in known}
        if "version" in kwargs:
            kwargs["version"] = str(kwargs["version"])
        return cls(**kwargs)

    @classmethod
    def load(cls, project_dir: Path) -> "DeliveryConfig | None":
        """Load config.json from a project, or None when the project has none."""
        path = cls.path(project_dir)
        if not path.is_file():
            return None
        try:
            data = json.loads(path.read_text())
        except json.JSONDecodeError as e:
            raise InvalidConfigError(f"{path}: {e}") from e
        if not isinstance(data, dict):
            raise InvalidConfigError(f"{path}: expected a JSON object")
        return cls.from_dict(data)

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        extra = data.pop("extra")
        if data["job_dispatch"] is None:
            del data["job_dispatch"]
        data.update(extra)
        return data

    def write(self, project_dir: Path) -> Path:
        path = self.path(project_dir)
        write_text(path, json.dumps(self.to_dict(), indent=2) + "\n")
        logger.info("Wrote delivery configuration to %s", path)
        return path

    def skips(self, phase: str) -> bool:
        return phase in self.skip_phases

    @property
    def build_cookbook_from_supermarket(self) -> bool:
        return str(self.build_cookbook.get("supermarket", "")).lower() == "true"


@dataclass
class ProjectToml:
    """The ``.delivery/project.toml`` document."""

    remote_file: str | None = None
    local_phases: dict[str, str] | None = None

    @staticmethod
    def path(project_dir: Path) -> Path:
        return Path(project_dir) / DOT_DELIVERY / "project.toml"

    @classmethod
    def parse(cls, text: str) -> "ProjectToml":
        try:
            data = tomllib.loads(text)
        except tomllib.TOMLDecodeError as e:
            raise ProjectConfigParseError(str(e)) from e

        local_phases = data.get("local_phases")
        if local_phases is not None:
            valid = {p.value for p in Phase}
            local_phases = {k: str(v) for k, v in local_phases.items() if k in valid}
        return cls(remote_file=data.get("remote_file"), local_phases=local_phases)

    @classmethod
    def load(cls, project_dir: Path, remote_url: str | None = None) -> "ProjectToml":
        """
        Load project.toml, following ``remote_file`` when it is set.

        Args:
            project_dir: Project root containing ``.delivery/``
            remote_url: Load this URL instead of the local file

        Raises:
            MissingProjectConfigError: No local project.toml and no remote_url
            ProjectConfigParseError: The document is not valid TOML
            RemoteProjectConfigError: The remote document could not be fetched
        """
        if remote_url:
            return cls.load_remote(remote_url)

        path = cls.path(project_dir)
        if not path.exists():
            raise MissingProjectConfigError(str(path))

        logger.debug("Loading local project.toml from %s", path)
        project_toml = cls.parse(path.read_text())
        if project_toml.remote_file:
            return cls.load_remote(project_toml.remote_file)
        return project_toml

    @classmethod
    def load_remote(cls, url: str) -> "ProjectToml":
        logger.debug("Loading remote project.toml from %s", url)
        try:
            response = requests.get(url, timeout=REMOTE_TOML_TIMEOUT)
            response.raise_for_status()
        except requests.RequestException as e:
            raise RemoteProjectConfigError(url, str(e)) from e
        return cls.parse(response.text)

    def local_phase(self, phase: Phase | str) -> str | None:
        """Command configured for ``phase``, or None if that phase is not configured."""
        if self.local_phases is None:
            raise LocalPhasesNotFoundError()
        return self.local_phases.get(Phase(phase).value)


@dataclass
class CliToml:
    """The ``.delivery/cli.toml`` document."""

    api_protocol: str = "https"
    enterprise: str | None = None
    organization: str | None = None
    server: str | None = None
    user: str | None = None
    git_port: str = "8989"
    api_port: str | None = None
    pipeline: str = "master"
    a2_mode: bool = False

    @classmethod
    def find(cls, start: Path) -> Path | None:
        """Search up from ``start`` for ``.delivery/cli.toml``."""
        start = Path(start).resolve()
        for directory in [start, *start.parents]:
            candidate = directory / DOT_DELIVERY / "cli.toml"
            if candidate.is_file():
                return candidate
        return None

    @classmethod
    def parse(cls, text: str) -> "CliToml":
        try:
            data = tomllib.loads(text)
        except tomllib.TOMLDecodeError as e:
            raise InvalidConfigError(f"cli.toml: {e}") from e
        known = {f.name for f in fields(cls)}
        kwargs = {k: v for k, v in data.items() if k in known}
        for key in ("git_port", "api_port"):
            if key in kwargs:
                kwargs[key] = str(kwargs[key])
        return cls(**kwargs)

    @classmethod
    def load(cls, start: Path) -> "CliToml":
        """Load the nearest cli.toml, or defaults when none exists."""
        path = cls.find(start)
        if path is None:
            return cls()
        return cls.parse(path.read_text())

    @property
    def api_base_url(self) -> str:
        host = self.server or "localhost"
        if self.api_port and ":" not in host:
            host = f"{host}:{self.api_port}"
        return f"{self.api_protocol}://{host}/api/v0/e/{self.enterprise}"
