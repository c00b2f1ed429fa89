"""
Build workspace management for delivery-build.
"""

import json
from pathlib import Path
from typing import Any

import yaml
from jsonschema import ValidationError, validate

from delivery_build.exceptions import InvalidConfigError, NodeNotFoundError

SCHEMA_FILE = Path(__file__).parent / "schema" / "config.schema.json"


class Workspace:
    """Manages the build workspace layout and configuration.

    Mirrors the layout a Delivery builder hands to a job: ``chef`` holds the
    job dna, ``cache`` survives between runs, ``repo`` is the project checkout.
    """

    REQUIRED_DIRS = [
        "bin",
        "cache",
        "chef",
        "etc",
        "repo",
    ]

    DEFAULT_CONFIG = {
        "attributes": {
            "delivery_rust": {
                "ruby_version": "2.1.5",
                "rust_version": "1.8.0",
            },
        },
        "artifactory": {
            "endpoint": "http://artifactory.chef.co:8081",
            "base_path": "com/getchef",
            "repository": "omnibus-unstable-local",
        },
        "secrets": {
            "data_bag_dir": "etc/data_bags",
        },
    }

    def __init__(self, root: Path, repo: Path | None = None):
        self.root = Path(root)
        self.chef = self.root / "chef"
        self.cache = self.root / "cache"
        self._repo = Path(repo) if repo else None
        self.bin = self.root / "bin"
        self.etc = self.root / "etc"
        self.config_file = self.root / "delivery-build.yaml"
        self.dna_file = self.chef / "dna.json"
        self._config_cache: dict[str, Any] | None = None

    @property
    def repo(self) -> Path:
        """Project checkout: the one recorded at init, else <root>/repo."""
        if self._repo is None:
            config = self.load_config() if self.is_initialized() else {}
            configured = config.get("workspace", {}).get("repo")
            self._repo = self.root / configured if configured else self.root / "repo"
        return self._repo

    @property
    def git_ssh(self) -> Path:
        """GIT_SSH wrapper the builder installs for authenticated pushes."""
        return self.bin / "git_ssh"

    def initialize(self) -> None:
        """Initialize workspace directory structure and config."""
        for dir_path in self.REQUIRED_DIRS:
            (self.root / dir_path).mkdir(parents=True, exist_ok=True)

        config = dict(self.DEFAULT_CONFIG)
        if self._repo is not None:
            config["workspace"] = {"repo": str(self._repo.absolute())}

        with open(self.config_file, "w") as f:
            yaml.dump(config, f, default_flow_style=False, sort_keys=False)

    def is_initialized(self) -> bool:
        return self.config_file.exists()

    def load_config(self) -> dict[str, Any]:
        """Load and validate workspace configuration (cached after first load)."""
        if self._config_cache is not None:
            return self._config_cache

        if not self.config_file.exists():
            raise FileNotFoundError(f"Config file not found: {self.config_file}")

        try:
            with open(self.config_file) as f:
                config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise InvalidConfigError(str(e)) from e

        if config is None:
            raise InvalidConfigError(f"Config file is empty: {self.config_file}")

        if not isinstance(config, dict):
            raise InvalidConfigError(f"expected a mapping, got {type(config).__name__}")

        self._validate_config_schema(config)
        self._config_cache = config

        return config

    def _validate_config_schema(self, config: dict) -> None:
        """Validate config against JSON schema."""
        schema = json.loads(SCHEMA_FILE.read_text())
        try:
            validate(instance=config, schema=schema)
        except ValidationError as e:
            raise InvalidConfigError(
                f"{e.message} (at {'.'.join(str(p) for p in e.path) or '<root>'})"
            ) from e

    def load_dna(self) -> dict[str, Any]:
        """Load the job dna written by the Delivery builder."""
        if not self.dna_file.exists():
            raise NodeNotFoundError(str(self.dna_file))

        with open(self.dna_file) as f:
            return json.load(f)

    def data_bag_dir(self) -> Path:
        """Directory holding decrypted data bag items."""
        config = self.load_config() if self.is_initialized() else {}
        rel = config.get("secrets", {}).get("data_bag_dir", "etc/data_bags")
        return self.root / rel
