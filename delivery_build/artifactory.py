"""
Artifactory publishing, build records and promotions.
"""

from __future__ import annotations

import glob
import logging
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import requests

from delivery_build.exceptions import ArtifactoryAPIError, InvalidResourceError
from delivery_build.util.command import run_cmd
from delivery_build.util.templates import TemplateLoader

logger = logging.getLogger(__name__)

ENDPOINT_PATTERN = re.compile(r"^https?://")
PUBLISH_CONFIG_NAME = "omnibus-publish.rb"
UNSTABLE_REPOSITORY = "omnibus-unstable-local"
REQUEST_TIMEOUT = 60


@dataclass
class ArtifactoryPublish:
    """Publishes Omnibus packages to an Artifactory repository."""

    name: str
    repository: str
    platform: str
    platform_version: str
    endpoint: str
    base_path: str
    username: str
    password: str
    package_path: str | None = None
    package_name: str | None = None

    def __post_init__(self):
        # package_name defaults to the resource name
        if not self.package_name:
            self.package_name = self.name
        self.validate()

    def validate(self) -> None:
        for attribute in (
            "repository",
            "platform",
            "platform_version",
            "endpoint",
            "base_path",
            "username",
            "password",
        ):
            value = getattr(self, attribute)
            if not isinstance(value, str) or not value:
                raise InvalidResourceError(attribute, "is required")
        if not ENDPOINT_PATTERN.match(self.endpoint):
            raise InvalidResourceError("endpoint", f"'{self.endpoint}' must start with http:// or https://")

    def packages(self) -> list[str]:
        """Packages to publish: the expanded package_path glob, or package_name."""
        if self.package_path:
            return sorted(glob.glob(self.package_path))
        return [self.package_name]


def write_publish_config(
    resource: ArtifactoryPublish, cache_dir: Path, fqdn: str, workspace_root: Path | None = None
) -> Path:
    """Render the Omnibus publish config; it holds the password, so it is mode 0600."""
    config_file = Path(cache_dir) / PUBLISH_CONFIG_NAME
    TemplateLoader(workspace_root).render_template(
        "omnibus/publish.rb.j2",
        {"resource": resource, "fqdn": fqdn},
        config_file,
        mode=0o600,
    )
    return config_file


def publish(
    resource: ArtifactoryPublish,
    omnibus_dir: Path,
    cache_dir: Path,
    fqdn: str,
    workspace_root: Path | None = None,
    dry_run: bool = False,
) -> list[str]:
    """
    Publish packages with ``omnibus publish artifactory``.

    Args:
        resource: What to publish and where
        omnibus_dir: Omnibus project directory (holds bin/omnibus)
        cache_dir: Where the publish config is written
        fqdn: Host name recorded in the config header
        workspace_root: Workspace for template overrides
        dry_run: Log commands without running them

    Returns:
        The packages that were published
    """
    config_file = write_publish_config(resource, cache_dir, fqdn, workspace_root)

    packages = resource.packages()
    if not packages:
        logger.warning("No packages matched %s", resource.package_path)

    for pkg in packages:
        logger.info("publish artifact '%s' package %s", resource.name, pkg)
        run_cmd(
            [
                f"{omnibus_dir}/bin/omnibus",
                "publish",
                "artifactory",
                resource.repository,
                pkg,
                "--config",
                str(config_file),
                "--platform",
                resource.platform,
                "--platform-version",
                resource.platform_version,
            ],
            cwd=omnibus_dir,
            dry_run=dry_run,
        )
    return packages


class ArtifactoryClient:
    """Thin client for the Artifactory build API."""

    def __init__(self, endpoint: str, username: str, password: str, session: requests.Session | None = None):
        if not ENDPOINT_PATTERN.match(endpoint):
            raise InvalidResourceError("endpoint", f"'{endpoint}' must start with http:// or https://")
        self.base_url = endpoint.rstrip("/") + "/artifactory/api"
        self.session = session or requests.Session()
        self.session.auth = (username, password)

    def _request(self, method: str, path: str, action: str, **kwargs) -> requests.Response:
        url = f"{self.base_url}/{path}"
        logger.info("%s %s", method, url)
        response = self.session.request(method, url, timeout=REQUEST_TIMEOUT, **kwargs)
        if not response.ok:
            raise ArtifactoryAPIError(action, response.status_code, response.text)
        return response

    def create_build_record(self, name: str, number: str, properties: dict[str, str]) -> dict[str, Any]:
        """
        Create a build record grouping artifacts published for a change.

        The record is what later promotions act on.
        """
        build_info = {
            "version": "1.0.1",
            "name": name,
            "number": number,
            "started": _artifactory_timestamp(),
            "properties": properties,
            "modules": [],
        }
        self._request("PUT", "build", "build record creation", json=build_info)
        return build_info

    def promote_build(
        self, name: str, number: str, channel: str, comment: str, user: str
    ) -> dict[str, Any]:
        """Promote a build record's artifacts to ``omnibus-<channel>-local``."""
        payload = {
            "status": channel,
            "comment": comment,
            "ciUser": user,
            "sourceRepo": UNSTABLE_REPOSITORY,
            "targetRepo": f"omnibus-{channel}-local",
            "copy": True,
            "dependencies": False,
        }
        response = self._request(
            "POST", f"build/promote/{name}/{number}", "build promotion", json=payload
        )
        return response.json() if response.content else {}


def _artifactory_timestamp() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.000+0000")


def client_from_secrets(endpoint: str, secrets: dict[str, Any]) -> ArtifactoryClient:
    """Client authenticated with the ``delivery-bus`` Artifactory credentials."""
    for key in ("artifactory_username", "artifactory_password"):
        if not secrets.get(key):
            raise InvalidResourceError(key, "is missing from the delivery-bus secrets")
    return ArtifactoryClient(endpoint, secrets["artifactory_username"], secrets["artifactory_password"])
