"""
Publish phase: build Omnibus packages and optionally push them to Artifactory.
"""

from __future__ import annotations

import logging
import socket
from typing import TYPE_CHECKING

from delivery_build import omnibus
from delivery_build.artifactory import ArtifactoryPublish, publish
from delivery_build.packaging import package_globs
from delivery_build.secrets import delivery_bus_secrets

if TYPE_CHECKING:
    from delivery_build.pipeline import BuildContext

logger = logging.getLogger(__name__)


def run(ctx: BuildContext) -> None:
    settings = ctx.attributes["omnibus"]

    omnibus.prepare_install_dir(settings, dry_run=ctx.dry_run)
    with omnibus.rollback_on_failure(settings, dry_run=ctx.dry_run):
        omnibus.omnibus_build(ctx.omnibus_dir, ctx.cache_dir, settings["project"], dry_run=ctx.dry_run)

    publish_packages(ctx)


def publish_packages(ctx: BuildContext) -> list[str]:
    """
    Publish built packages for every configured platform version.

    Does nothing unless the workspace config has an ``artifactory.publish``
    section. Credentials come from the ``delivery-bus`` secrets so they never
    live in the config file.

    Returns:
        Every package published
    """
    artifactory = ctx.artifactory_settings
    publish_config = artifactory.get("publish")
    if not publish_config:
        logger.info("No artifactory.publish configuration, not publishing packages")
        return []

    patterns = package_globs(ctx.omnibus_dir, ctx.platform)
    if not patterns:
        logger.warning("No known package format for platform family '%s'", ctx.platform.family)
        return []

    if ctx.dry_run:
        for platform_version in publish_config["platform_versions"]:
            logger.info(
                "Would publish %s for %s %s", ", ".join(patterns), publish_config["platform"], platform_version
            )
        return []

    secrets = delivery_bus_secrets(ctx.workspace)
    fqdn = socket.getfqdn()
    published = []
    for platform_version in publish_config["platform_versions"]:
        for pattern in patterns:
            resource = ArtifactoryPublish(
                name=ctx.attributes["omnibus"]["project"],
                repository=artifactory["repository"],
                platform=publish_config["platform"],
                platform_version=platform_version,
                endpoint=artifactory["endpoint"],
                base_path=artifactory["base_path"],
                username=secrets.get("artifactory_username", ""),
                password=secrets.get("artifactory_password", ""),
                package_path=pattern,
            )
            published.extend(
                publish(resource, ctx.omnibus_dir, ctx.cache_dir, fqdn, ctx.workspace.root, dry_run=ctx.dry_run)
            )
    return published
