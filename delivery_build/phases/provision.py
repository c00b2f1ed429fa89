"""
Provision phase: create the Artifactory build record for the change.

Ideally this would run in build/publish once every builder in the matrix has
published, but there is no hook for that, so the record is created first
thing in the acceptance stage. It groups everything published to
``omnibus-unstable-local`` and later promotions act on it.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from delivery_build.artifactory import client_from_secrets
from delivery_build.secrets import delivery_bus_secrets

if TYPE_CHECKING:
    from delivery_build.pipeline import BuildContext

logger = logging.getLogger(__name__)


def run(ctx: BuildContext) -> None:
    if ctx.stage != "acceptance":
        logger.info("Not in acceptance, no build record created")
        return

    project = ctx.attributes["omnibus"]["project"]
    change_id = ctx.change.change_id
    logger.info("Creating build record %s#%s", project, change_id)

    if ctx.dry_run:
        return

    client = client_from_secrets(ctx.artifactory_settings["endpoint"], delivery_bus_secrets(ctx.workspace))
    client.create_build_record(
        project,
        change_id,
        {"omnibus.project": project, "delivery.change": change_id},
    )
