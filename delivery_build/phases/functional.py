"""
Functional phase: promote the change's build to the current channel.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from delivery_build.artifactory import client_from_secrets
from delivery_build.secrets import delivery_bus_secrets

if TYPE_CHECKING:
    from delivery_build.pipeline import BuildContext

logger = logging.getLogger(__name__)

PROMOTION_CHANNEL = "current"


def run(ctx: BuildContext) -> None:
    # TODO: run real acceptance tests against the published packages before promoting
    if ctx.stage != "acceptance":
        logger.info("Not in acceptance, nothing to promote")
        return

    omnibus = ctx.attributes["omnibus"]
    change_id = ctx.change.change_id
    logger.info("Promoting %s#%s to %s", omnibus["project"], change_id, PROMOTION_CHANNEL)

    if ctx.dry_run:
        return

    client = client_from_secrets(ctx.artifactory_settings["endpoint"], delivery_bus_secrets(ctx.workspace))
    client.promote_build(
        omnibus["project"],
        change_id,
        PROMOTION_CHANNEL,
        comment=f"Promoted by Delivery change {change_id} during acceptance/functional",
        user=omnibus["build_user"],
    )
