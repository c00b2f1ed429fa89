"""
Project secrets stored as data bag items.
"""

import json
import logging
from typing import Any

from delivery_build.change import Change, project_slug
from delivery_build.exceptions import SecretsNotFoundError
from delivery_build.workspace import Workspace

logger = logging.getLogger(__name__)

PROJECT_SECRETS_BAG = "delivery-secrets"
DELIVERY_BUS_BAG = "delivery-bus"


def load_data_bag_item(workspace: Workspace, bag: str, item: str) -> dict[str, Any]:
    """Load ``<data_bag_dir>/<bag>/<item>.json``."""
    path = workspace.data_bag_dir() / bag / f"{item}.json"
    if not path.exists():
        raise SecretsNotFoundError(bag, item, str(path))

    logger.info("Loading secrets %s/%s", bag, item)
    with open(path) as f:
        return json.load(f)


def get_project_secrets(workspace: Workspace, change: Change) -> dict[str, Any]:
    """Pull down the data bag item containing the secrets for this project."""
    return load_data_bag_item(workspace, PROJECT_SECRETS_BAG, project_slug(change))


def delivery_bus_secrets(workspace: Workspace) -> dict[str, Any]:
    """Shared pipeline secrets (Artifactory credentials)."""
    return load_data_bag_item(workspace, DELIVERY_BUS_BAG, "secrets")
