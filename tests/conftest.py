"""
Pytest configuration and shared fixtures.
"""

import json
import tempfile
from dataclasses import replace
from pathlib import Path

import pytest

from delivery_build.attributes import resolve_attributes
from delivery_build.change import Change
from delivery_build.pipeline import BuildContext
from delivery_build.platform import PlatformInfo
from delivery_build.workspace import Workspace

UBUNTU = PlatformInfo("debian", "ubuntu", "22.04")
CENTOS = PlatformInfo("rhel", "centos", "7")
MAC = PlatformInfo("mac_os_x", "mac_os_x", "13.4")
WINDOWS = PlatformInfo("windows", "windows", "10.0")


@pytest.fixture
def temp_workspace():
    """Create a temporary workspace for testing."""
    with tempfile.TemporaryDirectory() as tmpdir:
        workspace = Workspace(Path(tmpdir))
        workspace.initialize()
        yield workspace


@pytest.fixture
def ubuntu():
    return UBUNTU


@pytest.fixture
def verify_change():
    return Change(
        enterprise="chef",
        organization="delivery",
        project="delivery-cli",
        change_id="a1b2c3",
        stage="verify",
        phase="unit",
    )


@pytest.fixture
def acceptance_change(verify_change):
    return replace(verify_change, stage="acceptance", phase="functional")


@pytest.fixture
def make_context(temp_workspace):
    """Factory for build contexts on a temp workspace."""

    def _make(platform=UBUNTU, change=None, delivery_config=None, dry_run=False):
        config = temp_workspace.load_config()
        return BuildContext(
            workspace=temp_workspace,
            attributes=resolve_attributes(str(temp_workspace.root), platform, config),
            platform=platform,
            change=change,
            delivery_config=delivery_config,
            config=config,
            dry_run=dry_run,
        )

    return _make


@pytest.fixture
def bus_secrets(temp_workspace):
    """Write delivery-bus Artifactory credentials into the workspace."""
    path = temp_workspace.data_bag_dir() / "delivery-bus" / "secrets.json"
    path.parent.mkdir(parents=True)
    secrets = {"artifactory_username": "delivery", "artifactory_password": "s3cret"}
    path.write_text(json.dumps(secrets))
    return secrets
