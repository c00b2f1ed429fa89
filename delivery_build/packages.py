"""
OS package installation per platform family.
"""

from __future__ import annotations

import logging

from delivery_build.exceptions import UnsupportedPlatformError
from delivery_build.platform import PlatformInfo
from delivery_build.util.command import command_succeeds, run_cmd

logger = logging.getLogger(__name__)

BUILD_ESSENTIAL = {
    "debian": ["build-essential"],
    "rhel": ["gcc", "gcc-c++", "make", "autoconf", "patch"],
    "fedora": ["gcc", "gcc-c++", "make", "autoconf", "patch"],
}


def package_installed(name: str, platform: PlatformInfo) -> bool:
    if platform.family == "debian":
        return command_succeeds(["dpkg", "-s", name])
    if platform.family in ("rhel", "fedora"):
        return command_succeeds(["rpm", "-q", name])
    return False


def apt_update(dry_run: bool = False) -> None:
    run_cmd(["apt-get", "update"], env={"DEBIAN_FRONTEND": "noninteractive"}, dry_run=dry_run)


def install_package(name: str, platform: PlatformInfo, dry_run: bool = False) -> bool:
    """
    Install an OS package unless it is already present.

    Returns:
        True if the package manager ran
    """
    if platform.family not in BUILD_ESSENTIAL:
        raise UnsupportedPlatformError(platform.family, f"Installing package '{name}'")

    if package_installed(name, platform):
        logger.info("Package %s already installed", name)
        return False

    if platform.family == "debian":
        run_cmd(
            ["apt-get", "install", "-y", name],
            env={"DEBIAN_FRONTEND": "noninteractive"},
            dry_run=dry_run,
        )
    else:
        run_cmd(["yum", "install", "-y", name], dry_run=dry_run)
    return True


def build_essential(platform: PlatformInfo, dry_run: bool = False) -> None:
    """Install the C toolchain needed to compile native dependencies."""
    if platform.family not in BUILD_ESSENTIAL:
        raise UnsupportedPlatformError(platform.family, "Installing build-essential")
    for name in BUILD_ESSENTIAL[platform.family]:
        install_package(name, platform, dry_run=dry_run)
