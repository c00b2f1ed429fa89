"""
OpenSSL installation strategies per platform family.

delivery-cli links against OpenSSL; macOS gets it from Homebrew while Linux
builders compile a pinned static release from source.
"""

from __future__ import annotations

import logging
from pathlib import Path

import requests

from delivery_build.packages import build_essential
from delivery_build.platform import PlatformInfo
from delivery_build.util.command import run_cmd
from delivery_build.util.files import ensure_dir, force_symlink, sha256_file

logger = logging.getLogger(__name__)

CONFIGURE_FLAGS = ["no-idea", "no-mdc2", "no-rc5", "-fPIC"]
DOWNLOAD_TIMEOUT = 300


def download(url: str, dest: Path) -> Path:
    """Stream ``url`` to ``dest`` unless it is already there."""
    if dest.exists():
        logger.info("Using cached download %s", dest)
        return dest

    logger.info("Downloading %s", url)
    partial = dest.with_name(dest.name + ".part")
    with requests.get(url, stream=True, timeout=DOWNLOAD_TIMEOUT) as response:
        response.raise_for_status()
        with open(partial, "wb") as f:
            for chunk in response.iter_content(chunk_size=65536):
                f.write(chunk)
    partial.rename(dest)
    logger.info("Downloaded %s (sha256 %s)", dest, sha256_file(dest))
    return dest


def install_openssl(platform: PlatformInfo, settings: dict, dry_run: bool = False) -> Path | None:
    """
    Install OpenSSL for the build.

    Args:
        platform: Detected platform
        settings: The ``openssl`` attributes (version, build_deps, source_url)
        dry_run: Log commands without running them

    Returns:
        Path to the source build on Linux, otherwise None
    """
    if platform.is_mac_os_x:
        brew_list = run_cmd(["brew", "list"], check=False, dry_run=dry_run)
        if "openssl" in brew_list.stdout:
            logger.info("openssl already installed via brew")
        else:
            run_cmd(["brew", "install", "openssl"], dry_run=dry_run)
        return None

    if platform.is_windows:
        logger.warning("windows: OpenSSL install is not implemented, skipping")
        return None

    if not platform.is_linux:
        logger.warning("Unrecognized platform_family '%s', skipping OpenSSL install", platform.family)
        return None

    logger.info("Linux detected")
    build_essential(platform, dry_run=dry_run)
    return build_from_source(settings, dry_run=dry_run)


def build_from_source(settings: dict, dry_run: bool = False) -> Path:
    version = settings["version"]
    build_deps = Path(settings["build_deps"])
    if not dry_run:
        ensure_dir(build_deps)
    tarball_name = f"openssl-{version}.tar.gz"
    source_dir = build_deps / f"openssl-{version}"
    link = build_deps / "openssl"

    if dry_run:
        logger.info("Would download %s", settings["source_url"].format(version=version))
    else:
        download(settings["source_url"].format(version=version), build_deps / tarball_name)

    if source_dir.is_dir():
        logger.info("%s already unpacked", source_dir)
    else:
        run_cmd(["tar", "xzf", tarball_name], cwd=build_deps, dry_run=dry_run)

    if not dry_run:
        force_symlink(source_dir, link)

    if (link / "libssl.a").exists():
        logger.info("OpenSSL %s already built", version)
        return link

    run_cmd(["./config", *CONFIGURE_FLAGS], cwd=link, dry_run=dry_run)
    run_cmd(["make", "depend"], cwd=link, dry_run=dry_run)
    run_cmd(["make"], cwd=link, dry_run=dry_run)
    return link
