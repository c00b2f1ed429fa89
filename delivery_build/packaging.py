"""
Omnibus project and software definitions for delivery-cli.

The definitions are described here as plain data and rendered to the Ruby
files Omnibus reads from ``config/projects`` and ``config/software``.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path

from delivery_build.platform import PlatformInfo
from delivery_build.util.templates import TemplateLoader

logger = logging.getLogger(__name__)

PROJECT_NAME = "delivery-cli"

# Package formats Omnibus produces per platform family
PACKAGE_EXTENSIONS = {
    "debian": ["deb"],
    "rhel": ["rpm"],
    "fedora": ["rpm"],
    "mac_os_x": ["dmg", "pkg"],
    "windows": ["msi"],
}


def default_root(platform: PlatformInfo) -> str:
    return "C:" if platform.is_windows else "/opt"


def build_version(platform: PlatformInfo, now: datetime | None = None) -> str:
    """
    Package version for a build.

    WiX cannot take integers wider than 32 bits, so Windows builds use a fixed
    semantic version instead of the timestamp.
    """
    if platform.is_windows:
        return "0.0.1"
    now = now or datetime.now(timezone.utc)
    return now.strftime("%Y%m%d%H%M%S")


@dataclass
class OmnibusProject:
    name: str
    friendly_name: str
    maintainer: str
    homepage: str
    install_dir: str
    build_version: str
    build_iteration: int = 1
    dependencies: list[str] = field(default_factory=list)
    excludes: list[str] = field(default_factory=list)
    rpm_signing_passphrase_env: str = "OMNIBUS_RPM_SIGNING_PASSPHRASE"
    pkg_identifier: str = ""
    pkg_signing_identity: str = ""
    compress: str = "dmg"
    msi_upgrade_code: str = ""
    msi_wix_candle_extension: str = "WixUtilExtension"


@dataclass
class SoftwareDefinition:
    name: str
    source_path: str
    source_excludes: list[str]
    dependencies: list[str]
    env: dict[str, str]
    build_command: str
    copies: list[tuple[str, str]]
    install_dir: str


def delivery_cli_project(platform: PlatformInfo, now: datetime | None = None) -> OmnibusProject:
    """The delivery-cli Omnibus project for ``platform``."""
    root = default_root(platform)
    if platform.is_windows:
        install_dir = f"{root}/chef/{PROJECT_NAME}"
    else:
        install_dir = f"{root}/{PROJECT_NAME}"

    return OmnibusProject(
        name=PROJECT_NAME,
        friendly_name="Delivery CLI",
        maintainer="Chef Software, Inc.",
        homepage="http://chef.io",
        install_dir=install_dir,
        build_version=build_version(platform, now),
        dependencies=["preparation", PROJECT_NAME, "version-manifest"],
        excludes=["**/.git", "**/bundler/git"],
        pkg_identifier="io.chef.pkg.delivery-cli",
        pkg_signing_identity="Developer ID Installer: Chef Software, Inc. (EU3VF8YLX2)",
        msi_upgrade_code="178C5A9A-3923-4A65-AECB-3851224D0FDD",
    )


def delivery_cli_software(
    platform: PlatformInfo,
    project: OmnibusProject,
    git_sha: str = "",
    workers: int | None = None,
) -> SoftwareDefinition:
    """The software definition that compiles delivery-cli with cargo."""
    install_dir = project.install_dir
    env = {
        "DELIV_CLI_VERSION": project.build_version,
        "DELIV_CLI_GIT_SHA": git_sha,
    }

    # The rust core libraries are dynamically linked
    if platform.is_linux:
        env["LD_LIBRARY_PATH"] = f"{install_dir}/embedded/lib"
    elif platform.is_mac_os_x:
        env["DYLD_FALLBACK_LIBRARY_PATH"] = f"{install_dir}/embedded/lib:"
    elif platform.is_windows:
        env["OPENSSL_LIB_DIR"] = f"{install_dir}/embedded/bin"

    if platform.is_windows:
        copies = [
            ("{project_dir}/target/release/delivery.exe", f"{install_dir}/bin/delivery.exe"),
            (f"{install_dir}/embedded/bin/ssleay32.dll", f"{install_dir}/bin/ssleay32.dll"),
            (f"{install_dir}/embedded/bin/libeay32.dll", f"{install_dir}/bin/libeay32.dll"),
            (f"{install_dir}/embedded/bin/zlib1.dll", f"{install_dir}/bin/zlib1.dll"),
        ]
    else:
        copies = [("{project_dir}/target/release/delivery", f"{install_dir}/bin/delivery")]

    return SoftwareDefinition(
        name=PROJECT_NAME,
        source_path="..",
        source_excludes=[".git", "omnibus", "target", "vendor"],
        dependencies=["openssl", "rust"],
        env=env,
        build_command=f"cargo build -j {workers or os.cpu_count() or 1} --release",
        copies=copies,
        install_dir=install_dir,
    )


def render_omnibus_definitions(
    omnibus_dir: Path,
    platform: PlatformInfo,
    git_sha: str = "",
    workspace_root: Path | None = None,
    now: datetime | None = None,
) -> list[Path]:
    """
    Write the project and software definitions into an Omnibus project dir.

    Returns:
        Paths of the written files
    """
    loader = TemplateLoader(workspace_root)
    project = delivery_cli_project(platform, now)
    software = delivery_cli_software(platform, project, git_sha=git_sha)

    written = []
    project_file = omnibus_dir / "config" / "projects" / f"{project.name}.rb"
    loader.render_template("omnibus/project.rb.j2", {"project": project}, project_file)
    written.append(project_file)

    software_file = omnibus_dir / "config" / "software" / f"{software.name}.rb"
    loader.render_template("omnibus/software.rb.j2", {"software": software}, software_file)
    written.append(software_file)

    for path in written:
        logger.info("Rendered %s", path)
    return written


def package_globs(omnibus_dir: Path, platform: PlatformInfo) -> list[str]:
    """Glob patterns matching the packages a build produced on ``platform``."""
    return [str(omnibus_dir / "pkg" / f"*.{ext}") for ext in PACKAGE_EXTENSIONS.get(platform.family, [])]
