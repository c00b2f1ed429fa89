"""
Prep phase: get a builder ready to compile and package delivery-cli.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from delivery_build import omnibus
from delivery_build.openssl import install_openssl
from delivery_build.packages import apt_update, install_package
from delivery_build.toolchain import ruby_install, rust_install
from delivery_build.util.command import run_cmd
from delivery_build.util.templates import TemplateLoader

if TYPE_CHECKING:
    from delivery_build.pipeline import BuildContext

logger = logging.getLogger(__name__)

LD_SO_CONF = Path("/etc/ld.so.conf.d/rust-x86_64.conf")
# default install prefix of the rust installer
RUST_LIBRARY_PATHS = ["/usr/local/lib"]
OPT_DIR = Path("/opt")


def run(ctx: BuildContext) -> None:
    rust = ctx.attributes["delivery_rust"]
    omnibus_settings = ctx.attributes["omnibus"]

    logger.info(
        "Omnibus ruby %s, build user %s:%s",
        omnibus_settings["ruby_version"],
        omnibus_settings["build_user"],
        omnibus_settings["build_user_group"],
    )

    prep_builder(ctx)

    ruby_install(rust["ruby_version"], dry_run=ctx.dry_run)
    rust_install(rust["rust_version"], channel=rust["rust_channel"], dry_run=ctx.dry_run)

    install_openssl(ctx.platform, ctx.attributes["openssl"], dry_run=ctx.dry_run)

    # omnibus_build deletes and recreates the install dir, so the build
    # user must be able to create directories in /opt
    if not ctx.platform.is_windows and omnibus.build_user_exists(omnibus_settings["build_user"]):
        run_cmd(["chown", omnibus_settings["build_user"], str(OPT_DIR)], dry_run=ctx.dry_run)


def prep_builder(ctx: BuildContext, ld_so_conf: Path = LD_SO_CONF) -> None:
    """Install the OS-level prerequisites for the platform family."""
    family = ctx.platform.family
    dry_run = ctx.dry_run

    if family in ("rhel", "fedora"):
        if dry_run:
            logger.info("Would write %s", ld_so_conf)
        else:
            TemplateLoader(ctx.workspace.root).render_template(
                "system/ld.so.conf.j2",
                {"library_paths": RUST_LIBRARY_PATHS},
                ld_so_conf,
                mode=0o644,
            )
        run_cmd(["ldconfig"], dry_run=dry_run)
        install_package("git", ctx.platform, dry_run=dry_run)
        omnibus.prepare_install_dir(ctx.attributes["omnibus"], dry_run=dry_run)
    elif family == "debian":
        apt_update(dry_run=dry_run)
        install_package("curl", ctx.platform, dry_run=dry_run)
        install_package("git", ctx.platform, dry_run=dry_run)
        omnibus.prepare_install_dir(ctx.attributes["omnibus"], dry_run=dry_run)
    elif family in ("windows", "mac_os_x"):
        pass
    else:
        logger.warning("Unrecognized platform_family '%s'", family)
