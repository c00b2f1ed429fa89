"""
Omnibus build orchestration with a backup/rollback path for the install dir.

The Omnibus build deletes and recreates the install directory, so a failed
build would leave the builder without a working ``delivery`` binary. Before
building we snapshot the install dir with rsync; if the build fails the
snapshot is restored.
"""

from __future__ import annotations

import logging
import os
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from delivery_build.exceptions import CommandFailedError, RollbackError
from delivery_build.util.command import run_cmd

logger = logging.getLogger(__name__)

PASSWD_FILE = Path("/etc/passwd")


def build_user_exists(user: str, passwd_file: Path = PASSWD_FILE) -> bool:
    """Builds also run stand-alone, not just on Delivery build nodes with a dbuild user."""
    if not passwd_file.exists():
        return False
    return any(line.split(":", 1)[0] == user for line in passwd_file.read_text().splitlines())


def prepare_install_dir(settings: dict, dry_run: bool = False, passwd_file: Path = PASSWD_FILE) -> bool:
    """
    Make the install dir ours and back up a working install.

    Args:
        settings: The ``omnibus`` attributes (build_user, install_dir, backup_dir)
        dry_run: Log commands without running them
        passwd_file: Where to look for the build user

    Returns:
        True if a backup was taken
    """
    user = settings["build_user"]
    install_dir = Path(settings["install_dir"])
    user_exists = build_user_exists(user, passwd_file)

    if user_exists:
        if not install_dir.exists():
            if dry_run:
                logger.info("Would create %s", install_dir)
            else:
                install_dir.mkdir(parents=True, exist_ok=True)
        # Keep ownership after package upgrades
        run_cmd(["chown", "-R", user, str(install_dir)], dry_run=dry_run)

    if (install_dir / "bin" / "delivery").is_file():
        backup_install_dir(settings, dry_run=dry_run)
        return True
    return False


def backup_install_dir(settings: dict, dry_run: bool = False) -> None:
    """Make a backup so that if the build fails, we can rescue ourselves."""
    run_cmd(
        ["rsync", "-aP", "--delete", f"{settings['install_dir']}/", settings["backup_dir"]],
        dry_run=dry_run,
    )


def restore_install_dir(settings: dict, dry_run: bool = False) -> None:
    try:
        run_cmd(
            ["rsync", "-aP", "--delete", f"{settings['backup_dir']}/", settings["install_dir"]],
            dry_run=dry_run,
        )
    except (CommandFailedError, OSError) as e:
        raise RollbackError(f"Restoring {settings['install_dir']} failed: {e}") from e


@contextmanager
def rollback_on_failure(settings: dict, dry_run: bool = False) -> Iterator[None]:
    """
    Restore the backed-up install dir if the wrapped block raises.

    The rollback runs once and is never retried; its outcome is logged and the
    original error always propagates.
    """
    try:
        yield
    except Exception:
        backup_dir = Path(settings["backup_dir"])
        if not dry_run and not backup_dir.is_dir():
            logger.warning("Build failed and no backup exists at %s; nothing to restore", backup_dir)
            raise

        logger.error("Build failed, restoring %s from %s", settings["install_dir"], backup_dir)
        try:
            restore_install_dir(settings, dry_run=dry_run)
        except RollbackError as rollback_error:
            logger.error("Rollback failed: %s", rollback_error)
        else:
            logger.info("Rollback succeeded: %s restored", settings["install_dir"])
        raise


def omnibus_build(
    omnibus_dir: str | os.PathLike,
    cache_dir: str | os.PathLike,
    project: str,
    env: dict[str, str] | None = None,
    dry_run: bool = False,
) -> None:
    """Install Omnibus with bundler and build ``project``."""
    omnibus_dir = Path(omnibus_dir)
    gems_dir = Path(cache_dir) / "gems"

    run_cmd(
        ["bundle", "install", f"--binstubs={omnibus_dir}/bin", f"--path={gems_dir}"],
        cwd=omnibus_dir,
        env=env,
        dry_run=dry_run,
    )
    run_cmd([f"{omnibus_dir}/bin/omnibus", "build", project], cwd=omnibus_dir, env=env, dry_run=dry_run)
