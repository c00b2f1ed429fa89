"""
Rust and Ruby toolchain installation and execution.
"""

from __future__ import annotations

import logging
import os
import shlex
from typing import Mapping, Sequence

from delivery_build.util.command import CmdResult, run_cmd

logger = logging.getLogger(__name__)

NO_RUST = "NONE"


def parse_rustc_version(output: str) -> str:
    """
    Extract the nightly build date from ``rustc --version`` output.

    The output looks like ``rustc 1.3.0-nightly (faa04a8b9 2015-06-30)``; the
    last token minus its closing parenthesis is returned.
    """
    tokens = output.split()
    if not tokens:
        return NO_RUST
    return tokens[-1][:-1]


def current_rust_version() -> str:
    """Return the date of the installed nightly rustc, or "NONE" if rustc is not installed."""
    try:
        result = run_cmd(["rustc", "--version"], check=False)
    except FileNotFoundError:
        return NO_RUST
    if not result.ok:
        return NO_RUST
    return parse_rustc_version(result.stdout)


def toolchain_name(version: str, channel: str = "stable") -> str:
    """rustup toolchain identifier for a version on a channel."""
    if channel in ("", "stable") or version.startswith(channel):
        return version
    return f"{channel}-{version}"


def installed_toolchains() -> list[str]:
    try:
        result = run_cmd(["rustup", "toolchain", "list"], check=False)
    except FileNotFoundError:
        return []
    return [line.split()[0] for line in result.stdout.splitlines() if line.strip()]


def rust_install(version: str, channel: str = "stable", dry_run: bool = False) -> bool:
    """
    Install a rust toolchain through rustup.

    Returns:
        True if an install ran, False if the toolchain was already present
    """
    name = toolchain_name(version, channel)
    if any(t == name or t.startswith(f"{name}-") for t in installed_toolchains()):
        logger.info("Rust toolchain %s already installed", name)
        return False

    run_cmd(["rustup", "toolchain", "install", name, "--profile", "minimal"], dry_run=dry_run)
    return True


def rust_execute(
    command: str | Sequence[str],
    version: str,
    cwd: str | os.PathLike,
    env: Mapping[str, str] | None = None,
    channel: str = "stable",
    dry_run: bool = False,
) -> CmdResult:
    """Run ``command`` with a pinned rust toolchain (``rustup run <toolchain> ...``)."""
    argv = shlex.split(command) if isinstance(command, str) else list(command)
    return run_cmd(
        ["rustup", "run", toolchain_name(version, channel), *argv],
        cwd=cwd,
        env=env,
        dry_run=dry_run,
    )


def ruby_install(version: str, dry_run: bool = False) -> CmdResult:
    """Install a ruby for Omnibus; a no-op when that version is already present."""
    return run_cmd(["ruby-install", "--no-reinstall", "ruby", version], dry_run=dry_run)
