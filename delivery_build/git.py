"""
Git operations used to tag, push and release builds.
"""

from __future__ import annotations

import logging
import os
import re
from pathlib import Path

from delivery_build.util.command import CmdResult, run_cmd

logger = logging.getLogger(__name__)

FIRST_TAG = "0.0.1"
# exit status git uses when e.g. the remote already exists
GIT_FATAL = 128


def _version_key(tag: str) -> list[tuple[int, int | str]]:
    """Sort key that orders tags like ``sort -V``: digit runs compare numerically."""
    return [(0, int(part)) if part.isdigit() else (1, part) for part in re.findall(r"\d+|\D+", tag)]


def next_release_tag(tags: list[str]) -> str:
    """
    Compute the next release tag from existing tags.

    Takes the highest tag in version order and bumps its third dot-separated
    component, e.g. ``1.2.9`` -> ``1.2.10``.

    Args:
        tags: Existing tag names

    Returns:
        The next tag, or ``0.0.1`` when there are no tags
    """
    tags = [t.strip() for t in tags if t.strip()]
    if not tags:
        return FIRST_TAG

    latest = sorted(tags, key=_version_key)[-1]
    parts = latest.split(".")
    while len(parts) < 3:
        parts.append("0")
    match = re.match(r"\d+", parts[2])
    patch = int(match.group()) if match else 0
    return f"{parts[0]}.{parts[1]}.{patch + 1}"


class GitRepo:
    """A git working copy, optionally driven through a GIT_SSH wrapper."""

    def __init__(self, path: str | os.PathLike, git_ssh: str | os.PathLike | None = None, dry_run: bool = False):
        self.path = Path(path)
        self.git_ssh = str(git_ssh) if git_ssh else None
        self.dry_run = dry_run

    @property
    def env(self) -> dict[str, str]:
        return {"GIT_SSH": self.git_ssh} if self.git_ssh else {}

    def git(self, *args: str, returns: tuple[int, ...] = (0,)) -> CmdResult:
        return run_cmd(["git", *args], cwd=self.path, env=self.env, returns=returns, dry_run=self.dry_run)

    def add_remote(self, name: str, url: str) -> CmdResult:
        """Add a remote; an already existing remote is not an error."""
        result = self.git("remote", "add", name, url, returns=(0, GIT_FATAL))
        if result.returncode == GIT_FATAL:
            logger.info("Remote %s already exists", name)
        return result

    def fetch_tags(self) -> CmdResult:
        return self.git("fetch", "--tags")

    def tags(self) -> list[str]:
        return self.git("tag", "-l").stdout.splitlines()

    def create_tag(self, tag: str, message: str) -> CmdResult:
        return self.git("tag", tag, "-a", "-m", message)

    def push_tags(self, remote: str) -> CmdResult:
        return self.git("push", remote, "--tags")

    def push(self, remote: str, ref: str) -> CmdResult:
        return self.git("push", remote, ref)

    def set_config(self, key: str, value: str, global_: bool = True) -> CmdResult:
        scope = ["--global"] if global_ else []
        return self.git("config", *scope, key, value)
