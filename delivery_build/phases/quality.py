"""
Quality phase: tag the release.

The tag is created in this phase group so publish can version every
platform's artifacts the same way; phase groups run atomically.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from delivery_build.git import GitRepo, next_release_tag

if TYPE_CHECKING:
    from delivery_build.pipeline import BuildContext

logger = logging.getLogger(__name__)

GITHUB_REMOTE = "github"


def run(ctx: BuildContext) -> str:
    """Create and push the next release tag; returns the tag."""
    repo = GitRepo(ctx.repo_dir, git_ssh=ctx.git_ssh, dry_run=ctx.dry_run)

    repo.add_remote(GITHUB_REMOTE, ctx.attributes["git"]["github_remote"])
    repo.fetch_tags()

    tag = next_release_tag(repo.tags())
    logger.info("Tagging release %s", tag)
    repo.create_tag(tag, f"Delivery Cli {tag}")

    repo.push_tags("origin")
    repo.push_tags(GITHUB_REMOTE)
    return tag
