"""
Release phase: update GitHub with what passed the pipeline.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from delivery_build.git import GitRepo
from delivery_build.phases.quality import GITHUB_REMOTE

if TYPE_CHECKING:
    from delivery_build.pipeline import BuildContext


def run(ctx: BuildContext) -> None:
    git = ctx.attributes["git"]
    repo = GitRepo(ctx.repo_dir, git_ssh=ctx.git_ssh, dry_run=ctx.dry_run)

    repo.set_config("user.name", git["user_name"])
    repo.set_config("user.email", git["user_email"])
    repo.add_remote(GITHUB_REMOTE, git["github_remote"])
    repo.push(GITHUB_REMOTE, "master")
