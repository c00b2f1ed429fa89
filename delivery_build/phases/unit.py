"""
Unit phase: cargo tests and the cucumber behavioural tests.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from delivery_build.util.command import run_cmd

if TYPE_CHECKING:
    from delivery_build.pipeline import BuildContext


def run(ctx: BuildContext) -> None:
    repo = ctx.repo_dir
    run_cmd(["cargo", "clean"], cwd=repo, dry_run=ctx.dry_run)
    # the cucumber-driven tests share a workspace and cannot run in parallel
    run_cmd(["cargo", "test"], cwd=repo, env={"RUST_TEST_TASKS": "1"}, dry_run=ctx.dry_run)
    run_cmd(["make", "cucumber"], cwd=repo, dry_run=ctx.dry_run)
