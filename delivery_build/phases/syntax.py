"""
Syntax phase: make sure things still build in case branches merged badly.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from delivery_build.toolchain import rust_execute

if TYPE_CHECKING:
    from delivery_build.pipeline import BuildContext


def run(ctx: BuildContext) -> None:
    rust = ctx.attributes["delivery_rust"]
    for command in ("cargo clean", "cargo build"):
        rust_execute(
            command,
            rust["rust_version"],
            cwd=ctx.repo_dir,
            env=rust["cargo_env"],
            channel=rust["rust_channel"],
            dry_run=ctx.dry_run,
        )
