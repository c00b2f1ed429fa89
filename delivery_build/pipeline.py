"""
Build pipeline: the shared build context and the phase runner.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from delivery_build.attributes import deep_merge, resolve_attributes
from delivery_build.change import Change
from delivery_build.delivery_config import DeliveryConfig
from delivery_build.exceptions import PhaseNotFoundError
from delivery_build.platform import PlatformInfo, detect_platform
from delivery_build.workspace import Workspace

logger = logging.getLogger(__name__)

PIPELINE_ORDER = [
    "prep",
    "syntax",
    "unit",
    "quality",
    "functional",
    "provision",
    "publish",
    "release",
]


@dataclass
class BuildContext:
    """Everything a phase needs to know about the build it runs in."""

    workspace: Workspace
    attributes: dict[str, Any]
    platform: PlatformInfo
    change: Change | None = None
    delivery_config: DeliveryConfig | None = None
    config: dict[str, Any] = field(default_factory=dict)
    dry_run: bool = False

    @property
    def repo_dir(self) -> Path:
        return self.workspace.repo

    @property
    def cache_dir(self) -> Path:
        return self.workspace.cache

    @property
    def git_ssh(self) -> Path:
        return self.workspace.git_ssh

    @property
    def stage(self) -> str:
        return self.change.stage if self.change else "verify"

    @property
    def artifactory_settings(self) -> dict[str, Any]:
        return deep_merge(Workspace.DEFAULT_CONFIG["artifactory"], self.config.get("artifactory") or {})

    @property
    def omnibus_dir(self) -> Path:
        return self.repo_dir / self.attributes["omnibus"]["project_dir"]

    @classmethod
    def from_workspace(
        cls,
        workspace: Workspace,
        dry_run: bool = False,
        platform: PlatformInfo | None = None,
    ) -> "BuildContext":
        """
        Assemble a context from an initialized workspace.

        The job dna and ``.delivery/config.json`` are optional: a stand-alone
        build has neither.
        """
        config = workspace.load_config() if workspace.is_initialized() else {}
        platform = platform or detect_platform()

        change = None
        if workspace.dna_file.exists():
            change = Change.from_dna(workspace.load_dna())
        else:
            logger.info("No job dna at %s, building without a change", workspace.dna_file)

        return cls(
            workspace=workspace,
            attributes=resolve_attributes(str(workspace.root), platform, config),
            platform=platform,
            change=change,
            delivery_config=DeliveryConfig.load(workspace.repo),
            config=config,
            dry_run=dry_run,
        )


@dataclass
class PipelineResult:
    ran: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)


def skip_reason(ctx: BuildContext, name: str) -> str | None:
    """Why ``name`` will not run in this context, or None if it will."""
    from delivery_build.phases import PHASES

    if ctx.delivery_config and ctx.delivery_config.skips(name):
        return "listed in skip_phases"
    if PHASES[name].acceptance_only and ctx.stage != "acceptance":
        return f"only runs in acceptance (stage is {ctx.stage})"
    return None


def run_pipeline(ctx: BuildContext, phases: list[str]) -> PipelineResult:
    """
    Run phases in pipeline order.

    Args:
        ctx: Build context shared by all phases
        phases: Phase names to run; order given here does not matter

    Returns:
        Which phases ran and which were skipped

    Raises:
        PhaseNotFoundError: A name is not a known phase
        CommandFailedError: A phase command failed; later phases do not run
    """
    from delivery_build.phases import PHASES

    for name in phases:
        if name not in PHASES:
            raise PhaseNotFoundError(name, PIPELINE_ORDER)

    result = PipelineResult()
    requested = set(phases)
    for name in PIPELINE_ORDER:
        if name not in requested:
            continue

        reason = skip_reason(ctx, name)
        if reason:
            logger.info("Skipping phase %s: %s", name, reason)
            result.skipped.append(name)
            continue

        logger.info("Running phase %s", name)
        PHASES[name].run(ctx)
        result.ran.append(name)

    return result
