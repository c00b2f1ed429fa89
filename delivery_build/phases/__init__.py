"""
Build phases, one module per phase.

Each module exposes ``run(ctx)`` taking a :class:`~delivery_build.pipeline.BuildContext`.
"""

from dataclasses import dataclass
from typing import Callable

from delivery_build.phases import (
    functional,
    prep,
    provision,
    publish,
    quality,
    release,
    syntax,
    unit,
)


@dataclass(frozen=True)
class PhaseSpec:
    name: str
    run: Callable
    description: str
    acceptance_only: bool = False


PHASES = {
    "prep": PhaseSpec("prep", prep.run, "Prepare the builder and install toolchains"),
    "syntax": PhaseSpec("syntax", syntax.run, "Check that the project still builds"),
    "unit": PhaseSpec("unit", unit.run, "Run cargo tests and cucumber scenarios"),
    "quality": PhaseSpec("quality", quality.run, "Tag the release and push tags"),
    "functional": PhaseSpec(
        "functional", functional.run, "Promote the build to the current channel", acceptance_only=True
    ),
    "provision": PhaseSpec(
        "provision", provision.run, "Create the Artifactory build record", acceptance_only=True
    ),
    "publish": PhaseSpec("publish", publish.run, "Build and publish Omnibus packages"),
    "release": PhaseSpec("release", release.run, "Push master to GitHub"),
}
