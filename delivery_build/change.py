"""
The Delivery change a build job runs for.
"""

from dataclasses import dataclass, fields
from typing import Any


@dataclass(frozen=True)
class Change:
    """Identifying components of a Delivery change, as found in the job dna."""

    enterprise: str
    organization: str
    project: str
    pipeline: str = "master"
    change_id: str = ""
    patchset_number: str = ""
    stage: str = "verify"
    phase: str = ""
    git_url: str = ""
    sha: str = ""
    patchset_branch: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Change":
        known = {f.name for f in fields(cls)}
        return cls(**{k: str(v) for k, v in data.items() if k in known})

    @classmethod
    def from_dna(cls, dna: dict[str, Any]) -> "Change":
        """Build from a dna document ({"delivery": {"change": {...}}})."""
        return cls.from_dict(dna.get("delivery", {}).get("change", {}))

    @property
    def is_acceptance(self) -> bool:
        return self.stage == "acceptance"


def project_slug(change: Change) -> str:
    """Using identifying components of the change, generate a project slug."""
    return f"{change.enterprise}-{change.organization}-{change.project}"
