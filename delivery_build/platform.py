"""
Platform detection for selecting per-OS install strategies.
"""

from __future__ import annotations

import logging
import platform as _platform
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

OS_RELEASE = Path("/etc/os-release")

# os-release ID / ID_LIKE values mapped to a platform family
FAMILY_BY_ID = {
    "debian": "debian",
    "ubuntu": "debian",
    "rhel": "rhel",
    "centos": "rhel",
    "rocky": "rhel",
    "almalinux": "rhel",
    "ol": "rhel",
    "fedora": "fedora",
}


@dataclass(frozen=True)
class PlatformInfo:
    family: str
    name: str
    version: str
    machine: str = "x86_64"

    @property
    def is_windows(self) -> bool:
        return self.family == "windows"

    @property
    def is_mac_os_x(self) -> bool:
        return self.family == "mac_os_x"

    @property
    def is_linux(self) -> bool:
        return self.family in ("debian", "rhel", "fedora")


def parse_os_release(text: str) -> dict[str, str]:
    """Parse the KEY=value lines of an os-release file."""
    values = {}
    for line in text.splitlines():
        line = line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, _, value = line.partition("=")
        values[key] = value.strip().strip('"').strip("'")
    return values


def family_from_os_release(values: dict[str, str]) -> str:
    """Resolve the platform family from os-release ID, then ID_LIKE."""
    candidates = [values.get("ID", "")] + values.get("ID_LIKE", "").split()
    for candidate in candidates:
        if candidate in FAMILY_BY_ID:
            return FAMILY_BY_ID[candidate]
    return "unknown"


def detect_platform(os_release: Path = OS_RELEASE) -> PlatformInfo:
    """
    Detect the platform family of the current host.

    Returns:
        PlatformInfo with family one of debian, rhel, fedora, mac_os_x, windows or unknown
    """
    system = _platform.system()
    machine = _platform.machine() or "x86_64"

    if system == "Darwin":
        return PlatformInfo("mac_os_x", "mac_os_x", _platform.mac_ver()[0], machine)
    if system == "Windows":
        return PlatformInfo("windows", "windows", _platform.version(), machine)

    if os_release.exists():
        values = parse_os_release(os_release.read_text())
        info = PlatformInfo(
            family=family_from_os_release(values),
            name=values.get("ID", "linux"),
            version=values.get("VERSION_ID", ""),
            machine=machine,
        )
        logger.debug("Detected platform %s", info)
        return info

    logger.warning("Cannot determine platform family for %s", system)
    return PlatformInfo("unknown", system.lower(), _platform.release(), machine)
