"""
Node attributes: defaults, platform overrides and workspace config overrides.
"""

import copy
from datetime import datetime, timezone
from typing import Any

from delivery_build.platform import PlatformInfo

DEFAULT_RUBY_VERSION = "2.1.5"
DEFAULT_RUST_VERSION = "1.8.0"


def build_time(now: datetime | None = None) -> str:
    """Build timestamp handed to cargo as DELIV_CLI_TIME."""
    now = now or datetime.now(timezone.utc)
    return now.strftime("+%Y-%m-%dT%H:%M:%SZ")


def default_attributes(
    workspace_root: str, platform: PlatformInfo, now: datetime | None = None
) -> dict[str, Any]:
    """
    Compute the default node attributes for a build.

    Args:
        workspace_root: Workspace root, used as the Omnibus build user's home
        platform: Detected platform
        now: Clock override for the build timestamp

    Returns:
        Nested attribute dictionary
    """
    attrs: dict[str, Any] = {
        "delivery_rust": {
            "ruby_version": DEFAULT_RUBY_VERSION,
            "rust_version": DEFAULT_RUST_VERSION,
            "rust_channel": "nightly",
            "cargo_env": {
                "RUSTC_VERSION": DEFAULT_RUST_VERSION,
                "DELIV_CLI_TIME": build_time(now),
                "OPENSSL_INCLUDE_DIR": "/opt/chefdk/embedded/include",
                "OPENSSL_LIB_DIR": "/opt/chefdk/embedded",
            },
        },
        "omnibus": {
            "ruby_version": DEFAULT_RUBY_VERSION,
            "build_user": "dbuild",
            "build_user_group": "root",
            "build_user_home": str(workspace_root),
            "project": "delivery-cli",
            "project_dir": "omnibus-delivery-cli",
            "install_dir": "/opt/delivery-cli",
            "backup_dir": "/opt/delivery-cli-safe",
        },
        "openssl": {
            "version": "1.0.1m",
            "build_deps": "/opt/delivery-cli-build-deps",
            "source_url": "https://www.openssl.org/source/openssl-{version}.tar.gz",
        },
        "git": {
            "github_remote": "git@github.com:opscode/delivery.git",
            "user_name": "Delivery",
            "user_email": "delivery@getchef.com",
        },
    }

    if platform.is_windows:
        # Omnibus on Windows needs the 64-bit ruby build
        attrs = deep_merge(
            attrs,
            {
                "omnibus": {"ruby_version": "2.1.6-x64"},
                "7-zip": {"home": "C:\\Program Files\\7-Zip"},
            },
        )

    return attrs


def deep_merge(base: dict, override: dict) -> dict:
    """
    Merge ``override`` into a copy of ``base``.

    Nested mappings merge recursively; any other value in ``override`` replaces
    the value in ``base``.
    """
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = deep_merge(merged[key], value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def resolve_attributes(
    workspace_root: str,
    platform: PlatformInfo,
    config: dict | None = None,
    now: datetime | None = None,
) -> dict[str, Any]:
    """
    Resolve effective attributes: defaults, then platform, then workspace config.

    Keeps omnibus.ruby_version in sync with delivery_rust.ruby_version and
    RUSTC_VERSION in sync with rust_version unless explicitly configured.
    """
    attrs = default_attributes(workspace_root, platform, now)
    overrides = dict((config or {}).get("attributes", {}))
    attrs = deep_merge(attrs, overrides)

    rust = attrs["delivery_rust"]
    if "RUSTC_VERSION" not in overrides.get("delivery_rust", {}).get("cargo_env", {}):
        rust["cargo_env"]["RUSTC_VERSION"] = rust["rust_version"]
    if not platform.is_windows and "ruby_version" not in overrides.get("omnibus", {}):
        attrs["omnibus"]["ruby_version"] = rust["ruby_version"]

    return attrs
