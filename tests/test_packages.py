"""
Tests for OS packages, OpenSSL installation and secrets.
"""

import json
from unittest.mock import patch

import pytest

from delivery_build.change import Change
from delivery_build.exceptions import SecretsNotFoundError, UnsupportedPlatformError
from delivery_build.openssl import CONFIGURE_FLAGS, build_from_source, install_openssl
from delivery_build.packages import install_package
from delivery_build.platform import PlatformInfo
from delivery_build.secrets import delivery_bus_secrets, get_project_secrets
from delivery_build.util.command import CmdResult

UBUNTU = PlatformInfo("debian", "ubuntu", "22.04")
CENTOS = PlatformInfo("rhel", "centos", "7")
MAC = PlatformInfo("mac_os_x", "mac_os_x", "13.4")
WINDOWS = PlatformInfo("windows", "windows", "10.0")
OK = CmdResult([], 0, "", "")


class TestInstallPackage:
    """Tests for install_package."""

    def test_apt_install(self):
        """Test Debian installs non-interactively."""
        with patch("delivery_build.packages.package_installed", return_value=False), patch(
            "delivery_build.packages.run_cmd", return_value=OK
        ) as mock_run:
            assert install_package("git", UBUNTU)

        assert mock_run.call_args.args[0] == ["apt-get", "install", "-y", "git"]
        assert mock_run.call_args.kwargs["env"] == {"DEBIAN_FRONTEND": "noninteractive"}

    def test_yum_install(self):
        """Test RHEL installs with yum."""
        with patch("delivery_build.packages.package_installed", return_value=False), patch(
            "delivery_build.packages.run_cmd", return_value=OK
        ) as mock_run:
            install_package("git", CENTOS)

        assert mock_run.call_args.args[0] == ["yum", "install", "-y", "git"]

    def test_already_installed(self):
        """Test installed packages are skipped."""
        with patch("delivery_build.packages.package_installed", return_value=True), patch(
            "delivery_build.packages.run_cmd"
        ) as mock_run:
            assert not install_package("git", UBUNTU)
        mock_run.assert_not_called()

    def test_unsupported_family(self):
        """Test unknown families raise."""
        with pytest.raises(UnsupportedPlatformError):
            install_package("git", MAC)


class TestOpenSSL:
    """Tests for the OpenSSL strategies."""

    def test_mac_uses_brew(self):
        """Test macOS installs openssl with Homebrew when missing."""
        with patch("delivery_build.openssl.run_cmd", return_value=CmdResult([], 0, "git\nwget\n", "")) as mock_run:
            assert install_openssl(MAC, {}) is None

        assert mock_run.call_args.args[0] == ["brew", "install", "openssl"]

    def test_mac_already_installed(self):
        """Test brew install is skipped when openssl is listed."""
        with patch("delivery_build.openssl.run_cmd", return_value=CmdResult([], 0, "openssl\n", "")) as mock_run:
            install_openssl(MAC, {})
        assert mock_run.call_count == 1

    def test_windows_skipped(self, caplog):
        """Test Windows only logs."""
        with patch("delivery_build.openssl.run_cmd") as mock_run:
            assert install_openssl(WINDOWS, {}) is None
        mock_run.assert_not_called()
        assert "windows" in caplog.text

    def test_unknown_family_skipped(self, caplog):
        """Test an unrecognized family warns instead of building from source."""
        with patch("delivery_build.openssl.build_essential") as mock_essential, patch(
            "delivery_build.openssl.build_from_source"
        ) as mock_build:
            assert install_openssl(PlatformInfo("unknown", "arch", ""), {}) is None

        mock_essential.assert_not_called()
        mock_build.assert_not_called()
        assert "Unrecognized platform_family 'unknown'" in caplog.text

    def test_build_from_source(self, tmp_path):
        """Test download, unpack, link and compile."""
        build_deps = tmp_path / "build-deps"
        settings = {
            "version": "1.0.1m",
            "build_deps": str(build_deps),
            "source_url": "https://www.openssl.org/source/openssl-{version}.tar.gz",
        }

        with patch("delivery_build.openssl.download") as mock_download, patch(
            "delivery_build.openssl.run_cmd", return_value=OK
        ) as mock_run:
            link = build_from_source(settings)

        mock_download.assert_called_once_with(
            "https://www.openssl.org/source/openssl-1.0.1m.tar.gz", build_deps / "openssl-1.0.1m.tar.gz"
        )
        commands = [c.args[0] for c in mock_run.call_args_list]
        assert commands == [
            ["tar", "xzf", "openssl-1.0.1m.tar.gz"],
            ["./config", *CONFIGURE_FLAGS],
            ["make", "depend"],
            ["make"],
        ]
        assert link.is_symlink()
        assert str(link.readlink()) == str(build_deps / "openssl-1.0.1m")

    def test_already_built(self, tmp_path):
        """Test nothing is compiled when libssl.a exists."""
        build_deps = tmp_path / "build-deps"
        source = build_deps / "openssl-1.0.1m"
        source.mkdir(parents=True)
        (source / "libssl.a").write_text("")
        settings = {"version": "1.0.1m", "build_deps": str(build_deps), "source_url": "https://x/{version}"}

        with patch("delivery_build.openssl.download"), patch("delivery_build.openssl.run_cmd") as mock_run:
            build_from_source(settings)

        mock_run.assert_not_called()


class TestSecrets:
    """Tests for data bag secrets."""

    def test_project_secrets(self, temp_workspace):
        """Test project secrets are keyed by the project slug."""
        change = Change(enterprise="chef", organization="delivery", project="delivery-cli")
        path = temp_workspace.data_bag_dir() / "delivery-secrets" / "chef-delivery-delivery-cli.json"
        path.parent.mkdir(parents=True)
        path.write_text(json.dumps({"github_token": "t"}))

        assert get_project_secrets(temp_workspace, change) == {"github_token": "t"}

    def test_bus_secrets(self, temp_workspace, bus_secrets):
        """Test the shared delivery-bus item."""
        assert delivery_bus_secrets(temp_workspace) == bus_secrets

    def test_missing_secrets(self, temp_workspace):
        """Test a missing item raises SecretsNotFoundError."""
        with pytest.raises(SecretsNotFoundError):
            delivery_bus_secrets(temp_workspace)
