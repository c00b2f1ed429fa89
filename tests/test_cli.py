"""
Tests for CLI commands.
"""

import json
from unittest.mock import patch

import pytest
from typer.testing import CliRunner

from delivery_build.cli import app
from delivery_build.pipeline import BuildContext
from delivery_build.platform import PlatformInfo
from delivery_build.workspace import Workspace

runner = CliRunner()

UBUNTU = PlatformInfo("debian", "ubuntu", "22.04")


@pytest.fixture
def workspace_dir(tmp_path):
    """An initialized workspace."""
    path = tmp_path / "workspace"
    result = runner.invoke(app, ["init", str(path)])
    assert result.exit_code == 0
    return path


@pytest.fixture(autouse=True)
def fixed_platform():
    with patch("delivery_build.pipeline.detect_platform", return_value=UBUNTU):
        yield


class TestInit:
    """Tests for init command."""

    def test_init_creates_workspace(self, tmp_path):
        """Test that init creates workspace structure."""
        path = tmp_path / "test-workspace"

        result = runner.invoke(app, ["init", str(path)])

        assert result.exit_code == 0
        assert (path / "delivery-build.yaml").exists()
        for name in ("bin", "cache", "chef", "etc", "repo"):
            assert (path / name).is_dir()

    def test_init_shows_next_steps(self, tmp_path):
        """Test that init shows helpful next steps."""
        result = runner.invoke(app, ["init", str(tmp_path / "ws")])

        assert "Created directory structure" in result.stdout
        assert "Next steps:" in result.stdout
        assert "delivery-build run prep" in result.stdout

    def test_init_cookbook_config(self, tmp_path):
        """Test --cookbook writes a delivery-truck config into the repo."""
        path = tmp_path / "ws"

        result = runner.invoke(app, ["init", str(path), "--cookbook"])

        assert result.exit_code == 0
        config = json.loads((path / "repo" / ".delivery" / "config.json").read_text())
        assert config["build_cookbook"]["name"] == "delivery-truck"
        assert "quality" in config["skip_phases"]

    def test_init_external_repo(self, tmp_path):
        """Test --repo points the workspace at an existing checkout."""
        checkout = tmp_path / "delivery-cli"
        checkout.mkdir()

        result = runner.invoke(app, ["init", str(tmp_path / "ws"), "--repo", str(checkout), "--cookbook"])

        assert result.exit_code == 0
        assert (checkout / ".delivery" / "config.json").exists()

    def test_init_repo_used_by_later_commands(self, tmp_path):
        """Test the checkout given to init is where phases run."""
        checkout = tmp_path / "delivery-cli"
        checkout.mkdir()
        path = tmp_path / "ws"
        runner.invoke(app, ["init", str(path), "--repo", str(checkout)])

        ctx = BuildContext.from_workspace(Workspace(path))
        assert ctx.repo_dir == checkout

        with patch("delivery_build.phases.unit.run_cmd") as mock_run:
            result = runner.invoke(app, ["-w", str(path), "run", "unit"])

        assert result.exit_code == 0, result.stdout
        assert {c.kwargs["cwd"] for c in mock_run.call_args_list} == {checkout}


class TestRun:
    """Tests for run command."""

    def test_dry_run(self, workspace_dir):
        """Test phases run in pipeline order without executing commands."""
        with patch("delivery_build.util.command.subprocess.run") as mock_subprocess:
            result = runner.invoke(app, ["-w", str(workspace_dir), "run", "unit", "syntax", "--dry-run"])

        assert result.exit_code == 0, result.stdout
        assert "Dry run" in result.stdout
        assert result.stdout.index("✓ syntax") < result.stdout.index("✓ unit")
        mock_subprocess.assert_not_called()

    def test_acceptance_phase_skipped(self, workspace_dir):
        """Test acceptance-only phases are reported as skipped."""
        result = runner.invoke(app, ["-w", str(workspace_dir), "run", "provision", "--dry-run"])

        assert result.exit_code == 0
        assert "provision (skipped)" in result.stdout

    def test_unknown_phase(self, workspace_dir):
        """Test an unknown phase is a friendly error."""
        result = runner.invoke(app, ["-w", str(workspace_dir), "run", "smoke", "--dry-run"])

        assert result.exit_code == 1
        assert "Error:" in result.stdout
        assert "smoke" in result.stdout

    def test_not_in_workspace(self, tmp_path):
        """Test running outside a workspace explains how to create one."""
        result = runner.invoke(app, ["-w", str(tmp_path / "nowhere"), "run", "unit"])

        assert result.exit_code == 1
        assert "No delivery-build workspace found" in result.stdout
        assert "delivery-build init" in result.stdout

    def test_workspace_from_env(self, workspace_dir):
        """Test DELIVERY_BUILD_WORKSPACE selects the workspace."""
        result = runner.invoke(
            app, ["run", "unit", "--dry-run"], env={"DELIVERY_BUILD_WORKSPACE": str(workspace_dir)}
        )

        assert result.exit_code == 0
        assert "✓ unit" in result.stdout


class TestPhases:
    """Tests for phases command."""

    def test_lists_every_phase(self, workspace_dir):
        """Test the table lists the pipeline."""
        result = runner.invoke(app, ["-w", str(workspace_dir), "phases"])

        assert result.exit_code == 0
        assert "Pipeline phases" in result.stdout
        for name in ("prep", "quality", "release"):
            assert name in result.stdout


class TestOmnibusRender:
    """Tests for omnibus render command."""

    def test_render_definitions(self, workspace_dir, tmp_path):
        """Test project and software definitions are written."""
        out = tmp_path / "omnibus"

        result = runner.invoke(
            app, ["-w", str(workspace_dir), "omnibus", "render", "--git-sha", "deadbeef", "--out", str(out)]
        )

        assert result.exit_code == 0, result.stdout
        assert (out / "config" / "projects" / "delivery-cli.rb").exists()
        assert (out / "config" / "software" / "delivery-cli.rb").exists()


class TestUtilityCommands:
    """Tests for rust-version and next-tag."""

    def test_rust_version(self):
        """Test the installed nightly date is printed."""
        with patch("delivery_build.toolchain.current_rust_version", return_value="2015-06-30"):
            result = runner.invoke(app, ["rust-version"])

        assert result.exit_code == 0
        assert "2015-06-30" in result.stdout

    def test_next_tag(self, tmp_path):
        """Test the next tag for a checkout."""
        with patch("delivery_build.git.GitRepo.tags", return_value=["0.0.1", "0.0.2"]):
            result = runner.invoke(app, ["next-tag", "--repo", str(tmp_path)])

        assert result.exit_code == 0
        assert "0.0.3" in result.stdout
