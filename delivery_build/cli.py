"""
CLI entry point for delivery-build.
"""

import logging
from functools import wraps
from pathlib import Path

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from delivery_build.exceptions import (
    DeliveryBuildError,
    WorkspaceNotFoundError,
    format_error_for_cli,
)
from delivery_build.workspace import Workspace

app = typer.Typer(
    name="delivery-build",
    help="Build, test and publish delivery-cli through the Delivery pipeline phases",
    add_completion=False,
)
console = Console()
logger = logging.getLogger(__name__)

# Set by the root callback
state = {"workspace": None}


def handle_errors(func):
    """Decorator to handle exceptions in CLI commands with nice formatting."""

    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except DeliveryBuildError as e:
            console.print(format_error_for_cli(e))
            raise typer.Exit(1)
        except Exception as e:
            logger.debug("Unexpected error", exc_info=True)
            console.print(f"[red]Unexpected error:[/red] {str(e)}")
            console.print("\n[yellow]Re-run with --verbose for the full traceback.[/yellow]")
            raise typer.Exit(1)

    return wrapper


def setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), rich_tracebacks=verbose, show_path=False)],
        force=True,
    )


def current_workspace() -> Workspace:
    root = state["workspace"] or Path.cwd()
    workspace = Workspace(Path(root))
    if not workspace.is_initialized():
        raise WorkspaceNotFoundError(str(workspace.root))
    return workspace


omnibus_app = typer.Typer(help="Omnibus project commands")
app.add_typer(omnibus_app, name="omnibus")


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging"),
    workspace: Path | None = typer.Option(
        None,
        "--workspace",
        "-w",
        envvar="DELIVERY_BUILD_WORKSPACE",
        help="Workspace directory (default: current directory)",
    ),
):
    setup_logging(verbose)
    state["workspace"] = workspace


@app.command()
@handle_errors
def init(
    workspace_dir: str = typer.Argument(..., help="Workspace directory to initialize"),
    repo: Path | None = typer.Option(None, "--repo", help="Existing project checkout to build"),
    cookbook: bool = typer.Option(
        False, "--cookbook", help="Write a delivery-truck .delivery/config.json into the repo"
    ),
):
    """Initialize a new build workspace."""
    from delivery_build.delivery_config import DeliveryConfig

    console.print(f"[bold blue]Initializing workspace:[/bold blue] {workspace_dir}")

    workspace = Workspace(Path(workspace_dir), repo=repo)
    workspace.initialize()

    console.print(f"[green]✓ Created directory structure in {workspace_dir}[/green]")
    console.print(f"[green]✓ Wrote configuration to {workspace.config_file.name}[/green]")

    if cookbook:
        path = DeliveryConfig.for_cookbook().write(workspace.repo)
        console.print(f"[green]✓ Wrote {path}[/green]")

    console.print("\n[dim]Next steps:[/dim]")
    console.print(f"  cd {workspace_dir}")
    console.print("  delivery-build run prep")


@app.command()
@handle_errors
def run(
    phases: list[str] = typer.Argument(..., help="Phases to run, e.g. prep unit publish"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Log commands without running them"),
):
    """Run build phases in pipeline order."""
    from delivery_build.pipeline import BuildContext, run_pipeline

    workspace = current_workspace()
    ctx = BuildContext.from_workspace(workspace, dry_run=dry_run)

    if dry_run:
        console.print("[yellow]Dry run: commands are logged, not executed[/yellow]")
    console.print(
        f"[bold blue]Building on {ctx.platform.name} {ctx.platform.version}[/bold blue] "
        f"[dim]({ctx.platform.family}, stage {ctx.stage})[/dim]"
    )

    result = run_pipeline(ctx, phases)

    for name in result.ran:
        console.print(f"[green]✓ {name}[/green]")
    for name in result.skipped:
        console.print(f"[dim]- {name} (skipped)[/dim]")


@app.command()
@handle_errors
def phases():
    """List the pipeline phases and whether each would run."""
    from delivery_build.phases import PHASES
    from delivery_build.pipeline import PIPELINE_ORDER, BuildContext, skip_reason

    workspace = current_workspace()
    ctx = BuildContext.from_workspace(workspace)

    table = Table(title="Pipeline phases")
    table.add_column("Phase", style="cyan")
    table.add_column("Description")
    table.add_column("Status")

    for name in PIPELINE_ORDER:
        reason = skip_reason(ctx, name)
        status = f"[yellow]skipped: {reason}[/yellow]" if reason else "[green]runs[/green]"
        table.add_row(name, PHASES[name].description, status)

    console.print(table)


@omnibus_app.command()
@handle_errors
def render(
    git_sha: str = typer.Option("", "--git-sha", help="Commit recorded in the definitions"),
    out: Path | None = typer.Option(
        None, "--out", help="Omnibus project directory (default: <repo>/<omnibus.project_dir>)"
    ),
):
    """Write the Omnibus project and software definitions."""
    from delivery_build.packaging import render_omnibus_definitions
    from delivery_build.pipeline import BuildContext

    workspace = current_workspace()
    ctx = BuildContext.from_workspace(workspace)

    written = render_omnibus_definitions(
        out or ctx.omnibus_dir, ctx.platform, git_sha=git_sha, workspace_root=workspace.root
    )
    for path in written:
        console.print(f"[green]✓ Wrote {path}[/green]")


@app.command(name="rust-version")
def rust_version():
    """Print the date of the installed nightly rustc, or NONE."""
    from delivery_build.toolchain import current_rust_version

    console.print(current_rust_version())


@app.command(name="next-tag")
@handle_errors
def next_tag(
    repo: Path | None = typer.Option(None, "--repo", help="Git checkout (default: workspace repo)"),
):
    """Print the release tag the quality phase would create."""
    from delivery_build.git import GitRepo, next_release_tag

    path = repo or current_workspace().repo
    console.print(next_release_tag(GitRepo(path).tags()))


if __name__ == "__main__":
    app()
