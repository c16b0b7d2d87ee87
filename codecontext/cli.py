"""Typer-based CLI for CodeContext codebase maps."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from . import __version__, config
from .cache import NullCache, ParseCache
from .config_manager import AnalysisConfig, find_config_file, load_config, save_config
from .graph_export import export_dot, export_json
from .orchestrator import AnalysisOrchestrator, AnalysisResult, TooManyFilesError

console = Console()

app = typer.Typer(
    help="🗺️ CodeContext: dependency graphs, hotspots and learning paths for a codebase.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


def version_callback(value: bool):
    """Print version and exit."""
    if value:
        typer.echo(f"CodeContext v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        "-v",
        help="Show version and exit.",
        callback=version_callback,
        is_eager=True,
    ),
    verbose: bool = typer.Option(False, "--verbose", help="Show debug logging."),
):
    """CodeContext: find where to start reading an unfamiliar codebase."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _load_config(project_path: Path, config_file: Optional[Path]) -> AnalysisConfig:
    path = config_file or find_config_file(project_path)
    return load_config(path)


def _run_analysis(
    project_path: Path,
    config_file: Optional[Path],
    no_cache: bool = False,
    no_git: bool = False,
) -> tuple[AnalysisConfig, AnalysisResult]:
    cfg = _load_config(project_path, config_file)
    cache = ParseCache(config.CACHE_DIR) if cfg.enable_cache and not no_cache else NullCache()
    orchestrator = AnalysisOrchestrator(cfg, cache=cache, with_history=not no_git)

    try:
        with console.status("[bold cyan]Analyzing codebase...[/bold cyan]"):
            result = orchestrator.run(project_path)
    except TooManyFilesError as exc:
        console.print(f"[yellow]⚠️ {exc}[/yellow]")
        raise typer.Exit(code=1)
    return cfg, result


def _short(result: AnalysisResult, identity: str) -> str:
    try:
        return str(Path(identity).relative_to(result.root))
    except ValueError:
        return identity


def _print_summary(result: AnalysisResult) -> None:
    report = result.report
    console.print(f"📂 Files: [bold]{len(result.graph)}[/bold] | Dependencies: [bold]{len(result.graph.edges)}[/bold]")
    console.print(f"🧠 Parsed {report.parsed} files ({report.cached} from cache, {report.failed} failed)")
    if result.graph.cyclic:
        members = len(result.graph.cycle_members())
        console.print(f"[yellow]⚠️ Circular dependencies detected ({members} files on cycles)[/yellow]")


def _print_hotspots(result: AnalysisResult, limit: int) -> None:
    hotspots = result.hotspots(limit)
    table = Table(title=f"🔥 Hot Zones (Top {len(hotspots)})")
    table.add_column("#", justify="right", style="dim")
    table.add_column("File", style="cyan")
    table.add_column("Score", justify="right", style="magenta")
    table.add_column("Dependents", justify="right")
    for index, (identity, score) in enumerate(hotspots, start=1):
        table.add_row(str(index), _short(result, identity), f"{score:.4f}", str(result.graph.in_degree(identity)))
    console.print(table)


def _print_learning_path(result: AnalysisResult, limit: int) -> None:
    steps = result.learning_path[:limit] if limit > 0 else result.learning_path
    table = Table(title=f"📚 Learning Path ({len(steps)} of {len(result.learning_path)} files)")
    table.add_column("Step", justify="right", style="dim")
    table.add_column("File", style="cyan")
    table.add_column("Role", style="green")
    table.add_column("Why")
    for index, step in enumerate(steps, start=1):
        table.add_row(str(index), _short(result, step.identity), step.role.value, step.rationale)
    console.print(table)


@app.command("analyze")
def analyze(
    project_path: Path = typer.Argument(Path("."), exists=True, file_okay=False, help="Path to analyze."),
    config_file: Optional[Path] = typer.Option(None, "--config", "-c", help="Path to a .codecontext.toml file."),
    no_cache: bool = typer.Option(False, "--no-cache", help="Disable the parse cache."),
    clear_cache: bool = typer.Option(False, "--clear-cache", help="Clear the parse cache before analyzing."),
    no_git: bool = typer.Option(False, "--no-git", help="Skip git history enrichment."),
    export: Optional[Path] = typer.Option(None, "--export", "-o", help="Write results to this file."),
    fmt: str = typer.Option("json", "--format", "-f", help="Export format: json or dot."),
):
    """Analyze a codebase: dependency graph, hotspots and learning path."""
    fmt = fmt.lower()
    if fmt not in {"json", "dot"}:
        raise typer.BadParameter("Format must be one of: json, dot")

    if clear_cache:
        removed = ParseCache(config.CACHE_DIR).clear()
        console.print(f"🗑️ Cache cleared ({removed} entries)")

    cfg, result = _run_analysis(project_path, config_file, no_cache=no_cache, no_git=no_git)
    if not result.units:
        console.print("[red]❌ No source files found[/red]")
        raise typer.Exit(code=1)

    _print_summary(result)
    _print_hotspots(result, cfg.hotspot_count)
    _print_learning_path(result, cfg.learning_path_length)

    if export is not None:
        if fmt == "json":
            export_json(result, export)
        else:
            export_dot(result, export)
        console.print(f"✅ Exported results to {export}")


@app.command("path")
def learning_path(
    project_path: Path = typer.Argument(Path("."), exists=True, file_okay=False, help="Path to analyze."),
    config_file: Optional[Path] = typer.Option(None, "--config", "-c", help="Path to a .codecontext.toml file."),
    limit: int = typer.Option(0, "--limit", "-n", min=0, help="Show at most this many steps (0 = all)."),
    no_cache: bool = typer.Option(False, "--no-cache", help="Disable the parse cache."),
):
    """Print the suggested reading order, dependencies first."""
    _, result = _run_analysis(project_path, config_file, no_cache=no_cache, no_git=True)
    if not result.learning_path:
        console.print("No source files found.")
        raise typer.Exit(code=0)
    _print_learning_path(result, limit)


@app.command("hotspots")
def hotspots(
    project_path: Path = typer.Argument(Path("."), exists=True, file_okay=False, help="Path to analyze."),
    config_file: Optional[Path] = typer.Option(None, "--config", "-c", help="Path to a .codecontext.toml file."),
    top: Optional[int] = typer.Option(None, "--top", "-t", min=1, max=200, help="Number of hotspots to show."),
    no_cache: bool = typer.Option(False, "--no-cache", help="Disable the parse cache."),
):
    """Rank files by structural importance."""
    cfg, result = _run_analysis(project_path, config_file, no_cache=no_cache, no_git=True)
    if not result.scores:
        console.print("No source files found.")
        raise typer.Exit(code=0)
    _print_hotspots(result, top or cfg.hotspot_count)


@app.command("init-config")
def init_config(
    project_path: Path = typer.Argument(Path("."), exists=True, file_okay=False, help="Project directory."),
    force: bool = typer.Option(False, "--force", help="Overwrite an existing [analysis] table."),
):
    """Write a default .codecontext.toml."""
    target = project_path / config.CONFIG_FILENAME
    if target.exists() and not force:
        raise typer.BadParameter(f"{target} already exists. Use --force to overwrite.")
    save_config(AnalysisConfig(), target)
    console.print(f"✅ Created default config at {target}")


@app.command("clear-cache")
def clear_cache_command():
    """Remove all cached parse results."""
    removed = ParseCache(config.CACHE_DIR).clear()
    console.print(f"🗑️ Removed {removed} cache entries")


if __name__ == "__main__":
    app()
