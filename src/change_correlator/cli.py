"""
Command-line interface for the Lint Change Correlator.

This module provides the CLI using Click framework for argument parsing
and orchestrates the correlation pipeline.
"""

import logging
import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.progress import BarColumn, Progress, SpinnerColumn, TaskProgressColumn, TextColumn, TimeElapsedColumn

from change_correlator import __version__
from change_correlator.config import Config, find_config_file, load_config
from change_correlator.errors import CorrelatorError

console = Console(stderr=True)

FORMAT_CHOICES = ["text", "json", "yaml", "patch"]


def _configure_logging(level: str) -> None:
    """Route log records to stderr through Rich."""
    logging.basicConfig(
        level=getattr(logging, level),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )
    logging.getLogger("git").setLevel(logging.WARNING)


def _emit(formatted_output: str, output: Optional[Path]) -> None:
    if output:
        output.write_text(formatted_output, encoding="utf-8")
        console.print(f"[green]Results written to:[/green] {output}")
    else:
        # Print directly to stdout to preserve ANSI codes from formatter
        sys.stdout.write(formatted_output)
        sys.stdout.flush()


def _apply_overrides(
    config: Config,
    context_lines: Optional[int],
    workers: Optional[int],
    rename_threshold: Optional[float],
    no_renames: bool,
) -> Config:
    """Return a copy of the config with command-line values applied."""
    diff = config.diff
    if context_lines is not None:
        diff = diff.model_copy(update={"context_lines": context_lines})
    concurrency = config.concurrency
    if workers is not None:
        concurrency = concurrency.model_copy(update={"max_workers": workers})
    renames = config.renames
    if rename_threshold is not None:
        renames = renames.model_copy(update={"similarity_threshold": rename_threshold})
    if no_renames:
        renames = renames.model_copy(update={"enabled": False})
    return config.model_copy(update={"diff": diff, "concurrency": concurrency, "renames": renames})


@click.group()
@click.version_option(version=__version__, prog_name="change-correlator")
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True, path_type=Path),
    help="Path to configuration file.",
)
@click.pass_context
def cli(ctx: click.Context, config: Optional[Path]) -> None:
    """Lint Change Correlator - Find the lines a change actually touched."""
    ctx.ensure_object(dict)
    if config is None:
        config = find_config_file(Path.cwd())
    try:
        ctx.obj["config"] = load_config(config)
    except ValueError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise click.Abort()


def _repo_option(func):
    return click.option(
        "--repo",
        "-r",
        type=click.Path(exists=True, file_okay=False, path_type=Path),
        default=".",
        show_default=True,
        help="Path to the Git repository.",
    )(func)


@cli.command()
@_repo_option
@click.option("--base", "-b", required=True, help="Base revision (branch, tag, SHA, HEAD~N).")
@click.option("--target", "-t", default="HEAD", show_default=True, help="Target revision.")
@click.option(
    "--context-lines",
    "-U",
    type=click.IntRange(min=0),
    help="Context lines around each change (default from config: 3).",
)
@click.option("--workers", type=click.IntRange(min=1), help="Worker threads for per-file diffs.")
@click.option(
    "--rename-threshold",
    type=click.FloatRange(0.0, 1.0),
    help="Minimum similarity for rename detection (default 0.5).",
)
@click.option("--no-renames", is_flag=True, help="Report renames as delete + add.")
@click.option(
    "--format",
    "-f",
    "output_format",
    type=click.Choice(FORMAT_CHOICES),
    default="text",
    help="Output format (default: text).",
)
@click.option(
    "--output",
    "-o",
    type=click.Path(path_type=Path),
    help="Output file path. If not specified, prints to stdout.",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.pass_context
def correlate(
    ctx: click.Context,
    repo: Path,
    base: str,
    target: str,
    context_lines: Optional[int],
    workers: Optional[int],
    rename_threshold: Optional[float],
    no_renames: bool,
    output_format: str,
    output: Optional[Path],
    verbose: bool,
) -> None:
    """Correlate two revisions and report touched lines per changed file."""
    from change_correlator.analyzer.change_correlator import ChangeCorrelator
    from change_correlator.output.formatters import get_formatter
    from change_correlator.output.text_output import TextFormatter

    config = _apply_overrides(ctx.obj["config"], context_lines, workers, rename_threshold, no_renames)
    verbose = verbose or config.output.verbose
    _configure_logging("DEBUG" if verbose else config.logging.level)

    if verbose:
        console.print(f"[blue]Repository:[/blue] {repo}")
        console.print(f"[blue]Revisions:[/blue] {base}..{target}")
        console.print(f"[blue]Context lines:[/blue] {config.diff.context_lines}")

    correlator = ChangeCorrelator(repo, config=config)
    try:
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            TaskProgressColumn(),
            TimeElapsedColumn(),
            console=console,
            transient=True,  # Remove progress bar when done
        ) as progress:
            task = progress.add_task("Resolving revisions...", total=None)

            def update_progress(current: int, total: int, description: str) -> None:
                progress.update(task, completed=current, total=total, description=description)

            report = correlator.correlate(base, target, progress_callback=update_progress)
    except CorrelatorError as e:
        console.print(f"[red]Error:[/red] {e}")
        if verbose:
            import traceback
            console.print(traceback.format_exc())
        raise click.Abort()
    finally:
        correlator.close()

    if output_format == "text":
        formatter = TextFormatter(colorize=config.output.colorize and output is None)
    else:
        formatter = get_formatter(output_format)
    _emit(formatter.format(report), output)


@cli.command("map")
@_repo_option
@click.option("--base", "-b", required=True, help="Base (old) revision.")
@click.option("--target", "-t", default="HEAD", show_default=True, help="Target (new) revision.")
@click.option("--path", "-p", "file_path", required=True, help="File path in the target revision.")
@click.option("--line", "-l", type=click.IntRange(min=1), required=True, help="Line number to translate.")
@click.option(
    "--direction",
    type=click.Choice(["old-to-new", "new-to-old"]),
    default="old-to-new",
    show_default=True,
    help="Which side the line number belongs to.",
)
@click.pass_context
def map_line(
    ctx: click.Context,
    repo: Path,
    base: str,
    target: str,
    file_path: str,
    line: int,
    direction: str,
) -> None:
    """Translate a line number of one file across two revisions."""
    from change_correlator.analyzer.change_correlator import ChangeCorrelator
    from change_correlator.analyzer.line_correlator import map_new_to_old, map_old_to_new

    config: Config = ctx.obj["config"]
    _configure_logging(config.logging.level)

    correlator = ChangeCorrelator(repo, config=config)
    try:
        report = correlator.correlate(base, target)
    except CorrelatorError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise click.Abort()
    finally:
        correlator.close()

    entry = report.get_file(file_path)
    if entry is None:
        failure = next((f for f in report.failures if f.path == file_path), None)
        if failure is not None:
            console.print(f"[red]Error:[/red] {failure.message}")
            raise click.Abort()
        # Unchanged file: every line maps to itself
        click.echo(str(line))
        return

    if direction == "old-to-new":
        mapped = map_old_to_new(entry.patch, line)
    else:
        mapped = map_new_to_old(entry.patch, line)

    if mapped is None:
        console.print(f"[yellow]Line {line} of {file_path} has no counterpart ({direction}).[/yellow]")
        ctx.exit(3)
    click.echo(str(mapped))


@cli.command()
@click.option(
    "--diff",
    "-d",
    "diff_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    required=True,
    help="Path to a unified diff file.",
)
@click.option(
    "--format",
    "-f",
    "output_format",
    type=click.Choice(FORMAT_CHOICES),
    default="text",
    help="Output format (default: text).",
)
@click.option(
    "--output",
    "-o",
    type=click.Path(path_type=Path),
    help="Output file path. If not specified, prints to stdout.",
)
@click.pass_context
def touched(
    ctx: click.Context,
    diff_path: Path,
    output_format: str,
    output: Optional[Path],
) -> None:
    """List the touched lines of every file in an existing diff."""
    from change_correlator.output.formatters import get_formatter
    from change_correlator.parser.diff_parser import DiffParser

    config: Config = ctx.obj["config"]
    _configure_logging(config.logging.level)

    try:
        files = DiffParser.parse_file(diff_path)
    except CorrelatorError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise click.Abort()

    formatter = get_formatter(output_format)
    _emit(formatter.format_files(files), output)


def main() -> None:
    """Main entry point for the CLI."""
    cli(obj={})
