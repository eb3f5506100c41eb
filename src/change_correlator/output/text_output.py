"""
Human-readable text output formatter.
"""

from io import StringIO

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from change_correlator.analyzer.line_correlator import touched_ranges
from change_correlator.models.report import CorrelationReport, FileCorrelation
from change_correlator.models.snapshot import ChangeKind
from change_correlator.output.formatters import BaseFormatter, register_formatter


def _format_ranges(ranges: list[tuple[int, int]], limit: int = 8) -> str:
    parts = [str(a) if a == b else f"{a}-{b}" for a, b in ranges[:limit]]
    if len(ranges) > limit:
        parts.append(f"... ({len(ranges)} ranges)")
    return ", ".join(parts) if parts else "-"


@register_formatter("text")
class TextFormatter(BaseFormatter):
    """
    Format output as human-readable text using Rich.
    """

    def __init__(self, colorize: bool = True) -> None:
        """
        Initialize the text formatter.

        Args:
            colorize: Whether to use colors in output.
        """
        self.colorize = colorize

    def _kind_style(self, kind: ChangeKind) -> str:
        """Get the style for a change kind."""
        if not self.colorize:
            return ""

        styles = {
            ChangeKind.ADDED: "green",
            ChangeKind.DELETED: "red",
            ChangeKind.MODIFIED: "yellow",
            ChangeKind.RENAMED: "cyan",
        }
        return styles.get(kind, "")

    def _files_table(self, files: list[FileCorrelation]) -> Table:
        table = Table(show_header=True, header_style="bold")
        table.add_column("Kind")
        table.add_column("Path", style="bold")
        table.add_column("+", justify="right", style="green")
        table.add_column("-", justify="right", style="red")
        table.add_column("Touched lines")

        for entry in files:
            style = self._kind_style(entry.kind)
            path = entry.path
            if entry.old_path:
                path = f"{entry.old_path} → {entry.path}"
            touched = "binary" if entry.patch.is_binary else _format_ranges(touched_ranges(entry.patch))
            table.add_row(
                f"[{style}]{entry.kind.value}[/{style}]" if style else entry.kind.value,
                path,
                str(entry.patch.added_count),
                str(entry.patch.removed_count),
                touched,
            )
        return table

    def format(self, report: CorrelationReport) -> str:
        """Format a correlation report as text."""
        output = StringIO()
        console = Console(file=output, force_terminal=self.colorize, width=120)

        # Header
        console.print()
        console.print(
            Panel.fit(
                "[bold]Lint Change Correlator[/bold]\n"
                "Correlation Report",
                border_style="blue",
            )
        )
        console.print()

        # Summary
        console.print("[bold]Summary[/bold]")
        console.print(f"  Repository: {report.repo_path}")
        console.print(f"  Base: {report.base} ({report.base_oid[:12]})")
        console.print(f"  Target: {report.target} ({report.target_oid[:12]})")
        console.print(f"  Files Changed: {report.total_files_changed}")
        console.print(f"  Lines: +{report.total_added} -{report.total_removed}")
        if report.duration_ms:
            console.print(f"  Correlation Time: {report.duration_ms:.2f}ms")
        console.print()

        if report.files:
            console.print(self._files_table(report.files))
            console.print()
        else:
            console.print("[green]No files changed.[/green]")
            console.print()

        if report.failures:
            console.print("[bold red]Failures[/bold red]")
            for failure in report.failures:
                console.print(f"  ❌ {failure.path} ({failure.error_type}): {failure.message}")
            console.print()

        if report.warnings:
            console.print("[bold yellow]Warnings[/bold yellow]")
            for warning in report.warnings:
                console.print(f"  ⚠️  {warning}")
            console.print()

        return output.getvalue()

    def format_files(self, files: list[FileCorrelation]) -> str:
        """Format parsed files as a table."""
        output = StringIO()
        console = Console(file=output, force_terminal=self.colorize, width=120)

        if not files:
            console.print("[dim]No files in diff.[/dim]")
            return output.getvalue()

        console.print(self._files_table(files))
        console.print(f"\nTotal: {len(files)} files")

        return output.getvalue()
