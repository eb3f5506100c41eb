"""
Base formatter and formatter registry.
"""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Callable

from change_correlator.analyzer.line_correlator import new_lines_touched, touched_ranges

if TYPE_CHECKING:
    from change_correlator.models.report import CorrelationReport, FileCorrelation


class BaseFormatter(ABC):
    """
    Abstract base class for output formatters.

    Subclasses must implement format() and format_files() methods.
    """

    @abstractmethod
    def format(self, report: "CorrelationReport") -> str:
        """
        Format a correlation report.

        Args:
            report: The correlation report to format.

        Returns:
            Formatted string representation.
        """
        pass

    @abstractmethod
    def format_files(self, files: list["FileCorrelation"]) -> str:
        """
        Format per-file patches that did not come from a correlation run.

        Args:
            files: Files parsed from a unified diff.

        Returns:
            Formatted string representation.
        """
        pass


def file_to_dict(entry: "FileCorrelation") -> dict[str, Any]:
    """Summarize one file for structured (JSON/YAML) output."""
    return {
        "path": entry.path,
        "kind": entry.kind.value,
        "old_path": entry.old_path,
        "binary": entry.patch.is_binary,
        "hunks": [
            {
                "old_start": h.old_start,
                "old_lines": h.old_lines,
                "new_start": h.new_start,
                "new_lines": h.new_lines,
            }
            for h in entry.patch.hunks
        ],
        "added": entry.patch.added_count,
        "removed": entry.patch.removed_count,
        "touched_lines": sorted(new_lines_touched(entry.patch)),
        "touched_ranges": [list(r) for r in touched_ranges(entry.patch)],
    }


def report_to_dict(report: "CorrelationReport") -> dict[str, Any]:
    """Summarize a whole report for structured (JSON/YAML) output."""
    return {
        "timestamp": report.timestamp.isoformat(),
        "repo_path": report.repo_path,
        "base": {"revision": report.base, "oid": report.base_oid},
        "target": {"revision": report.target, "oid": report.target_oid},
        "summary": {
            "files_changed": report.total_files_changed,
            "files_failed": len(report.failures),
            "lines_added": report.total_added,
            "lines_removed": report.total_removed,
            "context_lines": report.context_lines,
            "duration_ms": report.duration_ms,
        },
        "files": [file_to_dict(f) for f in report.files],
        "failures": [
            {
                "path": f.path,
                "kind": f.kind.value,
                "error": f.error_type,
                "message": f.message,
            }
            for f in report.failures
        ],
        "warnings": report.warnings,
    }


# Formatter registry
_FORMATTERS: dict[str, type[BaseFormatter]] = {}


def register_formatter(name: str) -> Callable[[type[BaseFormatter]], type[BaseFormatter]]:
    """
    Decorator to register a formatter.

    Args:
        name: The name to register the formatter under.

    Returns:
        Decorator function.
    """
    def decorator(cls: type[BaseFormatter]) -> type[BaseFormatter]:
        _FORMATTERS[name] = cls
        return cls
    return decorator


def get_formatter(name: str) -> BaseFormatter:
    """
    Get a formatter instance by name.

    Args:
        name: The formatter name (e.g., "text", "json", "yaml", "patch").

    Returns:
        An instance of the requested formatter.

    Raises:
        ValueError: If the formatter name is not recognized.
    """
    # Import formatters to ensure they're registered
    from change_correlator.output import (  # noqa: F401
        json_output,
        patch_output,
        text_output,
        yaml_output,
    )

    if name not in _FORMATTERS:
        available = ", ".join(_FORMATTERS.keys())
        raise ValueError(f"Unknown formatter: {name}. Available: {available}")

    return _FORMATTERS[name]()
