"""
JSON output formatter.
"""

import json

from change_correlator.models.report import CorrelationReport, FileCorrelation
from change_correlator.output.formatters import (
    BaseFormatter,
    file_to_dict,
    register_formatter,
    report_to_dict,
)


@register_formatter("json")
class JsonFormatter(BaseFormatter):
    """
    Format output as JSON.
    """

    def __init__(self, indent: int = 2) -> None:
        """
        Initialize the JSON formatter.

        Args:
            indent: JSON indentation level.
        """
        self.indent = indent

    def format(self, report: CorrelationReport) -> str:
        """Format a correlation report as JSON."""
        return json.dumps(report_to_dict(report), indent=self.indent, default=str)

    def format_files(self, files: list[FileCorrelation]) -> str:
        """Format parsed files as JSON."""
        data = {
            "total": len(files),
            "files": [file_to_dict(f) for f in files],
        }

        return json.dumps(data, indent=self.indent, default=str)
