"""
YAML output formatter.
"""

import yaml

from change_correlator.models.report import CorrelationReport, FileCorrelation
from change_correlator.output.formatters import (
    BaseFormatter,
    file_to_dict,
    register_formatter,
    report_to_dict,
)


@register_formatter("yaml")
class YamlFormatter(BaseFormatter):
    """
    Format output as YAML.
    """

    def format(self, report: CorrelationReport) -> str:
        """Format a correlation report as YAML."""
        return yaml.dump(report_to_dict(report), default_flow_style=False, sort_keys=False, allow_unicode=True)

    def format_files(self, files: list[FileCorrelation]) -> str:
        """Format parsed files as YAML."""
        data = {
            "total": len(files),
            "files": [file_to_dict(f) for f in files],
        }

        return yaml.dump(data, default_flow_style=False, sort_keys=False, allow_unicode=True)
