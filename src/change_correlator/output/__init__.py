"""
Output package for the Lint Change Correlator.

This package contains formatters for displaying correlation results
in various formats (text, JSON, YAML, unified diff).
"""

from change_correlator.output.formatters import (
    BaseFormatter,
    get_formatter,
)
from change_correlator.output.json_output import JsonFormatter
from change_correlator.output.patch_output import PatchFormatter, render_unified
from change_correlator.output.text_output import TextFormatter
from change_correlator.output.yaml_output import YamlFormatter

__all__ = [
    "BaseFormatter",
    "JsonFormatter",
    "PatchFormatter",
    "TextFormatter",
    "YamlFormatter",
    "get_formatter",
    "render_unified",
]
