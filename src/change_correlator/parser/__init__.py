"""
Parser package for the Lint Change Correlator.

This package contains modules for:
- Unified diff parsing (using unidiff)
"""

from change_correlator.parser.diff_parser import DiffParser

__all__ = [
    "DiffParser",
]
