"""
Analyzer package for the Lint Change Correlator.

This package contains modules for:
- Tree differencing with rename detection
- Patch building on top of a Myers LCS diff
- Line correlation across revisions
- The correlate() entry point tying them together
"""

from change_correlator.analyzer.change_correlator import ChangeCorrelator, correlate
from change_correlator.analyzer.line_correlator import (
    diff_position,
    is_line_touched,
    map_new_to_old,
    map_old_to_new,
    new_lines_touched,
    touched_ranges,
)
from change_correlator.analyzer.patch_builder import PatchBuilder, build_from_contents
from change_correlator.analyzer.tree_differ import TreeDiffer

__all__ = [
    "ChangeCorrelator",
    "PatchBuilder",
    "TreeDiffer",
    "build_from_contents",
    "correlate",
    "diff_position",
    "is_line_touched",
    "map_new_to_old",
    "map_old_to_new",
    "new_lines_touched",
    "touched_ranges",
]
