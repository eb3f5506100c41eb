"""
Data models for the Lint Change Correlator.

This package contains Pydantic models for snapshots, changed files,
patches and correlation reports.
"""

from change_correlator.models.snapshot import (
    ChangedFile,
    ChangeKind,
    Snapshot,
)
from change_correlator.models.patch import (
    Hunk,
    LineKind,
    Patch,
    PatchLine,
)
from change_correlator.models.report import (
    CorrelationReport,
    FileCorrelation,
    FileFailure,
)

__all__ = [
    # Snapshot models
    "ChangedFile",
    "ChangeKind",
    "Snapshot",
    # Patch models
    "Hunk",
    "LineKind",
    "Patch",
    "PatchLine",
    # Report models
    "CorrelationReport",
    "FileCorrelation",
    "FileFailure",
]
