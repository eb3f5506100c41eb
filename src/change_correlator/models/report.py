"""
Report data models.

Models representing the outcome of one correlation run.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from change_correlator.models.patch import Patch
from change_correlator.models.snapshot import ChangeKind


class FileCorrelation(BaseModel):
    """A changed file together with its patch."""

    path: str = Field(description="Path in the target revision")
    kind: ChangeKind = Field(description="Type of change")
    old_path: Optional[str] = Field(
        default=None,
        description="Original path (for renames)",
    )
    patch: Patch = Field(description="Line-level patch for this file")

    class Config:
        frozen = True


class FileFailure(BaseModel):
    """A changed file whose patch could not be built."""

    path: str = Field(description="Path of the failed file")
    kind: ChangeKind = Field(description="Type of change")
    error_type: str = Field(description="Error class name")
    message: str = Field(description="Human readable reason")

    class Config:
        frozen = True


class CorrelationReport(BaseModel):
    """Complete correlation report."""

    timestamp: datetime = Field(
        default_factory=datetime.now,
        description="When the correlation was performed",
    )
    repo_path: str = Field(description="Path to the repository")
    base: str = Field(description="Base revision expression")
    target: str = Field(description="Target revision expression")
    base_oid: str = Field(description="Resolved base snapshot id")
    target_oid: str = Field(description="Resolved target snapshot id")
    context_lines: int = Field(description="Context lines used for every patch")
    files: list[FileCorrelation] = Field(
        default_factory=list,
        description="Per-file successes, ordered by path",
    )
    failures: list[FileFailure] = Field(
        default_factory=list,
        description="Per-file failures, ordered by path",
    )
    warnings: list[str] = Field(
        default_factory=list,
        description="Non-fatal notices such as ambiguous renames",
    )
    duration_ms: Optional[float] = Field(
        default=None,
        description="How long the run took in milliseconds",
    )

    @property
    def total_files_changed(self) -> int:
        """Number of changed files, successful or not."""
        return len(self.files) + len(self.failures)

    @property
    def has_failures(self) -> bool:
        """Check if any file failed."""
        return len(self.failures) > 0

    @property
    def total_added(self) -> int:
        """Added lines across all successful files."""
        return sum(f.patch.added_count for f in self.files)

    @property
    def total_removed(self) -> int:
        """Removed lines across all successful files."""
        return sum(f.patch.removed_count for f in self.files)

    def get_file(self, path: str) -> Optional[FileCorrelation]:
        """Look up a successful entry by path."""
        for entry in self.files:
            if entry.path == path:
                return entry
        return None

    def get_files_by_kind(self, kind: ChangeKind) -> list[FileCorrelation]:
        """Get successful entries filtered by change kind."""
        return [f for f in self.files if f.kind == kind]
