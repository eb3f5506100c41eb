"""
Snapshot and changed-file models.

A Snapshot is an opaque, content-addressed handle. Content is only ever
read through the object store, never through a working directory.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class ChangeKind(str, Enum):
    """Type of file change between two snapshots."""

    ADDED = "added"
    DELETED = "deleted"
    MODIFIED = "modified"
    RENAMED = "renamed"


class Snapshot(BaseModel):
    """Immutable reference to a file tree at one point in history."""

    oid: str = Field(description="Hex id of the resolved commit or tree")
    tree_oid: str = Field(description="Hex id of the root tree")
    revision: Optional[str] = Field(
        default=None,
        description="Revision expression this snapshot was resolved from",
    )

    class Config:
        frozen = True

    @property
    def short_id(self) -> str:
        """Abbreviated id for display."""
        return self.oid[:7]


class ChangedFile(BaseModel):
    """One file that differs between two snapshots."""

    path: str = Field(description="Path in the new snapshot (old path for deletions)")
    kind: ChangeKind = Field(description="Type of change")
    old_path: Optional[str] = Field(
        default=None,
        description="Original path (set on renames only)",
    )
    similarity: Optional[float] = Field(
        default=None,
        description="Content similarity for renames (0.0-1.0)",
    )

    class Config:
        frozen = True

    @property
    def source_path(self) -> Optional[str]:
        """Path to read old content from, or None for added files."""
        if self.kind == ChangeKind.ADDED:
            return None
        return self.old_path or self.path

    @property
    def target_path(self) -> Optional[str]:
        """Path to read new content from, or None for deleted files."""
        if self.kind == ChangeKind.DELETED:
            return None
        return self.path
