"""
Patch data models.

Models representing a structured line diff of one file pair: an ordered
list of hunks, each holding classified lines.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class LineKind(str, Enum):
    """Classification of a line within a hunk."""

    CONTEXT = "context"
    ADDED = "added"
    REMOVED = "removed"

    @property
    def prefix(self) -> str:
        """Unified diff prefix character for this kind."""
        return {"context": " ", "added": "+", "removed": "-"}[self.value]


class PatchLine(BaseModel):
    """A single line in a hunk."""

    kind: LineKind = Field(description="Context, added or removed")
    content: str = Field(description="Line text, with its newline if the source had one")
    missing_trailing_newline: bool = Field(
        default=False,
        description="True for a file's last line when it lacks a newline",
    )
    old_lineno: Optional[int] = Field(
        default=None,
        description="Line number in the old file (None for added lines)",
    )
    new_lineno: Optional[int] = Field(
        default=None,
        description="Line number in the new file (None for removed lines)",
    )

    class Config:
        frozen = True

    @property
    def text(self) -> str:
        """Line content without its trailing newline."""
        return self.content[:-1] if self.content.endswith("\n") else self.content


class Hunk(BaseModel):
    """A contiguous region of difference plus surrounding context."""

    old_start: int = Field(ge=0, description="Starting line in old file")
    old_lines: int = Field(ge=0, description="Number of old lines (context + removed)")
    new_start: int = Field(ge=0, description="Starting line in new file")
    new_lines: int = Field(ge=0, description="Number of new lines (context + added)")
    lines: list[PatchLine] = Field(
        default_factory=list,
        description="Lines in diff order",
    )

    class Config:
        frozen = True

    @property
    def header(self) -> str:
        """The '@@ -a,b +c,d @@' header line."""
        return f"@@ -{_range(self.old_start, self.old_lines)} +{_range(self.new_start, self.new_lines)} @@"

    @property
    def old_first(self) -> int:
        """First old line covered; for an empty range, the line after old_start."""
        return self.old_start if self.old_lines else self.old_start + 1

    @property
    def new_first(self) -> int:
        """First new line covered; for an empty range, the line after new_start."""
        return self.new_start if self.new_lines else self.new_start + 1

    def count(self, kind: LineKind) -> int:
        """Number of lines of the given kind."""
        return sum(1 for line in self.lines if line.kind == kind)


class Patch(BaseModel):
    """Ordered hunks for exactly one file pair."""

    hunks: list[Hunk] = Field(default_factory=list, description="Hunks ordered by new_start")
    is_binary: bool = Field(
        default=False,
        description="Binary content; hunks carry no line-level detail",
    )
    old_line_count: Optional[int] = Field(
        default=None,
        description="Total lines in the old file, when known",
    )
    new_line_count: Optional[int] = Field(
        default=None,
        description="Total lines in the new file, when known",
    )

    class Config:
        frozen = True

    @property
    def is_empty(self) -> bool:
        """True when the two sides are identical."""
        return not self.hunks

    @property
    def added_count(self) -> int:
        """Total added lines across all hunks."""
        return sum(h.count(LineKind.ADDED) for h in self.hunks)

    @property
    def removed_count(self) -> int:
        """Total removed lines across all hunks."""
        return sum(h.count(LineKind.REMOVED) for h in self.hunks)


def _range(start: int, length: int) -> str:
    if length == 1:
        return str(start)
    return f"{start},{length}"
