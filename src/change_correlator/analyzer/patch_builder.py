"""
Patch builder - turns two buffers into a structured patch.

Building a patch is a pure function of (old bytes, new bytes, options):
no repository state is consulted, so patches can be built concurrently.
Hunk layout follows unified diff conventions (git and difflib agree):
changed regions separated by at most ``2 * context_lines`` unchanged
lines share a hunk, and an empty range starts at the line before it.
"""

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional

from change_correlator.analyzer.lcs import diff_opcodes
from change_correlator.errors import EncodingError
from change_correlator.models.patch import Hunk, LineKind, Patch, PatchLine
from change_correlator.models.snapshot import ChangedFile, Snapshot

if TYPE_CHECKING:
    from change_correlator.store.object_store import ObjectStore

logger = logging.getLogger(__name__)

DEFAULT_CONTEXT_LINES = 3
DEFAULT_BINARY_SNIFF_BYTES = 8000


@dataclass(frozen=True)
class _Region:
    """One changed region: old[i1:i2] was replaced by new[j1:j2]."""

    i1: int
    i2: int
    j1: int
    j2: int


def is_binary(content: bytes, sniff_bytes: int = DEFAULT_BINARY_SNIFF_BYTES) -> bool:
    """Treat content as binary when a NUL byte occurs in its leading bytes."""
    return b"\0" in content[:sniff_bytes]


def split_lines(text: str) -> list[str]:
    """
    Split text on ``\\n`` only, keeping each line's newline.

    The last element lacks a newline when the text does not end in one.
    Carriage returns stay part of the line content.
    """
    parts = text.split("\n")
    lines = [part + "\n" for part in parts[:-1]]
    if parts[-1]:
        lines.append(parts[-1])
    return lines


def _decode(content: bytes, path: Optional[str]) -> str:
    try:
        return content.decode("utf-8")
    except UnicodeDecodeError as e:
        raise EncodingError(str(e), path) from e


def _changed_regions(old: list[str], new: list[str]) -> list[_Region]:
    return [
        _Region(i1, i2, j1, j2)
        for tag, i1, i2, j1, j2 in diff_opcodes(old, new)
        if tag != "equal"
    ]


def _group_regions(regions: list[_Region], context_lines: int) -> list[list[_Region]]:
    """Group regions whose unchanged gap is at most twice the context size."""
    groups: list[list[_Region]] = []
    for region in regions:
        if groups and region.i1 - groups[-1][-1].i2 <= 2 * context_lines:
            groups[-1].append(region)
        else:
            groups.append([region])
    return groups


def _line(kind: LineKind, content: str, old_lineno: Optional[int], new_lineno: Optional[int]) -> PatchLine:
    return PatchLine(
        kind=kind,
        content=content,
        missing_trailing_newline=not content.endswith("\n"),
        old_lineno=old_lineno,
        new_lineno=new_lineno,
    )


def _build_hunk(
    group: list[_Region],
    old: list[str],
    new: list[str],
    context_lines: int,
) -> Hunk:
    first, last = group[0], group[-1]

    # Unchanged runs at either end are the same length on both sides
    lead = min(context_lines, first.i1)
    trail = min(context_lines, len(old) - last.i2)
    old_lo, old_hi = first.i1 - lead, last.i2 + trail
    new_lo, new_hi = first.j1 - lead, last.j2 + trail

    lines: list[PatchLine] = []
    i, j = old_lo, new_lo
    for region in group:
        while i < region.i1:
            lines.append(_line(LineKind.CONTEXT, old[i], i + 1, j + 1))
            i += 1
            j += 1
        for i in range(region.i1, region.i2):
            lines.append(_line(LineKind.REMOVED, old[i], i + 1, None))
        for j in range(region.j1, region.j2):
            lines.append(_line(LineKind.ADDED, new[j], None, j + 1))
        i, j = region.i2, region.j2
    while i < old_hi:
        lines.append(_line(LineKind.CONTEXT, old[i], i + 1, j + 1))
        i += 1
        j += 1

    old_count = old_hi - old_lo
    new_count = new_hi - new_lo
    return Hunk(
        old_start=old_lo + 1 if old_count else old_lo,
        old_lines=old_count,
        new_start=new_lo + 1 if new_count else new_lo,
        new_lines=new_count,
        lines=lines,
    )


class PatchBuilder:
    """
    Build patches from buffers or from blobs in an object store.

    Holds only immutable options, so one builder can be shared by many
    worker threads.
    """

    def __init__(
        self,
        context_lines: int = DEFAULT_CONTEXT_LINES,
        binary_sniff_bytes: int = DEFAULT_BINARY_SNIFF_BYTES,
    ) -> None:
        """
        Initialize the patch builder.

        Args:
            context_lines: Unchanged lines around each change (>= 0).
            binary_sniff_bytes: Leading bytes scanned for NUL.
        """
        if context_lines < 0:
            raise ValueError(f"context_lines must be >= 0, got {context_lines}")
        self.context_lines = context_lines
        self.binary_sniff_bytes = binary_sniff_bytes

    def build(self, old_content: bytes, new_content: bytes, path: Optional[str] = None) -> Patch:
        """
        Diff two buffers.

        Args:
            old_content: Old file bytes.
            new_content: New file bytes.
            path: Optional path, used only in error messages.

        Returns:
            The patch. Binary content yields ``is_binary=True`` and a
            single marker hunk without lines (no hunks when identical).

        Raises:
            EncodingError: If non-binary content is not valid UTF-8.
        """
        if is_binary(old_content, self.binary_sniff_bytes) or is_binary(
            new_content, self.binary_sniff_bytes
        ):
            hunks = [] if old_content == new_content else [
                Hunk(old_start=0, old_lines=0, new_start=0, new_lines=0)
            ]
            return Patch(hunks=hunks, is_binary=True)

        old_lines = split_lines(_decode(old_content, path))
        new_lines = split_lines(_decode(new_content, path))

        groups = _group_regions(_changed_regions(old_lines, new_lines), self.context_lines)
        hunks = [_build_hunk(g, old_lines, new_lines, self.context_lines) for g in groups]

        return Patch(
            hunks=hunks,
            old_line_count=len(old_lines),
            new_line_count=len(new_lines),
        )

    def build_for_change(
        self,
        store: "ObjectStore",
        old: Snapshot,
        new: Snapshot,
        changed_file: ChangedFile,
    ) -> Patch:
        """
        Read both sides of a changed file and diff them.

        The absent side of an added or deleted file is empty.
        """
        source = changed_file.source_path
        target = changed_file.target_path
        old_content = store.read_file(old, source) if source else b""
        new_content = store.read_file(new, target) if target else b""

        patch = self.build(old_content, new_content, path=changed_file.path)
        logger.debug(
            "Built patch for %s: %d hunk(s), +%d -%d",
            changed_file.path,
            len(patch.hunks),
            patch.added_count,
            patch.removed_count,
        )
        return patch


def build_from_contents(
    old_content: bytes,
    new_content: bytes,
    context_lines: int = DEFAULT_CONTEXT_LINES,
) -> Patch:
    """Diff two buffers with the given number of context lines."""
    return PatchBuilder(context_lines=context_lines).build(old_content, new_content)


def build_patch_from_blobs(
    store: "ObjectStore",
    old: Snapshot,
    new: Snapshot,
    changed_file: ChangedFile,
    context_lines: int = DEFAULT_CONTEXT_LINES,
) -> Patch:
    """Diff one changed file between two snapshots."""
    return PatchBuilder(context_lines=context_lines).build_for_change(store, old, new, changed_file)


def get_lines_in_hunk(patch: Patch, index: int) -> list[str]:
    """Contents of every line in the hunk at ``index``."""
    return [line.content for line in patch.hunks[index].lines]


def get_target_lines_in_hunk(patch: Patch, index: int) -> list[str]:
    """Contents of the new-file lines (context and added) in the hunk at ``index``."""
    return [
        line.content
        for line in patch.hunks[index].lines
        if line.kind != LineKind.REMOVED
    ]
