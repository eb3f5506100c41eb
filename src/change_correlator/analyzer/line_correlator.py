"""
Line correlator - answers line-number questions about a patch.

Lines outside every hunk are unchanged, but they still shift whenever an
earlier hunk changes the line count. Mapping therefore walks the hunks in
order, accumulating the net line delta of every hunk already passed.

Binary patches carry no line detail: they touch no lines and map nothing.
"""

from typing import Optional

from change_correlator.models.patch import Hunk, LineKind, Patch


def new_lines_touched(patch: Patch) -> set[int]:
    """
    New-file line numbers introduced by the patch.

    Args:
        patch: Patch to inspect.

    Returns:
        Line numbers of added lines; never context or removed lines.
    """
    return {
        line.new_lineno
        for hunk in patch.hunks
        for line in hunk.lines
        if line.kind == LineKind.ADDED and line.new_lineno is not None
    }


def is_line_touched(patch: Patch, new_line: int) -> bool:
    """Check if a new-file line was added by the patch."""
    return new_line in new_lines_touched(patch)


def touched_ranges(patch: Patch) -> list[tuple[int, int]]:
    """
    Contiguous runs of added lines as inclusive (start, end) pairs.

    Useful for review comments that span several lines.
    """
    ranges: list[tuple[int, int]] = []
    for line in sorted(new_lines_touched(patch)):
        if ranges and ranges[-1][1] == line - 1:
            ranges[-1] = (ranges[-1][0], line)
        else:
            ranges.append((line, line))
    return ranges


def _side(hunk: Hunk, from_old: bool) -> tuple[int, int, int]:
    """(first line, length, other side's length) of a hunk's source side."""
    if from_old:
        return hunk.old_first, hunk.old_lines, hunk.new_lines
    return hunk.new_first, hunk.new_lines, hunk.old_lines


def _map_line(patch: Patch, line: int, from_old: bool) -> Optional[int]:
    if patch.is_binary or line < 1:
        return None
    total = patch.old_line_count if from_old else patch.new_line_count
    if total is not None and line > total:
        return None

    delta = 0
    for hunk in patch.hunks:
        first, length, other_length = _side(hunk, from_old)
        if line < first:
            return line + delta
        if line < first + length:
            for patch_line in hunk.lines:
                source = patch_line.old_lineno if from_old else patch_line.new_lineno
                if source != line:
                    continue
                if patch_line.kind != LineKind.CONTEXT:
                    return None
                return patch_line.new_lineno if from_old else patch_line.old_lineno
            return None
        delta += other_length - length

    return line + delta


def map_old_to_new(patch: Patch, old_line: int) -> Optional[int]:
    """
    Translate an old-file line number into the new file.

    Args:
        patch: Patch between the two files.
        old_line: 1-based line number in the old file.

    Returns:
        The new-file line number if the line survived unchanged (as
        context, or outside every hunk), or None if it was removed or lies
        outside the old file.
    """
    return _map_line(patch, old_line, from_old=True)


def map_new_to_old(patch: Patch, new_line: int) -> Optional[int]:
    """
    Translate a new-file line number back into the old file.

    Returns None for added lines and lines outside the new file.
    """
    return _map_line(patch, new_line, from_old=False)


def diff_position(patch: Patch, new_line: int) -> Optional[int]:
    """
    Position of a new-file line within the patch body.

    The line just below the first ``@@`` header is position 1. Later hunk
    headers and ``\\ No newline at end of file`` markers also take a
    position, which is how code-review APIs address inline comments.

    Returns:
        The position of the context or added line, or None if the line is
        not shown in the patch.
    """
    if patch.is_binary:
        return None

    position = 0
    for index, hunk in enumerate(patch.hunks):
        if index:
            position += 1
        for line in hunk.lines:
            position += 1
            if line.kind != LineKind.REMOVED and line.new_lineno == new_line:
                return position
            if line.missing_trailing_newline:
                position += 1
    return None
