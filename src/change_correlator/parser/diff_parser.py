"""
Diff parser using the unidiff library.

This module wraps the unidiff library to parse unified diff text (for
example a pull request's diff downloaded by the caller) into the same
Patch models the patch builder produces, so the line correlator works on
either.
"""

from pathlib import Path
from typing import Union

from unidiff import Hunk as UnidiffHunk, PatchSet, PatchedFile
from unidiff.constants import LINE_TYPE_NO_NEWLINE

from change_correlator.errors import DiffParserError
from change_correlator.models.patch import Hunk, LineKind, Patch, PatchLine
from change_correlator.models.report import FileCorrelation
from change_correlator.models.snapshot import ChangeKind


def _strip_prefix(path: str) -> str:
    """Drop a leading ``a/`` or ``b/`` from a diff header path."""
    if path.startswith(("a/", "b/")):
        return path[2:]
    return path


class DiffParser:
    """
    Parse unified diff files using the unidiff library.

    Supports parsing from files or strings.
    """

    @staticmethod
    def _determine_change_kind(patched_file: PatchedFile) -> ChangeKind:
        """
        Determine the type of change for a patched file.

        Args:
            patched_file: A PatchedFile from unidiff.

        Returns:
            The ChangeKind for this file.
        """
        if patched_file.is_added_file:
            return ChangeKind.ADDED
        elif patched_file.is_removed_file:
            return ChangeKind.DELETED
        elif patched_file.is_rename:
            return ChangeKind.RENAMED
        else:
            return ChangeKind.MODIFIED

    @staticmethod
    def _parse_hunk(hunk: UnidiffHunk) -> Hunk:
        """
        Parse a unidiff Hunk into our Hunk model.

        A ``\\ No newline at end of file`` marker applies to the line
        before it.
        """
        # (kind, text without newline, old lineno, new lineno, has newline)
        rows: list[list] = []

        for line in hunk:
            if line.line_type == LINE_TYPE_NO_NEWLINE:
                if rows:
                    rows[-1][4] = False
                continue

            if line.is_added:
                kind = LineKind.ADDED
            elif line.is_removed:
                kind = LineKind.REMOVED
            else:
                kind = LineKind.CONTEXT

            text = line.value[:-1] if line.value.endswith("\n") else line.value
            rows.append([kind, text, line.source_line_no, line.target_line_no, True])

        lines = [
            PatchLine(
                kind=kind,
                content=text + "\n" if has_newline else text,
                missing_trailing_newline=not has_newline,
                old_lineno=old_lineno if kind != LineKind.ADDED else None,
                new_lineno=new_lineno if kind != LineKind.REMOVED else None,
            )
            for kind, text, old_lineno, new_lineno, has_newline in rows
        ]

        return Hunk(
            old_start=hunk.source_start,
            old_lines=hunk.source_length,
            new_start=hunk.target_start,
            new_lines=hunk.target_length,
            lines=lines,
        )

    @staticmethod
    def _parse_patched_file(patched_file: PatchedFile) -> FileCorrelation:
        """
        Parse a PatchedFile into a FileCorrelation.

        Args:
            patched_file: A PatchedFile from unidiff.

        Returns:
            FileCorrelation with the file's patch.
        """
        kind = DiffParser._determine_change_kind(patched_file)

        # Use target for added/modified, source for deleted
        if kind == ChangeKind.DELETED:
            path = _strip_prefix(patched_file.source_file)
        else:
            path = _strip_prefix(patched_file.target_file)

        old_path = None
        if kind == ChangeKind.RENAMED:
            old_path = _strip_prefix(patched_file.source_file)

        if patched_file.is_binary_file:
            patch = Patch(
                hunks=[Hunk(old_start=0, old_lines=0, new_start=0, new_lines=0)],
                is_binary=True,
            )
        else:
            patch = Patch(hunks=[DiffParser._parse_hunk(h) for h in patched_file])

        return FileCorrelation(path=path, kind=kind, old_path=old_path, patch=patch)

    @classmethod
    def parse_file(cls, diff_path: Path, encoding: str = "utf-8") -> list[FileCorrelation]:
        """
        Parse a diff file.

        Args:
            diff_path: Path to the diff file.
            encoding: File encoding (default: utf-8).

        Returns:
            List of FileCorrelation objects, ordered by path.

        Raises:
            DiffParserError: If parsing fails.
        """
        try:
            patch_set = PatchSet.from_filename(str(diff_path), encoding=encoding)
            files = [cls._parse_patched_file(f) for f in patch_set]
        except Exception as e:
            raise DiffParserError(f"Failed to parse diff file {diff_path}: {e}") from e
        return sorted(files, key=lambda f: f.path)

    @classmethod
    def parse_string(cls, diff_content: str) -> list[FileCorrelation]:
        """
        Parse diff content from a string.

        Args:
            diff_content: The diff content as a string.

        Returns:
            List of FileCorrelation objects, ordered by path.

        Raises:
            DiffParserError: If parsing fails.
        """
        try:
            patch_set = PatchSet(diff_content)
            files = [cls._parse_patched_file(f) for f in patch_set]
        except Exception as e:
            raise DiffParserError(f"Failed to parse diff content: {e}") from e
        return sorted(files, key=lambda f: f.path)

    @classmethod
    def parse(cls, source: Union[Path, str]) -> list[FileCorrelation]:
        """
        Parse diff from a file path or string.

        Args:
            source: Either a Path to a diff file or diff content as string.

        Returns:
            List of FileCorrelation objects.
        """
        if isinstance(source, Path):
            return cls.parse_file(source)
        elif isinstance(source, str):
            return cls.parse_string(source)
        else:
            raise DiffParserError(f"Invalid source type: {type(source)}")
