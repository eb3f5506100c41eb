"""
Unit tests for the diff parser.
"""

from pathlib import Path

import pytest

from change_correlator.analyzer.line_correlator import map_old_to_new, new_lines_touched
from change_correlator.errors import DiffParserError
from change_correlator.models.patch import LineKind
from change_correlator.models.snapshot import ChangeKind
from change_correlator.parser.diff_parser import DiffParser


BINARY_DIFF = """diff --git a/assets/logo.png b/assets/logo.png
index 1234567..89abcde 100644
Binary files a/assets/logo.png and b/assets/logo.png differ
"""


class TestDiffParser:
    """Tests for DiffParser."""

    def test_parse_simple_diff(self, simple_diff_content: str) -> None:
        """Test parsing a simple diff."""
        files = DiffParser.parse_string(simple_diff_content)

        assert len(files) == 1
        entry = files[0]
        assert entry.path == "src/widget.cpp"
        assert entry.kind == ChangeKind.MODIFIED
        assert entry.old_path is None
        assert len(entry.patch.hunks) == 1

        hunk = entry.patch.hunks[0]
        assert (hunk.old_start, hunk.old_lines, hunk.new_start, hunk.new_lines) == (10, 6, 10, 10)
        assert hunk.count(LineKind.ADDED) == 4
        assert hunk.count(LineKind.CONTEXT) == 6

    def test_touched_lines_from_parsed_diff(self, simple_diff_content: str) -> None:
        """Parsed patches feed the line correlator directly."""
        patch = DiffParser.parse_string(simple_diff_content)[0].patch

        assert new_lines_touched(patch) == {13, 14, 15, 16}
        assert map_old_to_new(patch, 12) == 12
        assert map_old_to_new(patch, 13) == 17
        assert map_old_to_new(patch, 40) == 44

    def test_line_numbers_are_assigned(self, simple_diff_content: str) -> None:
        """Context lines carry both numbers, added lines only the new one."""
        lines = DiffParser.parse_string(simple_diff_content)[0].patch.hunks[0].lines

        assert (lines[0].old_lineno, lines[0].new_lineno) == (10, 10)
        assert (lines[3].old_lineno, lines[3].new_lineno) == (None, 13)
        assert lines[3].content == "int Widget::area() const {\n"
        assert (lines[-1].old_lineno, lines[-1].new_lineno) == (15, 19)

    def test_parse_multi_file_diff(self, multi_file_diff_content: str) -> None:
        """Files come back ordered by path with their change kinds."""
        files = DiffParser.parse_string(multi_file_diff_content)

        assert [f.path for f in files] == ["include/widget.h", "src/new.cpp", "src/new_name.cpp"]
        assert [f.kind for f in files] == [ChangeKind.MODIFIED, ChangeKind.ADDED, ChangeKind.RENAMED]

    def test_added_file(self, multi_file_diff_content: str) -> None:
        """Every line of an added file is touched."""
        entry = DiffParser.parse_string(multi_file_diff_content)[1]

        assert new_lines_touched(entry.patch) == {1, 2}

    def test_renamed_file(self, multi_file_diff_content: str) -> None:
        """Renames keep the old path."""
        entry = DiffParser.parse_string(multi_file_diff_content)[2]

        assert entry.old_path == "src/old_name.cpp"
        assert new_lines_touched(entry.patch) == {4}

    def test_no_newline_marker(self, multi_file_diff_content: str) -> None:
        """The marker flags the line before it and is not itself a line."""
        hunk = DiffParser.parse_string(multi_file_diff_content)[0].patch.hunks[0]

        assert len(hunk.lines) == 3
        removed = hunk.lines[1]
        added = hunk.lines[2]
        assert removed.kind == LineKind.REMOVED
        assert removed.missing_trailing_newline
        assert removed.content == "};"
        assert added.kind == LineKind.ADDED
        assert not added.missing_trailing_newline
        assert added.content == "};\n"

    def test_binary_file(self) -> None:
        """Binary entries get a marker patch without lines."""
        files = DiffParser.parse_string(BINARY_DIFF)

        assert len(files) == 1
        assert files[0].path == "assets/logo.png"
        assert files[0].patch.is_binary
        assert new_lines_touched(files[0].patch) == set()

    def test_parse_empty_diff(self) -> None:
        """Test parsing an empty diff."""
        assert DiffParser.parse_string("") == []

    def test_parse_file(self, tmp_path: Path, simple_diff_content: str) -> None:
        """Test parsing from a file."""
        diff_file = tmp_path / "test.diff"
        diff_file.write_text(simple_diff_content)

        files = DiffParser.parse_file(diff_file)

        assert len(files) == 1
        assert files[0].path == "src/widget.cpp"

    def test_parse_dispatches_on_type(self, tmp_path: Path, simple_diff_content: str) -> None:
        """parse accepts a Path or a string."""
        diff_file = tmp_path / "test.diff"
        diff_file.write_text(simple_diff_content)

        assert DiffParser.parse(diff_file) == DiffParser.parse(simple_diff_content)

    def test_parse_invalid_source_type(self) -> None:
        """Anything other than a Path or string is rejected."""
        with pytest.raises(DiffParserError):
            DiffParser.parse(42)

    def test_parse_missing_file(self, tmp_path: Path) -> None:
        """Unreadable files raise DiffParserError."""
        with pytest.raises(DiffParserError):
            DiffParser.parse_file(tmp_path / "missing.diff")
