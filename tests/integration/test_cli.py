"""
Integration tests for the CLI.
"""

import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from change_correlator.cli import cli


@pytest.fixture
def runner() -> CliRunner:
    """Create a CLI test runner."""
    return CliRunner()


def _last_line(output: str) -> str:
    return output.strip().splitlines()[-1]


class TestCLI:
    """Integration tests for the CLI."""

    def test_version(self, runner: CliRunner) -> None:
        """Test the version option."""
        result = runner.invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert "change-correlator" in result.output

    def test_help(self, runner: CliRunner) -> None:
        """Test the help option."""
        result = runner.invoke(cli, ["--help"])
        assert result.exit_code == 0
        assert "Lint Change Correlator" in result.output
        for command in ("correlate", "map", "touched"):
            assert command in result.output

    def test_correlate_help(self, runner: CliRunner) -> None:
        """Test the correlate command help."""
        result = runner.invoke(cli, ["correlate", "--help"])
        assert result.exit_code == 0
        assert "--base" in result.output
        assert "--context-lines" in result.output
        assert "--no-renames" in result.output

    def test_correlate_requires_base(self, runner: CliRunner, two_commit_repo) -> None:
        """--base is mandatory."""
        result = runner.invoke(cli, ["correlate", "--repo", str(two_commit_repo.path)])
        assert result.exit_code != 0
        assert "--base" in result.output


class TestCorrelateCommand:
    """Tests for the correlate command."""

    def test_text_output(self, runner: CliRunner, two_commit_repo) -> None:
        """The text report names the changed file and its touched line."""
        result = runner.invoke(
            cli,
            ["correlate", "--repo", str(two_commit_repo.path), "--base", "HEAD~1"],
        )

        assert result.exit_code == 0, result.output
        assert "file1.cpp" in result.output
        assert "file2.cpp" not in result.output

    def test_json_output_file(self, runner: CliRunner, two_commit_repo, tmp_path: Path) -> None:
        """JSON written to a file carries touched lines."""
        out_file = tmp_path / "report.json"
        result = runner.invoke(
            cli,
            [
                "correlate",
                "-r", str(two_commit_repo.path),
                "-b", "HEAD~1",
                "-t", "HEAD",
                "-U", "0",
                "-f", "json",
                "-o", str(out_file),
            ],
        )

        assert result.exit_code == 0, result.output
        data = json.loads(out_file.read_text())
        assert data["summary"]["context_lines"] == 0
        assert data["files"][0]["path"] == "file1.cpp"
        assert data["files"][0]["touched_lines"] == [3]

    def test_patch_output(self, runner: CliRunner, two_commit_repo, tmp_path: Path) -> None:
        """Patch output is a unified diff."""
        out_file = tmp_path / "out.diff"
        result = runner.invoke(
            cli,
            ["correlate", "-r", str(two_commit_repo.path), "-b", "HEAD~1", "-f", "patch", "-o", str(out_file)],
        )

        assert result.exit_code == 0, result.output
        text = out_file.read_text()
        assert text.startswith("diff --git a/file1.cpp b/file1.cpp\n")
        assert "+hello world3\n\\ No newline at end of file\n" in text

    def test_unresolvable_revision(self, runner: CliRunner, two_commit_repo) -> None:
        """Bad revisions exit with an error."""
        result = runner.invoke(
            cli,
            ["correlate", "-r", str(two_commit_repo.path), "-b", "no-such-branch"],
        )

        assert result.exit_code == 1
        assert "no-such-branch" in result.output

    def test_config_file(self, runner: CliRunner, two_commit_repo, tmp_path: Path) -> None:
        """Settings come from --config unless overridden on the command line."""
        config_file = tmp_path / "config.yaml"
        config_file.write_text("diff:\n  context_lines: 0\n")
        out_file = tmp_path / "report.json"

        result = runner.invoke(
            cli,
            [
                "--config", str(config_file),
                "correlate", "-r", str(two_commit_repo.path), "-b", "HEAD~1",
                "-f", "json", "-o", str(out_file),
            ],
        )

        assert result.exit_code == 0, result.output
        assert json.loads(out_file.read_text())["summary"]["context_lines"] == 0

    def test_invalid_config_file(self, runner: CliRunner, two_commit_repo, tmp_path: Path) -> None:
        """Invalid configuration aborts before any work."""
        config_file = tmp_path / "config.yaml"
        config_file.write_text("diff:\n  context_lines: -1\n")

        result = runner.invoke(
            cli,
            ["--config", str(config_file), "correlate", "-r", str(two_commit_repo.path), "-b", "HEAD~1"],
        )

        assert result.exit_code == 1


class TestMapCommand:
    """Tests for the map command."""

    @pytest.fixture
    def shifted_repo(self, repo_builder, make_lines):
        """Two lines inserted at the top of a ten-line file."""
        old = make_lines(10)
        repo_builder.commit("Init", {"a.cpp": old})
        repo_builder.commit("Insert", {"a.cpp": "x\ny\n" + old})
        return repo_builder

    def test_old_to_new(self, runner: CliRunner, shifted_repo) -> None:
        """Old line 5 moved down by two."""
        result = runner.invoke(
            cli,
            ["map", "-r", str(shifted_repo.path), "-b", "HEAD~1", "-p", "a.cpp", "-l", "5"],
        )

        assert result.exit_code == 0, result.output
        assert _last_line(result.output) == "7"

    def test_new_to_old(self, runner: CliRunner, shifted_repo) -> None:
        """And back again."""
        result = runner.invoke(
            cli,
            [
                "map", "-r", str(shifted_repo.path), "-b", "HEAD~1",
                "-p", "a.cpp", "-l", "7", "--direction", "new-to-old",
            ],
        )

        assert result.exit_code == 0, result.output
        assert _last_line(result.output) == "5"

    def test_added_line_has_no_counterpart(self, runner: CliRunner, shifted_repo) -> None:
        """An added line exits with status 3."""
        result = runner.invoke(
            cli,
            [
                "map", "-r", str(shifted_repo.path), "-b", "HEAD~1",
                "-p", "a.cpp", "-l", "1", "--direction", "new-to-old",
            ],
        )

        assert result.exit_code == 3

    def test_unchanged_file(self, runner: CliRunner, two_commit_repo) -> None:
        """Lines of unchanged files map to themselves."""
        result = runner.invoke(
            cli,
            ["map", "-r", str(two_commit_repo.path), "-b", "HEAD~1", "-p", "file2.cpp", "-l", "1"],
        )

        assert result.exit_code == 0, result.output
        assert _last_line(result.output) == "1"


class TestTouchedCommand:
    """Tests for the touched command."""

    def test_touched_json(self, runner: CliRunner, tmp_path: Path, multi_file_diff_content: str) -> None:
        """Touched lines are listed per file from a diff file."""
        diff_file = tmp_path / "change.diff"
        diff_file.write_text(multi_file_diff_content)
        out_file = tmp_path / "touched.json"

        result = runner.invoke(
            cli,
            ["touched", "--diff", str(diff_file), "-f", "json", "-o", str(out_file)],
        )

        assert result.exit_code == 0, result.output
        data = json.loads(out_file.read_text())
        assert data["total"] == 3
        touched = {f["path"]: f["touched_lines"] for f in data["files"]}
        assert touched == {
            "include/widget.h": [2],
            "src/new.cpp": [1, 2],
            "src/new_name.cpp": [4],
        }

    def test_touched_text(self, runner: CliRunner, tmp_path: Path, simple_diff_content: str) -> None:
        """The text table shows the touched range."""
        diff_file = tmp_path / "change.diff"
        diff_file.write_text(simple_diff_content)

        result = runner.invoke(cli, ["touched", "-d", str(diff_file)])

        assert result.exit_code == 0, result.output
        assert "src/widget.cpp" in result.output
        assert "13-16" in result.output

    def test_missing_diff_file(self, runner: CliRunner, tmp_path: Path) -> None:
        """A missing diff file is a usage error."""
        result = runner.invoke(cli, ["touched", "--diff", str(tmp_path / "missing.diff")])

        assert result.exit_code == 2
