"""
Unified diff output formatter.

Renders patches back into git-style unified diff text.
"""

from typing import Optional

from change_correlator.models.patch import Patch
from change_correlator.models.report import CorrelationReport, FileCorrelation
from change_correlator.models.snapshot import ChangeKind
from change_correlator.output.formatters import BaseFormatter, register_formatter

NO_NEWLINE_MARKER = "\\ No newline at end of file"


def render_hunks(patch: Patch) -> list[str]:
    """Render hunk headers and bodies, one string per output line."""
    out: list[str] = []
    for hunk in patch.hunks:
        out.append(hunk.header)
        for line in hunk.lines:
            out.append(line.kind.prefix + line.text)
            if line.missing_trailing_newline:
                out.append(NO_NEWLINE_MARKER)
    return out


def render_unified(patch: Patch, old_path: Optional[str], new_path: Optional[str]) -> str:
    """
    Render a patch as unified diff text.

    Args:
        patch: Patch to render.
        old_path: Old side path, or None for an added file.
        new_path: New side path, or None for a deleted file.

    Returns:
        Diff text ending in a newline, or "" for an empty patch.
    """
    if not patch.hunks:
        return ""

    source = f"a/{old_path}" if old_path else "/dev/null"
    target = f"b/{new_path}" if new_path else "/dev/null"

    if patch.is_binary:
        return f"Binary files {source} and {target} differ\n"

    out = [f"--- {source}", f"+++ {target}"]
    out.extend(render_hunks(patch))
    return "\n".join(out) + "\n"


def render_file(entry: FileCorrelation) -> str:
    """Render one changed file with a ``diff --git`` header."""
    old_path = entry.old_path or entry.path
    header = [f"diff --git a/{old_path} b/{entry.path}"]
    if entry.kind == ChangeKind.ADDED:
        header.append("new file mode 100644")
    elif entry.kind == ChangeKind.DELETED:
        header.append("deleted file mode 100644")
    elif entry.kind == ChangeKind.RENAMED:
        header.append(f"rename from {old_path}")
        header.append(f"rename to {entry.path}")

    body = render_unified(
        entry.patch,
        None if entry.kind == ChangeKind.ADDED else old_path,
        None if entry.kind == ChangeKind.DELETED else entry.path,
    )
    return "\n".join(header) + "\n" + body


@register_formatter("patch")
class PatchFormatter(BaseFormatter):
    """
    Format output as a unified diff.
    """

    def format(self, report: CorrelationReport) -> str:
        """Render every successfully diffed file."""
        return self.format_files(report.files)

    def format_files(self, files: list[FileCorrelation]) -> str:
        """Render the given files."""
        return "".join(render_file(f) for f in files)
