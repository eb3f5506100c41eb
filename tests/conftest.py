"""
Pytest configuration and shared fixtures.
"""

from pathlib import Path
from typing import Callable, Optional

import git
import pytest


class RepoBuilder:
    """Create commits in a temporary repository."""

    def __init__(self, path: Path) -> None:
        self.path = path
        self.repo = git.Repo.init(path)
        with self.repo.config_writer() as config:
            config.set_value("user", "name", "test")
            config.set_value("user", "email", "test@email.com")

    def write(self, name: str, content: str | bytes) -> None:
        """Write a file into the working tree without staging it."""
        file_path = self.path / name
        file_path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, bytes):
            file_path.write_bytes(content)
        else:
            file_path.write_bytes(content.encode("utf-8"))

    def commit(
        self,
        message: str,
        files: Optional[dict[str, str | bytes]] = None,
        remove: Optional[list[str]] = None,
    ) -> str:
        """Write, stage and remove files, then commit. Returns the commit SHA."""
        for name, content in (files or {}).items():
            self.write(name, content)
        if files:
            self.repo.index.add(list(files))
        if remove:
            self.repo.index.remove(remove, working_tree=True)
        return self.repo.index.commit(message).hexsha

    def rename(self, old: str, new: str) -> None:
        """Stage a rename without committing."""
        self.repo.index.move([old, new])

    def drop_object(self, sha: str) -> None:
        """Delete a loose object from the object database."""
        (Path(self.repo.git_dir) / "objects" / sha[:2] / sha[2:]).unlink()


@pytest.fixture
def repo_builder(tmp_path: Path) -> RepoBuilder:
    """An empty repository with a configured committer."""
    builder = RepoBuilder(tmp_path / "repo")
    yield builder
    builder.repo.close()


@pytest.fixture
def two_commit_repo(repo_builder: RepoBuilder) -> RepoBuilder:
    """
    A repository with two commits.

    The first adds file1.cpp and file2.cpp; the second appends a line to
    file1.cpp.
    """
    repo_builder.commit(
        "Init",
        {"file1.cpp": "hello world\nhello world2\n", "file2.cpp": "hello world\n"},
    )
    repo_builder.commit(
        "Two",
        {"file1.cpp": "hello world\nhello world2\nhello world3"},
    )
    return repo_builder


@pytest.fixture
def make_lines() -> Callable[[int, str], str]:
    """Build numbered source lines: make_lines(3) -> 'line 1\\nline 2\\nline 3\\n'."""

    def _make(count: int, prefix: str = "line") -> str:
        return "".join(f"{prefix} {i}\n" for i in range(1, count + 1))

    return _make


@pytest.fixture
def simple_diff_content() -> str:
    """A simple diff for testing."""
    return """diff --git a/src/widget.cpp b/src/widget.cpp
index 1234567..abcdefg 100644
--- a/src/widget.cpp
+++ b/src/widget.cpp
@@ -10,6 +10,10 @@ int Widget::size() const {
   return size_;
 }
 
+int Widget::area() const {
+  return size_ * size_;
+}
+
 void Widget::resize(int n) {
   size_ = n;
   notify();
"""


@pytest.fixture
def multi_file_diff_content() -> str:
    """A multi-file diff with an added file, a rename and a missing newline."""
    lines = [
        "diff --git a/include/widget.h b/include/widget.h",
        "index 1111111..2222222 100644",
        "--- a/include/widget.h",
        "+++ b/include/widget.h",
        "@@ -1,2 +1,2 @@",
        " " + "class Widget {",
        "-" + "};",
        "\\ No newline at end of file",
        "+" + "};",
        "diff --git a/src/new.cpp b/src/new.cpp",
        "new file mode 100644",
        "index 0000000..3333333",
        "--- /dev/null",
        "+++ b/src/new.cpp",
        "@@ -0,0 +1,2 @@",
        "+" + "int x = 1;",
        "+" + "int y = 2;",
        "diff --git a/src/old_name.cpp b/src/new_name.cpp",
        "similarity index 90%",
        "rename from src/old_name.cpp",
        "rename to src/new_name.cpp",
        "index 4444444..5555555 100644",
        "--- a/src/old_name.cpp",
        "+++ b/src/new_name.cpp",
        "@@ -3,3 +3,3 @@",
        " " + "int a;",
        "-" + "int b;",
        "+" + "long b;",
        " " + "int c;",
    ]
    return "\n".join(lines) + "\n"
