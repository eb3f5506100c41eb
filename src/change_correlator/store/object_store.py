"""
Read-only access to a repository's object database.

Wraps GitPython to resolve revision expressions into immutable snapshots
and to read blob content at a snapshot. No working tree is ever consulted.
"""

import logging
import threading
from pathlib import Path
from typing import Optional, Union

import git
from git.exc import GitError
from gitdb.exc import BadName, BadObject

from change_correlator.errors import (
    NotAFile,
    ObjectStoreError,
    PathNotFound,
    SnapshotUnavailable,
    UnresolvedRevision,
)
from change_correlator.models.snapshot import Snapshot

logger = logging.getLogger(__name__)

# Errors GitPython/gitdb raise for missing or malformed objects
_LOOKUP_ERRORS = (BadName, BadObject, ValueError, IndexError, KeyError, TypeError)

# Errors reading object data: lookups plus git process and I/O failures
_READ_ERRORS = _LOOKUP_ERRORS + (GitError, OSError)


class ObjectStore:
    """
    Resolve revisions and read file content from an on-disk repository.

    Each thread gets its own ``git.Repo`` handle, so distinct
    (snapshot, path) reads can run concurrently without locking. Resolved
    snapshots are cached per revision string until ``clear_cache`` is called.
    """

    def __init__(self, repo_path: Union[str, Path]) -> None:
        """
        Open a repository.

        Args:
            repo_path: Path to the repository (working tree or bare).

        Raises:
            ObjectStoreError: If the path is not a Git repository.
        """
        self.repo_path = Path(repo_path).resolve()
        self._local = threading.local()
        self._repos: list[git.Repo] = []
        self._repos_lock = threading.Lock()
        self._snapshots: dict[str, Snapshot] = {}

        # Fail early on a bad path, on the calling thread
        self._repo()

    def __enter__(self) -> "ObjectStore":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _repo(self) -> git.Repo:
        """Get this thread's repository handle, opening it if needed."""
        repo = getattr(self._local, "repo", None)
        if repo is None:
            try:
                repo = git.Repo(self.repo_path)
            except (git.InvalidGitRepositoryError, git.NoSuchPathError) as e:
                raise ObjectStoreError(f"Not a Git repository: {self.repo_path}") from e
            self._local.repo = repo
            with self._repos_lock:
                self._repos.append(repo)
        return repo

    def close(self) -> None:
        """Release every repository handle opened by this store."""
        with self._repos_lock:
            for repo in self._repos:
                repo.close()
            self._repos.clear()
        self._local = threading.local()

    def resolve(self, revision: str) -> Snapshot:
        """
        Resolve a revision expression to a snapshot.

        Accepts full or abbreviated hashes, branch and tag names and
        relative expressions such as ``HEAD~1``. Tags are peeled to their
        target.

        Args:
            revision: Revision expression.

        Returns:
            The snapshot for the commit or tree the expression names.

        Raises:
            UnresolvedRevision: If the expression does not identify a
                commit or tree.
        """
        cached = self._snapshots.get(revision)
        if cached is not None:
            return cached

        if not revision or not revision.strip():
            raise UnresolvedRevision(revision, "empty revision")

        try:
            obj = self._repo().rev_parse(revision)
            while obj.type == "tag":
                obj = obj.object
        except _LOOKUP_ERRORS as e:
            raise UnresolvedRevision(revision, str(e) or type(e).__name__) from e

        if obj.type == "commit":
            snapshot = Snapshot(oid=obj.hexsha, tree_oid=obj.tree.hexsha, revision=revision)
        elif obj.type == "tree":
            snapshot = Snapshot(oid=obj.hexsha, tree_oid=obj.hexsha, revision=revision)
        else:
            raise UnresolvedRevision(revision, f"names a {obj.type}, not a commit or tree")

        logger.debug("Resolved %s -> %s", revision, snapshot.oid)
        self._snapshots[revision] = snapshot
        return snapshot

    def clear_cache(self) -> None:
        """Forget resolved revisions so moved refs resolve afresh."""
        self._snapshots.clear()

    def head_commit(self) -> Snapshot:
        """Resolve the current HEAD."""
        return self.resolve("HEAD")

    def _tree(self, snapshot: Snapshot) -> git.Tree:
        try:
            # The root tree needs an empty path so child paths can be joined
            tree = git.Tree(self._repo(), bytes.fromhex(snapshot.tree_oid), path="")
            # Force the tree object to load so missing objects fail here
            len(tree)
        except _READ_ERRORS as e:
            raise SnapshotUnavailable(snapshot.oid, str(e) or type(e).__name__) from e
        return tree

    def list_files(self, snapshot: Snapshot) -> dict[str, tuple[str, int]]:
        """
        List every file in a snapshot.

        Args:
            snapshot: Snapshot to list.

        Returns:
            Mapping of path to (blob id, file mode). Submodules are skipped.

        Raises:
            SnapshotUnavailable: If the snapshot's trees cannot be read.
        """
        tree = self._tree(snapshot)
        files: dict[str, tuple[str, int]] = {}
        try:
            for item in tree.traverse():
                if item.type == "blob":
                    files[item.path] = (item.hexsha, item.mode)
        except _READ_ERRORS as e:
            raise SnapshotUnavailable(snapshot.oid, str(e) or type(e).__name__) from e
        return files

    def read_file(self, snapshot: Snapshot, path: str) -> bytes:
        """
        Read the raw content of a file at a snapshot.

        Args:
            snapshot: Snapshot to read from.
            path: Slash-separated path relative to the repository root.

        Returns:
            The file's bytes.

        Raises:
            PathNotFound: If the path does not exist at the snapshot.
            NotAFile: If the path names a directory or submodule.
            SnapshotUnavailable: If the snapshot's trees or the file's blob
                cannot be read.
        """
        normalized = path.strip("/")
        if not normalized:
            raise NotAFile(path, snapshot.oid)

        tree = self._tree(snapshot)
        try:
            obj = tree / normalized
        except KeyError as e:
            raise PathNotFound(path, snapshot.oid) from e
        except _READ_ERRORS as e:
            raise SnapshotUnavailable(snapshot.oid, str(e) or type(e).__name__) from e

        if obj.type != "blob":
            raise NotAFile(path, snapshot.oid)

        try:
            return obj.data_stream.read()
        except _READ_ERRORS as e:
            raise SnapshotUnavailable(snapshot.oid, f"cannot read '{path}': {e}") from e

    def read_blob(self, oid: str) -> bytes:
        """Read a blob directly by id."""
        try:
            return self._repo().odb.stream(bytes.fromhex(oid)).read()
        except _READ_ERRORS as e:
            raise SnapshotUnavailable(oid, str(e) or type(e).__name__) from e

    def changed_paths(self, base: str, target: str) -> list[str]:
        """
        Paths that differ between two revisions, in lexicographic order.

        Renames are not paired here; both sides are listed.
        """
        old = self.list_files(self.resolve(base))
        new = self.list_files(self.resolve(target))
        return sorted(
            path
            for path in set(old) | set(new)
            if old.get(path) != new.get(path)
        )


def open_store(repo_path: Optional[Union[str, Path]] = None) -> ObjectStore:
    """Open the repository at ``repo_path`` (default: current directory)."""
    return ObjectStore(repo_path or Path.cwd())
