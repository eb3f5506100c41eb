"""
Tree differ - lists the files that changed between two snapshots.

Renames are paired from the deleted and added files by content
similarity. Identical blobs score 1.0. Otherwise the score is the number
of bytes in lines the two files share (as a multiset) divided by the size
of the larger file. The pairing is greedy, best score first. Ties go to the
lexicographically smallest path and are recorded as ambiguities.
"""

import logging
from collections import Counter
from typing import Optional

from change_correlator.config import RenameConfig
from change_correlator.errors import RenameThresholdAmbiguous
from change_correlator.models.snapshot import ChangedFile, ChangeKind, Snapshot
from change_correlator.store.object_store import ObjectStore

logger = logging.getLogger(__name__)


def _split_byte_lines(content: bytes) -> list[bytes]:
    parts = content.split(b"\n")
    lines = [part + b"\n" for part in parts[:-1]]
    if parts[-1]:
        lines.append(parts[-1])
    return lines


def content_similarity(old: bytes, new: bytes) -> float:
    """
    Fraction of content two buffers share, from 0.0 to 1.0.

    Args:
        old: Content of the deleted file.
        new: Content of the added file.

    Returns:
        Bytes of shared lines divided by the size of the larger buffer.
    """
    if old == new:
        return 1.0
    if not old or not new:
        return 0.0

    old_counts = Counter(_split_byte_lines(old))
    new_counts = Counter(_split_byte_lines(new))
    shared = sum(
        min(count, new_counts[line]) * len(line)
        for line, count in old_counts.items()
        if line in new_counts
    )
    return min(1.0, shared / max(len(old), len(new)))


class TreeDiffer:
    """
    Compare the file trees of two snapshots.

    Ambiguous renames found by the last ``diff_trees`` call are available
    in ``ambiguities``.
    """

    def __init__(self, store: ObjectStore, rename_config: Optional[RenameConfig] = None) -> None:
        """
        Initialize the tree differ.

        Args:
            store: Object store the snapshots come from.
            rename_config: Rename detection policy (defaults apply if None).
        """
        self.store = store
        self.rename_config = rename_config or RenameConfig()
        self.ambiguities: list[RenameThresholdAmbiguous] = []

    def diff_trees(self, old: Snapshot, new: Snapshot) -> list[ChangedFile]:
        """
        List changed files between two snapshots.

        Args:
            old: Base snapshot.
            new: Target snapshot.

        Returns:
            Changed files ordered by path.

        Raises:
            SnapshotUnavailable: If either snapshot cannot be read.
        """
        self.ambiguities = []
        old_files = self.store.list_files(old)
        new_files = self.store.list_files(new)

        changes: list[ChangedFile] = []
        for path in set(old_files) & set(new_files):
            if old_files[path] != new_files[path]:
                changes.append(ChangedFile(path=path, kind=ChangeKind.MODIFIED))

        deleted = {p: old_files[p][0] for p in set(old_files) - set(new_files)}
        added = {p: new_files[p][0] for p in set(new_files) - set(old_files)}

        if self.rename_config.enabled and deleted and added:
            renames = self._pair_renames(deleted, added)
            for new_path, (old_path, score) in renames.items():
                changes.append(
                    ChangedFile(
                        path=new_path,
                        kind=ChangeKind.RENAMED,
                        old_path=old_path,
                        similarity=score,
                    )
                )
                del deleted[old_path]
                del added[new_path]

        changes.extend(ChangedFile(path=p, kind=ChangeKind.DELETED) for p in deleted)
        changes.extend(ChangedFile(path=p, kind=ChangeKind.ADDED) for p in added)
        changes.sort(key=lambda c: c.path)

        logger.info(
            "Tree diff %s..%s: %d changed file(s)", old.short_id, new.short_id, len(changes)
        )
        return changes

    def _pair_renames(
        self,
        deleted: dict[str, str],
        added: dict[str, str],
    ) -> dict[str, tuple[str, float]]:
        """Map added path -> (deleted path, score) for every accepted rename."""
        threshold = self.rename_config.similarity_threshold
        contents: dict[str, bytes] = {}

        def read(oid: str) -> bytes:
            if oid not in contents:
                contents[oid] = self.store.read_blob(oid)
            return contents[oid]

        candidates: list[tuple[float, str, str]] = []
        for new_path, new_oid in added.items():
            for old_path, old_oid in deleted.items():
                if old_oid == new_oid:
                    score = 1.0
                else:
                    score = content_similarity(read(old_oid), read(new_oid))
                if score >= threshold:
                    candidates.append((score, new_path, old_path))

        # Best score first, then smallest paths
        candidates.sort(key=lambda c: (-c[0], c[1], c[2]))

        renames: dict[str, tuple[str, float]] = {}
        used_sources: set[str] = set()
        for score, new_path, old_path in candidates:
            if new_path in renames or old_path in used_sources:
                continue

            rival_sources = [
                o for s, n, o in candidates
                if s == score and n == new_path and o not in used_sources
            ]
            rival_targets = [
                n for s, n, o in candidates
                if s == score and o == old_path and n not in renames
            ]
            if len(rival_sources) > 1:
                self._flag(new_path, old_path, rival_sources, score)
            elif len(rival_targets) > 1:
                self._flag(old_path, new_path, rival_targets, score)

            renames[new_path] = (old_path, score)
            used_sources.add(old_path)

        return renames

    def _flag(self, path: str, chosen: str, candidates: list[str], score: float) -> None:
        ambiguity = RenameThresholdAmbiguous(path, chosen, candidates, score)
        logger.warning("%s", ambiguity)
        self.ambiguities.append(ambiguity)
