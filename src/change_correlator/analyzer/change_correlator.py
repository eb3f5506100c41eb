"""
Change correlator - the single entry point for a correlation run.

Resolves the base and target revisions, lists the changed files between
them and builds one patch per changed file. Per-file work runs on a
bounded thread pool; snapshots are immutable so workers share nothing
mutable.
"""

import logging
import os
import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from pathlib import Path
from typing import Callable, Optional, Union

from change_correlator.analyzer.patch_builder import PatchBuilder
from change_correlator.analyzer.tree_differ import TreeDiffer
from change_correlator.config import Config
from change_correlator.errors import CorrelationCancelled, CorrelatorError
from change_correlator.models.report import (
    CorrelationReport,
    FileCorrelation,
    FileFailure,
)
from change_correlator.models.snapshot import ChangedFile, Snapshot
from change_correlator.store.object_store import ObjectStore

logger = logging.getLogger(__name__)

# Progress callback type: (current, total, description) -> None
ProgressCallback = Callable[[int, int, str], None]


class ChangeCorrelator:
    """
    Correlate two revisions of a repository.

    This is the main orchestration class that:
    1. Resolves the base and target revisions to snapshots
    2. Lists the changed files (with renames paired)
    3. Builds a patch for every changed file in parallel
    4. Collects per-file successes and failures into a report
    """

    def __init__(
        self,
        repo_path: Union[str, Path],
        config: Optional[Config] = None,
        store: Optional[ObjectStore] = None,
    ) -> None:
        """
        Initialize the change correlator.

        Args:
            repo_path: Path to the repository.
            config: Optional configuration object.
            store: Optional pre-opened object store for ``repo_path``.
        """
        self.repo_path = Path(repo_path).resolve()
        self.config = config or Config()

        # These are lazily initialized
        self._store: Optional[ObjectStore] = store
        self._differ: Optional[TreeDiffer] = None

    @property
    def store(self) -> ObjectStore:
        """Get the object store, opening it if needed."""
        if self._store is None:
            self._store = ObjectStore(self.repo_path)
        return self._store

    @property
    def differ(self) -> TreeDiffer:
        """Get the tree differ, initializing if needed."""
        if self._differ is None:
            self._differ = TreeDiffer(self.store, self.config.renames)
        return self._differ

    def close(self) -> None:
        """Release repository handles."""
        if self._store is not None:
            self._store.close()

    def _max_workers(self) -> int:
        return self.config.concurrency.max_workers or os.cpu_count() or 1

    def _correlate_file(
        self,
        builder: PatchBuilder,
        old: Snapshot,
        new: Snapshot,
        changed_file: ChangedFile,
        cancel_event: Optional[threading.Event],
    ) -> FileCorrelation:
        if cancel_event is not None and cancel_event.is_set():
            raise CorrelationCancelled(f"Cancelled before diffing {changed_file.path}")

        patch = builder.build_for_change(self.store, old, new, changed_file)
        return FileCorrelation(
            path=changed_file.path,
            kind=changed_file.kind,
            old_path=changed_file.old_path,
            patch=patch,
        )

    def correlate(
        self,
        base: str,
        target: str,
        context_lines: Optional[int] = None,
        cancel_event: Optional[threading.Event] = None,
        progress_callback: Optional[ProgressCallback] = None,
    ) -> CorrelationReport:
        """
        Build per-file patches for every file changed from base to target.

        Args:
            base: Base revision expression.
            target: Target revision expression.
            context_lines: Context lines per hunk (default from config).
            cancel_event: Set it to abandon the run between file tasks.
            progress_callback: Called after each file completes.

        Returns:
            Report with per-file successes and failures, ordered by path.

        Raises:
            UnresolvedRevision: If base or target cannot be resolved.
            SnapshotUnavailable: If either snapshot's tree cannot be read.
            CorrelationCancelled: If ``cancel_event`` was set mid-run.
        """
        start_time = time.time()
        if context_lines is None:
            context_lines = self.config.diff.context_lines

        # Refs may have moved since the previous run
        self.store.clear_cache()
        old = self.store.resolve(base)
        new = self.store.resolve(target)
        changed = self.differ.diff_trees(old, new)
        warnings = [str(a) for a in self.differ.ambiguities]

        builder = PatchBuilder(
            context_lines=context_lines,
            binary_sniff_bytes=self.config.diff.binary_sniff_bytes,
        )

        files: list[FileCorrelation] = []
        failures: list[FileFailure] = []
        total = len(changed)

        if progress_callback:
            progress_callback(0, total, f"Diffing {total} file(s)...")

        with ThreadPoolExecutor(max_workers=self._max_workers()) as pool:
            futures: dict[Future[FileCorrelation], ChangedFile] = {
                pool.submit(self._correlate_file, builder, old, new, c, cancel_event): c
                for c in changed
            }
            try:
                for done, future in enumerate(as_completed(futures), 1):
                    if cancel_event is not None and cancel_event.is_set():
                        raise CorrelationCancelled(
                            f"Correlation {base}..{target} cancelled after {done - 1}/{total} file(s)"
                        )
                    changed_file = futures[future]
                    try:
                        files.append(future.result())
                    except CorrelationCancelled:
                        raise
                    except CorrelatorError as e:
                        logger.warning("Failed to diff %s: %s", changed_file.path, e)
                        failures.append(
                            FileFailure(
                                path=changed_file.path,
                                kind=changed_file.kind,
                                error_type=type(e).__name__,
                                message=str(e),
                            )
                        )
                    if progress_callback:
                        progress_callback(done, total, changed_file.path)
            except CorrelationCancelled:
                pool.shutdown(wait=False, cancel_futures=True)
                logger.info("Correlation %s..%s cancelled; partial results discarded", base, target)
                raise

        files.sort(key=lambda f: f.path)
        failures.sort(key=lambda f: f.path)
        duration_ms = (time.time() - start_time) * 1000

        logger.info(
            "Correlated %s..%s: %d file(s), %d failure(s) in %.1fms",
            base, target, len(files), len(failures), duration_ms,
        )

        return CorrelationReport(
            repo_path=str(self.repo_path),
            base=base,
            target=target,
            base_oid=old.oid,
            target_oid=new.oid,
            context_lines=context_lines,
            files=files,
            failures=failures,
            warnings=warnings,
            duration_ms=duration_ms,
        )


def correlate(
    repo_path: Union[str, Path],
    base: str,
    target: str,
    context_lines: int = 3,
    config: Optional[Config] = None,
) -> CorrelationReport:
    """
    Correlate two revisions of the repository at ``repo_path``.

    Convenience wrapper that opens and closes its own object store.
    """
    correlator = ChangeCorrelator(repo_path, config=config)
    try:
        return correlator.correlate(base, target, context_lines=context_lines)
    finally:
        correlator.close()
