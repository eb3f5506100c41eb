"""
Error taxonomy shared by the store, the analyzers and the parser.

Revision-level errors (UnresolvedRevision, SnapshotUnavailable) abort a
correlation run. Everything else is terminal for one file only.
"""

from typing import Optional


class CorrelatorError(Exception):
    """Base class for every error raised by the correlator."""
    pass


class ObjectStoreError(CorrelatorError):
    """The repository itself cannot be opened."""
    pass


class UnresolvedRevision(CorrelatorError):
    """A revision expression does not identify an existing object."""

    def __init__(self, revision: str, reason: str = "") -> None:
        self.revision = revision
        message = f"Cannot resolve revision '{revision}'"
        if reason:
            message += f": {reason}"
        super().__init__(message)


class SnapshotUnavailable(CorrelatorError):
    """A snapshot's tree cannot be read from the object store."""

    def __init__(self, oid: str, reason: str = "") -> None:
        self.oid = oid
        message = f"Snapshot {oid} is unavailable"
        if reason:
            message += f": {reason}"
        super().__init__(message)


class PathNotFound(CorrelatorError):
    """A path does not exist at the requested snapshot."""

    def __init__(self, path: str, oid: str) -> None:
        self.path = path
        self.oid = oid
        super().__init__(f"Path '{path}' not found at {oid}")


class NotAFile(CorrelatorError):
    """A path names a directory (or submodule) rather than a file."""

    def __init__(self, path: str, oid: str) -> None:
        self.path = path
        self.oid = oid
        super().__init__(f"Path '{path}' at {oid} is not a file")


class EncodingError(CorrelatorError):
    """Content is neither valid UTF-8 nor detected as binary."""

    def __init__(self, reason: str, path: Optional[str] = None) -> None:
        self.path = path
        where = f" in '{path}'" if path else ""
        super().__init__(f"Content{where} is not valid UTF-8: {reason}")


class RenameThresholdAmbiguous(CorrelatorError):
    """
    More than one equally similar rename candidate exists.

    Never raised out of the tree differ; the lexicographically smallest
    candidate wins and an instance is recorded for visibility.
    """

    def __init__(self, path: str, chosen: str, candidates: list[str], score: float) -> None:
        self.path = path
        self.chosen = chosen
        self.candidates = sorted(candidates)
        self.score = score
        super().__init__(
            f"Ambiguous rename for '{path}': {len(self.candidates)} candidates at "
            f"{score:.0%} similarity ({', '.join(self.candidates)}); chose '{chosen}'"
        )


class CorrelationCancelled(CorrelatorError):
    """The caller abandoned the run; partial results were discarded."""
    pass


class DiffParserError(CorrelatorError):
    """Error during unified diff parsing."""
    pass
