"""
Lint Change Correlator

Resolves two revisions of a repository, enumerates the files that changed
between them and classifies every line of each changed file as new or
unchanged, so lint findings can be attached only to lines a contributor
actually touched.
"""

from importlib.metadata import version, PackageNotFoundError

try:
    __version__ = version("lint-change-correlator")
except PackageNotFoundError:
    __version__ = "0.1.0"

# Public API exports
__all__ = [
    "__version__",
]
