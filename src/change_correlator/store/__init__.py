"""
Object store package for the Lint Change Correlator.

Read-only access to revisions and file content (using GitPython).
"""

from change_correlator.errors import ObjectStoreError
from change_correlator.store.object_store import ObjectStore, open_store

__all__ = [
    "ObjectStore",
    "ObjectStoreError",
    "open_store",
]
