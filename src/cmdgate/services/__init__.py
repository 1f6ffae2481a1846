"""External collaborators reached by the router.

Thin pass-throughs with no routing logic of their own: a key-value point
lookup, a blob store for image transforms and a secondary-service forward.
"""

from cmdgate.services.blob import BlobObject, BlobStore, FileSystemBlobStore
from cmdgate.services.kv import InMemoryKeyValueStore, KeyValueStore, YamlKeyValueStore
from cmdgate.services.secondary import SecondaryService

__all__ = [
    "BlobObject",
    "BlobStore",
    "FileSystemBlobStore",
    "InMemoryKeyValueStore",
    "KeyValueStore",
    "SecondaryService",
    "YamlKeyValueStore",
]
