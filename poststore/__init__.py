"""
Post Store

Append-only, single-collection post store backed by a flat JSON file.
Clients poll cheaply with a content fingerprint: a read that presents the
current fingerprint gets "not modified" instead of the whole collection.

LAYERS:
=======
contracts/    Entry, results, error types
fingerprint   SHA3-224 / base64 change token
storage/      load (bootstrap if missing) and whole-file persist
collection    in-memory entries + cached serialized form and fingerprint
coordinator   readers-writer lock
engine        PostStore: read / write boundary, configuration
api/          FastAPI surface
"""

from .contracts import (
    Entry, ReadResult, ReadStatus, Snapshot, WriteResult,
    PostStoreError, StoreUnavailableError, CorruptCollectionError, PersistError,
)
from .engine import PostStore, PostStoreConfig
from .fingerprint import fingerprint

__all__ = [
    "Entry", "ReadResult", "ReadStatus", "Snapshot", "WriteResult",
    "PostStoreError", "StoreUnavailableError", "CorruptCollectionError", "PersistError",
    "PostStore", "PostStoreConfig", "fingerprint",
]
