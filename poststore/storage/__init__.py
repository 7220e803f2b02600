"""
Persistent Store Layer

RESPONSIBILITY: Own the on-disk representation of the collection
ALLOWED INPUTS: Fully serialized collections (str)
OUTPUTS: Raw persisted bytes on load

WHAT THIS LAYER MUST NOT DO:
============================
- Parse or interpret the collection (the collection layer does that)
- Retry failed writes
- Roll back the in-memory collection on failure

PERSISTENCE MODEL:
==================
- load(): read the whole file; bootstrap it with the empty collection if absent
- persist(): synchronous whole-file rewrite after every append
- No journal, no atomic rename: a crash mid-write can truncate the file
"""

from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path
from typing import Optional
import logging

from ..contracts.base import StoreUnavailableError, PersistError


logger = logging.getLogger(__name__)

EMPTY_COLLECTION = "[]"


# =============================================================================
# STORAGE INTERFACE
# =============================================================================

class PostStorage:
    """
    Abstract storage backend interface.

    Implementations differ in where the bytes live, never in semantics:
    load() bootstraps if missing, persist() replaces everything.
    """

    def load(self) -> bytes:
        """Return the persisted collection, creating an empty one if absent."""
        raise NotImplementedError

    def persist(self, serialized_form: str) -> None:
        """Overwrite the persisted collection with `serialized_form`."""
        raise NotImplementedError

    @property
    def location(self) -> str:
        raise NotImplementedError


# =============================================================================
# FILE-BASED STORAGE BACKEND
# =============================================================================

class FilePostStorage(PostStorage):
    """
    Single flat file holding the serialized collection.

    Whole-file rewrite on every persist is O(total size) per append. The
    dataset is append-only and expected to stay small.
    """

    def __init__(self, path: Path):
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    @property
    def location(self) -> str:
        return str(self._path)

    def load(self) -> bytes:
        try:
            raw = self._path.read_bytes()
        except FileNotFoundError:
            return self._bootstrap()
        except OSError as e:
            raise StoreUnavailableError(
                f"Cannot read collection file: {e}", path=self.location
            ) from e

        logger.info("Loaded collection file %s (%d bytes)", self._path, len(raw))
        return raw

    def _bootstrap(self) -> bytes:
        """Create the file with the canonical empty collection."""
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._path.write_text(EMPTY_COLLECTION, encoding='utf-8')
        except OSError as e:
            raise StoreUnavailableError(
                f"Cannot create collection file: {e}", path=self.location
            ) from e

        logger.info("Collection file %s not found, created empty collection", self._path)
        return EMPTY_COLLECTION.encode('utf-8')

    def persist(self, serialized_form: str) -> None:
        try:
            self._path.write_text(serialized_form, encoding='utf-8')
        except OSError as e:
            logger.error("Failed to persist collection to %s: %s", self._path, e)
            raise PersistError(
                f"Failed to persist collection: {e}", path=self.location
            ) from e


# =============================================================================
# IN-MEMORY STORAGE BACKEND
# =============================================================================

class InMemoryPostStorage(PostStorage):
    """
    In-memory implementation of storage backend.

    Holds the last persisted bytes. Suitable for testing and ephemeral
    deployments. Setting fail_persist makes every persist raise PersistError.
    """

    def __init__(self, initial: Optional[str] = None):
        self._data: Optional[bytes] = (
            initial.encode('utf-8') if initial is not None else None
        )
        self.persist_count: int = 0
        self.fail_persist: bool = False

    @property
    def location(self) -> str:
        return "memory"

    @property
    def data(self) -> Optional[bytes]:
        return self._data

    def load(self) -> bytes:
        if self._data is None:
            self._data = EMPTY_COLLECTION.encode('utf-8')
        return self._data

    def persist(self, serialized_form: str) -> None:
        if self.fail_persist:
            raise PersistError("Simulated persist failure", path=self.location)
        self._data = serialized_form.encode('utf-8')
        self.persist_count += 1


# =============================================================================
# STORAGE FACTORY
# =============================================================================

@dataclass
class StorageConfig:
    """Configuration for the persistent store."""
    backend_type: str = "file"  # "file" or "memory"
    path: str = "posts.json"


def create_storage(config: Optional[StorageConfig] = None) -> PostStorage:
    """Create storage backend based on configuration."""
    config = config or StorageConfig()
    if config.backend_type == "file":
        return FilePostStorage(Path(config.path))
    if config.backend_type == "memory":
        return InMemoryPostStorage()
    raise ValueError(f"Unknown storage backend: {config.backend_type!r}")
