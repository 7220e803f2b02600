"""
Engine Orchestration Module

The single entry point the HTTP surface talks to. Wires the persistent
store, the post collection and the access coordinator together and exposes
the two boundary operations: read (conditional) and write (append).

FLOW:
=====
startup:  storage.load() → PostCollection.from_serialized() → fingerprint
write:    exclusive → append → recompute views → storage.persist() → release
read:     shared → compare client token with fingerprint → OK / NOT_MODIFIED

Failures are raised, never swallowed. A failed persist leaves the in-memory
collection ahead of the file; there is no rollback and no retry.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Mapping, Optional, Tuple
import logging
import os

from .clock import Clock
from .collection import PostCollection
from .contracts.events import Entry, ReadResult, ReadStatus, Snapshot, WriteResult
from .coordinator import AccessCoordinator
from .storage import PostStorage, StorageConfig, create_storage


logger = logging.getLogger(__name__)

DEFAULT_MAX_CONTENT_BYTES = 32 * 1024
DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 3030
DEFAULT_CORS_MAX_AGE = 10_000_000


def _env_int(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None


@dataclass
class PostStoreConfig:
    """Unified configuration for the store and its HTTP surface."""
    storage: StorageConfig = field(default_factory=StorageConfig)
    max_content_bytes: int = DEFAULT_MAX_CONTENT_BYTES
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    cors_max_age: int = DEFAULT_CORS_MAX_AGE

    def __post_init__(self):
        if self.max_content_bytes <= 0:
            raise ValueError("max_content_bytes must be positive")

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> PostStoreConfig:
        """Build config from POSTSTORE_* environment variables."""
        env = os.environ if env is None else env
        return cls(
            storage=StorageConfig(
                backend_type=env.get("POSTSTORE_BACKEND", "file"),
                path=env.get("POSTSTORE_PATH", "posts.json"),
            ),
            max_content_bytes=_env_int(env, "POSTSTORE_MAX_CONTENT_BYTES", DEFAULT_MAX_CONTENT_BYTES),
            host=env.get("POSTSTORE_HOST", DEFAULT_HOST),
            port=_env_int(env, "POSTSTORE_PORT", DEFAULT_PORT),
        )


class PostStore:
    """
    Append-only post store with conditional reads.

    One instance per process, built with PostStore.open() and shared by
    every request handler.
    """

    def __init__(
        self,
        collection: PostCollection,
        storage: PostStorage,
        config: Optional[PostStoreConfig] = None,
    ):
        self._collection = collection
        self._storage = storage
        self._config = config or PostStoreConfig()
        self._coordinator = AccessCoordinator()

    @classmethod
    def open(
        cls,
        config: Optional[PostStoreConfig] = None,
        storage: Optional[PostStorage] = None,
        clock: Optional[Clock] = None,
    ) -> PostStore:
        """
        Load the collection and return a ready store.

        Raises StoreUnavailableError / CorruptCollectionError when the
        persisted collection cannot be read or parsed; the process must
        not start in that case.
        """
        config = config or PostStoreConfig()
        storage = storage or create_storage(config.storage)

        raw = storage.load()
        collection = PostCollection.from_serialized(raw, clock=clock, location=storage.location)

        logger.info(
            "Opened post store at %s: %d entries, next id %d, token %s",
            storage.location, len(collection), collection.next_id, collection.fingerprint,
        )
        return cls(collection, storage, config)

    # =========================================================================
    # BOUNDARY OPERATIONS
    # =========================================================================

    def read(self, client_token: Optional[str] = None) -> ReadResult:
        """
        Conditional read.

        NOT_MODIFIED iff client_token equals the current fingerprint,
        otherwise the full serialized collection.
        """
        with self._coordinator.shared():
            snapshot = self._collection.snapshot()

        if client_token is not None and client_token == snapshot.fingerprint:
            return ReadResult(status=ReadStatus.NOT_MODIFIED, token=snapshot.fingerprint)
        return ReadResult(
            status=ReadStatus.OK,
            token=snapshot.fingerprint,
            body=snapshot.serialized_form,
        )

    def write(self, content: str) -> WriteResult:
        """
        Append `content` and persist the whole collection before returning.

        Raises InvalidContentError (collection unchanged) for content that
        cannot be encoded, and PersistError if the file rewrite fails; the
        entry stays in memory in that case.
        """
        with self._coordinator.exclusive():
            entry = self._collection.append(content)
            snapshot = self._collection.snapshot()
            self._storage.persist(snapshot.serialized_form)

        return WriteResult(entry=entry, body=snapshot.serialized_form, token=snapshot.fingerprint)

    # =========================================================================
    # INSPECTION
    # =========================================================================

    def snapshot(self) -> Snapshot:
        with self._coordinator.shared():
            return self._collection.snapshot()

    def status(self) -> Tuple[int, Snapshot]:
        """Entry count and snapshot taken under one shared section."""
        with self._coordinator.shared():
            return len(self._collection), self._collection.snapshot()

    def entries(self) -> Tuple[Entry, ...]:
        with self._coordinator.shared():
            return self._collection.entries

    def __len__(self) -> int:
        with self._coordinator.shared():
            return len(self._collection)

    @property
    def config(self) -> PostStoreConfig:
        return self._config

    @property
    def storage(self) -> PostStorage:
        return self._storage

    @property
    def coordinator(self) -> AccessCoordinator:
        return self._coordinator
