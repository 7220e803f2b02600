"""
Post Collection
===============

The in-memory, authoritative list of entries plus its cached derived views.

INVARIANTS:
- Append only: entries are never mutated or removed
- ids are strictly increasing; insertion order = id order
- serialized_form and fingerprint always describe the current entries
  (both are recomputed eagerly, inside the same append call)

THREAD SAFETY:
- None on its own. append() must run under the coordinator's exclusive
  access, snapshot() under shared access.
"""

from __future__ import annotations
from typing import Iterable, List, Optional, Tuple
import json
import logging

from .clock import Clock
from .contracts.base import CorruptCollectionError, InvalidContentError
from .contracts.events import Entry, Snapshot
from .fingerprint import fingerprint


logger = logging.getLogger(__name__)


def serialize_entries(entries: Iterable[Entry]) -> str:
    """Compact JSON array, keys in content/timestamp/id order, non-ASCII kept literal."""
    return json.dumps(
        [entry.to_dict() for entry in entries],
        separators=(',', ':'),
        ensure_ascii=False,
    )


def parse_entries(raw: bytes, location: Optional[str] = None) -> List[Entry]:
    """
    Parse persisted bytes into entries.

    Raises CorruptCollectionError unless `raw` is UTF-8 JSON holding an array
    of valid entry records with strictly increasing ids.
    """
    try:
        data = json.loads(raw.decode('utf-8'))
    except (UnicodeDecodeError, ValueError) as e:
        raise CorruptCollectionError(f"Collection is not valid JSON: {e}", path=location) from e

    if not isinstance(data, list):
        raise CorruptCollectionError(
            f"Collection must be a JSON array, got {type(data).__name__}", path=location
        )

    entries: List[Entry] = []
    for index, record in enumerate(data):
        try:
            entry = Entry.from_dict(record)
        except ValueError as e:
            raise CorruptCollectionError(f"Invalid entry at index {index}: {e}", path=location) from e
        if entries and entry.id <= entries[-1].id:
            raise CorruptCollectionError(
                f"Entry ids not strictly increasing at index {index}: "
                f"{entries[-1].id} then {entry.id}",
                path=location,
            )
        entries.append(entry)
    return entries


class PostCollection:
    """
    Ordered entries, the next-id counter and the cached (serialized, fingerprint) pair.

    Build with PostCollection.empty() or PostCollection.from_serialized().
    """

    def __init__(
        self,
        entries: Optional[List[Entry]] = None,
        serialized_form: Optional[str] = None,
        clock: Optional[Clock] = None,
    ):
        self._entries: List[Entry] = list(entries or [])
        self._clock = clock or Clock.live()
        self._next_id = self._entries[-1].id + 1 if self._entries else 0

        # A loaded collection keeps the exact bytes it was read from so the
        # fingerprint matches the one computed before the restart.
        if serialized_form is None:
            serialized_form = serialize_entries(self._entries)
        self._serialized_form = serialized_form
        self._fingerprint = fingerprint(serialized_form)

    @classmethod
    def empty(cls, clock: Optional[Clock] = None) -> PostCollection:
        return cls(clock=clock)

    @classmethod
    def from_serialized(
        cls,
        raw: bytes,
        clock: Optional[Clock] = None,
        location: Optional[str] = None,
    ) -> PostCollection:
        """Parse persisted bytes; raises CorruptCollectionError on bad input."""
        entries = parse_entries(raw, location)
        return cls(entries=entries, serialized_form=raw.decode('utf-8'), clock=clock)

    # =========================================================================
    # WRITE (exclusive access only)
    # =========================================================================

    def append(self, content: str) -> Entry:
        """
        Append a new entry and refresh the derived views.

        Content is accepted as-is. Content that cannot be encoded as UTF-8
        (lone surrogates) raises InvalidContentError and leaves the
        collection untouched.
        """
        entry = Entry(content=content, timestamp=self._clock.now(), id=self._next_id)
        entries = self._entries + [entry]
        serialized_form = serialize_entries(entries)
        try:
            token = fingerprint(serialized_form)
        except UnicodeEncodeError as e:
            raise InvalidContentError(f"Content is not encodable as UTF-8: {e.reason}") from e

        # All derived views computed; install them together
        self._entries = entries
        self._next_id += 1
        self._serialized_form = serialized_form
        self._fingerprint = token

        logger.debug("Appended entry id=%d (%d chars)", entry.id, len(content))
        return entry

    # =========================================================================
    # READ (shared access)
    # =========================================================================

    def snapshot(self) -> Snapshot:
        return Snapshot(serialized_form=self._serialized_form, fingerprint=self._fingerprint)

    @property
    def serialized_form(self) -> str:
        return self._serialized_form

    @property
    def fingerprint(self) -> str:
        return self._fingerprint

    @property
    def entries(self) -> Tuple[Entry, ...]:
        return tuple(self._entries)

    @property
    def next_id(self) -> int:
        return self._next_id

    @property
    def last_id(self) -> Optional[int]:
        return self._entries[-1].id if self._entries else None

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"PostCollection(entries={len(self._entries)}, next_id={self._next_id})"
