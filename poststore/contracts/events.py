"""
Entry and Result Contracts

Immutable data passed between the collection, the engine and the HTTP
surface. No behavior beyond (de)serialization of a single Entry.
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional


# =============================================================================
# ENTRY
# =============================================================================

@dataclass(frozen=True)
class Entry:
    """
    A single post.

    content is opaque (plain text, JSON or an encrypted blob) and is never
    inspected. timestamp and id are assigned by the store at append time.
    """
    content: str
    timestamp: int  # milliseconds since epoch
    id: int

    def __post_init__(self):
        if not isinstance(self.content, str):
            raise ValueError("Entry content must be a string")
        for name in ("timestamp", "id"):
            value = getattr(self, name)
            # bool is an int subclass; reject it explicitly
            if isinstance(value, bool) or not isinstance(value, int):
                raise ValueError(f"Entry {name} must be an integer")
            if value < 0:
                raise ValueError(f"Entry {name} must be non-negative")

    def to_dict(self) -> Dict[str, Any]:
        # Key order is part of the on-disk format
        return {
            'content': self.content,
            'timestamp': self.timestamp,
            'id': self.id,
        }

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> Entry:
        if not isinstance(data, dict):
            raise ValueError(f"Entry record must be an object, got {type(data).__name__}")
        missing = {'content', 'timestamp', 'id'} - data.keys()
        if missing:
            raise ValueError(f"Entry record missing fields: {sorted(missing)}")
        return Entry(
            content=data['content'],
            timestamp=data['timestamp'],
            id=data['id'],
        )


# =============================================================================
# SNAPSHOT / RESULTS
# =============================================================================

@dataclass(frozen=True)
class Snapshot:
    """The cached (serialized_form, fingerprint) pair of a collection."""
    serialized_form: str
    fingerprint: str


class ReadStatus(Enum):
    """Outcome of a conditional read."""
    OK = "ok"
    NOT_MODIFIED = "not_modified"


@dataclass(frozen=True)
class ReadResult:
    """
    Result of a conditional read.

    body is None exactly when status is NOT_MODIFIED.
    token is always the current fingerprint.
    """
    status: ReadStatus
    token: str
    body: Optional[str] = None

    @property
    def not_modified(self) -> bool:
        return self.status is ReadStatus.NOT_MODIFIED


@dataclass(frozen=True)
class WriteResult:
    """Result of an append: the new entry plus the new snapshot."""
    entry: Entry
    body: str
    token: str
