"""
Base Contracts and Shared Types

Error states shared by every layer of the post store.

BOUNDARY ENFORCEMENT:
=====================
- Every failure the core can produce is enumerated in ErrorCode
- Failures are raised as PostStoreError subclasses, never returned silently
- The HTTP surface maps these to responses; the core never builds responses
"""

from __future__ import annotations
from enum import Enum, auto
from typing import Optional


# =============================================================================
# ERROR STATES (Explicit, never silent)
# =============================================================================

class ErrorCode(Enum):
    """
    Explicit error codes for the post store.
    No silent fallbacks - every error state is enumerated.
    """
    # Startup errors (fatal: process must not start)
    STORE_UNAVAILABLE = auto()
    COLLECTION_CORRUPT = auto()

    # Write-time errors
    CONTENT_NOT_ENCODABLE = auto()
    PERSIST_FAILED = auto()  # fatal for the request, memory already advanced


class PostStoreError(Exception):
    """Base class for all post store failures."""

    code: ErrorCode = ErrorCode.STORE_UNAVAILABLE

    def __init__(self, message: str, path: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.path = path

    def __str__(self) -> str:
        if self.path:
            return f"{self.message} ({self.path})"
        return self.message


class StoreUnavailableError(PostStoreError):
    """The collection file exists but could not be read or created."""
    code = ErrorCode.STORE_UNAVAILABLE


class CorruptCollectionError(PostStoreError):
    """Persisted bytes are not a valid serialized collection."""
    code = ErrorCode.COLLECTION_CORRUPT


class InvalidContentError(PostStoreError):
    """Content cannot be serialized as UTF-8; the collection is unchanged."""
    code = ErrorCode.CONTENT_NOT_ENCODABLE


class PersistError(PostStoreError):
    """
    Rewriting the collection file failed.

    The in-memory collection has already advanced when this is raised;
    readers will see the new entry until a later persist succeeds.
    """
    code = ErrorCode.PERSIST_FAILED
