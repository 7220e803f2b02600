"""
Contracts Module

Types shared between the collection, storage, engine and HTTP layers.

DESIGN PRINCIPLES:
==================
1. All contract types are immutable (frozen dataclasses)
2. Every failure is an explicit PostStoreError with an ErrorCode
3. Timestamps are integer milliseconds since epoch, assigned by the store
"""

from .base import (
    ErrorCode, PostStoreError, StoreUnavailableError,
    CorruptCollectionError, InvalidContentError, PersistError,
)
from .events import Entry, Snapshot, ReadStatus, ReadResult, WriteResult

__all__ = [
    'ErrorCode', 'PostStoreError', 'StoreUnavailableError',
    'CorruptCollectionError', 'InvalidContentError', 'PersistError',
    'Entry', 'Snapshot', 'ReadStatus', 'ReadResult', 'WriteResult',
]
