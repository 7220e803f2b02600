"""
Fingerprint Engine
==================

Content digest of a serialized collection, used as a cache token.

GUARANTEES:
- Same bytes → same token, across processes and restarts
- Order-sensitive: the digest covers the exact serialized byte sequence
- Text-safe: standard base64, safe to carry in an HTTP header
"""

from __future__ import annotations
from typing import Union
import base64
import hashlib


def fingerprint(data: Union[bytes, str]) -> str:
    """
    SHA3-224 digest of `data`, base64 encoded.

    str input is encoded as UTF-8 first.
    """
    if isinstance(data, str):
        data = data.encode('utf-8')
    digest = hashlib.sha3_224(data).digest()
    return base64.b64encode(digest).decode('ascii')
