"""BlobStore protocol — runtime-checkable interface to the binary object store.

The blob store owns the bytes; metadata rows only hold its keys. Any
object with these three coroutines can be plugged into ``CloudVault``.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable


class BlobStoreError(Exception):
    """Raised by blob store implementations when an operation fails."""


class BlobNotFoundError(BlobStoreError):
    """Raised when a key has no stored blob."""


@runtime_checkable
class BlobStore(Protocol):
    """Opaque key/value binary store."""

    async def put(self, key: str, data: bytes, content_type: str) -> None:
        """Store *data* under *key*."""
        ...

    async def remove(self, key: str) -> None:
        """Remove the blob at *key*. Removing a missing key is not an error."""
        ...

    async def signed_url(self, key: str, ttl: int) -> str:
        """Return a URL granting read access to *key* for *ttl* seconds."""
        ...
