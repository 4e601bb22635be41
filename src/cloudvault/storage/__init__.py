"""Blob store adapters — the protocol plus local and in-memory implementations."""

from cloudvault.storage.local import LocalBlobStore
from cloudvault.storage.memory import MemoryBlobStore
from cloudvault.storage.protocol import BlobNotFoundError, BlobStore, BlobStoreError

__all__ = [
    "BlobNotFoundError",
    "BlobStore",
    "BlobStoreError",
    "LocalBlobStore",
    "MemoryBlobStore",
]
