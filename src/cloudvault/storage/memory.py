"""MemoryBlobStore — in-process blob store for development and tests."""

from __future__ import annotations

import time
from dataclasses import dataclass
from urllib.parse import quote

from .protocol import BlobNotFoundError, BlobStoreError


@dataclass
class StoredBlob:
    data: bytes
    content_type: str


class MemoryBlobStore:
    """Keeps blobs in a dict. Not shared across processes.

    The ``fail_*`` flags make the next calls of that kind raise
    ``BlobStoreError``, which is how the two-phase tests simulate outages.
    """

    def __init__(self, base_url: str = "memory://blobs") -> None:
        self.base_url = base_url.rstrip("/")
        self.blobs: dict[str, StoredBlob] = {}
        self.fail_put = False
        self.fail_remove = False
        self.fail_sign = False
        self.removed: list[str] = []

    async def put(self, key: str, data: bytes, content_type: str) -> None:
        if self.fail_put:
            raise BlobStoreError(f"put rejected: {key}")
        self.blobs[key] = StoredBlob(data=bytes(data), content_type=content_type)

    async def remove(self, key: str) -> None:
        if self.fail_remove:
            raise BlobStoreError(f"remove rejected: {key}")
        self.blobs.pop(key, None)
        self.removed.append(key)

    async def signed_url(self, key: str, ttl: int) -> str:
        if self.fail_sign:
            raise BlobStoreError(f"signing rejected: {key}")
        if key not in self.blobs:
            raise BlobNotFoundError(f"No blob stored at {key}")
        expires = int(time.time()) + ttl
        return f"{self.base_url}/{quote(key)}?expires={expires}"

    def __contains__(self, key: object) -> bool:
        return key in self.blobs
