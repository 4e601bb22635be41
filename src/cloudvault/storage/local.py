"""LocalBlobStore — blobs on the host filesystem with HMAC-signed URLs."""

from __future__ import annotations

import asyncio
import contextlib
import hashlib
import hmac
import os
import tempfile
import time
from pathlib import Path
from urllib.parse import quote

from .protocol import BlobNotFoundError, BlobStoreError


class LocalBlobStore:
    """Stores each blob as a file under ``root``.

    Security: ``_resolve_key()`` ensures every key stays within ``root``,
    preventing path traversal through crafted keys.

    Signed URLs point at ``base_url`` and carry ``expires`` and
    ``signature`` query parameters; whatever serves them checks the pair
    with ``verify()``.
    """

    def __init__(
        self,
        root: Path | str,
        *,
        base_url: str,
        secret: str,
    ) -> None:
        if not secret:
            raise ValueError("LocalBlobStore requires a signing secret")
        self.root = Path(root).resolve()
        self.base_url = base_url.rstrip("/")
        self._secret = secret.encode()
        self.root.mkdir(parents=True, exist_ok=True)

    # =========================================================================
    # Key Resolution & Security
    # =========================================================================

    def _resolve_key(self, key: str) -> Path:
        rel = key.strip("/")
        if not rel or "\x00" in rel:
            raise BlobStoreError(f"Invalid blob key: {key!r}")
        resolved = (self.root / rel).resolve()
        try:
            resolved.relative_to(self.root)
        except ValueError:
            raise BlobStoreError(f"Blob key escapes store root: {key!r}") from None
        return resolved

    def _sign(self, key: str, expires: int) -> str:
        message = f"{key}:{expires}".encode()
        return hmac.new(self._secret, message, hashlib.sha256).hexdigest()

    # =========================================================================
    # BlobStore protocol
    # =========================================================================

    async def put(self, key: str, data: bytes, content_type: str) -> None:
        """Write *data* atomically via tempfile + replace."""
        resolved = self._resolve_key(key)

        def _write() -> None:
            resolved.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(dir=str(resolved.parent), suffix=".tmp")
            try:
                with os.fdopen(fd, "wb") as f:
                    f.write(data)
                Path(tmp_path).replace(resolved)
            except Exception:
                with contextlib.suppress(OSError):
                    Path(tmp_path).unlink()
                raise

        try:
            await asyncio.to_thread(_write)
        except OSError as e:
            raise BlobStoreError(f"Failed to store blob {key}: {e}") from e

    async def remove(self, key: str) -> None:
        resolved = self._resolve_key(key)
        try:
            await asyncio.to_thread(resolved.unlink, True)
        except OSError as e:
            raise BlobStoreError(f"Failed to remove blob {key}: {e}") from e

    async def signed_url(self, key: str, ttl: int) -> str:
        resolved = self._resolve_key(key)
        if not await asyncio.to_thread(resolved.is_file):
            raise BlobNotFoundError(f"No blob stored at {key}")
        expires = int(time.time()) + ttl
        signature = self._sign(key, expires)
        return f"{self.base_url}/{quote(key)}?expires={expires}&signature={signature}"

    # =========================================================================
    # Serving helpers
    # =========================================================================

    def verify(self, key: str, expires: int, signature: str, *, now: float | None = None) -> bool:
        """Check a signed URL's parameters."""
        current = time.time() if now is None else now
        if expires < current:
            return False
        return hmac.compare_digest(self._sign(key, expires), signature)

    async def read(self, key: str) -> bytes:
        resolved = self._resolve_key(key)
        try:
            return await asyncio.to_thread(resolved.read_bytes)
        except FileNotFoundError:
            raise BlobNotFoundError(f"No blob stored at {key}") from None
        except OSError as e:
            raise BlobStoreError(f"Failed to read blob {key}: {e}") from e
