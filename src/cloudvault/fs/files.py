"""FileService — two-phase upload, listing, trash, purge, and download URLs.

Uploads and purges span the blob store and the metadata store, which
share no transaction. Their step ordering and compensation rules are:

- upload: put the blob, then insert and commit the row. If the row
  fails, or the caller is cancelled at either step, remove the blob
  before surfacing the error.
- purge: remove the blob, then delete and commit the row. If the blob
  removal fails, the row stays and the caller may retry.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from .exceptions import MetadataFailure, StorageFailure
from .guard import AccessGuard
from .lifecycle import LifecycleState, transition
from .types import FileInfo
from .utils import make_storage_key, validate_name

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from cloudvault.models.files import FileBase
    from cloudvault.storage.protocol import BlobStore

    from .folders import FolderService
    from .repository import MetadataRepository
    from .utils import PageWindow

logger = logging.getLogger(__name__)

DEFAULT_MIME_TYPE = "application/octet-stream"
DOWNLOAD_URL_TTL = 300  # seconds


class FileService:
    """File operations scoped to a single owner."""

    def __init__(
        self,
        repository: MetadataRepository,
        blobs: BlobStore,
        folders: FolderService,
        guard: AccessGuard | None = None,
        *,
        download_ttl: int = DOWNLOAD_URL_TTL,
    ) -> None:
        self._repo = repository
        self._blobs = blobs
        self._folders = folders
        self._guard = guard or AccessGuard()
        self.download_ttl = download_ttl

    @staticmethod
    def file_to_info(f: FileBase) -> FileInfo:
        """Convert a file record to FileInfo."""
        return FileInfo(
            id=f.id,
            name=f.name,
            mime_type=f.mime_type,
            size_bytes=f.size_bytes,
            folder_id=f.folder_id,
            is_deleted=f.is_deleted,
            created_at=f.created_at,
        )

    async def get_owned(
        self, session: AsyncSession, file_id: str, owner_id: str
    ) -> FileBase:
        """Fetch a file owned by *owner_id* or raise ``NotFoundError``."""
        file = await self._repo.get_file(session, file_id)
        return self._guard.require_owned(file, owner_id, kind="File")

    # ------------------------------------------------------------------
    # Upload
    # ------------------------------------------------------------------

    async def upload_file(
        self,
        session: AsyncSession,
        owner_id: str,
        name: str,
        data: bytes,
        *,
        mime_type: str | None = None,
        folder_id: str | None = None,
    ) -> FileBase:
        """Store *data* and record it. Commits *session* on success."""
        name = validate_name(name, field="File name")
        if folder_id is not None:
            await self._folders.get_owned(session, folder_id, owner_id, active_only=True)

        mime_type = mime_type or DEFAULT_MIME_TYPE
        storage_key = make_storage_key(owner_id, name)

        # Phase 1: blob. On cancellation the put is left to settle, then removed.
        put = asyncio.ensure_future(self._blobs.put(storage_key, data, mime_type))
        try:
            await asyncio.shield(put)
        except asyncio.CancelledError:
            await asyncio.shield(self._discard_put(put, storage_key))
            raise
        except Exception as e:
            raise StorageFailure(f"Failed to upload file to storage: {e}") from e

        # Phase 2: metadata
        file = self._repo.file_model(
            owner_id=owner_id,
            folder_id=folder_id,
            name=name,
            mime_type=mime_type,
            size_bytes=len(data),
            storage_key=storage_key,
        )
        try:
            await self._repo.insert(session, file)
            await self._repo.commit(session)
        except MetadataFailure:
            await self._compensate_upload(storage_key)
            raise
        except asyncio.CancelledError:
            await asyncio.shield(self._compensate_upload(storage_key))
            raise

        logger.info("Uploaded %s (%d bytes) as %s", file.id, file.size_bytes, storage_key)
        return file

    async def _discard_put(self, put: asyncio.Future[None], storage_key: str) -> None:
        """Let an abandoned put finish, then remove whatever it stored."""
        try:
            await put
        except Exception:
            logger.debug("Abandoned put for %s failed; nothing to remove", storage_key)
            return
        await self._compensate_upload(storage_key)

    async def _compensate_upload(self, storage_key: str) -> None:
        """Best-effort removal of a blob whose row never landed."""
        try:
            await self._blobs.remove(storage_key)
        except Exception:
            logger.warning("Orphaned blob left behind: %s", storage_key, exc_info=True)
        else:
            logger.debug("Removed blob %s after failed metadata insert", storage_key)

    # ------------------------------------------------------------------
    # Listing
    # ------------------------------------------------------------------

    async def list_files(
        self,
        session: AsyncSession,
        owner_id: str,
        window: PageWindow,
        *,
        folder_id: str | None = None,
        include_trash: bool = False,
    ) -> tuple[list[FileBase], int]:
        """One page of files in a folder (root when *folder_id* is None) or in trash."""
        return await self._repo.page_files(
            session,
            owner_id,
            window,
            folder_id=folder_id,
            trashed=include_trash,
        )

    # ------------------------------------------------------------------
    # Rename / trash
    # ------------------------------------------------------------------

    async def rename_file(
        self,
        session: AsyncSession,
        file_id: str,
        owner_id: str,
        new_name: str,
    ) -> FileBase:
        file = await self.get_owned(session, file_id, owner_id)
        file.name = validate_name(new_name, field="New name")
        await self._repo.save(session, file)
        return file

    async def soft_delete_file(
        self, session: AsyncSession, file_id: str, owner_id: str
    ) -> bool:
        """Move a file to trash. Returns False if it was already there."""
        return await self._set_state(session, file_id, owner_id, LifecycleState.TRASHED)

    async def restore_file(
        self, session: AsyncSession, file_id: str, owner_id: str
    ) -> bool:
        """Bring a file back from trash. Returns False if it was active."""
        return await self._set_state(session, file_id, owner_id, LifecycleState.ACTIVE)

    async def _set_state(
        self,
        session: AsyncSession,
        file_id: str,
        owner_id: str,
        target: LifecycleState,
    ) -> bool:
        file = await self.get_owned(session, file_id, owner_id)
        changed = transition(file, target)
        if changed:
            await self._repo.save(session, file)
            logger.debug("File %s -> %s", file_id, target.value)
        return changed

    # ------------------------------------------------------------------
    # Purge
    # ------------------------------------------------------------------

    async def permanently_delete_file(
        self, session: AsyncSession, file_id: str, owner_id: str
    ) -> None:
        """Remove the blob, then the row. Commits *session* on success."""
        file = await self.get_owned(session, file_id, owner_id)
        storage_key = file.storage_key

        try:
            await self._blobs.remove(storage_key)
        except Exception as e:
            raise StorageFailure(f"Failed to delete file from storage: {e}") from e

        await self._repo.delete(session, file)
        await self._repo.commit(session)
        logger.info("Permanently deleted %s (%s)", file_id, storage_key)

    # ------------------------------------------------------------------
    # Download
    # ------------------------------------------------------------------

    async def signed_url_for(self, file: FileBase) -> str:
        """Short-lived download URL for *file*'s blob."""
        try:
            return await self._blobs.signed_url(file.storage_key, self.download_ttl)
        except Exception as e:
            raise StorageFailure(f"Failed to sign download URL: {e}") from e

    async def generate_download_url(
        self, session: AsyncSession, file_id: str, owner_id: str
    ) -> str:
        file = await self.get_owned(session, file_id, owner_id)
        return await self.signed_url_for(file)
