"""CloudVault — async facade over folders, files, share links, and search."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, TypeVar

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from cloudvault.config import VaultSettings
from cloudvault.fs.exceptions import CloudVaultError, MetadataFailure
from cloudvault.fs.files import FileService
from cloudvault.fs.folders import FolderService
from cloudvault.fs.guard import AccessGuard
from cloudvault.fs.repository import MetadataRepository
from cloudvault.fs.search import SearchService
from cloudvault.fs.sharing import ShareLinkService
from cloudvault.fs.types import (
    BreadcrumbResult,
    DownloadResult,
    FileListResult,
    FileResult,
    FolderListResult,
    FolderResult,
    ListSharesResult,
    OperationResult,
    ShareAccessResult,
    ShareResult,
)
from cloudvault.fs.utils import page_window

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator, Callable
    from datetime import datetime

    from sqlalchemy.ext.asyncio import AsyncEngine

    from cloudvault.fs.utils import PageWindow
    from cloudvault.models.files import FileBase
    from cloudvault.models.folders import FolderBase
    from cloudvault.models.shares import ShareLinkBase, SharePermission
    from cloudvault.storage.protocol import BlobStore

logger = logging.getLogger(__name__)

R = TypeVar("R", bound=OperationResult)


class CloudVault:
    """Async facade wiring the metadata repository, blob store, and services.

    Every public method takes the caller's id first, runs in its own
    session, and returns a result dataclass instead of raising::

        vault = CloudVault(blob_store=MemoryBlobStore(), engine=engine)
        await vault.create_tables()
        folder = await vault.create_folder("alice", "Docs")
        upload = await vault.upload_file(
            "alice", "a.pdf", data, folder_id=folder.folder.id
        )

    Only ``resolve_share_link`` takes no caller id.
    """

    def __init__(
        self,
        *,
        blob_store: BlobStore,
        engine: AsyncEngine | None = None,
        session_factory: Callable[..., AsyncSession] | None = None,
        settings: VaultSettings | None = None,
        file_model: type[FileBase] | None = None,
        folder_model: type[FolderBase] | None = None,
        share_model: type[ShareLinkBase] | None = None,
    ) -> None:
        if engine is not None and session_factory is not None:
            raise ValueError("Provide engine or session_factory, not both")

        self.settings = settings or VaultSettings()
        self._owns_engine = False
        if engine is None and session_factory is None:
            engine = create_async_engine(self.settings.database_url, echo=self.settings.echo_sql)
            self._owns_engine = True
        self._engine = engine
        if session_factory is None:
            assert engine is not None
            session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
        self._session_factory = session_factory

        self.blob_store = blob_store
        self.repository = MetadataRepository(file_model, folder_model, share_model)
        guard = AccessGuard()
        self.folders = FolderService(
            self.repository, guard, max_depth=self.settings.max_breadcrumb_depth
        )
        self.files = FileService(
            self.repository,
            blob_store,
            self.folders,
            guard,
            download_ttl=self.settings.download_url_ttl,
        )
        self.shares = ShareLinkService(
            self.repository, self.files, share_base_url=self.settings.share_base_url
        )
        self.search_service = SearchService(self.repository)

    @classmethod
    def from_settings(cls, settings: VaultSettings | None = None) -> CloudVault:
        """Build a vault with a disk blob store and the configured database."""
        settings = settings or VaultSettings()
        return cls(blob_store=settings.build_blob_store(), settings=settings)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def create_tables(self) -> None:
        """Create the files, folders, and share tables if missing."""
        if self._engine is None:
            raise ValueError("create_tables requires an engine")
        repo = self.repository
        async with self._engine.begin() as conn:
            for model in (repo.file_model, repo.folder_model, repo.share_model):
                await conn.run_sync(
                    lambda c, m=model: m.__table__.create(c, checkfirst=True)  # type: ignore[attr-defined]
                )

    async def close(self) -> None:
        """Dispose the engine if this vault created it."""
        if self._owns_engine and self._engine is not None:
            await self._engine.dispose()

    async def __aenter__(self) -> CloudVault:
        return self

    async def __aexit__(self, exc_type: object, exc_val: object, exc_tb: object) -> None:
        await self.close()

    @asynccontextmanager
    async def _session(self) -> AsyncGenerator[AsyncSession]:
        """Yield a session; commit on success, roll back on error."""
        session = self._session_factory()
        try:
            yield session
            await session.commit()
        except SQLAlchemyError as e:
            await session.rollback()
            raise MetadataFailure(f"Metadata store error: {e}") from e
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()

    @staticmethod
    def _failure(result_type: type[R], error: CloudVaultError) -> R:
        logger.debug("%s failed: %s", result_type.__name__, error)
        return result_type(
            success=False,
            message=str(error),
            error=error.kind,
            system=error.system,
        )

    def _window(self, page: int, page_size: int | None) -> PageWindow:
        return page_window(
            page,
            page_size if page_size is not None else self.settings.default_page_size,
            max_page_size=self.settings.max_page_size,
        )

    # ------------------------------------------------------------------
    # Folders
    # ------------------------------------------------------------------

    async def create_folder(
        self, owner_id: str, name: str, parent_id: str | None = None
    ) -> FolderResult:
        try:
            async with self._session() as session:
                folder = await self.folders.create_folder(session, owner_id, name, parent_id)
                info = self.folders.folder_to_info(folder)
        except CloudVaultError as e:
            return self._failure(FolderResult, e)
        return FolderResult(success=True, message="Folder created successfully", folder=info)

    async def list_folders(
        self,
        owner_id: str,
        parent_id: str | None = None,
        *,
        trash: bool = False,
    ) -> FolderListResult:
        try:
            async with self._session() as session:
                folders, breadcrumbs = await self.folders.list_folders(
                    session, owner_id, parent_id, include_trash=trash
                )
                infos = [self.folders.folder_to_info(f) for f in folders]
        except CloudVaultError as e:
            return self._failure(FolderListResult, e)
        return FolderListResult(
            success=True,
            message=f"Found {len(infos)} folders",
            folders=infos,
            breadcrumbs=breadcrumbs,
        )

    async def resolve_breadcrumbs(self, owner_id: str, folder_id: str) -> BreadcrumbResult:
        try:
            async with self._session() as session:
                breadcrumbs = await self.folders.resolve_breadcrumbs(session, folder_id, owner_id)
        except CloudVaultError as e:
            return self._failure(BreadcrumbResult, e)
        return BreadcrumbResult(
            success=True,
            message=f"Resolved {len(breadcrumbs)} breadcrumbs",
            breadcrumbs=breadcrumbs,
        )

    async def rename_folder(self, owner_id: str, folder_id: str, new_name: str) -> OperationResult:
        try:
            async with self._session() as session:
                await self.folders.rename_folder(session, folder_id, owner_id, new_name)
        except CloudVaultError as e:
            return self._failure(OperationResult, e)
        return OperationResult(success=True, message="Folder renamed successfully")

    async def delete_folder(self, owner_id: str, folder_id: str) -> OperationResult:
        """Move a folder to trash. Already-trashed folders succeed unchanged."""
        try:
            async with self._session() as session:
                changed = await self.folders.soft_delete_folder(session, folder_id, owner_id)
        except CloudVaultError as e:
            return self._failure(OperationResult, e)
        message = "Folder deleted successfully" if changed else "Folder already in trash"
        return OperationResult(success=True, message=message)

    async def restore_folder(self, owner_id: str, folder_id: str) -> OperationResult:
        try:
            async with self._session() as session:
                changed = await self.folders.restore_folder(session, folder_id, owner_id)
        except CloudVaultError as e:
            return self._failure(OperationResult, e)
        message = "Folder restored successfully" if changed else "Folder is not in trash"
        return OperationResult(success=True, message=message)

    # ------------------------------------------------------------------
    # Files
    # ------------------------------------------------------------------

    async def upload_file(
        self,
        owner_id: str,
        name: str,
        data: bytes,
        *,
        mime_type: str | None = None,
        folder_id: str | None = None,
    ) -> FileResult:
        try:
            async with self._session() as session:
                file = await self.files.upload_file(
                    session, owner_id, name, data, mime_type=mime_type, folder_id=folder_id
                )
                info = self.files.file_to_info(file)
        except CloudVaultError as e:
            return self._failure(FileResult, e)
        return FileResult(success=True, message="File uploaded successfully", file=info)

    async def list_files(
        self,
        owner_id: str,
        folder_id: str | None = None,
        *,
        trash: bool = False,
        page: int = 1,
        page_size: int | None = None,
    ) -> FileListResult:
        try:
            window = self._window(page, page_size)
            async with self._session() as session:
                files, total = await self.files.list_files(
                    session, owner_id, window, folder_id=folder_id, include_trash=trash
                )
                infos = [self.files.file_to_info(f) for f in files]
        except CloudVaultError as e:
            return self._failure(FileListResult, e)
        return FileListResult(
            success=True,
            message="Files fetched successfully",
            files=infos,
            total=total,
            page=window.page,
            page_size=window.page_size,
            has_more=window.has_more(len(infos), total),
        )

    async def rename_file(self, owner_id: str, file_id: str, new_name: str) -> OperationResult:
        try:
            async with self._session() as session:
                await self.files.rename_file(session, file_id, owner_id, new_name)
        except CloudVaultError as e:
            return self._failure(OperationResult, e)
        return OperationResult(success=True, message="File renamed successfully")

    async def delete_file(self, owner_id: str, file_id: str) -> OperationResult:
        """Move a file to trash. Already-trashed files succeed unchanged."""
        try:
            async with self._session() as session:
                changed = await self.files.soft_delete_file(session, file_id, owner_id)
        except CloudVaultError as e:
            return self._failure(OperationResult, e)
        message = "File deleted successfully" if changed else "File already in trash"
        return OperationResult(success=True, message=message)

    async def restore_file(self, owner_id: str, file_id: str) -> OperationResult:
        try:
            async with self._session() as session:
                changed = await self.files.restore_file(session, file_id, owner_id)
        except CloudVaultError as e:
            return self._failure(OperationResult, e)
        message = "File restored successfully" if changed else "File is not in trash"
        return OperationResult(success=True, message=message)

    async def permanently_delete_file(self, owner_id: str, file_id: str) -> OperationResult:
        try:
            async with self._session() as session:
                await self.files.permanently_delete_file(session, file_id, owner_id)
        except CloudVaultError as e:
            return self._failure(OperationResult, e)
        return OperationResult(success=True, message="File permanently deleted")

    async def get_download_url(self, owner_id: str, file_id: str) -> DownloadResult:
        try:
            async with self._session() as session:
                url = await self.files.generate_download_url(session, file_id, owner_id)
        except CloudVaultError as e:
            return self._failure(DownloadResult, e)
        return DownloadResult(
            success=True,
            message="Download URL generated",
            url=url,
            expires_in=self.files.download_ttl,
        )

    # ------------------------------------------------------------------
    # Share links
    # ------------------------------------------------------------------

    async def create_share_link(
        self,
        owner_id: str,
        file_id: str,
        permission: SharePermission | str | None = "view",
        *,
        expires_at: datetime | None = None,
        expires_in: int | None = None,
    ) -> ShareResult:
        try:
            async with self._session() as session:
                share = await self.shares.create_share_link(
                    session,
                    file_id,
                    owner_id,
                    permission,
                    expires_at=expires_at,
                    expires_in=expires_in,
                )
                info = self.shares.share_to_info(share)
        except CloudVaultError as e:
            return self._failure(ShareResult, e)
        return ShareResult(
            success=True,
            message="Share link created",
            share_url=info.share_url,
            share=info,
        )

    async def resolve_share_link(self, token: str) -> ShareAccessResult:
        """Public redemption path; takes no caller identity."""
        try:
            async with self._session() as session:
                access = await self.shares.resolve_share_link(session, token)
        except CloudVaultError as e:
            return self._failure(ShareAccessResult, e)
        return ShareAccessResult(success=True, message="Share link resolved", access=access)

    async def list_share_links(self, owner_id: str) -> ListSharesResult:
        try:
            async with self._session() as session:
                shares = await self.shares.list_my_share_links(session, owner_id)
        except CloudVaultError as e:
            return self._failure(ListSharesResult, e)
        return ListSharesResult(
            success=True,
            message=f"Found {len(shares)} share links",
            shares=shares,
        )

    # ------------------------------------------------------------------
    # Search
    # ------------------------------------------------------------------

    async def search(
        self,
        owner_id: str,
        query: str | None = "",
        *,
        page: int = 1,
        page_size: int | None = None,
    ) -> FileListResult:
        try:
            window = self._window(page, page_size)
            async with self._session() as session:
                files, total = await self.search_service.search_files(
                    session, owner_id, query, window
                )
                infos = [self.files.file_to_info(f) for f in files]
        except CloudVaultError as e:
            return self._failure(FileListResult, e)
        return FileListResult(
            success=True,
            message=f"Found {total} matching files",
            files=infos,
            total=total,
            page=window.page,
            page_size=window.page_size,
            has_more=window.has_more(len(infos), total),
        )
