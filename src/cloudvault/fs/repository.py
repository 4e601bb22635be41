"""MetadataRepository — persistence for files, folders, and share links.

Stateless repository that receives the concrete models at construction
and a session at call time, following the ``SharingService`` pattern.
Writes flush but do not commit; the caller owns the transaction.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import select

from .exceptions import MetadataFailure
from .utils import escape_like

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from cloudvault.models.files import FileBase
    from cloudvault.models.folders import FolderBase
    from cloudvault.models.shares import ShareLinkBase

    from .utils import PageWindow


class MetadataRepository:
    """The only component that mutates persisted metadata rows.

    Constructor receives the concrete models so callers can use custom
    SQLModel subclasses with different table names.
    """

    def __init__(
        self,
        file_model: type[FileBase] | None = None,
        folder_model: type[FolderBase] | None = None,
        share_model: type[ShareLinkBase] | None = None,
    ) -> None:
        from cloudvault.models.files import File
        from cloudvault.models.folders import Folder
        from cloudvault.models.shares import ShareLink

        self.file_model: type[FileBase] = file_model or File  # type: ignore[assignment]
        self.folder_model: type[FolderBase] = folder_model or Folder  # type: ignore[assignment]
        self.share_model: type[ShareLinkBase] = share_model or ShareLink  # type: ignore[assignment]

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def insert(self, session: AsyncSession, row: Any) -> Any:
        """Add *row* and flush. Raises ``MetadataFailure`` on database errors."""
        session.add(row)
        try:
            await session.flush()
        except SQLAlchemyError as e:
            raise MetadataFailure(f"Failed to save {type(row).__name__}: {e}") from e
        return row

    async def save(self, session: AsyncSession, row: Any) -> Any:
        """Flush pending changes made to *row*."""
        session.add(row)
        try:
            await session.flush()
        except SQLAlchemyError as e:
            raise MetadataFailure(f"Failed to update {type(row).__name__}: {e}") from e
        return row

    async def delete(self, session: AsyncSession, row: Any) -> None:
        """Delete *row* and flush."""
        try:
            await session.delete(row)
            await session.flush()
        except SQLAlchemyError as e:
            raise MetadataFailure(f"Failed to delete {type(row).__name__}: {e}") from e

    async def commit(self, session: AsyncSession) -> None:
        try:
            await session.commit()
        except SQLAlchemyError as e:
            raise MetadataFailure(f"Failed to commit: {e}") from e

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    async def get_file(self, session: AsyncSession, file_id: str) -> FileBase | None:
        model = self.file_model
        result = await session.execute(select(model).where(model.id == file_id))
        return result.scalar_one_or_none()

    async def get_folder(self, session: AsyncSession, folder_id: str) -> FolderBase | None:
        model = self.folder_model
        result = await session.execute(select(model).where(model.id == folder_id))
        return result.scalar_one_or_none()

    async def get_share(self, session: AsyncSession, token: str) -> ShareLinkBase | None:
        model = self.share_model
        result = await session.execute(select(model).where(model.token == token))
        return result.scalar_one_or_none()

    # ------------------------------------------------------------------
    # Listings
    # ------------------------------------------------------------------

    async def list_folders(
        self,
        session: AsyncSession,
        owner_id: str,
        *,
        parent_id: str | None = None,
        trashed: bool = False,
    ) -> list[FolderBase]:
        """Folders in creation order.

        Trash view ignores *parent_id* and returns every trashed folder.
        """
        model = self.folder_model
        conditions = [model.owner_id == owner_id, model.is_deleted == trashed]
        if not trashed:
            if parent_id is None:
                conditions.append(model.parent_id.is_(None))  # type: ignore[union-attr]
            else:
                conditions.append(model.parent_id == parent_id)
        result = await session.execute(
            select(model)
            .where(*conditions)
            .order_by(model.created_at.asc(), model.id.asc())  # type: ignore[attr-defined]
        )
        return list(result.scalars().all())

    async def page_files(
        self,
        session: AsyncSession,
        owner_id: str,
        window: PageWindow,
        *,
        folder_id: str | None = None,
        trashed: bool = False,
        name_contains: str | None = None,
        any_folder: bool = False,
    ) -> tuple[list[FileBase], int]:
        """One page of files, newest first, plus the total match count.

        Outside the trash view, files are filtered by folder unless
        *any_folder* is set; ``folder_id=None`` means the root.
        """
        model = self.file_model
        conditions: list[Any] = [model.owner_id == owner_id, model.is_deleted == trashed]
        if not trashed and not any_folder:
            if folder_id is None:
                conditions.append(model.folder_id.is_(None))  # type: ignore[union-attr]
            else:
                conditions.append(model.folder_id == folder_id)
        if name_contains:
            pattern = f"%{escape_like(name_contains)}%"
            conditions.append(model.name.ilike(pattern, escape="\\"))  # type: ignore[attr-defined]

        count_result = await session.execute(
            select(func.count()).select_from(model).where(*conditions)
        )
        total = int(count_result.scalar_one())

        result = await session.execute(
            select(model)
            .where(*conditions)
            .order_by(model.created_at.desc(), model.id.desc())  # type: ignore[attr-defined]
            .offset(window.offset)
            .limit(window.page_size)
        )
        return list(result.scalars().all()), total

    async def list_shares_with_files(
        self,
        session: AsyncSession,
        creator_id: str,
    ) -> list[tuple[ShareLinkBase, FileBase]]:
        """Share links created by *creator_id* joined with their files, newest first.

        Links whose file no longer exists are left out.
        """
        share = self.share_model
        file = self.file_model
        result = await session.execute(
            select(share, file)
            .join(file, file.id == share.file_id)  # type: ignore[arg-type]
            .where(share.creator_id == creator_id)
            .order_by(share.created_at.desc(), share.token.desc())  # type: ignore[attr-defined]
        )
        return [(row[0], row[1]) for row in result.all()]
