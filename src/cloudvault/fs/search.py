"""SearchService — case-insensitive name search over a user's files."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from cloudvault.models.files import FileBase

    from .repository import MetadataRepository
    from .utils import PageWindow


class SearchService:
    """Substring match on file names, restricted to active files.

    An empty query matches every active file the owner has, in any folder.
    """

    def __init__(self, repository: MetadataRepository) -> None:
        self._repo = repository

    async def search_files(
        self,
        session: AsyncSession,
        owner_id: str,
        query: str | None,
        window: PageWindow,
    ) -> tuple[list[FileBase], int]:
        needle = (query or "").strip()
        return await self._repo.page_files(
            session,
            owner_id,
            window,
            name_contains=needle or None,
            any_folder=True,
        )
