"""FolderService — folder CRUD, trash toggling, and breadcrumb resolution."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from .exceptions import IntegrityError, NotFoundError
from .guard import AccessGuard
from .lifecycle import LifecycleState, transition
from .types import Breadcrumb, FolderInfo, root_breadcrumb
from .utils import validate_name

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from cloudvault.models.folders import FolderBase

    from .repository import MetadataRepository

logger = logging.getLogger(__name__)

DEFAULT_MAX_BREADCRUMB_DEPTH = 10_000


class FolderService:
    """Folder operations scoped to a single owner.

    Trashing a folder does not touch its children; they stay active but
    are only reachable by id until the folder is restored.
    """

    def __init__(
        self,
        repository: MetadataRepository,
        guard: AccessGuard | None = None,
        *,
        max_depth: int = DEFAULT_MAX_BREADCRUMB_DEPTH,
    ) -> None:
        self._repo = repository
        self._guard = guard or AccessGuard()
        self.max_depth = max_depth

    @staticmethod
    def folder_to_info(f: FolderBase) -> FolderInfo:
        """Convert a folder record to FolderInfo."""
        return FolderInfo(
            id=f.id,
            name=f.name,
            parent_id=f.parent_id,
            is_deleted=f.is_deleted,
            created_at=f.created_at,
        )

    async def get_owned(
        self,
        session: AsyncSession,
        folder_id: str,
        owner_id: str,
        *,
        active_only: bool = False,
    ) -> FolderBase:
        """Fetch a folder owned by *owner_id* or raise ``NotFoundError``."""
        folder = await self._repo.get_folder(session, folder_id)
        folder = self._guard.require_owned(folder, owner_id, kind="Folder")
        if active_only and folder.is_deleted:
            raise NotFoundError("Folder not found or access denied")
        return folder

    # ------------------------------------------------------------------
    # Create / list
    # ------------------------------------------------------------------

    async def create_folder(
        self,
        session: AsyncSession,
        owner_id: str,
        name: str,
        parent_id: str | None = None,
    ) -> FolderBase:
        """Create a folder. A given *parent_id* must be an owned, active folder."""
        name = validate_name(name, field="Folder name")
        if parent_id is not None:
            await self.get_owned(session, parent_id, owner_id, active_only=True)

        folder = self._repo.folder_model(owner_id=owner_id, name=name, parent_id=parent_id)
        await self._repo.insert(session, folder)
        logger.debug("Created folder %s for %s", folder.id, owner_id)
        return folder

    async def list_folders(
        self,
        session: AsyncSession,
        owner_id: str,
        parent_id: str | None = None,
        *,
        include_trash: bool = False,
    ) -> tuple[list[FolderBase], list[Breadcrumb]]:
        """List one level of the tree, or the whole trash.

        Trash is not part of the tree, so its breadcrumbs are only the
        root marker.
        """
        if include_trash:
            folders = await self._repo.list_folders(session, owner_id, trashed=True)
            return folders, [root_breadcrumb()]

        if parent_id is None:
            breadcrumbs = [root_breadcrumb()]
        else:
            breadcrumbs = await self.resolve_breadcrumbs(session, parent_id, owner_id)
        folders = await self._repo.list_folders(session, owner_id, parent_id=parent_id)
        return folders, breadcrumbs

    # ------------------------------------------------------------------
    # Breadcrumbs
    # ------------------------------------------------------------------

    async def resolve_breadcrumbs(
        self,
        session: AsyncSession,
        folder_id: str,
        owner_id: str,
    ) -> list[Breadcrumb]:
        """Return the path ``[root, ..., folder]`` by walking parent links.

        The walk stops with ``IntegrityError`` when an id repeats, when it
        exceeds ``max_depth`` steps, or when an ancestor is missing or
        belongs to another owner.
        """
        folder = await self.get_owned(session, folder_id, owner_id)

        path: list[Breadcrumb] = []
        seen: set[str] = set()
        current: FolderBase | None = folder
        while current is not None:
            if current.id in seen:
                logger.warning("Folder cycle detected at %s (start %s)", current.id, folder_id)
                raise IntegrityError(f"Folder tree contains a cycle at {current.id}")
            if len(seen) >= self.max_depth:
                logger.warning("Breadcrumb walk exceeded %d steps from %s", self.max_depth, folder_id)
                raise IntegrityError(f"Folder tree deeper than {self.max_depth} levels")
            seen.add(current.id)
            path.insert(0, Breadcrumb(id=current.id, name=current.name))

            parent_id = current.parent_id
            if parent_id is None:
                break
            parent = await self._repo.get_folder(session, parent_id)
            if parent is None:
                raise IntegrityError(f"Folder {current.id} references missing parent {parent_id}")
            if parent.owner_id != folder.owner_id:
                raise IntegrityError(f"Folder {current.id} has an ancestor owned by another user")
            current = parent

        path.insert(0, root_breadcrumb())
        return path

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    async def rename_folder(
        self,
        session: AsyncSession,
        folder_id: str,
        owner_id: str,
        new_name: str,
    ) -> FolderBase:
        folder = await self.get_owned(session, folder_id, owner_id)
        folder.name = validate_name(new_name, field="New name")
        await self._repo.save(session, folder)
        return folder

    async def soft_delete_folder(
        self, session: AsyncSession, folder_id: str, owner_id: str
    ) -> bool:
        """Move a folder to trash. Returns False if it was already there."""
        return await self._set_state(session, folder_id, owner_id, LifecycleState.TRASHED)

    async def restore_folder(
        self, session: AsyncSession, folder_id: str, owner_id: str
    ) -> bool:
        """Bring a folder back from trash. Returns False if it was active."""
        return await self._set_state(session, folder_id, owner_id, LifecycleState.ACTIVE)

    async def _set_state(
        self,
        session: AsyncSession,
        folder_id: str,
        owner_id: str,
        target: LifecycleState,
    ) -> bool:
        folder = await self.get_owned(session, folder_id, owner_id)
        changed = transition(folder, target)
        if changed:
            await self._repo.save(session, folder)
            logger.debug("Folder %s -> %s", folder_id, target.value)
        return changed
