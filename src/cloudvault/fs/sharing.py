"""ShareLinkService — issue and redeem public share links.

Stateless service that receives the repository at construction and a
session at call time. Redemption is the one unauthenticated path in the
package: it never takes or returns a caller identity.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING

from cloudvault.models.shares import SharePermission

from .exceptions import NotFoundError, ShareExpiredError, ValidationError
from .types import SharedFileAccess, SharedFileInfo, ShareLinkInfo
from .utils import as_aware, generate_share_token

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from cloudvault.models.files import FileBase
    from cloudvault.models.shares import ShareLinkBase

    from .files import FileService
    from .repository import MetadataRepository

logger = logging.getLogger(__name__)


def parse_permission(permission: SharePermission | str | None) -> SharePermission:
    """Coerce *permission* to a ``SharePermission`` or raise ``ValidationError``."""
    if permission is None:
        return SharePermission.VIEW
    if isinstance(permission, SharePermission):
        return permission
    try:
        return SharePermission(permission)
    except ValueError:
        allowed = ", ".join(repr(p.value) for p in SharePermission)
        raise ValidationError(
            f"Invalid permission: {permission!r}. Must be one of {allowed}."
        ) from None


class ShareLinkService:
    """Creates tokenized links to a single file and resolves them."""

    def __init__(
        self,
        repository: MetadataRepository,
        files: FileService,
        *,
        share_base_url: str = "http://localhost:3000",
    ) -> None:
        self._repo = repository
        self._files = files
        self.share_base_url = share_base_url.rstrip("/")

    def share_url(self, token: str) -> str:
        return f"{self.share_base_url}/share/{token}"

    def share_to_info(
        self, share: ShareLinkBase, file: FileBase | None = None
    ) -> ShareLinkInfo:
        return ShareLinkInfo(
            token=share.token,
            file_id=share.file_id,
            permission=SharePermission(share.permission),
            share_url=self.share_url(share.token),
            created_at=share.created_at,
            expires_at=share.expires_at,
            expired=share.is_expired(),
            file=self._files.file_to_info(file) if file is not None else None,
        )

    async def create_share_link(
        self,
        session: AsyncSession,
        file_id: str,
        owner_id: str,
        permission: SharePermission | str | None = SharePermission.VIEW,
        *,
        expires_at: datetime | None = None,
        expires_in: int | None = None,
    ) -> ShareLinkBase:
        """Mint a link for a file the caller owns. Flushes but does not commit.

        Trashed files cannot be shared. With neither *expires_at* nor
        *expires_in*, the link never expires.
        """
        perm = parse_permission(permission)
        if expires_at is not None and expires_in is not None:
            raise ValidationError("Provide expires_at or expires_in, not both")
        if expires_in is not None:
            if expires_in <= 0:
                raise ValidationError(f"expires_in must be positive, got {expires_in}")
            expires_at = datetime.now(UTC) + timedelta(seconds=expires_in)

        file = await self._files.get_owned(session, file_id, owner_id)
        if file.is_deleted:
            raise NotFoundError("File not found or access denied")

        share = self._repo.share_model(
            token=generate_share_token(),
            file_id=file.id,
            creator_id=owner_id,
            permission=perm,
            expires_at=as_aware(expires_at) if expires_at is not None else None,
        )
        await self._repo.insert(session, share)
        logger.info("Share link created for file %s by %s", file.id, owner_id)
        return share

    async def resolve_share_link(self, session: AsyncSession, token: str) -> SharedFileAccess:
        """Redeem *token* without any caller identity.

        Raises ``NotFoundError`` for unknown tokens and for files that are
        gone or in trash, and ``ShareExpiredError`` once ``expires_at`` passes.
        """
        if not token:
            raise NotFoundError("Share link not found")
        share = await self._repo.get_share(session, token)
        if share is None:
            raise NotFoundError("Share link not found")
        if share.is_expired():
            raise ShareExpiredError("Share link has expired")

        file = await self._repo.get_file(session, share.file_id)
        if file is None or file.is_deleted:
            raise NotFoundError("Shared file no longer exists")

        download_url = await self._files.signed_url_for(file)
        return SharedFileAccess(
            file=SharedFileInfo(
                id=file.id,
                name=file.name,
                mime_type=file.mime_type,
                size_bytes=file.size_bytes,
            ),
            permission=SharePermission(share.permission),
            download_url=download_url,
        )

    async def list_my_share_links(
        self, session: AsyncSession, owner_id: str
    ) -> list[ShareLinkInfo]:
        """Links *owner_id* created, newest first, each with its file."""
        rows = await self._repo.list_shares_with_files(session, owner_id)
        return [self.share_to_info(share, file) for share, file in rows]
