"""Tests for ShareLinkService — create, resolve, list."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING

import pytest

from cloudvault.fs.exceptions import NotFoundError, ShareExpiredError, ValidationError
from cloudvault.fs.sharing import parse_permission
from cloudvault.fs.types import SharedFileInfo
from cloudvault.models import SharePermission

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from cloudvault.fs.files import FileService
    from cloudvault.fs.folders import FolderService
    from cloudvault.fs.repository import MetadataRepository
    from cloudvault.fs.sharing import ShareLinkService


@pytest.fixture
async def pdf(files: FileService, async_session: AsyncSession):
    return await files.upload_file(
        async_session, "alice", "a.pdf", b"%PDF", mime_type="application/pdf"
    )


# ---------------------------------------------------------------------------
# parse_permission
# ---------------------------------------------------------------------------


class TestParsePermission:
    def test_view(self):
        assert parse_permission("view") is SharePermission.VIEW
        assert parse_permission(SharePermission.VIEW) is SharePermission.VIEW

    def test_none_defaults_to_view(self):
        assert parse_permission(None) is SharePermission.VIEW

    @pytest.mark.parametrize("value", ["edit", "VIEW", ""])
    def test_unknown_rejected(self, value):
        with pytest.raises(ValidationError, match="Invalid permission"):
            parse_permission(value)


# ---------------------------------------------------------------------------
# create_share_link
# ---------------------------------------------------------------------------


class TestCreateShareLink:
    async def test_create(self, shares: ShareLinkService, pdf, async_session: AsyncSession):
        share = await shares.create_share_link(async_session, pdf.id, "alice", "view")
        assert share.file_id == pdf.id
        assert share.creator_id == "alice"
        assert share.permission == SharePermission.VIEW
        assert share.expires_at is None
        assert shares.share_url(share.token) == f"https://share.example.com/share/{share.token}"

    async def test_tokens_unique(self, shares: ShareLinkService, pdf, async_session: AsyncSession):
        a = await shares.create_share_link(async_session, pdf.id, "alice")
        b = await shares.create_share_link(async_session, pdf.id, "alice")
        assert a.token != b.token

    async def test_invalid_permission(
        self, shares: ShareLinkService, pdf, async_session: AsyncSession
    ):
        with pytest.raises(ValidationError):
            await shares.create_share_link(async_session, pdf.id, "alice", "edit")

    async def test_not_owner(self, shares: ShareLinkService, pdf, async_session: AsyncSession):
        with pytest.raises(NotFoundError):
            await shares.create_share_link(async_session, pdf.id, "bob")

    async def test_unknown_file(self, shares: ShareLinkService, async_session: AsyncSession):
        with pytest.raises(NotFoundError):
            await shares.create_share_link(async_session, "missing", "alice")

    async def test_trashed_file(
        self,
        shares: ShareLinkService,
        files: FileService,
        pdf,
        async_session: AsyncSession,
    ):
        await files.soft_delete_file(async_session, pdf.id, "alice")
        with pytest.raises(NotFoundError):
            await shares.create_share_link(async_session, pdf.id, "alice")

    async def test_expires_in(self, shares: ShareLinkService, pdf, async_session: AsyncSession):
        before = datetime.now(UTC)
        share = await shares.create_share_link(async_session, pdf.id, "alice", expires_in=60)
        expires = share.expires_at
        if expires.tzinfo is None:
            expires = expires.replace(tzinfo=UTC)
        assert before + timedelta(seconds=59) <= expires <= before + timedelta(seconds=61)

    @pytest.mark.parametrize("seconds", [0, -10])
    async def test_non_positive_expires_in(
        self, shares: ShareLinkService, pdf, async_session: AsyncSession, seconds
    ):
        with pytest.raises(ValidationError, match="positive"):
            await shares.create_share_link(async_session, pdf.id, "alice", expires_in=seconds)

    async def test_both_expiry_forms(
        self, shares: ShareLinkService, pdf, async_session: AsyncSession
    ):
        with pytest.raises(ValidationError):
            await shares.create_share_link(
                async_session,
                pdf.id,
                "alice",
                expires_at=datetime.now(UTC),
                expires_in=60,
            )


# ---------------------------------------------------------------------------
# resolve_share_link
# ---------------------------------------------------------------------------


class TestResolveShareLink:
    async def test_resolve(self, shares: ShareLinkService, pdf, async_session: AsyncSession):
        share = await shares.create_share_link(async_session, pdf.id, "alice")
        access = await shares.resolve_share_link(async_session, share.token)
        assert access.file.id == pdf.id
        assert access.file.name == "a.pdf"
        assert access.permission is SharePermission.VIEW
        assert access.download_url.startswith("memory://blobs/")

    async def test_exposes_only_public_metadata(
        self,
        shares: ShareLinkService,
        files: FileService,
        folders: FolderService,
        async_session: AsyncSession,
    ):
        docs = await folders.create_folder(async_session, "alice", "Private")
        file = await files.upload_file(
            async_session,
            "alice",
            "a.pdf",
            b"%PDF",
            mime_type="application/pdf",
            folder_id=docs.id,
        )
        share = await shares.create_share_link(async_session, file.id, "alice")

        access = await shares.resolve_share_link(async_session, share.token)
        assert access.file == SharedFileInfo(
            id=file.id, name="a.pdf", mime_type="application/pdf", size_bytes=4
        )
        for private in ("folder_id", "is_deleted", "created_at"):
            assert not hasattr(access.file, private)

    @pytest.mark.parametrize("token", ["", "nope"])
    async def test_unknown_token(
        self, shares: ShareLinkService, async_session: AsyncSession, token
    ):
        with pytest.raises(NotFoundError, match="Share link not found"):
            await shares.resolve_share_link(async_session, token)

    async def test_future_expiry_resolves(
        self, shares: ShareLinkService, pdf, async_session: AsyncSession
    ):
        share = await shares.create_share_link(
            async_session, pdf.id, "alice", expires_at=datetime.now(UTC) + timedelta(days=1)
        )
        access = await shares.resolve_share_link(async_session, share.token)
        assert access.file.id == pdf.id

    async def test_past_expiry_is_expired(
        self, shares: ShareLinkService, pdf, async_session: AsyncSession
    ):
        share = await shares.create_share_link(
            async_session, pdf.id, "alice", expires_at=datetime.now(UTC) - timedelta(seconds=1)
        )
        with pytest.raises(ShareExpiredError):
            await shares.resolve_share_link(async_session, share.token)

    async def test_trashed_file(
        self,
        shares: ShareLinkService,
        files: FileService,
        pdf,
        async_session: AsyncSession,
    ):
        share = await shares.create_share_link(async_session, pdf.id, "alice")
        await files.soft_delete_file(async_session, pdf.id, "alice")
        with pytest.raises(NotFoundError, match="no longer exists"):
            await shares.resolve_share_link(async_session, share.token)

    async def test_restored_file_resolves_again(
        self,
        shares: ShareLinkService,
        files: FileService,
        pdf,
        async_session: AsyncSession,
    ):
        share = await shares.create_share_link(async_session, pdf.id, "alice")
        await files.soft_delete_file(async_session, pdf.id, "alice")
        await files.restore_file(async_session, pdf.id, "alice")
        access = await shares.resolve_share_link(async_session, share.token)
        assert access.file.id == pdf.id

    async def test_purged_file(
        self,
        shares: ShareLinkService,
        files: FileService,
        pdf,
        async_session: AsyncSession,
    ):
        share = await shares.create_share_link(async_session, pdf.id, "alice")
        token = share.token
        await files.permanently_delete_file(async_session, pdf.id, "alice")
        with pytest.raises(NotFoundError):
            await shares.resolve_share_link(async_session, token)


# ---------------------------------------------------------------------------
# list_my_share_links
# ---------------------------------------------------------------------------


class TestListShareLinks:
    async def test_lists_own_links_with_files(
        self,
        shares: ShareLinkService,
        files: FileService,
        pdf,
        async_session: AsyncSession,
    ):
        mine = await shares.create_share_link(async_session, pdf.id, "alice")
        bobs_file = await files.upload_file(async_session, "bob", "b.txt", b"")
        await shares.create_share_link(async_session, bobs_file.id, "bob")

        listed = await shares.list_my_share_links(async_session, "alice")
        assert [s.token for s in listed] == [mine.token]
        assert listed[0].file is not None
        assert listed[0].file.name == "a.pdf"
        assert listed[0].share_url.endswith(mine.token)
        assert listed[0].expired is False

    async def test_expired_links_flagged(
        self,
        shares: ShareLinkService,
        repository: MetadataRepository,
        pdf,
        async_session: AsyncSession,
    ):
        share = await shares.create_share_link(async_session, pdf.id, "alice")
        share.expires_at = datetime.now(UTC) - timedelta(minutes=1)
        await repository.save(async_session, share)

        listed = await shares.list_my_share_links(async_session, "alice")
        assert listed[0].expired is True

    async def test_empty(self, shares: ShareLinkService, async_session: AsyncSession):
        assert await shares.list_my_share_links(async_session, "alice") == []
