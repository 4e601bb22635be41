"""Shared fixtures for CloudVault tests."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

import cloudvault.models  # noqa: F401  (registers tables on SQLModel.metadata)
from cloudvault._vault import CloudVault
from cloudvault.config import VaultSettings
from cloudvault.fs.files import FileService
from cloudvault.fs.folders import FolderService
from cloudvault.fs.repository import MetadataRepository
from cloudvault.fs.search import SearchService
from cloudvault.fs.sharing import ShareLinkService
from cloudvault.fs.utils import PageWindow
from cloudvault.storage.memory import MemoryBlobStore

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Iterator

    from sqlalchemy import Engine
    from sqlalchemy.ext.asyncio import AsyncEngine


@pytest.fixture
def engine() -> Engine:
    """In-memory SQLite engine with all tables created."""
    eng = create_engine("sqlite://", echo=False)
    SQLModel.metadata.create_all(eng)
    return eng


@pytest.fixture
def session(engine: Engine) -> Iterator[Session]:
    """SQLModel session bound to the in-memory engine, rolled back after each test."""
    with Session(engine) as s:
        s.begin()
        yield s
        s.rollback()


@pytest.fixture
async def async_engine() -> AsyncIterator[AsyncEngine]:
    """Async in-memory SQLite engine with all tables created."""
    eng = create_async_engine("sqlite+aiosqlite://", echo=False, poolclass=StaticPool)
    async with eng.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield eng
    await eng.dispose()


@pytest.fixture
async def async_session(async_engine: AsyncEngine) -> AsyncIterator[AsyncSession]:
    """Async SQLModel session against the in-memory database."""
    factory = async_sessionmaker(
        async_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )
    async with factory() as session:
        yield session


# ---------------------------------------------------------------------------
# Services
# ---------------------------------------------------------------------------


@pytest.fixture
def blobs() -> MemoryBlobStore:
    return MemoryBlobStore()


@pytest.fixture
def repository() -> MetadataRepository:
    return MetadataRepository()


@pytest.fixture
def folders(repository: MetadataRepository) -> FolderService:
    return FolderService(repository)


@pytest.fixture
def files(
    repository: MetadataRepository, blobs: MemoryBlobStore, folders: FolderService
) -> FileService:
    return FileService(repository, blobs, folders)


@pytest.fixture
def shares(repository: MetadataRepository, files: FileService) -> ShareLinkService:
    return ShareLinkService(repository, files, share_base_url="https://share.example.com")


@pytest.fixture
def search(repository: MetadataRepository) -> SearchService:
    return SearchService(repository)


@pytest.fixture
def first_page() -> PageWindow:
    return PageWindow(page=1, page_size=10)


# ---------------------------------------------------------------------------
# Facade
# ---------------------------------------------------------------------------


@pytest.fixture
def settings(tmp_path) -> VaultSettings:
    return VaultSettings(
        database_url="sqlite+aiosqlite://",
        share_base_url="https://share.example.com",
        blob_root=tmp_path / "blobs",
        signing_secret="test-secret",
    )


@pytest.fixture
async def vault(
    async_engine: AsyncEngine, blobs: MemoryBlobStore, settings: VaultSettings
) -> CloudVault:
    """CloudVault over the shared in-memory engine and an in-memory blob store."""
    return CloudVault(blob_store=blobs, engine=async_engine, settings=settings)
