"""Result types: FileResult, FolderListResult, ShareResult, etc."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from datetime import datetime

    from cloudvault.models.shares import SharePermission


class ErrorKind(str, Enum):
    """Failure category carried by every unsuccessful result."""

    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    EXPIRED = "expired"
    STORAGE = "storage_failure"
    METADATA = "metadata_failure"
    INTEGRITY = "integrity"

    @property
    def status_code(self) -> int:
        """HTTP-equivalent status for this failure."""
        return _STATUS_CODES[self]


_STATUS_CODES = {
    ErrorKind.VALIDATION: 400,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.EXPIRED: 410,
    ErrorKind.STORAGE: 502,
    ErrorKind.METADATA: 500,
    ErrorKind.INTEGRITY: 500,
}


class StoreSystem(str, Enum):
    """Which backing system an error originated in."""

    STORAGE = "storage"
    METADATA = "metadata"


# ---------------------------------------------------------------------------
# Info records
# ---------------------------------------------------------------------------


@dataclass
class FileInfo:
    """File metadata."""

    id: str
    name: str
    mime_type: str
    size_bytes: int
    folder_id: str | None = None
    is_deleted: bool = False
    created_at: datetime | None = None


@dataclass
class FolderInfo:
    """Folder metadata."""

    id: str
    name: str
    parent_id: str | None = None
    is_deleted: bool = False
    created_at: datetime | None = None


@dataclass
class Breadcrumb:
    """One step of a root-to-folder path. ``id`` is ``None`` for the root marker."""

    id: str | None
    name: str


ROOT_BREADCRUMB_NAME = "root"


def root_breadcrumb() -> Breadcrumb:
    return Breadcrumb(id=None, name=ROOT_BREADCRUMB_NAME)


@dataclass
class ShareLinkInfo:
    """Share link metadata, optionally joined with its file."""

    token: str
    file_id: str
    permission: SharePermission
    share_url: str
    created_at: datetime | None = None
    expires_at: datetime | None = None
    expired: bool = False
    file: FileInfo | None = None


@dataclass
class SharedFileInfo:
    """The part of a file's metadata a share-link holder may see."""

    id: str
    name: str
    mime_type: str
    size_bytes: int


@dataclass
class SharedFileAccess:
    """What an anonymous caller receives when redeeming a share token."""

    file: SharedFileInfo
    permission: SharePermission
    download_url: str


# ---------------------------------------------------------------------------
# Operation results
# ---------------------------------------------------------------------------


@dataclass
class OperationResult:
    """Result of an operation with no payload (rename, delete, restore)."""

    success: bool
    message: str
    error: ErrorKind | None = None
    system: StoreSystem | None = None

    @property
    def status_code(self) -> int:
        if self.success:
            return 200
        return self.error.status_code if self.error is not None else 500


@dataclass
class FolderResult(OperationResult):
    """Result of a create_folder operation."""

    folder: FolderInfo | None = None


@dataclass
class FolderListResult(OperationResult):
    """Result of a list_folders operation."""

    folders: list[FolderInfo] = field(default_factory=list)
    breadcrumbs: list[Breadcrumb] = field(default_factory=list)


@dataclass
class BreadcrumbResult(OperationResult):
    """Result of a resolve_breadcrumbs operation."""

    breadcrumbs: list[Breadcrumb] = field(default_factory=list)


@dataclass
class FileResult(OperationResult):
    """Result of an upload operation."""

    file: FileInfo | None = None


@dataclass
class FileListResult(OperationResult):
    """Result of a list_files or search operation."""

    files: list[FileInfo] = field(default_factory=list)
    total: int = 0
    page: int = 1
    page_size: int = 0
    has_more: bool = False


@dataclass
class DownloadResult(OperationResult):
    """Result of a download URL request."""

    url: str | None = None
    expires_in: int = 0


@dataclass
class ShareResult(OperationResult):
    """Result of a create_share_link operation."""

    share_url: str | None = None
    share: ShareLinkInfo | None = None


@dataclass
class ShareAccessResult(OperationResult):
    """Result of a public share link redemption."""

    access: SharedFileAccess | None = None


@dataclass
class ListSharesResult(OperationResult):
    """Result of a list_share_links operation."""

    shares: list[ShareLinkInfo] = field(default_factory=list)
