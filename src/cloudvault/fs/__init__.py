"""Metadata layer — repository, ownership guard, and the folder/file/share/search services."""

from cloudvault.fs.exceptions import (
    AccessDeniedError,
    CloudVaultError,
    IntegrityError,
    MetadataFailure,
    NotFoundError,
    ShareExpiredError,
    StorageFailure,
    ValidationError,
)
from cloudvault.fs.files import FileService
from cloudvault.fs.folders import FolderService
from cloudvault.fs.guard import Access, AccessGuard
from cloudvault.fs.lifecycle import LifecycleState
from cloudvault.fs.repository import MetadataRepository
from cloudvault.fs.search import SearchService
from cloudvault.fs.sharing import ShareLinkService
from cloudvault.fs.types import (
    Breadcrumb,
    BreadcrumbResult,
    DownloadResult,
    ErrorKind,
    FileInfo,
    FileListResult,
    FileResult,
    FolderInfo,
    FolderListResult,
    FolderResult,
    ListSharesResult,
    OperationResult,
    ShareAccessResult,
    SharedFileAccess,
    SharedFileInfo,
    ShareLinkInfo,
    ShareResult,
    StoreSystem,
)

__all__ = [
    "Access",
    "AccessDeniedError",
    "AccessGuard",
    "Breadcrumb",
    "BreadcrumbResult",
    "CloudVaultError",
    "DownloadResult",
    "ErrorKind",
    "FileInfo",
    "FileListResult",
    "FileResult",
    "FileService",
    "FolderInfo",
    "FolderListResult",
    "FolderResult",
    "FolderService",
    "IntegrityError",
    "LifecycleState",
    "ListSharesResult",
    "MetadataFailure",
    "MetadataRepository",
    "NotFoundError",
    "OperationResult",
    "SearchService",
    "ShareAccessResult",
    "ShareExpiredError",
    "ShareLinkInfo",
    "ShareLinkService",
    "ShareResult",
    "SharedFileAccess",
    "SharedFileInfo",
    "StorageFailure",
    "StoreSystem",
    "ValidationError",
]
