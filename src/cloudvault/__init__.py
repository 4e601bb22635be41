"""CloudVault: metadata and sharing core for personal cloud storage.

Folder trees, soft-delete trash, ownership checks, and public share links
over a relational metadata store and a pluggable blob store.
"""

__version__ = "0.1.0"

from cloudvault._vault import CloudVault
from cloudvault.config import VaultSettings
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
from cloudvault.fs.types import (
    Breadcrumb,
    ErrorKind,
    FileInfo,
    FolderInfo,
    SharedFileAccess,
    SharedFileInfo,
    ShareLinkInfo,
    StoreSystem,
)
from cloudvault.models import File, Folder, ShareLink, SharePermission
from cloudvault.storage import BlobStore, LocalBlobStore, MemoryBlobStore

__all__ = [
    "AccessDeniedError",
    "BlobStore",
    "Breadcrumb",
    "CloudVault",
    "CloudVaultError",
    "ErrorKind",
    "File",
    "FileInfo",
    "Folder",
    "FolderInfo",
    "IntegrityError",
    "LocalBlobStore",
    "MemoryBlobStore",
    "MetadataFailure",
    "NotFoundError",
    "ShareExpiredError",
    "ShareLink",
    "ShareLinkInfo",
    "SharePermission",
    "SharedFileAccess",
    "SharedFileInfo",
    "StorageFailure",
    "StoreSystem",
    "ValidationError",
    "VaultSettings",
    "__version__",
]
