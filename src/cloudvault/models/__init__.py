"""SQLModel database models for CloudVault."""

from cloudvault.models.files import File, FileBase
from cloudvault.models.folders import Folder, FolderBase
from cloudvault.models.shares import ShareLink, ShareLinkBase, SharePermission

__all__ = [
    "File",
    "FileBase",
    "Folder",
    "FolderBase",
    "ShareLink",
    "ShareLinkBase",
    "SharePermission",
]
