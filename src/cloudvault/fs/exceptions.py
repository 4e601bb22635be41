"""Custom exception hierarchy for the CloudVault metadata layer."""

from __future__ import annotations

from .types import ErrorKind, StoreSystem


class CloudVaultError(Exception):
    """Base exception for all CloudVault errors."""

    kind: ErrorKind = ErrorKind.METADATA
    system: StoreSystem | None = None


class ValidationError(CloudVaultError):
    """Raised when a required field is missing, empty, or malformed."""

    kind = ErrorKind.VALIDATION


class NotFoundError(CloudVaultError):
    """Raised when a resource does not exist or is not owned by the caller.

    Both cases share this class so callers cannot tell them apart.
    """

    kind = ErrorKind.NOT_FOUND


AccessDeniedError = NotFoundError


class ShareExpiredError(CloudVaultError):
    """Raised when a share link is past its ``expires_at``."""

    kind = ErrorKind.EXPIRED


class StorageFailure(CloudVaultError):
    """Raised when the blob store rejects a put or remove."""

    kind = ErrorKind.STORAGE
    system = StoreSystem.STORAGE


class MetadataFailure(CloudVaultError):
    """Raised when the metadata repository fails to persist a change."""

    kind = ErrorKind.METADATA
    system = StoreSystem.METADATA


class IntegrityError(CloudVaultError):
    """Raised when the folder tree is corrupt (cycle, depth overflow, foreign ancestor)."""

    kind = ErrorKind.INTEGRITY
    system = StoreSystem.METADATA
