"""AccessGuard — ownership checks for files and folders."""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, TypeVar

from .exceptions import NotFoundError

if TYPE_CHECKING:
    from cloudvault.models.files import FileBase
    from cloudvault.models.folders import FolderBase

    Owned = TypeVar("Owned", FileBase, FolderBase)
else:
    Owned = TypeVar("Owned")


class Access(str, Enum):
    """Outcome of an ownership check."""

    ALLOWED = "allowed"
    DENIED = "denied"


class AccessGuard:
    """Compares a caller against a resource owner. Has no side effects.

    A missing resource and a resource owned by someone else produce the
    same ``NotFoundError`` so existence is never revealed.
    """

    @staticmethod
    def authorize(caller_id: str | None, owner_id: str | None) -> Access:
        if not caller_id or owner_id is None or caller_id != owner_id:
            return Access.DENIED
        return Access.ALLOWED

    def require_owned(
        self,
        resource: Owned | None,
        caller_id: str,
        *,
        kind: str,
    ) -> Owned:
        """Return *resource* if *caller_id* owns it, else raise ``NotFoundError``."""
        if resource is None or self.authorize(caller_id, resource.owner_id) is Access.DENIED:
            raise NotFoundError(f"{kind} not found or access denied")
        return resource
