"""ShareLink model — tokenized public links to a single file.

Provides ``ShareLinkBase`` (non-table) and ``ShareLink`` (concrete table).
Subclass ``ShareLinkBase`` with ``table=True`` and a custom ``__tablename__``
to use a different table name per backend.
"""

from __future__ import annotations

from datetime import UTC, datetime
from enum import Enum

from sqlalchemy import DateTime
from sqlmodel import Field, SQLModel


class SharePermission(str, Enum):
    """Scope granted by a share link. Extend by adding variants."""

    VIEW = "view"


class ShareLinkBase(SQLModel):
    """Base fields for a share link. Subclass with ``table=True`` for a concrete table.

    Rows are never mutated after insert. A link whose ``expires_at`` has
    passed is treated as revoked, not deleted.
    """

    token: str = Field(primary_key=True)
    file_id: str = Field(index=True)
    creator_id: str = Field(index=True)
    permission: SharePermission = Field(default=SharePermission.VIEW)
    expires_at: datetime | None = Field(
        default=None,
        sa_type=DateTime(timezone=True),  # type: ignore[invalid-argument-type]
    )
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(UTC),
        sa_type=DateTime(timezone=True),  # type: ignore[invalid-argument-type]
    )

    def is_expired(self, now: datetime | None = None) -> bool:
        """True when ``expires_at`` is set and not in the future."""
        if self.expires_at is None:
            return False
        now = now or datetime.now(UTC)
        exp = self.expires_at
        # SQLite hands back naive datetimes
        if exp.tzinfo is None:
            exp = exp.replace(tzinfo=UTC)
        return exp <= now


class ShareLink(ShareLinkBase, table=True):
    """Default share link table — ``file_shares``."""

    __tablename__ = "file_shares"
