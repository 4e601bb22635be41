"""File model — metadata for one blob owned by one account.

Provides ``FileBase`` (non-table) and ``File`` (concrete table).
Subclass ``FileBase`` with ``table=True`` and a custom ``__tablename__``
to use a different table name per backend.
"""

from __future__ import annotations

import uuid
from datetime import UTC, datetime

from sqlalchemy import DateTime
from sqlmodel import Field, SQLModel


class FileBase(SQLModel):
    """Base fields for a stored file. Subclass with ``table=True`` for a concrete table.

    ``storage_key`` is the blob store key. It is assigned once at upload
    and never reused; ``owner_id`` never changes.
    """

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    owner_id: str = Field(index=True)
    folder_id: str | None = Field(default=None, index=True)
    name: str
    mime_type: str = Field(default="application/octet-stream")
    size_bytes: int = Field(default=0)
    storage_key: str = Field(unique=True)
    is_deleted: bool = Field(default=False)
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(UTC),
        sa_type=DateTime(timezone=True),  # type: ignore[invalid-argument-type]
    )


class File(FileBase, table=True):
    """Default file table — ``files``."""

    __tablename__ = "files"
