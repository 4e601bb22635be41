"""Name validation, pagination, storage keys, and share tokens."""

from __future__ import annotations

import secrets
import time
from dataclasses import dataclass
from datetime import UTC, datetime

from .exceptions import ValidationError

MAX_NAME_LENGTH = 255
SHARE_TOKEN_BYTES = 24  # 192 bits

# =============================================================================
# Names
# =============================================================================


def validate_name(name: str | None, *, field: str = "name") -> str:
    """Return *name* stripped of surrounding whitespace, or raise ``ValidationError``."""
    if name is None:
        raise ValidationError(f"{field} is required")
    name = name.strip()
    if not name:
        raise ValidationError(f"{field} is required")
    if len(name) > MAX_NAME_LENGTH:
        raise ValidationError(f"{field} too long (max {MAX_NAME_LENGTH} characters)")
    if "\x00" in name:
        raise ValidationError(f"{field} contains null bytes")
    if "/" in name or "\\" in name:
        raise ValidationError(f"{field} must not contain path separators")
    return name


def safe_key_component(name: str) -> str:
    """Make *name* usable as the last segment of a blob key."""
    cleaned = "".join("_" if ch in "/\\\x00" or ord(ch) < 0x20 else ch for ch in name)
    return cleaned.strip() or "unnamed"


# =============================================================================
# Storage keys & tokens
# =============================================================================


def make_storage_key(owner_id: str, name: str, *, now_ms: int | None = None) -> str:
    """Build a blob key: ``{owner_id}/{timestamp_ms}-{nonce}-{name}``.

    The nonce keeps two uploads of the same name in the same millisecond
    apart, so a key is never handed out twice.
    """
    if now_ms is None:
        now_ms = time.time_ns() // 1_000_000
    nonce = secrets.token_hex(4)
    return f"{owner_id}/{now_ms}-{nonce}-{safe_key_component(name)}"


def generate_share_token() -> str:
    """Return an unguessable URL-safe share token."""
    return secrets.token_urlsafe(SHARE_TOKEN_BYTES)


# =============================================================================
# Pagination
# =============================================================================


@dataclass(frozen=True)
class PageWindow:
    """Offset window for one page of a listing."""

    page: int
    page_size: int

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size

    def has_more(self, returned: int, total: int) -> bool:
        return self.offset + returned < total


def page_window(page: int, page_size: int, *, max_page_size: int) -> PageWindow:
    """Validate paging arguments. ``page_size`` is clamped to *max_page_size*."""
    if page < 1:
        raise ValidationError(f"page must be >= 1, got {page}")
    if page_size < 1:
        raise ValidationError(f"page_size must be >= 1, got {page_size}")
    return PageWindow(page=page, page_size=min(page_size, max_page_size))


# =============================================================================
# SQL helpers
# =============================================================================


def escape_like(text: str) -> str:
    """Escape SQL LIKE wildcards so *text* matches literally (escape char ``\\``)."""
    return text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def as_aware(value: datetime) -> datetime:
    """Attach UTC to naive datetimes (SQLite drops tzinfo)."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value
