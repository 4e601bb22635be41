"""Application settings, read from ``CLOUDVAULT_*`` environment variables."""

from __future__ import annotations

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from cloudvault.storage.local import LocalBlobStore


class VaultSettings(BaseSettings):
    """Process-wide configuration, built once at startup and passed to ``CloudVault``."""

    model_config = SettingsConfigDict(
        env_prefix="CLOUDVAULT_",
        env_file=".env",
        extra="ignore",
    )

    # Metadata store
    database_url: str = "sqlite+aiosqlite:///./cloudvault.db"
    echo_sql: bool = False

    # Public links
    share_base_url: str = "http://localhost:3000"
    download_url_ttl: int = Field(default=300, gt=0)

    # Tree walk bound
    max_breadcrumb_depth: int = Field(default=10_000, gt=0)

    # Pagination
    default_page_size: int = Field(default=10, gt=0)
    max_page_size: int = Field(default=100, gt=0)

    # Local blob store
    blob_root: Path = Path("./blobs")
    blob_base_url: str = "http://localhost:8000/blobs"
    signing_secret: str = ""

    def build_blob_store(self) -> LocalBlobStore:
        """Create the disk-backed blob store described by these settings."""
        return LocalBlobStore(
            self.blob_root,
            base_url=self.blob_base_url,
            secret=self.signing_secret,
        )
