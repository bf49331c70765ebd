"""Configuration management for vidvault."""

from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings with environment variable overrides.

    All settings can be overridden via environment variables
    prefixed with VIDVAULT_ (e.g. VIDVAULT_DATA_DIR, VIDVAULT_BACKEND).
    """

    model_config = {"env_prefix": "VIDVAULT_"}

    # Storage
    data_dir: Path = Field(
        default_factory=lambda: Path.home() / ".vidvault",
        description="Root directory for the catalog file and uploaded videos",
    )
    backend: Literal["local", "remote"] = "local"
    sync_on_list: bool = True

    # Server
    host: str = "127.0.0.1"
    port: int = 9094
    public_base_url: str | None = None

    # Remote backend (HTTP blob store + key-value index)
    blob_endpoint: str = ""
    kv_endpoint: str = ""
    remote_token: str | None = None
    catalog_key: str = "videos:all"
    blob_prefix: str = "videos/"
    http_timeout: float = 60.0

    @property
    def catalog_path(self) -> Path:
        """JSON catalog document used by the local backend."""
        return self.data_dir / "data" / "videos.json"

    @property
    def uploads_dir(self) -> Path:
        """Directory holding uploaded video files."""
        return self.data_dir / "uploads"

    @property
    def base_url(self) -> str:
        """Absolute URL prefix used to build video URLs."""
        return (self.public_base_url or f"http://{self.host}:{self.port}").rstrip("/")

    def ensure_dirs(self) -> None:
        """Create all required directories if they don't exist."""
        self.data_dir.mkdir(parents=True, exist_ok=True)
        self.catalog_path.parent.mkdir(parents=True, exist_ok=True)
        self.uploads_dir.mkdir(parents=True, exist_ok=True)


# Module-level singleton — import this throughout the app
settings = Settings()
