"""Core business logic for vidvault."""

import logging

from vidvault.config import Settings, settings
from vidvault.models import DEFAULT_DESCRIPTION, VideoPatch, VideoRecord
from vidvault.storage.blobs import BlobRepository, LocalBlobRepository
from vidvault.storage.catalog import CatalogVideoRepository
from vidvault.storage.documents import JsonFileCatalog
from vidvault.storage.repository import VideoRepository

logger = logging.getLogger(__name__)


class VideoNotFoundError(Exception):
    """Raised when a requested video is not in the catalog."""


class VideoValidationError(Exception):
    """Raised when upload or update input is missing or invalid."""


def build_repository(cfg: Settings | None = None) -> CatalogVideoRepository:
    """Wire the catalog repository for the configured backend."""
    cfg = cfg or settings
    if cfg.backend == "remote":
        from vidvault.storage.remote import HttpBlobRepository, HttpKeyValueCatalog, build_client

        blob_client = build_client(cfg.blob_endpoint, cfg.remote_token, cfg.http_timeout)
        kv_client = build_client(cfg.kv_endpoint, cfg.remote_token, cfg.http_timeout)
        return CatalogVideoRepository(
            document=HttpKeyValueCatalog(kv_client, key=cfg.catalog_key),
            blobs=HttpBlobRepository(blob_client, prefix=cfg.blob_prefix),
        )

    cfg.ensure_dirs()
    return CatalogVideoRepository(
        document=JsonFileCatalog(cfg.catalog_path),
        blobs=LocalBlobRepository(cfg.uploads_dir),
    )


class VideoLibraryService:
    """Core service layer — single orchestration point for all vidvault operations.

    Both the CLI and MCP server are thin wrappers over this class.
    Dependencies are injected via constructor for testability and
    backend swappability.
    """

    def __init__(
        self,
        repository: VideoRepository,
        blobs: BlobRepository,
        sync_on_list: bool | None = None,
    ) -> None:
        self._repo = repository
        self._blobs = blobs
        self._sync_on_list = settings.sync_on_list if sync_on_list is None else sync_on_list

    @property
    def blobs(self) -> BlobRepository:
        return self._blobs

    @classmethod
    def from_settings(cls, cfg: Settings | None = None) -> "VideoLibraryService":
        """Service with default dependencies for the configured backend."""
        cfg = cfg or settings
        repo = build_repository(cfg)
        return cls(repository=repo, blobs=repo.blobs, sync_on_list=cfg.sync_on_list)

    def upload_video(
        self,
        data: bytes,
        file_name: str,
        title: str,
        description: str = "",
        base_url: str | None = None,
    ) -> VideoRecord:
        """Store uploaded bytes and catalog them.

        Args:
            data: Raw video bytes.
            file_name: Name suggested by the client; sanitized before storage.
            title: Required, surrounding whitespace is stripped.
            description: Optional; blank becomes the default placeholder.
            base_url: Absolute URL prefix for locally served files.

        Returns:
            The created VideoRecord.

        Raises:
            VideoValidationError: If the title or file is missing.
            BlobStoreError: If the bytes could not be stored.
            CatalogWriteError: If the catalog could not be persisted.
        """
        title = (title or "").strip()
        if not title:
            raise VideoValidationError("Title is required.")
        if not data or not file_name:
            raise VideoValidationError("No video file provided.")

        blob = self._blobs.store(data, file_name)
        # A catalog failure here leaves the blob on disk; the next sync adopts it
        video = self._repo.create(
            title,
            (description or "").strip() or DEFAULT_DESCRIPTION,
            blob,
            base_url=base_url,
        )
        logger.info("Video uploaded: %s (%s, %d bytes)", video.id, video.file_name, len(data))
        return video

    def list_videos(self, base_url: str | None = None, sync: bool | None = None) -> list[VideoRecord]:
        """List all videos, adopting untracked files first unless sync is disabled.

        Local files are only adopted when ``base_url`` is given, since their
        links are built from it.
        """
        do_sync = self._sync_on_list if sync is None else sync
        return self._repo.list_all(sync=do_sync, base_url=base_url)

    def get_video(self, video_id: str) -> VideoRecord:
        """Get a single video.

        Raises:
            VideoNotFoundError: If the video is not in the catalog.
        """
        video = self._repo.get(video_id)
        if video is None:
            raise VideoNotFoundError(f"Video not found: {video_id}")
        return video

    def update_video(
        self, video_id: str, title: str | None = None, description: str | None = None
    ) -> VideoRecord:
        """Update a video's title and/or description.

        Raises:
            VideoValidationError: If nothing to update was given.
            VideoNotFoundError: If the video is not in the catalog.
        """
        patch = VideoPatch(title=title, description=description)
        if patch.is_empty:
            raise VideoValidationError("Nothing to update: pass a title or description.")
        video = self._repo.update(video_id, patch)
        if video is None:
            raise VideoNotFoundError(f"Video not found: {video_id}")
        return video

    def delete_video(self, video_id: str) -> None:
        """Remove a video from the catalog and, best-effort, its bytes.

        Raises:
            VideoNotFoundError: If the video is not in the catalog.
        """
        if not self._repo.delete(video_id):
            raise VideoNotFoundError(f"Video not found: {video_id}")

    def sync(self, base_url: str | None = None) -> list[VideoRecord]:
        """Adopt stored files that have no catalog record. Returns the new records."""
        return self._repo.sync(base_url=base_url)
