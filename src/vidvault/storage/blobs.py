"""Blob repository interface and local filesystem implementation."""

import logging
import posixpath
import re
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path

from vidvault.config import settings
from vidvault.models import random_token
from vidvault.storage.errors import BlobDeleteError, BlobStoreError

logger = logging.getLogger(__name__)

UPLOADS_ROUTE = "/api/uploads"

VIDEO_CONTENT_TYPES = {
    ".mp4": "video/mp4",
    ".webm": "video/webm",
    ".mov": "video/quicktime",
    ".avi": "video/x-msvideo",
    ".mkv": "video/x-matroska",
    ".flv": "video/x-flv",
    ".wmv": "video/x-ms-wmv",
}
VIDEO_EXTENSIONS = frozenset(VIDEO_CONTENT_TYPES)

_UNSAFE_CHARS = re.compile(r"[^a-zA-Z0-9.\-_]")
_DOT_RUNS = re.compile(r"\.{2,}")


def sanitize_filename(name: str) -> str:
    """Replace anything outside ``[A-Za-z0-9._-]`` with ``_``.

    Runs of dots are collapsed so no ``..`` segment survives.
    """
    safe = _UNSAFE_CHARS.sub("_", name)
    safe = _DOT_RUNS.sub(".", safe)
    return safe or "video"


def stored_name(suggested_name: str) -> str:
    """Collision-resistant stored name: ``<epoch-ms>-<token>-<safe name>``."""
    return f"{time.time_ns() // 1_000_000}-{random_token(6)}-{sanitize_filename(suggested_name)}"


def content_type_for(name: str) -> str:
    """Content type of a stored video, derived from its extension."""
    return VIDEO_CONTENT_TYPES.get(posixpath.splitext(name)[1].lower(), "application/octet-stream")


def is_video_file(name: str) -> bool:
    return posixpath.splitext(name)[1].lower() in VIDEO_EXTENSIONS


def location_basename(location: str) -> str:
    """Final name component of a path or URL, tolerating Windows separators."""
    return posixpath.basename(location.replace("\\", "/").split("?", 1)[0])


@dataclass
class StoredBlob:
    """A stored object as seen by the blob repository."""

    name: str  # stored file name, no directory part
    location: str  # filesystem path or backend URL
    created_at: datetime | None = None
    modified_at: datetime | None = None


class BlobRepository(ABC):
    """Abstract base class for raw video byte storage.

    Implementations know nothing about the catalog; the metadata index
    records ``StoredBlob.location`` and hands it back for URLs and deletes.
    """

    # True when url_for can only build an absolute URL from a caller-supplied base
    requires_base_url = False

    @abstractmethod
    def store(self, data: bytes, suggested_name: str) -> StoredBlob:
        """Persist bytes under a sanitized, collision-resistant name.

        Raises:
            BlobStoreError: If the bytes could not be written.
        """

    @abstractmethod
    def url_for(self, location: str, base_url: str | None = None) -> str:
        """Public URL for a stored object."""

    @abstractmethod
    def delete(self, location: str) -> None:
        """Remove a stored object.

        Raises:
            BlobDeleteError: If removal failed. Callers decide whether to swallow it.
        """

    @abstractmethod
    def list_blobs(self) -> list[StoredBlob]:
        """Enumerate stored objects for reconciliation.

        Raises:
            BlobStoreError: If the store could not be listed.
        """


class LocalBlobRepository(BlobRepository):
    """Stores videos as plain files in a single upload directory."""

    requires_base_url = True

    def __init__(self, root: Path | str | None = None) -> None:
        """Initialize the repository.

        Args:
            root: Upload directory. Defaults to settings.uploads_dir.
                  Created lazily on first store.
        """
        self._root = Path(root) if root is not None else settings.uploads_dir

    @property
    def root(self) -> Path:
        return self._root

    def store(self, data: bytes, suggested_name: str) -> StoredBlob:
        name = stored_name(suggested_name)
        path = self._root / name
        try:
            self._root.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)
        except OSError as e:
            raise BlobStoreError(f"Failed to store {suggested_name!r}: {e}") from e

        now = datetime.now(timezone.utc)
        logger.info("Stored %d bytes at %s", len(data), path)
        return StoredBlob(name=name, location=str(path.absolute()), created_at=now, modified_at=now)

    def url_for(self, location: str, base_url: str | None = None) -> str:
        prefix = base_url.rstrip("/") if base_url else ""
        return f"{prefix}{UPLOADS_ROUTE}/{location_basename(location)}"

    def delete(self, location: str) -> None:
        path = Path(location)
        if path.resolve().parent != self._root.resolve():
            raise BlobDeleteError(f"Refusing to delete outside upload directory: {location}")
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            raise BlobDeleteError(f"Failed to delete {location}: {e}") from e
        logger.info("Deleted blob: %s", location)

    def list_blobs(self) -> list[StoredBlob]:
        if not self._root.is_dir():
            return []

        try:
            entries = sorted(self._root.iterdir())
        except OSError as e:
            raise BlobStoreError(f"Failed to list {self._root}: {e}") from e

        blobs = []
        for entry in entries:
            try:
                if not entry.is_file():
                    continue
                st = entry.stat()
            except OSError as e:
                logger.warning("Could not stat %s: %s", entry, e)
                blobs.append(StoredBlob(name=entry.name, location=str(entry.absolute())))
                continue

            birth = getattr(st, "st_birthtime", None)
            blobs.append(StoredBlob(
                name=entry.name,
                location=str(entry.absolute()),
                created_at=_from_timestamp(birth) if birth else None,
                modified_at=_from_timestamp(st.st_mtime),
            ))
        return blobs

    def resolve(self, name: str) -> Path | None:
        """Path of a stored file, or None if missing or outside the directory."""
        if not name or name != location_basename(name) or name in (".", ".."):
            return None
        path = self._root / name
        if path.resolve().parent != self._root.resolve() or not path.is_file():
            return None
        return path


def _from_timestamp(ts: float) -> datetime:
    return datetime.fromtimestamp(ts, tz=timezone.utc)
