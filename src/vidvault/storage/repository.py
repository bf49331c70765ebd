"""Abstract repository interface for the video catalog."""

from abc import ABC, abstractmethod

from vidvault.models import VideoPatch, VideoRecord
from vidvault.storage.blobs import StoredBlob


class VideoRepository(ABC):
    """Abstract base class defining the video catalog contract.

    Lookups report a missing id as None/False rather than raising, so
    the service layer decides how "not found" surfaces to callers.
    """

    @abstractmethod
    def list_all(self, *, sync: bool = False, base_url: str | None = None) -> list[VideoRecord]:
        """List every record in insertion order.

        With ``sync`` set, untracked blobs are adopted into the catalog first.
        """

    @abstractmethod
    def get(self, video_id: str) -> VideoRecord | None:
        """Retrieve a record by id. Returns None if not found."""

    @abstractmethod
    def create(
        self, title: str, description: str, blob: StoredBlob, base_url: str | None = None
    ) -> VideoRecord:
        """Append a record referencing already-stored bytes and persist the catalog."""

    @abstractmethod
    def update(self, video_id: str, patch: VideoPatch) -> VideoRecord | None:
        """Apply a partial update. Returns None if not found."""

    @abstractmethod
    def delete(self, video_id: str) -> bool:
        """Remove a record and, best-effort, its bytes. Returns whether a record was removed."""

    @abstractmethod
    def sync(self, base_url: str | None = None) -> list[VideoRecord]:
        """Adopt untracked blobs and return the newly created records."""
