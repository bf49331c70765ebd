"""Catalog-document implementation of the video repository."""

import logging
import threading

from vidvault.models import DEFAULT_DESCRIPTION, VideoPatch, VideoRecord, new_video_id
from vidvault.storage.blobs import BlobRepository, StoredBlob
from vidvault.storage.documents import CatalogDocument
from vidvault.storage.errors import BlobError, BlobStoreError, CatalogWriteError
from vidvault.storage.reconcile import Reconciler
from vidvault.storage.repository import VideoRepository

logger = logging.getLogger(__name__)


class CatalogVideoRepository(VideoRepository):
    """Video catalog persisted as one whole document next to a blob repository.

    Every mutation is a read-modify-write of the entire catalog. The
    cycle runs under a single in-process lock so concurrent writers in
    the same process cannot lose each other's updates. Nothing guards
    against a second process writing the same document.
    """

    def __init__(
        self,
        document: CatalogDocument,
        blobs: BlobRepository,
        reconciler: Reconciler | None = None,
    ) -> None:
        self._document = document
        self._blobs = blobs
        self._reconciler = reconciler or Reconciler(blobs)
        self._lock = threading.RLock()

    @property
    def blobs(self) -> BlobRepository:
        return self._blobs

    def list_all(self, *, sync: bool = False, base_url: str | None = None) -> list[VideoRecord]:
        """List every record, adopting untracked blobs first when ``sync`` is set.

        A failed blob listing or a failed write-back degrades to the
        catalog as it was read; a failed read raises CatalogReadError.
        Blobs that need a base URL for their links are only adopted when
        one is given.
        """
        with self._lock:
            records = self._document.load()
            if not sync:
                return records
            if base_url is None and self._blobs.requires_base_url:
                logger.debug("Sync skipped, no base URL to build video links")
                return records
            try:
                adopted = self._adopt(records, base_url)
            except BlobStoreError as e:
                logger.warning("Sync skipped, blob listing failed: %s", e)
                return records
            except CatalogWriteError as e:
                logger.warning("Sync write-back failed, serving catalog without new files: %s", e)
                return records
            return records + adopted

    def get(self, video_id: str) -> VideoRecord | None:
        for record in self._document.load():
            if record.id == video_id:
                return record
        return None

    def create(
        self, title: str, description: str, blob: StoredBlob, base_url: str | None = None
    ) -> VideoRecord:
        with self._lock:
            records = self._document.load()
            record = VideoRecord(
                id=self._unique_id(records),
                title=title,
                description=description or DEFAULT_DESCRIPTION,
                url=self._blobs.url_for(blob.location, base_url),
                file_name=blob.name,
                stored_location=blob.location,
            )
            self._document.save([*records, record])

        logger.info("Video created: %s — %s", record.id, record.title)
        return record

    def update(self, video_id: str, patch: VideoPatch) -> VideoRecord | None:
        with self._lock:
            records = self._document.load()
            for i, record in enumerate(records):
                if record.id == video_id:
                    break
            else:
                return None

            updated = patch.apply(record)
            records[i] = updated
            self._document.save(records)

        logger.info("Video updated: %s", video_id)
        return updated

    def delete(self, video_id: str) -> bool:
        with self._lock:
            records = self._document.load()
            target = next((r for r in records if r.id == video_id), None)
            if target is None:
                return False
            self._document.save([r for r in records if r.id != video_id])

        logger.info("Video deleted: %s", video_id)

        # Metadata is gone either way; a failed blob delete only leaves bytes behind
        try:
            self._blobs.delete(target.stored_location)
        except BlobError as e:
            logger.warning("Orphaned blob left for %s at %s: %s", video_id, target.stored_location, e)
        return True

    def sync(self, base_url: str | None = None) -> list[VideoRecord]:
        """Adopt untracked blobs. Listing and write failures propagate."""
        if base_url is None and self._blobs.requires_base_url:
            logger.warning("Sync skipped, a base URL is required to link local files")
            return []
        with self._lock:
            return self._adopt(self._document.load(), base_url)

    def _adopt(self, records: list[VideoRecord], base_url: str | None) -> list[VideoRecord]:
        """Reconcile and persist new records in a single write. Caller holds the lock."""
        result = self._reconciler.reconcile(records, base_url)
        if not result.adopted:
            return []

        taken = {r.id for r in records}
        adopted = []
        for record in result.adopted:
            if record.id in taken:
                record = record.model_copy(update={"id": self._unique_id(records, taken)})
            taken.add(record.id)
            adopted.append(record)

        self._document.save(records + adopted)
        logger.info("Adopted %d untracked video(s) into the catalog", len(adopted))
        return adopted

    @staticmethod
    def _unique_id(records: list[VideoRecord], taken: set[str] | None = None) -> str:
        taken = taken if taken is not None else {r.id for r in records}
        video_id = new_video_id()
        while video_id in taken:
            video_id = new_video_id()
        return video_id
