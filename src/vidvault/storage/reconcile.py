"""Reconciliation of blob storage against the catalog."""

import logging
import posixpath
from dataclasses import dataclass, field
from datetime import datetime, timezone

from vidvault.models import IMPORTED_DESCRIPTION, UNTITLED_TITLE, VideoRecord
from vidvault.storage.blobs import BlobRepository, StoredBlob, is_video_file

logger = logging.getLogger(__name__)


def normalize_location(location: str) -> str:
    """Comparable form of a stored location.

    Backslashes become forward slashes and filesystem paths are
    normalized; URLs are compared verbatim.
    """
    location = location.strip()
    if "://" in location:
        return location
    return posixpath.normpath(location.replace("\\", "/"))


def title_from_name(name: str) -> str:
    """Title for an adopted file: its name without the extension."""
    return posixpath.splitext(name)[0] or UNTITLED_TITLE


@dataclass
class ReconcileResult:
    """Outcome of one reconciliation pass."""

    adopted: list[VideoRecord] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    orphaned: list[VideoRecord] = field(default_factory=list)


class Reconciler:
    """Derives catalog records for stored videos that have none.

    Records whose bytes are missing from the listing are reported in
    ``ReconcileResult.orphaned`` but left untouched.
    """

    def __init__(self, blobs: BlobRepository) -> None:
        self._blobs = blobs

    def reconcile(self, records: list[VideoRecord], base_url: str | None = None) -> ReconcileResult:
        """Compare the catalog with the blob listing.

        Args:
            records: Current catalog, not modified.
            base_url: Absolute URL prefix for the local backend's links.

        Raises:
            BlobStoreError: If the blob listing itself fails.
        """
        known = {normalize_location(r.stored_location) for r in records}
        listed = self._blobs.list_blobs()
        result = ReconcileResult()

        for blob in listed:
            if not is_video_file(blob.name):
                continue
            try:
                if normalize_location(blob.location) in known:
                    continue
                record = self._record_for(blob, base_url)
            except Exception as e:
                logger.warning("Skipping %s during sync: %s", blob.name, e)
                result.skipped.append(blob.name)
                continue
            known.add(normalize_location(blob.location))
            result.adopted.append(record)

        present = {normalize_location(b.location) for b in listed}
        result.orphaned = [r for r in records if normalize_location(r.stored_location) not in present]
        if result.orphaned:
            logger.warning(
                "%d catalog record(s) point at missing blobs: %s",
                len(result.orphaned),
                ", ".join(r.id for r in result.orphaned),
            )
        return result

    def _record_for(self, blob: StoredBlob, base_url: str | None) -> VideoRecord:
        return VideoRecord(
            title=title_from_name(blob.name),
            description=IMPORTED_DESCRIPTION,
            url=self._blobs.url_for(blob.location, base_url),
            file_name=blob.name,
            stored_location=blob.location,
            uploaded_at=blob.created_at or blob.modified_at or datetime.now(timezone.utc),
        )
