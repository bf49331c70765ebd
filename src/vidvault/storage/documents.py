"""Whole-catalog persistence: the catalog is stored as one JSON array document."""

import json
import logging
import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path

from pydantic import TypeAdapter, ValidationError

from vidvault.config import settings
from vidvault.models import VideoRecord
from vidvault.storage.errors import CatalogReadError, CatalogWriteError

logger = logging.getLogger(__name__)

_records_adapter = TypeAdapter(list[VideoRecord])


def parse_catalog(payload: str | bytes | None, source: str) -> list[VideoRecord]:
    """Decode a catalog document. An absent or blank document is an empty catalog."""
    if payload is None or not payload.strip():
        return []
    try:
        return _records_adapter.validate_json(payload)
    except ValidationError as e:
        raise CatalogReadError(f"Malformed catalog in {source}: {e}") from e


def dump_catalog(records: list[VideoRecord]) -> str:
    """Encode records as a pretty-printed JSON array in insertion order."""
    return json.dumps([r.to_document() for r in records], indent=2, ensure_ascii=False)


class CatalogDocument(ABC):
    """Loads and saves the entire catalog as a single unit."""

    @abstractmethod
    def load(self) -> list[VideoRecord]:
        """Read every record.

        Raises:
            CatalogReadError: If the document exists but cannot be read or parsed.
        """

    @abstractmethod
    def save(self, records: list[VideoRecord]) -> None:
        """Replace the stored catalog with ``records``.

        Raises:
            CatalogWriteError: If the write did not durably land.
        """


class JsonFileCatalog(CatalogDocument):
    """Catalog kept in a single JSON file on local disk."""

    def __init__(self, path: Path | str | None = None) -> None:
        """Initialize the document.

        Args:
            path: JSON file location. Defaults to settings.catalog_path.
        """
        self._path = Path(path) if path is not None else settings.catalog_path

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> list[VideoRecord]:
        if not self._path.exists():
            return []
        try:
            payload = self._path.read_text(encoding="utf-8")
        except OSError as e:
            raise CatalogReadError(f"Failed to read {self._path}: {e}") from e
        return parse_catalog(payload, str(self._path))

    def save(self, records: list[VideoRecord]) -> None:
        payload = dump_catalog(records)
        tmp_name = None
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            # Write to a sibling temp file, then swap it in atomically
            fd, tmp_name = tempfile.mkstemp(dir=self._path.parent, prefix=".videos-", suffix=".tmp")
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(payload)
            os.replace(tmp_name, self._path)
        except OSError as e:
            if tmp_name and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise CatalogWriteError(f"Failed to write {self._path}: {e}") from e
        logger.debug("Wrote %d record(s) to %s", len(records), self._path)
