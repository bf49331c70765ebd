"""Remote backend: HTTP blob store for bytes, HTTP key-value store for the catalog."""

import json
import logging
from datetime import datetime

import httpx

from vidvault.config import settings
from vidvault.models import VideoRecord
from vidvault.storage.blobs import BlobRepository, StoredBlob, content_type_for, location_basename, stored_name
from vidvault.storage.documents import CatalogDocument, dump_catalog, parse_catalog
from vidvault.storage.errors import BlobDeleteError, BlobStoreError, CatalogReadError, CatalogWriteError

logger = logging.getLogger(__name__)


def build_client(endpoint: str, token: str | None = None, timeout: float | None = None) -> httpx.Client:
    """HTTP client bound to ``endpoint`` with bearer auth when a token is set."""
    headers = {"Authorization": f"Bearer {token}"} if token else {}
    return httpx.Client(
        base_url=endpoint.rstrip("/"),
        headers=headers,
        timeout=timeout if timeout is not None else settings.http_timeout,
    )


class HttpBlobRepository(BlobRepository):
    """Object store reached over HTTP.

    Objects live under a namespaced prefix and the store issues the
    public URL for each object, so no base URL is needed to build links.
    """

    def __init__(self, client: httpx.Client | None = None, prefix: str | None = None) -> None:
        """Initialize the repository.

        Args:
            client: Pre-configured client whose base_url is the blob endpoint.
                    Defaults to one built from settings.
            prefix: Object key prefix. Defaults to settings.blob_prefix.
        """
        self._client = client or build_client(settings.blob_endpoint, settings.remote_token)
        self._prefix = prefix if prefix is not None else settings.blob_prefix

    def store(self, data: bytes, suggested_name: str) -> StoredBlob:
        pathname = f"{self._prefix}{stored_name(suggested_name)}"
        try:
            resp = self._client.put(
                f"/{pathname}",
                content=data,
                headers={"x-content-type": content_type_for(pathname)},
            )
            resp.raise_for_status()
            body = resp.json()
        except (httpx.HTTPError, ValueError) as e:
            raise BlobStoreError(f"Failed to upload {pathname}: {e}") from e

        url = body.get("url")
        if not url:
            raise BlobStoreError(f"Blob store returned no URL for {pathname}")
        logger.info("Uploaded %d bytes to %s", len(data), url)
        return StoredBlob(
            name=location_basename(body.get("pathname", pathname)),
            location=url,
            created_at=_parse_time(body.get("uploadedAt")),
        )

    def url_for(self, location: str, base_url: str | None = None) -> str:
        return location

    def delete(self, location: str) -> None:
        try:
            resp = self._client.post("/delete", json={"urls": [location]})
            resp.raise_for_status()
        except httpx.HTTPError as e:
            raise BlobDeleteError(f"Failed to delete {location}: {e}") from e
        logger.info("Deleted blob: %s", location)

    def list_blobs(self) -> list[StoredBlob]:
        blobs: list[StoredBlob] = []
        cursor = None
        while True:
            params = {"prefix": self._prefix}
            if cursor:
                params["cursor"] = cursor
            try:
                resp = self._client.get("/", params=params)
                resp.raise_for_status()
                page = resp.json()
            except (httpx.HTTPError, ValueError) as e:
                raise BlobStoreError(f"Failed to list blobs under {self._prefix!r}: {e}") from e

            for item in page.get("blobs", []):
                url = item.get("url")
                if not url:
                    continue
                blobs.append(StoredBlob(
                    name=location_basename(item.get("pathname") or url),
                    location=url,
                    created_at=_parse_time(item.get("uploadedAt")),
                ))

            cursor = page.get("cursor")
            if not page.get("hasMore") or not cursor:
                return blobs


class HttpKeyValueCatalog(CatalogDocument):
    """Catalog stored as one JSON string under a single key of a REST key-value store."""

    def __init__(self, client: httpx.Client | None = None, key: str | None = None) -> None:
        self._client = client or build_client(settings.kv_endpoint, settings.remote_token)
        self._key = key or settings.catalog_key

    def load(self) -> list[VideoRecord]:
        try:
            resp = self._client.get(f"/get/{self._key}")
            resp.raise_for_status()
            result = resp.json().get("result")
        except (httpx.HTTPError, ValueError) as e:
            raise CatalogReadError(f"Failed to read key {self._key!r}: {e}") from e

        # Some stores hand back the decoded value instead of the raw string
        if isinstance(result, list):
            result = json.dumps(result)
        return parse_catalog(result, f"key {self._key!r}")

    def save(self, records: list[VideoRecord]) -> None:
        try:
            resp = self._client.post(f"/set/{self._key}", content=dump_catalog(records))
            resp.raise_for_status()
        except httpx.HTTPError as e:
            raise CatalogWriteError(f"Failed to write key {self._key!r}: {e}") from e
        logger.debug("Wrote %d record(s) to key %s", len(records), self._key)


def _parse_time(value: str | None) -> datetime | None:
    if not value:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        logger.warning("Unparseable timestamp from blob store: %s", value)
        return None
