"""Shared fixtures for vidvault tests."""

from datetime import datetime, timezone

import pytest

from vidvault.models import VideoRecord
from vidvault.service import VideoLibraryService
from vidvault.storage.blobs import LocalBlobRepository
from vidvault.storage.catalog import CatalogVideoRepository
from vidvault.storage.documents import JsonFileCatalog

BASE_URL = "http://testserver"


@pytest.fixture
def mp4_bytes():
    """Ten bytes standing in for an mp4 file."""
    return b"\x00\x00\x00\x18ftypmp"


@pytest.fixture
def uploads_dir(tmp_path):
    return tmp_path / "uploads"


@pytest.fixture
def catalog_path(tmp_path):
    return tmp_path / "data" / "videos.json"


@pytest.fixture
def local_blobs(uploads_dir):
    """LocalBlobRepository rooted in a temp directory."""
    return LocalBlobRepository(uploads_dir)


@pytest.fixture
def json_catalog(catalog_path):
    """JsonFileCatalog backed by a temp file."""
    return JsonFileCatalog(catalog_path)


@pytest.fixture
def repo(json_catalog, local_blobs):
    """CatalogVideoRepository over the local backend."""
    return CatalogVideoRepository(document=json_catalog, blobs=local_blobs)


@pytest.fixture
def service(repo, local_blobs):
    """Fully wired VideoLibraryService with sync-on-list enabled."""
    return VideoLibraryService(repository=repo, blobs=local_blobs, sync_on_list=True)


@pytest.fixture
def sample_record(uploads_dir):
    """Pre-built VideoRecord pointing into the temp upload directory."""
    return VideoRecord(
        id="1750000000000-abc1234",
        title="Intro to Rowing",
        description="Catch, drive, finish, recovery.",
        url=f"{BASE_URL}/api/uploads/1750000000000-xyz789-rowing.mp4",
        file_name="1750000000000-xyz789-rowing.mp4",
        stored_location=str(uploads_dir / "1750000000000-xyz789-rowing.mp4"),
        uploaded_at=datetime(2025, 6, 15, 12, 0, 0, tzinfo=timezone.utc),
    )
