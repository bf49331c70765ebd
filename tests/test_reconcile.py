"""Tests for blob/catalog reconciliation."""

import os
from datetime import datetime, timezone
from unittest.mock import MagicMock

from vidvault.models import IMPORTED_DESCRIPTION, UNTITLED_TITLE, VideoRecord
from vidvault.storage.blobs import LocalBlobRepository, StoredBlob
from vidvault.storage.reconcile import Reconciler, normalize_location, title_from_name

BASE_URL = "http://testserver"


class TestNormalizeLocation:
    def test_backslashes(self):
        assert normalize_location("C:\\uploads\\a.mp4") == "C:/uploads/a.mp4"

    def test_redundant_segments(self):
        assert normalize_location("/srv/./uploads//a.mp4") == "/srv/uploads/a.mp4"

    def test_urls_verbatim(self):
        url = "https://blob.example.com/videos//a.mp4"
        assert normalize_location(url) == url


class TestReconciler:
    def test_adopts_untracked_video(self, local_blobs, uploads_dir):
        uploads_dir.mkdir()
        (uploads_dir / "holiday.mp4").write_bytes(b"x")
        result = Reconciler(local_blobs).reconcile([], BASE_URL)
        assert len(result.adopted) == 1
        record = result.adopted[0]
        assert record.title == "holiday"
        assert record.description == IMPORTED_DESCRIPTION
        assert record.file_name == "holiday.mp4"
        assert record.url == f"{BASE_URL}/api/uploads/holiday.mp4"
        assert record.stored_location == str((uploads_dir / "holiday.mp4").absolute())

    def test_ignores_non_video_files(self, local_blobs, uploads_dir):
        uploads_dir.mkdir()
        (uploads_dir / "notes.txt").write_bytes(b"x")
        (uploads_dir / ".DS_Store").write_bytes(b"x")
        assert Reconciler(local_blobs).reconcile([], BASE_URL).adopted == []

    def test_skips_tracked_files(self, local_blobs, uploads_dir, sample_record):
        uploads_dir.mkdir()
        (uploads_dir / sample_record.file_name).write_bytes(b"x")
        result = Reconciler(local_blobs).reconcile([sample_record], BASE_URL)
        assert result.adopted == []
        assert result.orphaned == []

    def test_matches_windows_style_locations(self, local_blobs, uploads_dir, sample_record):
        uploads_dir.mkdir()
        (uploads_dir / sample_record.file_name).write_bytes(b"x")
        windowsy = sample_record.model_copy(
            update={"stored_location": sample_record.stored_location.replace("/", "\\")}
        )
        assert Reconciler(local_blobs).reconcile([windowsy], BASE_URL).adopted == []

    def test_uploaded_at_from_modification_time(self, local_blobs, uploads_dir):
        uploads_dir.mkdir()
        path = uploads_dir / "old.mov"
        path.write_bytes(b"x")
        mtime = datetime(2020, 1, 2, 3, 4, 5, tzinfo=timezone.utc).timestamp()
        os.utime(path, (mtime, mtime))
        record = Reconciler(local_blobs).reconcile([], BASE_URL).adopted[0]
        # birth time wins where the platform reports one
        if not hasattr(path.stat(), "st_birthtime"):
            assert record.uploaded_at == datetime(2020, 1, 2, 3, 4, 5, tzinfo=timezone.utc)

    def test_timestamp_precedence(self):
        created = datetime(2021, 1, 1, tzinfo=timezone.utc)
        modified = datetime(2022, 1, 1, tzinfo=timezone.utc)
        blobs = MagicMock(spec=LocalBlobRepository)
        blobs.url_for.return_value = "u"
        blobs.list_blobs.return_value = [
            StoredBlob(name="a.mp4", location="/u/a.mp4", created_at=created, modified_at=modified),
            StoredBlob(name="b.mp4", location="/u/b.mp4", modified_at=modified),
            StoredBlob(name="c.mp4", location="/u/c.mp4"),
        ]
        before = datetime.now(timezone.utc)
        a, b, c = Reconciler(blobs).reconcile([]).adopted
        assert a.uploaded_at == created
        assert b.uploaded_at == modified
        assert c.uploaded_at >= before

    def test_empty_stem_falls_back_to_untitled(self):
        assert title_from_name("holiday.mp4") == "holiday"
        assert title_from_name("") == UNTITLED_TITLE

    def test_per_file_failure_is_isolated(self):
        blobs = MagicMock(spec=LocalBlobRepository)
        blobs.list_blobs.return_value = [
            StoredBlob(name="bad.mp4", location="/u/bad.mp4"),
            StoredBlob(name="good.mp4", location="/u/good.mp4"),
        ]
        blobs.url_for.side_effect = [RuntimeError("stat failed"), "http://t/api/uploads/good.mp4"]
        result = Reconciler(blobs).reconcile([])
        assert [r.file_name for r in result.adopted] == ["good.mp4"]
        assert result.skipped == ["bad.mp4"]

    def test_reports_orphaned_records(self, local_blobs, uploads_dir, sample_record):
        uploads_dir.mkdir()
        result = Reconciler(local_blobs).reconcile([sample_record], BASE_URL)
        assert result.orphaned == [sample_record]
        assert result.adopted == []

    def test_does_not_mutate_input(self, local_blobs, uploads_dir):
        uploads_dir.mkdir()
        (uploads_dir / "a.mp4").write_bytes(b"x")
        records: list[VideoRecord] = []
        Reconciler(local_blobs).reconcile(records, BASE_URL)
        assert records == []
