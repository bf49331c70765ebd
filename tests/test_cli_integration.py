"""CLI integration tests using Typer's CliRunner."""

from unittest.mock import patch

import pytest
from typer.testing import CliRunner

from vidvault.cli import app


runner = CliRunner()


@pytest.fixture
def mock_service(service):
    """Patch _get_service to return a service over temp-dir backends."""
    with patch("vidvault.cli._get_service", return_value=service):
        yield service


@pytest.fixture
def video_file(tmp_path, mp4_bytes):
    path = tmp_path / "demo clip.mp4"
    path.write_bytes(mp4_bytes)
    return path


def _upload(video_file, title="Demo"):
    return runner.invoke(app, ["upload", str(video_file), "--title", title])


class TestCLI:
    def test_upload_and_list(self, mock_service, video_file):
        result = _upload(video_file)
        assert result.exit_code == 0
        assert "Uploaded: Demo" in result.stdout
        assert "/api/uploads/" in result.stdout

        result = runner.invoke(app, ["list"])
        assert result.exit_code == 0
        assert "Demo" in result.stdout

    def test_upload_blank_title_fails(self, mock_service, video_file):
        result = _upload(video_file, title="   ")
        assert result.exit_code == 1

    def test_info(self, mock_service, video_file):
        _upload(video_file)
        video = mock_service.list_videos(sync=False)[0]
        result = runner.invoke(app, ["info", video.id])
        assert result.exit_code == 0
        assert "No description provided." in result.stdout
        assert video.file_name in result.stdout

    def test_info_not_found(self, mock_service):
        result = runner.invoke(app, ["info", "nonexistent"])
        assert result.exit_code == 1

    def test_update(self, mock_service, video_file):
        _upload(video_file)
        video = mock_service.list_videos(sync=False)[0]
        result = runner.invoke(app, ["update", video.id, "--title", "Renamed"])
        assert result.exit_code == 0
        assert mock_service.get_video(video.id).title == "Renamed"

    def test_remove_and_list(self, mock_service, video_file):
        _upload(video_file)
        video = mock_service.list_videos(sync=False)[0]
        result = runner.invoke(app, ["remove", video.id])
        assert result.exit_code == 0
        assert "Removed" in result.stdout

        result = runner.invoke(app, ["list"])
        assert "empty" in result.stdout.lower()

    def test_sync(self, mock_service, uploads_dir):
        uploads_dir.mkdir()
        (uploads_dir / "found.mp4").write_bytes(b"x")
        result = runner.invoke(app, ["sync"])
        assert result.exit_code == 0
        assert "Adopted 1" in result.stdout

        result = runner.invoke(app, ["sync"])
        assert "up to date" in result.stdout

    def test_list_no_sync(self, mock_service, uploads_dir):
        uploads_dir.mkdir()
        (uploads_dir / "found.mp4").write_bytes(b"x")
        result = runner.invoke(app, ["list", "--no-sync"])
        assert "empty" in result.stdout.lower()

    def test_no_args_shows_help(self):
        result = runner.invoke(app, [])
        assert result.exit_code == 2
        assert "vidvault" in result.stdout.lower()
