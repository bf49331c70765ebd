"""FastMCP server — thin wrapper exposing VideoLibraryService as MCP tools.

When run over HTTP the same app also serves stored files at
``/api/uploads/{filename}`` so catalog URLs are directly playable.
"""

from pathlib import Path

from fastmcp import FastMCP
from starlette.requests import Request
from starlette.responses import FileResponse, JSONResponse, Response

from vidvault.config import settings
from vidvault.models import VideoRecord
from vidvault.service import VideoLibraryService, VideoNotFoundError, VideoValidationError
from vidvault.storage.blobs import UPLOADS_ROUTE, LocalBlobRepository, content_type_for
from vidvault.storage.errors import StorageError


mcp = FastMCP(
    name="vidvault",
    instructions=(
        "vidvault keeps a catalog of uploaded videos. Use upload_video to add "
        "a local file, then list_videos, get_video, update_video, and "
        "delete_video to manage the catalog."
    ),
)

_service: VideoLibraryService | None = None


def _get_service() -> VideoLibraryService:
    """Lazy-initialise the service singleton with default dependencies."""
    global _service
    if _service is None:
        _service = VideoLibraryService.from_settings()
    return _service


def _video_details(video: VideoRecord) -> dict:
    return video.model_dump(mode="json", by_alias=True)


@mcp.tool(annotations={"readOnlyHint": False, "idempotentHint": False})
def upload_video(file_path: str, title: str, description: str = "") -> dict:
    """Upload a local video file into the catalog.

    Args:
        file_path: Path of the video file on the server's filesystem.
        title: Video title (required).
        description: Optional description.
    """
    path = Path(file_path).expanduser()
    if not path.is_file():
        return {"error": f"No video file at: {file_path}"}
    try:
        video = _get_service().upload_video(
            path.read_bytes(), path.name, title, description, base_url=settings.base_url
        )
        return _video_details(video)
    except (VideoValidationError, StorageError) as e:
        return {"error": str(e)}


@mcp.tool(annotations={"readOnlyHint": False})
def list_videos() -> list[dict] | dict:
    """List all videos in the catalog.

    Stored files without a catalog entry are adopted first. Returns
    id, title, description and url for each video.
    """
    try:
        videos = _get_service().list_videos(base_url=settings.base_url)
    except StorageError as e:
        return {"error": str(e)}
    return [v.summary() for v in videos]


@mcp.tool(annotations={"readOnlyHint": True})
def get_video(video_id: str) -> dict:
    """Get full details for a video.

    Args:
        video_id: Catalog id of the video.
    """
    try:
        return _video_details(_get_service().get_video(video_id))
    except (VideoNotFoundError, StorageError) as e:
        return {"error": str(e)}


@mcp.tool(annotations={"readOnlyHint": False, "idempotentHint": True})
def update_video(video_id: str, title: str | None = None, description: str | None = None) -> dict:
    """Change a video's title and/or description. Other fields are untouched.

    Args:
        video_id: Catalog id of the video.
        title: New title, if changing.
        description: New description, if changing.
    """
    try:
        return _video_details(_get_service().update_video(video_id, title=title, description=description))
    except (VideoNotFoundError, VideoValidationError, StorageError) as e:
        return {"error": str(e)}


@mcp.tool(annotations={"destructiveHint": True})
def delete_video(video_id: str) -> dict:
    """Remove a video from the catalog and delete its file.

    Args:
        video_id: Catalog id of the video.
    """
    try:
        _get_service().delete_video(video_id)
        return {"status": "deleted", "video_id": video_id}
    except (VideoNotFoundError, StorageError) as e:
        return {"error": str(e)}


@mcp.tool(annotations={"readOnlyHint": False, "idempotentHint": True})
def sync_videos() -> dict:
    """Adopt stored video files that have no catalog entry."""
    try:
        adopted = _get_service().sync(base_url=settings.base_url)
    except StorageError as e:
        return {"error": str(e)}
    return {"adopted": [v.summary() for v in adopted]}


@mcp.custom_route(UPLOADS_ROUTE + "/{filename}", methods=["GET"])
async def serve_upload(request: Request) -> Response:
    """Stream a locally stored video with a content type matching its extension."""
    filename = request.path_params["filename"]
    blobs = _get_service().blobs
    path = blobs.resolve(filename) if isinstance(blobs, LocalBlobRepository) else None
    if path is None:
        return JSONResponse({"success": False, "message": "Video not found"}, status_code=404)
    return FileResponse(
        path,
        media_type=content_type_for(filename),
        headers={"Cache-Control": "public, max-age=31536000"},
    )
