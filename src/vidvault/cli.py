"""CLI interface — thin wrapper over VideoLibraryService and the FastMCP server."""

from pathlib import Path
from typing import NoReturn

import typer

from vidvault.config import settings
from vidvault.service import VideoLibraryService, VideoNotFoundError, VideoValidationError
from vidvault.storage.errors import StorageError


app = typer.Typer(
    name="vidvault",
    help="Upload, catalog, and serve video files.",
    no_args_is_help=True,
)


def _get_service() -> VideoLibraryService:
    """Create a service instance with default dependencies."""
    return VideoLibraryService.from_settings()


def _fail(e: Exception) -> NoReturn:
    typer.echo(f"❌ {e}", err=True)
    raise typer.Exit(code=1)


@app.command()
def upload(
    path: Path = typer.Argument(..., exists=True, dir_okay=False, help="Video file to upload."),
    title: str = typer.Option(..., "--title", "-t", help="Video title."),
    description: str = typer.Option("", "--description", "-d", help="Video description."),
) -> None:
    """Upload a video file into the catalog."""
    svc = _get_service()
    try:
        video = svc.upload_video(path.read_bytes(), path.name, title, description, base_url=settings.base_url)
    except (VideoValidationError, StorageError) as e:
        _fail(e)
    typer.echo(f"✅ Uploaded: {video.title}")
    typer.echo(f"   ID:   {video.id}")
    typer.echo(f"   File: {video.file_name}")
    typer.echo(f"   URL:  {video.url}")


@app.command(name="list")
def list_videos(
    sync: bool = typer.Option(True, "--sync/--no-sync", help="Adopt untracked files before listing."),
) -> None:
    """List all videos in the catalog."""
    svc = _get_service()
    try:
        videos = svc.list_videos(base_url=settings.base_url, sync=sync)
    except StorageError as e:
        _fail(e)
    if not videos:
        typer.echo("Catalog is empty. Use 'vidvault upload <path> --title <title>' to add a video.")
        return
    for i, v in enumerate(videos, 1):
        typer.echo(f"  {i}. {v.id}  {v.uploaded_at:%Y-%m-%d %H:%M}  {v.title}")


@app.command()
def info(video_id: str = typer.Argument(..., help="Video ID.")) -> None:
    """Show full details for a video."""
    svc = _get_service()
    try:
        video = svc.get_video(video_id)
    except (VideoNotFoundError, StorageError) as e:
        _fail(e)
    typer.echo(f"Title:       {video.title}")
    typer.echo(f"Description: {video.description}")
    typer.echo(f"URL:         {video.url}")
    typer.echo(f"File:        {video.file_name}")
    typer.echo(f"Stored at:   {video.stored_location}")
    typer.echo(f"Uploaded:    {video.uploaded_at.isoformat()}")


@app.command()
def update(
    video_id: str = typer.Argument(..., help="Video ID."),
    title: str | None = typer.Option(None, "--title", "-t", help="New title."),
    description: str | None = typer.Option(None, "--description", "-d", help="New description."),
) -> None:
    """Change a video's title or description."""
    svc = _get_service()
    try:
        video = svc.update_video(video_id, title=title, description=description)
    except (VideoNotFoundError, VideoValidationError, StorageError) as e:
        _fail(e)
    typer.echo(f"✏️  Updated: {video.title} ({video.id})")


@app.command()
def remove(video_id: str = typer.Argument(..., help="Video ID.")) -> None:
    """Remove a video and its file."""
    svc = _get_service()
    try:
        svc.delete_video(video_id)
    except (VideoNotFoundError, StorageError) as e:
        _fail(e)
    typer.echo(f"🗑️  Removed: {video_id}")


@app.command()
def sync() -> None:
    """Adopt stored video files that have no catalog entry."""
    svc = _get_service()
    try:
        adopted = svc.sync(base_url=settings.base_url)
    except StorageError as e:
        _fail(e)
    if not adopted:
        typer.echo("Catalog is up to date.")
        return
    typer.echo(f"🔄 Adopted {len(adopted)} video(s):")
    for v in adopted:
        typer.echo(f"   {v.id}  {v.file_name}")


@app.command()
def serve(
    stdio: bool = typer.Option(False, "--stdio", help="Use stdio transport instead of HTTP."),
    host: str = typer.Option(settings.host, "--host", help="Host to bind to."),
    port: int = typer.Option(settings.port, "--port", help="Port to bind to."),
) -> None:
    """Start the vidvault MCP server (and the file route when served over HTTP)."""
    from vidvault.server import mcp

    if stdio:
        typer.echo("Starting vidvault MCP server (stdio)...", err=True)
        mcp.run(transport="stdio")
    else:
        typer.echo(f"Starting vidvault MCP server on http://{host}:{port}/mcp")
        mcp.run(transport="streamable-http", host=host, port=port)
