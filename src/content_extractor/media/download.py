"""Video download: direct media URL resolution first, yt-dlp command line second."""

import asyncio
import logging
from pathlib import Path

import httpx
from yt_dlp import YoutubeDL
from yt_dlp.utils import DownloadError

from content_extractor.errors import ErrorKind, ExtractionError, MediaPipelineError, classify_exception
from content_extractor.media.process import cookie_args, run_ytdlp
from content_extractor.models.content import PlatformKind

logger = logging.getLogger(__name__)

STREAM_TIMEOUT = httpx.Timeout(60.0, connect=15.0)
CHUNK_SIZE = 1024 * 256
PROGRESSIVE_PROTOCOLS = ("http", "https")


def resolve_media_url(url: str, cookies_path: str | None = None) -> tuple[str, dict[str, str]] | None:
    """Ask yt-dlp for a single progressive media URL without downloading.

    Returns ``(media_url, http_headers)``, or None when only split or
    streaming-manifest (HLS, DASH) formats exist.
    """
    options = {
        "quiet": True,
        "no_warnings": True,
        "noplaylist": True,
        "format": "best[protocol^=http][ext=mp4]/best[protocol^=http]",
    }
    if cookies_path:
        options["cookiefile"] = cookies_path
    with YoutubeDL(options) as ydl:
        info = ydl.extract_info(url, download=False)
    if not info or not info.get("url"):
        return None
    # A manifest URL would be saved as the "video"
    if info.get("protocol") not in PROGRESSIVE_PROTOCOLS:
        logger.info("No progressive format for %s (protocol %s)", url, info.get("protocol"))
        return None
    return info["url"], dict(info.get("http_headers") or {})


async def _stream_to_file(media_url: str, headers: dict[str, str], output_path: Path) -> None:
    async with httpx.AsyncClient(follow_redirects=True, timeout=STREAM_TIMEOUT) as client:
        async with client.stream("GET", media_url, headers=headers) as response:
            response.raise_for_status()
            with open(output_path, "wb") as fh:
                async for chunk in response.aiter_bytes(CHUNK_SIZE):
                    fh.write(chunk)


async def download_direct(url: str, output_path: Path, cookies_path: str | None = None) -> bool:
    """Resolve and stream the media file. False when no direct URL exists."""
    resolved = await asyncio.to_thread(resolve_media_url, url, cookies_path)
    if resolved is None:
        return False
    media_url, headers = resolved
    await _stream_to_file(media_url, headers, output_path)
    return True


async def download_with_cli(
    url: str,
    output_path: Path,
    platform: PlatformKind,
    cookies_path: str | None = None,
    ffmpeg_path: str | None = None,
) -> None:
    args = [
        "-f", "bestvideo*+bestaudio/best",
        "--merge-output-format", "mp4",
        "--no-playlist",
        "--no-warnings",
        "-o", str(output_path),
        *cookie_args(cookies_path),
    ]
    if ffmpeg_path:
        args += ["--ffmpeg-location", ffmpeg_path]
    if platform is PlatformKind.VK:
        args.append("--no-check-certificate")
    args.append(url)
    await run_ytdlp(*args)


async def download_video(
    url: str,
    output_path: Path,
    platform: PlatformKind,
    *,
    cookies_path: str | None = None,
    ffmpeg_path: str | None = None,
) -> Path:
    """Download the video behind ``url`` to ``output_path``.

    Raises MediaPipelineError(stage="download") when both methods fail or the
    file ends up missing or empty.
    """
    try:
        downloaded = await download_direct(url, output_path, cookies_path)
    except (DownloadError, httpx.HTTPError, OSError) as exc:
        logger.info("Direct download failed for %s, trying yt-dlp CLI: %s", url, exc)
        downloaded = False

    if not downloaded:
        output_path.unlink(missing_ok=True)
        try:
            await download_with_cli(url, output_path, platform, cookies_path, ffmpeg_path)
        except ExtractionError as exc:
            raise MediaPipelineError("download", str(exc), exc.kind) from exc
        except OSError as exc:
            error = classify_exception(exc)
            raise MediaPipelineError("download", str(error), error.kind) from exc

    if not output_path.is_file() or output_path.stat().st_size == 0:
        raise MediaPipelineError("download", "downloaded file is missing or empty", ErrorKind.PARSE_FAILURE)

    logger.info("Downloaded %s (%d bytes)", output_path.name, output_path.stat().st_size)
    return output_path
