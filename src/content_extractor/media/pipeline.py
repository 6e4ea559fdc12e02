"""Media acquisition and transcription pipeline.

    URL services -> download -> ffmpeg (mono 16 kHz WAV) -> Whisper API -> local model

Every run gets its own directory under ``<tempdir>/video-transcription``,
prefixed with the video id, and the directory is removed on every exit path.
Concurrent runs for the same URL never touch each other's files.
"""

import asyncio
import logging
import tempfile
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from content_extractor.capabilities import Capabilities, get_capabilities
from content_extractor.config import Settings, get_settings
from content_extractor.errors import ErrorKind, MediaPipelineError
from content_extractor.media.audio import extract_audio
from content_extractor.media.download import download_video
from content_extractor.media.transcribe import (
    MIN_TRANSCRIPT_LENGTH,
    transcribe_via_services,
    transcribe_with_openai,
)
from content_extractor.models.content import PlatformKind

logger = logging.getLogger(__name__)

TEMP_DIR_NAME = "video-transcription"
VIDEO_FILENAME = "video.mp4"
AUDIO_FILENAME = "audio.wav"


def media_root() -> Path:
    root = Path(tempfile.gettempdir()) / TEMP_DIR_NAME
    root.mkdir(parents=True, exist_ok=True)
    return root


@contextmanager
def media_workspace(media_id: str) -> Iterator[Path]:
    """A private directory for one pipeline run, removed with everything in it."""
    with tempfile.TemporaryDirectory(prefix=f"{media_id}-", dir=media_root(), ignore_cleanup_errors=True) as tmp:
        yield Path(tmp)


async def speech_to_text(audio_path: Path, settings: Settings, capabilities: Capabilities) -> str | None:
    if settings.openai_api_key:
        text = await transcribe_with_openai(audio_path, settings)
        if text:
            return text
    if capabilities.local_speech_model is not None:
        return await asyncio.to_thread(
            capabilities.local_speech_model.transcribe, audio_path, settings.transcription_language
        )
    return None


async def transcribe_video(
    url: str,
    platform: PlatformKind,
    *,
    media_id: str | None = None,
    settings: Settings | None = None,
    capabilities: Capabilities | None = None,
) -> str:
    """Produce a transcript for the video at ``url``.

    ``media_id`` names the temp directory (the platform video id when known).
    Raises MediaPipelineError naming the failing stage.
    """
    settings = settings or get_settings()
    capabilities = capabilities or get_capabilities()

    text = await transcribe_via_services(url, platform, settings)
    if text:
        return text

    if not capabilities.ffmpeg_path:
        raise MediaPipelineError("audio", "ffmpeg is not available")
    if not settings.openai_api_key and capabilities.local_speech_model is None:
        raise MediaPipelineError("transcription", "no speech-to-text engine configured")

    with media_workspace(media_id or platform.value) as workspace:
        video_path = workspace / VIDEO_FILENAME
        audio_path = workspace / AUDIO_FILENAME
        await download_video(
            url,
            video_path,
            platform,
            cookies_path=capabilities.cookies_path,
            ffmpeg_path=capabilities.ffmpeg_path,
        )
        await extract_audio(video_path, audio_path, capabilities.ffmpeg_path)
        try:
            text = await speech_to_text(audio_path, settings, capabilities)
        except (RuntimeError, ValueError, OSError) as exc:
            raise MediaPipelineError("transcription", str(exc)) from exc
    if not text or len(text.strip()) <= MIN_TRANSCRIPT_LENGTH:
        raise MediaPipelineError("transcription", "transcript is empty or too short", ErrorKind.PARSE_FAILURE)
    logger.info("Transcribed %s video (%d chars)", platform.value, len(text))
    return text.strip()
