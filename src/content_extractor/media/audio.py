"""Audio track extraction with ffmpeg."""

import logging
from pathlib import Path

from content_extractor.errors import ErrorKind, MediaPipelineError
from content_extractor.media.process import run_process

logger = logging.getLogger(__name__)


async def extract_audio(video_path: Path, audio_path: Path, ffmpeg_path: str) -> Path:
    """Convert ``video_path`` to mono 16 kHz 16-bit PCM WAV."""
    result = await run_process(
        ffmpeg_path,
        "-y",
        "-i", str(video_path),
        "-vn",
        "-acodec", "pcm_s16le",
        "-ar", "16000",
        "-ac", "1",
        str(audio_path),
    )
    if not result.ok:
        raise MediaPipelineError("audio", result.stderr.strip()[-500:] or "ffmpeg failed", ErrorKind.PARSE_FAILURE)
    if not audio_path.is_file() or audio_path.stat().st_size == 0:
        raise MediaPipelineError("audio", "ffmpeg produced no audio", ErrorKind.PARSE_FAILURE)
    logger.info("Extracted audio to %s", audio_path.name)
    return audio_path
