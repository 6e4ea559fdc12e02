"""Remote transcription: URL-based services and the OpenAI Whisper API."""

import logging
from dataclasses import dataclass, field
from pathlib import Path

import httpx
from openai import AsyncOpenAI, OpenAIError

from content_extractor.config import Settings
from content_extractor.models.content import PlatformKind

logger = logging.getLogger(__name__)

MIN_TRANSCRIPT_LENGTH = 50
SERVICE_TIMEOUT = 60.0
WHISPER_MODEL = "whisper-1"


@dataclass(frozen=True)
class TranscriptionService:
    """A service that transcribes a video given only its URL."""

    name: str
    endpoint: str
    headers: dict[str, str] = field(default_factory=dict)
    send_platform: bool = False


def configured_services(settings: Settings) -> list[TranscriptionService]:
    """Services with credentials present, in fixed priority order."""
    services = []
    if settings.teamlogs_api_key:
        services.append(
            TranscriptionService(
                name="teamlogs",
                endpoint="https://api.teamlogs.ru/v1/transcribe",
                headers={"Authorization": f"Bearer {settings.teamlogs_api_key}"},
            )
        )
    if settings.audio_transcription_api_key:
        services.append(
            TranscriptionService(
                name="audio-transcription",
                endpoint="https://api.audio-transcription.ru/v1/transcribe",
                headers={"X-API-Key": settings.audio_transcription_api_key},
            )
        )
    if settings.transcription_api_key and settings.transcription_api_url:
        services.append(
            TranscriptionService(
                name="custom",
                endpoint=settings.transcription_api_url,
                headers={"Authorization": f"Bearer {settings.transcription_api_key}"},
                send_platform=True,
            )
        )
    return services


async def transcribe_via_services(url: str, platform: PlatformKind, settings: Settings) -> str | None:
    """Try each configured URL-based service. Failures fall through to the next one."""
    for service in configured_services(settings):
        payload = {"url": url, "language": settings.transcription_language}
        if service.send_platform:
            payload["platform"] = platform.value
        try:
            async with httpx.AsyncClient(timeout=SERVICE_TIMEOUT) as client:
                resp = await client.post(service.endpoint, headers=service.headers, json=payload)
            if not resp.is_success:
                logger.warning("Transcription service %s returned %d", service.name, resp.status_code)
                continue
            text = (resp.json().get("text") or "").strip()
        except (httpx.HTTPError, ValueError, AttributeError) as exc:
            logger.warning("Transcription service %s failed: %s", service.name, exc)
            continue
        if len(text) > MIN_TRANSCRIPT_LENGTH:
            logger.info("Got transcript from %s (%d chars)", service.name, len(text))
            return text
    return None


async def transcribe_with_openai(audio_path: Path, settings: Settings) -> str | None:
    """Transcribe a WAV file with the hosted Whisper model."""
    try:
        async with AsyncOpenAI(api_key=settings.openai_api_key) as client:
            with open(audio_path, "rb") as fh:
                result = await client.audio.transcriptions.create(
                    model=WHISPER_MODEL,
                    file=fh,
                    language=settings.transcription_language,
                )
    except OpenAIError as exc:
        logger.warning("OpenAI transcription failed: %s", exc)
        return None
    return (result.text or "").strip() or None
