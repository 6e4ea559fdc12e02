"""Tests for URL transcription services and the Whisper API client (mocked)."""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest
from openai import OpenAIError

from content_extractor.config import Settings
from content_extractor.media.transcribe import (
    configured_services,
    transcribe_via_services,
    transcribe_with_openai,
)
from content_extractor.models.content import PlatformKind

URL = "https://vk.com/video-12345_67890"
TRANSCRIPT = "A transcript long enough to be accepted from a remote transcription service."


def _response(status_code=200, json_data=None):
    resp = MagicMock()
    resp.status_code = status_code
    resp.is_success = 200 <= status_code < 300
    resp.json.return_value = json_data or {}
    return resp


def _client_ctx(*results):
    client = AsyncMock()
    client.post.side_effect = list(results)
    ctx = AsyncMock()
    ctx.__aenter__ = AsyncMock(return_value=client)
    ctx.__aexit__ = AsyncMock(return_value=False)
    return ctx, client


def _all_services() -> Settings:
    return Settings(
        _env_file=None,
        teamlogs_api_key="t",
        audio_transcription_api_key="a",
        transcription_api_key="c",
        transcription_api_url="https://stt.example.com/transcribe",
    )


def test_configured_services_order():
    services = configured_services(_all_services())
    assert [s.name for s in services] == ["teamlogs", "audio-transcription", "custom"]
    assert services[0].headers == {"Authorization": "Bearer t"}
    assert services[1].headers == {"X-API-Key": "a"}
    assert services[2].send_platform is True


def test_custom_service_needs_url():
    settings = Settings(_env_file=None, transcription_api_key="c")
    assert configured_services(settings) == []


@pytest.mark.asyncio
async def test_services_fall_through_in_order():
    ctx, client = _client_ctx(
        _response(500),
        httpx.ConnectError("refused"),
        _response(200, {"text": TRANSCRIPT}),
    )

    with patch("content_extractor.media.transcribe.httpx.AsyncClient", return_value=ctx):
        result = await transcribe_via_services(URL, PlatformKind.VK, _all_services())

    assert result == TRANSCRIPT
    endpoints = [call.args[0] for call in client.post.call_args_list]
    assert endpoints[-1] == "https://stt.example.com/transcribe"
    assert client.post.call_args.kwargs["json"] == {"url": URL, "language": "ru", "platform": "vk"}
    assert "platform" not in client.post.call_args_list[0].kwargs["json"]


@pytest.mark.asyncio
async def test_short_service_text_is_ignored():
    settings = Settings(_env_file=None, teamlogs_api_key="t")
    ctx, _ = _client_ctx(_response(200, {"text": "too short"}))

    with patch("content_extractor.media.transcribe.httpx.AsyncClient", return_value=ctx):
        assert await transcribe_via_services(URL, PlatformKind.VK, settings) is None


@pytest.mark.asyncio
async def test_no_services_configured(settings):
    assert await transcribe_via_services(URL, PlatformKind.VK, settings) is None


def _openai_client(**create_kwargs):
    client = MagicMock()
    client.__aenter__ = AsyncMock(return_value=client)
    client.__aexit__ = AsyncMock(return_value=False)
    client.audio.transcriptions.create = AsyncMock(**create_kwargs)
    return client


@pytest.mark.asyncio
async def test_openai_transcription(tmp_path):
    audio = tmp_path / "audio.wav"
    audio.write_bytes(b"RIFF")
    client = _openai_client(return_value=SimpleNamespace(text=f" {TRANSCRIPT} "))
    settings = Settings(_env_file=None, openai_api_key="sk-test")

    with patch("content_extractor.media.transcribe.AsyncOpenAI", return_value=client) as openai_cls:
        result = await transcribe_with_openai(audio, settings)

    assert result == TRANSCRIPT
    openai_cls.assert_called_once_with(api_key="sk-test")
    kwargs = client.audio.transcriptions.create.await_args.kwargs
    assert kwargs["model"] == "whisper-1"
    assert kwargs["language"] == "ru"
    client.__aexit__.assert_awaited_once()


@pytest.mark.asyncio
async def test_openai_error_returns_none(tmp_path):
    audio = tmp_path / "audio.wav"
    audio.write_bytes(b"RIFF")
    client = _openai_client(side_effect=OpenAIError("quota"))
    settings = Settings(_env_file=None, openai_api_key="sk-test")

    with patch("content_extractor.media.transcribe.AsyncOpenAI", return_value=client):
        assert await transcribe_with_openai(audio, settings) is None

    client.__aexit__.assert_awaited_once()
