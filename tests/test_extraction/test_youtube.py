"""Tests for YouTube strategies (mocked youtube-transcript-api and httpx)."""

import json
from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import pytest
from youtube_transcript_api._errors import (
    NoTranscriptFound,
    RequestBlocked,
    TranscriptsDisabled,
    VideoUnavailable,
)

from content_extractor.errors import ParseFailure, QuotaExceeded, RateLimited
from content_extractor.extraction.youtube import (
    fetch_data_api_metadata,
    fetch_transcript,
    parse_watch_page,
)

VIDEO_ID = "dQw4w9WgXcQ"


# --- youtube-transcript-api (async) ---


@pytest.mark.asyncio
async def test_fetch_transcript_success(settings):
    """Snippets are joined with spaces; preferred languages are requested."""
    snippets = [
        SimpleNamespace(text="Hello world"),
        SimpleNamespace(text="this is a test"),
    ]
    mock_api = MagicMock()
    mock_api.fetch.return_value = snippets

    with patch("content_extractor.extraction.youtube.YouTubeTranscriptApi", return_value=mock_api):
        result = await fetch_transcript(VIDEO_ID, settings)

    assert result == "Hello world this is a test"
    mock_api.fetch.assert_called_once_with(VIDEO_ID, languages=["ru", "en", "uk"])


@pytest.mark.asyncio
async def test_fetch_transcript_any_language_fallback(settings):
    """NoTranscriptFound in preferred languages falls back to any available track."""
    mock_api = MagicMock()
    mock_api.fetch.side_effect = NoTranscriptFound(VIDEO_ID, ["ru"], "No transcript found")
    german = MagicMock()
    german.fetch.return_value = [SimpleNamespace(text="Hallo Welt")]
    mock_api.list.return_value = [german]

    with patch("content_extractor.extraction.youtube.YouTubeTranscriptApi", return_value=mock_api):
        result = await fetch_transcript(VIDEO_ID, settings)

    assert result == "Hallo Welt"


@pytest.mark.asyncio
async def test_fetch_transcript_disabled_is_soft_miss(settings):
    mock_api = MagicMock()
    mock_api.fetch.side_effect = TranscriptsDisabled(VIDEO_ID)

    with patch("content_extractor.extraction.youtube.YouTubeTranscriptApi", return_value=mock_api):
        assert await fetch_transcript(VIDEO_ID, settings) is None


@pytest.mark.asyncio
async def test_fetch_transcript_blocked_is_rate_limited(settings):
    mock_api = MagicMock()
    mock_api.fetch.side_effect = RequestBlocked(VIDEO_ID)

    with patch("content_extractor.extraction.youtube.YouTubeTranscriptApi", return_value=mock_api):
        with pytest.raises(RateLimited):
            await fetch_transcript(VIDEO_ID, settings)


@pytest.mark.asyncio
async def test_fetch_transcript_unavailable(settings):
    mock_api = MagicMock()
    mock_api.fetch.side_effect = VideoUnavailable(VIDEO_ID)

    with patch("content_extractor.extraction.youtube.YouTubeTranscriptApi", return_value=mock_api):
        with pytest.raises(ParseFailure):
            await fetch_transcript(VIDEO_ID, settings)


@pytest.mark.asyncio
async def test_fetch_transcript_uses_proxy_config(settings):
    settings.youtube_proxy_url = "http://proxy:8080"
    mock_api = MagicMock()
    mock_api.fetch.return_value = [SimpleNamespace(text="proxied")]

    with (
        patch("content_extractor.extraction.youtube.YouTubeTranscriptApi", return_value=mock_api) as api_cls,
        patch("content_extractor.extraction.youtube.GenericProxyConfig") as proxy_cls,
    ):
        await fetch_transcript(VIDEO_ID, settings)

    proxy_cls.assert_called_once_with(https_url="http://proxy:8080")
    assert api_cls.call_args.kwargs["proxy_config"] is proxy_cls.return_value


# --- YouTube Data API (mocked httpx) ---


@pytest.mark.asyncio
async def test_data_api_metadata(mock_http):
    body = {"items": [{"snippet": {"title": "T", "description": "D"}}]}
    mock_ctx, mock_client = mock_http(json_data=body)

    with patch("content_extractor.extraction.youtube.httpx.AsyncClient", return_value=mock_ctx):
        result = await fetch_data_api_metadata(VIDEO_ID, "key")

    assert result.title == "T"
    assert result.description == "D"
    assert mock_client.get.call_args.kwargs["params"] == {"part": "snippet", "id": VIDEO_ID, "key": "key"}


@pytest.mark.asyncio
async def test_data_api_no_items(mock_http):
    mock_ctx, _ = mock_http(json_data={"items": []})

    with patch("content_extractor.extraction.youtube.httpx.AsyncClient", return_value=mock_ctx):
        assert await fetch_data_api_metadata(VIDEO_ID, "key") is None


@pytest.mark.asyncio
async def test_data_api_quota_exceeded(mock_http):
    mock_ctx, _ = mock_http(status_code=403)

    with patch("content_extractor.extraction.youtube.httpx.AsyncClient", return_value=mock_ctx):
        with pytest.raises(QuotaExceeded):
            await fetch_data_api_metadata(VIDEO_ID, "key")


# --- watch page (sync) ---


def test_parse_watch_page_video_details():
    details = {"title": "Video title", "shortDescription": "Long description", "author": "Channel"}
    html = f'<script>var ytInitialPlayerResponse = {{"videoDetails":{json.dumps(details)}}};</script>'

    result = parse_watch_page(html)

    assert result.title == "Video title"
    assert result.description == "Long description"
    assert result.extra_texts == ["Channel: Channel"]


def test_parse_watch_page_og_tags():
    html = (
        '<meta property="og:title" content="Tom &amp; Jerry">'
        '<meta property="og:description" content="Cartoon">'
        '"ownerChannelName":"Classics"'
    )

    result = parse_watch_page(html)

    assert result.title == "Tom & Jerry"
    assert result.description == "Cartoon"
    assert result.extra_texts == ["Channel: Classics"]


def test_parse_watch_page_empty():
    assert parse_watch_page("<html></html>").is_empty
