"""YouTube strategies: youtube-transcript-api, Data API v3 and the watch page."""

import asyncio
import html as html_lib
import json
import logging
import re

import httpx
from youtube_transcript_api import YouTubeTranscriptApi
from youtube_transcript_api._errors import (
    AgeRestricted,
    InvalidVideoId,
    IpBlocked,
    NoTranscriptFound,
    RequestBlocked,
    TranscriptsDisabled,
    VideoUnavailable,
    VideoUnplayable,
)
from youtube_transcript_api.proxies import GenericProxyConfig

from content_extractor.config import Settings
from content_extractor.errors import ParseFailure, PrivateContent, QuotaExceeded, RateLimited, classify_status
from content_extractor.extraction.transcript import BROWSER_HEADERS
from content_extractor.models.content import PageMetadata

logger = logging.getLogger(__name__)

DATA_API_URL = "https://www.googleapis.com/youtube/v3/videos"
DATA_API_TIMEOUT = 10.0
WATCH_PAGE_TIMEOUT = 10.0


def _fetch_transcript(settings: Settings, video_id: str) -> str | None:
    proxy_url = settings.youtube_proxy_url
    proxy_config = GenericProxyConfig(https_url=proxy_url) if proxy_url else None
    ytt_api = YouTubeTranscriptApi(proxy_config=proxy_config)
    try:
        transcript = ytt_api.fetch(video_id, languages=settings.transcript_language_list)
    except NoTranscriptFound:
        # None in the preferred languages: take whatever track exists
        available = next(iter(ytt_api.list(video_id)), None)
        if available is None:
            return None
        transcript = available.fetch()
    return " ".join(snippet.text for snippet in transcript).strip() or None


async def fetch_transcript(video_id: str, settings: Settings) -> str | None:
    """Transcript text via youtube-transcript-api.

    Disabled captions are a soft miss (None); blocking and unavailable videos
    are raised as classified errors.
    """
    try:
        return await asyncio.to_thread(_fetch_transcript, settings, video_id)
    except TranscriptsDisabled:
        logger.info("Transcripts disabled for %s", video_id)
        return None
    except (RequestBlocked, IpBlocked) as exc:
        raise RateLimited(f"YouTube blocked transcript request: {type(exc).__name__}") from exc
    except (AgeRestricted, VideoUnplayable) as exc:
        raise PrivateContent(f"Video {video_id} is not playable: {type(exc).__name__}") from exc
    except (VideoUnavailable, InvalidVideoId) as exc:
        raise ParseFailure(f"Video {video_id} unavailable: {type(exc).__name__}") from exc


async def fetch_data_api_metadata(video_id: str, api_key: str) -> PageMetadata | None:
    """Snippet title and description from the YouTube Data API v3."""
    params = {"part": "snippet", "id": video_id, "key": api_key}
    async with httpx.AsyncClient(timeout=DATA_API_TIMEOUT) as client:
        resp = await client.get(DATA_API_URL, params=params)

    if resp.status_code == 403:
        raise QuotaExceeded("YouTube Data API quota exceeded or key rejected")
    if resp.status_code != 200:
        raise classify_status(resp.status_code, f"YouTube Data API returned {resp.status_code}")

    items = resp.json().get("items") or []
    if not items:
        return None
    snippet = items[0].get("snippet") or {}
    if not snippet.get("title") and not snippet.get("description"):
        return None
    return PageMetadata(title=snippet.get("title"), description=snippet.get("description"))


def _video_details(html: str) -> dict:
    start = html.find('"videoDetails":')
    if start == -1:
        return {}
    try:
        data, _ = json.JSONDecoder().raw_decode(html, start + len('"videoDetails":'))
    except json.JSONDecodeError:
        return {}
    return data if isinstance(data, dict) else {}


def parse_watch_page(html: str) -> PageMetadata:
    """Title, author and description from watch-page HTML.

    Tries multiple sources for each field since YouTube's HTML changes frequently.
    """
    details = _video_details(html)
    title = details.get("title")
    description = details.get("shortDescription")

    # og:title is the most reliable tag-based source
    if not title:
        m = re.search(r'<meta property="og:title" content="([^"]*)"', html)
        if m:
            title = html_lib.unescape(m.group(1))
    if not description:
        m = re.search(r'<meta property="og:description" content="([^"]*)"', html)
        if m:
            description = html_lib.unescape(m.group(1))

    # JSON patterns first; itemprop="name" is last since it often matches the title
    author = details.get("author")
    if not author:
        author_patterns = [
            r'"ownerChannelName":"([^"]*)"',
            r'"channelName":"([^"]*)"',
            r'<meta name="author" content="([^"]*)"',
            r'<link itemprop="name" content="([^"]*)"',
        ]
        for pattern in author_patterns:
            m = re.search(pattern, html)
            if m and m.group(1):
                author = m.group(1)
                break

    extra = [f"Channel: {author}"] if author else []
    return PageMetadata(title=title or None, description=description or None, extra_texts=extra)


async def fetch_watch_page_details(video_id: str) -> PageMetadata:
    """Fetch the watch page and parse its video details."""
    url = f"https://www.youtube.com/watch?v={video_id}"
    async with httpx.AsyncClient(follow_redirects=True, timeout=WATCH_PAGE_TIMEOUT) as client:
        resp = await client.get(url, headers=BROWSER_HEADERS)
        resp.raise_for_status()
    return parse_watch_page(resp.text)
