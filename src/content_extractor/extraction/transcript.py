"""Caption-track discovery and timed-text download/parsing."""

import json
import logging
import re

import httpx

from content_extractor.models.content import CaptionTrack

logger = logging.getLogger(__name__)

BROWSER_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
    ),
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "ru-RU,ru;q=0.9,en;q=0.8",
    "Referer": "https://www.youtube.com/",
}
DOWNLOAD_TIMEOUT = 15.0

_TEXT_SEGMENT = re.compile(r"<text[^>]*>([^<]+)</text>")
_LOOSE_SEGMENT = re.compile(r"<(?:text|p)\b[^>]*>(.*?)</(?:text|p)>", re.DOTALL)
_TAG = re.compile(r"<[^>]+>")
_ENTITIES = {"&amp;": "&", "&lt;": "<", "&gt;": ">", "&quot;": '"', "&#39;": "'"}
_ENTITY = re.compile("|".join(re.escape(entity) for entity in _ENTITIES))
_UNICODE_ESCAPE = re.compile(r"\\u([0-9a-fA-F]{4})")

_PLAYER_RESPONSE_MARKERS = ("ytInitialPlayerResponse = ", "ytInitialPlayerResponse=", '"playerResponse":')
_CAPTION_PATHS = (
    ("captions", "playerCaptionsTracklistRenderer", "captionTracks"),
    ("playerCaptionsTracklistRenderer", "captionTracks"),
    ("captionTracks",),
)
_BASE_URL = re.compile(r'"baseUrl":"([^"]*timedtext[^"]*)"')


def unescape_entities(text: str) -> str:
    """Replace the five XML entities in a single pass (``&amp;lt;`` stays ``&lt;``)."""
    return _ENTITY.sub(lambda m: _ENTITIES[m.group(0)], text)


def decode_unicode_escapes(text: str) -> str:
    """Decode ``\\uXXXX`` escapes as found in URLs embedded in page JSON."""
    return _UNICODE_ESCAPE.sub(lambda m: chr(int(m.group(1), 16)), text)


def _join_segments(raw_segments: list[str]) -> str:
    segments = (unescape_entities(segment).strip() for segment in raw_segments)
    return " ".join(segment for segment in segments if segment)


def parse_timed_text(xml: str) -> str | None:
    """Flatten a timed-text XML document to plain text.

    ``<text>`` segments first; if none match, ``<text>``/``<p>`` elements with
    nested markup stripped. None when no non-empty segment exists.
    """
    text = _join_segments(_TEXT_SEGMENT.findall(xml))
    if not text:
        loose = [_TAG.sub("", segment) for segment in _LOOSE_SEGMENT.findall(xml)]
        text = _join_segments(loose)
    return text or None


async def download(track: CaptionTrack) -> str | None:
    """Download and parse a caption track. Soft failures return None."""
    url = decode_unicode_escapes(track.locator_url)
    try:
        async with httpx.AsyncClient(follow_redirects=True, timeout=DOWNLOAD_TIMEOUT) as client:
            resp = await client.get(url, headers=BROWSER_HEADERS)
    except httpx.HTTPError as exc:
        logger.info("Caption download failed: %s", exc)
        return None

    if resp.status_code != 200:
        logger.info("Caption download returned %d", resp.status_code)
        return None
    body = resp.text
    if "<text" not in body and "<timedtext" not in body:
        logger.info("Caption response is not timed-text XML (%d bytes)", len(body))
        return None
    return parse_timed_text(body)


def _player_response(html: str) -> dict | None:
    decoder = json.JSONDecoder()
    for marker in _PLAYER_RESPONSE_MARKERS:
        start = html.find(marker)
        if start == -1:
            continue
        try:
            data, _ = decoder.raw_decode(html, start + len(marker))
        except json.JSONDecodeError:
            continue
        if isinstance(data, dict):
            return data
    return None


def _tracks_from_player_response(data: dict) -> list[CaptionTrack]:
    for path in _CAPTION_PATHS:
        node = data
        for key in path:
            node = node.get(key) if isinstance(node, dict) else None
        if isinstance(node, list) and node:
            return [
                CaptionTrack(locator_url=track["baseUrl"], language_code=track.get("languageCode"))
                for track in node
                if isinstance(track, dict) and track.get("baseUrl")
            ]
    return []


def find_caption_tracks(html: str) -> list[CaptionTrack]:
    """Locate caption tracks in a watch page's embedded player data."""
    data = _player_response(html)
    if data is not None:
        tracks = _tracks_from_player_response(data)
        if tracks:
            return tracks

    # Fallback: any timedtext URL anywhere in the page
    return [CaptionTrack(locator_url=match) for match in dict.fromkeys(_BASE_URL.findall(html))]


def select_track(tracks: list[CaptionTrack], languages: list[str]) -> CaptionTrack | None:
    """Prefer tracks in ``languages`` order, otherwise the first one."""
    for language in languages:
        for track in tracks:
            if track.language_code and track.language_code.split("-")[0] == language:
                return track
    return tracks[0] if tracks else None


async def fetch_caption_tracks(video_id: str) -> list[CaptionTrack]:
    """Fetch the watch page over plain HTTP and list its caption tracks."""
    url = f"https://www.youtube.com/watch?v={video_id}"
    async with httpx.AsyncClient(follow_redirects=True, timeout=DOWNLOAD_TIMEOUT) as client:
        resp = await client.get(url, headers=BROWSER_HEADERS)
        resp.raise_for_status()
    return find_caption_tracks(resp.text)


async def transcript_from_html(html: str, languages: list[str]) -> str | None:
    """Discover, select and download a caption track from page HTML."""
    track = select_track(find_caption_tracks(html), languages)
    if track is None:
        logger.info("No caption tracks in page")
        return None
    return await download(track)
