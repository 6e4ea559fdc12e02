"""URL pattern matching and platform classification."""

import hashlib
import re

from content_extractor.models.content import PlatformKind

# Ordered table: first matching platform wins, unknown URLs are articles
_PLATFORM_PATTERNS: tuple[tuple[PlatformKind, tuple[re.Pattern, ...]], ...] = (
    (
        PlatformKind.YOUTUBE,
        (
            re.compile(
                r"(?:https?://)?(?:www\.|m\.)?(?:youtube\.com|youtu\.be)/"
                r"(?:watch\?v=|embed/|v/|shorts/|.+\?v=)?([^\"&?/\s]{11})"
            ),
        ),
    ),
    (
        PlatformKind.VK,
        (
            re.compile(r"(?:https?://)?(?:www\.|m\.)?(?:vk\.com|vkontakte\.ru)/video(-?\d+_\d+)"),
            re.compile(r"(?:https?://)?(?:www\.|m\.)?vk\.com/.*video"),
            re.compile(r"(?:https?://)?(?:www\.)?vkvideo\.ru/video(-?\d+_\d+)"),
        ),
    ),
    (
        PlatformKind.TIKTOK,
        (re.compile(r"(?:https?://)?(?:www\.|vm\.)?tiktok\.com/.+"),),
    ),
    (
        PlatformKind.RUTUBE,
        (re.compile(r"(?:https?://)?(?:www\.)?rutube\.ru/video/([a-zA-Z0-9]+)"),),
    ),
    (
        PlatformKind.DZEN,
        (
            re.compile(r"(?:https?://)?(?:www\.)?dzen\.ru/video/watch/([a-zA-Z0-9]+)"),
            re.compile(r"(?:https?://)?(?:www\.)?dzen\.ru/video/([a-zA-Z0-9]+)"),
        ),
    ),
    (
        PlatformKind.YANDEX,
        (re.compile(r"(?:https?://)?(?:www\.)?yandex\.ru/video/(?:search|preview)\?.*"),),
    ),
    (
        PlatformKind.INSTAGRAM,
        (re.compile(r"(?:https?://)?(?:www\.)?instagram\.com/(?:reel|p)/([a-zA-Z0-9_-]+)"),),
    ),
    (
        PlatformKind.FACEBOOK,
        (re.compile(r"(?:https?://)?(?:www\.)?(?:facebook\.com|fb\.com)/watch/?.*"),),
    ),
    (
        PlatformKind.TWITTER,
        (re.compile(r"(?:https?://)?(?:www\.)?(?:twitter\.com|x\.com)/.+/status/\d+"),),
    ),
)

# Platform-specific id patterns; the id prefixes the media pipeline's temp directory
_VIDEO_ID_PATTERNS: dict[PlatformKind, tuple[re.Pattern, ...]] = {
    PlatformKind.YOUTUBE: (
        re.compile(r"(?:youtube\.com/watch\?v=|youtu\.be/|youtube\.com/embed/|youtube\.com/shorts/)([^&\n?#]+)"),
    ),
    PlatformKind.VK: (
        re.compile(r"vk\.com/video(-?\d+_\d+)"),
        re.compile(r"vkvideo\.ru/video(-?\d+_\d+)"),
        re.compile(r"vkontakte\.ru/video(-?\d+_\d+)"),
    ),
    PlatformKind.RUTUBE: (re.compile(r"rutube\.ru/video/([a-zA-Z0-9]+)"),),
    PlatformKind.TIKTOK: (re.compile(r"tiktok\.com/.+/video/(\d+)"),),
    PlatformKind.DZEN: (
        re.compile(r"dzen\.ru/video/watch/([a-zA-Z0-9]+)"),
        re.compile(r"dzen\.ru/video/([a-zA-Z0-9]+)"),
    ),
    PlatformKind.INSTAGRAM: (re.compile(r"instagram\.com/(?:reel|p)/([a-zA-Z0-9_-]+)"),),
    PlatformKind.TWITTER: (re.compile(r"(?:twitter\.com|x\.com)/.+/status/(\d+)"),),
}

YOUTUBE_VIDEO_ID_PATTERN = re.compile(
    r"(?:youtube\.com/(?:watch\?.*v=|shorts/|embed/|v/)|youtu\.be/)([a-zA-Z0-9_-]{11})"
)
YOUTUBE_PLAYLIST_PATTERN = re.compile(r"^https?://(?:www\.)?youtube\.com/(?:playlist|watch).*list=([^&\n?#]+)")


def classify(url: str) -> PlatformKind:
    """Classify a URL by platform. Unknown URLs are PlatformKind.NONE (article)."""
    for platform, patterns in _PLATFORM_PATTERNS:
        if any(pattern.search(url) for pattern in patterns):
            return platform
    return PlatformKind.NONE


def extract_youtube_id(url: str) -> str | None:
    """Extract the 11-character video ID from a YouTube URL.

    Handles: youtube.com/watch?v=, youtu.be/, youtube.com/shorts/, youtube.com/embed/
    Also handles URLs with additional query params (e.g., &t=123, &list=PLxxx).
    """
    match = YOUTUBE_VIDEO_ID_PATTERN.search(url)
    return match.group(1) if match else None


def extract_video_id(url: str, platform: PlatformKind) -> str:
    """Return a filesystem-safe identifier for the video behind ``url``.

    Falls back to a hash of the URL when the platform has no id pattern or
    none matches, so the result is always deterministic and non-empty.
    """
    for pattern in _VIDEO_ID_PATTERNS.get(platform, ()):
        match = pattern.search(url)
        if match and match.group(1):
            return re.sub(r"[^a-zA-Z0-9]", "_", match.group(1))
    return url_digest(url)


def url_digest(url: str, length: int = 20) -> str:
    return hashlib.sha256(url.encode("utf-8")).hexdigest()[:length]


def is_youtube_playlist(url: str) -> bool:
    return bool(YOUTUBE_PLAYLIST_PATTERN.search(url))
