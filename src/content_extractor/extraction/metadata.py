"""Metadata-only content: formatting, Open Graph fetch and the final placeholder."""

import html as html_lib
import logging
import re

import httpx

from content_extractor.models.content import PageMetadata, PlatformKind

logger = logging.getLogger(__name__)

OPEN_GRAPH_TIMEOUT = 10.0
USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)

VIDEO_DISCLAIMER = (
    "IMPORTANT: This is video metadata only ({fields}). The full video transcript "
    "is unavailable. Analysis is based ONLY on this metadata, without access to "
    "the full content of the video."
)
PAGE_DISCLAIMER = (
    "IMPORTANT: This is basic page metadata only (og:tags). The full content "
    "is unavailable."
)


def _meta_pattern(name: str) -> list[re.Pattern]:
    # Attribute order varies between sites
    return [
        re.compile(
            rf"""<meta\s+[^>]*?(?:property|name)=["']{re.escape(name)}["'][^>]*?content=["']([^"']*)["']""",
            re.IGNORECASE,
        ),
        re.compile(
            rf"""<meta\s+[^>]*?content=["']([^"']*)["'][^>]*?(?:property|name)=["']{re.escape(name)}["']""",
            re.IGNORECASE,
        ),
    ]


_OG_TITLE = _meta_pattern("og:title")
_OG_DESCRIPTION = _meta_pattern("og:description")
_TITLE = re.compile(r"<title[^>]*>([^<]+)</title>", re.IGNORECASE)


def _first_match(patterns: list[re.Pattern], html: str) -> str | None:
    for pattern in patterns:
        m = pattern.search(html)
        if m and m.group(1).strip():
            return html_lib.unescape(m.group(1).strip())
    return None


def parse_open_graph(html: str) -> PageMetadata:
    """og:title (falling back to <title>) and og:description from raw HTML."""
    title = _first_match(_OG_TITLE, html) or _first_match([_TITLE], html)
    description = _first_match(_OG_DESCRIPTION, html)
    return PageMetadata(title=title, description=description)


async def fetch_open_graph(url: str) -> PageMetadata:
    """Fetch a page over plain HTTP and read its Open Graph tags."""
    async with httpx.AsyncClient(follow_redirects=True, timeout=OPEN_GRAPH_TIMEOUT) as client:
        resp = await client.get(url, headers={"User-Agent": USER_AGENT})
        resp.raise_for_status()
    return parse_open_graph(resp.text)


def format_metadata(metadata: PageMetadata, *, page_only: bool = False) -> str | None:
    """Render metadata as labelled text followed by a metadata-only disclaimer.

    None when there is nothing to render.
    """
    if metadata.is_empty:
        return None

    parts = []
    if metadata.title:
        parts.append(f"Title: {metadata.title}")
    if metadata.description:
        parts.append(f"Description: {metadata.description}")

    extra = " ".join(metadata.extra_texts)
    if metadata.comments:
        comments = f"Comments: {' | '.join(metadata.comments)}"
        extra = f"{extra}\n\n{comments}" if extra else comments
    if extra:
        parts.append(f"Additional information: {extra}")

    if page_only:
        disclaimer = PAGE_DISCLAIMER
    else:
        fields = "title, description"
        if extra:
            fields += ", additional information from the page"
        disclaimer = VIDEO_DISCLAIMER.format(fields=fields)
    parts.append(disclaimer)
    return "\n\n".join(parts)


def placeholder(url: str, platform: PlatformKind) -> str:
    """Content used when every strategy failed."""
    if platform.is_video:
        return (
            "IMPORTANT: Full content could not be retrieved from this video. A browser "
            "is unavailable on this server, or the video requires authentication. "
            "Analysis will be based only on the URL and any available metadata."
            f"\n\nURL: {url}\nPlatform: {platform.value}"
        )
    return (
        "IMPORTANT: Full content could not be retrieved from this article. A browser "
        "is unavailable on this server. Analysis will be based only on the URL and "
        f"any available metadata.\n\nURL: {url}\nPlatform: {platform.content_class}"
    )
