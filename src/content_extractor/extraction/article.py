"""Article content extraction using trafilatura."""

import asyncio
import logging

from trafilatura import bare_extraction, fetch_url

logger = logging.getLogger(__name__)


async def extract_article(url: str) -> str | None:
    """Download a page over plain HTTP and extract its main text.

    All sync trafilatura calls are wrapped in asyncio.to_thread() to avoid
    blocking the event loop. Returns None when the page could not be
    downloaded or has no body text.
    """
    # Download page (sync, runs in thread pool)
    downloaded = await asyncio.to_thread(fetch_url, url)
    if downloaded is None:
        logger.info("trafilatura could not download %s", url)
        return None

    return await extract_article_html(downloaded, url)


async def extract_article_html(html: str, url: str | None = None) -> str | None:
    """Main text of already downloaded HTML, prefixed with its title when known."""
    doc = await asyncio.to_thread(bare_extraction, html, url=url)
    if doc is None or not doc.text:
        return None

    text = doc.text.strip()
    if doc.title and not text.startswith(doc.title):
        text = f"{doc.title}\n\n{text}"
    return text

