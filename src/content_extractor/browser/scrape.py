"""Page metadata and article scraping in a browser session."""

import asyncio
import logging

import trafilatura
from playwright.async_api import Error as PlaywrightError

from content_extractor.browser.selectors import SelectorTable, load_selectors
from content_extractor.browser.session import BrowserSession
from content_extractor.errors import classify_exception, is_browser_crash
from content_extractor.models.content import PageMetadata, PlatformKind

logger = logging.getLogger(__name__)

WAIT_FOR_TIMEOUT_MS = 5000
OPEN_GRAPH_NAVIGATION_TIMEOUT = 30.0

METADATA_JS = """
({title, description, text, comments}) => {
    const nodes = (selector) => {
        // Hashed class names like `.Foo_title__*` match on their stable prefix
        if (selector.endsWith('*')) {
            const prefix = selector.replace(/^\\./, '').replace(/\\*$/, '');
            return Array.from(document.querySelectorAll(`[class*="${prefix}"]`));
        }
        try {
            return Array.from(document.querySelectorAll(selector));
        } catch (e) {
            return [];
        }
    };
    const read = (el) => {
        if (el.tagName === 'META') return (el.getAttribute('content') || '').trim();
        return (el.textContent || '').trim();
    };
    const first = (selectors, minLength) => {
        for (const selector of selectors) {
            for (const el of nodes(selector)) {
                const value = read(el);
                if (value.length > minLength) return value;
            }
        }
        return null;
    };
    const collect = (selectors, minLength, limit) => {
        const out = [];
        for (const selector of selectors) {
            for (const el of nodes(selector)) {
                const value = read(el);
                if (value.length > minLength && !out.includes(value)) out.push(value);
                if (out.length >= limit) return out;
            }
        }
        return out;
    };
    return {
        title: first(title, 5),
        description: first(description, 10),
        extra_texts: collect(text, 20, 3),
        comments: collect(comments, 10, 5),
    };
}
"""

OPEN_GRAPH_JS = """
() => {
    const meta = (name) => {
        const el = document.querySelector(`meta[property="${name}"]`) || document.querySelector(`meta[name="${name}"]`);
        return el ? (el.getAttribute('content') || '').trim() || null : null;
    };
    return {
        title: meta('og:title') || meta('twitter:title') || (document.title || '').trim() || null,
        description: meta('og:description') || meta('twitter:description') || meta('description'),
    };
}
"""

MAIN_CONTENT_JS = """
({mainContent, strip, blocks}) => {
    let root = null;
    for (const selector of mainContent) {
        root = document.querySelector(selector);
        if (root) break;
    }
    if (!root) return '';
    const clone = root.cloneNode(true);
    clone.querySelectorAll(strip).forEach(el => el.remove());
    const parts = Array.from(clone.querySelectorAll(blocks))
        .map(el => (el.textContent || '').replace(/\\s+/g, ' ').trim())
        .filter(text => text.length > 0);
    if (parts.length) return parts.join('\\n\\n');
    return (clone.textContent || '').replace(/\\s+/g, ' ').trim();
}
"""


async def scrape_metadata(
    session: BrowserSession, url: str, platform: PlatformKind, table: SelectorTable | None = None
) -> PageMetadata:
    """Render the page and read title, description, texts and comments by selector."""
    table = table or load_selectors()
    profile = table.navigation_for(platform)
    page = await session.navigate(
        url, timeout=profile.timeout, wait_until=profile.wait_until, settle=profile.settle
    )
    if profile.wait_for:
        try:
            await page.wait_for_selector(profile.wait_for, timeout=WAIT_FOR_TIMEOUT_MS)
        except PlaywrightError as exc:
            if is_browser_crash(str(exc)):
                raise classify_exception(exc) from exc
            logger.info("Selector %s did not appear on %s, scraping anyway", profile.wait_for, url)

    selectors = table.metadata_for(platform)
    data = await page.evaluate(METADATA_JS, selectors.model_dump())
    return PageMetadata.model_validate(data)


async def scrape_open_graph(session: BrowserSession, url: str) -> PageMetadata:
    """Read Open Graph tags from a browser-rendered page."""
    page = await session.navigate(url, timeout=OPEN_GRAPH_NAVIGATION_TIMEOUT, settle=2.0)
    data = await page.evaluate(OPEN_GRAPH_JS)
    return PageMetadata.model_validate(data)


async def scrape_article(session: BrowserSession, url: str, table: SelectorTable | None = None) -> str | None:
    """Reduce a browser-rendered page to its main readable content.

    trafilatura runs over the rendered HTML first; the selector-driven DOM walk
    is used when it finds nothing.
    """
    table = table or load_selectors()
    profile = table.navigation_for(PlatformKind.NONE)
    page = await session.navigate(
        url, timeout=profile.timeout, wait_until=profile.wait_until, settle=profile.settle
    )
    html = await page.content()
    text = await asyncio.to_thread(trafilatura.extract, html, url=url)
    if text and text.strip():
        return text.strip()

    logger.info("trafilatura found no main content on rendered %s, using selectors", url)
    text = await page.evaluate(
        MAIN_CONTENT_JS,
        {
            "mainContent": table.article.main_content,
            "strip": table.article.strip,
            "blocks": table.article.blocks,
        },
    )
    return text.strip() or None
