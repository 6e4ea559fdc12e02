"""YouTube transcript discovery inside a browser page.

Sub-strategies, in order:
    (a) click a "show transcript" control found by selector
    (b) click any clickable element whose text names the transcript
    (c) open the overflow menu, then click its transcript item
    (d) read a transcript panel that is already open

A failing sub-strategy moves on to the next one. Only a browser crash aborts
discovery (as BrowserUnavailable); all sub-strategies failing returns None.
"""

import asyncio
import logging
import re

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Page

from content_extractor.browser.selectors import SelectorTable, TranscriptSelectors, load_selectors
from content_extractor.browser.session import BrowserSession
from content_extractor.errors import BrowserUnavailable, is_browser_crash
from content_extractor.models.content import PlatformKind

logger = logging.getLogger(__name__)

MIN_TRANSCRIPT_LENGTH = 50
MIN_SEGMENT_LENGTH = 10
PANEL_WAIT_MS = 5000
MENU_WAIT_MS = 3000
CLICK_SETTLE_SECONDS = 3.0
SCROLL_SETTLE_SECONDS = 2.0

_TIMESTAMP = re.compile(r"^\d+:\d+(?::\d+)?$")

CLICK_BY_TEXT_JS = """
({selector, texts}) => {
    const candidates = Array.from(document.querySelectorAll(selector));
    for (const el of candidates) {
        const label = (el.textContent || '').toLowerCase().trim();
        if (label && texts.some(t => label.includes(t))) {
            el.click();
            return true;
        }
    }
    return false;
}
"""

PANEL_TEXTS_JS = """
({panel, segmentText}) => {
    const root = document.querySelector(panel);
    if (!root) return [];
    return Array.from(root.querySelectorAll(segmentText)).map(el => (el.textContent || '').trim());
}
"""

SEGMENT_TEXTS_JS = """
(segments) => Array.from(document.querySelectorAll(segments)).map(seg => {
    const el = seg.querySelector('yt-formatted-string');
    return el ? (el.textContent || '').trim() : '';
})
"""


def clean_segments(texts: list[str], ignored_labels: list[str]) -> str:
    """Drop timestamps, control labels and short fragments; join the rest."""
    ignored = {label.lower() for label in ignored_labels}
    kept: list[str] = []
    for text in texts:
        text = text.strip()
        if len(text) <= MIN_SEGMENT_LENGTH:
            continue
        if _TIMESTAMP.match(text) or "›" in text or text.lower() in ignored:
            continue
        # Nested matches repeat the same segment text
        if kept and kept[-1] == text:
            continue
        kept.append(text)
    return " ".join(kept).strip()


async def read_transcript_panel(page: Page, selectors: TranscriptSelectors) -> str | None:
    """Collect transcript text from whichever panel is present."""
    for panel in selectors.panels:
        try:
            await page.wait_for_selector(panel, timeout=PANEL_WAIT_MS)
            texts = await page.evaluate(
                PANEL_TEXTS_JS, {"panel": panel, "segmentText": selectors.segment_text}
            )
        except PlaywrightError as exc:
            _reraise_crash(exc)
            continue
        text = clean_segments(texts, selectors.ignored_labels)
        if len(text) > MIN_TRANSCRIPT_LENGTH:
            return text

    try:
        texts = await page.evaluate(SEGMENT_TEXTS_JS, selectors.segments)
    except PlaywrightError as exc:
        _reraise_crash(exc)
        return None
    text = clean_segments(texts, selectors.ignored_labels)
    return text if len(text) > MIN_TRANSCRIPT_LENGTH else None


async def _open_by_selector(page: Page, selectors: TranscriptSelectors) -> str | None:
    for selector in selectors.buttons:
        try:
            button = await page.query_selector(selector)
            if button is None:
                continue
            await button.click()
        except PlaywrightError as exc:
            _reraise_crash(exc)
            continue
        logger.info("Clicked transcript button: %s", selector)
        await asyncio.sleep(CLICK_SETTLE_SECONDS)
        text = await read_transcript_panel(page, selectors)
        if text:
            return text
    return None


async def _open_by_text(page: Page, selectors: TranscriptSelectors) -> str | None:
    clicked = await page.evaluate(
        CLICK_BY_TEXT_JS, {"selector": selectors.clickable, "texts": selectors.button_texts}
    )
    if not clicked:
        return None
    logger.info("Clicked transcript button by text")
    await asyncio.sleep(CLICK_SETTLE_SECONDS)
    return await read_transcript_panel(page, selectors)


async def _open_via_menu(page: Page, selectors: TranscriptSelectors) -> str | None:
    for selector in selectors.more_actions:
        try:
            await page.wait_for_selector(selector, timeout=MENU_WAIT_MS)
            await page.click(selector)
        except PlaywrightError as exc:
            _reraise_crash(exc)
            continue
        logger.info("Opened overflow menu: %s", selector)
        await asyncio.sleep(SCROLL_SETTLE_SECONDS)
        break
    else:
        return None

    found = await page.evaluate(
        CLICK_BY_TEXT_JS, {"selector": selectors.menu_items, "texts": selectors.menu_item_texts}
    )
    if not found:
        return None
    logger.info("Clicked transcript menu item")
    await asyncio.sleep(CLICK_SETTLE_SECONDS)
    return await read_transcript_panel(page, selectors)


async def _already_open(page: Page, selectors: TranscriptSelectors) -> str | None:
    return await read_transcript_panel(page, selectors)


_DISCOVERY_STEPS = (
    ("selector", _open_by_selector),
    ("text-scan", _open_by_text),
    ("overflow-menu", _open_via_menu),
    ("open-panel", _already_open),
)


async def discover_transcript(page: Page, selectors: TranscriptSelectors) -> str | None:
    """Run the discovery sub-strategies on an already loaded page."""
    for name, step in _DISCOVERY_STEPS:
        try:
            text = await step(page, selectors)
        except PlaywrightError as exc:
            _reraise_crash(exc)
            logger.info("Transcript discovery step %s failed: %s", name, exc)
            continue
        if text:
            logger.info("Transcript found via %s (%d chars)", name, len(text))
            return text
    logger.info("All transcript discovery steps failed")
    return None


async def extract_transcript(
    session: BrowserSession, url: str, table: SelectorTable | None = None
) -> str | None:
    """Load a YouTube watch page and pull the transcript out of its panel."""
    table = table or load_selectors()
    profile = table.navigation_for(PlatformKind.YOUTUBE)
    page = await session.navigate(
        url, timeout=profile.timeout, wait_until=profile.wait_until, settle=profile.settle
    )
    # Scrolling makes the description and its transcript section render
    await page.evaluate("window.scrollBy(0, 300)")
    await asyncio.sleep(SCROLL_SETTLE_SECONDS)
    return await discover_transcript(page, table.transcript)


def _reraise_crash(exc: PlaywrightError) -> None:
    if is_browser_crash(str(exc)):
        raise BrowserUnavailable(str(exc)) from exc
