"""Tests for in-browser YouTube transcript discovery (page mocked)."""

from unittest.mock import AsyncMock

import pytest
from playwright.async_api import Error as PlaywrightError

from content_extractor.browser import transcript
from content_extractor.browser.selectors import load_selectors
from content_extractor.browser.transcript import (
    CLICK_BY_TEXT_JS,
    PANEL_TEXTS_JS,
    clean_segments,
    discover_transcript,
    extract_transcript,
)
from content_extractor.errors import BrowserUnavailable

SEGMENTS = [
    "0:01",
    "Welcome back to the channel everyone",
    "Welcome back to the channel everyone",
    "1:02:03",
    "Show transcript",
    "short",
    "Chapter › Intro section",
    "today we look at how transcripts are extracted",
]
CLEANED = "Welcome back to the channel everyone today we look at how transcripts are extracted"


@pytest.fixture(autouse=True)
def _no_settle(monkeypatch):
    monkeypatch.setattr(transcript, "CLICK_SETTLE_SECONDS", 0)
    monkeypatch.setattr(transcript, "SCROLL_SETTLE_SECONDS", 0)


@pytest.fixture
def selectors():
    return load_selectors().transcript


def _page(click_by_text=False, panel_texts=None):
    page = AsyncMock()
    page.query_selector.return_value = None

    async def evaluate(script, arg=None):
        if script == CLICK_BY_TEXT_JS:
            return click_by_text
        if script == PANEL_TEXTS_JS:
            return panel_texts or []
        return []

    page.evaluate.side_effect = evaluate
    return page


def test_clean_segments():
    assert clean_segments(SEGMENTS, ["show transcript"]) == CLEANED


def test_clean_segments_empty():
    assert clean_segments(["0:01", "tiny"], []) == ""


@pytest.mark.asyncio
async def test_discover_via_transcript_button(selectors):
    page = _page(panel_texts=SEGMENTS)
    button = AsyncMock()
    page.query_selector.return_value = button

    assert await discover_transcript(page, selectors) == CLEANED
    button.click.assert_awaited_once()
    page.query_selector.assert_awaited_once_with(selectors.buttons[0])


@pytest.mark.asyncio
async def test_discover_via_text_scan(selectors):
    page = _page(click_by_text=True, panel_texts=SEGMENTS)

    assert await discover_transcript(page, selectors) == CLEANED
    assert page.query_selector.await_count == len(selectors.buttons)


@pytest.mark.asyncio
async def test_discover_nothing_found(selectors):
    page = _page()

    assert await discover_transcript(page, selectors) is None


@pytest.mark.asyncio
async def test_discover_crash_aborts(selectors):
    page = _page()
    page.query_selector.side_effect = PlaywrightError("Target crashed")

    with pytest.raises(BrowserUnavailable):
        await discover_transcript(page, selectors)


@pytest.mark.asyncio
async def test_failed_step_moves_on(selectors):
    """A non-crash error in one step leaves the remaining steps to run."""
    page = _page(click_by_text=True, panel_texts=SEGMENTS)
    page.query_selector.side_effect = PlaywrightError("Element is not attached to the DOM")

    assert await discover_transcript(page, selectors) == CLEANED


@pytest.mark.asyncio
async def test_extract_transcript_navigates_with_youtube_profile():
    page = _page(click_by_text=True, panel_texts=SEGMENTS)
    session = AsyncMock()
    session.navigate.return_value = page

    result = await extract_transcript(session, "https://www.youtube.com/watch?v=dQw4w9WgXcQ")

    assert result == CLEANED
    kwargs = session.navigate.await_args.kwargs
    assert kwargs["timeout"] == 90
    assert kwargs["wait_until"] == "domcontentloaded"
