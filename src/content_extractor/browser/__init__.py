"""Headless browser automation: discovery, scoped sessions and page scraping."""

from content_extractor.browser.discovery import discover_executable
from content_extractor.browser.session import (
    BrowserEngine,
    BrowserSession,
    acquire_session,
    browser_session,
    open_session_count,
    with_session,
)

__all__ = [
    "BrowserEngine",
    "BrowserSession",
    "acquire_session",
    "browser_session",
    "discover_executable",
    "open_session_count",
    "with_session",
]
