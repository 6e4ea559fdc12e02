"""Scoped, single-use headless browser sessions (Playwright, Chromium).

A session is owned by exactly one strategy invocation. ``browser_session()``
closes it on every exit path: normal return, exception, or cancellation by an
enclosing ``asyncio.timeout``.
"""

import asyncio
import logging
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import TypeVar

from playwright.async_api import Browser, BrowserContext, Page, Playwright, async_playwright
from playwright.async_api import Error as PlaywrightError

from content_extractor.errors import BrowserUnavailable, classify_exception, is_browser_crash

logger = logging.getLogger(__name__)

T = TypeVar("T")

USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)
ACCEPT_LANGUAGE = "ru-RU,ru;q=0.9,en;q=0.8"
LAUNCH_TIMEOUT_SECONDS = 30.0

# Low-memory flags for containerised hosts
LAUNCH_ARGS = (
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--lang=ru-RU,ru",
    "--disable-dev-shm-usage",
    "--disable-gpu",
    "--disable-software-rasterizer",
    "--disable-extensions",
    "--disable-background-networking",
    "--disable-background-timer-throttling",
    "--disable-backgrounding-occluded-windows",
    "--disable-breakpad",
    "--disable-client-side-phishing-detection",
    "--disable-default-apps",
    "--disable-features=TranslateUI,AudioServiceOutOfProcess",
    "--disable-hang-monitor",
    "--disable-ipc-flooding-protection",
    "--disable-notifications",
    "--disable-popup-blocking",
    "--disable-renderer-backgrounding",
    "--disable-sync",
    "--hide-scrollbars",
    "--metrics-recording-only",
    "--mute-audio",
    "--no-first-run",
    "--no-default-browser-check",
    "--no-pings",
    "--no-zygote",
)


@dataclass(frozen=True)
class BrowserEngine:
    """Resolved browser capability. ``executable_path=None`` means bundled Chromium."""

    executable_path: str | None = None
    launch_args: tuple[str, ...] = LAUNCH_ARGS


_open_sessions: set[int] = set()


def open_session_count() -> int:
    """Number of sessions acquired and not yet closed in this process."""
    return len(_open_sessions)


class BrowserSession:
    """One Playwright driver, one browser process, one context."""

    def __init__(self, playwright: Playwright, browser: Browser, context: BrowserContext):
        self._playwright = playwright
        self._browser = browser
        self._context = context
        self._page: Page | None = None
        self._closed = False
        _open_sessions.add(id(self))

    @property
    def closed(self) -> bool:
        return self._closed

    async def page(self) -> Page:
        if self._page is None:
            self._page = await self._context.new_page()
        return self._page

    async def navigate(
        self,
        url: str,
        *,
        timeout: float = 60.0,
        wait_until: str = "domcontentloaded",
        settle: float = 0.0,
    ) -> Page:
        """Open ``url`` with a bounded, minimal-readiness wait and an optional settle delay."""
        page = await self.page()
        logger.info("Navigating to %s (wait_until=%s, timeout=%.0fs)", url, wait_until, timeout)
        try:
            await page.goto(url, wait_until=wait_until, timeout=timeout * 1000)
        except PlaywrightError as exc:
            raise classify_exception(exc) from exc
        if settle:
            await asyncio.sleep(settle)
        return page

    async def close(self) -> None:
        """Release context, browser process and driver. Safe to call twice."""
        if self._closed:
            return
        self._closed = True
        _open_sessions.discard(id(self))
        for label, closer in (
            ("context", self._context.close),
            ("browser", self._browser.close),
            ("driver", self._playwright.stop),
        ):
            try:
                await closer()
            except Exception as exc:
                logger.warning("Error closing browser %s: %s", label, exc)


async def _launch(playwright: Playwright, engine: BrowserEngine) -> Browser:
    options = {
        "headless": True,
        "args": list(engine.launch_args),
        "timeout": LAUNCH_TIMEOUT_SECONDS * 1000,
        "handle_sigint": False,
        "handle_sigterm": False,
        "handle_sighup": False,
    }
    if engine.executable_path:
        try:
            return await playwright.chromium.launch(executable_path=engine.executable_path, **options)
        except PlaywrightError as exc:
            if is_browser_crash(str(exc)):
                raise BrowserUnavailable(f"Browser crashed during launch: {exc}") from exc
            logger.warning(
                "Launch with %s failed, trying bundled Chromium: %s", engine.executable_path, exc
            )

    try:
        return await playwright.chromium.launch(**options)
    except PlaywrightError as exc:
        raise BrowserUnavailable(f"No usable browser: {exc}") from exc


async def acquire_session(engine: BrowserEngine) -> BrowserSession:
    """Start the driver, launch the browser and open a context.

    Raises BrowserUnavailable when no browser can be launched. Anything started
    before a failure is stopped before the error propagates.
    """
    try:
        playwright = await async_playwright().start()
    except PlaywrightError as exc:
        raise BrowserUnavailable(f"Playwright driver failed to start: {exc}") from exc

    browser: Browser | None = None
    try:
        browser = await _launch(playwright, engine)
        context = await browser.new_context(
            user_agent=USER_AGENT,
            locale="ru-RU",
            extra_http_headers={"Accept-Language": ACCEPT_LANGUAGE},
            ignore_https_errors=True,
        )
    except BaseException as exc:
        if browser is not None:
            await _close_quietly(browser.close, "browser")
        await _close_quietly(playwright.stop, "driver")
        if isinstance(exc, PlaywrightError):
            raise classify_exception(exc) from exc
        raise

    return BrowserSession(playwright, browser, context)


async def _close_quietly(closer: Callable[[], Awaitable[None]], label: str) -> None:
    try:
        await closer()
    except Exception as exc:
        logger.warning("Error closing browser %s after failed launch: %s", label, exc)


@asynccontextmanager
async def browser_session(engine: BrowserEngine) -> AsyncIterator[BrowserSession]:
    """Acquire a session, yield it, and always close it."""
    session = await acquire_session(engine)
    try:
        yield session
    except PlaywrightError as exc:
        raise classify_exception(exc) from exc
    finally:
        await session.close()


async def with_session(engine: BrowserEngine, fn: Callable[[BrowserSession], Awaitable[T]]) -> T:
    """Run ``fn`` inside a scoped session."""
    async with browser_session(engine) as session:
        return await fn(session)
