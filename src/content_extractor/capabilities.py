"""Optional heavy capabilities, resolved once per process.

The browser, the local speech model, ffmpeg and the yt-dlp cookie file are
all optional. Resolving them up front lets chain builders leave out
strategies that could never work instead of discovering that per request.
"""

import logging
from dataclasses import dataclass
from functools import lru_cache

from imageio_ffmpeg import get_ffmpeg_exe

from content_extractor.browser.discovery import discover_executable
from content_extractor.browser.session import BrowserEngine
from content_extractor.config import Settings, get_settings
from content_extractor.credentials import initialize_cookies
from content_extractor.media.local_model import LocalSpeechModel

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Capabilities:
    browser: BrowserEngine | None = None
    local_speech_model: LocalSpeechModel | None = None
    ffmpeg_path: str | None = None
    cookies_path: str | None = None


def find_ffmpeg() -> str | None:
    """ffmpeg binary shipped with imageio-ffmpeg, or a system one it finds."""
    try:
        return get_ffmpeg_exe()
    except RuntimeError as exc:
        logger.warning("ffmpeg not available: %s", exc)
        return None


def resolve_capabilities(settings: Settings) -> Capabilities:
    """Probe the environment. Also materialises the yt-dlp cookie file."""
    browser = None
    if settings.browser_enabled:
        # None from discovery still means Playwright's bundled Chromium can be tried
        browser = BrowserEngine(executable_path=discover_executable(settings.browser_executable_path))

    local_model = None
    if settings.local_speech_model_enabled:
        local_model = LocalSpeechModel(settings.whisper_model, settings.whisper_compute_type)

    capabilities = Capabilities(
        browser=browser,
        local_speech_model=local_model,
        ffmpeg_path=find_ffmpeg(),
        cookies_path=initialize_cookies(settings),
    )
    logger.info(
        "Capabilities resolved",
        extra={
            "browser": browser.executable_path or "bundled" if browser else None,
            "local_speech_model": settings.whisper_model if local_model else None,
            "ffmpeg": capabilities.ffmpeg_path,
            "cookies": bool(capabilities.cookies_path),
        },
    )
    return capabilities


@lru_cache
def get_capabilities() -> Capabilities:
    """Return the process-wide capability registry."""
    return resolve_capabilities(get_settings())
