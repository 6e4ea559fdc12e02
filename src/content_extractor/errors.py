"""Error taxonomy for extraction strategies.

Every adapter (httpx calls, yt-dlp, ffmpeg, Playwright) normalises what it
sees into one of the ``ExtractionError`` subclasses below before it reaches
the chain runner. ``classify_exception`` is the shared boundary used for
anything an adapter let through unclassified.
"""

import json
from enum import Enum

import httpx
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError
from yt_dlp.utils import DownloadError


class ErrorKind(str, Enum):
    TIMEOUT = "timeout"
    BROWSER_UNAVAILABLE = "browser_unavailable"
    AUTH_REQUIRED = "auth_required"
    RATE_LIMITED = "rate_limited"
    PARSE_FAILURE = "parse_failure"
    NETWORK_ERROR = "network_error"
    UNEXPECTED = "unexpected"


class ExtractionError(Exception):
    """Base class for strategy-local failures. Never escapes the executor."""

    kind: ErrorKind = ErrorKind.UNEXPECTED


class StrategyTimeout(ExtractionError):
    kind = ErrorKind.TIMEOUT


class BrowserUnavailable(ExtractionError):
    """No usable browser executable, or the browser process crashed.

    Non-retryable within a request: later browser strategies are skipped.
    """

    kind = ErrorKind.BROWSER_UNAVAILABLE


class AuthRequired(ExtractionError):
    kind = ErrorKind.AUTH_REQUIRED


class PrivateContent(AuthRequired):
    pass


class RateLimited(ExtractionError):
    kind = ErrorKind.RATE_LIMITED


class QuotaExceeded(RateLimited):
    pass


class ParseFailure(ExtractionError):
    kind = ErrorKind.PARSE_FAILURE


class NetworkError(ExtractionError):
    kind = ErrorKind.NETWORK_ERROR


class MediaPipelineError(ExtractionError):
    """Single typed failure of the download/audio/transcription pipeline."""

    def __init__(self, stage: str, message: str, kind: ErrorKind = ErrorKind.UNEXPECTED):
        super().__init__(f"{stage}: {message}")
        self.stage = stage
        self.kind = kind


class ConfigurationError(Exception):
    """The extractor cannot be constructed. The only error allowed to reach callers."""


# Substrings identifying a dead or crashed browser process
BROWSER_CRASH_SIGNATURES = (
    "Target crashed",
    "Protocol error",
    "Browser crashed",
    "has been closed",
    "Browser closed",
)

_AUTH_MESSAGES = ("private video", "sign in", "login required", "requires authentication")
_RATE_LIMIT_MESSAGES = ("http error 429", "too many requests", "rate limit", "captcha")
_UNSUPPORTED_MESSAGES = ("unsupported url", "no video formats", "unable to extract")


def is_browser_crash(message: str) -> bool:
    return any(signature in message for signature in BROWSER_CRASH_SIGNATURES)


def classify_message(message: str) -> ExtractionError:
    """Classify a free-form tool message (yt-dlp stderr, library error text)."""
    lowered = message.lower()
    if any(marker in lowered for marker in _AUTH_MESSAGES):
        if "private" in lowered:
            return PrivateContent(message)
        return AuthRequired(message)
    if any(marker in lowered for marker in _RATE_LIMIT_MESSAGES):
        return RateLimited(message)
    if any(marker in lowered for marker in _UNSUPPORTED_MESSAGES):
        return ParseFailure(message)
    return NetworkError(message)


def classify_status(status_code: int, message: str = "") -> ExtractionError:
    """Map an HTTP status code to the taxonomy."""
    detail = message or f"HTTP {status_code}"
    if status_code in (401, 403):
        return AuthRequired(detail)
    if status_code == 429:
        return RateLimited(detail)
    return NetworkError(detail)


def classify_exception(exc: BaseException) -> ExtractionError:
    """Normalise any exception raised inside a strategy into the taxonomy."""
    if isinstance(exc, ExtractionError):
        return exc
    if isinstance(exc, (TimeoutError, httpx.TimeoutException, PlaywrightTimeoutError)):
        return StrategyTimeout(str(exc) or "strategy timed out")
    if isinstance(exc, httpx.HTTPStatusError):
        return classify_status(exc.response.status_code, str(exc))
    if isinstance(exc, httpx.HTTPError):
        return NetworkError(str(exc))
    if isinstance(exc, PlaywrightError):
        if is_browser_crash(str(exc)):
            return BrowserUnavailable(str(exc))
        return ExtractionError(str(exc))
    if isinstance(exc, DownloadError):
        return classify_message(str(exc))
    if isinstance(exc, (json.JSONDecodeError, UnicodeDecodeError)):
        return ParseFailure(str(exc))
    if isinstance(exc, ConnectionError):
        return NetworkError(str(exc))
    return ExtractionError(f"{type(exc).__name__}: {exc}")
