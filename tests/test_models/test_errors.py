"""Tests for error classification at adapter boundaries."""

import json

import httpx
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError
from yt_dlp.utils import DownloadError

from content_extractor.errors import (
    AuthRequired,
    BrowserUnavailable,
    ErrorKind,
    ExtractionError,
    MediaPipelineError,
    NetworkError,
    ParseFailure,
    PrivateContent,
    RateLimited,
    StrategyTimeout,
    classify_exception,
    classify_message,
    classify_status,
    is_browser_crash,
)


def test_classify_message_private_video():
    error = classify_message("ERROR: [youtube] abc: Private video. Sign in if you've been granted access")
    assert isinstance(error, PrivateContent)
    assert error.kind == ErrorKind.AUTH_REQUIRED


def test_classify_message_sign_in():
    error = classify_message("Sign in to confirm you're not a bot")
    assert type(error) is AuthRequired


def test_classify_message_rate_limited():
    assert isinstance(classify_message("HTTP Error 429: Too Many Requests"), RateLimited)


def test_classify_message_unsupported():
    assert isinstance(classify_message("ERROR: Unsupported URL: https://example.com"), ParseFailure)


def test_classify_message_other_is_network():
    assert isinstance(classify_message("Connection reset by peer"), NetworkError)


def test_classify_status():
    assert isinstance(classify_status(401), AuthRequired)
    assert isinstance(classify_status(403), AuthRequired)
    assert isinstance(classify_status(429), RateLimited)
    assert isinstance(classify_status(502), NetworkError)


def test_classify_timeouts():
    assert isinstance(classify_exception(TimeoutError()), StrategyTimeout)
    assert isinstance(classify_exception(httpx.ReadTimeout("slow")), StrategyTimeout)
    assert isinstance(classify_exception(PlaywrightTimeoutError("Timeout 30000ms exceeded")), StrategyTimeout)


def test_classify_httpx_status_error():
    request = httpx.Request("GET", "https://example.com")
    response = httpx.Response(429, request=request)
    exc = httpx.HTTPStatusError("rate limited", request=request, response=response)
    assert isinstance(classify_exception(exc), RateLimited)


def test_classify_httpx_transport_error():
    assert isinstance(classify_exception(httpx.ConnectError("refused")), NetworkError)


def test_classify_playwright_crash():
    error = classify_exception(PlaywrightError("Target crashed"))
    assert isinstance(error, BrowserUnavailable)
    assert error.kind == ErrorKind.BROWSER_UNAVAILABLE


def test_classify_download_error():
    assert isinstance(classify_exception(DownloadError("ERROR: Private video")), PrivateContent)


def test_classify_json_error():
    try:
        json.loads("{not json")
    except json.JSONDecodeError as exc:
        assert isinstance(classify_exception(exc), ParseFailure)


def test_classify_unknown_is_unexpected():
    error = classify_exception(KeyError("boom"))
    assert type(error) is ExtractionError
    assert error.kind == ErrorKind.UNEXPECTED


def test_classify_passes_through_taxonomy():
    original = MediaPipelineError("download", "empty file", ErrorKind.PARSE_FAILURE)
    assert classify_exception(original) is original
    assert original.stage == "download"
    assert original.kind == ErrorKind.PARSE_FAILURE


def test_is_browser_crash():
    assert is_browser_crash("Protocol error (Target.createTarget): Target closed")
    assert is_browser_crash("Browser has been closed")
    assert not is_browser_crash("net::ERR_NAME_NOT_RESOLVED")
