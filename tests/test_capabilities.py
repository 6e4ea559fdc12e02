"""Tests for capability resolution."""

from unittest.mock import patch

from content_extractor.capabilities import find_ffmpeg, resolve_capabilities
from content_extractor.config import Settings


def test_find_ffmpeg():
    with patch("content_extractor.capabilities.get_ffmpeg_exe", return_value="/usr/bin/ffmpeg"):
        assert find_ffmpeg() == "/usr/bin/ffmpeg"


def test_find_ffmpeg_missing():
    with patch("content_extractor.capabilities.get_ffmpeg_exe", side_effect=RuntimeError("No ffmpeg exe could be found")):
        assert find_ffmpeg() is None


def test_resolve_everything_disabled():
    settings = Settings(_env_file=None, browser_enabled=False, local_speech_model_enabled=False)
    with (
        patch("content_extractor.capabilities.find_ffmpeg", return_value=None),
        patch("content_extractor.capabilities.initialize_cookies", return_value=None),
    ):
        capabilities = resolve_capabilities(settings)

    assert capabilities.browser is None
    assert capabilities.local_speech_model is None
    assert capabilities.ffmpeg_path is None
    assert capabilities.cookies_path is None


def test_resolve_browser_and_model():
    settings = Settings(_env_file=None, browser_executable_path="/opt/chrome", whisper_model="base")
    with (
        patch("content_extractor.capabilities.discover_executable", return_value="/opt/chrome") as discover,
        patch("content_extractor.capabilities.find_ffmpeg", return_value="/usr/bin/ffmpeg"),
        patch("content_extractor.capabilities.initialize_cookies", return_value="/tmp/cookies.txt"),
    ):
        capabilities = resolve_capabilities(settings)

    discover.assert_called_once_with("/opt/chrome")
    assert capabilities.browser.executable_path == "/opt/chrome"
    assert capabilities.local_speech_model.model_size == "base"
    assert capabilities.ffmpeg_path == "/usr/bin/ffmpeg"
    assert capabilities.cookies_path == "/tmp/cookies.txt"


def test_bundled_browser_when_nothing_discovered():
    settings = Settings(_env_file=None, local_speech_model_enabled=False)
    with (
        patch("content_extractor.capabilities.discover_executable", return_value=None),
        patch("content_extractor.capabilities.find_ffmpeg", return_value=None),
        patch("content_extractor.capabilities.initialize_cookies", return_value=None),
    ):
        capabilities = resolve_capabilities(settings)

    assert capabilities.browser is not None
    assert capabilities.browser.executable_path is None
