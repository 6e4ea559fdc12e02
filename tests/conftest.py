"""Shared test fixtures."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from content_extractor.browser.session import BrowserEngine
from content_extractor.capabilities import Capabilities
from content_extractor.config import Settings


@pytest.fixture
def settings() -> Settings:
    """Settings isolated from the environment and any local .env file."""
    return Settings(_env_file=None, local_speech_model_enabled=False)


@pytest.fixture
def no_capabilities() -> Capabilities:
    """No browser, no local model, no ffmpeg, no cookies."""
    return Capabilities()


@pytest.fixture
def browser_capabilities() -> Capabilities:
    return Capabilities(browser=BrowserEngine(executable_path="/usr/bin/chromium"))


def _mock_http_client(status_code=200, text="", json_data=None, get_error=None, post_error=None):
    client = AsyncMock()

    resp = MagicMock()
    resp.status_code = status_code
    resp.is_success = 200 <= status_code < 300
    resp.text = text
    resp.json.return_value = json_data if json_data is not None else {}
    resp.raise_for_status = MagicMock()

    if get_error:
        client.get.side_effect = get_error
    else:
        client.get.return_value = resp
    if post_error:
        client.post.side_effect = post_error
    else:
        client.post.return_value = resp

    ctx = AsyncMock()
    ctx.__aenter__ = AsyncMock(return_value=client)
    ctx.__aexit__ = AsyncMock(return_value=False)
    return ctx, client


@pytest.fixture
def mock_http():
    """Factory for mocked httpx.AsyncClient context managers: ``ctx, client = mock_http(...)``."""
    return _mock_http_client
