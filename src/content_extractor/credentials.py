"""yt-dlp cookie credentials, materialised once per process.

Cookies come either from ``YT_DLP_COOKIES_FILE`` (used as-is) or from
``YT_DLP_COOKIES`` (base64 Netscape cookie content) which is written to a
temp file. Initialisation runs under a lock and is idempotent, so concurrent
first callers all observe the same path and the file is written at most once.
"""

import base64
import binascii
import logging
import os
import tempfile
import threading
from pathlib import Path

from content_extractor.config import Settings

logger = logging.getLogger(__name__)

COOKIES_FILENAME = "yt-dlp-cookies.txt"

_lock = threading.Lock()
_initialized = False
_cookies_path: str | None = None


def initialize_cookies(settings: Settings) -> str | None:
    """Resolve the cookie file path, writing decoded inline content on first call."""
    global _initialized, _cookies_path
    with _lock:
        if not _initialized:
            _cookies_path = _resolve_cookies(settings)
            _initialized = True
        return _cookies_path


def reset_cookies() -> None:
    """Forget the resolved path. Used for testing."""
    global _initialized, _cookies_path
    with _lock:
        _initialized = False
        _cookies_path = None


def _resolve_cookies(settings: Settings) -> str | None:
    cookies_file = settings.yt_dlp_cookies_file
    if cookies_file and Path(cookies_file).is_file():
        logger.info("Using yt-dlp cookies from YT_DLP_COOKIES_FILE")
        return cookies_file

    if not settings.yt_dlp_cookies:
        return None

    try:
        content = base64.b64decode(settings.yt_dlp_cookies, validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError) as exc:
        logger.warning("Failed to decode YT_DLP_COOKIES, continuing without cookies: %s", exc)
        return None

    target = Path(tempfile.gettempdir()) / COOKIES_FILENAME
    fd, tmp_name = tempfile.mkstemp(dir=target.parent, prefix=".yt-dlp-cookies-", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as fh:
            fh.write(content)
        os.chmod(tmp_name, 0o600)
        os.replace(tmp_name, target)
    except OSError as exc:
        logger.warning("Failed to write yt-dlp cookie file: %s", exc)
        Path(tmp_name).unlink(missing_ok=True)
        return None

    logger.info("Materialised yt-dlp cookies from YT_DLP_COOKIES")
    return str(target)
