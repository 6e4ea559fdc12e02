"""Browser executable discovery.

Probe order:
    1. explicit configured path (BROWSER_EXECUTABLE_PATH / PUPPETEER_EXECUTABLE_PATH)
    2. standard system installation paths
    3. the locally managed Playwright browser registry
    4. cache directories used by deployment platforms

``None`` means nothing was found and Playwright's bundled Chromium should be
tried as the last resort.
"""

import logging
import os
from pathlib import Path

logger = logging.getLogger(__name__)

STANDARD_PATHS = (
    "/usr/bin/chromium",
    "/usr/bin/chromium-browser",
    "/usr/bin/google-chrome",
    "/usr/bin/google-chrome-stable",
)

# Relative layouts of a Chromium build inside a registry/cache entry
_EXECUTABLE_LAYOUTS = (
    "chrome-linux64/chrome",
    "chrome-linux64/chromium",
    "chrome-linux/chrome",
    "chrome-linux/chromium",
    "chrome-linux/headless_shell",
    "chrome-headless-shell-linux64/chrome-headless-shell",
    "chrome/chrome",
    "chrome",
    "chromium",
    "headless_shell",
)


def registry_dirs() -> list[Path]:
    """Playwright's own browser registry for this user."""
    dirs = []
    env_path = os.environ.get("PLAYWRIGHT_BROWSERS_PATH")
    if env_path and env_path != "0":
        dirs.append(Path(env_path))
    dirs.append(Path.home() / ".cache" / "ms-playwright")
    return dirs


def deployment_cache_dirs() -> list[Path]:
    """Cache directories that hosting platforms populate at build time."""
    dirs = []
    puppeteer_cache = os.environ.get("PUPPETEER_CACHE_DIR")
    if puppeteer_cache:
        dirs.append(Path(puppeteer_cache))
    home = os.environ.get("HOME")
    if home:
        dirs.append(Path(home) / ".cache" / "puppeteer")
    dirs.extend(
        [
            Path("/opt/render/.cache/ms-playwright"),
            Path("/opt/render/.cache/puppeteer"),
            Path("/root/.cache/ms-playwright"),
            Path("/root/.cache/puppeteer"),
        ]
    )
    return dirs


def _is_executable(path: Path) -> bool:
    return path.is_file() and os.access(path, os.X_OK)


def find_in_cache(cache_dir: Path) -> str | None:
    """Find a Chromium executable inside a Playwright or Puppeteer cache directory."""
    if not cache_dir.is_dir():
        return None
    try:
        entries = sorted(
            (entry for entry in cache_dir.iterdir() if entry.name.startswith(("chrom", "chrome"))),
            reverse=True,  # Newest build first
        )
    except OSError as exc:
        logger.debug("Cannot list browser cache %s: %s", cache_dir, exc)
        return None

    for entry in entries:
        # Puppeteer nests builds one level deeper: chrome/linux-<build>/chrome-linux64/chrome
        candidates_roots = [entry]
        if entry.is_dir():
            candidates_roots.extend(child for child in entry.iterdir() if child.is_dir())
        for root in candidates_roots:
            for layout in _EXECUTABLE_LAYOUTS:
                candidate = root / layout
                if _is_executable(candidate):
                    return str(candidate)
    return None


def discover_executable(configured_path: str = "") -> str | None:
    """Resolve a browser executable, or None to fall back to the bundled browser."""
    if configured_path:
        if _is_executable(Path(configured_path)):
            logger.info("Using configured browser executable: %s", configured_path)
            return configured_path
        logger.warning("Configured browser executable not usable: %s", configured_path)

    for path in STANDARD_PATHS:
        if _is_executable(Path(path)):
            logger.info("Using system browser at %s", path)
            return path

    for cache_dir in [*registry_dirs(), *deployment_cache_dirs()]:
        found = find_in_cache(cache_dir)
        if found:
            logger.info("Using cached browser at %s", found)
            return found

    logger.info("No browser executable found, falling back to bundled Chromium")
    return None
