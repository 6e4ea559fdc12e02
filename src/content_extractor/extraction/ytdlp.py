"""yt-dlp command-line strategies: subtitles and metadata dump."""

import json
import logging
import re
import tempfile
from pathlib import Path

from content_extractor.errors import ExtractionError, ParseFailure
from content_extractor.media.process import cookie_args, run_ytdlp
from content_extractor.models.content import PageMetadata

logger = logging.getLogger(__name__)

# web_embedded sometimes gets past bot detection without cookies
YOUTUBE_EXTRACTOR_ARGS = "youtube:player_client=web_embedded,web,android"
SUBTITLE_SUFFIXES = (".vtt", ".srt", ".ttml")

_TAG = re.compile(r"<[^>]+>")
_CUE_TIMING = re.compile(r"\d{2}:\d{2}:\d{2}[.,]\d{3}\s*-->\s*\d{2}:\d{2}:\d{2}[.,]\d{3}[^\n]*")
_CUE_NUMBER = re.compile(r"^\d+$")
_HEADER = re.compile(r"^(?:WEBVTT|Kind:|Language:)", re.IGNORECASE)


def clean_subtitles(content: str) -> str:
    """Strip cue timings, numbering, headers and markup from VTT/SRT/TTML text."""
    content = _TAG.sub("", content)
    content = _CUE_TIMING.sub("", content)
    lines = (line.strip() for line in content.splitlines())
    kept: list[str] = []
    for line in lines:
        if not line or _CUE_NUMBER.match(line) or _HEADER.match(line):
            continue
        # Auto captions repeat each line across rolling cues
        if kept and kept[-1] == line:
            continue
        kept.append(line)
    return " ".join(kept).strip()


def _find_subtitle_file(directory: Path, stem: str, languages: list[str]) -> Path | None:
    """The subtitle file for the first language in ``languages`` order that was written."""
    written = [path for path in sorted(directory.glob(f"{stem}.*")) if path.suffix in SUBTITLE_SUFFIXES]
    for lang in languages:
        for path in written:
            # auto.en.vtt, auto.en-US.vtt, auto.en-orig.vtt
            code = path.name[len(stem) + 1:].split(".")[0]
            if code == lang or code.startswith(f"{lang}-"):
                return path
    return written[0] if written else None


async def _write_subtitles(
    url: str, directory: Path, flag: str, stem: str, languages: list[str], cookies_path: str | None
) -> str | None:
    await run_ytdlp(
        flag,
        "--sub-langs", ",".join(languages),
        "--skip-download",
        "--no-playlist",
        "--no-warnings",
        "--extractor-args", YOUTUBE_EXTRACTOR_ARGS,
        "-o", str(directory / stem),
        *cookie_args(cookies_path),
        url,
    )
    subtitle_file = _find_subtitle_file(directory, stem, languages)
    if subtitle_file is None:
        return None
    return clean_subtitles(subtitle_file.read_text(encoding="utf-8", errors="replace"))


async def fetch_subtitles(url: str, languages: list[str], cookies_path: str | None = None) -> str | None:
    """Write auto-generated subtitles (falling back to manual ones) and return their text."""
    with tempfile.TemporaryDirectory(prefix="yt-subs-") as tmp:
        directory = Path(tmp)
        try:
            text = await _write_subtitles(url, directory, "--write-auto-subs", "auto", languages, cookies_path)
        except ExtractionError as exc:
            logger.info("Auto subtitles unavailable for %s: %s", url, exc)
            text = None
        if text:
            return text
        logger.info("Trying manual subtitles for %s", url)
        return await _write_subtitles(url, directory, "--write-subs", "manual", languages, cookies_path)


async def dump_metadata(url: str, cookies_path: str | None = None) -> PageMetadata | None:
    """Title and description from ``yt-dlp --dump-single-json``."""
    stdout = await run_ytdlp(
        "--dump-single-json",
        "--skip-download",
        "--no-playlist",
        "--no-warnings",
        *cookie_args(cookies_path),
        url,
    )
    try:
        info = json.loads(stdout)
    except json.JSONDecodeError as exc:
        raise ParseFailure(f"yt-dlp returned invalid JSON: {exc}") from exc
    if not isinstance(info, dict):
        return None

    title = info.get("title") or info.get("fulltitle")
    description = info.get("description")
    if not title and not description:
        return None
    return PageMetadata(title=title, description=description)
