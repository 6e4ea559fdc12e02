"""Content extraction: transcripts, articles and metadata for any URL.

Public API:
    extract(url) -> ExtractedContent
        Single entry point that classifies the URL, runs its strategy chains
        under per-strategy timeouts, and falls back to a metadata placeholder.
        Never raises for acquisition failures.

    get_extractor() -> Extractor
        Call once at process startup. Resolves the browser, ffmpeg, speech
        model and yt-dlp cookie file so requests never do that work.
"""

from content_extractor.extraction.chain import AttemptContext, Strategy, run_chain
from content_extractor.extraction.pipeline import Extractor, extract, get_extractor, reset_extractor
from content_extractor.extraction.router import classify

__all__ = [
    "AttemptContext",
    "Extractor",
    "Strategy",
    "classify",
    "extract",
    "get_extractor",
    "reset_extractor",
    "run_chain",
]
